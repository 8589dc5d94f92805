# tests/test_convert.py
"""
Tests for type conversion between primitives, sequences and mappings.
"""

from decimal import Decimal

import pytest

from assume_shims import (
    BOOL,
    DYNAMIC,
    FALSE,
    NUMBER,
    STRING,
    TRUE,
    ConversionError,
    Known,
    Null,
    Refinement,
    Unknown,
    conversion_allowed,
    convert,
    list_of,
    list_val,
    map_of,
    map_val,
    null_val,
    object_of,
    object_val,
    set_of,
    string_val,
    tuple_of,
    tuple_val,
    unknown_val,
)
from assume_shims.convert import number_text
from tests.conftest import num, strings


class TestConversionAllowed:

    @pytest.mark.parametrize("src,dst,allowed", [
        (STRING, NUMBER, True),
        (NUMBER, STRING, True),
        (BOOL, STRING, True),
        (STRING, BOOL, True),
        (NUMBER, BOOL, False),
        (DYNAMIC, list_of(STRING), True),
        (list_of(STRING), DYNAMIC, True),
        (list_of(STRING), set_of(STRING), True),
        (set_of(NUMBER), list_of(STRING), True),
        (tuple_of([STRING, NUMBER]), list_of(STRING), True),
        (tuple_of([STRING, list_of(STRING)]), list_of(STRING), False),
        (list_of(STRING), tuple_of([STRING, STRING]), True),
        (object_of({"a": STRING}), map_of(STRING), True),
        (map_of(STRING), object_of({"a": NUMBER}), True),
        (object_of({"a": STRING}), object_of({"b": STRING}), False),
        (list_of(STRING), map_of(STRING), False),
        (list_of(STRING), STRING, False),
    ])
    def test_table(self, src, dst, allowed):
        assert conversion_allowed(src, dst) is allowed


class TestPrimitives:

    @pytest.mark.parametrize("value,target,want", [
        (num(42), STRING, string_val("42")),
        (num("1.50"), STRING, string_val("1.5")),
        (TRUE, STRING, string_val("true")),
        (FALSE, STRING, string_val("false")),
        (string_val(" 12 "), NUMBER, num(12)),
        (string_val("0.25"), NUMBER, num("0.25")),
        (string_val("true"), BOOL, TRUE),
        (string_val("false"), BOOL, FALSE),
    ])
    def test_known(self, value, target, want):
        assert convert(value, target) == want

    @pytest.mark.parametrize("value,target", [
        (string_val("abc"), NUMBER),
        (string_val("NaN"), NUMBER),
        (string_val("yes"), BOOL),
        (num(1), BOOL),
    ])
    def test_rejected(self, value, target):
        with pytest.raises(ConversionError):
            convert(value, target)

    def test_same_type_is_identity(self):
        v = string_val("x")
        assert convert(v, STRING) is v

    def test_to_dynamic_is_identity(self):
        v = num(1)
        assert convert(v, DYNAMIC) is v


class TestUnknownAndNull:

    def test_null_keeps_nullness(self):
        assert convert(null_val(NUMBER), STRING) == Null(STRING)

    def test_prefix_dropped_across_kinds(self):
        u = Unknown(STRING, Refinement(not_null=True, string_prefix="12"))
        assert convert(u, NUMBER) == Unknown(NUMBER, Refinement(not_null=True))

    def test_lengths_kept_into_list(self):
        u = Unknown(set_of(STRING), Refinement(length_lower=2, length_upper=5))
        assert convert(u, list_of(STRING)).refinement == Refinement(length_lower=2, length_upper=5)

    def test_lengths_weakened_into_set(self):
        u = Unknown(list_of(STRING), Refinement(length_lower=2, length_upper=3))
        assert convert(u, set_of(STRING)).refinement == Refinement(length_lower=1, length_upper=3)

    def test_lengths_dropped_into_object(self):
        u = Unknown(map_of(STRING), Refinement(not_null=True, length_lower=1))
        out = convert(u, object_of({"a": STRING}))
        assert out.refinement == Refinement(not_null=True)


class TestStructures:

    def test_list_to_set_deduplicates(self):
        out = convert(list_val(strings("a", "a", "b")), set_of(STRING))
        assert out.type == set_of(STRING)
        assert len(out.payload) == 2

    def test_elements_convert(self):
        out = convert(list_val([num(1), num(2)]), list_of(STRING))
        assert out == list_val(strings("1", "2"))

    def test_tuple_to_list(self):
        out = convert(tuple_val(strings("a", "b")), list_of(STRING))
        assert out == list_val(strings("a", "b"))

    def test_list_to_tuple_arity(self):
        with pytest.raises(ConversionError):
            convert(list_val(strings("a")), tuple_of([STRING, STRING]))

    def test_map_to_object(self):
        m = map_val({"greeting": string_val("hello")})
        out = convert(m, object_of({"greeting": STRING}))
        assert out == object_val({"greeting": string_val("hello")})

    def test_map_to_object_missing_key(self):
        m = map_val({"a": string_val("x")})
        with pytest.raises(ConversionError, match="missing"):
            convert(m, object_of({"a": STRING, "b": STRING}))

    def test_object_to_map(self):
        o = object_val({"a": num(1), "b": string_val("2")})
        out = convert(o, map_of(STRING))
        assert out == map_val({"a": string_val("1"), "b": string_val("2")})

    def test_unknown_elements_survive(self):
        v = list_val([unknown_val(NUMBER)])
        out = convert(v, list_of(STRING))
        assert out.payload == (Unknown(STRING),)

    def test_incompatible(self):
        with pytest.raises(ConversionError):
            convert(list_val(strings("a")), map_of(STRING))


class TestNumberText:

    @pytest.mark.parametrize("number,text", [
        (Decimal("3"), "3"),
        (Decimal("3.0"), "3"),
        (Decimal("0.10"), "0.1"),
        (Decimal("1E+2"), "100"),
        (Decimal("-2.5"), "-2.5"),
        (Decimal("0.000001"), "0.000001"),
    ])
    def test_rendering(self, number, text):
        assert number_text(number) == text

    def test_known_payload_is_exact(self):
        assert convert(string_val("0.1"), NUMBER) == Known(NUMBER, Decimal("0.1"))
