# tests/test_values.py
"""
Tests for the tri-state value model: constructors, type inference,
hashability, and the collection length accessor.
"""

from decimal import Decimal

import pytest

from assume_shims import (
    BOOL,
    DYNAMIC,
    DYNAMIC_VAL,
    EMPTY_REFINEMENT,
    NUMBER,
    STRING,
    Null,
    Refinement,
    Type,
    TypeKind,
    Unknown,
    list_of,
    list_val,
    map_of,
    map_val,
    null_val,
    number_val,
    object_of,
    object_val,
    set_val,
    string_val,
    tuple_of,
    tuple_val,
    unknown_val,
)
from assume_shims.values import is_wholly_known, length_range
from tests.conftest import num, strings


class TestTypes:

    def test_friendly_names(self):
        assert STRING.friendly_name() == "string"
        assert list_of(STRING).friendly_name() == "list of string"
        assert map_of(list_of(NUMBER)).friendly_name() == "map of list of number"
        assert object_of({"a": STRING}).friendly_name() == "object"
        assert tuple_of([STRING, BOOL]).friendly_name() == "tuple"

    def test_collection_predicate(self):
        assert list_of(STRING).is_collection
        assert not tuple_of([STRING]).is_collection
        assert not object_of({}).is_collection
        assert not STRING.is_collection

    def test_object_attributes_are_order_insensitive(self):
        assert object_of({"a": STRING, "b": NUMBER}) == object_of({"b": NUMBER, "a": STRING})

    @pytest.mark.parametrize("kind", [TypeKind.LIST, TypeKind.SET, TypeKind.MAP])
    def test_collection_type_requires_element(self, kind):
        with pytest.raises(TypeError, match="requires an element type"):
            Type(kind)


class TestConstructors:

    def test_string_is_nfc_normalised(self):
        assert string_val("e\u0301").payload == "\u00e9"

    def test_number_payload_is_decimal(self):
        assert num(3).payload == Decimal(3)
        assert num(1.5).payload == Decimal("1.5")
        assert num("0.1").payload == Decimal("0.1")

    def test_number_rejects_bool_and_garbage(self):
        with pytest.raises(TypeError):
            number_val(True)
        with pytest.raises(ValueError):
            number_val("twelve")
        with pytest.raises(ValueError):
            number_val(float("inf"))

    def test_list_infers_element_type(self):
        v = list_val(strings("a", "b"))
        assert v.type == list_of(STRING)
        assert len(v.payload) == 2

    def test_empty_list_needs_element_type(self):
        with pytest.raises(ValueError):
            list_val([])
        assert list_val([], STRING).type == list_of(STRING)

    def test_mixed_list_rejected(self):
        with pytest.raises(TypeError):
            list_val([string_val("a"), num(1)])

    def test_list_accepts_dynamic_elements(self):
        v = list_val([string_val("a"), DYNAMIC_VAL], STRING)
        assert v.type == list_of(STRING)

    def test_set_deduplicates(self):
        v = set_val(strings("a", "a", "b"))
        assert len(v.payload) == 2

    def test_map_and_object(self):
        m = map_val({"b": string_val("2"), "a": string_val("1")})
        assert [k for k, _ in m.payload] == ["a", "b"]
        o = object_val({"n": num(1), "s": string_val("x")})
        assert o.type == object_of({"n": NUMBER, "s": STRING})
        assert o.as_map()["n"] == num(1)

    def test_tuple(self):
        t = tuple_val([string_val("a"), num(1)])
        assert t.type == tuple_of([STRING, NUMBER])

    def test_null_and_unknown(self):
        assert null_val(STRING) == Null(STRING)
        u = unknown_val(STRING)
        assert isinstance(u, Unknown)
        assert u.refinement is EMPTY_REFINEMENT
        assert DYNAMIC_VAL.type == DYNAMIC

    def test_values_are_hashable(self):
        bag = {string_val("a"), string_val("a"), unknown_val(STRING), null_val(STRING)}
        assert len(bag) == 3


class TestRefinementRecord:

    def test_empty(self):
        assert Refinement().is_empty()
        assert not Refinement(not_null=True).is_empty()

    def test_frozen(self):
        r = Refinement()
        with pytest.raises(Exception):
            r.not_null = True  # type: ignore[misc]


class TestQueries:

    def test_wholly_known(self):
        assert is_wholly_known(string_val("a"))
        assert is_wholly_known(null_val(STRING))
        assert not is_wholly_known(unknown_val(STRING))
        assert not is_wholly_known(list_val([string_val("a"), unknown_val(STRING)]))
        assert not is_wholly_known(object_val({"x": unknown_val(NUMBER)}))

    def test_length_range_of_known_collections(self):
        assert length_range(list_val(strings("a", "b"))) == (2, 2)
        assert length_range(map_val({"a": num(1)})) == (1, 1)
        assert length_range(set_val([], STRING)) == (0, 0)

    def test_length_range_of_set_with_unknowns(self):
        v = set_val([string_val("a"), unknown_val(STRING)])
        assert length_range(v) == (1, 2)

    def test_pending_set_elements_stay_distinct(self):
        v = set_val([unknown_val(STRING), unknown_val(STRING)])
        assert len(v.payload) == 2
        assert length_range(v) == (1, 2)

    def test_set_payload_is_canonical(self):
        assert set_val(strings("b", "a")) == set_val(strings("a", "b"))
        assert set_val(strings("a", "a")).payload == (string_val("a"),)

    def test_length_range_not_applicable(self):
        assert length_range(string_val("abc")) is None
        assert length_range(unknown_val(list_of(STRING))) is None
        assert length_range(tuple_val([num(1)])) is None
