# tests/test_refinement.py
"""
Tests for refinement merges, grapheme-safe prefix truncation, ``refine``
and three-valued equality.
"""

import unicodedata

import pytest

from assume_shims import (
    DYNAMIC_VAL,
    NUMBER,
    STRING,
    Contradiction,
    Null,
    Refinement,
    Unknown,
    equals,
    list_of,
    list_val,
    merge_length_bounds,
    merge_string_prefix,
    null_val,
    refine,
    safe_prefix_boundary,
    set_val,
    string_val,
    unknown_val,
)
from assume_shims.refinement import (
    implied_refinement,
    merge_refinements,
    require,
    require_length,
    require_not_null,
    require_string_prefix,
)
from tests.conftest import num, strings


# ═══════════════════════════════════════════════════════════════════════════
#  MERGES
# ═══════════════════════════════════════════════════════════════════════════

class TestMergeLengthBounds:

    def test_intersection(self):
        old = Refinement(length_lower=1, length_upper=5)
        assert merge_length_bounds(old, 3, 10) == (3, 5)

    def test_disjoint_is_contradiction(self):
        old = Refinement(length_lower=1, length_upper=2)
        assert isinstance(merge_length_bounds(old, 3, 4), Contradiction)

    def test_open_sides(self):
        assert merge_length_bounds(Refinement(), 2, None) == (2, None)
        assert merge_length_bounds(Refinement(length_upper=7), None, None) == (None, 7)

    def test_negative_is_contradiction(self):
        assert isinstance(merge_length_bounds(Refinement(), -1, None), Contradiction)

    def test_point_range(self):
        assert merge_length_bounds(Refinement(length_lower=1), None, 1) == (1, 1)


class TestMergeStringPrefix:

    @pytest.mark.parametrize("old,new,want", [
        (None, "foo", "foo"),
        ("foo", "foobar", "foobar"),
        ("foobar", "foo", "foobar"),
        ("foo", "foo", "foo"),
    ])
    def test_extension(self, old, new, want):
        assert merge_string_prefix(old, new) == want

    def test_disagreement(self):
        result = merge_string_prefix("foo", "bar")
        assert isinstance(result, Contradiction)
        assert "bar" in str(result)


class TestMergeRefinements:

    def test_combines_fields(self):
        merged = merge_refinements(
            Refinement(not_null=True, length_lower=1),
            Refinement(length_upper=4),
        )
        assert merged == Refinement(not_null=True, length_lower=1, length_upper=4)

    def test_not_null_is_sticky(self):
        merged = merge_refinements(Refinement(not_null=True), Refinement())
        assert merged.not_null

    def test_contradiction_propagates(self):
        merged = merge_refinements(
            Refinement(string_prefix="a"), Refinement(string_prefix="b")
        )
        assert isinstance(merged, Contradiction)


# ═══════════════════════════════════════════════════════════════════════════
#  SAFE PREFIX
# ═══════════════════════════════════════════════════════════════════════════

class TestSafePrefixBoundary:

    @pytest.mark.parametrize("prefix,want", [
        ("foo", "fo"),
        ("foo-", "foo-"),
        ("arn:", "arn:"),
        ("", ""),
        ("a", ""),
        ("ab\u0308", "a"),   # trailing combining mark drops its cluster
        ("e\u0301", ""),    # composes to a single letter under NFC
        ("a=", "a"),         # "=" composes with U+0338
        ("path/", "path/"),
    ])
    def test_boundary(self, prefix, want):
        assert safe_prefix_boundary(prefix) == want

    def test_result_is_a_prefix(self):
        for text in ("hello", "he\u0301llo", "x\u200d", "foo bar"):
            nfc = unicodedata.normalize("NFC", text)
            assert nfc.startswith(safe_prefix_boundary(text))


# ═══════════════════════════════════════════════════════════════════════════
#  REFINE
# ═══════════════════════════════════════════════════════════════════════════

class TestRefine:

    def test_unknown_gains_constraint(self):
        out = refine(unknown_val(STRING), require_not_null())
        assert out == Unknown(STRING, Refinement(not_null=True))

    def test_unchanged_unknown_is_same_object(self):
        v = Unknown(STRING, Refinement(not_null=True))
        assert refine(v, require_not_null()) is v

    def test_dynamic_passes_through(self):
        assert refine(DYNAMIC_VAL, require_length(5, 1)) is DYNAMIC_VAL

    def test_known_string_prefix(self):
        v = string_val("abc")
        assert refine(v, require_string_prefix("ab")) is v
        assert isinstance(refine(v, require_string_prefix("x")), Contradiction)

    def test_known_list_length(self):
        empty = list_val([], STRING)
        assert isinstance(refine(empty, require_length(1, 2)), Contradiction)
        two = list_val(strings("a", "b"))
        assert refine(two, require_length(0, 2)) is two

    def test_null(self):
        v = null_val(list_of(STRING))
        assert refine(v, require_length(1, None)) is v
        assert isinstance(refine(v, require_not_null()), Contradiction)

    def test_prefix_on_non_string_is_contradiction(self):
        out = refine(unknown_val(list_of(STRING)), require_string_prefix("a"))
        assert isinstance(out, Contradiction)

    def test_length_on_string_is_contradiction(self):
        out = refine(unknown_val(STRING), require_length(1, None))
        assert isinstance(out, Contradiction)

    def test_implied_refinement(self):
        assert implied_refinement(string_val("hi")) == Refinement(not_null=True, string_prefix="hi")
        assert implied_refinement(list_val(strings("a"))) == Refinement(
            not_null=True, length_lower=1, length_upper=1
        )
        assert implied_refinement(num(3)) == Refinement(not_null=True)

    def test_require_applies_implied(self):
        u = Unknown(STRING, Refinement(string_prefix="ab"))
        out = refine(u, require(implied_refinement(string_val("abc"))))
        assert out.refinement.string_prefix == "abc"


# ═══════════════════════════════════════════════════════════════════════════
#  EQUALITY
# ═══════════════════════════════════════════════════════════════════════════

class TestEquals:

    def test_known_primitives(self):
        assert equals(string_val("a"), string_val("a")) is True
        assert equals(string_val("a"), string_val("b")) is False
        assert equals(num("1.0"), num(1)) is True

    def test_unknown_is_undecided(self):
        assert equals(unknown_val(STRING), string_val("a")) is None
        assert equals(string_val("a"), unknown_val(STRING)) is None
        assert equals(unknown_val(NUMBER), unknown_val(NUMBER)) is None

    def test_prefix_rules_out_known(self):
        u = Unknown(STRING, Refinement(string_prefix="arn:"))
        assert equals(u, string_val("hello")) is False
        assert equals(u, string_val("arn:aws")) is None

    @pytest.mark.parametrize("comparator", ["arn", "", "ar", "arn:aw"])
    def test_comparator_shorter_than_prefix_is_ruled_out(self, comparator):
        u = Unknown(STRING, Refinement(string_prefix="arn:aws:"))
        assert equals(u, string_val(comparator)) is False

    def test_length_rules_out_known(self):
        u = Unknown(list_of(STRING), Refinement(length_lower=3))
        assert equals(u, list_val(strings("a"))) is False

    def test_nulls(self):
        assert equals(null_val(STRING), null_val(STRING)) is True
        assert equals(null_val(STRING), string_val("")) is False
        assert equals(unknown_val(STRING), null_val(STRING)) is None
        assert equals(Unknown(STRING, Refinement(not_null=True)), Null(STRING)) is False

    def test_lists(self):
        partial = list_val([string_val("a"), unknown_val(STRING)])
        assert equals(partial, list_val(strings("a", "b"))) is None
        assert equals(partial, list_val(strings("x", "b"))) is False
        assert equals(partial, list_val(strings("a"))) is False

    def test_sets(self):
        assert equals(set_val(strings("a", "b")), set_val(strings("b", "a"))) is True
        assert equals(set_val(strings("a")), set_val(strings("b"))) is False
        partial = set_val([string_val("a"), unknown_val(STRING)])
        assert equals(partial, set_val(strings("a", "b"))) is None
        assert equals(partial, set_val(strings("x", "y", "z"))) is False
