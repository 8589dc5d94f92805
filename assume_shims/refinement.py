"""
assume_shims/refinement.py
══════════════════════════

Merge operations over :class:`~assume_shims.values.Refinement`.

Refinements form a lattice ordered by strength: the empty refinement is
⊤ (nothing known) and every merge moves downwards.  A merge whose result
would describe no concrete value at all yields a :class:`Contradiction`.

    ┌──────────────────────────────────────────────────────────────┐
    │  not_null       false ⊒ true                                 │
    │  string_prefix  None ⊒ "a" ⊒ "ab" ⊒ "abc" …                 │
    │  length         [lo, hi] ⊒ [lo', hi']  iff  lo ≤ lo' ∧ hi' ≤ hi │
    └──────────────────────────────────────────────────────────────┘

Merge functions never raise for an inconsistent constraint: they
*return* a ``Contradiction``, and callers test for it with
``isinstance``.  Only misuse of the API (an unsupported value variant)
raises.
"""

from __future__ import annotations

import functools
import logging
import sys
import unicodedata
from dataclasses import dataclass, replace
from typing import Callable, FrozenSet, Optional, Tuple, Union

from assume_shims.typesystem import Type, TypeKind
from assume_shims.values import (
    EMPTY_REFINEMENT,
    Known,
    Null,
    Refinement,
    Unknown,
    Value,
    is_wholly_known,
    length_range,
)

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Contradiction:
    """A proposed constraint conflicts with what is already known."""
    reason: str

    def __str__(self) -> str:
        return self.reason


Bounds = Tuple[Optional[int], Optional[int]]
Builder = Callable[[Refinement], Union[Refinement, Contradiction]]


# ═══════════════════════════════════════════════════════════════════════════
#  PART 1 — PRIMITIVE MERGES
# ═══════════════════════════════════════════════════════════════════════════

def merge_length_bounds(
    old: Refinement,
    new_lower: Optional[int],
    new_upper: Optional[int],
) -> Union[Bounds, Contradiction]:
    """Intersect ``[old.length_lower, old.length_upper]`` with the new bounds."""
    lower = old.length_lower
    if new_lower is not None:
        lower = new_lower if lower is None else max(lower, new_lower)
    upper = old.length_upper
    if new_upper is not None:
        upper = new_upper if upper is None else min(upper, new_upper)
    if (lower is not None and lower < 0) or (upper is not None and upper < 0):
        return Contradiction("collection length cannot be negative")
    if lower is not None and upper is not None and lower > upper:
        return Contradiction(f"length must be in the empty range [{lower}, {upper}]")
    return lower, upper


def merge_string_prefix(old: Optional[str], new_prefix: str) -> Union[str, Contradiction]:
    """Keep whichever prefix extends the other."""
    if old is None or new_prefix.startswith(old):
        return new_prefix
    if old.startswith(new_prefix):
        return old
    return Contradiction(f"prefix {new_prefix!r} disagrees with known prefix {old!r}")


@functools.lru_cache(maxsize=None)
def _composing_starters() -> FrozenSet[str]:
    """Characters that begin some canonical two-character composition."""
    starters = set()
    for cp in range(min(sys.maxunicode, 0x2FFFF) + 1):
        decomp = unicodedata.decomposition(chr(cp))
        if not decomp or decomp.startswith("<"):
            continue
        parts = decomp.split()
        if len(parts) == 2:
            starters.add(chr(int(parts[0], 16)))
    return frozenset(starters)


_ZWJ = "\u200d"


def _may_combine(ch: str) -> bool:
    category = unicodedata.category(ch)
    if category[0] in ("L", "M"):
        return True
    return ch == _ZWJ or ch in _composing_starters()


def _is_extender(ch: str) -> bool:
    return unicodedata.category(ch)[0] == "M" or ch == _ZWJ


def safe_prefix_boundary(prefix: str) -> str:
    """
    Truncate *prefix* so that no character appended later can change it.

    Strings are compared in NFC form, where a trailing letter may still
    fuse with a combining mark that follows it ("o" + U+0308 → "ö").  If
    the final character could combine, the whole final grapheme cluster
    is dropped; punctuation, digits and other terminators are kept.
    """
    prefix = unicodedata.normalize("NFC", prefix)
    if not prefix or not _may_combine(prefix[-1]):
        return prefix
    cut = len(prefix) - 1
    while cut > 0 and _is_extender(prefix[cut]):
        cut -= 1
    return prefix[:cut]


def merge_refinements(old: Refinement, new: Refinement) -> Union[Refinement, Contradiction]:
    """Combine two refinements of the same value."""
    merged = old
    if new.not_null:
        merged = replace(merged, not_null=True)
    if new.string_prefix is not None:
        prefix = merge_string_prefix(merged.string_prefix, new.string_prefix)
        if isinstance(prefix, Contradiction):
            return prefix
        merged = replace(merged, string_prefix=prefix or None)
    if new.length_lower is not None or new.length_upper is not None:
        bounds = merge_length_bounds(merged, new.length_lower, new.length_upper)
        if isinstance(bounds, Contradiction):
            return bounds
        merged = replace(merged, length_lower=bounds[0], length_upper=bounds[1])
    return merged


# ═══════════════════════════════════════════════════════════════════════════
#  PART 2 — BUILDERS
# ═══════════════════════════════════════════════════════════════════════════
#
#  A builder maps the current refinement to a strengthened one (or a
#  Contradiction).  ``refine`` feeds it whatever is known about the value.

def require_not_null() -> Builder:
    return lambda r: merge_refinements(r, Refinement(not_null=True))


def require_string_prefix(prefix: str) -> Builder:
    return lambda r: merge_refinements(r, Refinement(string_prefix=prefix or None))


def require_length(lower: Optional[int] = None, upper: Optional[int] = None) -> Builder:
    return lambda r: merge_refinements(
        r, Refinement(length_lower=lower, length_upper=upper)
    )


def require(implied: Refinement) -> Builder:
    return lambda r: merge_refinements(r, implied)


def _applicability(ty: Type, r: Refinement) -> Optional[Contradiction]:
    if r.string_prefix is not None and ty.kind is not TypeKind.STRING:
        return Contradiction(f"a string prefix does not apply to {ty}")
    if (r.length_lower is not None or r.length_upper is not None) and not ty.is_collection:
        return Contradiction(f"length bounds do not apply to {ty}")
    return None


def implied_refinement(value: Known) -> Refinement:
    """The strongest refinement a Known value satisfies."""
    prefix = value.payload if value.type.kind is TypeKind.STRING else None
    bounds = length_range(value) or (None, None)
    return Refinement(
        not_null=True,
        string_prefix=prefix or None,
        length_lower=bounds[0],
        length_upper=bounds[1],
    )


# ═══════════════════════════════════════════════════════════════════════════
#  PART 3 — REFINE
# ═══════════════════════════════════════════════════════════════════════════

def refine(value: Value, build: Builder) -> Union[Value, Contradiction]:
    """
    Apply *build* to what is known about *value*.

    * Unknown — the builder strengthens the value's refinement and a new
      Unknown is returned.
    * Known   — the builder is checked against the value's implied
      refinement; the value passes through unchanged if consistent.
    * Null    — only ``not_null`` can be contradicted; otherwise the null
      passes through.

    Values of dynamic type pass through untouched.
    """
    if value.type.is_dynamic:
        return value

    if isinstance(value, Unknown):
        result = build(value.refinement)
        if isinstance(result, Contradiction):
            return result
        bad = _applicability(value.type, result)
        if bad is not None:
            return bad
        if result == value.refinement:
            return value
        return Unknown(value.type, result)

    if isinstance(value, Known):
        implied = implied_refinement(value)
        result = build(implied)
        if isinstance(result, Contradiction):
            return result
        bad = _applicability(value.type, result)
        if bad is not None:
            return bad
        if result.string_prefix is not None and not value.payload.startswith(result.string_prefix):
            return Contradiction(f"{value.payload!r} is shorter than prefix {result.string_prefix!r}")
        return value

    if isinstance(value, Null):
        result = build(EMPTY_REFINEMENT)
        if isinstance(result, Contradiction):
            return result
        bad = _applicability(value.type, result)
        if bad is not None:
            return bad
        if result.not_null:
            return Contradiction("value is null")
        return value

    raise TypeError(f"not a value: {value!r}")


# ═══════════════════════════════════════════════════════════════════════════
#  PART 4 — THREE-VALUED EQUALITY
# ═══════════════════════════════════════════════════════════════════════════

def _all(results) -> Optional[bool]:
    verdict: Optional[bool] = True
    for r in results:
        if r is False:
            return False
        if r is None:
            verdict = None
    return verdict


def equals(a: Value, b: Value) -> Optional[bool]:
    """
    Compare two values of the same type.

    Returns True or False when the answer is already certain and None when
    it depends on values not yet known.  An Unknown compared with a Known
    value is decided False early if its refinement rules the Known out.
    """
    if isinstance(b, Unknown) and not isinstance(a, Unknown):
        a, b = b, a

    if isinstance(a, Unknown):
        if isinstance(b, Null):
            return False if a.refinement.not_null else None
        if isinstance(b, Known) and not a.type.is_dynamic:
            # the Known must satisfy everything already proven about the Unknown
            outcome = refine(b, require(a.refinement))
            if isinstance(outcome, Contradiction):
                _log.debug("early inequality: %s", outcome)
                return False
        return None

    if isinstance(a, Null) or isinstance(b, Null):
        return isinstance(a, Null) and isinstance(b, Null)

    kind = a.type.kind
    if a.type.is_primitive:
        return a.payload == b.payload
    if kind in (TypeKind.LIST, TypeKind.TUPLE):
        if len(a.payload) != len(b.payload):
            return False
        return _all(equals(x, y) for x, y in zip(a.payload, b.payload))
    if kind in (TypeKind.MAP, TypeKind.OBJECT):
        left, right = a.as_map(), b.as_map()
        if left.keys() != right.keys():
            return False
        return _all(equals(left[k], right[k]) for k in left)
    if kind is TypeKind.SET:
        if is_wholly_known(a) and is_wholly_known(b):
            return a.payload == b.payload
        lo_a, hi_a = length_range(a)
        lo_b, hi_b = length_range(b)
        if hi_a < lo_b or hi_b < lo_a:
            return False
        return None
    return None