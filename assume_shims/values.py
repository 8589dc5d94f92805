"""
assume_shims/values.py
══════════════════════

The tri-state value model.

A value is exactly one of:

    Null(type)                   — absence, still typed
    Known(type, payload)         — fully materialised
    Unknown(type, refinement)    — not yet available, but constrained

Payload representation for :class:`Known`:

    ┌──────────────┬──────────────────────────────────────────────┐
    │ string       │ ``str`` (NFC-normalised)                     │
    │ number       │ ``decimal.Decimal``                          │
    │ bool         │ ``bool``                                     │
    │ list, tuple  │ ``tuple`` of Values                          │
    │ set          │ ``tuple`` of Values, canonically ordered     │
    │ map, object  │ ``tuple`` of ``(key, Value)`` sorted by key  │
    └──────────────┴──────────────────────────────────────────────┘

Every variant is a frozen dataclass, so values are hashable and safe to
share between threads.  A Known collection may hold Unknown elements.
"""

from __future__ import annotations

import unicodedata
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Final, Iterable, Mapping, Optional, Tuple, Union

from assume_shims.typesystem import (
    BOOL,
    DYNAMIC,
    NUMBER,
    STRING,
    Type,
    TypeKind,
    list_of,
    map_of,
    object_of,
    set_of,
    tuple_of,
)


# ═══════════════════════════════════════════════════════════════════════════
#  PART 1 — REFINEMENT RECORD
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Refinement:
    """
    Everything proven so far about an :class:`Unknown` value.

    A refinement is never mutated; merges in ``refinement.py`` produce a
    new record.  ``None`` means "no constraint" for the optional fields.
    """
    not_null: bool = False
    string_prefix: Optional[str] = None
    length_lower: Optional[int] = None
    length_upper: Optional[int] = None

    def is_empty(self) -> bool:
        return self == EMPTY_REFINEMENT


EMPTY_REFINEMENT: Final = Refinement()


# ═══════════════════════════════════════════════════════════════════════════
#  PART 2 — VALUE VARIANTS
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Null:
    type: Type


@dataclass(frozen=True)
class Known:
    type: Type
    payload: Any

    def as_map(self) -> dict:
        """Return a map / object payload as a plain ``dict``."""
        return dict(self.payload)


@dataclass(frozen=True)
class Unknown:
    type: Type
    refinement: Refinement = EMPTY_REFINEMENT


Value = Union[Null, Known, Unknown]

DYNAMIC_VAL: Final = Unknown(DYNAMIC)


# ═══════════════════════════════════════════════════════════════════════════
#  PART 3 — CONSTRUCTORS
# ═══════════════════════════════════════════════════════════════════════════

def string_val(text: str) -> Known:
    return Known(STRING, unicodedata.normalize("NFC", text))


def number_val(number: Union[int, float, str, Decimal]) -> Known:
    if isinstance(number, bool):
        raise TypeError("bool is not a number value")
    if isinstance(number, float):
        number = repr(number)
    try:
        dec = Decimal(number)
    except InvalidOperation:
        raise ValueError(f"not a number: {number!r}") from None
    if not dec.is_finite():
        raise ValueError(f"number must be finite: {number!r}")
    return Known(NUMBER, dec)


def bool_val(flag: bool) -> Known:
    return Known(BOOL, bool(flag))


TRUE: Final = bool_val(True)
FALSE: Final = bool_val(False)


def null_val(ty: Type) -> Null:
    return Null(ty)


def unknown_val(ty: Type, refinement: Refinement = EMPTY_REFINEMENT) -> Unknown:
    return Unknown(ty, refinement)


def _element_type(elements: Tuple[Value, ...], given: Optional[Type]) -> Type:
    if given is not None:
        bad = [
            e for e in elements
            if e.type != given and not (given.is_dynamic or e.type.is_dynamic)
        ]
        if bad:
            raise TypeError(
                f"element of type {bad[0].type} in collection of {given}"
            )
        return given
    if not elements:
        raise ValueError("an empty collection needs an explicit element type")
    first = elements[0].type
    for e in elements[1:]:
        if e.type != first:
            raise TypeError(
                f"collection elements disagree on type: {first} vs {e.type}"
            )
    return first


def list_val(elements: Iterable[Value], element_type: Optional[Type] = None) -> Known:
    items = tuple(elements)
    return Known(list_of(_element_type(items, element_type)), items)


def set_payload(elements: Iterable[Value]) -> Tuple[Value, ...]:
    """
    Canonical payload of a set.

    Wholly-known duplicates collapse.  Elements that still hold an Unknown
    are each kept, since two pending elements may resolve to different
    values.  Ordering is by ``repr`` so equal sets have equal payloads.
    """
    settled = []
    pending = []
    for e in elements:
        if is_wholly_known(e):
            if e not in settled:
                settled.append(e)
        else:
            pending.append(e)
    return tuple(sorted(settled + pending, key=repr))


def set_val(elements: Iterable[Value], element_type: Optional[Type] = None) -> Known:
    items = tuple(elements)
    return Known(set_of(_element_type(items, element_type)), set_payload(items))


def map_val(entries: Mapping[str, Value], element_type: Optional[Type] = None) -> Known:
    pairs = tuple(sorted(entries.items()))
    ety = _element_type(tuple(v for _, v in pairs), element_type)
    return Known(map_of(ety), pairs)


def object_val(attributes: Mapping[str, Value]) -> Known:
    pairs = tuple(sorted(attributes.items()))
    return Known(object_of({k: v.type for k, v in pairs}), pairs)


def tuple_val(elements: Iterable[Value]) -> Known:
    items = tuple(elements)
    return Known(tuple_of([e.type for e in items]), items)


# ═══════════════════════════════════════════════════════════════════════════
#  PART 4 — QUERIES
# ═══════════════════════════════════════════════════════════════════════════

def children(value: Value) -> Tuple[Value, ...]:
    """Nested values of a Known collection or structure (empty otherwise)."""
    if not isinstance(value, Known):
        return ()
    kind = value.type.kind
    if kind in (TypeKind.LIST, TypeKind.TUPLE, TypeKind.SET):
        return value.payload
    if kind in (TypeKind.MAP, TypeKind.OBJECT):
        return tuple(v for _, v in value.payload)
    return ()


def is_wholly_known(value: Value) -> bool:
    """True if no Unknown appears in *value* at any depth."""
    if isinstance(value, Unknown):
        return False
    return all(is_wholly_known(c) for c in children(value))


def length_range(value: Value) -> Optional[Tuple[int, int]]:
    """
    Possible element counts of a Known list, set or map.

    Sets holding pending elements may collapse duplicates once those
    elements resolve, so only the distinct wholly-known elements (or one,
    if there are none but the set is non-empty) are guaranteed.
    """
    if not isinstance(value, Known) or not value.type.is_collection:
        return None
    n = len(value.payload)
    if value.type.kind is not TypeKind.SET or all(is_wholly_known(e) for e in value.payload):
        return (n, n)
    settled = sum(1 for e in value.payload if is_wholly_known(e))
    return (max(settled, 1 if n else 0), n)
