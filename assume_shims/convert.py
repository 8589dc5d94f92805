"""
assume_shims/convert.py
═══════════════════════

Type conversion used to reconcile a value with the type of the value it
is being compared against.

Conversion never invents information: an Unknown keeps only those
refinement facts that stay true under the target type, and a Known
payload is either translated exactly or rejected.

    source ╲ target   string   number   bool   list/set   tuple   map   object
    ─────────────────────────────────────────────────────────────────────────
    string              =        ✓       ✓
    number              ✓        =
    bool                ✓                =
    list/set/tuple                               ✓         ✓
    map/object                                                      ✓      ✓

``dynamic`` converts to and from everything.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Dict, Optional

from assume_shims.typesystem import Type, TypeKind
from assume_shims.values import (
    Known,
    Null,
    Refinement,
    Unknown,
    Value,
    children,
    set_payload,
)


class ConversionError(Exception):
    """A value cannot be represented in the requested type."""


_SEQUENCES = (TypeKind.LIST, TypeKind.SET, TypeKind.TUPLE)
_MAPPINGS = (TypeKind.MAP, TypeKind.OBJECT)

_PRIMITIVE_PAIRS = {
    (TypeKind.STRING, TypeKind.NUMBER),
    (TypeKind.STRING, TypeKind.BOOL),
    (TypeKind.NUMBER, TypeKind.STRING),
    (TypeKind.BOOL, TypeKind.STRING),
}


# ═══════════════════════════════════════════════════════════════════════════
#  PART 1 — TYPE-LEVEL CHECK
# ═══════════════════════════════════════════════════════════════════════════

def conversion_allowed(src: Type, dst: Type) -> bool:
    """Could any value of type *src* convert to *dst*?"""
    if src == dst or src.is_dynamic or dst.is_dynamic:
        return True
    if src.is_primitive and dst.is_primitive:
        return (src.kind, dst.kind) in _PRIMITIVE_PAIRS

    if dst.kind in (TypeKind.LIST, TypeKind.SET):
        if src.kind is TypeKind.TUPLE:
            return all(conversion_allowed(e, dst.element) for e in src.elements)
        if src.kind in _SEQUENCES:
            return conversion_allowed(src.element, dst.element)
        return False

    if dst.kind is TypeKind.TUPLE:
        if src.kind is TypeKind.TUPLE:
            return len(src.elements) == len(dst.elements) and all(
                conversion_allowed(s, d) for s, d in zip(src.elements, dst.elements)
            )
        if src.kind in (TypeKind.LIST, TypeKind.SET):
            return all(conversion_allowed(src.element, d) for d in dst.elements)
        return False

    if dst.kind is TypeKind.MAP:
        if src.kind is TypeKind.OBJECT:
            return all(conversion_allowed(t, dst.element) for _, t in src.attributes)
        if src.kind is TypeKind.MAP:
            return conversion_allowed(src.element, dst.element)
        return False

    if dst.kind is TypeKind.OBJECT:
        if src.kind is TypeKind.OBJECT:
            src_attrs = src.attribute_types()
            return src_attrs.keys() == dst.attribute_types().keys() and all(
                conversion_allowed(src_attrs[name], t) for name, t in dst.attributes
            )
        if src.kind is TypeKind.MAP:
            return all(conversion_allowed(src.element, t) for _, t in dst.attributes)
        return False

    return False


# ═══════════════════════════════════════════════════════════════════════════
#  PART 2 — REFINEMENT TRANSFER
# ═══════════════════════════════════════════════════════════════════════════

def _count_preserving(src: Type, dst: Type) -> bool:
    if dst.kind is TypeKind.LIST:
        return src.kind in (TypeKind.LIST, TypeKind.TUPLE, TypeKind.SET)
    if dst.kind is TypeKind.MAP:
        return src.kind in _MAPPINGS
    return False


def _transfer(r: Refinement, src: Type, dst: Type) -> Refinement:
    prefix = r.string_prefix if src.kind is dst.kind is TypeKind.STRING else None
    lower: Optional[int] = None
    upper: Optional[int] = None
    if _count_preserving(src, dst):
        lower, upper = r.length_lower, r.length_upper
    elif dst.kind is TypeKind.SET and src.kind in _SEQUENCES:
        # duplicates collapse, so only non-emptiness survives
        upper = r.length_upper
        if r.length_lower:
            lower = 1
    return Refinement(
        not_null=r.not_null,
        string_prefix=prefix,
        length_lower=lower,
        length_upper=upper,
    )


# ═══════════════════════════════════════════════════════════════════════════
#  PART 3 — VALUE CONVERSION
# ═══════════════════════════════════════════════════════════════════════════

def convert(value: Value, target: Type) -> Value:
    """Convert *value* to *target*, raising :class:`ConversionError`."""
    src = value.type
    if src == target or target.is_dynamic:
        return value
    if not conversion_allowed(src, target):
        raise ConversionError(f"cannot convert {src} to {target}")

    if isinstance(value, Null):
        return Null(target)
    if isinstance(value, Unknown):
        return Unknown(target, _transfer(value.refinement, src, target))
    if not isinstance(value, Known):
        raise TypeError(f"not a value: {value!r}")

    if target.is_primitive:
        return _convert_primitive(value, target)
    if target.kind is TypeKind.LIST:
        return Known(target, tuple(convert(v, target.element) for v in children(value)))
    if target.kind is TypeKind.SET:
        return Known(target, set_payload(convert(v, target.element) for v in children(value)))
    if target.kind is TypeKind.TUPLE:
        items = children(value)
        if len(items) != len(target.elements):
            raise ConversionError(
                f"tuple of {len(target.elements)} elements required, "
                f"got {len(items)}"
            )
        return Known(target, tuple(convert(v, t) for v, t in zip(items, target.elements)))
    if target.kind is TypeKind.MAP:
        return Known(target, tuple((k, convert(v, target.element)) for k, v in value.payload))
    if target.kind is TypeKind.OBJECT:
        return _convert_to_object(value, target)
    raise ConversionError(f"cannot convert {src} to {target}")


def _convert_primitive(value: Known, target: Type) -> Known:
    src = value.type.kind
    if target.kind is TypeKind.STRING:
        if src is TypeKind.BOOL:
            return Known(target, "true" if value.payload else "false")
        return Known(target, number_text(value.payload))
    if target.kind is TypeKind.NUMBER:
        try:
            dec = Decimal(value.payload.strip())
        except InvalidOperation:
            raise ConversionError("a number is required") from None
        if not dec.is_finite():
            raise ConversionError("a number is required")
        return Known(target, dec)
    if value.payload in ("true", "false"):
        return Known(target, value.payload == "true")
    raise ConversionError("a bool is required")


def _convert_to_object(value: Known, target: Type) -> Known:
    entries: Dict[str, Value] = value.as_map()
    wanted = target.attribute_types()
    if entries.keys() != wanted.keys():
        missing = sorted(wanted.keys() - entries.keys())
        extra = sorted(entries.keys() - wanted.keys())
        raise ConversionError(
            f"attributes do not match (missing {missing}, unexpected {extra})"
        )
    return Known(
        target,
        tuple((name, convert(entries[name], t)) for name, t in target.attributes),
    )


def number_text(number: Decimal) -> str:
    """Shortest exact decimal rendering of a number payload."""
    if number == number.to_integral_value():
        return str(int(number))
    return format(number.normalize(), "f")
