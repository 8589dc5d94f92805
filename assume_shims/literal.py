"""
assume_shims/literal.py
═══════════════════════

S-expression literal syntax for types and values, parsed with
``sexpdata``.

Types::

    string   number   bool   dynamic
    (list T)   (set T)   (map T)
    (object (name T) ...)   (tuple T ...)

Values::

    "text"   42   1.5   true   false   dynamic
    (null T)
    (unknown T [(not-null)] [(prefix "p")] [(length LO HI)])
    (list T v ...)   (set T v ...)   (map T (key v) ...)
    (object (key v) ...)   (tuple v ...)

In ``(length LO HI)`` an underscore leaves that side open.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

import sexpdata
from sexpdata import Symbol

from assume_shims.convert import number_text
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
from assume_shims.values import (
    DYNAMIC_VAL,
    FALSE,
    TRUE,
    Known,
    Null,
    Refinement,
    Unknown,
    Value,
    list_val,
    map_val,
    number_val,
    object_val,
    set_val,
    string_val,
    tuple_val,
)

Sexp = Any  # Union[list, Symbol, str, int, float]


class LiteralError(ValueError):
    """Raised when text is not a well-formed type or value literal."""


# ═══════════════════════════════════════════════════════════════════════
#  Helpers
# ═══════════════════════════════════════════════════════════════════════

def _loads(text: str) -> Sexp:
    try:
        return sexpdata.loads(text, nil=None, true=None, false=None)
    except Exception as exc:  # sexpdata raises assorted parse errors
        raise LiteralError(f"malformed literal {text!r}: {exc}") from None


def _sym_name(s: Sexp) -> Optional[str]:
    return str(s.value()) if isinstance(s, Symbol) else None


def _is_string(s: Sexp) -> bool:
    return isinstance(s, str) and not isinstance(s, Symbol)


def _head(s: list) -> str:
    if not s:
        raise LiteralError("unexpected empty form ()")
    name = _sym_name(s[0])
    if name is None:
        raise LiteralError(f"expected a form name, got {s[0]!r}")
    return name


def _as_key(s: Sexp, what: str) -> str:
    # Symbol subclasses str, so it has to be tested first
    if isinstance(s, Symbol):
        return str(s.value())
    if isinstance(s, str):
        return s
    raise LiteralError(f"{what} must be a name or string, got {s!r}")


def _pairs(forms: list, what: str) -> List[tuple]:
    pairs = []
    for form in forms:
        if not isinstance(form, list) or len(form) != 2:
            raise LiteralError(f"expected ({what} ...) pair, got {form!r}")
        pairs.append((_as_key(form[0], what), form[1]))
    return pairs


# ═══════════════════════════════════════════════════════════════════════
#  Types
# ═══════════════════════════════════════════════════════════════════════

_PRIMITIVE_TYPES: Dict[str, Type] = {
    "string": STRING,
    "number": NUMBER,
    "bool": BOOL,
    "dynamic": DYNAMIC,
}


def parse_type(text: str) -> Type:
    return _type_from_sexp(_loads(text))


def _type_from_sexp(s: Sexp) -> Type:
    name = _sym_name(s)
    if name is not None:
        if name in _PRIMITIVE_TYPES:
            return _PRIMITIVE_TYPES[name]
        raise LiteralError(f"unknown type {name!r}")
    if not isinstance(s, list):
        raise LiteralError(f"expected a type, got {s!r}")
    head = _head(s)
    if head in ("list", "set", "map"):
        if len(s) != 2:
            raise LiteralError(f"({head} T) takes exactly one element type")
        element = _type_from_sexp(s[1])
        return {"list": list_of, "set": set_of, "map": map_of}[head](element)
    if head == "object":
        return object_of({k: _type_from_sexp(t) for k, t in _pairs(s[1:], "attribute")})
    if head == "tuple":
        return tuple_of([_type_from_sexp(t) for t in s[1:]])
    raise LiteralError(f"unknown type form ({head} ...)")


def format_type(ty: Type) -> str:
    return sexpdata.dumps(_type_to_sexp(ty))


def _type_to_sexp(ty: Type) -> Sexp:
    if ty.is_primitive or ty.is_dynamic:
        return Symbol(ty.kind.value)
    if ty.is_collection:
        return [Symbol(ty.kind.value), _type_to_sexp(ty.element)]
    if ty.kind is TypeKind.OBJECT:
        return [Symbol("object")] + [[Symbol(k), _type_to_sexp(t)] for k, t in ty.attributes]
    return [Symbol("tuple")] + [_type_to_sexp(t) for t in ty.elements]


# ═══════════════════════════════════════════════════════════════════════
#  Values
# ═══════════════════════════════════════════════════════════════════════

def parse_value(text: str) -> Value:
    return _value_from_sexp(_loads(text))


def _value_from_sexp(s: Sexp) -> Value:
    name = _sym_name(s)
    if name is not None:
        if name == "true":
            return TRUE
        if name == "false":
            return FALSE
        if name == "dynamic":
            return DYNAMIC_VAL
        raise LiteralError(f"unknown value {name!r} (strings must be quoted)")
    if isinstance(s, str):
        return string_val(s)
    if isinstance(s, (int, float)) and not isinstance(s, bool):
        try:
            return number_val(s)
        except ValueError as exc:
            raise LiteralError(str(exc)) from None
    if not isinstance(s, list):
        raise LiteralError(f"expected a value, got {s!r}")
    head = _head(s)
    parser = _VALUE_FORMS.get(head)
    if parser is None:
        raise LiteralError(f"unknown value form ({head} ...)")
    return parser(s)


def _parse_null(s: list) -> Value:
    if len(s) != 2:
        raise LiteralError("(null T) takes exactly one type")
    return Null(_type_from_sexp(s[1]))


def _parse_unknown(s: list) -> Value:
    if len(s) < 2:
        raise LiteralError("(unknown T ...) requires a type")
    ty = _type_from_sexp(s[1])
    fields: Dict[str, Any] = {}
    for form in s[2:]:
        if not isinstance(form, list):
            raise LiteralError(f"expected a refinement form, got {form!r}")
        tag = _head(form)
        if tag == "not-null" and len(form) == 1:
            fields["not_null"] = True
        elif tag == "prefix" and len(form) == 2 and _is_string(form[1]):
            fields["string_prefix"] = form[1] or None
        elif tag == "length" and len(form) == 3:
            fields["length_lower"] = _bound(form[1])
            fields["length_upper"] = _bound(form[2])
        else:
            raise LiteralError(f"malformed refinement {sexpdata.dumps(form)}")
    lower, upper = fields.get("length_lower"), fields.get("length_upper")
    if lower is not None and upper is not None and lower > upper:
        raise LiteralError(f"empty length range [{lower}, {upper}]")
    return Unknown(ty, Refinement(**fields))


def _bound(s: Sexp) -> Optional[int]:
    if _sym_name(s) == "_":
        return None
    if isinstance(s, int) and not isinstance(s, bool) and s >= 0:
        return s
    raise LiteralError(f"length bound must be a non-negative integer or _, got {s!r}")


def _parse_collection(s: list) -> Value:
    head = _head(s)
    if len(s) < 2:
        raise LiteralError(f"({head} T ...) requires an element type")
    ety = _type_from_sexp(s[1])
    try:
        if head == "map":
            return map_val({k: _value_from_sexp(v) for k, v in _pairs(s[2:], "key")}, ety)
        items = [_value_from_sexp(v) for v in s[2:]]
        return list_val(items, ety) if head == "list" else set_val(items, ety)
    except TypeError as exc:
        raise LiteralError(str(exc)) from None


def _parse_object(s: list) -> Value:
    return object_val({k: _value_from_sexp(v) for k, v in _pairs(s[1:], "attribute")})


def _parse_tuple(s: list) -> Value:
    return tuple_val(_value_from_sexp(v) for v in s[1:])


_VALUE_FORMS: Dict[str, Callable[[list], Value]] = {
    "null": _parse_null,
    "unknown": _parse_unknown,
    "list": _parse_collection,
    "set": _parse_collection,
    "map": _parse_collection,
    "object": _parse_object,
    "tuple": _parse_tuple,
}


def format_value(value: Value) -> str:
    return sexpdata.dumps(_value_to_sexp(value))


def _value_to_sexp(value: Value) -> Sexp:
    if isinstance(value, Null):
        return [Symbol("null"), _type_to_sexp(value.type)]
    if isinstance(value, Unknown):
        if value.type.is_dynamic and value.refinement.is_empty():
            return Symbol("dynamic")
        form: list = [Symbol("unknown"), _type_to_sexp(value.type)]
        r = value.refinement
        if r.not_null:
            form.append([Symbol("not-null")])
        if r.string_prefix is not None:
            form.append([Symbol("prefix"), r.string_prefix])
        if r.length_lower is not None or r.length_upper is not None:
            form.append([Symbol("length"), _bound_sexp(r.length_lower), _bound_sexp(r.length_upper)])
        return form
    if not isinstance(value, Known):
        raise TypeError(f"not a value: {value!r}")

    ty = value.type
    if ty.kind is TypeKind.STRING:
        return value.payload
    if ty.kind is TypeKind.NUMBER:
        return Symbol(number_text(value.payload))
    if ty.kind is TypeKind.BOOL:
        return Symbol("true" if value.payload else "false")
    if ty.kind is TypeKind.LIST:
        return [Symbol("list"), _type_to_sexp(ty.element)] + [_value_to_sexp(v) for v in value.payload]
    if ty.kind is TypeKind.SET:
        items = sorted((_value_to_sexp(v) for v in value.payload), key=sexpdata.dumps)
        return [Symbol("set"), _type_to_sexp(ty.element)] + items
    if ty.kind is TypeKind.MAP:
        return [Symbol("map"), _type_to_sexp(ty.element)] + [
            [k, _value_to_sexp(v)] for k, v in value.payload
        ]
    if ty.kind is TypeKind.OBJECT:
        return [Symbol("object")] + [[k, _value_to_sexp(v)] for k, v in value.payload]
    return [Symbol("tuple")] + [_value_to_sexp(v) for v in value.payload]


def _bound_sexp(bound: Optional[int]) -> Sexp:
    return Symbol("_") if bound is None else bound
