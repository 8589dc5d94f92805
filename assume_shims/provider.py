"""
assume_shims/provider.py
════════════════════════

Name → function registry with declared argument schemas.

The registry is the layer in front of :func:`apply_assumption`: it maps
textual names such as ``"listlengthmin"`` to an
:class:`AssumptionFunction`, enforces arity, null-ness and declared
parameter types, and only then hands the arguments to the engine.

Usage
-----
>>> from assume_shims import STRING, new_provider, string_val, unknown_val
>>> provider = new_provider()
>>> result = provider.call("stringprefix", unknown_val(STRING), string_val("foo-"))
>>> result.refinement.string_prefix
'foo-'
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterator, List, Tuple

from assume_shims.checkers import AssumptionKind, apply_assumption
from assume_shims.convert import ConversionError, conversion_allowed, convert
from assume_shims.errors import ParameterError, UnknownFunctionError
from assume_shims.typesystem import (
    DYNAMIC,
    NUMBER,
    STRING,
    Type,
    list_of,
    map_of,
    set_of,
)
from assume_shims.values import Null, Unknown, Value

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Parameter:
    """Declared schema of one function argument."""
    name: str
    type: Type
    description: str
    allow_null: bool = False
    allow_unknown: bool = False


@dataclass(frozen=True)
class AssumptionFunction:
    """A named assumption together with its argument schema."""
    name: str
    kind: AssumptionKind
    description: str
    params: Tuple[Parameter, ...]

    def signature(self) -> str:
        return f"{self.name}({', '.join(p.name for p in self.params)})"

    def call(self, *args: Value) -> Value:
        if len(args) != len(self.params):
            raise ParameterError(
                min(len(args), len(self.params)),
                f"{self.name} requires {len(self.params)} argument(s), got {len(args)}",
            )
        checked = [_check_arg(i, p, a) for i, (p, a) in enumerate(zip(self.params, args))]
        return apply_assumption(self.kind, checked[0], checked[1:])


def _check_arg(position: int, param: Parameter, arg: Value) -> Value:
    if isinstance(arg, Null) and not param.allow_null:
        raise ParameterError(position, f"argument {param.name!r} must not be null")
    if isinstance(arg, Unknown) and not param.allow_unknown:
        raise ParameterError(position, f"argument {param.name!r} must be known")

    ty = param.type
    if ty.is_dynamic or arg.type.is_dynamic or arg.type == ty:
        return arg
    if ty.is_collection and ty.element.is_dynamic:
        if arg.type.kind is ty.kind:
            return arg
        if arg.type.element is not None:
            # list(dynamic) accepting a set(string) becomes list(string)
            ty = Type(ty.kind, element=arg.type.element)
    if conversion_allowed(arg.type, ty):
        try:
            return convert(arg, ty)
        except ConversionError as exc:
            raise ParameterError(position, f"argument {param.name!r}: {exc}") from None
    raise ParameterError(
        position, f"argument {param.name!r} must be {ty}, not {arg.type}"
    )


# ═══════════════════════════════════════════════════════════════════════════
#  REGISTRY
# ═══════════════════════════════════════════════════════════════════════════

class Provider:
    """A table of assumption functions addressable by name."""

    def __init__(self) -> None:
        self._functions: Dict[str, AssumptionFunction] = {}

    def add_function(self, fn: AssumptionFunction) -> None:
        if fn.name in self._functions:
            raise ValueError(f"duplicate assumption function {fn.name!r}")
        self._functions[fn.name] = fn

    def function(self, name: str) -> AssumptionFunction:
        try:
            return self._functions[name]
        except KeyError:
            raise UnknownFunctionError(name) from None

    def names(self) -> List[str]:
        return sorted(self._functions)

    def __iter__(self) -> Iterator[AssumptionFunction]:
        return iter(self._functions[n] for n in self.names())

    def __len__(self) -> int:
        return len(self._functions)

    def call(self, name: str, *args: Value) -> Value:
        fn = self.function(name)
        _log.debug("call %s with %d argument(s)", name, len(args))
        return fn.call(*args)


def _value_param(ty: Type) -> Parameter:
    return Parameter(
        name="value",
        type=ty,
        description="The value to make the assumption about.",
        allow_null=True,
        allow_unknown=True,
    )


def _length_functions(kind_of, noun: str) -> List[AssumptionFunction]:
    value = _value_param(kind_of(DYNAMIC))
    min_p = Parameter("min_length", NUMBER, f"The minimum possible {noun} length.")
    max_p = Parameter("max_length", NUMBER, f"The maximum possible {noun} length.")
    return [
        AssumptionFunction(
            f"{noun}length",
            AssumptionKind(f"{noun}length"),
            f"Assume that the given {noun} will have a length in the given bounds.",
            (value, min_p, max_p),
        ),
        AssumptionFunction(
            f"{noun}lengthmin",
            AssumptionKind(f"{noun}lengthmin"),
            f"Assume that the given {noun} will have a length of at least the given number.",
            (value, min_p),
        ),
        AssumptionFunction(
            f"{noun}lengthmax",
            AssumptionKind(f"{noun}lengthmax"),
            f"Assume that the given {noun} will have a length of at most the given number.",
            (value, max_p),
        ),
    ]


def new_provider() -> Provider:
    """Build the standard registry of all twelve assumption functions."""
    p = Provider()
    p.add_function(AssumptionFunction(
        "notnull",
        AssumptionKind.NOT_NULL,
        "Assume that the given value will never be null.",
        (_value_param(DYNAMIC),),
    ))
    p.add_function(AssumptionFunction(
        "equal",
        AssumptionKind.EQUAL,
        "Assume that the first given value will equal the second given value.",
        (
            Parameter(
                "actual_value", DYNAMIC, "The value to make the assumption about.",
                allow_null=True, allow_unknown=True,
            ),
            Parameter(
                "assumed_value", DYNAMIC,
                "The value that the first argument is assumed to match.",
                allow_null=True, allow_unknown=True,
            ),
        ),
    ))
    p.add_function(AssumptionFunction(
        "stringprefix",
        AssumptionKind.STRING_PREFIX,
        "Assume that the given string will always have a fixed prefix.",
        (_value_param(STRING), Parameter("prefix", STRING, "The prefix to assume.")),
    ))
    for kind_of, noun in ((list_of, "list"), (set_of, "set"), (map_of, "map")):
        for fn in _length_functions(kind_of, noun):
            p.add_function(fn)
    return p
