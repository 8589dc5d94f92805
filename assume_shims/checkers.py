"""
assume_shims/checkers.py
════════════════════════

One checker per assumption kind, plus the single entry point
:func:`apply_assumption`.

Every checker follows the same three steps:

  1. **validate**  — assumption parameters first; a bad parameter fails
                     before the value is looked at
  2. **evaluate**  — a Known value is checked directly; an Unknown value
                     has the constraint merged into its refinement
  3. **translate** — a ``Contradiction`` from the value model becomes an
                     :class:`~assume_shims.errors.AssumptionViolated`

    ┌──────────────────────┬────────────┬──────────────────────────────┐
    │ kind                 │ parameters │ refinement merged            │
    ├──────────────────────┼────────────┼──────────────────────────────┤
    │ notnull              │ —          │ not_null                     │
    │ equal                │ value      │ everything the value implies │
    │ stringprefix         │ string     │ string_prefix                │
    │ {list,set,map}length │ min, max   │ length_lower, length_upper   │
    │ …lengthmin           │ min        │ length_lower                 │
    │ …lengthmax           │ max        │ length_upper                 │
    └──────────────────────┴────────────┴──────────────────────────────┘

Values of dynamic type pass through every assumption unchanged (equal
still yields the assumed value).
"""

from __future__ import annotations

import json
import logging
import sys
from decimal import Decimal
from enum import Enum
from typing import Callable, Dict, Optional, Sequence, Tuple

from assume_shims.convert import ConversionError, convert, number_text
from assume_shims.errors import (
    AssumptionViolated,
    ParameterError,
    TypeMismatchError,
)
from assume_shims.refinement import (
    Builder,
    Contradiction,
    equals,
    refine,
    require_length,
    require_not_null,
    require_string_prefix,
    safe_prefix_boundary,
)
from assume_shims.typesystem import TypeKind
from assume_shims.values import Known, Null, Unknown, Value, is_wholly_known

_log = logging.getLogger(__name__)

MAX_LENGTH = sys.maxsize

NOT_UPHELD = "assumption was not upheld"


# ═══════════════════════════════════════════════════════════════════════════
#  PART 1 — KINDS
# ═══════════════════════════════════════════════════════════════════════════

class CollectionKind(Enum):
    """The three length-bounded collection kinds."""
    LIST = TypeKind.LIST
    SET = TypeKind.SET
    MAP = TypeKind.MAP

    @property
    def noun(self) -> str:
        return self.value.value


class Bound(Enum):
    BOTH = "length"
    LOWER = "lengthmin"
    UPPER = "lengthmax"


class AssumptionKind(Enum):
    """Every operation the engine implements, keyed by its function name."""
    NOT_NULL = "notnull"
    EQUAL = "equal"
    STRING_PREFIX = "stringprefix"
    LIST_LENGTH = "listlength"
    LIST_LENGTH_MIN = "listlengthmin"
    LIST_LENGTH_MAX = "listlengthmax"
    SET_LENGTH = "setlength"
    SET_LENGTH_MIN = "setlengthmin"
    SET_LENGTH_MAX = "setlengthmax"
    MAP_LENGTH = "maplength"
    MAP_LENGTH_MIN = "maplengthmin"
    MAP_LENGTH_MAX = "maplengthmax"

    @property
    def collection(self) -> Optional[CollectionKind]:
        for ck in CollectionKind:
            if self.value.startswith(ck.noun + "length"):
                return ck
        return None

    @property
    def bound(self) -> Optional[Bound]:
        ck = self.collection
        if ck is None:
            return None
        return Bound(self.value[len(ck.noun):])

    @property
    def arity(self) -> int:
        """Number of assumption parameters after the value itself."""
        if self is AssumptionKind.NOT_NULL:
            return 0
        if self.bound is Bound.BOTH:
            return 2
        return 1


# ═══════════════════════════════════════════════════════════════════════════
#  PART 2 — PARAMETER VALIDATION
# ═══════════════════════════════════════════════════════════════════════════
#
#  ``index`` below is the position within the assumption parameters; the
#  error position is offset by one for the leading value argument.

def _known_param(params: Sequence[Value], index: int) -> Known:
    param = params[index]
    if isinstance(param, Unknown):
        raise ParameterError(index + 1, "the argument must be known")
    if isinstance(param, Null):
        raise ParameterError(index + 1, "the argument must not be null")
    return param


def _whole_number(params: Sequence[Value], index: int) -> int:
    param = _known_param(params, index)
    number = param.payload
    if (
        param.type.kind is not TypeKind.NUMBER
        or not isinstance(number, Decimal)
        or number != number.to_integral_value()
        or number < 0
        or number >= MAX_LENGTH
    ):
        raise ParameterError(
            index + 1, f"must be a whole number between 0 and {MAX_LENGTH}"
        )
    return int(number)


def _string(params: Sequence[Value], index: int) -> str:
    param = _known_param(params, index)
    if param.type.kind is not TypeKind.STRING:
        raise ParameterError(index + 1, f"a string is required, got {param.type}")
    return param.payload


# ═══════════════════════════════════════════════════════════════════════════
#  PART 3 — CHECKERS
# ═══════════════════════════════════════════════════════════════════════════

Checker = Callable[[Value, Tuple[Value, ...]], Value]

_CHECKERS: Dict[AssumptionKind, Checker] = {}


def _register(*kinds: AssumptionKind):
    """Decorator: register a checker for each of *kinds*."""
    def deco(fn):
        for kind in kinds:
            _CHECKERS[kind] = fn
        return fn
    return deco


def _upheld(value: Value, build: Builder) -> Value:
    outcome = refine(value, build)
    if isinstance(outcome, Contradiction):
        _log.debug("contradiction: %s", outcome)
        raise AssumptionViolated(0, NOT_UPHELD)
    return outcome


def _require_kind(value: Value, kind: TypeKind) -> None:
    if not value.type.is_dynamic and value.type.kind is not kind:
        raise TypeMismatchError(
            0, f"a {kind.value} is required, but the value is {value.type}"
        )


@_register(AssumptionKind.NOT_NULL)
def check_not_null(value: Value, params: Tuple[Value, ...]) -> Value:
    return _upheld(value, require_not_null())


@_register(AssumptionKind.STRING_PREFIX)
def check_string_prefix(value: Value, params: Tuple[Value, ...]) -> Value:
    prefix = _string(params, 0)
    _require_kind(value, TypeKind.STRING)
    if isinstance(value, Known):
        if not value.payload.startswith(prefix):
            _log.debug("%r does not start with %r", value.payload, prefix)
            raise AssumptionViolated(0, NOT_UPHELD)
        return value
    return _upheld(value, require_string_prefix(safe_prefix_boundary(prefix)))


@_register(
    AssumptionKind.LIST_LENGTH, AssumptionKind.LIST_LENGTH_MIN, AssumptionKind.LIST_LENGTH_MAX,
    AssumptionKind.SET_LENGTH, AssumptionKind.SET_LENGTH_MIN, AssumptionKind.SET_LENGTH_MAX,
    AssumptionKind.MAP_LENGTH, AssumptionKind.MAP_LENGTH_MIN, AssumptionKind.MAP_LENGTH_MAX,
)
def check_length(value: Value, params: Tuple[Value, ...], *, kind: AssumptionKind) -> Value:
    bound = kind.bound
    lower = upper = None
    if bound is Bound.BOTH:
        lower, upper = _whole_number(params, 0), _whole_number(params, 1)
    elif bound is Bound.LOWER:
        lower = _whole_number(params, 0)
    else:
        upper = _whole_number(params, 0)
    _require_kind(value, kind.collection.value)
    return _upheld(value, require_length(lower, upper))


@_register(AssumptionKind.EQUAL)
def check_equal(value: Value, params: Tuple[Value, ...]) -> Value:
    assumed = params[0]
    if not is_wholly_known(assumed):
        raise ParameterError(1, "the assumed value must be fully known")
    try:
        actual = convert(value, assumed.type)
    except ConversionError as exc:
        _log.debug("conversion failed: %s", exc)
        raise TypeMismatchError(
            0,
            f"actual value type {value.type.friendly_name()} does not match "
            f"assumed value type {assumed.type.friendly_name()}",
        ) from None

    if equals(actual, assumed) is not False:
        # the assumed value is returned even when equal, so callers see one
        # canonical result whatever the actual value's type was
        return assumed

    shown = simple_display_value(value)
    if shown:
        message = f"the actual value {shown} does not match the assumed value"
    else:
        message = "the actual value does not match the assumed value"
    raise AssumptionViolated(0, message)


def simple_display_value(value: Value) -> str:
    """
    Compact rendering of a primitive value for error messages.

    Returns "" for anything too complicated to show inline.
    """
    if isinstance(value, Null):
        return "null"
    if not value.type.is_primitive:
        return ""
    if isinstance(value, Unknown):
        prefix = value.refinement.string_prefix
        if value.type.kind is TypeKind.STRING and prefix:
            return f"(a string starting with {_quote(prefix)})"
        return ""
    kind = value.type.kind
    if kind is TypeKind.STRING:
        return _quote(value.payload)
    if kind is TypeKind.NUMBER:
        return number_text(value.payload)
    return "true" if value.payload else "false"


def _quote(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)


# ═══════════════════════════════════════════════════════════════════════════
#  PART 4 — ENTRY POINT
# ═══════════════════════════════════════════════════════════════════════════

def apply_assumption(
    kind: AssumptionKind,
    value: Value,
    params: Sequence[Value] = (),
) -> Value:
    """
    Apply one assumption to *value*.

    Returns the (possibly refined) value, or the assumed value for
    ``equal``.  Raises an :class:`~assume_shims.errors.AssumptionError`
    subclass when a parameter is malformed, the types cannot be
    reconciled, or the assumption is provably false.
    """
    params = tuple(params)
    if len(params) != kind.arity:
        position = min(len(params), kind.arity) + 1
        raise ParameterError(
            position,
            f"{kind.value} takes {kind.arity} assumption argument(s), got {len(params)}",
        )
    _log.debug("applying %s to %r", kind.value, value)
    checker = _CHECKERS[kind]
    if kind.collection is not None:
        return checker(value, params, kind=kind)
    return checker(value, params)
