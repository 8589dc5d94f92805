"""
assume_shims — Assumption Refinement over Partially Known Values
================================================================

Attach a declarative *assumption* to a value that may be known, unknown
but constrained, or null, and get back either the value enriched with a
guarantee or a definite failure when the assumption contradicts what is
already known.

Core modules
------------
typesystem
    Static types (string, number, bool, list/set/map, object, tuple, dynamic).
values
    The tri-state value model and the Refinement record.
refinement
    Refinement merges, grapheme-safe string prefixes, three-valued equality.
convert
    Type conversion used to reconcile compared values.
checkers
    One checker per assumption kind and the ``apply_assumption`` entry point.
provider
    Name → function registry with argument schemas.
literal
    S-expression literal syntax for values and types.

Quick start
-----------
>>> from assume_shims import AssumptionKind, apply_assumption, unknown_val, list_of, STRING, number_val
>>> v = apply_assumption(AssumptionKind.LIST_LENGTH_MIN, unknown_val(list_of(STRING)), [number_val(1)])
>>> v.refinement.length_lower
1
"""

from __future__ import annotations

import logging

__version__ = "0.1.0"
__license__ = "MIT"

_log = logging.getLogger(__name__)
_log.addHandler(logging.NullHandler())

from assume_shims.checkers import (  # noqa: E402
    AssumptionKind,
    CollectionKind,
    apply_assumption,
    simple_display_value,
)
from assume_shims.convert import ConversionError, conversion_allowed, convert  # noqa: E402
from assume_shims.errors import (  # noqa: E402
    AssumptionError,
    AssumptionViolated,
    ParameterError,
    TypeMismatchError,
    UnknownFunctionError,
)
from assume_shims.provider import (  # noqa: E402
    AssumptionFunction,
    Parameter,
    Provider,
    new_provider,
)
from assume_shims.refinement import (  # noqa: E402
    Contradiction,
    equals,
    merge_length_bounds,
    merge_string_prefix,
    refine,
    safe_prefix_boundary,
)
from assume_shims.typesystem import (  # noqa: E402
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
from assume_shims.values import (  # noqa: E402
    DYNAMIC_VAL,
    EMPTY_REFINEMENT,
    FALSE,
    TRUE,
    Known,
    Null,
    Refinement,
    Unknown,
    Value,
    bool_val,
    list_val,
    map_val,
    null_val,
    number_val,
    object_val,
    set_val,
    string_val,
    tuple_val,
    unknown_val,
)

__all__ = [
    "AssumptionError",
    "AssumptionFunction",
    "AssumptionKind",
    "AssumptionViolated",
    "BOOL",
    "CollectionKind",
    "Contradiction",
    "ConversionError",
    "DYNAMIC",
    "DYNAMIC_VAL",
    "EMPTY_REFINEMENT",
    "FALSE",
    "Known",
    "NUMBER",
    "Null",
    "Parameter",
    "ParameterError",
    "Provider",
    "Refinement",
    "STRING",
    "TRUE",
    "Type",
    "TypeKind",
    "TypeMismatchError",
    "Unknown",
    "UnknownFunctionError",
    "Value",
    "apply_assumption",
    "bool_val",
    "conversion_allowed",
    "convert",
    "equals",
    "list_of",
    "list_val",
    "map_of",
    "map_val",
    "merge_length_bounds",
    "merge_string_prefix",
    "new_provider",
    "null_val",
    "number_val",
    "object_of",
    "object_val",
    "refine",
    "safe_prefix_boundary",
    "set_of",
    "set_val",
    "simple_display_value",
    "string_val",
    "tuple_of",
    "tuple_val",
    "unknown_val",
]
