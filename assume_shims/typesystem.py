"""
assume_shims/typesystem.py
══════════════════════════

Static types carried by every value the assumption engine handles.

    ┌─────────────────────────────────────────────────────────────┐
    │  Type                                                       │
    │    ├── primitives     — string, number, bool                │
    │    ├── collections    — list(T), set(T), map(T)             │
    │    ├── structural     — object({name: T}), tuple([T, …])    │
    │    └── dynamic        — not yet resolved to anything        │
    └─────────────────────────────────────────────────────────────┘

Types are immutable and hashable so that values (and the refinements
attached to them) can be shared freely between threads.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Final, Mapping, Optional, Sequence, Tuple


class TypeKind(Enum):
    """Discriminator for :class:`Type`."""
    DYNAMIC = "dynamic"
    STRING = "string"
    NUMBER = "number"
    BOOL = "bool"
    LIST = "list"
    SET = "set"
    MAP = "map"
    OBJECT = "object"
    TUPLE = "tuple"


_PRIMITIVES = frozenset({TypeKind.STRING, TypeKind.NUMBER, TypeKind.BOOL})
_COLLECTIONS = frozenset({TypeKind.LIST, TypeKind.SET, TypeKind.MAP})


@dataclass(frozen=True)
class Type:
    """
    A static type.

    Attributes
    ----------
    kind       : TypeKind discriminator
    element    : element type of list / set / map
    attributes : ``(name, type)`` pairs of an object type, sorted by name
    elements   : positional element types of a tuple type
    """
    kind: TypeKind
    element: Optional[Type] = None
    attributes: Tuple[Tuple[str, Type], ...] = ()
    elements: Tuple[Type, ...] = ()

    def __post_init__(self) -> None:
        if self.kind in _COLLECTIONS and self.element is None:
            raise TypeError(f"{self.kind.value} type requires an element type")

    @property
    def is_dynamic(self) -> bool:
        return self.kind is TypeKind.DYNAMIC

    @property
    def is_primitive(self) -> bool:
        return self.kind in _PRIMITIVES

    @property
    def is_collection(self) -> bool:
        """True for list, set and map types (the length-bounded kinds)."""
        return self.kind in _COLLECTIONS

    def attribute_types(self) -> dict:
        return dict(self.attributes)

    def friendly_name(self) -> str:
        """Human-oriented name used in error messages."""
        if self.kind in _COLLECTIONS:
            return f"{self.kind.value} of {self.element.friendly_name()}"
        return self.kind.value

    def __str__(self) -> str:
        return self.friendly_name()


STRING: Final = Type(TypeKind.STRING)
NUMBER: Final = Type(TypeKind.NUMBER)
BOOL: Final = Type(TypeKind.BOOL)
DYNAMIC: Final = Type(TypeKind.DYNAMIC)


def list_of(element: Type) -> Type:
    return Type(TypeKind.LIST, element=element)


def set_of(element: Type) -> Type:
    return Type(TypeKind.SET, element=element)


def map_of(element: Type) -> Type:
    return Type(TypeKind.MAP, element=element)


def object_of(attributes: Mapping[str, Type]) -> Type:
    return Type(TypeKind.OBJECT, attributes=tuple(sorted(attributes.items())))


def tuple_of(elements: Sequence[Type]) -> Type:
    return Type(TypeKind.TUPLE, elements=tuple(elements))
