"""
assume_shims/errors.py
══════════════════════

Caller-facing errors raised by the assumption engine.

    AssumptionError (base)
    ├── ParameterError       — malformed or out-of-domain assumption argument
    ├── TypeMismatchError    — value type cannot convert to the comparison type
    ├── AssumptionViolated   — the value provably contradicts the assumption
    └── UnknownFunctionError — no assumption registered under that name

Every error records the argument position at fault: ``0`` is the value
the assumption is about, ``n`` is the n-th assumption parameter.
"""

from __future__ import annotations

from typing import ClassVar


class AssumptionError(Exception):
    """Base class for all assumption failures."""

    code: ClassVar[str] = "assumption-error"

    def __init__(self, position: int, message: str) -> None:
        super().__init__(message)
        self.position = position
        self.message = message

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"{type(self).__name__}(position={self.position}, message={self.message!r})"


class ParameterError(AssumptionError):
    code = "bad-parameter"


class TypeMismatchError(AssumptionError):
    code = "type-mismatch"


class AssumptionViolated(AssumptionError):
    code = "assumption-violated"


class UnknownFunctionError(AssumptionError):
    code = "unknown-function"

    def __init__(self, name: str) -> None:
        super().__init__(-1, f"there is no assumption function named {name!r}")
        self.name = name
