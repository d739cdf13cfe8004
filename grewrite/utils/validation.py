"""Error kinds raised by rule derivation and rule application.

Two tiers are kept apart:
- StructureError and its subclasses report a malformed rule graph. They are
  configuration errors and always reach the caller.
- PreconditionError reports a programmer error (an empty pattern, or a match
  that does not fit the rule it is applied with).

Every error carries a short machine-readable ``code`` plus a ``context`` dict
with the offending names/ids, so callers can log or branch on them without
parsing messages.
"""

from __future__ import annotations

from typing import Any


class ValidationError(Exception):
    """Base error with a stable code and structured context."""

    def __init__(self, code: str, message: str, **context: Any) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.context = context

    def __str__(self) -> str:
        if not self.context:
            return f"[{self.code}] {self.message}"
        details = ", ".join(f"{k}={v!r}" for k, v in sorted(self.context.items()))
        return f"[{self.code}] {self.message} ({details})"


class StructureError(ValidationError):
    """The annotated rule graph is malformed (e.g. "L" or "R" is missing)."""


class DanglingNodeError(StructureError):
    """A node belongs to neither the "L" nor the "R" subgraph."""


class DanglingEdgeError(StructureError):
    """An edge belongs to neither side, or touches a node outside its side."""


class AmbiguousEdgeError(StructureError):
    """An edge belongs to both the "L" and the "R" subgraph."""


class DuplicateLabelError(StructureError):
    """A non-empty edge label is used more than once on one side."""


class PreconditionError(ValidationError):
    """An operation was called with inputs that violate its contract."""


__all__ = [
    "ValidationError",
    "StructureError",
    "DanglingNodeError",
    "DanglingEdgeError",
    "AmbiguousEdgeError",
    "DuplicateLabelError",
    "PreconditionError",
]
