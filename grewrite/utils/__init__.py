"""Shared utilities for grewrite."""

from .validation import (  # noqa: F401
    AmbiguousEdgeError,
    DanglingEdgeError,
    DanglingNodeError,
    DuplicateLabelError,
    PreconditionError,
    StructureError,
    ValidationError,
)

__all__ = [
    'ValidationError',
    'StructureError',
    'DanglingNodeError',
    'DanglingEdgeError',
    'AmbiguousEdgeError',
    'DuplicateLabelError',
    'PreconditionError',
]
