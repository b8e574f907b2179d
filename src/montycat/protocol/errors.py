"""Errors raised while preparing a request, before any network I/O.

Transport failures live in :mod:`montycat.transport.base`.
"""

from __future__ import annotations

from typing import Iterable, Optional


class MontycatError(Exception):
    """Base class for all montycat errors."""


class ValidationError(MontycatError, ValueError):
    """The call itself is malformed; the caller must fix it."""


class MissingFieldError(ValidationError):
    """A field declared by a schema was not supplied."""

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"missing required field: {field!r}")


class ExtraFieldError(ValidationError):
    """A field not declared by the schema was supplied."""

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"unexpected field {field!r} not declared in the schema")


class SchemaTypeError(ValidationError, TypeError):
    """A field holds a value of the wrong type."""

    def __init__(self, field: str, expected: Iterable[str], actual: str):
        self.field = field
        self.expected = tuple(expected)
        self.actual = actual

        if len(self.expected) == 1:
            wanted = self.expected[0]
        else:
            wanted = "one of " + ", ".join(self.expected)

        super().__init__(f"field {field!r} should be {wanted}, got {actual}")


class MixedSchemaError(ValidationError):
    """The items of a bulk batch declare more than one schema."""

    def __init__(self, schemas: Iterable[Optional[str]]):
        self.schemas = tuple(sorted(schemas, key=repr))
        super().__init__(
            f"bulk values must share one schema, found {list(self.schemas)!r}"
        )


class NormalizationError(MontycatError, ValueError):
    """A reference or temporal value is structurally malformed."""

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        if field is not None:
            message = f"field {field!r}: {message}"
        super().__init__(message)
