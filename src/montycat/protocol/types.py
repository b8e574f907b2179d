"""Typed values that have a dedicated wire form."""

from __future__ import annotations

import datetime
import enum
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

from . import fields
from . import keys
from .errors import NormalizationError, ValidationError


class Permission(enum.Enum):
    """Permission levels accepted by grant and revoke operations."""

    READ = "read"
    WRITE = "write"
    ALL = "all"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: Union["Permission", str]) -> "Permission":
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            valid = sorted(member.value for member in cls)
            raise ValidationError(
                f"invalid permission: {value!r}. Valid: {valid}"
            ) from None


@dataclass(frozen=True)
class Pointer:
    """A reference to a key in another keyspace."""

    keyspace: str
    key: Any

    def __post_init__(self):
        if not isinstance(self.keyspace, str) or self.keyspace == "":
            raise NormalizationError(
                f"pointer keyspace must be a non-empty string, got {self.keyspace!r}"
            )

    def serialize(self) -> List[Any]:
        """The raw pair ``[keyspace, key]``, key as supplied."""
        return [self.keyspace, self.key]

    def resolve(self) -> List[str]:
        """The wire pair ``[keyspace, resolved_key]``."""
        return [self.keyspace, keys.resolve(self.key)]


TimeValue = Union[str, datetime.datetime, datetime.date]


def _render(value: TimeValue) -> str:
    if isinstance(value, (datetime.datetime, datetime.date)):
        return value.isoformat()
    return value


@dataclass(frozen=True)
class Timestamp:
    """A point in time, or a condition over time.

    Exactly one of the following must be given: ``timestamp`` (an absolute
    instant), both ``start`` and ``end`` (a range), ``after`` or ``before``.
    """

    timestamp: Optional[TimeValue] = None
    start: Optional[TimeValue] = None
    end: Optional[TimeValue] = None
    after: Optional[TimeValue] = None
    before: Optional[TimeValue] = None

    def __post_init__(self):
        ranged = self.start is not None or self.end is not None
        if ranged and (self.start is None or self.end is None):
            raise NormalizationError("timestamp range requires both start and end")

        chosen = [
            name
            for name, present in (
                ("timestamp", self.timestamp is not None),
                ("range", ranged),
                ("after", self.after is not None),
                ("before", self.before is not None),
            )
            if present
        ]

        if len(chosen) != 1:
            raise NormalizationError(
                "timestamp requires exactly one of timestamp, start/end, "
                f"after or before; got {chosen or 'none'}"
            )

    def serialize(self) -> Union[str, Dict[str, Any]]:
        if self.start is not None:
            return {fields.RANGE_TIMESTAMP: [_render(self.start), _render(self.end)]}
        if self.after is not None:
            return {fields.AFTER_TIMESTAMP: _render(self.after)}
        if self.before is not None:
            return {fields.BEFORE_TIMESTAMP: _render(self.before)}
        return _render(self.timestamp)


@dataclass(frozen=True)
class Limit:
    """A result window, ``start`` inclusive to ``stop``."""

    start: int = 0
    stop: int = 0

    def __post_init__(self):
        for name in ("start", "stop"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ValidationError(
                    f"limit {name} must be a non-negative integer, got {value!r}"
                )

    def serialize(self) -> Dict[str, int]:
        return {"start": self.start, "stop": self.stop}

    @classmethod
    def parse(cls, value: Any) -> Optional["Limit"]:
        """Accept None, a Limit, a ``[start, stop]`` pair or a mapping."""

        if value is None:
            return None
        if isinstance(value, cls):
            return value
        if isinstance(value, dict):
            if set(value) != {"start", "stop"}:
                raise ValidationError(
                    f"limit mapping must hold exactly 'start' and 'stop', got {sorted(value)}"
                )
            return cls(value["start"], value["stop"])
        if isinstance(value, (list, tuple)):
            if len(value) == 0:
                return None
            if len(value) != 2:
                raise ValidationError(
                    "limit must be a list of two integers [start, stop], "
                    f"got {list(value)!r}"
                )
            return cls(value[0], value[1])

        raise ValidationError(f"unsupported limit: {value!r}")
