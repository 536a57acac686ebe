"""
Core data structures for log stream documents.

Records and pages follow the shape of a GetLogEvents response: a page is a
list of events plus the tokens needed to fetch the next page forward (newer
events) or backward (older events).
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class Direction(Enum):
    """Which end of a buffer a fetched page is merged into."""

    HEAD = "head"  # older events, prepended
    TAIL = "tail"  # newer events, appended

    @classmethod
    def parse(cls, value) -> "Direction":
        """Return ``value`` as a Direction; accepts the enum or its string value."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ValueError(f"Unknown direction: {value!r} (expected 'head' or 'tail')") from None


@dataclass(frozen=True)
class LogRecord:
    """One log event."""

    message: str
    timestamp: Optional[int] = None  # epoch milliseconds

    @classmethod
    def from_event(cls, event: Dict[str, Any]) -> "LogRecord":
        """Build a record from a GetLogEvents-style event mapping."""
        timestamp = event.get("timestamp")
        return cls(
            message=event.get("message") or "",
            timestamp=int(timestamp) if timestamp is not None else None,
        )

    def to_event(self) -> Dict[str, Any]:
        """Convert to a GetLogEvents-style event mapping."""
        event: Dict[str, Any] = {"message": self.message}
        if self.timestamp is not None:
            event["timestamp"] = self.timestamp
        return event


@dataclass
class LogPage:
    """A page of records returned by a single fetch."""

    records: List[LogRecord] = field(default_factory=list)
    next_forward_token: Optional[str] = None
    next_backward_token: Optional[str] = None

    @classmethod
    def from_response(cls, response: Dict[str, Any]) -> "LogPage":
        """Build a page from a GetLogEvents-style response mapping."""
        return cls(
            records=[LogRecord.from_event(event) for event in response.get("events") or []],
            next_forward_token=response.get("nextForwardToken"),
            next_backward_token=response.get("nextBackwardToken"),
        )

    def token_for(self, direction: "Direction") -> Optional[str]:
        """Return the token that continues paging in ``direction``."""
        if direction is Direction.HEAD:
            return self.next_backward_token
        return self.next_forward_token


@dataclass(frozen=True)
class RenderOptions:
    """Options for rendering a buffer as text."""

    timestamps: bool = False


@dataclass
class StreamBuffer:
    """Records held for one registered log stream document."""

    records: List[LogRecord] = field(default_factory=list)
    next_token: Optional[str] = None  # forward token, used for tail updates
    previous_token: Optional[str] = None  # backward token, used for head updates

    def token_for(self, direction: Direction) -> Optional[str]:
        """Return the stored token used to fetch more records in ``direction``."""
        if direction is Direction.HEAD:
            return self.previous_token
        return self.next_token

    def copy(self) -> "StreamBuffer":
        """Return a snapshot whose record list is independent of this buffer."""
        return StreamBuffer(
            records=list(self.records),
            next_token=self.next_token,
            previous_token=self.previous_token,
        )
