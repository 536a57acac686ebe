"""
Base classes for log page sources.

A source fetches pages of log records for a document. The registry calls it
with the direction to extend and the token it stored from the previous page
in that direction; the source owns pagination, rate limiting and transport
errors.
"""

import asyncio
import inspect
import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Dict, Optional, Union

from ..models import Direction, LogPage, LogRecord
from ..uri import LogStreamUri

Identifier = Union[LogStreamUri, str]


class LogSource(ABC):
    """Base class for log page sources."""

    def __init__(self, source_id: str, source_name: str):
        """Initialize log source with ID and name."""
        self.source_id = source_id
        self.source_name = source_name
        self._rate_limit_delay = 0.0
        self._last_request_time = 0.0
        self.logger = logging.getLogger(f"logstream.sources.{source_id}")

    @abstractmethod
    async def fetch_page(
        self,
        uri: Identifier,  # noqa: U100 - abstract method, used in subclasses
        direction: Optional[Direction] = None,  # noqa: U100
        token: Optional[str] = None,  # noqa: U100
    ) -> LogPage:
        """
        Fetch one page of records.

        Args:
            uri: Document whose stream is read.
            direction: None for the initial page, otherwise the end being extended.
            token: Token stored from the previous page in ``direction``.
        """
        return LogPage()

    async def _rate_limit(self) -> None:
        """Apply rate limiting."""
        now = time.time()
        time_since_last = now - self._last_request_time
        if time_since_last < self._rate_limit_delay:
            await asyncio.sleep(self._rate_limit_delay - time_since_last)
        self._last_request_time = time.time()

    def get_source_info(self) -> Dict[str, Any]:
        """Get source information for debugging."""
        return {
            "source_id": self.source_id,
            "source_name": self.source_name,
            "rate_limit_delay": self._rate_limit_delay,
        }


FetchFunction = Callable[[Identifier, Optional[Direction], Optional[str]], Awaitable[Any]]


def coerce_page(result: Any) -> LogPage:
    """Convert a fetch result into a LogPage.

    Accepts a LogPage, a GetLogEvents-style response mapping, or a sequence of
    LogRecord objects / event mappings.
    """
    if isinstance(result, LogPage):
        return result
    if result is None:
        return LogPage()
    if isinstance(result, dict):
        return LogPage.from_response(result)
    return LogPage(
        records=[item if isinstance(item, LogRecord) else LogRecord.from_event(item) for item in result]
    )


class CallableLogSource(LogSource):
    """Adapts an async fetch function to the LogSource interface."""

    def __init__(self, fetch_fn: FetchFunction, source_id: str = "callable"):
        """Initialize with ``fetch_fn(uri, direction, token)`` or any leading subset of those arguments."""
        super().__init__(source_id, "Callable")
        self._fetch_fn = fetch_fn
        self._arg_count = _positional_arg_count(fetch_fn, 3)

    async def fetch_page(
        self, uri: Identifier, direction: Optional[Direction] = None, token: Optional[str] = None
    ) -> LogPage:
        """Call the wrapped function and convert its result."""
        # A zero-argument closure already knows its stream
        result = await self._fetch_fn(*(uri, direction, token)[: self._arg_count])
        return coerce_page(result)


def _positional_arg_count(fn: Callable, limit: int) -> int:
    """Return how many positional arguments ``fn`` accepts, capped at ``limit``."""
    try:
        parameters = inspect.signature(fn).parameters.values()
    except (TypeError, ValueError):
        return limit
    count = 0
    for p in parameters:
        if p.kind == p.VAR_POSITIONAL:
            return limit
        if p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD):
            count += 1
    return min(count, limit)
