"""
In-memory log source.

Serves pages out of record lists held in memory, with the same token
semantics as GetLogEvents: tokens mark a position in the stream, forward
pages move towards newer records, backward pages towards older ones, and an
exhausted direction returns an empty page with an unchanged token.
"""

from typing import Dict, Iterable, List, Optional, Tuple

from ..errors import LogFetchError
from ..models import Direction, LogPage, LogRecord
from ..uri import to_key
from .base import Identifier, LogSource

FORWARD_PREFIX = "f/"
BACKWARD_PREFIX = "b/"


class MemoryLogSource(LogSource):
    """Log source backed by in-memory record lists keyed by document path."""

    def __init__(
        self,
        streams: Optional[Dict[str, Iterable[LogRecord]]] = None,
        page_size: int = 100,
        start_from_head: bool = False,
        source_id: str = "memory",
        source_name: str = "Memory",
    ):
        """
        Initialize the source.

        Args:
            streams: Mapping of document (URI or key) to records, oldest first
            page_size: Maximum records per page
            start_from_head: Serve the oldest records as the initial page instead of the newest
        """
        super().__init__(source_id, source_name)
        if page_size < 1:
            raise ValueError("page_size must be at least 1")
        self.page_size = page_size
        self.start_from_head = start_from_head
        self._streams: Dict[str, List[LogRecord]] = {}
        for uri, records in (streams or {}).items():
            self.add_records(uri, records)

    def add_records(self, uri: Identifier, records: Iterable[LogRecord]) -> None:
        """Append records to a stream, creating it if needed."""
        self._streams.setdefault(to_key(uri), []).extend(records)

    def has_stream(self, uri: Identifier) -> bool:
        """Check whether a stream exists."""
        return to_key(uri) in self._streams

    def get_stream_names(self) -> List[str]:
        """Get the keys of all streams."""
        return list(self._streams.keys())

    async def fetch_page(
        self, uri: Identifier, direction: Optional[Direction] = None, token: Optional[str] = None
    ) -> LogPage:
        """Return the page adjacent to ``token`` in ``direction``."""
        key = to_key(uri)
        records = self._streams.get(key)
        if records is None:
            raise LogFetchError(f"Log stream not found: {key}")

        await self._rate_limit()

        start, end = self._page_bounds(len(records), direction, token)
        self.logger.debug(
            "Serving %s page of %s: records %d-%d",
            direction.value if direction else "initial",
            key,
            start,
            end,
        )
        return LogPage(
            records=records[start:end],
            next_forward_token=f"{FORWARD_PREFIX}{end}",
            next_backward_token=f"{BACKWARD_PREFIX}{start}",
        )

    def _page_bounds(self, total: int, direction: Optional[Direction], token: Optional[str]) -> Tuple[int, int]:
        """Compute the slice served for a request."""
        if direction is None:
            if self.start_from_head:
                return 0, min(total, self.page_size)
            return max(0, total - self.page_size), total

        if direction is Direction.TAIL:
            # No token: nothing newer is known
            position = _parse_token(token, FORWARD_PREFIX, total) if token else total
            return position, min(total, position + self.page_size)

        position = _parse_token(token, BACKWARD_PREFIX, total) if token else 0
        return max(0, position - self.page_size), position


def _parse_token(token: str, prefix: str, total: int) -> int:
    """Parse a position token, clamped to the stream length."""
    if not token.startswith(prefix):
        raise LogFetchError(f"Invalid pagination token: {token!r}")
    try:
        position = int(token[len(prefix) :])
    except ValueError:
        raise LogFetchError(f"Invalid pagination token: {token!r}") from None
    return max(0, min(position, total))
