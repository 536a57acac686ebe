"""
Registry of log stream documents.

The registry maps a document key (see ``logstream.uri``) to a buffer of log
records and renders that buffer as text on demand. Records are fetched from a
``LogSource`` one page at a time: the initial page on registration, then
older pages prepended (head) or newer pages appended (tail).

Pages are merged exactly in the order the source returns them. The registry
never sorts by timestamp or removes duplicates, so a source must return each
page already ordered for the direction it was asked for.

There is no locking: callers are expected to serialize operations on one key,
as a single-threaded event loop does.
"""

from typing import Callable, Dict, List, Optional, Union

from .models import Direction, LogPage, RenderOptions, StreamBuffer
from .module_registry import module_registry
from .render import render_records
from .sources.base import LogSource
from .uri import LogStreamUri, to_key

log = module_registry.get_logger("registry")

Identifier = Union[LogStreamUri, str]
ChangeListener = Callable[[str], None]


class LogStreamRegistry:
    """In-memory cache of log stream buffers keyed by document path."""

    def __init__(self, entries: Optional[Dict[str, StreamBuffer]] = None):
        """Initialize the registry, optionally preloaded with ``entries``."""
        self._entries: Dict[str, StreamBuffer] = entries if entries is not None else {}
        self._change_listeners: List[ChangeListener] = []

    def has_log(self, uri: Identifier) -> bool:
        """Return whether a document is registered."""
        return to_key(uri) in self._entries

    async def register_log(self, uri: Identifier, source: LogSource) -> None:
        """
        Register a document and store its initial page.

        Does nothing if the document is already registered; the source is not
        called in that case. Exceptions raised by the source propagate and
        leave the document unregistered.
        """
        key = to_key(uri)
        if key in self._entries:
            log.debug("Log already registered: %s", key)
            return

        page = await source.fetch_page(uri)

        if key in self._entries:
            # Registered by another caller while this fetch was in flight
            log.debug("Log registered during fetch, keeping existing buffer: %s", key)
            return

        self._entries[key] = StreamBuffer(
            records=list(page.records),
            next_token=page.next_forward_token,
            previous_token=page.next_backward_token,
        )
        log.debug("Registered log %s with %d records", key, len(page.records))
        self._notify(key)

    async def update_log(self, uri: Identifier, direction: Union[Direction, str], source: LogSource) -> None:
        """
        Fetch another page and merge it into a registered document.

        ``Direction.TAIL`` appends the page after the existing records,
        ``Direction.HEAD`` prepends it before them. Unregistered documents are
        ignored. Exceptions raised by the source propagate and leave the buffer
        unchanged.
        """
        direction = Direction.parse(direction)
        key = to_key(uri)
        buffer = self._entries.get(key)
        if buffer is None:
            log.debug("Ignoring %s update for unregistered log: %s", direction.value, key)
            return

        page = await source.fetch_page(uri, direction, buffer.token_for(direction))

        if self._entries.get(key) is not buffer:
            log.debug("Log deregistered during fetch, dropping page: %s", key)
            return

        self._merge(buffer, direction, page)
        log.debug(
            "Merged %d records at %s of %s (%d total)",
            len(page.records),
            direction.value,
            key,
            len(buffer.records),
        )
        self._notify(key)

    def _merge(self, buffer: StreamBuffer, direction: Direction, page: LogPage) -> None:
        """Splice a page into a buffer and advance that direction's token."""
        if direction is Direction.HEAD:
            buffer.records[:0] = page.records
            if page.next_backward_token is not None:
                buffer.previous_token = page.next_backward_token
        else:
            buffer.records.extend(page.records)
            if page.next_forward_token is not None:
                buffer.next_token = page.next_forward_token

    def get_log_content(self, uri: Identifier, options: Optional[RenderOptions] = None) -> Optional[str]:
        """Render a document's records as text, or return None if it is not registered."""
        buffer = self._entries.get(to_key(uri))
        if buffer is None:
            return None
        return render_records(buffer.records, options)

    def get_log_data(self, uri: Identifier) -> Optional[StreamBuffer]:
        """Return a snapshot of a document's buffer, or None if it is not registered."""
        buffer = self._entries.get(to_key(uri))
        return buffer.copy() if buffer is not None else None

    def get_registered_logs(self) -> List[str]:
        """Return the keys of all registered documents."""
        return list(self._entries.keys())

    def deregister_log(self, uri: Identifier) -> None:
        """Remove a document and its records; does nothing if it is not registered."""
        key = to_key(uri)
        if self._entries.pop(key, None) is not None:
            log.debug("Deregistered log: %s", key)
            self._notify(key)

    def clear(self) -> None:
        """Remove every registered document."""
        keys = list(self._entries.keys())
        self._entries.clear()
        for key in keys:
            self._notify(key)

    def add_change_listener(self, callback: ChangeListener) -> None:
        """Add a callback invoked with the key of every document that changes."""
        self._change_listeners.append(callback)

    def remove_change_listener(self, callback: ChangeListener) -> bool:
        """Remove a change callback; returns False if it was not added."""
        try:
            self._change_listeners.remove(callback)
        except ValueError:
            return False
        return True

    def _notify(self, key: str) -> None:
        """Invoke change listeners."""
        for callback in list(self._change_listeners):
            try:
                callback(key)
            except Exception as e:
                log.error("Change listener failed for %s: %s", key, e)
