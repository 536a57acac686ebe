"""
Log stream documents.

Presents a remote log stream as a text document that grows at either end:
a registry caches the records fetched so far for each document and renders
them on demand.
"""

from .errors import InvalidLogStreamUri, LogFetchError, LogStreamError
from .models import Direction, LogPage, LogRecord, RenderOptions, StreamBuffer
from .registry import LogStreamRegistry
from .render import format_timestamp, render_records
from .sources import CallableLogSource, HttpLogSource, LogCapture, LogSource, MemoryLogSource, ReplayLogSource
from .state import MementoStore
from .uri import SCHEME, LogStreamUri, as_uri, parse_uri, to_key

__version__ = "0.1.0"

__all__ = [
    "Direction",
    "LogPage",
    "LogRecord",
    "RenderOptions",
    "StreamBuffer",
    "LogStreamRegistry",
    "format_timestamp",
    "render_records",
    "LogSource",
    "CallableLogSource",
    "MemoryLogSource",
    "ReplayLogSource",
    "LogCapture",
    "HttpLogSource",
    "MementoStore",
    "SCHEME",
    "LogStreamUri",
    "as_uri",
    "parse_uri",
    "to_key",
    "LogStreamError",
    "LogFetchError",
    "InvalidLogStreamUri",
]
