"""
Log page sources.

A source supplies pages of log records to the registry: from memory, from a
capture file on disk, or from a remote HTTP endpoint.
"""

from .base import CallableLogSource, LogSource, coerce_page
from .http_source import HttpLogSource
from .memory_source import MemoryLogSource
from .replay_source import LogCapture, ReplayLogSource

__all__ = [
    "LogSource",
    "CallableLogSource",
    "coerce_page",
    "MemoryLogSource",
    "ReplayLogSource",
    "LogCapture",
    "HttpLogSource",
]
