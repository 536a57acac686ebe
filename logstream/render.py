"""Rendering of buffered log records as document text."""

from datetime import datetime, timezone
from typing import Iterable, Optional

from .models import LogRecord, RenderOptions

# Width of format_timestamp() output, e.g. "1970-01-01T00:00:00+00:00"
TIMESTAMP_WIDTH = 25
TIMESTAMP_PADDING = " " * TIMESTAMP_WIDTH


def format_timestamp(timestamp: int) -> str:
    """
    Format epoch milliseconds as a local ISO-8601 instant with UTC offset.

    Values outside the range datetime can represent are rendered as the raw
    number, fitted to TIMESTAMP_WIDTH.
    """
    try:
        instant = datetime.fromtimestamp(timestamp / 1000, tz=timezone.utc).astimezone()
    except (ValueError, OverflowError, OSError):
        return str(timestamp).rjust(TIMESTAMP_WIDTH)[:TIMESTAMP_WIDTH]
    return instant.isoformat(timespec="seconds")


def render_record(record: LogRecord, timestamps: bool = False) -> str:
    """Render a single record."""
    if not timestamps:
        return record.message
    if record.timestamp is None:
        prefix = TIMESTAMP_PADDING
    else:
        prefix = format_timestamp(record.timestamp)
    return f"{prefix}\t{record.message}"


def render_records(records: Iterable[LogRecord], options: Optional[RenderOptions] = None) -> str:
    """
    Concatenate records in order without separators.

    Messages carry their own line terminators. With ``options.timestamps`` each
    record is prefixed by its timestamp, or blank padding of the same width when
    it has none, and a tab.
    """
    timestamps = bool(options and options.timestamps)
    return "".join(render_record(record, timestamps) for record in records)
