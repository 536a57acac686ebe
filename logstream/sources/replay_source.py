"""
Log stream capture and replay.

A capture file is JSONL: a header entry, one ``log_event`` entry per record
(tagged with the stream path it came from), and a footer entry. Files ending
in ``.gz`` or starting with the gzip magic bytes are read compressed.
"""

import gzip
import json
import time
from pathlib import Path
from typing import Iterable, Optional, TextIO

from ..models import LogRecord
from ..module_registry import module_registry
from ..uri import to_key
from .base import Identifier
from .memory_source import MemoryLogSource

log = module_registry.get_logger("capture")

CAPTURE_VERSION = "1.0"


class LogCapture:
    """Writes log records to a capture file for later replay."""

    def __init__(self, capture_file: str):
        """Initialize capture to specified file."""
        self._capture_file = Path(capture_file)
        self._file_handle: Optional[TextIO] = None
        self._start_time = time.time()
        self._record_count = 0

        self._capture_file.parent.mkdir(parents=True, exist_ok=True)
        log.info("Log capture initialized: %s", self._capture_file)

    @property
    def record_count(self) -> int:
        """Number of records written so far."""
        return self._record_count

    def start_capture(self) -> None:
        """Open the capture file and write the header."""
        self._file_handle = open(self._capture_file, "w", encoding="utf-8")
        self._start_time = time.time()
        self._record_count = 0
        self._write_entry(
            {
                "type": "capture_header",
                "version": CAPTURE_VERSION,
                "start_time": self._start_time,
                "description": "Log stream capture",
            }
        )
        log.info("Started log capture to: %s", self._capture_file)

    def capture_records(self, uri: Identifier, records: Iterable[LogRecord]) -> None:
        """Write records of one stream, in order."""
        if not self._file_handle:
            return

        stream = to_key(uri)
        for record in records:
            entry = {"type": "log_event", "stream": stream}
            entry.update(record.to_event())
            self._write_entry(entry)
            self._record_count += 1

    def stop_capture(self) -> None:
        """Write the footer and close the file."""
        if not self._file_handle:
            return

        end_time = time.time()
        self._write_entry(
            {
                "type": "capture_footer",
                "end_time": end_time,
                "record_count": self._record_count,
            }
        )
        self._file_handle.close()
        self._file_handle = None
        log.info("Stopped log capture: %d records in %.2f seconds", self._record_count, end_time - self._start_time)

    def _write_entry(self, entry: dict) -> None:
        """Write a JSON entry to the capture file."""
        json.dump(entry, self._file_handle)
        self._file_handle.write("\n")
        self._file_handle.flush()

    def __enter__(self) -> "LogCapture":
        self.start_capture()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop_capture()


class ReplayLogSource(MemoryLogSource):
    """Serves the records of a capture file as a log source."""

    def __init__(self, capture_file: str, page_size: int = 100, start_from_head: bool = False):
        """
        Load a capture file.

        Args:
            capture_file: Path to a capture written by LogCapture (supports .gz compression)
            page_size: Maximum records per page
            start_from_head: Serve the oldest records as the initial page

        Raises:
            FileNotFoundError: If the capture file does not exist
        """
        super().__init__(page_size=page_size, start_from_head=start_from_head, source_id="replay", source_name="Replay")
        self._capture_file = Path(capture_file)

        if not self._capture_file.exists():
            raise FileNotFoundError(f"Capture file not found: {capture_file}")

        self._load()

    def _is_gzipped(self) -> bool:
        """Check if the capture file is gzipped."""
        if self._capture_file.suffix.lower() == ".gz":
            return True

        with open(self._capture_file, "rb") as f:
            return f.read(2) == b"\x1f\x8b"

    def _open_file(self):
        """Open the capture file, handling both regular and gzipped files."""
        if self._is_gzipped():
            return gzip.open(self._capture_file, "rt", encoding="utf-8")
        return open(self._capture_file, "r", encoding="utf-8")

    def _load(self) -> None:
        """Read every log_event entry into memory."""
        loaded = 0
        with self._open_file() as f:
            for line in f:
                line = line.strip()
                if not line:
                    continue

                try:
                    entry = json.loads(line)
                except json.JSONDecodeError as e:
                    log.warning("Skipping invalid JSON line: %s", e)
                    continue

                if entry.get("type") != "log_event" or "stream" not in entry:
                    continue

                self.add_records(entry["stream"], [LogRecord.from_event(entry)])
                loaded += 1

        log.info("Loaded %d records in %d streams from %s", loaded, len(self.get_stream_names()), self._capture_file)
