"""
Tests for log sources.

Covers the callable adapter, the in-memory source, capture/replay files and
the HTTP source (with the network mocked out).
"""

import gzip
import io
import json
import tempfile
import urllib.error
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from logstream.errors import LogFetchError
from logstream.models import Direction, LogPage, LogRecord
from logstream.sources import (
    CallableLogSource,
    HttpLogSource,
    LogCapture,
    LogSource,
    MemoryLogSource,
    ReplayLogSource,
    coerce_page,
)
from logstream.uri import LogStreamUri

URI = LogStreamUri("group", "stream", "us-east-1")


def make_records(count):
    """Create ``count`` timestamped records, oldest first."""
    return [LogRecord(message=f"line {i}\n", timestamp=1000 + i) for i in range(count)]


class TestLogSourceBase:
    """Tests for the LogSource base class."""

    def test_cannot_instantiate_abstract(self):
        """Test LogSource is abstract."""
        with pytest.raises(TypeError):
            LogSource("x", "X")

    def test_logger_name(self):
        """Test sources log under logstream.sources."""
        assert MemoryLogSource().logger.name == "logstream.sources.memory"

    def test_source_info(self):
        """Test debugging information."""
        info = MemoryLogSource().get_source_info()

        assert info["source_id"] == "memory"
        assert info["source_name"] == "Memory"


class TestCoercePage:
    """Tests for converting fetch results."""

    def test_page_passthrough(self):
        """Test LogPage objects are returned unchanged."""
        page = LogPage()

        assert coerce_page(page) is page

    def test_none_is_empty(self):
        """Test None becomes an empty page."""
        assert coerce_page(None).records == []

    def test_mixed_list(self):
        """Test lists of records and event mappings."""
        page = coerce_page([LogRecord(message="a"), {"message": "b", "timestamp": 2}])

        assert page.records == [LogRecord(message="a"), LogRecord(message="b", timestamp=2)]


class TestCallableLogSource:
    """Tests for CallableLogSource."""

    @pytest.mark.asyncio
    async def test_passes_arguments(self):
        """Test functions with parameters receive uri, direction and token."""
        fetch = AsyncMock(return_value={"events": []})

        await CallableLogSource(fetch).fetch_page(URI, Direction.HEAD, "tok")

        fetch.assert_awaited_once_with(URI, Direction.HEAD, "tok")

    @pytest.mark.asyncio
    async def test_closure_without_parameters(self):
        """Test zero-argument closures are called without arguments."""

        async def fetch():
            return {"events": [{"message": "hi\n"}], "nextForwardToken": "n"}

        page = await CallableLogSource(fetch).fetch_page(URI)

        assert page.records == [LogRecord(message="hi\n")]
        assert page.next_forward_token == "n"

    @pytest.mark.asyncio
    async def test_function_taking_only_uri(self):
        """Test a function with one parameter receives just the stream identity."""
        calls = []

        async def fetch(uri):
            calls.append(uri)
            return [LogRecord(message="x\n")]

        page = await CallableLogSource(fetch).fetch_page(URI, Direction.TAIL, "tok")

        assert calls == [URI]
        assert page.records == [LogRecord(message="x\n")]

    @pytest.mark.asyncio
    async def test_function_taking_uri_and_direction(self):
        """Test a two-parameter function receives the identity and direction."""
        calls = []

        async def fetch(uri, direction):
            calls.append((uri, direction))
            return []

        await CallableLogSource(fetch).fetch_page(URI, Direction.HEAD, "tok")

        assert calls == [(URI, Direction.HEAD)]

    @pytest.mark.asyncio
    async def test_function_with_var_positional(self):
        """Test a function taking *args receives all three arguments."""
        calls = []

        async def fetch(*args):
            calls.append(args)
            return []

        await CallableLogSource(fetch).fetch_page(URI, Direction.TAIL, "tok")

        assert calls == [(URI, Direction.TAIL, "tok")]


class TestMemoryLogSource:
    """Tests for MemoryLogSource paging."""

    @pytest.mark.asyncio
    async def test_initial_page_is_newest(self):
        """Test the initial page holds the newest records."""
        source = MemoryLogSource({URI: make_records(5)}, page_size=2)

        page = await source.fetch_page(URI)

        assert [r.message for r in page.records] == ["line 3\n", "line 4\n"]
        assert page.next_forward_token == "f/5"
        assert page.next_backward_token == "b/3"

    @pytest.mark.asyncio
    async def test_initial_page_from_head(self):
        """Test start_from_head serves the oldest records first."""
        source = MemoryLogSource({URI: make_records(5)}, page_size=2, start_from_head=True)

        page = await source.fetch_page(URI)

        assert [r.message for r in page.records] == ["line 0\n", "line 1\n"]

    @pytest.mark.asyncio
    async def test_backward_paging(self):
        """Test backward pages walk towards the start and stop there."""
        source = MemoryLogSource({URI: make_records(5)}, page_size=2)

        page = await source.fetch_page(URI, Direction.HEAD, "b/3")
        assert [r.message for r in page.records] == ["line 1\n", "line 2\n"]

        page = await source.fetch_page(URI, Direction.HEAD, page.next_backward_token)
        assert [r.message for r in page.records] == ["line 0\n"]

        page = await source.fetch_page(URI, Direction.HEAD, page.next_backward_token)
        assert page.records == []
        assert page.next_backward_token == "b/0"

    @pytest.mark.asyncio
    async def test_forward_paging_at_end(self):
        """Test forward paging past the end returns an empty page with the same token."""
        source = MemoryLogSource({URI: make_records(3)}, page_size=2)

        page = await source.fetch_page(URI, Direction.TAIL, "f/3")

        assert page.records == []
        assert page.next_forward_token == "f/3"

    @pytest.mark.asyncio
    async def test_missing_tokens(self):
        """Test a direction without a token has nothing to serve."""
        source = MemoryLogSource({URI: make_records(3)}, page_size=2)

        assert (await source.fetch_page(URI, Direction.TAIL)).records == []
        assert (await source.fetch_page(URI, Direction.HEAD)).records == []

    @pytest.mark.asyncio
    async def test_unknown_stream(self):
        """Test fetching an unknown stream raises LogFetchError."""
        with pytest.raises(LogFetchError, match="not found"):
            await MemoryLogSource().fetch_page(URI)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("token", ["b/3", "f/x", "garbage"])
    async def test_invalid_token(self, token):
        """Test malformed or wrong-direction tokens raise LogFetchError."""
        source = MemoryLogSource({URI: make_records(3)})

        with pytest.raises(LogFetchError, match="Invalid pagination token"):
            await source.fetch_page(URI, Direction.TAIL, token)

    def test_invalid_page_size(self):
        """Test page_size must be positive."""
        with pytest.raises(ValueError):
            MemoryLogSource(page_size=0)

    def test_streams_keyed_by_path(self):
        """Test URI objects and key strings name the same stream."""
        source = MemoryLogSource({"group:stream": make_records(1)})

        assert source.has_stream(URI) is True
        assert source.get_stream_names() == ["group:stream"]


class TestCaptureReplay:
    """Tests for LogCapture and ReplayLogSource."""

    def setup_method(self):
        """Set up a temporary capture path."""
        self.temp_dir = tempfile.mkdtemp()
        self.capture_file = Path(self.temp_dir) / "capture.jsonl"

    def test_capture_file_layout(self):
        """Test header, events and footer are written."""
        with LogCapture(str(self.capture_file)) as capture:
            capture.capture_records(URI, make_records(2))

        lines = [json.loads(line) for line in self.capture_file.read_text().splitlines()]

        assert lines[0]["type"] == "capture_header"
        assert lines[1] == {"type": "log_event", "stream": "group:stream", "message": "line 0\n", "timestamp": 1000}
        assert lines[-1]["type"] == "capture_footer"
        assert lines[-1]["record_count"] == 2

    def test_capture_before_start_is_ignored(self):
        """Test records are not written before start_capture."""
        capture = LogCapture(str(self.capture_file))
        capture.capture_records(URI, make_records(2))

        assert capture.record_count == 0
        assert not self.capture_file.exists()

    @pytest.mark.asyncio
    async def test_replay_round_trip(self):
        """Test a replayed capture serves the captured records in order."""
        records = make_records(4) + [LogRecord(message="untimed\n")]
        with LogCapture(str(self.capture_file)) as capture:
            capture.capture_records(URI, records)
            capture.capture_records("other:stream", make_records(1))

        source = ReplayLogSource(str(self.capture_file), page_size=10)

        assert sorted(source.get_stream_names()) == ["group:stream", "other:stream"]
        assert (await source.fetch_page(URI)).records == records

    @pytest.mark.asyncio
    async def test_replay_gzipped(self):
        """Test gzipped captures are detected by magic bytes."""
        gz_file = Path(self.temp_dir) / "capture.log"
        with gzip.open(gz_file, "wt", encoding="utf-8") as f:
            f.write(json.dumps({"type": "log_event", "stream": "g:s", "message": "zipped\n"}) + "\n")

        source = ReplayLogSource(str(gz_file))

        assert (await source.fetch_page("g:s")).records == [LogRecord(message="zipped\n")]

    def test_replay_skips_invalid_lines(self, caplog):
        """Test invalid JSON lines are skipped with a warning."""
        self.capture_file.write_text(
            '{"type": "log_event", "stream": "g:s", "message": "ok\\n"}\nnot json\n\n{"type": "event"}\n'
        )

        source = ReplayLogSource(str(self.capture_file))

        assert source.get_stream_names() == ["g:s"]
        assert "Skipping invalid JSON line" in caplog.text

    def test_replay_missing_file(self):
        """Test a missing capture file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            ReplayLogSource(str(Path(self.temp_dir) / "missing.jsonl"))


class TestHttpLogSource:
    """Tests for HttpLogSource with urlopen mocked."""

    def setup_method(self):
        """Set up source."""
        self.source = HttpLogSource("http://logs.local/", page_size=50, rate_limit_seconds=0.0)

    def teardown_method(self):
        """Shut down the request pool."""
        self.source.shutdown()

    def _response(self, payload):
        response = MagicMock()
        response.read.return_value = json.dumps(payload).encode("utf-8")
        response.__enter__.return_value = response
        return response

    def test_request_body_initial(self):
        """Test the initial request asks for the configured end of the stream."""
        body = self.source.build_request_body(URI)

        assert body == {"logGroupName": "group", "logStreamName": "stream", "limit": 50, "startFromHead": False}

    def test_request_body_with_token(self):
        """Test paging requests carry the token."""
        body = self.source.build_request_body("group:stream", Direction.HEAD, "b/1")

        assert body["nextToken"] == "b/1"
        assert "startFromHead" not in body

    @pytest.mark.asyncio
    async def test_fetch_page(self):
        """Test a successful fetch parses the response."""
        payload = {"events": [{"timestamp": 7, "message": "remote\n"}], "nextForwardToken": "nf"}

        with patch("urllib.request.urlopen", return_value=self._response(payload)) as urlopen:
            page = await self.source.fetch_page(URI, Direction.TAIL, "f/0")

        assert page.records == [LogRecord(message="remote\n", timestamp=7)]
        assert page.next_forward_token == "nf"
        request = urlopen.call_args.args[0]
        assert json.loads(request.data)["nextToken"] == "f/0"
        assert request.get_header("X-region") == "us-east-1"

    @pytest.mark.asyncio
    async def test_http_error_raises_fetch_error(self):
        """Test HTTP errors become LogFetchError with the cause chained."""
        error = urllib.error.HTTPError("http://logs.local/", 500, "boom", {}, io.BytesIO(b""))

        with patch("urllib.request.urlopen", side_effect=error):
            with pytest.raises(LogFetchError, match="HTTP 500") as exc_info:
                await self.source.fetch_page(URI)

        assert exc_info.value.__cause__ is error

    @pytest.mark.asyncio
    async def test_connection_error_raises_fetch_error(self):
        """Test connection failures become LogFetchError."""
        with patch("urllib.request.urlopen", side_effect=urllib.error.URLError("refused")):
            with pytest.raises(LogFetchError, match="request failed"):
                await self.source.fetch_page(URI)

    @pytest.mark.asyncio
    async def test_invalid_json_raises_fetch_error(self):
        """Test undecodable responses become LogFetchError."""
        response = MagicMock()
        response.read.return_value = b"<html>"
        response.__enter__.return_value = response

        with patch("urllib.request.urlopen", return_value=response):
            with pytest.raises(LogFetchError, match="invalid JSON"):
                await self.source.fetch_page(URI)

    @pytest.mark.asyncio
    async def test_non_object_response(self):
        """Test a JSON array response is rejected."""
        with patch("urllib.request.urlopen", return_value=self._response([1, 2])):
            with pytest.raises(LogFetchError, match="non-object"):
                await self.source.fetch_page(URI)
