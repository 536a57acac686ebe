"""
MCP Server for log stream documents.

This module exposes the log stream registry as MCP tools: open a stream,
page more records in at either end, read the rendered document and close it.
"""

import json
from typing import Any, Dict, List, Optional

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.shared.exceptions import McpError
from mcp.types import INTERNAL_ERROR, INVALID_PARAMS, METHOD_NOT_FOUND, ErrorData, TextContent, Tool
from pydantic import BaseModel, ValidationError

from .config import AppConfig
from .errors import LogStreamError
from .models import Direction, RenderOptions
from .module_registry import module_registry
from .registry import LogStreamRegistry
from .sources import HttpLogSource, LogSource, ReplayLogSource
from .state import MementoStore
from .uri import LogStreamUri, to_key

log = module_registry.get_logger("mcp")


class OpenLogStreamInput(BaseModel):
    """Input for open_log_stream tool."""

    log_group_name: str
    log_stream_name: str
    region: str = ""


class LoadMoreInput(BaseModel):
    """Input for load_more tool."""

    uri: str
    direction: Direction = Direction.TAIL


class GetLogContentInput(BaseModel):
    """Input for get_log_content tool."""

    uri: str
    timestamps: Optional[bool] = None


class SetTimestampsInput(BaseModel):
    """Input for set_timestamps tool."""

    uri: str
    enabled: bool


class UriInput(BaseModel):
    """Input for tools taking only a document URI."""

    uri: str


class LogStreamDocument(BaseModel):
    """Summary of a registered log stream document."""

    uri: str
    key: str
    record_count: int


TOOLS = [
    Tool(
        name="open_log_stream",
        description="Open a log stream as a document and load its most recent page of events",
        inputSchema={
            "type": "object",
            "properties": {
                "log_group_name": {"type": "string", "description": "The log group name"},
                "log_stream_name": {"type": "string", "description": "The log stream name"},
                "region": {"type": "string", "description": "The region (optional)"},
            },
            "required": ["log_group_name", "log_stream_name"],
        },
    ),
    Tool(
        name="load_more",
        description="Load older (head) or newer (tail) events into an open log stream document",
        inputSchema={
            "type": "object",
            "properties": {
                "uri": {"type": "string", "description": "Document URI returned by open_log_stream"},
                "direction": {"type": "string", "enum": ["head", "tail"], "description": "Which end to extend"},
            },
            "required": ["uri"],
        },
    ),
    Tool(
        name="get_log_content",
        description="Get the text of an open log stream document",
        inputSchema={
            "type": "object",
            "properties": {
                "uri": {"type": "string", "description": "Document URI"},
                "timestamps": {"type": "boolean", "description": "Prefix each event with its timestamp"},
            },
            "required": ["uri"],
        },
    ),
    Tool(
        name="set_timestamps",
        description="Remember whether a document is rendered with timestamps",
        inputSchema={
            "type": "object",
            "properties": {
                "uri": {"type": "string", "description": "Document URI"},
                "enabled": {"type": "boolean", "description": "Show timestamps"},
            },
            "required": ["uri", "enabled"],
        },
    ),
    Tool(
        name="list_log_streams",
        description="List open log stream documents",
        inputSchema={"type": "object", "properties": {}},
    ),
    Tool(
        name="close_log_stream",
        description="Close a log stream document and discard its events",
        inputSchema={
            "type": "object",
            "properties": {"uri": {"type": "string", "description": "Document URI"}},
            "required": ["uri"],
        },
    ),
]


def _timestamps_key(key: str) -> str:
    return f"timestamps:{key}"


class LogStreamServer:
    """MCP server for log stream documents."""

    def __init__(
        self,
        registry: LogStreamRegistry,
        source: LogSource,
        state: Optional[MementoStore] = None,
        default_timestamps: bool = False,
    ):
        """Initialize the MCP server with its registry and log source."""
        self.registry = registry
        self.source = source
        self.state = state if state is not None else MementoStore()
        self.default_timestamps = default_timestamps
        self.server = Server("log-stream-server")

    def _document(self, uri: str) -> LogStreamDocument:
        data = self.registry.get_log_data(uri)
        return LogStreamDocument(uri=uri, key=to_key(uri), record_count=len(data.records) if data else 0)

    def _require_registered(self, uri: str) -> None:
        if not self.registry.has_log(uri):
            raise McpError(ErrorData(code=INVALID_PARAMS, message=f"Log stream is not open: {uri}"))

    async def open_log_stream(self, log_group_name: str, log_stream_name: str, region: str = "") -> LogStreamDocument:
        """Register a log stream document, fetching its initial page."""
        uri = LogStreamUri(log_group_name=log_group_name, log_stream_name=log_stream_name, region=region)
        await self.registry.register_log(uri, self.source)
        log.info("Opened log stream %s", uri.path)
        return self._document(str(uri))

    async def load_more(self, uri: str, direction: Direction = Direction.TAIL) -> LogStreamDocument:
        """Extend a document at its head or tail."""
        self._require_registered(uri)
        await self.registry.update_log(uri, direction, self.source)
        return self._document(uri)

    def get_log_content(self, uri: str, timestamps: Optional[bool] = None) -> str:
        """Render a document, using the remembered timestamp preference if not given."""
        self._require_registered(uri)
        if timestamps is None:
            timestamps = self.state.get(_timestamps_key(to_key(uri)), self.default_timestamps)
        return self.registry.get_log_content(uri, RenderOptions(timestamps=timestamps))

    def set_timestamps(self, uri: str, enabled: bool) -> None:
        """Remember the timestamp preference of a document."""
        self._require_registered(uri)
        self.state.update(_timestamps_key(to_key(uri)), enabled)

    def list_log_streams(self) -> List[str]:
        """List registered document keys."""
        return sorted(self.registry.get_registered_logs())

    def close_log_stream(self, uri: str) -> None:
        """Deregister a document and forget its preferences."""
        self.registry.deregister_log(uri)
        self.state.delete(_timestamps_key(to_key(uri)))
        log.info("Closed log stream %s", to_key(uri))

    async def call_tool(self, name: str, arguments: Dict[str, Any]) -> List[TextContent]:
        """Dispatch a tool call and return its result as text content."""
        try:
            if name == "open_log_stream":
                args = OpenLogStreamInput(**arguments)
                result: Any = (
                    await self.open_log_stream(args.log_group_name, args.log_stream_name, args.region)
                ).model_dump()
            elif name == "load_more":
                args = LoadMoreInput(**arguments)
                result = (await self.load_more(args.uri, args.direction)).model_dump()
            elif name == "get_log_content":
                args = GetLogContentInput(**arguments)
                return [TextContent(type="text", text=self.get_log_content(args.uri, args.timestamps))]
            elif name == "set_timestamps":
                args = SetTimestampsInput(**arguments)
                self.set_timestamps(args.uri, args.enabled)
                result = {"uri": args.uri, "timestamps": args.enabled}
            elif name == "list_log_streams":
                result = {"log_streams": self.list_log_streams()}
            elif name == "close_log_stream":
                args = UriInput(**arguments)
                self.close_log_stream(args.uri)
                result = {"uri": args.uri, "closed": True}
            else:
                raise McpError(ErrorData(code=METHOD_NOT_FOUND, message=f"Unknown tool: {name}"))
        except McpError:
            raise
        except (ValidationError, ValueError) as e:
            raise McpError(ErrorData(code=INVALID_PARAMS, message=f"Invalid arguments for {name}: {e}")) from e
        except LogStreamError as e:
            log.warning("Tool %s failed: %s", name, e)
            raise McpError(ErrorData(code=INTERNAL_ERROR, message=f"Failed to {name.replace('_', ' ')}: {e}")) from e

        return [TextContent(type="text", text=json.dumps(result, indent=2))]

    async def serve(self) -> None:
        """Run the MCP server."""

        @self.server.list_tools()
        async def handle_list_tools() -> list[Tool]:
            """List available tools."""
            return TOOLS

        @self.server.call_tool()
        async def handle_call_tool(name: str, arguments: dict) -> list[TextContent]:
            """Handle tool calls."""
            return await self.call_tool(name, arguments or {})

        async with stdio_server() as (read_stream, write_stream):
            await self.server.run(read_stream, write_stream, self.server.create_initialization_options())


def create_source(config: AppConfig) -> LogSource:
    """Build the log source selected by configuration."""
    source_config = config.source
    if source_config.capture_file:
        return ReplayLogSource(
            source_config.capture_file,
            page_size=source_config.page_size,
            start_from_head=source_config.start_from_head,
        )
    if source_config.endpoint_url:
        return HttpLogSource(
            source_config.endpoint_url,
            region=source_config.region,
            page_size=source_config.page_size,
            start_from_head=source_config.start_from_head,
            request_timeout=source_config.request_timeout,
            rate_limit_seconds=source_config.rate_limit_seconds,
        )
    raise ValueError("No log source configured: set source.capture_file or source.endpoint_url")


async def serve_mcp(config: AppConfig) -> None:
    """Entry point for running the MCP server."""
    registry = LogStreamRegistry()
    source = create_source(config)
    server = LogStreamServer(registry, source, default_timestamps=config.render.timestamps)
    try:
        await server.serve()
    finally:
        registry.clear()
        if hasattr(source, "shutdown"):
            source.shutdown()
