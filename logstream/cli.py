#!/usr/bin/env python3
"""Command-line interface entry points for logstream."""

import argparse
import asyncio
import sys
from typing import List, Optional

from .config_loader import load_config
from .errors import LogStreamError
from .logging_setup import setup_logging
from .models import Direction, RenderOptions
from .module_registry import module_registry
from .registry import LogStreamRegistry
from .sources import HttpLogSource, LogCapture, LogSource, ReplayLogSource
from .uri import LogStreamUri, as_uri


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    """Add --config and one --debug-<subsystem> flag per registered subsystem."""
    parser.add_argument("--config", help="Path to YAML config file (default: logstream.yaml)")
    for flag, name in sorted(module_registry.get_debug_flags().items()):
        parser.add_argument(
            flag,
            dest="debug_subsystems",
            action="append_const",
            const=name,
            help=f"Show debug output for: {module_registry.get_module_info(name)['description']}",
        )


async def page_document(
    registry: LogStreamRegistry,
    source: LogSource,
    uri: LogStreamUri,
    head_pages: int = 0,
    tail_pages: int = 0,
) -> None:
    """Register a document and page in extra records at each end."""
    await registry.register_log(uri, source)
    for _ in range(head_pages):
        await registry.update_log(uri, Direction.HEAD, source)
    for _ in range(tail_pages):
        await registry.update_log(uri, Direction.TAIL, source)


def view_main(argv: Optional[List[str]] = None) -> int:
    """Entry point for logstream-view command."""
    parser = argparse.ArgumentParser(description="Print a log stream from a capture file as a document")
    parser.add_argument("capture_file", help="Path to capture file (JSONL, optionally gzipped)")
    parser.add_argument("stream", nargs="?", help="Stream as <group>:<stream> (default: first stream in capture)")
    parser.add_argument("--timestamps", action="store_true", help="Prefix each event with its timestamp")
    parser.add_argument("--page-size", type=int, default=None, help="Events per page")
    parser.add_argument("--head-pages", type=int, default=0, help="Older pages to load after the initial page")
    parser.add_argument("--tail-pages", type=int, default=0, help="Newer pages to load after the initial page")
    parser.add_argument("--from-head", action="store_true", help="Start at the oldest events")
    parser.add_argument("--list", action="store_true", help="List the streams in the capture and exit")
    _add_common_arguments(parser)
    args = parser.parse_args(argv)

    config = load_config(args.config)
    setup_logging(config.log_level, set(args.debug_subsystems or ()))

    try:
        source = ReplayLogSource(
            args.capture_file,
            page_size=args.page_size or config.source.page_size,
            start_from_head=args.from_head or config.source.start_from_head,
        )
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    streams = source.get_stream_names()
    if args.list:
        for name in streams:
            print(name)
        return 0

    if not args.stream and not streams:
        print("Error: capture contains no log streams", file=sys.stderr)
        return 1

    registry = LogStreamRegistry()
    try:
        uri = as_uri(args.stream or streams[0])
        asyncio.run(page_document(registry, source, uri, args.head_pages, args.tail_pages))
    except (LogStreamError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    content = registry.get_log_content(uri, RenderOptions(timestamps=args.timestamps or config.render.timestamps))
    sys.stdout.write(content or "")
    return 0


async def capture_stream(source: LogSource, uri: LogStreamUri, output: str, pages: int) -> int:
    """Fetch up to ``pages`` pages of a stream and write them to a capture file."""
    registry = LogStreamRegistry()
    await registry.register_log(uri, source)
    for _ in range(pages - 1):
        before = len(registry.get_log_data(uri).records)
        await registry.update_log(uri, Direction.HEAD, source)
        if len(registry.get_log_data(uri).records) == before:
            break

    with LogCapture(output) as capture:
        capture.capture_records(uri, registry.get_log_data(uri).records)
        return capture.record_count


def capture_main(argv: Optional[List[str]] = None) -> int:
    """Entry point for logstream-capture command."""
    parser = argparse.ArgumentParser(description="Capture a remote log stream to a file for replay")
    parser.add_argument("log_group_name", help="Log group name")
    parser.add_argument("log_stream_name", help="Log stream name")
    parser.add_argument("--output", required=True, help="Output capture file")
    parser.add_argument("--pages", type=int, default=1, help="Maximum pages to fetch, newest first (default: 1)")
    parser.add_argument("--endpoint-url", help="GetLogEvents-compatible endpoint (default: from config)")
    parser.add_argument("--region", help="Region (default: from config)")
    _add_common_arguments(parser)
    args = parser.parse_args(argv)

    config = load_config(args.config)
    setup_logging(config.log_level, set(args.debug_subsystems or ()))

    endpoint_url = args.endpoint_url or config.source.endpoint_url
    if not endpoint_url:
        print("Error: no endpoint URL (use --endpoint-url or LOGSTREAM_ENDPOINT_URL)", file=sys.stderr)
        return 1

    region = args.region or config.source.region
    source = HttpLogSource(
        endpoint_url,
        region=region,
        page_size=config.source.page_size,
        request_timeout=config.source.request_timeout,
        rate_limit_seconds=config.source.rate_limit_seconds,
    )
    uri = LogStreamUri(args.log_group_name, args.log_stream_name, region)
    try:
        count = asyncio.run(capture_stream(source, uri, args.output, max(1, args.pages)))
    except LogStreamError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        source.shutdown()

    print(f"Captured {count} events from {uri.path} to {args.output}")
    return 0


def mcp_main(argv: Optional[List[str]] = None) -> int:
    """Entry point for logstream-mcp command."""
    parser = argparse.ArgumentParser(description="Serve log stream documents over MCP (stdio)")
    parser.add_argument("--capture-file", help="Serve a capture file instead of the configured endpoint")
    _add_common_arguments(parser)
    args = parser.parse_args(argv)

    from .mcp_server import serve_mcp

    config = load_config(args.config)
    if args.capture_file:
        config.source.capture_file = args.capture_file
    setup_logging(config.log_level, set(args.debug_subsystems or ()))

    try:
        asyncio.run(serve_mcp(config))
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    if len(sys.argv) > 1 and sys.argv[1] == "mcp":
        sys.exit(mcp_main(sys.argv[2:]))
    elif len(sys.argv) > 1 and sys.argv[1] == "capture":
        sys.exit(capture_main(sys.argv[2:]))
    else:
        sys.exit(view_main())
