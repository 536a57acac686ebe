"""
HTTP log source.

Fetches pages from an endpoint that accepts a GetLogEvents request body as
JSON and answers with a GetLogEvents response body.
"""

import asyncio
import json
import urllib.error
import urllib.request
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, Optional

from ..errors import LogFetchError
from ..models import Direction, LogPage
from ..uri import as_uri
from .base import Identifier, LogSource


class HttpLogSource(LogSource):
    """Log source reading GetLogEvents pages over HTTP."""

    def __init__(
        self,
        endpoint_url: str,
        region: str = "us-east-1",
        page_size: int = 100,
        start_from_head: bool = False,
        request_timeout: float = 10.0,
        rate_limit_seconds: float = 0.2,
    ):
        """Initialize HTTP source for ``endpoint_url``."""
        super().__init__("http", "HTTP")
        self._endpoint_url = endpoint_url
        self._region = region
        self._page_size = page_size
        self._start_from_head = start_from_head
        self._request_timeout = request_timeout
        self._rate_limit_delay = rate_limit_seconds
        self._executor = ThreadPoolExecutor(max_workers=2)

    def build_request_body(
        self, uri: Identifier, direction: Optional[Direction] = None, token: Optional[str] = None
    ) -> Dict[str, Any]:
        """Build the GetLogEvents request body for a fetch."""
        stream = as_uri(uri)
        body: Dict[str, Any] = {
            "logGroupName": stream.log_group_name,
            "logStreamName": stream.log_stream_name,
            "limit": self._page_size,
        }
        if direction is None:
            body["startFromHead"] = self._start_from_head
        if token:
            body["nextToken"] = token
        return body

    def _post_sync(self, body: Dict[str, Any], region: str) -> Dict[str, Any]:
        """Perform the HTTP request for thread pool execution."""
        req = urllib.request.Request(
            self._endpoint_url,
            data=json.dumps(body).encode("utf-8"),
            headers={
                "Content-Type": "application/json",
                "Accept": "application/json",
                "X-Region": region,
            },
            method="POST",
        )
        try:
            with urllib.request.urlopen(req, timeout=self._request_timeout) as response:
                return json.loads(response.read().decode("utf-8"))
        except urllib.error.HTTPError as e:
            raise LogFetchError(f"Log endpoint returned HTTP {e.code} for {body['logStreamName']}") from e
        except (urllib.error.URLError, OSError) as e:
            raise LogFetchError(f"Log endpoint request failed: {e}") from e
        except (ValueError, UnicodeDecodeError) as e:
            raise LogFetchError(f"Log endpoint returned invalid JSON: {e}") from e

    async def fetch_page(
        self, uri: Identifier, direction: Optional[Direction] = None, token: Optional[str] = None
    ) -> LogPage:
        """Fetch one page from the endpoint."""
        body = self.build_request_body(uri, direction, token)
        region = as_uri(uri).region or self._region

        await self._rate_limit()

        loop = asyncio.get_running_loop()
        response = await loop.run_in_executor(self._executor, self._post_sync, body, region)
        if not isinstance(response, dict):
            raise LogFetchError("Log endpoint returned a non-object response")

        page = LogPage.from_response(response)
        self.logger.debug(
            "Fetched %d events for %s (%s)",
            len(page.records),
            body["logStreamName"],
            direction.value if direction else "initial",
        )
        return page

    def get_source_info(self) -> Dict[str, Any]:
        """Get source information for debugging."""
        info = super().get_source_info()
        info.update({"endpoint_url": self._endpoint_url, "region": self._region, "page_size": self._page_size})
        return info

    def shutdown(self) -> None:
        """Shutdown the request thread pool."""
        self._executor.shutdown(wait=True)
