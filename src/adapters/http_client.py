"""HTTP adapter for feed retrieval.

Implements the core HttpPort with urllib. The blocking call runs in a worker
thread so one slow source does not stall the event loop.
"""

from __future__ import annotations

import asyncio
import urllib.error
import urllib.request

from core.errors import FetchError

USER_AGENT = "telerelay/0.1"


class UrllibHttpClient:
    """HttpPort adapter backed by urllib.request."""

    def __init__(self, timeout: float = 30) -> None:
        self._timeout = timeout

    def _get(self, url: str) -> bytes:
        request = urllib.request.Request(url, method="GET")
        request.add_header("User-Agent", USER_AGENT)
        request.add_header("Accept", "application/json")
        try:
            with urllib.request.urlopen(request, timeout=self._timeout) as response:
                return response.read()
        except urllib.error.HTTPError as e:
            # Error bodies still carry the API status, so hand them to the decoder.
            body = e.read()
            if body:
                return body
            raise FetchError(f"HTTP error {e.code} without body") from e
        except (urllib.error.URLError, OSError) as e:
            raise FetchError(f"Request failed: {e}") from e

    async def get(self, url: str) -> bytes:
        """Fetch ``url`` and return the raw response body."""

        return await asyncio.to_thread(self._get, url)
