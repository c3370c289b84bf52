"""HTTP transport for providers served by a remote provider host."""

import tempfile
from typing import Any, Dict, Optional

import httpx

from ..contract.assets import (
    EXTRA_THUMBNAIL_SIZE,
    UNKNOWN_LENGTH,
    CancellationSignal,
    TypedAsset,
)
from ..contract.columns import QueryResult
from ..contract.uris import ResourceUri

HEADER_START_OFFSET = "X-Start-Offset"
HEADER_DECLARED_LENGTH = "X-Declared-Length"

# Assets larger than this spill from memory to a temporary file
SPOOL_MAX_SIZE = 1024 * 1024


class HttpProviderTransport:
    """Client for the provider host HTTP API."""

    def __init__(
        self,
        api_base: str,
        timeout: float = 30.0,
        client: Optional[httpx.Client] = None,
    ):
        """
        Initialize HTTP transport.

        Args:
            api_base: Provider host base URL (e.g., http://localhost:8000/providers)
            timeout: Request timeout in seconds
            client: Preconfigured httpx client, mainly for tests
        """
        self.api_base = api_base.rstrip("/")
        self.client = client or httpx.Client(
            timeout=timeout,
            headers={"Accept": "application/json"},
        )

    def call(
        self, uri: ResourceUri, method: str, extras: Dict[str, Any]
    ) -> Dict[str, Any]:
        """
        Invoke a provider method.

        Args:
            uri: Document URI the call is addressed to
            method: Method name
            extras: Input map

        Returns:
            Output map returned by the provider
        """
        response = self.client.post(
            f"{self.api_base}/{uri.authority}/call",
            json={
                "uri": str(uri),
                "method": method,
                "extras": extras,
            },
        )
        response.raise_for_status()

        data = response.json()
        return data.get("extras") or {}

    def query(self, uri: ResourceUri) -> QueryResult:
        """Query roots or documents addressed by a URI."""
        response = self.client.get(
            f"{self.api_base}/{uri.authority}/query",
            params={"uri": str(uri)},
        )
        response.raise_for_status()

        data = response.json()
        return QueryResult(
            rows=data.get("rows", []),
            extras=data.get("extras", {}),
        )

    def open_typed_asset(
        self,
        uri: ResourceUri,
        mime_filter: str,
        options: Dict[str, Any],
        signal: Optional[CancellationSignal] = None,
    ) -> TypedAsset:
        """
        Download a typed asset into a local spooled buffer.

        The cancellation signal is checked before the request and after
        every received chunk.

        Returns:
            TypedAsset positioned at the start of the buffer
        """
        if signal is not None:
            signal.throw_if_canceled()

        params: Dict[str, Any] = {"uri": str(uri), "mime": mime_filter}
        size = options.get(EXTRA_THUMBNAIL_SIZE)
        if size is not None:
            params["width"], params["height"] = size

        buffer = tempfile.SpooledTemporaryFile(max_size=SPOOL_MAX_SIZE)
        try:
            with self.client.stream(
                "GET", f"{self.api_base}/{uri.authority}/open", params=params
            ) as response:
                response.raise_for_status()
                for chunk in response.iter_bytes():
                    if signal is not None:
                        signal.throw_if_canceled()
                    buffer.write(chunk)

                start_offset = int(response.headers.get(HEADER_START_OFFSET, 0))
                declared_length = int(
                    response.headers.get(HEADER_DECLARED_LENGTH, UNKNOWN_LENGTH)
                )
                mime_type = response.headers.get("content-type")
        except BaseException:
            buffer.close()
            raise

        buffer.seek(0)
        return TypedAsset(
            fileobj=buffer,
            start_offset=start_offset,
            declared_length=declared_length,
            mime_type=mime_type,
        )

    def close(self) -> None:
        """Close the HTTP client."""
        self.client.close()
