"""
HTTP transport using httpx.

Issues one request and returns the raw status, headers and body. Transport
failures are raised as TransportError; status codes are not interpreted here.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, Optional, Union

import httpx

from .config import ResolvedConfig
from .console import mask_headers, print_request, print_response, print_transport_error
from .errors import ClientClosedError, TransportError
from .types import HttpMethod

logger = logging.getLogger("etcd_client.transport")


@dataclass
class RawResponse:
    """Undecoded HTTP response."""

    status_code: int
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class HttpTransport:
    """Shared, read-only HTTP transport for all calls made by one client."""

    def __init__(
        self,
        config: ResolvedConfig,
        httpx_client: Optional[httpx.AsyncClient] = None,
    ):
        self._config = config
        if httpx_client is not None:
            self._client = httpx_client
        else:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(
                    connect=config.timeout.connect,
                    read=config.timeout.read,
                    write=config.timeout.write,
                    pool=config.timeout.connect,
                ),
                verify=config.verify_ssl,
            )
        # Long-poll requests wait for the server as long as it takes
        self._long_poll_timeout = httpx.Timeout(
            connect=config.timeout.connect,
            read=None,
            write=config.timeout.write,
            pool=config.timeout.connect,
        )
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def long_poll_timeout(self) -> httpx.Timeout:
        return self._long_poll_timeout

    def build_headers(self, headers: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        """Merge configured headers, call headers and the auth header."""
        result = dict(self._config.headers)
        if headers:
            result.update(headers)
        if "accept" not in {k.lower() for k in result}:
            result["accept"] = "application/json"
        if self._config.basic_auth is not None:
            result["Authorization"] = self._config.basic_auth.header_value
        return result

    async def issue_request(
        self,
        url: str,
        method: HttpMethod = "GET",
        headers: Optional[Dict[str, str]] = None,
        body: Optional[Union[str, bytes]] = None,
        long_poll: bool = False,
    ) -> RawResponse:
        """Send one request. Raises TransportError if no response was read.

        A long_poll request has no read timeout; connect, write and pool
        timeouts still apply.
        """
        if self._closed:
            raise ClientClosedError("transport has been closed")

        request_headers = self.build_headers(headers)
        content = body.encode("utf-8") if isinstance(body, str) else body
        timeout = self._long_poll_timeout if long_poll else httpx.USE_CLIENT_DEFAULT

        logger.debug(f"HttpTransport.issue_request: {method} {url} headers={mask_headers(request_headers)}")
        if self._config.trace:
            print_request(method, url, request_headers, content)

        try:
            response = await self._client.request(
                method=method,
                url=url,
                headers=request_headers,
                content=content,
                timeout=timeout,
            )
            payload = response.content
        except (httpx.HTTPError, OSError) as e:
            logger.debug(f"HttpTransport.issue_request: {method} {url} failed: {type(e).__name__}: {e}")
            if self._config.trace:
                print_transport_error(method, url, e)
            raise TransportError(f"{method} {url} failed: {type(e).__name__}: {e}") from e

        raw = RawResponse(
            status_code=response.status_code,
            headers=dict(response.headers),
            body=payload,
        )
        logger.debug(f"HttpTransport.issue_request: {method} {url} -> {raw.status_code} ({len(payload)} bytes)")
        if self._config.trace:
            print_response(url, raw.status_code, raw.headers, payload)
        return raw

    async def close(self) -> None:
        """Close the transport. An injected httpx client is closed too."""
        if self._closed:
            return
        self._closed = True
        await self._client.aclose()
