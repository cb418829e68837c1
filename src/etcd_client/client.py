"""
Client handle for an etcd cluster.
"""
import asyncio
import dataclasses
import logging
from typing import Any, AsyncIterator, Callable, List, Optional, Sequence, Tuple, Union

import httpx

from .config import ClientConfig, ResolvedConfig, config_from_env, resolve_config
from .dispatch import Decoder, RequestSpec, dispatch, make_operation, model_decoder
from .endpoints import Endpoint
from .errors import ClientClosedError
from .failover import FailoverState, run_with_failover
from .models import Health, VersionInfo
from .transport import HttpTransport
from .types import FailoverEventListener, Response

logger = logging.getLogger("etcd_client.client")


class Client:
    """Asynchronous client for etcd's v2 API.

    Every call is made against the configured endpoints in order until one of
    them succeeds. Construction validates the endpoints and makes no requests.

    Example:
        async with Client(["http://etcd1:2379", "http://etcd2:2379"]) as client:
            response = await kv.get(client, "/foo")
    """

    def __init__(
        self,
        endpoints: Optional[Sequence[Union[str, Endpoint]]] = None,
        *,
        config: Optional[ClientConfig] = None,
        httpx_client: Optional[httpx.AsyncClient] = None,
    ):
        if config is None:
            config = ClientConfig() if endpoints is None else ClientConfig(endpoints=endpoints)
        elif endpoints is not None:
            config = dataclasses.replace(config, endpoints=endpoints)

        self._config: ResolvedConfig = resolve_config(config)
        self._transport = HttpTransport(self._config, httpx_client)
        self._listeners: List[FailoverEventListener] = []
        logger.debug(f"Client.__init__: {len(self._config.endpoints)} endpoint(s)")

    @classmethod
    def from_env(cls, httpx_client: Optional[httpx.AsyncClient] = None) -> "Client":
        """Create a client configured from ETCD_* environment variables."""
        return cls(config=config_from_env(), httpx_client=httpx_client)

    @property
    def endpoints(self) -> Tuple[Endpoint, ...]:
        return self._config.endpoints

    @property
    def config(self) -> ResolvedConfig:
        return self._config

    @property
    def transport(self) -> HttpTransport:
        return self._transport

    def on(self, listener: FailoverEventListener) -> Callable[[], None]:
        """
        Add a failover event listener for every call made by this client.

        Returns:
            Function to remove the listener
        """
        self._listeners.append(listener)
        return lambda: self.off(listener)

    def off(self, listener: FailoverEventListener) -> None:
        """Remove a failover event listener."""
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _ensure_open(self) -> None:
        if self._transport.closed:
            raise ClientClosedError()

    async def execute(self, spec: RequestSpec, state: Optional[FailoverState] = None) -> Response:
        """Make the call described by spec, failing over across the endpoints.

        Raises:
            ClientClosedError: the client has been closed; no request is made
            ClusterError: every endpoint failed
        """
        self._ensure_open()
        logger.debug(f"Client.execute: {spec.method} {spec.path}")
        return await run_with_failover(
            self._config.endpoints,
            make_operation(self._transport, spec),
            state=state,
            listeners=list(self._listeners),
        )

    async def fan_out(self, path: str, decode: Optional[Decoder] = None) -> AsyncIterator[Response]:
        """GET path from every endpoint at once, yielding responses as they arrive.

        The first failure is raised to the consumer and the outstanding
        requests are cancelled, as they are when the consumer stops early.
        """
        self._ensure_open()
        spec = RequestSpec(method="GET", path=path, decode=decode)
        tasks = [
            asyncio.ensure_future(dispatch(self._transport, endpoint, spec))
            for endpoint in self._config.endpoints
        ]
        logger.debug(f"Client.fan_out: GET {path} on {len(tasks)} endpoint(s)")
        try:
            for next_done in asyncio.as_completed(tasks):
                yield await next_done
        finally:
            pending = [task for task in tasks if not task.done()]
            for task in pending:
                task.cancel()
            # Collect outstanding results so no task exception goes unretrieved
            await asyncio.gather(*tasks, return_exceptions=True)

    def health(self) -> AsyncIterator[Response[Health]]:
        """Run a health check on every member of the cluster."""
        return self.fan_out("health", model_decoder(Health))

    def versions(self) -> AsyncIterator[Response[VersionInfo]]:
        """Get the versions of every member of the cluster."""
        return self.fan_out("version", model_decoder(VersionInfo))

    async def close(self) -> None:
        """Close the client."""
        await self._transport.close()

    async def __aenter__(self) -> "Client":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
