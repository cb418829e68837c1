"""
Error types for etcd_client.

Per-endpoint failures derive from EndpointError and are always recovered by the
failover engine. When every endpoint fails, the engine raises ClusterError with
the per-endpoint errors in the order the endpoints were tried.
"""
from typing import TYPE_CHECKING, Any, List, Optional, Sequence

if TYPE_CHECKING:
    from .endpoints import Endpoint
    from .models import ApiErrorPayload


class EtcdClientError(Exception):
    """Base error for etcd_client."""


class ConfigurationError(EtcdClientError):
    """Client configuration is invalid."""


class NoEndpointsError(ConfigurationError):
    """A client was constructed without any endpoints."""

    def __init__(self, message: str = "at least one endpoint is required"):
        super().__init__(message)


class InvalidEndpointError(ConfigurationError):
    """An endpoint could not be parsed as an http(s) URL."""

    def __init__(self, value: Any, reason: str = ""):
        self.value = value
        detail = f": {reason}" if reason else ""
        super().__init__(f"Invalid endpoint {value!r}{detail}")


class ClientClosedError(EtcdClientError):
    """A call was made on a client or transport that has been closed."""

    def __init__(self, message: str = "client has been closed"):
        super().__init__(message)


class InvalidConditionsError(EtcdClientError):
    """A compare-and-swap or compare-and-delete was given no conditions."""

    def __init__(
        self,
        message: str = "current_value or current_modified_index is required",
    ):
        super().__init__(message)


class EndpointError(EtcdClientError):
    """A single attempt against one endpoint failed."""

    def __init__(self, message: str, endpoint: Optional["Endpoint"] = None):
        super().__init__(message)
        self.endpoint = endpoint


class UrlConstructionError(EndpointError):
    """The endpoint, path and query could not be joined into a valid URL."""


class TransportError(EndpointError):
    """The request did not reach the endpoint or no response was read."""


class UnexpectedStatusError(EndpointError):
    """The response status was not expected and carried no API error body."""

    def __init__(self, status_code: int, endpoint: Optional["Endpoint"] = None):
        self.status_code = status_code
        super().__init__(f"Unexpected HTTP status {status_code}", endpoint)


class ApiError(EndpointError):
    """The endpoint answered with etcd's structured error payload."""

    def __init__(
        self,
        payload: "ApiErrorPayload",
        status_code: Optional[int] = None,
        endpoint: Optional["Endpoint"] = None,
    ):
        self.payload = payload
        self.status_code = status_code
        super().__init__(payload.message, endpoint)

    @property
    def message(self) -> str:
        return self.payload.message

    @property
    def error_code(self) -> int:
        return self.payload.error_code

    @property
    def cause(self) -> Optional[str]:
        return self.payload.cause

    @property
    def index(self) -> int:
        return self.payload.index

    def __repr__(self) -> str:
        return (
            f"ApiError(error_code={self.error_code}, message={self.message!r}, "
            f"cause={self.cause!r}, index={self.index})"
        )


class SerializationError(EndpointError):
    """A response body, or a request body, could not be (de)serialized."""


class ClusterError(EtcdClientError):
    """Every endpoint was tried and every attempt failed."""

    def __init__(
        self,
        errors: Sequence[BaseException],
        endpoints: Optional[Sequence["Endpoint"]] = None,
    ):
        self.errors: List[BaseException] = list(errors)
        self.endpoints: List["Endpoint"] = list(endpoints or [])
        super().__init__(self._format())

    def _format(self) -> str:
        if not self.errors:
            return "All endpoints failed"
        lines = [f"All {len(self.errors)} endpoint(s) failed:"]
        for position, error in enumerate(self.errors):
            where = (
                str(self.endpoints[position])
                if position < len(self.endpoints)
                else f"#{position}"
            )
            lines.append(f"  {where}: {type(error).__name__}: {error}")
        return "\n".join(lines)

    def __len__(self) -> int:
        return len(self.errors)

    def __iter__(self):
        return iter(self.errors)


class WatchTimeoutError(EtcdClientError):
    """A watch did not observe a change before its deadline."""

    def __init__(
        self,
        timeout: float,
        partial_errors: Optional[Sequence[BaseException]] = None,
    ):
        self.timeout = timeout
        self.partial_errors: List[BaseException] = list(partial_errors or [])
        super().__init__(
            f"Watch timed out after {timeout}s "
            f"({len(self.partial_errors)} endpoint error(s) before the deadline)"
        )
