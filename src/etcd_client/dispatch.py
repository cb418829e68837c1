"""
Per-endpoint request dispatch.

Builds the request URL for one endpoint, issues the request through the
transport and classifies the response into a decoded payload or an
EndpointError. Every API call passes an operation built here to the failover
executor.
"""
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Sequence, Tuple, Union
from urllib.parse import quote, urlencode

import httpx
from pydantic import ValidationError

from .endpoints import Endpoint
from .errors import (
    ApiError,
    EndpointError,
    SerializationError,
    UnexpectedStatusError,
    UrlConstructionError,
)
from .models import ApiErrorPayload
from .transport import HttpTransport, RawResponse
from .types import ClusterInfo, HttpMethod, Response

logger = logging.getLogger("etcd_client.dispatch")

XETCD_CLUSTER_ID = "X-Etcd-Cluster-Id"
XETCD_INDEX = "X-Etcd-Index"
XRAFT_INDEX = "X-Raft-Index"
XRAFT_TERM = "X-Raft-Term"

QueryValue = Union[str, int, bool]
Decoder = Callable[[bytes], Any]


@dataclass
class RequestSpec:
    """Everything needed to make one API call against any endpoint.

    - path: appended to the endpoint URL, e.g. "v2/keys/foo"
    - query: query parameters; bools are sent as "true"/"false"
    - form / json: request body, form-encoded or JSON (at most one)
    - success_statuses: statuses whose body is decoded with `decode`
    - decode: body decoder; None means the call has no payload
    - status_values: statuses mapped straight to a value, body ignored
    - long_poll: the server holds the request open until an event, so no
      read timeout applies
    """

    method: HttpMethod
    path: str
    query: Dict[str, QueryValue] = field(default_factory=dict)
    form: Optional[Sequence[Tuple[str, str]]] = None
    json: Optional[Any] = None
    success_statuses: Tuple[int, ...] = (200,)
    decode: Optional[Decoder] = None
    status_values: Optional[Mapping[int, Any]] = None
    long_poll: bool = False

    def body(self) -> Tuple[Optional[bytes], Dict[str, str]]:
        """Serialize the body. Returns (content, extra headers)."""
        if self.form is not None:
            return (
                urlencode(list(self.form)).encode("utf-8"),
                {"content-type": "application/x-www-form-urlencoded"},
            )
        if self.json is not None:
            try:
                payload = json.dumps(self.json)
            except (TypeError, ValueError) as e:
                raise SerializationError(f"Could not encode request body: {e}") from e
            return payload.encode("utf-8"), {"content-type": "application/json"}
        return None, {}


def model_decoder(model: type) -> Decoder:
    """Decoder that validates a JSON body into a pydantic model."""

    def decode(body: bytes) -> Any:
        return model.model_validate_json(body)

    decode.__name__ = f"decode_{model.__name__}"
    return decode


def _format_query_value(value: QueryValue) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def build_url(
    endpoint: Endpoint,
    path: str,
    query: Optional[Mapping[str, QueryValue]] = None,
) -> str:
    """Join endpoint, path and query into a request URL.

    Raises UrlConstructionError when the result is not a valid URL.
    """
    try:
        quoted_path = quote(path.lstrip("/"), safe="/:@!$&'()*+,;=-._~")
        url = httpx.URL(endpoint.base + quoted_path)
        if query:
            url = url.copy_merge_params(
                {key: _format_query_value(value) for key, value in query.items()}
            )
    except (httpx.InvalidURL, TypeError, ValueError, UnicodeError) as e:
        raise UrlConstructionError(
            f"Could not build URL from {endpoint} and {path!r}: {e}", endpoint
        ) from e

    if not url.scheme or not url.host:
        raise UrlConstructionError(f"Could not build URL from {endpoint} and {path!r}", endpoint)
    return str(url)


def _header(headers: Mapping[str, str], name: str) -> Optional[str]:
    target = name.lower()
    for key, value in headers.items():
        if key.lower() == target:
            return value
    return None


def _int_header(headers: Mapping[str, str], name: str) -> Optional[int]:
    raw = _header(headers, name)
    if raw is None:
        return None
    try:
        return int(raw.strip())
    except ValueError:
        logger.error(f"{name} header decode error: {raw!r} is not an integer")
        return None


def parse_cluster_info(headers: Mapping[str, str]) -> ClusterInfo:
    """Read cluster state from etcd's X-Etcd-* and X-Raft-* headers."""
    return ClusterInfo(
        cluster_id=_header(headers, XETCD_CLUSTER_ID),
        etcd_index=_int_header(headers, XETCD_INDEX),
        raft_index=_int_header(headers, XRAFT_INDEX),
        raft_term=_int_header(headers, XRAFT_TERM),
    )


def _decode_api_error(raw: RawResponse, endpoint: Endpoint) -> Exception:
    """Classify a non-success response."""
    if not raw.body.strip():
        return UnexpectedStatusError(raw.status_code, endpoint)
    try:
        payload = ApiErrorPayload.model_validate_json(raw.body)
    except (ValidationError, ValueError) as e:
        error = SerializationError(
            f"HTTP {raw.status_code} body is not an etcd error: {e}", endpoint
        )
        error.__cause__ = e
        return error
    return ApiError(payload, raw.status_code, endpoint)


def classify_response(raw: RawResponse, spec: RequestSpec, endpoint: Endpoint) -> Response:
    """Turn a raw response into a Response or raise an EndpointError."""
    cluster_info = parse_cluster_info(raw.headers)

    if spec.status_values is not None:
        if raw.status_code in spec.status_values:
            return Response(
                data=spec.status_values[raw.status_code],
                cluster_info=cluster_info,
                endpoint=endpoint,
            )
        error = _decode_api_error(raw, endpoint)
        if isinstance(error, ApiError):
            raise error
        raise UnexpectedStatusError(raw.status_code, endpoint)

    if raw.status_code in spec.success_statuses:
        if spec.decode is None:
            return Response(data=None, cluster_info=cluster_info, endpoint=endpoint)
        try:
            data = spec.decode(raw.body)
        except (ValidationError, ValueError) as e:
            raise SerializationError(
                f"Could not decode HTTP {raw.status_code} body from {endpoint}: {e}", endpoint
            ) from e
        return Response(data=data, cluster_info=cluster_info, endpoint=endpoint)

    raise _decode_api_error(raw, endpoint)


async def dispatch(
    transport: HttpTransport,
    endpoint: Endpoint,
    spec: RequestSpec,
) -> Response:
    """Make one request described by spec against one endpoint.

    Exactly one network request, no retries. Raises an EndpointError subclass
    on failure.
    """
    try:
        url = build_url(endpoint, spec.path, spec.query)
        content, headers = spec.body()
        raw = await transport.issue_request(url, spec.method, headers, content, spec.long_poll)
        return classify_response(raw, spec, endpoint)
    except EndpointError as e:
        if e.endpoint is None:
            e.endpoint = endpoint
        raise


def make_operation(
    transport: HttpTransport,
    spec: RequestSpec,
) -> Callable[[Endpoint], Awaitable[Response]]:
    """Close over spec so it can be handed to the failover executor."""

    async def operation(endpoint: Endpoint) -> Response:
        return await dispatch(transport, endpoint, spec)

    return operation
