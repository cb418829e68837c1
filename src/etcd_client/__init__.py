"""
Asynchronous client for etcd's v2 HTTP API.

Every call is tried against each configured cluster member in order until one
succeeds; if all of them fail, ClusterError carries one error per member.
The kv, members, stats and auth modules hold the API calls.
"""
from . import auth, kv, members, stats
from .types import (
    ClusterInfo,
    EventType,
    FailoverEvent,
    FailoverEventListener,
    HttpMethod,
    Response,
)
from .config import (
    BasicAuth,
    ClientConfig,
    ResolvedConfig,
    TimeoutConfig,
    config_from_env,
    resolve_config,
)
from .endpoints import Endpoint, parse_endpoints
from .errors import (
    ApiError,
    ClientClosedError,
    ClusterError,
    ConfigurationError,
    EndpointError,
    EtcdClientError,
    InvalidConditionsError,
    InvalidEndpointError,
    NoEndpointsError,
    SerializationError,
    TransportError,
    UnexpectedStatusError,
    UrlConstructionError,
    WatchTimeoutError,
)
from .failover import FailoverExecutor, FailoverState, run_with_failover
from .dispatch import RequestSpec, build_url, dispatch, make_operation, parse_cluster_info
from .transport import HttpTransport, RawResponse
from .client import Client
from .models import (
    Action,
    ApiErrorPayload,
    Health,
    KeyValueInfo,
    LeaderStats,
    Member,
    Node,
    Role,
    SelfStats,
    StoreStats,
    User,
    UserDetail,
    VersionInfo,
)

__version__ = "0.1.0"

__all__ = [
    # API modules
    "auth",
    "kv",
    "members",
    "stats",
    # Client
    "Client",
    # Types
    "ClusterInfo",
    "EventType",
    "FailoverEvent",
    "FailoverEventListener",
    "HttpMethod",
    "Response",
    # Config
    "BasicAuth",
    "ClientConfig",
    "ResolvedConfig",
    "TimeoutConfig",
    "config_from_env",
    "resolve_config",
    # Endpoints
    "Endpoint",
    "parse_endpoints",
    # Errors
    "ApiError",
    "ClientClosedError",
    "ClusterError",
    "ConfigurationError",
    "EndpointError",
    "EtcdClientError",
    "InvalidConditionsError",
    "InvalidEndpointError",
    "NoEndpointsError",
    "SerializationError",
    "TransportError",
    "UnexpectedStatusError",
    "UrlConstructionError",
    "WatchTimeoutError",
    # Failover
    "FailoverExecutor",
    "FailoverState",
    "run_with_failover",
    # Dispatch
    "RequestSpec",
    "build_url",
    "dispatch",
    "make_operation",
    "parse_cluster_info",
    # Transport
    "HttpTransport",
    "RawResponse",
    # Models
    "Action",
    "ApiErrorPayload",
    "Health",
    "KeyValueInfo",
    "LeaderStats",
    "Member",
    "Node",
    "Role",
    "SelfStats",
    "StoreStats",
    "User",
    "UserDetail",
    "VersionInfo",
]
