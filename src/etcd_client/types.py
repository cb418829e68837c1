"""
Type definitions for etcd_client.
"""
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Generic, Literal, Optional, TypeVar

T = TypeVar("T")

# HTTP methods
HttpMethod = Literal["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]

# Failover event types
EventType = Literal[
    "attempt:start",
    "attempt:success",
    "attempt:fail",
    "failover:exhausted",
]


@dataclass
class FailoverEvent:
    """Event emitted by the failover executor"""

    type: EventType
    """Event type"""

    attempt: int
    """Zero-based index of the endpoint being tried"""

    endpoint: Optional[Any] = None
    """Endpoint the event refers to (None for failover:exhausted)"""

    data: Dict[str, Any] = field(default_factory=dict)
    """Event-specific data"""


# Event listener type
FailoverEventListener = Callable[[FailoverEvent], None]


@dataclass
class ClusterInfo:
    """Cluster state reported in etcd's response headers."""

    cluster_id: Optional[str] = None
    etcd_index: Optional[int] = None
    raft_index: Optional[int] = None
    raft_term: Optional[int] = None


@dataclass
class Response(Generic[T]):
    """Wrapper returned by every API call: the decoded payload and cluster info."""

    data: T
    cluster_info: ClusterInfo = field(default_factory=ClusterInfo)
    endpoint: Optional[Any] = None
