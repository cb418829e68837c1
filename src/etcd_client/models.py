"""
Payload models for etcd's v2 API.

Field aliases follow the camelCase JSON keys etcd sends; attributes are
snake_case.
"""
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class EtcdModel(BaseModel):
    """Base for response payloads. Unknown keys are ignored."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


def _null_as_empty(value):
    # etcd sends `null` rather than `[]` for empty collections
    return [] if value is None else value


class ApiErrorPayload(EtcdModel):
    """etcd's structured error body."""

    cause: Optional[str] = None
    error_code: int = Field(alias="errorCode")
    index: int = 0
    message: str


# ---------------------------------------------------------------------------
# Key space
# ---------------------------------------------------------------------------


class Action(str, Enum):
    """Action etcd reports for a key space operation."""

    COMPARE_AND_DELETE = "compareAndDelete"
    COMPARE_AND_SWAP = "compareAndSwap"
    CREATE = "create"
    DELETE = "delete"
    EXPIRE = "expire"
    GET = "get"
    SET = "set"
    UPDATE = "update"


class Node(EtcdModel):
    """A key or directory."""

    created_index: Optional[int] = Field(default=None, alias="createdIndex")
    dir: Optional[bool] = None
    expiration: Optional[str] = None
    key: Optional[str] = None
    modified_index: Optional[int] = Field(default=None, alias="modifiedIndex")
    nodes: Optional[List["Node"]] = None
    ttl: Optional[int] = None
    value: Optional[str] = None


Node.model_rebuild()


class KeyValueInfo(EtcdModel):
    """Result of a successful key space operation."""

    action: Action
    node: Node
    prev_node: Optional[Node] = Field(default=None, alias="prevNode")


# ---------------------------------------------------------------------------
# Cluster
# ---------------------------------------------------------------------------


class Member(EtcdModel):
    """A member of the cluster."""

    id: str
    name: str = ""
    peer_urls: List[str] = Field(default_factory=list, alias="peerURLs")
    client_urls: List[str] = Field(default_factory=list, alias="clientURLs")


class MemberList(EtcdModel):
    members: List[Member] = Field(default_factory=list)

    @field_validator("members", mode="before")
    @classmethod
    def members_null_as_empty(cls, value):
        return _null_as_empty(value)


class Health(EtcdModel):
    """Health check result for one member."""

    health: str

    @property
    def is_healthy(self) -> bool:
        return self.health == "true"


class VersionInfo(EtcdModel):
    """Versions of the cluster and of one member's server."""

    cluster_version: Optional[str] = Field(default=None, alias="etcdcluster")
    server_version: Optional[str] = Field(default=None, alias="etcdserver")


# ---------------------------------------------------------------------------
# Statistics
# ---------------------------------------------------------------------------


class CountStats(EtcdModel):
    """Raft RPC request counts to one follower."""

    fail: int
    success: int


class LatencyStats(EtcdModel):
    """Network latency to one follower, in seconds."""

    average: float
    current: float
    maximum: float
    minimum: float
    standard_deviation: float = Field(alias="standardDeviation")


class FollowerStats(EtcdModel):
    counts: CountStats
    latency: LatencyStats


class LeaderStats(EtcdModel):
    """Statistics reported by the cluster leader."""

    leader: str
    followers: Dict[str, FollowerStats] = Field(default_factory=dict)


class LeaderInfo(EtcdModel):
    id: str = Field(alias="leader")
    start_time: str = Field(alias="startTime")
    uptime: str


class SelfStats(EtcdModel):
    """Statistics about one member."""

    id: str
    name: str
    leader_info: LeaderInfo = Field(alias="leaderInfo")
    received_append_request_count: int = Field(alias="recvAppendRequestCnt")
    received_bandwidth_rate: Optional[float] = Field(default=None, alias="recvBandwidthRate")
    received_package_rate: Optional[float] = Field(default=None, alias="recvPkgRate")
    sent_append_request_count: int = Field(alias="sendAppendRequestCnt")
    sent_bandwidth_rate: Optional[float] = Field(default=None, alias="sendBandwidthRate")
    sent_package_rate: Optional[float] = Field(default=None, alias="sendPkgRate")
    start_time: str = Field(alias="startTime")
    state: str


class StoreStats(EtcdModel):
    """Counts of the operations handled by one member's store."""

    compare_and_delete_fail: int = Field(alias="compareAndDeleteFail")
    compare_and_delete_success: int = Field(alias="compareAndDeleteSuccess")
    compare_and_swap_fail: int = Field(alias="compareAndSwapFail")
    compare_and_swap_success: int = Field(alias="compareAndSwapSuccess")
    create_fail: int = Field(alias="createFail")
    create_success: int = Field(alias="createSuccess")
    delete_fail: int = Field(alias="deleteFail")
    delete_success: int = Field(alias="deleteSuccess")
    expire_count: int = Field(alias="expireCount")
    get_fail: int = Field(alias="getsFail")
    get_success: int = Field(alias="getsSuccess")
    set_fail: int = Field(alias="setsFail")
    set_success: int = Field(alias="setsSuccess")
    update_fail: int = Field(alias="updateFail")
    update_success: int = Field(alias="updateSuccess")
    watchers: int


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class AuthStatus(EtcdModel):
    enabled: bool


class KvPermissions(EtcdModel):
    read: List[str] = Field(default_factory=list)
    write: List[str] = Field(default_factory=list)


class Permissions(EtcdModel):
    kv: KvPermissions = Field(default_factory=KvPermissions)


class Role(EtcdModel):
    """A role and its key space permissions."""

    name: str = Field(alias="role")
    permissions: Permissions = Field(default_factory=Permissions)

    @property
    def kv_read_permissions(self) -> List[str]:
        return self.permissions.kv.read

    @property
    def kv_write_permissions(self) -> List[str]:
        return self.permissions.kv.write


class RoleList(EtcdModel):
    roles: List[Role] = Field(default_factory=list)

    @field_validator("roles", mode="before")
    @classmethod
    def roles_null_as_empty(cls, value):
        return _null_as_empty(value)


class User(EtcdModel):
    """A user as returned by create and update, with role names only."""

    name: str = Field(alias="user")
    role_names: List[str] = Field(default_factory=list, alias="roles")

    @field_validator("role_names", mode="before")
    @classmethod
    def roles_null_as_empty(cls, value):
        return _null_as_empty(value)


class UserDetail(EtcdModel):
    """A user as returned by the get endpoints, with full roles."""

    name: str = Field(alias="user")
    roles: List[Role] = Field(default_factory=list)

    @field_validator("roles", mode="before")
    @classmethod
    def roles_null_as_empty(cls, value):
        return _null_as_empty(value)

    @property
    def role_names(self) -> List[str]:
        return [role.name for role in self.roles]


class UserDetailList(EtcdModel):
    users: List[UserDetail] = Field(default_factory=list)

    @field_validator("users", mode="before")
    @classmethod
    def users_null_as_empty(cls, value):
        return _null_as_empty(value)
