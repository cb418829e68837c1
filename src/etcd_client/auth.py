"""
etcd's authentication and authorization API.

Enables and disables the auth system and manages users and roles.
"""
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from .dispatch import RequestSpec, model_decoder
from .models import AuthStatus, Role, RoleList, User, UserDetail, UserDetailList
from .types import Response

if TYPE_CHECKING:
    from .client import Client

logger = logging.getLogger("etcd_client.auth")

AUTH_PATH = "v2/auth"
ENABLE_PATH = f"{AUTH_PATH}/enable"


class EnableAuth(str, Enum):
    """Result of enabling the auth system."""

    ENABLED = "enabled"
    ALREADY_ENABLED = "already_enabled"
    ROOT_USER_REQUIRED = "root_user_required"

    @property
    def is_enabled(self) -> bool:
        return self is not EnableAuth.ROOT_USER_REQUIRED


class DisableAuth(str, Enum):
    """Result of disabling the auth system."""

    DISABLED = "disabled"
    ALREADY_DISABLED = "already_disabled"
    UNAUTHORIZED = "unauthorized"

    @property
    def is_disabled(self) -> bool:
        return self is not DisableAuth.UNAUTHORIZED


def _kv_permissions(read: List[str], write: List[str]) -> Dict[str, Any]:
    return {"kv": {"read": list(read), "write": list(write)}}


@dataclass
class NewUser:
    """A user to create."""

    name: str
    password: str
    roles: List[str] = field(default_factory=list)

    def to_json(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"user": self.name, "password": self.password}
        if self.roles:
            body["roles"] = list(self.roles)
        return body


@dataclass
class UserUpdate:
    """Changes to an existing user's password and roles."""

    name: str
    password: Optional[str] = None
    grant_roles: List[str] = field(default_factory=list)
    revoke_roles: List[str] = field(default_factory=list)

    def to_json(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"user": self.name}
        if self.password is not None:
            body["password"] = self.password
        if self.grant_roles:
            body["grant"] = list(self.grant_roles)
        if self.revoke_roles:
            body["revoke"] = list(self.revoke_roles)
        return body


@dataclass
class NewRole:
    """A role to create, with the key prefixes it may read and write."""

    name: str
    kv_read: List[str] = field(default_factory=list)
    kv_write: List[str] = field(default_factory=list)

    def to_json(self) -> Dict[str, Any]:
        return {"role": self.name, "permissions": _kv_permissions(self.kv_read, self.kv_write)}


@dataclass
class RoleUpdate:
    """Permissions to grant to and revoke from an existing role."""

    name: str
    grant_kv_read: List[str] = field(default_factory=list)
    grant_kv_write: List[str] = field(default_factory=list)
    revoke_kv_read: List[str] = field(default_factory=list)
    revoke_kv_write: List[str] = field(default_factory=list)

    def to_json(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"role": self.name}
        if self.grant_kv_read or self.grant_kv_write:
            body["grant"] = _kv_permissions(self.grant_kv_read, self.grant_kv_write)
        if self.revoke_kv_read or self.revoke_kv_write:
            body["revoke"] = _kv_permissions(self.revoke_kv_read, self.revoke_kv_write)
        return body


# ---------------------------------------------------------------------------
# Auth system
# ---------------------------------------------------------------------------


def _decode_status(body: bytes) -> bool:
    return AuthStatus.model_validate_json(body).enabled


async def status(client: "Client") -> Response[bool]:
    """Whether the auth system is enabled."""
    return await client.execute(RequestSpec(method="GET", path=ENABLE_PATH, decode=_decode_status))


async def enable(client: "Client") -> Response[EnableAuth]:
    """Enable the auth system. Requires a root user to exist."""
    response = await client.execute(RequestSpec(
        method="PUT",
        path=ENABLE_PATH,
        status_values={
            200: EnableAuth.ENABLED,
            400: EnableAuth.ROOT_USER_REQUIRED,
            409: EnableAuth.ALREADY_ENABLED,
        },
    ))
    logger.info(f"auth.enable: {response.data.value}")
    return response


async def disable(client: "Client") -> Response[DisableAuth]:
    """Disable the auth system. Must be called as the root user."""
    response = await client.execute(RequestSpec(
        method="DELETE",
        path=ENABLE_PATH,
        status_values={
            200: DisableAuth.DISABLED,
            401: DisableAuth.UNAUTHORIZED,
            409: DisableAuth.ALREADY_DISABLED,
        },
    ))
    logger.info(f"auth.disable: {response.data.value}")
    return response


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


def _user_path(name: str) -> str:
    return f"{AUTH_PATH}/users/{name}"


def _decode_users(body: bytes) -> List[UserDetail]:
    return UserDetailList.model_validate_json(body).users


async def get_users(client: "Client") -> Response[List[UserDetail]]:
    return await client.execute(RequestSpec(
        method="GET", path=f"{AUTH_PATH}/users", decode=_decode_users
    ))


async def get_user(client: "Client", name: str) -> Response[UserDetail]:
    return await client.execute(RequestSpec(
        method="GET", path=_user_path(name), decode=model_decoder(UserDetail)
    ))


async def create_user(client: "Client", user: NewUser) -> Response[User]:
    logger.info(f"auth.create_user: {user.name} roles={user.roles}")
    return await client.execute(RequestSpec(
        method="PUT",
        path=_user_path(user.name),
        json=user.to_json(),
        success_statuses=(200, 201),
        decode=model_decoder(User),
    ))


async def update_user(client: "Client", update: UserUpdate) -> Response[User]:
    logger.info(
        f"auth.update_user: {update.name} grant={update.grant_roles} revoke={update.revoke_roles}"
    )
    return await client.execute(RequestSpec(
        method="PUT",
        path=_user_path(update.name),
        json=update.to_json(),
        success_statuses=(200, 201),
        decode=model_decoder(User),
    ))


async def delete_user(client: "Client", name: str) -> Response[None]:
    logger.info(f"auth.delete_user: {name}")
    return await client.execute(RequestSpec(method="DELETE", path=_user_path(name)))


# ---------------------------------------------------------------------------
# Roles
# ---------------------------------------------------------------------------


def _role_path(name: str) -> str:
    return f"{AUTH_PATH}/roles/{name}"


def _decode_roles(body: bytes) -> List[Role]:
    return RoleList.model_validate_json(body).roles


async def get_roles(client: "Client") -> Response[List[Role]]:
    return await client.execute(RequestSpec(
        method="GET", path=f"{AUTH_PATH}/roles", decode=_decode_roles
    ))


async def get_role(client: "Client", name: str) -> Response[Role]:
    return await client.execute(RequestSpec(
        method="GET", path=_role_path(name), decode=model_decoder(Role)
    ))


async def create_role(client: "Client", role: NewRole) -> Response[Role]:
    logger.info(f"auth.create_role: {role.name}")
    return await client.execute(RequestSpec(
        method="PUT",
        path=_role_path(role.name),
        json=role.to_json(),
        success_statuses=(200, 201),
        decode=model_decoder(Role),
    ))


async def update_role(client: "Client", update: RoleUpdate) -> Response[Role]:
    logger.info(f"auth.update_role: {update.name}")
    return await client.execute(RequestSpec(
        method="PUT",
        path=_role_path(update.name),
        json=update.to_json(),
        success_statuses=(200, 201),
        decode=model_decoder(Role),
    ))


async def delete_role(client: "Client", name: str) -> Response[None]:
    logger.info(f"auth.delete_role: {name}")
    return await client.execute(RequestSpec(method="DELETE", path=_role_path(name)))
