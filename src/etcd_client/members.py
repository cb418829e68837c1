"""
Cluster membership.
"""
import logging
from typing import TYPE_CHECKING, List, Sequence

from .dispatch import RequestSpec
from .models import Member, MemberList
from .types import Response

if TYPE_CHECKING:
    from .client import Client

logger = logging.getLogger("etcd_client.members")

# `list` is reached as members.list; star imports keep the builtin.
__all__ = ["MEMBERS_PATH", "add", "update", "delete"]

MEMBERS_PATH = "v2/members"


def _decode_members(body: bytes) -> List[Member]:
    return MemberList.model_validate_json(body).members


def _member_path(id: str) -> str:
    return f"{MEMBERS_PATH}/{id}"


# Shadows the builtin list module-wide; call builtins.list in this module.
async def list(client: "Client") -> Response[List[Member]]:
    """List the members of the cluster."""
    return await client.execute(RequestSpec(method="GET", path=MEMBERS_PATH, decode=_decode_members))


async def add(client: "Client", peer_urls: Sequence[str]) -> Response[None]:
    """Add a member that serves its peer API at peer_urls."""
    logger.info(f"members.add: peer_urls={peer_urls}")
    return await client.execute(RequestSpec(
        method="POST",
        path=MEMBERS_PATH,
        json={"peerURLs": [str(url) for url in peer_urls]},
        success_statuses=(201,),
    ))


async def update(client: "Client", id: str, peer_urls: Sequence[str]) -> Response[None]:
    """Replace the peer URLs of member `id`."""
    logger.info(f"members.update: id={id}, peer_urls={peer_urls}")
    return await client.execute(RequestSpec(
        method="PUT",
        path=_member_path(id),
        json={"peerURLs": [str(url) for url in peer_urls]},
        success_statuses=(204,),
    ))


async def delete(client: "Client", id: str) -> Response[None]:
    """Remove member `id` from the cluster."""
    logger.info(f"members.delete: id={id}")
    return await client.execute(RequestSpec(
        method="DELETE",
        path=_member_path(id),
        success_statuses=(204,),
    ))
