"""
Cluster statistics.

Leader statistics come from whichever member answers first. Self and store
statistics are per-member, so every member is asked.
"""
from typing import TYPE_CHECKING, AsyncIterator

from .dispatch import RequestSpec, model_decoder
from .models import LeaderStats, SelfStats, StoreStats
from .types import Response

if TYPE_CHECKING:
    from .client import Client

STATS_PATH = "v2/stats"


async def leader_stats(client: "Client") -> Response[LeaderStats]:
    """Statistics about the leader and its followers."""
    return await client.execute(RequestSpec(
        method="GET",
        path=f"{STATS_PATH}/leader",
        decode=model_decoder(LeaderStats),
    ))


def self_stats(client: "Client") -> AsyncIterator[Response[SelfStats]]:
    """Statistics from each member about itself, in the order they arrive."""
    return client.fan_out(f"{STATS_PATH}/self", model_decoder(SelfStats))


def store_stats(client: "Client") -> AsyncIterator[Response[StoreStats]]:
    """Store operation counts from each member, in the order they arrive."""
    return client.fan_out(f"{STATS_PATH}/store", model_decoder(StoreStats))
