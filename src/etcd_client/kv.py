"""
etcd's key space.

Keys are paths such as "/foo" or "/dir/key". Every operation returns a
Response[KeyValueInfo] from the first endpoint that succeeds, or raises
ClusterError.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, List, Optional, Tuple

from .dispatch import QueryValue, RequestSpec, model_decoder
from .errors import InvalidConditionsError, WatchTimeoutError
from .failover import FailoverState
from .models import KeyValueInfo
from .types import HttpMethod, Response

if TYPE_CHECKING:
    from .client import Client

logger = logging.getLogger("etcd_client.kv")

# `set` is reached as kv.set; star imports keep the builtin.
__all__ = [
    "KEYS_PATH",
    "ComparisonConditions",
    "GetOptions",
    "WatchOptions",
    "key_path",
    "create",
    "create_dir",
    "create_in_order",
    "set_dir",
    "update",
    "update_dir",
    "compare_and_swap",
    "get",
    "delete",
    "delete_dir",
    "compare_and_delete",
    "watch",
]

KEYS_PATH = "v2/keys"

_decode_key_value_info = model_decoder(KeyValueInfo)


@dataclass
class ComparisonConditions:
    """Conditions for compare-and-swap and compare-and-delete."""

    value: Optional[str] = None
    modified_index: Optional[int] = None

    def is_empty(self) -> bool:
        return self.value is None and self.modified_index is None


@dataclass
class GetOptions:
    """Options for get.

    - recursive: include the contents of child directories
    - sort: return directory contents in sorted order
    - strong_consistency: have the serving member sync with the quorum first
    """

    recursive: bool = False
    sort: Optional[bool] = None
    strong_consistency: bool = False


@dataclass
class WatchOptions:
    """Options for watch.

    - index: return the first change at or after this index
    - recursive: include changes to child keys
    - timeout: seconds to wait for a change before WatchTimeoutError
    """

    index: Optional[int] = None
    recursive: bool = False
    timeout: Optional[float] = None


def key_path(key: str) -> str:
    if not key.startswith("/"):
        key = "/" + key
    return KEYS_PATH + key


def _set_spec(
    key: str,
    value: Optional[str] = None,
    ttl: Optional[int] = None,
    dir: Optional[bool] = None,
    prev_exist: Optional[bool] = None,
    conditions: Optional[ComparisonConditions] = None,
    create_in_order: bool = False,
) -> RequestSpec:
    form: List[Tuple[str, str]] = []
    if value is not None:
        form.append(("value", value))
    if ttl is not None:
        form.append(("ttl", str(ttl)))
    if dir is not None:
        form.append(("dir", "true" if dir else "false"))
    if prev_exist is not None:
        form.append(("prevExist", "true" if prev_exist else "false"))
    if conditions is not None:
        if conditions.is_empty():
            raise InvalidConditionsError()
        if conditions.modified_index is not None:
            form.append(("prevIndex", str(conditions.modified_index)))
        if conditions.value is not None:
            form.append(("prevValue", conditions.value))

    method: HttpMethod = "POST" if create_in_order else "PUT"
    return RequestSpec(
        method=method,
        path=key_path(key),
        form=form,
        success_statuses=(200, 201),
        decode=_decode_key_value_info,
    )


def _delete_spec(
    key: str,
    recursive: Optional[bool] = None,
    dir: Optional[bool] = None,
    conditions: Optional[ComparisonConditions] = None,
) -> RequestSpec:
    query: Dict[str, QueryValue] = {}
    if recursive is not None:
        query["recursive"] = recursive
    if dir is not None:
        query["dir"] = dir
    if conditions is not None:
        if conditions.is_empty():
            raise InvalidConditionsError()
        if conditions.modified_index is not None:
            query["prevIndex"] = conditions.modified_index
        if conditions.value is not None:
            query["prevValue"] = conditions.value

    return RequestSpec(
        method="DELETE",
        path=key_path(key),
        query=query,
        decode=_decode_key_value_info,
    )


def _get_spec(
    key: str,
    options: GetOptions,
    wait: bool = False,
    wait_index: Optional[int] = None,
) -> RequestSpec:
    query: Dict[str, QueryValue] = {"recursive": options.recursive}
    if options.sort is not None:
        query["sorted"] = options.sort
    if options.strong_consistency:
        query["quorum"] = True
    if wait:
        query["wait"] = True
    if wait_index is not None:
        query["waitIndex"] = wait_index

    return RequestSpec(
        method="GET",
        path=key_path(key),
        query=query,
        decode=_decode_key_value_info,
        long_poll=wait,
    )


async def create(
    client: "Client", key: str, value: str, ttl: Optional[int] = None
) -> Response[KeyValueInfo]:
    """Create a key-value pair. Fails if the key already exists."""
    return await client.execute(_set_spec(key, value=value, ttl=ttl, prev_exist=False))


async def create_dir(client: "Client", key: str, ttl: Optional[int] = None) -> Response[KeyValueInfo]:
    """Create an empty directory. Fails if the key already exists."""
    return await client.execute(_set_spec(key, ttl=ttl, dir=True, prev_exist=False))


async def create_in_order(
    client: "Client", key: str, value: str, ttl: Optional[int] = None
) -> Response[KeyValueInfo]:
    """Create a key-value pair in directory `key` under a generated key name.

    The generated name sorts after every existing key in the directory.
    """
    return await client.execute(_set_spec(key, value=value, ttl=ttl, create_in_order=True))


# Shadows the builtin set module-wide; call builtins.set in this module.
async def set(client: "Client", key: str, value: str, ttl: Optional[int] = None) -> Response[KeyValueInfo]:
    """Set the value and TTL of a key, replacing any previous ones. Fails for directories."""
    return await client.execute(_set_spec(key, value=value, ttl=ttl))


async def set_dir(client: "Client", key: str, ttl: Optional[int] = None) -> Response[KeyValueInfo]:
    """Create a directory, or update the TTL of an existing one."""
    return await client.execute(_set_spec(key, ttl=ttl, dir=True))


async def update(client: "Client", key: str, value: str, ttl: Optional[int] = None) -> Response[KeyValueInfo]:
    """Update an existing key. Fails if the key does not exist."""
    return await client.execute(_set_spec(key, value=value, ttl=ttl, prev_exist=True))


async def update_dir(client: "Client", key: str, ttl: Optional[int] = None) -> Response[KeyValueInfo]:
    """Update the TTL of an existing directory. Fails if it does not exist."""
    return await client.execute(_set_spec(key, ttl=ttl, dir=True, prev_exist=True))


async def compare_and_swap(
    client: "Client",
    key: str,
    value: str,
    ttl: Optional[int] = None,
    current_value: Optional[str] = None,
    current_modified_index: Optional[int] = None,
) -> Response[KeyValueInfo]:
    """Update a key only if its current value and/or modified index match.

    Raises InvalidConditionsError, without making a request, when neither
    condition is given.
    """
    conditions = ComparisonConditions(value=current_value, modified_index=current_modified_index)
    return await client.execute(_set_spec(key, value=value, ttl=ttl, conditions=conditions))


async def get(
    client: "Client",
    key: str,
    options: Optional[GetOptions] = None,
) -> Response[KeyValueInfo]:
    """Get a key or directory."""
    return await client.execute(_get_spec(key, options or GetOptions()))


async def delete(client: "Client", key: str, recursive: bool = False) -> Response[KeyValueInfo]:
    """Delete a key, or a directory and its contents when recursive is True."""
    return await client.execute(_delete_spec(key, recursive=recursive))


async def delete_dir(client: "Client", key: str) -> Response[KeyValueInfo]:
    """Delete a key or an empty directory."""
    return await client.execute(_delete_spec(key, dir=True))


async def compare_and_delete(
    client: "Client",
    key: str,
    current_value: Optional[str] = None,
    current_modified_index: Optional[int] = None,
) -> Response[KeyValueInfo]:
    """Delete a key only if its current value and/or modified index match.

    Raises InvalidConditionsError, without making a request, when neither
    condition is given.
    """
    conditions = ComparisonConditions(value=current_value, modified_index=current_modified_index)
    return await client.execute(_delete_spec(key, conditions=conditions))


async def watch(
    client: "Client",
    key: str,
    options: Optional[WatchOptions] = None,
) -> Response[KeyValueInfo]:
    """Wait for the next change to a key and return it.

    With options.index, returns the first change at or after that index,
    including past changes still held by etcd.

    Raises:
        WatchTimeoutError: options.timeout elapsed first. Errors from
            endpoints that failed before the deadline are kept in
            `partial_errors`.
        ClusterError: every endpoint failed before the deadline
    """
    options = options or WatchOptions()
    spec = _get_spec(
        key,
        GetOptions(recursive=options.recursive),
        wait=True,
        wait_index=options.index,
    )

    if options.timeout is None:
        return await client.execute(spec)

    state = FailoverState(client.endpoints)
    try:
        return await asyncio.wait_for(client.execute(spec, state=state), options.timeout)
    except asyncio.TimeoutError:
        logger.warning(
            f"watch: {key} timed out after {options.timeout}s "
            f"with {len(state.errors)} endpoint error(s)"
        )
        raise WatchTimeoutError(options.timeout, state.errors) from None
