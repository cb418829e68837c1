"""
Cluster endpoint parsing and validation.
"""
import logging
from dataclasses import dataclass
from typing import Iterable, Tuple, Union

import httpx

from .errors import InvalidEndpointError, NoEndpointsError

logger = logging.getLogger("etcd_client.endpoints")

VALID_SCHEMES = ("http", "https")


@dataclass(frozen=True)
class Endpoint:
    """Base URL of one cluster member."""

    url: str

    @classmethod
    def parse(cls, value: Union[str, "Endpoint"]) -> "Endpoint":
        """Validate an endpoint string. Raises InvalidEndpointError."""
        if isinstance(value, Endpoint):
            return value
        if not isinstance(value, str) or not value.strip():
            raise InvalidEndpointError(value, "expected a non-empty URL string")

        try:
            parsed = httpx.URL(value.strip())
        except (httpx.InvalidURL, TypeError, ValueError) as e:
            raise InvalidEndpointError(value, str(e)) from e

        if parsed.scheme not in VALID_SCHEMES:
            raise InvalidEndpointError(value, "scheme must be http or https")
        if not parsed.host:
            raise InvalidEndpointError(value, "missing host")
        if parsed.query or parsed.fragment:
            raise InvalidEndpointError(value, "query and fragment are not allowed")

        return cls(url=str(parsed))

    @property
    def base(self) -> str:
        """The URL with exactly one trailing slash."""
        return self.url.rstrip("/") + "/"

    def __str__(self) -> str:
        return self.url


def parse_endpoints(values: Iterable[Union[str, Endpoint]]) -> Tuple[Endpoint, ...]:
    """Parse endpoints, preserving order.

    Raises NoEndpointsError for an empty list and InvalidEndpointError for the
    first entry that is not an http(s) URL.
    """
    if isinstance(values, (str, Endpoint)):
        values = [values]

    endpoints = tuple(Endpoint.parse(value) for value in values)
    if not endpoints:
        raise NoEndpointsError()

    logger.debug(f"parse_endpoints: {len(endpoints)} endpoint(s): {[str(e) for e in endpoints]}")
    return endpoints
