"""
Configuration for etcd_client.
"""
import base64
import logging
import os
from dataclasses import dataclass, field
from typing import Dict, Optional, Sequence, Tuple, Union

from .endpoints import Endpoint, parse_endpoints

logger = logging.getLogger("etcd_client.config")

DEFAULT_ENDPOINT = "http://127.0.0.1:2379"


def _mask_sensitive(value: Optional[str], visible_chars: int = 3) -> str:
    """Mask sensitive value for safe logging."""
    if value is None:
        return "<None>"
    if len(value) <= visible_chars:
        return "*" * len(value)
    return value[:visible_chars] + "*" * (len(value) - visible_chars)


@dataclass(frozen=True)
class BasicAuth:
    """Credentials for HTTP basic authentication."""

    username: str
    password: str

    @property
    def header_value(self) -> str:
        """Return "Basic <base64(username:password)>"."""
        credentials = f"{self.username}:{self.password}".encode("utf-8")
        return "Basic " + base64.b64encode(credentials).decode("ascii")

    def __repr__(self) -> str:
        """Safe repr that masks the password."""
        return (
            f"BasicAuth(username={self.username!r}, "
            f"password={_mask_sensitive(self.password, 0)!r})"
        )


@dataclass
class TimeoutConfig:
    """Timeout configuration in seconds."""

    connect: float = 5.0
    read: float = 30.0
    write: float = 10.0


@dataclass
class ClientConfig:
    """Client configuration.

    endpoints: URLs of one or more cluster members. API calls are made to each
    member in order until one of them succeeds.
    """

    endpoints: Sequence[Union[str, Endpoint]] = field(default_factory=lambda: [DEFAULT_ENDPOINT])
    basic_auth: Optional[BasicAuth] = None
    timeout: Union[TimeoutConfig, float, None] = None
    headers: Dict[str, str] = field(default_factory=dict)
    verify_ssl: Optional[bool] = None
    trace: Optional[bool] = None


@dataclass
class ResolvedConfig:
    """Client configuration with defaults applied."""

    endpoints: Tuple[Endpoint, ...]
    basic_auth: Optional[BasicAuth]
    timeout: TimeoutConfig
    headers: Dict[str, str]
    verify_ssl: bool
    trace: bool


DEFAULT_TIMEOUT = TimeoutConfig()


def _env_flag(name: str) -> Optional[bool]:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return None
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _is_ssl_verify_disabled_by_env() -> bool:
    """
    Check if SSL verification is disabled via environment variables.

    Returns True if any of these are set:
    - NODE_TLS_REJECT_UNAUTHORIZED=0
    - SSL_CERT_VERIFY=0
    """
    node_tls = os.environ.get("NODE_TLS_REJECT_UNAUTHORIZED", "")
    ssl_cert_verify = os.environ.get("SSL_CERT_VERIFY", "")
    return node_tls == "0" or ssl_cert_verify == "0"


def normalize_timeout(timeout: Union[TimeoutConfig, float, None]) -> TimeoutConfig:
    """Normalize timeout config."""
    if timeout is None:
        return DEFAULT_TIMEOUT
    if isinstance(timeout, (int, float)):
        if timeout <= 0:
            raise ValueError(f"timeout must be positive, got {timeout}")
        return TimeoutConfig(connect=timeout, read=timeout, write=timeout)
    return timeout


def resolve_config(config: ClientConfig) -> ResolvedConfig:
    """Validate a ClientConfig and apply defaults.

    Raises NoEndpointsError or InvalidEndpointError synchronously.
    """
    endpoints = parse_endpoints(config.endpoints)

    verify_ssl = config.verify_ssl
    if verify_ssl is None:
        verify_ssl = not _is_ssl_verify_disabled_by_env()

    trace = config.trace
    if trace is None:
        trace = bool(_env_flag("ETCD_CLIENT_TRACE"))

    resolved = ResolvedConfig(
        endpoints=endpoints,
        basic_auth=config.basic_auth,
        timeout=normalize_timeout(config.timeout),
        headers=dict(config.headers),
        verify_ssl=verify_ssl,
        trace=trace,
    )
    logger.debug(
        f"resolve_config: endpoints={[str(e) for e in endpoints]}, "
        f"basic_auth={config.basic_auth!r}, verify_ssl={verify_ssl}, trace={trace}"
    )
    return resolved


def config_from_env(environ: Optional[Dict[str, str]] = None) -> ClientConfig:
    """Build a ClientConfig from environment variables.

    - ETCD_ENDPOINTS: comma-separated member URLs
    - ETCD_USERNAME / ETCD_PASSWORD: basic auth credentials
    - ETCD_TIMEOUT: timeout in seconds for connect, read and write
    """
    env = os.environ if environ is None else environ

    raw_endpoints = env.get("ETCD_ENDPOINTS", "")
    endpoints = [item.strip() for item in raw_endpoints.split(",") if item.strip()]
    if not endpoints:
        endpoints = [DEFAULT_ENDPOINT]

    basic_auth = None
    username = env.get("ETCD_USERNAME")
    if username:
        basic_auth = BasicAuth(username=username, password=env.get("ETCD_PASSWORD", ""))

    timeout: Optional[float] = None
    raw_timeout = env.get("ETCD_TIMEOUT")
    if raw_timeout:
        try:
            timeout = float(raw_timeout)
        except ValueError:
            raise ValueError(f"ETCD_TIMEOUT must be a number, got {raw_timeout!r}") from None

    return ClientConfig(endpoints=endpoints, basic_auth=basic_auth, timeout=timeout)
