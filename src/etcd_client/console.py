"""
Rich console tracing of requests and responses.

Only used when tracing is enabled (ClientConfig.trace or ETCD_CLIENT_TRACE=1).
"""
import json
from typing import Any, Dict, Mapping, Optional

from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax

console = Console(stderr=True)

SENSITIVE_HEADERS = ("authorization", "x-api-key", "proxy-authorization")


def mask_auth_header(value: Optional[str], visible_chars: int = 15) -> str:
    """Mask an auth header value, keeping its scheme and a short prefix."""
    if not value:
        return ""
    if len(value) <= visible_chars:
        return value[: min(6, len(value))] + "***"
    return value[:visible_chars] + "***"


def mask_headers(headers: Mapping[str, str]) -> Dict[str, str]:
    masked = dict(headers)
    for key in masked:
        if key.lower() in SENSITIVE_HEADERS:
            masked[key] = mask_auth_header(masked[key])
    return masked


def _format_body(body: Any) -> str:
    if body is None:
        return ""
    if isinstance(body, bytes):
        try:
            body = body.decode("utf-8")
        except UnicodeDecodeError:
            return f"<binary data: {len(body)} bytes>"
    if isinstance(body, str):
        try:
            return json.dumps(json.loads(body), indent=2, ensure_ascii=False)
        except ValueError:
            return body
    return json.dumps(body, indent=2, ensure_ascii=False, default=str)


def print_request(
    method: str,
    url: str,
    headers: Mapping[str, str],
    body: Optional[bytes] = None,
) -> None:
    console.print(
        Panel(f"[bold cyan]{method}[/bold cyan] {url}", title="[bold blue]Request[/bold blue]")
    )
    console.print("[bold]Headers:[/bold]", mask_headers(headers))
    if body:
        console.print(
            Panel(
                Syntax(_format_body(body), "json", theme="monokai"),
                title="[bold]Request Body[/bold]",
            )
        )


def print_response(
    url: str,
    status_code: int,
    headers: Mapping[str, str],
    body: Optional[bytes] = None,
) -> None:
    color = "green" if 200 <= status_code < 300 else "red"
    console.print(
        Panel(
            f"[bold {color}]{status_code}[/bold {color}]",
            title=f"[bold blue]Response[/bold blue] ({url})",
        )
    )
    console.print("[bold]Headers:[/bold]", dict(headers))
    if body:
        console.print(
            Panel(
                Syntax(_format_body(body), "json", theme="monokai"),
                title=f"[bold]Response Body[/bold] (URL: {url})",
            )
        )


def print_transport_error(method: str, url: str, error: BaseException) -> None:
    console.print(
        Panel(
            f"[bold red]{type(error).__name__}[/bold red] {error}",
            title=f"[bold red]Transport error[/bold red] ({method} {url})",
        )
    )
