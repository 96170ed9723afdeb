"""Command-line interface for sending envelope API requests."""
from __future__ import annotations

import json
import logging
import os
import sys
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import typer
from pydantic import TypeAdapter

try:  # pragma: no cover - exercised in runtime environments
    from rich import box
    from rich.console import Console
    from rich.table import Table
except ImportError as exc:  # pragma: no cover - optional dependency guard
    raise RuntimeError(
        "The CLI requires Rich for table rendering. Install the CLI extras via "
        "'pip install politic-network[cli]' to enable this command."
    ) from exc

from .classifier import classify_response
from .client import PoliticClient
from .config import RoutingConfig
from .results import Failure, Outcome

app = typer.Typer(help="Envelope API request CLI.", no_args_is_help=True)

console = Console(force_terminal=False, color_system=None)

_JSONABLE = TypeAdapter(Any)


@app.callback()
def main(
    log_level: str = typer.Option(
        "WARNING", "--log-level", envvar="POLITIC_LOG_LEVEL", help="Logging level."
    ),
) -> None:
    """Send requests and classify envelope responses."""

    logging.basicConfig(level=log_level.upper(), format="%(levelname)s %(name)s: %(message)s")


def _build_client(
    base_url: str | None,
    verify_ssl: bool,
    cert_path: Path | None,
    timeout: float,
    routing: RoutingConfig,
) -> PoliticClient:
    verify_target: bool | str
    if cert_path:
        expanded_cert = cert_path.expanduser()
        if not expanded_cert.exists():
            raise typer.BadParameter("Certificate file not found for --cert option.")
        if not verify_ssl:
            raise typer.BadParameter("Cannot combine --cert with --no-verify.")
        verify_target = str(expanded_cert)
    else:
        verify_target = verify_ssl

    return PoliticClient(
        base_url=base_url,
        verify_ssl=verify_target,
        timeout=timeout,
        routing=routing,
    )


def _coerce_simple(value: str) -> Any:
    v = value.strip()
    if not v:
        return ""
    low = v.lower()
    if low == "true":
        return True
    if low == "false":
        return False
    if low in {"null", "none"}:
        return None
    try:
        if "." in v:
            return float(v)
        return int(v)
    except ValueError:
        return v


def parse_pairs(pairs: Sequence[str], option: str) -> dict[str, Any] | None:
    """Parse repeated ``key=value`` options into a dict with simple coercion."""
    if not pairs:
        return None
    out: dict[str, Any] = {}
    for pair in pairs:
        if "=" not in pair:
            raise typer.BadParameter(f"{option} expects key=value, got {pair!r}.")
        key, val = pair.split("=", 1)
        out[key.strip()] = _coerce_simple(val)
    return out


def to_jsonable(value: Any) -> Any:
    return _JSONABLE.dump_python(value, mode="json")


def _echo_json(payload: Any) -> None:
    typer.echo(json.dumps(to_jsonable(payload), indent=2))


def _render_rich_table(title: str, rows: Sequence[Mapping[str, Any]]) -> None:
    table = Table(title=title, box=box.SIMPLE, show_lines=False, header_style="bold cyan")
    columns: list[str] = []
    for row in rows:
        for key in row:
            if key not in columns:
                columns.append(key)
    for column in columns:
        table.add_column(str(column))
    for row in rows:
        table.add_row(*("" if row.get(c) is None else str(row.get(c)) for c in columns))
    console.print(table)


def _present_outcome(outcome: Outcome[Any], *, json_output: bool) -> None:
    if isinstance(outcome, Failure):
        status = outcome.error.status_code
        suffix = f" (status {status})" if status else ""
        typer.secho(f"{outcome.kind.value}: {outcome.message}{suffix}", err=True, fg=typer.colors.RED)
        raise typer.Exit(code=1)

    payload = to_jsonable(outcome.value)
    if json_output:
        _echo_json(payload)
        return
    if isinstance(payload, Mapping):
        _render_rich_table("Result", [payload])
        return
    if isinstance(payload, list) and payload and all(isinstance(i, Mapping) for i in payload):
        _render_rich_table("Result", payload)
        return
    _echo_json(payload)


def _shared_options() -> dict[str, Any]:  # pragma: no cover - helper indirection
    # Respect POLITIC_VERIFY_SSL when present (1/0, true/false, yes/no).
    env_verify = os.getenv("POLITIC_VERIFY_SSL")
    default_verify = True
    if env_verify is not None and env_verify.strip().lower() in {"0", "false", "no", "off"}:
        default_verify = False

    return {
        "base_url": typer.Option(
            None, "--base-url", envvar="POLITIC_BASE_URL", help="Base URL for relative paths."
        ),
        "token": typer.Option(
            "", "--token", envvar="POLITIC_TOKEN", help="Bearer token sent with the request."
        ),
        "verify_ssl": typer.Option(
            default_verify,
            "--verify/--no-verify",
            envvar="POLITIC_VERIFY_SSL",
            help="Enable or disable TLS certificate verification.",
            show_default=True,
        ),
        "cert_path": typer.Option(
            None,
            "--cert",
            envvar="POLITIC_CA_CERT",
            help="Path to a custom CA bundle for TLS verification.",
        ),
        "timeout": typer.Option(30.0, help="Request timeout (seconds).", show_default=True),
        "output_json": typer.Option(
            False,
            "--json",
            "-j",
            help="Return raw JSON instead of rendering a table.",
        ),
    }


_SHARED_OPTIONS = _shared_options()


@app.command("request")
def request_command(
    method: str = typer.Argument(..., help="GET, POST, PUT, PATCH or DELETE."),
    url: str = typer.Argument(..., help="Absolute URL or path relative to --base-url."),
    param: list[str] = typer.Option(
        [], "--param", "-P", help="Parameter in key=value form (query or body by verb)."
    ),
    query: list[str] = typer.Option([], "--query", help="PUT query parameter in key=value form."),
    route: list[str] = typer.Option([], "--route", "-r", help="Positional route parameter."),
    get_query_mode: bool = typer.Option(
        True, "--get-query/--get-route", help="Addressing mode for GET.", show_default=True
    ),
    patch_query_mode: bool = typer.Option(
        True, "--patch-query/--patch-route", help="Addressing mode for PATCH.", show_default=True
    ),
    base_url: str | None = _SHARED_OPTIONS["base_url"],
    token: str = _SHARED_OPTIONS["token"],
    verify_ssl: bool = _SHARED_OPTIONS["verify_ssl"],
    cert_path: Path | None = _SHARED_OPTIONS["cert_path"],
    timeout: float = _SHARED_OPTIONS["timeout"],
    output_json: bool = _SHARED_OPTIONS["output_json"],
) -> None:
    """Send a single request and print its classified outcome."""

    parameters = parse_pairs(param, "--param")
    query_params = parse_pairs(query, "--query")
    routing = RoutingConfig(get_query_mode=get_query_mode, patch_query_mode=patch_query_mode)

    with _build_client(base_url, verify_ssl, cert_path, timeout, routing) as client:
        outcome = client.request(
            url,
            method,
            parameters,
            token,
            route_params=route or None,
            query_params=query_params,
        ).result()

    _present_outcome(outcome, json_output=output_json)


@app.command("classify")
def classify_command(
    source: str = typer.Argument(..., help="File holding a raw response body, or '-' for stdin."),
    status: int = typer.Option(200, "--status", "-s", help="HTTP status code of the response."),
    output_json: bool = _SHARED_OPTIONS["output_json"],
) -> None:
    """Classify a captured response body without sending anything."""

    if source == "-":
        content = sys.stdin.buffer.read()
    else:
        path = Path(source).expanduser()
        if not path.is_file():
            raise typer.BadParameter(f"Response file not found: {source}")
        content = path.read_bytes()

    _present_outcome(classify_response(content, status), json_output=output_json)
