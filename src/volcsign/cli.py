"""volcsign CLI - sign and send requests to the visual API."""

import asyncio
import functools
import sys
from collections.abc import Callable, Coroutine
from pathlib import Path
from typing import Any, ParamSpec, TypeVar

import click
from rich.console import Console
from rich.table import Table

from volcsign.client import VisualClient, create_signer
from volcsign.common.errors import MissingCredentialsError, TransportError
from volcsign.common.logging import setup_logging
from volcsign.common.settings import Settings
from volcsign.signing.query import PercentQueryEncoder, VerbatimQueryEncoder
from volcsign.signing.signer import Credential

console = Console()

P = ParamSpec("P")
R = TypeVar("R")


def async_command(f: Callable[P, Coroutine[Any, Any, R]]) -> Callable[P, R]:
    """Decorator to run async commands."""

    @functools.wraps(f)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        return asyncio.run(f(*args, **kwargs))

    return wrapper


def _parse_query(action: str, version: str, pairs: tuple[str, ...]) -> dict[str, str]:
    params = {"Action": action, "Version": version}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"Expected key=value, got: {pair}", param_hint="--query")
        params[key] = value
    return params


def _read_body(body: str | None, body_file: str | None) -> bytes:
    if body_file:
        return Path(body_file).expanduser().read_bytes()
    if body is None:
        raise click.UsageError("One of --body or --body-file is required")
    return body.encode("utf-8")


def _request_options(f: Callable[..., Any]) -> Callable[..., Any]:
    options = [
        click.option("--action", required=True, help="API action, e.g. CVProcess"),
        click.option("--version", "api_version", required=True, help="API version, e.g. 2024-06-06"),
        click.option("--query", "query_pairs", multiple=True, help="Extra query parameter key=value"),
        click.option("--body", help="JSON request body"),
        click.option(
            "--body-file",
            type=click.Path(exists=True, dir_okay=False),
            help="Read the JSON request body from a file",
        ),
    ]
    for option in reversed(options):
        f = option(f)
    return f


@click.group()
@click.option("--region", default=None, help="Region for the credential scope")
@click.option("--service", default=None, help="Service for the credential scope")
@click.option("--endpoint", default=None, help="Base URL requests are posted to")
@click.option("--host", default=None, help="Host header value covered by the signature")
@click.option("--timeout", type=float, default=None, help="Request timeout in seconds")
@click.option("--percent-encode", is_flag=True, help="Percent-encode query parameters")
@click.option("--debug-signing", is_flag=True, help="Log canonical request and signature")
@click.pass_context
def cli(
    ctx: click.Context,
    region: str | None,
    service: str | None,
    endpoint: str | None,
    host: str | None,
    timeout: float | None,
    percent_encode: bool,
    debug_signing: bool,
) -> None:
    """volcsign CLI - Sign and send visual API requests."""
    overrides: dict[str, Any] = {
        "region": region,
        "service": service,
        "endpoint": endpoint,
        "host": host,
        "http_timeout": timeout,
    }
    if debug_signing:
        overrides["debug_signing"] = True
        overrides["log_level"] = "DEBUG"
    settings = Settings(**{key: value for key, value in overrides.items() if value is not None})
    setup_logging(settings.log_level, settings.log_json)

    encoder = PercentQueryEncoder() if percent_encode else VerbatimQueryEncoder()

    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings
    ctx.obj["signer"] = create_signer(settings, query_encoder=encoder)


@cli.command("sign")
@_request_options
@click.pass_context
def sign(
    ctx: click.Context,
    action: str,
    api_version: str,
    query_pairs: tuple[str, ...],
    body: str | None,
    body_file: str | None,
) -> None:
    """Print a signed request without sending it."""
    settings: Settings = ctx.obj["settings"]
    signer = ctx.obj["signer"]
    credential = Credential(settings.access_key, settings.secret_key_value)

    try:
        signed = signer.sign(
            credential,
            settings.region,
            settings.service,
            _parse_query(action, api_version, query_pairs),
            _read_body(body, body_file),
        )
    except MissingCredentialsError as exc:
        console.print(f"[red]Error: {exc}[/red]")
        console.print("Set VOLCSIGN_ACCESS_KEY and VOLCSIGN_SECRET_KEY")
        sys.exit(1)

    console.print(f"[bold]URL:[/bold] {signed.url}", soft_wrap=True)

    table = Table(title="Signed Headers")
    table.add_column("Header", style="cyan")
    table.add_column("Value", style="green")
    for name, value in signed.headers.items():
        table.add_row(name, value)
    console.print(table)

    if settings.debug_signing:
        console.print("[bold]Canonical Request:[/bold]")
        console.print(signed.canonical_request.render(), markup=False, soft_wrap=True)
        console.print("[bold]String to Sign:[/bold]")
        console.print(signed.string_to_sign, markup=False, soft_wrap=True)


@cli.command("call")
@_request_options
@click.pass_context
@async_command
async def call(
    ctx: click.Context,
    action: str,
    api_version: str,
    query_pairs: tuple[str, ...],
    body: str | None,
    body_file: str | None,
) -> None:
    """Sign a request, send it and print the response."""
    settings: Settings = ctx.obj["settings"]
    params = _parse_query(action, api_version, query_pairs)
    payload = _read_body(body, body_file)

    async with VisualClient(settings, signer=ctx.obj["signer"]) as client:
        try:
            response = await client.request(params, payload)
        except MissingCredentialsError as exc:
            console.print(f"[red]Error: {exc}[/red]")
            console.print("Set VOLCSIGN_ACCESS_KEY and VOLCSIGN_SECRET_KEY")
            sys.exit(1)
        except TransportError as exc:
            console.print(f"[red]Error: {exc}[/red]")
            sys.exit(1)

    style = "green" if response.ok else "red"
    console.print(f"[{style}]HTTP {response.status}[/{style}]")
    console.print(response.body, markup=False, soft_wrap=True)
    if not response.ok:
        sys.exit(2)


def main() -> None:
    """Entry point."""
    cli()


if __name__ == "__main__":
    main()
