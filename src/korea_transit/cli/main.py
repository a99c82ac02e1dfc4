"""CLI main entry point for Seoul transit lookups."""

import asyncio
import logging
import sys
from typing import Any

import click

from .. import __version__
from ..core.config import load_settings
from ..core.constants import DEFAULT_LIMIT, MAX_LIMIT
from ..core.exceptions import ConfigurationError
from ..mcp.server import TransitMCPServer
from .formatters import console, display_settings, display_tool_output, error_console

FORMAT_OPTION = click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["markdown", "json"]),
    default="markdown",
    help="Output format",
)
LIMIT_OPTION = click.option(
    "--limit",
    "-n",
    type=click.IntRange(1, MAX_LIMIT),
    default=DEFAULT_LIMIT,
    show_default=True,
    help="Maximum number of results",
)


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
def cli(verbose: bool) -> None:
    """Korea Transit - Real-time Seoul subway, bus and bike-share information."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING)


def _create_server() -> TransitMCPServer:
    try:
        return TransitMCPServer()
    except ConfigurationError as e:
        error_console.print(f"[red]Configuration error:[/red] {e}")
        sys.exit(1)


def _run_tool(tool: str, arguments: dict[str, Any], output_format: str) -> None:
    server = _create_server()
    arguments["response_format"] = output_format
    try:
        with console.status("[bold green]Fetching transit information..."):
            output = asyncio.run(server.call_tool(tool, arguments))
    except Exception as e:
        error_console.print(f"[red]Unexpected error:[/red] {e}")
        sys.exit(1)
    finally:
        server.service.close()

    display_tool_output(output, output_format)
    if output.is_error:
        sys.exit(1)


@cli.command()
@click.option("--stdio", is_flag=True, help="Serve over stdin/stdout instead of HTTP")
@click.option("--host", help="HTTP bind address (default: HOST setting)")
@click.option("--port", type=int, help="HTTP port (default: PORT setting)")
def serve(stdio: bool, host: str | None, port: int | None) -> None:
    """Run the MCP server.

    Examples:
        korea-transit serve
        korea-transit serve --port 8080
        korea-transit serve --stdio
    """
    server = _create_server()
    logging.getLogger().setLevel(server.settings.log_level.upper())

    if stdio:
        from ..mcp.server import run_stdio

        try:
            asyncio.run(run_stdio(server))
        finally:
            server.service.close()
        return

    from ..mcp.http import run_http

    run_http(server, host=host, port=port)


@cli.command()
@click.argument("station")
@LIMIT_OPTION
@FORMAT_OPTION
def subway(station: str, limit: int, output_format: str) -> None:
    """Show real-time train arrivals at a subway station.

    Examples:
        korea-transit subway 강남
        korea-transit subway 서울역 --limit 5 --format json
    """
    _run_tool(
        "transit_get_subway_arrival",
        {"station_name": station, "limit": limit},
        output_format,
    )


@cli.command()
@click.option("--line", "-l", help="Line number (1-9); all lines when omitted")
@FORMAT_OPTION
def status(line: str | None, output_format: str) -> None:
    """Show subway operating status.

    Examples:
        korea-transit status
        korea-transit status --line 2
    """
    arguments = {"line": line} if line else {}
    _run_tool("transit_get_subway_status", arguments, output_format)


@cli.command()
@click.argument("ars_id")
@LIMIT_OPTION
@FORMAT_OPTION
def bus(ars_id: str, limit: int, output_format: str) -> None:
    """Show real-time bus arrivals at a stop (5-digit stop number).

    Examples:
        korea-transit bus 16165
    """
    _run_tool(
        "transit_get_bus_arrival", {"ars_id": ars_id, "limit": limit}, output_format
    )


@cli.command()
@click.argument("query")
@LIMIT_OPTION
@FORMAT_OPTION
def stops(query: str, limit: int, output_format: str) -> None:
    """Search bus stops by name or stop number.

    Examples:
        korea-transit stops 강남역
        korea-transit stops 16165
    """
    _run_tool(
        "transit_search_bus_station", {"query": query, "limit": limit}, output_format
    )


@cli.command()
@click.argument("query")
@LIMIT_OPTION
@FORMAT_OPTION
def bike(query: str, limit: int, output_format: str) -> None:
    """Search bike-share stations and their available bikes.

    Examples:
        korea-transit bike 여의도
    """
    _run_tool(
        "transit_get_bike_station", {"query": query, "limit": limit}, output_format
    )


@cli.command()
@click.argument("location")
@FORMAT_OPTION
def around(location: str, output_format: str) -> None:
    """Show subway, bus and bike-share information around a place.

    Examples:
        korea-transit around 홍대입구
    """
    _run_tool("transit_get_combined_info", {"location": location}, output_format)


@cli.group()
def config() -> None:
    """Configuration management."""
    pass


@config.command("show")
def show_config() -> None:
    """Show current configuration."""
    try:
        settings = load_settings()
    except ConfigurationError as e:
        error_console.print(f"[red]Configuration error:[/red] {e}")
        sys.exit(1)
    display_settings(settings)


if __name__ == "__main__":
    cli()
