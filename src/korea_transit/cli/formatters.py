"""Output formatters for CLI display."""

from rich.console import Console
from rich.markdown import Markdown
from rich.table import Table

from ..core.config import Settings
from ..core.models import ResponseFormat, ToolOutput

console = Console()
error_console = Console(stderr=True)


def display_tool_output(output: ToolOutput, output_format: str) -> None:
    """Render a tool's text: markdown through rich, JSON pretty-printed."""
    if output.is_error:
        error_console.print(output.text, style="red", markup=False)
        return

    if output_format == ResponseFormat.JSON.value:
        try:
            console.print_json(output.text)
        except ValueError:
            # Truncated responses are no longer valid JSON.
            console.print(output.text, markup=False, highlight=False)
    else:
        console.print(Markdown(output.text))


def display_settings(settings: Settings) -> None:
    """Display effective settings as a table, API keys masked."""
    table = Table(
        title="Current Configuration", show_header=True, header_style="bold magenta"
    )
    table.add_column("Setting", style="cyan", no_wrap=True)
    table.add_column("Value", style="green")

    for name, value in settings.masked().items():
        table.add_row(name.upper(), value)

    console.print(table)
    if not settings.bus_arrival_enabled:
        console.print(
            "[yellow]DATA_GO_KR_API_KEY is not set: bus arrivals are disabled[/yellow]"
        )
