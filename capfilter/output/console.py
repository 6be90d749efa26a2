"""
capfilter Console Output Module

Rich console formatting for the CLI interface.
"""

from rich.box import ROUNDED
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from capfilter import __version__
from capfilter.filters import Attribute


# =============================================================================
# Constants
# =============================================================================

# Styles per attribute type
TYPE_STYLES = {
    "vlan": "magenta",
    "ethertype": "bright_blue",
    "protocol": "cyan",
    "ipaddress": "bright_green",
    "macaddress": "yellow",
    "port": "bright_cyan",
    "section_match": "bold white",
    "attribute_preset": "bold white",
}


# =============================================================================
# Console Display Class
# =============================================================================


class CapfilterConsole:
    """Rich console interface for the capfilter CLI."""

    def __init__(self, console: Console | None = None):
        """Initialize the console."""
        self.console = console or Console()

    def print_header(self) -> None:
        """Print the tool name and version."""
        self.console.print(f"[bold cyan]capfilter[/bold cyan] [dim]v{__version__}[/dim]")
        self.console.print()

    def print_error(self, text: str) -> None:
        """Print an error message."""
        self.console.print(f"  [red]✗[/red] {escape(text)}")

    def print_info(self, text: str) -> None:
        """Print an info message."""
        self.console.print(f"  [cyan]ℹ[/cyan] {text}")

    # =========================================================================
    # Attributes and Expression
    # =========================================================================

    def print_attributes(self, attributes: list[Attribute]) -> None:
        """Print a table of attributes and their compiled fragments."""
        if not attributes:
            self.print_info("No attributes given")
            return

        table = Table(
            title="Capture Attributes",
            box=ROUNDED,
            border_style="bright_blue",
            header_style="bold bright_white",
            title_style="bold cyan",
        )

        table.add_column("Section", style="bright_yellow", justify="center", width=8)
        table.add_column("Type", min_width=12)
        table.add_column("Match", style="dim", min_width=10)
        table.add_column("Input", style="bright_white")
        table.add_column("Fragment", style="bright_cyan")

        for attr in attributes:
            type_name = attr.type.value
            style = TYPE_STYLES.get(type_name, "white")
            table.add_row(
                str(attr.section),
                f"[{style}]{type_name}[/{style}]",
                attr.operator.value,
                escape(attr.input_string),
                escape(attr.filter_string) or "[dim]-[/dim]",
            )

        self.console.print(table)
        self.console.print()

    def print_expression(self, expression: str, vlan_supported: bool) -> None:
        """Print the compiled expression."""
        subtitle = "VLAN tags supported" if vlan_supported else "no VLAN support"
        body = escape(expression) or "[dim](empty: capture everything)[/dim]"

        self.console.print(Panel(
            body,
            title="[bold bright_white]pcap filter[/bold bright_white]",
            subtitle=f"[dim]{subtitle}[/dim]",
            border_style="bright_green",
            padding=(1, 2),
        ))


# =============================================================================
# Singleton Instance
# =============================================================================

_console: CapfilterConsole | None = None


def get_console() -> CapfilterConsole:
    """Get the singleton console instance."""
    global _console
    if _console is None:
        _console = CapfilterConsole()
    return _console
