"""Console output using the Rich library."""
from typing import List, Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ..core.logging import get_logger

logger = get_logger(__name__)

class ConsoleInterface:
    """Prints banners, summaries and errors for the command line tool."""

    def __init__(self, console: Optional[Console] = None):
        self.logger = logger
        self.console = console or Console()

    def display_banner(self, title: str, subtitle: str = "") -> None:
        self.console.print(Panel(subtitle or title, title=title, box=box.ROUNDED, style="cyan"))

    def display_export_summary(
        self,
        tables: List[str],
        rows: int,
        file_path: str,
        with_structure: bool,
        with_data: bool,
        duration: float
    ) -> None:
        """Display the result of an export."""
        table = Table(title="Export Summary", box=box.ROUNDED)
        table.add_column("Metric", style="cyan")
        table.add_column("Value", style="yellow")

        table.add_row("Tables", str(len(tables)))
        table.add_row("Structure", "yes" if with_structure else "no")
        table.add_row("Data", "yes" if with_data else "no")
        table.add_row("Rows Exported", str(rows))
        table.add_row("File Path", file_path)
        table.add_row("Duration", self._format_time(duration))

        self.console.print(table)

    def display_conversion_summary(self, result, format_name: str) -> None:
        """Display the result of a conversion.

        Args:
            result: ConversionResult of the run
            format_name: Dialect the script was written for
        """
        table = Table(title="Conversion Summary", box=box.ROUNDED)
        table.add_column("Metric", style="cyan")
        table.add_column("Value", style="yellow")

        table.add_row("Format", format_name)
        if result.truncate_count:
            table.add_row("Tables Truncated", str(result.truncate_count))
        else:
            table.add_row("Tables Created", str(result.create_count))
        table.add_row("Tables With Data", str(result.insert_count))
        table.add_row("Rows", str(result.row_count))
        table.add_row("Statements", str(result.statement_count))
        if result.file_path:
            table.add_row("File Path", result.file_path)
        table.add_row("Duration", self._format_time(result.duration))

        self.console.print(table)

    def display_formats(self, formats: List[str]) -> None:
        table = Table(title="Available Formats", box=box.ROUNDED)
        table.add_column("Format", style="cyan")
        for name in formats:
            table.add_row(name)
        self.console.print(table)

    def display_error(self, message: str) -> None:
        self.console.print(f"[red]Error:[/red] {escape(message)}", highlight=False)

    def _format_time(self, seconds: float) -> str:
        if seconds < 60:
            return f"{seconds:.2f}s"
        minutes, seconds = divmod(seconds, 60)
        return f"{int(minutes)}m {seconds:.0f}s"
