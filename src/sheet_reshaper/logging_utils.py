"""
Logging configuration using Rich for beautiful console output.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table


def setup_logging(verbose: bool = False) -> None:
    """
    Configure logging with Rich handler.
    
    Args:
        verbose: Whether to enable debug-level logging
    """
    console = Console(stderr=True)
    level = logging.DEBUG if verbose else logging.INFO
    
    rich_handler = RichHandler(
        console=console,
        show_time=True,
        show_path=False,
        markup=False,
        rich_tracebacks=True
    )
    
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[rich_handler]
    )
    
    # Reduce noise from other libraries
    logging.getLogger("openpyxl").setLevel(logging.WARNING)


_SUMMARY_LABELS = [
    ('input_file', "Input File"),
    ('sheet_used', "Sheet Used"),
    ('mode', "Mode"),
    ('source_rows', "Source Rows"),
    ('buckets', "Buckets"),
    ('groups_found', "Groups Found"),
    ('families', "Product Families"),
    ('records', "Split Records"),
    ('output_rows', "Output Rows"),
    ('output_path', "Output File"),
]


def print_summary_table(summary: dict, console: Optional[Console] = None) -> None:
    """
    Print a formatted summary table of the conversion.
    
    Only the properties present in the summary are shown, so the same table
    serves the aggregation and price-split modes.
    
    Args:
        summary: Summary dictionary from a ConversionResult
        console: Rich console instance (creates new one if None)
    """
    if console is None:
        console = Console()
    
    table = Table(title="Conversion Summary", show_header=True, header_style="bold magenta")
    table.add_column("Property", style="cyan", no_wrap=True)
    table.add_column("Value", style="white")
    
    for key, label in _SUMMARY_LABELS:
        if key in summary:
            table.add_row(label, str(summary[key]))
    
    console.print()
    console.print(table)


def print_success_message(output_path: str, console: Optional[Console] = None) -> None:
    """
    Print a success message with the written file.
    
    Args:
        output_path: Path of the converted file
        console: Rich console instance (creates new one if None)
    """
    if console is None:
        console = Console()
    
    console.print()
    console.print("✅ [bold green]Converted file written to:[/bold green]")
    console.print(f"   [cyan]{output_path}[/cyan]")


def print_error_message(error: str, console: Optional[Console] = None) -> None:
    """
    Print an error message with Rich formatting.
    
    Args:
        error: Error message to display
        console: Rich console instance (creates new one if None)
    """
    if console is None:
        console = Console()
    
    console.print()
    console.print(f"❌ [bold red]Error:[/bold red] {error}")


def print_progress_step(step: str, console: Optional[Console] = None) -> None:
    """
    Print a progress step message.
    
    Args:
        step: Description of the current step
        console: Rich console instance (creates new one if None)
    """
    if console is None:
        console = Console()
    
    console.print(f"🔄 [bold blue]{step}[/bold blue]")
