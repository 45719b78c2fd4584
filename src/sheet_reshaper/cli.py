"""
Command-line interface for the sheet reshaper using Typer.
"""

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from . import __version__
from .config import ColumnLayout, ConversionOptions
from .core import convert_file
from .io_utils import write_output_file
from .logging_utils import (
    setup_logging,
    print_summary_table,
    print_success_message,
    print_error_message,
    print_progress_step
)

app = typer.Typer(
    name="sheet-reshape",
    help="Aggregate sales rows by year/month or split pipe-joined price cells into rows",
    add_completion=False
)

console = Console()


def _run(input_file: Path, options: ConversionOptions, out: Path) -> None:
    print_progress_step("Converting workbook...", console)

    result = convert_file(input_file, options)
    output_path = write_output_file(result.content, result.filename, out)
    result.summary['output_path'] = str(output_path)

    print_summary_table(result.summary, console)
    print_success_message(str(output_path), console)


@app.command()
def aggregate(
    input_file: Annotated[
        Path,
        typer.Option("--input", "-i", help="Path to input Excel file", exists=True, file_okay=True, dir_okay=False)
    ],
    mode: Annotated[
        str,
        typer.Option("--mode", "-m", help="Bucket by 'yearly' (2024) or 'monthly' (24년_01월)")
    ] = "yearly",
    out: Annotated[
        Path,
        typer.Option("--out", "-o", help="Output directory")
    ] = Path("."),
    code_column: Annotated[
        str,
        typer.Option("--code-column", help="Column letter of the model code")
    ] = "C",
    label_column: Annotated[
        str,
        typer.Option("--label-column", help="Column letter of the product family")
    ] = "D",
    amount_column: Annotated[
        str,
        typer.Option("--amount-column", help="Column letter of the amount to sum")
    ] = "H",
    date_column: Annotated[
        str,
        typer.Option("--date-column", help="Column letter of the YYMMDD date code")
    ] = "J",
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose logging")
    ] = False,
) -> None:
    """
    Sum amounts per model code into year or year-month columns, with a
    subtotal row for each product family.

    Examples:

        # Yearly totals written to the current directory
        sheet-reshape aggregate --input "sales.xlsx"

        # Monthly totals, amounts read from column I
        sheet-reshape aggregate --input "sales.xlsx" --mode monthly --amount-column I --out ./converted
    """
    setup_logging(verbose)

    try:
        if mode not in ("yearly", "monthly"):
            raise ValueError(f"Mode must be 'yearly' or 'monthly', got: {mode}")

        layout = ColumnLayout.from_letters(
            code=code_column,
            label=label_column,
            amount=amount_column,
            date_code=date_column
        )
        _run(input_file, ConversionOptions(mode=mode, layout=layout), out)

    except Exception as e:
        print_error_message(str(e), console)
        raise typer.Exit(1)


@app.command("price-split")
def price_split(
    input_file: Annotated[
        Path,
        typer.Option("--input", "-i", help="Path to input Excel file", exists=True, file_okay=True, dir_okay=False)
    ],
    out: Annotated[
        Path,
        typer.Option("--out", "-o", help="Output directory")
    ] = Path("."),
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose logging")
    ] = False,
) -> None:
    """
    Split the 모델명 / 물품대(변경후) / 판매가(변경후) columns on '|' and write
    one row per model.

    Examples:

        sheet-reshape price-split --input "prices.xlsx" --out ./converted
    """
    setup_logging(verbose)

    try:
        _run(input_file, ConversionOptions(mode="price"), out)
    except Exception as e:
        print_error_message(str(e), console)
        raise typer.Exit(1)


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"sheet-reshape version {__version__}")


@app.command()
def info() -> None:
    """Show information about the tool."""
    console.print("""
[bold blue]Sheet Reshaper[/bold blue]

Reshapes the first worksheet of an Excel file into a new workbook.

[bold]Commands:[/bold]
• aggregate: per-code sums by year (년도별_) or year-month (월별_), with product family subtotals
• price-split: one row per '|'-separated model/price entry (가격변환_)

[bold]Aggregation columns (defaults):[/bold]
• C: model code   • D: product family   • H: amount   • J: YYMMDD date code

[bold]Supported file formats:[/bold]
• .xlsx (Excel 2007+)
• .xlsm (Excel with macros)

Use --help for detailed usage information.
""")


if __name__ == "__main__":
    app()
