"""CLI entry point for the token emissions engine.

Usage:
    token-emissions schedule data/allocations/arbitrum.yaml --price 1.2
    token-emissions compare arbitrum optimism --sort-by total_unlock_value
    token-emissions compare --tokens-file watchlist.txt --output json --save out/compare
"""

import logging
import traceback
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .. import __version__
from ..comparison.categories import TOKEN_CATEGORIES
from ..comparison.engine import RANKABLE_FIELDS
from ..core.config import get_config
from ..core.exceptions import EmissionsToolError
from ..core.models import ProjectInput
from ..core.types import DataSource
from ..orchestrator import EmissionsOrchestrator
from ..output.formatters import CSVFormatter, JSONFormatter, OutputFormatter, TableFormatter
from ..providers.allocations.manual_alloc import ManualAllocationProvider

# Initialize app
app = typer.Typer(
    name="token-emissions",
    help="Token emission schedule and unlock comparison tool",
    add_completion=False,
)

console = Console()

FORMATTERS = {
    "table": (TableFormatter, ".txt"),
    "json": (JSONFormatter, ".json"),
    "csv": (CSVFormatter, ".csv"),
}


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_time=False, show_path=False)],
    )


def _formatter(output: str) -> tuple[OutputFormatter, str]:
    try:
        formatter_cls, ext = FORMATTERS[output.lower()]
    except KeyError:
        console.print(f"[red]Invalid output format: {output}. Use table, json or csv[/]")
        raise typer.Exit(1)
    return formatter_cls(), ext


def _emit(result, output: str, save: Optional[Path]) -> None:
    """Print a result and optionally save it."""
    formatter, ext = _formatter(output)

    if isinstance(formatter, TableFormatter):
        print(formatter.format(result, color=console.is_terminal), end="")
    else:
        print(formatter.format(result))

    if save:
        save.parent.mkdir(parents=True, exist_ok=True)
        save_path = save.with_suffix(ext)
        formatter.format_to_file(result, str(save_path))
        console.print(f"[green]Saved to {save_path}[/]")


def _fail(e: Exception, verbose: bool) -> None:
    console.print(f"[red]Error: {e}[/]")
    if verbose:
        traceback.print_exc()
    raise typer.Exit(1)


@app.command()
def schedule(
    file: Path = typer.Argument(..., help="Allocation file (.yaml, .yml or .json)"),
    months: Optional[int] = typer.Option(
        None,
        "--months", "-m",
        help="Analysis window in months (default from config)",
    ),
    price: Optional[float] = typer.Option(
        None,
        "--price", "-p",
        help="Current token price in USD (overrides the file)",
    ),
    circulating_supply: Optional[float] = typer.Option(
        None,
        "--circulating-supply", "-c",
        help="Circulating supply (overrides the file)",
    ),
    total_supply: Optional[float] = typer.Option(
        None,
        "--total-supply", "-t",
        help="Total supply (overrides the file)",
    ),
    tge_date: Optional[str] = typer.Option(
        None,
        "--tge-date", "-d",
        help="TGE date for month labels (YYYY-MM-DD, overrides the file)",
    ),
    output: str = typer.Option(
        "table",
        "--output", "-o",
        help="Output format: table, json, csv",
    ),
    save: Optional[Path] = typer.Option(
        None,
        "--save", "-s",
        help="Save output to file",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="Enable verbose logging",
    ),
) -> None:
    """
    Compute the emission schedule for one allocation file, offline.

    Examples:
        token-emissions schedule arbitrum.yaml --price 1.2 --circulating-supply 1.275e9
        token-emissions schedule op.json --months 48 --output csv
    """
    setup_logging(verbose)

    tge = None
    if tge_date:
        try:
            tge = datetime.strptime(tge_date, "%Y-%m-%d").date()
        except ValueError:
            console.print(f"[red]Invalid date format: {tge_date}. Use YYYY-MM-DD[/]")
            raise typer.Exit(1)

    if not file.exists():
        console.print(f"[red]File not found: {file}[/]")
        raise typer.Exit(1)

    try:
        provider = ManualAllocationProvider(data_directory=file.parent)
        allocation_file = provider.load_path(file, default_supply=total_supply)

        supply = total_supply or allocation_file.total_supply or sum(
            a.total_tokens for a in allocation_file.allocations
        )
        current_price = price if price is not None else (allocation_file.current_price or 0.0)
        circulating = (
            circulating_supply
            if circulating_supply is not None
            else (allocation_file.circulating_supply or 0.0)
        )

        project = ProjectInput(
            name=allocation_file.name or allocation_file.token,
            symbol=(allocation_file.symbol or "").upper(),
            coingecko_id=allocation_file.token,
            current_price=current_price,
            market_cap=circulating * current_price,
            circulating_supply=circulating,
            total_supply=supply,
            source=DataSource.MANUAL,
            allocations=allocation_file.allocations,
        )

        orchestrator = EmissionsOrchestrator(allocation_provider=provider, offline=True)
        report = orchestrator.build_report(project, months, tge or allocation_file.tge_date)

    except EmissionsToolError as e:
        _fail(e, verbose)

    _emit(report, output, save)


@app.command()
def compare(
    tokens: Optional[List[str]] = typer.Argument(None, help="CoinGecko IDs to compare"),
    tokens_file: Optional[Path] = typer.Option(
        None,
        "--tokens-file", "-f",
        help="File with CoinGecko IDs (one per line)",
    ),
    data_dir: Path = typer.Option(
        Path("data/allocations"),
        "--data-dir",
        help="Directory of manual allocation files",
    ),
    months: Optional[int] = typer.Option(
        None,
        "--months", "-m",
        help="Analysis window in months (default from config)",
    ),
    sort_by: Optional[str] = typer.Option(
        None,
        "--sort-by",
        help=f"Rank rows by a field: {', '.join(RANKABLE_FIELDS)}",
    ),
    offline: bool = typer.Option(
        False,
        "--offline",
        help="Use market figures recorded in allocation files only",
    ),
    output: str = typer.Option(
        "table",
        "--output", "-o",
        help="Output format: table, json, csv",
    ),
    save: Optional[Path] = typer.Option(
        None,
        "--save", "-s",
        help="Save output to file",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="Enable verbose logging",
    ),
) -> None:
    """
    Compare emissions across a watch list of tokens.

    Allocations come from the data directory; market data comes from
    CoinGecko unless --offline is given. Tokens without data are listed as
    missing.
    """
    setup_logging(verbose)

    watch_list = list(tokens or [])
    if tokens_file:
        if not tokens_file.exists():
            console.print(f"[red]File not found: {tokens_file}[/]")
            raise typer.Exit(1)
        with open(tokens_file, "r") as f:
            watch_list.extend(
                line.strip() for line in f if line.strip() and not line.startswith("#")
            )

    if not watch_list:
        console.print("[red]No tokens given[/]")
        raise typer.Exit(1)

    if sort_by and sort_by not in RANKABLE_FIELDS:
        console.print(f"[red]Cannot sort by '{sort_by}'. Valid fields: {', '.join(RANKABLE_FIELDS)}[/]")
        raise typer.Exit(1)

    console.print(f"[bold]Comparing {len(watch_list)} tokens...[/]")

    try:
        orchestrator = EmissionsOrchestrator(
            config=get_config(),
            data_directory=data_dir,
            offline=offline,
        )
        result = orchestrator.analyze_batch(watch_list, months, rank_by=sort_by)
    except EmissionsToolError as e:
        _fail(e, verbose)

    _emit(result, output, save)

    if result.missing:
        console.print(f"[yellow]{len(result.missing)} of {len(watch_list)} tokens had no data[/]")


@app.command()
def categories() -> None:
    """List the built-in token category mapping."""
    table = Table(title="Token Categories")
    table.add_column("Category", style="cyan")
    table.add_column("Tokens", style="dim")
    for category, token_ids in TOKEN_CATEGORIES.items():
        table.add_row(category, ", ".join(token_ids))
    console.print(table)


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"Token Emissions v{__version__}")


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
