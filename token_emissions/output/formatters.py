"""Output formatters for emissions reports.

Provides multiple output formats:
- JSON: Machine-readable, complete data
- CSV: Spreadsheet-compatible, one section per table
- Table: Human-readable CLI output
"""

import csv
import io
import json
import logging
from abc import ABC, abstractmethod

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..allocation_mapper.vesting_parser import VestingParser
from ..core.models import AllocationSchedule, BatchResult, ProjectReport, VestingTerms

logger = logging.getLogger(__name__)

Result = ProjectReport | BatchResult


def _vesting_terms(schedule: AllocationSchedule) -> VestingTerms:
    return VestingTerms(
        tge_percent=schedule.tge_percent,
        cliff_months=schedule.cliff_months,
        vesting_months=schedule.vesting_months,
        vesting_type=schedule.vesting_type,
    )


def _month_label(report: ProjectReport, index: int) -> str:
    labels = report.emissions.month_labels
    return labels[index] if index < len(labels) else str(index)


class OutputFormatter(ABC):
    """Abstract base class for output formatters."""

    @abstractmethod
    def format(self, result: Result) -> str:
        """Format the result as a string."""
        pass

    def format_to_file(self, result: Result, filepath: str) -> None:
        """Write formatted result to a file."""
        with open(filepath, "w", encoding="utf-8", newline="") as f:
            f.write(self.format(result))
        logger.debug(f"Wrote {type(self).__name__} output to {filepath}")


class JSONFormatter(OutputFormatter):
    """Formats results as JSON."""

    def __init__(self, indent: int = 2, include_series: bool = True):
        """
        Initialize JSON formatter.

        Args:
            indent: JSON indentation level
            include_series: Include per-allocation monthly series
        """
        self.indent = indent
        self.include_series = include_series

    def _strip_series(self, data: dict) -> None:
        for allocation in data.get("emissions", {}).get("allocations", []):
            allocation.pop("monthly_emissions", None)
            allocation.pop("cumulative_supply", None)

    def format(self, result: Result) -> str:
        """Format result as JSON string."""
        data = result.model_dump(mode="json")

        if not self.include_series:
            if isinstance(result, BatchResult):
                for report in data["reports"]:
                    self._strip_series(report)
            else:
                self._strip_series(data)

        return json.dumps(data, indent=self.indent)


class CSVFormatter(OutputFormatter):
    """Formats report tables as sectioned CSV."""

    def __init__(self, delimiter: str = ","):
        self.delimiter = delimiter
        self.vesting_parser = VestingParser()

    def format(self, result: Result) -> str:
        """Format result as CSV string."""
        output = io.StringIO()
        writer = csv.writer(output, delimiter=self.delimiter)

        if isinstance(result, BatchResult):
            self._write_batch(writer, result)
        else:
            self._write_report(writer, result)

        return output.getvalue()

    def _write_report(self, writer, report: ProjectReport) -> None:
        p = report.project
        a = report.analytics
        e = report.emissions

        # 1. Project Section
        writer.writerow(["# Project"])
        writer.writerow(["Field", "Value"])
        writer.writerow(["Name", p.name])
        writer.writerow(["Symbol", p.symbol])
        writer.writerow(["CoinGecko ID", p.coingecko_id])
        writer.writerow(["Source", p.source.value])
        writer.writerow(["Current Price (USD)", f"{p.current_price:.6f}"])
        writer.writerow(["Circulating Supply", f"{p.circulating_supply:.0f}"])
        writer.writerow(["Total Supply", f"{p.total_supply:.0f}"])
        writer.writerow([])

        # 2. Analytics Section
        writer.writerow(["# Analytics"])
        writer.writerow(["Metric", "Value"])
        writer.writerow(["Total Unlock Value (USD)", f"{a.total_unlock_value:.2f}"])
        writer.writerow(["Cliff Unlock Tokens", f"{a.cliff_unlock_tokens:.0f}"])
        writer.writerow(["Linear Unlock Tokens", f"{a.linear_unlock_tokens:.0f}"])
        writer.writerow(["Cliff Unlock %", f"{a.cliff_unlock_pct:.4f}"])
        writer.writerow(["Linear Unlock %", f"{a.linear_unlock_pct:.4f}"])
        writer.writerow(["Total Unlock %", f"{a.total_unlock_pct:.4f}"])
        writer.writerow(["Inflation Rate %", f"{a.inflation_rate:.4f}"])
        writer.writerow(["Circulation Ratio %", f"{a.circulation_ratio:.4f}"])
        writer.writerow(["Locked %", f"{a.locked_pct:.4f}"])
        writer.writerow([])

        # 3. Allocation Section
        writer.writerow(["# Allocations"])
        writer.writerow([
            "Category", "Group", "Total Tokens", "Vesting Type",
            "TGE %", "Cliff (months)", "Vesting (months)", "Summary",
        ])
        for s in e.allocations:
            writer.writerow([
                s.category,
                s.standard_group.value,
                f"{s.total_tokens:.0f}",
                s.vesting_type.value,
                f"{s.tge_percent:g}",
                s.cliff_months,
                s.vesting_months,
                self.vesting_parser.format_summary(_vesting_terms(s)),
            ])
        writer.writerow([])

        # 4. Monthly Series Section
        writer.writerow(["# Monthly Emissions"])
        writer.writerow(["Month", "Label", "Emissions", "Cumulative Supply", "Inflation %", "Unlock Value (USD)"])
        for i in range(e.months):
            writer.writerow([
                i,
                _month_label(report, i),
                e.total_monthly_emissions[i],
                e.total_cumulative_supply[i],
                f"{e.monthly_inflation_rate[i]:.6f}",
                f"{a.unlock_value_per_month[i]:.2f}",
            ])

        # 5. Cliff Events Section
        if e.cliff_events:
            writer.writerow([])
            writer.writerow(["# Cliff Events"])
            writer.writerow(["Month", "Label", "Category", "Amount"])
            for event in e.cliff_events:
                writer.writerow([
                    event.month_index,
                    event.month_label or "",
                    event.label,
                    event.amount,
                ])

    def _write_batch(self, writer, result: BatchResult) -> None:
        writer.writerow(["# Comparison"])
        writer.writerow([
            "Name", "Symbol", "Category", "Total Unlock Value (USD)",
            "Cliff Unlock %", "Linear Unlock %", "Inflation Rate %",
            "Circulation Ratio %", "Locked %", "Market Cap (USD)",
        ])
        for row in result.comparison:
            writer.writerow([
                row.name,
                row.symbol,
                row.category or "",
                f"{row.total_unlock_value:.2f}",
                f"{row.cliff_unlock_pct:.4f}",
                f"{row.linear_unlock_pct:.4f}",
                f"{row.inflation_rate:.4f}",
                f"{row.circulation_ratio:.4f}",
                f"{row.locked_pct:.4f}",
                f"{row.market_cap:.2f}",
            ])
        writer.writerow([])

        writer.writerow(["# Inflation Periods"])
        writer.writerow(["Name", "Symbol", "Year 1 %", "Year 2 %", "Year 3 %", "Current %"])
        for row in result.inflation_periods:
            writer.writerow([
                row.name,
                row.symbol,
                f"{row.year1_inflation:.4f}",
                f"{row.year2_inflation:.4f}",
                f"{row.year3_inflation:.4f}",
                f"{row.current_inflation:.4f}",
            ])
        writer.writerow([])

        writer.writerow(["# Market Emissions"])
        writer.writerow(["Month", "Total Value (USD)", "Cliff Value (USD)", "Linear Value (USD)"])
        for row in result.market_emissions:
            writer.writerow([
                row.month_index,
                f"{row.total_value_unlock:.2f}",
                f"{row.cliff_value_unlock:.2f}",
                f"{row.linear_value_unlock:.2f}",
            ])

        if result.missing:
            writer.writerow([])
            writer.writerow(["# Missing"])
            for token in result.missing:
                writer.writerow([token])


def _usd(value: float) -> str:
    return f"${value:,.0f}"


def _pct(value: float) -> str:
    return f"{value:.2f}%"


class TableFormatter(OutputFormatter):
    """Formats results as human-readable tables for CLI output."""

    def __init__(self, width: int = 110, preview_months: int = 12):
        """
        Initialize table formatter.

        Args:
            width: Maximum table width
            preview_months: Number of leading months shown in the series table
        """
        self.width = width
        self.preview_months = preview_months
        self.vesting_parser = VestingParser()

    def format(self, result: Result, color: bool = True) -> str:
        """Format result as readable tables."""
        output = io.StringIO()
        console = Console(
            file=output,
            force_terminal=color,
            no_color=not color,
            width=self.width,
        )

        if isinstance(result, BatchResult):
            self._print_batch(console, result)
        else:
            self._print_report(console, result)

        return output.getvalue()

    def format_to_file(self, result: Result, filepath: str) -> None:
        """Write formatted output to file."""
        # File output carries no ANSI codes
        with open(filepath, "w", encoding="utf-8") as f:
            f.write(self.format(result, color=False))

    def _print_report(self, console: Console, report: ProjectReport) -> None:
        p = report.project
        a = report.analytics
        e = report.emissions

        console.print(Panel(
            f"[bold cyan]{p.symbol or p.name}[/] - {p.name}\n"
            f"[dim]Price ${p.current_price:,.4f} | Circulating {p.circulating_supply:,.0f} "
            f"| Total {p.total_supply:,.0f} | {e.months} months[/]",
            title="Token Emissions Analysis",
            expand=False,
        ))

        alloc_table = Table(title="Allocations")
        alloc_table.add_column("Category", style="cyan")
        alloc_table.add_column("Group", style="dim")
        alloc_table.add_column("Tokens", justify="right", style="green")
        alloc_table.add_column("Vesting", style="dim")
        for s in e.allocations:
            alloc_table.add_row(
                s.category,
                s.standard_group.display_name,
                f"{s.total_tokens:,.0f}",
                self.vesting_parser.format_summary(_vesting_terms(s)),
            )
        console.print(alloc_table)

        metrics = Table(title="Unlock Metrics", show_header=False)
        metrics.add_column("Metric", style="cyan")
        metrics.add_column("Value", style="green")
        metrics.add_row("Total Unlock Value", _usd(a.total_unlock_value))
        metrics.add_row("Cliff Unlock", f"{a.cliff_unlock_tokens:,.0f} ({_pct(a.cliff_unlock_pct)})")
        metrics.add_row("Linear Unlock", f"{a.linear_unlock_tokens:,.0f} ({_pct(a.linear_unlock_pct)})")
        metrics.add_row("Circulation Ratio", _pct(a.circulation_ratio))
        metrics.add_row("Locked", _pct(a.locked_pct))
        metrics.add_row("Inflation (locked/circulating)", _pct(a.inflation_rate))
        console.print(metrics)

        series = Table(title=f"Monthly Emissions (first {min(self.preview_months, e.months)} months)")
        series.add_column("Month")
        series.add_column("Emissions", justify="right")
        series.add_column("Cumulative", justify="right")
        series.add_column("Inflation", justify="right")
        series.add_column("Value", justify="right", style="green")
        for i in range(min(self.preview_months, e.months)):
            series.add_row(
                _month_label(report, i),
                f"{e.total_monthly_emissions[i]:,}",
                f"{e.total_cumulative_supply[i]:,}",
                f"{e.monthly_inflation_rate[i]:.2f}%",
                _usd(a.unlock_value_per_month[i]),
            )
        console.print(series)

        if e.cliff_events:
            console.print("\n[bold yellow]Cliff Events:[/]")
            for event in e.cliff_events:
                when = event.month_label or f"month {event.month_index}"
                console.print(f"  [!] {when}: {event.label} unlocks {event.amount:,}")

    def _print_batch(self, console: Console, result: BatchResult) -> None:
        table = Table(title=f"Emissions Comparison ({result.months} months)")
        table.add_column("Token", style="cyan")
        table.add_column("Category", style="dim")
        table.add_column("Unlock Value", justify="right", style="green")
        table.add_column("Cliff %", justify="right")
        table.add_column("Linear %", justify="right")
        table.add_column("Circulating", justify="right")
        table.add_column("Locked", justify="right")
        for row in result.comparison:
            table.add_row(
                row.symbol or row.name,
                row.category or "-",
                _usd(row.total_unlock_value),
                _pct(row.cliff_unlock_pct),
                _pct(row.linear_unlock_pct),
                _pct(row.circulation_ratio),
                _pct(row.locked_pct),
            )
        console.print(table)

        inflation = Table(title="Annualized Inflation")
        inflation.add_column("Token", style="cyan")
        for heading in ("Year 1", "Year 2", "Year 3", "Current"):
            inflation.add_column(heading, justify="right")
        for row in result.inflation_periods:
            inflation.add_row(
                row.symbol or row.name,
                _pct(row.year1_inflation),
                _pct(row.year2_inflation),
                _pct(row.year3_inflation),
                _pct(row.current_inflation),
            )
        console.print(inflation)

        upcoming = result.market_emissions[: self.preview_months]
        if upcoming:
            market = Table(title="Market-wide Unlock Value")
            market.add_column("Month")
            market.add_column("Total", justify="right", style="green")
            market.add_column("Cliff", justify="right")
            market.add_column("Linear", justify="right")
            for row in upcoming:
                market.add_row(
                    str(row.month_index),
                    _usd(row.total_value_unlock),
                    _usd(row.cliff_value_unlock),
                    _usd(row.linear_value_unlock),
                )
            console.print(market)

        if result.missing:
            console.print(f"\n[bold yellow]Missing data:[/] {', '.join(result.missing)}")
