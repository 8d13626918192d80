"""CLI for split-ledger using Typer."""

import logging
import sys
from datetime import UTC, datetime
from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from .allocator import allocate
from .balances import participants_of
from .config import Settings, load_settings
from .exceptions import LedgerFileError
from .export import export_csv
from .models import GroupSummary, LedgerFile, SplitStrategy
from .money import to_decimal, to_minor_units
from .service import LedgerService

app = typer.Typer(
    name="split-ledger",
    help="Split shared expenses, track balances and suggest settlements",
)

console = Console()


def setup_logging(verbose: bool = False):
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


def load_ledger(path: Path) -> LedgerFile:
    """
    Read and validate a ledger JSON file.

    Args:
        path: Path to the JSON document

    Returns:
        Parsed ledger file

    Raises:
        LedgerFileError: If the file can't be read or doesn't validate
    """
    try:
        return LedgerFile.model_validate_json(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise LedgerFileError(f"Cannot read ledger file {path}: {e}") from e
    except ValidationError as e:
        raise LedgerFileError(f"Invalid ledger file {path}:\n{e}") from e


def _service_for(ledger: LedgerFile) -> LedgerService:
    settings: Settings = load_settings()
    settings = settings.model_copy(update={"base_currency": ledger.base_currency})
    return LedgerService(settings)


def _members(ledger: LedgerFile) -> list[str]:
    return ledger.participants or participants_of(ledger.expenses)


def format_money(cents: int, use_color: bool = True) -> str:
    """
    Format cents in accounting style with alignment.

    Negative amounts use parentheses: (85.02)
    Positive amounts have spaces:      85.02
    """
    amount = to_decimal(abs(cents))
    if cents < 0:
        return f"([red]{amount:,}[/red])" if use_color else f"({amount:,})"
    return f" [green]{amount:,}[/green] " if use_color else f" {amount:,} "


def _fail(e: Exception, verbose: bool):
    console.print(f"\n[bold red]Error:[/bold red] {e}")
    if verbose:
        raise e
    sys.exit(1)


def display_summary(summary: GroupSummary):
    """Display balances and settlement suggestions as tables."""
    console.print(
        f"\n[bold]Group balances[/bold] ({summary.expense_count} expenses, "
        f"{summary.member_count} members)"
    )
    console.print(
        f"  Total spend: {format_money(summary.total_expenses_cents)} "
        f"{summary.base_currency}\n"
    )

    table = Table(title="Net Balances", show_header=True, header_style="bold magenta")
    table.add_column("Participant", style="cyan")
    table.add_column("Owed to them", justify="right")
    table.add_column("They owe", justify="right")
    table.add_column("Net", justify="right")

    for balance in summary.balances.net_balances.values():
        table.add_row(
            balance.participant_id,
            format_money(balance.total_paid_cents, use_color=False),
            format_money(balance.total_owed_cents, use_color=False),
            format_money(balance.net_cents),
        )

    console.print(table)


def display_settlements(summary: GroupSummary):
    """Display the suggested transfers."""
    if not summary.settlements:
        console.print("[green]✓ Everyone is settled up[/green]")
        return

    table = Table(title="Suggested Settlements", show_header=True, header_style="bold magenta")
    table.add_column("From", style="cyan")
    table.add_column("To", style="cyan")
    table.add_column("Amount", justify="right")

    for instruction in summary.settlements:
        table.add_row(
            instruction.from_id,
            instruction.to_id,
            format_money(instruction.amount_cents),
        )

    console.print(table)
    total = sum(i.amount_cents for i in summary.settlements)
    console.print(
        f"  {len(summary.settlements)} transfers, {format_money(total)} "
        f"{summary.base_currency} in total"
    )


@app.command()
def split(
    amount: str = typer.Argument(..., help="Amount to split, e.g. 10.01"),
    strategy: str = typer.Option(
        "equal", "--strategy", "-s", help="equal, weighted, percentage or exact"
    ),
    count: int = typer.Option(
        2, "--count", "-n", help="Number of participants (equal splits)"
    ),
    param: list[str] = typer.Option(
        [], "--param", "-p", help="Weight, percentage or exact amount per participant"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """
    Split an amount into per-participant shares.

    Shares always add up to the amount exactly.
    """
    setup_logging(verbose)

    try:
        total_cents = to_minor_units(amount)
        params: int | list[object]
        if strategy == "equal":
            params = count
        elif strategy == "exact":
            params = [to_minor_units(value) for value in param]
        else:
            params = list(param)

        shares = allocate(total_cents, strategy, params)  # type: ignore[arg-type]

        table = Table(title="Shares", show_header=True, header_style="bold magenta")
        table.add_column("#", style="dim")
        table.add_column("Share", justify="right")
        for index, share in enumerate(shares, start=1):
            table.add_row(str(index), format_money(share, use_color=False))

        console.print(table)
        console.print(f"  Total: {format_money(sum(shares), use_color=False)}")

    except Exception as e:
        _fail(e, verbose)


@app.command()
def balances(
    ledger_path: Path = typer.Argument(..., help="Ledger JSON file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Show net balances for everyone in a ledger file."""
    setup_logging(verbose)

    try:
        ledger = load_ledger(ledger_path)
        service = _service_for(ledger)
        summary = service.summarize_group(ledger.expenses, _members(ledger))
        display_summary(summary)

    except Exception as e:
        _fail(e, verbose)


@app.command()
def settle(
    ledger_path: Path = typer.Argument(..., help="Ledger JSON file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Suggest the transfers that settle everyone up."""
    setup_logging(verbose)

    try:
        ledger = load_ledger(ledger_path)
        service = _service_for(ledger)
        summary = service.summarize_group(ledger.expenses, _members(ledger))
        display_settlements(summary)

    except Exception as e:
        _fail(e, verbose)


@app.command()
def analytics(
    ledger_path: Path = typer.Argument(..., help="Ledger JSON file"),
    as_of: datetime | None = typer.Option(
        None, "--as-of", help="Reference time for aging (default: now, UTC)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Show aging, settlement velocity, fairness and participation."""
    setup_logging(verbose)

    try:
        ledger = load_ledger(ledger_path)
        service = _service_for(ledger)
        members = _members(ledger)
        report = service.analytics_report(
            ledger.expenses, members, now=as_of or datetime.now(UTC)
        )

        aging = Table(title="Unsettled Aging", show_header=True, header_style="bold magenta")
        aging.add_column("Days", style="cyan")
        aging.add_column("Count", justify="right")
        aging.add_column("Amount", justify="right")
        for bucket in report.aging:
            aging.add_row(bucket.label, str(bucket.count), format_money(bucket.amount_cents))
        console.print(aging)

        velocity = report.velocity
        console.print("\n[bold]Settlement velocity:[/bold]")
        console.print(f"  Average: {velocity.average_days} days")
        console.print(f"  Median: {velocity.median_days} days")
        console.print(
            f"  Fastest/slowest: {velocity.fastest_days}/{velocity.slowest_days} days"
        )

        people = Table(title="Members", show_header=True, header_style="bold magenta")
        people.add_column("Participant", style="cyan")
        people.add_column("Fairness", justify="right")
        people.add_column("Participation", justify="right")
        for member_id in members:
            fairness = report.fairness[member_id]
            fair_mark = "✓" if fairness.is_fair else "⚠️ "
            people.add_row(
                member_id,
                f"{fair_mark} {fairness.score:.2f}%",
                f"{report.participation[member_id].participation_rate}%",
            )
        console.print(people)

        health = report.health
        console.print("\n[bold]Group health:[/bold]")
        console.print(f"  Settlement rate: {health.settlement_rate}%")
        console.print(f"  Fast settlement rate: {health.fast_settlement_rate}%")
        console.print(f"  Expenses this week: {health.weekly_expenses}")

    except Exception as e:
        _fail(e, verbose)


@app.command()
def export(
    ledger_path: Path = typer.Argument(..., help="Ledger JSON file"),
    output: Path = typer.Argument(..., help="CSV file to write"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Export the ledger as CSV."""
    setup_logging(verbose)

    try:
        ledger = load_ledger(ledger_path)
        count = export_csv(ledger.expenses, output)
        console.print(f"[green]✓ Exported {count} expenses to {output}[/green]")

    except Exception as e:
        _fail(e, verbose)


if __name__ == "__main__":
    app()
