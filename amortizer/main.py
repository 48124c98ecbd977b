"""Command-line interface for the amortization calculator.

This module uses the ``click`` library to implement a multi-command
interface. Users can view a loan summary, the full amortization schedule or
the standard comparison scenarios. Results can be printed to the terminal or
exported to JSON/CSV files.
"""

from __future__ import annotations

import csv
import json
from decimal import Decimal
from functools import wraps
from itertools import islice
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Optional

import click

from .config import Settings, load_settings
from .data_models import AmortizationRow, LoanInput
from .engine import build_schedule, compute_scenarios, compute_summary
from .exceptions import AmortizerError
from .formatter import print_scenarios, print_schedule, print_summary
from .logging_config import configure_logging, get_logger
from .utils import decimal_from_str

logger = get_logger(__name__)

SCHEDULE_HEADER = [
    "Month",
    "Payment",
    "Principal",
    "Interest",
    "Balance",
    "Cumulative_Interest",
]


def parse_amount(value: str) -> Decimal:
    """Parse a numeric string with optional suffixes.

    Accepts plain numbers ("500000"), thousands separators ("500,000") and
    shorthand with ``k``/``m`` suffixes (e.g. "500k" meaning 500 000).
    """
    value = value.strip().lower().replace(",", "")
    factor = Decimal(1)
    if value.endswith("k"):
        factor = Decimal(1_000)
        value = value[:-1]
    elif value.endswith("m"):
        factor = Decimal(1_000_000)
        value = value[:-1]
    try:
        return decimal_from_str(value) * factor
    except ValueError:
        raise click.BadParameter(f"Invalid amount: {value}")


def build_loan_from_options(
    principal: str,
    rate: str,
    term: int,
    down_payment: Optional[str] = None,
    extra_payment: Optional[str] = None,
) -> LoanInput:
    try:
        rate_value = decimal_from_str(rate.rstrip("%"))
    except ValueError:
        raise click.BadParameter(f"Invalid rate: {rate}")
    return LoanInput(
        principal=parse_amount(principal),
        rate=rate_value,
        term=term,
        down_payment=parse_amount(down_payment) if down_payment else None,
        extra_payment=parse_amount(extra_payment) if extra_payment else None,
    )


def _json_default(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def export_to_json(path: Path, data: Dict[str, Any]) -> None:
    """Export ``data`` to a JSON file, writing Decimals as strings."""
    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, default=_json_default)


def export_to_csv(path: Path, schedule: Iterable[AmortizationRow]) -> int:
    """Export the schedule to a CSV file and return the number of rows written."""
    written = 0
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(SCHEDULE_HEADER)
        for row in schedule:
            writer.writerow(
                [
                    row.month,
                    str(row.payment),
                    str(row.principal),
                    str(row.interest),
                    str(row.balance),
                    str(row.cumulative_interest),
                ]
            )
            written += 1
    return written


def loan_options(func: Callable[..., None]) -> Callable[..., None]:
    """Attach the loan parameter options shared by every command."""
    options = [
        click.option("--principal", "-p", "principal", required=True, help="Total loan amount before the down payment"),
        click.option("--rate", "-r", "rate", required=True, help="Annual interest rate (percent)"),
        click.option("--term", "-t", "term", required=True, type=int, help="Loan term in months"),
        click.option("--down-payment", "-d", "down_payment", help="Down payment amount"),
        click.option("--extra-payment", "-e", "extra_payment", help="Extra amount paid towards principal every month"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def handle_engine_errors(func: Callable[..., None]) -> Callable[..., None]:
    """Turn engine errors into click errors with a readable message."""

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> None:
        try:
            func(*args, **kwargs)
        except AmortizerError as exc:
            logger.debug("Calculation failed: %r", exc.context)
            raise click.ClickException(str(exc)) from exc

    return wrapper


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Log progress to stderr")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """A command-line loan amortization calculator."""
    try:
        settings = load_settings()
    except AmortizerError as exc:
        raise click.ClickException(str(exc)) from exc
    configure_logging("DEBUG" if verbose else settings.log_level)
    ctx.obj = settings


@cli.command()
@loan_options
@click.option("--output", "output", type=str, help="Output file path (.json)")
@handle_engine_errors
def summary(
    principal: str,
    rate: str,
    term: int,
    down_payment: Optional[str],
    extra_payment: Optional[str],
    output: Optional[str],
) -> None:
    """Compute and print the summary metrics for a loan."""
    loan = build_loan_from_options(principal, rate, term, down_payment, extra_payment)
    logger.info("Computing summary for %s", loan)
    summary_data = compute_summary(loan)
    if output:
        path = Path(output)
        if path.suffix.lower() != ".json":
            raise click.BadParameter("Summary export must use .json extension")
        export_to_json(path, {"summary": summary_data.to_dict()})
        logger.info("Summary written to %s", path)
        click.echo(f"Summary exported to {path}")
    else:
        print_summary(summary_data)


@cli.command()
@loan_options
@click.option("--output", "output", type=str, help="Output file path (.json or .csv)")
@click.option("--all", "show_all", is_flag=True, help="Print every row instead of the first AMORTIZER_MAX_ROWS")
@click.pass_obj
@handle_engine_errors
def schedule(
    settings: Settings,
    principal: str,
    rate: str,
    term: int,
    down_payment: Optional[str],
    extra_payment: Optional[str],
    output: Optional[str],
    show_all: bool,
) -> None:
    """Compute and print the amortization schedule."""
    loan = build_loan_from_options(principal, rate, term, down_payment, extra_payment)
    logger.info("Building schedule for %s", loan)
    rows = build_schedule(loan)
    if output:
        path = Path(output)
        if path.suffix.lower() == ".json":
            export_to_json(
                path,
                {
                    "summary": compute_summary(loan).to_dict(),
                    "schedule": [row.to_dict() for row in rows],
                },
            )
        elif path.suffix.lower() == ".csv":
            count = export_to_csv(path, rows)
            logger.debug("Wrote %d schedule rows", count)
        else:
            raise click.BadParameter("Unsupported output format; use .json or .csv")
        logger.info("Schedule written to %s", path)
        click.echo(f"Schedule exported to {path}")
        return

    print_summary(compute_summary(loan))
    if show_all:
        print_schedule(rows)
        return
    remaining = iter(rows)
    printed = print_schedule(islice(remaining, settings.max_rows))
    if next(remaining, None) is not None:
        click.echo(f"Showing first {printed} rows; use --all for the full schedule.")


@cli.command()
@loan_options
@click.option("--output", "output", type=str, help="Output file path (.json)")
@handle_engine_errors
def scenarios(
    principal: str,
    rate: str,
    term: int,
    down_payment: Optional[str],
    extra_payment: Optional[str],
    output: Optional[str],
) -> None:
    """Compare the loan with the standard extra-payment and term scenarios."""
    loan = build_loan_from_options(principal, rate, term, down_payment, extra_payment)
    logger.info("Computing scenarios for %s", loan)
    scenario_set = compute_scenarios(loan)
    if output:
        path = Path(output)
        if path.suffix.lower() != ".json":
            raise click.BadParameter("Scenario export must use .json extension")
        export_to_json(path, {"scenarios": scenario_set.to_dict()})
        logger.info("Scenarios written to %s", path)
        click.echo(f"Scenarios exported to {path}")
    else:
        print_scenarios(scenario_set)


if __name__ == "__main__":
    cli()
