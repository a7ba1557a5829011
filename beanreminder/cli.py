"""Command-line interface for beanreminder."""

import csv
import json
import logging
import sys
import traceback
from datetime import date, timedelta
from pathlib import Path

import click
import pydantic
import yaml
from beancount.parser import printer

from . import __version__, constants
from .consumer import process_due
from .scheduler import ReminderScheduler
from .store import load_reminders_from_path, save_reminders_to_path

logger = logging.getLogger(__name__)


def complete_reminder_id(ctx, _, incomplete):
    """Complete reminder IDs from the reminders path.

    Falls back to the default 'reminders' path if --reminders-path is not
    parsed yet. Used for shell tab completion on reminder_id arguments.
    """
    reminders_path = ctx.params.get("reminders_path") or constants.DEFAULT_REMINDERS_DIR

    try:
        reminder_file = load_reminders_from_path(Path(reminders_path))
        if reminder_file is None:
            return []
        reminder_ids = sorted(r.id for r in reminder_file.reminders)
        return [rid for rid in reminder_ids if rid.startswith(incomplete)]
    except (ValueError, OSError, yaml.YAMLError, pydantic.ValidationError):
        return []


def _load_or_exit(path_obj: Path):
    reminder_file = load_reminders_from_path(path_obj)
    if reminder_file is None:
        click.echo(f"Error: Path is neither a file nor a directory: {path_obj}", err=True)
        sys.exit(1)
    return reminder_file


def _find_or_exit(reminder_file, reminder_id: str):
    reminder = reminder_file.get(reminder_id)
    if reminder is None:
        click.echo(f"Error: Reminder '{reminder_id}' not found", err=True)
        sys.exit(1)
    return reminder


def _report_error(e: Exception) -> None:
    click.echo(f"Error: {e}", err=True)
    if logger.isEnabledFor(logging.DEBUG):
        traceback.print_exc()
    sys.exit(1)


def _record_last_dates(reminder_file, updated: list, path_obj: Path) -> None:
    by_id = {r.id: r for r in updated}
    reminder_file.reminders = [by_id.get(r.id, r) for r in reminder_file.reminders]
    try:
        save_reminders_to_path(reminder_file, path_obj)
    except (OSError, yaml.YAMLError) as e:
        click.echo(
            f"Error: Could not record last dates in {path_obj}: {e}\n"
            "No transactions were written.",
            err=True,
        )
        sys.exit(1)
    click.echo(f"Recorded last dates in {path_obj}", err=True)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.version_option(version=__version__)
def main(verbose: bool):
    """Beanreminder - Recurring reminders for Beancount ledgers."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


@main.command()
@click.argument("path", type=click.Path(exists=True))
def validate(path: str):
    """Validate reminder files for syntax and schema compliance.

    PATH can be either a reminders.yaml file or a reminders/ directory.

    Examples:
        beanreminder validate reminders.yaml
        beanreminder validate reminders/
    """
    path_obj = Path(path)
    click.echo(f"Validating reminders from: {path_obj}")

    try:
        reminder_file = _load_or_exit(path_obj)

        num_reminders = len(reminder_file.reminders)
        num_enabled = sum(1 for r in reminder_file.reminders if r.enabled)

        click.echo("✓ Validation successful!")
        click.echo(f"  Total reminders: {num_reminders}")
        click.echo(f"  Enabled: {num_enabled}")
        click.echo(f"  Disabled: {num_reminders - num_enabled}")
        click.echo("\nAll reminders are valid!")

    except Exception as e:
        click.echo(f"✗ Validation failed: {e}", err=True)
        if logger.isEnabledFor(logging.DEBUG):
            traceback.print_exc()
        sys.exit(1)


@main.command(name="list")
@click.argument("path", type=click.Path(exists=True))
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json", "csv"]),
    default="table",
    help="Output format (default: table)",
)
@click.option("--enabled-only", is_flag=True, help="Show only enabled reminders")
def list_reminders(path: str, output_format: str, enabled_only: bool):
    """List all reminders with their next occurrence.

    Examples:
        beanreminder list reminders/
        beanreminder list reminders/ --enabled-only
        beanreminder list reminders/ --format json
    """
    try:
        reminder_file = _load_or_exit(Path(path))

        reminders = reminder_file.reminders
        if enabled_only:
            reminders = [r for r in reminders if r.enabled]

        if not reminders:
            click.echo("No reminders found")
            return

        scheduler = ReminderScheduler()
        rows = [(r, scheduler.next_occurrence(r.rule)) for r in reminders]

        if output_format == "table":
            _print_reminder_table(rows)
        elif output_format == "json":
            payload = [
                {
                    **r.model_dump(mode="json"),
                    "next_occurrence": next_date.isoformat() if next_date else None,
                }
                for r, next_date in rows
            ]
            click.echo(json.dumps(payload, indent=2))
        elif output_format == "csv":
            _print_reminder_csv(rows)

    except Exception as e:
        _report_error(e)


def _print_reminder_table(rows: list) -> None:
    id_width = max(max(len(r.id) for r, _ in rows), len("ID"))
    desc_width = max(max(len(r.description) for r, _ in rows), len("Description"))
    desc_width = min(desc_width, constants.MAX_TABLE_COLUMN_WIDTH)

    click.echo(
        f"{'ID':<{id_width}}  {'Status':<10}  {'Kind':<16}  {'Next':<10}  "
        f"{'Description':<{desc_width}}"
    )
    click.echo("-" * (id_width + 10 + 16 + 10 + desc_width + 8))

    for r, next_date in rows:
        status = "✓ enabled" if r.enabled else "  disabled"
        next_str = next_date.isoformat() if next_date else "-"
        desc = r.description[:desc_width]
        click.echo(
            f"{r.id:<{id_width}}  {status:<10}  {r.rule.kind.value:<16}  {next_str:<10}  "
            f"{desc:<{desc_width}}"
        )

    click.echo(f"\nTotal: {len(rows)} reminders")


def _print_reminder_csv(rows: list) -> None:
    writer = csv.writer(sys.stdout)
    writer.writerow(["ID", "Enabled", "Kind", "Increment", "Start", "End", "Last", "Next"])

    for r, next_date in rows:
        rule = r.rule
        writer.writerow(
            [
                r.id,
                "true" if r.enabled else "false",
                rule.kind.value,
                rule.increment,
                rule.start_date.isoformat(),
                rule.end_date.isoformat() if rule.end_date else "",
                rule.last_date.isoformat() if rule.last_date else "",
                next_date.isoformat() if next_date else "",
            ],
        )


@main.command(name="next")
@click.argument("reminder_id", shell_complete=complete_reminder_id)
@click.option(
    "--count",
    type=int,
    default=constants.DEFAULT_NEXT_COUNT,
    help=f"Number of occurrences to show (default: {constants.DEFAULT_NEXT_COUNT})",
)
@click.option(
    "--reminders-path",
    type=click.Path(exists=True),
    default=constants.DEFAULT_REMINDERS_DIR,
    help="Path to reminders file or directory (default: reminders)",
)
def next_command(reminder_id: str, count: int, reminders_path: str):
    """Show the next occurrences of a reminder.

    Examples:
        beanreminder next car-insurance
        beanreminder next rent --count 12 --reminders-path reminders.yaml
    """
    try:
        reminder_file = _load_or_exit(Path(reminders_path))
        reminder = _find_or_exit(reminder_file, reminder_id)
        rule = reminder.rule

        click.echo(f"Reminder: {reminder.id}")
        if reminder.description:
            click.echo(f"Description: {reminder.description}")
        click.echo(f"Status: {'✓ enabled' if rule.enabled else '✗ disabled'}")
        click.echo(f"Kind: {rule.kind.value} (every {rule.increment})")
        click.echo(f"Start date: {rule.start_date}")
        if rule.end_date:
            click.echo(f"End date: {rule.end_date}")
        if rule.last_date:
            click.echo(f"Last date: {rule.last_date}")

        occurrences = ReminderScheduler().next_occurrences(rule, count)
        if not occurrences:
            click.echo("\nNo upcoming occurrences")
            return

        click.echo(f"\nNext occurrences ({len(occurrences)}):")
        for occurrence in occurrences:
            click.echo(f"  {occurrence}")

    except Exception as e:
        _report_error(e)


@main.command()
@click.argument("reminder_id", shell_complete=complete_reminder_id)
@click.argument("horizon", type=click.DateTime(formats=["%Y-%m-%d"]), required=False)
@click.option(
    "--reminders-path",
    type=click.Path(exists=True),
    default=constants.DEFAULT_REMINDERS_DIR,
    help="Path to reminders file or directory (default: reminders)",
)
def generate(reminder_id: str, horizon, reminders_path: str):
    """Generate every occurrence of a reminder before HORIZON.

    HORIZON: Exclusive end date in YYYY-MM-DD format (default: today plus
    the configured horizon_days)

    Examples:
        beanreminder generate rent 2025-01-01
    """
    try:
        reminder_file = _load_or_exit(Path(reminders_path))
        reminder = _find_or_exit(reminder_file, reminder_id)
        if horizon is None:
            until = date.today() + timedelta(days=reminder_file.config.horizon_days)
        else:
            until = horizon.date()

        occurrences = list(ReminderScheduler().occurrences_until(reminder.rule, until))

        click.echo(f"Reminder: {reminder.id}")
        click.echo(f"Kind: {reminder.rule.kind.value}")
        click.echo(f"Until: {until}")
        click.echo(f"\nOccurrences ({len(occurrences)}):")
        for occurrence in occurrences:
            click.echo(f"  {occurrence}")

    except Exception as e:
        _report_error(e)


@main.command()
@click.argument("path", type=click.Path(exists=True))
@click.option(
    "--as-of",
    "as_of",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    help="Reference date (default: today)",
)
def due(path: str, as_of):
    """List enabled reminders that are due or overdue.

    Examples:
        beanreminder due reminders/
        beanreminder due reminders/ --as-of 2024-06-30
    """
    as_of_date = as_of.date() if as_of else date.today()  # noqa: DTZ011

    try:
        reminder_file = _load_or_exit(Path(path))
        scheduler = ReminderScheduler()

        rows = []
        for reminder in reminder_file.reminders:
            if not scheduler.is_due(reminder.rule, as_of_date):
                continue
            pending = scheduler.pending_occurrences(reminder.rule, as_of_date)
            overdue = scheduler.is_overdue(reminder.rule, as_of_date)
            rows.append((reminder, pending, overdue))

        if not rows:
            click.echo(f"Nothing due as of {as_of_date}")
            return

        click.echo(f"Due as of {as_of_date}:")
        for reminder, pending, overdue in rows:
            marker = "OVERDUE" if overdue else "due"
            dates = ", ".join(d.isoformat() for d in pending)
            click.echo(f"  {reminder.id:<30} {marker:<8} {dates}")

    except Exception as e:
        _report_error(e)


@main.command()
@click.argument("path", type=click.Path(exists=True))
@click.option(
    "--as-of",
    "as_of",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    help="Reference date (default: today)",
)
@click.option(
    "--output",
    "-o",
    "output_path",
    type=click.Path(dir_okay=False),
    help="Append transactions to this Beancount file (default: stdout)",
)
@click.option("--dry-run", is_flag=True, help="Do not record consumed occurrences")
def run(path: str, as_of, output_path, dry_run: bool):
    """Create transactions for every pending occurrence.

    Writes the transactions in Beancount syntax and records the newest
    consumed occurrence as each reminder's last date.

    Examples:
        beanreminder run reminders/ --dry-run
        beanreminder run reminders/ -o ledger/upcoming.beancount
    """
    as_of_date = as_of.date() if as_of else date.today()  # noqa: DTZ011
    path_obj = Path(path)

    try:
        reminder_file = _load_or_exit(path_obj)
        enabled = [r for r in reminder_file.reminders if r.enabled]

        result = process_due(enabled, as_of_date, config=reminder_file.config)

        if not result.transactions:
            click.echo(f"Nothing to create as of {as_of_date}", err=True)
            return

        text = "\n".join(printer.format_entry(txn) for txn in result.transactions)
        count = len(result.transactions)

        if dry_run:
            if output_path:
                with open(output_path, "a") as f:
                    f.write("\n" + text)
                click.echo(f"Appended {count} transaction(s) to {output_path}", err=True)
            else:
                click.echo(text)
            click.echo("Dry run: last dates not recorded", err=True)
            return

        if output_path:
            # The ledger is opened before last dates are recorded and written after
            with open(output_path, "a") as f:
                _record_last_dates(reminder_file, result.reminders, path_obj)
                f.write("\n" + text)
            click.echo(f"Appended {count} transaction(s) to {output_path}", err=True)
        else:
            _record_last_dates(reminder_file, result.reminders, path_obj)
            click.echo(text)

    except Exception as e:
        _report_error(e)


@main.command()
@click.argument("path", type=click.Path(), default=constants.DEFAULT_REMINDERS_DIR)
def init(path: str):
    """Create a reminders directory with an example reminder.

    Examples:
        beanreminder init
        beanreminder init my-reminders/
    """
    dir_path = Path(path)
    if dir_path.exists():
        click.echo(f"Error: {dir_path} already exists", err=True)
        sys.exit(1)

    dir_path.mkdir(parents=True)

    config = {
        "default_currency": constants.DEFAULT_CURRENCY,
        "default_flag": constants.DEFAULT_FLAG,
        "horizon_days": constants.DEFAULT_HORIZON_DAYS,
    }
    with (dir_path / constants.CONFIG_FILENAME).open("w") as f:
        yaml.safe_dump(config, f, sort_keys=False)

    first_of_next_month = (date.today().replace(day=1) + timedelta(days=32)).replace(day=1)  # noqa: DTZ011
    example = {
        "id": "example-rent",
        "description": "Monthly rent",
        "rule": {
            "kind": "MONTHLY",
            "start_date": first_of_next_month.isoformat(),
            "increment": 1,
            "days_advance": 3,
        },
        "transaction": {
            "payee": "Landlord",
            "narration": "Rent",
            "postings": [
                {"account": "Expenses:Housing:Rent", "amount": "1500.00"},
                {"account": "Assets:Bank:Checking"},
            ],
        },
    }
    with (dir_path / "example-rent.yaml").open("w") as f:
        yaml.safe_dump(example, f, sort_keys=False)

    click.echo(f"✓ Created {dir_path}/ with {constants.CONFIG_FILENAME} and example-rent.yaml")


if __name__ == "__main__":
    main()
