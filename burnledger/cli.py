"""Typer CLI interface for BurnLedger."""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from burnledger.config import Settings
from burnledger.exceptions import BurnLedgerError
from burnledger.models.enums import ClearStatus

app = typer.Typer(
    name="burnledger",
    help="BurnLedger: historical ledger of token burns with daily validation.",
)

console = Console()

HOME_HELP = "Data directory (defaults to $BURNLEDGER_HOME or ~/.burnledger)"


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """BurnLedger: historical ledger of token burns with daily validation."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _settings(home: Path | None) -> Settings:
    try:
        return Settings.from_env(home=home)
    except BurnLedgerError as exc:
        _fail(exc)


def _open_repo(settings: Settings):
    from burnledger.db.repository import DatasetRepository
    from burnledger.db.schema import create_schema

    settings.home.mkdir(parents=True, exist_ok=True)
    conn = create_schema(settings.db_path)
    return conn, DatasetRepository(conn)


def _fail(exc: Exception) -> None:
    typer.echo(f"Error: {exc}", err=True)
    raise typer.Exit(1)


def _echo_json(payload) -> None:
    typer.echo(json.dumps(payload, indent=2, default=str))


def _collector(settings: Settings, repo):
    from burnledger.engines.collector import BurnCollector

    return BurnCollector(repo, settings)


def _print_collection_report(report) -> None:
    table = Table(title="Collection by sink address")
    table.add_column("Address")
    table.add_column("Pages", justify="right")
    table.add_column("Fetched", justify="right")
    table.add_column("Rejected", justify="right")
    table.add_column("New", justify="right")
    table.add_column("Status")
    for result in report.results:
        status = "ok" if result.succeeded else f"[red]{result.error}[/red]"
        table.add_row(
            result.name,
            str(result.pages),
            str(result.fetched),
            str(result.rejected),
            str(result.added),
            status,
        )
    console.print(table)
    typer.echo(
        f"Added {report.added_count} transactions ({report.total_count} total); "
        f"{report.addresses_succeeded}/{len(report.results)} addresses succeeded"
    )


@app.command()
def collect(
    home: Path | None = typer.Option(None, "--home", help=HOME_HELP),
    api_key: str | None = typer.Option(
        None, "--api-key", help="Ledger API key (defaults to $ETHERSCAN_API_KEY)"
    ),
) -> None:
    """Collect the complete burn history from every sink address."""
    settings = _settings(home)
    conn, repo = _open_repo(settings)
    try:
        collector = _collector(settings, repo)
        collector.trigger_full_collection(api_key or settings.api_key)
        _print_collection_report(collector.last_report)
    except BurnLedgerError as exc:
        _fail(exc)
    finally:
        conn.close()


@app.command()
def update(
    home: Path | None = typer.Option(None, "--home", help=HOME_HELP),
) -> None:
    """Fetch transactions newer than the newest stored block."""
    settings = _settings(home)
    conn, repo = _open_repo(settings)
    try:
        collector = _collector(settings, repo)
        dataset = collector.trigger_incremental_update()
    except BurnLedgerError as exc:
        _fail(exc)
    finally:
        conn.close()

    if dataset is None:
        typer.echo("Error: No historical dataset found. Run `burnledger collect` first.", err=True)
        raise typer.Exit(1)
    if collector.last_report and collector.last_report.results:
        _print_collection_report(collector.last_report)
    else:
        typer.echo(f"Dataset is up to date ({dataset.size} transactions)")


@app.command()
def validate(
    home: Path | None = typer.Option(None, "--home", help=HOME_HELP),
    strict: bool = typer.Option(
        False, "--strict", help="Exit with an error on integrity mismatch (fail_closed policy)"
    ),
) -> None:
    """Run the daily lock and validation pass."""
    settings = _settings(home)
    conn, repo = _open_repo(settings)
    try:
        result = _collector(settings, repo).trigger_daily_validation(raise_on_error=strict)
    except BurnLedgerError as exc:
        _fail(exc)
    finally:
        conn.close()

    typer.echo(f"Locked:      {result.locked_count}")
    typer.echo(f"Unlocked:    {result.new_count}")
    typer.echo(f"Persisted:   {'yes' if result.persisted else 'no'}")
    if result.backup_path:
        typer.echo(f"Backup:      {result.backup_path}")
    if result.report and result.report.warnings:
        typer.echo("\nWarnings:")
        for warning in result.report.warnings:
            typer.echo(f"  - {warning}")
    if result.errors:
        typer.echo("\nErrors:")
        for error in result.errors:
            typer.echo(f"  - {error}")
    if not result.success:
        raise typer.Exit(1)


@app.command(name="cross-validate")
def cross_validate(
    home: Path | None = typer.Option(None, "--home", help=HOME_HELP),
) -> None:
    """Re-check recent unlocked transactions against the ledger API (advisory)."""
    settings = _settings(home)
    conn, repo = _open_repo(settings)
    try:
        result = _collector(settings, repo).cross_validate()
    except BurnLedgerError as exc:
        _fail(exc)
    finally:
        conn.close()

    _echo_json(result.model_dump(mode="json"))
    if not result.success:
        raise typer.Exit(1)


@app.command()
def burns(
    home: Path | None = typer.Option(None, "--home", help=HOME_HELP),
    page: int = typer.Option(1, "--page", help="Page number (1-based)"),
    limit: int = typer.Option(100, "--limit", help="Page size (max 1000)"),
    address: str | None = typer.Option(None, "--address", help="Match sender or recipient"),
    start_date: datetime | None = typer.Option(
        None, "--start-date", formats=["%Y-%m-%d"], help="Earliest day (inclusive, UTC)"
    ),
    end_date: datetime | None = typer.Option(
        None, "--end-date", formats=["%Y-%m-%d"], help="Latest day (inclusive, UTC)"
    ),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Query the historical dataset, newest first."""
    settings = _settings(home)
    conn, repo = _open_repo(settings)
    try:
        result = _collector(settings, repo).query_paginated(
            page=page,
            limit=limit,
            address=address,
            start_date=start_date.date() if start_date else None,
            end_date=end_date.date() if end_date else None,
        )
    except BurnLedgerError as exc:
        _fail(exc)
    finally:
        conn.close()

    if json_output:
        _echo_json(result.model_dump(mode="json"))
        return

    table = Table(title=f"Burns (page {result.pagination.page}/{result.pagination.total_pages})")
    table.add_column("Time (UTC)")
    table.add_column("Block", justify="right")
    table.add_column("Hash")
    table.add_column("To")
    table.add_column("Value", justify="right")
    for item in result.items:
        when = datetime.fromtimestamp(int(item["timeStamp"]), tz=timezone.utc).strftime("%Y-%m-%d %H:%M")
        table.add_row(when, item["blockNumber"], item["hash"], item["to"], item["value"])
    console.print(table)
    typer.echo(f"{result.pagination.total_transactions} matching transactions")


@app.command()
def history(
    home: Path | None = typer.Option(None, "--home", help=HOME_HELP),
) -> None:
    """Show the validation history summary."""
    settings = _settings(home)
    conn, repo = _open_repo(settings)
    try:
        summary = _collector(settings, repo).validation_history()
    finally:
        conn.close()

    typer.echo(f"Validation runs:     {summary.total_days}")
    typer.echo(f"Success rate:        {summary.success_rate}%")
    typer.echo(f"Transactions locked: {summary.total_transactions_locked}")
    if summary.recent_validations:
        table = Table(title="Recent validations")
        table.add_column("Date")
        table.add_column("Valid")
        table.add_column("Locked", justify="right")
        table.add_column("Total", justify="right")
        table.add_column("Hash")
        for entry in reversed(summary.recent_validations):
            table.add_row(
                entry.date,
                "yes" if entry.is_valid else "[red]no[/red]",
                str(entry.locked_count),
                str(entry.total_count),
                entry.integrity_hash,
            )
        console.print(table)


@app.command()
def backups(
    home: Path | None = typer.Option(None, "--home", help=HOME_HELP),
) -> None:
    """List available backup snapshots."""
    from burnledger.engines.backup import BackupManager

    settings = _settings(home)
    dates = BackupManager(settings.backup_dir).list_snapshots()
    if not dates:
        typer.echo("No backups found.")
        return
    for backup_date in dates:
        typer.echo(backup_date)


@app.command()
def restore(
    backup_date: str = typer.Argument(..., help="Snapshot date (YYYY-MM-DD)"),
    home: Path | None = typer.Option(None, "--home", help=HOME_HELP),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt"),
) -> None:
    """Replace the live dataset with a backup snapshot."""
    if not yes:
        typer.confirm(
            f"Replace the live dataset with the {backup_date} backup?", abort=True
        )
    settings = _settings(home)
    conn, repo = _open_repo(settings)
    try:
        dataset = _collector(settings, repo).restore_backup(backup_date)
    except BurnLedgerError as exc:
        _fail(exc)
    finally:
        conn.close()
    typer.echo(f"Restored {dataset.size} transactions from {backup_date}")


@app.command()
def export(
    output: Path = typer.Argument(..., help="Destination JSON file"),
    home: Path | None = typer.Option(None, "--home", help=HOME_HELP),
) -> None:
    """Export the live dataset in the snapshot JSON format."""
    settings = _settings(home)
    conn, repo = _open_repo(settings)
    try:
        dataset = repo.load_dataset()
    finally:
        conn.close()
    if dataset is None:
        typer.echo("Error: No historical dataset found. Run `burnledger collect` first.", err=True)
        raise typer.Exit(1)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(json.dumps(dataset.to_snapshot(), indent=2))
    typer.echo(f"Exported {dataset.size} transactions to {output}")


def _aggregates(settings: Settings):
    from burnledger.cache.aggregates import AggregateService
    from burnledger.cache.tiered import CacheService
    from burnledger.ingestion.ledger_client import LedgerClient
    from burnledger.ingestion.quote_client import QuoteClient

    ledger = None
    if settings.has_api_key():
        ledger = LedgerClient(
            settings.api_key,
            request_delay=settings.request_delay,
            timeout=settings.request_timeout,
        )
    return AggregateService(CacheService(settings.cache_dir), QuoteClient(), ledger)


def _echo_aggregate(payload: dict) -> None:
    _echo_json(payload)
    if payload.get("status") == "unavailable":
        raise typer.Exit(1)


@app.command()
def price(
    home: Path | None = typer.Option(None, "--home", help=HOME_HELP),
) -> None:
    """Spot USD price and 24h change (cached)."""
    _echo_aggregate(_aggregates(_settings(home)).get_price())


@app.command(name="total-burned")
def total_burned(
    home: Path | None = typer.Option(None, "--home", help=HOME_HELP),
) -> None:
    """Total tokens held by the sink addresses (cached)."""
    try:
        payload = _aggregates(_settings(home)).get_total_burned()
    except BurnLedgerError as exc:
        _fail(exc)
    _echo_aggregate(payload)


@app.command()
def recent(
    home: Path | None = typer.Option(None, "--home", help=HOME_HELP),
    limit: int = typer.Option(100, "--limit", help="Number of transactions to show"),
) -> None:
    """Most recent burns across all sink addresses (cached)."""
    try:
        payload = _aggregates(_settings(home)).get_recent_burns(limit)
    except BurnLedgerError as exc:
        _fail(exc)
    _echo_aggregate(payload)


@app.command(name="clear-cache")
def clear_cache(
    home: Path | None = typer.Option(None, "--home", help=HOME_HELP),
) -> None:
    """Delete all aggregate cache files."""
    from burnledger.cache.tiered import CacheService

    results = CacheService(_settings(home).cache_dir).clear()
    deleted = 0
    for result in results:
        line = f"{result.status.value:<10} {result.file}"
        if result.error:
            line += f" ({result.error})"
        typer.echo(line)
        if result.status == ClearStatus.DELETED:
            deleted += 1
    typer.echo(f"{deleted} of {len(results)} cache files cleared")


if __name__ == "__main__":
    app()
