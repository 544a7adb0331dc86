"""CLI commands for the fee monitor."""

import json
import logging
import sys
import uuid
from dataclasses import dataclass
from typing import NoReturn

import click
import structlog
from pydantic import ValidationError

from psm_monitor import __version__
from psm_monitor.events.paginator import EventPaginator
from psm_monitor.fetch.client import HttpFetcher
from psm_monitor.fetch.errors import FetchError
from psm_monitor.fetch.metrics import FetchMetrics
from psm_monitor.notify.slack import NotifierError, SlackNotifier
from psm_monitor.observability.logging import (
    bind_run_context,
    configure_logging,
    timed_task,
)
from psm_monitor.settings.app import AppSettings, get_settings
from psm_monitor.sources.chain import ChainParameterSource
from psm_monitor.sources.gas import GasSource
from psm_monitor.sources.jsonrpc import JsonRpcClient
from psm_monitor.sources.quotes import QuoteSource
from psm_monitor.tracker.errors import FeeStoreError
from psm_monitor.tracker.report import FeeReporter
from psm_monitor.tracker.sampler import FeeSampler
from psm_monitor.tracker.store import FeeStore


logger = structlog.get_logger()

COMPONENT_CLI = "cli"

# Default retention for the prune command
DEFAULT_RETENTION_DAYS = 30


@dataclass
class CliContext:
    """Shared state handed from the group to each command."""

    settings: AppSettings
    run_id: str


def build_fetcher(settings: AppSettings) -> HttpFetcher:
    """Create the one HTTP client used by a command."""
    return HttpFetcher(settings.fetch_config())


def _command_logger(
    ctx: CliContext, command: str
) -> structlog.typing.FilteringBoundLogger:
    """Bind run context for a command and return its logger."""
    bind_run_context(ctx.run_id, command=command)
    return logger.bind(component=COMPONENT_CLI)  # type: ignore[no-any-return]


def _log_fetch_metrics(log: structlog.typing.FilteringBoundLogger) -> None:
    """Emit the fetch counters collected during the command."""
    log.info("fetch_metrics", **FetchMetrics.get_instance().to_dict())


def _fail(
    log: structlog.typing.FilteringBoundLogger, event: str, error: Exception
) -> NoReturn:
    """Log a command failure, tell the user, and exit non-zero."""
    log.error(event, error=str(error), error_type=type(error).__name__)
    click.echo(f"Error: {error}", err=True)
    sys.exit(1)


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--json-logs/--console-logs",
    default=True,
    help="Use JSON format for logs (default: json).",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose logging.",
)
@click.pass_context
def cli(ctx: click.Context, json_logs: bool, verbose: bool) -> None:
    """Transfer fee monitor CLI."""
    try:
        settings = get_settings()
    except ValidationError as e:
        click.echo("Settings validation failed:", err=True)
        for error in e.errors():
            location = ".".join(str(part) for part in error["loc"])
            click.echo(f"  - {location}: {error['msg']}", err=True)
        sys.exit(1)

    log_level = logging.DEBUG if verbose else settings.log_level_value
    configure_logging(level=log_level, json_format=json_logs)
    FetchMetrics.reset()

    ctx.obj = CliContext(settings=settings, run_id=str(uuid.uuid4()))


@cli.command()
@click.pass_obj
def track(ctx: CliContext) -> None:
    """Sample every network once and store the fee record."""
    log = _command_logger(ctx, "track")
    settings = ctx.settings

    with timed_task("track"):
        try:
            with build_fetcher(settings) as http, FeeStore(settings.db_path) as store:
                sampler = FeeSampler(
                    store=store,
                    quotes=QuoteSource(
                        http,
                        quote_url=settings.quote_api_url,
                        sol_price_url=settings.sol_price_url,
                    ),
                    gas=GasSource(
                        http,
                        api_keys=settings.explorer_api_keys(),
                        avalanche_api_key=settings.owlracle_api_key,
                    ),
                    chain=ChainParameterSource(http, settings.full_node_url),
                    bsc_gas_price_gwei=settings.bsc_gas_price_gwei,
                )
                record = sampler.track()
        except FeeStoreError as e:
            _fail(log, "track_failed", e)
        finally:
            _log_fetch_metrics(log)

    click.echo(f"Tracked fees at {record.tracked_at.isoformat()}")
    for network_key in record.missing_networks():
        click.echo(f"  {network_key}: no data", err=True)


@cli.command()
@click.option(
    "--dry-run",
    is_flag=True,
    help="Print the report instead of posting it to Slack.",
)
@click.pass_obj
def report(ctx: CliContext, dry_run: bool) -> None:
    """Post the daily and weekly average fee report."""
    log = _command_logger(ctx, "report")
    settings = ctx.settings

    with timed_task("report"):
        try:
            with build_fetcher(settings) as http, FeeStore(settings.db_path) as store:
                notifier = (
                    None
                    if dry_run
                    else SlackNotifier(http, settings.slack_webhook_url)
                )
                text = FeeReporter(store, notifier).report()
        except (FetchError, FeeStoreError, NotifierError) as e:
            _fail(log, "report_failed", e)
        finally:
            _log_fetch_metrics(log)

    if dry_run:
        click.echo(text)
    else:
        click.echo("Report sent.")


@cli.command()
@click.option(
    "--block",
    "block_number",
    type=click.IntRange(min=0),
    default=None,
    help="Block height to read events from.",
)
@click.option(
    "--latest",
    is_flag=True,
    help="Read events from the latest block.",
)
@click.option(
    "--json",
    "json_output",
    is_flag=True,
    help="Output events as JSON.",
)
@click.pass_obj
def events(
    ctx: CliContext,
    block_number: int | None,
    latest: bool,
    json_output: bool,
) -> None:
    """Drain every event page of one block."""
    if (block_number is None) == (not latest):
        raise click.UsageError("Pass exactly one of --block or --latest.")

    log = _command_logger(ctx, "events")
    settings = ctx.settings

    with build_fetcher(settings) as http:
        paginator = EventPaginator(
            http,
            settings.event_server_url,
            max_pages=settings.events_max_pages,
        )
        if latest:
            result = paginator.fetch_latest_events()
        else:
            result = paginator.fetch_block_events(block_number)  # type: ignore[arg-type]
    _log_fetch_metrics(log)

    if json_output:
        click.echo(json.dumps(result.model_dump(mode="json"), indent=2))
    else:
        click.echo(f"Events: {len(result.events)} across {result.pages} pages")
        for event in result.events:
            name = event.get("event_name", "?")
            tx_id = event.get("transaction_id", "?")
            click.echo(f"  {name} {tx_id}")

    if result.error is not None:
        click.echo(
            f"Drain stopped early ({result.error.error_class.value}): "
            f"{result.error.message}",
            err=True,
        )
        sys.exit(1)


@cli.command("block-number")
@click.pass_obj
def block_number(ctx: CliContext) -> None:
    """Print the current block height of the event server."""
    log = _command_logger(ctx, "block-number")

    with build_fetcher(ctx.settings) as http:
        height = JsonRpcClient(http, ctx.settings.event_server_url).block_number()
    _log_fetch_metrics(log)

    if height == 0:
        click.echo("Error: block number unavailable", err=True)
        sys.exit(1)
    click.echo(str(height))


@cli.command("db-stats")
@click.option(
    "--json",
    "json_output",
    is_flag=True,
    help="Output as JSON.",
)
@click.pass_obj
def db_stats(ctx: CliContext, json_output: bool) -> None:
    """Display fee database statistics."""
    log = _command_logger(ctx, "db-stats")

    try:
        with FeeStore(ctx.settings.db_path) as store:
            schema_version = store.get_schema_version()
            records = store.count_records()
            latest = store.list_records(limit=1)
    except FeeStoreError as e:
        _fail(log, "db_stats_failed", e)

    last_tracked = latest[0].tracked_at.isoformat() if latest else None

    if json_output:
        output = {
            "schema_version": schema_version,
            "records": records,
            "last_tracked_at": last_tracked,
        }
        click.echo(json.dumps(output, indent=2))
    else:
        click.echo("Fee Database Statistics")
        click.echo("=" * 40)
        click.echo(f"  Schema Version: {schema_version}")
        click.echo(f"  Records: {records}")
        click.echo(f"  Last Tracked: {last_tracked or 'None'}")


@cli.command()
@click.option(
    "--days",
    type=click.IntRange(min=1),
    default=DEFAULT_RETENTION_DAYS,
    help=f"Number of days of records to keep (default: {DEFAULT_RETENTION_DAYS}).",
)
@click.pass_obj
def prune(ctx: CliContext, days: int) -> None:
    """Delete fee records older than the retention window."""
    log = _command_logger(ctx, "prune")

    try:
        with FeeStore(ctx.settings.db_path) as store:
            pruned = store.prune_older_than(days)
    except FeeStoreError as e:
        _fail(log, "prune_failed", e)

    click.echo(f"Pruned {pruned} records older than {days} days.")


if __name__ == "__main__":
    cli()
