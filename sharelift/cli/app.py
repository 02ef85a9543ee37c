"""
sharelift CLI Application - Built with Click.

Commands:
- migrate: Move one artifact's files from the source share to the bucket
- plan: Show the candidate files and object keys without touching storage
- serve: Run the HTTP trigger (requires uvicorn)
- version: Show version information

Every command reads ``SHARELIFT_*`` settings (and ./.env); the shared
options override them.
"""

import asyncio
import json
import sys

import click
from rich.console import Console
from rich.table import Table

from sharelift import __version__
from sharelift.core.config import MigrationConfig
from sharelift.core.content_types import content_type_for
from sharelift.core.exceptions import MissingDependencyError, ShareliftError
from sharelift.core.types import OutcomeKind
from sharelift.monitoring.logging import setup_migration_logging
from sharelift.storage.core import StorageError
from sharelift.transfer.coordinator import MigrationResult, create_coordinator

console = Console()

_OUTCOME_STYLES = {
    OutcomeKind.COMPLETED: "[green]● completed[/green]",
    OutcomeKind.SKIPPED_NOT_FOUND: "[dim]○ not found[/dim]",
    OutcomeKind.SKIPPED_CONFLICT: "[yellow]◐ conflict[/yellow]",
    OutcomeKind.FAILED: "[red]✗ failed[/red]",
}


# ============================================================================
# CLI Group
# ============================================================================


class OrderedGroup(click.Group):
    """Click Group that lists commands in the order they were added."""

    def list_commands(self, ctx):
        return list(self.commands.keys())


@click.group(cls=OrderedGroup)
@click.version_option(version=__version__, prog_name="sharelift")
def cli():
    """
    sharelift - Move artifacts from a file share to object storage.

    \b
    Commands:
        migrate          Migrate one artifact (video + sidecar files)
        plan             Show candidate files and destination keys
        serve            Run the HTTP trigger endpoint
        version          Show version information
    """


def config_options(func):
    """Options shared by every command that needs a configuration"""
    options = [
        click.option("--source", "source_url", help="Source share URL (file:///path or memory://)"),
        click.option(
            "--destination", "destination_url", help="Destination URL (s3://bucket or memory://)"
        ),
        click.option(
            "--tier",
            type=click.Choice(["hot", "cool"], case_sensitive=False),
            help="Storage tier for uploaded objects",
        ),
        click.option(
            "--extension",
            "extensions",
            multiple=True,
            help="Candidate extension (repeatable, replaces the configured set)",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _load_config(source_url, destination_url, tier, extensions) -> MigrationConfig:
    try:
        return MigrationConfig.from_env(
            source_url=source_url,
            destination_url=destination_url,
            storage_tier=tier,
            extensions=tuple(extensions) or None,
        )
    except ShareliftError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        sys.exit(2)


# ============================================================================
# sharelift migrate
# ============================================================================


async def _migrate(config: MigrationConfig, artifact_id: str) -> MigrationResult:
    logger = setup_migration_logging(config.log_level, config.log_json)
    async with create_coordinator(config, logger=logger) as coordinator:
        return await coordinator.migrate(artifact_id, raise_on_failure=False)


def _outcome_table(result: MigrationResult) -> Table:
    table = Table(title=f"Migration {result.artifact_id}")
    table.add_column("File", style="cyan")
    table.add_column("Outcome")
    table.add_column("Key")
    table.add_column("Bytes", justify="right")
    table.add_column("Error", style="red")

    for outcome in result.outcomes:
        table.add_row(
            outcome.filename,
            _OUTCOME_STYLES[outcome.kind],
            outcome.key if outcome.kind is OutcomeKind.COMPLETED else "",
            str(outcome.bytes_transferred) if outcome.bytes_transferred else "",
            str(outcome.error) if outcome.failed else "",
        )
    return table


@click.command()
@click.argument("artifact_id")
@config_options
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON")
def migrate_cmd(artifact_id, source_url, destination_url, tier, extensions, as_json):
    """Migrate every file of ARTIFACT_ID (exit code 1 on failure)."""
    config = _load_config(source_url, destination_url, tier, extensions)

    try:
        result = asyncio.run(_migrate(config, artifact_id))
    except (ShareliftError, StorageError) as e:
        console.print(f"[red]Migration failed:[/red] {e}")
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
    else:
        console.print(_outcome_table(result))
        counts = ", ".join(f"{kind}={count}" for kind, count in result.counts().items())
        status = "[green]success[/green]" if result.success else "[red]failed[/red]"
        console.print(f"{status} ({counts}) in {result.duration_seconds:.2f}s")
        if not result.success:
            console.print(f"[red]Cause:[/red] {result.cause}")

    if not result.success:
        sys.exit(1)


# ============================================================================
# sharelift plan
# ============================================================================


@click.command()
@click.argument("artifact_id")
@config_options
def plan_cmd(artifact_id, source_url, destination_url, tier, extensions):
    """Show candidate filenames and destination keys for ARTIFACT_ID."""
    config = _load_config(source_url, destination_url, tier, extensions)

    try:
        coordinator = create_coordinator(config)
        filenames = coordinator.candidate_filenames(artifact_id)
    except (ShareliftError, StorageError) as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    table = Table(title=f"Plan for {artifact_id}")
    table.add_column("File", style="cyan")
    table.add_column("Destination key")
    table.add_column("Content type")
    table.add_column("Tier")

    for filename in filenames:
        table.add_row(
            filename,
            coordinator.destination.object_key(filename),
            content_type_for(filename),
            config.storage_tier.value,
        )

    console.print(table)


# ============================================================================
# sharelift serve
# ============================================================================


@click.command()
@config_options
@click.option("--host", default="0.0.0.0", show_default=True, help="Bind address")
@click.option("--port", default=8080, show_default=True, type=int, help="Bind port")
@click.option("--metrics-port", type=int, help="Also expose Prometheus metrics on this port")
def serve_cmd(source_url, destination_url, tier, extensions, host, port, metrics_port):
    """Run the HTTP trigger endpoint."""
    try:
        import uvicorn
    except ImportError:
        msg = "uvicorn"
        raise MissingDependencyError(msg, "sharelift serve") from None

    from sharelift.integrations.fastapi import create_app

    config = _load_config(source_url, destination_url, tier, extensions)

    metrics = None
    if metrics_port:
        from sharelift.monitoring.prometheus import PrometheusMetrics, start_metrics_server

        metrics = PrometheusMetrics()
        start_metrics_server(metrics_port)

    console.print(f"Serving sharelift on http://{host}:{port}")
    uvicorn.run(create_app(config, metrics=metrics), host=host, port=port)


# ============================================================================
# sharelift version
# ============================================================================


@click.command()
def version_cmd():
    """Show version information."""
    click.echo(f"sharelift version {__version__}")
    click.echo("Python " + sys.version.split()[0])


# ============================================================================
# Command Registration
# ============================================================================

cli.add_command(migrate_cmd, name="migrate")
cli.add_command(plan_cmd, name="plan")
cli.add_command(serve_cmd, name="serve")
cli.add_command(version_cmd, name="version")

if __name__ == "__main__":
    cli()
