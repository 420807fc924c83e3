"""CLI entry point using Typer."""

import json
from datetime import UTC, datetime, timedelta
from pathlib import Path

import structlog
import typer
from rich.console import Console
from rich.table import Table

from signalsweep.log import configure_logging
from signalsweep.retention.policy import EvictionPolicy

app = typer.Typer(
    name="signalsweep",
    help="Signal retention sweeper - deletes abandoned call-signaling rows.",
)
console = Console()
logger = structlog.get_logger()
schedule_app = typer.Typer(help="Local launchd schedule for periodic sweeps.")
app.add_typer(schedule_app, name="schedule")


@app.callback()
def main() -> None:
    configure_logging()


@app.command()
def sweep(
    policy: EvictionPolicy | None = typer.Option(None, "--policy", help="Override the configured eviction policy"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Count eligible signals without deleting them"),
    as_json: bool = typer.Option(False, "--json", help="Print the raw JSON summary"),
) -> None:
    """Delete abandoned signals once."""
    from signalsweep.jobs.sweep import run_sweep

    try:
        result = run_sweep(policy=policy, dry_run=dry_run)
    except Exception as e:
        logger.error("Signal cleanup failed", error=str(e), error_type=type(e).__name__)
        if as_json:
            typer.echo(
                json.dumps(
                    {"success": False, "error": str(e) or "Unknown error", "timestamp": datetime.now(UTC).isoformat()}
                )
            )
        else:
            console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    payload = result.to_payload()
    if as_json:
        typer.echo(json.dumps(payload))
        return

    table = Table(title="Sweep Results")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Policy", payload["policy"])
    table.add_row("Threshold", payload["threshold"])
    if "before" in payload:
        table.add_row("Before", str(payload["before"]))
    if dry_run:
        table.add_row("Eligible", str(payload["matched"]))
    else:
        table.add_row("Deleted", str(payload["deleted"]))
    if "after" in payload:
        table.add_row("After", str(payload["after"]))
    table.add_row("Completed", payload["timestamp"])
    console.print(table)

    if dry_run:
        console.print("[bold yellow]Dry run: nothing was deleted.[/bold yellow]")
    else:
        console.print("[bold green]Done![/bold green]")


@app.command()
def status(
    policy: EvictionPolicy | None = typer.Option(None, "--policy", help="Override the configured eviction policy"),
) -> None:
    """Show how many signals exist and how many are eligible right now."""
    from signalsweep.config import get_settings
    from signalsweep.db import get_db
    from signalsweep.retention.policy import compute_threshold, eviction_clause
    from signalsweep.retention.store import SignalStore

    settings = get_settings()
    policy = policy or settings.eviction_policy
    threshold = compute_threshold(datetime.now(UTC), timedelta(seconds=settings.retention_seconds))

    try:
        with get_db() as session:
            store = SignalStore(session)
            total = store.count()
            eligible = store.count(eviction_clause(policy, threshold))
    except Exception as e:
        logger.error("Signal status query failed", error=str(e), error_type=type(e).__name__)
        console.print(f"[bold red]Error:[/bold red] {e}")
        console.print("[yellow]Tip:[/yellow] Run 'alembic upgrade head' to create the signals table.")
        raise typer.Exit(1)

    console.print("[bold blue]Signal Store Status[/bold blue]\n")
    console.print(f"[cyan]Policy:[/cyan] {policy.value}")
    console.print(f"[cyan]Threshold:[/cyan] {threshold.isoformat()}")
    console.print(f"[cyan]Signals:[/cyan] {total} total, {eligible} eligible for deletion")


@schedule_app.command("install")
def schedule_install(
    repo_path: Path = typer.Option(Path.cwd(), "--repo", help="Checkout containing the .venv"),
    interval: int | None = typer.Option(None, "--interval", help="Seconds between sweeps"),
    load: bool = typer.Option(True, help="Load the job into launchd after writing it"),
) -> None:
    """Install the launchd job that sweeps on a fixed interval."""
    from signalsweep.config import get_settings
    from signalsweep.schedule.launchd import install_sweep_launchd

    interval_seconds = interval or get_settings().schedule_interval_seconds
    try:
        plist_path = install_sweep_launchd(repo_path.resolve(), interval_seconds, load=load)
    except ValueError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)
    console.print(f"[green]Installed:[/green] {plist_path} (every {interval_seconds}s)")


@schedule_app.command("uninstall")
def schedule_uninstall() -> None:
    """Remove the launchd job."""
    from signalsweep.schedule.launchd import uninstall_sweep_launchd

    result = uninstall_sweep_launchd()
    if not result["ok"]:
        console.print(f"[yellow]Nothing to remove:[/yellow] {result['error']}")
        raise typer.Exit(1)
    console.print("[green]Schedule removed.[/green]")


@schedule_app.command("status")
def schedule_status() -> None:
    """Show launchd job state."""
    from signalsweep.schedule.launchd import get_sweep_status

    info = get_sweep_status()
    table = Table(title="Sweep Schedule")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="white")
    for key, value in info.items():
        table.add_row(key.replace("_", " ").title(), str(value))
    console.print(table)


@schedule_app.command("run-now")
def schedule_run_now() -> None:
    """Ask launchd to start the job immediately."""
    from signalsweep.schedule.launchd import run_now

    run_now()
    console.print("[green]Sweep started.[/green]")


if __name__ == "__main__":
    app()
