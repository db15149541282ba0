"""Mini README: Entry point CLI for the GramChain ledger.

This script exposes a Typer CLI that starts the FastAPI interface, prints the
ledger summary for a given viewer, or clears the stored ledger. Settings come
from ``GRAMCHAIN_`` environment variables (or a ``.env`` file) when options
are not given.
"""

from __future__ import annotations

import typer
import uvicorn

from gramchain.configuration import get_settings
from gramchain.ledger import JsonFileRecordStore, LedgerMutator, Role, Viewer
from gramchain.ledger import summarise_dashboard, visible_projects, visible_transactions
from gramchain.logging_utils import configure_root_logger

cli = typer.Typer(help="Run and inspect the GramChain fund-tracking ledger.")


def _mutator() -> LedgerMutator:
    return LedgerMutator(JsonFileRecordStore(get_settings().ledger_directory))


@cli.command()
def run(
    host: str = typer.Option(None, help="Host interface to bind."),
    port: int = typer.Option(None, help="Port to listen on."),
    production: bool = typer.Option(
        False, help="Use production server settings (disable auto-reload)."
    ),
) -> None:
    """Start the FastAPI application using uvicorn."""

    settings = get_settings()
    effective_host = host or settings.interface_host
    effective_port = port or settings.interface_port
    configure_root_logger(settings.log_level)

    dashboard_host = "localhost" if effective_host in {"0.0.0.0", "::"} else effective_host
    typer.echo(f"GramChain ledger listening on {effective_host}:{effective_port}")
    typer.echo(f"Dashboard: http://{dashboard_host}:{effective_port}/?role=public")
    uvicorn.run(
        "gramchain.interface.web_app:create_application",
        host=effective_host,
        port=effective_port,
        factory=True,
        reload=not production,
        log_level=settings.log_level.lower(),
    )


@cli.command()
def summary(
    role: str = typer.Option("public", help="Viewer role used for visibility filtering."),
    name: str = typer.Option("", help="Viewer display name."),
) -> None:
    """Print headline ledger figures for a viewer."""

    try:
        viewer = Viewer(role=Role.from_str(role), name=name)
    except ValueError as error:
        raise typer.BadParameter(str(error), param_hint="--role") from error
    transactions, projects = _mutator().store.load()
    metrics = summarise_dashboard(transactions, visible_projects(projects, viewer))
    for key, value in metrics.items():
        typer.echo(f"{key.replace('_', ' ')}: {value}")
    typer.echo(f"visible transactions: {len(visible_transactions(transactions, viewer))}")


@cli.command()
def clear(
    yes: bool = typer.Option(False, "--yes", help="Skip the confirmation prompt."),
) -> None:
    """Remove every stored transaction and project."""

    if not yes:
        typer.confirm("Clear all ledger data? This cannot be undone.", abort=True)
    _mutator().clear_all()
    typer.echo("All ledger data has been cleared.")


if __name__ == "__main__":
    cli()
