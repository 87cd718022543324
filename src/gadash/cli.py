from __future__ import annotations

from pathlib import Path

import typer

from gadash.auth import static_token_authorizer
from gadash.config import DEFAULT_CHART_TYPE, DEFAULT_CONFIG_PATH, DashboardConfig, load_config
from gadash.dashboard import run_dashboard
from gadash.errors import ChartError
from gadash.io.responses import load_response
from gadash.logging import configure_logging
from gadash.transform import to_typed_table

app = typer.Typer(no_args_is_help=True, add_completion=False)


def _load_app_config(config_path: Path) -> DashboardConfig:
    return load_config(config_path)


@app.command()
def render(
    config: Path = typer.Option(DEFAULT_CONFIG_PATH, exists=True, readable=True, resolve_path=True),
    out: Path = typer.Option(Path("out"), resolve_path=True),
    access_token: str | None = typer.Option(
        None,
        envvar="GADASH_ACCESS_TOKEN",
        help="OAuth access token for the reporting API. Falls back to auth.access_token.",
    ),
    log_level: str = typer.Option("INFO", help="Logging level."),
) -> None:
    """Render every configured chart into an HTML dashboard page."""
    configure_logging(log_level)
    cfg = _load_app_config(config)
    if not cfg.charts:
        raise typer.BadParameter("Config defines no charts. Add entries under 'charts'.")

    token = access_token or cfg.auth.access_token
    result = run_dashboard(cfg, out, authorizer=static_token_authorizer(token))

    typer.echo(f"Dashboard written to: {result.page_path}")
    typer.echo(f"- charts: {len(result.states)}")
    typer.echo(f"- authorized: {str(result.authorized).lower()}")
    if not result.authorized:
        typer.echo("- charts queued until authorized (set --access-token or GADASH_ACCESS_TOKEN)")
    for line in result.errors:
        typer.echo(f"- {line}")


@app.command()
def preview(
    response: Path = typer.Option(..., exists=True, readable=True, resolve_path=True),
    chart_type: str = typer.Option(DEFAULT_CHART_TYPE, help="Chart type the table is drawn for."),
) -> None:
    """Print the typed table built from a saved reporting API response."""
    payload = load_response(response)
    try:
        table = to_typed_table(payload, chart_type)
    except ChartError as exc:
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    for column in table.columns:
        typer.echo(f"{column.label} ({column.name}): {column.type}")
    typer.echo(table.to_frame().to_string(index=False))


if __name__ == "__main__":
    app()
