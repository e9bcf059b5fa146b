"""Command line interface for theme sources."""

from __future__ import annotations

import asyncio
import json
import logging
import uuid
from pathlib import Path
from typing import Any, Optional

import typer
import uvicorn

from .channel import ResponseCollector
from .config import DEFAULT_DATA_DIR, SourcesConfig, StartupOverrides
from .manager import ThemeSourcesManager
from .server import LOG_FORMAT, create_app


cli = typer.Typer(help="Application sources and theme commands.")


@cli.callback()
def main_options(
    ctx: typer.Context,
    data_dir: Path = typer.Option(DEFAULT_DATA_DIR, "--data-dir", help="Directory holding preferences and installed themes."),
    app_root: Optional[str] = typer.Option(None, "--app-root", help="Directory the application sources are shipped in."),
    layout: str = typer.Option("multi_folder", "--layout", help="Components layout: multi_folder or single_folder."),
    theme_file: Optional[str] = typer.Option(None, "--theme-file", help="Theme definition file to load."),
    import_file: Optional[str] = typer.Option(None, "--import-file", help="Main components import file."),
    search_file: Optional[str] = typer.Option(None, "--search-file", help="Search window import file."),
    app_components: Optional[str] = typer.Option(None, "--app-components", help="Directory with the application components."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Build the manager shared by every command."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING, format=LOG_FORMAT)
    if layout not in ("multi_folder", "single_folder"):
        raise typer.BadParameter(f"Unknown layout: {layout}", param_hint="--layout")

    config_kwargs: dict[str, Any] = {"data_dir": data_dir, "layout": layout}
    if app_root is not None:
        config_kwargs["app_root"] = app_root
    overrides = StartupOverrides(
        theme_file=theme_file,
        import_file=import_file,
        search_file=search_file,
        app_components=app_components,
    )
    ctx.obj = ThemeSourcesManager.from_config(SourcesConfig(**config_kwargs), overrides)


def _echo_json(payload: Any) -> None:
    typer.echo(json.dumps(payload, indent=2))


def _run_request(handler, *args: Any) -> Any:
    async def _request() -> Any:
        collector = ResponseCollector()
        request_id = str(uuid.uuid4())
        await handler(collector, request_id, *args)
        return await collector.wait_for(request_id)

    response = asyncio.run(_request())
    if response.is_error:
        typer.echo(f"Error: {response.payload['message']}", err=True)
        raise typer.Exit(code=1)
    return response.payload


@cli.command()
def config(ctx: typer.Context) -> None:
    """Print the resolved application paths."""
    manager: ThemeSourcesManager = ctx.obj
    result = asyncio.run(manager.get_app_config())
    if not result.ok:
        typer.echo(f"Error: {result.message}", err=True)
        raise typer.Exit(code=1)
    _echo_json(result.value.to_payload())


@cli.command()
def themes(ctx: typer.Context) -> None:
    """List installed themes."""
    manager: ThemeSourcesManager = ctx.obj
    _echo_json(_run_request(manager.list_themes))


@cli.command()
def active(ctx: typer.Context) -> None:
    """Show the active theme and its registry entry."""
    manager: ThemeSourcesManager = ctx.obj
    _echo_json(_run_request(manager.active_theme_info))


@cli.command()
def activate(
    ctx: typer.Context,
    theme_id: str = typer.Argument(..., help="Identifier of the theme to activate."),
) -> None:
    """Activate a theme and print the new configuration."""
    manager: ThemeSourcesManager = ctx.obj
    payload = _run_request(manager.activate_theme, theme_id)
    _echo_json(payload)
    if payload.get("reload"):
        typer.echo("The application must be reloaded to apply this theme.", err=True)


@cli.command()
def serve(
    ctx: typer.Context,
    host: str = typer.Option("127.0.0.1", "--host", "-h", help="Bind address."),
    port: int = typer.Option(4100, "--port", "-p", help="Port to listen on."),
    log_level: str = typer.Option("info", "--log-level", help="Uvicorn log level."),
) -> None:
    """Serve the theme requests over HTTP using uvicorn."""
    app = create_app(ctx.obj)
    uvicorn.run(app, host=host, port=port, log_level=log_level)


def main() -> None:
    """Entrypoint executed via ``python -m theme_sources``."""
    cli()


if __name__ == "__main__":
    main()
