"""CLI entry point for auth-browse.

Runs one authenticated operation and prints its result as JSON on stdout.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any

import typer
import yaml
from rich.console import Console

import auth_browse
from auth_browse.browser import AuthenticatedBrowserService
from auth_browse.config import BrowseConfig, get_config
from auth_browse.errors import BrowserUnavailableError
from auth_browse.logging import configure_logging
from auth_browse.state import BrowserOptions, Viewport

app = typer.Typer(
    name="auth-browse",
    help="Authenticated browser automation: screenshots, PDFs, scraping and user flows.",
    no_args_is_help=True,
)

console = Console()
_stderr_console = Console(stderr=True)

_state: dict[str, Any] = {"config_path": None, "summary": False}


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"auth-browse {auth_browse.__version__}")
        raise typer.Exit()


@app.callback()
def main(
    config: Path | None = typer.Option(
        None, "--config", "-c", help="Path to auth-browse.yaml."
    ),
    summary: bool = typer.Option(
        False, "--summary", help="Replace base64 payloads with their size."
    ),
    version: bool | None = typer.Option(
        None,
        "--version",
        "-v",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Authenticated browser automation against the configured application."""
    _state["config_path"] = config
    _state["summary"] = summary


def _parse_viewport(value: str) -> Viewport:
    """Parse WIDTHxHEIGHT."""
    try:
        width, height = (int(part) for part in value.lower().split("x", 1))
    except ValueError as e:
        raise typer.BadParameter(f"expected WIDTHxHEIGHT, got {value!r}") from e
    return Viewport(width=width, height=height)


def _load_config() -> BrowseConfig:
    try:
        config = get_config(_state["config_path"], reload=True)
    except ValueError as e:
        _stderr_console.print(f"[red]{e}[/red]")
        raise typer.Exit(2) from e
    configure_logging(config.log_level)
    return config


def _elide(value: Any) -> Any:
    if isinstance(value, str) and value.startswith("data:"):
        head = value.split(",", 1)[0]
        return f"{head},<{len(value)} chars>"
    if isinstance(value, list):
        return [_elide(v) for v in value]
    return value


def _emit(data: dict[str, Any]) -> None:
    if _state["summary"]:
        data = {key: _elide(value) for key, value in data.items()}
    console.print_json(json.dumps(data, default=str))


def _run(
    config: BrowseConfig,
    operation: Callable[[AuthenticatedBrowserService], Awaitable[Any]],
) -> Any:
    async def _go() -> Any:
        async with AuthenticatedBrowserService(config) as service:
            return await operation(service)

    try:
        return asyncio.run(_go())
    except BrowserUnavailableError as e:
        _stderr_console.print(f"[red]Browser unavailable:[/red] {e}")
        raise typer.Exit(1) from e
    except ValueError as e:
        _stderr_console.print(f"[red]{e}[/red]")
        raise typer.Exit(2) from e


@app.command()
def screenshot(
    path: str = typer.Argument("/", help="Application path to capture."),
    viewport: str = typer.Option("1920x1080", help="Viewport as WIDTHxHEIGHT."),
    full_page: bool = typer.Option(True, "--full-page/--viewport-only"),
    timeout: int | None = typer.Option(None, help="Readiness marker timeout (ms)."),
) -> None:
    """Take an authenticated screenshot."""
    config = _load_config()
    options = BrowserOptions(
        viewport=_parse_viewport(viewport), bypass_auth=full_page, timeout=timeout
    )
    result = _run(config, lambda s: s.take_authenticated_screenshot(path, options))
    _emit(result.to_dict())


@app.command()
def pdf(
    path: str = typer.Argument("/", help="Application path to render."),
    timeout: int | None = typer.Option(None, help="Readiness marker timeout (ms)."),
) -> None:
    """Generate an authenticated PDF."""
    config = _load_config()
    options = BrowserOptions(timeout=timeout)
    result = _run(config, lambda s: s.generate_authenticated_pdf(path, options))
    _emit(result.to_dict())


@app.command()
def scrape(
    path: str = typer.Argument(..., help="Application path to scrape."),
    selector: list[str] = typer.Option(
        [], "--selector", "-s", help="CSS selector to extract (repeatable)."
    ),
    timeout: int | None = typer.Option(None, help="Readiness marker timeout (ms)."),
) -> None:
    """Scrape authenticated page content."""
    config = _load_config()
    options = BrowserOptions(timeout=timeout)
    result = _run(
        config, lambda s: s.scrape_authenticated_content(path, selector, options)
    )
    _emit(result.to_dict())


@app.command()
def flow(
    steps_file: Path = typer.Argument(
        ..., exists=True, dir_okay=False, help="YAML or JSON list of flow steps."
    ),
    viewport: str = typer.Option("1920x1080", help="Viewport as WIDTHxHEIGHT."),
) -> None:
    """Run a user flow. Exits 1 when a step fails."""
    config = _load_config()
    try:
        steps = yaml.safe_load(steps_file.read_text(encoding="utf-8")) or []
    except yaml.YAMLError as e:
        raise typer.BadParameter(f"Invalid steps file {steps_file}: {e}") from e
    if not isinstance(steps, list):
        raise typer.BadParameter(f"{steps_file} must contain a list of steps")

    options = BrowserOptions(viewport=_parse_viewport(viewport))
    result = _run(config, lambda s: s.test_user_flow(steps, options))
    _emit(result.to_dict())
    if not result.success:
        raise typer.Exit(1)


def cli() -> None:
    """Run the CLI application."""
    app()


if __name__ == "__main__":
    cli()
