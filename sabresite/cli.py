"""CLI entry point for sabresite."""

from __future__ import annotations

import json
import logging
import signal
import time
from pathlib import Path
from typing import Annotated

import typer
import yaml
from rich import print as rprint
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from sabresite.build import BuildReport, SiteGenerator, check_reproducible
from sabresite.checks import ContentValidator
from sabresite.config import SiteConfig, load_config
from sabresite.config.loader import DEFAULT_CONFIG_TEMPLATE
from sabresite.content import ContentStore
from sabresite.serve import PreviewServer, SiteWatcher

app = typer.Typer(
    name="sabresite",
    help="Build, check and preview the sabre.io documentation site.",
)

config_app = typer.Typer(help="Manage sabresite configuration.")
app.add_typer(config_app, name="config")

logger = logging.getLogger("sabresite")

# Global state
_config: SiteConfig | None = None

_LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


class _JsonFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": self.formatTime(record),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def _configure_logging(cfg: SiteConfig) -> None:
    """Route the sabresite logger tree to stderr per log_level/log_format."""
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    if cfg.log_format == "json":
        handler: logging.Handler = logging.StreamHandler()
        handler.setFormatter(_JsonFormatter())
    else:
        handler = RichHandler(console=Console(stderr=True), show_path=False)
    logger.addHandler(handler)
    logger.setLevel(_LOG_LEVELS[cfg.log_level])
    logger.propagate = False


def _get_config() -> SiteConfig:
    if _config is None:
        return load_config()
    return _config


@app.callback()
def main(
    config: Annotated[
        str | None, typer.Option("--config", "-c", help="Path to sabresite.yaml")
    ] = None,
) -> None:
    """Global options."""
    global _config
    try:
        _config = load_config(config)
    except ValueError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    _configure_logging(_config)


def _display_build_report(report: BuildReport) -> None:
    table = Table(title=f"Build ({report.output_dir})")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right", style="green")
    table.add_row("Pages", str(report.pages))
    table.add_row("Static files", str(report.static_files))
    table.add_row("Errors", str(len(report.errors)))
    table.add_row("Duration", f"{report.duration:.2f}s")
    rprint(table)

    for err in report.errors:
        rprint(f"  [red]error:[/red] {err.file}: {err.error}")


def _wait_for_shutdown() -> None:
    """Block until SIGINT or SIGTERM."""
    stop = False

    def _signal_handler(sig, frame):
        nonlocal stop
        stop = True

    signal.signal(signal.SIGINT, _signal_handler)
    signal.signal(signal.SIGTERM, _signal_handler)

    while not stop:
        time.sleep(1)


@app.command()
def generate(
    watch: Annotated[bool, typer.Option("--watch", "-w", help="Re-render on file change")] = False,
    server: Annotated[bool, typer.Option("--server", "-s", help="Serve output over local HTTP")] = False,
    port: Annotated[
        int | None, typer.Option("--port", "-p", help="Server port (default from config, 8000)")
    ] = None,
    host: Annotated[str | None, typer.Option("--host", help="Server bind address")] = None,
    env: Annotated[str, typer.Option("--env", "-e", help="Build environment: dev or prod")] = "dev",
    output: Annotated[
        str | None, typer.Option("--output", "-o", help="Override output directory")
    ] = None,
) -> None:
    """Render the site into its output directory."""
    cfg = _get_config()

    try:
        generator = SiteGenerator(cfg, env=env, output_dir=output)
        rprint(
            f"[bold]Generating[/bold] {generator.source_dir} -> {generator.output_dir} "
            f"(env: {env})..."
        )
        report = generator.generate()
    except ValueError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    _display_build_report(report)

    if not watch and not server:
        if report.errors:
            raise typer.Exit(1)
        return

    watcher: SiteWatcher | None = None
    preview: PreviewServer | None = None

    if watch:
        def _rebuild(changed: set[str]) -> None:
            logger.info("%d change(s) detected, regenerating", len(changed))
            result = generator.generate()
            for err in result.errors:
                logger.error("%s: %s", err.file, err.error)

        watcher = SiteWatcher(
            generator.source_dir,
            on_change=_rebuild,
            debounce_seconds=cfg.watch.debounce_seconds,
            ignore_patterns=cfg.build.ignore_patterns,
            ignore_dirs=[generator.output_dir],
        )
        watcher.start()
        rprint(f"[bold]Watching[/bold] {generator.source_dir} for changes")

    if server:
        preview = PreviewServer(
            generator.output_dir,
            host=host or cfg.server.host,
            port=port if port is not None else cfg.server.port,
        )
        try:
            preview.start()
        except OSError as e:
            if watcher is not None:
                watcher.stop()
            rprint(f"[red]Error:[/red] could not start server: {e}")
            raise typer.Exit(1)
        rprint(f"[bold]Serving[/bold] {generator.output_dir} at [cyan]{preview.url}[/cyan]")

    rprint("[dim](Ctrl+C to stop)[/dim]")
    try:
        _wait_for_shutdown()
    finally:
        if watcher is not None:
            watcher.stop()
        if preview is not None:
            preview.stop()


@app.command()
def check(
    path: Annotated[
        str | None, typer.Argument(help="Content root (default: build.source_dir)")
    ] = None,
    format: Annotated[
        str, typer.Option("--format", "-f", help="Output format: table or json")
    ] = "table",
) -> None:
    """Check pages for version, layout, link and line-length problems."""
    cfg = _get_config()
    if path is not None:
        cfg = cfg.model_copy(update={"build": cfg.build.model_copy(update={"source_dir": path})})
    source = cfg.build.source_dir

    if format not in ("table", "json"):
        rprint(f"[red]Error:[/red] Invalid format '{format}'. Choose table or json.")
        raise typer.Exit(1)

    validator = ContentValidator.from_config(cfg)
    try:
        store = ContentStore.from_config(cfg.build).load()
    except ValueError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    results = validator.validate_store(store)

    if not results:
        rprint(f"[yellow]No pages found in {source}.[/yellow]")
        raise typer.Exit(0)

    any_invalid = any(not r.valid for r in results)

    if format == "json":
        typer.echo(json.dumps([r.model_dump() for r in results], indent=2))
    else:
        rprint(f"[bold]Checking[/bold] {source}...")
        table = Table(title=f"Check Results ({len(results)} pages)")
        table.add_column("Path", style="cyan")
        table.add_column("Status", justify="center")
        table.add_column("Errors", justify="right", style="red")
        table.add_column("Warnings", justify="right", style="yellow")
        for r in results:
            status = "[green]PASS[/green]" if r.valid else "[red]FAIL[/red]"
            table.add_row(r.path, status, str(len(r.errors)), str(len(r.warnings)))
        rprint(table)

        # Show details for pages with issues
        for r in results:
            if r.errors or r.warnings:
                rprint(f"\n[bold]{r.path}[/bold]")
                for err in r.errors:
                    rprint(f"  [red]error:[/red] {err}")
                for warn in r.warnings:
                    rprint(f"  [yellow]warn:[/yellow] {warn}")

    if any_invalid and cfg.checks.validation == "strict":
        raise typer.Exit(1)


@app.command()
def verify(
    env: Annotated[str, typer.Option("--env", "-e", help="Build environment")] = "dev",
) -> None:
    """Render the site twice and confirm the output is byte-identical."""
    cfg = _get_config()
    rprint(f"[bold]Verifying[/bold] reproducible output for {cfg.build.source_dir} (env: {env})...")

    try:
        report = check_reproducible(cfg, env=env)
    except ValueError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    table = Table(title="Reproducibility")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right", style="green")
    table.add_row("Files compared", str(report.files))
    table.add_row("Mismatched", str(len(report.mismatched)))
    table.add_row("Missing", str(len(report.missing)))
    rprint(table)

    for rel in report.mismatched:
        rprint(f"  [red]differs:[/red] {rel}")
    for rel in report.missing:
        rprint(f"  [red]only in one render:[/red] {rel}")

    if report.reproducible:
        rprint(Panel("Output is byte-identical across renders.", border_style="green"))
    else:
        raise typer.Exit(1)


@config_app.command("show")
def config_show() -> None:
    """Show current resolved configuration."""
    cfg = _get_config()
    rprint(Syntax(yaml.dump(cfg.model_dump(), default_flow_style=False), "yaml"))


@config_app.command("init")
def config_init(
    force: bool = typer.Option(False, "--force", help="Overwrite existing config"),
) -> None:
    """Create default sabresite.yaml in current directory."""
    target = Path("sabresite.yaml")
    if target.exists() and not force:
        rprint("[yellow]sabresite.yaml already exists.[/yellow] Use --force to overwrite.")
        raise typer.Exit(1)
    target.write_text(DEFAULT_CONFIG_TEMPLATE)
    rprint(f"[green]Created[/green] {target}")


if __name__ == "__main__":
    app()
