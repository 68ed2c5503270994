"""Command line interface for the cidview project."""

from __future__ import annotations

import asyncio
import difflib
import logging
from pathlib import Path
from typing import Any, Optional

import click
import yaml
from click.core import ParameterSource
from rich.console import Console
from rich.logging import RichHandler
from rich.syntax import Syntax
from rich.table import Table
from rich.text import Text

from cidview.config import CidviewConfig, ConfigError, ConfigManager, resolve_with_precedence
from cidview.errors import FetchError
from cidview.ingestion import GatewaySource, LocatorSource, TypeResolver
from cidview.ingestion.detectors import SignatureDetector
from cidview.presentation import ConsoleSink, HtmlSink, render_page
from cidview.presentation.base import PresentationSink
from cidview.rendering import RenderDispatcher, RenderError, RenderOutcome
from cidview.viewer import Inspection, ViewPipeline, ViewSession

console = Console()


def _handle_cli_error(
    message: str,
    *,
    code: str,
    json_output: bool,
    original: Exception | None = None,
) -> None:
    """Emit a standardized error and terminate the command appropriately.

    Args:
        message: Human-readable error message.
        code: Machine-readable error identifier.
        json_output: Indicates whether JSON mode is active.
        original: Original exception for chaining when not using JSON.

    Raises:
        SystemExit: When emitting JSON output to terminate the command.
        click.ClickException: For non-JSON flows to surface the error.
    """

    if json_output:
        payload: dict[str, Any] = {"error": {"code": code, "message": message}}
        console.print_json(data=payload)
        raise SystemExit(1)

    if isinstance(original, click.ClickException):
        raise original

    raise click.ClickException(message) from original


def _configure_logging(level: str) -> None:
    """Route library logging through Rich on stderr at ``level``."""
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        raise ConfigError(f"Unknown logging level '{level}'.")
    logging.basicConfig(
        level=numeric,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _load_config(ctx: click.Context, cli_overrides: dict[str, Any]) -> CidviewConfig:
    """Load configuration, apply CLI overrides, and configure logging."""
    manager = ConfigManager()
    manager.ensure_exists()
    config = manager.load(cli_overrides=cli_overrides)
    log_level = ctx.obj.get("log_level") if ctx.obj else None
    _configure_logging(log_level or config.logging.level)
    return config


def _build_detector(config: CidviewConfig) -> SignatureDetector:
    """Create the libmagic signature detector."""
    from cidview.ingestion.signatures import MagicSignatureDetector

    return MagicSignatureDetector(config.detection.sniff_bytes)


def _build_pipeline(config: CidviewConfig) -> ViewPipeline:
    """Assemble the fetch/resolve/render pipeline from configuration."""
    source = LocatorSource(GatewaySource(config.fetch))
    resolver = TypeResolver(_build_detector(config), default_mime=config.rendering.default_mime)
    dispatcher = RenderDispatcher(config.rendering)
    return ViewPipeline(
        source,
        resolver,
        dispatcher,
        follow_redirects=config.fetch.follow_redirects,
    )


async def _view(
    pipeline: ViewPipeline,
    sink: PresentationSink,
    locator: str,
    *,
    declared_type: Optional[str],
    html_path: Optional[Path],
) -> tuple[Optional[dict[str, Any]], Optional[str]]:
    """Render ``locator`` through a session and return its JSON form and fetch error."""
    session = ViewSession(pipeline, sink)
    try:
        outcome = await session.show(locator, declared_type=declared_type)
        if outcome is None:
            return None, session.error
        if html_path is not None:
            html_path.write_text(render_page(outcome, title=locator), encoding="utf-8")
        return _outcome_payload(locator, outcome), None
    finally:
        await session.close()


def _outcome_payload(locator: str, outcome: RenderOutcome) -> dict[str, Any]:
    key = "error" if isinstance(outcome, RenderError) else "result"
    return {"locator": locator, key: outcome.model_dump(mode="json")}


def _resolve_output_modes(
    ctx: click.Context, config: CidviewConfig, *, quiet: bool, json_output: bool
) -> tuple[bool, bool]:
    """Combine explicit flags with configured defaults for quiet and JSON modes."""
    explicit_quiet = ctx.get_parameter_source("quiet") == ParameterSource.COMMANDLINE
    explicit_json = ctx.get_parameter_source("json_output") == ParameterSource.COMMANDLINE

    quiet_enabled = quiet if explicit_quiet else config.cli.quiet_default
    json_enabled = json_output if explicit_json else config.cli.json_default
    if json_enabled:
        if explicit_quiet and quiet_enabled:
            raise click.ClickException("--json cannot be combined with --quiet.")
        quiet_enabled = False
    return quiet_enabled, json_enabled


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="cidview")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Override the configured logging level.",
)
@click.pass_context
def cli(ctx: click.Context, log_level: str | None) -> None:
    """cidview renders content-addressed payloads as images, text, JSON, and more.

    Args:
        ctx: Click context used to share global options.
        log_level: Optional logging level override.
    """
    ctx.ensure_object(dict)
    ctx.obj["log_level"] = log_level


@cli.command()
@click.argument("locator")
@click.option("--type", "declared_type", type=str, help="Treat the payload as this MIME type.")
@click.option("--gateway", type=str, help="Gateway base URL for ipfs:// and ipns:// locators.")
@click.option(
    "--html",
    "html_output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write a standalone HTML page for the rendered payload.",
)
@click.option("--json", "json_output", is_flag=True, help="Emit the render result as JSON.")
@click.option("--quiet", is_flag=True, help="Suppress non-error output.")
@click.pass_context
def view(
    ctx: click.Context,
    locator: str,
    declared_type: str | None,
    gateway: str | None,
    html_output: Path | None,
    json_output: bool,
    quiet: bool,
) -> None:
    """Fetch LOCATOR, resolve its type, and render it.

    LOCATOR may be an ipfs:// or ipns:// URI, a /ipfs/ path, a bare CID, an
    http(s) URL, or a local file path.

    Args:
        ctx: Click context used for parameter source inspection.
        locator: Locator of the payload to render.
        declared_type: MIME type that overrides the transport's content type.
        gateway: Gateway override for content-addressed locators.
        html_output: Optional path for a standalone HTML page.
        json_output: If True, emit the render outcome as JSON.
        quiet: When True, suppress non-error output.

    Raises:
        click.ClickException: If configuration loading fails or the payload
            cannot be fetched or rendered.
    """

    json_enabled = json_output
    try:
        overrides = {"fetch.gateway": gateway} if gateway else {}
        config = _load_config(ctx, overrides)
        quiet_enabled, json_enabled = _resolve_output_modes(
            ctx, config, quiet=quiet, json_output=json_output
        )

        sink: PresentationSink
        if json_enabled:
            sink = HtmlSink()
        else:
            sink = ConsoleSink(console, quiet=quiet_enabled)

        payload, fetch_error = asyncio.run(
            _view(
                _build_pipeline(config),
                sink,
                locator,
                declared_type=declared_type,
                html_path=html_output,
            )
        )

        if payload is None:
            if json_enabled:
                _handle_cli_error(
                    fetch_error or "Request was superseded.", code="fetch_error", json_output=True
                )
            ctx.exit(1)
            return

        if json_enabled:
            console.print_json(data=payload)
        elif html_output is not None and not quiet_enabled:
            console.print(Text(f"Wrote {html_output}.", style="green"))

        if "error" in payload:
            ctx.exit(1)
    except ConfigError as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=json_enabled, original=exc)
    except click.ClickException as exc:
        _handle_cli_error(str(exc), code="cli_error", json_output=json_enabled, original=exc)
    except OSError as exc:
        _handle_cli_error(
            f"Unable to write output: {exc}",
            code="io_error",
            json_output=json_enabled,
            original=exc,
        )


@cli.command()
@click.argument("locator")
@click.option("--type", "declared_type", type=str, help="Treat the payload as this MIME type.")
@click.option("--gateway", type=str, help="Gateway base URL for ipfs:// and ipns:// locators.")
@click.option("--json", "json_output", is_flag=True, help="Emit type diagnostics as JSON.")
@click.pass_context
def inspect(
    ctx: click.Context,
    locator: str,
    declared_type: str | None,
    gateway: str | None,
    json_output: bool,
) -> None:
    """Show how the type of LOCATOR resolves and which renderer it selects.

    Args:
        ctx: Click context used to access global options.
        locator: Locator of the payload to inspect.
        declared_type: MIME type that overrides the transport's content type.
        gateway: Gateway override for content-addressed locators.
        json_output: If True, emit diagnostics as JSON.
    """

    try:
        overrides = {"fetch.gateway": gateway} if gateway else {}
        config = _load_config(ctx, overrides)
        pipeline = _build_pipeline(config)
        report: Inspection = asyncio.run(pipeline.inspect(locator, declared_type=declared_type))
    except ConfigError as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=json_output, original=exc)
        return
    except FetchError as exc:
        _handle_cli_error(str(exc), code="fetch_error", json_output=json_output, original=exc)
        return

    if json_output:
        console.print_json(
            data={
                "locator": report.locator,
                "declared_type": report.declared_type,
                "mime_type": report.resolution.mime_type,
                "origin": report.resolution.origin,
                "category": report.category.value,
                "size_bytes": report.size_bytes,
            }
        )
        return

    table = Table(title=Text(f"Type resolution for {locator}"), show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("Declared type", Text(report.declared_type or "-"))
    table.add_row("Resolved type", Text(report.resolution.mime_type))
    table.add_row("Origin", report.resolution.origin)
    table.add_row("Category", report.category.value)
    table.add_row("Size", str(report.size_bytes))
    console.print(table)


def _assign_nested(target: dict[str, Any], path: list[str], value: Any) -> None:
    """Assign a nested value within a dictionary for a dotted path.

    Raises:
        ConfigError: If a non-mapping value is encountered along the path.
    """

    node = target
    for segment in path[:-1]:
        existing = node.get(segment)
        if existing is None:
            existing = {}
            node[segment] = existing
        elif not isinstance(existing, dict):
            raise ConfigError(
                f"Cannot assign into '{segment}' because it is not a mapping in the config file."
            )
        node = existing
    node[path[-1]] = value


@cli.group()
def config() -> None:
    """Manage cidview configuration files and overrides."""


@config.command("view")
@click.option("--no-env", is_flag=True, help="Ignore environment overrides when displaying output.")
def config_view(no_env: bool) -> None:
    """Display the effective configuration after applying precedence rules.

    Raises:
        click.ClickException: If configuration cannot be loaded.
    """
    manager = ConfigManager()
    try:
        manager.ensure_exists()
        loaded = manager.load(include_env=not no_env)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    yaml_text = yaml.safe_dump(loaded.model_dump(mode="python"), sort_keys=False)
    console.print(Syntax(yaml_text, "yaml", word_wrap=True))


@config.command("set")
@click.argument("key")
@click.option("--value", required=True, help="Value to assign to KEY.")
def config_set(key: str, value: str) -> None:
    """Persist a configuration value expressed as a dotted KEY.

    Args:
        key: Dotted path such as ``rendering.hex_preview_bytes``.
        value: YAML-literal value to write into the configuration file.

    Raises:
        click.ClickException: If parsing, assignment, or validation fails.
    """
    manager = ConfigManager()
    manager.ensure_exists()

    before = manager.read_text().splitlines()
    segments = [segment.strip() for segment in key.split(".") if segment.strip()]
    if not segments:
        raise click.ClickException(
            "KEY must specify a dotted path such as 'rendering.json_indent'."
        )

    try:
        parsed_value = yaml.safe_load(value)
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Unable to parse value: {exc}") from exc

    try:
        file_data = manager.load_file_overrides()
        _assign_nested(file_data, segments, parsed_value)
        resolve_with_precedence(defaults=CidviewConfig(), file_overrides=file_data)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    manager.save(file_data)
    after = manager.read_text().splitlines()

    # The "Last updated" stamp always changes, so compare the remaining lines.
    diff = [
        line
        for line in difflib.unified_diff(
            before,
            after,
            fromfile="config.yaml (before)",
            tofile="config.yaml (after)",
            lineterm="",
        )
    ]
    changed = [
        line
        for line in diff
        if line[:1] in "+-" and not line.startswith(("+++", "---")) and "Last updated" not in line
    ]
    if not changed:
        console.print("[yellow]No changes applied; value already up to date.[/yellow]")
        return

    console.print(Syntax("\n".join(diff), "diff", word_wrap=False))
    console.print(f"[green]Updated {'.'.join(segments)}.[/green]")


@config.command("edit")
def config_edit() -> None:
    """Open the configuration file in an interactive editor session.

    Raises:
        click.ClickException: If edited content is invalid or cannot be saved.
    """
    manager = ConfigManager()
    manager.ensure_exists()

    original = manager.read_text()
    edited = click.edit(original, extension=".yaml")

    if edited is None:
        console.print("[yellow]Edit cancelled; no changes applied.[/yellow]")
        return

    if edited == original:
        console.print("[yellow]No changes detected.[/yellow]")
        return

    try:
        parsed = yaml.safe_load(edited) or {}
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Invalid YAML: {exc}") from exc

    if not isinstance(parsed, dict):
        raise click.ClickException("Configuration file must contain a top-level mapping.")

    try:
        resolve_with_precedence(defaults=CidviewConfig(), file_overrides=parsed)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    manager.save(parsed)
    console.print("[green]Configuration updated successfully.[/green]")


def main() -> None:
    """Invoke the Click CLI as the console script entry point."""
    cli()


if __name__ == "__main__":
    main()
