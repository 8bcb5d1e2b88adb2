"""Command line interface for mediastamp."""

from __future__ import annotations

import difflib
from pathlib import Path
from typing import Any

import click
import yaml
from click.core import ParameterSource
from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

from mediastamp.config import ConfigError, ConfigManager, MediastampConfig, resolve_with_precedence
from mediastamp.logging_setup import configure_logging
from mediastamp.reporting import RunResult
from mediastamp.timestamps import DecisionAction, DecisionRecord, InspectionReport, build_policy
from mediastamp.timestamps.directory import year_tokens
from mediastamp.timestamps.models import ExtractionStatus
from mediastamp.traversal import build_processor

console = Console()

_ACTION_STYLES = {
    DecisionAction.UPDATED: "green",
    DecisionAction.WOULD_UPDATE: "cyan",
    DecisionAction.SKIPPED_IDENTICAL: "dim",
    DecisionAction.SKIPPED_NO_TIMESTAMP: "yellow",
    DecisionAction.SKIPPED_INVALID_FORMAT: "red",
    DecisionAction.SKIPPED_UPDATE_FAILED: "red",
}


def _handle_cli_error(
    message: str,
    *,
    code: str,
    json_output: bool,
    details: Any | None = None,
    original: Exception | None = None,
) -> None:
    """Emit a standardized error and terminate the command appropriately.

    Args:
        message: Human-readable error message.
        code: Machine-readable error identifier.
        json_output: Indicates whether JSON mode is active.
        details: Optional structured details to include in the payload.
        original: Original exception for chaining when not using JSON.

    Raises:
        SystemExit: When emitting JSON output to terminate the command.
        click.ClickException: For non-JSON flows to surface the error.
    """

    if json_output:
        payload: dict[str, Any] = {"error": {"code": code, "message": message}}
        if details is not None:
            payload["error"]["details"] = details
        console.print_json(data=payload)
        raise SystemExit(1)

    if isinstance(original, click.ClickException):
        raise original

    raise click.ClickException(message) from original


def _emit_message(message: Any, *, mode: str, quiet: bool, summary_only: bool) -> None:
    """Conditionally print CLI output according to quiet/summary settings.

    Args:
        message: Renderable or string to emit.
        mode: Output mode identifier (`detail`, `summary`, `warning`, or `error`).
        quiet: Whether quiet mode is active.
        summary_only: Whether only summary lines should be emitted.
    """

    if quiet and mode != "error":
        return
    if summary_only and mode not in {"summary", "warning", "error"}:
        return
    console.print(message)


def _format_summary_line(command: str, root: Path | str, metrics: dict[str, Any]) -> str:
    """Return a consistent summary line for CLI commands."""

    parts = ", ".join(f"{key}={value}" for key, value in metrics.items())
    return f"[green]{command} summary for {root}: {parts}.[/green]"


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


def _format_when(value: Any) -> str:
    return value.strftime("%Y-%m-%d %H:%M:%S") if value is not None else "-"


def _decision_payload(decision: DecisionRecord, root: Path) -> dict[str, Any]:
    try:
        relative = decision.path.relative_to(root).as_posix()
    except ValueError:
        relative = decision.path.as_posix()
    return {
        "path": relative,
        "action": decision.action.value,
        "source": decision.source.value if decision.source else None,
        "resolved": decision.resolved.isoformat() if decision.resolved else None,
        "prior": decision.prior.isoformat() if decision.prior else None,
        "notes": list(decision.notes),
    }


def _run_payload(result: RunResult) -> dict[str, Any]:
    return {
        "context": {"root": result.root.as_posix(), "dry_run": result.dry_run},
        "counts": {
            "files": result.aggregate.subtree_files,
            "updated": result.aggregate.subtree_updated,
            **result.action_counts(),
        },
        "directories": [
            {
                "directory": summary.directory.as_posix(),
                **summary.aggregate.model_dump(mode="json"),
                "report": summary.report_path.as_posix() if summary.report_path else None,
            }
            for summary in result.directories
        ],
        "decisions": [_decision_payload(decision, result.root) for decision in result.decisions],
        "errors": list(result.errors),
    }


def _decision_table(result: RunResult) -> Table | None:
    rows = [d for d in result.decisions if d.action is not DecisionAction.SKIPPED_IDENTICAL]
    if not rows:
        return None
    title = "Planned timestamp changes" if result.dry_run else "Timestamp changes"
    table = Table(title=f"{title} for {result.root}")
    table.add_column("File", overflow="fold")
    table.add_column("Action")
    table.add_column("Source")
    table.add_column("Previous")
    table.add_column("New")
    for decision in rows:
        style = _ACTION_STYLES[decision.action]
        try:
            shown = str(decision.path.relative_to(result.root))
        except ValueError:
            shown = str(decision.path)
        table.add_row(
            shown,
            f"[{style}]{decision.action.value}[/{style}]",
            decision.source_label,
            _format_when(decision.prior),
            _format_when(decision.resolved),
        )
    return table


def _resolve_output_modes(
    ctx: click.Context, config: MediastampConfig, *, quiet: bool, summary_mode: bool, json_output: bool
) -> tuple[bool, bool]:
    explicit_quiet = ctx.get_parameter_source("quiet") == ParameterSource.COMMANDLINE
    explicit_summary = ctx.get_parameter_source("summary_mode") == ParameterSource.COMMANDLINE

    quiet_enabled = quiet if explicit_quiet else config.cli.quiet_default
    summary_only = summary_mode if explicit_summary else config.cli.summary_default

    if json_output:
        if explicit_quiet and quiet_enabled:
            raise click.ClickException("--json cannot be combined with --quiet.")
        if explicit_summary and summary_only:
            raise click.ClickException("--json cannot be combined with --summary.")
        return False, False

    if quiet_enabled and summary_only:
        raise click.ClickException(
            "Quiet and summary modes cannot both be enabled. Adjust CLI defaults or flags."
        )
    return quiet_enabled, summary_only


def _load_config(cli_overrides: dict[str, Any] | None = None) -> MediastampConfig:
    manager = ConfigManager()
    manager.ensure_exists()
    return manager.load(cli_overrides=cli_overrides)


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="mediastamp")
def cli() -> None:
    """Mediastamp restores media file timestamps from their metadata.

    Sources are tried in order: companion JSON file, embedded metadata,
    then a year in the parent directory name.
    """


@cli.command()
@click.argument("path", type=click.Path(exists=True, file_okay=False, path_type=str))
@click.option("--dry-run", is_flag=True, help="Show what would change without touching files.")
@click.option("--json", "json_output", is_flag=True, help="Emit JSON describing every decision.")
@click.option("--summary", "summary_mode", is_flag=True, help="Only emit summary lines.")
@click.option("--quiet", is_flag=True, help="Suppress non-error output.")
@click.option("--debug", is_flag=True, help="Write verbose output to the debug log file.")
@click.option("--timezone", "tz_name", type=str, help="IANA timezone for naive timestamps.")
@click.option("--no-embedded", is_flag=True, help="Skip exiftool lookups of embedded metadata.")
@click.pass_context
def run(
    ctx: click.Context,
    path: str,
    dry_run: bool,
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
    debug: bool,
    tz_name: str | None,
    no_embedded: bool,
) -> None:
    """Update timestamps of media files under PATH and write per-directory reports.

    Args:
        ctx: Click context used for parameter source inspection.
        path: Root directory to process.
        dry_run: If True, resolve timestamps without modifying files or writing reports.
        json_output: If True, emit a JSON payload instead of tables.
        summary_mode: When True, limit output to summary lines and warnings.
        quiet: When True, suppress non-error CLI output entirely.
        debug: When True, log every extraction step to the debug log.
        tz_name: Timezone override for interpreting naive timestamps.
        no_embedded: When True, do not query embedded metadata.
    """

    overrides: dict[str, Any] = {}
    if tz_name:
        overrides["timestamps.timezone"] = tz_name
    if no_embedded:
        overrides["timestamps.use_embedded_metadata"] = False

    try:
        config = _load_config(overrides)
        quiet_enabled, summary_only = _resolve_output_modes(
            ctx, config, quiet=quiet, summary_mode=summary_mode, json_output=json_output
        )
    except ConfigError as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=json_output, original=exc)
        return

    log_path = configure_logging(config.logging, debug=debug)
    if log_path is not None and not json_output:
        _emit_message(
            f"[cyan]Running in DEBUG mode; log written to {log_path}.[/cyan]",
            mode="detail",
            quiet=quiet_enabled,
            summary_only=summary_only,
        )

    root = Path(path).expanduser().resolve()
    if not json_output:
        _emit_message(
            f"Starting to process media files in {root} and subdirectories...",
            mode="detail",
            quiet=quiet_enabled,
            summary_only=summary_only,
        )

    try:
        result = build_processor(config, dry_run=dry_run).run(root)
    except Exception as exc:
        _handle_cli_error(
            f"Unexpected error while processing {root}: {exc}",
            code="internal_error",
            json_output=json_output,
            details={"exception": type(exc).__name__},
            original=exc,
        )
        return

    if json_output:
        console.print_json(data=_run_payload(result))
        return

    table = _decision_table(result)
    if table is not None:
        _emit_message(table, mode="detail", quiet=quiet_enabled, summary_only=summary_only)

    for summary in result.directories:
        aggregate = summary.aggregate
        line = (
            f"{summary.directory}: {aggregate.direct_updated}/{aggregate.direct_files} direct, "
            f"{aggregate.subtree_updated}/{aggregate.subtree_files} including subdirectories"
        )
        _emit_message(line, mode="detail", quiet=quiet_enabled, summary_only=summary_only)

    if result.errors:
        _emit_message(
            "[red]Errors encountered:[/red]",
            mode="error",
            quiet=quiet_enabled,
            summary_only=summary_only,
        )
        for entry in result.errors:
            _emit_message(f"  - {entry}", mode="error", quiet=quiet_enabled, summary_only=summary_only)

    counts = result.action_counts()
    metrics: dict[str, Any] = {
        "files": result.aggregate.subtree_files,
        "updated": result.aggregate.subtree_updated,
        "identical": counts[DecisionAction.SKIPPED_IDENTICAL.value],
        "no_timestamp": counts[DecisionAction.SKIPPED_NO_TIMESTAMP.value],
        "failed": counts[DecisionAction.SKIPPED_UPDATE_FAILED.value]
        + counts[DecisionAction.SKIPPED_INVALID_FORMAT.value],
    }
    if dry_run:
        metrics["dry_run"] = True
    _emit_message(
        _format_summary_line("Run", root, metrics),
        mode="summary",
        quiet=quiet_enabled,
        summary_only=summary_only,
    )
    if result.directories and result.directories[-1].report_path is not None:
        _emit_message(
            f"Result file created: {result.directories[-1].report_path}",
            mode="summary",
            quiet=quiet_enabled,
            summary_only=summary_only,
        )


def _inspect_payload(report: InspectionReport) -> dict[str, Any]:
    return {
        "path": report.path.as_posix(),
        "current": report.current.isoformat() if report.current else None,
        "sources": [
            {
                "source": entry.source.value,
                "status": entry.result.status.value,
                "timestamp": entry.result.candidate.display() if entry.result.candidate else None,
                "reason": entry.result.reason,
            }
            for entry in report.sources
        ],
        "chosen": (
            {"source": report.chosen.source.value, "timestamp": report.chosen.display()}
            if report.chosen
            else None
        ),
    }


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=str))
@click.option("--json", "json_output", is_flag=True, help="Emit the inspection as JSON.")
@click.option("--timezone", "tz_name", type=str, help="IANA timezone for naive timestamps.")
def inspect(file: str, json_output: bool, tz_name: str | None) -> None:
    """Show every timestamp source for FILE without modifying it."""

    overrides = {"timestamps.timezone": tz_name} if tz_name else None
    try:
        config = _load_config(overrides)
    except ConfigError as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=json_output, original=exc)
        return

    configure_logging(config.logging)
    path = Path(file).expanduser().resolve()
    policy = build_policy(config.timestamps, dry_run=True)
    try:
        report = policy.inspect(path)
    finally:
        policy.close()

    if json_output:
        payload = _inspect_payload(report)
        payload["directory_years"] = [
            {"token": token.text, "dimension": token.dimension, "in_range": token.in_range}
            for token in year_tokens(path.parent.name, config.timestamps.min_year)
        ]
        console.print_json(data=payload)
        return

    console.print(f"Inspecting timestamp sources for: {path}")
    console.print(f"Current file timestamp: {_format_when(report.current)}")
    table = Table()
    table.add_column("Source")
    table.add_column("Status")
    table.add_column("Timestamp")
    table.add_column("Details", overflow="fold")
    for entry in report.sources:
        result = entry.result
        status_style = "green" if result.status is ExtractionStatus.FOUND else "yellow"
        table.add_row(
            entry.source.label,
            f"[{status_style}]{result.status.value}[/{status_style}]",
            result.candidate.display() if result.candidate else "-",
            result.reason or "",
        )
    console.print(table)

    if report.chosen is not None:
        console.print(
            f"[green]Timestamp that would be used: {report.chosen.display()} "
            f"(from {report.chosen.source.label}, touch format {report.chosen.touch_format()})"
            "[/green]"
        )
    else:
        console.print("[yellow]No valid timestamp found.[/yellow]")

    console.print(f"Parent directory: {path.parent.name}")
    tokens = year_tokens(path.parent.name, config.timestamps.min_year)
    if not tokens:
        console.print("No 4-digit numbers found in directory name.")
    for token in tokens:
        if token.dimension:
            console.print(f"  Ignored year-like token: {token.text} (part of a pixel dimension)")
        elif token.in_range:
            console.print(f"  Valid year found: {token.text}")
        else:
            console.print(f"  Invalid year found: {token.text} (out of valid range)")


@cli.group()
def config() -> None:
    """Manage mediastamp configuration files and overrides."""


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
        effective = manager.load(include_env=not no_env)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    yaml_text = yaml.safe_dump(effective.model_dump(mode="python"), sort_keys=False)
    console.print(Syntax(yaml_text, "yaml", word_wrap=True))


@config.command("set")
@click.argument("key")
@click.option("--value", required=True, help="Value to assign to KEY.")
def config_set(key: str, value: str) -> None:
    """Persist a configuration value expressed as a dotted KEY.

    Args:
        key: Dotted path describing the configuration field to update.
        value: YAML-literal value to write into the configuration file.

    Raises:
        click.ClickException: If parsing, assignment, or validation fails.
    """
    manager = ConfigManager()
    manager.ensure_exists()

    before = manager.read_text().splitlines()
    segments = [segment.strip() for segment in key.split(".") if segment.strip()]
    if not segments:
        raise click.ClickException("KEY must specify a dotted path such as 'timestamps.min_year'.")

    try:
        parsed_value = yaml.safe_load(value)
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Unable to parse value: {exc}") from exc

    file_data = manager.load_file_overrides()

    try:
        _assign_nested(file_data, segments, parsed_value)
        resolve_with_precedence(defaults=MediastampConfig(), file_overrides=file_data)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    manager.save(file_data)
    after = manager.read_text().splitlines()

    diff = list(
        difflib.unified_diff(
            before,
            after,
            fromfile="config.yaml (before)",
            tofile="config.yaml (after)",
            lineterm="",
        )
    )
    # Only the "Last updated" stamp differs when the value was already set.
    meaningful = [
        line
        for line in diff
        if line[:1] in "+-" and not line.startswith(("+++", "---")) and "Last updated" not in line
    ]
    if not meaningful:
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
        resolve_with_precedence(defaults=MediastampConfig(), file_overrides=parsed)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    manager.save(parsed)
    console.print("[green]Configuration updated successfully.[/green]")


def main() -> None:
    """Invoke the Click CLI as the console script entry point."""
    cli()


if __name__ == "__main__":
    main()
