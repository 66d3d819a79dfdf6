"""CLI entrypoint for docgauge."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Annotated, Any

import click
import typer

from docgauge import __version__
from docgauge.config import Config, find_config_file, load_config
from docgauge.errors import ConfigError, ExtractionError
from docgauge.extractor import PythonExtractor
from docgauge.measurement import threshold_message
from docgauge.pipeline import RunResult, run
from docgauge.rules import list_rule_info

app = typer.Typer(
    name="docgauge",
    add_completion=False,
    context_settings={"help_option_names": ["-h", "--help"]},
    help="Measure documentation coverage and gate it against a threshold.",
)


def version_callback(value: bool) -> None:
    """Print version and exit when --version is provided."""
    if value:
        typer.echo(f"docgauge {__version__}")
        raise typer.Exit()


@app.command()
def main_command(
    paths: Annotated[
        list[str] | None,
        typer.Argument(help="Files, directories or glob patterns to measure."),
    ] = None,
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to config TOML file."),
    ] = None,
    threshold: Annotated[
        int | None, typer.Option(help="Required coverage percentage.")
    ] = None,
    output: Annotated[
        str | None, typer.Option(help="Report destination path, or '-' for stdout.")
    ] = None,
    format: Annotated[str, typer.Option(help="Console output format: human|json.")] = "human",
    list_rules: Annotated[
        bool, typer.Option("--list-rules", help="List registered rules and exit.")
    ] = False,
    debug: Annotated[bool, typer.Option("--debug", help="Enable debug logging.")] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """Measure documentation coverage of PATHS (defaults to the configured globs)."""
    _ = version
    output_format = format.lower()
    if output_format not in {"human", "json"}:
        raise typer.BadParameter("format must be one of: human, json", param_hint="--format")
    if debug:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    config = _load_config_or_raise(
        config_file=config_file,
        overrides=_overrides(paths=paths, threshold=threshold, output=output),
    )

    if list_rules:
        typer.echo(_render_rule_list(config))
        return
    if output_format == "json" and config.output.is_stream:
        raise typer.BadParameter(
            "json output cannot share stdout with the report; pass --output PATH",
            param_hint="--output",
        )

    try:
        result = run(config, extractor=PythonExtractor(root=Path.cwd()))
    except ExtractionError as exc:
        typer.echo(click.style(str(exc), fg="red"), err=True)
        raise typer.Exit(code=2) from exc

    if output_format == "json":
        payload = result.measurements.to_dict(
            threshold=config.threshold,
            require_exact_threshold=config.require_exact_threshold,
        )
        payload["report"] = str(config.output)
        typer.echo(json.dumps(payload, sort_keys=True))
    elif not config.output.is_stream:
        typer.echo(_render_summary(result, config))

    if not result.passed:
        raise typer.Exit(code=1)


def main() -> None:
    """Console script entrypoint."""
    app()


def _overrides(
    *, paths: list[str] | None, threshold: int | None, output: str | None
) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    if paths:
        overrides["path"] = list(paths)
    if threshold is not None:
        overrides["threshold"] = threshold
    if output is not None:
        overrides["output"] = output
    return overrides


def _load_config_or_raise(*, config_file: Path | None, overrides: dict[str, Any]) -> Config:
    try:
        resolved = config_file if config_file is not None else find_config_file(Path.cwd())
        return load_config(resolved, overrides=overrides)
    except ConfigError as exc:
        raise typer.BadParameter(str(exc), param_hint="config") from exc


def _render_summary(result: RunResult, config: Config) -> str:
    color = "green" if result.passed else "red"
    lines = [
        click.style(
            f"Coverage: {result.coverage}% (threshold: {result.threshold}%)",
            fg=color,
            bold=True,
        ),
        threshold_message(result.coverage, result.threshold, config.require_exact_threshold),
    ]
    if config.verbose:
        measurements = result.measurements
        lines.insert(
            0,
            f"Total: {measurements.total} Successful: {measurements.successful} "
            f"Failed: {measurements.failed}",
        )
    lines.append(f"Report written to: {config.output}")
    return "\n".join(lines)


def _render_rule_list(config: Config) -> str:
    lines = ["Available rules:"]
    for info in list_rule_info():
        status = "enabled" if config.for_rule(info.rule_id).enabled else "disabled"
        lines.append(f"- {info.rule_id} [{status}] - {info.description}")
    return "\n".join(lines)
