"""CLI output and error rendering helpers.

This module centralizes user-facing CLI presentation for command diagnostics
and conversion summaries.
"""

from __future__ import annotations

from pathlib import Path
from typing import NoReturn

import typer

from .errors import PipelineStageError
from .models.datatypes import AudioArtifact


def exit_with_command_error(command_name: str, exc: Exception) -> NoReturn:
    """Print concise diagnostics for command failures and exit with code 1."""

    if isinstance(exc, PipelineStageError):
        typer.secho(
            f"{command_name} failed at stage `{exc.stage}`: {exc.detail}",
            fg=typer.colors.RED,
            err=True,
        )
        if exc.hint:
            typer.secho(f"Hint: {exc.hint}", fg=typer.colors.YELLOW, err=True)
    else:
        typer.secho(f"{command_name} failed: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1) from exc


def echo_conversion_summary(run_id: str, artifact: AudioArtifact, output_path: Path) -> None:
    """Print run id, audio location, and size for a finished conversion."""

    typer.echo(f"Run id: {run_id}")
    typer.echo(f"Audio: {output_path}")
    typer.echo(f"Format: {artifact.mime_type}")
    typer.echo(f"Segments: {artifact.segment_count}")
    typer.echo(f"Size (bytes): {artifact.size_bytes}")
