"""Command-line interface for Blogvoice.

Responsibilities:
- Expose user-facing commands to run the bot, convert one URL locally, and
  manage stored credentials.
- Convert CLI arguments into `BlogvoiceConfig` and resolved secrets.

Key public functions:
- `app`: Typer application instance.
- `main`: invoke the Typer application.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

from dotenv import find_dotenv, load_dotenv
import typer

from .bot.delivery import failure_message
from .bot.server import BotServer
from .cli_rendering import echo_conversion_summary, exit_with_command_error
from .config import BlogvoiceConfig, ConfigLoader, ResolvedSecrets, RuntimeConfigSources
from .credentials import create_credential_store
from .errors import PipelineStageError
from .models.datatypes import ConversionRequest, Failure
from .parsing import normalize_optional_string
from .pipeline.runtime import RunControl
from .provider_factory import ProviderFactory
from .telemetry.logger import RunLogger

app = typer.Typer(
    name="blogvoice",
    no_args_is_help=True,
    help="Blogvoice: turn blog posts into speech through a chat bot.",
)

_SECRET_PROMPTS = {
    "openai_api_key": "OpenAI API key (hidden input)",
    "tts_api_key": "TTS API key (hidden input)",
    "telegram_bot_token": "Telegram bot token (hidden input)",
}
_SECRET_LABELS = {
    "openai_api_key": "OpenAI API key",
    "tts_api_key": "TTS API key",
    "telegram_bot_token": "Telegram bot token",
}


class BuildProgressIndicator:
    """Render deterministic per-stage progress lines for long-running commands."""

    _SPINNER_FRAMES = "|/-\\"

    def __init__(self, command_name: str) -> None:
        """Initialize progress indicator metadata for a command invocation."""

        self._command_name = command_name

    def on_stage_start(self, stage_name: str, stage_index: int, stage_total: int) -> None:
        """Print one progress line for a stage start transition."""

        spinner = self._SPINNER_FRAMES[(stage_index - 1) % len(self._SPINNER_FRAMES)]
        typer.echo(
            f"[progress] command={self._command_name} "
            f"{spinner} {stage_index}/{stage_total} stage={stage_name}"
        )

    def on_chunk_start(self, chunk_index: int, chunk_total: int) -> None:
        """Print one progress line per speech chunk."""

        typer.echo(
            f"[progress] command={self._command_name} chunk={chunk_index}/{chunk_total}"
        )


@app.callback()
def _load_dotenv() -> None:
    """Load `.env` from the working directory without overriding the environment."""

    load_dotenv(find_dotenv(usecwd=True), override=False)


def _load_config(config_path: Path | None) -> BlogvoiceConfig:
    """Load YAML or environment config and map failures to stage errors."""

    try:
        if config_path is None:
            return ConfigLoader.from_env()
        return ConfigLoader.from_yaml(config_path)
    except FileNotFoundError as exc:
        raise PipelineStageError(
            stage="config",
            detail=f"Config file not found: `{config_path}`.",
            hint="Provide an existing path via `--config <path.yaml>`.",
        ) from exc
    except ValueError as exc:
        source = f"config file `{config_path}`" if config_path is not None else "environment"
        raise PipelineStageError(
            stage="config",
            detail=f"Invalid {source}: {exc}",
            hint="Fix config schema/values and rerun.",
        ) from exc


def _resolve_secrets(
    config: BlogvoiceConfig,
    api_key: str | None,
    bot_token: str | None,
) -> ResolvedSecrets:
    """Resolve secrets from CLI options, keyring, environment, and config."""

    runtime_cli_values: dict[str, str] = {}
    for key, value in (("openai_api_key", api_key), ("telegram_bot_token", bot_token)):
        normalized = normalize_optional_string(value)
        if normalized is not None:
            runtime_cli_values[key] = normalized

    runtime_secure_values = create_credential_store().stored_secrets()
    return config.resolved_secrets(
        RuntimeConfigSources(
            cli=runtime_cli_values,
            secure=runtime_secure_values,
            env=config.runtime_sources.env,
        )
    )


@app.command("serve")
def serve_command(
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Optional YAML config file."),
    ] = None,
    api_key: Annotated[
        str | None,
        typer.Option("--api-key", help="OpenAI API key for this process only."),
    ] = None,
    bot_token: Annotated[
        str | None,
        typer.Option("--bot-token", help="Telegram bot token for this process only."),
    ] = None,
) -> None:
    """Run the Telegram bot until interrupted."""

    try:
        config = _load_config(config_file)
        secrets = _resolve_secrets(config, api_key, bot_token)
        if secrets.openai_api_key is None:
            raise PipelineStageError(
                stage="config",
                detail="OpenAI API key is not configured.",
                hint="Set `OPENAI_API_KEY` or run `blogvoice credentials --set-openai-key`.",
            )
        try:
            telegram_client = ProviderFactory.create_telegram_client(config, secrets)
        except ValueError as exc:
            raise PipelineStageError(
                stage="config",
                detail=str(exc),
                hint="Create a bot with @BotFather and pass its token.",
            ) from exc
        run_logger = RunLogger()
        pipeline = ProviderFactory.create_pipeline(
            config, secrets, run_logger, telegram_client=telegram_client
        )
        server = BotServer(
            client=telegram_client,
            pipeline=pipeline,
            run_logger=run_logger,
            run_timeout_seconds=config.run_timeout_seconds,
            max_concurrent_runs=config.max_concurrent_runs,
            poll_timeout_seconds=config.poll_timeout_seconds,
        )
    except Exception as exc:
        exit_with_command_error("serve", exc)

    typer.echo("Bot is running. Press Ctrl+C to stop.")
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        typer.echo("Bot stopped.")


@app.command("convert")
def convert_command(
    url: Annotated[str, typer.Argument(help="Blog post URL to convert.")],
    out: Annotated[
        Path | None,
        typer.Option("--out", help="Output audio path (defaults to speech.<format>)."),
    ] = None,
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Optional YAML config file."),
    ] = None,
    api_key: Annotated[
        str | None,
        typer.Option("--api-key", help="OpenAI API key for this run only."),
    ] = None,
    timeout: Annotated[
        float | None,
        typer.Option("--timeout", min=0.001, help="Run deadline in seconds."),
    ] = None,
) -> None:
    """Convert one blog post to an audio file without the bot."""

    try:
        config = _load_config(config_file)
        secrets = _resolve_secrets(config, api_key, None)
        progress = BuildProgressIndicator(command_name="convert")
        pipeline = ProviderFactory.create_pipeline(
            config,
            secrets,
            RunLogger(),
            stage_progress_callback=progress.on_stage_start,
            chunk_progress_callback=progress.on_chunk_start,
        )
        request = ConversionRequest(source_url=url, conversation_id="cli")
        trace = pipeline.new_trace(request)
        control = RunControl(
            timeout_seconds=timeout if timeout is not None else config.run_timeout_seconds
        )
        outcome = pipeline.run(request, control, trace)
        if isinstance(outcome, Failure):
            reason = outcome.reason
            raise PipelineStageError(
                stage=reason.stage,
                detail=reason.detail or reason.kind,
                hint=failure_message(reason),
                kind=reason.kind,
            )
        artifact = outcome.value
        output_path = out if out is not None else Path(artifact.file_name)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(artifact.data)
    except Exception as exc:
        exit_with_command_error("convert", exc)

    echo_conversion_summary(trace.run_id, artifact, output_path)


@app.command("credentials")
def credentials_command(
    set_openai_key: Annotated[
        bool,
        typer.Option("--set-openai-key", help="Prompt for the OpenAI API key and store it."),
    ] = False,
    set_tts_key: Annotated[
        bool,
        typer.Option("--set-tts-key", help="Prompt for a separate TTS API key and store it."),
    ] = False,
    set_bot_token: Annotated[
        bool,
        typer.Option("--set-bot-token", help="Prompt for the Telegram bot token and store it."),
    ] = False,
    clear: Annotated[
        bool,
        typer.Option("--clear", help="Clear every stored secret."),
    ] = False,
) -> None:
    """Manage securely stored CLI credentials."""

    requested = [
        name
        for name, flag in (
            ("openai_api_key", set_openai_key),
            ("tts_api_key", set_tts_key),
            ("telegram_bot_token", set_bot_token),
        )
        if flag
    ]
    if clear and requested:
        exit_with_command_error(
            "credentials",
            PipelineStageError(
                stage="credentials",
                detail="`--clear` cannot be combined with `--set-*` options.",
                hint="Run one credentials action per command invocation.",
            ),
        )

    credential_store = create_credential_store()
    if clear:
        removed = [name for name in _SECRET_LABELS if credential_store.clear_secret(name)]
        if removed:
            labels = ", ".join(_SECRET_LABELS[name] for name in removed)
            typer.echo(f"Cleared from secure credential storage: {labels}.")
        else:
            typer.echo("No stored secrets found in secure credential storage.")
        return

    for name in requested:
        prompted = normalize_optional_string(
            typer.prompt(_SECRET_PROMPTS[name], default="", hide_input=True, show_default=False)
        )
        if prompted is None:
            exit_with_command_error(
                "credentials",
                PipelineStageError(
                    stage="credentials",
                    detail=f"No {_SECRET_LABELS[name]} entered.",
                    hint="Provide a non-empty value when using `--set-*` options.",
                ),
            )
        try:
            credential_store.set_secret(name, prompted)
        except Exception as exc:
            exit_with_command_error(
                "credentials",
                PipelineStageError(
                    stage="credentials",
                    detail=f"Failed to store {_SECRET_LABELS[name]} securely: {exc}",
                    hint="Install and configure a keyring backend and retry.",
                ),
            )
        typer.echo(f"{_SECRET_LABELS[name]} stored in secure credential storage.")
    if requested:
        return

    availability = "available" if credential_store.is_available() else "unavailable"
    typer.echo(f"Secure credential storage: {availability}")
    for name, label in _SECRET_LABELS.items():
        status = "present" if credential_store.get_secret(name) is not None else "not set"
        typer.echo(f"Stored {label}: {status}")


def main() -> None:
    """CLI entrypoint for console scripts."""
    app()


if __name__ == "__main__":
    main()
