"""Configuration model and loaders for Blogvoice.

Responsibilities:
- Define runtime configuration as a typed dataclass.
- Resolve secrets (API keys, bot token) with deterministic source precedence.
- Provide loader entry points for file- and environment-based configuration.

Key types:
- `BlogvoiceConfig`: normalized runtime settings for the bot and pipeline.
- `ResolvedSecrets`: secret values resolved for one process.
- `RuntimeConfigSources`: optional value sources for precedence resolution.
- `ConfigLoader`: static construction helpers for `BlogvoiceConfig`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import os
from pathlib import Path
from typing import Any, Callable, Mapping

import yaml

from .parsing import (
    normalize_optional_string,
    parse_positive_float,
    parse_positive_int,
)


_DEFAULT_SANITIZE_MODEL = "gpt-4o"
_DEFAULT_TTS_MODEL = "tts-1"
_DEFAULT_TTS_VOICE = "nova"
_DEFAULT_TTS_FORMAT = "mp3"
_DEFAULT_OPENAI_BASE_URL = "https://api.openai.com/v1"
_DEFAULT_TELEGRAM_BASE_URL = "https://api.telegram.org"
_SUPPORTED_BROWSERS = frozenset({"firefox", "chromium", "webkit"})
_SUPPORTED_TTS_FORMATS = frozenset({"mp3", "wav", "opus", "aac", "flac"})

_SECRET_ENV_KEYS: dict[str, tuple[str, ...]] = {
    "openai_api_key": ("OPENAI_API_KEY", "OPENAI_BEARER_TOKEN"),
    "tts_api_key": ("BLOGVOICE_TTS_API_KEY",),
    "telegram_bot_token": ("TELEGRAM_BOT_TOKEN", "TELOXIDE_TOKEN"),
}


@dataclass(frozen=True, slots=True)
class RuntimeConfigSources:
    """Source mappings used for deterministic secret precedence.

    Attributes:
        cli: Values explicitly provided by CLI arguments.
        secure: Values loaded from secure local credential storage.
        env: Values loaded from environment variables.
    """

    cli: Mapping[str, str] = field(default_factory=dict)
    secure: Mapping[str, str] = field(default_factory=dict)
    env: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ResolvedSecrets:
    """Secret values resolved for one process; never logged or persisted.

    Attributes:
        openai_api_key: Key for the chat-completions endpoint.
        tts_api_key: Key for the speech endpoint, defaulting to `openai_api_key`.
        telegram_bot_token: Bot API token, only required by the bot server.
    """

    openai_api_key: str | None = None
    tts_api_key: str | None = None
    telegram_bot_token: str | None = None

    def __repr__(self) -> str:
        """Render presence flags only."""

        def _flag(value: str | None) -> str:
            return "set" if value else "unset"

        return (
            "ResolvedSecrets("
            f"openai_api_key={_flag(self.openai_api_key)}, "
            f"tts_api_key={_flag(self.tts_api_key)}, "
            f"telegram_bot_token={_flag(self.telegram_bot_token)})"
        )


@dataclass(slots=True)
class BlogvoiceConfig:
    """Runtime configuration for the bot server and each pipeline run.

    Attributes:
        browser: Playwright browser engine (`firefox`, `chromium`, `webkit`).
        browser_executable: Optional path to a locally installed browser binary.
        page_load_timeout_seconds: Navigation timeout for one page load.
        run_timeout_seconds: Deadline for one whole pipeline run.
        sanitize_model: Chat model used to clean scraped text.
        tts_model: Speech model identifier.
        tts_voice: Speech voice identifier.
        tts_format: Audio response format.
        tts_speed: Relative speaking rate.
        tts_max_input_chars: Maximum characters sent per speech request.
        max_concurrent_runs: Worker pool size for concurrent bot requests.
        poll_timeout_seconds: Long-poll timeout for bot updates.
        openai_base_url: Base URL of the OpenAI REST API.
        telegram_base_url: Base URL of the Telegram Bot API.
        openai_api_key: Optional default LLM key (lowest precedence).
        tts_api_key: Optional default TTS key (lowest precedence).
        telegram_bot_token: Optional default bot token (lowest precedence).
        runtime_sources: Secret source overrides injected by the CLI.
    """

    browser: str = "firefox"
    browser_executable: Path | None = None
    page_load_timeout_seconds: float = 30.0
    run_timeout_seconds: float = 600.0
    sanitize_model: str = _DEFAULT_SANITIZE_MODEL
    tts_model: str = _DEFAULT_TTS_MODEL
    tts_voice: str = _DEFAULT_TTS_VOICE
    tts_format: str = _DEFAULT_TTS_FORMAT
    tts_speed: float = 1.0
    tts_max_input_chars: int = 4096
    max_concurrent_runs: int = 2
    poll_timeout_seconds: int = 30
    openai_base_url: str = _DEFAULT_OPENAI_BASE_URL
    telegram_base_url: str = _DEFAULT_TELEGRAM_BASE_URL
    openai_api_key: str | None = None
    tts_api_key: str | None = None
    telegram_bot_token: str | None = None
    runtime_sources: RuntimeConfigSources = field(default_factory=RuntimeConfigSources)

    def validate(self) -> None:
        """Validate runtime configuration values before the bot or a run starts."""

        if self.browser not in _SUPPORTED_BROWSERS:
            supported = ", ".join(sorted(_SUPPORTED_BROWSERS))
            raise ValueError(f"Unsupported `browser` value `{self.browser}`; supported: {supported}.")
        if self.tts_format not in _SUPPORTED_TTS_FORMATS:
            supported = ", ".join(sorted(_SUPPORTED_TTS_FORMATS))
            raise ValueError(
                f"Unsupported `tts_format` value `{self.tts_format}`; supported: {supported}."
            )
        self._require_non_empty(self.sanitize_model, "sanitize_model")
        self._require_non_empty(self.tts_model, "tts_model")
        self._require_non_empty(self.tts_voice, "tts_voice")
        if self.page_load_timeout_seconds <= 0:
            raise ValueError("`page_load_timeout_seconds` must be a positive number.")
        if self.run_timeout_seconds <= 0:
            raise ValueError("`run_timeout_seconds` must be a positive number.")
        if not 0.25 <= self.tts_speed <= 4.0:
            raise ValueError("`tts_speed` must be between 0.25 and 4.0.")
        if self.tts_max_input_chars <= 0:
            raise ValueError("`tts_max_input_chars` must be a positive integer.")
        if self.max_concurrent_runs <= 0:
            raise ValueError("`max_concurrent_runs` must be a positive integer.")
        if self.poll_timeout_seconds <= 0:
            raise ValueError("`poll_timeout_seconds` must be a positive integer.")

    def resolved_secrets(self, sources: RuntimeConfigSources | None = None) -> ResolvedSecrets:
        """Resolve secrets with deterministic source precedence.

        Precedence for each key is:
        `cli` > `secure` > `env` > config field default.
        The TTS key falls back to the resolved LLM key when unset everywhere.
        """

        resolved_sources = sources if sources is not None else self.runtime_sources

        openai_api_key = self._resolve_secret(
            "openai_api_key", self.openai_api_key, resolved_sources
        )
        tts_api_key = self._resolve_secret("tts_api_key", self.tts_api_key, resolved_sources)
        telegram_bot_token = self._resolve_secret(
            "telegram_bot_token", self.telegram_bot_token, resolved_sources
        )
        return ResolvedSecrets(
            openai_api_key=openai_api_key,
            tts_api_key=tts_api_key or openai_api_key,
            telegram_bot_token=telegram_bot_token,
        )

    @staticmethod
    def _resolve_secret(
        key: str,
        default_value: str | None,
        sources: RuntimeConfigSources,
    ) -> str | None:
        """Resolve one secret from sources in deterministic precedence order."""

        for mapping in (sources.cli, sources.secure):
            value = normalize_optional_string(mapping.get(key))
            if value is not None:
                return value

        for env_key in _SECRET_ENV_KEYS[key]:
            value = normalize_optional_string(sources.env.get(env_key))
            if value is not None:
                return value

        return normalize_optional_string(default_value)

    @staticmethod
    def _require_non_empty(value: str, field_name: str) -> None:
        """Validate that runtime string fields are not empty."""

        if not isinstance(value, str) or not value.strip():
            raise ValueError(f"`{field_name}` must be a non-empty string.")


_FieldParser = Callable[[object, str], Any]


def _parse_string(value: object, field_name: str) -> str:
    normalized = normalize_optional_string(value)
    if normalized is None:
        raise ValueError(f"`{field_name}` must be a non-empty string.")
    return normalized


def _parse_lower_string(value: object, field_name: str) -> str:
    return _parse_string(value, field_name).lower()


def _parse_path(value: object, field_name: str) -> Path:
    return Path(_parse_string(value, field_name))


class ConfigLoader:
    """Factory methods for creating `BlogvoiceConfig` from external sources."""

    _FIELD_PARSERS: dict[str, _FieldParser] = {
        "browser": _parse_lower_string,
        "browser_executable": _parse_path,
        "page_load_timeout_seconds": parse_positive_float,
        "run_timeout_seconds": parse_positive_float,
        "sanitize_model": _parse_string,
        "tts_model": _parse_string,
        "tts_voice": _parse_string,
        "tts_format": _parse_lower_string,
        "tts_speed": parse_positive_float,
        "tts_max_input_chars": parse_positive_int,
        "max_concurrent_runs": parse_positive_int,
        "poll_timeout_seconds": parse_positive_int,
        "openai_base_url": _parse_string,
        "telegram_base_url": _parse_string,
        "openai_api_key": _parse_string,
        "tts_api_key": _parse_string,
        "telegram_bot_token": _parse_string,
    }
    _ENV_KEYS: dict[str, str] = {
        "browser": "BLOGVOICE_BROWSER",
        "browser_executable": "BLOGVOICE_BROWSER_EXECUTABLE",
        "page_load_timeout_seconds": "BLOGVOICE_PAGE_LOAD_TIMEOUT_SECONDS",
        "run_timeout_seconds": "BLOGVOICE_RUN_TIMEOUT_SECONDS",
        "sanitize_model": "BLOGVOICE_SANITIZE_MODEL",
        "tts_model": "BLOGVOICE_TTS_MODEL",
        "tts_voice": "BLOGVOICE_TTS_VOICE",
        "tts_format": "BLOGVOICE_TTS_FORMAT",
        "tts_speed": "BLOGVOICE_TTS_SPEED",
        "tts_max_input_chars": "BLOGVOICE_TTS_MAX_INPUT_CHARS",
        "max_concurrent_runs": "BLOGVOICE_MAX_CONCURRENT_RUNS",
        "poll_timeout_seconds": "BLOGVOICE_POLL_TIMEOUT_SECONDS",
        "openai_base_url": "BLOGVOICE_OPENAI_BASE_URL",
        "telegram_base_url": "BLOGVOICE_TELEGRAM_BASE_URL",
    }

    @staticmethod
    def from_yaml(path: Path, env: Mapping[str, str] | None = None) -> BlogvoiceConfig:
        """Create a validated config from a YAML file.

        Secrets present in the environment still take precedence over secrets
        written in the file.
        """

        path_text = path.read_text(encoding="utf-8")
        payload = yaml.safe_load(path_text)
        if payload is None:
            payload = {}
        if not isinstance(payload, Mapping):
            raise ValueError(f"YAML config `{path}` must contain a top-level mapping/object.")

        unknown = sorted(set(payload).difference(ConfigLoader._FIELD_PARSERS))
        if unknown:
            key_list = ", ".join(str(key) for key in unknown)
            raise ValueError(f"YAML `{path}` includes unsupported key(s): {key_list}.")

        values: dict[str, Any] = {}
        for key, raw_value in payload.items():
            if normalize_optional_string(raw_value) is None:
                continue
            try:
                values[key] = ConfigLoader._FIELD_PARSERS[key](raw_value, key)
            except ValueError as exc:
                raise ValueError(f"YAML `{path}` field {exc}") from exc

        env_map: Mapping[str, str] = os.environ if env is None else env
        config = BlogvoiceConfig(
            **values,
            runtime_sources=RuntimeConfigSources(env=ConfigLoader._secret_env(env_map)),
        )
        config.validate()
        return config

    @staticmethod
    def from_env(env: Mapping[str, str] | None = None) -> BlogvoiceConfig:
        """Create a validated config from environment variables."""

        env_map: Mapping[str, str] = os.environ if env is None else env

        values: dict[str, Any] = {}
        for key, env_key in ConfigLoader._ENV_KEYS.items():
            raw_value = normalize_optional_string(env_map.get(env_key))
            if raw_value is None:
                continue
            try:
                values[key] = ConfigLoader._FIELD_PARSERS[key](raw_value, key)
            except ValueError as exc:
                raise ValueError(f"Environment variable `{env_key}`: {exc}") from exc

        config = BlogvoiceConfig(
            **values,
            runtime_sources=RuntimeConfigSources(env=ConfigLoader._secret_env(env_map)),
        )
        config.validate()
        return config

    @staticmethod
    def _secret_env(env: Mapping[str, str]) -> dict[str, str]:
        """Copy only non-blank secret environment variables."""

        secret_keys = {name for names in _SECRET_ENV_KEYS.values() for name in names}
        return {
            key: value
            for key, value in env.items()
            if key in secret_keys and normalize_optional_string(value) is not None
        }

