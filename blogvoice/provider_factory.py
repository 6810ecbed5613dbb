"""Provider factory helpers for pipeline collaborators.

Responsibilities:
- Build the fetch, sanitize, speech, and delivery collaborators from config.
- Keep orchestration independent from concrete provider class construction.
"""

from __future__ import annotations

from typing import Callable

from .bot.delivery import TelegramResultDelivery
from .bot.telegram_client import TelegramBotClient
from .config import BlogvoiceConfig, ResolvedSecrets
from .llm.sanitizer import OpenAITextSanitizer, TextSanitizer
from .pipeline.orchestrator import ConversionPipeline
from .scraper.fetcher import PageFetcher, PlaywrightPageFetcher
from .telemetry.logger import RunLogger
from .tts.synthesizer import OpenAISpeechSynthesizer, SpeechSynthesizer
from .tts.voices import VoiceProfile


class ProviderFactory:
    """Factory for collaborator handles injected into each pipeline."""

    @staticmethod
    def create_fetcher(config: BlogvoiceConfig) -> PageFetcher:
        """Create a browser-backed page fetcher."""

        return PlaywrightPageFetcher(
            browser=config.browser,
            executable_path=config.browser_executable,
            page_load_timeout_seconds=config.page_load_timeout_seconds,
        )

    @staticmethod
    def create_sanitizer(config: BlogvoiceConfig, secrets: ResolvedSecrets) -> TextSanitizer:
        """Create the LLM text sanitizer."""

        return OpenAITextSanitizer(
            model=config.sanitize_model,
            api_key=secrets.openai_api_key,
            base_url=config.openai_base_url,
        )

    @staticmethod
    def create_synthesizer(
        config: BlogvoiceConfig,
        secrets: ResolvedSecrets,
        on_chunk: Callable[[int, int], None] | None = None,
    ) -> SpeechSynthesizer:
        """Create the speech synthesizer."""

        return OpenAISpeechSynthesizer(
            model=config.tts_model,
            voice=VoiceProfile(
                provider_voice_id=config.tts_voice,
                audio_format=config.tts_format,
                speaking_rate=config.tts_speed,
            ),
            api_key=secrets.tts_api_key,
            max_input_chars=config.tts_max_input_chars,
            base_url=config.openai_base_url,
            on_chunk=on_chunk,
        )

    @staticmethod
    def create_telegram_client(
        config: BlogvoiceConfig, secrets: ResolvedSecrets
    ) -> TelegramBotClient:
        """Create the Telegram Bot API client; the token is required."""

        if secrets.telegram_bot_token is None:
            raise ValueError(
                "Telegram bot token is not configured. Set `TELEGRAM_BOT_TOKEN` or store "
                "one with `blogvoice credentials --set-bot-token`."
            )
        return TelegramBotClient(
            token=secrets.telegram_bot_token,
            base_url=config.telegram_base_url,
        )

    @staticmethod
    def create_pipeline(
        config: BlogvoiceConfig,
        secrets: ResolvedSecrets,
        run_logger: RunLogger,
        telegram_client: TelegramBotClient | None = None,
        stage_progress_callback: Callable[[str, int, int], None] | None = None,
        chunk_progress_callback: Callable[[int, int], None] | None = None,
    ) -> ConversionPipeline:
        """Create a pipeline; delivery is attached only when a bot client is given."""

        delivery = (
            TelegramResultDelivery(telegram_client) if telegram_client is not None else None
        )
        return ConversionPipeline(
            fetcher=ProviderFactory.create_fetcher(config),
            sanitizer=ProviderFactory.create_sanitizer(config, secrets),
            synthesizer=ProviderFactory.create_synthesizer(
                config, secrets, on_chunk=chunk_progress_callback
            ),
            delivery=delivery,
            run_logger=run_logger,
            stage_progress_callback=stage_progress_callback,
        )
