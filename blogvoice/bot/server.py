"""Long-polling Telegram bot server.

Responsibilities:
- Poll Bot API updates and parse the small command surface (`/convert <url>`,
  bare links, `/start`, `/help`, `/cancel`).
- Schedule one pipeline run per request on a bounded worker pool.
- Track active runs per chat so `/cancel` can stop them at the next stage.
"""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
import re
import threading

from ..models.datatypes import ConversionRequest
from ..pipeline.orchestrator import ConversionPipeline, RunTrace
from ..pipeline.runtime import RunControl
from ..telemetry.logger import RunLogger
from .telegram_client import TelegramApiError, TelegramBotClient

_URL_PATTERN = re.compile(r"https?://\S+", re.IGNORECASE)

ACKNOWLEDGEMENT_TEXT = "Got it! Working on it. It may take a while..."
USAGE_TEXT = (
    "Send me a link to a blog post and I'll reply with an audio version.\n"
    "/convert <url> - convert a blog post to speech\n"
    "/cancel - stop your conversions in progress\n"
    "/help - show this message"
)


@dataclass(frozen=True, slots=True)
class BotCommand:
    """Parsed inbound message.

    Attributes:
        name: One of `convert`, `help`, `cancel`, `unknown`.
        argument: Command argument (the URL for `convert`).
    """

    name: str
    argument: str = ""


def parse_command(text: str) -> BotCommand:
    """Parse message text into a bot command."""

    stripped = text.strip()
    if stripped.startswith("/"):
        parts = stripped.split(maxsplit=1)
        name = parts[0][1:].split("@", 1)[0].lower()
        argument = parts[1].strip() if len(parts) > 1 else ""
        if name in {"start", "help"}:
            return BotCommand("help")
        if name == "cancel":
            return BotCommand("cancel")
        if name == "convert":
            return BotCommand("convert", argument) if argument else BotCommand("help")
        return BotCommand("unknown")

    match = _URL_PATTERN.search(stripped)
    if match is not None:
        return BotCommand("convert", match.group(0))
    return BotCommand("unknown")


class BotServer:
    """Dispatch Telegram messages to concurrent pipeline runs."""

    def __init__(
        self,
        client: TelegramBotClient,
        pipeline: ConversionPipeline,
        run_logger: RunLogger,
        run_timeout_seconds: float | None = 600.0,
        max_concurrent_runs: int = 2,
        poll_timeout_seconds: int = 30,
        error_backoff_seconds: float = 5.0,
    ) -> None:
        """Initialize the bot with injected collaborators and pool limits."""

        self.client = client
        self.pipeline = pipeline
        self.run_logger = run_logger
        self.run_timeout_seconds = run_timeout_seconds
        self.poll_timeout_seconds = poll_timeout_seconds
        self.error_backoff_seconds = error_backoff_seconds
        self._executor = ThreadPoolExecutor(
            max_workers=max_concurrent_runs, thread_name_prefix="blogvoice-run"
        )
        self._offset: int | None = None
        self._active_runs: dict[str, list[RunControl]] = {}
        self._lock = threading.Lock()

    def serve_forever(self, stop_event: threading.Event | None = None) -> None:
        """Poll and dispatch until `stop_event` is set or the process is interrupted."""

        stop_event = stop_event if stop_event is not None else threading.Event()
        self.run_logger.log_event("bot", "serving", max_poll_seconds=self.poll_timeout_seconds)
        try:
            while not stop_event.is_set():
                try:
                    self.poll_once()
                except TelegramApiError as exc:
                    backoff = exc.retry_after_seconds or self.error_backoff_seconds
                    self.run_logger.log_warning(
                        "bot", "poll_failed", status=exc.status_code, backoff_seconds=backoff
                    )
                    stop_event.wait(backoff)
        finally:
            self.close(wait=False)
            self.run_logger.log_event("bot", "stopped")

    def poll_once(self) -> list[Future[RunTrace]]:
        """Fetch one batch of updates and return futures of the runs it started."""

        updates = self.client.get_updates(
            offset=self._offset, timeout_seconds=self.poll_timeout_seconds
        )
        futures: list[Future[RunTrace]] = []
        for update in updates:
            update_id = update.get("update_id")
            if isinstance(update_id, int):
                self._offset = update_id + 1
            future = self.handle_update(update)
            if future is not None:
                futures.append(future)
        return futures

    def handle_update(self, update: dict) -> Future[RunTrace] | None:
        """Route one update; returns the scheduled run future for conversions."""

        message = update.get("message")
        if not isinstance(message, dict):
            return None
        text = message.get("text")
        chat = message.get("chat")
        if not isinstance(text, str) or not isinstance(chat, dict) or "id" not in chat:
            return None
        chat_id = str(chat["id"])

        command = parse_command(text)
        if command.name == "convert":
            self._reply(chat_id, ACKNOWLEDGEMENT_TEXT)
            return self.submit(ConversionRequest(source_url=command.argument, conversation_id=chat_id))
        if command.name == "cancel":
            cancelled = self.cancel_runs(chat_id)
            self._reply(
                chat_id,
                f"Cancelling {cancelled} conversion(s)." if cancelled else "Nothing to cancel.",
            )
            return None
        self._reply(chat_id, USAGE_TEXT)
        return None

    def submit(self, request: ConversionRequest) -> Future[RunTrace]:
        """Schedule one pipeline run for `request` on the worker pool."""

        control = RunControl(timeout_seconds=self.run_timeout_seconds)
        with self._lock:
            self._active_runs.setdefault(request.conversation_id, []).append(control)
        future = self._executor.submit(self._process, request, control)
        future.add_done_callback(lambda _: self._forget(request.conversation_id, control))
        self.run_logger.log_event("bot", "scheduled", conversation=request.conversation_id)
        return future

    def cancel_runs(self, conversation_id: str) -> int:
        """Cancel every active run of a chat and return how many were signalled."""

        with self._lock:
            controls = list(self._active_runs.get(conversation_id, []))
        for control in controls:
            control.cancel()
        return len(controls)

    def close(self, wait: bool = True) -> None:
        """Cancel active runs and stop the worker pool."""

        with self._lock:
            controls = [control for runs in self._active_runs.values() for control in runs]
        for control in controls:
            control.cancel()
        self._executor.shutdown(wait=wait)

    def _process(self, request: ConversionRequest, control: RunControl) -> RunTrace:
        """Worker entry point; time spent queued for a worker does not count."""

        control.start()
        try:
            return self.pipeline.process(request, control)
        except Exception as exc:
            self.run_logger.log_stage_failure(
                "pipeline", type(exc).__name__, conversation=request.conversation_id
            )
            raise

    def _forget(self, conversation_id: str, control: RunControl) -> None:
        with self._lock:
            runs = self._active_runs.get(conversation_id, [])
            if control in runs:
                runs.remove(control)
            if not runs:
                self._active_runs.pop(conversation_id, None)

    def _reply(self, chat_id: str, text: str) -> None:
        """Send a short text reply; failures are logged and otherwise ignored."""

        try:
            self.client.send_message(chat_id, text)
        except TelegramApiError as exc:
            self.run_logger.log_warning("bot", "reply_failed", status=exc.status_code)
