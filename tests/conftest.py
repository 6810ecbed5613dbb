"""Shared pytest fixtures for the full Blogvoice test suite."""

from __future__ import annotations

from dataclasses import dataclass, field
import io
import time
from typing import Callable
import wave

from playwright.sync_api import TimeoutError as PlaywrightTimeoutError
import pytest

from blogvoice.telemetry.logger import RunLogger


def build_wav_bytes(frame_count: int = 240, sample_rate: int = 24000) -> bytes:
    """Build deterministic mono WAV bytes."""

    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as wav_file:
        wav_file.setnchannels(1)
        wav_file.setsampwidth(2)
        wav_file.setframerate(sample_rate)
        wav_file.writeframes(b"\x00\x00" * frame_count)
    return buffer.getvalue()


@dataclass
class FakeSite:
    """Scripted browser behavior and recorded browser activity.

    Attributes:
        selectors: Inner texts returned per CSS selector.
        status: HTTP status of the main document response.
        goto_error: Exception raised by navigation, when set.
        launch_error: Exception raised by browser launch, when set.
        load_delay_seconds: Time from navigation until the `load` event fires.
    """

    selectors: dict[str, list[str]] = field(default_factory=dict)
    status: int = 200
    goto_error: Exception | None = None
    launch_error: Exception | None = None
    load_delay_seconds: float = 0.0
    launches: list[tuple[str, dict[str, object]]] = field(default_factory=list)
    visits: list[tuple[str, float, str]] = field(default_factory=list)
    browsers: list["FakeBrowser"] = field(default_factory=list)

    def factory(self) -> "FakePlaywright":
        """Return a context manager mimicking `sync_playwright()`."""

        return FakePlaywright(self)


class FakeResponse:
    """Navigation response exposing only `status`."""

    def __init__(self, status: int) -> None:
        self.status = status


class FakeLocator:
    """Locator returning scripted inner texts."""

    def __init__(self, texts: list[str]) -> None:
        self._texts = texts

    def all_inner_texts(self) -> list[str]:
        return list(self._texts)

    def count(self) -> int:
        return len(self._texts)

    def inner_text(self) -> str:
        return "\n".join(self._texts)


class FakePage:
    """Page that records navigation and serves scripted selectors."""

    def __init__(self, site: FakeSite) -> None:
        self._site = site
        self._loaded_at = 0.0

    def goto(self, url: str, *, timeout: float, wait_until: str) -> FakeResponse:
        self._site.visits.append((url, timeout, wait_until))
        if self._site.goto_error is not None:
            raise self._site.goto_error
        self._loaded_at = time.monotonic() + self._site.load_delay_seconds
        return FakeResponse(self._site.status)

    def wait_for_load_state(self, state: str, *, timeout: float) -> None:
        """Block like Playwright: until `load` fires or `timeout` ms elapse."""

        pending = self._loaded_at - time.monotonic()
        if pending <= 0:
            return
        if pending > timeout / 1000:
            time.sleep(timeout / 1000)
            raise PlaywrightTimeoutError(f"Timeout {timeout:g}ms exceeded.")
        time.sleep(pending)

    def locator(self, selector: str) -> FakeLocator:
        return FakeLocator(self._site.selectors.get(selector, []))


class FakeBrowser:
    """Browser tracking whether it was closed."""

    def __init__(self, site: FakeSite) -> None:
        self._site = site
        self.closed = False

    def new_page(self) -> FakePage:
        return FakePage(self._site)

    def close(self) -> None:
        self.closed = True


class FakeBrowserType:
    """Browser engine entry point recording launch options."""

    def __init__(self, site: FakeSite, name: str) -> None:
        self._site = site
        self._name = name

    def launch(self, **options: object) -> FakeBrowser:
        self._site.launches.append((self._name, options))
        if self._site.launch_error is not None:
            raise self._site.launch_error
        browser = FakeBrowser(self._site)
        self._site.browsers.append(browser)
        return browser


class FakePlaywright:
    """Context manager standing in for a started Playwright driver."""

    def __init__(self, site: FakeSite) -> None:
        self.firefox = FakeBrowserType(site, "firefox")
        self.chromium = FakeBrowserType(site, "chromium")
        self.webkit = FakeBrowserType(site, "webkit")

    def __enter__(self) -> "FakePlaywright":
        return self

    def __exit__(self, *_: object) -> None:
        return None


@pytest.fixture
def fake_site() -> FakeSite:
    """Provide a scriptable fake browser site with no content."""

    return FakeSite()


@pytest.fixture
def wav_bytes_factory() -> Callable[..., bytes]:
    """Provide a WAV payload builder for speech tests."""

    return build_wav_bytes


@pytest.fixture
def log_stream() -> io.StringIO:
    """Provide an in-memory log sink."""

    return io.StringIO()


@pytest.fixture
def run_logger(log_stream: io.StringIO) -> RunLogger:
    """Provide a run logger writing into `log_stream`."""

    return RunLogger(sink=log_stream)
