"""Headless-browser page fetching and visible text extraction.

Responsibilities:
- Load a blog post URL in a Playwright-driven browser.
- Extract main prose text (article paragraphs first, body text as fallback).
- Close the browser on every exit path and map failures to `FetchError` kinds.
- Stop waiting for the page as soon as the run is cancelled or out of time, so
  an aborted run never keeps its browser open.
"""

from __future__ import annotations

from pathlib import Path
from time import monotonic
from typing import Any, Callable, Protocol
from urllib.parse import urlparse

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError
from playwright.sync_api import sync_playwright

from ..errors import FetchError, FetchErrorKind
from ..models.datatypes import RawPageText

_CONTENT_SELECTORS = ("article p", "main p")
_LOAD_POLL_SECONDS = 0.25


class StopSignal(Protocol):
    """Run-side view a fetch polls to learn it should give up (`RunControl`)."""

    def should_stop(self) -> bool:
        """Return whether the run was cancelled or ran out of time."""

    def remaining_seconds(self) -> float | None:
        """Return seconds left before the run deadline, or `None`."""


class PageFetcher(Protocol):
    """Protocol for page text providers."""

    def fetch(self, url: str, control: StopSignal | None = None) -> RawPageText:
        """Load `url` and return its visible text, giving up when `control` stops."""


def validate_page_url(url: str) -> str:
    """Return the stripped URL when it is an absolute HTTP(S) URL with a host."""

    candidate = url.strip()
    parsed = urlparse(candidate)
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise FetchError(
            FetchErrorKind.INVALID_URL,
            f"Not an HTTP(S) URL: `{candidate[:200]}`.",
            hint="Send a full link such as https://example.com/post.",
        )
    return candidate


def normalize_paragraphs(paragraphs: list[str]) -> str:
    """Collapse whitespace inside paragraphs and join non-blank ones by newline."""

    lines = [" ".join(paragraph.split()) for paragraph in paragraphs]
    return "\n".join(line for line in lines if line)


def extract_visible_text(page: Any) -> str:
    """Extract main textual content from a loaded Playwright page."""

    for selector in _CONTENT_SELECTORS:
        text = normalize_paragraphs(page.locator(selector).all_inner_texts())
        if text:
            return text

    body = page.locator("body")
    if body.count() == 0:
        return ""
    return normalize_paragraphs(body.inner_text().splitlines())


class PlaywrightPageFetcher:
    """Fetch page text with one exclusive headless browser per call."""

    def __init__(
        self,
        browser: str = "firefox",
        executable_path: Path | None = None,
        page_load_timeout_seconds: float = 30.0,
        playwright_factory: Callable[[], Any] = sync_playwright,
    ) -> None:
        """Initialize browser engine, binary override, and navigation timeout."""

        self.browser = browser
        self.executable_path = executable_path
        self.page_load_timeout_seconds = page_load_timeout_seconds
        self._playwright_factory = playwright_factory

    def fetch(self, url: str, control: StopSignal | None = None) -> RawPageText:
        """Navigate to `url`, wait for the load event, and extract its text.

        With a `control`, navigation never outlasts the run deadline and the
        browser is closed as soon as the run is cancelled or out of time.
        """

        target = validate_page_url(url)
        try:
            with self._playwright_factory() as playwright:
                browser = getattr(playwright, self.browser).launch(**self._launch_options())
                try:
                    text = self._load_text(browser, target, control)
                finally:
                    browser.close()
        except PlaywrightTimeoutError as exc:
            raise FetchError(
                FetchErrorKind.TIMEOUT,
                f"Page load timed out after {self.page_load_timeout_seconds:g}s.",
                hint="Increase `BLOGVOICE_PAGE_LOAD_TIMEOUT_SECONDS` for slow sites.",
            ) from exc
        except PlaywrightError as exc:
            first_line = str(exc).strip().splitlines()[0] if str(exc).strip() else "unknown error"
            raise FetchError(
                FetchErrorKind.SESSION_ERROR,
                f"Browser session failed: {first_line}",
                hint="Verify the browser is installed (`playwright install`).",
            ) from exc

        if not text:
            raise FetchError(FetchErrorKind.EMPTY_CONTENT, f"No readable text at `{target}`.")
        return RawPageText(text=text, source_url=target)

    def _launch_options(self) -> dict[str, Any]:
        """Build browser launch keyword arguments."""

        options: dict[str, Any] = {"headless": True}
        if self.executable_path is not None:
            options["executable_path"] = str(self.executable_path)
        return options

    def _load_budget(self, control: StopSignal | None) -> float:
        """Return the navigation budget: the page timeout capped by the run deadline."""

        budget = self.page_load_timeout_seconds
        if control is not None:
            _raise_if_stopped(control)
            remaining = control.remaining_seconds()
            if remaining is not None:
                budget = min(budget, remaining)
        return budget

    def _load_text(self, browser: Any, url: str, control: StopSignal | None) -> str:
        """Open a page, navigate, and extract text; HTTP errors count as empty."""

        budget = self._load_budget(control)
        load_deadline = monotonic() + budget
        page = browser.new_page()
        response = page.goto(url, timeout=_milliseconds(budget), wait_until="commit")
        if response is not None and response.status >= 400:
            raise FetchError(
                FetchErrorKind.EMPTY_CONTENT,
                f"Page returned HTTP {response.status}.",
            )
        _wait_for_load(page, load_deadline, control)
        return extract_visible_text(page)


def _milliseconds(seconds: float) -> float:
    # Playwright treats a zero timeout as "wait forever".
    return max(seconds, 0.001) * 1000


def _raise_if_stopped(control: StopSignal) -> None:
    if control.should_stop():
        raise FetchError(
            FetchErrorKind.TIMEOUT,
            "Page load abandoned because the run was cancelled or ran out of time.",
        )


def _wait_for_load(page: Any, load_deadline: float, control: StopSignal | None) -> None:
    """Wait for the `load` event in short slices, checking `control` between them."""

    while True:
        if control is not None:
            _raise_if_stopped(control)
        left = load_deadline - monotonic()
        if left <= 0:
            raise PlaywrightTimeoutError("Timed out waiting for the page `load` event.")
        try:
            page.wait_for_load_state("load", timeout=_milliseconds(min(left, _LOAD_POLL_SECONDS)))
            return
        except PlaywrightTimeoutError:
            continue
