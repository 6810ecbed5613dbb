"""Browser-driven page fetching for the pipeline's first stage."""

from .fetcher import PageFetcher, PlaywrightPageFetcher, validate_page_url

__all__ = ["PageFetcher", "PlaywrightPageFetcher", "validate_page_url"]
