"""Exceptions raised by the scraper, tagged with the pipeline stage that failed."""

from typing import Optional


class ScraperError(Exception):
    """Base class. `stage` names the step of the run that failed."""

    stage = "scrape"

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        return f"{self.stage} failed: {self.message}"


class SetupError(ScraperError):
    """Language or configuration could not be resolved."""

    stage = "setup"


class FetchError(ScraperError):
    """A single page could not be fetched (network, HTTP status or domain guard)."""

    stage = "fetch"

    def __init__(self, url: str, message: str, cause: Optional[BaseException] = None):
        super().__init__(f"{url}: {message}", cause)
        self.url = url
        self.reason = message


class IndexFetchError(ScraperError):
    stage = "index fetch"


class EndpointFetchError(ScraperError):
    stage = "endpoint fetch"

    def __init__(self, url: str, message: str, cause: Optional[BaseException] = None):
        super().__init__(f"{url}: {message}", cause)
        self.url = url


class OutputWriteError(ScraperError):
    stage = "write"
