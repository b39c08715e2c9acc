"""
HTML Fetch Module

Shared HTTP plumbing for every scraper in the pipeline. Each pipeline run
opens its own requests.Session (create_session) so connections to
city-data.com and data.bls.gov are pooled within the run and never shared
between concurrent runs. Calls made without a session fall back to a
lazily created module session.

Every scrape operation in the ETL package returns a ScrapeResult instead of a
bare value or None. The pipeline treats all failures the same way (skip the
unit of work), but the status keeps "the page is not there" apart from "the
network call failed" in the logs.

No retries are attempted.

Author: Market Research Project
License: AGPL-3.0
"""

import enum
import logging
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

import requests

from app.core.config import REQUEST_TIMEOUT, SCRAPER_USER_AGENT

logger = logging.getLogger(__name__)

T = TypeVar("T")

## Fallback session for calls made outside a pipeline run
_session = None


def create_session() -> requests.Session:
    """New HTTP session carrying the scraper User-Agent."""
    session = requests.Session()
    session.headers.update({"User-Agent": SCRAPER_USER_AGENT})
    return session


def get_session() -> requests.Session:
    """Get or create the fallback HTTP session."""
    global _session
    if _session is None:
        _session = create_session()
    return _session


class ScrapeStatus(enum.Enum):
    SUCCESS = "success"
    NOT_FOUND = "not_found"
    TRANSPORT_ERROR = "transport_error"


@dataclass
class ScrapeResult(Generic[T]):
    """
    Outcome of one scrape call.

    Attributes:
        status (ScrapeStatus): What happened
        value: Parsed payload, only set on success
        detail (str): Human readable reason for a failure
        status_code (int): HTTP status when a response was received
    """
    status: ScrapeStatus
    value: Optional[T] = None
    detail: str = ""
    status_code: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.status is ScrapeStatus.SUCCESS

    @classmethod
    def success(cls, value: T) -> "ScrapeResult[T]":
        return cls(ScrapeStatus.SUCCESS, value=value)

    @classmethod
    def not_found(cls, detail: str, status_code: Optional[int] = None) -> "ScrapeResult[T]":
        return cls(ScrapeStatus.NOT_FOUND, detail=detail, status_code=status_code)

    @classmethod
    def transport_error(cls, detail: str) -> "ScrapeResult[T]":
        return cls(ScrapeStatus.TRANSPORT_ERROR, detail=detail)

    def failed_as(self) -> "ScrapeResult":
        """Re-type a failure so it can be returned from a different scraper."""
        return ScrapeResult(self.status, detail=self.detail, status_code=self.status_code)


def fetch_html(url: str, session: Optional[requests.Session] = None) -> ScrapeResult[str]:
    """
    Fetch a page and return its markup.

    Args:
        url (str): Page to fetch
        session (requests.Session): Optional session, defaults to the fallback one

    Returns:
        ScrapeResult[str]: Markup on a 2xx response, NOT_FOUND for any other
        status, TRANSPORT_ERROR when the request itself failed
    """
    http = session or get_session()
    try:
        response = http.get(url, timeout=REQUEST_TIMEOUT)
    except requests.exceptions.RequestException as e:
        logger.error(f"Error fetching {url}: {e}")
        return ScrapeResult.transport_error(str(e))

    if not 200 <= response.status_code < 300:
        logger.warning(f"Failed to retrieve data from {url}: {response.status_code}")
        return ScrapeResult.not_found(
            f"HTTP {response.status_code}", status_code=response.status_code
        )

    return ScrapeResult.success(response.text)
