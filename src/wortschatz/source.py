"""HTTP access to the DWDS dictionary."""

from __future__ import annotations

import logging
from typing import Protocol
from urllib.parse import quote

import requests

from wortschatz.config import (
    DEFAULT_BASE_URL,
    DEFAULT_LOOKUP_TIMEOUT,
    DEFAULT_USER_AGENT,
    Settings,
)
from wortschatz.exceptions import ExtractionUnavailableError
from wortschatz.extractor import extract
from wortschatz.models import LexicalRecord
from wortschatz.normalize import clean_word

logger = logging.getLogger(__name__)


class DictionarySource(Protocol):
    """Anything that can return the raw page for a word."""

    def lookup(self, word: str) -> str: ...


def lookup_url(word: str, base_url: str = DEFAULT_BASE_URL) -> str:
    """URL of the dictionary page for ``word``."""
    encoded = quote(word, safe="")
    return f"{base_url.rstrip('/')}/wb/{encoded}?o={encoded}"


def reference_url(word: str, base_url: str = DEFAULT_BASE_URL) -> str:
    """Public link to ``word`` used for related-word edges."""
    return f"{base_url.rstrip('/')}/wb/" + quote(word, safe="")


class DwdsSource:
    """Fetch DWDS pages over HTTP with a bounded timeout.

    Transport failures, timeouts and server errors are raised as
    :class:`ExtractionUnavailableError`.  A 404 response is returned like
    any other page so the extractor can report the word as not found.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        *,
        timeout: float = DEFAULT_LOOKUP_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update({"User-Agent": user_agent})

    @classmethod
    def from_settings(
        cls, settings: Settings, *, session: requests.Session | None = None
    ) -> DwdsSource:
        return cls(
            settings.base_url,
            timeout=settings.lookup_timeout,
            user_agent=settings.user_agent,
            session=session,
        )

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self._session.close()

    def __enter__(self) -> DwdsSource:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def lookup(self, word: str) -> str:
        url = lookup_url(word, self.base_url)
        logger.debug("Fetching %s", url)
        try:
            response = self._session.get(url, timeout=self.timeout)
        except requests.Timeout as e:
            logger.warning("Timed out after %ss fetching %r", self.timeout, word)
            raise ExtractionUnavailableError(
                f"Timed out fetching {word!r} from {self.base_url}"
            ) from e
        except requests.RequestException as e:
            logger.warning("Could not fetch %r: %s", word, e)
            raise ExtractionUnavailableError(
                f"Could not reach {self.base_url}: {e}"
            ) from e

        if response.status_code == 404:
            return response.text
        try:
            response.raise_for_status()
        except requests.HTTPError as e:
            logger.warning(
                "Dictionary returned HTTP %s for %r", response.status_code, word
            )
            raise ExtractionUnavailableError(
                f"Dictionary returned HTTP {response.status_code} for {word!r}"
            ) from e
        return response.text


def fetch_record(
    source: DictionarySource, word: str, *, base_url: str = DEFAULT_BASE_URL
) -> LexicalRecord:
    """Look ``word`` up and extract its record, without touching any store."""
    word = clean_word(word)
    return extract(source.lookup(word), word, base_url=base_url)
