from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Protocol, Union

import httpx

from .exceptions import FetchError
from .parser import parse_feed


logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "pope-alert/0.1 (RSS reader)"


class FeedFetcher(Protocol):
    def fetch(self) -> Dict[str, Any]:  # pragma: no cover - interface
        """Return the parsed feed document for this run."""
        ...


def fetch_raw(
    url: str,
    *,
    timeout_sec: float = 20.0,
    user_agent: str = DEFAULT_USER_AGENT,
    client: Optional[httpx.Client] = None,
) -> bytes:
    """
    GET the feed and return its body.

    Raises FetchError on transport errors and non-2xx responses.
    """
    headers = {"User-Agent": user_agent}
    try:
        if client is not None:
            resp = client.get(url, headers=headers, timeout=timeout_sec, follow_redirects=True)
        else:
            with httpx.Client(timeout=timeout_sec, headers=headers, follow_redirects=True) as c:
                resp = c.get(url)
    except httpx.HTTPError as e:
        raise FetchError(f"Failed to fetch feed: {url} ({e})") from e

    if not resp.is_success:
        raise FetchError(f"Failed to fetch feed: {url} (HTTP {resp.status_code})")
    return resp.content


class HttpFeedFetcher:
    """Live feed: httpx GET followed by feedparser."""

    def __init__(
        self,
        url: str,
        *,
        timeout_sec: float = 20.0,
        user_agent: str = DEFAULT_USER_AGENT,
        dump_path: Optional[Union[str, Path]] = None,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self.url = url
        self.timeout_sec = timeout_sec
        self.user_agent = user_agent
        self.dump_path = Path(dump_path) if dump_path else None
        self._client = client

    def fetch(self) -> Dict[str, Any]:
        raw = fetch_raw(self.url, timeout_sec=self.timeout_sec, user_agent=self.user_agent, client=self._client)
        logger.debug("Fetched %d bytes from %s", len(raw), self.url)
        if self.dump_path:
            self._dump(raw)
        return parse_feed(raw)

    def _dump(self, raw: bytes) -> None:
        # Diagnostic copy only; losing it must not fail the run
        try:
            self.dump_path.write_bytes(raw)
        except OSError as e:
            logger.warning("Could not write feed dump %s: %s", self.dump_path, e)


class SyntheticFeedFetcher:
    """
    Test-mode feed: a fixed announcement article, no network access.

    The document has the same shape as feedparser output so the normalizer
    and classifier run exactly as in live mode.
    """

    def __init__(
        self,
        *,
        guid: str = "test-guid",
        title: str = "Habemus Papam: Cardinal Doe elected Pope Innocent XIV",
        summary: str = "Cardinals have elected a new pope during the fifth ballot.",
        link: str = "https://example.com/fake-pope-news",
    ) -> None:
        self.guid = guid
        self.title = title
        self.summary = summary
        self.link = link

    def fetch(self) -> Dict[str, Any]:
        return {
            "entries": [
                {
                    "id": self.guid,
                    "title": self.title,
                    "summary": self.summary,
                    "link": self.link,
                    "published": datetime.now(timezone.utc).isoformat(),
                }
            ]
        }
