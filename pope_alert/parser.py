from __future__ import annotations

import io
import logging
from typing import Any, Dict, Mapping, Optional, Sequence

import feedparser

from .exceptions import MalformedFeed


logger = logging.getLogger(__name__)

# Keys under which XML-to-dict converters keep the text content of a node.
_TEXT_KEYS = ("_", "#text", "value", "$t", "text")


def parse_feed(raw: bytes) -> Dict[str, Any]:
    """
    Parse raw RSS/Atom bytes into a nested dict using feedparser.

    feedparser is lenient: a feed with recoverable problems still yields
    entries and sets `bozo`. We accept that (with a warning) and only fail
    when nothing usable came out.
    """
    feed = feedparser.parse(io.BytesIO(raw))
    entries = feed.get("entries")

    if feed.get("bozo"):
        exc = feed.get("bozo_exception")
        if not entries:
            msg = "Invalid RSS/Atom feed"
            if exc:
                msg += f" ({exc})"
            raise MalformedFeed(msg)
        logger.warning("Feed parsed with recoverable problems: %s", exc)

    return feed


def text_of(value: Any) -> str:
    """
    Reduce a parsed field to a stripped string.

    Handles plain strings, single-element lists (xml2js style) and text nodes
    such as {"_": "..."} or {"#text": "..."}. Anything else yields "".
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (list, tuple)):
        return text_of(value[0]) if value else ""
    if isinstance(value, Mapping):
        for k in _TEXT_KEYS:
            if k in value:
                return text_of(value[k])
        return ""
    if isinstance(value, (int, float)):
        return str(value)
    return ""


def link_of(value: Any) -> str:
    """Like `text_of`, but also understands Atom <link href="..."/> nodes."""
    if isinstance(value, (list, tuple)):
        for v in value:
            link = link_of(v)
            if link:
                return link
        return ""
    if isinstance(value, Mapping):
        attrs = value.get("$") if isinstance(value.get("$"), Mapping) else value
        href = attrs.get("href")
        if isinstance(href, str) and href.strip():
            return href.strip()
    return text_of(value)


def first_field(entry: Mapping[str, Any], keys: Sequence[str]) -> Optional[str]:
    """Return the first non-empty text among `keys`, or None."""
    for k in keys:
        v = text_of(entry.get(k))
        if v:
            return v
    return None
