from __future__ import annotations

from typing import Any, List, Mapping, Optional

from .exceptions import EmptyFeed, MalformedFeed, MissingIdentifier
from .models import FeedItem
from .parser import first_field, link_of, text_of


_ITEM_KEYS = ("entries", "items", "item", "entry")
_CHANNEL_KEYS = ("channel", "feed")
_ROOT_KEYS = ("rss", "feed", "rdf:RDF", "RDF")


def _unwrap(node: Any) -> Any:
    # xml2js wraps every child node in a list
    if isinstance(node, (list, tuple)) and len(node) == 1 and isinstance(node[0], Mapping):
        return node[0]
    return node


def _items_in(node: Any) -> Optional[List[Any]]:
    """Return the item collection held directly by `node` or its channel, if any."""
    node = _unwrap(node)
    if not isinstance(node, Mapping):
        return None
    for k in _ITEM_KEYS:
        if k in node:
            items = node[k]
            if items is None or items == "":
                return []
            if isinstance(items, Mapping):
                return [items]
            if isinstance(items, (list, tuple)):
                return list(items)
    for k in _CHANNEL_KEYS:
        if k in node:
            found = _items_in(node[k])
            if found is not None:
                return found
            # A channel with no item children is an empty feed, not a malformed one.
            if isinstance(_unwrap(node[k]), Mapping):
                return []
    return None


def find_items(document: Any) -> List[Any]:
    """
    Locate the item collection of a parsed feed document.

    Looks at the document itself, then under the usual root keys (rss, feed,
    rdf:RDF), then one level under any other key to tolerate namespace
    prefixes or wrapper objects.
    Raises MalformedFeed when nothing resembling an item collection exists.
    """
    document = _unwrap(document)
    if not isinstance(document, Mapping):
        raise MalformedFeed(f"Parsed feed is not a mapping: {type(document).__name__}")

    found = _items_in(document)
    if found is not None:
        return found

    for k in _ROOT_KEYS:
        if k in document:
            found = _items_in(document[k])
            if found is not None:
                return found

    for k, v in document.items():
        if k in _ROOT_KEYS:
            continue
        found = _items_in(v)
        if found is None:
            inner = _unwrap(v)
            if isinstance(inner, Mapping):
                for rk in _ROOT_KEYS:
                    if rk in inner:
                        found = _items_in(inner[rk])
                        if found is not None:
                            break
        if found is not None:
            return found

    raise MalformedFeed("No channel/item collection found in feed")


def to_feed_item(entry: Any) -> FeedItem:
    """
    Convert one raw feed entry into a FeedItem.

    id prefers an explicit identifier (id, guid) and falls back to the link.
    """
    entry = _unwrap(entry)
    if not isinstance(entry, Mapping):
        raise MalformedFeed(f"Feed item is not a mapping: {type(entry).__name__}")

    title = text_of(entry.get("title"))
    summary = first_field(entry, ("summary", "description", "content")) or ""
    link = link_of(entry.get("link")) or text_of(entry.get("feedburner_origlink"))
    published = first_field(entry, ("published", "pubDate", "updated"))

    item_id = first_field(entry, ("id", "guid")) or link
    if not item_id:
        raise MissingIdentifier("Newest feed item has no guid/id or link")

    return FeedItem(id=item_id, title=title, summary=summary, link=link, published=published)


def normalize(document: Any) -> FeedItem:
    """Return the newest (first) entry of a parsed feed as a FeedItem."""
    items = find_items(document)
    if not items:
        raise EmptyFeed("No items found in RSS feed")
    return to_feed_item(items[0])
