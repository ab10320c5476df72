"""
pope_alert

Watches a news RSS feed and sends an urgent push notification when the newest
entry announces the election of a new pope.

Core ideas:
- Input: one RSS/Atom feed URL (Vatican News by default)
- Process: fetch → normalize newest entry → classify → dedupe against last run → notify → persist id
- Output: a Pushover emergency alert on a true announcement, nothing otherwise

Example
-------
from pope_alert import PopeWatcher, classify
from pope_alert.dedup import MemoryDedupStore
from pope_alert.fetcher import SyntheticFeedFetcher
from pope_alert.notifier import RecordingNotifier

classify("Habemus Papam: new pope elected", "")  # Classification.ANNOUNCEMENT

watcher = PopeWatcher(
    fetcher=SyntheticFeedFetcher(),
    store=MemoryDedupStore(),
    notifier=RecordingNotifier(),
)
result = watcher.run()
print(result.status, result.classification)
"""
from .models import Classification, FeedItem, NotificationRequest, RunMode, RunResult, RunStatus
from .classifier import ClassifierRules, DEFAULT_RULES, classify
from .normalizer import normalize
from .core import PopeWatcher

__all__ = [
    "Classification",
    "ClassifierRules",
    "DEFAULT_RULES",
    "FeedItem",
    "NotificationRequest",
    "PopeWatcher",
    "RunMode",
    "RunResult",
    "RunStatus",
    "classify",
    "normalize",
]
