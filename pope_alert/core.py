from __future__ import annotations

import logging
from typing import Optional

from .classifier import DEFAULT_RULES, ClassifierRules, classify
from .dedup import DedupStore
from .exceptions import MissingCredentials, NotificationError, StorageWriteError
from .fetcher import FeedFetcher
from .models import Classification, FeedItem, NotificationRequest, RunMode, RunResult, RunStatus
from .normalizer import normalize
from .notifier import Notifier


class PopeWatcher:
    """
    Run-once pipeline: fetch → normalize → classify → dedupe → notify → persist.

    Fetch and feed-structure errors propagate to the caller and leave the
    dedup store untouched. Notification and storage failures are logged,
    recorded on the RunResult and do not stop the run.

    Test mode differs only in collaborators (a synthetic fetcher) and in two
    rules: the duplicate gate is not applied and nothing is persisted.
    """

    def __init__(
        self,
        *,
        fetcher: FeedFetcher,
        store: DedupStore,
        notifier: Notifier,
        mode: RunMode = RunMode.REAL,
        rules: ClassifierRules = DEFAULT_RULES,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.fetcher = fetcher
        self.store = store
        self.notifier = notifier
        self.mode = mode
        self.rules = rules
        self.logger = logger or logging.getLogger(__name__)

    @property
    def test_mode(self) -> bool:
        return self.mode is RunMode.TEST

    def run(self) -> RunResult:
        if self.test_mode:
            self.logger.info("Running in TEST MODE")

        document = self.fetcher.fetch()
        item = normalize(document)
        cls = classify(item.title, item.summary, self.rules)
        result = RunResult(status=RunStatus.LOGGED_ONLY, item=item, classification=cls)

        if not self.test_mode and item.id == self.store.read_last_id():
            self.logger.info("Skipping duplicate: %s", item.title)
            result.status = RunStatus.SKIPPED_DUPLICATE
            return result

        if cls is Classification.ANNOUNCEMENT:
            self.logger.info("NEW POPE ELECTED\n%s\n%s", item.title, item.link)
            result.status = RunStatus.NOTIFIED
            self._notify(item, result)
        else:
            self.logger.info("[%s] %s", cls.value.upper(), item.title)

        if not self.test_mode:
            self._persist(item.id, result)
        return result

    def _notify(self, item: FeedItem, result: RunResult) -> None:
        try:
            self.notifier.notify(NotificationRequest.from_item(item, self.mode))
        except MissingCredentials as e:
            self.logger.error("%s Skipping notification.", e)
            result.warnings.append(str(e))
        except NotificationError as e:
            self.logger.error("Notification failed: %s", e)
            result.warnings.append(str(e))
        else:
            result.notified = True

    def _persist(self, item_id: str, result: RunResult) -> None:
        try:
            self.store.write_last_id(item_id)
        except StorageWriteError as e:
            self.logger.error("%s; the same entry may be processed again next run.", e)
            result.warnings.append(str(e))
        else:
            result.persisted = True
