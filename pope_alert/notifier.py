from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Protocol

import httpx

from .exceptions import MissingCredentials, NotificationError
from .models import NotificationRequest, RunMode


logger = logging.getLogger(__name__)

PUSHOVER_URL = "https://api.pushover.net/1/messages.json"

TITLES = {
    RunMode.TEST: "*** TEST POPE ALERT ***",
    RunMode.REAL: "*** NEW POPE ELECTED ***",
}


class Notifier(Protocol):
    def notify(self, request: NotificationRequest) -> None:  # pragma: no cover - interface
        ...


class PushoverNotifier:
    """
    Sends an emergency-priority Pushover message.

    Priority 2 makes Pushover repeat the alert every `retry` seconds until it
    is acknowledged or `expire` seconds have passed; that is the only retry
    policy there is.
    """

    def __init__(
        self,
        *,
        user_key: Optional[str],
        app_token: Optional[str],
        priority: int = 2,
        retry: int = 60,
        expire: int = 3600,
        timeout_sec: float = 20.0,
        url: str = PUSHOVER_URL,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self.user_key = user_key
        self.app_token = app_token
        self.priority = priority
        self.retry = retry
        self.expire = expire
        self.timeout_sec = timeout_sec
        self.url = url
        self._client = client

    def build_payload(self, request: NotificationRequest) -> Dict[str, Any]:
        return {
            "token": self.app_token,
            "user": self.user_key,
            "title": TITLES[request.severity],
            "message": f"{request.title}\n{request.link}",
            "priority": self.priority,
            "retry": self.retry,
            "expire": self.expire,
        }

    def notify(self, request: NotificationRequest) -> None:
        if not self.user_key or not self.app_token:
            raise MissingCredentials("Pushover credentials not set.")

        payload = self.build_payload(request)
        try:
            if self._client is not None:
                resp = self._client.post(self.url, data=payload, timeout=self.timeout_sec)
            else:
                with httpx.Client(timeout=self.timeout_sec) as client:
                    resp = client.post(self.url, data=payload)
        except httpx.HTTPError as e:
            raise NotificationError(f"Pushover request failed: {e}") from e

        if resp.status_code < 200 or resp.status_code >= 300:
            raise NotificationError(f"Pushover error {resp.status_code}: {resp.text.strip()}")
        logger.info("Pushover notification sent.")


class RecordingNotifier:
    """Notifier that only remembers what it was asked to send."""

    def __init__(self) -> None:
        self.sent: List[NotificationRequest] = []

    def notify(self, request: NotificationRequest) -> None:
        self.sent.append(request)
