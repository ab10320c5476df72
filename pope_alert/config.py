"""
Runtime settings read from the environment (and a .env file via python-dotenv).

Every setting has a default except the Pushover credentials; a run without
them still fetches and classifies, it just cannot send the alert.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

from .classifier import PROFILES, ClassifierRules, load_rules
from .exceptions import ConfigError


DEFAULT_RSS_URL = "https://www.vaticannews.va/en.rss.xml"

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class Settings:
    rss_url: str = DEFAULT_RSS_URL
    memory_file: str = "last_guid.txt"
    error_file: str = "rss_error.txt"
    dump_file: Optional[str] = "rss_dump.xml"
    test_mode: bool = False
    pushover_user_key: Optional[str] = None
    pushover_app_token: Optional[str] = None
    pushover_priority: int = 2
    pushover_retry: int = 60
    pushover_expire: int = 3600
    http_timeout: float = 20.0
    rules_file: Optional[str] = None
    classifier_profile: str = "default"
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, *, dotenv: bool = True) -> "Settings":
        if environ is None:
            if dotenv:
                load_dotenv()
            environ = os.environ

        def get(name: str) -> Optional[str]:
            value = environ.get(name)
            if value is None:
                return None
            value = value.strip()
            return value or None

        defaults = cls()
        dump = environ.get("DUMP_FILE")
        return cls(
            rss_url=get("RSS_URL") or defaults.rss_url,
            memory_file=get("MEMORY_FILE") or defaults.memory_file,
            error_file=get("ERROR_FILE") or defaults.error_file,
            # An explicitly empty DUMP_FILE turns the dump off
            dump_file=defaults.dump_file if dump is None else (dump.strip() or None),
            test_mode=(get("TEST_MODE") or "").lower() in _TRUTHY,
            pushover_user_key=get("PUSHOVER_USER_KEY"),
            pushover_app_token=get("PUSHOVER_APP_TOKEN"),
            pushover_priority=_int("PUSHOVER_PRIORITY", get("PUSHOVER_PRIORITY"), defaults.pushover_priority),
            pushover_retry=_int("PUSHOVER_RETRY", get("PUSHOVER_RETRY"), defaults.pushover_retry),
            pushover_expire=_int("PUSHOVER_EXPIRE", get("PUSHOVER_EXPIRE"), defaults.pushover_expire),
            http_timeout=_float("HTTP_TIMEOUT", get("HTTP_TIMEOUT"), defaults.http_timeout),
            rules_file=get("CLASSIFIER_RULES"),
            classifier_profile=(get("CLASSIFIER_PROFILE") or defaults.classifier_profile).lower(),
            log_level=(get("LOG_LEVEL") or defaults.log_level).upper(),
            log_file=get("LOG_FILE"),
        )

    def classifier_rules(self) -> ClassifierRules:
        """Rules for the configured profile, overlaid with the rules file if one is set."""
        try:
            base = PROFILES[self.classifier_profile]
        except KeyError:
            raise ConfigError(
                f"Unknown classifier profile {self.classifier_profile!r} (expected one of {sorted(PROFILES)})"
            ) from None
        if self.rules_file:
            return load_rules(self.rules_file, base=base)
        return base


def _int(name: str, value: Optional[str], default: int) -> int:
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {value!r}") from None


def _float(name: str, value: Optional[str], default: float) -> float:
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {value!r}") from None
