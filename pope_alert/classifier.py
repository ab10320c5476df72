from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional, Sequence, Tuple, Union

from .exceptions import ConfigError
from .models import Classification


logger = logging.getLogger(__name__)


# Retrospectives and explainers: always generic, whatever else they mention.
DEFAULT_EXPLANATORY_PATTERNS: Tuple[str, ...] = (
    r"\bhistory\b",
    r"\bbehind\b",
    r"\bexplain(ed)?\b",
    r"\bguide\b",
    r"\bwhat is\b",
)

DEFAULT_ANNOUNCEMENT_PHRASES: Tuple[str, ...] = (
    "habemus papam",
    "new pope elected",
    "cardinal elected pope",
    "pope francis elected",
    "we have a pope",
    "vatican announces new pope",
    "pope has been elected",
    "new pontiff",
    "bishop of rome elected",
    "cardinals elect new pope",
    "new bishop of rome",
    "new pope chosen",
    "pontiff chosen",
    "pope selected",
)

# "white smoke" only counts when one of these is also present.
DEFAULT_CONTEXT_TERMS: Tuple[str, ...] = (
    "pope",
    "conclave",
    "elect",
    "elected",
    "papal",
    "new pope",
    "pontiff",
)

DEFAULT_GENERIC_PHRASES: Tuple[str, ...] = (
    "white smoke",
    "papal conclave",
    "conclave",
    "sistine chapel",
    "vatican city",
    "cardinals vote",
    "voting underway",
    "smoke rises",
    "papal election",
    "vatican crowd",
    "pope watchers",
)

DEFAULT_NOISE_PHRASES: Tuple[str, ...] = (
    "wildfire",
    "rumor",
    "fake",
    "hoax",
)

EXTENDED_NOISE_PHRASES: Tuple[str, ...] = DEFAULT_NOISE_PHRASES + (
    "symbolic",
    "metaphor",
    "celebrity",
    "fiction",
    "speculation",
    "engine",
)


@dataclass(frozen=True)
class ClassifierRules:
    """
    Phrase tables, weights and thresholds used by `classify`.

    All phrases are matched against lower-cased text, so they must be given in
    lower case. Explanatory patterns are regular expressions (whole-word);
    everything else is a plain substring.
    """
    explanatory_patterns: Tuple[str, ...] = DEFAULT_EXPLANATORY_PATTERNS
    negative_phrase: str = "black smoke"
    announcement_phrases: Tuple[str, ...] = DEFAULT_ANNOUNCEMENT_PHRASES
    smoke_phrase: str = "white smoke"
    context_terms: Tuple[str, ...] = DEFAULT_CONTEXT_TERMS
    generic_phrases: Tuple[str, ...] = DEFAULT_GENERIC_PHRASES
    noise_phrases: Tuple[str, ...] = DEFAULT_NOISE_PHRASES
    announcement_weight: int = 3
    generic_weight: int = 1
    noise_weight: int = 3
    announcement_threshold: int = 5
    generic_threshold: int = 1
    _compiled: Tuple[re.Pattern, ...] = field(default=(), init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        try:
            compiled = tuple(re.compile(p, re.IGNORECASE) for p in self.explanatory_patterns)
        except re.error as e:
            raise ConfigError(f"Invalid explanatory pattern: {e}") from e
        object.__setattr__(self, "_compiled", compiled)

    @property
    def explanatory_regexes(self) -> Tuple[re.Pattern, ...]:
        return self._compiled

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], *, base: Optional["ClassifierRules"] = None) -> "ClassifierRules":
        """
        Build rules from a category -> phrase list mapping.

        Recognised keys: explanatory, negative, announcement, smoke, context,
        generic, noise, weights {announcement, generic, noise} and
        thresholds {announcement, generic}. Missing keys keep the values of
        `base` (DEFAULT_RULES when not given).
        """
        if not isinstance(data, Mapping):
            raise ConfigError("Classifier rules must be a mapping")
        base = base or DEFAULT_RULES
        changes: Dict[str, Any] = {}

        list_keys = {
            "explanatory": "explanatory_patterns",
            "announcement": "announcement_phrases",
            "context": "context_terms",
            "generic": "generic_phrases",
            "noise": "noise_phrases",
        }
        for key, attr in list_keys.items():
            if key in data:
                changes[attr] = _phrase_tuple(key, data[key])

        for key, attr in (("negative", "negative_phrase"), ("smoke", "smoke_phrase")):
            if key in data:
                value = data[key]
                if not isinstance(value, str) or not value.strip():
                    raise ConfigError(f"Rule '{key}' must be a non-empty string")
                changes[attr] = value.strip().lower()

        weights = data.get("weights") or {}
        for key in ("announcement", "generic", "noise"):
            if key in weights:
                changes[f"{key}_weight"] = _as_int(f"weights.{key}", weights[key])

        thresholds = data.get("thresholds") or {}
        for key in ("announcement", "generic"):
            if key in thresholds:
                changes[f"{key}_threshold"] = _as_int(f"thresholds.{key}", thresholds[key])

        return replace(base, **changes)


def _phrase_tuple(key: str, value: Any) -> Tuple[str, ...]:
    if isinstance(value, str) or not isinstance(value, Iterable):
        raise ConfigError(f"Rule '{key}' must be a list of strings")
    out = []
    for v in value:
        if not isinstance(v, str):
            raise ConfigError(f"Rule '{key}' must be a list of strings")
        # "" is a substring of everything
        if not v.strip():
            raise ConfigError(f"Rule '{key}' contains a blank phrase")
        # Regex patterns keep their case flags; plain phrases are lower-cased.
        out.append(v if key == "explanatory" else v.lower())
    return tuple(out)


def _as_int(key: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"Rule '{key}' must be an integer")
    return value


DEFAULT_RULES = ClassifierRules()
LOOSE_RULES = ClassifierRules(noise_phrases=EXTENDED_NOISE_PHRASES)

PROFILES: Dict[str, ClassifierRules] = {
    "default": DEFAULT_RULES,
    "loose": LOOSE_RULES,
}


def load_rules(path: Union[str, Path], *, base: Optional[ClassifierRules] = None) -> ClassifierRules:
    """Load classifier rules from a JSON file (see `ClassifierRules.from_mapping`)."""
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise ConfigError(f"Cannot load classifier rules from {path}: {e}") from e
    return ClassifierRules.from_mapping(data, base=base)


def _count_hits(text: str, phrases: Sequence[str]) -> int:
    return sum(1 for p in phrases if p in text)


def score_text(text: str, rules: ClassifierRules = DEFAULT_RULES) -> int:
    """Weighted fallback score for already lower-cased text."""
    return (
        rules.announcement_weight * _count_hits(text, rules.announcement_phrases)
        + rules.generic_weight * _count_hits(text, rules.generic_phrases)
        - rules.noise_weight * _count_hits(text, rules.noise_phrases)
    )


def classify(title: Optional[str], summary: Optional[str], rules: ClassifierRules = DEFAULT_RULES) -> Classification:
    """
    Decide whether an article announces a new pope.

    Tiers are checked in order and the first match wins:
    explanatory override -> black smoke -> exact announcement phrase ->
    white smoke with election context -> weighted score.
    """
    text = f"{title or ''} {summary or ''}".lower()

    if any(rx.search(text) for rx in rules.explanatory_regexes):
        return Classification.GENERIC

    if rules.negative_phrase in text:
        return Classification.IRRELEVANT

    if any(p in text for p in rules.announcement_phrases):
        return Classification.ANNOUNCEMENT

    if rules.smoke_phrase in text and any(t in text for t in rules.context_terms):
        return Classification.ANNOUNCEMENT

    score = score_text(text, rules)
    logger.debug("Fallback score %d for %r", score, text[:120])
    if score >= rules.announcement_threshold:
        return Classification.ANNOUNCEMENT
    if score >= rules.generic_threshold:
        return Classification.GENERIC
    return Classification.IRRELEVANT
