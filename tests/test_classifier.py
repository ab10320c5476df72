"""Tests for the tiered pope-election classifier."""

import json

import pytest

from pope_alert.classifier import (
    DEFAULT_RULES,
    LOOSE_RULES,
    ClassifierRules,
    classify,
    load_rules,
    score_text,
)
from pope_alert.exceptions import ConfigError
from pope_alert.models import Classification


def test_exact_phrase_is_announcement():
    assert classify("Habemus Papam: new pope elected", "") is Classification.ANNOUNCEMENT


def test_matching_is_case_insensitive():
    assert classify("WE HAVE A POPE", "") is Classification.ANNOUNCEMENT


def test_phrase_embedded_in_larger_word_still_counts():
    assert classify("xhabemus papamx", "") is Classification.ANNOUNCEMENT


def test_phrase_in_summary_counts():
    assert classify("Breaking", "The cardinals elect new pope after four ballots") is Classification.ANNOUNCEMENT


@pytest.mark.parametrize(
    "title",
    [
        "The history of the conclave: habemus papam",
        "Habemus papam explained",
        "We explain how the new pope elected today was chosen",
        "What is a conclave? New pope elected in 2013",
        "A guide to the new pontiff",
        "Behind the scenes as white smoke signals a new pope",
    ],
)
def test_explanatory_override_beats_announcement(title):
    assert classify(title, "") is Classification.GENERIC


def test_explanatory_patterns_are_whole_word():
    # "prehistory" must not trigger the "history" override
    assert classify("Prehistory exhibit reopens as habemus papam rings out", "") is Classification.ANNOUNCEMENT


def test_black_smoke_is_irrelevant_even_with_white_smoke():
    text = "Black smoke again; white smoke expected as the conclave continues"
    assert classify(text, "Pope watchers wait in Vatican City") is Classification.IRRELEVANT


def test_black_smoke_beats_announcement_phrase():
    assert classify("Black smoke: no new pope elected yet", "") is Classification.IRRELEVANT


def test_white_smoke_without_context_falls_to_score():
    result = classify("White smoke rises over the Vatican", "crowds gather to watch the chimney")
    assert result is Classification.GENERIC


def test_white_smoke_with_context_is_announcement():
    assert classify("White smoke signals new pope chosen", "") is Classification.ANNOUNCEMENT


def test_white_smoke_with_election_term_in_summary():
    assert classify("White smoke", "The conclave has ended") is Classification.ANNOUNCEMENT


def test_score_reaching_announcement_threshold():
    title = "Cardinals vote in Sistine Chapel, Vatican City, papal conclave day two"
    assert score_text(title.lower()) == 5
    assert classify(title, "") is Classification.ANNOUNCEMENT


def test_generic_signals_only():
    assert classify("Cardinals vote in the Sistine Chapel", "") is Classification.GENERIC


def test_noise_pulls_score_down():
    assert classify("Conclave hoax spreads online", "") is Classification.IRRELEVANT


def test_unrelated_text_is_irrelevant():
    assert classify("Wildfire season starts early in California", "") is Classification.IRRELEVANT


def test_empty_inputs():
    assert classify("", "") is Classification.IRRELEVANT
    assert classify("Habemus papam", None) is Classification.ANNOUNCEMENT


def test_loose_profile_penalises_extra_noise():
    title = "Symbolic conclave staged in the Sistine Chapel"
    assert classify(title, "", DEFAULT_RULES) is Classification.GENERIC
    assert classify(title, "", LOOSE_RULES) is Classification.IRRELEVANT


def test_rules_from_mapping_overrides_and_keeps_defaults():
    rules = ClassifierRules.from_mapping(
        {"announcement": ["Fumata Bianca"], "thresholds": {"generic": 2}}
    )
    assert rules.announcement_phrases == ("fumata bianca",)
    assert rules.generic_threshold == 2
    assert rules.negative_phrase == "black smoke"
    assert classify("Fumata bianca!", "", rules) is Classification.ANNOUNCEMENT
    # one generic hit is no longer enough
    assert classify("Sistine Chapel tours resume", "", rules) is Classification.IRRELEVANT


def test_rules_from_mapping_rejects_bad_values():
    with pytest.raises(ConfigError):
        ClassifierRules.from_mapping({"announcement": "habemus papam"})
    with pytest.raises(ConfigError):
        ClassifierRules.from_mapping({"weights": {"noise": "3"}})
    with pytest.raises(ConfigError):
        ClassifierRules.from_mapping({"explanatory": ["(unclosed"]})


def test_load_rules_from_json(tmp_path):
    path = tmp_path / "rules.json"
    path.write_text(json.dumps({"noise": ["satire"], "negative": "Fumata Nera"}), encoding="utf-8")
    rules = load_rules(path)
    assert rules.noise_phrases == ("satire",)
    assert classify("Fumata nera: habemus papam?", "", rules) is Classification.IRRELEVANT


def test_load_rules_missing_or_invalid(tmp_path):
    with pytest.raises(ConfigError):
        load_rules(tmp_path / "nope.json")
    bad = tmp_path / "bad.json"
    bad.write_text("{not json", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_rules(bad)


@pytest.mark.parametrize("phrase", ["", "   "])
def test_rules_from_mapping_rejects_blank_phrases(phrase):
    with pytest.raises(ConfigError):
        ClassifierRules.from_mapping({"announcement": ["habemus papam", phrase]})
