from __future__ import annotations

"""
Unit tests for the Configuration Validator.

Verifies:
1. Default injection for missing keys.
2. Lenient coercion of numeric strings and boolean keywords.
3. Fallbacks for non-positive or malformed values.
4. Strict mode raising TypeError/ValueError.
"""

import pytest

from skimap.core.services.validator import validate_config
from skimap.domain.config import get_default_config


def test_empty_config_yields_defaults() -> None:
    clean, warnings = validate_config({})
    assert clean == get_default_config()
    assert warnings == []


def test_non_dict_input_falls_back() -> None:
    clean, warnings = validate_config(["not", "a", "dict"])
    assert clean == get_default_config()
    assert len(warnings) == 1
    assert "expected dict" in warnings[0]


def test_non_dict_input_strict_raises() -> None:
    with pytest.raises(TypeError):
        validate_config("config", strict=True)


def test_numeric_strings_are_converted() -> None:
    clean, warnings = validate_config({"viewport_width": " 640 ", "max_depth": "2"})
    assert clean["viewport_width"] == 640
    assert clean["max_depth"] == 2
    assert len(warnings) == 2


@pytest.mark.parametrize("bad", [0, -3, "abc", 1.5, True, [4]])
def test_invalid_ints_use_fallback(bad) -> None:
    clean, warnings = validate_config({"top_entries": bad})
    assert clean["top_entries"] == get_default_config()["top_entries"]
    assert warnings


@pytest.mark.parametrize(
    "raw, expected",
    [("yes", True), ("OFF", False), ("1", True), (0, False), (1, True), (False, False)],
)
def test_bool_keywords(raw, expected) -> None:
    clean, _ = validate_config({"use_cache": raw})
    assert clean["use_cache"] is expected


def test_unknown_bool_falls_back() -> None:
    clean, warnings = validate_config({"use_cache": "maybe"})
    assert clean["use_cache"] is True
    assert "use_cache" in warnings[0]


def test_log_level_is_normalized() -> None:
    clean, warnings = validate_config({"log_level": " debug "})
    assert clean["log_level"] == "DEBUG"
    assert warnings == []

    clean, warnings = validate_config({"log_level": "LOUD"})
    assert clean["log_level"] == "INFO"
    assert warnings


def test_unknown_keys_are_preserved() -> None:
    clean, _ = validate_config({"future_option": 42})
    assert clean["future_option"] == 42


def test_strict_mode_raises() -> None:
    with pytest.raises(TypeError):
        validate_config({"max_depth": "deep"}, strict=True)
    with pytest.raises(ValueError):
        validate_config({"viewport_height": 0}, strict=True)
    with pytest.raises(TypeError):
        validate_config({"use_cache": "yes"}, strict=True)
    with pytest.raises(ValueError):
        validate_config({"log_level": "LOUD"}, strict=True)
