from __future__ import annotations

"""
Configuration Validation Service.

Ensures that configuration dictionaries coming from disk or from the command
line conform to the expected schema. Handles type coercion and default value
injection so the scanner and layout engine always receive sane parameters.
"""

import logging
from typing import Any, Dict, List, Tuple

from skimap.domain.config import get_default_config
from skimap.infra.logging.config import _LEVEL_MAP

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def validate_config(
        config: Any,
        *,
        strict: bool = False,
) -> Tuple[Dict[str, Any], List[str]]:
    """
    Validate and normalize the provided configuration dictionary.

    Args:
        config: Raw configuration data (usually a dictionary).
        strict: If True, raise on invalid values instead of coercing.

    Returns:
        Tuple[Dict[str, Any], List[str]]: Normalized configuration and warnings.

    Raises:
        TypeError: In strict mode, when a field has the wrong type.
        ValueError: In strict mode, when a field is out of range.
    """
    warnings: List[str] = []
    defaults = get_default_config()

    if not isinstance(config, dict):
        msg = f"Invalid config type: expected dict, received {type(config).__name__}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Using defaults.")
        logger.warning(msg)
        return defaults, warnings

    merged: Dict[str, Any] = dict(defaults)
    merged.update(config)

    positive_int_fields = [
        "viewport_width", "viewport_height", "max_depth",
        "progress_interval", "top_entries",
    ]
    bool_fields = ["use_cache"]

    for field in positive_int_fields:
        merged[field] = _as_positive_int(
            merged.get(field), defaults[field], field, warnings, strict
        )

    for field in bool_fields:
        merged[field] = _as_bool(
            merged.get(field), defaults[field], field, warnings, strict
        )

    merged["log_level"] = _as_level(
        merged.get("log_level"), defaults["log_level"], warnings, strict
    )

    return merged, warnings


# -----------------------------------------------------------------------------
# PRIVATE HELPERS: TYPE COERCION
# -----------------------------------------------------------------------------

def _as_positive_int(
        value: Any, fallback: int, field: str, warnings: List[str], strict: bool
) -> int:
    """Coerce numbers and numeric strings into a positive integer."""
    if value is None:
        return fallback

    parsed: Any = value
    if isinstance(value, str) and not strict:
        try:
            parsed = int(value.strip())
            warnings.append(f"Field '{field}' converted from '{value}' to {parsed}.")
        except ValueError:
            parsed = value

    if isinstance(parsed, bool) or not isinstance(parsed, int):
        msg = f"Invalid field '{field}': expected int, received {type(value).__name__}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Using fallback.")
        return fallback

    if parsed <= 0:
        msg = f"Invalid field '{field}': must be positive, received {parsed}."
        if strict:
            raise ValueError(msg)
        warnings.append(f"{msg} Using fallback.")
        return fallback

    return parsed


def _as_bool(value: Any, fallback: bool, field: str, warnings: List[str], strict: bool) -> bool:
    """Coerce various input types into native booleans."""
    if isinstance(value, bool):
        return value
    if value is None:
        return fallback

    if not strict:
        if isinstance(value, (int, float)) and value in (0, 1):
            warnings.append(f"Field '{field}' converted from number {value} to bool.")
            return bool(value)
        if isinstance(value, str):
            s = value.strip().lower()
            if s in ("true", "1", "yes", "y", "on"):
                warnings.append(f"Field '{field}' converted from '{value}' to True.")
                return True
            if s in ("false", "0", "no", "n", "off"):
                warnings.append(f"Field '{field}' converted from '{value}' to False.")
                return False

    msg = f"Invalid field '{field}': expected bool, received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_level(value: Any, fallback: str, warnings: List[str], strict: bool) -> str:
    """Normalize a logging level name."""
    if value is None:
        return fallback
    if isinstance(value, str) and value.strip().upper() in _LEVEL_MAP:
        return value.strip().upper()

    msg = f"Invalid field 'log_level': unknown level {value!r}."
    if strict:
        raise ValueError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback
