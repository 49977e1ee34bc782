"""RuleConfig — tolerant read access to an assignment rule's config map.

Administrators edit the config as free-form JSON, so every accessor falls
back to its default when a key is absent or holds a value of the wrong shape.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

_TRUE = {"true", "1", "yes", "on"}
_FALSE = {"false", "0", "no", "off"}


def parse_config(raw: Any) -> dict[str, Any]:
    """Turn a stored config (JSON text, mapping or None) into a flat dict."""
    if raw is None or raw == "":
        return {}
    if isinstance(raw, Mapping):
        return dict(raw)
    if isinstance(raw, str):
        try:
            parsed = json.loads(raw)
        except ValueError:
            logger.warning("Ignoring malformed rule config: %r", raw)
            return {}
        if isinstance(parsed, Mapping):
            return dict(parsed)
    logger.warning("Ignoring non-object rule config: %r", raw)
    return {}


@dataclass(frozen=True)
class RuleConfig:
    values: Mapping[str, Any] = field(default_factory=dict)

    def get_int(self, key: str, default: int | None = None) -> int | None:
        value = self.values.get(key)
        if value is None or isinstance(value, bool):
            return default
        try:
            return int(value)
        except (TypeError, ValueError):
            logger.warning("Rule config %s=%r is not an integer, using %s", key, value, default)
            return default

    def get_bool(self, key: str, default: bool) -> bool:
        value = self.values.get(key)
        if isinstance(value, bool):
            return value
        if isinstance(value, int):
            return value != 0
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in _TRUE:
                return True
            if lowered in _FALSE:
                return False
        if value is not None:
            logger.warning("Rule config %s=%r is not a boolean, using %s", key, value, default)
        return default

    def get_str(self, key: str) -> str | None:
        value = self.values.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
        return None

    def get_list(self, key: str) -> list[Any]:
        value = self.values.get(key)
        if value is None:
            return []
        if isinstance(value, list):
            return value
        logger.warning("Rule config %s=%r is not a list, ignoring", key, value)
        return []
