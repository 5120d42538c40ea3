"""Structural search for entity references inside configuration trees.

Configuration trees come from deserialised YAML/JSON, so every node is one
of the :data:`Value` variants. Identifiers appear under ``entity_id``,
``target.entity_id`` and, depending on the trigger or action type, almost
any other key, so the search always descends into every nested value.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

Value = None | bool | int | float | str | list["Value"] | dict[str, "Value"]

ENTITY_ID_KEY = "entity_id"
TARGET_KEY = "target"

# Section label -> accepted keys (current plural form first, legacy singular second).
AUTOMATION_SECTIONS: dict[str, tuple[str, str]] = {
    "trigger": ("triggers", "trigger"),
    "condition": ("conditions", "condition"),
    "action": ("actions", "action"),
}


def references(value: Value, target: str) -> bool:
    """Return ``True`` if *target* occurs anywhere in *value* as a string."""
    if isinstance(value, str):
        return value == target
    if isinstance(value, list):
        return any(references(item, target) for item in value)
    if isinstance(value, dict):
        if ENTITY_ID_KEY in value and references(value[ENTITY_ID_KEY], target):
            return True
        nested_target = value.get(TARGET_KEY)
        if isinstance(nested_target, dict) and references(
            nested_target.get(ENTITY_ID_KEY), target
        ):
            return True
        return any(references(item, target) for item in value.values())
    return False


def config_references(
    config: Mapping[str, Any] | None,
    target: str,
    sections: Iterable[str] | None = None,
) -> bool:
    """Check *config* for *target*, limited to *sections* when given."""
    if config is None:
        return False
    if sections is None:
        return references(dict(config), target)
    return any(references(config.get(key), target) for key in sections)


def referenced_sections(config: Mapping[str, Any] | None, target: str) -> list[str]:
    """Return which automation sections (trigger, condition, action) use *target*."""
    if config is None:
        return []
    return [
        label
        for label, keys in AUTOMATION_SECTIONS.items()
        if config_references(config, target, keys)
    ]
