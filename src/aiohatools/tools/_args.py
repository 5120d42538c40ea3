"""Argument extraction helpers shared by the tool handlers.

Handlers validate their own arguments; the ``require_*`` helpers raise
:class:`ToolArgumentError`, which the registry reports as an error result.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from ..exceptions import ToolArgumentError


def optional_string(args: Mapping[str, Any], key: str) -> str:
    value = args.get(key)
    return value if isinstance(value, str) else ""


def require_string(args: Mapping[str, Any], key: str) -> str:
    value = optional_string(args, key)
    if not value:
        raise ToolArgumentError(f"{key} is required")
    return value


def optional_bool(args: Mapping[str, Any], key: str, default: bool = False) -> bool:
    value = args.get(key)
    return value if isinstance(value, bool) else default


def require_bool(args: Mapping[str, Any], key: str) -> bool:
    value = args.get(key)
    if not isinstance(value, bool):
        raise ToolArgumentError(f"{key} is required")
    return value


def optional_list(args: Mapping[str, Any], key: str) -> list[Any] | None:
    value = args.get(key)
    return value if isinstance(value, list) else None


def require_list(args: Mapping[str, Any], key: str) -> list[Any]:
    value = optional_list(args, key)
    if not value:
        raise ToolArgumentError(f"{key} is required")
    return value


def optional_mapping(args: Mapping[str, Any], key: str) -> dict[str, Any]:
    value = args.get(key)
    return dict(value) if isinstance(value, Mapping) else {}


def validation_message(exc: ValidationError) -> str:
    """Flatten a pydantic validation error into one line."""
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"])
        parts.append(f"{location}: {error['msg']}" if location else error["msg"])
    return "; ".join(parts)


def to_json(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False, default=str)
