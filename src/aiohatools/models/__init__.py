"""Pydantic models for aiohatools."""

from .config import AutomationConfig, SceneConfig, ScriptConfig, ServiceCallSpec
from .records import FilterCriteria, ListingKind, Record
from .schema import (
    SchemaNode,
    array_schema,
    boolean_schema,
    number_schema,
    object_schema,
    string_schema,
)
from .tools import TextContent, ToolCallResult, ToolDefinition

__all__ = [
    "AutomationConfig",
    "FilterCriteria",
    "ListingKind",
    "Record",
    "SceneConfig",
    "SchemaNode",
    "ScriptConfig",
    "ServiceCallSpec",
    "TextContent",
    "ToolCallResult",
    "ToolDefinition",
    "array_schema",
    "boolean_schema",
    "number_schema",
    "object_schema",
    "string_schema",
]
