"""Declarative argument schemas attached to tool definitions.

Schemas describe what a tool accepts; they are published to the calling
agent but are not enforced before dispatch.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict

SchemaKind = Literal["object", "string", "number", "boolean", "array"]


class SchemaNode(BaseModel):
    """A node of a JSON-Schema-like argument description."""

    model_config = ConfigDict(frozen=True)

    type: SchemaKind
    description: str | None = None
    properties: dict[str, SchemaNode] | None = None
    required: list[str] | None = None
    items: SchemaNode | None = None
    enum: list[str] | None = None
    default: Any | None = None

    def to_json_schema(self) -> dict[str, Any]:
        """Return the JSON-Schema dict with absent members omitted."""
        return self.model_dump(exclude_none=True)


def object_schema(
    properties: dict[str, SchemaNode] | None = None,
    *,
    required: list[str] | None = None,
    description: str | None = None,
) -> SchemaNode:
    return SchemaNode(
        type="object",
        properties=properties,
        required=required or None,
        description=description,
    )


def string_schema(description: str | None = None, *, enum: list[str] | None = None) -> SchemaNode:
    return SchemaNode(type="string", description=description, enum=enum)


def number_schema(description: str | None = None) -> SchemaNode:
    return SchemaNode(type="number", description=description)


def boolean_schema(description: str | None = None) -> SchemaNode:
    return SchemaNode(type="boolean", description=description)


def array_schema(description: str | None = None, *, items: SchemaNode | None = None) -> SchemaNode:
    return SchemaNode(type="array", description=description, items=items)
