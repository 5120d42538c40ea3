"""Tool definitions and call results."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from .schema import SchemaNode


class ToolDefinition(BaseModel):
    """A named operation with its argument schema."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    description: str = ""
    input_schema: SchemaNode = Field(alias="inputSchema")

    def to_dict(self) -> dict[str, Any]:
        """Return the discovery payload for this tool."""
        return self.model_dump(by_alias=True, exclude_none=True)


class TextContent(BaseModel):
    """A text segment of a tool result."""

    type: Literal["text"] = "text"
    text: str


class ToolCallResult(BaseModel):
    """Uniform response of a tool call.

    Success and user-facing failure share this shape and differ only in
    ``is_error``.
    """

    model_config = ConfigDict(populate_by_name=True)

    content: list[TextContent] = Field(default_factory=list)
    is_error: bool = Field(default=False, alias="isError")

    @classmethod
    def success(cls, text: str) -> ToolCallResult:
        return cls(content=[TextContent(text=text)])

    @classmethod
    def failure(cls, text: str) -> ToolCallResult:
        return cls(content=[TextContent(text=text)], is_error=True)

    @property
    def text(self) -> str:
        """All text segments joined by newlines."""
        return "\n".join(segment.text for segment in self.content)

    def to_dict(self) -> dict[str, Any]:
        data = self.model_dump(by_alias=True)
        if not self.is_error:
            data.pop("isError")
        return data
