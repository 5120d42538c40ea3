"""Argument models for tools that write configuration."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

AutomationMode = Literal["single", "restart", "queued", "parallel"]


class AutomationConfig(BaseModel):
    """Automation definition as stored by Home Assistant."""

    model_config = ConfigDict(populate_by_name=True)

    id: str | None = None
    alias: str
    description: str | None = None
    triggers: list[dict[str, Any]] = Field(alias="trigger", min_length=1)
    conditions: list[dict[str, Any]] = Field(default_factory=list, alias="condition")
    actions: list[dict[str, Any]] = Field(alias="action", min_length=1)
    mode: AutomationMode = "single"

    def to_config(self) -> dict[str, Any]:
        """Return the stored form, using the plural section keys."""
        return self.model_dump(exclude_none=True)


class ScriptConfig(BaseModel):
    """Script definition."""

    alias: str
    sequence: list[dict[str, Any]] = Field(min_length=1)
    mode: AutomationMode = "single"
    icon: str | None = None
    description: str | None = None
    fields: dict[str, Any] | None = None

    def to_config(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class ServiceCallSpec(BaseModel):
    """Home Assistant service-call parameters."""

    domain: str
    service: str
    data: dict[str, Any] = {}


class SceneConfig(BaseModel):
    """Scene definition as stored in ``scenes.yaml``.

    ``entities`` maps entity ids to either a bare state string or a mapping
    of ``state`` plus attributes.
    """

    id: str | None = None
    name: str
    icon: str | None = None
    entities: dict[str, Any] = Field(min_length=1)

    def to_config(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)
