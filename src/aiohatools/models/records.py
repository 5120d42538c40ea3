"""Record, filter and listing models used by the query engine."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Record(BaseModel):
    """A backend object (automation, script, scene, entity, helper or view).

    ``config`` holds the full configuration tree and is ``None`` when only
    the summary has been fetched.
    """

    entity_id: str
    state: str = ""
    display_name: str = ""
    last_changed: str = ""
    last_triggered: str = ""
    attributes: dict[str, Any] = Field(default_factory=dict)
    config: dict[str, Any] | None = None

    @property
    def domain(self) -> str:
        """Part of ``entity_id`` before the first dot, or ``""``."""
        head, sep, _ = self.entity_id.partition(".")
        return head if sep else ""


class FilterCriteria(BaseModel):
    """Filters for a listing; empty values match everything."""

    state: str = ""
    state_not: str = ""
    domain: str = ""
    alias_contains: str = ""
    entity_reference: str = ""
    member_contains: str = ""

    @property
    def needs_config(self) -> bool:
        return bool(self.entity_reference)


class ListingKind(BaseModel):
    """Describes how one backend collection is listed and projected."""

    model_config = ConfigDict(frozen=True)

    kind: str
    noun: str
    id_key: str = "entity_id"
    name_key: str = "friendly_name"
    alias_matches_id: bool = False
    compact_attributes: tuple[str, ...] = ()
    reference_sections: tuple[str, ...] | None = None
    members_key: str | None = None
