"""Automation tools."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from ..backends.base import KIND_AUTOMATION
from ..exceptions import BackendError, ToolArgumentError
from ..models.config import AutomationConfig
from ..models.records import FilterCriteria, ListingKind, Record
from ..models.schema import (
    array_schema,
    boolean_schema,
    object_schema,
    string_schema,
)
from ..models.tools import ToolCallResult, ToolDefinition
from ..references import AUTOMATION_SECTIONS
from ..registry import ToolHandler
from ..slug import slugify
from ._args import (
    optional_bool,
    optional_list,
    optional_string,
    require_bool,
    require_list,
    require_string,
    to_json,
    validation_message,
)
from .base import ToolGroup

logger = logging.getLogger(__name__)

ENTITY_PREFIX = "automation."

AUTOMATIONS = ListingKind(
    kind=KIND_AUTOMATION,
    noun="automations",
    name_key="alias",
    reference_sections=tuple(key for keys in AUTOMATION_SECTIONS.values() for key in keys),
)

_MODE = string_schema(
    "Automation mode: single, restart, queued, parallel",
    enum=["single", "restart", "queued", "parallel"],
)
_AUTOMATION_ID = string_schema("The automation ID or entity_id (automation.xxx)")

LIST_AUTOMATIONS = ToolDefinition(
    name="list_automations",
    description=(
        "List all automations in Home Assistant. By default returns a compact list. "
        "Use filters to narrow down results and 'verbose' for full details including configuration."
    ),
    input_schema=object_schema(
        {
            "state": string_schema("Filter by state: 'on' (enabled), 'off' (disabled), or omit for all"),
            "alias": string_schema("Filter by alias/name (case-insensitive, partial match)"),
            "entity_id": string_schema(
                "Filter by entity used in the automation (searches triggers, conditions, and actions)"
            ),
            "verbose": boolean_schema(
                "If true, return full details including configuration. Default: false "
                "(compact output with entity_id, state, alias, last_triggered)"
            ),
        },
        description="Filter and output options for automations list",
    ),
)

GET_AUTOMATION = ToolDefinition(
    name="get_automation",
    description="Get details of a specific automation",
    input_schema=object_schema({"automation_id": _AUTOMATION_ID}, required=["automation_id"]),
)

_CONFIG_PROPERTIES = {
    "alias": string_schema("Human-readable name for the automation"),
    "description": string_schema("Description of what the automation does"),
    "trigger": array_schema("List of triggers that start the automation"),
    "condition": array_schema("Optional conditions that must be met"),
    "action": array_schema("Actions to perform when triggered"),
    "mode": _MODE,
}

CREATE_AUTOMATION = ToolDefinition(
    name="create_automation",
    description="Create a new automation in Home Assistant. The ID is derived from the alias.",
    input_schema=object_schema(
        _CONFIG_PROPERTIES,
        required=["alias", "trigger", "action"],
        description="Automation configuration",
    ),
)

UPDATE_AUTOMATION = ToolDefinition(
    name="update_automation",
    description="Update an existing automation. Only the provided fields are changed.",
    input_schema=object_schema(
        {"automation_id": _AUTOMATION_ID, **_CONFIG_PROPERTIES},
        required=["automation_id"],
        description="Automation ID and updated configuration",
    ),
)

DELETE_AUTOMATION = ToolDefinition(
    name="delete_automation",
    description="Delete an automation from Home Assistant",
    input_schema=object_schema({"automation_id": _AUTOMATION_ID}, required=["automation_id"]),
)

TOGGLE_AUTOMATION = ToolDefinition(
    name="toggle_automation",
    description="Enable or disable an automation",
    input_schema=object_schema(
        {
            "automation_id": _AUTOMATION_ID,
            "enabled": boolean_schema("Whether the automation should be enabled"),
        },
        required=["automation_id", "enabled"],
    ),
)


def _entity_id(automation_id: str) -> str:
    if automation_id.startswith(ENTITY_PREFIX):
        return automation_id
    return ENTITY_PREFIX + automation_id


def _validated_config(data: dict[str, Any]) -> dict[str, Any]:
    try:
        return AutomationConfig.model_validate(data).to_config()
    except ValidationError as exc:
        raise ToolArgumentError(f"Invalid automation configuration: {validation_message(exc)}") from exc


class AutomationTools(ToolGroup):
    """List, inspect, create, update, delete and toggle automations."""

    def tools(self) -> list[tuple[ToolDefinition, ToolHandler]]:
        return [
            (LIST_AUTOMATIONS, self.list_automations),
            (GET_AUTOMATION, self.get_automation),
            (CREATE_AUTOMATION, self.create_automation),
            (UPDATE_AUTOMATION, self.update_automation),
            (DELETE_AUTOMATION, self.delete_automation),
            (TOGGLE_AUTOMATION, self.toggle_automation),
        ]

    async def list_automations(self, args: dict[str, Any]) -> ToolCallResult:
        criteria = FilterCriteria(
            state=optional_string(args, "state"),
            alias_contains=optional_string(args, "alias"),
            entity_reference=optional_string(args, "entity_id"),
        )
        return await self.engine.list_tool(
            AUTOMATIONS, criteria, verbose=optional_bool(args, "verbose")
        )

    async def _find_automation(self, search_id: str) -> Record:
        """Locate an automation by entity_id, object id or configuration ``id``."""
        try:
            return await self.client.fetch_one(KIND_AUTOMATION, _entity_id(search_id))
        except BackendError as exc:
            logger.debug("Direct lookup of %s failed: %s", search_id, exc)

        automations = await self.engine.fetch(AUTOMATIONS)
        for record in await self.engine.load_configs(AUTOMATIONS, automations):
            if record is None or record.config is None:
                continue
            if record.entity_id == search_id or str(record.config.get("id", "")) == search_id:
                return record

        raise BackendError(
            f"automation not found with ID: {search_id} "
            "(tried as automation_id, entity_id, and config.id)"
        )

    async def get_automation(self, args: dict[str, Any]) -> ToolCallResult:
        automation_id = require_string(args, "automation_id")
        try:
            record = await self._find_automation(automation_id)
        except BackendError as exc:
            return ToolCallResult.failure(f"Error getting automation: {exc}")
        return ToolCallResult.success(to_json(self.engine.project_verbose(record, AUTOMATIONS)))

    async def create_automation(self, args: dict[str, Any]) -> ToolCallResult:
        alias = require_string(args, "alias")
        trigger = require_list(args, "trigger")
        action = require_list(args, "action")

        automation_id = slugify(alias)
        if not automation_id:
            raise ToolArgumentError("alias must contain at least one letter or digit")

        data: dict[str, Any] = {
            "id": automation_id,
            "alias": alias,
            "trigger": trigger,
            "action": action,
            "condition": optional_list(args, "condition") or [],
        }
        if description := optional_string(args, "description"):
            data["description"] = description
        if mode := optional_string(args, "mode"):
            data["mode"] = mode
        config = _validated_config(data)

        try:
            await self.client.create(KIND_AUTOMATION, automation_id, config)
        except BackendError as exc:
            return ToolCallResult.failure(f"Error creating automation: {exc}")

        logger.info("Created automation %s", automation_id)
        return ToolCallResult.success(
            f"Automation '{alias}' created successfully with ID '{automation_id}'"
        )

    async def update_automation(self, args: dict[str, Any]) -> ToolCallResult:
        automation_id = require_string(args, "automation_id")

        try:
            current = await self.client.fetch_one(KIND_AUTOMATION, _entity_id(automation_id))
        except BackendError as exc:
            return ToolCallResult.failure(f"Error getting current automation: {exc}")

        stored = current.config or {}
        data: dict[str, Any] = {
            "id": stored.get("id"),
            "alias": stored.get("alias") or current.display_name,
            "description": stored.get("description"),
            "trigger": stored.get("triggers", stored.get("trigger", [])),
            "condition": stored.get("conditions", stored.get("condition", [])),
            "action": stored.get("actions", stored.get("action", [])),
            "mode": stored.get("mode", "single"),
        }
        if alias := optional_string(args, "alias"):
            data["alias"] = alias
        if isinstance(args.get("description"), str):
            data["description"] = args["description"]
        if trigger := optional_list(args, "trigger"):
            data["trigger"] = trigger
        if (condition := optional_list(args, "condition")) is not None:
            data["condition"] = condition
        if action := optional_list(args, "action"):
            data["action"] = action
        if mode := optional_string(args, "mode"):
            data["mode"] = mode
        config = _validated_config({key: value for key, value in data.items() if value is not None})

        try:
            await self.client.update(KIND_AUTOMATION, current.entity_id, config)
        except BackendError as exc:
            return ToolCallResult.failure(f"Error updating automation: {exc}")

        return ToolCallResult.success(f"Automation '{automation_id}' updated successfully")

    async def delete_automation(self, args: dict[str, Any]) -> ToolCallResult:
        automation_id = require_string(args, "automation_id")
        try:
            await self.client.delete(KIND_AUTOMATION, _entity_id(automation_id))
        except BackendError as exc:
            return ToolCallResult.failure(f"Error deleting automation: {exc}")
        return ToolCallResult.success(f"Automation '{automation_id}' deleted successfully")

    async def toggle_automation(self, args: dict[str, Any]) -> ToolCallResult:
        automation_id = require_string(args, "automation_id")
        enabled = require_bool(args, "enabled")

        service = "turn_on" if enabled else "turn_off"
        try:
            await self.client.call_service(
                "automation", service, {"entity_id": _entity_id(automation_id)}
            )
        except BackendError as exc:
            return ToolCallResult.failure(f"Error toggling automation: {exc}")

        state = "enabled" if enabled else "disabled"
        return ToolCallResult.success(f"Automation '{automation_id}' {state} successfully")
