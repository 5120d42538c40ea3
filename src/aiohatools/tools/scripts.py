"""Script tools."""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from ..backends.base import KIND_SCRIPT
from ..exceptions import BackendError, ToolArgumentError
from ..models.config import ScriptConfig, ServiceCallSpec
from ..models.records import FilterCriteria, ListingKind
from ..models.schema import (
    array_schema,
    boolean_schema,
    object_schema,
    string_schema,
)
from ..models.tools import ToolCallResult, ToolDefinition
from ..registry import ToolHandler
from ..slug import slugify
from ._args import (
    optional_bool,
    optional_list,
    optional_mapping,
    optional_string,
    require_list,
    require_string,
    to_json,
    validation_message,
)
from .base import ToolGroup

SCRIPTS = ListingKind(
    kind=KIND_SCRIPT,
    noun="scripts",
    reference_sections=("sequence",),
)

_SCRIPT_ID = string_schema("The script ID (without the 'script.' prefix)")

LIST_SCRIPTS = ToolDefinition(
    name="list_scripts",
    description=(
        "List all scripts in Home Assistant. By default returns a compact list. "
        "Use filters to narrow down results and 'verbose' for full details including the sequence."
    ),
    input_schema=object_schema(
        {
            "state": string_schema("Filter by state: 'on' (running) or 'off'"),
            "alias": string_schema("Filter by name (case-insensitive, partial match)"),
            "entity_id": string_schema("Filter by entity used in the script sequence"),
            "verbose": boolean_schema("If true, return full details including the sequence"),
        },
        description="Filter and output options for scripts list",
    ),
)

GET_SCRIPT = ToolDefinition(
    name="get_script",
    description="Get details of a specific script",
    input_schema=object_schema({"script_id": _SCRIPT_ID}, required=["script_id"]),
)

CREATE_SCRIPT = ToolDefinition(
    name="create_script",
    description="Create a new script. If no script_id is given it is derived from the alias.",
    input_schema=object_schema(
        {
            "script_id": _SCRIPT_ID,
            "alias": string_schema("Human-readable name for the script"),
            "sequence": array_schema("Sequence of actions to execute"),
            "mode": string_schema(
                "Script mode: single, restart, queued, parallel",
                enum=["single", "restart", "queued", "parallel"],
            ),
            "description": string_schema("Description of what the script does"),
            "icon": string_schema("Icon for the script (e.g., mdi:script)"),
        },
        required=["alias", "sequence"],
        description="Script configuration",
    ),
)

UPDATE_SCRIPT = ToolDefinition(
    name="update_script",
    description="Update an existing script. Only the provided fields are changed.",
    input_schema=object_schema(
        {
            "script_id": _SCRIPT_ID,
            "alias": string_schema("New name for the script"),
            "sequence": array_schema("New sequence of actions"),
            "mode": string_schema(
                "Script mode: single, restart, queued, parallel",
                enum=["single", "restart", "queued", "parallel"],
            ),
            "description": string_schema("New description"),
            "icon": string_schema("New icon"),
            "fields": object_schema(description="Input fields the script accepts"),
        },
        required=["script_id"],
        description="Script ID and updated configuration",
    ),
)

DELETE_SCRIPT = ToolDefinition(
    name="delete_script",
    description="Delete a script from Home Assistant",
    input_schema=object_schema({"script_id": _SCRIPT_ID}, required=["script_id"]),
)

EXECUTE_SCRIPT = ToolDefinition(
    name="execute_script",
    description="Run a script, optionally passing variables",
    input_schema=object_schema(
        {
            "script_id": _SCRIPT_ID,
            "variables": object_schema(description="Variables passed to the script"),
        },
        required=["script_id"],
    ),
)

CALL_SERVICE = ToolDefinition(
    name="call_service",
    description="Call any Home Assistant service (e.g., light.turn_on)",
    input_schema=object_schema(
        {
            "domain": string_schema("Service domain (e.g., light, switch, script)"),
            "service": string_schema("Service name (e.g., turn_on, turn_off)"),
            "data": object_schema(description="Service data, including the target entity_id"),
        },
        required=["domain", "service"],
    ),
)


def _bare_id(script_id: str) -> str:
    return script_id.removeprefix("script.")


def _validated_config(data: dict[str, Any]) -> dict[str, Any]:
    try:
        return ScriptConfig.model_validate(data).to_config()
    except ValidationError as exc:
        raise ToolArgumentError(f"Invalid script configuration: {validation_message(exc)}") from exc


class ScriptTools(ToolGroup):
    def tools(self) -> list[tuple[ToolDefinition, ToolHandler]]:
        return [
            (LIST_SCRIPTS, self.list_scripts),
            (GET_SCRIPT, self.get_script),
            (CREATE_SCRIPT, self.create_script),
            (UPDATE_SCRIPT, self.update_script),
            (DELETE_SCRIPT, self.delete_script),
            (EXECUTE_SCRIPT, self.execute_script),
            (CALL_SERVICE, self.call_service),
        ]

    async def list_scripts(self, args: dict[str, Any]) -> ToolCallResult:
        criteria = FilterCriteria(
            state=optional_string(args, "state"),
            alias_contains=optional_string(args, "alias"),
            entity_reference=optional_string(args, "entity_id"),
        )
        return await self.engine.list_tool(SCRIPTS, criteria, verbose=optional_bool(args, "verbose"))

    async def get_script(self, args: dict[str, Any]) -> ToolCallResult:
        script_id = _bare_id(require_string(args, "script_id"))
        try:
            record = await self.client.fetch_one(KIND_SCRIPT, f"script.{script_id}")
        except BackendError as exc:
            return ToolCallResult.failure(f"Error getting script: {exc}")
        return ToolCallResult.success(to_json(self.engine.project_verbose(record, SCRIPTS)))

    async def create_script(self, args: dict[str, Any]) -> ToolCallResult:
        alias = require_string(args, "alias")
        script_id = _bare_id(optional_string(args, "script_id")) or slugify(alias)
        if not script_id:
            raise ToolArgumentError("script_id is required when alias has no letters or digits")

        data: dict[str, Any] = {"alias": alias, "sequence": require_list(args, "sequence")}
        for key in ("mode", "description", "icon"):
            if value := optional_string(args, key):
                data[key] = value
        config = _validated_config(data)

        try:
            await self.client.create(KIND_SCRIPT, f"script.{script_id}", config)
        except BackendError as exc:
            return ToolCallResult.failure(f"Error creating script: {exc}")

        return ToolCallResult.success(f"Script '{alias}' created successfully with ID '{script_id}'")

    async def update_script(self, args: dict[str, Any]) -> ToolCallResult:
        script_id = _bare_id(require_string(args, "script_id"))
        try:
            current = await self.client.fetch_one(KIND_SCRIPT, f"script.{script_id}")
        except BackendError as exc:
            return ToolCallResult.failure(f"Error getting current script: {exc}")

        data = dict(current.config or {})
        data.setdefault("alias", current.display_name)
        for key in ("alias", "mode", "icon"):
            if value := optional_string(args, key):
                data[key] = value
        if isinstance(args.get("description"), str):
            data["description"] = args["description"]
        if sequence := optional_list(args, "sequence"):
            data["sequence"] = sequence
        if fields := optional_mapping(args, "fields"):
            data["fields"] = fields
        config = _validated_config(data)

        try:
            await self.client.update(KIND_SCRIPT, current.entity_id, config)
        except BackendError as exc:
            return ToolCallResult.failure(f"Error updating script: {exc}")
        return ToolCallResult.success(f"Script '{script_id}' updated successfully")

    async def delete_script(self, args: dict[str, Any]) -> ToolCallResult:
        script_id = _bare_id(require_string(args, "script_id"))
        try:
            await self.client.delete(KIND_SCRIPT, f"script.{script_id}")
        except BackendError as exc:
            return ToolCallResult.failure(f"Error deleting script: {exc}")
        return ToolCallResult.success(f"Script '{script_id}' deleted successfully")

    async def execute_script(self, args: dict[str, Any]) -> ToolCallResult:
        script_id = _bare_id(require_string(args, "script_id"))
        try:
            await self.client.call_service("script", script_id, optional_mapping(args, "variables"))
        except BackendError as exc:
            return ToolCallResult.failure(f"Error executing script: {exc}")
        return ToolCallResult.success(f"Script '{script_id}' executed successfully")

    async def call_service(self, args: dict[str, Any]) -> ToolCallResult:
        spec = ServiceCallSpec(
            domain=require_string(args, "domain"),
            service=require_string(args, "service"),
            data=optional_mapping(args, "data"),
        )
        try:
            await self.client.call_service(spec.domain, spec.service, spec.data)
        except BackendError as exc:
            return ToolCallResult.failure(f"Error calling service: {exc}")
        return ToolCallResult.success(f"Service {spec.domain}.{spec.service} called successfully")
