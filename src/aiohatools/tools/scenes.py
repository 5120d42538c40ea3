"""Scene tools."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from ..backends.base import KIND_SCENE
from ..exceptions import BackendError, ToolArgumentError
from ..models.config import SceneConfig
from ..models.records import FilterCriteria, ListingKind
from ..models.schema import boolean_schema, number_schema, object_schema, string_schema
from ..models.tools import ToolCallResult, ToolDefinition
from ..registry import ToolHandler
from ._args import (
    optional_bool,
    optional_mapping,
    optional_string,
    require_string,
    to_json,
    validation_message,
)
from .base import ToolGroup

SCENES = ListingKind(
    kind=KIND_SCENE,
    noun="scenes",
    name_key="name",
    alias_matches_id=True,
    compact_attributes=("entity_ids",),
    members_key="entity_ids",
)

_SCENE_ID = string_schema("The scene ID (without the 'scene.' prefix)")
_ENTITIES = object_schema(
    description=(
        "Entity states to set when the scene is activated. Keys are entity IDs, values are "
        "a state string or an object with 'state' and optional 'attributes'"
    )
)

LIST_SCENES = ToolDefinition(
    name="list_scenes",
    description="List all scenes in Home Assistant. Use filters to narrow down results.",
    input_schema=object_schema(
        {
            "name_contains": string_schema(
                "Filter by scene name or entity_id containing this string (case-insensitive)"
            ),
            "entity_contains": string_schema(
                "Filter to scenes that contain this entity ID in their entity list"
            ),
            "verbose": boolean_schema("If true, return the full scene configuration"),
        },
        description="Filter options for scenes list",
    ),
)

GET_SCENE = ToolDefinition(
    name="get_scene",
    description="Get details of a specific scene",
    input_schema=object_schema({"scene_id": _SCENE_ID}, required=["scene_id"]),
)

CREATE_SCENE = ToolDefinition(
    name="create_scene",
    description="Create a new scene in Home Assistant",
    input_schema=object_schema(
        {
            "scene_id": string_schema("Unique ID for the scene (lowercase, underscores allowed)"),
            "name": string_schema("Friendly name for the scene"),
            "icon": string_schema("Icon for the scene (e.g., mdi:lightbulb)"),
            "entities": _ENTITIES,
        },
        required=["scene_id", "name", "entities"],
    ),
)

UPDATE_SCENE = ToolDefinition(
    name="update_scene",
    description="Update an existing scene. Only the provided fields are changed.",
    input_schema=object_schema(
        {
            "scene_id": _SCENE_ID,
            "name": string_schema("New friendly name for the scene"),
            "icon": string_schema("New icon for the scene"),
            "entities": _ENTITIES,
        },
        required=["scene_id"],
    ),
)

DELETE_SCENE = ToolDefinition(
    name="delete_scene",
    description="Delete a scene from Home Assistant",
    input_schema=object_schema({"scene_id": _SCENE_ID}, required=["scene_id"]),
)

ACTIVATE_SCENE = ToolDefinition(
    name="activate_scene",
    description="Activate a scene in Home Assistant",
    input_schema=object_schema(
        {
            "scene_id": _SCENE_ID,
            "transition": number_schema("Transition time in seconds (optional)"),
        },
        required=["scene_id"],
    ),
)


def scene_entities(raw: Mapping[str, Any]) -> dict[str, Any]:
    """Convert tool-style entity states to the ``scenes.yaml`` layout.

    ``{"light.a": {"state": "on", "attributes": {"brightness": 120}}}``
    becomes ``{"light.a": {"state": "on", "brightness": 120}}``; bare state
    strings are kept as they are.
    """
    entities: dict[str, Any] = {}
    for entity_id, value in raw.items():
        if isinstance(value, str):
            entities[entity_id] = value
        elif isinstance(value, Mapping):
            state: dict[str, Any] = {}
            if isinstance(value.get("state"), str):
                state["state"] = value["state"]
            attributes = value.get("attributes")
            if isinstance(attributes, Mapping):
                state.update(attributes)
            entities[entity_id] = state
        else:
            raise ToolArgumentError(f"Invalid state format for entity {entity_id}")
    return entities


def _bare_id(scene_id: str) -> str:
    return scene_id.removeprefix("scene.")


def _validated_config(data: dict[str, Any]) -> dict[str, Any]:
    try:
        return SceneConfig.model_validate(data).to_config()
    except ValidationError as exc:
        raise ToolArgumentError(f"Invalid scene configuration: {validation_message(exc)}") from exc


class SceneTools(ToolGroup):
    def tools(self) -> list[tuple[ToolDefinition, ToolHandler]]:
        return [
            (LIST_SCENES, self.list_scenes),
            (GET_SCENE, self.get_scene),
            (CREATE_SCENE, self.create_scene),
            (UPDATE_SCENE, self.update_scene),
            (DELETE_SCENE, self.delete_scene),
            (ACTIVATE_SCENE, self.activate_scene),
        ]

    async def list_scenes(self, args: dict[str, Any]) -> ToolCallResult:
        criteria = FilterCriteria(
            alias_contains=optional_string(args, "name_contains"),
            member_contains=optional_string(args, "entity_contains"),
        )
        return await self.engine.list_tool(SCENES, criteria, verbose=optional_bool(args, "verbose"))

    async def get_scene(self, args: dict[str, Any]) -> ToolCallResult:
        scene_id = _bare_id(require_string(args, "scene_id"))
        try:
            record = await self.client.fetch_one(KIND_SCENE, f"scene.{scene_id}")
        except BackendError as exc:
            return ToolCallResult.failure(f"Error getting scene: {exc}")
        return ToolCallResult.success(to_json(self.engine.project_verbose(record, SCENES)))

    async def create_scene(self, args: dict[str, Any]) -> ToolCallResult:
        scene_id = _bare_id(require_string(args, "scene_id"))
        name = require_string(args, "name")
        raw_entities = optional_mapping(args, "entities")
        if not raw_entities:
            raise ToolArgumentError("entities is required and must be a non-empty object")

        data: dict[str, Any] = {"name": name, "entities": scene_entities(raw_entities)}
        if icon := optional_string(args, "icon"):
            data["icon"] = icon
        config = _validated_config(data)

        try:
            await self.client.create(KIND_SCENE, f"scene.{scene_id}", config)
        except BackendError as exc:
            return ToolCallResult.failure(f"Error creating scene: {exc}")
        return ToolCallResult.success(f"Scene '{scene_id}' created successfully")

    async def update_scene(self, args: dict[str, Any]) -> ToolCallResult:
        scene_id = _bare_id(require_string(args, "scene_id"))
        try:
            current = await self.client.fetch_one(KIND_SCENE, f"scene.{scene_id}")
        except BackendError as exc:
            return ToolCallResult.failure(f"Error getting current scene: {exc}")

        data = dict(current.config or {})
        data.setdefault("name", current.display_name)
        if name := optional_string(args, "name"):
            data["name"] = name
        if icon := optional_string(args, "icon"):
            data["icon"] = icon
        if raw_entities := optional_mapping(args, "entities"):
            data["entities"] = scene_entities(raw_entities)
        config = _validated_config(data)

        try:
            await self.client.update(KIND_SCENE, current.entity_id, config)
        except BackendError as exc:
            return ToolCallResult.failure(f"Error updating scene: {exc}")
        return ToolCallResult.success(f"Scene '{scene_id}' updated successfully")

    async def delete_scene(self, args: dict[str, Any]) -> ToolCallResult:
        scene_id = _bare_id(require_string(args, "scene_id"))
        try:
            await self.client.delete(KIND_SCENE, f"scene.{scene_id}")
        except BackendError as exc:
            return ToolCallResult.failure(f"Error deleting scene: {exc}")
        return ToolCallResult.success(f"Scene '{scene_id}' deleted successfully")

    async def activate_scene(self, args: dict[str, Any]) -> ToolCallResult:
        scene_id = _bare_id(require_string(args, "scene_id"))
        data: dict[str, Any] = {"entity_id": f"scene.{scene_id}"}
        transition = args.get("transition")
        if isinstance(transition, (int, float)) and not isinstance(transition, bool):
            data["transition"] = transition

        try:
            await self.client.call_service("scene", "turn_on", data)
        except BackendError as exc:
            return ToolCallResult.failure(f"Error activating scene: {exc}")
        return ToolCallResult.success(f"Scene '{scene_id}' activated successfully")
