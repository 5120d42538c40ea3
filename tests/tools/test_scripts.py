"""Tests for the script tools."""

from __future__ import annotations

import json

import pytest

from aiohatools.models import Record
from aiohatools.registry import ToolRegistry

from tests.conftest import FakeBackend


@pytest.fixture
def scripts(fake_backend: FakeBackend) -> FakeBackend:
    fake_backend.add(
        "script",
        Record(
            entity_id="script.movie_time",
            state="off",
            display_name="Movie Time",
            config={
                "alias": "Movie Time",
                "sequence": [{"action": "light.turn_off", "target": {"entity_id": "light.living_room"}}],
            },
        ),
    )
    fake_backend.add(
        "script",
        Record(
            entity_id="script.wake_up",
            state="on",
            display_name="Wake Up",
            config={"alias": "Wake Up", "sequence": [{"action": "media_player.play_media"}]},
        ),
    )
    return fake_backend


class TestListScripts:
    async def test_entity_filter(self, registry: ToolRegistry, scripts: FakeBackend) -> None:
        result = await registry.dispatch("list_scripts", {"entity_id": "light.living_room"})
        body = json.loads(result.text.split("\n\n", 1)[1])
        assert body == [{"entity_id": "script.movie_time", "state": "off", "friendly_name": "Movie Time"}]

    async def test_state(self, registry: ToolRegistry, scripts: FakeBackend) -> None:
        result = await registry.dispatch("list_scripts", {"state": "on"})
        assert result.text.startswith("Found 1 scripts")


class TestGetScript:
    async def test_with_prefix(self, registry: ToolRegistry, scripts: FakeBackend) -> None:
        result = await registry.dispatch("get_script", {"script_id": "script.wake_up"})
        assert json.loads(result.text)["config"]["alias"] == "Wake Up"

    async def test_missing(self, registry: ToolRegistry, scripts: FakeBackend) -> None:
        result = await registry.dispatch("get_script", {"script_id": "nope"})
        assert result.is_error
        assert result.text.startswith("Error getting script:")


class TestCreateScript:
    async def test_id_from_alias(self, registry: ToolRegistry, fake_backend: FakeBackend) -> None:
        result = await registry.dispatch(
            "create_script",
            {"alias": "Good Night", "sequence": [{"action": "light.turn_off"}], "icon": "mdi:moon"},
        )
        assert result.text == "Script 'Good Night' created successfully with ID 'good_night'"
        ((_, entity_id, config),) = fake_backend.created
        assert entity_id == "script.good_night"
        assert config == {
            "alias": "Good Night",
            "sequence": [{"action": "light.turn_off"}],
            "mode": "single",
            "icon": "mdi:moon",
        }

    async def test_explicit_id(self, registry: ToolRegistry, fake_backend: FakeBackend) -> None:
        await registry.dispatch(
            "create_script",
            {"script_id": "gn", "alias": "Good Night", "sequence": [{"action": "light.turn_off"}]},
        )
        assert fake_backend.created[0][1] == "script.gn"

    async def test_empty_sequence(self, registry: ToolRegistry, fake_backend: FakeBackend) -> None:
        result = await registry.dispatch("create_script", {"alias": "Good Night", "sequence": []})
        assert result.is_error
        assert result.text == "sequence is required"
        assert fake_backend.created == []

    async def test_invalid_mode(self, registry: ToolRegistry) -> None:
        result = await registry.dispatch(
            "create_script", {"alias": "A", "sequence": [{}], "mode": "sometimes"}
        )
        assert result.is_error
        assert result.text.startswith("Invalid script configuration:")


class TestDeleteScript:
    async def test_delete(self, registry: ToolRegistry, scripts: FakeBackend) -> None:
        result = await registry.dispatch("delete_script", {"script_id": "movie_time"})
        assert result.text == "Script 'movie_time' deleted successfully"
        assert scripts.deleted == [("script", "script.movie_time")]


class TestExecuteScript:
    async def test_variables(self, registry: ToolRegistry, fake_backend: FakeBackend) -> None:
        result = await registry.dispatch(
            "execute_script", {"script_id": "script.wake_up", "variables": {"volume": 0.3}}
        )
        assert result.text == "Script 'wake_up' executed successfully"
        assert fake_backend.service_calls == [("script", "wake_up", {"volume": 0.3})]

    async def test_service_error(self, registry: ToolRegistry, fake_backend: FakeBackend) -> None:
        fake_backend.service_error = "script not running"
        result = await registry.dispatch("execute_script", {"script_id": "wake_up"})
        assert result.is_error
        assert result.text == "Error executing script: script not running"


class TestUpdateScript:
    async def test_merges_provided_fields(self, registry: ToolRegistry, scripts: FakeBackend) -> None:
        result = await registry.dispatch(
            "update_script",
            {
                "script_id": "movie_time",
                "mode": "restart",
                "fields": {"brightness": {"selector": {"number": {"min": 0, "max": 255}}}},
            },
        )
        assert result.text == "Script 'movie_time' updated successfully"
        ((kind, entity_id, config),) = scripts.updated
        assert (kind, entity_id) == ("script", "script.movie_time")
        assert config == {
            "alias": "Movie Time",
            "sequence": [{"action": "light.turn_off", "target": {"entity_id": "light.living_room"}}],
            "mode": "restart",
            "fields": {"brightness": {"selector": {"number": {"min": 0, "max": 255}}}},
        }

    async def test_replaces_sequence(self, registry: ToolRegistry, scripts: FakeBackend) -> None:
        await registry.dispatch(
            "update_script",
            {"script_id": "script.wake_up", "alias": "Rise", "sequence": [{"action": "light.turn_on"}]},
        )
        config = scripts.updated[0][2]
        assert config["alias"] == "Rise"
        assert config["sequence"] == [{"action": "light.turn_on"}]

    async def test_missing(self, registry: ToolRegistry, scripts: FakeBackend) -> None:
        result = await registry.dispatch("update_script", {"script_id": "ghost", "alias": "Ghost"})
        assert result.is_error
        assert result.text.startswith("Error getting current script:")
        assert scripts.updated == []

    async def test_invalid_mode(self, registry: ToolRegistry, scripts: FakeBackend) -> None:
        result = await registry.dispatch("update_script", {"script_id": "wake_up", "mode": "sometimes"})
        assert result.is_error
        assert result.text.startswith("Invalid script configuration:")
        assert scripts.updated == []


class TestCallService:
    async def test_call(self, registry: ToolRegistry, fake_backend: FakeBackend) -> None:
        result = await registry.dispatch(
            "call_service",
            {"domain": "light", "service": "turn_on", "data": {"entity_id": "light.hall", "brightness": 80}},
        )
        assert result.text == "Service light.turn_on called successfully"
        assert fake_backend.service_calls == [
            ("light", "turn_on", {"entity_id": "light.hall", "brightness": 80})
        ]

    async def test_data_optional(self, registry: ToolRegistry, fake_backend: FakeBackend) -> None:
        await registry.dispatch("call_service", {"domain": "homeassistant", "service": "restart"})
        assert fake_backend.service_calls == [("homeassistant", "restart", {})]

    async def test_missing_service(self, registry: ToolRegistry, fake_backend: FakeBackend) -> None:
        result = await registry.dispatch("call_service", {"domain": "light"})
        assert result.is_error
        assert result.text == "service is required"
        assert fake_backend.service_calls == []

    async def test_backend_error(self, registry: ToolRegistry, fake_backend: FakeBackend) -> None:
        fake_backend.service_error = "service not found"
        result = await registry.dispatch("call_service", {"domain": "light", "service": "blink"})
        assert result.is_error
        assert result.text == "Error calling service: service not found"
