"""Shared fixtures for aiohatools tests."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

import pytest

from aiohatools.backends import (
    KIND_AUTOMATION,
    KIND_ENTITY,
    KIND_HELPER,
    KIND_SCENE,
    KIND_SCRIPT,
    KIND_VIEW,
    ConfigDirectoryBackend,
)
from aiohatools.exceptions import BackendError, RecordNotFoundError
from aiohatools.models import Record
from aiohatools.query import QueryEngine
from aiohatools.registry import ToolRegistry
from aiohatools.tools import build_registry


class FakeBackend:
    """In-memory backend recording every call made to it."""

    def __init__(self) -> None:
        self.records: dict[str, list[Record]] = {
            kind: []
            for kind in (KIND_AUTOMATION, KIND_SCRIPT, KIND_SCENE, KIND_ENTITY, KIND_HELPER, KIND_VIEW)
        }
        self.failing_ids: set[str] = set()
        self.failing_kinds: set[str] = set()
        self.delays: dict[str, float] = {}
        self.fetch_one_calls: list[str] = []
        self.service_calls: list[tuple[str, str, dict[str, Any]]] = []
        self.service_error: str | None = None
        self.created: list[tuple[str, str, dict[str, Any]]] = []
        self.updated: list[tuple[str, str, dict[str, Any]]] = []
        self.deleted: list[tuple[str, str]] = []
        self.in_flight = 0
        self.max_in_flight = 0

    # -- Seeding -------------------------------------------------------------

    def add(self, kind: str, record: Record) -> Record:
        self.records[kind].append(record)
        return record

    def add_automation(
        self,
        object_id: str,
        alias: str,
        *,
        state: str = "on",
        triggers: list[dict[str, Any]] | None = None,
        conditions: list[dict[str, Any]] | None = None,
        actions: list[dict[str, Any]] | None = None,
        last_triggered: str = "",
    ) -> Record:
        config = {
            "id": object_id,
            "alias": alias,
            "triggers": triggers or [{"trigger": "time", "at": "07:00:00"}],
            "conditions": conditions or [],
            "actions": actions or [{"action": "light.turn_on", "target": {"entity_id": "light.hall"}}],
            "mode": "single",
        }
        return self.add(
            KIND_AUTOMATION,
            Record(
                entity_id=f"automation.{object_id}",
                state=state,
                display_name=alias,
                last_triggered=last_triggered,
                config=config,
            ),
        )

    def add_scene(self, object_id: str, name: str, entities: dict[str, Any]) -> Record:
        return self.add(
            KIND_SCENE,
            Record(
                entity_id=f"scene.{object_id}",
                state="unknown",
                display_name=name,
                attributes={"entity_ids": list(entities)},
                config={"id": object_id, "name": name, "entities": entities},
            ),
        )

    def add_entity(self, entity_id: str, state: str, name: str = "", **attributes: Any) -> Record:
        if name:
            attributes["friendly_name"] = name
        return self.add(
            KIND_ENTITY,
            Record(
                entity_id=entity_id,
                state=state,
                display_name=name,
                last_changed="2024-01-01T00:00:00+00:00",
                attributes=attributes,
            ),
        )

    def _find(self, kind: str, record_id: str) -> Record | None:
        for record in self.records[kind]:
            if record.entity_id == record_id or record.entity_id == f"{kind}.{record_id}":
                return record
        return None

    def _full_id(self, kind: str, record_id: str) -> str:
        if kind in (KIND_AUTOMATION, KIND_SCRIPT, KIND_SCENE) and "." not in record_id:
            return f"{kind}.{record_id}"
        return record_id

    # -- BackendClient -------------------------------------------------------

    async def fetch_all(self, kind: str) -> list[Record]:
        if kind in self.failing_kinds:
            raise BackendError("connection refused")
        return [record.model_copy(update={"config": None}) for record in self.records[kind]]

    async def fetch_one(self, kind: str, record_id: str) -> Record:
        self.fetch_one_calls.append(record_id)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get(record_id, 0))
            if record_id in self.failing_ids:
                raise BackendError(f"timeout fetching {record_id}")
            record = self._find(kind, record_id)
            if record is None:
                raise RecordNotFoundError(f"{kind} not found: {record_id}")
            return record
        finally:
            self.in_flight -= 1

    async def create(self, kind: str, record_id: str, config: dict[str, Any]) -> None:
        entity_id = self._full_id(kind, record_id)
        if self._find(kind, entity_id) is not None:
            raise BackendError(f"{kind} already exists: {record_id}")
        self.created.append((kind, entity_id, config))
        display_name = config.get("alias") or config.get("name", "")
        self.add(kind, Record(entity_id=entity_id, display_name=display_name, config=config))

    async def update(self, kind: str, record_id: str, config: dict[str, Any]) -> None:
        record = self._find(kind, record_id)
        if record is None:
            raise RecordNotFoundError(f"{kind} not found: {record_id}")
        self.updated.append((kind, record.entity_id, config))
        index = self.records[kind].index(record)
        self.records[kind][index] = record.model_copy(update={"config": config})

    async def delete(self, kind: str, record_id: str) -> None:
        record = self._find(kind, record_id)
        if record is None:
            raise RecordNotFoundError(f"{kind} not found: {record_id}")
        self.deleted.append((kind, record.entity_id))
        self.records[kind].remove(record)

    async def call_service(self, domain: str, service: str, data: dict[str, Any]) -> None:
        if self.service_error:
            raise BackendError(self.service_error)
        self.service_calls.append((domain, service, data))


@pytest.fixture
def fake_backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def engine(fake_backend: FakeBackend) -> QueryEngine:
    return QueryEngine(fake_backend, max_concurrent_fetches=2)


@pytest.fixture
def registry(fake_backend: FakeBackend) -> ToolRegistry:
    return build_registry(fake_backend)


@pytest.fixture
def sample_automations(fake_backend: FakeBackend) -> FakeBackend:
    """Four automations covering both states and several entity references."""
    fake_backend.add_automation(
        "turn_on_lights",
        "Turn On Lights",
        triggers=[{"trigger": "state", "entity_id": "binary_sensor.motion"}],
        actions=[{"action": "light.turn_on", "target": {"entity_id": "light.living_room"}}],
        last_triggered="2024-05-01T07:00:00+00:00",
    )
    fake_backend.add_automation(
        "turn_off_lights",
        "Turn Off Lights",
        state="off",
        actions=[{"action": "light.turn_off", "target": {"entity_id": ["light.living_room", "light.hall"]}}],
    )
    fake_backend.add_automation(
        "morning_routine",
        "Morning Routine",
        conditions=[{"condition": "state", "entity_id": "binary_sensor.motion", "state": "on"}],
    )
    fake_backend.add_automation(
        "night_mode_activation",
        "Night Mode Activation",
        actions=[{"action": "switch.turn_off", "target": {"entity_id": "switch.tv"}}],
    )
    return fake_backend


@pytest.fixture
def tmp_config_dir(tmp_path: Path) -> Path:
    """Create a temporary Home Assistant config directory with sample files."""
    (tmp_path / "configuration.yaml").write_text(
        "homeassistant:\n"
        "  name: Test Home\n"
        "http: !include http.yaml\n"
        "input_boolean:\n"
        "  guest_mode:\n"
        "    name: Guest Mode\n"
        "    icon: mdi:account\n"
        "counter:\n"
        "  doorbell_presses:\n"
        "    name: Doorbell Presses\n"
        "    step: 1\n"
    )
    (tmp_path / "automations.yaml").write_text(
        "- id: '1700000000001'\n"
        "  alias: Turn On Lights\n"
        "  triggers:\n"
        "    - trigger: state\n"
        "      entity_id: binary_sensor.motion\n"
        "  actions:\n"
        "    - action: light.turn_on\n"
        "      target:\n"
        "        entity_id: light.living_room\n"
        "- id: night_mode\n"
        "  alias: Night Mode\n"
        "  initial_state: false\n"
        "  trigger:\n"
        "    - platform: time\n"
        "      at: '23:00:00'\n"
        "  action:\n"
        "    - service: switch.turn_off\n"
        "      entity_id: switch.tv\n"
    )
    (tmp_path / "scripts.yaml").write_text(
        "movie_time:\n"
        "  alias: Movie Time\n"
        "  sequence:\n"
        "    - action: light.turn_off\n"
        "      target:\n"
        "        entity_id: light.living_room\n"
    )
    (tmp_path / "scenes.yaml").write_text(
        "- id: '1700000000100'\n"
        "  name: Movie Night\n"
        "  icon: mdi:movie\n"
        "  entities:\n"
        "    light.living_room:\n"
        "      state: 'on'\n"
        "      brightness: 40\n"
        "    media_player.tv: playing\n"
        "- id: bright\n"
        "  name: All Bright\n"
        "  entities:\n"
        "    light.living_room: 'on'\n"
        "    light.hall: 'on'\n"
    )
    (tmp_path / "ui-lovelace.yaml").write_text(
        "title: Home\n"
        "views:\n"
        "  - title: Overview\n"
        "    path: overview\n"
        "    icon: mdi:home\n"
        "    badges:\n"
        "      - entity: person.me\n"
        "    cards:\n"
        "      - type: entities\n"
        "      - type: weather-forecast\n"
        "  - title: Energy\n"
        "    sections:\n"
        "      - cards:\n"
        "          - type: energy-usage-graph\n"
        "      - cards:\n"
        "          - type: energy-distribution\n"
        "          - type: energy-sources-table\n"
        "  - title: Settings\n"
        "    path: settings\n"
        "    subview: true\n"
    )
    return tmp_path


@pytest.fixture
def config_backend(tmp_config_dir: Path) -> ConfigDirectoryBackend:
    """Return a ConfigDirectoryBackend bound to the temporary config dir."""
    return ConfigDirectoryBackend(tmp_config_dir)
