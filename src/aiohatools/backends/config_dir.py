"""Backend serving configuration records from a Home Assistant config directory.

Automations, scripts, scenes, helpers and dashboard views are read from the
YAML files Home Assistant itself loads. Automations, scripts and scenes can
be created, updated and deleted; helpers defined in ``configuration.yaml``
are read-only. Entity states and service calls need a running instance and
are not available here.

Automations and scenes are stored as lists. Their entity object ids are
derived from the display name the way Home Assistant does it: the name is
slugified and repeated slugs get ``_2``, ``_3``, ... in file order. A lookup
matches the object id first and falls back to the configuration ``id``.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any

import aiofiles
import yaml

from ..exceptions import BackendError, FileError, PathSecurityError, RecordNotFoundError, YAMLParseError
from ..models.records import Record
from ..platforms import HELPER_PLATFORMS
from ..slug import slugify
from .base import (
    KIND_AUTOMATION,
    KIND_ENTITY,
    KIND_HELPER,
    KIND_SCENE,
    KIND_SCRIPT,
    KIND_VIEW,
    RecordKind,
)

logger = logging.getLogger(__name__)

# Kinds stored as a YAML list, with the key holding their display name.
_LIST_NAME_KEYS: dict[str, str] = {KIND_AUTOMATION: "alias", KIND_SCENE: "name"}


class _HassLoader(yaml.SafeLoader):
    """SafeLoader that keeps Home Assistant tags such as ``!include`` as text."""


def _construct_tagged(loader: yaml.SafeLoader, tag_suffix: str, node: yaml.Node) -> str:
    if isinstance(node, yaml.ScalarNode):
        return f"!{tag_suffix} {loader.construct_scalar(node)}"
    return f"!{tag_suffix}"


_HassLoader.add_multi_constructor("!", _construct_tagged)


# ----------------------------------------------------------------------
# Record builders
# ----------------------------------------------------------------------


def _string(value: Any) -> str:
    return value if isinstance(value, str) else ""


def list_object_ids(items: list[Any], name_key: str) -> list[str]:
    """Return the entity object id of every item of a list file, in order.

    The id is the slug of ``name_key``, then the slug of the configuration
    ``id``, then the position. Repeated ids get ``_2``, ``_3``, ...
    """
    object_ids: list[str] = []
    seen: set[str] = set()
    for index, config in enumerate(items):
        cfg = config if isinstance(config, dict) else {}
        base = slugify(_string(cfg.get(name_key))) or slugify(str(cfg.get("id", ""))) or str(index)
        object_id = base
        suffix = 2
        while object_id in seen:
            object_id = f"{base}_{suffix}"
            suffix += 1
        seen.add(object_id)
        object_ids.append(object_id)
    return object_ids


def _find_in_list(items: list[Any], object_ids: list[str], kind: str, record_id: str) -> int | None:
    bare_id = record_id.removeprefix(f"{kind}.")
    for index, object_id in enumerate(object_ids):
        if object_id == bare_id and isinstance(items[index], dict):
            return index
    for index, config in enumerate(items):
        if isinstance(config, dict) and "id" in config and str(config["id"]) == bare_id:
            return index
    return None


def _list_record(kind: str, config: dict[str, Any], object_id: str, *, with_config: bool) -> Record:
    if kind == KIND_AUTOMATION:
        return Record(
            entity_id=f"automation.{object_id}",
            state="off" if config.get("initial_state") is False else "on",
            display_name=_string(config.get("alias")),
            config=dict(config) if with_config else None,
        )

    attributes: dict[str, Any] = {}
    entities = config.get("entities")
    if isinstance(entities, dict) and entities:
        attributes["entity_ids"] = [str(entity_id) for entity_id in entities]
    if icon := _string(config.get("icon")):
        attributes["icon"] = icon
    return Record(
        entity_id=f"scene.{object_id}",
        display_name=_string(config.get("name")),
        attributes=attributes,
        config=dict(config) if with_config else None,
    )


def _script_record(script_id: str, config: Any, *, with_config: bool) -> Record:
    cfg = config if isinstance(config, dict) else {}
    return Record(
        entity_id=f"script.{script_id}",
        state="off",
        display_name=_string(cfg.get("alias")) or script_id,
        config=dict(cfg) if with_config else None,
    )


def count_cards_in_view(view: dict[str, Any]) -> int:
    """Count cards of a view, including cards nested in sections."""
    cards = view.get("cards")
    count = len(cards) if isinstance(cards, list) else 0

    sections = view.get("sections")
    if isinstance(sections, list):
        for section in sections:
            if isinstance(section, dict) and isinstance(section.get("cards"), list):
                count += len(section["cards"])
    return count


def _view_id(view: dict[str, Any], index: int) -> str:
    return _string(view.get("path")) or str(index)


def _view_record(view: dict[str, Any], index: int, *, with_config: bool) -> Record:
    attributes: dict[str, Any] = {"card_count": count_cards_in_view(view)}
    if icon := _string(view.get("icon")):
        attributes["icon"] = icon
    badges = view.get("badges")
    if isinstance(badges, list) and badges:
        attributes["badge_count"] = len(badges)
    if view.get("subview") is True:
        attributes["subview"] = True

    return Record(
        entity_id=_view_id(view, index),
        display_name=_string(view.get("title")),
        attributes=attributes,
        config=dict(view) if with_config else None,
    )


class ConfigDirectoryBackend:
    """:class:`~aiohatools.backends.base.BackendClient` over YAML files in *config_path*.

    The constructor accepts plain values; no environment variables are read.
    """

    def __init__(
        self,
        config_path: Path,
        *,
        automations_file: str = "automations.yaml",
        scripts_file: str = "scripts.yaml",
        scenes_file: str = "scenes.yaml",
        configuration_file: str = "configuration.yaml",
        dashboard_file: str = "ui-lovelace.yaml",
    ) -> None:
        self.config_path = config_path.resolve()
        self.automations_file = automations_file
        self.scripts_file = scripts_file
        self.scenes_file = scenes_file
        self.configuration_file = configuration_file
        self.dashboard_file = dashboard_file
        self._write_lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # File helpers
    # ------------------------------------------------------------------

    def _get_full_path(self, relative_path: str) -> Path:
        """Return the absolute path, ensuring it stays within *config_path*.

        Raises :class:`PathSecurityError` if the resolved path escapes the
        allowed directory tree.
        """
        relative_path = relative_path.lstrip("/")
        full_path = (self.config_path / relative_path).resolve()

        if not full_path.is_relative_to(self.config_path):
            raise PathSecurityError(f"Path outside config directory: {relative_path}")

        return full_path

    async def _load_yaml(self, relative_path: str) -> Any:
        """Parse *relative_path*; a missing file yields ``None``."""
        full_path = self._get_full_path(relative_path)
        if not full_path.exists():
            return None

        try:
            async with aiofiles.open(full_path, encoding="utf-8") as fh:
                content = await fh.read()
        except OSError as exc:
            logger.error("Error reading file %s: %s", relative_path, exc)
            raise FileError(str(exc)) from exc

        try:
            return yaml.load(content, Loader=_HassLoader)
        except yaml.YAMLError as exc:
            logger.error("YAML parse error in %s: %s", relative_path, exc)
            raise YAMLParseError(f"Invalid YAML in {relative_path}: {exc}") from exc

    async def _dump_yaml(self, relative_path: str, data: Any) -> None:
        full_path = self._get_full_path(relative_path)
        content = yaml.safe_dump(data, sort_keys=False, allow_unicode=True)

        try:
            full_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(full_path, "w", encoding="utf-8") as fh:
                await fh.write(content)
        except OSError as exc:
            logger.error("Error writing file %s: %s", relative_path, exc)
            raise FileError(str(exc)) from exc

        logger.info("Wrote file: %s (%d bytes)", relative_path, len(content))

    def _list_file(self, kind: str) -> str:
        return self.automations_file if kind == KIND_AUTOMATION else self.scenes_file

    async def _load_list(self, kind: str) -> tuple[list[Any], list[str]]:
        """Return the items of a list file and their entity object ids."""
        filename = self._list_file(kind)
        data = await self._load_yaml(filename)
        if data is None:
            return [], []
        if not isinstance(data, list):
            raise FileError(f"{filename} must contain a list of {kind}s")
        return data, list_object_ids(data, _LIST_NAME_KEYS[kind])

    async def _load_scripts(self) -> dict[str, Any]:
        data = await self._load_yaml(self.scripts_file)
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise FileError(f"{self.scripts_file} must contain a mapping of scripts")
        return data

    async def _load_helpers(self, *, with_config: bool) -> list[Record]:
        data = await self._load_yaml(self.configuration_file)
        if not isinstance(data, dict):
            return []

        records: list[Record] = []
        for platform in HELPER_PLATFORMS:
            section = data.get(platform)
            if not isinstance(section, dict):
                continue
            for object_id, config in section.items():
                cfg = config if isinstance(config, dict) else {}
                records.append(
                    Record(
                        entity_id=f"{platform}.{object_id}",
                        display_name=_string(cfg.get("name")),
                        config=dict(cfg) if with_config else None,
                    )
                )
        return records

    async def _load_views(self) -> list[dict[str, Any]]:
        data = await self._load_yaml(self.dashboard_file)
        if not isinstance(data, dict) or not isinstance(data.get("views"), list):
            return []
        return [view if isinstance(view, dict) else {} for view in data["views"]]

    @staticmethod
    def _unsupported(kind: str, operation: str) -> BackendError:
        if kind == KIND_ENTITY:
            return BackendError("Entity states require a live Home Assistant connection")
        return BackendError(f"Cannot {operation} {kind} records in a config directory")

    # ------------------------------------------------------------------
    # BackendClient
    # ------------------------------------------------------------------

    async def fetch_all(self, kind: RecordKind) -> list[Record]:
        if kind in _LIST_NAME_KEYS:
            items, object_ids = await self._load_list(kind)
            return [
                _list_record(kind, config, object_id, with_config=False)
                for config, object_id in zip(items, object_ids)
                if isinstance(config, dict)
            ]
        if kind == KIND_SCRIPT:
            scripts = await self._load_scripts()
            return [_script_record(str(key), cfg, with_config=False) for key, cfg in scripts.items()]
        if kind == KIND_HELPER:
            return await self._load_helpers(with_config=False)
        if kind == KIND_VIEW:
            views = await self._load_views()
            return [_view_record(view, index, with_config=False) for index, view in enumerate(views)]
        raise self._unsupported(kind, "list")

    async def fetch_one(self, kind: RecordKind, record_id: str) -> Record:
        if kind in _LIST_NAME_KEYS:
            items, object_ids = await self._load_list(kind)
            index = _find_in_list(items, object_ids, kind, record_id)
            if index is not None:
                return _list_record(kind, items[index], object_ids[index], with_config=True)
        elif kind == KIND_SCRIPT:
            script_id = record_id.removeprefix("script.")
            scripts = await self._load_scripts()
            if script_id in scripts:
                return _script_record(script_id, scripts[script_id], with_config=True)
        elif kind == KIND_HELPER:
            for record in await self._load_helpers(with_config=True):
                if record.entity_id == record_id:
                    return record
        elif kind == KIND_VIEW:
            for index, view in enumerate(await self._load_views()):
                if _view_id(view, index) == record_id:
                    return _view_record(view, index, with_config=True)
        else:
            raise self._unsupported(kind, "read")

        raise RecordNotFoundError(f"{kind} not found: {record_id}")

    async def create(self, kind: RecordKind, record_id: str, config: dict[str, Any]) -> None:
        async with self._write_lock:
            if kind in _LIST_NAME_KEYS:
                items, object_ids = await self._load_list(kind)
                if _find_in_list(items, object_ids, kind, record_id) is not None:
                    raise BackendError(f"{kind} already exists: {record_id}")
                bare_id = record_id.removeprefix(f"{kind}.")
                items.append({"id": bare_id, **{k: v for k, v in config.items() if k != "id"}})
                await self._dump_yaml(self._list_file(kind), items)
            elif kind == KIND_SCRIPT:
                scripts = await self._load_scripts()
                script_id = record_id.removeprefix("script.")
                if script_id in scripts:
                    raise BackendError(f"script already exists: {record_id}")
                scripts[script_id] = config
                await self._dump_yaml(self.scripts_file, scripts)
            else:
                raise self._unsupported(kind, "create")

        logger.info("Created %s: %s", kind, record_id)

    async def update(self, kind: RecordKind, record_id: str, config: dict[str, Any]) -> None:
        async with self._write_lock:
            if kind in _LIST_NAME_KEYS:
                items, object_ids = await self._load_list(kind)
                index = _find_in_list(items, object_ids, kind, record_id)
                if index is None:
                    raise RecordNotFoundError(f"{kind} not found: {record_id}")
                stored_id = items[index].get("id", record_id.removeprefix(f"{kind}."))
                items[index] = {"id": stored_id, **{k: v for k, v in config.items() if k != "id"}}
                await self._dump_yaml(self._list_file(kind), items)
            elif kind == KIND_SCRIPT:
                scripts = await self._load_scripts()
                script_id = record_id.removeprefix("script.")
                if script_id not in scripts:
                    raise RecordNotFoundError(f"script not found: {record_id}")
                scripts[script_id] = config
                await self._dump_yaml(self.scripts_file, scripts)
            else:
                raise self._unsupported(kind, "update")

        logger.info("Updated %s: %s", kind, record_id)

    async def delete(self, kind: RecordKind, record_id: str) -> None:
        async with self._write_lock:
            if kind in _LIST_NAME_KEYS:
                items, object_ids = await self._load_list(kind)
                index = _find_in_list(items, object_ids, kind, record_id)
                if index is None:
                    raise RecordNotFoundError(f"{kind} not found: {record_id}")
                del items[index]
                await self._dump_yaml(self._list_file(kind), items)
            elif kind == KIND_SCRIPT:
                scripts = await self._load_scripts()
                script_id = record_id.removeprefix("script.")
                if script_id not in scripts:
                    raise RecordNotFoundError(f"script not found: {record_id}")
                del scripts[script_id]
                await self._dump_yaml(self.scripts_file, scripts)
            else:
                raise self._unsupported(kind, "delete")

        logger.info("Deleted %s: %s", kind, record_id)

    async def call_service(self, domain: str, service: str, data: dict[str, Any]) -> None:
        raise BackendError(
            f"Cannot call {domain}.{service}: service calls require a live Home Assistant connection"
        )
