"""Contract between the tool handlers and the Home Assistant backend."""

from __future__ import annotations

from typing import Any, Literal, Protocol

from ..models.records import Record

RecordKind = Literal["automation", "script", "scene", "entity", "helper", "view"]

KIND_AUTOMATION: RecordKind = "automation"
KIND_SCRIPT: RecordKind = "script"
KIND_SCENE: RecordKind = "scene"
KIND_ENTITY: RecordKind = "entity"
KIND_HELPER: RecordKind = "helper"
KIND_VIEW: RecordKind = "view"


class BackendClient(Protocol):
    """Async collaborator that owns all backend I/O.

    ``record_id`` is the record's ``entity_id``; implementations may also
    accept bare object ids. Timeouts and retries belong to the
    implementation.
    """

    async def fetch_all(self, kind: RecordKind) -> list[Record]:
        """Return summaries for every record of *kind*."""
        ...

    async def fetch_one(self, kind: RecordKind, record_id: str) -> Record:
        """Return one record including its ``config``.

        Raises :class:`~aiohatools.exceptions.RecordNotFoundError` when absent.
        """
        ...

    async def create(self, kind: RecordKind, record_id: str, config: dict[str, Any]) -> None: ...

    async def update(self, kind: RecordKind, record_id: str, config: dict[str, Any]) -> None: ...

    async def delete(self, kind: RecordKind, record_id: str) -> None: ...

    async def call_service(self, domain: str, service: str, data: dict[str, Any]) -> None: ...
