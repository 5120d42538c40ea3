"""Backend collaborators serving Home Assistant records."""

from .base import (
    KIND_AUTOMATION,
    KIND_ENTITY,
    KIND_HELPER,
    KIND_SCENE,
    KIND_SCRIPT,
    KIND_VIEW,
    BackendClient,
    RecordKind,
)
from .config_dir import ConfigDirectoryBackend, count_cards_in_view

__all__ = [
    "KIND_AUTOMATION",
    "KIND_ENTITY",
    "KIND_HELPER",
    "KIND_SCENE",
    "KIND_SCRIPT",
    "KIND_VIEW",
    "BackendClient",
    "ConfigDirectoryBackend",
    "RecordKind",
    "count_cards_in_view",
]
