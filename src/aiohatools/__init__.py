"""aiohatools: async tool catalogue for managing Home Assistant from LLM agents."""

from ._version import __version__
from .backends import BackendClient, ConfigDirectoryBackend
from .exceptions import (
    BackendError,
    DuplicateToolError,
    FileError,
    HaToolsError,
    PathSecurityError,
    RecordNotFoundError,
    ToolArgumentError,
    ToolError,
    YAMLParseError,
)
from .models import (
    AutomationConfig,
    FilterCriteria,
    ListingKind,
    Record,
    SceneConfig,
    ScriptConfig,
    ServiceCallSpec,
    ToolCallResult,
    ToolDefinition,
)
from .platforms import HELPER_PLATFORMS, parse_helper_entity_id
from .query import QueryEngine, QueryResult
from .registry import ToolRegistry
from .slug import slugify
from .tools import build_registry

__all__ = [
    "HELPER_PLATFORMS",
    "AutomationConfig",
    "BackendClient",
    "BackendError",
    "ConfigDirectoryBackend",
    "DuplicateToolError",
    "FileError",
    "FilterCriteria",
    "HaToolsError",
    "ListingKind",
    "PathSecurityError",
    "QueryEngine",
    "QueryResult",
    "Record",
    "RecordNotFoundError",
    "SceneConfig",
    "ScriptConfig",
    "ServiceCallSpec",
    "ToolArgumentError",
    "ToolCallResult",
    "ToolDefinition",
    "ToolError",
    "ToolRegistry",
    "YAMLParseError",
    "__version__",
    "build_registry",
    "parse_helper_entity_id",
    "slugify",
]
