"""Exception hierarchy for aiohatools."""


class HaToolsError(Exception):
    """Base exception for all aiohatools errors."""


class ToolError(HaToolsError):
    """Error raised while registering or invoking a tool."""


class DuplicateToolError(ToolError):
    """A tool with the same name is already registered."""


class ToolArgumentError(ToolError):
    """A tool was invoked with missing or malformed arguments."""


class BackendError(HaToolsError):
    """Error reported by the backend collaborator."""


class RecordNotFoundError(BackendError):
    """The requested record does not exist in the backend."""


class FileError(BackendError):
    """Error during a configuration file operation."""


class PathSecurityError(FileError):
    """A requested path resolved outside the allowed config directory."""


class YAMLParseError(FileError):
    """Failed to parse a YAML file."""
