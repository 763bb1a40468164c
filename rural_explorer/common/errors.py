"""Domain errors and failure typing."""


class PipelineError(Exception):
    """Base class for dashboard pipeline failures."""

    error_code = "PIPELINE_ERROR"


class ConfigError(PipelineError):
    """Raised for invalid or missing configuration."""

    error_code = "CONFIG_ERROR"


class SourceError(PipelineError):
    """Raised when the listings source cannot be retrieved or read."""

    error_code = "SOURCE_ERROR"


class SourceNotFoundError(SourceError):
    """Raised when no candidate location holds the requested snapshot."""

    error_code = "SOURCE_NOT_FOUND"

    def __init__(self, snapshot: str, tried: list[str]) -> None:
        self.snapshot = snapshot
        self.tried = list(tried)
        super().__init__(f'"{snapshot}.xlsx" not found. Tried: {", ".join(self.tried)}')


class WorkbookError(SourceError):
    """Raised when a workbook is corrupt or has no readable sheet."""

    error_code = "WORKBOOK_ERROR"


class StateError(PipelineError):
    """Raised for invalid dashboard state transitions."""

    error_code = "STATE_ERROR"


class StaleLoadError(StateError):
    """Raised when an older load tries to replace a newer snapshot."""

    error_code = "STALE_LOAD"


class LifecycleError(StateError):
    """Raised when a collaborator never reaches the ready state."""

    error_code = "LIFECYCLE_ERROR"
