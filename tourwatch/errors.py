"""Error types surfaced as the run's fatal message."""

from __future__ import annotations


class TourwatchError(Exception):
    """Base class for every failure that aborts a run."""


class ConfigError(TourwatchError):
    """Invalid or missing configuration (inputs or tourwatch.yml)."""


class MissingContextError(TourwatchError):
    """Not invoked from a pull-request event."""


class DirectoryReadError(TourwatchError):
    """A tour directory could not be listed."""

    def __init__(self, path: str, cause: BaseException | None = None):
        message = f"Could not read tour directory '{path}'"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
        self.path = path


class LoadError(TourwatchError):
    """A tour document could not be read or parsed."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Could not load tour '{path}': {reason}")
        self.path = path
        self.reason = reason


class ApiError(TourwatchError):
    """Error from the GitHub API."""
    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class RateLimitError(ApiError):
    """Rate limit exceeded."""
    def __init__(self, reset_time: int | None = None):
        super().__init__("GitHub API rate limit exceeded", 403)
        self.reset_time = reset_time
