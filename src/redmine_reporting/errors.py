from __future__ import annotations


class RedmineReportingError(Exception):
    """Base class for everything this package raises on purpose."""


class ConfigurationError(RedmineReportingError):
    """A required setting is missing. Raised before any request goes out."""


class UpstreamError(RedmineReportingError):
    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class UpstreamListError(UpstreamError):
    """The paginated /issues.json listing failed. Fatal for the whole lookup."""


class UpstreamDetailError(UpstreamError):
    """A single /issues/{id}.json call failed. The issue is dropped, the lookup goes on."""


class UpstreamUserError(UpstreamError):
    """A single /users/{id}.json call failed."""


__all__ = [
    "RedmineReportingError",
    "ConfigurationError",
    "UpstreamError",
    "UpstreamListError",
    "UpstreamDetailError",
    "UpstreamUserError",
]
