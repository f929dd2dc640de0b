"""Domain exceptions for nextstrain_sources.

All library errors inherit from SourcesError, allowing callers to catch
any library exception with a single except clause. Each exception provides
a recovery_hint property with guidance on resolving the error.
"""

from __future__ import annotations

from collections.abc import Sequence


class SourcesError(Exception):
    """Base class for all nextstrain_sources exceptions.

    Catch this to handle any error from the library.
    """

    @property
    def recovery_hint(self) -> str | None:
        """Optional guidance on how to resolve this error."""
        return None


class ConstructionError(SourcesError):
    """Raised when a Resource or Subresource cannot be built.

    The caller must supply a more specific request.
    """

    pass


class NoResourcePathError(ConstructionError):
    """Raised when a Resource has no canonical path parts.

    Attributes:
        source_name: Name of the source the resource was requested from.
    """

    def __init__(self, source_name: str) -> None:
        self.source_name = source_name
        super().__init__(f"No dataset or narrative path given for source '{source_name}'")

    @property
    def recovery_hint(self) -> str:
        """Suggest a more specific path."""
        return "Request a dataset or narrative path, not the bare source"


class InvalidSubresourceError(ConstructionError):
    """Raised when a Subresource type is not valid for its resource kind.

    Attributes:
        type: The rejected subresource type.
        valid_types: Types accepted for the resource kind.
    """

    def __init__(self, type: str, valid_types: Sequence[str]) -> None:
        self.type = type
        self.valid_types = tuple(valid_types)
        super().__init__(f"Invalid subresource type: {type}")

    @property
    def recovery_hint(self) -> str:
        """List the accepted types."""
        return f"Valid types: {', '.join(self.valid_types)}"


class ConfigurationError(SourcesError):
    """Raised for source configuration problems (missing required settings)."""

    pass


class UnknownSourceError(SourcesError):
    """Raised when a requested source name isn't registered.

    Attributes:
        name: The source name that was not found.
        available: Registered source names.
    """

    def __init__(self, name: str, available: list[str] | None = None) -> None:
        self.name = name
        self.available = available if available is not None else []
        super().__init__(f"Source '{name}' not found")

    @property
    def recovery_hint(self) -> str:
        """Suggest registered sources."""
        if self.available:
            return f"Available sources: {', '.join(self.available)}"
        return "Check registry.names() for available sources"


class BackendError(SourcesError):
    """Base class for backend interaction errors.

    Attributes:
        location: The URL, bucket or repository that caused the error.
        cause: The underlying exception, if any.
    """

    def __init__(
        self,
        message: str,
        location: str,
        cause: Exception | None = None,
    ) -> None:
        self.location = location
        self.cause = cause
        super().__init__(message)


class NotFoundError(BackendError):
    """Raised when an upstream repository or collection doesn't exist at all."""

    @property
    def recovery_hint(self) -> str:
        """Suggest verifying the location."""
        return f"Verify that {self.location} exists and is accessible"


class OverviewError(SourcesError):
    """Raised when a group overview document is malformed."""

    pass


class AccessDeniedError(SourcesError):
    """Raised when a principal may not see a source.

    Attributes:
        source_name: Name of the source that was hidden.
    """

    def __init__(self, source_name: str) -> None:
        self.source_name = source_name
        super().__init__(f"Access to source '{source_name}' denied")

    @property
    def recovery_hint(self) -> str:
        """Suggest checking group membership."""
        return f"Log in as a member of the '{self.source_name}' group"
