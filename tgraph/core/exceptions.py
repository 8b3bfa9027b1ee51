"""Custom exceptions for the application."""


class TGraphError(Exception):
    """Base class for tgraph errors."""

    pass


class SessionStateError(TGraphError):
    """Raised when a session operation is invalid in the current state."""

    pass


class ResolutionError(TGraphError):
    """Raised when a requested resolution is non-numeric or out of range."""

    def __init__(self, message: str, value=None) -> None:
        super().__init__(message)
        self.value = value


class RenderSurfaceError(TGraphError):
    """Raised when no usable output surface is available for rendering."""

    pass


class SourceError(TGraphError):
    """Raised when the metric source file exists but cannot be read."""

    pass
