class RenderError(ValueError):
    """Base class for rendering contract violations."""


class UnsupportedCategoryClassError(RenderError):
    """Raised when a structured document is requested for an unknown category class."""
