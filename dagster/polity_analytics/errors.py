"""
Error taxonomy for the polity analytics pipeline.

Fetch and normalization errors are fatal for a run. UnresolvedEntityError is
raised per membership row and handled by dropping that row.
"""


class PipelineError(Exception):
    """Base class for all pipeline errors."""


class FetchError(PipelineError):
    """Raised when a remote resource cannot be retrieved (network error or non-2xx)."""


class SelectorNotFoundError(FetchError):
    """Raised when a structural query matches no element, usually upstream layout drift."""

    def __init__(self, selector: str, url: str):
        self.selector = selector
        self.url = url
        super().__init__(f"Selector '{selector}' matched nothing on {url}")


class ParseError(PipelineError):
    """Raised when downloaded bytes or a table do not match the expected format."""


class TypeCoercionError(PipelineError):
    """Raised when a cell cannot be coerced to its declared type."""

    def __init__(self, column: str, values: list):
        self.column = column
        self.values = values
        preview = ", ".join(repr(v) for v in values[:5])
        super().__init__(f"Column '{column}' has values not coercible to integer: {preview}")


class UnresolvedEntityError(PipelineError):
    """Raised when a country name cannot be resolved to a numeric code."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"No country code found for '{name}'")
