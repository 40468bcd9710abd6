"""
Exceptions raised by machi.

Running out of entries is not an error: ``execute`` returns ``None`` for that.
Everything here points at a mistake in how a flow was authored or rendered.
"""


class MachiError(Exception):
    """Base class for all machi errors."""


class UnknownConditionError(MachiError, KeyError):
    """A named condition is not present in the conditions map."""

    def __init__(self, key: str, where: str | None = None):
        self.key = key
        self.where = where
        message = f"Unknown condition {key!r}"
        if where:
            message += f" referenced by {where!r}"
        super().__init__(message)

    def __str__(self) -> str:
        # KeyError quotes its argument, keep the message readable
        return self.args[0]


class MalformedTreeError(MachiError, ValueError):
    """The tree cannot be normalized, e.g. a fork without children."""


class ChartRenderError(MachiError, RuntimeError):
    """The mermaid CLI could not render a chart."""
