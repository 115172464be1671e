"""Error taxonomy for the conversion pipeline.

Everything the pipeline controller treats as a terminal run failure derives
from ``ConversionError``.  ``ValidationParseError`` is the one subclass that is
recoverable: the validate-repair loop absorbs it and drives another attempt.
``FieldCoercionFallback`` is an event, not an exception.
"""

from dataclasses import dataclass
from typing import Any


class ConversionError(Exception):
    """Base class for every failure the pipeline knows how to classify."""


class MissingInput(ConversionError):
    """A stage was entered without the data it requires."""


class InsufficientData(ConversionError):
    """The intermediate CSV does not contain a header and at least one data row."""


class TransformationFailure(ConversionError):
    """An external generative call errored, timed out, or returned nothing."""


class ValidationParseError(ConversionError):
    """A repair response did not parse as a JSON object."""


class ValidationExhausted(ConversionError):
    """Every repair attempt failed to produce parseable JSON."""

    def __init__(self, last_error: Exception | None, attempts: int):
        self.last_error = last_error
        self.attempts = attempts
        super().__init__(f"Failed to validate Excalidraw JSON after {attempts} attempts. Last error: {last_error}")


@dataclass(frozen=True)
class FieldCoercionFallback:
    """A fallback default was substituted for one cell while parsing a row."""

    field: str
    raw: str
    fallback: Any
    reason: str
