"""Exceptions raised by critical-css-inliner."""

from __future__ import annotations


class CriticalCSSError(Exception):
    """Base class for all critical-css-inliner errors."""


class ConfigurationError(CriticalCSSError):
    """A filter or option value has an unusable shape.

    Raised while normalizing options and recovered by the caller, which
    falls back to the least permissive interpretation.
    """


class ExtractionFailure(CriticalCSSError):
    """The extraction collaborator failed for a single HTML output."""

    def __init__(self, output_name: str, message: str) -> None:
        super().__init__(f"Critical CSS extraction failed for {output_name!r}: {message}")
        self.output_name = output_name


class ResultDecodingError(CriticalCSSError):
    """The extraction result is neither a string nor a byte buffer, or is not valid UTF-8."""


class ExtractorError(CriticalCSSError):
    """An extraction collaborator could not produce a result."""
