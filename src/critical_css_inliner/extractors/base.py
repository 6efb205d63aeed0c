"""Base class for critical CSS extractors."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class BaseCriticalExtractor(ABC):
    """Abstract base class for critical CSS extractors.

    Extractors receive the page HTML and its stylesheets and return the HTML
    with critical CSS inlined.
    """

    @abstractmethod
    async def generate(self, options: dict[str, Any]) -> str | bytes:
        """Generate critical CSS for one HTML document.

        Args:
            options: Extraction options. Always contains ``html`` (the page
                source) and ``css`` (a list of UniformFile); every other key
                is passed through from the configured extraction options
                (``inline``, ``minify``, ``base``, ...).

        Returns:
            The rewritten HTML, as a string or as a UTF-8 byte buffer.

        Raises:
            ExtractorError: If extraction fails.
        """
        ...
