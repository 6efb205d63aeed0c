from __future__ import annotations

from abc import ABC, abstractmethod


class BaseAssetStore(ABC):
    """Abstract base class for build asset stores.

    Asset stores give read-only access to the files a build produced,
    looked up by the asset names listed in an HTML output's manifest.
    """

    #: Base path used for the virtual files handed to the extractor.
    base_path: str = ""

    @abstractmethod
    def read(self, name: str) -> bytes:
        """Return the raw contents of an asset.

        Args:
            name: The asset name (e.g., "css/site.css")

        Returns:
            The asset bytes

        Raises:
            FileNotFoundError: If the asset does not exist
        """
        ...

    @abstractmethod
    def exists(self, name: str) -> bool:
        """Check if an asset exists in the store.

        Args:
            name: The asset name to check

        Returns:
            True if the asset exists
        """
        ...
