from __future__ import annotations

from collections.abc import Mapping

from .base import BaseAssetStore


class MemoryAssetStore(BaseAssetStore):
    """In-process asset store for programmatic builds."""

    def __init__(self, assets: Mapping[str, bytes | str], base_path: str = "") -> None:
        self._assets = {
            name: content.encode("utf-8") if isinstance(content, str) else bytes(content)
            for name, content in assets.items()
        }
        self.base_path = base_path

    def read(self, name: str) -> bytes:
        try:
            return self._assets[name]
        except KeyError:
            raise FileNotFoundError(name) from None

    def exists(self, name: str) -> bool:
        return name in self._assets
