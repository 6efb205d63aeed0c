from __future__ import annotations

from pathlib import Path

from django.conf import settings

from .base import BaseAssetStore


class LocalAssetStore(BaseAssetStore):
    """Assets read from a build output directory.

    Defaults to STATIC_ROOT when no root is given.
    """

    def __init__(self, root: str | Path | None = None) -> None:
        if root is None:
            root = getattr(settings, "STATIC_ROOT", None)
        if not root:
            raise ValueError("STATIC_ROOT must be configured for LocalAssetStore")
        self.root = Path(root)
        self.base_path = str(self.root)

    def _get_full_path(self, name: str) -> Path:
        full_path = (self.root / name).resolve()
        root_resolved = self.root.resolve()
        if not full_path.is_relative_to(root_resolved):
            raise ValueError(
                f"Path traversal detected: {name!r} resolves outside {self.root}"
            )
        return full_path

    def read(self, name: str) -> bytes:
        return self._get_full_path(name).read_bytes()

    def exists(self, name: str) -> bool:
        try:
            return self._get_full_path(name).is_file()
        except ValueError:
            return False
