from __future__ import annotations

from django.contrib.staticfiles.storage import staticfiles_storage

from .base import BaseAssetStore


class StaticFilesAssetStore(BaseAssetStore):
    """Asset store backed by Django's staticfiles storage.

    Works with any staticfiles backend (ManifestStaticFilesStorage,
    S3 via django-storages, etc.)
    """

    def read(self, name: str) -> bytes:
        with staticfiles_storage.open(name, "rb") as f:
            return f.read()  # type: ignore[no-any-return]

    def exists(self, name: str) -> bool:
        return staticfiles_storage.exists(name)
