"""Tests for asset stores."""

from unittest import mock

import pytest

from critical_css_inliner.storage.local import LocalAssetStore
from critical_css_inliner.storage.memory import MemoryAssetStore
from critical_css_inliner.storage.staticfiles import StaticFilesAssetStore


class TestLocalAssetStore:
    def test_read_existing_file(self, tmp_path):
        """Read an asset from the build directory.

        Purpose: Verify LocalAssetStore.read() returns raw bytes.
        Category: Normal case
        Target: LocalAssetStore.read(name)
        Technique: Equivalence partitioning
        Test data: css/site.css under tmp_path
        """
        (tmp_path / "css").mkdir()
        (tmp_path / "css" / "site.css").write_bytes(b"h1 { color: red; }")
        store = LocalAssetStore(tmp_path)

        assert store.read("css/site.css") == b"h1 { color: red; }"
        assert store.exists("css/site.css") is True
        assert store.base_path == str(tmp_path)

    def test_read_missing_file_raises(self, tmp_path):
        """Missing assets raise FileNotFoundError.

        Purpose: Verify missing assets are reported to the caller.
        Category: Error case
        Target: LocalAssetStore.read(name)
        Technique: Error guessing
        Test data: Non-existent name
        """
        store = LocalAssetStore(tmp_path)

        with pytest.raises(FileNotFoundError):
            store.read("missing.css")
        assert store.exists("missing.css") is False

    def test_path_traversal_rejected(self, tmp_path):
        """Names resolving outside the root are rejected.

        Purpose: Verify assets cannot be read from outside the build.
        Category: Error case
        Target: LocalAssetStore.read(name)
        Technique: Error guessing
        Test data: "../secret.css"
        """
        (tmp_path / "build").mkdir()
        (tmp_path / "secret.css").write_text("x")
        store = LocalAssetStore(tmp_path / "build")

        with pytest.raises(ValueError, match="Path traversal"):
            store.read("../secret.css")
        assert store.exists("../secret.css") is False

    def test_defaults_to_static_root(self, settings, tmp_path):
        """Without a root, STATIC_ROOT is used.

        Purpose: Verify the Django settings fallback.
        Category: Normal case
        Target: LocalAssetStore()
        Technique: Equivalence partitioning
        Test data: STATIC_ROOT set to tmp_path
        """
        settings.STATIC_ROOT = str(tmp_path)

        assert LocalAssetStore().root == tmp_path

    def test_missing_static_root_raises(self, settings):
        """Without a root or STATIC_ROOT, construction fails.

        Purpose: Verify misconfiguration is reported early.
        Category: Error case
        Target: LocalAssetStore()
        Technique: Error guessing
        Test data: STATIC_ROOT=None
        """
        settings.STATIC_ROOT = None

        with pytest.raises(ValueError, match="STATIC_ROOT"):
            LocalAssetStore()


class TestMemoryAssetStore:
    def test_read_and_exists(self):
        """Strings are stored as UTF-8 bytes; bytes are kept as-is.

        Purpose: Verify the in-memory store.
        Category: Normal case
        Target: MemoryAssetStore.read(name), MemoryAssetStore.exists(name)
        Technique: Equivalence partitioning
        Test data: One str and one bytes asset
        """
        store = MemoryAssetStore({"a.css": "a{}", "b.css": b"b{}"}, base_path="/b")

        assert store.read("a.css") == b"a{}"
        assert store.read("b.css") == b"b{}"
        assert store.exists("a.css") is True
        assert store.base_path == "/b"

    def test_missing_asset_raises_file_not_found(self):
        """Missing names raise FileNotFoundError like the file stores.

        Purpose: Verify a uniform error across stores.
        Category: Error case
        Target: MemoryAssetStore.read(name)
        Technique: Error guessing
        Test data: Empty store
        """
        store = MemoryAssetStore({})

        with pytest.raises(FileNotFoundError):
            store.read("a.css")
        assert store.exists("a.css") is False


class TestStaticFilesAssetStore:
    def test_read_uses_staticfiles_storage(self):
        """Assets are read through staticfiles_storage.

        Purpose: Verify StaticFilesAssetStore delegates to Django storage.
        Category: Normal case
        Target: StaticFilesAssetStore.read(name)
        Technique: Statement coverage (C0)
        Test data: Mocked storage returning bytes
        """
        store = StaticFilesAssetStore()

        with mock.patch(
            "critical_css_inliner.storage.staticfiles.staticfiles_storage"
        ) as mock_storage:
            mock_storage.open.return_value.__enter__.return_value.read.return_value = b"a{}"
            mock_storage.exists.return_value = True

            assert store.read("css/a.css") == b"a{}"
            assert store.exists("css/a.css") is True

        mock_storage.open.assert_called_once_with("css/a.css", "rb")
