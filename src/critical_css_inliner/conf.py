"""Configuration and settings for critical-css-inliner."""

from importlib import import_module
from typing import Any

from django.conf import settings

DEFAULTS: dict[str, Any] = {
    # Plugin options: html / css / custom / extraction (or criticalOptions)
    "OPTIONS": {},
    # Collaborators
    "EXTRACTOR": "critical_css_inliner.extractors.critical_cli.CriticalCLIExtractor",
    "ASSET_STORE": "critical_css_inliner.storage.local.LocalAssetStore",
    # critical CLI settings
    "CRITICAL_CLI_PATH": None,
    "CRITICAL_TIMEOUT": 60,
    # inline_critical_css command
    "BUILD_CONCURRENCY": 4,
}


_UNSET = object()


def get_setting(key: str, default: Any = _UNSET) -> Any:
    """Get a setting from CRITICAL_CSS_INLINER dict or return default."""
    user_settings: dict[str, Any] = getattr(settings, "CRITICAL_CSS_INLINER", {})
    fallback = DEFAULTS.get(key) if default is _UNSET else default
    return user_settings.get(key, fallback)


def import_class(dotted_path: str) -> type:
    """Import a class from a dotted path string."""
    module_path, class_name = dotted_path.rsplit(".", 1)
    module = import_module(module_path)
    return getattr(module, class_name)  # type: ignore[no-any-return]
