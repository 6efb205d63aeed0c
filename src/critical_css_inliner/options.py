"""Resolve user options over the built-in defaults.

Options arrive as one mapping with the top-level keys ``html``, ``css``,
``custom`` and ``extraction`` (``criticalOptions`` is accepted as an alias
of ``extraction``). Each field is resolved on its own:

- ``html`` / ``css``: ``{"include": ..., "exclude": ...}`` filters, merged
  key by key over the defaults.
- ``custom``: named rules, each a filter plus extraction overrides applied
  to the HTML outputs it admits. Not merged with anything.
- ``extraction``: options forwarded verbatim to the extraction
  collaborator, deep-merged over the defaults.

Lists and patterns are always replaced wholesale, never concatenated.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from .matching import MatchFilter, as_filter, matches

logger = logging.getLogger(__name__)

DEFAULT_OPTIONS: dict[str, Any] = {
    "html": {"include": r"\.html?$", "exclude": False},
    "css": {"include": r"\.css$", "exclude": False},
    "custom": {},
    "extraction": {"inline": True, "minify": False},
}

EXTRACTION_KEY_ALIASES = ("extraction", "criticalOptions", "critical_options")

_KNOWN_KEYS = frozenset({"html", "css", "custom", *EXTRACTION_KEY_ALIASES})


@dataclass(frozen=True)
class CustomRule:
    """Extraction overrides for HTML outputs admitted by ``filter``."""

    filter: MatchFilter
    extraction: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))


@dataclass(frozen=True)
class ResolvedConfig:
    html: MatchFilter
    css: MatchFilter
    custom: Mapping[str, CustomRule]
    extraction: Mapping[str, Any]

    def extraction_options_for(self, output_name: str) -> dict[str, Any]:
        """Base extraction options with matching custom overrides applied in order."""
        options = dict(self.extraction)
        for rule in self.custom.values():
            if matches(output_name, rule.filter):
                options = deep_merge(rule.extraction, options)
        return options


def deep_merge(user: Mapping[str, Any], defaults: Mapping[str, Any]) -> dict[str, Any]:
    """Merge ``user`` over ``defaults``.

    Nested mappings present on both sides are merged recursively. Otherwise
    the user value wins when present (``None`` counts as absent) and the
    default fills the gap.
    """
    merged: dict[str, Any] = {}
    for key in (*defaults.keys(), *(k for k in user.keys() if k not in defaults)):
        user_value = user.get(key)
        default_value = defaults.get(key)
        if isinstance(user_value, Mapping) and isinstance(default_value, Mapping):
            merged[key] = deep_merge(user_value, default_value)
        elif user_value is not None:
            merged[key] = user_value
        else:
            merged[key] = default_value
    return merged


def _user_extraction(user_options: Mapping[str, Any]) -> Mapping[str, Any]:
    for key in EXTRACTION_KEY_ALIASES:
        value = user_options.get(key)
        if isinstance(value, Mapping):
            return value
    return {}


def _resolve_filter(user_options: Mapping[str, Any], key: str) -> MatchFilter:
    user_value = user_options.get(key)
    if not isinstance(user_value, Mapping):
        user_value = {}
    return as_filter(deep_merge(user_value, DEFAULT_OPTIONS[key]))


def _resolve_extraction(user_options: Mapping[str, Any]) -> Mapping[str, Any]:
    merged = deep_merge(_user_extraction(user_options), DEFAULT_OPTIONS["extraction"])
    return MappingProxyType(merged)


def _resolve_custom(user_options: Mapping[str, Any]) -> Mapping[str, CustomRule]:
    raw_rules = user_options.get("custom")
    if not isinstance(raw_rules, Mapping):
        return MappingProxyType({})

    rules: dict[str, CustomRule] = {}
    for name, raw_rule in raw_rules.items():
        if not isinstance(raw_rule, Mapping):
            continue
        rules[name] = CustomRule(
            filter=as_filter(raw_rule),
            extraction=MappingProxyType(dict(_user_extraction(raw_rule))),
        )
    return MappingProxyType(rules)


def resolve_options(user_options: Mapping[str, Any] | None = None) -> ResolvedConfig:
    """Build the immutable configuration for one orchestrator instance."""
    if user_options is None:
        user_options = {}
    elif not isinstance(user_options, Mapping):
        logger.warning("Invalid options %r, using the defaults", user_options)
        user_options = {}

    unknown = sorted(str(k) for k in user_options if k not in _KNOWN_KEYS)
    if unknown:
        logger.warning("Ignoring unknown option(s): %s", ", ".join(unknown))

    return ResolvedConfig(
        html=_resolve_filter(user_options, "html"),
        css=_resolve_filter(user_options, "css"),
        custom=_resolve_custom(user_options),
        extraction=_resolve_extraction(user_options),
    )
