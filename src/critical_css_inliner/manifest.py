"""Collect the stylesheet manifest of a generated HTML document."""

from __future__ import annotations

import json
import posixpath
from collections.abc import Iterable
from html.parser import HTMLParser
from urllib.parse import urlsplit


class StylesheetCollector(HTMLParser):
    """HTML parser that collects ``<link rel="stylesheet">`` hrefs in order.

    Respects the ``data-no-critical`` attribute: links with this attribute
    are left out of the manifest.
    """

    def __init__(self) -> None:
        super().__init__()
        self._hrefs: list[str] = []

    @property
    def hrefs(self) -> list[str]:
        return list(self._hrefs)

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        if tag != "link":
            return

        attr_dict = dict(attrs)
        if "data-no-critical" in attr_dict:
            return

        rel = (attr_dict.get("rel") or "").lower().split()
        href = (attr_dict.get("href") or "").strip()
        if "stylesheet" in rel and href and href not in self._hrefs:
            self._hrefs.append(href)


def collect_stylesheets(html: str) -> list[str]:
    """Return stylesheet hrefs referenced by ``html``, in document order."""
    collector = StylesheetCollector()
    collector.feed(html)
    collector.close()
    return collector.hrefs


def href_to_asset_name(
    href: str, static_url: str = "/", document_dir: str = ""
) -> str | None:
    """Map a stylesheet href to a build asset name.

    Relative hrefs are resolved against ``document_dir``, the directory of
    the HTML output inside the build. Returns None for hrefs on another
    host or outside the build.
    """
    parts = urlsplit(href)
    if parts.scheme or parts.netloc:
        static_parts = urlsplit(static_url)
        if parts.netloc != static_parts.netloc:
            return None
    path = parts.path
    prefix = urlsplit(static_url).path or "/"
    if not prefix.endswith("/"):
        prefix += "/"

    if path.startswith(prefix):
        return path[len(prefix) :] or None
    if path and not path.startswith("/"):
        name = posixpath.normpath(posixpath.join(document_dir, path))
        if name == ".." or name.startswith("../"):
            return None
        return name
    return None


def build_asset_manifest(
    html: str, static_url: str = "/", document_path: str = ""
) -> list[str]:
    """Asset names for the stylesheets ``html`` links to, in document order."""
    document_dir = posixpath.dirname(document_path)
    names = []
    for href in collect_stylesheets(html):
        name = href_to_asset_name(href, static_url, document_dir)
        if name is not None:
            names.append(name)
    return names


def encode_manifest(names: Iterable[str]) -> str:
    """Encode asset names as the JSON list carried by an HTML event."""
    return json.dumps(list(names))
