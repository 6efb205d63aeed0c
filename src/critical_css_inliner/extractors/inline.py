"""Extractor that inlines every stylesheet without rendering the page."""

from __future__ import annotations

import logging
from html.parser import HTMLParser
from typing import Any
from urllib.parse import urlsplit

from ..files import UniformFile
from .base import BaseCriticalExtractor

logger = logging.getLogger(__name__)

PRELOAD_ONLOAD = "this.onload=null;this.rel='stylesheet'"


class InlineAllExtractor(BaseCriticalExtractor):
    """Inline all supplied CSS into ``<head>`` and defer the original links.

    No above-the-fold analysis is done: the full stylesheets are treated as
    critical. Useful for small sites and for environments without Node.js.

    With ``inline`` disabled the concatenated CSS is returned instead of the
    rewritten HTML.
    """

    async def generate(self, options: dict[str, Any]) -> str:
        css_files = [_as_uniform_file(f) for f in options.get("css", [])]
        css = "\n".join(f.text() for f in css_files).strip()

        if options.get("minify"):
            css = _minify_css(css)

        if not options.get("inline", True):
            return css

        html: str = options.get("html", "")
        names = {f.relative for f in css_files}
        html = _defer_stylesheets(html, names)

        if not css:
            return html

        style_tag = f"<style>{css}</style>"
        if "</head>" in html:
            return html.replace("</head>", f"{style_tag}\n</head>", 1)
        return f"{style_tag}\n{html}"


def _as_uniform_file(css_file: Any) -> UniformFile:
    if isinstance(css_file, UniformFile):
        return css_file
    return UniformFile(
        cwd=css_file.cwd,
        base=css_file.base,
        path=css_file.path,
        contents=bytes(css_file.contents),
    )


def _minify_css(content: str) -> str:
    """Minify CSS content using rcssmin.

    Falls back gracefully if rcssmin is not installed.
    """
    try:
        import rcssmin  # type: ignore[import-not-found, import-untyped]

        return rcssmin.cssmin(content)  # type: ignore[no-any-return]
    except ImportError:
        logger.warning("rcssmin is not installed. CSS minification skipped.")
        return content


def _escape_attr(value: str) -> str:
    """Escape a string for safe use in an HTML attribute."""
    return (
        value.replace("&", "&amp;")
        .replace('"', "&quot;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
    )


def _deferred_link(href: str) -> str:
    href = _escape_attr(href)
    return (
        f'<link rel="preload" href="{href}" as="style" onload="{PRELOAD_ONLOAD}">'
        f'<noscript><link rel="stylesheet" href="{href}"></noscript>'
    )


class _StylesheetDeferrer(HTMLParser):
    """HTML parser that rewrites matching stylesheet links to preloads.

    Everything else is re-emitted as it appeared in the source.
    """

    def __init__(self, names: set[str]) -> None:
        super().__init__(convert_charrefs=False)
        self._names = names
        self._output: list[str] = []

    def get_output(self) -> str:
        return "".join(self._output)

    def _matches(self, href: str) -> bool:
        path = urlsplit(href).path
        return any(name and path.endswith(name) for name in self._names)

    def _handle_tag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        raw = self.get_starttag_text() or ""
        if tag == "link":
            attr_dict = dict(attrs)
            rel = (attr_dict.get("rel") or "").lower().split()
            href = attr_dict.get("href") or ""
            if "stylesheet" in rel and href and self._matches(href):
                self._output.append(_deferred_link(href))
                return
        self._output.append(raw)

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        self._handle_tag(tag, attrs)

    def handle_startendtag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        self._handle_tag(tag, attrs)

    def handle_endtag(self, tag: str) -> None:
        self._output.append(f"</{tag}>")

    def handle_data(self, data: str) -> None:
        self._output.append(data)

    def handle_entityref(self, name: str) -> None:
        self._output.append(f"&{name};")

    def handle_charref(self, name: str) -> None:
        self._output.append(f"&#{name};")

    def handle_comment(self, data: str) -> None:
        self._output.append(f"<!--{data}-->")

    def handle_decl(self, decl: str) -> None:
        self._output.append(f"<!{decl}>")

    def handle_pi(self, data: str) -> None:
        self._output.append(f"<?{data}>")

    def unknown_decl(self, data: str) -> None:
        self._output.append(f"<![{data}]>")


def _defer_stylesheets(html: str, names: set[str]) -> str:
    """Replace ``<link rel="stylesheet">`` tags for ``names`` with preloads."""
    if not names:
        return html
    deferrer = _StylesheetDeferrer(names)
    deferrer.feed(html)
    deferrer.close()
    return deferrer.get_output()
