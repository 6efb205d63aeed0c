"""Critical CSS orchestration for HTML-emission events.

Pipeline per event: Filter -> Collect -> Extract -> Reconcile -> Continue
"""

from __future__ import annotations

import enum
import inspect
import logging
from collections.abc import Iterable, Mapping
from typing import Any

from .conf import get_setting, import_class
from .exceptions import ExtractionFailure, ResultDecodingError
from .extractors.base import BaseCriticalExtractor
from .files import is_uniform, wrap_asset
from .matching import MatchFilter, matches
from .options import ResolvedConfig, resolve_options
from .pipeline import AssetSource, Callback, EventResult, HTMLEventPayload, Outcome

logger = logging.getLogger(__name__)


class State(enum.Enum):
    IDLE = "idle"
    FILTERING = "filtering"
    EXTRACTING = "extracting"
    RECONCILING = "reconciling"


class CriticalCSSOrchestrator:
    """Inline critical CSS into each HTML output the host pipeline emits.

    Options are resolved once, at construction, and only read afterwards,
    so one instance can serve concurrent events for different outputs.
    """

    def __init__(
        self,
        options: Mapping[str, Any] | None = None,
        extractor: BaseCriticalExtractor | None = None,
    ) -> None:
        if options is None:
            options = get_setting("OPTIONS")
        self.config: ResolvedConfig = resolve_options(options)
        self.extractor = extractor if extractor is not None else get_extractor()

    async def on_html_emitted(
        self,
        payload: HTMLEventPayload,
        asset_store: AssetSource,
        callback: Callback | None = None,
        manifest: Iterable[Any] | None = None,
    ) -> EventResult:
        """Process one HTML output and invoke ``callback`` exactly once.

        ``manifest`` overrides the payload's JSON asset list; its entries may
        be asset names or uniform files. Extraction failures are reported
        through the callback and the returned result, never raised. Any other
        error fails the event the same way.
        """
        try:
            result = await self._process(payload, asset_store, manifest)
        except Exception as e:
            logger.exception("Unexpected error processing %s", payload.output_name)
            result = EventResult(Outcome.FAILED, payload, e)

        if callback is not None:
            if result.outcome is Outcome.FAILED:
                ret = callback(result.error)
            else:
                ret = callback(None, result.payload)
            if inspect.isawaitable(ret):
                await ret

        return result

    async def _process(
        self,
        payload: HTMLEventPayload,
        asset_store: AssetSource,
        manifest: Iterable[Any] | None,
    ) -> EventResult:
        name = payload.output_name
        _transition(name, State.IDLE, State.FILTERING)

        if not matches(name, self.config.html):
            logger.debug("Skipping %s: excluded by the HTML filter", name)
            return EventResult(Outcome.PASS_THROUGH, payload)

        options = self.config.extraction_options_for(name)
        entries = payload.assets if manifest is None else list(manifest)
        base_path = options.get("base") or getattr(asset_store, "base_path", "")
        css_files = self.collect_css_files(entries, asset_store, base_path)

        _transition(name, State.FILTERING, State.EXTRACTING)
        try:
            raw = await self.extractor.generate(
                {**options, "html": payload.html, "css": css_files}
            )
        except Exception as e:
            error = ExtractionFailure(name, str(e) or type(e).__name__)
            error.__cause__ = e
            logger.exception("Critical CSS extraction failed for %s", name)
            return EventResult(Outcome.FAILED, payload, error)

        _transition(name, State.EXTRACTING, State.RECONCILING)
        try:
            html = normalize_result(raw)
        except ResultDecodingError as e:
            logger.error("Discarding extraction result for %s: %s", name, e)
            return EventResult(Outcome.FAILED, payload, e)

        payload.html = html
        logger.info(
            "Inlined critical CSS into %s (%d stylesheet(s))", name, len(css_files)
        )
        return EventResult(Outcome.DONE, payload)

    def collect_css_files(
        self,
        entries: Iterable[Any],
        asset_store: AssetSource,
        base_path: str | None,
    ) -> list[Any]:
        """Wrap the manifest entries admitted by the CSS filter, in manifest order.

        Entries that are already uniform files pass through. Assets the store
        cannot provide are skipped.
        """
        css_files: list[Any] = []
        for entry in select_css_assets(entries, self.config.css):
            if is_uniform(entry):
                css_files.append(entry)
                continue
            try:
                contents = asset_store.read(entry)
            except Exception as e:
                logger.warning("Skipping stylesheet %s: %s", entry, e)
                continue
            css_files.append(wrap_asset(entry, base_path, contents))
        return css_files


def select_css_assets(entries: Iterable[Any], css_filter: MatchFilter) -> list[Any]:
    """Manifest entries admitted by ``css_filter``, keeping their order."""
    selected = []
    for entry in entries:
        path = entry.path if is_uniform(entry) else entry
        if isinstance(path, str) and matches(path, css_filter):
            selected.append(entry)
    return selected


def normalize_result(result: Any) -> str:
    """Normalize an extraction result to a string.

    Strings are used as-is; byte buffers are decoded as UTF-8.

    Raises:
        ResultDecodingError: For any other type, or bytes that are not UTF-8.
    """
    if isinstance(result, str):
        return result
    if isinstance(result, (bytes, bytearray, memoryview)):
        try:
            return bytes(result).decode("utf-8")
        except UnicodeDecodeError as e:
            raise ResultDecodingError(f"Result is not valid UTF-8: {e}") from e
    raise ResultDecodingError(
        f"Expected str or bytes from the extractor, got {type(result).__name__}"
    )


def get_extractor() -> BaseCriticalExtractor:
    """Import and instantiate the configured extractor."""
    cls = import_class(get_setting("EXTRACTOR"))
    return cls()  # type: ignore[no-any-return]


def _transition(output_name: str, current: State, target: State) -> None:
    logger.debug("%s: %s -> %s", output_name, current.value, target.value)


def get_asset_store() -> Any:
    """Import and instantiate the configured asset store."""
    cls = import_class(get_setting("ASSET_STORE"))
    return cls()
