"""Contract between a host build pipeline and the critical CSS hook.

The host fires one HTML-emission event per generated HTML output and
expects exactly one continuation: ``callback(None, payload)`` when the
output may proceed (changed or not) or ``callback(error)`` when it failed.
"""

from __future__ import annotations

import asyncio
import enum
import json
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Protocol

logger = logging.getLogger(__name__)

Callback = Callable[..., "Awaitable[Any] | Any"]


@dataclass
class HTMLEventPayload:
    """One generated HTML output. ``html`` is overwritten in place on success."""

    output_name: str
    html: str
    asset_json: str = "[]"

    @property
    def assets(self) -> list[str]:
        """Asset names from the JSON manifest, in manifest order."""
        try:
            names = json.loads(self.asset_json or "[]")
        except (TypeError, ValueError) as e:
            logger.warning("Unreadable asset manifest for %s: %s", self.output_name, e)
            return []
        if not isinstance(names, list):
            logger.warning("Asset manifest for %s is not a list", self.output_name)
            return []
        return [name for name in names if isinstance(name, str)]


class Outcome(enum.Enum):
    DONE = "done"
    PASS_THROUGH = "pass-through"
    FAILED = "failed"


@dataclass
class EventResult:
    outcome: Outcome
    payload: HTMLEventPayload
    error: BaseException | None = None


class AssetSource(Protocol):
    def read(self, name: str) -> bytes: ...

    def exists(self, name: str) -> bool: ...


class HtmlEmissionHook(Protocol):
    """Implemented by anything the host can call once per HTML output."""

    async def on_html_emitted(
        self,
        payload: HTMLEventPayload,
        asset_store: AssetSource,
        callback: Callback | None = None,
    ) -> EventResult: ...


async def emit_html(
    hook: HtmlEmissionHook,
    payload: HTMLEventPayload,
    asset_store: AssetSource,
) -> HTMLEventPayload:
    """Run one HTML-emission event and return the payload.

    Adapts the callback contract for hosts that prefer exceptions: the
    error passed to the callback is raised here.
    """
    future: asyncio.Future[HTMLEventPayload] = asyncio.get_running_loop().create_future()

    def callback(error: BaseException | None, result: HTMLEventPayload | None = None) -> None:
        if future.done():
            raise RuntimeError(f"Continuation for {payload.output_name!r} invoked twice")
        if error is not None:
            future.set_exception(error)
        else:
            future.set_result(result if result is not None else payload)

    await hook.on_html_emitted(payload, asset_store, callback)
    if not future.done():
        raise RuntimeError(f"Hook never completed the event for {payload.output_name!r}")
    return await future
