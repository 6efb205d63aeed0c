"""Extractor backed by the ``critical`` Node.js CLI."""

from __future__ import annotations

import asyncio
import logging
import re
import shutil
import tempfile
from pathlib import Path
from typing import Any

from ..conf import get_setting
from ..exceptions import ExtractorError
from .base import BaseCriticalExtractor

logger = logging.getLogger(__name__)

# Options consumed here rather than forwarded as CLI flags.
_RESERVED_OPTIONS = frozenset({"html", "css", "base", "src", "target"})


class CriticalCLIExtractor(BaseCriticalExtractor):
    """Run the ``critical`` CLI on a temporary copy of the page.

    The HTML is written to a temporary directory together with the
    stylesheets, each passed with ``--css`` in the order given. Remaining
    options become CLI flags: ``True`` adds ``--flag``, ``False``/``None``
    are dropped, lists repeat the flag, and camelCase keys are converted
    to kebab-case.

    Requirements:
        - critical (``npm install critical``) and Node.js
    """

    def __init__(self, cli_path: str | None = None, timeout: float | None = None) -> None:
        self.cli_path = cli_path
        self.timeout = timeout if timeout is not None else get_setting("CRITICAL_TIMEOUT")

    async def generate(self, options: dict[str, Any]) -> bytes:
        with tempfile.TemporaryDirectory() as tmpdir:
            tmppath = Path(tmpdir)

            html_file = tmppath / "index.html"
            html_file.write_text(options.get("html", ""), encoding="utf-8")

            css_paths = _write_css_files(tmppath / "css", options.get("css", []))

            cmd = self._build_command(
                self._get_cli_path(),
                html_file,
                css_paths,
                options.get("base") or tmpdir,
                options,
            )
            return await self._run(cmd)

    def _get_cli_path(self) -> str:
        """Resolve the critical CLI binary path.

        Resolution order:
        1. ``cli_path`` passed to the constructor
        2. ``CRITICAL_CLI_PATH`` in ``CRITICAL_CSS_INLINER`` settings
        3. ``node_modules/.bin/critical`` under ``BASE_DIR``
        4. ``critical`` on PATH (fallback)
        """
        if self.cli_path:
            return self.cli_path

        configured: str | None = get_setting("CRITICAL_CLI_PATH")
        if configured:
            return configured

        from django.conf import settings as django_settings

        base_dir = getattr(django_settings, "BASE_DIR", None)
        if base_dir is not None:
            local = Path(base_dir) / "node_modules" / ".bin" / "critical"
            if local.exists():
                return str(local)

        return shutil.which("critical") or "critical"

    def _build_command(
        self,
        cli_path: str,
        html_file: Path,
        css_paths: list[Path],
        base: str,
        options: dict[str, Any],
    ) -> list[str]:
        """Build the critical CLI command arguments."""
        cmd = [cli_path, str(html_file), "--base", str(base)]
        for css_path in css_paths:
            cmd.extend(["--css", str(css_path)])

        for key, value in options.items():
            if key in _RESERVED_OPTIONS:
                continue
            cmd.extend(_option_to_args(key, value))

        return cmd

    async def _run(self, cmd: list[str]) -> bytes:
        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise ExtractorError(f"Could not start critical CLI: {e}") from e

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(), timeout=self.timeout
            )
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            raise ExtractorError(
                f"critical CLI timed out after {self.timeout} seconds"
            ) from None

        if process.returncode != 0:
            error_msg = stderr.decode("utf-8", "replace") if stderr else "Unknown error"
            raise ExtractorError(
                f"critical CLI failed with exit code {process.returncode}: {error_msg}"
            )

        logger.debug("critical CLI produced %d bytes", len(stdout))
        return stdout


def _write_css_files(css_dir: Path, css_files: list[Any]) -> list[Path]:
    """Write stylesheets to disk, keeping their order."""
    css_dir.mkdir(parents=True, exist_ok=True)
    paths = []
    for index, css_file in enumerate(css_files):
        name = Path(css_file.path).name or "style.css"
        # Prefix with the position so same-named files from different dirs don't clash.
        target = css_dir / f"{index:03d}-{name}"
        target.write_bytes(css_file.contents)
        paths.append(target)
    return paths


def _option_to_args(key: str, value: Any) -> list[str]:
    flag = "--" + re.sub(r"(?<!^)(?=[A-Z])", "-", key).lower()
    if value is None or value is False:
        return []
    if value is True:
        return [flag]
    if isinstance(value, (list, tuple)):
        args: list[str] = []
        for item in value:
            args.extend(_option_to_args(key, item))
        return args
    return [flag, str(value)]
