"""Management command to inline critical CSS into a static HTML build."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError, CommandParser

from critical_css_inliner.conf import get_setting
from critical_css_inliner.manifest import build_asset_manifest, encode_manifest
from critical_css_inliner.matching import matches
from critical_css_inliner.orchestrator import CriticalCSSOrchestrator, get_asset_store
from critical_css_inliner.pipeline import HTMLEventPayload, Outcome
from critical_css_inliner.storage.local import LocalAssetStore

logger = logging.getLogger(__name__)

HTML_SUFFIXES = (".html", ".htm")


class Command(BaseCommand):
    help = "Inline critical CSS into the HTML files of a static build."

    def add_arguments(self, parser: CommandParser) -> None:
        parser.add_argument(
            "--build-dir",
            help="Directory holding the built HTML and CSS. Defaults to STATIC_ROOT.",
        )
        parser.add_argument(
            "--static-url",
            help="URL prefix stylesheets are linked under. Defaults to STATIC_URL.",
        )
        parser.add_argument(
            "--concurrency",
            type=int,
            help="Maximum number of HTML files processed at once.",
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Show which files would be processed without changing them.",
        )

    def handle(self, **options: Any) -> None:
        build_dir_option = options.get("build_dir")
        build_dir = Path(build_dir_option or getattr(settings, "STATIC_ROOT", "") or "")
        if not build_dir_option and not getattr(settings, "STATIC_ROOT", None):
            raise CommandError("Pass --build-dir or configure STATIC_ROOT.")
        if not build_dir.is_dir():
            raise CommandError(f"Build directory does not exist: {build_dir}")

        static_url = options.get("static_url") or getattr(settings, "STATIC_URL", "/")
        concurrency = options.get("concurrency") or get_setting("BUILD_CONCURRENCY")
        dry_run = options.get("dry_run")

        orchestrator = CriticalCSSOrchestrator()
        html_files = self._find_html_files(build_dir)
        self.stdout.write(f"Processing {len(html_files)} HTML file(s) in {build_dir}...")

        if dry_run:
            self._report_dry_run(orchestrator, build_dir, html_files)
            return

        store = LocalAssetStore(build_dir) if build_dir_option else get_asset_store()
        outcomes = asyncio.run(
            self._process_all(
                orchestrator, store, build_dir, html_files, static_url, max(1, concurrency)
            )
        )

        inlined = sum(1 for o in outcomes if o is Outcome.DONE)
        skipped = sum(1 for o in outcomes if o is Outcome.PASS_THROUGH)
        errors = sum(1 for o in outcomes if o is Outcome.FAILED)
        self.stdout.write(
            self.style.SUCCESS(
                f"\nDone. Inlined: {inlined}, Skipped: {skipped}, Errors: {errors}"
            )
        )

    def _find_html_files(self, build_dir: Path) -> list[Path]:
        """All HTML files under the build directory, sorted."""
        return sorted(
            path
            for path in build_dir.rglob("*")
            if path.is_file() and path.suffix.lower() in HTML_SUFFIXES
        )

    def _report_dry_run(
        self,
        orchestrator: CriticalCSSOrchestrator,
        build_dir: Path,
        html_files: list[Path],
    ) -> None:
        selected = 0
        for path in html_files:
            name = path.relative_to(build_dir).as_posix()
            if matches(name, orchestrator.config.html):
                self.stdout.write(f"  [DRY RUN] Would process: {name}")
                selected += 1
            else:
                self.stdout.write(f"  [DRY RUN] Would skip: {name}")
        self.stdout.write(
            self.style.SUCCESS(
                f"\n[DRY RUN] Done. Would process: {selected}, "
                f"Skipped: {len(html_files) - selected}"
            )
        )

    async def _process_all(
        self,
        orchestrator: CriticalCSSOrchestrator,
        store: Any,
        build_dir: Path,
        html_files: list[Path],
        static_url: str,
        concurrency: int,
    ) -> list[Outcome]:
        semaphore = asyncio.Semaphore(concurrency)

        async def run(path: Path) -> Outcome:
            async with semaphore:
                return await self._process_file(
                    orchestrator, store, build_dir, path, static_url
                )

        return list(await asyncio.gather(*(run(path) for path in html_files)))

    async def _process_file(
        self,
        orchestrator: CriticalCSSOrchestrator,
        store: Any,
        build_dir: Path,
        path: Path,
        static_url: str,
    ) -> Outcome:
        """Run one HTML-emission event for a built file and write the result back."""
        name = path.relative_to(build_dir).as_posix()
        try:
            html = path.read_text(encoding="utf-8")
            payload = HTMLEventPayload(
                output_name=name,
                html=html,
                asset_json=encode_manifest(build_asset_manifest(html, static_url, name)),
            )
            result = await orchestrator.on_html_emitted(payload, store)
        except Exception:
            logger.exception("Failed to process %s", name)
            self.stderr.write(f"  ERROR: {name}")
            return Outcome.FAILED

        if result.outcome is Outcome.FAILED:
            self.stderr.write(f"  ERROR: {name}: {result.error}")
        elif result.outcome is Outcome.DONE:
            if result.payload.html != html:
                path.write_text(result.payload.html, encoding="utf-8")
            self.stdout.write(f"  Inlined: {name}")
        return result.outcome
