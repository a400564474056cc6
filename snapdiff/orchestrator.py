"""Pipeline orchestrator — coordinates scan, reconcile, and report stages."""

from __future__ import annotations

import asyncio
import logging
import time
from pathlib import Path

from snapdiff.diff.engine import diff_snapshots_async
from snapdiff.models.config import DiffConfig
from snapdiff.models.snapshot import DiffResult
from snapdiff.reporter.reporter import Reporter
from snapdiff.reporter.summary import build_summary

logger = logging.getLogger(__name__)


class Orchestrator:
    """Coordinates a full snapshot comparison run."""

    def __init__(self, config: DiffConfig):
        self.config = config
        self.output_dir = Path(config.output_path)

    def run(self) -> dict:
        """Execute the complete scan → reconcile → report pipeline."""
        return asyncio.run(self._run_pipeline())

    async def _run_pipeline(self) -> dict:
        start = time.time()
        if not self.config.current_path:
            raise FileNotFoundError("No current snapshot directory configured")
        logger.info("=== Comparing snapshots in %s ===", self.config.current_path)

        # Stage 1: Scan + reconcile
        logger.info("--- Stage 1: Diff ---")
        stage_start = time.time()
        self.output_dir.mkdir(parents=True, exist_ok=True)
        result = await self._diff()
        logger.info("--- Stage 1 complete: %d compared, %d changed in %.1fs ---",
                    result.base_files_length, len(result.changed_snapshots), time.time() - stage_start)

        # Stage 2: Report
        logger.info("--- Stage 2: Report ---")
        stage_start = time.time()
        reports = Reporter(self.config).generate_reports(result, self.output_dir)
        logger.info("--- Stage 2 complete: %d reports generated in %.1fs ---",
                    len(reports), time.time() - stage_start)

        if result.failed_snapshots:
            logger.warning("%d snapshot(s) could not be compared: %s",
                           len(result.failed_snapshots), ", ".join(sorted(result.failed_snapshots)))

        duration = time.time() - start
        logger.info("=== Comparison complete in %.1fs ===", duration)

        return {
            "duration": round(duration, 2),
            "result": result,
            "results": result.to_results(),
            "summary": build_summary(result),
            "reports": reports,
        }

    async def _diff(self) -> DiffResult:
        return await diff_snapshots_async(
            self.config.current_path,
            self.config.base_path,
            self.config.merge_base_path,
            self.output_dir,
            options=self.config.pixelmatch,
            max_workers=self.config.max_workers,
            extensions=self.config.extensions,
        )
