"""Report generation orchestration."""

from __future__ import annotations

import logging
from pathlib import Path

from snapdiff.models.config import DiffConfig
from snapdiff.models.snapshot import DiffResult

from .html_report import generate_image_gallery
from .json_report import generate_json_report
from .summary import build_summary

logger = logging.getLogger(__name__)


class Reporter:
    """Generates reports from a diff result."""

    def __init__(self, config: DiffConfig):
        self.config = config

    def generate_reports(self, result: DiffResult, output_dir: Path | None = None) -> dict[str, str]:
        """Generate all configured report formats. Returns format -> file path."""
        out_dir = output_dir or Path(self.config.output_path)
        out_dir.mkdir(parents=True, exist_ok=True)
        generated = {}
        logger.debug("Report output directory: %s", out_dir)

        if "html" in self.config.report_formats:
            path = out_dir / "index.html"
            logger.debug("Generating image gallery...")
            generate_image_gallery(result, path)
            generated["html"] = str(path)
            logger.info("Image gallery: %s", path)

        if "json" in self.config.report_formats:
            path = out_dir / "results.json"
            logger.debug("Generating JSON results...")
            generate_json_report(result, path)
            generated["json"] = str(path)
            logger.info("JSON results: %s", path)

        if "text" in self.config.report_formats:
            path = out_dir / "summary.txt"
            path.write_text(build_summary(result) + "\n", encoding="utf-8")
            generated["text"] = str(path)
            logger.info("Text summary: %s", path)

        return generated
