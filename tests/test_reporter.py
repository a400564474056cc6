"""Tests for report generation."""

import json
from pathlib import Path

import pytest

from snapdiff.diff.aggregator import aggregate
from snapdiff.models.config import DiffConfig
from snapdiff.models.snapshot import ComparisonOutcome, DiffResult
from snapdiff.reporter.html_report import generate_image_gallery
from snapdiff.reporter.json_report import generate_json_report
from snapdiff.reporter.reporter import Reporter
from snapdiff.reporter.summary import build_summary, build_title


@pytest.fixture
def diff_result(sample_outcomes) -> DiffResult:
    return aggregate(sample_outcomes)


class TestGenerateJsonReport:
    """Tests for generate_json_report."""

    def test_summary_fields(self, tmp_path: Path, diff_result):
        """Test the results summary fields are written."""
        path = tmp_path / "results.json"
        generate_json_report(diff_result, path)

        with open(path) as f:
            data = json.load(f)

        assert data["baseFilesLength"] == 3
        assert data["changed"] == ["broken.png", "pages/changed.png"]
        assert data["missing"] == ["missing.png"]
        assert data["added"] == ["added.png"]
        assert data["unchanged"] == ["same.png"]
        assert "broken.png" in data["failed"]

    def test_per_snapshot_details(self, tmp_path: Path, diff_result):
        """Test every outcome is serialized."""
        path = tmp_path / "results.json"
        generate_json_report(diff_result, path)

        with open(path) as f:
            data = json.load(f)

        by_name = {s["name"]: s for s in data["snapshots"]}
        assert set(by_name) == {"added.png", "missing.png", "same.png", "pages/changed.png", "broken.png"}
        assert by_name["pages/changed.png"]["mismatch_count"] == 25
        assert by_name["pages/changed.png"]["compared_against"] == "merge_base"
        assert by_name["broken.png"]["comparison_failed"] is True

    def test_empty_result(self, tmp_path: Path):
        """Test an empty result writes an empty report."""
        path = tmp_path / "results.json"
        generate_json_report(DiffResult(), path)
        with open(path) as f:
            data = json.load(f)
        assert data["baseFilesLength"] == 0
        assert data["snapshots"] == []


class TestGenerateImageGallery:
    """Tests for generate_image_gallery."""

    def test_gallery_lists_everything(self, tmp_path: Path, diff_result):
        """Test changed, added and missing snapshots appear on the page."""
        path = tmp_path / "index.html"
        generate_image_gallery(diff_result, path)
        page = path.read_text(encoding="utf-8")

        assert "pages/changed.png" in page
        assert "added.png" in page
        assert "missing.png" in page
        assert "1/3" in page

    def test_overlay_referenced_relatively(self, tmp_path: Path, diff_result):
        """Test overlays under the output dir are referenced by relative path."""
        path = tmp_path / "index.html"
        generate_image_gallery(diff_result, path)
        assert 'src="pages/changed.png"' in path.read_text(encoding="utf-8")

    def test_overlay_src_is_url_quoted(self, tmp_path: Path):
        """Test reserved URL characters in snapshot names are percent-encoded."""
        outcome = ComparisonOutcome(
            name="menu #1?.png", status="changed", mismatch_count=3, total_pixels=100,
            diff_path=tmp_path / "menu #1?.png",
        )
        path = tmp_path / "index.html"
        generate_image_gallery(aggregate([outcome]), path)
        assert 'src="menu%20%231%3F.png"' in path.read_text(encoding="utf-8")

    def test_failed_comparison_marked(self, tmp_path: Path, diff_result):
        """Test failed comparisons are flagged as indeterminate."""
        path = tmp_path / "index.html"
        generate_image_gallery(diff_result, path)
        page = path.read_text(encoding="utf-8")
        assert "COMPARISON FAILED" in page
        assert "UnidentifiedImageError" in page

    def test_names_are_escaped(self, tmp_path: Path):
        """Test snapshot names are HTML-escaped."""
        result = DiffResult(new_snapshots={"<script>.png"})
        path = tmp_path / "index.html"
        generate_image_gallery(result, path)
        page = path.read_text(encoding="utf-8")
        assert "<script>.png" not in page
        assert "&lt;script&gt;.png" in page


class TestSummary:
    """Tests for the text summary."""

    def test_title(self, diff_result):
        """Test the title reflects the number of changed snapshots."""
        assert build_title(diff_result) == "2 snapshots changed"
        assert build_title(DiffResult()) == "No snapshots changed"

    def test_summary_contents(self, diff_result):
        """Test counts and filenames are listed, failures as indeterminate."""
        text = build_summary(diff_result)
        assert "Unchanged: 1/3" in text
        assert "Indeterminate (comparison failed): 1" in text
        assert "  - pages/changed.png" in text
        assert "  - broken.png (UnidentifiedImageError: cannot identify image file)" in text
        assert "  - added.png" in text
        assert "  - missing.png" in text

    def test_long_listings_truncated(self):
        """Test long filename lists are cut off."""
        result = DiffResult(new_snapshots={f"s{i:02d}.png" for i in range(25)})
        text = build_summary(result)
        assert "... and 5 more" in text


class TestReporter:
    """Tests for the Reporter orchestration."""

    def test_generates_configured_formats(self, tmp_path: Path, diff_result):
        """Test one file per configured format."""
        config = DiffConfig(output_path=str(tmp_path), report_formats=["html", "json", "text"])
        reports = Reporter(config).generate_reports(diff_result)

        assert set(reports) == {"html", "json", "text"}
        assert Path(reports["html"]).name == "index.html"
        assert Path(reports["json"]).name == "results.json"
        assert Path(reports["text"]).read_text().startswith("2 snapshots changed")

    def test_respects_format_selection(self, tmp_path: Path, diff_result):
        """Test unselected formats are skipped."""
        config = DiffConfig(report_formats=["json"])
        reports = Reporter(config).generate_reports(diff_result, output_dir=tmp_path / "out")
        assert list(reports) == ["json"]
        assert not (tmp_path / "out" / "index.html").exists()
