"""Tests for result aggregation."""

from snapdiff.diff.aggregator import aggregate
from snapdiff.models.snapshot import ComparisonOutcome


class TestAggregate:
    """Tests for aggregate."""

    def test_empty(self):
        """Test no outcomes is a valid, empty result."""
        result = aggregate([])
        assert result.base_files_length == 0
        assert result.changed_snapshots == set()
        assert result.missing_snapshots == set()
        assert result.new_snapshots == set()
        assert result.unchanged_count == 0
        assert result.failed_snapshots == {}

    def test_partitions_by_status(self, sample_outcomes):
        """Test each outcome lands in the set for its status."""
        result = aggregate(sample_outcomes)
        assert result.new_snapshots == {"added.png"}
        assert result.missing_snapshots == {"missing.png"}
        assert result.unchanged_snapshots == {"same.png"}
        assert result.changed_snapshots == {"pages/changed.png", "broken.png"}

    def test_base_files_length_counts_comparisons(self, sample_outcomes):
        """Test only compared snapshots count toward the baseline total."""
        assert aggregate(sample_outcomes).base_files_length == 3

    def test_failed_comparisons_recorded(self, sample_outcomes):
        """Test failed comparisons are reported with their error."""
        result = aggregate(sample_outcomes)
        assert result.failed_snapshots == {
            "broken.png": "UnidentifiedImageError: cannot identify image file",
        }

    def test_outcomes_sorted_by_name(self, sample_outcomes):
        """Test outcomes are kept in filename order regardless of input order."""
        result = aggregate(reversed(sample_outcomes))
        names = [o.name for o in result.outcomes]
        assert names == sorted(names)

    def test_failed_without_message(self):
        """Test a failed comparison without an error message gets a placeholder."""
        outcome = ComparisonOutcome(name="x.png", status="changed", comparison_failed=True)
        assert aggregate([outcome]).failed_snapshots == {"x.png": "comparison failed"}

    def test_to_results_shape(self, sample_outcomes):
        """Test the summary dict uses sorted lists."""
        results = aggregate(sample_outcomes).to_results()
        assert results == {
            "baseFilesLength": 3,
            "changed": ["broken.png", "pages/changed.png"],
            "missing": ["missing.png"],
            "added": ["added.png"],
            "unchanged": ["same.png"],
            "failed": {"broken.png": "UnidentifiedImageError: cannot identify image file"},
        }
