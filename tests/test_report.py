"""
Tests for panmarker.markers.report module.
"""

import io
import json
import pytest
import pandas as pd

from panmarker.core.models import ChromosomeResult, RunResult, SelectedMarker
from panmarker.markers.report import (
    TABLE_COLUMNS,
    format_slugs,
    match_probability,
    probability_frame,
    results_to_frame,
    to_document,
    write_document,
    write_table,
)


def marker(marker_id: str, allele: str, mean: float) -> SelectedMarker:
    return SelectedMarker(
        marker_id=marker_id,
        allele=allele,
        populations=2,
        min_frequency=mean - 0.01,
        mean_frequency=mean,
        max_frequency=mean + 0.01,
        frequencies=((0, mean - 0.01), (1, mean + 0.01)),
    )


@pytest.fixture
def run():
    return RunResult(
        populations=["CEU", "YRI"],
        chromosomes=[
            ChromosomeResult("1", [marker("rs1", "A", 0.05), marker("rs2", "G", 0.10)], candidate_count=5),
            ChromosomeResult("X", [marker("rs9", "T", 0.50)], candidate_count=1),
        ],
    )


class TestSlugs:
    def test_one_per_line(self, run):
        assert format_slugs(run) == "rs1/A\nrs2/G\nrs9/T\n"
        assert format_slugs(run.chromosomes[1]) == "rs9/T\n"


class TestTable:
    """Tests for the per-marker table."""

    def test_frame_columns_and_rows(self, run):
        df = results_to_frame(run)

        assert list(df.columns) == TABLE_COLUMNS
        assert len(df) == 3
        assert df["chromosome"].tolist() == ["1", "1", "X"]
        assert df.iloc[0]["frequencies"] == "CEU:0.04,YRI:0.06"

    def test_empty_run(self):
        df = results_to_frame(RunResult(populations=["CEU"]))
        assert df.empty
        assert list(df.columns) == TABLE_COLUMNS

    def test_write_tsv(self, run, temp_dir):
        """Test that the TSV reads back with the same content."""
        path = temp_dir / "out" / "markers.tsv"
        write_table(run, path)

        df = pd.read_csv(path, sep="\t", dtype={"chromosome": str})
        assert df["marker_id"].tolist() == ["rs1", "rs2", "rs9"]
        assert df["mean_freq"].tolist() == pytest.approx([0.05, 0.10, 0.50])


class TestProbability:
    """Tests for match probability estimation."""

    def test_match_probability(self, run):
        """Test 1 - prod(1 - mean frequency)."""
        expected = 1 - (1 - 0.05) * (1 - 0.10)
        assert match_probability(run.chromosomes[0]) == pytest.approx(expected)

    def test_empty_chromosome(self):
        assert match_probability(ChromosomeResult("1")) == 0.0

    def test_probability_frame(self, run):
        df = probability_frame(run)
        assert df["chromosome"].tolist() == ["1", "X"]
        assert df["markers"].tolist() == [2, 1]
        assert df["probability"].tolist() == pytest.approx([1 - 0.95 * 0.9, 0.5])


class TestDocument:
    """Tests for the structured document."""

    def test_document_layout(self, run):
        assert to_document(run) == [
            {"chromosome": "1", "markers": {"rs1": "A", "rs2": "G"}},
            {"chromosome": "X", "markers": {"rs9": "T"}},
        ]

    def test_both_alleles_keep_best_ranked(self):
        run = RunResult(
            populations=["CEU"],
            chromosomes=[ChromosomeResult("2", [marker("rs5", "C", 0.4), marker("rs5", "T", 0.6)])],
        )
        assert to_document(run)[0]["markers"] == {"rs5": "C"}

    def test_write_json_stream(self, run):
        buffer = io.StringIO()
        write_document(run, buffer)
        assert json.loads(buffer.getvalue()) == to_document(run)
