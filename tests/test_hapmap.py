"""
Tests for panmarker.core.hapmap module.
"""

import pytest
from panmarker.core.errors import ConfigurationError, ParseError
from panmarker.core.hapmap import (
    HAPMAP_HEADER,
    FIELD_COUNT,
    HapmapField,
    validate_header,
    parse_line,
    iter_records,
)
from conftest import hapmap_line


class TestHeader:
    """Tests for header validation."""

    def test_exact_header_accepted(self):
        """Test that the documented header passes."""
        assert validate_header(HAPMAP_HEADER).is_ok()
        assert validate_header(HAPMAP_HEADER + "\n").is_ok()
        assert validate_header(HAPMAP_HEADER + "\r\n").is_ok()

    def test_trailing_space_rejected(self):
        """Test that a trailing space is a configuration error."""
        result = validate_header(HAPMAP_HEADER + " ")
        assert result.is_err()
        assert isinstance(result.unwrap_err(), ConfigurationError)

    def test_reordered_columns_rejected(self):
        """Test that swapped columns are a configuration error."""
        header = HAPMAP_HEADER.replace("chrom pos", "pos chrom")
        result = validate_header(header, source="chr1_CEU.txt.gz")
        assert result.is_err()
        error = result.unwrap_err()
        assert isinstance(error, ConfigurationError)
        assert error.source == "chr1_CEU.txt.gz"

    def test_empty_source_rejected(self):
        """Test that a missing header line is a configuration error."""
        result = validate_header(None)
        assert isinstance(result.unwrap_err(), ConfigurationError)

    def test_field_layout(self):
        """Test the column enum matches the header."""
        columns = HAPMAP_HEADER.split(" ")
        assert FIELD_COUNT == len(columns) == 17
        assert columns[HapmapField.RSID] == "rs#"
        assert columns[HapmapField.REFALLELE] == "refallele"
        assert columns[HapmapField.REFALLELE_FREQ] == "refallele_freq"
        assert columns[HapmapField.OTHERALLELE] == "otherallele"
        assert columns[HapmapField.OTHERALLELE_FREQ] == "otherallele_freq"


class TestParseLine:
    """Tests for data line parsing."""

    def test_named_fields(self):
        """Test that the relevant fields are extracted by position."""
        result = parse_line(hapmap_line("rs123", "A", 0.03, "T", 0.97) + "\n")

        assert result.is_ok()
        record = result.unwrap()
        assert record.marker_id == "rs123"
        assert record.ref_allele == "A"
        assert record.ref_freq == pytest.approx(0.03)
        assert record.other_allele == "T"
        assert record.other_freq == pytest.approx(0.97)

    def test_observations_reference_first(self):
        """Test that a record yields both alleles, reference first."""
        record = parse_line(hapmap_line("rs1", "C", 0.4, "G", 0.6)).unwrap()
        observations = list(record.observations())

        assert [(o.allele, o.frequency) for o in observations] == [("C", 0.4), ("G", 0.6)]
        assert all(o.marker_id == "rs1" for o in observations)

    def test_wrong_field_count(self):
        """Test that a truncated line is a parse error."""
        line = " ".join(hapmap_line("rs1", "A", 0.1, "T", 0.9).split(" ")[:-1])
        result = parse_line(line, source="x.txt", line_number=7)

        assert result.is_err()
        error = result.unwrap_err()
        assert isinstance(error, ParseError)
        assert error.line_number == 7
        assert "16" in error.message

    def test_double_space_changes_field_count(self):
        """Test that fields are split on single spaces only."""
        line = hapmap_line("rs1", "A", 0.1, "T", 0.9).replace(" ", "  ", 1)
        assert isinstance(parse_line(line).unwrap_err(), ParseError)

    def test_non_numeric_frequency(self):
        """Test that a non-numeric frequency is a parse error."""
        line = hapmap_line("rs1", "A", 0.1, "T", 0.9).replace(" 0.1 ", " NA ")
        result = parse_line(line)
        assert isinstance(result.unwrap_err(), ParseError)

    @pytest.mark.parametrize("value", ["1.5", "-0.1", "nan"])
    def test_out_of_range_frequency(self, value):
        """Test that frequencies outside [0, 1] are rejected."""
        line = hapmap_line("rs1", "A", 0.1, "T", 0.9).replace(" 0.9 ", f" {value} ")
        assert isinstance(parse_line(line).unwrap_err(), ParseError)


class TestIterRecords:
    """Tests for whole-source iteration."""

    def test_header_then_records(self):
        """Test that every data line yields a record."""
        lines = [
            HAPMAP_HEADER + "\n",
            hapmap_line("rs1", "A", 0.1, "T", 0.9) + "\n",
            hapmap_line("rs2", "C", 0.2, "G", 0.8) + "\n",
        ]
        results = list(iter_records(lines))

        assert len(results) == 2
        assert all(r.is_ok() for r in results)
        assert [r.unwrap().marker_id for r in results] == ["rs1", "rs2"]

    def test_bad_header_stops_before_data(self):
        """Test that a header mismatch aborts before any data line."""
        lines = ["rs# chrom pos\n", hapmap_line("rs1", "A", 0.1, "T", 0.9) + "\n"]
        results = list(iter_records(lines))

        assert len(results) == 1
        assert isinstance(results[0].unwrap_err(), ConfigurationError)

    def test_stops_at_first_error(self):
        """Test that iteration ends right after a malformed line."""
        lines = [
            HAPMAP_HEADER,
            hapmap_line("rs1", "A", 0.1, "T", 0.9),
            "garbage",
            hapmap_line("rs2", "C", 0.2, "G", 0.8),
        ]
        results = list(iter_records(lines, source="t.txt"))

        assert len(results) == 2
        assert results[0].is_ok()
        error = results[1].unwrap_err()
        assert isinstance(error, ParseError)
        assert error.line_number == 3

    def test_trailing_blank_line_ignored(self):
        """Test that an empty last line does not count as malformed."""
        lines = [HAPMAP_HEADER + "\n", hapmap_line("rs1", "A", 0.1, "T", 0.9) + "\n", "\n"]
        results = list(iter_records(lines))
        assert len(results) == 1
        assert results[0].is_ok()

    def test_empty_source(self):
        """Test that an empty source is a configuration error."""
        results = list(iter_records([]))
        assert len(results) == 1
        assert isinstance(results[0].unwrap_err(), ConfigurationError)

    def test_line_numbers_count_blank_lines(self):
        """Test that records keep their physical line after a blank line."""
        lines = [HAPMAP_HEADER, "", hapmap_line("rs1", "A", 0.1, "T", 0.9)]
        results = list(iter_records(lines))

        assert len(results) == 1
        assert results[0].unwrap().line_number == 3

    def test_byte_lines_decoded(self):
        """Test that raw byte lines from binary sources are decoded."""
        lines = [
            (HAPMAP_HEADER + "\r\n").encode(),
            (hapmap_line("rs1", "A", 0.1, "T", 0.9) + "\r\n").encode(),
        ]
        results = list(iter_records(lines))

        record = results[0].unwrap()
        assert record.marker_id == "rs1"
        assert record.other_freq == 0.9
        assert record.line_number == 2

    def test_undecodable_line_is_parse_error(self):
        """Test that invalid UTF-8 fails with the line number of the bad line."""
        lines = [
            HAPMAP_HEADER.encode() + b"\n",
            hapmap_line("rs1", "A", 0.1, "T", 0.9).encode() + b"\n",
            b"rs2 \xff\xfe chr1\n",
        ]
        results = list(iter_records(lines, source="t.txt.gz"))

        assert len(results) == 2
        error = results[1].unwrap_err()
        assert isinstance(error, ParseError)
        assert error.line_number == 3
        assert error.source == "t.txt.gz"

    def test_undecodable_header(self):
        results = list(iter_records([b"\xff\xfe\n"]))
        assert len(results) == 1
        assert isinstance(results[0].unwrap_err(), ConfigurationError)
