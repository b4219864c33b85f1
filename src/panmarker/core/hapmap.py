"""
HapMap allele frequency table parsing.

The tables are space-delimited with a fixed 17-column layout and an exact
header line. A header mismatch means the wrong file or format version was
supplied and is reported as a ConfigurationError; a malformed data line is
a ParseError. Neither is ever skipped.
"""

from __future__ import annotations
import math
from enum import IntEnum
from typing import Iterable, Iterator, Union

from panmarker.core.errors import ConfigurationError, ParseError, MarkerError
from panmarker.core.models import FrequencyRecord
from panmarker.core.result import Result, Ok, Err


HAPMAP_HEADER = (
    "rs# chrom pos strand build center protLSID assayLSID panelLSID QC_code "
    "refallele refallele_freq refallele_count otherallele otherallele_freq "
    "otherallele_count totalcount"
)


class HapmapField(IntEnum):
    """Column positions of the HapMap frequency table."""
    RSID = 0
    CHROM = 1
    POS = 2
    STRAND = 3
    BUILD = 4
    CENTER = 5
    PROTLSID = 6
    ASSAYLSID = 7
    PANELLSID = 8
    QC_CODE = 9
    REFALLELE = 10
    REFALLELE_FREQ = 11
    REFALLELE_COUNT = 12
    OTHERALLELE = 13
    OTHERALLELE_FREQ = 14
    OTHERALLELE_COUNT = 15
    TOTALCOUNT = 16


FIELD_COUNT = len(HapmapField)

# line sources yield text, or raw bytes decoded here so a bad byte names its line
RawLine = Union[str, bytes]


def _decode(line: RawLine, source: str, line_number: int) -> Result[str, MarkerError]:
    if isinstance(line, str):
        return Ok(line)
    try:
        return Ok(line.decode("utf-8"))
    except UnicodeDecodeError as e:
        return Err(ParseError(
            f"invalid UTF-8 at byte {e.start}",
            source=source, line_number=line_number,
        ))


def _strip_terminator(line: str) -> str:
    """Remove the line terminator only; other whitespace is significant."""
    if line.endswith("\n"):
        line = line[:-1]
    if line.endswith("\r"):
        line = line[:-1]
    return line


def validate_header(line: str | None, source: str = "<input>") -> Result[None, MarkerError]:
    """
    Check the first line of a table against the expected header.

    Args:
        line: First line of the source, or None if the source was empty
        source: Source name used in diagnostics

    Returns:
        Ok(None) if the header matches exactly, Err(ConfigurationError) otherwise
    """
    if line is None:
        return Err(ConfigurationError("empty input, expected header line", source=source, line_number=1))
    if _strip_terminator(line) != HAPMAP_HEADER:
        return Err(ConfigurationError("Bad header format", source=source, line_number=1))
    return Ok(None)


def _parse_frequency(value: str, column: HapmapField, source: str, line_number: int) -> Result[float, MarkerError]:
    try:
        frequency = float(value)
    except ValueError:
        return Err(ParseError(
            f"non-numeric {column.name.lower()} {value!r}",
            source=source, line_number=line_number,
        ))
    if math.isnan(frequency) or not 0.0 <= frequency <= 1.0:
        return Err(ParseError(
            f"{column.name.lower()} {value!r} outside [0, 1]",
            source=source, line_number=line_number,
        ))
    return Ok(frequency)


def parse_line(line: str, source: str = "<input>", line_number: int = 0) -> Result[FrequencyRecord, MarkerError]:
    """
    Parse one data line into a FrequencyRecord.

    Fields are split on single spaces, so doubled separators produce an
    empty field and change the field count.
    """
    cells = _strip_terminator(line).split(" ")
    if len(cells) != FIELD_COUNT:
        return Err(ParseError(
            f"expected {FIELD_COUNT} fields, found {len(cells)}",
            source=source, line_number=line_number,
        ))

    marker_id = cells[HapmapField.RSID]
    ref_allele = cells[HapmapField.REFALLELE]
    other_allele = cells[HapmapField.OTHERALLELE]
    if not marker_id or not ref_allele or not other_allele:
        return Err(ParseError("empty marker id or allele", source=source, line_number=line_number))

    ref_freq = _parse_frequency(cells[HapmapField.REFALLELE_FREQ], HapmapField.REFALLELE_FREQ, source, line_number)
    if ref_freq.is_err():
        return ref_freq
    other_freq = _parse_frequency(cells[HapmapField.OTHERALLELE_FREQ], HapmapField.OTHERALLELE_FREQ, source, line_number)
    if other_freq.is_err():
        return other_freq

    return Ok(FrequencyRecord(
        marker_id=marker_id,
        ref_allele=ref_allele,
        ref_freq=ref_freq.unwrap(),
        other_allele=other_allele,
        other_freq=other_freq.unwrap(),
        line_number=line_number,
    ))


def iter_records(lines: Iterable[RawLine], source: str = "<input>") -> Iterator[Result[FrequencyRecord, MarkerError]]:
    """
    Validate the header, then yield one Result per data line.

    Iteration stops right after the first Err. Blank lines (typically a
    trailing newline at end of file) carry no record and are skipped, but
    still count towards the line numbers of the records after them. Byte
    lines are decoded as UTF-8; a line that does not decode is a ParseError.

    Yields:
        Ok(FrequencyRecord) for each data line, or a single terminal Err
    """
    iterator = iter(lines)
    first = next(iterator, None)
    if first is not None:
        decoded = _decode(first, source, 1)
        if decoded.is_err():
            yield Err(ConfigurationError("Bad header format", source=source, line_number=1))
            return
        first = decoded.unwrap()
    header = validate_header(first, source)
    if header.is_err():
        yield header
        return

    for line_number, raw in enumerate(iterator, start=2):
        decoded = _decode(raw, source, line_number)
        if decoded.is_err():
            yield decoded
            return
        line = decoded.unwrap()
        if not _strip_terminator(line):
            continue
        record = parse_line(line, source, line_number)
        yield record
        if record.is_err():
            return
