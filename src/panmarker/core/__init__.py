"""
Core module for panmarker.

Contains result and error types, data models, and the frequency table
parser shared by the marker pipeline.
"""

from panmarker.core.result import Result, Ok, Err
from panmarker.core.errors import (
    MarkerError,
    ConfigurationError,
    SourceUnavailable,
    ParseError,
    InsufficientCandidates,
)
from panmarker.core.models import (
    FrequencyRecord,
    MarkerObservation,
    MarkerStats,
    SelectedMarker,
    ChromosomeResult,
    RunResult,
)
from panmarker.core.hapmap import HAPMAP_HEADER, parse_line, iter_records

__all__ = [
    "Result",
    "Ok",
    "Err",
    "MarkerError",
    "ConfigurationError",
    "SourceUnavailable",
    "ParseError",
    "InsufficientCandidates",
    "FrequencyRecord",
    "MarkerObservation",
    "MarkerStats",
    "SelectedMarker",
    "ChromosomeResult",
    "RunResult",
    "HAPMAP_HEADER",
    "parse_line",
    "iter_records",
]
