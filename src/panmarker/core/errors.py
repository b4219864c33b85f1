"""
Failure taxonomy for marker selection.

All four conditions are fatal for a run: none is retried and none is
downgraded to a per-line skip, since a dropped line or population would
break the full-coverage eligibility rule and bias the selection.
"""

from __future__ import annotations
from typing import Optional


class MarkerError(Exception):
    """Base class for every fatal marker-selection failure."""

    kind = "error"

    def __init__(
        self,
        message: str,
        *,
        chromosome: Optional[str] = None,
        population: Optional[str] = None,
        source: Optional[str] = None,
        line_number: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.chromosome = chromosome
        self.population = population
        self.source = source
        self.line_number = line_number

    def with_context(
        self,
        chromosome: Optional[str] = None,
        population: Optional[str] = None,
    ) -> MarkerError:
        """Fill in chromosome/population when the raising layer did not know them."""
        if self.chromosome is None:
            self.chromosome = chromosome
        if self.population is None:
            self.population = population
        return self

    @property
    def location(self) -> str:
        parts = []
        if self.chromosome is not None:
            parts.append(f"chr{self.chromosome}")
        if self.population is not None:
            parts.append(self.population)
        location = ">".join(parts)
        if self.source is not None:
            location = f"{location} ({self.source}" if location else f"({self.source}"
            if self.line_number is not None:
                location += f", line {self.line_number}"
            location += ")"
        return location

    def __str__(self) -> str:
        location = self.location
        if location:
            return f"{self.kind}: {self.message} [{location}]"
        return f"{self.kind}: {self.message}"


class ConfigurationError(MarkerError):
    """Wrong input format or version (header mismatch) or invalid run settings."""

    kind = "configuration error"


class SourceUnavailable(MarkerError):
    """An input file is missing or unreadable."""

    kind = "source unavailable"


class ParseError(MarkerError):
    """A data line or field could not be parsed."""

    kind = "parse error"


class InsufficientCandidates(MarkerError):
    """A chromosome yields fewer eligible markers than the quota."""

    kind = "insufficient candidates"

    def __init__(self, chromosome: str, found: int, required: int) -> None:
        super().__init__(
            f"found {found}/{required} eligible markers",
            chromosome=chromosome,
        )
        self.found = found
        self.required = required
