"""
Core data models for panmarker.

Defines the parsed input record, the per-(marker, allele) running
statistics, and the per-chromosome and per-run result containers.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Iterator, Optional, Tuple


# (population index, line number, allele slot) of an observation; smaller arrives first
Arrival = Tuple[int, int, int]
MarkerKey = Tuple[str, str]


@dataclass(frozen=True, slots=True)
class MarkerObservation:
    """One allele frequency reported by one population for one marker."""
    marker_id: str
    allele: str
    frequency: float


@dataclass(frozen=True, slots=True)
class FrequencyRecord:
    """
    Named fields of one allele-frequency table line.

    Attributes:
        marker_id: rs identifier
        ref_allele: Reference allele
        ref_freq: Reference allele frequency in [0, 1]
        other_allele: Other (alternate) allele
        other_freq: Other allele frequency in [0, 1]
        line_number: Physical line of the source (1 is the header)
    """
    marker_id: str
    ref_allele: str
    ref_freq: float
    other_allele: str
    other_freq: float
    line_number: int = field(default=0, compare=False)

    def observations(self) -> Iterator[MarkerObservation]:
        """Yield both alleles of the line, reference allele first."""
        yield MarkerObservation(self.marker_id, self.ref_allele, self.ref_freq)
        yield MarkerObservation(self.marker_id, self.other_allele, self.other_freq)


@dataclass(slots=True)
class MarkerStats:
    """
    Running statistics for one (marker, allele) pair on one chromosome.

    ``min_frequency`` and ``max_frequency`` start at the unset sentinels
    1.0 and 0.0; once at least one population has been observed
    ``0 <= min_frequency <= mean_frequency <= max_frequency <= 1`` holds.
    """
    marker_id: str
    allele: str
    chromosome: str
    populations_seen: int = 0
    min_frequency: float = 1.0
    max_frequency: float = 0.0
    mean_frequency: float = 0.0
    # (population index, frequency) in update order
    frequencies: list[Tuple[int, float]] = field(default_factory=list)
    first_seen: Optional[Arrival] = None

    @property
    def key(self) -> MarkerKey:
        return (self.marker_id, self.allele)

    @property
    def slug(self) -> str:
        return f"{self.marker_id}/{self.allele}"

    def update(self, frequency: float, arrival: Arrival) -> None:
        """Fold one population's frequency into the statistics."""
        self.populations_seen += 1
        if frequency < self.min_frequency:
            self.min_frequency = frequency
        if frequency > self.max_frequency:
            self.max_frequency = frequency
        self.mean_frequency += (frequency - self.mean_frequency) / self.populations_seen
        # keep the mean inside [min, max] despite rounding
        self.mean_frequency = min(max(self.mean_frequency, self.min_frequency), self.max_frequency)
        self.frequencies.append((arrival[0], frequency))
        if self.first_seen is None or arrival < self.first_seen:
            self.first_seen = arrival


@dataclass(frozen=True, slots=True)
class SelectedMarker:
    """A marker allele chosen for a chromosome, with a snapshot of its stats."""
    marker_id: str
    allele: str
    populations: int
    min_frequency: float
    mean_frequency: float
    max_frequency: float
    # (population index, frequency), ordered by population index
    frequencies: Tuple[Tuple[int, float], ...] = ()

    @classmethod
    def from_stats(cls, stats: MarkerStats) -> SelectedMarker:
        return cls(
            marker_id=stats.marker_id,
            allele=stats.allele,
            populations=stats.populations_seen,
            min_frequency=stats.min_frequency,
            mean_frequency=stats.mean_frequency,
            max_frequency=stats.max_frequency,
            frequencies=tuple(sorted(stats.frequencies, key=lambda item: item[0])),
        )

    @property
    def slug(self) -> str:
        return f"{self.marker_id}/{self.allele}"


@dataclass
class ChromosomeResult:
    """Ranked, bounded marker selection for one chromosome."""
    chromosome: str
    markers: list[SelectedMarker] = field(default_factory=list)
    candidate_count: int = 0
    observed_count: int = 0

    def __len__(self) -> int:
        return len(self.markers)

    def __iter__(self) -> Iterator[SelectedMarker]:
        return iter(self.markers)

    @property
    def slugs(self) -> list[str]:
        return [m.slug for m in self.markers]


@dataclass
class RunResult:
    """All chromosome results of a run, in processing order."""
    populations: list[str]
    chromosomes: list[ChromosomeResult] = field(default_factory=list)
    elapsed: float = 0.0

    def __len__(self) -> int:
        return len(self.chromosomes)

    def __iter__(self) -> Iterator[ChromosomeResult]:
        return iter(self.chromosomes)

    def get(self, chromosome: str) -> Optional[ChromosomeResult]:
        for result in self.chromosomes:
            if result.chromosome == chromosome:
                return result
        return None

    @property
    def total_markers(self) -> int:
        return sum(len(r) for r in self.chromosomes)
