"""
Candidate marker selection.

Turns the aggregated statistics of one chromosome into its ranked,
bounded marker list:
  1. Eligibility: seen in every population, minimum frequency above the
     rarity floor, and (optionally) maximum frequency under a ceiling
  2. Minimum yield: fewer candidates than the quota fails the run
  3. Ranking: distance to an ideal frequency, or rarest first
  4. Truncation to the quota (skipped in emit-all mode)

Sorting is stable, so ties keep the aggregator's first-arrival order.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, List, Optional, Union

from panmarker.core.errors import InsufficientCandidates, MarkerError
from panmarker.core.models import ChromosomeResult, MarkerStats, SelectedMarker
from panmarker.core.result import Result, Ok, Err
from panmarker.markers.aggregate import MarkerAggregator

logger = logging.getLogger(__name__)

MIN_MARKER_FREQ = 0.02
IDEAL_MARKER_FREQ = 0.05
DEFAULT_QUOTA = 1000


class RankingStrategy(Enum):
    """Candidate ranking criteria."""
    IDEAL = "ideal"    # ascending distance of the [min, max] band to the ideal frequency
    RAREST = "rarest"  # ascending maximum frequency


@dataclass
class SelectionCriteria:
    """Thresholds, ranking and quota for one chromosome's selection."""
    min_freq: float = MIN_MARKER_FREQ
    max_freq: Optional[float] = None
    ideal_freq: float = IDEAL_MARKER_FREQ
    quota: int = DEFAULT_QUOTA
    ranking: RankingStrategy = RankingStrategy.IDEAL
    emit_all: bool = False


def is_eligible(stats: MarkerStats, population_count: int, criteria: SelectionCriteria) -> bool:
    """True if the entry covers every population and sits inside the frequency bounds."""
    if stats.populations_seen != population_count:
        return False
    if not stats.min_frequency > criteria.min_freq:
        return False
    if criteria.max_freq is not None and stats.max_frequency > criteria.max_freq:
        return False
    return True


def ideal_distance(stats: MarkerStats, ideal: float) -> float:
    """How far the entry's frequency band sits from the ideal frequency."""
    return abs(ideal - stats.max_frequency) + abs(ideal - stats.min_frequency)


def ranking_key(criteria: SelectionCriteria) -> Callable[[MarkerStats], float]:
    if criteria.ranking is RankingStrategy.IDEAL:
        return lambda stats: ideal_distance(stats, criteria.ideal_freq)
    if criteria.ranking is RankingStrategy.RAREST:
        return lambda stats: stats.max_frequency
    raise ValueError(f"Unknown ranking strategy: {criteria.ranking}")


def rank_candidates(candidates: Iterable[MarkerStats], criteria: SelectionCriteria) -> List[MarkerStats]:
    """Stable sort of candidates by the configured criterion."""
    return sorted(candidates, key=ranking_key(criteria))


def select_markers(
    source: Union[MarkerAggregator, Iterable[MarkerStats]],
    population_count: int,
    criteria: SelectionCriteria,
    chromosome: Optional[str] = None,
) -> Result[ChromosomeResult, MarkerError]:
    """
    Select the markers of one chromosome.

    Args:
        source: Aggregator of the finished chromosome, or its stats in
            first-arrival order
        population_count: Number of populations in the panel
        criteria: Thresholds, ranking strategy and quota
        chromosome: Chromosome label (taken from the aggregator if omitted)

    Returns:
        Ok(ChromosomeResult) or Err(InsufficientCandidates)
    """
    if isinstance(source, MarkerAggregator):
        chromosome = chromosome or source.chromosome
        entries = source.stats()
    else:
        entries = list(source)
        if chromosome is None and entries:
            chromosome = entries[0].chromosome
    chromosome = chromosome or "?"

    candidates = [s for s in entries if is_eligible(s, population_count, criteria)]
    logger.debug(f"chr{chromosome}: {len(candidates):,} of {len(entries):,} marker alleles eligible")

    if len(candidates) < criteria.quota:
        return Err(InsufficientCandidates(chromosome, len(candidates), criteria.quota))

    ranked = rank_candidates(candidates, criteria)
    if not criteria.emit_all:
        ranked = ranked[:criteria.quota]

    result = ChromosomeResult(
        chromosome=chromosome,
        markers=[SelectedMarker.from_stats(s) for s in ranked],
        candidate_count=len(candidates),
        observed_count=len(entries),
    )

    if ranked:
        logger.info(
            f"chr{chromosome} has {len(ranked)} markers "
            f"minFreq={ranked[0].min_frequency} maxFreq={ranked[-1].max_frequency}"
        )
    else:
        logger.info(f"chr{chromosome} has 0 markers")

    return Ok(result)
