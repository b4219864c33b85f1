"""
Per-chromosome marker aggregation.

Merges the frequency observations of every population into one
MarkerStats per (marker, allele) pair. Population sources feed the same
aggregator concurrently, so:

- entry creation is serialised by a mapping lock
- updates of one entry are serialised by a striped lock (hash of the key
  modulo the stripe count), so distinct keys rarely contend
- each entry remembers the earliest (population index, line number, allele
  slot) that observed it, and ``stats()`` orders entries by it; the
  resulting order depends only on the input content and the pinned
  population order, never on thread interleaving
"""

import logging
import threading
from typing import Dict, List, Optional

from panmarker.core.models import Arrival, FrequencyRecord, MarkerKey, MarkerStats
from panmarker.markers.allowlist import AllowList

logger = logging.getLogger(__name__)

DEFAULT_LOCK_STRIPES = 64


class MarkerAggregator:
    """
    Accumulates MarkerStats for exactly one chromosome.

    Args:
        chromosome: Chromosome label of this aggregation pass
        allow_list: Optional set of marker ids; other ids are ignored
        lock_stripes: Number of per-key update locks
    """

    def __init__(
        self,
        chromosome: str,
        allow_list: Optional[AllowList] = None,
        lock_stripes: int = DEFAULT_LOCK_STRIPES,
    ) -> None:
        if lock_stripes < 1:
            raise ValueError(f"lock_stripes must be >= 1, got {lock_stripes}")
        self.chromosome = chromosome
        self.allow_list = allow_list
        self._markers: Dict[MarkerKey, MarkerStats] = {}
        self._mapping_lock = threading.Lock()
        self._stripes = [threading.Lock() for _ in range(lock_stripes)]
        self._skipped = 0
        self._skipped_lock = threading.Lock()

    def _get_or_create(self, key: MarkerKey) -> MarkerStats:
        stats = self._markers.get(key)
        if stats is not None:
            return stats
        with self._mapping_lock:
            stats = self._markers.get(key)
            if stats is None:
                stats = MarkerStats(marker_id=key[0], allele=key[1], chromosome=self.chromosome)
                self._markers[key] = stats
            return stats

    def observe(self, marker_id: str, allele: str, frequency: float, arrival: Arrival = (0, 0, 0)) -> bool:
        """
        Record one population's frequency for a marker allele.

        Args:
            marker_id: rs identifier
            allele: Allele the frequency refers to
            frequency: Allele frequency in [0, 1]
            arrival: (population index, line number, allele slot) of the
                observation

        Returns:
            False if the marker is gated out by the allow-list, else True
        """
        if self.allow_list is not None and marker_id not in self.allow_list:
            with self._skipped_lock:
                self._skipped += 1
            return False

        key = (marker_id, allele)
        stats = self._get_or_create(key)
        with self._stripes[hash(key) % len(self._stripes)]:
            stats.update(frequency, arrival)
        return True

    def observe_record(self, record: FrequencyRecord, population_index: int = 0, line_number: int = 0) -> int:
        """Observe both alleles of a line; returns how many were accepted."""
        accepted = 0
        for slot, observation in enumerate(record.observations()):
            arrival = (population_index, line_number, slot)
            if self.observe(observation.marker_id, observation.allele, observation.frequency, arrival):
                accepted += 1
        return accepted

    def get(self, marker_id: str, allele: str) -> Optional[MarkerStats]:
        return self._markers.get((marker_id, allele))

    def stats(self) -> List[MarkerStats]:
        """All entries, ordered by first arrival."""
        with self._mapping_lock:
            entries = list(self._markers.values())
        entries.sort(key=lambda s: s.first_seen or (0, 0, 0))
        return entries

    @property
    def skipped(self) -> int:
        """Observations dropped by the allow-list."""
        return self._skipped

    def __len__(self) -> int:
        return len(self._markers)

    def __contains__(self, key: object) -> bool:
        return key in self._markers
