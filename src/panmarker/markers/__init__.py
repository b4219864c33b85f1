"""
Marker selection modules.

  allowlist   - optional restriction to a fixed set of marker ids
  aggregate   - per-chromosome merge of population frequencies
  select      - eligibility, ranking and quota truncation
  orchestrate - chromosome-by-chromosome fan-out/fan-in driver
  report      - table, probability and document rendering

The orchestrator depends on the run configuration and is imported from
``panmarker.markers.orchestrate`` directly.
"""

from panmarker.markers.allowlist import AllowList, load_allow_list
from panmarker.markers.aggregate import MarkerAggregator
from panmarker.markers.select import (
    RankingStrategy,
    SelectionCriteria,
    select_markers,
)

__all__ = [
    "AllowList",
    "load_allow_list",
    "MarkerAggregator",
    "RankingStrategy",
    "SelectionCriteria",
    "select_markers",
]
