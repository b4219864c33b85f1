"""
Allow-list of marker ids.

Restricts aggregation to a predetermined set of rs identifiers, read from
a newline-separated text file (optionally gzipped).
"""

import logging
import zlib
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, Optional

from panmarker.core.errors import MarkerError, SourceUnavailable
from panmarker.core.io import open_lines
from panmarker.core.result import Result, Ok, Err

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AllowList:
    """Immutable set of accepted marker ids."""
    ids: frozenset
    source: Optional[str] = None

    @classmethod
    def from_ids(cls, ids: Iterable[str], source: Optional[str] = None) -> "AllowList":
        cleaned = (marker_id.strip() for marker_id in ids)
        return cls(frozenset(m for m in cleaned if m), source)

    def __contains__(self, marker_id: object) -> bool:
        return marker_id in self.ids

    def __len__(self) -> int:
        return len(self.ids)

    def __iter__(self) -> Iterator[str]:
        return iter(self.ids)


def load_allow_list(path: Path) -> Result[AllowList, MarkerError]:
    """
    Load an allow-list file.

    One marker id per line; surrounding whitespace is trimmed and blank
    lines are ignored.

    Args:
        path: Path to the allow-list (plain or gzipped)

    Returns:
        Ok(AllowList) on success, Err(SourceUnavailable) if unreadable
    """
    path = Path(path)
    try:
        with open_lines(path) as handle:
            allow_list = AllowList.from_ids(handle, source=str(path))
    except (OSError, EOFError, UnicodeDecodeError, zlib.error) as e:
        return Err(SourceUnavailable(f"cannot read allow-list: {e}", source=str(path)))

    logger.info(f"Loaded {len(allow_list):,} marker ids from allow-list {path}")
    if not allow_list:
        logger.warning(f"Allow-list {path} is empty, no marker will be aggregated")
    return Ok(allow_list)
