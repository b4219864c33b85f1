"""
Rendering of run results.

Output modes:
  slugs        - one ``rsid/allele`` per line
  table        - per-chromosome, per-marker TSV with frequency statistics
  probability  - per-chromosome match probability 1 - prod(1 - mean freq)
  document     - JSON list of {chromosome, markers: {rsid: allele}}

``-`` as a destination writes to stdout.
"""

import json
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, IO, Iterator, List, Union

import numpy as np
import pandas as pd

from panmarker.core.models import ChromosomeResult, RunResult

Destination = Union[str, Path, IO[str]]

TABLE_COLUMNS = [
    "chromosome", "marker_id", "allele", "populations",
    "min_freq", "mean_freq", "max_freq", "frequencies",
]


@contextmanager
def _open_destination(destination: Destination) -> Iterator[IO[str]]:
    if hasattr(destination, "write"):
        yield destination  # type: ignore[misc]
    elif str(destination) == "-":
        yield sys.stdout
    else:
        path = Path(destination)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            yield f


def format_slugs(result: Union[ChromosomeResult, RunResult]) -> str:
    """One ``rsid/allele`` per line, in selection order."""
    chromosomes = [result] if isinstance(result, ChromosomeResult) else result.chromosomes
    return "".join(f"{slug}\n" for chrom in chromosomes for slug in chrom.slugs)


def results_to_frame(run: RunResult) -> pd.DataFrame:
    """Flatten the selected markers of every chromosome into one DataFrame."""
    rows = [
        {
            "chromosome": chrom.chromosome,
            "marker_id": marker.marker_id,
            "allele": marker.allele,
            "populations": marker.populations,
            "min_freq": marker.min_frequency,
            "mean_freq": marker.mean_frequency,
            "max_freq": marker.max_frequency,
            "frequencies": ",".join(f"{run.populations[i]}:{f:g}" for i, f in marker.frequencies),
        }
        for chrom in run.chromosomes
        for marker in chrom.markers
    ]
    return pd.DataFrame(rows, columns=TABLE_COLUMNS)


def write_table(run: RunResult, destination: Destination) -> None:
    """Write the per-marker table as TSV."""
    with _open_destination(destination) as f:
        results_to_frame(run).to_csv(f, sep="\t", index=False)


def match_probability(result: ChromosomeResult) -> float:
    """
    Probability that a random individual carries at least one selected allele.

    Treats the selected alleles as independent with their mean frequency
    across populations: ``1 - prod(1 - mean_frequency)``.
    """
    if not result.markers:
        return 0.0
    means = np.array([m.mean_frequency for m in result.markers], dtype=float)
    return float(1.0 - np.prod(1.0 - means))


def probability_frame(run: RunResult) -> pd.DataFrame:
    """Per-chromosome marker count and match probability."""
    return pd.DataFrame(
        [
            {
                "chromosome": chrom.chromosome,
                "markers": len(chrom),
                "candidates": chrom.candidate_count,
                "probability": match_probability(chrom),
            }
            for chrom in run.chromosomes
        ],
        columns=["chromosome", "markers", "candidates", "probability"],
    )


def write_probabilities(run: RunResult, destination: Destination) -> None:
    with _open_destination(destination) as f:
        probability_frame(run).to_csv(f, sep="\t", index=False)


def to_document(run: RunResult) -> List[Dict[str, Any]]:
    """
    Structured form of the run: one object per chromosome.

    Example:
        [{"chromosome": "1", "markers": {"rs123": "A", "rs456": "G"}}]

    Marker ids are unique per chromosome in practice; if both alleles of
    one marker are selected, the better ranked allele is kept.
    """
    document = []
    for chrom in run.chromosomes:
        markers: Dict[str, str] = {}
        for marker in chrom.markers:
            markers.setdefault(marker.marker_id, marker.allele)
        document.append({"chromosome": chrom.chromosome, "markers": markers})
    return document


def write_document(run: RunResult, destination: Destination) -> None:
    """Write the structured document as indented JSON."""
    with _open_destination(destination) as f:
        json.dump(to_document(run), f, indent=2)
        f.write("\n")
