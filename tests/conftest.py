"""
Test configuration and fixtures.
"""

import gzip
import pytest
from pathlib import Path
import tempfile
import shutil

from panmarker.core.hapmap import HAPMAP_HEADER


PATTERN = "allele_freqs_chr{chrom}_{pop}_r28_nr.b36_fwd.txt.gz"


def hapmap_line(rsid: str, ref: str, ref_freq: float, other: str, other_freq: float, chrom: str = "1") -> str:
    """Build one data line with the full 17-column layout."""
    return " ".join([
        rsid, f"chr{chrom}", "1000", "+", "ncbi_b36", "bgi", "urn:lsid:bgi.hapmap.org:Protocol:1",
        "urn:lsid:bgi.hapmap.org:Assay:1", "urn:lsid:dcc.hapmap.org:Panel:CEPH-30-trios:1", "QC+",
        ref, f"{ref_freq}", "10", other, f"{other_freq}", "110", "120",
    ])


def write_table(path: Path, rows, header: str = HAPMAP_HEADER, compress: bool = True) -> Path:
    """Write a frequency table; rows are (rsid, ref, ref_freq, other, other_freq)."""
    text = header + "\n" + "".join(hapmap_line(*row) + "\n" for row in rows)
    path.parent.mkdir(parents=True, exist_ok=True)
    if compress:
        with gzip.open(path, "wt") as f:
            f.write(text)
    else:
        path.write_text(text)
    return path


def write_panel(directory: Path, tables) -> Path:
    """
    Write one gzipped table per (population, chromosome).

    ``tables`` maps (population, chromosome) to row lists.
    """
    for (population, chromosome), rows in tables.items():
        write_table(directory / PATTERN.format(chrom=chromosome, pop=population), rows)
    return directory


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test outputs."""
    tmpdir = tempfile.mkdtemp()
    yield Path(tmpdir)
    shutil.rmtree(tmpdir)


@pytest.fixture
def small_panel(temp_dir):
    """
    Three populations, chromosomes 1 and X.

    chr1, 7 eligible alleles. Ideal ranking starts rs1/A, rs3/G, rs2/C,
    rs2/G; rarest ranking starts rs3/G, rs1/A, rs2/C. rs4 is missing from
    YRI and rs5/T is too rare in CEU; rs5/C stays eligible.
    chrX, 4 eligible alleles: rs10/A, rs11/G, then rs11/T, rs10/C.
    """
    chr1 = {
        "ASW": [("rs1", "A", 0.05, "T", 0.95), ("rs2", "C", 0.10, "G", 0.90),
                ("rs3", "G", 0.03, "A", 0.97), ("rs4", "A", 0.05, "G", 0.95),
                ("rs5", "T", 0.05, "C", 0.95)],
        "CEU": [("rs1", "A", 0.06, "T", 0.94), ("rs2", "C", 0.12, "G", 0.88),
                ("rs3", "G", 0.03, "A", 0.97), ("rs4", "A", 0.05, "G", 0.95),
                ("rs5", "T", 0.01, "C", 0.99)],
        "YRI": [("rs1", "A", 0.04, "T", 0.96), ("rs2", "C", 0.08, "G", 0.92),
                ("rs3", "G", 0.04, "A", 0.96),
                ("rs5", "T", 0.05, "C", 0.95)],
    }
    chrx = {
        "ASW": [("rs10", "A", 0.05, "C", 0.95), ("rs11", "G", 0.20, "T", 0.80)],
        "CEU": [("rs10", "A", 0.07, "C", 0.93), ("rs11", "G", 0.25, "T", 0.75)],
        "YRI": [("rs10", "A", 0.05, "C", 0.95), ("rs11", "G", 0.30, "T", 0.70)],
    }
    tables = {(pop, "1"): rows for pop, rows in chr1.items()}
    tables.update({(pop, "X"): rows for pop, rows in chrx.items()})
    return write_panel(temp_dir / "freqs", tables)
