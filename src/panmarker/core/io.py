"""
Line sources for frequency tables and allow-lists.

Opens gzip-compressed and plain text files transparently (the compression
is detected from the gzip magic bytes) and resolves the file of one
(population, chromosome) pair from a path pattern.
"""

from __future__ import annotations
import gzip
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, ContextManager, IO, Iterable, Iterator, Union

GZIP_MAGIC = b"\x1f\x8b"

DEFAULT_FILE_PATTERN = "allele_freqs_chr{chrom}_{pop}_r28_nr.b36_fwd.txt.gz"

# (population, chromosome) -> context manager yielding text or raw byte lines
SourceOpener = Callable[[str, str], ContextManager[Iterable[Union[str, bytes]]]]


def is_gzipped(path: Path) -> bool:
    """Detect gzip compression from the first two bytes."""
    with open(path, "rb") as f:
        return f.read(2) == GZIP_MAGIC


@contextmanager
def open_lines(path: Path | str, binary: bool = False) -> Iterator[IO]:
    """
    Open a text file, decompressing on the fly if it is gzipped.

    With ``binary`` the handle yields undecoded byte lines, leaving the
    decoding (and its error reporting) to the caller.

    Raises:
        OSError: if the file is missing or unreadable (callers convert
            this to SourceUnavailable)
    """
    path = Path(path)
    if binary:
        handle = gzip.open(path, "rb") if is_gzipped(path) else open(path, "rb")
    elif is_gzipped(path):
        handle = gzip.open(path, "rt", encoding="utf-8", newline="")
    else:
        handle = open(path, "rt", encoding="utf-8", newline="")
    try:
        yield handle
    finally:
        handle.close()


def resolve_source_path(input_dir: Path | str, pattern: str, population: str, chromosome: str) -> Path:
    """
    Build the path of one population/chromosome table.

    ``pattern`` may use the ``{chrom}`` and ``{pop}`` placeholders, e.g.
    ``allele_freqs_chr{chrom}_{pop}_r28_nr.b36_fwd.txt.gz``.
    """
    return Path(input_dir) / pattern.format(chrom=chromosome, pop=population)


def pattern_opener(input_dir: Path | str, pattern: str = DEFAULT_FILE_PATTERN) -> SourceOpener:
    """Return a SourceOpener reading files laid out by ``pattern`` under ``input_dir``."""

    def opener(population: str, chromosome: str) -> ContextManager[Iterable[Union[str, bytes]]]:
        return open_lines(resolve_source_path(input_dir, pattern, population, chromosome), binary=True)

    return opener
