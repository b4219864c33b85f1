"""
panmarker: population-agnostic SNP marker selection.

Finds, per chromosome, the SNP alleles that occur at a similarly moderate
frequency in every population of a reference panel (HapMap allele
frequency tables), for use in sample identification and mixture
probability estimation.
"""

__version__ = "0.1.0"
__author__ = "Zi-Hao Huang"
__email__ = "zh384@cam.ac.uk"

from panmarker.core.result import Result, Ok, Err
from panmarker.config import MarkerConfig, load_config
from panmarker.markers.orchestrate import run_markers

__all__ = [
    "__version__",
    "Result",
    "Ok",
    "Err",
    "MarkerConfig",
    "load_config",
    "run_markers",
]
