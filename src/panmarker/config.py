"""
Run configuration.

A run is described by a MarkerConfig: where the frequency tables live,
which populations and chromosomes to process, and the selection
thresholds. Configurations can be built from a named preset, loaded from
a YAML file, and overridden field by field from the command line.

YAML layout (every key optional):

    input_dir: data/hapmap
    file_pattern: allele_freqs_chr{chrom}_{pop}_r28_nr.b36_fwd.txt.gz
    populations: [ASW, CEU, CHB, ...]
    chromosomes: ["1", "2", ..., "X"]
    allow_list: data/markers.txt
    threads: 11
    selection:
      ranking: ideal        # or rarest
      quota: 1000
      min_freq: 0.02
      max_freq: null
      ideal_freq: 0.05
      emit_all: false
"""

import logging
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from panmarker.core.errors import ConfigurationError, MarkerError, SourceUnavailable
from panmarker.core.io import DEFAULT_FILE_PATTERN
from panmarker.core.result import Result, Ok, Err
from panmarker.markers.select import (
    DEFAULT_QUOTA,
    IDEAL_MARKER_FREQ,
    MIN_MARKER_FREQ,
    RankingStrategy,
    SelectionCriteria,
)

logger = logging.getLogger(__name__)

HAPMAP_POPULATIONS = ["ASW", "CEU", "CHB", "CHD", "GIH", "JPT", "LWK", "MEX", "MKK", "TSI", "YRI"]
CHROMOSOMES = [str(i) for i in range(1, 23)] + ["X"]

PRESETS: Dict[str, Dict[str, Any]] = {
    # band closest to the ideal frequency, no allow-list
    "ideal": {"ranking": RankingStrategy.IDEAL, "quota": 1000},
    # rarest alleles first, usually combined with an allow-list
    "rarest": {"ranking": RankingStrategy.RAREST, "quota": 200},
}

_SELECTION_KEYS = {"ranking", "quota", "min_freq", "max_freq", "ideal_freq", "emit_all"}


@dataclass
class MarkerConfig:
    """Complete settings of one marker selection run."""
    input_dir: Path = Path(".")
    file_pattern: str = DEFAULT_FILE_PATTERN
    populations: List[str] = field(default_factory=lambda: list(HAPMAP_POPULATIONS))
    chromosomes: List[str] = field(default_factory=lambda: list(CHROMOSOMES))
    allow_list: Optional[Path] = None
    threads: Optional[int] = None
    ranking: RankingStrategy = RankingStrategy.IDEAL
    quota: int = DEFAULT_QUOTA
    min_freq: float = MIN_MARKER_FREQ
    max_freq: Optional[float] = None
    ideal_freq: float = IDEAL_MARKER_FREQ
    emit_all: bool = False

    @classmethod
    def from_preset(cls, name: str, **overrides: Any) -> "MarkerConfig":
        if name not in PRESETS:
            raise ValueError(f"Unknown preset '{name}', choose from: {', '.join(PRESETS)}")
        values = dict(PRESETS[name])
        values.update(overrides)
        return cls(**values)

    @property
    def criteria(self) -> SelectionCriteria:
        return SelectionCriteria(
            min_freq=self.min_freq,
            max_freq=self.max_freq,
            ideal_freq=self.ideal_freq,
            quota=self.quota,
            ranking=self.ranking,
            emit_all=self.emit_all,
        )

    @property
    def worker_count(self) -> int:
        """Population tasks run concurrently; default one worker per population."""
        return self.threads or max(len(self.populations), 1)

    def override(self, **values: Any) -> "MarkerConfig":
        """Return a copy with every non-None value applied."""
        return replace(self, **{k: v for k, v in values.items() if v is not None})

    def validate(self) -> Result["MarkerConfig", MarkerError]:
        """Check ranges and list contents."""
        errors = []
        if not self.populations:
            errors.append("at least one population is required")
        elif len(set(self.populations)) != len(self.populations):
            errors.append(f"duplicate populations in {self.populations}")
        if not self.chromosomes:
            errors.append("at least one chromosome is required")
        elif len(set(self.chromosomes)) != len(self.chromosomes):
            errors.append(f"duplicate chromosomes in {self.chromosomes}")
        if not 0.0 <= self.min_freq < 1.0:
            errors.append(f"min_freq must be in [0, 1), got {self.min_freq}")
        if self.max_freq is not None and not self.min_freq < self.max_freq <= 1.0:
            errors.append(f"max_freq must be in (min_freq, 1], got {self.max_freq}")
        if not self.min_freq < self.ideal_freq < 1.0:
            errors.append(f"ideal_freq must be in (min_freq, 1), got {self.ideal_freq}")
        if self.quota < 1:
            errors.append(f"quota must be >= 1, got {self.quota}")
        if self.threads is not None and self.threads < 1:
            errors.append(f"threads must be >= 1, got {self.threads}")
        if "{chrom}" not in self.file_pattern or "{pop}" not in self.file_pattern:
            errors.append(f"file_pattern must contain {{chrom}} and {{pop}}: {self.file_pattern}")

        if errors:
            return Err(ConfigurationError("; ".join(errors)))
        return Ok(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "input_dir": str(self.input_dir),
            "file_pattern": self.file_pattern,
            "populations": list(self.populations),
            "chromosomes": list(self.chromosomes),
            "allow_list": str(self.allow_list) if self.allow_list else None,
            "threads": self.threads,
            "selection": {
                "ranking": self.ranking.value,
                "quota": self.quota,
                "min_freq": self.min_freq,
                "max_freq": self.max_freq,
                "ideal_freq": self.ideal_freq,
                "emit_all": self.emit_all,
            },
        }


def config_from_dict(data: Dict[str, Any], base: Optional[MarkerConfig] = None) -> Result[MarkerConfig, MarkerError]:
    """
    Build a MarkerConfig from a parsed YAML mapping.

    Args:
        data: Mapping in the layout documented at module level
        base: Configuration supplying values for absent keys

    Returns:
        Ok(MarkerConfig) or Err(ConfigurationError) on unknown keys or bad values
    """
    if not isinstance(data, dict):
        return Err(ConfigurationError(f"configuration must be a mapping, got {type(data).__name__}"))

    flat = {k: v for k, v in data.items() if k != "selection"}
    selection = data.get("selection") or {}
    if not isinstance(selection, dict):
        return Err(ConfigurationError("'selection' must be a mapping"))
    unknown_selection = set(selection) - _SELECTION_KEYS
    if unknown_selection:
        return Err(ConfigurationError(f"unknown selection keys: {sorted(unknown_selection)}"))
    flat.update(selection)

    known = {f.name for f in fields(MarkerConfig)}
    unknown = set(flat) - known
    if unknown:
        return Err(ConfigurationError(f"unknown configuration keys: {sorted(unknown)}"))

    try:
        if "ranking" in flat:
            flat["ranking"] = RankingStrategy(str(flat["ranking"]).lower())
        if "input_dir" in flat:
            flat["input_dir"] = Path(flat["input_dir"])
        if flat.get("allow_list") is not None:
            flat["allow_list"] = Path(flat["allow_list"])
        for key in ("populations", "chromosomes"):
            if key in flat:
                flat[key] = [str(v) for v in flat[key]]
        for key in ("min_freq", "ideal_freq"):
            if key in flat:
                flat[key] = float(flat[key])
        if flat.get("max_freq") is not None:
            flat["max_freq"] = float(flat["max_freq"])
        if "quota" in flat:
            flat["quota"] = int(flat["quota"])
        if flat.get("threads") is not None:
            flat["threads"] = int(flat["threads"])
        if "emit_all" in flat:
            flat["emit_all"] = bool(flat["emit_all"])
    except (TypeError, ValueError) as e:
        return Err(ConfigurationError(f"invalid configuration value: {e}"))

    config = replace(base or MarkerConfig(), **flat)
    return config.validate()


def load_config(config_path: Path, base: Optional[MarkerConfig] = None) -> Result[MarkerConfig, MarkerError]:
    """
    Load a run configuration from a YAML file.

    Args:
        config_path: Path to YAML config
        base: Configuration supplying values for absent keys

    Returns:
        Result containing the validated configuration
    """
    config_path = Path(config_path)
    try:
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        return Err(SourceUnavailable(f"cannot read config: {e}", source=str(config_path)))
    except yaml.YAMLError as e:
        return Err(ConfigurationError(f"invalid YAML: {e}", source=str(config_path)))

    result = config_from_dict(data, base)
    if result.is_err():
        error = result.unwrap_err()
        error.source = error.source or str(config_path)
        return Err(error)

    logger.debug(f"Loaded configuration from {config_path}")
    return result


def dump_config(config: MarkerConfig, path: Path) -> Result[Path, MarkerError]:
    """Write a configuration as YAML."""
    try:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            yaml.safe_dump(config.to_dict(), f, sort_keys=False, default_flow_style=None)
        return Ok(path)
    except OSError as e:
        return Err(SourceUnavailable(f"cannot write config: {e}", source=str(path)))
