"""
Chromosome orchestration.

Processes the configured chromosomes strictly one after another. For each
chromosome a fresh aggregator is created and one task per population
streams that population's table into it; all tasks run concurrently on a
thread pool and are joined before selection runs. The first failing task
aborts the chromosome and the run.

Run states:
    IDLE -> LOADING_ALLOW_LIST (optional) ->
    AGGREGATING -> SELECTING -> RECORDED (per chromosome) -> DONE
Any failure moves the run to FAILED.
"""

import logging
import threading
import time
import zlib
from concurrent.futures import ThreadPoolExecutor, as_completed, Future
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from panmarker.config import MarkerConfig
from panmarker.core.errors import MarkerError, SourceUnavailable
from panmarker.core.hapmap import iter_records
from panmarker.core.io import SourceOpener, pattern_opener, resolve_source_path
from panmarker.core.models import ChromosomeResult, RunResult
from panmarker.core.result import Result, Ok, Err
from panmarker.markers.aggregate import MarkerAggregator
from panmarker.markers.allowlist import AllowList, load_allow_list
from panmarker.markers.select import select_markers

logger = logging.getLogger(__name__)


class RunState(Enum):
    """Orchestrator states."""
    IDLE = "idle"
    LOADING_ALLOW_LIST = "loading_allow_list"
    AGGREGATING = "aggregating"
    SELECTING = "selecting"
    RECORDED = "recorded"
    DONE = "done"
    FAILED = "failed"


class AbortedError(MarkerError):
    """A population task stopped because another task already failed."""

    kind = "aborted"


@dataclass
class ChromosomeContext:
    """State of the chromosome in progress; replaced for every chromosome."""
    chromosome: str
    aggregator: MarkerAggregator
    line_counts: Dict[str, int] = field(default_factory=dict)


@dataclass
class RunContext:
    """
    State owned by one run.

    Attributes:
        config: Validated run configuration
        opener: Opens the line source of a (population, chromosome) pair
        allow_list: Loaded allow-list, if any
        results: Recorded chromosome results, in processing order
        state: Current orchestrator state
        abort: Set by the first failing population task
    """
    config: MarkerConfig
    opener: SourceOpener
    allow_list: Optional[AllowList] = None
    results: List[ChromosomeResult] = field(default_factory=list)
    state: RunState = RunState.IDLE
    abort: threading.Event = field(default_factory=threading.Event)

    @property
    def populations(self) -> List[str]:
        return self.config.populations

    def transition(self, state: RunState, chromosome: Optional[str] = None) -> None:
        where = f" (chr{chromosome})" if chromosome else ""
        logger.debug(f"{self.state.value} -> {state.value}{where}")
        self.state = state


def aggregate_population(
    ctx: RunContext,
    chrom_ctx: ChromosomeContext,
    population_index: int,
    population: str,
) -> Result[int, MarkerError]:
    """
    Stream one population's table into the chromosome's aggregator.

    Args:
        ctx: Run context
        chrom_ctx: Context of the chromosome being aggregated
        population_index: Position of the population in the pinned order
        population: Population name

    Returns:
        Ok(number of data lines) or Err(SourceUnavailable / ConfigurationError /
        ParseError / AbortedError)
    """
    chromosome = chrom_ctx.chromosome
    source = str(resolve_source_path(
        ctx.config.input_dir, ctx.config.file_pattern, population, chromosome
    ))
    aggregator = chrom_ctx.aggregator
    line_count = 0

    try:
        with ctx.opener(population, chromosome) as lines:
            for line_count, record in enumerate(iter_records(lines, source), start=1):
                if ctx.abort.is_set():
                    return Err(AbortedError("stopped after another task failed",
                                            chromosome=chromosome, population=population))
                if record.is_err():
                    return Err(record.unwrap_err().with_context(chromosome, population))
                record = record.unwrap()
                aggregator.observe_record(record, population_index, record.line_number)
    except (OSError, EOFError, zlib.error) as e:
        return Err(SourceUnavailable(f"cannot read input: {e}", chromosome=chromosome,
                                     population=population, source=source))

    chrom_ctx.line_counts[population] = line_count
    logger.info(f"   Finished processing {chromosome}>{population}")
    return Ok(line_count)


def _join(futures: Dict[Future, str], ctx: RunContext, chromosome: str) -> Optional[MarkerError]:
    """Wait for every population task; return the first real failure."""
    first_error: Optional[MarkerError] = None
    for future in as_completed(futures):
        if future.cancelled():
            continue
        try:
            result = future.result()
        except Exception as e:
            logger.debug(f"Population task {chromosome}>{futures[future]} raised", exc_info=True)
            result = Err(SourceUnavailable(f"population task failed: {e}",
                                           chromosome=chromosome, population=futures[future]))
        if result.is_ok():
            continue
        error = result.unwrap_err()
        if isinstance(error, AbortedError):
            continue
        if first_error is None:
            first_error = error
            ctx.abort.set()
            for pending in futures:
                pending.cancel()
    return first_error


def analyse_chromosome(ctx: RunContext, chromosome: str) -> Result[ChromosomeResult, MarkerError]:
    """
    Aggregate every population of one chromosome, then select its markers.

    Args:
        ctx: Run context
        chromosome: Chromosome label

    Returns:
        Ok(ChromosomeResult) or the first error raised by any population task
        or by the selector
    """
    logger.info(f"Starting analysis of chromosome {chromosome}")
    chrom_ctx = ChromosomeContext(
        chromosome=chromosome,
        aggregator=MarkerAggregator(chromosome, ctx.allow_list),
    )
    ctx.transition(RunState.AGGREGATING, chromosome)

    with ThreadPoolExecutor(max_workers=ctx.config.worker_count) as executor:
        futures = {
            executor.submit(aggregate_population, ctx, chrom_ctx, index, population): population
            for index, population in enumerate(ctx.populations)
        }
        error = _join(futures, ctx, chromosome)

    if error is not None:
        return Err(error)

    if ctx.allow_list is not None:
        logger.debug(f"chr{chromosome}: {chrom_ctx.aggregator.skipped:,} observations outside the allow-list")

    ctx.transition(RunState.SELECTING, chromosome)
    return select_markers(
        chrom_ctx.aggregator,
        population_count=len(ctx.populations),
        criteria=ctx.config.criteria,
        chromosome=chromosome,
    )


def run_markers(config: MarkerConfig, opener: Optional[SourceOpener] = None) -> Result[RunResult, MarkerError]:
    """
    Run marker selection over every configured chromosome.

    Main entry point of the pipeline. Chromosomes are processed in the
    configured order; the first error stops the run and is returned.
    Chromosomes recorded before the failure are discarded with it.

    Args:
        config: Run configuration
        opener: Line source factory; defaults to files resolved from
            ``config.input_dir`` and ``config.file_pattern``

    Returns:
        Ok(RunResult) on success, Err(MarkerError) on the first failure
    """
    validated = config.validate()
    if validated.is_err():
        return validated

    start = time.monotonic()
    ctx = RunContext(
        config=config,
        opener=opener or pattern_opener(config.input_dir, config.file_pattern),
    )

    logger.info(f"Populations ({len(config.populations)}): {', '.join(config.populations)}")
    logger.info(f"Chromosomes: {', '.join(config.chromosomes)}")
    logger.info(f"Ranking: {config.ranking.value}, quota: {config.quota}"
                f"{' (emit all)' if config.emit_all else ''}")

    if config.allow_list is not None:
        ctx.transition(RunState.LOADING_ALLOW_LIST)
        allow_list = load_allow_list(config.allow_list)
        if allow_list.is_err():
            ctx.transition(RunState.FAILED)
            return allow_list
        ctx.allow_list = allow_list.unwrap()

    for chromosome in config.chromosomes:
        result = analyse_chromosome(ctx, chromosome)
        if result.is_err():
            ctx.transition(RunState.FAILED, chromosome)
            return result
        ctx.results.append(result.unwrap())
        ctx.transition(RunState.RECORDED, chromosome)

    ctx.transition(RunState.DONE)
    elapsed = time.monotonic() - start
    logger.info(f"DONE! {sum(len(r) for r in ctx.results):,} markers on "
                f"{len(ctx.results)} chromosomes in {elapsed:.1f}s")

    return Ok(RunResult(
        populations=list(config.populations),
        chromosomes=list(ctx.results),
        elapsed=elapsed,
    ))
