"""
Marker selection CLI commands.

  find  - Run marker selection over all chromosomes
  init  - Write a YAML configuration template
"""

import click
from pathlib import Path
from typing import Optional

from panmarker.cli.utils import (
    echo_error,
    echo_info,
    echo_success,
    format_duration,
    format_number,
    split_list,
)
from panmarker.config import PRESETS, MarkerConfig, dump_config, load_config
from panmarker.markers.select import RankingStrategy


@click.command()
@click.option(
    "-i", "--input-dir",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Directory holding the allele frequency tables.",
)
@click.option(
    "--pattern",
    type=str,
    help="File name pattern with {chrom} and {pop} placeholders "
         "(default: allele_freqs_chr{chrom}_{pop}_r28_nr.b36_fwd.txt.gz).",
)
@click.option(
    "-c", "--config",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML configuration file (command line options take precedence).",
)
@click.option(
    "--preset",
    type=click.Choice(sorted(PRESETS)),
    default="ideal",
    show_default=True,
    help="Selection preset: 'ideal' (distance to ideal frequency, quota 1000) "
         "or 'rarest' (lowest max frequency first, quota 200).",
)
@click.option(
    "-p", "--populations",
    type=str,
    help="Comma-separated populations, in processing order (default: the 11 HapMap r28 panels).",
)
@click.option(
    "--chromosomes",
    type=str,
    help="Comma-separated chromosomes, in processing order (default: 1-22,X).",
)
@click.option(
    "-a", "--allow-list",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="File of marker ids (one per line); other markers are ignored.",
)
@click.option(
    "--ranking",
    type=click.Choice([s.value for s in RankingStrategy]),
    help="Ranking criterion (overrides the preset).",
)
@click.option("--quota", type=int, help="Markers per chromosome (overrides the preset).")
@click.option("--min-freq", type=float, help="Rarity floor: minimum frequency must exceed this (default: 0.02).")
@click.option("--max-freq", type=float, help="Optional ceiling on the maximum frequency.")
@click.option("--ideal-freq", type=float, help="Ideal frequency for the 'ideal' ranking (default: 0.05).")
@click.option(
    "--emit-all",
    is_flag=True,
    help="Emit every eligible candidate instead of truncating to the quota.",
)
@click.option("-t", "--threads", type=int, help="Worker threads (default: one per population).")
@click.option(
    "--table",
    type=click.Path(dir_okay=False, allow_dash=True, path_type=Path),
    help="Write the per-chromosome, per-marker TSV table ('-' for stdout).",
)
@click.option(
    "--probability",
    is_flag=True,
    help="Print the per-chromosome match probability 1 - prod(1 - mean freq).",
)
@click.option(
    "--json", "json_path",
    type=click.Path(dir_okay=False, allow_dash=True, path_type=Path),
    help="Write the selection as a JSON document ('-' for stdout).",
)
@click.pass_context
def find(
    ctx: click.Context,
    input_dir: Optional[Path],
    pattern: Optional[str],
    config: Optional[Path],
    preset: str,
    populations: Optional[str],
    chromosomes: Optional[str],
    allow_list: Optional[Path],
    ranking: Optional[str],
    quota: Optional[int],
    min_freq: Optional[float],
    max_freq: Optional[float],
    ideal_freq: Optional[float],
    emit_all: bool,
    threads: Optional[int],
    table: Optional[Path],
    probability: bool,
    json_path: Optional[Path],
) -> None:
    """
    Select population-agnostic markers for every chromosome.

    For each chromosome, every population's table is aggregated
    concurrently; alleles seen in all populations with a minimum
    frequency above the rarity floor are ranked and truncated to the
    quota. Any missing file, bad header, malformed line or chromosome
    with too few candidates aborts the run with exit status 1, and no
    output is written.

    \b
    Output (default: one rsid/allele per line on stdout):
      --table PATH     TSV: chromosome, marker, allele, frequency stats
      --probability    TSV on stdout: per-chromosome match probability
      --json PATH      [{"chromosome": "1", "markers": {"rs123": "A"}}, ...]
    """
    from panmarker.markers.orchestrate import run_markers
    from panmarker.markers.report import (
        format_slugs,
        write_document,
        write_probabilities,
        write_table,
    )

    quiet = ctx.obj.get("quiet", False) if ctx.obj else False

    run_config = MarkerConfig.from_preset(preset)
    if config is not None:
        loaded = load_config(config, base=run_config)
        if loaded.is_err():
            echo_error(f"Invalid configuration: {loaded.unwrap_err()}")
            raise SystemExit(1)
        run_config = loaded.unwrap()

    run_config = run_config.override(
        input_dir=input_dir,
        file_pattern=pattern,
        populations=split_list(populations),
        chromosomes=split_list(chromosomes),
        allow_list=allow_list,
        ranking=RankingStrategy(ranking) if ranking else None,
        quota=quota,
        min_freq=min_freq,
        max_freq=max_freq,
        ideal_freq=ideal_freq,
        emit_all=emit_all or None,
        threads=threads,
    )

    if not quiet:
        echo_info(f"Reading {len(run_config.populations)} populations x "
                  f"{len(run_config.chromosomes)} chromosomes from {run_config.input_dir}")

    result = run_markers(run_config)
    if result.is_err():
        echo_error(f"Marker selection failed: {result.unwrap_err()}")
        raise SystemExit(1)

    run = result.unwrap()

    if not quiet:
        for chrom in run:
            echo_success(f"chr{chrom.chromosome}: {format_number(len(chrom))} markers "
                         f"({format_number(chrom.candidate_count)} eligible)")
        echo_info(f"{format_number(run.total_markers)} markers selected in {format_duration(run.elapsed)}")

    if table is not None:
        write_table(run, table)
    if probability:
        write_probabilities(run, "-")
    if json_path is not None:
        write_document(run, json_path)
    if table is None and not probability and json_path is None:
        click.echo(format_slugs(run), nl=False)


@click.command()
@click.option(
    "-o", "--output",
    required=True,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Path of the YAML file to write.",
)
@click.option(
    "--preset",
    type=click.Choice(sorted(PRESETS)),
    default="ideal",
    show_default=True,
    help="Preset whose values fill the template.",
)
@click.option("--force", is_flag=True, help="Overwrite an existing file.")
def init(output: Path, preset: str, force: bool) -> None:
    """
    Write a configuration template.

    The file lists every setting with the preset's values and can be
    passed back with 'panmarker find --config'.
    """
    if output.exists() and not force:
        echo_error(f"Output file already exists: {output}")
        echo_info("Use --force to overwrite")
        raise SystemExit(1)

    result = dump_config(MarkerConfig.from_preset(preset), output)
    if result.is_err():
        echo_error(str(result.unwrap_err()))
        raise SystemExit(1)
    echo_success(f"Wrote {preset} configuration to {output}")
