"""
Main CLI entry point for panmarker.

Defines the root command group and registers all subcommands.
Uses Click framework for argument parsing and help generation.
"""

import logging
import click
from typing import Optional

from panmarker import __version__


# Custom Click context settings for consistent behavior
CONTEXT_SETTINGS = dict(
    help_option_names=["-h", "--help"],
    max_content_width=120,
)


class AliasedGroup(click.Group):
    """
    Click group accepting unambiguous command prefixes and treating
    underscores and hyphens as equivalent.
    """

    def get_command(self, ctx: click.Context, cmd_name: str) -> Optional[click.Command]:
        normalized_name = cmd_name.replace("_", "-")
        rv = click.Group.get_command(self, ctx, normalized_name)
        if rv is not None:
            return rv

        matches = [x for x in self.list_commands(ctx) if x.startswith(normalized_name)]
        if not matches:
            return None
        elif len(matches) == 1:
            return click.Group.get_command(self, ctx, matches[0])
        else:
            ctx.fail(f"Ambiguous command '{cmd_name}': could be {', '.join(sorted(matches))}")
            return None


@click.group(cls=AliasedGroup, context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, "-V", "--version", prog_name="panmarker")
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Enable verbose output with detailed logging.",
)
@click.option(
    "--quiet", "-q",
    is_flag=True,
    help="Suppress all output except errors.",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, quiet: bool) -> None:
    """
    panmarker: population-agnostic SNP marker selection.

    Reads per-population, per-chromosome HapMap allele frequency tables and
    selects, for every chromosome, the alleles present at a similarly
    moderate frequency in all populations.

    \b
    Commands:
      find   - Run marker selection
      init   - Write a configuration template
      info   - Show version and dependencies

    \b
    Quick start:
      panmarker find -i hapmap-freqs/ --json markers.json
      panmarker find -i hapmap-freqs/ --preset rarest -a allow.txt --table -

    For detailed help on any command, use: panmarker <command> --help
    """
    ctx.ensure_object(dict)

    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet

    if verbose and not quiet:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )
    elif quiet:
        logging.basicConfig(level=logging.ERROR)
    else:
        logging.basicConfig(level=logging.INFO, format="%(message)s")


# Import and register subcommands
from panmarker.cli.markers import find, init

cli.add_command(find)
cli.add_command(init)


@cli.command()
@click.pass_context
def info(ctx: click.Context) -> None:
    """
    Display version and environment information.
    """
    import sys
    import platform

    click.echo(f"panmarker version: {__version__}")
    click.echo(f"Python version: {sys.version}")
    click.echo(f"Platform: {platform.platform()}")

    click.echo("\nInstalled dependencies:")

    dependencies = {
        "click": "click",
        "numpy": "numpy",
        "pandas": "pandas",
        "pyyaml": "yaml",
    }

    for name, import_name in dependencies.items():
        try:
            module = __import__(import_name)
            version = getattr(module, "__version__", "unknown")
            click.echo(f"  {name}: {version}")
        except ImportError:
            click.echo(f"  {name}: not installed")


if __name__ == "__main__":
    cli()
