"""Command line entry point.

Renders the publication posts of a BibSonomy user as HTML::

    publist -t myown -d pdfs USER_NAME API_KEY > publications.html
"""

import logging
import sys
from pathlib import Path
from typing import Any

import click
from click.core import ParameterSource
from rich.console import Console

from publist import __version__
from publist.cli.config import load_config
from publist.client.bibsonomy import BibSonomyClient
from publist.config import DEFAULT_STYLE, RenderOptions
from publist.exceptions import PublistError
from publist.pipeline import PublicationList

DEFAULT_POST_COUNT = 1000

# command line parameter -> render option
OPTION_PARAMS = {
    "style": "style",
    "directory": "pdf_directory",
    "preview_directory": "preview_directory",
    "year_headings": "year_headings",
    "group_menu": "show_group_menu",
    "abstracts": "show_abstract",
    "bibtex": "bibtex",
}


def setup_logging(
    verbose: bool = False, quiet: bool = False, debug: bool = False
) -> None:
    """Configure logging based on CLI flags."""
    if quiet:
        level = logging.ERROR
    elif verbose or debug:
        level = logging.DEBUG
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s"
        if not debug
        else "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def create_console(no_color: bool = False) -> Console:
    """Create Rich console for status messages on stderr."""
    return Console(
        stderr=True,
        no_color=no_color,
        highlight=not no_color,
        color_system=None if no_color else "auto",
    )


def parse_tags(value: str | None) -> list[str]:
    """Split a comma separated tag list."""
    if not value:
        return []
    return [tag.strip() for tag in value.split(",") if tag.strip()]


def build_options(
    ctx: click.Context, config_file: Path | None, params: dict[str, Any]
) -> RenderOptions:
    """Merge configuration files and explicitly given command line options."""
    data = load_config(config_file)
    for param, option in OPTION_PARAMS.items():
        source = ctx.get_parameter_source(param)
        if source in (ParameterSource.COMMANDLINE, ParameterSource.ENVIRONMENT):
            value = params[param]
            data[option] = str(value) if isinstance(value, Path) else value
    return RenderOptions.from_mapping(data)


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.argument("user_name")
@click.argument("api_key")
@click.option("--user", "-u", help="Return posts for USER instead of USER_NAME")
@click.option(
    "--tags", "-t", metavar="TAG,TAG,...", help="Return posts with the given tags"
)
@click.option(
    "--style", "-s", default=DEFAULT_STYLE, show_default=True, help="Citation style"
)
@click.option(
    "--number-of-posts",
    "-n",
    "count",
    type=click.IntRange(min=1),
    default=DEFAULT_POST_COUNT,
    show_default=True,
    help="Number of posts to download",
)
@click.option(
    "--directory",
    "-d",
    type=click.Path(file_okay=False, path_type=Path),
    help="Target directory for PDFs (if not given, no documents are downloaded)",
)
@click.option(
    "--preview-directory",
    "-p",
    type=click.Path(file_okay=False, path_type=Path),
    help="Target directory for preview images (if not given, no previews)",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the result to a file instead of stdout",
)
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["html", "text"]),
    default="html",
    show_default=True,
    help="Output format",
)
@click.option(
    "--config",
    "-c",
    "config_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file",
)
@click.option(
    "--year-headings/--no-year-headings",
    default=True,
    help="Group posts under year headings",
)
@click.option("--group-menu", is_flag=True, help="Render an index of the years")
@click.option("--abstracts", is_flag=True, help="Add abstract toggles")
@click.option(
    "--bibtex",
    type=click.Choice(["link", "embedded", "none"]),
    help="How BibTeX is offered",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--quiet", "-q", is_flag=True, help="Only report errors")
@click.option("--no-color", is_flag=True, help="Disable colored output")
@click.option("--debug", is_flag=True, help="Enable debug mode with full tracebacks")
@click.version_option(
    version=__version__, prog_name="publist", message="publist version %(version)s"
)
@click.pass_context
def cli(
    ctx: click.Context,
    user_name: str,
    api_key: str,
    user: str | None,
    tags: str | None,
    count: int,
    output: Path | None,
    output_format: str,
    config_file: Path | None,
    verbose: bool,
    quiet: bool,
    no_color: bool,
    debug: bool,
    **params: Any,
) -> None:
    """Generate a publication list from BibSonomy posts.

    USER_NAME and API_KEY are the BibSonomy credentials (get the API key at
    https://www.bibsonomy.org/settings?selTab=1).
    """
    setup_logging(verbose=verbose, quiet=quiet, debug=debug)
    console = create_console(no_color=no_color)

    try:
        options = build_options(ctx, config_file, params)
        with BibSonomyClient(user_name, api_key) as client:
            publications = PublicationList(client, options).render(
                user or user_name, parse_tags(tags), count, format=output_format
            )
    except KeyboardInterrupt:
        console.print("[yellow]Interrupted[/yellow]")
        ctx.exit(130)
    except PublistError as e:
        if debug:
            raise
        console.print(f"[red]Error:[/red] {e}")
        ctx.exit(1)

    if output:
        output.write_text(publications, encoding="utf-8")
        if not quiet:
            console.print(f"[green]✓[/green] Wrote publication list to {output}")
    else:
        click.echo(publications, nl=False)


def main() -> None:
    """Main entry point for the CLI application."""
    try:
        cli()
    except KeyboardInterrupt:
        # Exit gracefully on Ctrl+C
        sys.exit(130)


if __name__ == "__main__":
    main()
