"""Engrave CLI entry point."""

import json
import logging
import sys
from pathlib import Path

import click

from engrave import __version__
from engrave.config import settings
from engrave.errors import EngraveError, InvalidDuration
from engrave.font import Font
from engrave.tables import RESOLUTION, parse_duration

logger = logging.getLogger(__name__)


def _load_fonts(paths: tuple[str, ...]) -> list[Font]:
    """Load JSON font files in the order given; they take priority over the built-in font."""
    fonts: list[Font] = []
    for path in paths:
        with open(path, encoding="utf-8") as fh:
            data = json.load(fh)
        if not isinstance(data, dict):
            raise ValueError(f"Font file {path} must contain a JSON object.")
        fonts.append(Font.from_dict(data))
        logger.debug(f"Loaded font {fonts[-1].name} from {path}")
    return fonts


# ── CLI group ──────────────────────────────────────────────────────────────────

@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="engrave")
@click.option("--verbose", "-v", is_flag=True, help="Log debug output from the layout engine.")
def main(verbose: bool) -> None:
    """Engrave — tick-aligned music layout with SVG output."""
    level = logging.DEBUG if verbose else getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


# ── render subcommand ──────────────────────────────────────────────────────────

@main.command()
@click.argument("score_json", type=click.Path(exists=True, dir_okay=False, readable=True))
@click.option(
    "--output",
    "-o",
    default=None,
    metavar="PATH",
    help="Destination file path. Defaults to the score path with the format's extension.",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["svg", "html"], case_sensitive=False),
    default="svg",
    show_default=True,
    help="Output format: a bare SVG document or a self-contained HTML page.",
)
@click.option(
    "--width",
    type=click.IntRange(100, 10000),
    default=None,
    help=f"Page width in pixels. Defaults to {settings.page_width}.",
)
@click.option(
    "--title",
    default=None,
    metavar="TEXT",
    help="Title shown in HTML output. Defaults to the document title.",
)
@click.option(
    "--font",
    "font_paths",
    multiple=True,
    type=click.Path(exists=True, dir_okay=False, readable=True),
    metavar="PATH",
    help="JSON font file probed before the built-in font. Repeatable.",
)
def render(
    score_json: str,
    output: str | None,
    output_format: str,
    width: int | None,
    title: str | None,
    font_paths: tuple[str, ...],
) -> None:
    """
    Lay out a score JSON document and write it as SVG or HTML.

    SCORE_JSON is the path to a score document.

    \b
    Examples:
      engrave render melody.json
      engrave render melody.json --format html -o melody.html
      engrave render melody.json --width 800 --font bravura.json
    """
    from engrave.default_font import default_font_stack
    from engrave.score_exporter import ScoreExporter

    score_path = Path(score_json)
    normalized_format = output_format.lower()
    resolved_output = (
        output if output is not None else str(score_path.with_suffix(f".{normalized_format}"))
    )

    click.echo(f"engrave v{__version__}")
    click.echo(f"  Score  : {score_json}")
    click.echo(f"  Format : {normalized_format}")
    click.echo(f"  Output : {resolved_output}")
    click.echo()

    click.echo("[1/2] Loading fonts...")
    try:
        font_stack = default_font_stack(_load_fonts(font_paths))
    except OSError as exc:
        click.echo(f"  ERROR: Could not read font file — {exc}", err=True)
        sys.exit(1)
    except ValueError as exc:
        click.echo(f"  ERROR: Invalid font file — {exc}", err=True)
        sys.exit(1)
    click.echo(f"      Fonts : {', '.join(font.name for font in font_stack.fonts)}")

    click.echo("[2/2] Formatting and rendering...")
    exporter = ScoreExporter(
        title=title or "",
        output_format=normalized_format,
        font_stack=font_stack,
        width=width,
    )
    try:
        exporter.export(score_json, resolved_output)
    except OSError as exc:
        click.echo(f"  ERROR: Could not write output file — {exc}", err=True)
        sys.exit(1)
    except (ValueError, EngraveError) as exc:
        click.echo(f"  ERROR: Could not render score — {exc}", err=True)
        sys.exit(1)

    click.echo()
    click.echo(f"Done!  Open '{resolved_output}' in any browser.")


# ── ticks subcommand ───────────────────────────────────────────────────────────

@main.command()
@click.argument("codes", nargs=-1, required=True)
def ticks(codes: tuple[str, ...]) -> None:
    """
    Print the tick count of each duration code.

    \b
    Examples:
      engrave ticks q 8d 16r
    """
    click.echo(f"Resolution: {RESOLUTION} ticks per whole note")
    failed = False
    for code in codes:
        try:
            spec = parse_duration(code)
        except InvalidDuration as exc:
            click.echo(f"  ERROR: {exc}", err=True)
            failed = True
            continue
        click.echo(f"  {code:<8} {spec.ticks:>7}  ({spec.type.name.lower()})")
    if failed:
        sys.exit(1)
