"""ScoreExporter: lays out score documents and writes them as SVG or HTML."""

from __future__ import annotations

import json
import logging
from typing import Final

from engrave import __version__
from engrave.config import Settings, settings as default_settings
from engrave.default_font import default_font_stack
from engrave.font import FontStack
from engrave.formatter import Formatter, FormatterOptions
from engrave.modifiers import Accidental, Fingering
from engrave.renderers import RenderContext, SVGRenderContext, SVGRenderOptions, escape_xml
from engrave.score_models import NoteSpec, ScoreDocument, VoiceSpec
from engrave.tables import NoteType, parse_duration
from engrave.tickable import GhostNote, Note, Rest, TextNote, Tickable
from engrave.voice import Voice, VoiceMode, VoiceTime

logger = logging.getLogger(__name__)

SUPPORTED_FORMATS: Final[set[str]] = {"svg", "html"}

#: Vertical distance between the top lines of consecutive staves.
STAFF_DISTANCE: Final[float] = 100.0

#: Room left after the staff start before the first tick context.
NOTE_START_PADDING: Final[float] = 15.0


class ScoreExporter:
    """
    Format a score document and render it through an SVG render context.

    Supported formats:
    - ``svg``: the bare SVG document.
    - ``html``: a self-contained HTML page wrapping the SVG.
    """

    def __init__(
        self,
        title: str = "",
        output_format: str = "svg",
        font_stack: FontStack | None = None,
        width: float | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.title = title
        normalized = output_format.strip().lower()
        if normalized not in SUPPORTED_FORMATS:
            supported = ", ".join(sorted(SUPPORTED_FORMATS))
            raise ValueError(f"Unsupported output format '{output_format}'. Use one of: {supported}.")
        self.output_format = normalized
        self.settings = settings or default_settings
        self.font_stack = font_stack or default_font_stack()
        self.width = float(width if width is not None else self.settings.page_width)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _staff_top(self, staff_index: int) -> float:
        return self.settings.staff_top + staff_index * STAFF_DISTANCE

    def _line_y(self, staff_top: float, line: float) -> float:
        return staff_top + (4 - line) * self.settings.staff_spacing

    def _page_height(self, staff_count: int) -> float:
        bottom = self._staff_top(staff_count - 1) + 4 * self.settings.staff_spacing
        return max(float(self.settings.page_height), bottom + self.settings.staff_top)

    def _build_tickable(
        self, note: NoteSpec, staff_top: float, stem_up: bool, alone: bool
    ) -> Tickable:
        duration = parse_duration(note.duration)
        y = self._line_y(staff_top, note.line)
        point = self.settings.point_size

        tickable: Tickable
        if note.ghost or duration.type is NoteType.GHOST:
            tickable = GhostNote(duration)
        elif note.text is not None:
            tickable = TextNote(duration, note.text, y)
        elif duration.type is NoteType.REST:
            tickable = Rest(duration, self.font_stack, y, point)
            # A rest filling its whole voice sits in the middle of the measure.
            tickable.set_center_alignment(alone)
        else:
            tickable = Note(duration, self.font_stack, y, point, stem_up=stem_up)
            for accidental in note.accidentals:
                tickable.add_modifier(Accidental(accidental, self.font_stack, point))

        if note.fingering is not None and tickable.kind.is_visible:
            tickable.add_modifier(Fingering(note.fingering))
        if note.tuplet is not None:
            notes_count, notes_occupied = note.tuplet
            tickable.apply_tick_multiplier(notes_occupied, notes_count)
        return tickable

    def _build_voice(self, spec: VoiceSpec, time: VoiceTime, staff_top: float) -> Voice:
        voice = Voice(time, VoiceMode(spec.mode))
        alone = len(spec.notes) == 1
        for note in spec.notes:
            voice.add_tickable(self._build_tickable(note, staff_top, spec.stem == "up", alone))
        return voice

    def _draw_staff(self, ctx: RenderContext, staff_top: float) -> None:
        margin = self.settings.margin_left
        ctx.save()
        ctx.set_stroke_style("#999999")
        ctx.set_line_width(1.0)
        for line in range(5):
            y = self._line_y(staff_top, line)
            ctx.begin_path()
            ctx.move_to(margin, y)
            ctx.line_to(self.width - margin, y)
            ctx.stroke()
        ctx.restore()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def build_voices(self, document: ScoreDocument) -> list[list[Voice]]:
        """Build the voices of every staff, one list per staff."""
        time = VoiceTime.from_spec(document.time_signature)
        return [
            [self._build_voice(voice, time, self._staff_top(index)) for voice in staff.voices]
            for index, staff in enumerate(document.staves)
        ]

    def render_svg(self, document: ScoreDocument) -> str:
        """
        Format every voice of every staff together and draw the result.

        Raises:
            VoiceTicksMismatch: If the voices do not fit the time signature.
            UnableToFormat: If the page is too narrow for the music.
        """
        staves = self.build_voices(document)
        margin = self.settings.margin_left
        start_x = margin + NOTE_START_PADDING
        justify_width = self.width - start_x - margin

        formatter = Formatter(FormatterOptions.from_settings(self.settings))
        all_voices = [voice for voices in staves for voice in voices]
        formatter.format(all_voices, justify_width=justify_width, start_x=start_x)

        ctx = SVGRenderContext(
            self.width,
            self._page_height(len(document.staves)),
            SVGRenderOptions.from_settings(self.settings),
        )
        ctx.open_group("score")
        for index, voices in enumerate(staves):
            ctx.open_group("staff", f"staff-{index + 1}")
            self._draw_staff(ctx, self._staff_top(index))
            for voice in voices:
                voice.draw(ctx)
            ctx.close_group()
        ctx.close_group()

        logger.info(
            f"Rendered {len(staves)} staff(s), {len(all_voices)} voice(s) "
            f"into {len(formatter.get_tick_contexts())} tick contexts"
        )
        return ctx.get_document()

    def build_html(self, svgs: list[str]) -> str:
        """
        Wrap a list of SVG strings in a self-contained HTML document.

        Each SVG sits in its own ``.page`` block sized to the exporter's page
        width; in print, every page starts on a new sheet at its true width.
        """
        title_safe = escape_xml(self.title)
        header = f"  <header><h1>{title_safe}</h1></header>\n" if self.title else ""
        pages = "\n".join(f'    <div class="page">{svg}</div>' for svg in svgs)
        page_width = f"{self.width:g}px"

        return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1.0" />
  <meta name="generator" content="engrave {__version__}" />
  <title>{title_safe}</title>
  <style>
    :root {{ --page-width: {page_width}; }}
    body {{
      margin: 0;
      padding: 24px 12px;
      background: #e9e9e6;
      font-family: system-ui, sans-serif;
    }}
    header h1 {{
      margin: 0 auto 16px;
      max-width: var(--page-width);
      font-size: 1.4rem;
      font-weight: 600;
      color: #1d1d1d;
    }}
    .page {{
      width: min(100%, var(--page-width));
      margin: 0 auto 24px;
      background: #fff;
      border: 1px solid #c8c8c8;
    }}
    .page svg {{
      display: block;
      width: 100%;
      height: auto;
    }}
    @media print {{
      body {{
        background: none;
        padding: 0;
      }}
      .page {{
        width: var(--page-width);
        border: none;
        margin: 0;
        break-after: page;
      }}
      .page:last-child {{
        break-after: auto;
      }}
    }}
  </style>
</head>
<body>
{header}  <main>
{pages}
  </main>
</body>
</html>"""

    def render(self, document: ScoreDocument) -> str:
        """Render ``document`` in the selected output format."""
        svg = self.render_svg(document)
        if self.output_format == "html":
            return self.build_html([svg])
        return svg

    def export(self, score_path: str, output_path: str) -> None:
        """
        Read a score JSON file, render it and write the result to disk.

        Raises:
            ValueError: If the document is malformed.
            EngraveError: If the music cannot be laid out or a glyph is missing.
            OSError: If a file cannot be read or written.
        """
        with open(score_path, encoding="utf-8") as fh:
            document = ScoreDocument.from_dict(json.load(fh))
        if not self.title:
            self.title = document.title

        content = self.render(document)

        with open(output_path, "w", encoding="utf-8") as fh:
            fh.write(content)
