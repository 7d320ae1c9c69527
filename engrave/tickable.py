"""Tickables: anything that occupies musical time and needs horizontal room."""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import TYPE_CHECKING, Final

from engrave.bounding_box import BoundingBox
from engrave.errors import UnformattedTickable
from engrave.fraction import Fraction
from engrave.glyph import Glyph
from engrave.modifiers import Dot, Modifier, ModifierPosition
from engrave.renderers import FontInfo
from engrave.tables import NOTATION_FONT_SCALE, DurationSpec

if TYPE_CHECKING:
    from engrave.font import FontStack
    from engrave.renderers import RenderContext
    from engrave.voice import Voice

NOTEHEAD_CODES: Final[dict[str, str]] = {
    "1/2": "noteheadDoubleWhole",
    "1": "noteheadWhole",
    "2": "noteheadHalf",
}

REST_CODES: Final[dict[str, str]] = {
    "1/2": "restDoubleWhole",
    "1": "restWhole",
    "2": "restHalf",
    "4": "restQuarter",
    "8": "rest8th",
    "16": "rest16th",
    "32": "rest32nd",
    "64": "rest64th",
    "128": "rest128th",
    "256": "rest256th",
}

STEM_HEIGHT: Final[float] = 35.0


class TickableKind(Enum):
    """Closed set of tickable variants."""

    NOTE = "note"
    REST = "rest"
    GHOST = "ghost"
    TEXT = "text"

    @property
    def occupies_ticks(self) -> bool:
        return True

    @property
    def is_stemmable(self) -> bool:
        return self is TickableKind.NOTE

    @property
    def is_visible(self) -> bool:
        return self is not TickableKind.GHOST


class Tickable(ABC):
    """
    Base for every object laid out by the formatter.

    The formatter only calls :meth:`get_ticks`, :meth:`pre_format` and
    :meth:`set_x_position`. Drawing is left to the caller once a formatting
    pass has completed; drawing an unformatted tickable raises
    :class:`UnformattedTickable`.
    """

    kind: TickableKind

    def __init__(self, duration: DurationSpec) -> None:
        self.duration = duration
        self.intrinsic_ticks = Fraction(duration.ticks, 1)
        self.tick_multiplier = Fraction(1, 1)
        self.ticks = self.intrinsic_ticks.clone()
        self.modifiers: list[Modifier] = []
        self.ignore_ticks = False
        self.center_align = False
        self.width = 0.0
        self.voice: Voice | None = None
        self._x: float | None = None

    # ------------------------------------------------------------------
    # Ticks
    # ------------------------------------------------------------------

    def get_ticks(self) -> Fraction:
        return self.ticks.clone()

    def apply_tick_multiplier(self, numerator: int, denominator: int) -> Tickable:
        """Scale the duration, e.g. ``(2, 3)`` for a triplet member."""
        self.tick_multiplier.multiply(numerator, denominator)
        self.ticks = self.intrinsic_ticks.clone().multiply(self.tick_multiplier)
        return self

    def set_ignore_ticks(self, ignore: bool = True) -> Tickable:
        self.ignore_ticks = ignore
        return self

    def set_center_alignment(self, center: bool = True) -> Tickable:
        self.center_align = center
        return self

    # ------------------------------------------------------------------
    # Modifiers
    # ------------------------------------------------------------------

    def add_modifier(self, modifier: Modifier) -> Tickable:
        self.modifiers.append(modifier)
        return self

    def left_modifiers(self) -> list[Modifier]:
        return [m for m in self.modifiers if m.position is ModifierPosition.LEFT]

    def right_modifiers(self) -> list[Modifier]:
        return [m for m in self.modifiers if m.position is ModifierPosition.RIGHT]

    def get_left_modifier_width(self) -> float:
        return sum(m.get_width() for m in self.left_modifiers())

    def get_right_modifier_width(self) -> float:
        return sum(m.get_width() for m in self.right_modifiers())

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------

    @abstractmethod
    def get_content_width(self) -> float:
        """Width of the symbol itself, without modifiers."""

    def pre_format(self) -> float:
        """Recompute and return the minimum layout width for this pass."""
        self.width = (
            self.get_left_modifier_width()
            + self.get_content_width()
            + self.get_right_modifier_width()
        )
        return self.width

    def get_width(self) -> float:
        return self.width

    def set_x_position(self, x: float) -> None:
        self._x = x

    def invalidate_position(self) -> None:
        self._x = None

    @property
    def is_formatted(self) -> bool:
        return self._x is not None

    def get_x(self) -> float:
        if self._x is None:
            raise UnformattedTickable(
                f"{type(self).__name__} has no x position; format its voice first."
            )
        return self._x

    def get_content_x(self) -> float:
        """Left edge of the symbol, after any left modifiers."""
        return self.get_x() + self.get_left_modifier_width()

    # ------------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------------

    @abstractmethod
    def draw(self, ctx: RenderContext) -> None: ...

    def get_bounding_box(self) -> BoundingBox | None:
        return None

    def draw_modifiers(self, ctx: RenderContext, y: float) -> None:
        cursor = self.get_x()
        for modifier in self.left_modifiers():
            modifier.draw(ctx, cursor, y)
            cursor += modifier.get_width()
        cursor = self.get_content_x() + self.get_content_width()
        for modifier in self.right_modifiers():
            modifier.draw(ctx, cursor, y)
            cursor += modifier.get_width()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(duration={self.duration.raw_value!r}, ticks={self.ticks})"


class Note(Tickable):
    """A notehead with an optional stem; dots from the duration are attached."""

    kind = TickableKind.NOTE

    def __init__(
        self,
        duration: DurationSpec,
        font_stack: FontStack,
        y: float,
        point: float = NOTATION_FONT_SCALE,
        stem_up: bool = True,
        glyph_code: str | None = None,
    ) -> None:
        super().__init__(duration)
        self.y = y
        self.stem_up = stem_up
        code = glyph_code or NOTEHEAD_CODES.get(duration.value, "noteheadBlack")
        self.glyph = Glyph(code, point, font_stack)
        for _ in range(duration.dots):
            self.add_modifier(Dot.from_font_stack(font_stack))

    @property
    def has_stem(self) -> bool:
        return self.kind.is_stemmable and self.duration.value not in ("1/2", "1")

    def get_content_width(self) -> float:
        return self.glyph.get_width()

    def get_bounding_box(self) -> BoundingBox:
        return self.glyph.get_bounding_box_at(self.get_content_x(), self.y)

    def draw(self, ctx: RenderContext) -> None:
        x = self.get_content_x()
        ctx.open_group("note")
        self.glyph.render(ctx, x, self.y)
        if self.has_stem:
            self._draw_stem(ctx, x)
        self.draw_modifiers(ctx, self.y)
        ctx.close_group()

    def _draw_stem(self, ctx: RenderContext, x: float) -> None:
        if self.stem_up:
            stem_x, end_y = x + self.glyph.get_width() - 0.5, self.y - STEM_HEIGHT
        else:
            stem_x, end_y = x + 0.5, self.y + STEM_HEIGHT
        ctx.save()
        ctx.set_line_width(1.5)
        ctx.begin_path()
        ctx.move_to(stem_x, self.y)
        ctx.line_to(stem_x, end_y)
        ctx.stroke()
        ctx.restore()


class Rest(Tickable):
    """A rest glyph chosen from the duration value."""

    kind = TickableKind.REST

    def __init__(
        self,
        duration: DurationSpec,
        font_stack: FontStack,
        y: float,
        point: float = NOTATION_FONT_SCALE,
    ) -> None:
        super().__init__(duration)
        self.y = y
        self.glyph = Glyph(REST_CODES[duration.value], point, font_stack)
        for _ in range(duration.dots):
            self.add_modifier(Dot.from_font_stack(font_stack))

    def get_content_width(self) -> float:
        return self.glyph.get_width()

    def get_bounding_box(self) -> BoundingBox:
        return self.glyph.get_bounding_box_at(self.get_content_x(), self.y)

    def draw(self, ctx: RenderContext) -> None:
        ctx.open_group("rest")
        self.glyph.render(ctx, self.get_content_x(), self.y)
        self.draw_modifiers(ctx, self.y)
        ctx.close_group()


class GhostNote(Tickable):
    """Reserves ticks in a voice without taking width or drawing anything."""

    kind = TickableKind.GHOST

    def get_content_width(self) -> float:
        return 0.0

    def pre_format(self) -> float:
        self.width = 0.0
        return self.width

    def draw(self, ctx: RenderContext) -> None:
        # Nothing to draw, but a completed pass is still required.
        self.get_x()


class TextNote(Tickable):
    """A text annotation that takes part in tick alignment."""

    kind = TickableKind.TEXT

    def __init__(
        self,
        duration: DurationSpec,
        text: str,
        y: float,
        font: FontInfo | None = None,
    ) -> None:
        super().__init__(duration)
        self.text = text
        self.y = y
        self.font = font or FontInfo(family="Arial", size=12.0)

    def get_content_width(self) -> float:
        return len(self.text) * 0.6 * self.font.size

    def get_bounding_box(self) -> BoundingBox:
        size = self.font.size
        return BoundingBox(self.get_content_x(), self.y - size * 0.8, self.get_content_width(), size)

    def draw(self, ctx: RenderContext) -> None:
        ctx.save()
        ctx.set_font(self.font)
        ctx.fill_text(self.text, self.get_content_x(), self.y)
        ctx.restore()
