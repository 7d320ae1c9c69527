"""Note modifiers that claim horizontal space beside a notehead."""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from enum import Enum
from typing import TYPE_CHECKING, Final

from engrave.glyph import Glyph
from engrave.renderers import FontInfo
from engrave.tables import NOTATION_FONT_SCALE

if TYPE_CHECKING:
    from engrave.font import FontStack
    from engrave.renderers import RenderContext

ACCIDENTAL_CODES: Final[dict[str, str]] = {
    "#": "accidentalSharp",
    "##": "accidentalDoubleSharp",
    "b": "accidentalFlat",
    "bb": "accidentalDoubleFlat",
    "n": "accidentalNatural",
}

#: Gap kept between an accidental and whatever follows it.
ACCIDENTAL_SPACING: Final[float] = 3.0


class ModifierPosition(str, Enum):
    LEFT = "left"
    RIGHT = "right"


class Modifier(ABC):
    """
    Something attached to a note that needs room of its own.

    The owning tickable lays its modifiers out side by side: left modifiers
    before the notehead, right modifiers after it. Each modifier draws itself
    into the slot starting at the x it is handed.
    """

    position: ModifierPosition = ModifierPosition.LEFT

    @abstractmethod
    def get_width(self) -> float:
        """Horizontal space claimed by this modifier."""

    @abstractmethod
    def draw(self, ctx: RenderContext, x: float, y: float) -> None:
        """Draw into the slot whose left edge is ``x``; ``y`` is the note's line."""


class Accidental(Modifier):
    """Sharp, flat, natural or double variants, drawn from the font stack."""

    position = ModifierPosition.LEFT

    def __init__(
        self,
        type: str,
        font_stack: FontStack,
        point: float = NOTATION_FONT_SCALE,
    ) -> None:
        code = ACCIDENTAL_CODES.get(type)
        if code is None:
            supported = ", ".join(ACCIDENTAL_CODES)
            raise ValueError(f"Unknown accidental '{type}'. Use one of: {supported}.")
        self.type = type
        self.glyph = Glyph(code, point, font_stack)

    def get_width(self) -> float:
        return self.glyph.get_width() + ACCIDENTAL_SPACING

    def draw(self, ctx: RenderContext, x: float, y: float) -> None:
        self.glyph.render(ctx, x, y)


class Dot(Modifier):
    """Augmentation dot."""

    position = ModifierPosition.RIGHT

    def __init__(self, radius: float = 2.0, width: float = 5.0) -> None:
        self.radius = radius
        self.width = width

    @classmethod
    def from_font_stack(cls, font_stack: FontStack) -> Dot:
        """Size the dot from the stack's ``dot.radius`` and ``dot.width`` metrics."""
        return cls(
            radius=float(font_stack.lookup_metric("dot.radius", 2.0)),
            width=float(font_stack.lookup_metric("dot.width", 5.0)),
        )

    def get_width(self) -> float:
        return self.width

    def draw(self, ctx: RenderContext, x: float, y: float) -> None:
        ctx.begin_path()
        ctx.arc(x + self.width - self.radius, y, self.radius, 0.0, math.pi * 2, False)
        ctx.fill()


class Fingering(Modifier):
    """A fingering number set in small text beside the notehead."""

    def __init__(
        self,
        finger: str,
        position: ModifierPosition = ModifierPosition.LEFT,
        font: FontInfo | None = None,
    ) -> None:
        self.finger = finger
        self.position = ModifierPosition(position)
        self.font = font or FontInfo(family="Arial", size=9.0, weight="bold")

    def get_width(self) -> float:
        return len(self.finger) * 0.6 * self.font.size + 1.0

    def draw(self, ctx: RenderContext, x: float, y: float) -> None:
        ctx.save()
        ctx.set_font(self.font)
        ctx.fill_text(self.finger, x, y + self.font.size / 2)
        ctx.restore()
