"""Music fonts and ordered font stacks used to resolve glyph codes."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import cached_property
from typing import Any, Mapping, Sequence

from engrave.errors import GlyphNotFound
from engrave.glyph import parse_outline

logger = logging.getLogger(__name__)

DEFAULT_UNITS_PER_EM = 1000.0


@dataclass
class FontGlyph:
    """
    One glyph entry of a font, in font units.

    Attributes:
        outline_text: Outline command string (``"m 0 0 l 10 10 ..."``).
        x_min:        Left edge of the glyph.
        x_max:        Right edge of the glyph.
        ha:           Horizontal advance width.
        shift_x:      Horizontal anchor offset applied when drawing.
        shift_y:      Vertical anchor offset applied when drawing.
    """

    outline_text: str
    x_min: float
    x_max: float
    ha: float
    shift_x: float = 0.0
    shift_y: float = 0.0

    @cached_property
    def outline(self) -> tuple[float, ...]:
        # Parsed on first use; the result is immutable and shared.
        return parse_outline(self.outline_text)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> FontGlyph:
        return cls(
            outline_text=str(data.get("o", "")),
            x_min=float(data.get("x_min", 0.0)),
            x_max=float(data.get("x_max", 0.0)),
            ha=float(data.get("ha", 0.0)),
            shift_x=float(data.get("shift_x", 0.0)),
            shift_y=float(data.get("shift_y", 0.0)),
        )


@dataclass(frozen=True)
class GlyphMetrics:
    """Resolved metrics for a glyph code, as returned by :class:`FontStack`."""

    code: str
    font_name: str
    outline: tuple[float, ...]
    x_min: float
    x_max: float
    advance: float
    shift_x: float
    shift_y: float
    units_per_em: float

    @property
    def width(self) -> float:
        return self.x_max - self.x_min


@dataclass
class Font:
    """A sparse mapping from glyph code to glyph data, plus layout metrics."""

    name: str
    glyphs: dict[str, FontGlyph]
    units_per_em: float = DEFAULT_UNITS_PER_EM
    metrics: dict[str, Any] = field(default_factory=dict)

    def has_glyph(self, code: str) -> bool:
        return code in self.glyphs

    def lookup_metric(self, key: str, default: Any = None) -> Any:
        """Look up a dotted metric path such as ``"dot.radius"``."""
        current: Any = self.metrics
        for part in key.split("."):
            if not isinstance(current, Mapping) or part not in current:
                return default
            current = current[part]
        return current

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], name: str | None = None) -> Font:
        """
        Build a font from its JSON shape.

        Expected keys: ``glyphs`` (code -> ``{"x_min", "x_max", "ha", "o"}``),
        and optionally ``name``/``fontFamily``, ``resolution`` and ``metrics``.
        """
        glyphs = {
            code: FontGlyph.from_dict(entry) for code, entry in data.get("glyphs", {}).items()
        }
        font_name = name or data.get("name") or data.get("fontFamily") or "unnamed"
        return cls(
            name=str(font_name),
            glyphs=glyphs,
            units_per_em=float(data.get("resolution", DEFAULT_UNITS_PER_EM)),
            metrics=dict(data.get("metrics", {})),
        )


class FontStack:
    """
    An ordered list of fonts probed in priority order.

    The first font that defines a code wins. The stack never loads fonts
    itself; it is handed fully populated :class:`Font` objects and is
    read-only afterwards, so it can be shared between formatting passes.
    """

    def __init__(self, fonts: Sequence[Font]) -> None:
        self.fonts: tuple[Font, ...] = tuple(fonts)

    @property
    def primary(self) -> Font | None:
        return self.fonts[0] if self.fonts else None

    def lookup(self, code: str) -> tuple[Font, FontGlyph]:
        for font in self.fonts:
            glyph = font.glyphs.get(code)
            if glyph is not None:
                return font, glyph
        raise GlyphNotFound(code, [font.name for font in self.fonts])

    def load_metrics(self, code: str) -> GlyphMetrics:
        """
        Resolve ``code`` to outline and metrics from the first font defining it.

        Raises:
            GlyphNotFound: If no font in the stack defines ``code``.
            MalformedOutlineCommand: If the winning glyph's outline is corrupt.
        """
        font, glyph = self.lookup(code)
        logger.debug(f"Glyph {code} resolved from font {font.name}")
        return GlyphMetrics(
            code=code,
            font_name=font.name,
            outline=glyph.outline,
            x_min=glyph.x_min,
            x_max=glyph.x_max,
            advance=glyph.ha,
            shift_x=glyph.shift_x,
            shift_y=glyph.shift_y,
            units_per_em=font.units_per_em,
        )

    def get_width(self, code: str, point_size: float) -> float:
        """Advance width of ``code`` in pixels at ``point_size``."""
        metrics = self.load_metrics(code)
        return metrics.advance * point_size / metrics.units_per_em

    def lookup_metric(self, key: str, default: Any = None) -> Any:
        """Dotted metric lookup, probing fonts in stack order."""
        missing = object()
        for font in self.fonts:
            value = font.lookup_metric(key, missing)
            if value is not missing:
                return value
        return default
