"""Render context interface and the SVG document backend."""

from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import TYPE_CHECKING

from engrave.errors import UnbalancedGroup

if TYPE_CHECKING:
    from engrave.config import Settings

logger = logging.getLogger(__name__)

SVG_NAMESPACE = "http://www.w3.org/2000/svg"


def escape_xml(text: str) -> str:
    """Escape the characters that are unsafe in XML text and attribute values."""
    return (
        text.replace("&", "&amp;")
        .replace('"', "&quot;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
    )


class LineCap(str, Enum):
    BUTT = "butt"
    ROUND = "round"
    SQUARE = "square"


@dataclass(frozen=True)
class TextMeasure:
    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class FontInfo:
    """A text font; ``size`` is in pixels."""

    family: str = "Arial"
    size: float = 10.0
    weight: str = "normal"
    style: str = "normal"


class RenderContext(ABC):
    """
    Abstract drawing surface. Everything drawn by engrave goes through it.

    A context accumulates state across calls and is not safe to share
    between concurrent drawing passes: use one context per rendering task.
    """

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @abstractmethod
    def clear(self) -> None:
        """Discard everything drawn so far."""

    @abstractmethod
    def save(self) -> RenderContext:
        """Push the current style state."""

    @abstractmethod
    def restore(self) -> RenderContext:
        """Pop the most recently saved style state."""

    # ------------------------------------------------------------------
    # Styles
    # ------------------------------------------------------------------

    @abstractmethod
    def set_fill_style(self, style: str) -> RenderContext: ...

    @abstractmethod
    def set_stroke_style(self, style: str) -> RenderContext: ...

    @abstractmethod
    def set_line_width(self, width: float) -> RenderContext: ...

    @abstractmethod
    def set_line_cap(self, cap: LineCap) -> RenderContext: ...

    @abstractmethod
    def set_line_dash(self, pattern: list[float]) -> RenderContext: ...

    @abstractmethod
    def set_font(self, font: FontInfo) -> RenderContext: ...

    @abstractmethod
    def scale(self, x: float, y: float) -> RenderContext: ...

    @abstractmethod
    def resize(self, width: float, height: float) -> RenderContext: ...

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------

    @abstractmethod
    def begin_path(self) -> RenderContext: ...

    @abstractmethod
    def move_to(self, x: float, y: float) -> RenderContext: ...

    @abstractmethod
    def line_to(self, x: float, y: float) -> RenderContext: ...

    @abstractmethod
    def quadratic_curve_to(self, cpx: float, cpy: float, x: float, y: float) -> RenderContext: ...

    @abstractmethod
    def bezier_curve_to(
        self, cp1x: float, cp1y: float, cp2x: float, cp2y: float, x: float, y: float
    ) -> RenderContext: ...

    @abstractmethod
    def arc(
        self,
        x: float,
        y: float,
        radius: float,
        start_angle: float,
        end_angle: float,
        counterclockwise: bool = False,
    ) -> RenderContext: ...

    @abstractmethod
    def rect(self, x: float, y: float, width: float, height: float) -> RenderContext: ...

    @abstractmethod
    def close_path(self) -> RenderContext: ...

    @abstractmethod
    def fill(self) -> RenderContext:
        """Commit the current path using the current fill style."""

    @abstractmethod
    def stroke(self) -> RenderContext:
        """Commit the current path using the current stroke style."""

    @abstractmethod
    def fill_rect(self, x: float, y: float, width: float, height: float) -> RenderContext: ...

    @abstractmethod
    def clear_rect(self, x: float, y: float, width: float, height: float) -> RenderContext: ...

    # ------------------------------------------------------------------
    # Text
    # ------------------------------------------------------------------

    @abstractmethod
    def fill_text(self, text: str, x: float, y: float) -> RenderContext: ...

    @abstractmethod
    def measure_text(self, text: str) -> TextMeasure: ...

    # ------------------------------------------------------------------
    # Grouping and output
    # ------------------------------------------------------------------

    @abstractmethod
    def open_group(self, cls: str | None = None, id: str | None = None) -> int:
        """Open a nestable group; returns its depth."""

    @abstractmethod
    def close_group(self) -> None:
        """Close the innermost open group."""

    @abstractmethod
    def get_document(self) -> str:
        """Serialize everything drawn into the output document."""


@dataclass(frozen=True)
class SVGRenderOptions:
    """
    Serialization options.

    Attributes:
        precision:          Decimal places kept for every number.
        include_xml_header: Prefix the document with an XML declaration.
        include_view_box:   Emit ``viewBox="0 0 width height"`` on the root.
    """

    precision: int = 3
    include_xml_header: bool = False
    include_view_box: bool = True

    @classmethod
    def from_settings(cls, settings: Settings) -> SVGRenderOptions:
        return cls(precision=settings.render_precision)


@dataclass
class _GraphicsState:
    fill_style: str = "#000000"
    stroke_style: str = "#000000"
    line_width: float = 1.0
    line_cap: LineCap = LineCap.BUTT
    line_dash: list[float] = field(default_factory=list)
    font: FontInfo = field(default_factory=FontInfo)
    scale_x: float = 1.0
    scale_y: float = 1.0


class SVGRenderContext(RenderContext):
    """
    Records drawing operations and serializes them as a deterministic SVG.

    Every committed path becomes one ``<path>`` element whose ``d`` string is
    the concatenation of its commands (``M``, ``L``, ``Q``, ``C``, ``A``, ``Z``),
    with numbers rounded to ``options.precision`` places. Groups are written
    as ``<g>`` open/close tags at the point they are opened/closed.
    """

    def __init__(
        self,
        width: float,
        height: float,
        options: SVGRenderOptions | None = None,
    ) -> None:
        self.width = max(1.0, width)
        self.height = max(1.0, height)
        self.options = options or SVGRenderOptions()
        self._state = _GraphicsState()
        self._state_stack: list[_GraphicsState] = []
        self._path: list[str] = []
        self._current_point: tuple[float, float] | None = None
        self._subpath_start: tuple[float, float] | None = None
        self._elements: list[str] = []
        self._groups: list[tuple[str | None, str | None]] = []

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    def clear(self) -> None:
        self._elements.clear()
        self._groups.clear()
        self.begin_path()

    def save(self) -> SVGRenderContext:
        self._state_stack.append(replace(self._state, line_dash=list(self._state.line_dash)))
        return self

    def restore(self) -> SVGRenderContext:
        if self._state_stack:
            self._state = self._state_stack.pop()
        return self

    @property
    def fill_style(self) -> str:
        return self._state.fill_style

    @property
    def stroke_style(self) -> str:
        return self._state.stroke_style

    def set_fill_style(self, style: str) -> SVGRenderContext:
        self._state.fill_style = style
        return self

    def set_stroke_style(self, style: str) -> SVGRenderContext:
        self._state.stroke_style = style
        return self

    def set_line_width(self, width: float) -> SVGRenderContext:
        self._state.line_width = max(0.0, width)
        return self

    def set_line_cap(self, cap: LineCap) -> SVGRenderContext:
        self._state.line_cap = LineCap(cap)
        return self

    def set_line_dash(self, pattern: list[float]) -> SVGRenderContext:
        self._state.line_dash = list(pattern)
        return self

    def set_font(self, font: FontInfo) -> SVGRenderContext:
        self._state.font = font
        return self

    def scale(self, x: float, y: float) -> SVGRenderContext:
        self._state.scale_x *= x
        self._state.scale_y *= y
        return self

    def resize(self, width: float, height: float) -> SVGRenderContext:
        self.width = max(1.0, width)
        self.height = max(1.0, height)
        return self

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------

    def begin_path(self) -> SVGRenderContext:
        self._path = []
        self._current_point = None
        self._subpath_start = None
        return self

    def move_to(self, x: float, y: float) -> SVGRenderContext:
        point = self._scaled(x, y)
        self._path.append(f"M {self._fmt(point[0])} {self._fmt(point[1])}")
        self._current_point = point
        self._subpath_start = point
        return self

    def line_to(self, x: float, y: float) -> SVGRenderContext:
        point = self._scaled(x, y)
        if self._current_point is None:
            return self.move_to(x, y)
        self._path.append(f"L {self._fmt(point[0])} {self._fmt(point[1])}")
        self._current_point = point
        return self

    def quadratic_curve_to(self, cpx: float, cpy: float, x: float, y: float) -> SVGRenderContext:
        if self._current_point is None:
            return self.move_to(x, y)
        cp = self._scaled(cpx, cpy)
        point = self._scaled(x, y)
        self._path.append(
            f"Q {self._fmt(cp[0])} {self._fmt(cp[1])} {self._fmt(point[0])} {self._fmt(point[1])}"
        )
        self._current_point = point
        return self

    def bezier_curve_to(
        self, cp1x: float, cp1y: float, cp2x: float, cp2y: float, x: float, y: float
    ) -> SVGRenderContext:
        if self._current_point is None:
            return self.move_to(x, y)
        cp1 = self._scaled(cp1x, cp1y)
        cp2 = self._scaled(cp2x, cp2y)
        point = self._scaled(x, y)
        numbers = " ".join(self._fmt(v) for v in (*cp1, *cp2, *point))
        self._path.append(f"C {numbers}")
        self._current_point = point
        return self

    def arc(
        self,
        x: float,
        y: float,
        radius: float,
        start_angle: float,
        end_angle: float,
        counterclockwise: bool = False,
    ) -> SVGRenderContext:
        cx, cy = self._scaled(x, y)
        rx = abs(radius * self._state.scale_x)
        ry = abs(radius * self._state.scale_y)
        if rx <= 0 or ry <= 0:
            return self

        delta = _normalized_arc_delta(start_angle, end_angle, counterclockwise)
        if abs(delta) < 1e-10:
            return self

        start = (cx + rx * math.cos(start_angle), cy + ry * math.sin(start_angle))
        end = (cx + rx * math.cos(start_angle + delta), cy + ry * math.sin(start_angle + delta))

        if self._current_point is None:
            self._path.append(f"M {self._fmt(start[0])} {self._fmt(start[1])}")
            self._subpath_start = start
        elif math.dist(self._current_point, start) > 1e-7:
            self._path.append(f"L {self._fmt(start[0])} {self._fmt(start[1])}")

        sweep = 0 if counterclockwise else 1
        radii = f"{self._fmt(rx)} {self._fmt(ry)}"
        if abs(delta) >= 2 * math.pi - 1e-9:
            # A full circle cannot be one arc command; split it in two halves.
            middle_angle = start_angle + delta / 2
            middle = (cx + rx * math.cos(middle_angle), cy + ry * math.sin(middle_angle))
            self._path.append(
                f"A {radii} 0 0 {sweep} {self._fmt(middle[0])} {self._fmt(middle[1])}"
            )
            self._path.append(f"A {radii} 0 0 {sweep} {self._fmt(end[0])} {self._fmt(end[1])}")
        else:
            large_arc = 1 if abs(delta) > math.pi else 0
            self._path.append(
                f"A {radii} 0 {large_arc} {sweep} {self._fmt(end[0])} {self._fmt(end[1])}"
            )
        self._current_point = end
        return self

    def rect(self, x: float, y: float, width: float, height: float) -> SVGRenderContext:
        x0, y0 = self._scaled(x, y)
        x1, y1 = self._scaled(x + width, y + height)
        self._path.extend(
            [
                f"M {self._fmt(x0)} {self._fmt(y0)}",
                f"L {self._fmt(x1)} {self._fmt(y0)}",
                f"L {self._fmt(x1)} {self._fmt(y1)}",
                f"L {self._fmt(x0)} {self._fmt(y1)}",
                "Z",
            ]
        )
        self._current_point = (x0, y0)
        self._subpath_start = (x0, y0)
        return self

    def close_path(self) -> SVGRenderContext:
        self._path.append("Z")
        self._current_point = self._subpath_start
        return self

    def fill(self) -> SVGRenderContext:
        if self._path:
            self._append(self._path_element(fill=self._state.fill_style, stroke=None))
        return self

    def stroke(self) -> SVGRenderContext:
        if self._path:
            self._append(self._path_element(fill="none", stroke=self._state.stroke_style))
        return self

    def fill_rect(self, x: float, y: float, width: float, height: float) -> SVGRenderContext:
        self._append(self._rect_element(x, y, width, height, self._state.fill_style))
        return self

    def clear_rect(self, x: float, y: float, width: float, height: float) -> SVGRenderContext:
        self._append(self._rect_element(x, y, width, height, "white"))
        return self

    # ------------------------------------------------------------------
    # Text
    # ------------------------------------------------------------------

    def fill_text(self, text: str, x: float, y: float) -> SVGRenderContext:
        px, py = self._scaled(x, y)
        font = self._state.font
        family = font.family.split(",")[0].strip() or "Arial"
        self._append(
            f'<text x="{self._fmt(px)}" y="{self._fmt(py)}" '
            f'fill="{escape_xml(self._state.fill_style)}" '
            f'font-family="{escape_xml(family)}" font-size="{self._fmt(font.size)}" '
            f'font-style="{escape_xml(font.style)}" '
            f'font-weight="{escape_xml(font.weight)}">{escape_xml(text)}</text>'
        )
        return self

    def measure_text(self, text: str) -> TextMeasure:
        """Approximate text extents; there is no font rasterizer behind SVG output."""
        size = max(self._state.font.size, 1.0)
        return TextMeasure(x=0.0, y=-size * 0.8, width=len(text) * 0.6 * size, height=size)

    # ------------------------------------------------------------------
    # Grouping and output
    # ------------------------------------------------------------------

    def open_group(self, cls: str | None = None, id: str | None = None) -> int:
        attrs = []
        if cls:
            attrs.append(f'class="{escape_xml(cls)}"')
        if id:
            attrs.append(f'id="{escape_xml(id)}"')
        self._append(f"<g {' '.join(attrs)}>" if attrs else "<g>")
        self._groups.append((cls, id))
        return len(self._groups)

    def close_group(self) -> None:
        if not self._groups:
            raise UnbalancedGroup("close_group() called with no open group.")
        self._groups.pop()
        self._append("</g>")

    def get_document(self) -> str:
        """
        Serialize the drawing as SVG text.

        Raises:
            UnbalancedGroup: If any group is still open.
        """
        if self._groups:
            names = ", ".join(cls or id or "<anonymous>" for cls, id in self._groups)
            raise UnbalancedGroup(f"{len(self._groups)} group(s) left open: {names}.")

        width = self._fmt(self.width)
        height = self._fmt(self.height)
        header = f'<svg xmlns="{SVG_NAMESPACE}" width="{width}" height="{height}"'
        if self.options.include_view_box:
            header += f' viewBox="0 0 {width} {height}"'
        header += ">"

        lines = [header, *self._elements, "</svg>"]
        if self.options.include_xml_header:
            lines.insert(0, '<?xml version="1.0" encoding="UTF-8"?>')
        logger.debug(f"Serialized SVG with {len(self._elements)} element lines")
        return "\n".join(lines) + "\n"

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _scaled(self, x: float, y: float) -> tuple[float, float]:
        return x * self._state.scale_x, y * self._state.scale_y

    def _append(self, element: str) -> None:
        self._elements.append(element)

    def _path_element(self, fill: str, stroke: str | None) -> str:
        attrs = [f'd="{escape_xml(" ".join(self._path))}"', f'fill="{escape_xml(fill)}"']
        if stroke is not None:
            state = self._state
            attrs.append(f'stroke="{escape_xml(stroke)}"')
            attrs.append(f'stroke-width="{self._fmt(state.line_width * state.scale_x)}"')
            attrs.append(f'stroke-linecap="{state.line_cap.value}"')
            if state.line_dash:
                dashes = ",".join(self._fmt(v) for v in state.line_dash)
                attrs.append(f'stroke-dasharray="{dashes}"')
        return f"<path {' '.join(attrs)} />"

    def _rect_element(self, x: float, y: float, width: float, height: float, fill: str) -> str:
        x0, y0 = self._scaled(x, y)
        w, h = self._scaled(width, height)
        return (
            f'<rect x="{self._fmt(x0)}" y="{self._fmt(y0)}" '
            f'width="{self._fmt(w)}" height="{self._fmt(h)}" fill="{escape_xml(fill)}" />'
        )

    def _fmt(self, value: float) -> str:
        if math.isnan(value) or math.isinf(value):
            return "0"
        precision = self.options.precision
        if precision <= 0:
            text = str(int(round(value)))
        else:
            text = f"{round(value, precision):.{precision}f}".rstrip("0").rstrip(".")
        return "0" if text == "-0" else text


def _normalized_arc_delta(start_angle: float, end_angle: float, counterclockwise: bool) -> float:
    delta = end_angle - start_angle
    if not counterclockwise:
        while delta < 0:
            delta += 2 * math.pi
        while delta > 2 * math.pi:
            delta -= 2 * math.pi
    else:
        while delta > 0:
            delta -= 2 * math.pi
        while delta < -2 * math.pi:
            delta += 2 * math.pi
    return delta
