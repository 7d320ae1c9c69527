"""Glyph outlines: parsing, bounding boxes and rendering."""

from __future__ import annotations

import logging
from enum import IntEnum
from typing import TYPE_CHECKING, Final, Iterator, Sequence

import numpy as np

from engrave.bounding_box import BoundingBox, BoundingBoxComputation
from engrave.errors import MalformedOutlineCommand
from engrave.tables import RENDER_PRECISION_PLACES

if TYPE_CHECKING:
    from engrave.font import FontStack, GlyphMetrics
    from engrave.renderers import RenderContext

logger = logging.getLogger(__name__)


class OutlineCode(IntEnum):
    """Opcodes of the flattened outline instruction stream."""

    MOVE = 0
    LINE = 1
    QUADRATIC = 2
    BEZIER = 3


#: Number of coordinates following each opcode.
ARITY: Final[dict[OutlineCode, int]] = {
    OutlineCode.MOVE: 2,
    OutlineCode.LINE: 2,
    OutlineCode.QUADRATIC: 4,
    OutlineCode.BEZIER: 6,
}

_COMMANDS: Final[dict[str, OutlineCode]] = {
    "m": OutlineCode.MOVE,
    "l": OutlineCode.LINE,
    "q": OutlineCode.QUADRATIC,
    "b": OutlineCode.BEZIER,
    "c": OutlineCode.BEZIER,
}


def parse_outline(text: str) -> tuple[float, ...]:
    """
    Parse an outline string such as ``"m 0 0 l 100 200"`` into a flat stream.

    Each command letter becomes its opcode followed by its coordinates. Curve
    commands list the end point first and the control point(s) after it, as
    font outline data does. ``z`` is accepted and dropped because filling
    closes the path anyway.

    Raises:
        MalformedOutlineCommand: On an unknown command letter, a missing
            coordinate or a token that is not a number.
    """
    tokens = text.split()
    result: list[float] = []
    i = 0
    while i < len(tokens):
        command = tokens[i]
        i += 1
        if command == "z":
            continue
        code = _COMMANDS.get(command)
        if code is None:
            raise MalformedOutlineCommand(
                f"Unknown outline command '{command}' at token {i - 1}."
            )
        arity = ARITY[code]
        operands = tokens[i : i + arity]
        if len(operands) < arity:
            raise MalformedOutlineCommand(
                f"Outline command '{command}' expects {arity} numbers, got {len(operands)}."
            )
        try:
            coordinates = [float(token) for token in operands]
        except ValueError as exc:
            raise MalformedOutlineCommand(
                f"Non-numeric operand for outline command '{command}': {operands}."
            ) from exc
        result.append(float(code))
        result.extend(coordinates)
        i += arity
    return tuple(result)


def iter_outline(outline: Sequence[float]) -> Iterator[tuple[OutlineCode, Sequence[float]]]:
    """Yield ``(opcode, coordinates)`` pairs from a flat instruction stream."""
    i = 0
    while i < len(outline):
        code = OutlineCode(int(outline[i]))
        arity = ARITY[code]
        yield code, outline[i + 1 : i + 1 + arity]
        i += 1 + arity


def transform_points(
    coordinates: Sequence[float], scale: float, x: float, y: float
) -> np.ndarray:
    """
    Map font-unit ``(x, y)`` pairs to layout space as an ``(n, 2)`` array.

    Font outlines point y up while layout points y down, so y is negated.
    """
    points = np.asarray(coordinates, dtype=float).reshape(-1, 2)
    transformed = np.column_stack((x + points[:, 0] * scale, y - points[:, 1] * scale))
    return np.round(transformed, RENDER_PRECISION_PLACES)


def get_outline_bounding_box(
    outline: Sequence[float],
    scale: float,
    x: float,
    y: float,
    tight: bool = False,
) -> BoundingBox:
    """
    Compute the bounding box of an outline drawn at ``(x, y)`` and ``scale``.

    By default every coordinate pair counts, curve control points included,
    which gives a cheap, conservative box. With ``tight=True`` curves only
    contribute their real extrema. An empty outline yields a zero-sized box
    at the origin.
    """
    if not outline:
        return BoundingBox(0.0, 0.0, 0.0, 0.0)

    if not tight:
        coordinates = [value for _, coords in iter_outline(outline) for value in coords]
        points = transform_points(coordinates, scale, x, y)
        x_min, y_min = points.min(axis=0)
        x_max, y_max = points.max(axis=0)
        return BoundingBox(
            float(x_min), float(y_min), float(x_max - x_min), float(y_max - y_min)
        )

    computation = BoundingBoxComputation()
    pen_x, pen_y = x, y
    for code, coords in iter_outline(outline):
        points = transform_points(coords, scale, x, y)
        end_x, end_y = float(points[0][0]), float(points[0][1])
        if code is OutlineCode.MOVE:
            pass
        elif code is OutlineCode.LINE:
            computation.add_point(pen_x, pen_y)
            computation.add_point(end_x, end_y)
        elif code is OutlineCode.QUADRATIC:
            cp = points[1]
            computation.add_quadratic_curve(pen_x, pen_y, cp[0], cp[1], end_x, end_y)
        else:
            cp1, cp2 = points[1], points[2]
            computation.add_bezier_curve(
                pen_x, pen_y, cp1[0], cp1[1], cp2[0], cp2[1], end_x, end_y
            )
        pen_x, pen_y = end_x, end_y
    return computation.to_bounding_box()


def render_outline(
    ctx: RenderContext,
    outline: Sequence[float],
    scale: float,
    x: float,
    y: float,
) -> None:
    """Trace an outline into ``ctx`` as one path and fill it."""
    ctx.begin_path()
    for code, coords in iter_outline(outline):
        points = transform_points(coords, scale, x, y)
        end_x, end_y = float(points[0][0]), float(points[0][1])
        if code is OutlineCode.MOVE:
            ctx.move_to(end_x, end_y)
        elif code is OutlineCode.LINE:
            ctx.line_to(end_x, end_y)
        elif code is OutlineCode.QUADRATIC:
            ctx.quadratic_curve_to(float(points[1][0]), float(points[1][1]), end_x, end_y)
        else:
            ctx.bezier_curve_to(
                float(points[1][0]),
                float(points[1][1]),
                float(points[2][0]),
                float(points[2][1]),
                end_x,
                end_y,
            )
    ctx.fill()


class Glyph:
    """
    A glyph code resolved against a font stack at a given point size.

    Metrics, scale and bounding box are resolved once at construction, so
    layout queries afterwards do no lookups.
    """

    def __init__(self, code: str, point: float, font_stack: FontStack) -> None:
        self.code = code
        self.point = point
        self.metrics: GlyphMetrics = font_stack.load_metrics(code)
        self.scale = point / self.metrics.units_per_em
        self.bbox = get_outline_bounding_box(self.metrics.outline, self.scale, 0.0, 0.0)
        self.origin_shift_x = 0.0
        self.origin_shift_y = 0.0
        logger.debug(f"Resolved glyph {code} at {point}pt from font {self.metrics.font_name}")

    def get_width(self) -> float:
        """Scaled advance width."""
        return self.metrics.advance * self.scale

    def set_origin_x(self, fraction: float) -> None:
        """Shift so that ``fraction`` of the box width sits on the draw x."""
        if self.bbox.w == 0:
            self.origin_shift_x = 0.0
            return
        origin = abs(self.bbox.x / self.bbox.w)
        self.origin_shift_x = -(fraction - origin) * self.bbox.w

    def set_origin_y(self, fraction: float) -> None:
        if self.bbox.h == 0:
            self.origin_shift_y = 0.0
            return
        origin = abs(self.bbox.y / self.bbox.h)
        self.origin_shift_y = -(fraction - origin) * self.bbox.h

    def get_bounding_box_at(self, x: float, y: float) -> BoundingBox:
        return BoundingBox(
            self.bbox.x + x + self.origin_shift_x + self.metrics.shift_x * self.scale,
            self.bbox.y + y + self.origin_shift_y + self.metrics.shift_y * self.scale,
            self.bbox.w,
            self.bbox.h,
        )

    def render(self, ctx: RenderContext, x: float, y: float) -> None:
        render_outline(
            ctx,
            self.metrics.outline,
            self.scale,
            x + self.origin_shift_x + self.metrics.shift_x * self.scale,
            y + self.origin_shift_y + self.metrics.shift_y * self.scale,
        )
