"""Axis-aligned bounding boxes and a curve-aware bounds accumulator."""

from __future__ import annotations

import math
from dataclasses import dataclass, replace


@dataclass
class BoundingBox:
    """A rectangle in layout units; ``(x, y)`` is the top-left corner."""

    x: float
    y: float
    w: float
    h: float

    def move(self, dx: float, dy: float) -> BoundingBox:
        self.x += dx
        self.y += dy
        return self

    def contains(self, other: BoundingBox) -> bool:
        return (
            other.x >= self.x
            and other.y >= self.y
            and other.x + other.w <= self.x + self.w
            and other.y + other.h <= self.y + self.h
        )

    def merge_with(self, other: BoundingBox) -> BoundingBox:
        """Grow in place to the union of both rectangles."""
        # A containing box stays bit-exact.
        if self.contains(other):
            return self
        new_x = min(self.x, other.x)
        new_y = min(self.y, other.y)
        new_w = max(self.x + self.w, other.x + other.w) - new_x
        new_h = max(self.y + self.h, other.y + other.h) - new_y
        self.x, self.y, self.w, self.h = new_x, new_y, new_w, new_h
        return self

    def merged(self, other: BoundingBox) -> BoundingBox:
        return replace(self).merge_with(other)


class BoundingBoxComputation:
    """
    Accumulates points and Bezier segments into tight bounds.

    Curves contribute their end points plus any interior extrema, found by
    solving the derivative of each coordinate polynomial for ``0 < t < 1``.
    """

    def __init__(self) -> None:
        self.x1 = math.nan
        self.y1 = math.nan
        self.x2 = math.nan
        self.y2 = math.nan

    def width(self) -> float:
        return self.x2 - self.x1

    def height(self) -> float:
        return self.y2 - self.y1

    def is_empty(self) -> bool:
        return math.isnan(self.x1)

    def add_point(self, x: float, y: float) -> None:
        if math.isnan(self.x1) or x < self.x1:
            self.x1 = x
        if math.isnan(self.x2) or x > self.x2:
            self.x2 = x
        if math.isnan(self.y1) or y < self.y1:
            self.y1 = y
        if math.isnan(self.y2) or y > self.y2:
            self.y2 = y

    def add_x(self, x: float) -> None:
        self.add_point(x, self.y1)

    def add_y(self, y: float) -> None:
        self.add_point(self.x1, y)

    def add_quadratic_curve(
        self,
        p0x: float,
        p0y: float,
        p1x: float,
        p1y: float,
        p2x: float,
        p2y: float,
    ) -> None:
        self.add_point(p0x, p0y)
        self.add_point(p2x, p2y)

        for axis, (a, b, c) in enumerate(((p0x, p1x, p2x), (p0y, p1y, p2y))):
            p01 = b - a
            denom = p01 - (c - b)
            if denom == 0:
                continue
            t = p01 / denom
            if 0 < t < 1:
                it = 1 - t
                extreme = it * it * a + 2 * it * t * b + t * t * c
                if axis == 0:
                    self.add_x(extreme)
                else:
                    self.add_y(extreme)

    def add_bezier_curve(
        self,
        p0x: float,
        p0y: float,
        p1x: float,
        p1y: float,
        p2x: float,
        p2y: float,
        p3x: float,
        p3y: float,
    ) -> None:
        self.add_point(p0x, p0y)
        self.add_point(p3x, p3y)

        for axis, (p0, p1, p2, p3) in enumerate(((p0x, p1x, p2x, p3x), (p0y, p1y, p2y, p3y))):
            b = 6 * p0 - 12 * p1 + 6 * p2
            a = -3 * p0 + 9 * p1 - 9 * p2 + 3 * p3
            c = 3 * p1 - 3 * p0

            if a == 0:
                if b == 0:
                    continue
                roots = [-c / b]
            else:
                discriminant = b * b - 4 * c * a
                if discriminant < 0:
                    continue
                root = math.sqrt(discriminant)
                roots = [(-b + root) / (2 * a), (-b - root) / (2 * a)]

            for t in roots:
                if not 0 < t < 1:
                    continue
                mt = 1 - t
                extreme = (
                    mt * mt * mt * p0
                    + 3 * mt * mt * t * p1
                    + 3 * mt * t * t * p2
                    + t * t * t * p3
                )
                if axis == 0:
                    self.add_x(extreme)
                else:
                    self.add_y(extreme)

    def to_bounding_box(self) -> BoundingBox:
        if self.is_empty():
            return BoundingBox(0.0, 0.0, 0.0, 0.0)
        return BoundingBox(self.x1, self.y1, self.width(), self.height())
