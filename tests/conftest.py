"""Shared fixtures: a predictable square-glyph font and the built-in font."""

from typing import Callable

import pytest

from engrave.default_font import default_font_stack
from engrave.font import Font, FontStack
from engrave.renderers import SVGRenderContext

SQUARE_CODES = [
    "noteheadBlack",
    "noteheadHalf",
    "noteheadWhole",
    "restWhole",
    "restHalf",
    "restQuarter",
    "accidentalSharp",
    "accidentalFlat",
]


def square_font(name: str = "Square", codes: list[str] | None = None) -> Font:
    """Every glyph is a 1000-unit square, so at 10pt each one is 10px wide."""
    glyph = {"x_min": 0, "x_max": 1000, "ha": 1000, "o": "m 0 0 l 1000 0 l 1000 1000 l 0 1000 z"}
    return Font.from_dict(
        {
            "name": name,
            "resolution": 1000,
            "glyphs": {code: dict(glyph) for code in (codes or SQUARE_CODES)},
        }
    )


@pytest.fixture
def make_square_font() -> Callable[..., Font]:
    return square_font


@pytest.fixture
def square_stack() -> FontStack:
    return FontStack([square_font()])


@pytest.fixture
def builtin_stack() -> FontStack:
    return default_font_stack()


@pytest.fixture
def svg_context() -> SVGRenderContext:
    return SVGRenderContext(100, 50)
