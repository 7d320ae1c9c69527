"""A small built-in notation font so scores render without external font files.

Outlines are in font units (1000 per em, y up, the staff line at y = 0).
Curve commands list the end point before their control point(s).
"""

from __future__ import annotations

from typing import Any, Final

from engrave.font import Font, FontStack

DEFAULT_FONT_NAME: Final[str] = "EngraveBasic"


def _flagged_rest(flags: int) -> dict[str, Any]:
    """A slanted stem with one round hook per flag, top hook in the top space."""
    bottom = -200 - 200 * flags
    top_x = 60 + round((180 - bottom) * 0.36)
    parts = [f"m 60 {bottom} l 105 {bottom} l {top_x + 45} 180 l {top_x} 180 z"]
    for index in range(flags):
        cy = 120 - 200 * index
        stem_x = 60 + round((cy - bottom) * 0.36)
        cx = stem_x - 110
        parts.append(
            f"m {cx - 50} {cy} q {cx} {cy + 50} {cx - 50} {cy + 50} "
            f"q {cx + 50} {cy} {cx + 50} {cy + 50} "
            f"q {cx} {cy - 50} {cx + 50} {cy - 50} "
            f"q {cx - 50} {cy} {cx - 50} {cy - 50} z "
            f"m {cx} {cy + 20} l {stem_x + 20} {cy + 60} l {stem_x + 20} {cy + 20} "
            f"l {cx} {cy - 20} z"
        )
    width = top_x + 45
    return {"x_min": 0, "x_max": width, "ha": width, "o": " ".join(parts)}


DEFAULT_FONT_DATA: Final[dict[str, Any]] = {
    "name": DEFAULT_FONT_NAME,
    "resolution": 1000,
    "metrics": {
        "dot": {"radius": 2, "width": 5},
    },
    "glyphs": {
        "noteheadBlack": {
            "x_min": 0,
            "x_max": 296,
            "ha": 296,
            "o": "m 0 0 q 148 125 0 125 q 296 0 296 125 q 148 -125 296 -125 q 0 0 0 -125 z",
        },
        "noteheadHalf": {
            "x_min": 0,
            "x_max": 296,
            "ha": 296,
            "o": (
                "m 0 0 q 148 125 0 125 q 296 0 296 125 q 148 -125 296 -125 q 0 0 0 -125 z "
                "m 48 0 q 148 -70 48 -70 q 248 0 248 -70 q 148 70 248 70 q 48 0 48 70 z"
            ),
        },
        "noteheadWhole": {
            "x_min": 0,
            "x_max": 400,
            "ha": 400,
            "o": (
                "m 0 0 q 200 125 0 125 q 400 0 400 125 q 200 -125 400 -125 q 0 0 0 -125 z "
                "m 90 0 q 200 -80 90 -80 q 310 0 310 -80 q 200 80 310 80 q 90 0 90 80 z"
            ),
        },
        "noteheadDoubleWhole": {
            "x_min": 0,
            "x_max": 520,
            "ha": 520,
            "o": (
                "m 0 180 l 30 180 l 30 -180 l 0 -180 z "
                "m 490 180 l 520 180 l 520 -180 l 490 -180 z "
                "m 60 0 q 260 125 60 125 q 460 0 460 125 q 260 -125 460 -125 q 60 0 60 -125 z "
                "m 150 0 q 260 -80 150 -80 q 370 0 370 -80 q 260 80 370 80 q 150 0 150 80 z"
            ),
        },
        "restDoubleWhole": {
            "x_min": 0,
            "x_max": 150,
            "ha": 150,
            "o": "m 0 250 l 150 250 l 150 -250 l 0 -250 z",
        },
        "restWhole": {
            "x_min": 0,
            "x_max": 300,
            "ha": 300,
            "o": "m 0 0 l 300 0 l 300 -125 l 0 -125 z",
        },
        "restHalf": {
            "x_min": 0,
            "x_max": 300,
            "ha": 300,
            "o": "m 0 0 l 300 0 l 300 125 l 0 125 z",
        },
        "restQuarter": {
            "x_min": 0,
            "x_max": 270,
            "ha": 270,
            "o": (
                "m 100 375 l 220 230 l 140 120 l 240 -40 q 130 -50 180 -100 "
                "q 150 -375 40 -200 l 120 -300 q 20 -60 20 -130 l 140 -10 l 40 100 "
                "l 130 220 l 60 340 z"
            ),
        },
        "rest8th": {
            "x_min": 0,
            "x_max": 250,
            "ha": 250,
            "o": (
                "m 60 170 q 0 120 0 170 q 60 70 0 70 q 190 110 120 70 "
                "l 80 -250 l 125 -250 l 250 180 l 220 180 q 60 170 170 140 z"
            ),
        },
        "rest16th": {
            "x_min": 0,
            "x_max": 290,
            "ha": 290,
            "o": (
                "m 100 170 q 40 120 40 170 q 100 70 40 70 q 230 110 160 70 "
                "l 175 -30 q 50 -70 110 -100 q 0 -120 0 -70 q 60 -170 0 -170 "
                "q 160 -130 100 -170 l 60 -500 l 105 -500 l 290 180 l 260 180 "
                "q 100 170 210 140 z"
            ),
        },
        "rest32nd": _flagged_rest(3),
        "rest64th": _flagged_rest(4),
        "rest128th": _flagged_rest(5),
        "rest256th": _flagged_rest(6),
        "accidentalSharp": {
            "x_min": 0,
            "x_max": 300,
            "ha": 300,
            "o": (
                "m 80 -350 l 110 -350 l 110 350 l 80 350 z "
                "m 190 -330 l 220 -330 l 220 370 l 190 370 z "
                "m 20 -100 l 280 -40 l 280 40 l 20 -20 z "
                "m 20 100 l 280 160 l 280 240 l 20 180 z"
            ),
        },
        "accidentalDoubleSharp": {
            "x_min": 0,
            "x_max": 280,
            "ha": 280,
            "o": (
                "m 0 100 l 100 0 l 0 -100 l 40 -140 l 140 -40 l 240 -140 "
                "l 280 -100 l 180 0 l 280 100 l 240 140 l 140 40 l 40 140 z"
            ),
        },
        "accidentalFlat": {
            "x_min": 0,
            "x_max": 230,
            "ha": 230,
            "o": (
                "m 0 600 l 35 600 l 35 80 q 130 140 70 150 "
                "q 35 -40 230 60 l 35 -130 l 0 -130 z"
            ),
        },
        "accidentalDoubleFlat": {
            "x_min": 0,
            "x_max": 430,
            "ha": 430,
            "o": (
                "m 0 600 l 35 600 l 35 80 q 130 140 70 150 "
                "q 35 -40 230 60 l 35 -130 l 0 -130 z "
                "m 200 600 l 235 600 l 235 80 q 330 140 270 150 "
                "q 235 -40 430 60 l 235 -130 l 200 -130 z"
            ),
        },
        "accidentalNatural": {
            "x_min": 0,
            "x_max": 190,
            "ha": 200,
            "o": (
                "m 0 500 l 30 500 l 30 140 l 190 180 l 190 -300 l 160 -300 "
                "l 160 -60 l 0 -100 z m 30 30 l 30 -50 l 160 -20 l 160 60 z"
            ),
        },
    },
}


def load_default_font() -> Font:
    return Font.from_dict(DEFAULT_FONT_DATA)


def default_font_stack(extra_fonts: list[Font] | None = None) -> FontStack:
    """A stack probing ``extra_fonts`` first and the built-in font last."""
    return FontStack([*(extra_fonts or []), load_default_font()])
