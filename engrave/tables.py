"""Duration tables and duration-code to tick conversion."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Final

from engrave.errors import InvalidDuration
from engrave.fraction import Fraction

#: Ticks per whole note.
RESOLUTION: Final[int] = 16384

#: Decimal places used when transforming glyph outline coordinates.
RENDER_PRECISION_PLACES: Final[int] = 3

#: Default point size for notation glyphs.
NOTATION_FONT_SCALE: Final[float] = 39.0

DURATIONS: Final[dict[str, int]] = {
    "1/2": RESOLUTION * 2,
    "1": RESOLUTION // 1,
    "2": RESOLUTION // 2,
    "4": RESOLUTION // 4,
    "8": RESOLUTION // 8,
    "16": RESOLUTION // 16,
    "32": RESOLUTION // 32,
    "64": RESOLUTION // 64,
    "128": RESOLUTION // 128,
    "256": RESOLUTION // 256,
}

DURATION_ALIASES: Final[dict[str, str]] = {
    "w": "1",
    "h": "2",
    "q": "4",
    "b": "256",
}

_DURATION_PATTERN = re.compile(r"^([0-9]+(?:/[0-9]+)?|[whqbWHQB])(d*)([a-zA-Z]*)$")


class NoteType(str, Enum):
    """Note-type suffix of a duration code (``"4r"`` is a quarter rest)."""

    NOTE = "n"
    REST = "r"
    GHOST = "g"
    HARMONIC = "h"
    MUTED = "m"
    SLASH = "s"
    DIAMOND = "d"
    X = "x"
    CIRCLED = "ci"
    CIRCLE_X = "cx"
    SLASHED = "sf"
    SLASHED_BACKWARD = "sb"
    SQUARE = "sq"
    TRIANGLE_UP = "tu"
    TRIANGLE_DOWN = "td"


@dataclass(frozen=True)
class DurationSpec:
    """A parsed duration code: base value, dot count and note type."""

    value: str
    dots: int = 0
    type: NoteType = NoteType.NOTE

    @property
    def ticks(self) -> int:
        """Base ticks plus ``base / 2**k`` for each of the ``k`` dots."""
        base = DURATIONS[self.value]
        return base + sum(base // (2**k) for k in range(1, self.dots + 1))

    @property
    def raw_value(self) -> str:
        suffix = "" if self.type is NoteType.NOTE else self.type.value
        return f"{self.value}{'d' * self.dots}{suffix}"


def sanitize_duration(value: str) -> str:
    """Resolve aliases and validate a bare duration value (no dots or type)."""
    normalized = value.strip().lower()
    normalized = DURATION_ALIASES.get(normalized, normalized)
    if normalized not in DURATIONS:
        raise InvalidDuration(value, "unknown duration value")
    return normalized


def parse_duration(code: str) -> DurationSpec:
    """
    Parse a compact duration code such as ``"4"``, ``"8d"``, ``"qr"`` or ``"16ddh"``.

    Raises:
        InvalidDuration: If the code is empty or any of its parts is unknown.
    """
    normalized = code.strip()
    if not normalized:
        raise InvalidDuration(code, "empty code")

    match = _DURATION_PATTERN.match(normalized)
    if not match:
        raise InvalidDuration(code, "unrecognized format")

    value_token, dots_token, type_token = match.groups()
    value = sanitize_duration(value_token)

    if not type_token:
        note_type = NoteType.NOTE
    else:
        try:
            note_type = NoteType(type_token.lower())
        except ValueError as exc:
            raise InvalidDuration(code, f"unknown note type '{type_token}'") from exc

    return DurationSpec(value=value, dots=len(dots_token), type=note_type)


def duration_to_ticks(code: str) -> int:
    """
    Convert a duration code to ticks at :data:`RESOLUTION`.

    Raises:
        InvalidDuration: If the code cannot be parsed.
    """
    return parse_duration(code).ticks


def try_duration_to_ticks(code: str) -> int | None:
    """Like :func:`duration_to_ticks` but returns ``None`` for invalid codes."""
    try:
        return duration_to_ticks(code)
    except InvalidDuration:
        return None


def duration_to_fraction(value: str) -> Fraction:
    """The note value as a fraction: ``"4"`` -> 4/1, ``"1/2"`` -> 1/2."""
    return Fraction().parse(sanitize_duration(value))


def duration_to_number(value: str) -> float:
    return duration_to_fraction(value).value()
