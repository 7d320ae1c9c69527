"""Voices: ordered, time-accounted sequences of tickables."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Iterable

from engrave.errors import VoiceTicksMismatch
from engrave.fraction import Fraction
from engrave.tables import RESOLUTION

if TYPE_CHECKING:
    from engrave.bounding_box import BoundingBox
    from engrave.renderers import RenderContext
    from engrave.tickable import Tickable

logger = logging.getLogger(__name__)

_TIME_SPEC_PATTERN = re.compile(r"^\s*(\d+)\s*/\s*(\d+)\s*$")


class VoiceMode(Enum):
    """
    How strictly a voice's tick total is enforced.

    - ``STRICT``: the voice must be exactly full when it is formatted.
    - ``FULL``: adding past the expected total fails; under-fill is allowed.
    - ``SOFT``: no checks, for material that does not map onto the meter.
    """

    STRICT = "strict"
    FULL = "full"
    SOFT = "soft"


@dataclass(frozen=True)
class VoiceTime:
    """Meter of a voice: ``num_beats`` beats of value ``beat_value``."""

    num_beats: int = 4
    beat_value: int = 4
    resolution: int = RESOLUTION

    @property
    def total_ticks(self) -> Fraction:
        return Fraction(self.num_beats * self.resolution, self.beat_value).simplify()

    @classmethod
    def from_spec(cls, spec: str) -> VoiceTime:
        """Parse a time signature such as ``"3/4"``."""
        match = _TIME_SPEC_PATTERN.match(spec)
        if not match:
            raise ValueError(f"Invalid time signature '{spec}'. Expected 'beats/value'.")
        num_beats, beat_value = int(match.group(1)), int(match.group(2))
        if num_beats <= 0 or beat_value <= 0:
            raise ValueError(f"Invalid time signature '{spec}'. Both parts must be positive.")
        return cls(num_beats=num_beats, beat_value=beat_value)


class Voice:
    """
    An ordered list of tickables with a running tick total.

    ``FULL`` and ``STRICT`` voices reject a tickable that would overflow the
    expected total as soon as it is added. ``STRICT`` completeness is checked
    when the voice is handed to a formatter.
    """

    def __init__(self, time: VoiceTime | None = None, mode: VoiceMode = VoiceMode.STRICT) -> None:
        self.time = time or VoiceTime()
        self.mode = mode
        self.total_ticks = self.time.total_ticks
        self.ticks_used = Fraction(0, 1)
        self.smallest_tick_count = self.total_ticks.clone()
        self.tickables: list[Tickable] = []

    @classmethod
    def from_time_spec(cls, spec: str, mode: VoiceMode = VoiceMode.STRICT) -> Voice:
        return cls(VoiceTime.from_spec(spec), mode)

    def set_mode(self, mode: VoiceMode) -> Voice:
        self.mode = mode
        return self

    def set_strict(self, strict: bool) -> Voice:
        self.mode = VoiceMode.STRICT if strict else VoiceMode.SOFT
        return self

    def get_total_ticks(self) -> Fraction:
        return self.total_ticks.clone()

    def get_ticks_used(self) -> Fraction:
        return self.ticks_used.clone()

    def is_complete(self) -> bool:
        if self.mode in (VoiceMode.STRICT, VoiceMode.FULL):
            return self.ticks_used == self.total_ticks
        return True

    # ------------------------------------------------------------------
    # Building
    # ------------------------------------------------------------------

    def add_tickable(self, tickable: Tickable) -> Voice:
        """
        Append ``tickable`` and advance the running total.

        Raises:
            VoiceTicksMismatch: If a ``STRICT``/``FULL`` voice would overflow.
        """
        if not tickable.ignore_ticks:
            ticks = tickable.get_ticks()
            candidate = self.ticks_used.clone().add(ticks)
            if self.mode in (VoiceMode.STRICT, VoiceMode.FULL) and candidate > self.total_ticks:
                raise VoiceTicksMismatch(
                    f"Too many ticks: adding {ticks.to_simplified_string()} would bring the "
                    f"voice to {candidate.to_simplified_string()} of "
                    f"{self.total_ticks.to_simplified_string()}."
                )
            self.ticks_used = candidate.simplify()
            if ticks < self.smallest_tick_count:
                self.smallest_tick_count = ticks.clone()

        self.tickables.append(tickable)
        tickable.voice = self
        return self

    def add_tickables(self, tickables: Iterable[Tickable]) -> Voice:
        for tickable in tickables:
            self.add_tickable(tickable)
        return self

    def check_complete(self) -> None:
        """
        Raises:
            VoiceTicksMismatch: If a ``STRICT`` voice is not exactly full.
        """
        if self.mode is VoiceMode.STRICT and not self.is_complete():
            raise VoiceTicksMismatch(
                f"Voice does not have enough notes: "
                f"{self.ticks_used.to_simplified_string()} of "
                f"{self.total_ticks.to_simplified_string()} ticks used."
            )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def tick_positions(self) -> list[Fraction]:
        """
        Start position of every tickable, as an exact running sum.

        Tickables that ignore ticks share the position of whatever follows.
        """
        cursor = Fraction(0, 1)
        positions: list[Fraction] = []
        for tickable in self.tickables:
            positions.append(cursor.clone())
            if not tickable.ignore_ticks:
                cursor.add(tickable.get_ticks()).simplify()
        return positions

    def draw(self, ctx: RenderContext) -> BoundingBox | None:
        """Draw every tickable and return the union of their bounding boxes."""
        bbox: BoundingBox | None = None
        for tickable in self.tickables:
            tickable.draw(ctx)
            tickable_bbox = tickable.get_bounding_box()
            if tickable_bbox is None:
                continue
            bbox = tickable_bbox if bbox is None else bbox.merge_with(tickable_bbox)
        logger.debug(f"Drew voice with {len(self.tickables)} tickables")
        return bbox

    def __len__(self) -> int:
        return len(self.tickables)
