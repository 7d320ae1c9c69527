"""Multi-voice, tick-aligned horizontal layout."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, Sequence

from engrave.errors import UnableToFormat, VoiceTicksMismatch
from engrave.fraction import Fraction
from engrave.tick_context import TickContext

if TYPE_CHECKING:
    from engrave.config import Settings
    from engrave.tickable import Tickable
    from engrave.voice import Voice

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FormatterOptions:
    """
    Layout options.

    Attributes:
        padding:        Space added on each side of every tick context.
        spacing:        Space between adjacent tick contexts.
        allow_overflow: Lay out at minimum width instead of failing when the
                        requested width is too small.
    """

    padding: float = 1.0
    spacing: float = 10.0
    allow_overflow: bool = False

    @classmethod
    def from_settings(cls, settings: Settings) -> FormatterOptions:
        return cls(
            padding=settings.context_padding,
            spacing=settings.context_spacing,
            allow_overflow=settings.allow_overflow,
        )


class Formatter:
    """
    Aligns voices by musical time and justifies them to a target width.

    One :meth:`format` call is one pass: tick contexts are rebuilt from the
    voices, every tickable is pre-formatted again and positions are written
    only once the whole layout has been computed. Re-formatting the same
    voices at another width starts from scratch, so passes do not drift.
    """

    def __init__(self, options: FormatterOptions | None = None) -> None:
        self.options = options or FormatterOptions()
        self.tick_contexts: dict[tuple[int, int], TickContext] = {}
        self.contexts: list[TickContext] = []
        self.voices: list[Voice] = []
        self.min_total_width = 0.0
        self.total_width = 0.0
        self.total_cost = 0.0
        self.loss_history: list[float] = []

    # ------------------------------------------------------------------
    # Pass stages
    # ------------------------------------------------------------------

    def create_tick_contexts(self, voices: Sequence[Voice]) -> list[TickContext]:
        """Bucket every tickable by its exact tick position, sorted ascending."""
        self.voices = list(voices)
        self.tick_contexts = {}
        for voice in self.voices:
            for tickable, position in zip(voice.tickables, voice.tick_positions()):
                key = position.key()
                context = self.tick_contexts.get(key)
                if context is None:
                    context = TickContext(position, padding=self.options.padding)
                    self.tick_contexts[key] = context
                context.add_tickable(tickable)
        self.contexts = sorted(self.tick_contexts.values(), key=lambda c: c.current_tick)
        return self.contexts

    def pre_format(self) -> float:
        """Pre-format every context and return the minimum total width."""
        for context in self.contexts:
            context.pre_format()
        widths = sum(context.get_width() for context in self.contexts)
        gaps = self.options.spacing * max(len(self.contexts) - 1, 0)
        self.min_total_width = widths + gaps
        return self.min_total_width

    def get_min_total_width(self) -> float:
        return self.min_total_width

    def get_tick_contexts(self) -> list[TickContext]:
        return list(self.contexts)

    def get_tick_context(self, position: Fraction) -> TickContext | None:
        return self.tick_contexts.get(position.key())

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def format(
        self,
        voices: Iterable[Voice],
        justify_width: float | None = None,
        start_x: float = 0.0,
    ) -> float:
        """
        Lay out ``voices`` together and write every tickable's x position.

        Args:
            voices:        Voices to align; all must share a total tick count.
            justify_width: Target width. ``None`` lays out at minimum width.
            start_x:       x of the first tick context.

        Returns:
            The laid-out width, or ``0.0`` when there is nothing to format.

        Raises:
            VoiceTicksMismatch: If a strict voice is incomplete or the voices'
                totals differ.
            UnableToFormat: If ``justify_width`` is below the minimum width and
                overflow is not allowed.
        """
        voices = list(voices)
        self._reset()
        for voice in voices:
            for tickable in voice.tickables:
                tickable.invalidate_position()

        if not any(voice.tickables for voice in voices):
            logger.debug("No tickables to format")
            return 0.0

        self._check_voices(voices)
        self.create_tick_contexts(voices)
        min_width = self.pre_format()
        offsets = self._justify(min_width, justify_width)
        self.total_width = min_width if justify_width is None else max(justify_width, min_width)

        for context, offset in zip(self.contexts, offsets):
            context.set_x(start_x + offset)
            for tickable in context.tickables:
                tickable.set_x_position(context.get_x())
            for tickable in context.get_center_aligned_tickables():
                tickable.set_x_position(start_x + (self.total_width - tickable.get_width()) / 2)

        logger.debug(
            f"Formatted {len(voices)} voice(s) into {len(self.contexts)} tick contexts: "
            f"min {min_width:g}px, laid out {self.total_width:g}px"
        )
        self.evaluate()
        return self.total_width

    def evaluate(self) -> float:
        """
        Score the current layout's spacing consistency.

        Each tickable's space runs from its context to the next context (or
        to the end of the layout). The cost is the root of the summed squared
        deviations of those spaces from the mean space of tickables with the
        same duration. The result is appended to :attr:`loss_history`.
        """
        spaces: list[tuple[tuple[int, int], float]] = []
        end_x = (self.contexts[0].get_x() + self.total_width) if self.contexts else 0.0
        for index, context in enumerate(self.contexts):
            next_x = self.contexts[index + 1].get_x() if index + 1 < len(self.contexts) else end_x
            space = next_x - context.get_x()
            for tickable in context.tickables:
                spaces.append((tickable.get_ticks().key(), space))

        totals: dict[tuple[int, int], list[float]] = {}
        for duration, space in spaces:
            totals.setdefault(duration, []).append(space)
        means = {duration: sum(values) / len(values) for duration, values in totals.items()}

        self.total_cost = math.sqrt(
            sum((space - means[duration]) ** 2 for duration, space in spaces)
        )
        self.loss_history.append(self.total_cost)
        return self.total_cost

    @staticmethod
    def simple_format(
        tickables: Sequence[Tickable], x: float = 0.0, padding_between: float = 10.0
    ) -> float:
        """
        Place tickables one after another without any tick alignment.

        Returns the x just past the last tickable.
        """
        accumulator = x
        for tickable in tickables:
            context = TickContext(tickable.get_ticks()).add_tickable(tickable).pre_format()
            context.set_x(accumulator)
            tickable.set_x_position(accumulator)
            accumulator += context.get_width() + padding_between
        return accumulator

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _reset(self) -> None:
        self.tick_contexts = {}
        self.contexts = []
        self.voices = []
        self.min_total_width = 0.0
        self.total_width = 0.0

    def _check_voices(self, voices: Sequence[Voice]) -> None:
        total_ticks = voices[0].get_total_ticks()
        for voice in voices:
            if voice.get_total_ticks() != total_ticks:
                raise VoiceTicksMismatch(
                    f"Voices should have the same total note duration: "
                    f"{voice.get_total_ticks().to_simplified_string()} != "
                    f"{total_ticks.to_simplified_string()}."
                )
            voice.check_complete()

    def _end_tick(self) -> Fraction:
        end = Fraction(0, 1)
        for voice in self.voices:
            if voice.ticks_used > end:
                end = voice.get_ticks_used()
        return end

    def _justify(self, min_width: float, justify_width: float | None) -> list[float]:
        """
        Compute each context's offset from the start of the layout.

        Surplus width is shared in proportion to each context's duration to
        the next context; the last context runs to the end of the longest voice.
        """
        surplus = 0.0
        if justify_width is not None:
            if justify_width < min_width:
                if not self.options.allow_overflow:
                    raise UnableToFormat(justify_width, min_width)
                logger.warning(
                    f"Requested width {justify_width:g}px is below the minimum "
                    f"{min_width:g}px; laying out at minimum width"
                )
            else:
                surplus = justify_width - min_width

        end_tick = self._end_tick()
        durations: list[float] = []
        for index, context in enumerate(self.contexts):
            next_tick = (
                self.contexts[index + 1].current_tick if index + 1 < len(self.contexts) else end_tick
            )
            durations.append(max((next_tick - context.current_tick).value(), 0.0))

        total_duration = sum(durations)
        if total_duration > 0:
            extras = [surplus * duration / total_duration for duration in durations]
        else:
            extras = [surplus / len(self.contexts)] * len(self.contexts)

        offsets: list[float] = []
        x = 0.0
        for context, extra in zip(self.contexts, extras):
            offsets.append(x)
            x += context.get_width() + extra + self.options.spacing
        return offsets
