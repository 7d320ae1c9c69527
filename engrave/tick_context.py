"""Tick contexts: per-pass buckets of tickables sharing one tick position."""

from __future__ import annotations

from typing import TYPE_CHECKING

from engrave.fraction import Fraction

if TYPE_CHECKING:
    from engrave.tickable import Tickable


class TickContext:
    """
    All tickables, from any voice, that start at the same exact tick.

    The context's width is the widest member plus ``padding`` on each side.
    Members overlap around the shared x rather than being laid side by side.
    """

    def __init__(self, current_tick: Fraction, padding: float = 1.0) -> None:
        self.current_tick = current_tick.clone()
        self.padding = padding
        self.tickables: list[Tickable] = []
        self.width = 0.0
        self.x = 0.0

    def add_tickable(self, tickable: Tickable) -> TickContext:
        self.tickables.append(tickable)
        return self

    def pre_format(self) -> TickContext:
        """Pre-format every member and keep the widest."""
        self.width = max((tickable.pre_format() for tickable in self.tickables), default=0.0)
        return self

    def get_width(self) -> float:
        return self.width + self.padding * 2

    def get_x(self) -> float:
        return self.x

    def set_x(self, x: float) -> TickContext:
        self.x = x
        return self

    def get_center_aligned_tickables(self) -> list[Tickable]:
        return [tickable for tickable in self.tickables if tickable.center_align]

    def __repr__(self) -> str:
        return (
            f"TickContext(tick={self.current_tick.to_simplified_string()}, "
            f"tickables={len(self.tickables)}, width={self.get_width():g})"
        )
