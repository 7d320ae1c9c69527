"""Music engraving: tick arithmetic, multi-voice justification and SVG output."""

__version__ = "0.1.0"
