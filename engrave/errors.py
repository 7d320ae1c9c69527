"""Error kinds raised by the engraving core."""


class EngraveError(Exception):
    """Base class for every error raised by engrave."""


class ZeroDenominator(EngraveError, ValueError):
    """A fraction was built with, or divided by, a zero value."""


class InvalidDuration(EngraveError, ValueError):
    """A duration code could not be parsed."""

    def __init__(self, code: str, reason: str = "") -> None:
        self.code = code
        detail = f" ({reason})" if reason else ""
        super().__init__(f"Invalid duration '{code}'{detail}.")


class MalformedOutlineCommand(EngraveError, ValueError):
    """A glyph outline string contains an unknown command or missing numbers."""


class GlyphNotFound(EngraveError, LookupError):
    """No font in a stack defines the requested glyph code."""

    def __init__(self, code: str, fonts: list[str] | None = None) -> None:
        self.code = code
        searched = ", ".join(fonts) if fonts else "<empty stack>"
        super().__init__(f"Glyph '{code}' does not exist in fonts: {searched}.")


class VoiceTicksMismatch(EngraveError):
    """A voice's tick total does not satisfy its mode or its peers."""


class UnableToFormat(EngraveError):
    """The requested justification width is smaller than the minimum width."""

    def __init__(self, requested: float, minimum: float) -> None:
        self.requested = requested
        self.minimum = minimum
        super().__init__(
            f"Cannot fit voices into {requested:g}px; at least {minimum:g}px is required."
        )


class UnformattedTickable(EngraveError):
    """A tickable was drawn or queried before a formatting pass completed."""


class UnbalancedGroup(EngraveError):
    """A render-context group was closed without a matching open, or left open."""
