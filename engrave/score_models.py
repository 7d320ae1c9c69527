"""Data models for score input documents."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

VOICE_MODES = ("strict", "full", "soft")
STEM_DIRECTIONS = ("up", "down")


@dataclass(frozen=True)
class NoteSpec:
    """
    One tickable as written in a score document.

    ``duration`` is a duration code (``"q"``, ``"8d"``, ``"hr"``...). A note
    with ``text`` becomes a text annotation and one with ``ghost`` set only
    reserves time. ``line`` counts staff lines from the bottom (0) to the
    top (4); half steps land in spaces.
    """

    duration: str
    line: float = 2.0
    accidentals: list[str] = field(default_factory=list)
    fingering: str | None = None
    text: str | None = None
    ghost: bool = False
    tuplet: tuple[int, int] | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> NoteSpec:
        if "duration" not in data:
            raise ValueError(f"Note entry is missing 'duration': {dict(data)}")
        tuplet = data.get("tuplet")
        if tuplet is not None:
            if len(tuplet) != 2 or int(tuplet[0]) <= 0 or int(tuplet[1]) <= 0:
                raise ValueError(
                    f"Tuplet must be [notes, occupied] with positive values, got {tuplet}."
                )
            tuplet = (int(tuplet[0]), int(tuplet[1]))
        fingering = data.get("fingering")
        return cls(
            duration=str(data["duration"]),
            line=float(data.get("line", 2.0)),
            accidentals=[str(a) for a in data.get("accidentals", [])],
            fingering=str(fingering) if fingering is not None else None,
            text=data.get("text"),
            ghost=bool(data.get("ghost", False)),
            tuplet=tuplet,
        )


@dataclass(frozen=True)
class VoiceSpec:
    """A voice: its notes, fill mode and stem direction."""

    notes: list[NoteSpec]
    mode: str = "strict"
    stem: str = "up"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> VoiceSpec:
        mode = str(data.get("mode", "strict")).lower()
        if mode not in VOICE_MODES:
            supported = ", ".join(VOICE_MODES)
            raise ValueError(f"Unsupported voice mode '{mode}'. Use one of: {supported}.")
        stem = str(data.get("stem", "up")).lower()
        if stem not in STEM_DIRECTIONS:
            raise ValueError(f"Unsupported stem direction '{stem}'. Use 'up' or 'down'.")
        return cls(
            notes=[NoteSpec.from_dict(note) for note in data.get("notes", [])],
            mode=mode,
            stem=stem,
        )


@dataclass(frozen=True)
class StaffSpec:
    """One five-line staff holding one or more voices."""

    voices: list[VoiceSpec]

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> StaffSpec:
        return cls(voices=[VoiceSpec.from_dict(voice) for voice in data.get("voices", [])])


@dataclass(frozen=True)
class ScoreDocument:
    """A single measure of one or more staves, aligned by musical time."""

    title: str
    time_signature: str
    staves: list[StaffSpec]

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ScoreDocument:
        """
        Build a document from its JSON shape.

        Raises:
            ValueError: If a required key is missing or a value is unsupported.
        """
        staves = data.get("staves")
        if not isinstance(staves, list) or not staves:
            raise ValueError("Score document needs a non-empty 'staves' list.")
        return cls(
            title=str(data.get("title", "")),
            time_signature=str(data.get("time_signature", "4/4")),
            staves=[StaffSpec.from_dict(staff) for staff in staves],
        )
