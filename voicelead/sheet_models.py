"""Data models for sheet music rendering outputs."""

from dataclasses import dataclass


@dataclass(frozen=True)
class VexflowNote:
    """Two voices sounding together on one staff, as a VexFlow chord token."""

    keys: list[str]
    duration: str
    accidentals: list[str | None]


@dataclass(frozen=True)
class VexflowMeasure:
    """
    One grand-staff measure.

    ``symbols`` holds the Roman numeral under each chord, aligned with the
    entries of ``bass``.
    """

    treble: list[VexflowNote]
    bass: list[VexflowNote]
    symbols: list[str]


@dataclass(frozen=True)
class ScoreDocument:
    """Neutral score representation consumed by non-Verovio renderers."""

    title: str
    key_signature: str
    time_signature: str
    beats: int
    beat_value: int
    measures: list[VexflowMeasure]
