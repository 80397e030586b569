"""SheetExporter: renders a voiced progression as HTML or Markdown sheet music."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Final

from music21 import key, pitch

from voicelead import theory
from voicelead.roman_chord import RomanChord
from voicelead.sheet_models import ScoreDocument, VexflowMeasure, VexflowNote
from voicelead.sheet_renderers import (
    SheetRenderer,
    VerovioHtmlRenderer,
    VexflowMarkdownRenderer,
)
from voicelead.voicing import Voicing

SUPPORTED_FORMATS: Final[set[str]] = {"html", "md-vexflow"}

#: music21 accidental names → VexFlow accidental glyphs.
_VEXFLOW_ACCIDENTALS: Final[dict[str, str]] = {
    "natural": "n",
    "sharp": "#",
    "flat": "b",
    "double-sharp": "##",
    "double-flat": "bb",
}


class SheetExporter:
    """
    Engrave a voiced progression on a grand staff via a pluggable renderer.

    Soprano and alto share the treble staff, tenor and bass the bass staff,
    with the chord's Roman numeral under the bass.

    Supported formats:
    - ``html``: music21 score -> MusicXML -> Verovio -> inline SVG in a
      self-contained HTML file.
    - ``md-vexflow``: markdown file with embedded VexFlow JavaScript renderer.
    """

    BEATS_PER_MEASURE = 4
    CHORD_DURATION = "q"

    def __init__(self, title: str = "", output_format: str = "html") -> None:
        self.title = title
        normalized = output_format.strip().lower()
        if normalized not in SUPPORTED_FORMATS:
            supported = ", ".join(sorted(SUPPORTED_FORMATS))
            raise ValueError(f"Unsupported output format '{output_format}'. Use one of: {supported}.")
        self.output_format = normalized
        self.renderer = self._build_renderer(normalized)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _build_renderer(self, output_format: str) -> SheetRenderer:
        if output_format == "html":
            return VerovioHtmlRenderer()
        return VexflowMarkdownRenderer()

    def _build_score(
        self,
        progression: Sequence[RomanChord],
        k: key.Key,
        voicings: Sequence[Voicing],
    ) -> Any:
        """Build a two-staff music21 Score, one quarter-note chord per voicing."""
        from music21 import chord, clef, meter, metadata, stream

        score = stream.Score()
        score.metadata = metadata.Metadata(title=self.title)

        upper = stream.Part(id="upper")
        lower = stream.Part(id="lower")
        for part, staff_clef in ((upper, clef.TrebleClef()), (lower, clef.BassClef())):
            part.append(staff_clef)
            part.append(key.Key(k.tonic.name, k.mode))
            part.append(meter.TimeSignature(f"{self.BEATS_PER_MEASURE}/4"))

        for roman, voicing in zip(progression, voicings):
            upper.append(chord.Chord([voicing.alto.nameWithOctave, voicing.soprano.nameWithOctave]))
            bottom = chord.Chord([voicing.bass.nameWithOctave, voicing.tenor.nameWithOctave])
            bottom.lyric = str(roman)
            lower.append(bottom)

        score.insert(0, upper)
        score.insert(0, lower)
        return score

    def _score_to_musicxml_bytes(self, score: Any) -> bytes:
        from music21.musicxml.m21ToXml import GeneralObjectExporter

        exporter = GeneralObjectExporter(score)
        return exporter.parse()

    def _key_signature(self, k: key.Key) -> str:
        """VexFlow key-signature name: the major key sharing ``k``'s signature."""
        major = key.KeySignature(k.sharps).asKey("major")
        return major.tonic.name.replace("-", "b")

    def _pitch_to_key(self, p: pitch.Pitch) -> str:
        return f"{p.name.lower().replace('-', 'b')}/{p.octave}"

    def _displayed_accidental(self, p: pitch.Pitch, k: key.Key) -> str | None:
        """
        The accidental to print before ``p`` under ``k``'s key signature.

        None when the signature already implies it; a natural sign when the
        signature alters the step but the pitch does not.
        """
        implied = k.accidentalByStep(p.step)
        implied_name = implied.name if implied is not None else "natural"
        actual_name = p.accidental.name if p.accidental is not None else "natural"
        if implied_name == actual_name:
            return None
        return _VEXFLOW_ACCIDENTALS.get(actual_name)

    def _staff_note(self, lower: pitch.Pitch, upper: pitch.Pitch, k: key.Key) -> VexflowNote:
        return VexflowNote(
            keys=[self._pitch_to_key(lower), self._pitch_to_key(upper)],
            duration=self.CHORD_DURATION,
            accidentals=[self._displayed_accidental(lower, k), self._displayed_accidental(upper, k)],
        )

    def _score_to_document(
        self,
        progression: Sequence[RomanChord],
        k: key.Key,
        voicings: Sequence[Voicing],
    ) -> ScoreDocument:
        measures: list[VexflowMeasure] = []
        for start in range(0, len(voicings), self.BEATS_PER_MEASURE):
            chunk = range(start, min(start + self.BEATS_PER_MEASURE, len(voicings)))
            measures.append(
                VexflowMeasure(
                    treble=[self._staff_note(voicings[i].alto, voicings[i].soprano, k) for i in chunk],
                    bass=[self._staff_note(voicings[i].bass, voicings[i].tenor, k) for i in chunk],
                    symbols=[str(progression[i]) for i in chunk],
                )
            )

        return ScoreDocument(
            title=self.title,
            key_signature=self._key_signature(k),
            time_signature=f"{self.BEATS_PER_MEASURE}/4",
            beats=self.BEATS_PER_MEASURE,
            beat_value=4,
            measures=measures,
        )

    def _caption(self, progression: Sequence[RomanChord], k: key.Key) -> str:
        return f"{theory.key_label(k)}: {' '.join(str(chord) for chord in progression)}"

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def render(
        self,
        progression: Sequence[RomanChord],
        k: key.Key,
        voicings: Sequence[Voicing],
    ) -> str:
        """
        Render the voiced progression to file content in the selected format.

        Raises:
            ValueError: If the progression and voicings differ in length, or
                rendering fails.
        """
        if len(progression) != len(voicings):
            raise ValueError(
                f"Got {len(voicings)} voicings for a progression of {len(progression)} chords."
            )
        if not voicings:
            raise ValueError("There is nothing to engrave: the progression is empty.")

        if self.output_format == "html":
            return self.renderer.render(
                title=self.title,
                musicxml_bytes=self._score_to_musicxml_bytes(self._build_score(progression, k, voicings)),
                caption=self._caption(progression, k),
            )
        return self.renderer.render(
            title=self.title,
            score_document=self._score_to_document(progression, k, voicings),
        )

    def export(
        self,
        progression: Sequence[RomanChord],
        k: key.Key,
        voicings: Sequence[Voicing],
        output_path: str,
    ) -> None:
        """
        Render the voiced progression and write it to disk.

        Raises:
            ValueError: If rendering fails or required data is missing.
            OSError: If the output file cannot be written.
        """
        content = self.render(progression, k, voicings)
        with open(output_path, "w", encoding="utf-8") as fh:
            fh.write(content)
