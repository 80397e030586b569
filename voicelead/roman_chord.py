"""RomanChord: analytical chord symbols and their chord tones in a key."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum, IntEnum
from typing import Final

from music21 import key, pitch, roman

from voicelead import theory


class ScaleDegree(IntEnum):
    I = 1
    II = 2
    III = 3
    IV = 4
    V = 5
    VI = 6
    VII = 7


class Quality(Enum):
    MAJOR = "major"
    MINOR = "minor"
    DIMINISHED = "diminished"
    AUGMENTED = "augmented"


class InvalidInversionError(ValueError):
    """Raised when an inversion index does not exist for the chord's size."""


# ── Interval tables ─────────────────────────────────────────────────────────

#: Interval above the root for the third of each triad quality.
THIRD_ABOVE_ROOT: Final[dict[Quality, str]] = {
    Quality.MAJOR: "M3",
    Quality.MINOR: "m3",
    Quality.DIMINISHED: "m3",
    Quality.AUGMENTED: "M3",
}

#: Interval above the root for the fifth of each triad quality.
FIFTH_ABOVE_ROOT: Final[dict[Quality, str]] = {
    Quality.MAJOR: "P5",
    Quality.MINOR: "P5",
    Quality.DIMINISHED: "d5",
    Quality.AUGMENTED: "A5",
}

#: Interval above the root for each seventh quality.
SEVENTH_ABOVE_ROOT: Final[dict[Quality, str]] = {
    Quality.MAJOR: "M7",
    Quality.MINOR: "m7",
    Quality.DIMINISHED: "d7",
    Quality.AUGMENTED: "A7",
}

#: (third, fifth) semitones above the root → triad quality.
_TRIAD_BY_SEMITONES: Final[dict[tuple[int, int], Quality]] = {
    (4, 7): Quality.MAJOR,
    (3, 7): Quality.MINOR,
    (3, 6): Quality.DIMINISHED,
    (4, 8): Quality.AUGMENTED,
}

#: Seventh semitones above the root (mod 12) → seventh quality.
_SEVENTH_BY_SEMITONES: Final[dict[int, Quality]] = {
    11: Quality.MAJOR,
    10: Quality.MINOR,
    9: Quality.DIMINISHED,
    0: Quality.AUGMENTED,
}

_TRIAD_FIGURES: Final[tuple[str, ...]] = ("", "6", "64")
_SEVENTH_FIGURES: Final[tuple[str, ...]] = ("7", "65", "43", "42")
_NUMERALS: Final[tuple[str, ...]] = ("I", "II", "III", "IV", "V", "VI", "VII")


def _semitones_above(root: pitch.Pitch, other: pitch.Pitch) -> int:
    return (other.pitchClass - root.pitchClass) % theory.SEMITONES_PER_OCTAVE


def _triad_quality(root: pitch.Pitch, third: pitch.Pitch, fifth: pitch.Pitch) -> Quality:
    shape = (_semitones_above(root, third), _semitones_above(root, fifth))
    try:
        return _TRIAD_BY_SEMITONES[shape]
    except KeyError:
        raise ValueError(
            f"{root.name}-{third.name}-{fifth.name} is not a major, minor, "
            "diminished or augmented triad."
        ) from None


def _seventh_quality(root: pitch.Pitch, seventh: pitch.Pitch) -> Quality:
    try:
        return _SEVENTH_BY_SEMITONES[_semitones_above(root, seventh)]
    except KeyError:
        raise ValueError(f"{root.name}-{seventh.name} is not a seventh.") from None


@dataclass(frozen=True)
class RomanChord:
    """
    A chord named by scale degree, triad quality, optional seventh and inversion.

    The chord is independent of key and register; ``chord_tones`` and
    ``bass_pitch`` realise it in a concrete key.

    Attributes:
        degree:          Scale degree of the root (I-VII).
        triad_quality:   Quality of the underlying triad.
        seventh_quality: Quality of the seventh above the root, or None for a triad.
        inversion:       0 = root position, 1 = first inversion, ... (3 needs a seventh).

    Raises:
        InvalidInversionError: If ``inversion`` is negative or not smaller than
            the number of chord tones.
    """

    degree: ScaleDegree
    triad_quality: Quality
    seventh_quality: Quality | None = None
    inversion: int = 0

    def __post_init__(self) -> None:
        if not 0 <= self.inversion < len(self):
            raise InvalidInversionError(
                f"Inversion {self.inversion} is invalid for a chord of {len(self)} tones."
            )

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def triad(cls, degree: ScaleDegree, quality: Quality, inversion: int = 0) -> RomanChord:
        return cls(degree, quality, None, inversion)

    @classmethod
    def diatonic(
        cls,
        degree: ScaleDegree,
        k: key.Key,
        seventh: bool = False,
        inversion: int = 0,
    ) -> RomanChord:
        """
        Build the chord whose qualities are read off the key's scale.

        In modes with a raised leading tone, chords on V and VII use the raised
        seventh degree (harmonic-minor dominant harmony); every other chord
        stays diatonic to the natural mode.
        """
        raise_leading_tone = theory.has_raised_leading_tone(k) and degree in (
            ScaleDegree.V,
            ScaleDegree.VII,
        )

        def tone(step: int) -> pitch.Pitch:
            scale_degree = (degree - 1 + step) % 7 + 1
            if scale_degree == 7 and raise_leading_tone:
                return theory.leading_tone(k)
            return theory.scale_pitch(k, scale_degree)

        root, third, fifth = tone(0), tone(2), tone(4)
        seventh_quality = _seventh_quality(root, tone(6)) if seventh else None
        return cls(ScaleDegree(degree), _triad_quality(root, third, fifth), seventh_quality, inversion)

    @classmethod
    def from_figure(cls, figure: str, k: key.Key) -> RomanChord:
        """
        Parse a Roman-numeral figure such as ``"V65"`` or ``"viio7"`` in ``k``.

        Parsing is delegated to ``music21.roman.RomanNumeral``; qualities are
        read back from the pitches music21 spells for the figure.

        Raises:
            ValueError: If music21 cannot read the figure, the chord is not
                a triad or seventh chord, or the figure is applied or chromatic
                (its pitches are not built on the key's own scale degree).
        """
        try:
            numeral = roman.RomanNumeral(figure, k)
        except Exception as exc:
            raise ValueError(f"Cannot read Roman numeral '{figure}': {exc}") from exc

        root = numeral.root()
        third, fifth, seventh = numeral.third, numeral.fifth, numeral.seventh
        if root is None or third is None or fifth is None or numeral.scaleDegree is None:
            raise ValueError(f"Roman numeral '{figure}' is not a triad or seventh chord.")

        chord = cls(
            degree=ScaleDegree(numeral.scaleDegree),
            triad_quality=_triad_quality(root, third, fifth),
            seventh_quality=_seventh_quality(root, seventh) if seventh is not None else None,
            inversion=numeral.inversion(),
        )
        spelled = frozenset(p.pitchClass for p in numeral.pitches)
        if chord.root(k).pitchClass != root.pitchClass or chord.pitch_class_set(k) != spelled:
            raise ValueError(
                f"Roman numeral '{figure}' is applied or chromatic in {theory.key_label(k)}; "
                "only numerals built on the key's own scale degrees are supported."
            )
        return chord

    def with_inversion(self, inversion: int) -> RomanChord:
        return replace(self, inversion=inversion)

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def has_seventh(self) -> bool:
        return self.seventh_quality is not None

    def __len__(self) -> int:
        return 4 if self.has_seventh else 3

    def __str__(self) -> str:
        numeral = _NUMERALS[self.degree - 1]
        if self.triad_quality in (Quality.MINOR, Quality.DIMINISHED):
            numeral = numeral.lower()

        symbol = ""
        if self.triad_quality is Quality.AUGMENTED:
            symbol = "+"
        elif self.triad_quality is Quality.DIMINISHED:
            half_diminished = self.seventh_quality is Quality.MINOR
            symbol = "ø" if half_diminished else "°"

        figures = _SEVENTH_FIGURES if self.has_seventh else _TRIAD_FIGURES
        return f"{numeral}{symbol}{figures[self.inversion]}"

    # ------------------------------------------------------------------
    # Realisation in a key
    # ------------------------------------------------------------------

    def root(self, k: key.Key) -> pitch.Pitch:
        """Root pitch; degree VII takes the raised leading tone where the mode has one."""
        if self.degree == ScaleDegree.VII:
            return theory.leading_tone(k)
        return theory.scale_pitch(k, int(self.degree))

    def chord_tones(self, k: key.Key) -> list[pitch.Pitch]:
        """Root, third, fifth and (if present) seventh, ascending in close position."""
        root = self.root(k)
        tones = [
            root,
            root.transpose(THIRD_ABOVE_ROOT[self.triad_quality]),
            root.transpose(FIFTH_ABOVE_ROOT[self.triad_quality]),
        ]
        if self.seventh_quality is not None:
            tones.append(root.transpose(SEVENTH_ABOVE_ROOT[self.seventh_quality]))
        return tones

    def bass_pitch(self, k: key.Key) -> pitch.Pitch:
        """The chord tone the inversion puts in the bass."""
        return self.chord_tones(k)[self.inversion]

    def pitch_class_set(self, k: key.Key) -> frozenset[int]:
        return frozenset(p.pitchClass for p in self.chord_tones(k))


def chord_tones(chord: RomanChord, k: key.Key) -> list[pitch.Pitch]:
    return chord.chord_tones(k)


def bass_pitch(chord: RomanChord, k: key.Key) -> pitch.Pitch:
    return chord.bass_pitch(k)
