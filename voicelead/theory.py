"""Thin adapter over music21 for the pitch, key and interval primitives the solver consumes."""

from functools import lru_cache
from typing import Final

from music21 import interval, key, pitch

#: Modes that raise scale degree 7 to form a leading tone.
RAISED_LEADING_TONE_MODES: Final[frozenset[str]] = frozenset({"minor", "aeolian", "dorian"})

SEMITONES_PER_OCTAVE = 12


# ── Keys ────────────────────────────────────────────────────────────────────

def parse_key(text: str) -> key.Key:
    """
    Build a music21 Key from text such as ``"E-"``, ``"c"`` or ``"d dorian"``.

    A lowercase tonic without an explicit mode is read as minor, following
    music21's own convention.
    """
    parts = text.split()
    if not parts or len(parts) > 2:
        raise ValueError(f"Cannot read a key from '{text}'. Use e.g. 'E-', 'c' or 'd dorian'.")
    mode = parts[1].lower() if len(parts) == 2 else None
    return key.Key(parts[0], mode)


def has_raised_leading_tone(k: key.Key) -> bool:
    """Whether the key's mode raises degree 7 into a leading tone."""
    return k.mode in RAISED_LEADING_TONE_MODES


def scale_pitch(k: key.Key, degree: int) -> pitch.Pitch:
    """Diatonic pitch of a scale degree (1-7) in ``k``, without any alteration."""
    return k.pitchFromDegree(degree)


def leading_tone(k: key.Key) -> pitch.Pitch:
    """Scale degree 7, raised by a chromatic semitone in minor-like modes."""
    seventh = scale_pitch(k, 7)
    if has_raised_leading_tone(k):
        return seventh.transpose("A1")
    return seventh


def has_leading_tone(k: key.Key) -> bool:
    """True when the (possibly raised) seventh degree sits a minor second below the tonic."""
    return (k.tonic.pitchClass - leading_tone(k).pitchClass) % SEMITONES_PER_OCTAVE == 1


def key_label(k: key.Key) -> str:
    """Readable key name, e.g. ``E- major``."""
    return f"{k.tonic.name} {k.mode}"


# ── Pitches ─────────────────────────────────────────────────────────────────

def parse_pitch(name: str) -> pitch.Pitch:
    """
    Parse a registered pitch name (music21 spelling, ``-`` for flat).

    Raises:
        ValueError: If the name carries no octave.
    """
    parsed = pitch.Pitch(name)
    if parsed.octave is None:
        raise ValueError(f"Pitch '{name}' needs an octave, e.g. '{name}4'.")
    return parsed


def in_octave(p: pitch.Pitch, octave: int) -> pitch.Pitch:
    """The same spelled pitch placed in ``octave``."""
    return pitch.Pitch(f"{p.name}{octave}")


def semitones_between(start: pitch.Pitch, end: pitch.Pitch) -> int:
    """Signed semitone distance from ``start`` to ``end``."""
    return int(round(end.ps - start.ps))


# ── Intervals ───────────────────────────────────────────────────────────────

@lru_cache(maxsize=8192)
def _interval_by_name(start: str, end: str) -> interval.Interval:
    return interval.Interval(pitch.Pitch(start), pitch.Pitch(end))


def distance(start: pitch.Pitch, end: pitch.Pitch) -> interval.Interval:
    """
    Directed interval from ``start`` to ``end``.

    Results are memoised by pitch name; the returned Interval is shared and
    must be treated as read-only.
    """
    return _interval_by_name(start.nameWithOctave, end.nameWithOctave)


def quality_symbol(ivl: interval.Interval) -> str:
    """Quality prefix of the interval name: ``P``, ``M``, ``m``, ``A``, ``d``, ``AA``..."""
    return ivl.name.rstrip("0123456789")


def is_augmented(ivl: interval.Interval) -> bool:
    return quality_symbol(ivl).startswith("A")


def is_diminished(ivl: interval.Interval) -> bool:
    return quality_symbol(ivl).startswith("d")


def is_perfect_fifth_or_octave(ivl: interval.Interval) -> bool:
    """Perfect fifth, octave or unison, compound intervals reduced."""
    return ivl.semiSimpleName in {"P1", "P5", "P8"}


def is_step(ivl: interval.Interval) -> bool:
    """A melodic second of any quality (not compound)."""
    return ivl.generic.undirected == 2
