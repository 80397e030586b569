"""MidiExporter: writes a voiced progression as a four-track SATB MIDI file."""

from collections.abc import Sequence

from midiutil import MIDIFile

from voicelead.voicing import Voice, Voicing

# In midiutil Format 1 MIDI, track 0 is the conductor/tempo track.
# Note data written to track 0 is ignored by most players and notation apps.
TRACK_CONDUCTOR = 0  # Tempo/time signature only, never receives notes

#: Data track per voice; tracks 1-4 top to bottom so notation apps stack the staves in order.
VOICE_TRACKS = {voice: voice.value + 1 for voice in Voice}

#: General MIDI "Choir Aahs" (program 53, zero-based 52).
CHOIR_PROGRAM = 52


class MidiExporter:
    """
    Writes one track per voice from a sequence of voicings.

    Track layout (Format 1, 5 internal tracks)
    ------------------------------------------
    Track 0   — conductor track (tempo and time signature, no notes)
    Track 1-4 — Soprano, Alto, Tenor, Bass, each on its own channel so a
                single part can be soloed or muted in any MIDI player.

    Timing
    ------
    Every voicing lasts ``beats_per_chord`` beats; chord *i* starts at
    ``i * beats_per_chord``.
    """

    DEFAULT_TEMPO = 72     # BPM — a chorale tempo
    DEFAULT_VELOCITY = 80  # MIDI velocity for the upper voices (0-127)
    BASS_VELOCITY = 88     # Slightly stronger bass line

    def __init__(
        self,
        tempo: int = DEFAULT_TEMPO,
        velocity: int = DEFAULT_VELOCITY,
        beats_per_chord: float = 1.0,
    ) -> None:
        """
        Args:
            tempo:           Playback tempo in beats per minute.
            velocity:        MIDI note-on velocity for soprano, alto and tenor.
            beats_per_chord: Length of each voicing in beats.

        Raises:
            ValueError: If ``beats_per_chord`` is not positive.
        """
        if beats_per_chord <= 0:
            raise ValueError("beats_per_chord must be positive.")
        self.tempo = tempo
        self.velocity = velocity
        self.beats_per_chord = beats_per_chord

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def build(self, voicings: Sequence[Voicing]) -> MIDIFile:
        """Assemble the in-memory MIDI file without writing it."""
        midi = MIDIFile(numTracks=len(Voice) + 1, removeDuplicates=False, deinterleave=False)

        midi.addTempo(TRACK_CONDUCTOR, 0, self.tempo)
        midi.addTimeSignature(TRACK_CONDUCTOR, 0, 4, 2, 24)

        for voice, track in VOICE_TRACKS.items():
            midi.addTrackName(track, 0, voice.label)
            midi.addProgramChange(track, voice.value, 0, CHOIR_PROGRAM)

        for index, voicing in enumerate(voicings):
            start_beat = index * self.beats_per_chord
            for voice in Voice:
                midi.addNote(
                    track=VOICE_TRACKS[voice],
                    channel=voice.value,
                    pitch=int(voicing[voice].midi),
                    time=start_beat,
                    duration=self.beats_per_chord,
                    volume=self.BASS_VELOCITY if voice == Voice.BASS else self.velocity,
                )

        return midi

    def export(self, voicings: Sequence[Voicing], output_path: str) -> None:
        """
        Render voicings to a Standard MIDI File (SMF format 1).

        Args:
            voicings:    One voicing per chord, in order.
            output_path: Destination file path (e.g. "chorale.mid").

        Raises:
            OSError: If the output file cannot be opened for writing.
        """
        midi = self.build(voicings)
        with open(output_path, "wb") as f:
            midi.writeFile(f)
