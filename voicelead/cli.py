"""voicelead CLI entry point."""

import logging
import sys
from collections.abc import Sequence

import click
from music21 import key
from music21.exceptions21 import Music21Exception

from voicelead import __version__, theory
from voicelead.check import check_voice_leading
from voicelead.roman_chord import RomanChord
from voicelead.rule_set import RuleSet
from voicelead.search import VoiceLeadingSolver
from voicelead.violations import VoiceLeadingError
from voicelead.voicing import Solution, Voice, Voicing

DEFAULT_TOP = 5
COLUMN_WIDTH = 7


def _parse_key(text: str) -> key.Key:
    try:
        return theory.parse_key(text)
    except (ValueError, Music21Exception) as exc:
        raise click.BadParameter(str(exc), param_hint="--key") from exc


def _parse_progression(figures: Sequence[str], k: key.Key) -> list[RomanChord]:
    chords = []
    for figure in figures:
        try:
            chords.append(RomanChord.from_figure(figure, k))
        except (ValueError, Music21Exception) as exc:
            raise click.BadParameter(str(exc), param_hint="FIGURES") from exc
    return chords


def _parse_voicings(texts: Sequence[str], param_hint: str) -> list[Voicing]:
    voicings = []
    for text in texts:
        try:
            voicings.append(Voicing.from_names(text))
        except (ValueError, Music21Exception) as exc:
            raise click.BadParameter(str(exc), param_hint=param_hint) from exc
    return voicings


def _rules(strict: bool) -> RuleSet:
    return RuleSet.strict() if strict else RuleSet.default()


def _format_grid(progression: Sequence[RomanChord], voicings: Sequence[Voicing]) -> list[str]:
    """One header row of numerals and one row per voice, soprano on top."""
    header = "     " + "".join(f"{str(chord):<{COLUMN_WIDTH}}" for chord in progression)
    rows = [header.rstrip()]
    for voice in Voice:
        cells = "".join(f"{voicing[voice].nameWithOctave:<{COLUMN_WIDTH}}" for voicing in voicings)
        rows.append(f"  {voice.label[0]}  {cells}".rstrip())
    return rows


def _echo_solution(rank: int, progression: Sequence[RomanChord], solution: Solution) -> None:
    click.echo(f"#{rank}  score {solution.score}")
    for row in _format_grid(progression, solution.voicings):
        click.echo(row)
    click.echo()


# ── CLI group ──────────────────────────────────────────────────────────────────

@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="voicelead")
@click.option("--verbose", "-v", is_flag=True, help="Log candidate and transition counts to stderr.")
def main(verbose: bool) -> None:
    """voicelead — four-part voice leading for Roman-numeral progressions."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


key_option = click.option(
    "--key",
    "-k",
    "key_text",
    required=True,
    metavar="KEY",
    help="Key of the progression: 'E-' (major), 'c' (minor) or 'd dorian'.",
)

strict_option = click.option(
    "--strict",
    is_flag=True,
    help="Also forbid similar motion into unisons and fifth-less triads outside V7-I.",
)


# ── solve subcommand ───────────────────────────────────────────────────────────

@main.command()
@click.argument("figures", nargs=-1, required=True)
@key_option
@click.option(
    "--start",
    "-s",
    "starts",
    multiple=True,
    metavar="'S A T B'",
    help="Fix the voicing of the first chord; repeat to fix the following chords too.",
)
@click.option(
    "--top",
    type=click.IntRange(min=1),
    default=DEFAULT_TOP,
    show_default=True,
    help="Number of solutions to print.",
)
@strict_option
@click.option("--midi", default=None, metavar="PATH", help="Write the best solution as MIDI.")
@click.option("--sheet", default=None, metavar="PATH", help="Write the best solution as sheet music.")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["html", "md-vexflow"], case_sensitive=False),
    default="html",
    show_default=True,
    help="Sheet output format: self-contained HTML (verovio) or Markdown with VexFlow script.",
)
@click.option("--title", default=None, metavar="TEXT", help="Title shown on the sheet music.")
@click.option(
    "--tempo",
    type=click.IntRange(20, 300),
    default=72,
    show_default=True,
    help="MIDI playback tempo in BPM.",
)
def solve(
    figures: tuple[str, ...],
    key_text: str,
    starts: tuple[str, ...],
    top: int,
    strict: bool,
    midi: str | None,
    sheet: str | None,
    output_format: str,
    title: str | None,
    tempo: int,
) -> None:
    """
    Find the smoothest voice leadings of a progression.

    FIGURES are Roman numerals read by music21, e.g. I V6 I IV V7 I.

    \b
    Examples:
      voicelead solve I V6 I IV V7 I --key E- --start "B-4 E-4 G3 E-3"
      voicelead solve i iv V7 i --key c --top 1 --midi cadence.mid
      voicelead solve I IV V I --key G --sheet cadence.html --title "Cadence"
    """
    k = _parse_key(key_text)
    progression = _parse_progression(figures, k)
    fixed = _parse_voicings(starts, "--start")
    solver = VoiceLeadingSolver(k, _rules(strict))

    click.echo(f"voicelead v{__version__}")
    click.echo(f"  Key    : {theory.key_label(k)}")
    click.echo(f"  Chords : {' '.join(str(chord) for chord in progression)}")
    click.echo()

    try:
        solutions = solver.solve(progression, fixed or None)
    except ValueError as exc:
        click.echo(f"  ERROR: {exc}", err=True)
        sys.exit(1)

    if not solutions:
        click.echo("  No voice leading satisfies every rule.", err=True)
        sys.exit(1)

    click.echo(f"Found {len(solutions)} solution(s); best {min(top, len(solutions))}:")
    click.echo()
    for rank, solution in enumerate(solutions[:top], start=1):
        _echo_solution(rank, progression, solution)

    best = solutions[0]
    if midi is not None:
        from voicelead.midi_exporter import MidiExporter

        try:
            MidiExporter(tempo=tempo).export(best.voicings, midi)
        except OSError as exc:
            click.echo(f"  ERROR: Could not write MIDI file — {exc}", err=True)
            sys.exit(1)
        click.echo(f"Wrote MIDI → '{midi}'")

    if sheet is not None:
        from voicelead.sheet_exporter import SheetExporter

        exporter = SheetExporter(title=title or " ".join(figures), output_format=output_format)
        try:
            exporter.export(progression, k, best.voicings, sheet)
        except OSError as exc:
            click.echo(f"  ERROR: Could not write output file — {exc}", err=True)
            sys.exit(1)
        except ValueError as exc:
            click.echo(f"  ERROR: Could not render score — {exc}", err=True)
            sys.exit(1)
        click.echo(f"Wrote sheet → '{sheet}'")


# ── check subcommand ───────────────────────────────────────────────────────────

@main.command()
@click.argument("figures", nargs=-1, required=True)
@key_option
@click.option(
    "--voicing",
    "voicing_texts",
    multiple=True,
    required=True,
    metavar="'S A T B'",
    help="Voicing of the next chord, soprano first; repeat once per chord.",
)
@strict_option
def check(figures: tuple[str, ...], key_text: str, voicing_texts: tuple[str, ...], strict: bool) -> None:
    """
    Check a hand-written voice leading and print its score.

    \b
    Example:
      voicelead check I V I --key C --voicing "C5 G4 E4 C3" \\
          --voicing "B4 G4 D4 G2" --voicing "C5 G4 E4 C3"
    """
    k = _parse_key(key_text)
    progression = _parse_progression(figures, k)
    voicings = _parse_voicings(voicing_texts, "--voicing")

    try:
        score = check_voice_leading(k, progression, voicings, _rules(strict))
    except VoiceLeadingError as exc:
        click.echo(f"  INVALID: {exc}", err=True)
        sys.exit(1)

    for row in _format_grid(progression, voicings):
        click.echo(row)
    click.echo()
    click.echo(f"Valid voice leading, score {score}")


# ── candidates subcommand ──────────────────────────────────────────────────────

@main.command()
@click.argument("figure")
@key_option
@strict_option
def candidates(figure: str, key_text: str, strict: bool) -> None:
    """
    List every valid voicing of one chord.

    \b
    Example:
      voicelead candidates V65 --key g
    """
    k = _parse_key(key_text)
    (chord,) = _parse_progression([figure], k)
    found = VoiceLeadingSolver(k, _rules(strict)).candidates(chord)

    click.echo(f"{chord} in {theory.key_label(k)}: {len(found)} voicing(s)")
    for candidate in found:
        click.echo(f"  {candidate.voicing}  (score {candidate.score})")
