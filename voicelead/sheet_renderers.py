"""Renderer implementations for sheet music output formats."""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from dataclasses import asdict
from typing import Any, cast

from voicelead.sheet_models import ScoreDocument


def _escape_html(text: str) -> str:
    """Escape the three characters that are unsafe in HTML text content."""
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


#: Screen layout centres one card per page; print layout breaks after each page.
_CHORALE_STYLE = """
    body { font-family: Georgia, serif; background: #f4f1ea; margin: 0; padding: 1.5rem; }
    h1, .caption { text-align: center; }
    h1 { font-size: 1.5rem; margin: 0 0 0.25rem; }
    .caption { color: #5a5a5a; font-style: italic; margin: 0 0 1.5rem; }
    .page { background: #fff; max-width: 860px; margin: 0 auto 2rem; padding: 0.75rem; }
    .page svg { display: block; width: 100%; height: auto; }
    @media print {
      body { background: #fff; padding: 0; }
      .page { max-width: 100%; margin: 0; padding: 0; page-break-after: always; }
      .page:last-child { page-break-after: avoid; }
    }
"""


class SheetRenderer(ABC):
    """Abstract sheet renderer."""

    @property
    @abstractmethod
    def default_extension(self) -> str:
        """Default filename extension for this renderer."""

    @abstractmethod
    def render(
        self,
        *,
        title: str,
        musicxml_bytes: bytes | None = None,
        score_document: ScoreDocument | None = None,
        caption: str = "",
    ) -> str:
        """Render output into a file content string."""


class VerovioHtmlRenderer(SheetRenderer):
    """Render MusicXML bytes into a self-contained HTML document with inline SVG."""

    # Verovio A4 layout constants (verovio abstract units; ~1 unit ≈ 0.1 mm)
    _PAGE_HEIGHT: int = 2970  # A4 portrait height
    _PAGE_WIDTH: int = 2100  # A4 portrait width
    _SCALE: int = 40  # 40% — fits grand staff comfortably on A4
    _PAGE_MARGIN: int = 100  # uniform margin on all four sides

    @property
    def default_extension(self) -> str:
        return ".html"

    def render(
        self,
        *,
        title: str,
        musicxml_bytes: bytes | None = None,
        score_document: ScoreDocument | None = None,
        caption: str = "",
    ) -> str:
        if musicxml_bytes is None:
            raise ValueError("musicxml_bytes is required for HTML rendering.")

        svgs = self.render_svgs(musicxml_bytes)
        return self.build_html(title, svgs, caption)

    def render_svgs(self, musicxml_bytes: bytes) -> list[str]:
        """
        Render a MusicXML document to a list of SVG strings via verovio.

        Raises:
            ValueError: If verovio cannot load the MusicXML data.
        """
        import verovio

        tk = verovio.toolkit()
        tk.setOptions(
            {
                "pageHeight": self._PAGE_HEIGHT,
                "pageWidth": self._PAGE_WIDTH,
                "scale": self._SCALE,
                "pageMarginTop": self._PAGE_MARGIN,
                "pageMarginBottom": self._PAGE_MARGIN,
                "pageMarginLeft": self._PAGE_MARGIN,
                "pageMarginRight": self._PAGE_MARGIN,
                "adjustPageHeight": True,
                "font": "Leipzig",
            }
        )

        loaded: bool = tk.loadData(musicxml_bytes.decode("utf-8"))
        if not loaded:
            raise ValueError("verovio could not load the MusicXML data.")

        page_count: int = tk.getPageCount()
        return [self._render_page_svg(tk, page_no) for page_no in range(1, page_count + 1)]

    def _render_page_svg(self, toolkit: Any, page_no: int) -> str:
        """
        Render one page to SVG with compatibility for multiple verovio bindings.

        Some versions accept keyword arguments, while others only accept
        positional arguments.
        """
        try:
            return cast(str, toolkit.renderToSVG(pageNo=page_no, xmlDeclaration=False))
        except TypeError:
            try:
                return cast(str, toolkit.renderToSVG(page_no, False))
            except TypeError:
                return cast(str, toolkit.renderToSVG(page_no))

    def build_html(self, title: str, svgs: list[str], caption: str = "") -> str:
        """
        Wrap a list of SVG strings in a self-contained HTML document.

        One ``.page`` div per SVG, under the title and an optional caption line
        naming the key and the progression.
        """
        title_safe = _escape_html(title)
        heading = f"  <h1>{title_safe}</h1>\n" if title else ""
        if caption:
            heading += f'  <p class="caption">{_escape_html(caption)}</p>\n'
        pages = "\n".join(f'  <div class="page">{svg}</div>' for svg in svgs)

        return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1.0" />
  <title>{title_safe}</title>
  <style>{_CHORALE_STYLE}  </style>
</head>
<body>
{heading}{pages}
</body>
</html>"""


class VexflowMarkdownRenderer(SheetRenderer):
    """
    Render a score document into Markdown with an embedded VexFlow script.

    Each measure is drawn as a grand staff (soprano and alto on the treble
    staff, tenor and bass on the bass staff) with the Roman numeral of every
    chord written beneath the bass.
    """

    VEXFLOW_URL = "https://cdn.jsdelivr.net/npm/vexflow@4.2.3/build/esm/entry/vexflow.js"

    @property
    def default_extension(self) -> str:
        return ".md"

    def render(
        self,
        *,
        title: str,
        musicxml_bytes: bytes | None = None,
        score_document: ScoreDocument | None = None,
        caption: str = "",
    ) -> str:
        if score_document is None:
            raise ValueError("score_document is required for md-vexflow rendering.")

        title_safe = _escape_html(title)
        score_json = json.dumps(asdict(score_document), separators=(",", ":"), ensure_ascii=False)
        score_json = score_json.replace("</", "<\\/")
        chord_count = sum(len(measure.bass) for measure in score_document.measures)

        return f"""# {title_safe}

Key: {_escape_html(score_document.key_signature)} | Chords: {chord_count}

This Markdown uses embedded JavaScript + VexFlow. Open it in a Markdown viewer that allows script execution.

<style>
  #voicelead-score {{ display: grid; gap: 1rem; margin-top: 1rem; }}
  .voicelead-measure {{ border: 1px solid #d8d8d8; background: #fff; padding: 0.5rem; overflow-x: auto; }}
</style>

<div id="voicelead-score"></div>
<script id="voicelead-score-data" type="application/json">{score_json}</script>
<script type="module">
  import {{
    Accidental,
    Annotation,
    Formatter,
    Renderer,
    Stave,
    StaveConnector,
    StaveNote,
    Voice
  }} from "{self.VEXFLOW_URL}";

  const host = document.getElementById("voicelead-score");
  const payloadNode = document.getElementById("voicelead-score-data");

  if (!host || !payloadNode) {{
    throw new Error("Missing VexFlow score container.");
  }}

  const payload = JSON.parse(payloadNode.textContent || "{{}}");
  const beats = Number(payload.beats) || 4;
  const beatValue = Number(payload.beat_value) || 4;
  const timeSignature = payload.time_signature || "4/4";
  const keySignature = payload.key_signature || "C";
  const measures = Array.isArray(payload.measures) ? payload.measures : [];

  const toStaveNotes = (entries, clef, symbols) => entries.map((entry, chordIndex) => {{
    const staveNote = new StaveNote({{
      clef,
      keys: entry.keys,
      duration: entry.duration || "q",
    }});

    entry.accidentals.forEach((symbol, noteIndex) => {{
      if (symbol) {{
        staveNote.addModifier(new Accidental(symbol), noteIndex);
      }}
    }});

    if (symbols && symbols[chordIndex]) {{
      const numeral = new Annotation(symbols[chordIndex]);
      numeral.setVerticalJustification(Annotation.VerticalJustify.BOTTOM);
      staveNote.addModifier(numeral, 0);
    }}

    return staveNote;
  }});

  measures.forEach((measure, index) => {{
    const measureRoot = document.createElement("div");
    measureRoot.className = "voicelead-measure";
    host.appendChild(measureRoot);

    const renderer = new Renderer(measureRoot, Renderer.Backends.SVG);
    renderer.resize(760, 260);
    const context = renderer.getContext();

    // Upper staff: soprano and alto. Lower staff: tenor and bass, with numerals.
    const staves = [
      {{ clef: "treble", y: 24, notes: measure.treble, symbols: null }},
      {{ clef: "bass", y: 130, notes: measure.bass, symbols: measure.symbols }},
    ].map((staff) => {{
      const stave = new Stave(20, staff.y, 700).addClef(staff.clef).addKeySignature(keySignature);
      if (index === 0) {{
        stave.addTimeSignature(timeSignature);
      }}
      stave.setContext(context).draw();

      const voice = new Voice({{ num_beats: beats, beat_value: beatValue }}).setMode(Voice.Mode.SOFT);
      voice.addTickables(toStaveNotes(staff.notes, staff.clef, staff.symbols));
      return {{ stave, voice }};
    }});

    const [upper, lower] = staves;
    [StaveConnector.type.BRACE, StaveConnector.type.SINGLE_LEFT, StaveConnector.type.SINGLE_RIGHT].forEach((type) => {{
      new StaveConnector(upper.stave, lower.stave).setType(type).setContext(context).draw();
    }});

    const voices = staves.map((staff) => staff.voice);
    new Formatter().joinVoices([upper.voice]).joinVoices([lower.voice]).format(voices, 580);
    staves.forEach((staff) => staff.voice.draw(context, staff.stave));
  }});
</script>
"""
