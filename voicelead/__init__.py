"""voicelead: SATB voice-leading solver for Roman-numeral progressions."""

__version__ = "0.1.0"
