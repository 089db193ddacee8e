"""Constants for statshouse.

This package contains:

- ``statshouse.constants.midi`` - General MIDI channel and controller numbers, and limits
- ``statshouse.constants.instruments`` - General MIDI program numbers used by the arrangements
- ``statshouse.constants.gm_drums`` - General MIDI percussion notes used by the arrangements

Timing and tune-shape constants live here directly.
"""

# Timing

CLOCKS_PER_QUARTER = 480        # PPQ used for all output
DEFAULT_TEMPO = 500000          # Microseconds per quarter note (120 BPM)
BEATS_PER_BAR = 4               # Always 4/4
CLOCKS_PER_BAR = CLOCKS_PER_QUARTER * BEATS_PER_BAR

# Tune shape

DEFAULT_SECTION_BARS = 16
MIN_SECTION_BARS = 8
MAX_VERSE_SECTIONS = 4
TYPICAL_RADIO_TUNE_BARS = 128

# Notes

ROOT_NOTE = 60                  # Middle C
RANGE_OCTAVES = 2
DEFAULT_MELODY_VELOCITY = 63
MAX_MELODY_VELOCITY = 100

# Data

MAX_DATA_STREAMS = 4
