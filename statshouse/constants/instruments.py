"""General MIDI Level 1 program numbers used by the arrangements.

Numbers are 0-based, ready to go straight into a program change.
"""

# Bass
ELECTRIC_BASS_FINGER = 33
SYNTH_BASS_1 = 38
SYNTH_BASS_2 = 39

SYNTH_BRASS_1 = 62              # House secondary data streams
TENOR_SAX = 67                  # Plain/gentle main data stream
OCARINA = 79                    # Plain/gentle secondary data streams
LEAD_1_SQUARE_WAVE = 80         # Minimal melody
LEAD_2_SAWTOOTH_WAVE = 81       # House main data stream
