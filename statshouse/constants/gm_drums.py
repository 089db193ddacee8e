"""General MIDI Level 1 percussion notes used by the support tracks.

These sound on the GM percussion channel
(``statshouse.constants.midi.GM1_PERCUSSION_CHANNEL``).
"""

ACOUSTIC_BASS_DRUM = 35
ELECTRIC_BASS_DRUM = 36
HAND_CLAP = 39
CLOSED_HI_HAT = 42
OPEN_HI_HAT = 46
