"""General MIDI numbers: channels, controllers and limits.

Channels are 0-based throughout statshouse, so the GM percussion channel
(channel 10 to a musician) is ``9`` here.
"""

GM1_PERCUSSION_CHANNEL = 9

MAX_CHANNEL = 15
MAX_DATA_BYTE = 127

# Controllers
CC_VOLUME = 7
CC_PAN = 10
CC_EXPRESSION = 11

# Setup defaults
DEFAULT_VOLUME = 100
DEFAULT_PAN = 64                # Centre
DEFAULT_EXPRESSION = 127
