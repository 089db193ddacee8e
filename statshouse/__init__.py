
"""
statshouse - turn time-series statistics into music.

statshouse takes consolidated CSV data (a date, then a source name, coverage
and value for each data stream) and renders it as a multi-track tune. The
tune can be written as MIDICSV text (for ``csvmidi`` and friends), as an
in-memory event sequence, or as a Standard MIDI File via ``mido``.

The pipeline:

- **Cadence and bounds.** The date shape gives a yearly, monthly or daily
  cadence; bounds give the stream count, the busiest stream and the peak
  value used to scale notes.
- **Proto-bars.** Rows are chopped into bars of 4, 12 or 32 slots,
  optionally aligned so that a bar starts on January or on the 1st.
- **Progression groups.** Every arrangement choice draws from its own
  reproducible random source, or takes the first option when the seed is 0.
- **Notes.** Values are quantised to a scale and mapped into a fixed range
  above middle C.
- **Tunes.** Plain, gentle and house arrangements build melody and support
  tracks over a section plan, which is validated before rendering.

Minimal example:

```python
import statshouse
import statshouse.params

dataset = statshouse.load_csv("gen.csv")
params = statshouse.params.GenerationParameters(seed=0, style=statshouse.params.Style.HOUSE)
tune = statshouse.generate_tune(params, dataset)
text = statshouse.tune_to_text(tune)
```
"""

import statshouse.arrange
import statshouse.data
import statshouse.events
import statshouse.midicsv


load_csv = statshouse.data.load_csv
read_csv = statshouse.data.read_csv
generate_tune = statshouse.arrange.generate_tune
tune_to_text = statshouse.midicsv.tune_to_text
save_midi = statshouse.events.save_midi
generate_minimal_melody_text = statshouse.midicsv.generate_minimal_melody_text
