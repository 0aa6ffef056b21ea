"""
Shared constants for the survey editor.

All lengths are percentage units of the rendered canvas (0-100), so they
stay valid at any canvas size. The overlay renderer uses the same values
as the hit-test so what is drawn is what can be grabbed.
"""

# Upper bound of the percentage space on both axes
PERCENT_MAX = 100.0

# Size of a freshly placed short answer box
DEFAULT_SHORT_ANSWER_WIDTH = 30.0
DEFAULT_SHORT_ANSWER_HEIGHT = 8.0

# Grab radius around a choice marker; larger than the drawn marker to ease touch targeting
OPTION_HIT_RADIUS = 3.5

# Where migrated single-audio pages get their audio button
LEGACY_AUDIO_BUTTON_X = 50.0
LEGACY_AUDIO_BUTTON_Y = 10.0

# Drawn marker radius, in percent of the canvas width
OPTION_MARKER_RADIUS = 1.5
AUDIO_MARKER_RADIUS = 2.0
