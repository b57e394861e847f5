"""Timing and layout constants shared by the graph components (milliseconds unless noted)."""

# Default visible span of a time graph.
DEFAULT_TIME_MILLISECONDS = 60_000

# Zoom step applied per key press / wheel notch.
TIME_CHANGE_MILLISECONDS = 15_000

# Zoom floor and ceiling.
STALE_MIN_MILLISECONDS = 30_000
STALE_MAX_MILLISECONDS = 600_000

# How long the x-axis time labels stay visible after a zoom when autohide is on.
AUTOHIDE_TIMEOUT_MILLISECONDS = 5_000

# Minimum chart height (rows of text) before the x-axis time labels are drawn.
TIME_LABEL_HEIGHT_LIMIT = 7

DEFAULT_REFRESH_RATE_MILLISECONDS = 1_000
