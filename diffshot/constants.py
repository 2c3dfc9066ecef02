"""Shared defaults."""

DEFAULT_DEVICE = "iPhone 6"
DEFAULT_OUTPUT_DIR = "files"
DEFAULT_RETRY = 0
MAX_RETRY = 10
DEFAULT_THRESHOLD = 25.0

DEFAULT_RETRY_DELAY_MS = 1000
COMPARE_QUALITY = 100
SNAPSHOT_QUALITY = 50

# Per-channel difference tolerated before a pixel counts as changed (resemble.js default)
DEFAULT_COLOR_TOLERANCE = 16
ERROR_COLOR = (255, 0, 255)

IMAGE_SUFFIX = ".jpg"
TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"

BEFORE_IDENTIFIER = "before"
AFTER_IDENTIFIER = "after"
DIFF_IDENTIFIER = "diff"

WAIT_UNTIL = "networkidle"
