"""diffshot: device-emulated page captures and visual regression diffs."""

__version__ = "0.1.0"
