"""Personal photo galleries with all-or-nothing batch image upload."""

__version__ = "0.1.0"
