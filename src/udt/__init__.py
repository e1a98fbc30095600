"""udt — dual-subtitle translation engine for video lectures."""

__version__ = "0.1.0"
