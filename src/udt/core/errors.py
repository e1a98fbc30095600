"""Exception types raised across udt."""

from __future__ import annotations


class UDTError(Exception):
    """Base class for failures surfaced at the messaging boundary."""


class TranslationError(UDTError):
    """The translation provider could not be reached or returned a non-success status."""


class TrackLoadError(UDTError):
    """A subtitle track could not be fetched."""
