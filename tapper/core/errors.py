"""Exceptions raised by the typing engine and its collaborators."""

from __future__ import annotations


class TapperError(Exception):
    """Base class for all tapper errors."""


class LayoutError(TapperError):
    """The text cannot be laid out in the current window."""


class TimingError(TapperError):
    """The clock moved backwards between two reads."""


class TextRangeError(TapperError):
    """A text id or difficulty outside the valid range was requested."""
