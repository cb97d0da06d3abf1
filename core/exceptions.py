"""
Exceptions raised by the subtitle loading pipeline.

Failures are all-or-nothing for a whole file. A single malformed cue is
never reported through these; it is dropped by the parser instead.
"""


class SubtitleError(Exception):
    """Base class for subtitle loading failures."""
    pass


class UnsupportedFormatError(SubtitleError, ValueError):
    """Raised when the format tag is not one of srt, ass, ssa, vtt."""

    def __init__(self, format_tag: str):
        self.format_tag = format_tag
        super().__init__(
            f"Unsupported subtitle format: {format_tag!r} (supported: srt, ass, ssa, vtt)"
        )


class EmptyResultError(SubtitleError):
    """Raised when a file contains no valid subtitle entries."""
    pass


class DecodeFailure(SubtitleError, IOError):
    """Raised when a byte buffer cannot be decoded with the chosen encoding."""

    def __init__(self, message: str, encoding: str = ""):
        self.encoding = encoding
        super().__init__(message)
