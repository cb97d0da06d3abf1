"""
Core subtitle processing modules.

This package contains the fundamental components for subtitle loading:
- Subtitle entry type and format parsers (SRT, ASS/SSA, VTT)
- Encoding detection
- Timecode conversion
- The sorted entry store queried by the sync engine
"""

from .exceptions import SubtitleError, UnsupportedFormatError, EmptyResultError, DecodeFailure
from .subtitle_formats import SubtitleEntry, ParseResult, SubtitleFormatFactory
from .encoding_detection import EncodingDetector
from .timing_utils import TimeConverter
from .entry_store import EntryStore

__all__ = [
    'SubtitleError',
    'UnsupportedFormatError',
    'EmptyResultError',
    'DecodeFailure',
    'SubtitleEntry',
    'ParseResult',
    'SubtitleFormatFactory',
    'EncodingDetector',
    'TimeConverter',
    'EntryStore',
]
