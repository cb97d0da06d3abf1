"""
Shared constants and configurations for the subtitle sync application.

This module contains all the constants used across different modules including:
- Supported subtitle formats and extensions
- Encoding detection markers and thresholds
- Sync engine tolerances and cadences
- Default logging configuration
"""

from enum import Enum
from typing import Set, List, Dict

# ============================================================================
# FILE FORMAT CONSTANTS
# ============================================================================

class SubtitleFormat(Enum):
    """Supported subtitle formats."""
    SRT = "srt"
    ASS = "ass"
    SSA = "ssa"
    VTT = "vtt"

    @classmethod
    def from_extension(cls, ext: str) -> 'SubtitleFormat':
        """
        Get format from file extension or format tag.

        Args:
            ext: File extension (with or without dot) or bare tag

        Returns:
            SubtitleFormat enum value

        Raises:
            ValueError: If extension is not supported
        """
        ext = ext.lower().strip().lstrip('.')
        for format_type in cls:
            if format_type.value == ext:
                return format_type
        raise ValueError(f"Unsupported subtitle format: {ext}")

# Supported subtitle file extensions
SUBTITLE_EXTENSIONS: Set[str] = {'.srt', '.ass', '.ssa', '.vtt'}

# ============================================================================
# ENCODING DETECTION CONSTANTS
# ============================================================================

ENCODING_UTF8: str = 'utf-8'
ENCODING_UTF16LE: str = 'utf-16le'
ENCODING_UTF16BE: str = 'utf-16be'
ENCODING_GBK: str = 'gbk'

# Labels the detector may return
DETECTABLE_ENCODINGS: List[str] = [
    ENCODING_UTF8, ENCODING_UTF16LE, ENCODING_UTF16BE, ENCODING_GBK
]

# Byte order marks
UTF8_BOM: bytes = b"\xef\xbb\xbf"
UTF16LE_BOM: bytes = b"\xff\xfe"
UTF16BE_BOM: bytes = b"\xfe\xff"

# Checked in order, longest first
BOM_ENCODINGS: List[tuple] = [
    (UTF8_BOM, ENCODING_UTF8),
    (UTF16LE_BOM, ENCODING_UTF16LE),
    (UTF16BE_BOM, ENCODING_UTF16BE),
]

# Number of leading bytes inspected by the heuristic
ENCODING_SAMPLE_SIZE: int = 8192

# Share of high bytes that must form valid UTF-8 sequences
UTF8_VALID_RATIO: float = 0.8

# ============================================================================
# ASS/SSA CONSTANTS
# ============================================================================

# Event format assumed when a script has no Format line
DEFAULT_ASS_EVENT_FORMAT: List[str] = [
    'layer', 'start', 'end', 'style', 'name',
    'marginl', 'marginr', 'marginv', 'effect', 'text'
]

# Alternative column names seen in older scripts
ASS_FIELD_ALIASES: Dict[str, str] = {
    'start': 'start time',
    'end': 'end time',
}

# ============================================================================
# SYNC ENGINE CONSTANTS
# ============================================================================

# Leniency around each entry's window (seconds)
DEFAULT_LEAD_TOLERANCE: float = 0.05
DEFAULT_TRAIL_TOLERANCE: float = 0.15

# How far past the query time the scan keeps looking (seconds)
DEFAULT_SCAN_LOOKAHEAD: float = 0.1

# Entries re-checked before the binary search hit
DEFAULT_SCAN_BACK: int = 5

# Frame-aligned tick and fallback tick (seconds)
DEFAULT_FRAME_INTERVAL: float = 1.0 / 60.0
DEFAULT_FALLBACK_INTERVAL: float = 0.25

# Prefix for environment overrides
ENV_PREFIX: str = "SUBSYNC_"

# ============================================================================
# DEFAULT CONFIGURATION VALUES
# ============================================================================

# Default log format
DEFAULT_LOG_FORMAT: str = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DEFAULT_LOG_DATE_FORMAT: str = '%Y-%m-%d %H:%M:%S'

# Application metadata
APP_NAME: str = "Subtitle Sync"
APP_VERSION: str = "1.0.0"
APP_DESCRIPTION: str = """
Parse SRT, ASS/SSA and WebVTT subtitles of unknown encoding and keep the
currently active lines synchronized against a live playback clock:
- Byte-level encoding detection (UTF-8, UTF-16, GBK)
- Multi-format subtitle parsing
- Offset-aware, change-suppressed active text tracking
"""
