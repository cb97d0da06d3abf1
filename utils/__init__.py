"""
Utility modules.

This package contains shared utility functions and configurations:
- File I/O operations
- Logging configuration
- Runtime settings
- Shared constants
"""

from .file_operations import FileHandler
from .logging_config import setup_logging, get_logger
from .config import SyncSettings
from .constants import (
    SubtitleFormat,
    SUBTITLE_EXTENSIONS,
    DETECTABLE_ENCODINGS,
    UTF8_BOM,
    UTF16LE_BOM,
    UTF16BE_BOM,
    DEFAULT_LEAD_TOLERANCE,
    DEFAULT_TRAIL_TOLERANCE,
    DEFAULT_FRAME_INTERVAL,
    DEFAULT_FALLBACK_INTERVAL,
    DEFAULT_LOG_FORMAT,
    DEFAULT_LOG_DATE_FORMAT,
    APP_NAME,
    APP_VERSION,
    APP_DESCRIPTION,
)

__all__ = [
    'FileHandler',
    'setup_logging',
    'get_logger',
    'SyncSettings',
    'SubtitleFormat',
    'SUBTITLE_EXTENSIONS',
    'DETECTABLE_ENCODINGS',
    'UTF8_BOM',
    'UTF16LE_BOM',
    'UTF16BE_BOM',
    'DEFAULT_LEAD_TOLERANCE',
    'DEFAULT_TRAIL_TOLERANCE',
    'DEFAULT_FRAME_INTERVAL',
    'DEFAULT_FALLBACK_INTERVAL',
    'DEFAULT_LOG_FORMAT',
    'DEFAULT_LOG_DATE_FORMAT',
    'APP_NAME',
    'APP_VERSION',
    'APP_DESCRIPTION',
]
