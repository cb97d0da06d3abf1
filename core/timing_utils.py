"""
Time conversion utilities for subtitle processing.

This module provides functions for:
- Converting SRT, ASS and VTT timecodes to seconds
- Formatting seconds back into timecodes for display
"""

import re
from utils.logging_config import get_logger

logger = get_logger(__name__)

_LEADING_DIGITS = re.compile(r'\s*(\d+)')


def _leading_int(text: str) -> int:
    """Integer value of the leading digits in ``text``, 0 if there are none."""
    match = _LEADING_DIGITS.match(text)
    return int(match.group(1)) if match else 0


class TimeConverter:
    """Handles time format conversions for subtitles."""

    @staticmethod
    def time_to_seconds(time_str: str) -> float:
        """
        Convert a timecode to seconds.

        Accepts ``H:MM:SS.FRAC``, ``MM:SS.FRAC`` and a comma as the decimal
        separator, which covers SRT, ASS (centiseconds) and VTT. The fraction
        is read as milliseconds scaled by its digit count, so ``.5``, ``.50``
        and ``.500`` are all half a second. Malformed pieces count as zero.

        Args:
            time_str: Timecode text

        Returns:
            Time in seconds as float

        Example:
            >>> TimeConverter.time_to_seconds("0:00:01.50")
            1.5
        """
        if not time_str or not isinstance(time_str, str):
            return 0.0

        parts = time_str.strip().replace(',', '.').split(':')
        if len(parts) == 3:
            hours = _leading_int(parts[0])
            minutes = _leading_int(parts[1])
            sec_part = parts[2]
        elif len(parts) == 2:
            hours = 0
            minutes = _leading_int(parts[0])
            sec_part = parts[1]
        else:
            logger.debug(f"Unrecognized timecode: {time_str!r}")
            return 0.0

        whole, _, fraction = sec_part.partition('.')
        seconds = _leading_int(whole)
        digits = _LEADING_DIGITS.match(fraction)
        milliseconds = int((digits.group(1) + '000')[:3]) if digits else 0

        return hours * 3600 + minutes * 60 + seconds + milliseconds / 1000.0

    @staticmethod
    def seconds_to_time(seconds: float, format_type: str = 'srt') -> str:
        """
        Convert seconds to time string based on format type.

        Args:
            seconds: Time in seconds
            format_type: Output format ('srt', 'ass', or 'vtt')

        Returns:
            Formatted time string

        Example:
            >>> TimeConverter.seconds_to_time(3825.678, "srt")
            '01:03:45,678'
        """
        if seconds < 0:
            seconds = 0

        total_ms = int(round(seconds * 1000))
        ms = total_ms % 1000
        total_s = total_ms // 1000
        s = total_s % 60
        m = (total_s // 60) % 60
        h = total_s // 3600

        if format_type == 'srt':
            return f"{h:02d}:{m:02d}:{s:02d},{ms:03d}"
        elif format_type == 'ass':
            cs = ms // 10
            return f"{h}:{m:02d}:{s:02d}.{cs:02d}"
        else:
            return f"{h:02d}:{m:02d}:{s:02d}.{ms:03d}"

    @staticmethod
    def format_duration(seconds: float) -> str:
        """
        Format duration in seconds to human-readable string.

        Args:
            seconds: Duration in seconds

        Returns:
            Human-readable duration string

        Example:
            >>> TimeConverter.format_duration(3825.5)
            '1h 3m 45.5s'
        """
        if seconds < 60:
            return f"{seconds:.1f}s"
        elif seconds < 3600:
            minutes = int(seconds // 60)
            remaining_seconds = seconds % 60
            return f"{minutes}m {remaining_seconds:.1f}s"
        else:
            hours = int(seconds // 3600)
            remaining_seconds = seconds % 3600
            minutes = int(remaining_seconds // 60)
            remaining_seconds = remaining_seconds % 60
            return f"{hours}h {minutes}m {remaining_seconds:.1f}s"
