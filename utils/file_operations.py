"""
File operations for subtitle loading.

This module provides:
- Raw byte acquisition for subtitle files (blocking and awaitable)
- Subtitle extension checks

Decoding is deliberately not done here: bytes are handed to the encoding
detector first and decoded afterwards.
"""

import asyncio
from pathlib import Path
from .constants import SUBTITLE_EXTENSIONS
from .logging_config import get_logger

logger = get_logger(__name__)


class FileHandler:
    """Handles file operations with proper error handling and logging."""

    @staticmethod
    def is_subtitle_file(file_path: Path) -> bool:
        """
        Check if a path has a supported subtitle extension.

        Args:
            file_path: Path to check

        Returns:
            True if the extension is .srt, .ass, .ssa or .vtt
        """
        return file_path.suffix.lower() in SUBTITLE_EXTENSIONS

    @staticmethod
    def read_bytes(file_path: Path) -> bytes:
        """
        Read the raw contents of a file.

        Args:
            file_path: Path to the file

        Returns:
            File contents as bytes

        Raises:
            FileNotFoundError: If the file does not exist
            IOError: If the file cannot be read

        Example:
            >>> data = FileHandler.read_bytes(Path("movie.zh.srt"))
            >>> print(f"Read {len(data)} bytes")
        """
        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")

        try:
            data = file_path.read_bytes()
        except OSError as e:
            logger.error(f"Failed to read {file_path}: {e}")
            raise IOError(f"Cannot read file {file_path}: {e}")

        logger.debug(f"Read {len(data)} bytes from {file_path.name}")
        return data

    @staticmethod
    async def read_bytes_async(file_path: Path) -> bytes:
        """
        Read the raw contents of a file without blocking the event loop.

        The read runs once in the loop's default executor; the caller resumes
        on the loop thread with the complete buffer.

        Args:
            file_path: Path to the file

        Returns:
            File contents as bytes
        """
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, FileHandler.read_bytes, file_path)
