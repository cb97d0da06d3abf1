"""
Encoding detection utilities for subtitle files.

This module classifies raw subtitle bytes into one of the encodings the
loader supports (UTF-8, UTF-16 LE/BE and GBK) and decodes them afterwards.
Detection and decoding are separate steps: the label is chosen from the raw
bytes first, then the buffer is decoded with that label.
"""

from typing import Optional

from charset_normalizer import from_bytes

from utils.constants import (
    BOM_ENCODINGS,
    ENCODING_SAMPLE_SIZE,
    ENCODING_UTF8,
    ENCODING_UTF16LE,
    ENCODING_UTF16BE,
    ENCODING_GBK,
    UTF8_BOM,
    UTF8_VALID_RATIO,
)
from utils.logging_config import get_logger
from core.exceptions import DecodeFailure

logger = get_logger(__name__)

# Python codec names for the detector labels
_CODECS = {
    ENCODING_UTF8: 'utf-8-sig',
    ENCODING_UTF16LE: 'utf-16-le',
    ENCODING_UTF16BE: 'utf-16-be',
    ENCODING_GBK: 'gbk',
}


class EncodingDetector:
    """Handles encoding detection for subtitle byte buffers with Chinese support."""

    @staticmethod
    def detect(data: bytes) -> str:
        """
        Classify a byte buffer into an encoding label.

        Byte order marks win outright. Without one, the first 8192 bytes are
        scanned: every byte >= 0x80 counts as a high byte, and high bytes that
        start a well-formed 2, 3 or 4 byte UTF-8 sequence count as valid.
        More than 80% valid means UTF-8, anything else is taken as GBK. A
        buffer with no high bytes at all is plain ASCII and reported as UTF-8.

        Args:
            data: Raw file contents

        Returns:
            One of 'utf-8', 'utf-16le', 'utf-16be', 'gbk'

        Example:
            >>> EncodingDetector.detect("你好".encode("gbk"))
            'gbk'
        """
        for bom, label in BOM_ENCODINGS:
            if data.startswith(bom):
                logger.debug(f"BOM detected: {label}")
                return label

        length = len(data)
        limit = min(length, ENCODING_SAMPLE_SIZE)
        high_bytes = 0
        valid_utf8 = 0
        i = 0

        while i < limit:
            byte = data[i]
            if byte < 0x80:
                i += 1
                continue

            high_bytes += 1
            size = EncodingDetector._utf8_sequence_length(data, i, length)
            if size:
                valid_utf8 += 1
                i += size
            else:
                i += 1

        if high_bytes == 0:
            return ENCODING_UTF8

        ratio = valid_utf8 / high_bytes
        logger.debug(f"High bytes: {high_bytes}, valid UTF-8 sequences: {valid_utf8} ({ratio:.2f})")
        return ENCODING_UTF8 if ratio > UTF8_VALID_RATIO else ENCODING_GBK

    @staticmethod
    def _utf8_sequence_length(data: bytes, i: int, length: int) -> int:
        """Length of the UTF-8 sequence starting at ``i``, or 0 if malformed."""
        lead = data[i]
        if lead & 0xE0 == 0xC0:
            size = 2
        elif lead & 0xF0 == 0xE0:
            size = 3
        elif lead & 0xF8 == 0xF0:
            size = 4
        else:
            return 0

        if i + size > length:
            return 0
        for offset in range(1, size):
            if data[i + offset] & 0xC0 != 0x80:
                return 0
        return size

    @staticmethod
    def has_bom(data: bytes) -> bool:
        """
        Check if a buffer starts with any supported byte order mark.

        Args:
            data: Raw file contents

        Returns:
            True if a UTF-8 or UTF-16 BOM is present
        """
        return any(data.startswith(bom) for bom, _ in BOM_ENCODINGS)

    @staticmethod
    def decode(data: bytes, encoding: str, strict: bool = True) -> str:
        """
        Decode a buffer with a detector label or any Python codec name.

        A leading byte order mark is removed from the result.

        Args:
            data: Raw file contents
            encoding: Encoding label (e.g. 'utf-8', 'gbk')
            strict: Fail on undecodable bytes instead of replacing them

        Returns:
            Decoded text

        Raises:
            DecodeFailure: If the encoding is unknown or the bytes are invalid
        """
        label = encoding.lower().strip()
        codec = _CODECS.get(label, label)
        try:
            text = data.decode(codec, errors='strict' if strict else 'replace')
        except LookupError:
            raise DecodeFailure(f"Unknown encoding: {encoding}", encoding)
        except UnicodeDecodeError as e:
            raise DecodeFailure(f"Cannot decode subtitle data as {encoding}: {e}", encoding)

        if text.startswith('\ufeff'):
            text = text[1:]
        return text

    @staticmethod
    def suggest_charset(data: bytes) -> Optional[str]:
        """
        Ask charset-normalizer for its best guess.

        This is a diagnostic second opinion; the loader always uses
        ``detect``.

        Args:
            data: Raw file contents

        Returns:
            Encoding name or None if nothing plausible was found
        """
        if data.startswith(UTF8_BOM):
            return 'utf_8'
        try:
            best = from_bytes(data[:ENCODING_SAMPLE_SIZE * 4]).best()
        except Exception as e:
            logger.debug(f"charset-normalizer detection failed: {e}")
            return None
        return best.encoding if best else None
