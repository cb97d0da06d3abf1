"""
Subtitle format handlers and data structures.

This module provides:
- The immutable subtitle entry type
- Format-specific parsers for SRT, ASS/SSA and VTT
- A factory that dispatches on the format tag and runs the
  bytes -> encoding -> text -> entries pipeline

Each dialect parser is a plain function taking decoded text and returning a
list of entries. Cues that fail to parse, have empty text or do not end
after they start are dropped without failing the file.
"""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional

from utils.constants import (
    SubtitleFormat,
    DEFAULT_ASS_EVENT_FORMAT,
    ASS_FIELD_ALIASES,
)
from utils.file_operations import FileHandler
from utils.logging_config import get_logger
from core.encoding_detection import EncodingDetector
from core.exceptions import UnsupportedFormatError, EmptyResultError
from core.timing_utils import TimeConverter

logger = get_logger(__name__)

_BLANK_LINES = re.compile(r'\n\s*\n')
_BR_TAG = re.compile(r'<br\s*/?>', re.IGNORECASE)
_MARKUP_TAG = re.compile(r'</?[^>]+>')
_ASS_OVERRIDE = re.compile(r'\{[^}]*\}')
_ASS_SECTION = re.compile(r'^\[.*\]$')
_ASS_EVENTS_SECTION = re.compile(r'^\[events\]$', re.IGNORECASE)

_SRT_TIMING = re.compile(
    r'(\d{1,2}:\d{2}:\d{2}[.,]\d{1,3})\s*-->\s*(\d{1,2}:\d{2}:\d{2}[.,]\d{1,3})'
)
# Hours are optional in WebVTT
_VTT_TIMING = re.compile(
    r'((?:\d{1,2}:)?\d{2}:\d{2}[.,]\d{1,3})\s*-->\s*((?:\d{1,2}:)?\d{2}:\d{2}[.,]\d{1,3})'
)

# Only the first lines of a block may hold the timing line (index, cue id)
_TIMING_LINE_SEARCH = 3


@dataclass(frozen=True)
class SubtitleEntry:
    """A single timed subtitle line."""
    start: float  # Start time in seconds
    end: float    # End time in seconds
    text: str     # Display text, markup removed

    def __post_init__(self):
        if not self.text:
            raise ValueError("Subtitle text must not be empty")
        if not self.end > self.start:
            raise ValueError(f"Subtitle must end after it starts ({self.start} -> {self.end})")

    def duration(self) -> float:
        """Get the duration of this entry in seconds."""
        return self.end - self.start

    def format_time_range(self, format_type: str = 'srt') -> str:
        """
        Format the time range as a string.

        Args:
            format_type: Format type ('srt', 'ass', 'vtt')

        Returns:
            Formatted time range string
        """
        start_str = TimeConverter.seconds_to_time(self.start, format_type)
        end_str = TimeConverter.seconds_to_time(self.end, format_type)
        return f"{start_str} --> {end_str}"


@dataclass(frozen=True)
class ParseResult:
    """Outcome of loading one subtitle file."""
    entries: List[SubtitleEntry]
    format: SubtitleFormat
    encoding: str
    file_name: str = ""

    @property
    def count(self) -> int:
        return len(self.entries)


def _make_entry(start: float, end: float, text: str) -> Optional[SubtitleEntry]:
    """Build an entry, or None when it breaks the entry invariants."""
    try:
        return SubtitleEntry(start=start, end=end, text=text)
    except ValueError as e:
        logger.debug(f"Dropping subtitle entry: {e}")
        return None


def _normalize_newlines(content: str) -> str:
    return content.replace('\r\n', '\n').replace('\r', '\n')


def clean_markup_text(text: str) -> str:
    """
    Clean SRT/VTT cue text.

    ``<br>`` variants become newlines, every other tag (``<i>``, ``<font>``,
    ``<v Speaker>``, inline timestamps) is removed.

    Args:
        text: Raw cue text

    Returns:
        Cleaned, trimmed text
    """
    text = _BR_TAG.sub('\n', text)
    text = _MARKUP_TAG.sub('', text)
    return text.strip()


def clean_ass_text(text: str) -> str:
    """
    Clean ASS/SSA dialogue text.

    Override blocks such as ``{\\an8}`` are removed, ``\\N`` becomes a line
    break, ``\\n`` (soft break) and ``\\h`` (hard space) become spaces.

    Args:
        text: Raw dialogue text field

    Returns:
        Cleaned, trimmed text
    """
    text = _ASS_OVERRIDE.sub('', text)
    text = text.replace('\\N', '\n')
    text = text.replace('\\n', ' ').replace('\\h', ' ')
    return text.strip()


def _parse_timed_blocks(content: str, timing_pattern) -> List[SubtitleEntry]:
    """Shared block parser for SRT and VTT."""
    entries = []

    for block in _BLANK_LINES.split(content):
        lines = block.strip().split('\n')
        if len(lines) < 2:
            continue

        time_line_idx = -1
        for i, line in enumerate(lines[:_TIMING_LINE_SEARCH]):
            if '-->' in line:
                time_line_idx = i
                break
        if time_line_idx == -1:
            continue

        match = timing_pattern.search(lines[time_line_idx])
        if not match:
            logger.debug(f"Invalid timing line: {lines[time_line_idx]!r}")
            continue

        start = TimeConverter.time_to_seconds(match.group(1))
        end = TimeConverter.time_to_seconds(match.group(2))
        text = clean_markup_text('\n'.join(lines[time_line_idx + 1:]))

        entry = _make_entry(start, end, text)
        if entry:
            entries.append(entry)

    return entries


def parse_srt(content: str) -> List[SubtitleEntry]:
    """
    Parse SRT subtitle text.

    Args:
        content: Decoded file contents

    Returns:
        Entries in file order
    """
    return _parse_timed_blocks(_normalize_newlines(content), _SRT_TIMING)


def parse_vtt(content: str) -> List[SubtitleEntry]:
    """
    Parse WebVTT subtitle text.

    The ``WEBVTT`` header block is dropped. ``NOTE``, ``STYLE`` and
    ``REGION`` blocks carry no timing line and are skipped with the other
    untimed blocks.

    Args:
        content: Decoded file contents

    Returns:
        Entries in file order
    """
    content = _normalize_newlines(content).lstrip('\n')
    if content.startswith('WEBVTT'):
        header, sep, body = content.partition('\n\n')
        if '-->' not in header:
            content = body
    return _parse_timed_blocks(content, _VTT_TIMING)


def _resolve_ass_fields(names: List[str]) -> Dict[str, int]:
    """Map start/end/text to column indexes, -1 when a column is missing."""
    fields = {}
    for key in ('start', 'end', 'text'):
        index = names.index(key) if key in names else -1
        alias = ASS_FIELD_ALIASES.get(key)
        if index == -1 and alias in names:
            index = names.index(alias)
        fields[key] = index
    return fields


def parse_ass(content: str) -> List[SubtitleEntry]:
    """
    Parse ASS/SSA subtitle text.

    Only the ``[Events]`` section is read; scanning stops at the next
    section header. The dialogue line is split on commas at most as many
    times as the text column's index, so commas inside the text survive.

    Args:
        content: Decoded file contents

    Returns:
        Entries in file order
    """
    entries = []
    in_events = False
    fields = _resolve_ass_fields(DEFAULT_ASS_EVENT_FORMAT)
    has_format = False

    for line in _normalize_newlines(content).split('\n'):
        line = line.strip()
        if not line:
            continue

        if _ASS_EVENTS_SECTION.match(line):
            in_events = True
            continue
        if _ASS_SECTION.match(line):
            if in_events:
                break
            continue
        if not in_events:
            continue

        key, sep, value = line.partition(':')
        if not sep:
            continue
        key = key.strip().lower()

        if key == 'comment':
            continue

        if key == 'format':
            names = [name.strip().lower() for name in value.split(',')]
            fields = _resolve_ass_fields(names)
            has_format = True
            continue

        if key == 'dialogue':
            if not has_format:
                logger.debug("Dialogue before Format line, assuming the standard event format")
                has_format = True
            start_idx, end_idx, text_idx = fields['start'], fields['end'], fields['text']
            if min(start_idx, end_idx, text_idx) < 0:
                logger.debug(f"Format line lacks start/end/text columns, skipping: {line!r}")
                continue

            parts = [part.strip() for part in value.strip().split(',', text_idx)]
            if len(parts) <= max(start_idx, end_idx, text_idx):
                logger.debug(f"Too few fields in dialogue line: {line!r}")
                continue

            entry = _make_entry(
                TimeConverter.time_to_seconds(parts[start_idx]),
                TimeConverter.time_to_seconds(parts[end_idx]),
                clean_ass_text(parts[text_idx]),
            )
            if entry:
                entries.append(entry)

    return entries


class SubtitleFormatFactory:
    """Dispatches subtitle text and files to the parser for their format."""

    _parsers: Dict[SubtitleFormat, Callable[[str], List[SubtitleEntry]]] = {
        SubtitleFormat.SRT: parse_srt,
        SubtitleFormat.VTT: parse_vtt,
        SubtitleFormat.ASS: parse_ass,
        SubtitleFormat.SSA: parse_ass,
    }

    @classmethod
    def get_format(cls, format_tag) -> SubtitleFormat:
        """
        Resolve a format tag or extension to a SubtitleFormat.

        Args:
            format_tag: SubtitleFormat, tag ('srt') or extension ('.srt')

        Returns:
            SubtitleFormat enum value

        Raises:
            UnsupportedFormatError: If the tag is not supported
        """
        if isinstance(format_tag, SubtitleFormat):
            return format_tag
        try:
            return SubtitleFormat.from_extension(str(format_tag))
        except ValueError:
            raise UnsupportedFormatError(str(format_tag))

    @classmethod
    def get_parser(cls, format_tag) -> Callable[[str], List[SubtitleEntry]]:
        """
        Get the parser function for the specified format.

        Args:
            format_tag: SubtitleFormat or tag string

        Returns:
            Parser function ``(text) -> List[SubtitleEntry]``

        Raises:
            UnsupportedFormatError: If format is not supported
        """
        return cls._parsers[cls.get_format(format_tag)]

    @classmethod
    def parse_text(cls, content: str, format_tag) -> List[SubtitleEntry]:
        """
        Parse decoded subtitle text.

        Args:
            content: Subtitle text
            format_tag: 'srt', 'ass', 'ssa' or 'vtt'

        Returns:
            Entries sorted by start time (possibly empty)

        Raises:
            UnsupportedFormatError: If format is not supported
        """
        parser = cls.get_parser(format_tag)
        entries = parser(content)
        entries.sort(key=lambda entry: entry.start)
        return entries

    @classmethod
    def parse_bytes(cls, data: bytes, format_tag, encoding: Optional[str] = None,
                    file_name: str = "") -> ParseResult:
        """
        Detect the encoding of raw bytes, decode them and parse the text.

        Args:
            data: Raw subtitle file contents
            format_tag: 'srt', 'ass', 'ssa' or 'vtt'
            encoding: Forced encoding; detected from the bytes when None
            file_name: Name reported in the result and in log messages

        Returns:
            ParseResult with sorted entries

        Raises:
            UnsupportedFormatError: If format is not supported
            DecodeFailure: If the bytes cannot be decoded
            EmptyResultError: If no valid entries were found
        """
        format_type = cls.get_format(format_tag)

        if encoding is None:
            encoding = EncodingDetector.detect(data)
            logger.debug(f"Detected encoding for {file_name or 'buffer'}: {encoding}")
            # A heuristic guess decodes leniently; a forced encoding must fit
            content = EncodingDetector.decode(data, encoding, strict=False)
        else:
            content = EncodingDetector.decode(data, encoding, strict=True)

        entries = cls.parse_text(content, format_type)
        if not entries:
            raise EmptyResultError(
                f"No valid subtitle entries found in {file_name or 'subtitle data'}"
            )

        logger.info(f"Parsed {len(entries)} entries from {format_type.value.upper()} "
                    f"{file_name or 'data'} ({encoding})")
        return ParseResult(entries=entries, format=format_type,
                           encoding=encoding, file_name=file_name)

    @classmethod
    def parse_file(cls, file_path: Path, encoding: Optional[str] = None) -> ParseResult:
        """
        Parse a subtitle file, taking the format from its extension.

        Args:
            file_path: Path to the subtitle file
            encoding: Forced encoding; detected when None

        Returns:
            ParseResult with sorted entries

        Raises:
            UnsupportedFormatError: If the extension is not supported
            IOError: If file cannot be read
            DecodeFailure: If the bytes cannot be decoded
            EmptyResultError: If no valid entries were found
        """
        format_type = cls.get_format(file_path.suffix)
        data = FileHandler.read_bytes(file_path)
        return cls.parse_bytes(data, format_type, encoding=encoding, file_name=file_path.name)

    @classmethod
    async def read_and_parse(cls, file_path: Path, encoding: Optional[str] = None) -> ParseResult:
        """
        Load a subtitle file asynchronously and parse it.

        The bytes are acquired with a single awaited read; detection,
        decoding and parsing then run synchronously on the loop.

        Args:
            file_path: Path to the subtitle file
            encoding: Forced encoding; detected when None

        Returns:
            ParseResult with sorted entries
        """
        format_type = cls.get_format(file_path.suffix)
        data = await FileHandler.read_bytes_async(file_path)
        return cls.parse_bytes(data, format_type, encoding=encoding, file_name=file_path.name)
