"""Tests for the SRT, VTT and ASS/SSA parsers and the format factory."""

import asyncio
import dataclasses

import pytest

from core.exceptions import DecodeFailure, EmptyResultError, UnsupportedFormatError
from core.subtitle_formats import (
    SubtitleEntry,
    SubtitleFormatFactory,
    clean_ass_text,
    clean_markup_text,
    parse_ass,
    parse_srt,
    parse_vtt,
)
from utils.constants import SubtitleFormat, UTF16LE_BOM

SRT_SAMPLE = """1
00:00:01,000 --> 00:00:03,500
Hello <i>world</i>

2
00:00:05,000 --> 00:00:04,000
Backwards

3
00:00:02,000 --> 00:00:06,000
Line one<br>Line two

4
00:00:07,000 --> 00:00:08,000
<b></b>

5
bad timing --> nope
Text
"""

VTT_SAMPLE = """WEBVTT
Kind: captions

NOTE a comment

intro
00:01.000 --> 00:04.000 align:start
<v Bob>Hi there</v>

00:00:05.000 --> 00:00:06.500
Second
"""

ASS_SAMPLE = r"""[Script Info]
Title: Test
ScriptType: v4.00+

[V4+ Styles]
Format: Name, Fontname
Style: Default,Arial

[Events]
Format: Layer, Start, End, Style, Name, MarginL, MarginR, MarginV, Effect, Text
Comment: 0,0:00:00.00,0:00:05.00,Default,,0,0,0,,ignored
Dialogue: 0,0:00:04.00,0:00:06.00,Default,,0,0,0,,{\an8}Top\Nline
Dialogue: 0,0:00:01.00,0:00:03.00,Default,,0,0,0,,Hello, world
Dialogue: 0,0:00:02.00,0:00:02.00,Default,,0,0,0,,zero length
Dialogue: 0,0:00:07.00,0:00:08.00,Default,,0,0,0,,soft\nbreak\hhere

[Fonts]
Dialogue: 0,0:00:09.00,0:00:10.00,Default,,0,0,0,,after section
"""


def _triples(entries):
    return [(e.start, e.end, e.text) for e in entries]


def _assert_well_formed(entries):
    assert entries
    assert [e.start for e in entries] == sorted(e.start for e in entries)
    for entry in entries:
        assert entry.end > entry.start
        assert entry.text


# ----------------------------------------------------------------------
# Entry
# ----------------------------------------------------------------------

def test_entry_invariants():
    with pytest.raises(ValueError):
        SubtitleEntry(2.0, 2.0, "same time")
    with pytest.raises(ValueError):
        SubtitleEntry(3.0, 2.0, "backwards")
    with pytest.raises(ValueError):
        SubtitleEntry(1.0, 2.0, "")


def test_entry_is_immutable():
    entry = SubtitleEntry(1.0, 2.0, "text")
    with pytest.raises(dataclasses.FrozenInstanceError):
        entry.text = "changed"
    assert entry.duration() == pytest.approx(1.0)
    assert entry.format_time_range('srt') == "00:00:01,000 --> 00:00:02,000"


# ----------------------------------------------------------------------
# SRT
# ----------------------------------------------------------------------

def test_parse_srt_drops_bad_entries():
    assert _triples(parse_srt(SRT_SAMPLE)) == [
        (1.0, 3.5, "Hello world"),
        (2.0, 6.0, "Line one\nLine two"),
    ]


def test_parse_srt_crlf_and_whitespace_separators():
    content = "1\r\n00:00:01,000 --> 00:00:02,000\r\nFirst\r\n  \r\n2\r\n00:00:03,000 --> 00:00:04,000\r\nSecond\r\n"
    assert _triples(parse_srt(content)) == [(1.0, 2.0, "First"), (3.0, 4.0, "Second")]


def test_parse_srt_without_index_and_short_fraction():
    content = "00:00:01,5 --> 00:00:02,5\nNo index\n"
    assert _triples(parse_srt(content)) == [(1.5, 2.5, "No index")]


def test_parse_srt_timing_must_be_in_first_three_lines():
    content = "1\nextra\nextra\n00:00:01,000 --> 00:00:02,000\nToo late\n"
    assert parse_srt(content) == []


def test_clean_markup_text_br_variants():
    assert clean_markup_text("a<br />b<BR/>c<br>d") == "a\nb\nc\nd"
    assert clean_markup_text('<font color="red">red</font> ') == "red"


# ----------------------------------------------------------------------
# VTT
# ----------------------------------------------------------------------

def test_parse_vtt():
    assert _triples(parse_vtt(VTT_SAMPLE)) == [
        (1.0, 4.0, "Hi there"),
        (5.0, 6.5, "Second"),
    ]


def test_parse_vtt_without_header():
    content = "00:00:01.000 --> 00:00:02.000\nA\n\n00:00:03.000 --> 00:00:04.000\nB\n"
    assert _triples(parse_vtt(content)) == [(1.0, 2.0, "A"), (3.0, 4.0, "B")]


def test_parse_vtt_header_only_line():
    content = "WEBVTT\n\n00:00.500 --> 00:01.000\n<c.yellow>Short</c>\n"
    assert _triples(parse_vtt(content)) == [(0.5, 1.0, "Short")]


# ----------------------------------------------------------------------
# ASS / SSA
# ----------------------------------------------------------------------

def test_parse_ass():
    assert _triples(parse_ass(ASS_SAMPLE)) == [
        (4.0, 6.0, "Top\nline"),
        (1.0, 3.0, "Hello, world"),
        (7.0, 8.0, "soft break here"),
    ]


def test_ass_text_keeps_commas():
    content = (
        "[Events]\n"
        "Format: Layer, Start, End, Style, Name, MarginL, MarginR, MarginV, Effect, Text\n"
        "Dialogue: 0,0:00:01.00,0:00:03.00,Default,,0,0,0,,Hello, world\n"
    )
    [entry] = parse_ass(content)
    assert entry.text == "Hello, world"
    assert (entry.start, entry.end) == (1.0, 3.0)


def test_ssa_field_aliases():
    content = (
        "[events]\n"
        "Format: Marked, Start Time, End Time, Style, Name, Text\n"
        "Dialogue: Marked=0,0:00:01.50,0:00:02.00,Default,NTP,Text, with comma\n"
    )
    assert _triples(parse_ass(content)) == [(1.5, 2.0, "Text, with comma")]


def test_ass_dialogue_without_format_uses_standard_columns():
    content = "[Events]\nDialogue: 0,0:00:01.00,0:00:02.00,Default,,0,0,0,,Default format\n"
    assert _triples(parse_ass(content)) == [(1.0, 2.0, "Default format")]


def test_ass_format_without_text_column_drops_dialogue():
    content = "[Events]\nFormat: Layer, Start, End\nDialogue: 0,0:00:01.00,0:00:02.00\n"
    assert parse_ass(content) == []


def test_ass_outside_events_is_ignored():
    content = "[Script Info]\nDialogue: 0,0:00:01.00,0:00:02.00,Default,,0,0,0,,nope\n"
    assert parse_ass(content) == []


def test_clean_ass_text():
    assert clean_ass_text(r"{\i1}Hi{\i0}\Nthere\hfriend") == "Hi\nthere friend"


# ----------------------------------------------------------------------
# Factory
# ----------------------------------------------------------------------

@pytest.mark.parametrize("content, tag", [
    (SRT_SAMPLE, 'srt'),
    (VTT_SAMPLE, 'vtt'),
    (ASS_SAMPLE, 'ass'),
    (ASS_SAMPLE, 'ssa'),
])
def test_parse_text_sorted_and_valid(content, tag):
    _assert_well_formed(SubtitleFormatFactory.parse_text(content, tag))


def test_parse_text_sort_is_stable():
    content = (
        "00:00:02,000 --> 00:00:03,000\nsecond\n\n"
        "00:00:01,000 --> 00:00:02,000\nfirst\n\n"
        "00:00:01,000 --> 00:00:04,000\nfirst too\n"
    )
    texts = [e.text for e in SubtitleFormatFactory.parse_text(content, 'srt')]
    assert texts == ["first", "first too", "second"]


@pytest.mark.parametrize("tag", ['txt', 'sub', '', '.smi'])
def test_unsupported_format(tag):
    with pytest.raises(UnsupportedFormatError):
        SubtitleFormatFactory.parse_text("anything", tag)


def test_unsupported_format_is_value_error():
    with pytest.raises(ValueError):
        SubtitleFormatFactory.get_parser('doc')


def test_get_format_accepts_enum_and_extension():
    assert SubtitleFormatFactory.get_format(SubtitleFormat.VTT) is SubtitleFormat.VTT
    assert SubtitleFormatFactory.get_format('.ASS') is SubtitleFormat.ASS


def test_parse_bytes_gbk():
    content = "1\n00:00:01,000 --> 00:00:02,000\n你觉得他们是谁\n"
    result = SubtitleFormatFactory.parse_bytes(content.encode('gbk'), 'srt', file_name="a.zh.srt")
    assert result.encoding == 'gbk'
    assert result.format is SubtitleFormat.SRT
    assert result.file_name == "a.zh.srt"
    assert result.count == 1
    assert result.entries[0].text == "你觉得他们是谁"


def test_parse_bytes_utf16():
    data = UTF16LE_BOM + "WEBVTT\n\n00:01.000 --> 00:02.000\nwide\n".encode('utf-16-le')
    result = SubtitleFormatFactory.parse_bytes(data, 'vtt')
    assert result.encoding == 'utf-16le'
    assert _triples(result.entries) == [(1.0, 2.0, "wide")]


def test_parse_bytes_encoding_override():
    content = "1\n00:00:01,000 --> 00:00:02,000\n字幕\n"
    result = SubtitleFormatFactory.parse_bytes(content.encode('gbk'), 'srt', encoding='gb18030')
    assert result.encoding == 'gb18030'
    assert result.entries[0].text == "字幕"


def test_parse_bytes_override_that_does_not_fit():
    data = "1\n00:00:01,000 --> 00:00:02,000\n字幕\n".encode('utf-8')
    with pytest.raises(DecodeFailure):
        SubtitleFormatFactory.parse_bytes(data, 'srt', encoding='ascii')


def test_parse_bytes_empty_result():
    with pytest.raises(EmptyResultError):
        SubtitleFormatFactory.parse_bytes(b"no subtitles here", 'srt')


def test_parse_bytes_checks_format_before_decoding():
    with pytest.raises(UnsupportedFormatError):
        SubtitleFormatFactory.parse_bytes(b"\xff\xff", 'doc', encoding='no-such-codec')


def test_parse_file(tmp_path):
    path = tmp_path / "movie.ass"
    path.write_text(ASS_SAMPLE, encoding='utf-8-sig')
    result = SubtitleFormatFactory.parse_file(path)
    assert result.format is SubtitleFormat.ASS
    assert result.encoding == 'utf-8'
    assert [e.text for e in result.entries] == ["Hello, world", "Top\nline", "soft break here"]


def test_parse_file_unsupported_extension(tmp_path):
    path = tmp_path / "movie.txt"
    path.write_text(SRT_SAMPLE)
    with pytest.raises(UnsupportedFormatError):
        SubtitleFormatFactory.parse_file(path)


def test_parse_file_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        SubtitleFormatFactory.parse_file(tmp_path / "missing.srt")


def test_read_and_parse(tmp_path):
    path = tmp_path / "movie.srt"
    path.write_bytes(SRT_SAMPLE.encode('utf-8'))
    result = asyncio.run(SubtitleFormatFactory.read_and_parse(path))
    assert result.count == 2
    assert result.file_name == "movie.srt"
