"""
Immutable, time-sorted entry collection used by the sync engine.

A store is built once from a list of entries and never changes afterwards;
reloading subtitles means building a new store and swapping the reference.
"""

from bisect import bisect_right
from typing import Iterable, List, Sequence, Tuple

from utils.constants import (
    DEFAULT_LEAD_TOLERANCE,
    DEFAULT_TRAIL_TOLERANCE,
    DEFAULT_SCAN_BACK,
    DEFAULT_SCAN_LOOKAHEAD,
)
from core.subtitle_formats import SubtitleEntry


class EntryStore:
    """Sorted snapshot of subtitle entries with active-set queries."""

    __slots__ = ('_entries', '_starts')

    def __init__(self, entries: Iterable[SubtitleEntry] = ()):
        ordered = sorted(entries, key=lambda entry: entry.start)
        self._entries: Tuple[SubtitleEntry, ...] = tuple(ordered)
        self._starts: Tuple[float, ...] = tuple(entry.start for entry in ordered)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(self._entries)

    def __getitem__(self, index):
        return self._entries[index]

    def __bool__(self) -> bool:
        return bool(self._entries)

    @property
    def entries(self) -> Tuple[SubtitleEntry, ...]:
        return self._entries

    def lower_bound_by_end(self, time: float) -> int:
        """
        Index of the first entry whose end is not before ``time``.

        When no entry qualifies the search settles on the last index, so the
        caller's scan still sees the final entries and their trailing
        leniency. Returns -1 for an empty store.
        """
        if not self._entries:
            return -1

        lo, hi = 0, len(self._entries) - 1
        while lo < hi:
            mid = (lo + hi) // 2
            if self._entries[mid].end < time:
                lo = mid + 1
            else:
                hi = mid
        return lo

    def find_active(self, time: float,
                    lead_tolerance: float = DEFAULT_LEAD_TOLERANCE,
                    trail_tolerance: float = DEFAULT_TRAIL_TOLERANCE,
                    scan_back: int = DEFAULT_SCAN_BACK,
                    lookahead: float = DEFAULT_SCAN_LOOKAHEAD) -> List[SubtitleEntry]:
        """
        Entries whose window, widened by the tolerances, contains ``time``.

        Overlapping entries mean one binary search cannot enumerate every
        active entry, so a short window starting a few entries before the
        search hit is scanned linearly until entries start after
        ``time + lookahead``.

        Args:
            time: Query time in subtitle seconds (offset already applied)
            lead_tolerance: Seconds an entry may show before its start
            trail_tolerance: Seconds an entry may linger after its end
            scan_back: Entries re-checked before the search hit
            lookahead: Scan stops at entries starting after time + lookahead

        Returns:
            Active entries in collection order
        """
        hit = self.lower_bound_by_end(time)
        if hit < 0:
            return []

        active = []
        entries = self._entries
        for i in range(max(0, hit - scan_back), len(entries)):
            entry = entries[i]
            if entry.start > time + lookahead:
                break
            if entry.start - lead_tolerance <= time <= entry.end + trail_tolerance:
                active.append(entry)
        return active

    def count_started(self, time: float) -> int:
        """Number of entries with ``start <= time``."""
        return bisect_right(self._starts, time)

    def next_start_after(self, time: float):
        """Start of the first entry with ``start > time``, or None."""
        index = bisect_right(self._starts, time)
        return self._starts[index] if index < len(self._starts) else None

    @staticmethod
    def join_text(entries: Sequence[SubtitleEntry]) -> str:
        """Join entry texts with newlines, keeping their order."""
        return '\n'.join(entry.text for entry in entries)
