"""
Playback synchronization modules.

This package keeps subtitle text in step with a running player:
- Clock source protocol and an in-process playback clock
- Playback event binding
- The sync engine and its progress reporting
"""

from .clock_source import (
    ClockSource,
    PlaybackClock,
    PlaybackEvent,
    PlaybackEventKind,
    find_largest_source,
)
from .playback_events import PlaybackEventAdapter
from .sync_engine import SyncEngine, LifecycleState, Progress

__all__ = [
    'ClockSource',
    'PlaybackClock',
    'PlaybackEvent',
    'PlaybackEventKind',
    'find_largest_source',
    'PlaybackEventAdapter',
    'SyncEngine',
    'LifecycleState',
    'Progress',
]
