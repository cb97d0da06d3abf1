"""Shared fixtures for the test suite."""

import logging

import pytest

from core.subtitle_formats import SubtitleEntry
from playback.clock_source import PlaybackClock
from playback.sync_engine import SyncEngine


class ManualHandle:
    """Timer handle returned by ManualLoop.call_later."""

    def __init__(self, when, seq, callback, args):
        self.when = when
        self.seq = seq
        self.callback = callback
        self.args = args
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class ManualLoop:
    """Stand-in for an asyncio loop whose time only moves on advance()."""

    def __init__(self):
        self.now = 0.0
        self._handles = []
        self._seq = 0

    def time(self):
        return self.now

    def call_later(self, delay, callback, *args):
        handle = ManualHandle(self.now + delay, self._seq, callback, args)
        self._seq += 1
        self._handles.append(handle)
        return handle

    def pending(self):
        return [h for h in self._handles if not h.cancelled]

    def advance(self, seconds):
        """Move time forward, running due callbacks in time order."""
        target = self.now + seconds
        while True:
            due = [h for h in self._handles if not h.cancelled and h.when <= target]
            if not due:
                break
            handle = min(due, key=lambda h: (h.when, h.seq))
            self._handles.remove(handle)
            self.now = handle.when
            handle.callback(*handle.args)
        self.now = target
        self._handles = [h for h in self._handles if not h.cancelled]


class Recorder:
    """Collects observer calls in order."""

    def __init__(self):
        self.texts = []
        self.events = []
        self.calls = []

    def on_text(self, text, entries):
        self.texts.append(text)
        self.calls.append(('text', text))

    def on_state(self, event):
        self.events.append(event)
        self.calls.append(('state', event.kind))


@pytest.fixture
def loop():
    return ManualLoop()


@pytest.fixture
def clock(loop):
    return PlaybackClock(time_func=loop.time, name="test-clock")


@pytest.fixture
def entries():
    return [
        SubtitleEntry(1.0, 3.0, "A"),
        SubtitleEntry(2.0, 4.0, "B"),
        SubtitleEntry(6.0, 8.0, "C"),
    ]


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def engine(loop, recorder):
    engine = SyncEngine(loop=loop)
    engine.on_active_text_change(recorder.on_text)
    engine.on_playback_state_change(recorder.on_state)
    yield engine
    engine.destroy()


@pytest.fixture
def restore_logging():
    """Undo root logger changes made by the CLI."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
