"""
Subtitle sync engine.

Keeps the "currently active text" of a subtitle collection in step with a
live clock source. Evaluation runs on two cooperative asyncio timers, a
frame-aligned tick and a slower fallback tick, plus one extra evaluation
for every playback event. Observers are only told about the active text
when it actually changes.
"""

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, List, Optional

from utils.config import SyncSettings
from utils.logging_config import get_logger
from core.entry_store import EntryStore
from core.subtitle_formats import SubtitleEntry
from playback.clock_source import ClockSource, PlaybackEvent, PlaybackEventKind
from playback.playback_events import PlaybackEventAdapter

logger = get_logger(__name__)

TextObserver = Callable[[str, List[SubtitleEntry]], None]
StateObserver = Callable[[PlaybackEvent], None]


class LifecycleState(Enum):
    """Engine lifecycle."""
    UNINITIALIZED = "uninitialized"
    ACTIVE = "active"
    DESTROYED = "destroyed"


@dataclass(frozen=True)
class Progress:
    """Position within the subtitle collection."""
    current_index: int              # entries that have started
    total: int
    next_start_time: Optional[float]  # clock time of the next entry start
    current_time: float = 0.0
    paused: bool = True


class SyncEngine:
    """
    Tracks which subtitle entries are active on a clock source.

    Args:
        settings: Tolerances and tick intervals; ``SyncSettings()`` defaults
        loop: Object providing asyncio's ``call_later``; the running event
            loop is used when omitted

    Example:
        >>> engine = SyncEngine()
        >>> engine.on_active_text_change(lambda text, entries: print(text))
        >>> engine.init(clock, result.entries)
    """

    def __init__(self, settings: Optional[SyncSettings] = None,
                 loop: Optional[asyncio.AbstractEventLoop] = None):
        self.settings = settings or SyncSettings()
        self._loop = loop
        self._state = LifecycleState.UNINITIALIZED
        self._store = EntryStore()
        self._adapter = PlaybackEventAdapter(self._handle_playback_event)
        self._time_offset = 0.0
        self._last_text = ""
        self._paused = True
        self._frame_handle = None
        self._fallback_handle = None
        self._generation = 0
        self._text_observers: List[TextObserver] = []
        self._state_observers: List[StateObserver] = []

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state is LifecycleState.ACTIVE

    @property
    def clock_source(self) -> Optional[ClockSource]:
        return self._adapter.bound_source

    @property
    def entries(self) -> EntryStore:
        return self._store

    @property
    def time_offset(self) -> float:
        return self._time_offset

    @property
    def active_text(self) -> str:
        """Text most recently sent to observers."""
        return self._last_text

    @property
    def paused(self) -> bool:
        return self._paused

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def on_active_text_change(self, callback: TextObserver) -> Callable[[], None]:
        """
        Register ``callback(text, active_entries)`` for active text changes.

        Returns:
            Function that removes the observer again
        """
        self._text_observers.append(callback)
        return lambda: self._remove_observer(self._text_observers, callback)

    def on_playback_state_change(self, callback: StateObserver) -> Callable[[], None]:
        """
        Register ``callback(event)`` for playback lifecycle events.

        Returns:
            Function that removes the observer again
        """
        self._state_observers.append(callback)
        return lambda: self._remove_observer(self._state_observers, callback)

    @staticmethod
    def _remove_observer(observers: list, callback) -> None:
        if callback in observers:
            observers.remove(callback)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def init(self, clock_source: Optional[ClockSource],
             entries: Iterable[SubtitleEntry]) -> None:
        """
        Start tracking ``entries`` on ``clock_source``.

        Can be called in any state; the engine is fully reset first
        (listeners, timers, offset and last text).

        Raises:
            RuntimeError: If no loop was given and none is running
        """
        self._reset()
        if self._loop is None:
            self._loop = asyncio.get_running_loop()

        self._store = EntryStore(entries or ())
        self._adapter.bind(clock_source)
        self._paused = clock_source.paused if clock_source is not None else True
        self._state = LifecycleState.ACTIVE
        logger.info(f"Sync engine started with {len(self._store)} entries")

        self._evaluate()
        if self.is_active and not self._paused:
            self._start_ticks()

    def load_subtitles(self, entries: Iterable[SubtitleEntry]) -> None:
        """Replace the entry collection without touching the clock binding."""
        if not self._require_active("load_subtitles"):
            return
        self._store = EntryStore(entries or ())
        logger.info(f"Loaded {len(self._store)} entries")
        self._evaluate()

    def update_clock_source(self, clock_source: Optional[ClockSource]) -> None:
        """Move the engine to another clock source."""
        if not self._require_active("update_clock_source"):
            return
        if clock_source is not None and clock_source is self._adapter.bound_source:
            return

        self._adapter.bind(clock_source)
        self._paused = clock_source.paused if clock_source is not None else True
        if self._paused:
            self._stop_ticks()
        else:
            self._start_ticks()
        logger.debug(f"Clock source switched to {clock_source!r}")
        self._evaluate()

    def set_time_offset(self, seconds: float) -> None:
        """
        Shift subtitles against the clock.

        The query time is ``clock time - seconds``, so a positive offset
        shows subtitles later.
        """
        if not self._require_active("set_time_offset"):
            return
        self._time_offset = float(seconds)
        logger.debug(f"Time offset set to {self._time_offset:+.3f}s")
        self._evaluate()

    def destroy(self) -> None:
        """Stop all timers and listeners. Safe to call repeatedly."""
        if self._state is LifecycleState.DESTROYED:
            return
        self._reset()
        self._state = LifecycleState.DESTROYED
        logger.debug("Sync engine destroyed")

    def _reset(self) -> None:
        self._state = LifecycleState.UNINITIALIZED
        self._stop_ticks()
        self._adapter.unbind()
        self._store = EntryStore()
        self._time_offset = 0.0
        self._last_text = ""
        self._paused = True

    def _require_active(self, operation: str) -> bool:
        if self.is_active:
            return True
        logger.warning(f"Ignoring {operation}() while engine is {self._state.value}")
        return False

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_progress(self) -> Progress:
        """
        Report how far playback is through the entry collection.

        ``next_start_time`` is given in clock time, i.e. with the offset
        added back.
        """
        source = self._adapter.bound_source
        if source is None or not self._store:
            return Progress(current_index=0, total=len(self._store),
                            next_start_time=None, paused=self._paused)

        clock_time = source.current_time
        query_time = clock_time - self._time_offset
        next_start = self._store.next_start_after(query_time)
        return Progress(
            current_index=self._store.count_started(query_time),
            total=len(self._store),
            next_start_time=next_start + self._time_offset if next_start is not None else None,
            current_time=clock_time,
            paused=self._paused,
        )

    def _find_active(self) -> List[SubtitleEntry]:
        source = self._adapter.bound_source
        if source is None or not self._store or not source.is_attached:
            return []

        settings = self.settings
        return self._store.find_active(
            source.current_time - self._time_offset,
            lead_tolerance=settings.lead_tolerance,
            trail_tolerance=settings.trail_tolerance,
            scan_back=settings.scan_back,
            lookahead=settings.scan_lookahead,
        )

    def _evaluate(self) -> None:
        """Recompute the active text and notify observers if it changed."""
        active = self._find_active()
        text = EntryStore.join_text(active)
        if text == self._last_text:
            return

        self._last_text = text
        logger.debug(f"Active text changed: {text!r}")
        for callback in list(self._text_observers):
            try:
                callback(text, list(active))
            except Exception as e:
                logger.error(f"Active text observer failed: {e}")

    # ------------------------------------------------------------------
    # Playback events
    # ------------------------------------------------------------------

    def _handle_playback_event(self, kind: PlaybackEventKind) -> None:
        if not self.is_active:
            return

        source = self._adapter.bound_source
        was_paused = self._paused
        if kind is PlaybackEventKind.PLAY:
            self._paused = False
        elif kind in (PlaybackEventKind.PAUSE, PlaybackEventKind.ENDED,
                      PlaybackEventKind.DETACHED):
            self._paused = True
        elif source is not None:
            # Seeks and rate changes carry the source's own state
            self._paused = source.paused

        if self._paused:
            self._stop_ticks()
        elif was_paused or kind is PlaybackEventKind.PLAY:
            self._start_ticks()

        # Evaluate first so observers see text matching the new state
        self._evaluate()
        if not self.is_active:
            return

        source = self._adapter.bound_source
        event = PlaybackEvent(
            kind=kind,
            current_time=source.current_time if source is not None else None,
            paused=self._paused,
            playback_rate=source.playback_rate if source is not None else 1.0,
        )
        for callback in list(self._state_observers):
            try:
                callback(event)
            except Exception as e:
                logger.error(f"Playback state observer failed: {e}")

    # ------------------------------------------------------------------
    # Ticks
    # ------------------------------------------------------------------

    def _start_ticks(self) -> None:
        self._stop_ticks()
        if not self.is_active:
            return
        generation = self._generation
        self._frame_handle = self._loop.call_later(
            self.settings.frame_interval, self._on_frame, generation)
        self._fallback_handle = self._loop.call_later(
            self.settings.fallback_interval, self._on_fallback, generation)

    def _stop_ticks(self) -> None:
        # Callbacks already queued carry the old generation and do nothing
        self._generation += 1
        for handle in (self._frame_handle, self._fallback_handle):
            if handle is not None:
                handle.cancel()
        self._frame_handle = None
        self._fallback_handle = None

    def _tick_is_live(self, generation: int) -> bool:
        return self.is_active and not self._paused and generation == self._generation

    def _on_frame(self, generation: int) -> None:
        if not self._tick_is_live(generation):
            return
        self._frame_handle = None
        self._evaluate()
        if self._tick_is_live(generation):
            self._frame_handle = self._loop.call_later(
                self.settings.frame_interval, self._on_frame, generation)

    def _on_fallback(self, generation: int) -> None:
        if not self._tick_is_live(generation):
            return
        self._fallback_handle = None
        self._evaluate()
        if self._tick_is_live(generation):
            self._fallback_handle = self._loop.call_later(
                self.settings.fallback_interval, self._on_fallback, generation)
