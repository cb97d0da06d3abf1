"""
Playback clock sources.

The sync engine reads time from a clock source and listens to its lifecycle
events. Hosts adapt their player to the ``ClockSource`` protocol; the
``PlaybackClock`` here is an in-process implementation driven by a
monotonic timer, used by the command-line player and in tests.
"""

import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Protocol

from utils.logging_config import get_logger

logger = get_logger(__name__)


class PlaybackEventKind(Enum):
    """Lifecycle events a clock source emits, named after media element events."""
    PLAY = "play"
    PAUSE = "pause"
    SEEK_START = "seeking"
    SEEK_END = "seeked"
    RATE_CHANGE = "ratechange"
    ENDED = "ended"
    DETACHED = "emptied"


@dataclass(frozen=True)
class PlaybackEvent:
    """Payload passed to playback-state observers."""
    kind: PlaybackEventKind
    current_time: Optional[float]
    paused: bool
    playback_rate: float = 1.0


EventHandler = Callable[[PlaybackEventKind], None]


class ClockSource(Protocol):
    """What the sync engine needs from a player."""

    @property
    def current_time(self) -> float: ...

    @property
    def paused(self) -> bool: ...

    @property
    def playback_rate(self) -> float: ...

    @property
    def is_attached(self) -> bool: ...

    @property
    def area(self) -> int: ...

    def add_listener(self, kind: PlaybackEventKind, handler: EventHandler) -> None: ...

    def remove_listener(self, kind: PlaybackEventKind, handler: EventHandler) -> None: ...


class PlaybackClock:
    """
    In-process media clock.

    Media time advances with the wall clock scaled by the playback rate while
    playing and stands still while paused. Every state change notifies the
    listeners registered for that event kind.

    Args:
        duration: Media length in seconds; time stops advancing there
        time_func: Wall clock in seconds, ``time.monotonic`` by default
        width: Frame width, used to pick the largest of several sources
        height: Frame height
        name: Label used in logs
    """

    def __init__(self, duration: Optional[float] = None,
                 time_func: Callable[[], float] = time.monotonic,
                 width: int = 0, height: int = 0, name: str = "clock"):
        self.duration = duration
        self.width = width
        self.height = height
        self.name = name
        self._time_func = time_func
        self._listeners: Dict[PlaybackEventKind, List[EventHandler]] = {
            kind: [] for kind in PlaybackEventKind
        }
        self._position = 0.0
        self._anchor: Optional[float] = None
        self._rate = 1.0
        self._paused = True
        self._attached = True

    def __repr__(self) -> str:
        return f"<PlaybackClock {self.name} t={self.current_time:.3f} paused={self._paused}>"

    @property
    def current_time(self) -> float:
        position = self._position
        if not self._paused and self._anchor is not None:
            position += (self._time_func() - self._anchor) * self._rate
        if self.duration is not None:
            position = min(position, self.duration)
        return max(position, 0.0)

    @property
    def paused(self) -> bool:
        return self._paused

    @property
    def playback_rate(self) -> float:
        return self._rate

    @property
    def is_attached(self) -> bool:
        return self._attached

    @property
    def area(self) -> int:
        return self.width * self.height

    def _freeze(self) -> None:
        """Fold elapsed playing time into the stored position."""
        self._position = self.current_time
        self._anchor = self._time_func()

    def play(self) -> None:
        if not self._paused:
            return
        self._anchor = self._time_func()
        self._paused = False
        self._emit(PlaybackEventKind.PLAY)

    def pause(self) -> None:
        if self._paused:
            return
        self._freeze()
        self._paused = True
        self._emit(PlaybackEventKind.PAUSE)

    def seek(self, seconds: float) -> None:
        """Jump to ``seconds``, emitting seek-start and seek-end."""
        self._emit(PlaybackEventKind.SEEK_START)
        self._position = max(0.0, float(seconds))
        self._anchor = self._time_func()
        self._emit(PlaybackEventKind.SEEK_END)

    def set_rate(self, rate: float) -> None:
        if rate <= 0:
            raise ValueError("Playback rate must be positive")
        self._freeze()
        self._rate = float(rate)
        self._emit(PlaybackEventKind.RATE_CHANGE)

    def end(self) -> None:
        """Stop at the end of the media."""
        self._freeze()
        if self.duration is not None:
            self._position = self.duration
        self._paused = True
        self._emit(PlaybackEventKind.ENDED)

    def detach(self) -> None:
        """Mark the source as gone, as when a player is torn down."""
        self._freeze()
        self._paused = True
        self._attached = False
        self._emit(PlaybackEventKind.DETACHED)

    def add_listener(self, kind: PlaybackEventKind, handler: EventHandler) -> None:
        self._listeners[kind].append(handler)

    def remove_listener(self, kind: PlaybackEventKind, handler: EventHandler) -> None:
        try:
            self._listeners[kind].remove(handler)
        except ValueError:
            logger.debug(f"{self.name}: handler for {kind.value} was not registered")

    def listener_count(self) -> int:
        return sum(len(handlers) for handlers in self._listeners.values())

    def _emit(self, kind: PlaybackEventKind) -> None:
        for handler in list(self._listeners[kind]):
            handler(kind)


def find_largest_source(sources: Iterable[ClockSource]) -> Optional[ClockSource]:
    """
    Pick the source with the largest frame area.

    Args:
        sources: Candidate clock sources

    Returns:
        The largest source (the first one on ties), or None if there are none
    """
    largest = None
    for source in sources:
        if largest is None or source.area > largest.area:
            largest = source
    return largest
