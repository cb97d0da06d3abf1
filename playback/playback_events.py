"""
Binding between a clock source's lifecycle events and the sync engine.

The adapter owns exactly one binding at a time. Binding a new source always
releases the previous one first, and every listener it registered is
removed again on unbind.
"""

from typing import Callable, Dict, Optional

from utils.logging_config import get_logger
from playback.clock_source import ClockSource, EventHandler, PlaybackEventKind

logger = get_logger(__name__)


class PlaybackEventAdapter:
    """Forwards a bound source's events to a single dispatch callback."""

    def __init__(self, dispatch: Callable[[PlaybackEventKind], None]):
        """
        Initialize the adapter.

        Args:
            dispatch: Called with the event kind for every event of the
                currently bound source
        """
        self._dispatch = dispatch
        self._source: Optional[ClockSource] = None
        self._handlers: Dict[PlaybackEventKind, EventHandler] = {}

    @property
    def bound_source(self) -> Optional[ClockSource]:
        return self._source

    @property
    def is_bound(self) -> bool:
        return self._source is not None

    def bind(self, source: Optional[ClockSource]) -> None:
        """
        Bind to ``source``, releasing any previous binding.

        Binding the source that is already bound does nothing; binding None
        only releases.
        """
        if source is not None and source is self._source:
            return

        self.unbind()
        if source is None:
            return

        handlers = {}
        for kind in PlaybackEventKind:
            handler = self._make_handler(source, kind)
            source.add_listener(kind, handler)
            handlers[kind] = handler

        self._source = source
        self._handlers = handlers
        logger.debug(f"Bound {len(handlers)} playback listeners to {source!r}")

    def unbind(self) -> None:
        """Remove every registered listener. Safe to call when nothing is bound."""
        source, handlers = self._source, self._handlers
        self._source = None
        self._handlers = {}
        if source is None:
            return

        for kind, handler in handlers.items():
            source.remove_listener(kind, handler)
        logger.debug(f"Unbound playback listeners from {source!r}")

    def _make_handler(self, source: ClockSource, kind: PlaybackEventKind) -> EventHandler:
        def handler(_event=None):
            # Events already queued by a source we have since let go of
            if self._source is not source:
                return
            self._dispatch(kind)
        return handler
