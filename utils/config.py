"""
Runtime configuration for the sync engine.

Tolerances and cadences are empirical values, so they are kept together in
one dataclass that can be overridden per instance or through ``SUBSYNC_*``
environment variables (a ``.env`` file is honoured when present).
"""

import os
from dataclasses import dataclass, fields
from typing import Mapping, Optional

from dotenv import load_dotenv

from .constants import (
    DEFAULT_LEAD_TOLERANCE,
    DEFAULT_TRAIL_TOLERANCE,
    DEFAULT_SCAN_LOOKAHEAD,
    DEFAULT_SCAN_BACK,
    DEFAULT_FRAME_INTERVAL,
    DEFAULT_FALLBACK_INTERVAL,
    ENV_PREFIX,
)
from .logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class SyncSettings:
    """Tunable timing values used by the sync engine."""
    lead_tolerance: float = DEFAULT_LEAD_TOLERANCE      # seconds before start
    trail_tolerance: float = DEFAULT_TRAIL_TOLERANCE    # seconds after end
    scan_lookahead: float = DEFAULT_SCAN_LOOKAHEAD
    scan_back: int = DEFAULT_SCAN_BACK
    frame_interval: float = DEFAULT_FRAME_INTERVAL
    fallback_interval: float = DEFAULT_FALLBACK_INTERVAL

    def __post_init__(self):
        if self.lead_tolerance < 0 or self.trail_tolerance < 0:
            raise ValueError("Tolerances must not be negative")
        if self.scan_lookahead < 0:
            raise ValueError("Scan lookahead must not be negative")
        if self.scan_back < 0:
            raise ValueError("Scan back count must not be negative")
        if self.frame_interval <= 0 or self.fallback_interval <= 0:
            raise ValueError("Tick intervals must be positive")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None,
                 use_dotenv: bool = True) -> 'SyncSettings':
        """
        Build settings from ``SUBSYNC_*`` environment variables.

        Variable names are the field names upper-cased, e.g.
        ``SUBSYNC_TRAIL_TOLERANCE=0.2``. Values that cannot be parsed are
        ignored with a warning and the default is kept.

        Args:
            environ: Mapping to read instead of ``os.environ``
            use_dotenv: Load a ``.env`` file into the environment first

        Returns:
            SyncSettings instance
        """
        if environ is None:
            if use_dotenv:
                load_dotenv()
            environ = os.environ

        overrides = {}
        for field in fields(cls):
            key = f"{ENV_PREFIX}{field.name.upper()}"
            raw = environ.get(key)
            if raw is None or not raw.strip():
                continue
            try:
                overrides[field.name] = int(raw) if field.type is int else float(raw)
            except ValueError:
                logger.warning(f"Ignoring invalid value for {key}: {raw!r}")

        try:
            return cls(**overrides)
        except ValueError as e:
            logger.warning(f"Invalid sync settings from environment ({e}), using defaults")
            return cls()
