"""Tests for sync settings and their environment overrides."""

import logging

import pytest

from utils.config import SyncSettings
from utils.constants import DEFAULT_FALLBACK_INTERVAL, DEFAULT_TRAIL_TOLERANCE


def test_defaults():
    settings = SyncSettings()
    assert settings.lead_tolerance == 0.05
    assert settings.trail_tolerance == 0.15
    assert settings.scan_lookahead == 0.1
    assert settings.scan_back == 5
    assert settings.fallback_interval == 0.25


def test_from_env_mapping():
    settings = SyncSettings.from_env({
        "SUBSYNC_TRAIL_TOLERANCE": "0.3",
        "SUBSYNC_SCAN_BACK": "8",
        "UNRELATED": "1",
    })
    assert settings.trail_tolerance == 0.3
    assert settings.scan_back == 8
    assert isinstance(settings.scan_back, int)


def test_from_env_ignores_invalid_values(caplog):
    with caplog.at_level(logging.WARNING):
        settings = SyncSettings.from_env({
            "SUBSYNC_TRAIL_TOLERANCE": "soon",
            "SUBSYNC_SCAN_BACK": "2.5",
            "SUBSYNC_LEAD_TOLERANCE": " ",
        })
    assert settings == SyncSettings()
    assert "SUBSYNC_TRAIL_TOLERANCE" in caplog.text


def test_from_env_out_of_range_falls_back_to_defaults(caplog):
    with caplog.at_level(logging.WARNING):
        settings = SyncSettings.from_env({
            "SUBSYNC_FALLBACK_INTERVAL": "0",
            "SUBSYNC_TRAIL_TOLERANCE": "0.5",
        })
    assert settings.fallback_interval == DEFAULT_FALLBACK_INTERVAL
    assert settings.trail_tolerance == DEFAULT_TRAIL_TOLERANCE


def test_from_process_environment(monkeypatch):
    monkeypatch.setenv("SUBSYNC_LEAD_TOLERANCE", "0.02")
    assert SyncSettings.from_env(use_dotenv=False).lead_tolerance == 0.02


@pytest.mark.parametrize("kwargs", [
    {"lead_tolerance": -0.1},
    {"trail_tolerance": -1},
    {"scan_back": -1},
    {"frame_interval": 0},
    {"fallback_interval": -0.25},
])
def test_invalid_settings(kwargs):
    with pytest.raises(ValueError):
        SyncSettings(**kwargs)
