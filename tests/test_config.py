"""Tests for settings loading."""

from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from combat_telemetry.config import TelemetrySettings, load_settings


class TestLoadSettings:
    def test_defaults(self):
        settings = load_settings()
        assert settings.history_capacity == 20
        assert settings.event_log_capacity == 1000
        assert settings.default_hit_threshold == 10
        assert settings.track_combat_stats is True

    def test_file_then_overrides(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"history_capacity": 5, "top_moments": 3}))
        settings = load_settings(path, top_moments=4)
        assert settings.history_capacity == 5
        assert settings.top_moments == 4

    def test_unknown_key_rejected(self):
        with pytest.raises(ValidationError):
            load_settings(history_size=3)

    def test_capacity_must_be_positive(self):
        with pytest.raises(ValidationError):
            TelemetrySettings(event_log_capacity=0)

    def test_settings_are_frozen(self):
        settings = TelemetrySettings()
        with pytest.raises(ValidationError):
            settings.history_capacity = 3
