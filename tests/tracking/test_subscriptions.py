"""Tests for UpdateBroadcaster."""

from __future__ import annotations

import logging

from combat_telemetry.tracking.subscriptions import TelemetryUpdate, UpdateBroadcaster


class TestUpdateBroadcaster:
    def test_subscribe_notify_unsubscribe(self):
        broadcaster = UpdateBroadcaster()
        seen: list[str] = []
        sub = broadcaster.subscribe(lambda update: seen.append(update.kind))
        broadcaster.notify(TelemetryUpdate(kind="attack"))
        assert seen == ["attack"]
        assert broadcaster.unsubscribe(sub) is True
        assert broadcaster.unsubscribe(sub) is False
        broadcaster.notify(TelemetryUpdate(kind="attack"))
        assert seen == ["attack"]

    def test_failing_callback_does_not_block_others(self, caplog):
        broadcaster = UpdateBroadcaster()
        seen: list[str] = []

        def broken(update):
            raise RuntimeError("boom")

        broadcaster.subscribe(broken)
        broadcaster.subscribe(lambda update: seen.append(update.kind))
        with caplog.at_level(logging.WARNING):
            broadcaster.notify(TelemetryUpdate(kind="round_end"))
        assert seen == ["round_end"]
        assert "failed" in caplog.text

    def test_ids_unique(self):
        broadcaster = UpdateBroadcaster()
        ids = {broadcaster.subscribe(lambda u: None) for _ in range(10)}
        assert len(ids) == 10
        assert len(broadcaster) == 10
