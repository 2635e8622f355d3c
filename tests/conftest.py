"""Shared fakes and fixtures for telemetry tests."""

from __future__ import annotations

import asyncio

import pytest

from combat_telemetry.config import TelemetrySettings
from combat_telemetry.models.events import Participant
from combat_telemetry.models.summary import CombatSummary, RoundSummary


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self, start_ms: int = 1_700_000_000_000) -> None:
        self.now = start_ms

    def now_ms(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class FakeResolver:
    """Resolve references from a dict.

    References in ``failing`` raise; unknown references resolve to ``None``.
    When ``gate`` is set, every lookup waits on it first.
    """

    def __init__(self, participants: dict[str, Participant] | None = None) -> None:
        self.participants = dict(participants or {})
        self.failing: set[str] = set()
        self.gate: asyncio.Event | None = None
        self.calls: list[str] = []

    async def resolve(self, ref: str) -> Participant | None:
        self.calls.append(ref)
        if self.gate is not None:
            await self.gate.wait()
        if ref in self.failing:
            raise RuntimeError(f"lookup failed for {ref}")
        return self.participants.get(ref)


class FakeTimer:
    def __init__(
        self,
        allotted_seconds: float | None = 30.0,
        remaining_seconds: float | None = None,
        expired: bool = False,
    ) -> None:
        self.allotted_seconds = allotted_seconds
        self.remaining_seconds = remaining_seconds
        self.expired = expired


class RecordingSink:
    """Collect published summaries; optionally block until ``gate`` is set."""

    def __init__(self) -> None:
        self.rounds: list[RoundSummary] = []
        self.combats: list[CombatSummary] = []
        self.gate: asyncio.Event | None = None
        self.entered = asyncio.Event()
        self.fail = False

    async def publish_round_summary(self, summary: RoundSummary) -> None:
        self.entered.set()
        if self.gate is not None:
            await self.gate.wait()
        if self.fail:
            raise RuntimeError("sink unavailable")
        self.rounds.append(summary)

    async def publish_combat_summary(self, summary: CombatSummary) -> None:
        if self.fail:
            raise RuntimeError("sink unavailable")
        self.combats.append(summary)


ALICE = Participant(id="alice", name="Alice", is_player=True)
BORIN = Participant(id="borin", name="Borin", is_player=True)
GOBLIN = Participant(id="goblin", name="Goblin", is_player=False)


def make_resolver() -> FakeResolver:
    return FakeResolver({p.id: p for p in (ALICE, BORIN, GOBLIN)})


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def resolver() -> FakeResolver:
    return make_resolver()


@pytest.fixture
def timer() -> FakeTimer:
    return FakeTimer()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def settings() -> TelemetrySettings:
    return TelemetrySettings(turn_time_allotment_s=30.0)
