"""Lifetime statistics as a ledger of retractable contributions.

Each player has one :class:`LifetimeRecord`.  Recording a combat summary
stores its contribution under ``combat:<combat_id>`` (replacing any
previous one for the same combat); deleting the summary removes exactly
that contribution; evicting it from history folds it into the baseline.
An imported lifetime snapshot is kept under ``import:<participant_id>``
with the combats it already counts subtracted.  The public
:class:`PlayerLifetimeStats` view is always recomputed from
the baseline plus all contributions with explicit per-field reducers:

============================  ==================================
Field                         Reducer
============================  ==================================
counters, turn totals, MVP    sum
biggest hit, slowest turn     max
weakest hit, fastest turn     min over non-zero values
hit log                       merge, newest first, bounded
hit/miss ratio, averages      recomputed from the reduced fields
============================  ==================================
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Iterable

from pydantic import ValidationError

from combat_telemetry.errors import StorageError
from combat_telemetry.history.storage import Storage
from combat_telemetry.models.lifetime import (
    HitRecord,
    LifetimeContribution,
    LifetimeRecord,
    MvpAggregate,
    PlayerLifetimeStats,
    TurnRecord,
)
from combat_telemetry.models.summary import CombatSummary

logger = logging.getLogger(__name__)

INDEX_KEY = "lifetime_index"

_COUNTERS = (
    "hits",
    "misses",
    "criticals",
    "fumbles",
    "damage_dealt",
    "damage_taken",
    "healing_given",
    "healing_received",
    "turn_total_ms",
    "turn_count",
    "mvp_combats",
)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def record_key(participant_id: str) -> str:
    return f"lifetime/{participant_id}"


def combat_key(combat_id: str) -> str:
    return f"combat:{combat_id}"


def import_key(participant_id: str) -> str:
    return f"import:{participant_id}"


# ---------------------------------------------------------------------------
# Reducers
# ---------------------------------------------------------------------------


def _max_hit(a: HitRecord | None, b: HitRecord | None) -> HitRecord | None:
    if a is None or (b is not None and b.amount > a.amount):
        return b
    return a


def _min_hit(a: HitRecord | None, b: HitRecord | None) -> HitRecord | None:
    if a is None or a.amount <= 0:
        return b if b is not None and b.amount > 0 else None
    if b is not None and 0 < b.amount < a.amount:
        return b
    return a


def _max_turn(a: TurnRecord | None, b: TurnRecord | None) -> TurnRecord | None:
    if a is None or (b is not None and b.duration_ms > a.duration_ms):
        return b
    return a


def _min_turn(a: TurnRecord | None, b: TurnRecord | None) -> TurnRecord | None:
    if a is None or a.duration_ms <= 0:
        return b if b is not None and b.duration_ms > 0 else None
    if b is not None and 0 < b.duration_ms < a.duration_ms:
        return b
    return a


def _hit_identity(hit: HitRecord) -> tuple:
    return (hit.combat_id, hit.amount, hit.recorded_at, hit.target_name, hit.is_critical)


def merge_hit_logs(
    a: Iterable[HitRecord], b: Iterable[HitRecord], capacity: int
) -> list[HitRecord]:
    """Union of two hit logs, newest first, without duplicates."""
    seen: set[tuple] = set()
    merged: list[HitRecord] = []
    for hit in [*a, *b]:
        identity = _hit_identity(hit)
        if identity in seen:
            continue
        seen.add(identity)
        merged.append(hit)
    merged.sort(key=lambda h: h.recorded_at or _EPOCH, reverse=True)
    return merged[:capacity]


def combine(
    a: LifetimeContribution,
    b: LifetimeContribution,
    hit_log_capacity: int = 20,
) -> LifetimeContribution:
    """Reduce two contributions into one."""
    data = {name: getattr(a, name) + getattr(b, name) for name in _COUNTERS}
    return LifetimeContribution(
        **data,
        mvp_total_score=round(a.mvp_total_score + b.mvp_total_score, 1),
        mvp_high_score=max(a.mvp_high_score, b.mvp_high_score),
        biggest_hit=_max_hit(a.biggest_hit, b.biggest_hit),
        weakest_hit=_min_hit(a.weakest_hit, b.weakest_hit),
        fastest_turn=_min_turn(a.fastest_turn, b.fastest_turn),
        slowest_turn=_max_turn(a.slowest_turn, b.slowest_turn),
        hit_log=merge_hit_logs(a.hit_log, b.hit_log, hit_log_capacity),
    )


def subtract(
    total: LifetimeContribution,
    parts: Iterable[LifetimeContribution],
) -> LifetimeContribution:
    """Remove the part of *total* that came from *parts*.

    Counters are clamped at zero.  Extreme records and hit-log entries that
    originate from one of the parts' combats are dropped, so they are
    reduced again from the parts themselves and disappear with them.
    """
    data = {name: getattr(total, name) for name in _COUNTERS}
    score = total.mvp_total_score
    combat_ids: set[str | None] = set()
    for part in parts:
        for name in _COUNTERS:
            data[name] = max(0, data[name] - getattr(part, name))
        score = max(0.0, score - part.mvp_total_score)
        combat_ids.update(hit.combat_id for hit in part.hit_log)
        for record in (
            part.biggest_hit, part.weakest_hit, part.fastest_turn, part.slowest_turn
        ):
            if record is not None:
                combat_ids.add(record.combat_id)
    combat_ids.discard(None)

    def _keep(record: HitRecord | TurnRecord | None) -> HitRecord | TurnRecord | None:
        return None if record is not None and record.combat_id in combat_ids else record

    return total.model_copy(
        update={
            **data,
            "mvp_total_score": round(score, 1),
            "biggest_hit": _keep(total.biggest_hit),
            "weakest_hit": _keep(total.weakest_hit),
            "fastest_turn": _keep(total.fastest_turn),
            "slowest_turn": _keep(total.slowest_turn),
            "hit_log": [h for h in total.hit_log if h.combat_id not in combat_ids],
        }
    )


def total_contribution(record: LifetimeRecord, hit_log_capacity: int = 20) -> LifetimeContribution:
    """Baseline plus every contribution, reduced in key order."""
    total = record.baseline
    for key in sorted(record.contributions):
        total = combine(total, record.contributions[key], hit_log_capacity)
    return total


def derive_stats(record: LifetimeRecord, hit_log_capacity: int = 20) -> PlayerLifetimeStats:
    total = total_contribution(record, hit_log_capacity)
    attacks = total.hits + total.misses
    return PlayerLifetimeStats(
        participant_id=record.participant_id,
        name=record.name,
        hits=total.hits,
        misses=total.misses,
        hit_miss_ratio=round(total.hits / attacks * 100, 1) if attacks else 0.0,
        criticals=total.criticals,
        fumbles=total.fumbles,
        damage_dealt=total.damage_dealt,
        damage_taken=total.damage_taken,
        healing_given=total.healing_given,
        healing_received=total.healing_received,
        turn_total_ms=total.turn_total_ms,
        turn_count=total.turn_count,
        average_turn_ms=(
            round(total.turn_total_ms / total.turn_count, 1) if total.turn_count else 0.0
        ),
        biggest_hit=total.biggest_hit,
        weakest_hit=total.weakest_hit,
        fastest_turn=total.fastest_turn,
        slowest_turn=total.slowest_turn,
        mvp=MvpAggregate(
            total_score=total.mvp_total_score,
            combats=total.mvp_combats,
            average_score=(
                round(total.mvp_total_score / total.mvp_combats, 1) if total.mvp_combats else 0.0
            ),
            high_score=total.mvp_high_score,
        ),
        hit_log=total.hit_log,
        last_updated=record.last_updated,
    )


def contribution_from_summary(
    summary: CombatSummary, participant_id: str
) -> LifetimeContribution | None:
    """What one combat summary adds to *participant_id*'s lifetime stats."""
    entry = summary.participant(participant_id)
    if entry is None:
        return None
    combat_id = summary.combat_id
    when = summary.recorded_at
    own_hits = [h for h in summary.top_hits if h.attacker_id == participant_id]

    def _hit(amount: int) -> HitRecord | None:
        if amount <= 0:
            return None
        match = next((h for h in own_hits if h.amount == amount), None)
        return HitRecord(
            amount=amount,
            combat_id=combat_id,
            recorded_at=when,
            target_name=match.target_name if match else None,
            is_critical=match.is_critical if match else False,
        )

    def _turn(duration_ms: int | None) -> TurnRecord | None:
        if not duration_ms:
            return None
        return TurnRecord(duration_ms=duration_ms, combat_id=combat_id, recorded_at=when)

    score = summary.ranking_score(participant_id)
    return LifetimeContribution(
        hits=entry.hits,
        misses=entry.misses,
        criticals=entry.criticals,
        fumbles=entry.fumbles,
        damage_dealt=entry.damage_dealt,
        damage_taken=entry.damage_taken,
        healing_given=entry.healing_given,
        healing_received=entry.healing_received,
        turn_total_ms=entry.turn_total_ms,
        turn_count=entry.turn_count,
        biggest_hit=_hit(entry.biggest_hit),
        weakest_hit=_hit(entry.weakest_hit),
        fastest_turn=_turn(entry.fastest_turn_ms),
        slowest_turn=_turn(entry.slowest_turn_ms),
        mvp_total_score=score or 0.0,
        mvp_combats=1 if score is not None else 0,
        mvp_high_score=score or 0.0,
        hit_log=[
            HitRecord(
                amount=h.amount,
                combat_id=combat_id,
                recorded_at=when,
                target_name=h.target_name,
                is_critical=h.is_critical,
            )
            for h in own_hits
        ],
    )


# ---------------------------------------------------------------------------
# Ledger
# ---------------------------------------------------------------------------


class LifetimeLedger:
    """Persisted lifetime records for every player seen so far.

    Parameters
    ----------
    storage:
        Backing key-value store.  Read failures start from empty state;
        write failures are logged and the in-memory record is kept.
    hit_log_capacity:
        Length of the derived lifetime hit log.
    """

    def __init__(self, storage: Storage, hit_log_capacity: int = 20) -> None:
        self._storage = storage
        self._hit_log_capacity = hit_log_capacity
        self._records: dict[str, LifetimeRecord] = self._load()

    # -- queries -------------------------------------------------------------

    @property
    def participant_ids(self) -> list[str]:
        return list(self._records)

    def record(self, participant_id: str) -> LifetimeRecord | None:
        return self._records.get(participant_id)

    def stats(self, participant_id: str) -> PlayerLifetimeStats | None:
        record = self._records.get(participant_id)
        if record is None:
            return None
        return derive_stats(record, self._hit_log_capacity)

    def all_stats(self) -> list[PlayerLifetimeStats]:
        return [derive_stats(r, self._hit_log_capacity) for r in self._records.values()]

    def total(self, participant_id: str) -> LifetimeContribution | None:
        record = self._records.get(participant_id)
        if record is None:
            return None
        return total_contribution(record, self._hit_log_capacity)

    # -- mutation ------------------------------------------------------------

    def record_summary(self, summary: CombatSummary) -> list[str]:
        """Store *summary*'s contribution for each player in it.

        Re-recording the same combat replaces the earlier contribution.
        Returns the affected participant ids.
        """
        key = combat_key(summary.combat_id)
        affected: list[str] = []
        for entry in summary.participants:
            if not entry.is_player:
                continue
            contribution = contribution_from_summary(summary, entry.participant_id)
            if contribution is None:
                continue
            record = self._get_or_create(entry.participant_id, entry.name)
            record.name = entry.name
            record.contributions[key] = contribution
            record.last_updated = summary.recorded_at
            self._persist(record)
            affected.append(entry.participant_id)
        if affected:
            self._persist_index()
        return affected

    def retract_combat(self, combat_id: str) -> list[str]:
        """Remove the contribution of *combat_id* from every record."""
        key = combat_key(combat_id)
        affected: list[str] = []
        for record in self._records.values():
            if record.contributions.pop(key, None) is not None:
                self._persist(record)
                affected.append(record.participant_id)
        logger.debug("Retracted combat %s from %d record(s)", combat_id, len(affected))
        return affected

    def fold_combat(self, combat_id: str) -> list[str]:
        """Move *combat_id*'s contribution into each record's baseline."""
        key = combat_key(combat_id)
        affected: list[str] = []
        for record in self._records.values():
            contribution = record.contributions.pop(key, None)
            if contribution is None:
                continue
            record.baseline = combine(record.baseline, contribution, self._hit_log_capacity)
            self._persist(record)
            affected.append(record.participant_id)
        return affected

    def import_lifetime(
        self,
        participant_id: str,
        name: str,
        lifetime: LifetimeContribution,
        shipped: dict[str, LifetimeContribution],
        updated_at: datetime | None = None,
    ) -> bool | None:
        """Merge an imported lifetime snapshot for one player.

        The newest snapshot wins.  It already counts every combat its source
        has seen: the combats in *shipped* (combat id to what the payload says
        the combat contributed) and every combat delivered by earlier
        imports, older ones included.  Those are recorded locally in their
        own right, so all of them are subtracted and only the remainder is
        stored under ``import:<participant_id>``.

        Returns
        -------
        bool or None
            ``None`` if *lifetime* is older than the stored snapshot (its
            combats are still taken into account), ``False`` if nothing
            changed, ``True`` otherwise.
        """
        record = self._get_or_create(participant_id, name)
        outdated = (
            record.imported_lifetime is not None
            and updated_at is not None
            and record.imported_at is not None
            and updated_at < record.imported_at
        )
        if outdated:
            snapshot = record.imported_lifetime
            delivered = {**shipped, **record.imported_combats}
            imported_at = record.imported_at
        else:
            snapshot = lifetime
            delivered = {**record.imported_combats, **shipped}
            imported_at = updated_at or record.imported_at
        delivered = {cid: delivered[cid] for cid in sorted(delivered)}
        contribution = subtract(snapshot, delivered.values())

        key = import_key(participant_id)
        changed = not (
            record.contributions.get(key) == contribution
            and record.imported_lifetime == snapshot
            and record.imported_combats == delivered
            and record.imported_at == imported_at
        )
        if changed:
            record.contributions[key] = contribution
            record.imported_lifetime = snapshot
            record.imported_combats = delivered
            record.imported_at = imported_at
            if imported_at is not None and (
                record.last_updated is None or imported_at > record.last_updated
            ):
                record.last_updated = imported_at
            self._persist(record)
            self._persist_index()
        if outdated:
            logger.debug("Older lifetime snapshot for %s kept the newer one", participant_id)
            return None
        return changed

    def clear(self) -> None:
        for participant_id in list(self._records):
            self._unset(record_key(participant_id))
        self._records.clear()
        self._persist_index()

    # -- persistence ---------------------------------------------------------

    def _get_or_create(self, participant_id: str, name: str) -> LifetimeRecord:
        record = self._records.get(participant_id)
        if record is None:
            record = LifetimeRecord(participant_id=participant_id, name=name)
            self._records[participant_id] = record
            logger.debug("Created lifetime record for %s", participant_id)
        return record

    def _load(self) -> dict[str, LifetimeRecord]:
        records: dict[str, LifetimeRecord] = {}
        try:
            index = self._storage.get(INDEX_KEY, []) or []
            for participant_id in index:
                raw = self._storage.get(record_key(participant_id))
                if raw is None:
                    continue
                try:
                    records[participant_id] = LifetimeRecord.model_validate(raw)
                except ValidationError:
                    logger.warning("Discarding unreadable lifetime record %s", participant_id)
        except StorageError as exc:
            logger.warning("Could not load lifetime records: %s", exc)
        return records

    def _persist(self, record: LifetimeRecord) -> None:
        try:
            self._storage.set(record_key(record.participant_id), record.model_dump(mode="json"))
        except StorageError as exc:
            logger.warning("Could not save lifetime record %s: %s", record.participant_id, exc)

    def _persist_index(self) -> None:
        try:
            self._storage.set(INDEX_KEY, sorted(self._records))
        except StorageError as exc:
            logger.warning("Could not save lifetime index: %s", exc)

    def _unset(self, key: str) -> None:
        try:
            self._storage.unset(key)
        except StorageError as exc:
            logger.warning("Could not delete %s: %s", key, exc)
