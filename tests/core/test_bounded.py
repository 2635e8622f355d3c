"""Tests for BoundedLog and TopN."""

from __future__ import annotations

import pytest

from combat_telemetry.core.bounded import BoundedLog, TopN


class TestBoundedLog:
    def test_rejects_non_positive_capacity(self):
        with pytest.raises(ValueError):
            BoundedLog(0)

    def test_append_within_capacity(self):
        log: BoundedLog[int] = BoundedLog(3)
        log.append(1)
        log.append(2)
        assert log.to_list() == [1, 2]
        assert len(log) == 2
        assert log.latest == 2

    def test_evicts_oldest_first(self):
        log: BoundedLog[int] = BoundedLog(3)
        for i in range(10):
            log.append(i)
        assert log.to_list() == [7, 8, 9]
        assert log[0] == 7

    def test_never_exceeds_capacity(self):
        log: BoundedLog[int] = BoundedLog(5)
        log.extend(range(1000))
        assert len(log) == 5
        assert log.capacity == 5

    def test_initial_items_are_truncated(self):
        log = BoundedLog(2, items=[1, 2, 3])
        assert list(log) == [2, 3]

    def test_clear_and_latest_empty(self):
        log = BoundedLog(2, items=[1])
        log.clear()
        assert len(log) == 0
        assert log.latest is None


class TestTopN:
    def test_keeps_largest_sorted_descending(self):
        top = TopN(3, key=lambda x: x)
        for value in [5, 1, 9, 3, 7]:
            top.offer(value)
        assert top.to_list() == [9, 7, 5]

    def test_rejects_value_not_beating_smallest(self):
        top = TopN(2, key=lambda x: x)
        top.offer(10)
        top.offer(8)
        assert top.offer(8) is False
        assert top.offer(9) is True
        assert top.to_list() == [10, 9]

    def test_equal_keys_keep_insertion_order(self):
        top = TopN(3, key=lambda item: item[1])
        top.offer(("a", 5))
        top.offer(("b", 5))
        assert [name for name, _ in top] == ["a", "b"]

    def test_rejects_bad_size(self):
        with pytest.raises(ValueError):
            TopN(0, key=lambda x: x)
