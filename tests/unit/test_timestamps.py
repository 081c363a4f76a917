"""Unit tests for TimestampDeduplicator."""

from datetime import datetime, timezone

from space_migrator.core.timestamps import TimestampDeduplicator


class TestTimestampDeduplicator:
    """Tests for the per-run timestamp set."""

    def test_floors_to_seconds(self):
        dedup = TimestampDeduplicator()
        assert dedup.assign_seconds(1609459200999) == 1609459200

    def test_same_second_is_pushed_forward(self):
        dedup = TimestampDeduplicator()
        assert dedup.assign_seconds(1609459200100) == 1609459200
        assert dedup.assign_seconds(1609459200900) == 1609459201
        assert dedup.assign_seconds(1609459200000) == 1609459202

    def test_skips_over_a_run_of_used_seconds(self):
        dedup = TimestampDeduplicator()
        for ms in (10_000, 11_000, 12_000):
            dedup.assign_seconds(ms)
        assert dedup.assign_seconds(10_500) == 13

    def test_distinct_seconds_are_unchanged(self):
        dedup = TimestampDeduplicator()
        assert [dedup.assign_seconds(ms) for ms in (1000, 5000, 9000)] == [1, 5, 9]
        assert len(dedup) == 3
        assert 5 in dedup

    def test_non_decreasing_input_yields_strictly_increasing_output(self):
        dedup = TimestampDeduplicator()
        source = [0, 100, 200, 1500, 1500, 1999, 4000, 4000, 4001]
        assigned = [dedup.assign_seconds(ms) for ms in source]
        assert all(a < b for a, b in zip(assigned, assigned[1:]))

    def test_set_is_shared_across_channels(self):
        dedup = TimestampDeduplicator()
        dedup.assign_seconds(60_000)
        # A later channel with an identical timestamp still gets a new second.
        assert dedup.assign_seconds(60_000) == 61

    def test_assign_returns_utc_datetime(self):
        dedup = TimestampDeduplicator()
        result = dedup.assign(1609459200500)
        assert result == datetime(2021, 1, 1, tzinfo=timezone.utc)
        assert result.tzinfo is timezone.utc
