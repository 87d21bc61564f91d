"""Tests for site2rss.reconcile module."""

from datetime import datetime, timedelta, timezone

from site2rss.models import Item
from site2rss.reconcile import deduplicate, reconcile

T0 = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
T1 = T0 + timedelta(hours=1)
T2 = T0 + timedelta(hours=2)


def _item(name: str, at: datetime, description: str = "") -> Item:
    return Item(title=name, link=f"https://ex.com/{name}", description=description, first_seen_at=at)


class TestReconcile:
    def test_first_run_keeps_extraction_order(self) -> None:
        fresh = [_item("a", T1), _item("b", T1), _item("c", T1)]

        result = reconcile(fresh, [])

        assert result == fresh

    def test_carries_prior_timestamps_forward(self) -> None:
        prior = [_item("a", T0)]
        fresh = [_item("a", T1)]

        result = reconcile(fresh, prior)

        assert result == [_item("a", T0)]

    def test_timestamp_stable_when_extraction_order_changes(self) -> None:
        prior = [_item("b", T1), _item("a", T0)]
        fresh = [_item("a", T2), _item("b", T2)]

        result = reconcile(fresh, prior)

        assert {item.title: item.first_seen_at for item in result} == {"a": T0, "b": T1}
        assert [item.title for item in result] == ["b", "a"]

    def test_new_items_sorted_first(self) -> None:
        prior = [_item("a", T0)]
        fresh = [_item("a", T1), _item("new", T1)]

        result = reconcile(fresh, prior)

        assert [item.title for item in result] == ["new", "a"]

    def test_new_item_later_than_all_prior(self) -> None:
        prior = [_item("a", T0), _item("b", T2)]
        fresh = [_item("a", T1), _item("b", T1), _item("new", T1)]

        result = reconcile(fresh, prior)

        new = next(item for item in result if item.title == "new")
        assert new.first_seen_at > max(item.first_seen_at for item in prior)
        assert result[0] is new

    def test_identity_is_exact_and_case_sensitive(self) -> None:
        prior = [_item("a", T0, description="Desc")]
        fresh = [_item("a", T1, description="desc"), _item("A", T1, description="Desc")]

        result = reconcile(fresh, prior)

        assert all(item.first_seen_at == T1 for item in result)

    def test_timestamp_not_part_of_identity(self) -> None:
        prior = [_item("a", T0)]

        result = reconcile([_item("a", T2)], prior)

        assert result[0].first_seen_at == T0

    def test_duplicates_collapsed(self) -> None:
        fresh = [_item("a", T1), _item("a", T1)]

        result = reconcile(fresh, [])

        assert result == [_item("a", T1)]

    def test_non_adjacent_duplicates_collapsed(self) -> None:
        fresh = [_item("a", T1), _item("b", T1), _item("a", T1)]

        result = reconcile(fresh, [])

        assert [item.title for item in result] == ["a", "b"]

    def test_duplicates_matching_prior_collapsed(self) -> None:
        prior = [_item("a", T0)]
        fresh = [_item("a", T1), _item("b", T1), _item("a", T1)]

        result = reconcile(fresh, prior)

        assert result == [_item("b", T1), _item("a", T0)]

    def test_sorted_descending_and_stable(self) -> None:
        prior = [_item("x", T1), _item("y", T0), _item("z", T1)]
        fresh = [_item("y", T2), _item("z", T2), _item("x", T2)]

        result = reconcile(fresh, prior)

        assert [item.title for item in result] == ["z", "x", "y"]
        timestamps = [item.first_seen_at for item in result]
        assert timestamps == sorted(timestamps, reverse=True)

    def test_items_missing_from_fresh_are_dropped(self) -> None:
        prior = [_item("gone", T0), _item("a", T0)]

        result = reconcile([_item("a", T1)], prior)

        assert [item.title for item in result] == ["a"]

    def test_idempotent(self) -> None:
        prior = [_item("a", T0)]
        fresh = [_item("b", T1), _item("a", T1), _item("c", T1)]
        first = reconcile(fresh, prior)

        second = reconcile(first, first)

        assert second == first

    def test_idempotent_on_repeated_cycles(self) -> None:
        fresh_cycle_1 = [_item("a", T0), _item("b", T0)]
        snapshot = reconcile(fresh_cycle_1, [])

        fresh_cycle_2 = [_item("a", T1), _item("b", T1)]
        snapshot_2 = reconcile(fresh_cycle_2, snapshot)

        assert snapshot_2 == snapshot

    def test_equal_timestamps_follow_latest_extraction_order(self) -> None:
        snapshot = reconcile([_item("a", T0), _item("b", T0)], [])

        result = reconcile([_item("b", T1), _item("a", T1)], snapshot)

        assert result == [_item("b", T0), _item("a", T0)]

    def test_empty_inputs(self) -> None:
        assert reconcile([], []) == []
        assert reconcile([], [_item("a", T0)]) == []


class TestDeduplicate:
    def test_keeps_first_occurrence(self) -> None:
        items = [_item("a", T2), _item("b", T1), _item("a", T0)]

        assert deduplicate(items) == [_item("a", T2), _item("b", T1)]
