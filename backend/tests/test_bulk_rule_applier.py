"""Tests for bulk rule edits over a section of trips."""

from gtfs_od.schemas.restriction import ODRestriction, RuleMode
from gtfs_od.services.bulk_rule_applier import apply_rule_to_section


def test_simple_mode_written_for_every_trip(store) -> None:
    result = apply_rule_to_section(store, ["T1", "T2", "T3"], "B", ODRestriction(mode=RuleMode.PICKUP_ONLY))

    assert result.updated == 3
    for trip_id in ("T1", "T2", "T3"):
        rule = store.get_rule(trip_id, "B")
        assert rule.mode == RuleMode.PICKUP_ONLY
        assert rule.dropoff_only_from is None
        assert rule.pickup_only_to is None


def test_none_and_normal_clear(store) -> None:
    apply_rule_to_section(store, ["T1", "T3"], "B", ODRestriction(mode=RuleMode.DROPOFF_ONLY))

    result = apply_rule_to_section(store, ["T1"], "B", None)
    assert result.cleared == 1
    assert not store.has_rule("T1", "B")

    result = apply_rule_to_section(store, ["T1", "T3"], "B", ODRestriction(mode=RuleMode.NORMAL))
    assert result.cleared == 1
    assert len(store) == 0


def test_custom_clamped_per_trip(store, index) -> None:
    """T1 ends at D, T2 continues to E: E only survives on T2."""
    rule = ODRestriction(mode=RuleMode.CUSTOM, dropoff_only_from=["A", "D"], pickup_only_to=["D", "E", "A"])

    apply_rule_to_section(store, ["T1", "T2"], "C", rule)

    assert store.get_rule("T1", "C").pickup_only_to == ["D"]
    assert store.get_rule("T2", "C").pickup_only_to == ["D", "E"]

    # every written member lies strictly on the right side of C in its own trip
    for trip_id in ("T1", "T2"):
        written = store.get_rule(trip_id, "C")
        pos = index.position_of(trip_id, "C")
        assert all(index.position_of(trip_id, s) < pos for s in written.dropoff_only_from)
        assert all(index.position_of(trip_id, s) > pos for s in written.pickup_only_to)


def test_custom_at_first_stop_has_no_upstream(store) -> None:
    rule = ODRestriction(mode=RuleMode.CUSTOM, dropoff_only_from=["B"], pickup_only_to=["B"])

    apply_rule_to_section(store, ["T1"], "A", rule)

    written = store.get_rule("T1", "A")
    assert written.mode == RuleMode.CUSTOM
    assert written.dropoff_only_from == []
    assert written.pickup_only_to == ["B"]


def test_only_targets_given_stop(store) -> None:
    store.set_rule("T1", "C", ODRestriction(mode=RuleMode.DROPOFF_ONLY))

    apply_rule_to_section(store, ["T1"], "B", None)

    assert store.get_rule("T1", "C").mode == RuleMode.DROPOFF_ONLY
