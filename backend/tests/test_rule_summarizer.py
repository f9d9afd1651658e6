"""Tests for stop row summaries across a pattern group."""

from gtfs_od.schemas.pattern import SummaryStatus
from gtfs_od.schemas.restriction import ODRestriction, RuleMode
from gtfs_od.services.rule_summarizer import same_stop_set, summarize_rule_for_stop


def test_empty_trip_list_has_no_summary(store) -> None:
    summary = summarize_rule_for_stop(store, [], "B")

    assert summary.status == SummaryStatus.EMPTY
    assert summary.rule is None


def test_all_normal_is_uniform(store) -> None:
    summary = summarize_rule_for_stop(store, ["T1", "T3"], "B")

    assert summary.is_uniform
    assert summary.rule.mode == RuleMode.NORMAL


def test_uniform_simple_mode(store) -> None:
    for trip_id in ("T1", "T3"):
        store.set_rule(trip_id, "B", ODRestriction(mode=RuleMode.DROPOFF_ONLY))

    summary = summarize_rule_for_stop(store, ["T1", "T3"], "B")

    assert summary.is_uniform
    assert summary.rule.mode == RuleMode.DROPOFF_ONLY


def test_pickup_vs_dropoff_is_mixed(store) -> None:
    store.set_rule("T1", "B", ODRestriction(mode=RuleMode.PICKUP_ONLY))
    store.set_rule("T3", "B", ODRestriction(mode=RuleMode.DROPOFF_ONLY))

    summary = summarize_rule_for_stop(store, ["T1", "T3"], "B")

    assert summary.status == SummaryStatus.MIXED
    assert summary.rule is None


def test_one_rule_and_one_default_is_mixed(store) -> None:
    store.set_rule("T1", "B", ODRestriction(mode=RuleMode.PICKUP_ONLY))

    assert summarize_rule_for_stop(store, ["T1", "T3"], "B").status == SummaryStatus.MIXED


def test_custom_with_different_sets_same_size_is_mixed(store) -> None:
    store.set_rule("T1", "B", ODRestriction(mode=RuleMode.CUSTOM, pickup_only_to=["C"]))
    store.set_rule("T3", "B", ODRestriction(mode=RuleMode.CUSTOM, pickup_only_to=["D"]))

    assert summarize_rule_for_stop(store, ["T1", "T3"], "B").status == SummaryStatus.MIXED


def test_custom_with_equal_sets_in_any_order_is_uniform(store) -> None:
    store.set_rule("T1", "C", ODRestriction(mode=RuleMode.CUSTOM, dropoff_only_from=["A", "B"], pickup_only_to=["D"]))
    store.set_rule("T3", "C", ODRestriction(mode=RuleMode.CUSTOM, dropoff_only_from=["B", "A"], pickup_only_to=["D"]))

    summary = summarize_rule_for_stop(store, ["T1", "T3"], "C")

    assert summary.is_uniform
    assert summary.rule.mode == RuleMode.CUSTOM
    assert set(summary.rule.dropoff_only_from) == {"A", "B"}
    assert summary.rule.pickup_only_to == ["D"]


def test_summary_does_not_mutate_store(store) -> None:
    store.set_rule("T1", "B", ODRestriction(mode=RuleMode.PICKUP_ONLY))
    before = store.to_map()

    summarize_rule_for_stop(store, ["T1", "T3"], "B")

    assert store.to_map() == before


def test_same_stop_set_treats_none_as_empty() -> None:
    assert same_stop_set(None, [])
    assert same_stop_set(["A", "B"], ["B", "A"])
    assert not same_stop_set(["A"], ["B"])
