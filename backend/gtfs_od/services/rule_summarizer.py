"""Summarize the rule shown for one stop row of a pattern group"""

from typing import Iterable, List, Optional

from gtfs_od.schemas.pattern import RuleSummary, SummaryStatus
from gtfs_od.schemas.restriction import ODRestriction, RuleMode
from gtfs_od.services.restriction_store import RestrictionStore


def same_stop_set(a: Optional[List[str]], b: Optional[List[str]]) -> bool:
    """Unordered equality of two stop lists; None counts as empty"""
    return set(a or []) == set(b or [])


def summarize_rule_for_stop(
    store: RestrictionStore,
    trip_ids: Iterable[str],
    stop_id: str,
) -> RuleSummary:
    """
    Decide whether every trip shows one uniform rule at stop_id.

    Returns status ``empty`` for no trips, ``mixed`` when modes differ (or when
    custom rules carry different OD sets), otherwise ``uniform`` with the
    common rule. Never mutates the store.
    """
    rules: List[ODRestriction] = [store.get_rule(trip_id, stop_id) for trip_id in trip_ids]
    if not rules:
        return RuleSummary(status=SummaryStatus.EMPTY)

    first = rules[0]
    if any(r.mode != first.mode for r in rules):
        return RuleSummary(status=SummaryStatus.MIXED)

    if first.mode != RuleMode.CUSTOM:
        return RuleSummary(status=SummaryStatus.UNIFORM, rule=ODRestriction(mode=first.mode))

    all_same_custom = all(
        same_stop_set(r.dropoff_only_from, first.dropoff_only_from)
        and same_stop_set(r.pickup_only_to, first.pickup_only_to)
        for r in rules
    )
    if not all_same_custom:
        return RuleSummary(status=SummaryStatus.MIXED)

    return RuleSummary(
        status=SummaryStatus.UNIFORM,
        rule=ODRestriction(
            mode=RuleMode.CUSTOM,
            dropoff_only_from=list(first.dropoff_only_from or []),
            pickup_only_to=list(first.pickup_only_to or []),
        ),
    )
