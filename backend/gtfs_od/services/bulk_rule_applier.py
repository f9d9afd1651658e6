"""Apply one rule at one stop across a section of trips"""

import logging
from typing import Iterable, Optional

from gtfs_od.schemas.pattern import BulkApplyResult
from gtfs_od.schemas.restriction import ODRestriction, RuleMode
from gtfs_od.services.restriction_store import RestrictionStore

logger = logging.getLogger(__name__)


def apply_rule_to_section(
    store: RestrictionStore,
    trip_ids: Iterable[str],
    stop_id: str,
    rule: Optional[ODRestriction],
) -> BulkApplyResult:
    """
    Write (or clear) the rule at stop_id for every trip in trip_ids.

    - None or normal: delete the (trip, stop) entry
    - pickup / dropoff: store the bare mode, no OD sets
    - custom: clamp the OD sets against each trip's own upstream/downstream
      stops

    Only the store is mutated.
    """
    result = BulkApplyResult()
    trip_ids = list(trip_ids)

    if rule is None or rule.mode == RuleMode.NORMAL:
        for trip_id in trip_ids:
            if store.delete_rule(trip_id, stop_id):
                result.cleared += 1
    else:
        bare = rule if rule.mode == RuleMode.CUSTOM else ODRestriction(mode=rule.mode)
        for trip_id in trip_ids:
            # set_rule clamps custom sets per trip
            store.set_rule(trip_id, stop_id, bare)
            result.updated += 1

    logger.debug(
        f"Bulk rule at stop {stop_id} over {len(trip_ids)} trips: "
        f"{result.updated} updated, {result.cleared} cleared"
    )
    return result
