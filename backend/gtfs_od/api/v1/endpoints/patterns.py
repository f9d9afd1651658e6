"""Pattern group endpoints: grouping, row summaries and bulk rule edits"""

import logging
from fastapi import APIRouter

from gtfs_od.api.deps import build_store
from gtfs_od.schemas.pattern import (
    BulkApplyRequest,
    BulkApplyResponse,
    PatternGroupsRequest,
    PatternGroupsResponse,
    RuleSummaryRequest,
    RuleSummaryResponse,
)
from gtfs_od.services.bulk_rule_applier import apply_rule_to_section
from gtfs_od.services.pattern_service import build_pattern_groups, stop_pools, trips_with_stop
from gtfs_od.services.rule_summarizer import summarize_rule_for_stop
from gtfs_od.services.stop_sequence_index import StopSequenceIndex

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/groups", response_model=PatternGroupsResponse)
async def get_pattern_groups(payload: PatternGroupsRequest) -> PatternGroupsResponse:
    """
    Group trips by identical ordered stop list.

    Trips are ordered by service_id, then first departure; groups appear in
    the order their first trip does.
    """
    index = StopSequenceIndex.from_stop_times(payload.stop_times)
    groups = build_pattern_groups(payload.trips, index)
    return PatternGroupsResponse(groups=groups)


@router.post("/summary", response_model=RuleSummaryResponse, response_model_exclude_none=True)
async def summarize_stop_rule(payload: RuleSummaryRequest) -> RuleSummaryResponse:
    """
    Summarize the rule at one stop row across the given trips.

    Only trips that actually visit the stop are considered. Also returns the
    upstream/downstream stop pools offered by the bulk editor.
    """
    store = build_store(payload.stop_times, payload.restrictions)
    trip_ids = trips_with_stop(store.index, payload.trip_ids, payload.stop_id)

    return RuleSummaryResponse(
        summary=summarize_rule_for_stop(store, trip_ids, payload.stop_id),
        pools=stop_pools(store.index, trip_ids, payload.stop_id),
    )


@router.post("/apply", response_model=BulkApplyResponse, response_model_exclude_none=True)
async def apply_stop_rule(payload: BulkApplyRequest) -> BulkApplyResponse:
    """
    Write one rule at one stop for a section of trips (null rule clears it).

    Custom OD sets are clamped per trip to its own upstream/downstream stops.
    Returns the updated restriction map.
    """
    store = build_store(payload.stop_times, payload.restrictions)
    result = apply_rule_to_section(store, payload.trip_ids, payload.stop_id, payload.rule)

    logger.info(
        f"Applied rule at stop {payload.stop_id}: "
        f"{result.updated} updated, {result.cleared} cleared"
    )
    return BulkApplyResponse(restrictions=store.to_map(), result=result)
