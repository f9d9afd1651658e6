"""Restriction map maintenance endpoints"""

from fastapi import APIRouter

from gtfs_od.api.deps import build_store
from gtfs_od.schemas.restriction import PruneRestrictionsRequest, PruneRestrictionsResponse

router = APIRouter()


@router.post("/prune", response_model=PruneRestrictionsResponse, response_model_exclude_none=True)
async def prune_restrictions(payload: PruneRestrictionsRequest) -> PruneRestrictionsResponse:
    """Remove every rule that belongs to deleted trips (e.g. after deleting routes)."""
    store = build_store(payload.stop_times, payload.restrictions)
    removed = store.prune_trips(payload.trip_ids)
    return PruneRestrictionsResponse(restrictions=store.to_map(), removed=removed)
