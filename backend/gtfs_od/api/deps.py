"""Request-scoped helpers shared by the endpoints"""

from typing import Any, Dict, Iterable

from gtfs_od.schemas.gtfs import StopTimeRecord
from gtfs_od.services.restriction_store import RestrictionStore
from gtfs_od.services.stop_sequence_index import StopSequenceIndex


def build_store(
    stop_times: Iterable[StopTimeRecord],
    restrictions: Dict[str, Any],
) -> RestrictionStore:
    """
    Index the request's stop times and load its restriction map

    Args:
        stop_times: Stop times sent with the request
        restrictions: Composite-key restriction map sent with the request

    Returns:
        RestrictionStore: Store bound to a fresh StopSequenceIndex
    """
    index = StopSequenceIndex.from_stop_times(stop_times)
    return RestrictionStore.from_map(restrictions, index)
