"""Pattern groups: trips sharing an identical ordered stop list"""

import logging
from typing import Dict, Iterable, List

from gtfs_od.schemas.gtfs import TripRecord
from gtfs_od.schemas.pattern import PatternGroup, StopPools
from gtfs_od.services.stop_sequence_index import StopSequenceIndex

logger = logging.getLogger(__name__)

PATTERN_KEY_SEPARATOR = ">"


def first_departure(index: StopSequenceIndex, trip_id: str) -> str:
    rows = index.rows_for(trip_id)
    return rows[0].departure_time if rows else ""


def order_trips(trips: Iterable[TripRecord], index: StopSequenceIndex) -> List[TripRecord]:
    """Sort by service_id, then first departure (trips without one last), then trip_id"""

    def sort_key(trip: TripRecord):
        dep = first_departure(index, trip.trip_id)
        return (trip.service_id, dep == "", dep, trip.trip_id)

    return sorted(trips, key=sort_key)


def build_pattern_groups(trips: Iterable[TripRecord], index: StopSequenceIndex) -> List[PatternGroup]:
    """Group ordered trips by exact stop sequence, groups in order of first appearance"""
    groups: Dict[str, PatternGroup] = {}
    for trip in order_trips(trips, index):
        seq = index.sequence_for(trip.trip_id)
        key = PATTERN_KEY_SEPARATOR.join(seq)
        if key not in groups:
            groups[key] = PatternGroup(key=key, stop_ids=seq, trip_ids=[])
        groups[key].trip_ids.append(trip.trip_id)

    logger.debug(f"Built {len(groups)} pattern groups")
    return list(groups.values())


def trips_with_stop(index: StopSequenceIndex, trip_ids: Iterable[str], stop_id: str) -> List[str]:
    return [trip_id for trip_id in trip_ids if index.has_pair(trip_id, stop_id)]


def stop_pools(index: StopSequenceIndex, trip_ids: Iterable[str], stop_id: str) -> StopPools:
    """Union of upstream/downstream stops over the trips that visit stop_id"""
    upstream: Dict[str, None] = {}
    downstream: Dict[str, None] = {}
    for trip_id in trips_with_stop(index, trip_ids, stop_id):
        for sid in index.upstream_of(trip_id, stop_id):
            upstream.setdefault(sid, None)
        for sid in index.downstream_of(trip_id, stop_id):
            downstream.setdefault(sid, None)
    return StopPools(upstream=list(upstream), downstream=list(downstream))
