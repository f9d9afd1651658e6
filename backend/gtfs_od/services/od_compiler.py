"""OD restriction compiler

Lowers the rich restriction rules of the editor into plain GTFS trips whose
stop times only carry pickup_type / drop_off_type 0 or 1.

A trip without custom rules is emitted once, with pickup-only stops closed to
alighting and dropoff-only stops closed to boarding. A trip with at least one
custom rule is emitted three times over the custom span (first to last custom
stop):

- ``<trip_id>__segA``: start .. last custom stop, custom stops alight-only
- ``<trip_id>__segB``: first custom stop .. end, custom stops board-only
- ``<trip_id>__bridge``: whole trip, custom stops closed both ways

Only the mode label of a custom rule is used; its OD sets are not encoded.
"""

import logging
from typing import Dict, Iterable, List, Optional, Tuple

from gtfs_od.schemas.compile import (
    CompileReport,
    CompileResult,
    MaterializedTrip,
    MaterializedVisit,
)
from gtfs_od.schemas.gtfs import StopTimeRecord, TripRecord
from gtfs_od.schemas.restriction import ODRestriction, RuleMode
from gtfs_od.services.restriction_store import RestrictionStore, make_key
from gtfs_od.services.stop_sequence_index import StopSequenceIndex

logger = logging.getLogger(__name__)

SEGMENT_UP = "segA"
SEGMENT_DOWN = "segB"
SEGMENT_BRIDGE = "bridge"

# (pickup_type, drop_off_type) at custom stops, per emitted segment
CUSTOM_FLAGS: Dict[str, Tuple[int, int]] = {
    SEGMENT_UP: (1, 0),
    SEGMENT_DOWN: (0, 1),
    SEGMENT_BRIDGE: (1, 1),
}


def segment_trip_id(trip_id: str, segment: Optional[str]) -> str:
    return f"{trip_id}__{segment}" if segment else trip_id


def simple_flags(rule: Optional[ODRestriction]) -> Tuple[int, int]:
    """(pickup_type, drop_off_type) for a non-custom rule"""
    if rule is None:
        return 0, 0
    if rule.mode == RuleMode.PICKUP_ONLY:
        return 0, 1
    if rule.mode == RuleMode.DROPOFF_ONLY:
        return 1, 0
    return 0, 0


def _build_trip(
    trip: TripRecord,
    segment: Optional[str],
    rows: List[StopTimeRecord],
    rules_by_position: Dict[int, ODRestriction],
    start: int,
    end: int,
) -> MaterializedTrip:
    custom_flags = CUSTOM_FLAGS.get(segment) if segment else None
    visits: List[MaterializedVisit] = []

    for i in range(start, end + 1):
        row = rows[i]
        rule = rules_by_position.get(i)
        if rule is not None and rule.mode == RuleMode.CUSTOM and custom_flags:
            pickup_type, drop_off_type = custom_flags
        else:
            pickup_type, drop_off_type = simple_flags(rule)

        visits.append(
            MaterializedVisit(
                stop_id=row.stop_id,
                arrival_time=row.arrival_time,
                departure_time=row.departure_time,
                stop_sequence=len(visits) + 1,
                pickup_type=pickup_type,
                drop_off_type=drop_off_type,
            )
        )

    return MaterializedTrip(
        trip_id=segment_trip_id(trip.trip_id, segment),
        source_trip_id=trip.trip_id,
        segment=segment,
        route_id=trip.route_id,
        service_id=trip.service_id,
        shape_id=trip.shape_id,
        trip_headsign=trip.trip_headsign,
        direction_id=trip.direction_id,
        visits=visits,
    )


def rules_by_position(
    trip_id: str, rows: List[StopTimeRecord], store: RestrictionStore
) -> Dict[int, ODRestriction]:
    """Non-normal rules of a trip keyed by stop position"""
    found: Dict[int, ODRestriction] = {}
    for i, row in enumerate(rows):
        rule = store.get_rule(trip_id, row.stop_id)
        if rule.mode != RuleMode.NORMAL:
            found[i] = rule
    return found


def materialize_trip(
    trip: TripRecord,
    rows: List[StopTimeRecord],
    store: RestrictionStore,
) -> List[MaterializedTrip]:
    """
    Materialize one source trip. ``rows`` must already be in sequence order.

    Returns no trip for an empty row list, one trip when no custom rule applies,
    and the segA/segB/bridge triplet otherwise. A trip with fewer than two stops
    has no upstream or downstream side, so its custom rules are ignored.
    """
    if not rows:
        return []

    rules = rules_by_position(trip.trip_id, rows, store)
    custom_positions = [i for i, rule in sorted(rules.items()) if rule.mode == RuleMode.CUSTOM]

    if custom_positions and len(rows) < 2:
        logger.debug(f"Trip {trip.trip_id} has a single stop, ignoring its custom rule")
        custom_positions = []

    last = len(rows) - 1
    if not custom_positions:
        return [_build_trip(trip, None, rows, rules, 0, last)]

    first_c = custom_positions[0]
    last_c = custom_positions[-1]
    return [
        _build_trip(trip, SEGMENT_UP, rows, rules, 0, last_c),
        _build_trip(trip, SEGMENT_DOWN, rows, rules, first_c, last),
        _build_trip(trip, SEGMENT_BRIDGE, rows, rules, 0, last),
    ]


def _collect_missing_pairs(store: RestrictionStore, index: StopSequenceIndex, report: CompileReport) -> None:
    for (trip_id, stop_id), _rule in store.items():
        if not index.has_pair(trip_id, stop_id):
            report.missing_trip_stop_pairs += 1
            report.warnings.append(f"Rule key not found in stop times: {make_key(trip_id, stop_id)}")


def compile_trips(
    trips: Iterable[TripRecord],
    index: StopSequenceIndex,
    store: RestrictionStore,
    route_ids: Optional[Iterable[str]] = None,
) -> CompileResult:
    """
    Compile every source trip into materialized trips.

    Trips are processed in input order and each trip independently, so the
    same trips, stop times and rules always yield the same output. Trips
    without stop times are skipped. When route_ids is given only materialized
    trips of those routes are returned.
    """
    report = CompileReport(
        overrides_total=len(store),
        overrides_by_mode=store.count_by_mode(),
    )
    _collect_missing_pairs(store, index, report)

    out: List[MaterializedTrip] = []
    for trip in trips:
        report.trips_in += 1
        rows = index.rows_for(trip.trip_id)
        if not rows:
            logger.warning(f"Trip {trip.trip_id} has no stop times, skipping")
            report.skipped_trips += 1
            continue

        materialized = materialize_trip(trip, rows, store)

        if any(store.has_rule(trip.trip_id, row.stop_id) for row in rows):
            report.trips_touched += 1
        for mt in materialized:
            report.stop_times_modified += sum(
                1 for v in mt.visits if v.pickup_type or v.drop_off_type
            )
            if mt.segment:
                report.created_segments += 1
                report.stop_times_added += len(mt.visits)

        out.extend(materialized)

    if route_ids is not None:
        keep = set(route_ids)
        out = [mt for mt in out if mt.route_id in keep]

    report.trips_out = len(out)
    logger.info(
        f"Compiled {report.trips_in} trips into {report.trips_out} "
        f"({report.created_segments} segments, {report.skipped_trips} skipped, "
        f"{report.missing_trip_stop_pairs} unmatched rules)"
    )
    return CompileResult(trips=out, report=report)
