"""Write compiled trips as a trips.txt / stop_times.txt fragment"""

import csv
import io
import logging
import re
import zipfile
from typing import Iterable, List

from gtfs_od.schemas.compile import MaterializedTrip

logger = logging.getLogger(__name__)

TRIPS_FIELDS = ["route_id", "service_id", "trip_id", "trip_headsign", "shape_id", "direction_id"]
STOP_TIMES_FIELDS = [
    "trip_id", "arrival_time", "departure_time", "stop_id",
    "stop_sequence", "pickup_type", "drop_off_type",
]

GTFS_TIME_PATTERN = re.compile(r"^\s*(\d{1,2}):(\d{2})(?::(\d{2}))?\s*$")


def to_gtfs_time(value: str) -> str:
    """H:MM or H:MM:SS -> HH:MM:SS; blank and unparsable values are left as-is"""
    if not value:
        return ""
    match = GTFS_TIME_PATTERN.match(value)
    if not match:
        return value
    hours, minutes, seconds = match.group(1), match.group(2), match.group(3) or "00"
    return f"{int(hours):02d}:{minutes}:{int(seconds):02d}"


def trips_csv(trips: Iterable[MaterializedTrip]) -> str:
    csv_buffer = io.StringIO()
    writer = csv.DictWriter(csv_buffer, fieldnames=TRIPS_FIELDS, lineterminator="\n")
    writer.writeheader()
    for trip in trips:
        writer.writerow({
            'route_id': trip.route_id,
            'service_id': trip.service_id,
            'trip_id': trip.trip_id,
            'trip_headsign': trip.trip_headsign or '',
            'shape_id': trip.shape_id or '',
            'direction_id': '' if trip.direction_id is None else trip.direction_id,
        })
    return csv_buffer.getvalue()


def stop_times_csv(trips: Iterable[MaterializedTrip]) -> str:
    csv_buffer = io.StringIO()
    writer = csv.DictWriter(csv_buffer, fieldnames=STOP_TIMES_FIELDS, lineterminator="\n")
    writer.writeheader()
    for trip in trips:
        for visit in trip.visits:
            writer.writerow({
                'trip_id': trip.trip_id,
                'arrival_time': to_gtfs_time(visit.arrival_time),
                'departure_time': to_gtfs_time(visit.departure_time),
                'stop_id': visit.stop_id,
                'stop_sequence': visit.stop_sequence,
                'pickup_type': visit.pickup_type,
                'drop_off_type': visit.drop_off_type,
            })
    return csv_buffer.getvalue()


def write_trips_fragment(trips: List[MaterializedTrip]) -> bytes:
    """Zip holding trips.txt and stop_times.txt for the materialized trips"""
    zip_buffer = io.BytesIO()
    with zipfile.ZipFile(zip_buffer, 'w', zipfile.ZIP_DEFLATED) as zf:
        zf.writestr('trips.txt', trips_csv(trips))
        zf.writestr('stop_times.txt', stop_times_csv(trips))

    data = zip_buffer.getvalue()
    logger.info(f"Wrote fragment with {len(trips)} trips ({len(data)} bytes)")
    return data
