"""Pytest configuration and fixtures."""

from typing import Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from gtfs_od.main import app
from gtfs_od.schemas.gtfs import StopTimeRecord, TripRecord
from gtfs_od.services.restriction_store import RestrictionStore
from gtfs_od.services.stop_sequence_index import StopSequenceIndex


def make_stop_times(
    trip_id: str,
    stop_ids: List[str],
    sequences: Optional[List[int]] = None,
    start_minute: int = 0,
) -> List[StopTimeRecord]:
    """Stop times for one trip, one minute apart starting at 08:start_minute."""
    sequences = sequences or list(range(1, len(stop_ids) + 1))
    rows = []
    for i, (stop_id, seq) in enumerate(zip(stop_ids, sequences)):
        minute = start_minute + i
        time = f"{8 + minute // 60:02d}:{minute % 60:02d}:00"
        rows.append(
            StopTimeRecord(
                trip_id=trip_id,
                stop_id=stop_id,
                stop_sequence=seq,
                arrival_time=time,
                departure_time=time,
            )
        )
    return rows


def make_trip(trip_id: str, route_id: str = "R1", service_id: str = "WK", **kwargs) -> TripRecord:
    return TripRecord(trip_id=trip_id, route_id=route_id, service_id=service_id, **kwargs)


@pytest.fixture
def stop_times() -> List[StopTimeRecord]:
    """T1 and T3 share pattern A-B-C-D, T2 runs A-B-C-D-E."""
    return (
        make_stop_times("T1", ["A", "B", "C", "D"])
        + make_stop_times("T2", ["A", "B", "C", "D", "E"], start_minute=30)
        + make_stop_times("T3", ["A", "B", "C", "D"], start_minute=60)
    )


@pytest.fixture
def trips() -> List[TripRecord]:
    return [make_trip("T1"), make_trip("T2", shape_id="SH2"), make_trip("T3")]


@pytest.fixture
def index(stop_times) -> StopSequenceIndex:
    return StopSequenceIndex.from_stop_times(stop_times)


@pytest.fixture
def store(index) -> RestrictionStore:
    return RestrictionStore(index)


def as_json(rows) -> List[Dict]:
    return [r.model_dump() for r in rows]


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)
