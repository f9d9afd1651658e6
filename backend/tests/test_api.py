"""Tests for the HTTP API."""

import io
import json
import zipfile

from conftest import as_json

from gtfs_od.core.config import settings


def test_health_check(client) -> None:
    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "version": settings.VERSION}


def test_pattern_groups(client, trips, stop_times) -> None:
    response = client.post(
        "/api/v1/patterns/groups",
        json={"trips": as_json(trips), "stop_times": as_json(stop_times)},
    )

    assert response.status_code == 200
    groups = response.json()["groups"]
    assert [g["trip_ids"] for g in groups] == [["T1", "T3"], ["T2"]]


def test_apply_then_summary(client, stop_times) -> None:
    response = client.post(
        "/api/v1/patterns/apply",
        json={
            "trip_ids": ["T1", "T2"],
            "stop_id": "C",
            "rule": {"mode": "custom", "dropoffOnlyFrom": ["A"], "pickupOnlyTo": ["E"]},
            "stop_times": as_json(stop_times),
            "restrictions": {},
        },
    )
    assert response.status_code == 200
    body = response.json()
    assert body["result"] == {"updated": 2, "cleared": 0}
    assert body["restrictions"]["T1::C"] == {"mode": "custom", "dropoffOnlyFrom": ["A"], "pickupOnlyTo": []}
    assert body["restrictions"]["T2::C"]["pickupOnlyTo"] == ["E"]

    response = client.post(
        "/api/v1/patterns/summary",
        json={
            "trip_ids": ["T1", "T2"],
            "stop_id": "C",
            "stop_times": as_json(stop_times),
            "restrictions": body["restrictions"],
        },
    )
    assert response.status_code == 200
    summary = response.json()
    # clamping left T1 and T2 with different pickup sets
    assert summary["summary"]["status"] == "mixed"
    assert summary["pools"] == {"upstream": ["A", "B"], "downstream": ["D", "E"]}


def test_compile(client, trips, stop_times) -> None:
    response = client.post(
        "/api/v1/compiler/compile",
        json={
            "trips": as_json(trips),
            "stop_times": as_json(stop_times),
            "restrictions": {"T2::C": {"mode": "custom"}, "T1::B": {"mode": "dropoff"}},
        },
    )

    assert response.status_code == 200
    body = response.json()
    assert [t["trip_id"] for t in body["trips"]] == ["T1", "T2__segA", "T2__segB", "T2__bridge", "T3"]
    assert body["report"]["trips_out"] == 5
    assert body["report"]["created_segments"] == 3


def test_compile_rejects_bad_stop_time(client) -> None:
    response = client.post(
        "/api/v1/compiler/compile",
        json={"trips": [], "stop_times": [{"trip_id": "T1", "stop_id": "A", "stop_sequence": "first"}]},
    )

    assert response.status_code == 422


def test_export_zip(client, trips, stop_times) -> None:
    response = client.post(
        "/api/v1/compiler/export",
        json={"trips": as_json(trips), "stop_times": as_json(stop_times), "restrictions": {}},
    )

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/zip"
    assert settings.EXPORT_FILENAME in response.headers["content-disposition"]
    with zipfile.ZipFile(io.BytesIO(response.content)) as zf:
        assert "trips.txt" in zf.namelist()


def test_import_overrides_text(client, stop_times) -> None:
    document = {"overrides": {"north": {"rules": {"T1::B": {"mode": "pickup"}, "T9::B": {"mode": "pickup"}}}}}

    response = client.post(
        "/api/v1/overrides/import",
        json={"document_text": json.dumps(document), "stop_times": as_json(stop_times), "restrictions": {}},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["restrictions"] == {"T1::B": {"mode": "pickup"}}
    assert body["report"]["matched"] == 1
    assert body["report"]["trip_not_found"] == 1


def test_import_invalid_json(client) -> None:
    response = client.post("/api/v1/overrides/import", json={"document_text": "{not json"})

    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid overrides.json"


def test_import_requires_document(client) -> None:
    response = client.post("/api/v1/overrides/import", json={})

    assert response.status_code == 400


def test_export_overrides(client, stop_times) -> None:
    response = client.post(
        "/api/v1/overrides/export",
        json={"restrictions": {"T1::B": {"mode": "dropoff"}}, "stop_times": as_json(stop_times), "slug": "north"},
    )

    assert response.status_code == 200
    assert response.json()["overrides"]["north"]["rules"] == {"T1::B": {"mode": "dropoff"}}


def test_prune(client, stop_times) -> None:
    response = client.post(
        "/api/v1/restrictions/prune",
        json={
            "restrictions": {"T1::B": {"mode": "pickup"}, "T2::C": {"mode": "dropoff"}},
            "trip_ids": ["T1"],
            "stop_times": as_json(stop_times),
        },
    )

    assert response.status_code == 200
    assert response.json() == {"restrictions": {"T2::C": {"mode": "dropoff"}}, "removed": 1}


def test_prune_without_stop_times_keeps_custom_sets(client) -> None:
    custom = {"mode": "custom", "dropoffOnlyFrom": ["A"], "pickupOnlyTo": ["E"]}

    response = client.post(
        "/api/v1/restrictions/prune",
        json={"restrictions": {"T1::B": {"mode": "pickup"}, "T2::C": custom}, "trip_ids": ["T1"]},
    )

    assert response.status_code == 200
    assert response.json()["restrictions"] == {"T2::C": custom}


def test_apply_with_partial_stop_times_leaves_other_rules(client, stop_times) -> None:
    custom = {"mode": "custom", "dropoffOnlyFrom": ["A"], "pickupOnlyTo": ["E"]}
    t1_rows = [row for row in as_json(stop_times) if row["trip_id"] == "T1"]

    response = client.post(
        "/api/v1/patterns/apply",
        json={
            "trip_ids": ["T1"],
            "stop_id": "B",
            "rule": {"mode": "dropoff"},
            "stop_times": t1_rows,
            "restrictions": {"T2::C": custom},
        },
    )

    assert response.status_code == 200
    assert response.json()["restrictions"] == {"T1::B": {"mode": "dropoff"}, "T2::C": custom}


def test_compile_treats_malformed_rules_as_normal(client, trips, stop_times) -> None:
    response = client.post(
        "/api/v1/compiler/compile",
        json={
            "trips": as_json(trips),
            "stop_times": as_json(stop_times),
            "restrictions": {"T1::B": None, "T1::C": "pickup", "T3::B": {"mode": "dropoff"}},
        },
    )

    assert response.status_code == 200
    body = response.json()
    assert body["report"]["overrides_total"] == 1
    t1 = next(t for t in body["trips"] if t["trip_id"] == "T1")
    assert all(v["pickup_type"] == 0 and v["drop_off_type"] == 0 for v in t1["visits"])
