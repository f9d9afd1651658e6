"""Per-trip ordered stop sequences derived from stop times"""

import logging
from typing import Dict, Iterable, List

from gtfs_od.schemas.gtfs import StopTimeRecord

logger = logging.getLogger(__name__)


class StopSequenceIndex:
    """
    Ordered stop_id list per trip, built once per edit/compile cycle.

    Rows are sorted by their own stop_sequence with a stable sort, so ties keep
    input order. A stop visited twice keeps both entries in the sequence, but
    upstream/downstream lookups use its first occurrence.
    """

    def __init__(self, rows_by_trip: Dict[str, List[StopTimeRecord]]):
        self._rows: Dict[str, List[StopTimeRecord]] = {}
        self._sequences: Dict[str, List[str]] = {}
        self._first_position: Dict[str, Dict[str, int]] = {}

        for trip_id, rows in rows_by_trip.items():
            ordered = sorted(rows, key=lambda r: r.stop_sequence)
            sequence = [r.stop_id for r in ordered]
            positions: Dict[str, int] = {}
            for idx, stop_id in enumerate(sequence):
                positions.setdefault(stop_id, idx)

            self._rows[trip_id] = ordered
            self._sequences[trip_id] = sequence
            self._first_position[trip_id] = positions

    @classmethod
    def from_stop_times(cls, stop_times: Iterable[StopTimeRecord]) -> "StopSequenceIndex":
        """Group stop times by trip and index them"""
        rows_by_trip: Dict[str, List[StopTimeRecord]] = {}
        count = 0
        for st in stop_times:
            rows_by_trip.setdefault(st.trip_id, []).append(st)
            count += 1
        logger.debug(f"Indexed {count} stop times across {len(rows_by_trip)} trips")
        return cls(rows_by_trip)

    def trip_ids(self) -> List[str]:
        """Indexed trip_ids in first-seen order"""
        return list(self._sequences.keys())

    def has_trip(self, trip_id: str) -> bool:
        return trip_id in self._sequences

    def has_pair(self, trip_id: str, stop_id: str) -> bool:
        """Whether the trip visits the stop at least once"""
        return stop_id in self._first_position.get(trip_id, {})

    def rows_for(self, trip_id: str) -> List[StopTimeRecord]:
        """Stop times of a trip in sequence order (empty for unknown trips)"""
        return list(self._rows.get(trip_id, []))

    def sequence_for(self, trip_id: str) -> List[str]:
        """Ordered stop_ids of a trip (empty for unknown trips)"""
        return list(self._sequences.get(trip_id, []))

    def position_of(self, trip_id: str, stop_id: str) -> int:
        """0-based position of the stop's first occurrence, -1 when absent"""
        return self._first_position.get(trip_id, {}).get(stop_id, -1)

    def upstream_of(self, trip_id: str, stop_id: str) -> List[str]:
        """Stops strictly before the stop's first occurrence"""
        idx = self.position_of(trip_id, stop_id)
        if idx <= 0:
            return []
        return self._sequences[trip_id][:idx]

    def downstream_of(self, trip_id: str, stop_id: str) -> List[str]:
        """Stops strictly after the stop's first occurrence"""
        idx = self.position_of(trip_id, stop_id)
        if idx < 0:
            return []
        return self._sequences[trip_id][idx + 1:]
