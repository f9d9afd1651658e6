"""Compiler schemas: materialized trips and compile report"""

from typing import Optional, List, Dict
from pydantic import BaseModel, Field

from gtfs_od.schemas.gtfs import StopTimeRecord, TripRecord
from gtfs_od.schemas.restriction import RawRestrictionsMap


class MaterializedVisit(BaseModel):
    """Stop time emitted by the compiler"""

    stop_id: str
    arrival_time: str
    departure_time: str
    stop_sequence: int = Field(..., ge=1, description="Dense, 1-based")
    pickup_type: int = Field(0, ge=0, le=1, description="0=regular, 1=none")
    drop_off_type: int = Field(0, ge=0, le=1, description="0=regular, 1=none")


class MaterializedTrip(BaseModel):
    """Trip emitted by the compiler (possibly a synthesized clone of a source trip)"""

    trip_id: str = Field(..., description="Emitted trip_id (source id or __segA/__segB/__bridge form)")
    source_trip_id: str = Field(..., description="trip_id of the source trip")
    segment: Optional[str] = Field(None, description="segA, segB, bridge or null for a plain copy")
    route_id: str = ""
    service_id: str = ""
    shape_id: Optional[str] = None
    trip_headsign: Optional[str] = None
    direction_id: Optional[int] = None
    visits: List[MaterializedVisit] = Field(default_factory=list)


class CompileReport(BaseModel):
    """Diagnostics collected while compiling"""

    overrides_total: int = Field(0, description="Non-normal rules in the store")
    overrides_by_mode: Dict[str, int] = Field(default_factory=dict)
    trips_in: int = Field(0, description="Source trips considered")
    trips_out: int = Field(0, description="Materialized trips emitted")
    trips_touched: int = Field(0, description="Source trips with at least one restriction applied")
    created_segments: int = Field(0, description="segA/segB/bridge trips created")
    stop_times_modified: int = Field(0, description="Visits whose flags differ from 0/0")
    stop_times_added: int = Field(0, description="Visits emitted on synthesized trips")
    skipped_trips: int = Field(0, description="Trips skipped for lack of stop times")
    missing_trip_stop_pairs: int = Field(0, description="Rules whose (trip, stop) is absent from the stop times")
    warnings: List[str] = Field(default_factory=list)


class CompileRequest(BaseModel):
    """Compile request: full working set of trips, stop times and rules"""

    trips: List[TripRecord] = Field(default_factory=list)
    stop_times: List[StopTimeRecord] = Field(default_factory=list)
    restrictions: RawRestrictionsMap = Field(default_factory=dict)
    route_ids: Optional[List[str]] = Field(
        None, description="Only keep materialized trips of these routes"
    )


class CompileResult(BaseModel):
    """Compile output"""

    trips: List[MaterializedTrip] = Field(default_factory=list)
    report: CompileReport = Field(default_factory=CompileReport)
