"""Trip and stop time input records"""

from typing import Optional
from pydantic import BaseModel, Field


class TripRecord(BaseModel):
    """Source trip (subset of trips.txt carried through compilation)"""

    trip_id: str = Field(..., min_length=1, description="GTFS trip_id")
    route_id: str = Field("", description="GTFS route_id")
    service_id: str = Field("", description="GTFS service_id")
    shape_id: Optional[str] = Field(None, description="GTFS shape_id")
    trip_headsign: Optional[str] = Field(None, description="Trip headsign")
    direction_id: Optional[int] = Field(None, ge=0, le=1, description="0=outbound, 1=inbound")


class StopTimeRecord(BaseModel):
    """Source stop time (one visit of one trip to one stop)

    Times are kept as given; normalization happens when the fragment is written.
    """

    trip_id: str = Field(..., description="GTFS trip_id")
    stop_id: str = Field(..., description="GTFS stop_id")
    stop_sequence: int = Field(..., ge=0, description="Order of stop in trip")
    arrival_time: str = Field("", description="Arrival time (HH:MM:SS, may be blank)")
    departure_time: str = Field("", description="Departure time (HH:MM:SS, may be blank)")
