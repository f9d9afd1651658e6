"""Overrides (standalone restriction file) import/export schemas"""

from typing import Optional, List, Any
from pydantic import BaseModel, Field

from gtfs_od.schemas.gtfs import StopTimeRecord
from gtfs_od.schemas.restriction import RawRestrictionsMap, RestrictionsMap


class OverridesImportReport(BaseModel):
    """Partial-success counters of an overrides import"""

    total: int = Field(0, description="Entries read from the document")
    matched: int = Field(0, description="Entries merged into the restriction map")
    trip_not_found: int = Field(0, description="Entries referencing an unknown trip")
    stop_not_found_in_key: int = Field(0, description="Entries whose key could not be split into trip/stop")
    stop_not_on_trip: int = Field(0, description="Entries whose stop is not visited by the trip")

    @property
    def skipped(self) -> int:
        return self.total - self.matched


class OverridesImportRequest(BaseModel):
    """Import an overrides document against the loaded stop times"""

    document: Optional[Any] = Field(None, description="Overrides JSON: map, record array or {overrides: {slug: ...}}")
    document_text: Optional[str] = Field(None, description="Raw overrides.json text, parsed server-side")
    slug: Optional[str] = Field(None, description="Feed slug to select in a multi-feed document")
    stop_times: List[StopTimeRecord] = Field(default_factory=list)
    restrictions: RawRestrictionsMap = Field(default_factory=dict, description="Current map to merge into")


class OverridesImportResponse(BaseModel):
    restrictions: RestrictionsMap = Field(default_factory=dict)
    report: OverridesImportReport


class OverridesExportRequest(BaseModel):
    restrictions: RawRestrictionsMap = Field(default_factory=dict)
    stop_times: List[StopTimeRecord] = Field(default_factory=list, description="Stop times used to validate custom OD sets")
    slug: Optional[str] = Field(None, description="Wrap the rules under overrides.<slug>")
    as_records: bool = Field(False, description="Emit an array of explicit records instead of a keyed map")
