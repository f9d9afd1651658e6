"""Pattern group schemas (stop-pattern aggregation for the matrix editor)"""

from enum import Enum
from typing import Optional, List
from pydantic import BaseModel, Field

from gtfs_od.schemas.gtfs import StopTimeRecord, TripRecord
from gtfs_od.schemas.restriction import ODRestriction, RawRestrictionsMap, RestrictionsMap


class PatternGroup(BaseModel):
    """Trips visiting the exact same ordered list of stops"""

    key: str = Field(..., description="Stop ids joined with '>'")
    stop_ids: List[str] = Field(default_factory=list)
    trip_ids: List[str] = Field(default_factory=list)


class SummaryStatus(str, Enum):
    """Outcome of summarizing one stop row"""

    UNIFORM = "uniform"
    MIXED = "mixed"
    EMPTY = "empty"


class RuleSummary(BaseModel):
    """Summary of the rules at one stop across a set of trips"""

    status: SummaryStatus
    rule: Optional[ODRestriction] = Field(None, description="Common rule when status is uniform")

    @property
    def is_uniform(self) -> bool:
        return self.status == SummaryStatus.UNIFORM


class StopPools(BaseModel):
    """Candidate stops for the OD sets of a bulk edit"""

    upstream: List[str] = Field(default_factory=list)
    downstream: List[str] = Field(default_factory=list)


class PatternGroupsRequest(BaseModel):
    trips: List[TripRecord] = Field(default_factory=list)
    stop_times: List[StopTimeRecord] = Field(default_factory=list)


class PatternGroupsResponse(BaseModel):
    groups: List[PatternGroup] = Field(default_factory=list)


class RuleSummaryRequest(BaseModel):
    """Summarize the rule at one stop for a set of trips"""

    trip_ids: List[str] = Field(default_factory=list)
    stop_id: str = Field(..., description="Stop row to summarize")
    stop_times: List[StopTimeRecord] = Field(default_factory=list)
    restrictions: RawRestrictionsMap = Field(default_factory=dict)


class RuleSummaryResponse(BaseModel):
    summary: RuleSummary
    pools: StopPools


class BulkApplyRequest(BaseModel):
    """Write (or clear, when rule is null) one rule at one stop for many trips"""

    trip_ids: List[str] = Field(..., description="Trips of the section being edited")
    stop_id: str = Field(..., description="Stop the rule applies to")
    rule: Optional[ODRestriction] = Field(None, description="Rule to write, null to clear")
    stop_times: List[StopTimeRecord] = Field(default_factory=list)
    restrictions: RawRestrictionsMap = Field(default_factory=dict)


class BulkApplyResult(BaseModel):
    """Counts of a bulk apply"""

    updated: int = Field(0, description="Rules written")
    cleared: int = Field(0, description="Rules removed")


class BulkApplyResponse(BaseModel):
    restrictions: RestrictionsMap = Field(default_factory=dict)
    result: BulkApplyResult
