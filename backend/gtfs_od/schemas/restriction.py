"""OD restriction (per trip/stop boarding rule) schemas"""

from enum import Enum
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from gtfs_od.schemas.gtfs import StopTimeRecord


class RuleMode(str, Enum):
    """Boarding/alighting mode of a single (trip, stop) visit"""

    NORMAL = "normal"
    PICKUP_ONLY = "pickup"
    DROPOFF_ONLY = "dropoff"
    CUSTOM = "custom"


_MODE_VALUES = {m.value for m in RuleMode}


class ODRestriction(BaseModel):
    """Restriction rule stored for one (trip_id, stop_id) pair.

    The OD sets are only meaningful under ``custom``:
    ``dropoff_only_from`` lists upstream stops passengers must have boarded at
    to alight here, ``pickup_only_to`` lists downstream stops passengers
    boarding here may travel to.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    mode: RuleMode = Field(RuleMode.NORMAL, description="normal, pickup, dropoff or custom")
    dropoff_only_from: Optional[List[str]] = Field(
        None,
        alias="dropoffOnlyFrom",
        description="Upstream stop_ids passengers alighting here may come from (custom only)",
    )
    pickup_only_to: Optional[List[str]] = Field(
        None,
        alias="pickupOnlyTo",
        description="Downstream stop_ids passengers boarding here may travel to (custom only)",
    )

    @field_validator("mode", mode="before")
    @classmethod
    def coerce_mode(cls, v):
        """Unknown or missing modes fall back to normal"""
        if isinstance(v, RuleMode):
            return v
        if isinstance(v, str) and v.strip().lower() in _MODE_VALUES:
            return v.strip().lower()
        return RuleMode.NORMAL

    @field_validator("dropoff_only_from", "pickup_only_to", mode="before")
    @classmethod
    def coerce_stop_list(cls, v):
        """Anything but a list is treated as absent; members become strings"""
        if not isinstance(v, (list, tuple)):
            return None
        return [str(x) for x in v if x is not None]


NORMAL_RULE = ODRestriction(mode=RuleMode.NORMAL)


# Wire form of a restriction store: {"<trip_id>::<stop_id>": rule}
RestrictionsMap = Dict[str, ODRestriction]

# Request-side map; values are coerced by normalize_rule on load, so bad records read as normal
RawRestrictionsMap = Dict[str, Any]


class PruneRestrictionsRequest(BaseModel):
    """Drop every rule belonging to deleted trips"""

    restrictions: RawRestrictionsMap = Field(default_factory=dict, description="Current restriction map")
    trip_ids: List[str] = Field(..., description="Deleted trip_ids")
    stop_times: List[StopTimeRecord] = Field(default_factory=list, description="Stop times of the remaining trips")


class PruneRestrictionsResponse(BaseModel):
    """Result of pruning"""

    restrictions: RestrictionsMap = Field(default_factory=dict)
    removed: int = Field(0, description="Number of rules removed")
