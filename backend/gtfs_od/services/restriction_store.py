"""Sparse (trip_id, stop_id) -> restriction rule store"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

from gtfs_od.schemas.restriction import (
    NORMAL_RULE,
    ODRestriction,
    RestrictionsMap,
    RuleMode,
)
from gtfs_od.services.stop_sequence_index import StopSequenceIndex

logger = logging.getLogger(__name__)

KEY_DELIMITER = "::"

RuleKey = Tuple[str, str]


def make_key(trip_id: str, stop_id: str) -> str:
    """Composite map key used on the wire: ``<trip_id>::<stop_id>``"""
    return f"{trip_id}{KEY_DELIMITER}{stop_id}"


def parse_key(key: str) -> Optional[RuleKey]:
    """Inverse of make_key; None when the key has no delimiter or an empty side"""
    if KEY_DELIMITER not in key:
        return None
    trip_id, stop_id = key.split(KEY_DELIMITER, 1)
    trip_id, stop_id = trip_id.strip(), stop_id.strip()
    if not trip_id or not stop_id:
        return None
    return trip_id, stop_id


def normalize_rule(raw: Any) -> ODRestriction:
    """Build a rule from loosely-typed input; anything unusable becomes normal"""
    if isinstance(raw, ODRestriction):
        return raw
    if not isinstance(raw, dict):
        return NORMAL_RULE
    return ODRestriction.model_validate(raw)


def _filter_members(members: Optional[List[str]], allowed: Iterable[str]) -> List[str]:
    allowed_set = set(allowed)
    seen = set()
    out: List[str] = []
    for stop_id in members or []:
        if stop_id in allowed_set and stop_id not in seen:
            seen.add(stop_id)
            out.append(stop_id)
    return out


def clamp_rule(index: StopSequenceIndex, trip_id: str, stop_id: str, rule: ODRestriction) -> ODRestriction:
    """
    Restrict the OD sets of a custom rule to the trip's own stop order.

    dropoff_only_from keeps only stops strictly upstream of stop_id,
    pickup_only_to only stops strictly downstream. Out-of-range members are
    dropped without error. Non-custom rules lose their sets.
    """
    if rule.mode != RuleMode.CUSTOM:
        return ODRestriction(mode=rule.mode)

    return ODRestriction(
        mode=RuleMode.CUSTOM,
        dropoff_only_from=_filter_members(rule.dropoff_only_from, index.upstream_of(trip_id, stop_id)),
        pickup_only_to=_filter_members(rule.pickup_only_to, index.downstream_of(trip_id, stop_id)),
    )


class RestrictionStore:
    """
    Restriction rules keyed by (trip_id, stop_id).

    A missing key means normal service; writing a normal rule deletes the key.
    Custom rules are clamped against the StopSequenceIndex when written;
    rules loaded from an existing map are kept as stored.
    """

    def __init__(self, index: StopSequenceIndex, rules: Optional[Dict[RuleKey, ODRestriction]] = None):
        self.index = index
        self._rules: Dict[RuleKey, ODRestriction] = {}
        for (trip_id, stop_id), rule in (rules or {}).items():
            self.set_rule(trip_id, stop_id, rule)

    @classmethod
    def from_map(cls, restrictions: Dict[str, Any], index: StopSequenceIndex) -> "RestrictionStore":
        """
        Load a ``{"trip::stop": rule}`` map; unparsable keys are skipped.

        The index may only cover part of the feed, so custom OD sets are not
        clamped here.
        """
        store = cls(index)
        for key, raw in (restrictions or {}).items():
            parsed = parse_key(key)
            if parsed is None:
                logger.warning(f"Skipping restriction with malformed key '{key}'")
                continue
            store.load_rule(parsed[0], parsed[1], normalize_rule(raw))
        return store

    def to_map(self) -> RestrictionsMap:
        """Wire form, ordered by key"""
        return {make_key(trip_id, stop_id): rule for (trip_id, stop_id), rule in self.items()}

    def get_rule(self, trip_id: str, stop_id: str) -> ODRestriction:
        return self._rules.get((trip_id, stop_id), NORMAL_RULE)

    def has_rule(self, trip_id: str, stop_id: str) -> bool:
        return (trip_id, stop_id) in self._rules

    def set_rule(self, trip_id: str, stop_id: str, rule: ODRestriction) -> None:
        if rule.mode == RuleMode.NORMAL:
            self.delete_rule(trip_id, stop_id)
            return
        self._rules[(trip_id, stop_id)] = clamp_rule(self.index, trip_id, stop_id, rule)

    def load_rule(self, trip_id: str, stop_id: str, rule: ODRestriction) -> None:
        """Store a rule without clamping; simple modes still drop their sets"""
        if rule.mode == RuleMode.NORMAL:
            self.delete_rule(trip_id, stop_id)
        elif rule.mode == RuleMode.CUSTOM:
            self._rules[(trip_id, stop_id)] = rule
        else:
            self._rules[(trip_id, stop_id)] = ODRestriction(mode=rule.mode)

    def delete_rule(self, trip_id: str, stop_id: str) -> bool:
        """Remove a rule; returns whether one was present"""
        return self._rules.pop((trip_id, stop_id), None) is not None

    def items(self) -> List[Tuple[RuleKey, ODRestriction]]:
        """Rules sorted by (trip_id, stop_id)"""
        return sorted(self._rules.items(), key=lambda kv: kv[0])

    def prune_trips(self, trip_ids: Iterable[str]) -> int:
        """Drop all rules of the given (deleted) trips; returns the number removed"""
        doomed = set(trip_ids)
        keys = [k for k in self._rules if k[0] in doomed]
        for k in keys:
            del self._rules[k]
        if keys:
            logger.info(f"Pruned {len(keys)} restrictions for {len(doomed)} deleted trips")
        return len(keys)

    def count_by_mode(self) -> Dict[str, int]:
        counts = {mode.value: 0 for mode in RuleMode}
        for rule in self._rules.values():
            counts[rule.mode.value] += 1
        return counts

    def __len__(self) -> int:
        return len(self._rules)
