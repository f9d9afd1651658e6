"""Overrides import/export

An overrides document is a restriction set kept outside a project. Several
shapes are accepted on import:

- ``{"overrides": {"<slug>": body}}`` (multi-feed file)
- ``{"version": 1, "rules": {...}}`` / ``{"restrictions": {...}}``
- a bare ``{"<trip_id>::<stop_id>": rule}`` map
- an array of ``{trip_id, stop_id, mode, dropoffOnlyFrom?, pickupOnlyTo?}``

Map keys may separate trip and stop with ``::``, ``|``, ``/``, an em-dash,
an en-dash or a hyphen. Entries that do not match the loaded stop times are
counted and skipped, never fatal.
"""

import logging
import re
from typing import Any, Dict, Iterable, List, Optional, Tuple

from gtfs_od.core.config import settings
from gtfs_od.schemas.overrides import OverridesImportReport
from gtfs_od.services.restriction_store import RestrictionStore, make_key, normalize_rule

logger = logging.getLogger(__name__)

KEY_DELIMITERS = ["::", "|", "/", "—", "–", "-"]

# "<trip id> <stop id>" with the stop id as the trailing identifier-looking token
TRAILING_ID_PATTERN = re.compile(r"^(.+?)\s+([A-Za-z0-9._:-]{3,})$")

RULE_BODY_KEYS = ("rules", "restrictions")


def split_key(key: str) -> Tuple[str, str]:
    """Split a composite key into (trip_id, stop_id); ("", "") when it cannot be split"""
    key = str(key)
    for delimiter in KEY_DELIMITERS:
        if delimiter in key:
            parts = key.split(delimiter)
            return parts[0].strip(), parts[1].strip()

    match = TRAILING_ID_PATTERN.match(key)
    if match:
        return match.group(1).strip(), match.group(2).strip()
    return "", ""


def select_overrides_body(document: Any, slug: Optional[str] = None) -> Any:
    """
    Pick the body for one feed out of an overrides document.

    With an ``overrides`` table the exact slug wins; a table holding a single
    slug is used whatever its name; otherwise nothing is selected.
    """
    if not isinstance(document, dict):
        return document

    table = document.get("overrides")
    if not isinstance(table, dict):
        return document

    slug = slug or settings.OVERRIDES_SLUG
    if slug and slug in table:
        return table[slug]
    if len(table) == 1:
        return next(iter(table.values()))
    logger.warning(f"Overrides document has {len(table)} feeds and none matches slug '{slug}'")
    return {}


def extract_rules(body: Any) -> Any:
    """Rule collection of a body: ``rules``, then ``restrictions``, then the body itself"""
    if isinstance(body, dict):
        for name in RULE_BODY_KEYS:
            if name in body and isinstance(body[name], (dict, list)):
                return body[name]
    return body if isinstance(body, (dict, list)) else {}


def _iter_entries(rules: Any) -> Iterable[Tuple[str, str, Any]]:
    """Yield (trip_id, stop_id, raw_rule); unparsable entries yield empty ids"""
    if isinstance(rules, list):
        for row in rules:
            if not isinstance(row, dict):
                yield "", "", None
                continue
            yield str(row.get("trip_id") or "").strip(), str(row.get("stop_id") or "").strip(), row
        return

    if isinstance(rules, dict):
        for key, raw in rules.items():
            trip_id, stop_id = split_key(key)
            yield trip_id, stop_id, raw


def import_overrides(
    document: Any,
    store: RestrictionStore,
    slug: Optional[str] = None,
) -> OverridesImportReport:
    """
    Merge an overrides document into the store, validated against store.index.

    Existing rules are kept unless an imported entry replaces them. Custom OD
    sets are clamped to the trip's stop order on write.
    """
    index = store.index
    rules = extract_rules(select_overrides_body(document, slug))
    report = OverridesImportReport()

    for trip_id, stop_id, raw in _iter_entries(rules):
        report.total += 1
        if not trip_id or not stop_id:
            report.stop_not_found_in_key += 1
            continue
        if not index.has_trip(trip_id):
            report.trip_not_found += 1
            continue
        if not index.has_pair(trip_id, stop_id):
            report.stop_not_on_trip += 1
            continue

        store.set_rule(trip_id, stop_id, normalize_rule(raw))
        report.matched += 1

    logger.info(
        f"Overrides: applied {report.matched}/{report.total} "
        f"(trip not found: {report.trip_not_found}, "
        f"bad key: {report.stop_not_found_in_key}, "
        f"stop not on trip: {report.stop_not_on_trip})"
    )
    return report


def export_overrides(
    store: RestrictionStore,
    slug: Optional[str] = None,
    as_records: bool = False,
) -> Dict[str, Any]:
    """Serialize the store as an overrides document (keyed map or record array)"""
    rules: Any
    if as_records:
        rules = records_from_store(store)
    else:
        rules = {
            make_key(trip_id, stop_id): rule.model_dump(mode="json", by_alias=True, exclude_none=True)
            for (trip_id, stop_id), rule in store.items()
        }

    body = {"version": settings.OVERRIDES_VERSION, "rules": rules}
    if slug:
        return {"overrides": {slug: body}}
    return body


def records_from_store(store: RestrictionStore) -> List[Dict[str, Any]]:
    """Array form of the store (one explicit record per rule)"""
    records = []
    for (trip_id, stop_id), rule in store.items():
        record = {"trip_id": trip_id, "stop_id": stop_id}
        record.update(rule.model_dump(mode="json", by_alias=True, exclude_none=True))
        records.append(record)
    return records
