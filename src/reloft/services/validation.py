# src/reloft/services/validation.py
from __future__ import annotations

import re
from typing import Any, Mapping

from reloft.domain.property import PropertyProfile, UnderwritingInputs

# Intake / export field names that don't map mechanically onto ours
FIELD_ALIASES = {
    "totalBuildingSF": "building_sf",
    "total_building_sf": "building_sf",
    "sqft": "building_sf",
    "typicalFloorSF": "typical_floor_sf",
    "estimatedValue": "acquisition_price",
    "estimated_value": "acquisition_price",
    "acquisition": "acquisition_price",
    "f2f": "floor_to_floor",
    "seismic": "seismic_era",
    "foundation": "foundation_condition",
    "structural": "structural_system",
    "mep": "mep_condition",
    "minWindowDist": "min_window_distance",
    "oneBRRent": "one_br_rent",
    "twoBRRent": "two_br_rent",
    "exitCapRate": "exit_cap_rate_pct",
    "opexRatio": "opex_ratio_pct",
    "affordableRentPct": "affordable_rent_pct",
    "constructionLoanRate": "construction_loan_rate_pct",
    "targetROC": "target_roc_pct",
    "proformaVacancy": "vacancy_pct",
}

_CAMEL = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")

PROFILE_FIELDS = frozenset(PropertyProfile.model_fields)
INPUT_FIELDS = frozenset(UnderwritingInputs.model_fields)


def normalize_key(key: str) -> str:
    if key in FIELD_ALIASES:
        return FIELD_ALIASES[key]
    return _CAMEL.sub("_", key).lower()


def _flatten(raw: Mapping[str, Any]) -> dict[str, Any]:
    """
    Accept either a flat payload or one split into ``profile`` /
    ``underwriting`` sections. Section values win over flat ones.
    """
    flat: dict[str, Any] = {}
    for key, value in raw.items():
        if key in ("profile", "underwriting") and isinstance(value, Mapping):
            continue
        flat[normalize_key(str(key))] = value
    for section in ("profile", "underwriting"):
        nested = raw.get(section)
        if isinstance(nested, Mapping):
            for key, value in nested.items():
                flat[normalize_key(str(key))] = value
    return flat


def prepare_payload(raw: Any) -> tuple[PropertyProfile, UnderwritingInputs]:
    """
    Split a raw screening payload into the validated profile and
    underwriting records.

    Missing or malformed numbers degrade to neutral values inside the
    models; only values that cannot be represented at all (a payload that
    isn't a mapping, a dict where a string belongs) raise ``ValueError``.
    pydantic's ``ValidationError`` is a ``ValueError`` subclass.
    """
    if not isinstance(raw, Mapping):
        raise ValueError(f"Screening payload must be an object, got {type(raw).__name__}")

    flat = _flatten(raw)
    profile_data = {k: v for k, v in flat.items() if k in PROFILE_FIELDS}
    input_data = {k: v for k, v in flat.items() if k in INPUT_FIELDS}

    return PropertyProfile.model_validate(profile_data), UnderwritingInputs.model_validate(input_data)
