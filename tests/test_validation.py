# tests/test_validation.py
import pytest

from reloft.domain.enums import SeismicEra, UseType, VacancyBand, Zoning
from reloft.services.screening import screen_property
from reloft.services.validation import normalize_key, prepare_payload

from fixtures.properties import midrise_office_payload


@pytest.mark.parametrize(
    "key, expected",
    [
        ("yearBuilt", "year_built"),
        ("floorplateDepth", "floorplate_depth"),
        ("totalBuildingSF", "building_sf"),
        ("oneBRRent", "one_br_rent"),
        ("estimatedValue", "acquisition_price"),
        ("studio_rent", "studio_rent"),
        ("buildingSF", "building_sf"),
        ("surfaceParking", "surface_parking"),
    ],
)
def test_normalize_key(key, expected):
    assert normalize_key(key) == expected


def test_camel_case_intake_maps_onto_models():
    profile, inputs = prepare_payload(midrise_office_payload())

    assert profile.use_type is UseType.OFFICE
    assert profile.building_sf == 120_000
    assert profile.acquisition_price == 12_000_000
    assert profile.seismic_era is SeismicEra.POST_1994
    assert profile.vacancy_rate is VacancyBand.SIGNIFICANT
    assert profile.zoning is Zoning.C4
    assert profile.loading_dock is True
    assert inputs.one_br_rent == 2800


def test_sectioned_payload_and_section_precedence():
    payload = {
        "address": "1 Main St",
        "studioRent": 1000,
        "profile": {"buildingSF": "80,000", "stories": "6"},
        "underwriting": {"studioRent": "$2,100", "exitCapRate": "6%"},
    }
    profile, inputs = prepare_payload(payload)

    assert profile.address == "1 Main St"
    assert profile.building_sf == 80_000
    assert profile.stories == 6
    assert inputs.studio_rent == 2100
    assert inputs.exit_cap_rate_pct == 6.0


def test_garbage_numbers_degrade_to_neutral_values():
    profile, inputs = prepare_payload(
        {"totalBuildingSF": "n/a", "stories": -3, "vacancy": "", "opexRatio": "", "targetROC": "0"}
    )
    assert profile.building_sf == 0
    assert profile.stories == 0
    assert inputs.opex_ratio_pct == 40.0
    assert inputs.target_roc_pct is None


def test_unknown_keys_are_ignored():
    profile, _ = prepare_payload({"address": "x", "brokerNotes": "call Tuesday"})
    assert profile.address == "x"


@pytest.mark.parametrize("payload", [None, [], "185000", 42])
def test_non_mapping_payload_is_rejected(payload):
    with pytest.raises(ValueError):
        prepare_payload(payload)


def test_unrepresentable_value_is_rejected():
    with pytest.raises(ValueError):
        prepare_payload({"neighborhood": {"name": "Hollywood"}})


@pytest.mark.parametrize("raw", ["inf", "-inf", "Infinity", "1e999", float("inf"), 10**400])
def test_non_finite_numbers_degrade_to_zero(raw):
    profile, inputs = prepare_payload({"totalBuildingSF": raw, "estimatedValue": raw, "studioRent": raw})

    assert profile.building_sf == 0
    assert profile.acquisition_price == 0
    assert inputs.studio_rent == 0


def test_non_finite_intake_screens_without_raising():
    record = screen_property({"building_sf": "inf", "stories": 8, "studio_rent": 2200, "acquisition_price": "1e999"})

    assert record["unit_yield"]["total_units"] == 0
    assert record["proforma"]["return_on_cost"] == 0


@pytest.mark.parametrize(
    "raw, seismic, parking",
    [
        ("maybe", None, False),
        ("?", None, False),
        ("Yes", True, True),
        ("off", False, False),
        (0, False, False),
        (None, None, False),
    ],
)
def test_scope_switches_degrade_to_auto_detect(raw, seismic, parking):
    _, inputs = prepare_payload(
        {"include_seismic": raw, "include_windows": raw, "include_parking_conversion": raw}
    )

    assert inputs.include_seismic is seismic
    assert inputs.include_windows is seismic
    assert inputs.include_parking_conversion is parking


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("Office/Retail", UseType.OFFICE),
        ("Commercial Office", UseType.OFFICE),
        ("Hotel with retail podium", UseType.HOTEL),
        ("Industrial/Retail flex", UseType.INDUSTRIAL),
        ("Retail over parking", UseType.RETAIL),
        ("Parking garage", UseType.PARKING),
        ("Parking Structure", UseType.PARKING),
        ("Church", UseType.OTHER),
        ("", UseType.UNKNOWN),
    ],
)
def test_mixed_use_text_resolves_by_keyword_precedence(raw, expected):
    assert UseType.parse(raw) is expected
