# tests/test_costs.py
import pytest
from hypothesis import given, settings, strategies as st

from reloft.analysis.costs import estimate_costs, scale_costs, transfer_tax
from reloft.analysis.unit_yield import estimate_unit_yield
from reloft.domain.assumptions import DEFAULT_ASSUMPTIONS
from reloft.domain.money import whole
from reloft.domain.property import PropertyProfile, UnderwritingInputs

from fixtures.properties import deep_sealed_tower, empty_profile, market_rents, midrise_office


def _estimate(profile, inputs=None, assumptions=None):
    assumptions = assumptions or DEFAULT_ASSUMPTIONS
    inputs = inputs or market_rents()
    return estimate_costs(profile, inputs, estimate_unit_yield(profile, assumptions), assumptions)


def test_midrise_base_hard_cost_and_fees():
    cost = _estimate(midrise_office())

    assert cost.building_class == "Office Mid Rise"
    assert (cost.hard_cost.low, cost.hard_cost.high) == (19_200_000, 28_800_000)
    assert cost.linkage_fee == 2_589_600
    assert cost.permits.low == 576_000 + 2_589_600
    # post-1994, operable windows, good foundation: no adders
    assert not cost.seismic.included
    assert not cost.windows.included
    assert not cost.foundation.included
    assert cost.total_hard_cost.low == cost.hard_cost.low
    assert cost.warnings == ()


def test_totals_are_sums_of_rounded_lines():
    cost = _estimate(deep_sealed_tower())

    lines = (cost.hard_cost, cost.seismic, cost.windows, cost.parking_conversion, cost.foundation)
    assert cost.total_hard_cost.low == sum(line.low for line in lines)
    assert cost.total_hard_cost.high == sum(line.high for line in lines)

    soft = (cost.ae, cost.permits, cost.contingency, cost.financing)
    assert cost.total_project_cost.low == cost.total_hard_cost.low + sum(line.low for line in soft)
    assert cost.total_project_cost.high == cost.total_hard_cost.high + sum(line.high for line in soft)
    assert cost.midpoint == whole((cost.total_project_cost.low + cost.total_project_cost.high) / 2)


def test_profile_driven_scope_defaults():
    cost = _estimate(deep_sealed_tower())

    assert cost.seismic.included and cost.seismic.low == 185_000 * 25
    assert cost.windows.included and cost.windows.low > 0
    assert cost.foundation.warning_color == "red"
    assert len(cost.warnings) == 1


def test_explicit_inputs_override_scope_defaults():
    cost = _estimate(deep_sealed_tower(), market_rents(include_seismic=False, include_windows="false"))
    assert not cost.seismic.included
    assert cost.seismic.low == cost.seismic.high == 0
    assert not cost.windows.included


def test_unknown_foundation_is_zero_cost_with_amber_warning():
    cost = _estimate(PropertyProfile(building_sf=50_000, stories=4))

    assert (cost.foundation.low, cost.foundation.high) == (0, 0)
    assert cost.foundation.warning_color == "amber"
    assert "contingency" in cost.foundation.warning


def test_fair_foundation_is_budgeted():
    cost = _estimate(PropertyProfile(building_sf=50_000, stories=4, foundation_condition="Fair"))
    assert cost.foundation.included
    assert (cost.foundation.low, cost.foundation.high) == (400_000, 750_000)
    assert cost.foundation.warning is None


def test_parking_conversion_defaults_to_bonus_units():
    profile = midrise_office()
    cost = _estimate(profile, market_rents(include_parking_conversion=True))

    # 10 bonus units x 550 SF x $85-120
    assert (cost.parking_conversion.low, cost.parking_conversion.high) == (467_500, 660_000)

    explicit = _estimate(profile, market_rents(include_parking_conversion=True, parking_conversion_units=4))
    assert explicit.parking_conversion.low == 4 * 550 * 85


def test_zero_units_and_zero_sf_do_not_divide_by_zero():
    cost = _estimate(empty_profile(), UnderwritingInputs())

    assert cost.total_units == 0
    assert (cost.cost_per_unit.low, cost.cost_per_unit.high) == (0, 0)
    assert (cost.cost_per_rsf.low, cost.cost_per_rsf.high) == (0, 0)


@pytest.mark.parametrize(
    "price, low, high, applicable",
    [
        (4_999_999, 0, 0, False),
        (7_000_000, 280_000, 280_000, True),
        (20_000_000, 800_000, 1_100_000, True),
    ],
)
def test_transfer_tax_tiers(assumptions, price, low, high, applicable):
    tax = transfer_tax(price, assumptions)
    assert (tax.low, tax.high, tax.applicable) == (low, high, applicable)


def test_scale_costs_moves_totals_only():
    cost = _estimate(midrise_office())
    scaled = scale_costs(cost, 1.10)

    assert scaled.midpoint == pytest.approx(cost.midpoint * 1.10)
    assert scaled.total_project_cost.high == pytest.approx(cost.total_project_cost.high * 1.10)
    assert scaled.hard_cost == cost.hard_cost
    assert scale_costs(cost, 1.0) is cost


@settings(max_examples=60, deadline=None)
@given(
    building_sf=st.floats(min_value=0, max_value=2_000_000, allow_nan=False),
    stories=st.integers(min_value=0, max_value=60),
    use_type=st.sampled_from(["Office", "Hotel", "Warehouse", "Retail", "Parking Structure", "", "Church"]),
    seismic=st.sampled_from(["Pre-1980", "1980-1994", "Post-1994", "Unknown"]),
    foundation=st.sampled_from(["Good", "Fair", "Poor", "Unknown"]),
    conversion_type=st.sampled_from(["Standard", "Historic", "Affordable", "Mixed", "Creative"]),
    quality=st.sampled_from(["Standard", "Premium", "Luxury"]),
    windows=st.sampled_from([None, True, False]),
)
def test_cost_ranges_are_monotonic(building_sf, stories, use_type, seismic, foundation, conversion_type, quality, windows):
    profile = PropertyProfile(
        building_sf=building_sf,
        stories=stories,
        use_type=use_type,
        seismic_era=seismic,
        foundation_condition=foundation,
    )
    inputs = UnderwritingInputs(conversion_type=conversion_type, quality_level=quality, include_windows=windows)
    cost = _estimate(profile, inputs)

    assert cost.total_hard_cost.low <= cost.total_hard_cost.high
    assert cost.total_project_cost.low <= cost.total_project_cost.high
    assert cost.cost_per_unit.low <= cost.cost_per_unit.high
    assert cost.cost_per_rsf.low <= cost.cost_per_rsf.high
