# tests/test_scenarios.py
import pytest

from reloft.analysis.costs import estimate_costs
from reloft.analysis.scenarios import build_scenario_inputs, classify_risk, run_stress_test
from reloft.analysis.unit_yield import estimate_unit_yield
from reloft.domain.assumptions import DEFAULT_ASSUMPTIONS, StressVariant

from fixtures.properties import market_rents, midrise_office


def _stress(profile, inputs, assumptions=DEFAULT_ASSUMPTIONS):
    units = estimate_unit_yield(profile, assumptions)
    cost = estimate_costs(profile, inputs, units, assumptions)
    return run_stress_test(profile, inputs, units, cost, assumptions)


@pytest.mark.parametrize(
    "downside_roc, level",
    [
        (2.5, "high"),
        (2.99, "high"),
        (3.0, "moderate"),
        (4.0, "moderate"),
        (5.0, "moderate"),
        (5.5, "resilient"),
    ],
)
def test_risk_level_from_downside_roc(assumptions, downside_roc, level):
    assert classify_risk(downside_roc, assumptions)[0] == level


def test_downside_inputs_are_perturbed(assumptions):
    inputs = market_rents(exit_cap_rate_pct=5.5)
    down, cost_mult = build_scenario_inputs(inputs, "downside", assumptions)

    assert down.studio_rent == pytest.approx(2200 * 0.90)
    assert down.two_br_rent == pytest.approx(3600 * 0.90)
    assert down.exit_cap_rate_pct == pytest.approx(5.875)
    assert cost_mult == 1.10
    # the caller's inputs are untouched
    assert inputs.studio_rent == 2200

    same, mult = build_scenario_inputs(inputs, "base", assumptions)
    assert same is inputs and mult == 1.0


def test_stress_test_orders_returns():
    result = _stress(midrise_office(), market_rents())

    assert result.downside.return_on_cost < result.base.return_on_cost < result.upside.return_on_cost
    # cost only moves on the downside
    assert result.upside.total_conversion_cost == result.base.total_conversion_cost
    assert result.downside.total_conversion_cost == pytest.approx(result.base.total_conversion_cost * 1.10)
    assert result.risk_level == classify_risk(result.downside.return_on_cost, DEFAULT_ASSUMPTIONS)[0]


def test_base_scenario_matches_plain_proforma():
    result = _stress(midrise_office(), market_rents())
    assert result.base.noi == result.base.effective_gross_income - result.base.operating_expenses
    assert result.base.sensitivity is None


def test_summary_and_frame():
    result = _stress(midrise_office(), market_rents())

    assert result.summary().startswith("Stress test: Base ROC")
    frame = result.to_frame()
    assert list(frame.columns) == ["Downside", "Base", "Upside"]
    assert frame.loc["Return on Cost", "Base"] == pytest.approx(result.base.return_on_cost)
    assert result.assumptions["Rents"] == {"Downside": "-10%", "Base": "Base", "Upside": "+5%"}
    assert result.assumptions["Exit Cap"]["Downside"] == "+37.5bps"


def test_custom_stress_variant():
    harsher = DEFAULT_ASSUMPTIONS.model_copy(
        update={"stress_downside": StressVariant(rent_mult=0.5, cost_mult=1.5, cap_rate_delta=1.0)}
    )
    result = _stress(midrise_office(), market_rents(), harsher)
    default = _stress(midrise_office(), market_rents())

    assert result.downside.return_on_cost < default.downside.return_on_cost
    assert result.base.return_on_cost == pytest.approx(default.base.return_on_cost)
