# tests/test_proforma.py
from dataclasses import replace

import pytest

from reloft.analysis.costs import estimate_costs
from reloft.analysis.proforma import (
    VERDICT_CHALLENGING,
    VERDICT_MARGINAL,
    VERDICT_STRONG,
    classify_roc,
    compute_subsidy_gap,
    max_offer,
    retained_office_noi,
    run_full_proforma,
    run_proforma,
)
from reloft.analysis.unit_yield import estimate_unit_yield
from reloft.domain.assumptions import DEFAULT_ASSUMPTIONS
from reloft.domain.property import PropertyProfile, UnderwritingInputs

from fixtures.properties import empty_profile, market_rents, midrise_office


def _run(profile, inputs, full=False):
    a = DEFAULT_ASSUMPTIONS
    units = estimate_unit_yield(profile, a)
    cost = estimate_costs(profile, inputs, units, a)
    fn = run_full_proforma if full else run_proforma
    return fn(profile, inputs, units, cost, a)


@pytest.mark.parametrize(
    "roc, verdict, color",
    [
        (6.5, VERDICT_STRONG, "green"),
        (8.0, VERDICT_STRONG, "green"),
        (6.49, VERDICT_MARGINAL, "amber"),
        (5.0, VERDICT_MARGINAL, "amber"),
        (4.99, VERDICT_CHALLENGING, "red"),
        (0.0, VERDICT_CHALLENGING, "red"),
    ],
)
def test_verdict_thresholds_are_inclusive(assumptions, roc, verdict, color):
    assert classify_roc(roc, assumptions) == (verdict, color)


def test_income_waterfall():
    result = _run(midrise_office(), market_rents())

    # base units 47 / 59 / 26 plus 10 parking-bonus studios
    assert result.total_units == 142
    assert result.studio_gpr == 57 * 2200 * 12
    assert result.gross_potential_rent == 57 * 2200 * 12 + 59 * 2800 * 12 + 26 * 3600 * 12
    assert result.vacancy_loss == 230_520
    assert result.other_income == 138_312
    assert result.noi == result.effective_gross_income - result.operating_expenses
    assert result.profit == result.stabilized_value - result.total_project_cost
    assert result.total_project_cost == result.acquisition_price + result.total_conversion_cost
    assert result.return_on_cost == pytest.approx(result.noi / result.total_project_cost * 100)


def test_affordable_adjustment_reduces_rent():
    market = _run(midrise_office(), market_rents())
    mixed = _run(midrise_office(), market_rents(pct_affordable=20, affordable_rent_pct=60))

    assert mixed.gross_potential_rent == market.gross_potential_rent
    assert mixed.affordable_adjustment == round(market.gross_potential_rent * 0.20 * 0.40)
    assert mixed.noi < market.noi


def test_zero_project_cost_gives_zero_roc():
    result = _run(empty_profile(), UnderwritingInputs())

    assert result.total_project_cost == 0
    assert result.return_on_cost == 0
    assert result.verdict == VERDICT_CHALLENGING


def test_construction_loan_rate_default_and_override():
    default = _run(midrise_office(), market_rents())
    assert default.construction_loan_rate == 7.5
    assert default.ltc_pct == 0.65

    override = _run(midrise_office(), market_rents(construction_loan_rate_pct="9%", loan_structure="HUD 221d4"))
    assert override.construction_loan_rate == 9.0
    assert override.ltc_pct == 0.85
    assert override.annual_carry == override.monthly_interest * 12


def test_historic_block_only_for_historic_conversions():
    standard = _run(midrise_office(), market_rents())
    assert standard.historic is None

    historic = _run(midrise_office(), market_rents(conversion_type="Historic"))
    credits = historic.historic
    assert credits.federal_credit == credits.state_credit
    assert credits.total_credit_equity == credits.federal_credit + credits.state_credit
    assert credits.net_equity == credits.total_credit_equity - credits.bridge_cost
    assert credits.bridge_rate_pct == 8.0


def test_retained_office_noi():
    assert retained_office_noi(0, DEFAULT_ASSUMPTIONS) == 0
    # 60,000 SF x $2.50 x 12, 10% vacancy, 40% opex
    assert retained_office_noi(60_000, DEFAULT_ASSUMPTIONS) == 972_000


def test_partial_conversion_adds_office_noi():
    partial = PropertyProfile.model_validate(
        {**midrise_office().model_dump(), "conversion_scope": "partial", "stories_to_convert": 4}
    )
    result = _run(partial, market_rents())
    assert result.retained_office_noi == 972_000
    assert result.noi == result.residential_noi + 972_000


def test_sensitivity_grid_shape_and_ordering():
    result = _run(midrise_office(), market_rents(), full=True)
    grid = result.sensitivity

    assert grid.columns == ("Acq -20%", "Acq at Ask", "Acq +10%")
    assert [r.cap_rate for r in grid.rows] == ["4.5% cap", "5.0% cap", "5.5% cap", "6.0% cap"]
    cheap, ask, rich = (c.roc for c in grid.rows[0].cells)
    assert cheap > ask > rich
    assert ask == pytest.approx(result.return_on_cost)


def test_capital_scenarios():
    result = _run(midrise_office(), market_rents(), full=True)
    stacks = {s.key: s for s in result.capital_scenarios}

    assert set(stacks) == {"market_rate", "historic_credit", "affordable_100", "mixed_income"}
    assert stacks["historic_credit"].equity_offset > 0
    assert stacks["market_rate"].equity_offset == 0
    assert stacks["affordable_100"].noi < stacks["mixed_income"].noi < stacks["market_rate"].noi


def test_subsidy_gap():
    base = _run(midrise_office(), market_rents())
    short = replace(base, noi=600_000, total_project_cost=12_000_000, total_units=100)

    gap = compute_subsidy_gap(short, 6.5)
    assert gap.current_roc == pytest.approx(5.0)
    assert gap.required_cost == pytest.approx(600_000 / 0.065)
    assert gap.gap == pytest.approx(12_000_000 - 600_000 / 0.065)
    assert gap.per_unit == pytest.approx(gap.gap / 100)
    assert not gap.meets_target

    rich = replace(short, noi=1_200_000)
    assert compute_subsidy_gap(rich, 6.5).gap == 0
    assert compute_subsidy_gap(rich, 6.5).meets_target

    no_units = replace(short, total_units=0)
    assert compute_subsidy_gap(no_units, 6.5).per_unit == 0


def test_max_offer_notes():
    base = _run(midrise_office(), market_rents())
    deal = replace(base, noi=1_000_000, total_conversion_cost=5_000_000, acquisition_price=8_000_000)

    offer = max_offer(deal, 6.5)
    assert offer.max_offer == pytest.approx(1_000_000 / 0.065 - 5_000_000)
    assert "at or below max offer" in offer.note

    pricey = max_offer(replace(deal, acquisition_price=12_000_000), 6.5)
    assert "exceeds max offer" in pricey.note

    underwater = max_offer(replace(deal, noi=0), 6.5)
    assert "No positive NOI" in underwater.note
