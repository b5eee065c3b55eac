# tests/test_risk.py
import pytest

from reloft.analysis.eligibility import assess_eligibility
from reloft.analysis.risk import capital_stack_risk, construction_points, construction_risk, summarize_risk
from reloft.domain.assumptions import DEFAULT_ASSUMPTIONS
from reloft.pipelines.core import run_pipeline
from reloft.services.screening import screen_property

from fixtures.properties import deep_sealed_tower, market_rents, midrise_office, midrise_office_payload


def test_construction_points_accumulate():
    # pre-1980 3, sealed 2, poor foundation 3, depth 90 2, 16 stories 2, designated 1
    assert construction_points(deep_sealed_tower()) == 13
    assert construction_points(midrise_office()) == 0


@pytest.mark.parametrize("points, level", [(0, "Low"), (3, "Low"), (4, "Medium"), (6, "Medium"), (7, "High")])
def test_construction_risk_levels(points, level):
    assert construction_risk(points).level == level


@pytest.mark.parametrize(
    "roc, units, historic, level",
    [
        (7.0, 80, False, "Low"),
        (7.0, 40, False, "Medium"),
        (5.0, 10, False, "Medium"),
        (4.2, 10, True, "Medium"),
        (4.2, 10, False, "High"),
    ],
)
def test_capital_stack_risk(roc, units, historic, level):
    assert capital_stack_risk(roc, units, historic).level == level


def test_summary_from_pipeline(assumptions):
    ctx = run_pipeline(midrise_office(), market_rents(), assumptions)
    summary = summarize_risk(
        ctx.profile, assess_eligibility(ctx.profile, assumptions), ctx.unit_yield, ctx.proforma, assumptions
    )

    assert summary.entitlement.level == "Low"
    assert summary.construction.level == "Low"
    assert summary.construction_points == 0


def test_thresholds_come_from_assumptions():
    looser = DEFAULT_ASSUMPTIONS.model_copy(
        update={
            "construction_risk_high_points": 14,
            "construction_risk_medium_points": 10,
            "capital_stack_scale_units": 10,
            "historic_roc_floor": 3.0,
        }
    )
    assert construction_risk(13, looser).level == "Medium"
    assert construction_risk(9, looser).level == "Low"
    assert capital_stack_risk(7.0, 12, False, looser).level == "Low"
    assert capital_stack_risk(3.5, 12, True, looser).level == "Medium"


@pytest.mark.parametrize(
    "strong, marginal, color, capital, roc_points, roc_reason",
    [
        (50.0, 40.0, "red", "High", 0, "challenging economics"),
        (5.0, 4.0, "green", "Low", 25, "well above target"),
    ],
)
def test_overridden_roc_thresholds_agree_across_components(strong, marginal, color, capital, roc_points, roc_reason):
    thresholds = DEFAULT_ASSUMPTIONS.model_copy(update={"roc_strong": strong, "roc_marginal": marginal})
    record = screen_property(midrise_office_payload(), thresholds)
    roc_component = next(c for c in record["deal_score"]["components"] if c["name"] == "Return on Cost")

    assert record["proforma"]["verdict_color"] == color
    assert record["risk"]["capital_stack"]["level"] == capital
    assert roc_component["contribution"] == roc_points
    assert roc_reason in roc_component["reason"]
