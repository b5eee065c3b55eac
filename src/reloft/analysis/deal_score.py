# src/reloft/analysis/deal_score.py
"""
Composite 0-100 deal score.

Six independently capped components, each carrying the sentence that
justifies it. Reports and IC memos render the reasons, so every branch
must produce one.
"""
from __future__ import annotations

from typing import Optional

from reloft.domain.assumptions import DEFAULT_ASSUMPTIONS, Assumptions
from reloft.domain.money import whole
from reloft.domain.results import (
    CostEstimate,
    DealScore,
    Eligibility,
    PhysicalAssessment,
    ProFormaResult,
    ScoreComponent,
    SubsidyGap,
    UnitYieldResult,
)

BAND_COMMENTARY = {
    "A": "IC-Ready — strong across all dimensions",
    "B": "Watchlist — viable with right structure or price",
    "C": "Long-Shot — significant challenges to solve first",
}


def _money(n: float) -> str:
    return f"${whole(n):,}"


def score_eligibility(
    eligibility: Optional[Eligibility], assumptions: Assumptions = DEFAULT_ASSUMPTIONS
) -> ScoreComponent:
    full, partial = assumptions.deal_eligibility_points
    status = eligibility.status if eligibility else None
    if status == "eligible":
        return ScoreComponent(
            "ARO Eligibility", full, full, "positive", "By-right eligible — no discretionary review required."
        )
    if status == "conditional":
        return ScoreComponent(
            "ARO Eligibility", partial, full, "neutral", "Conditional eligibility — may require discretionary review."
        )
    return ScoreComponent(
        "ARO Eligibility", 0, full, "negative", "Not ARO eligible — standard entitlement process required."
    )


def score_physical(
    physical: Optional[PhysicalAssessment], assumptions: Assumptions = DEFAULT_ASSUMPTIONS
) -> ScoreComponent:
    if physical is None or physical.total <= 0:
        return ScoreComponent("Physical Score", 0, 20, "neutral", "Physical assessment not available.")
    strong, moderate = assumptions.deal_physical_tiers
    pts = whole(physical.total / 100 * 20)
    if pts >= strong:
        return ScoreComponent(
            "Physical Score", pts, 20, "positive",
            "Strong physical candidate — favorable geometry and building condition.",
        )
    if pts >= moderate:
        return ScoreComponent(
            "Physical Score", pts, 20, "neutral",
            "Moderate physical feasibility — some design intervention needed.",
        )
    return ScoreComponent(
        "Physical Score", pts, 20, "negative",
        "Challenging physical profile — significant renovation required.",
    )


def score_unit_yield(units: int, assumptions: Assumptions = DEFAULT_ASSUMPTIONS) -> ScoreComponent:
    (big, big_pts), (mid, mid_pts), (small, small_pts) = assumptions.deal_unit_tiers
    if units >= big:
        return ScoreComponent(
            "Unit Yield", big_pts, big_pts, "positive", f"{units} units — institutional scale, strong lender appetite."
        )
    if units >= mid:
        return ScoreComponent(
            "Unit Yield", mid_pts, big_pts, "positive", f"{units} units — good scale for conventional financing."
        )
    if units >= small:
        return ScoreComponent(
            "Unit Yield", small_pts, big_pts, "negative",
            f"{units} units — below {mid} units, per-unit costs rise, lender appetite narrows.",
        )
    if units > 0:
        return ScoreComponent(
            "Unit Yield", 0, big_pts, "negative", f"{units} units — very low count limits financing options."
        )
    return ScoreComponent("Unit Yield", 0, big_pts, "neutral", "Unit yield not calculated.")


_COST_NOTES = (
    ("positive", "excellent cost efficiency."),
    ("positive", "competitive conversion cost."),
    ("neutral", "above average, monitor closely."),
)


def score_cost_efficiency(cost_per_unit_mid: float, assumptions: Assumptions = DEFAULT_ASSUMPTIONS) -> ScoreComponent:
    cpu = cost_per_unit_mid
    tiers = assumptions.deal_cost_tiers
    top = tiers[0][1]
    if cpu <= 0:
        return ScoreComponent("Cost Efficiency", 0, top, "neutral", "Cost data not available.")
    for (ceiling, pts), (sentiment, note) in zip(tiers, _COST_NOTES):
        if cpu <= ceiling:
            return ScoreComponent("Cost Efficiency", pts, top, sentiment, f"{_money(cpu)}/unit — {note}")
    return ScoreComponent(
        "Cost Efficiency", assumptions.deal_cost_floor_points, top, "negative",
        f"{_money(cpu)}/unit — high cost, may need value engineering.",
    )


def score_return_on_cost(roc: float, assumptions: Assumptions = DEFAULT_ASSUMPTIONS) -> ScoreComponent:
    """
    Tiers sit at fixed offsets from ``roc_strong`` so the score, the pro
    forma verdict and the capital-stack risk share one target.
    """
    target = assumptions.roc_strong
    notes = (
        ("positive", "strong returns, well above target."),
        ("positive", f"meets {target:.1f}% target, no subsidy needed."),
        ("neutral", "below target, structured capital may help."),
        ("negative", "marginal returns, requires incentives or price reduction."),
    )
    top = assumptions.deal_roc_tiers[0][1]
    if roc <= 0:
        return ScoreComponent("Return on Cost", 0, top, "neutral", "Pro forma not available.")
    for (offset, pts), (sentiment, note) in zip(assumptions.deal_roc_tiers, notes):
        if roc >= target + offset:
            return ScoreComponent("Return on Cost", pts, top, sentiment, f"{roc:.1f}% ROC — {note}")
    return ScoreComponent("Return on Cost", 0, top, "negative", f"{roc:.1f}% ROC — challenging economics.")


_GAP_NOTES = (
    ("negative", "large subsidy required."),
    ("negative", "moderate incentive needed."),
    ("neutral", "small subsidy may be needed."),
)


def score_subsidy_gap(per_unit: float, assumptions: Assumptions = DEFAULT_ASSUMPTIONS) -> ScoreComponent:
    gap = max(0.0, per_unit)
    for (floor, pts), (sentiment, note) in zip(assumptions.deal_gap_tiers, _GAP_NOTES):
        if gap > floor:
            return ScoreComponent("Subsidy Gap", pts, 0, sentiment, f"{_money(gap)}/unit gap — {note}")
    return ScoreComponent("Subsidy Gap", 0, 0, "neutral", "No gap — project self-sufficient at target ROC.")


def band_for(score: int, assumptions: Assumptions) -> str:
    if score >= assumptions.band_a_min:
        return "A"
    if score >= assumptions.band_b_min:
        return "B"
    return "C"


def compute_deal_score(
    eligibility: Optional[Eligibility],
    physical: Optional[PhysicalAssessment],
    unit_yield: Optional[UnitYieldResult],
    cost: Optional[CostEstimate],
    proforma: Optional[ProFormaResult],
    subsidy_gap: Optional[SubsidyGap],
    assumptions: Assumptions,
) -> DealScore:
    """
    Missing upstream results score as zero-point neutral components rather
    than failing the whole score.
    """
    units = unit_yield.total_units if unit_yield else 0
    cpu_mid = whole((cost.cost_per_unit.low + cost.cost_per_unit.high) / 2) if cost else 0
    roc = proforma.return_on_cost if proforma else 0.0
    gap_per_unit = subsidy_gap.per_unit if subsidy_gap else 0.0

    components = (
        score_eligibility(eligibility, assumptions),
        score_physical(physical, assumptions),
        score_unit_yield(units, assumptions),
        score_cost_efficiency(cpu_mid, assumptions),
        score_return_on_cost(roc, assumptions),
        score_subsidy_gap(gap_per_unit, assumptions),
    )
    score = max(0, min(100, sum(c.contribution for c in components)))
    band = band_for(score, assumptions)

    return DealScore(
        score=score,
        band=band,
        commentary=BAND_COMMENTARY[band],
        components=components,
        eligibility=eligibility,
        subsidy_gap=subsidy_gap,
    )
