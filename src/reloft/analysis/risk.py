# src/reloft/analysis/risk.py
from __future__ import annotations

from reloft.domain.assumptions import DEFAULT_ASSUMPTIONS, Assumptions
from reloft.domain.enums import FoundationCondition, SeismicEra, WindowType
from reloft.domain.property import PropertyProfile
from reloft.domain.results import Eligibility, ProFormaResult, RiskDimension, RiskSummary, UnitYieldResult


def construction_points(profile: PropertyProfile) -> int:
    """Weighted count of structural / envelope complications."""
    pts = 0
    if profile.seismic_era is SeismicEra.PRE_1980:
        pts += 3
    elif profile.seismic_era is SeismicEra.ERA_1980_1994:
        pts += 2
    if profile.window_type is WindowType.SEALED:
        pts += 2
    pts += {
        FoundationCondition.POOR: 3,
        FoundationCondition.UNKNOWN: 2,
        FoundationCondition.FAIR: 1,
    }.get(profile.foundation_condition, 0)
    if profile.floorplate_depth > 55:
        pts += 2
    elif profile.floorplate_depth > 45:
        pts += 1
    if profile.stories >= 13:
        pts += 2
    if profile.historic_designation.is_designated:
        pts += 1
    return pts


def entitlement_risk(eligibility: Eligibility) -> RiskDimension:
    if eligibility.status == "eligible":
        return RiskDimension(
            "Low",
            "ARO by-right approval — no public hearing or discretionary review required. "
            "Fastest entitlement path in LA.",
        )
    if eligibility.status == "conditional":
        return RiskDimension(
            "Medium",
            "Conditional ARO eligibility — may require discretionary review. Building age between 5-14 years.",
        )
    return RiskDimension(
        "High",
        "No ARO eligibility — standard discretionary entitlement process with public hearing "
        "and environmental review.",
    )


def construction_risk(points: int, assumptions: Assumptions = DEFAULT_ASSUMPTIONS) -> RiskDimension:
    if points >= assumptions.construction_risk_high_points:
        return RiskDimension(
            "High",
            "Multiple structural/envelope challenges compound construction risk. Detailed engineering "
            "required before committing. Budget generous contingency (15%+).",
        )
    if points >= assumptions.construction_risk_medium_points:
        return RiskDimension(
            "Medium",
            "Moderate construction complexity — some structural or envelope work required but "
            "manageable with experienced contractor.",
        )
    return RiskDimension(
        "Low",
        "Straightforward conversion — building condition and geometry favor efficient construction execution.",
    )


def capital_stack_risk(
    roc: float, units: int, is_historic: bool, assumptions: Assumptions = DEFAULT_ASSUMPTIONS
) -> RiskDimension:
    """Uses the same ROC thresholds as the pro forma verdict."""
    if roc >= assumptions.roc_strong and units >= assumptions.capital_stack_scale_units:
        return RiskDimension(
            "Low",
            "Strong returns and scale attract conventional financing. Multiple lender options "
            "available at competitive terms.",
        )
    if roc >= assumptions.roc_marginal or (is_historic and roc >= assumptions.historic_roc_floor):
        return RiskDimension(
            "Medium",
            "Workable returns but may require structured financing (HTC equity, mezzanine, or "
            "preferred equity) to achieve target returns.",
        )
    return RiskDimension(
        "High",
        "Challenging economics — requires significant incentives (HTC, LIHTC, gap financing) or "
        "acquisition price reduction to achieve viable returns.",
    )


def summarize_risk(
    profile: PropertyProfile,
    eligibility: Eligibility,
    unit_yield: UnitYieldResult,
    proforma: ProFormaResult,
    assumptions: Assumptions = DEFAULT_ASSUMPTIONS,
) -> RiskSummary:
    points = construction_points(profile)
    return RiskSummary(
        entitlement=entitlement_risk(eligibility),
        construction=construction_risk(points, assumptions),
        capital_stack=capital_stack_risk(
            proforma.return_on_cost,
            unit_yield.total_units,
            profile.historic_designation.is_designated,
            assumptions,
        ),
        construction_points=points,
    )
