# src/reloft/analysis/proforma.py
"""
Back-of-envelope stabilized pro forma for a conversion.

Income waterfall: GPR -> affordable adjustment -> vacancy / other income
-> EGI -> opex -> residential NOI (+ retained office NOI on partial
conversions). Valuation is NOI / exit cap; return on cost is NOI over
acquisition plus the cost estimate midpoint.
"""
from __future__ import annotations

from dataclasses import replace
from typing import Optional

import numpy as np

from reloft.domain.assumptions import Assumptions, CapitalStackPreset
from reloft.domain.enums import ConversionType
from reloft.domain.money import fmt_money, safe_div, whole
from reloft.domain.property import PropertyProfile, UnderwritingInputs
from reloft.domain.results import (
    CapitalScenarioResult,
    Color,
    CostEstimate,
    HistoricCredits,
    MaxOffer,
    ProFormaResult,
    SensitivityCell,
    SensitivityRow,
    SensitivityTable,
    SubsidyGap,
    UnitYieldResult,
)

VERDICT_STRONG = "Strong Returns — Viable Project"
VERDICT_MARGINAL = "Marginal Returns — Needs Incentives or Lower Acquisition"
VERDICT_CHALLENGING = "Challenging Economics — HTC/Subsidies or Price Reduction Required"


def classify_roc(roc: float, assumptions: Assumptions) -> tuple[str, Color]:
    """
    Verdict shared by the pro forma, the sensitivity grid and the stress
    test. Thresholds are inclusive: exactly ``roc_strong`` is strong.
    """
    if roc >= assumptions.roc_strong:
        return VERDICT_STRONG, "green"
    if roc >= assumptions.roc_marginal:
        return VERDICT_MARGINAL, "amber"
    return VERDICT_CHALLENGING, "red"


def retained_office_noi(retained_sf: float, assumptions: Assumptions) -> int:
    if retained_sf <= 0:
        return 0
    gross = retained_sf * assumptions.retained_office_rent_psf_month * 12
    egi = gross * (1 - assumptions.retained_office_vacancy)
    return whole(egi * (1 - assumptions.retained_office_opex))


def historic_credits(cost: CostEstimate, assumptions: Assumptions) -> HistoricCredits:
    """
    Federal + California HTC on the low hard-cost estimate (QRE), less the
    carry on a bridge loan advanced against the credits during construction.
    """
    qre = cost.hard_cost.low
    federal = whole(qre * assumptions.htc_federal_rate)
    state = whole(qre * assumptions.htc_state_rate)
    total = federal + state
    bridge = whole(total * assumptions.htc_bridge_advance)
    bridge_cost = whole(bridge * assumptions.htc_bridge_rate_pct / 100 * assumptions.htc_bridge_years)
    return HistoricCredits(
        qre=qre,
        federal_credit=federal,
        state_credit=state,
        total_credit_equity=total,
        bridge_loan=bridge,
        bridge_rate_pct=assumptions.htc_bridge_rate_pct,
        bridge_cost=bridge_cost,
        net_equity=total - bridge_cost,
    )


def run_proforma(
    profile: PropertyProfile,
    inputs: UnderwritingInputs,
    unit_yield: UnitYieldResult,
    cost: CostEstimate,
    assumptions: Assumptions,
) -> ProFormaResult:
    base = unit_yield.base
    bonus = unit_yield.parking_bonus_units
    total_units = base.studio.units + base.one_br.units + base.two_br.units + bonus

    # parking bonus units lease as studios
    studio_gpr = (base.studio.units + bonus) * inputs.studio_rent * 12
    one_gpr = base.one_br.units * inputs.one_br_rent * 12
    two_gpr = base.two_br.units * inputs.two_br_rent * 12
    gpr = studio_gpr + one_gpr + two_gpr

    affordable_adj = 0
    if inputs.pct_affordable > 0:
        reduction = 1 - inputs.affordable_rent_pct / 100
        affordable_adj = whole(gpr * (inputs.pct_affordable / 100) * reduction)
    net_gpr = gpr - affordable_adj

    vacancy_loss = whole(net_gpr * inputs.vacancy_pct / 100)
    other_income = whole(net_gpr * assumptions.other_income_pct)
    egi = net_gpr - vacancy_loss + other_income

    opex = whole(egi * inputs.opex_ratio_pct / 100)
    residential_noi = egi - opex
    retained_sf = profile.retained_sf
    office_noi = retained_office_noi(retained_sf, assumptions)
    noi = residential_noi + office_noi

    cap = inputs.exit_cap_rate_pct
    stabilized_value = whole(noi / (cap / 100)) if cap > 0 else 0

    conversion_cost = cost.midpoint
    acquisition = profile.acquisition_price
    tpc = acquisition + conversion_cost
    roc = safe_div(noi, tpc) * 100 if tpc > 0 else 0.0

    ltc = assumptions.loan_ltc.get(inputs.loan_structure, 0.65)
    rate = inputs.construction_loan_rate_pct or assumptions.construction_loan_rate_pct
    loan = whole(tpc * ltc)
    monthly_interest = whole(loan * (rate / 100) / 12)

    historic: Optional[HistoricCredits] = None
    if inputs.conversion_type is ConversionType.HISTORIC:
        historic = historic_credits(cost, assumptions)

    verdict, color = classify_roc(roc, assumptions)

    return ProFormaResult(
        studio_gpr=studio_gpr,
        one_br_gpr=one_gpr,
        two_br_gpr=two_gpr,
        gross_potential_rent=gpr,
        affordable_adjustment=affordable_adj,
        vacancy_loss=vacancy_loss,
        other_income=other_income,
        effective_gross_income=egi,
        operating_expenses=opex,
        residential_noi=residential_noi,
        retained_office_noi=office_noi,
        retained_sf=retained_sf,
        noi=noi,
        exit_cap_rate=cap,
        stabilized_value=stabilized_value,
        acquisition_price=acquisition,
        total_conversion_cost=conversion_cost,
        total_project_cost=tpc,
        profit=stabilized_value - tpc,
        return_on_cost=roc,
        loan_structure=inputs.loan_structure.value,
        ltc_pct=ltc,
        loan_amount=loan,
        construction_loan_rate=rate,
        monthly_interest=monthly_interest,
        annual_carry=monthly_interest * 12,
        total_units=total_units,
        verdict=verdict,
        verdict_color=color,
        historic=historic,
    )


# =====================================================================
# Sensitivity grid
# =====================================================================


def sensitivity_grid(result: ProFormaResult, assumptions: Assumptions) -> SensitivityTable:
    """
    ROC across exit cap rates x acquisition price adjustments.

    ROC is NOI over cost, so rows only differ by their cap-rate label; the
    acquisition columns carry the signal.
    """
    labels = [label for label, _ in assumptions.sensitivity_acquisition]
    mults = np.array([mult for _, mult in assumptions.sensitivity_acquisition], dtype=float)
    caps = np.array(assumptions.sensitivity_cap_rates, dtype=float)

    adj_acq = np.floor(result.acquisition_price * mults + 0.5)
    tpc = adj_acq + result.total_conversion_cost
    roc_row = np.divide(result.noi * 100.0, tpc, out=np.zeros_like(tpc), where=tpc > 0)
    grid = np.broadcast_to(roc_row, (caps.size, mults.size))

    rows = []
    for cap, roc_values in zip(caps, grid):
        cells = []
        for roc in roc_values:
            _, color = classify_roc(float(roc), assumptions)
            cells.append(SensitivityCell(roc=float(roc), value=f"{roc:.1f}%", color=color))
        rows.append(SensitivityRow(cap_rate=f"{cap:.1f}% cap", cells=tuple(cells)))

    return SensitivityTable(columns=tuple(labels), rows=tuple(rows))


# =====================================================================
# Capital stack scenarios
# =====================================================================


def _stack_rent_mult(preset: CapitalStackPreset, assumptions: Assumptions) -> float:
    if preset.rent_mult is not None:
        return preset.rent_mult
    share = assumptions.mixed_income_market_share
    return share * 1.0 + (1 - share) * assumptions.mixed_income_affordable_rent_mult


def run_capital_scenario(
    key: str,
    profile: PropertyProfile,
    inputs: UnderwritingInputs,
    unit_yield: UnitYieldResult,
    cost: CostEstimate,
    assumptions: Assumptions,
) -> CapitalScenarioResult:
    preset = assumptions.capital_stacks[key]

    hard = whole(cost.hard_cost.low * preset.hard_cost_mult)
    ratio = hard / cost.hard_cost.low if cost.hard_cost.low > 0 else 1.0
    total_cost = profile.acquisition_price + whole(cost.midpoint * ratio)

    mult = _stack_rent_mult(preset, assumptions)
    base = unit_yield.base
    gross = (
        (base.studio.units + unit_yield.parking_bonus_units) * whole(inputs.studio_rent * mult)
        + base.one_br.units * whole(inputs.one_br_rent * mult)
        + base.two_br.units * whole(inputs.two_br_rent * mult)
    ) * 12
    vacancy = whole(gross * inputs.vacancy_pct / 100)
    other = whole(gross * assumptions.other_income_pct)
    egi = gross - vacancy + other
    noi = egi - whole(egi * inputs.opex_ratio_pct / 100)

    offset = 0
    if preset.htc_qre_share > 0:
        qre = whole(hard * preset.htc_qre_share)
        offset = whole(qre * assumptions.htc_federal_rate) + whole(qre * assumptions.htc_state_rate)

    effective = total_cost - offset
    return CapitalScenarioResult(
        key=key,
        label=preset.label,
        hard_cost=hard,
        total_cost=total_cost,
        noi=noi,
        equity_offset=offset,
        effective_cost=effective,
        roc=noi / effective * 100 if effective > 0 else 0.0,
        ltc=preset.ltc,
    )


def run_capital_scenarios(
    profile: PropertyProfile,
    inputs: UnderwritingInputs,
    unit_yield: UnitYieldResult,
    cost: CostEstimate,
    assumptions: Assumptions,
) -> tuple[CapitalScenarioResult, ...]:
    return tuple(
        run_capital_scenario(key, profile, inputs, unit_yield, cost, assumptions)
        for key in assumptions.capital_stacks
    )


# =====================================================================
# Subsidy gap / max offer
# =====================================================================


def compute_subsidy_gap(result: ProFormaResult, target_roc: float) -> SubsidyGap:
    """
    Shortfall between the actual project cost and the most the NOI can
    carry at ``target_roc``. Gap and per-unit gap never go negative.
    """
    current = safe_div(result.noi, result.total_project_cost) * 100
    required = result.noi / (target_roc / 100) if target_roc > 0 else 0.0
    gap = result.total_project_cost - required
    per_unit = gap / result.total_units if result.total_units > 0 else 0.0
    return SubsidyGap(
        current_roc=current,
        target_roc=target_roc,
        required_cost=required,
        gap=max(0.0, gap),
        per_unit=max(0.0, per_unit),
        meets_target=current >= target_roc,
    )


def max_offer(result: ProFormaResult, target_roc: float) -> MaxOffer:
    max_total = result.noi / (target_roc / 100) if target_roc > 0 else 0.0
    offer = max_total - result.total_conversion_cost
    ask = result.acquisition_price

    if result.noi <= 0 or target_roc <= 0:
        note = "No positive NOI — max offer cannot be supported at any price."
    elif offer <= 0:
        note = "Negative — conversion cost exceeds viable total cost"
    elif ask <= 0:
        note = f"Max supportable acquisition at {target_roc:.1f}% ROC is {fmt_money(offer)}."
    elif offer >= ask:
        note = f"Current ask ({fmt_money(ask)}) is at or below max offer — deal pencils at target ROC."
    else:
        note = (
            f"Current ask ({fmt_money(ask)}) exceeds max offer by {fmt_money(ask - offer)} "
            "— negotiate down or seek subsidy."
        )

    return MaxOffer(
        target_roc=target_roc,
        max_total_cost=max_total,
        conversion_cost=result.total_conversion_cost,
        max_offer=offer,
        acquisition_price=ask,
        note=note,
    )


def target_roc_for(inputs: UnderwritingInputs, assumptions: Assumptions) -> float:
    return inputs.target_roc_pct or assumptions.target_roc_pct


def run_full_proforma(
    profile: PropertyProfile,
    inputs: UnderwritingInputs,
    unit_yield: UnitYieldResult,
    cost: CostEstimate,
    assumptions: Assumptions,
) -> ProFormaResult:
    """
    Base-case pro forma with the analyst extras attached (sensitivity grid,
    capital stacks, subsidy gap, max offer).
    """
    result = run_proforma(profile, inputs, unit_yield, cost, assumptions)
    target = target_roc_for(inputs, assumptions)
    return replace(
        result,
        sensitivity=sensitivity_grid(result, assumptions),
        capital_scenarios=run_capital_scenarios(profile, inputs, unit_yield, cost, assumptions),
        subsidy_gap=compute_subsidy_gap(result, target),
        max_offer=max_offer(result, target),
    )
