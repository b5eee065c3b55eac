# src/reloft/analysis/scenarios.py
from __future__ import annotations

from typing import Literal

from reloft.analysis.costs import scale_costs
from reloft.analysis.proforma import run_proforma
from reloft.domain.assumptions import Assumptions, StressVariant
from reloft.domain.property import PropertyProfile, UnderwritingInputs
from reloft.domain.results import CostEstimate, ProFormaResult, RiskLevel, ScenarioSet, UnitYieldResult

Variant = Literal["base", "downside", "upside"]

RISK_TEXT: dict[str, str] = {
    "high": (
        "High Downside Risk — project does not survive a 10% rent correction. "
        "Significant margin of safety required."
    ),
    "moderate": "Moderate Downside Risk — project survives stress but returns compress materially.",
    "resilient": "Resilient — project maintains acceptable returns under stress assumptions.",
}


def _variant(name: Variant, assumptions: Assumptions) -> StressVariant | None:
    if name == "downside":
        return assumptions.stress_downside
    if name == "upside":
        return assumptions.stress_upside
    return None


def build_scenario_inputs(
    inputs: UnderwritingInputs,
    variant: Variant,
    assumptions: Assumptions,
) -> tuple[UnderwritingInputs, float]:
    """
    Perturbed underwriting inputs plus the cost multiplier for ``variant``.

    Rents are scaled without rounding; the exit cap shifts by whole
    percentage points (0.375 == 37.5 bps).
    """
    stress = _variant(variant, assumptions)
    if stress is None:
        return inputs, 1.0
    perturbed = inputs.model_copy(
        update={
            "studio_rent": inputs.studio_rent * stress.rent_mult,
            "one_br_rent": inputs.one_br_rent * stress.rent_mult,
            "two_br_rent": inputs.two_br_rent * stress.rent_mult,
            "exit_cap_rate_pct": inputs.exit_cap_rate_pct + stress.cap_rate_delta,
        }
    )
    return perturbed, stress.cost_mult


def classify_risk(downside_roc: float, assumptions: Assumptions) -> tuple[RiskLevel, str]:
    if downside_roc < assumptions.risk_high_below:
        level: RiskLevel = "high"
    elif downside_roc <= assumptions.risk_moderate_at_most:
        level = "moderate"
    else:
        level = "resilient"
    return level, RISK_TEXT[level]


def _assumption_rows(assumptions: Assumptions) -> dict[str, dict[str, str]]:
    down, up = assumptions.stress_downside, assumptions.stress_upside

    def pct(mult: float) -> str:
        delta = round((mult - 1) * 100)
        if delta == 0:
            return "Flat"
        return f"{delta:+d}%"

    def bps(delta: float) -> str:
        return f"{delta * 100:+g}bps"

    return {
        "Rents": {"Downside": pct(down.rent_mult), "Base": "Base", "Upside": pct(up.rent_mult)},
        "Hard Costs": {"Downside": pct(down.cost_mult), "Base": "Base", "Upside": pct(up.cost_mult)},
        "Exit Cap": {"Downside": bps(down.cap_rate_delta), "Base": "Base", "Upside": bps(up.cap_rate_delta)},
    }


def run_scenario(
    variant: Variant,
    profile: PropertyProfile,
    inputs: UnderwritingInputs,
    unit_yield: UnitYieldResult,
    cost: CostEstimate,
    assumptions: Assumptions,
) -> ProFormaResult:
    scenario_inputs, cost_mult = build_scenario_inputs(inputs, variant, assumptions)
    return run_proforma(profile, scenario_inputs, unit_yield, scale_costs(cost, cost_mult), assumptions)


def run_stress_test(
    profile: PropertyProfile,
    inputs: UnderwritingInputs,
    unit_yield: UnitYieldResult,
    cost: CostEstimate,
    assumptions: Assumptions,
) -> ScenarioSet:
    """
    Re-run the pro forma under downside / upside perturbations.

    Physical, yield and cost baselines are reused as-is; only rents, the
    cost midpoint and the exit cap move.
    """
    base = run_scenario("base", profile, inputs, unit_yield, cost, assumptions)
    downside = run_scenario("downside", profile, inputs, unit_yield, cost, assumptions)
    upside = run_scenario("upside", profile, inputs, unit_yield, cost, assumptions)

    level, text = classify_risk(downside.return_on_cost, assumptions)
    return ScenarioSet(
        base=base,
        downside=downside,
        upside=upside,
        risk_level=level,
        risk_text=text,
        assumptions=_assumption_rows(assumptions),
    )
