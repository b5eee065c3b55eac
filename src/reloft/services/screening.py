# src/reloft/services/screening.py
from __future__ import annotations

from typing import Any, Optional

from reloft.adapters.logging_utils import get_logger
from reloft.analysis.eligibility import financing_notes, score_opportunity
from reloft.analysis.risk import summarize_risk
from reloft.domain.assumptions import Assumptions, build_assumptions
from reloft.domain.results import to_dict
from reloft.pipelines.core import PipelineContext, run_pipeline
from reloft.services.validation import prepare_payload

logger = get_logger(__name__)


def build_record(ctx: PipelineContext) -> dict[str, Any]:
    """
    Nested output record for reporting / export consumers. Every section
    carries its explanatory strings alongside the numbers.
    """
    profile, assumptions = ctx.profile, ctx.assumptions
    deal = ctx.deal_score
    eligibility = deal.eligibility

    scenarios = to_dict(ctx.scenarios)
    scenarios["summary"] = ctx.scenarios.summary()

    physical = to_dict(ctx.physical)
    physical["categories"] = [to_dict(c) for c in ctx.physical.categories]

    return {
        "address": profile.address,
        "assumptions_version": assumptions.version,
        "eligibility": to_dict(eligibility),
        "opportunity": to_dict(score_opportunity(profile, assumptions)),
        "financing_notes": [to_dict(n) for n in financing_notes(profile, assumptions)],
        "physical": physical,
        "unit_yield": to_dict(ctx.unit_yield),
        "costs": to_dict(ctx.cost),
        "proforma": to_dict(ctx.proforma),
        "scenarios": scenarios,
        "deal_score": to_dict(deal),
        "risk": to_dict(summarize_risk(profile, eligibility, ctx.unit_yield, ctx.proforma, assumptions)),
    }


def screen_property(payload: Any, assumptions: Optional[Assumptions] = None) -> dict[str, Any]:
    """
    Validate a raw payload, run the full pipeline and return the nested
    screening record.

    Raises ValueError only for payloads that cannot be represented at all.
    """
    profile, inputs = prepare_payload(payload)
    assumptions = assumptions or build_assumptions()

    ctx = run_pipeline(profile, inputs, assumptions)
    record = build_record(ctx)

    logger.info(
        "Property screened",
        extra={
            "context": {
                "address": profile.address,
                "deal_score": ctx.deal_score.score,
                "band": ctx.deal_score.band,
                "units": ctx.unit_yield.total_units,
                "roc": round(ctx.proforma.return_on_cost, 2),
                "assumptions_version": assumptions.version,
            }
        },
    )
    return record
