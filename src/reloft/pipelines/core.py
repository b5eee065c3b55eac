# src/reloft/pipelines/core.py
"""
Reactive recompute graph for the screening pipeline.

Six stages, each a pure function of an immutable ``PipelineContext``.
The ``Pipeline`` orchestrator is the only writer: it swaps in a new
context after every stage, so a reader sees either a fully computed
upstream result or ``NOT_COMPUTED``, never a stale one.
"""
from __future__ import annotations

from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Any, Callable, Mapping, Optional

from loguru import logger

from reloft.analysis.costs import estimate_costs
from reloft.analysis.deal_score import compute_deal_score
from reloft.analysis.eligibility import assess_eligibility
from reloft.analysis.physical import assess_physical
from reloft.analysis.proforma import run_full_proforma
from reloft.analysis.scenarios import run_stress_test
from reloft.analysis.unit_yield import estimate_unit_yield
from reloft.domain.assumptions import DEFAULT_ASSUMPTIONS, Assumptions
from reloft.domain.property import PropertyProfile, UnderwritingInputs


class Stage(str, Enum):
    """Pipeline stages, declared in topological order."""

    PHYSICAL = "physical"
    UNIT_YIELD = "unit_yield"
    COST = "cost"
    PROFORMA = "proforma"
    SCENARIOS = "scenarios"
    DEAL_SCORE = "deal_score"

    @property
    def order(self) -> int:
        return list(Stage).index(self)


# Upstream slots each stage reads.
DEPENDENCIES: Mapping[Stage, tuple[Stage, ...]] = {
    Stage.PHYSICAL: (),
    Stage.UNIT_YIELD: (Stage.PHYSICAL,),
    Stage.COST: (Stage.UNIT_YIELD,),
    Stage.PROFORMA: (Stage.UNIT_YIELD, Stage.COST),
    Stage.SCENARIOS: (Stage.UNIT_YIELD, Stage.COST, Stage.PROFORMA),
    Stage.DEAL_SCORE: (Stage.PHYSICAL, Stage.UNIT_YIELD, Stage.COST, Stage.PROFORMA),
}

# Earliest stage reading each underwriting field; unlisted fields are first
# read by the pro forma.
_INPUT_READERS: Mapping[str, Stage] = {
    "conversion_type": Stage.COST,
    "quality_level": Stage.COST,
    "include_seismic": Stage.COST,
    "include_windows": Stage.COST,
    "include_parking_conversion": Stage.COST,
    "parking_conversion_units": Stage.COST,
}


def downstream_of(stage: Stage) -> tuple[Stage, ...]:
    """``stage`` plus every stage reachable from it, in topological order."""
    reached = {stage}
    for candidate in Stage:
        if any(dep in reached for dep in DEPENDENCIES[candidate]):
            reached.add(candidate)
    return tuple(s for s in Stage if s in reached)


class _NotComputed:
    _instance: Optional["_NotComputed"] = None

    def __new__(cls) -> "_NotComputed":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NOT_COMPUTED"


NOT_COMPUTED: Any = _NotComputed()


@dataclass(frozen=True)
class NotAvailable:
    """
    Returned instead of raising when a stage is asked for before its
    upstream slots are filled.
    """

    stage: Stage
    missing: tuple[Stage, ...]

    def __bool__(self) -> bool:
        return False

    @property
    def reason(self) -> str:
        names = ", ".join(s.value for s in self.missing)
        return f"{self.stage.value} needs {names} computed first"


@dataclass(frozen=True)
class PipelineContext:
    profile: PropertyProfile
    inputs: UnderwritingInputs
    assumptions: Assumptions

    physical: Any = NOT_COMPUTED
    unit_yield: Any = NOT_COMPUTED
    cost: Any = NOT_COMPUTED
    proforma: Any = NOT_COMPUTED
    scenarios: Any = NOT_COMPUTED
    deal_score: Any = NOT_COMPUTED

    def get(self, stage: Stage) -> Any:
        return getattr(self, stage.value)

    def is_computed(self, stage: Stage) -> bool:
        return self.get(stage) is not NOT_COMPUTED

    def missing_for(self, stage: Stage) -> tuple[Stage, ...]:
        return tuple(dep for dep in DEPENDENCIES[stage] if not self.is_computed(dep))

    def with_result(self, stage: Stage, result: Any) -> "PipelineContext":
        return replace(self, **{stage.value: result})

    def invalidate(self, stages: tuple[Stage, ...]) -> "PipelineContext":
        return replace(self, **{s.value: NOT_COMPUTED for s in stages})

    def results(self) -> dict[str, Any]:
        slots = {s.value for s in Stage}
        return {f.name: getattr(self, f.name) for f in fields(self) if f.name in slots}


# =====================================================================
# Pure stage functions
# =====================================================================


def physical_stage(ctx: PipelineContext):
    return assess_physical(ctx.profile)


def unit_yield_stage(ctx: PipelineContext):
    return estimate_unit_yield(ctx.profile, ctx.assumptions)


def cost_stage(ctx: PipelineContext):
    return estimate_costs(ctx.profile, ctx.inputs, ctx.unit_yield, ctx.assumptions)


def proforma_stage(ctx: PipelineContext):
    return run_full_proforma(ctx.profile, ctx.inputs, ctx.unit_yield, ctx.cost, ctx.assumptions)


def scenarios_stage(ctx: PipelineContext):
    return run_stress_test(ctx.profile, ctx.inputs, ctx.unit_yield, ctx.cost, ctx.assumptions)


def deal_score_stage(ctx: PipelineContext):
    return compute_deal_score(
        eligibility=assess_eligibility(ctx.profile, ctx.assumptions),
        physical=ctx.physical,
        unit_yield=ctx.unit_yield,
        cost=ctx.cost,
        proforma=ctx.proforma,
        subsidy_gap=ctx.proforma.subsidy_gap,
        assumptions=ctx.assumptions,
    )


STAGE_FUNCTIONS: Mapping[Stage, Callable[[PipelineContext], Any]] = {
    Stage.PHYSICAL: physical_stage,
    Stage.UNIT_YIELD: unit_yield_stage,
    Stage.COST: cost_stage,
    Stage.PROFORMA: proforma_stage,
    Stage.SCENARIOS: scenarios_stage,
    Stage.DEAL_SCORE: deal_score_stage,
}


# =====================================================================
# Orchestrator
# =====================================================================


class Pipeline:
    """
    Owns the only mutable reference to the current context.

        pipe = Pipeline(profile, inputs)
        pipe.recompute()                       # full run
        pipe.update_inputs(studio_rent=2400)   # re-runs PROFORMA onward
    """

    def __init__(
        self,
        profile: PropertyProfile,
        inputs: Optional[UnderwritingInputs] = None,
        assumptions: Optional[Assumptions] = None,
    ):
        self._context = PipelineContext(
            profile=profile,
            inputs=inputs or UnderwritingInputs(),
            assumptions=assumptions or DEFAULT_ASSUMPTIONS,
        )

    @property
    def context(self) -> PipelineContext:
        return self._context

    def result(self, stage: Stage) -> Any:
        ctx = self._context
        if ctx.is_computed(stage):
            return ctx.get(stage)
        return NotAvailable(stage, (stage,) + ctx.missing_for(stage))

    def recompute(self, from_stage: Stage = Stage.PHYSICAL) -> tuple[Stage, ...]:
        """
        Invalidate ``from_stage`` and everything downstream of it, then
        rebuild those stages in topological order. Returns the stages run.
        """
        affected = downstream_of(from_stage)
        self._context = self._context.invalidate(affected)
        logger.debug("pipeline_invalidated", from_stage=from_stage.value, stages=[s.value for s in affected])

        for stage in affected:
            missing = self._context.missing_for(stage)
            if missing:
                # only reachable when recomputing from mid-graph with an empty upstream
                logger.warning(
                    "stage_skipped_missing_upstream",
                    stage=stage.value,
                    missing=[s.value for s in missing],
                )
                return tuple(s for s in affected if self._context.is_computed(s))
            self._context = self._context.with_result(stage, STAGE_FUNCTIONS[stage](self._context))
            logger.debug("stage_recomputed", stage=stage.value)

        return affected

    def run_stage(self, stage: Stage) -> Any:
        """
        Compute a single stage against the current context. Downstream slots
        are invalidated because they were derived from the previous value.
        """
        missing = self._context.missing_for(stage)
        if missing:
            na = NotAvailable(stage, missing)
            logger.info("stage_not_available", stage=stage.value, reason=na.reason)
            return na

        result = STAGE_FUNCTIONS[stage](self._context)
        stale = tuple(s for s in downstream_of(stage) if s is not stage)
        self._context = self._context.invalidate(stale).with_result(stage, result)
        logger.debug("stage_recomputed", stage=stage.value, invalidated=[s.value for s in stale])
        return result

    def update_profile(self, **changes: Any) -> tuple[Stage, ...]:
        profile = PropertyProfile.model_validate({**self._context.profile.model_dump(), **changes})
        self._context = replace(self._context, profile=profile)
        return self.recompute(Stage.PHYSICAL)

    def update_inputs(self, **changes: Any) -> tuple[Stage, ...]:
        if not changes:
            return ()
        inputs = UnderwritingInputs.model_validate({**self._context.inputs.model_dump(), **changes})
        self._context = replace(self._context, inputs=inputs)
        start = min((_INPUT_READERS.get(name, Stage.PROFORMA) for name in changes), key=lambda s: s.order)
        return self.recompute(start)

    def update_assumptions(self, assumptions: Assumptions) -> tuple[Stage, ...]:
        self._context = replace(self._context, assumptions=assumptions)
        return self.recompute(Stage.PHYSICAL)


def run_pipeline(
    profile: PropertyProfile,
    inputs: Optional[UnderwritingInputs] = None,
    assumptions: Optional[Assumptions] = None,
) -> PipelineContext:
    pipe = Pipeline(profile, inputs, assumptions)
    pipe.recompute()
    return pipe.context
