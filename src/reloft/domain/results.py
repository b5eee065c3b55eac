from __future__ import annotations

from dataclasses import asdict, dataclass, field, is_dataclass
from enum import Enum
from typing import Any, Literal, Optional

Direction = Literal["positive", "neutral", "negative"]
Severity = Literal["low", "medium", "high"]
Color = Literal["green", "amber", "red"]
RiskLevel = Literal["high", "moderate", "resilient"]


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {_plain(k): _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


def to_dict(obj: Any) -> Any:
    """
    Flatten a result record (nested dataclasses, enums, tuples) into
    JSON-ready builtins.
    """
    if is_dataclass(obj) and not isinstance(obj, type):
        out = _plain(asdict(obj))
        # surface computed properties consumers rely on
        for name in getattr(obj, "__exported_properties__", ()):
            out[name] = _plain(getattr(obj, name))
        return out
    return _plain(obj)


@dataclass(frozen=True)
class Range:
    low: float
    high: float

    @property
    def mid(self) -> float:
        return (self.low + self.high) / 2


# ----------------------------
# Eligibility / opportunity
# ----------------------------

@dataclass(frozen=True)
class Eligibility:
    status: Literal["eligible", "conditional", "ineligible"]
    verdict: str
    explanation: str
    building_age: int


@dataclass(frozen=True)
class OpportunityFactor:
    label: str
    value: str
    note: str
    points: int
    sentiment: Direction


@dataclass(frozen=True)
class OpportunityScore:
    score: int
    tier: str
    tier_description: str
    factors: tuple[OpportunityFactor, ...]


@dataclass(frozen=True)
class FinancingNote:
    kind: Literal["warning", "info"]
    title: str
    text: str


# ----------------------------
# Physical
# ----------------------------

@dataclass(frozen=True)
class CategoryScore:
    name: str
    score: int
    rationale: str
    max_score: int = 20


@dataclass(frozen=True)
class LifeSafetyFlag:
    category: str
    severity: Severity
    message: str


@dataclass(frozen=True)
class DataReliability:
    level: Literal["High", "Medium", "Low"]
    color: Color
    text: str
    filled: int
    total: int
    missing: tuple[str, ...]


@dataclass(frozen=True)
class PhysicalAssessment:
    site_context: CategoryScore
    building_shape: CategoryScore
    floorplate: CategoryScore
    envelope: CategoryScore
    servicing: CategoryScore
    total: int
    label: str
    color: Color
    life_safety_flags: tuple[LifeSafetyFlag, ...]
    foundation_flag: Optional[LifeSafetyFlag]
    reliability: DataReliability

    @property
    def categories(self) -> tuple[CategoryScore, ...]:
        return (self.site_context, self.building_shape, self.floorplate, self.envelope, self.servicing)


# ----------------------------
# Unit yield
# ----------------------------

@dataclass(frozen=True)
class UnitLine:
    units: int
    sf: int


@dataclass(frozen=True)
class ScenarioYield:
    name: Literal["conservative", "base", "optimistic"]
    studio: UnitLine
    one_br: UnitLine
    two_br: UnitLine
    total: int
    net_sf: int
    efficiency: float


@dataclass(frozen=True)
class LayoutStress:
    factor: float
    label: str
    usable_depth_per_side: float
    window_stress: float


@dataclass(frozen=True)
class UnitYieldResult:
    __exported_properties__ = ("total_units",)

    building_class: str
    conservative: ScenarioYield
    base: ScenarioYield
    optimistic: ScenarioYield
    parking_bonus_units: int
    layout: LayoutStress
    core_penalty_pct: int
    mix_bucket: str
    unit_mix: dict[str, dict[str, float]]
    floorplate_width: float
    floorplate_depth: float
    total_sf: float
    surface_parking: int
    structured_parking: int

    @property
    def total_units(self) -> int:
        """Base-case units plus the surface-parking bonus."""
        return self.base.total + self.parking_bonus_units

    def scenario(self, name: str) -> ScenarioYield:
        return getattr(self, name)


# ----------------------------
# Cost
# ----------------------------

@dataclass(frozen=True)
class CostLine:
    low: int
    high: int
    included: bool = True
    label: str = ""
    warning: Optional[str] = None
    warning_color: Optional[Color] = None


@dataclass(frozen=True)
class TransferTax:
    low: int
    high: int
    applicable: bool


@dataclass(frozen=True)
class CostEstimate:
    building_class: str
    conversion_type: str
    quality_level: str
    building_sf: float
    total_units: int

    hard_cost: CostLine
    seismic: CostLine
    windows: CostLine
    parking_conversion: CostLine
    foundation: CostLine
    ae: CostLine
    permits: CostLine
    contingency: CostLine
    financing: CostLine

    total_hard_cost: Range
    total_project_cost: Range
    cost_per_unit: Range
    cost_per_rsf: Range
    transfer_tax: TransferTax
    linkage_fee: int
    midpoint: float
    warnings: tuple[str, ...] = ()


# ----------------------------
# Pro forma
# ----------------------------

@dataclass(frozen=True)
class HistoricCredits:
    qre: int
    federal_credit: int
    state_credit: int
    total_credit_equity: int
    bridge_loan: int
    bridge_rate_pct: float
    bridge_cost: int
    net_equity: int


@dataclass(frozen=True)
class SensitivityCell:
    roc: float
    value: str
    color: Color


@dataclass(frozen=True)
class SensitivityRow:
    cap_rate: str
    cells: tuple[SensitivityCell, ...]


@dataclass(frozen=True)
class SensitivityTable:
    columns: tuple[str, ...]
    rows: tuple[SensitivityRow, ...]


@dataclass(frozen=True)
class CapitalScenarioResult:
    key: str
    label: str
    hard_cost: int
    total_cost: float
    noi: float
    equity_offset: int
    effective_cost: float
    roc: float
    ltc: float


@dataclass(frozen=True)
class SubsidyGap:
    current_roc: float
    target_roc: float
    required_cost: float
    gap: float
    per_unit: float
    meets_target: bool


@dataclass(frozen=True)
class MaxOffer:
    target_roc: float
    max_total_cost: float
    conversion_cost: float
    max_offer: float
    acquisition_price: float
    note: str


@dataclass(frozen=True)
class ProFormaResult:
    # Revenue
    studio_gpr: float
    one_br_gpr: float
    two_br_gpr: float
    gross_potential_rent: float
    affordable_adjustment: int
    vacancy_loss: int
    other_income: int
    effective_gross_income: float

    # Expenses
    operating_expenses: int
    residential_noi: float
    retained_office_noi: int
    retained_sf: float
    noi: float

    # Valuation
    exit_cap_rate: float
    stabilized_value: int
    acquisition_price: float
    total_conversion_cost: float
    total_project_cost: float
    profit: float
    return_on_cost: float

    # Debt
    loan_structure: str
    ltc_pct: float
    loan_amount: int
    construction_loan_rate: float
    monthly_interest: int
    annual_carry: int

    total_units: int
    verdict: str
    verdict_color: Color
    historic: Optional[HistoricCredits] = None

    # Attached by the pipeline stage for the base case only
    sensitivity: Optional[SensitivityTable] = None
    capital_scenarios: tuple[CapitalScenarioResult, ...] = ()
    subsidy_gap: Optional[SubsidyGap] = None
    max_offer: Optional[MaxOffer] = None

    @property
    def is_historic(self) -> bool:
        return self.historic is not None


# ----------------------------
# Scenarios
# ----------------------------

@dataclass(frozen=True)
class ScenarioSet:
    base: ProFormaResult
    downside: ProFormaResult
    upside: ProFormaResult
    risk_level: RiskLevel
    risk_text: str
    assumptions: dict[str, dict[str, str]] = field(default_factory=dict)

    def to_frame(self):
        """
        Side-by-side comparison table (rows: metric, columns: Downside/Base/Upside).
        """
        import pandas as pd

        cols = {"Downside": self.downside, "Base": self.base, "Upside": self.upside}
        rows = {
            "NOI": {k: v.noi for k, v in cols.items()},
            "Stabilized Value": {k: v.stabilized_value for k, v in cols.items()},
            "Return on Cost": {k: v.return_on_cost for k, v in cols.items()},
            "Profit / (Loss)": {k: v.profit for k, v in cols.items()},
        }
        return pd.DataFrame.from_dict(rows, orient="index")[list(cols)]

    def summary(self) -> str:
        label = {"high": "High Downside", "moderate": "Moderate", "resilient": "Resilient"}[self.risk_level]
        return (
            f"Stress test: Base ROC {self.base.return_on_cost:.1f}% / "
            f"Downside {self.downside.return_on_cost:.1f}% / "
            f"Upside {self.upside.return_on_cost:.1f}%. Risk level: {label}."
        )


# ----------------------------
# Deal score
# ----------------------------

@dataclass(frozen=True)
class ScoreComponent:
    name: str
    contribution: int
    max_points: int
    direction: Direction
    reason: str


@dataclass(frozen=True)
class DealScore:
    __exported_properties__ = ("band_label",)

    score: int
    band: Literal["A", "B", "C"]
    commentary: str
    components: tuple[ScoreComponent, ...]
    eligibility: Optional[Eligibility]
    subsidy_gap: Optional[SubsidyGap] = None

    @property
    def band_label(self) -> str:
        return f"{self.band} — {self.commentary.split(' — ')[0]}"


# ----------------------------
# Risk & complexity
# ----------------------------

@dataclass(frozen=True)
class RiskDimension:
    level: Literal["Low", "Medium", "High"]
    text: str


@dataclass(frozen=True)
class RiskSummary:
    entitlement: RiskDimension
    construction: RiskDimension
    capital_stack: RiskDimension
    construction_points: int
