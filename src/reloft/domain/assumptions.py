# src/reloft/domain/assumptions.py
"""
Versioned market assumptions for the conversion pipeline.

Every threshold, rate table and multiplier the calculators use lives on
one frozen ``Assumptions`` object. Backtests and what-if runs build a
modified copy (``assumptions.model_copy(update=...)``) instead of touching
calculation code.
"""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from reloft.domain.enums import (
    BuildingClass,
    ConversionType,
    FoundationCondition,
    LoanStructure,
    QualityLevel,
)


class RateBand(BaseModel):
    model_config = ConfigDict(frozen=True)

    low: float
    high: float

    @property
    def mid(self) -> float:
        return (self.low + self.high) / 2


class UnitSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    sf_low: float
    sf_high: float
    sf_base: float
    pct: float


class UnitMixTable(BaseModel):
    model_config = ConfigDict(frozen=True)

    studio: UnitSpec
    one_br: UnitSpec
    two_br: UnitSpec


class CapitalStackPreset(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    ltc: float
    hard_cost_mult: float
    # None == blended mixed-income rents
    rent_mult: float | None
    htc_qre_share: float = 0.0


class StressVariant(BaseModel):
    model_config = ConfigDict(frozen=True)

    rent_mult: float
    cost_mult: float
    cap_rate_delta: float


def _band(low: float, high: float) -> RateBand:
    return RateBand(low=low, high=high)


class Assumptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    version: str = "2026.1"
    current_year: int = 2026

    # ---------------- ARO eligibility ----------------
    aro_by_right_age: int = 15
    aro_conditional_age: int = 5
    aro_parking_by_right_age: int = 5

    # ---------------- Unit yield ----------------
    efficiency: dict[BuildingClass, RateBand] = Field(
        default_factory=lambda: {
            BuildingClass.OFFICE_LOW_RISE: _band(0.75, 0.80),
            BuildingClass.OFFICE_MID_RISE: _band(0.70, 0.75),
            BuildingClass.OFFICE_HIGH_RISE: _band(0.65, 0.72),
            BuildingClass.WAREHOUSE_INDUSTRIAL: _band(0.80, 0.85),
            BuildingClass.HOTEL_MOTEL: _band(0.85, 0.90),
            BuildingClass.RETAIL_COMMERCIAL: _band(0.72, 0.78),
            BuildingClass.PARKING_STRUCTURE: _band(0.70, 0.78),
        }
    )
    # (max depth ft, penalty); deeper than the last breakpoint gets core_penalty_deep
    core_penalty_breaks: tuple[tuple[float, float], ...] = ((40.0, 0.0), (55.0, 0.08))
    core_penalty_deep: float = 0.17
    efficiency_floor_conservative: float = 0.45
    efficiency_floor_base: float = 0.50
    efficiency_floor_optimistic: float = 0.55
    unit_size_mult_conservative: float = 1.05
    unit_size_mult_optimistic: float = 0.95
    default_floorplate_width: float = 70.0
    default_floorplate_depth: float = 45.0
    unit_mix_narrow_max_width: float = 50.0
    unit_mix_medium_max_width: float = 80.0
    unit_mix: dict[str, UnitMixTable] = Field(
        default_factory=lambda: {
            "narrow": UnitMixTable(
                studio=UnitSpec(sf_low=380, sf_high=500, sf_base=420, pct=0.50),
                one_br=UnitSpec(sf_low=550, sf_high=750, sf_base=650, pct=0.45),
                two_br=UnitSpec(sf_low=850, sf_high=950, sf_base=900, pct=0.05),
            ),
            "medium": UnitMixTable(
                studio=UnitSpec(sf_low=400, sf_high=500, sf_base=440, pct=0.35),
                one_br=UnitSpec(sf_low=600, sf_high=750, sf_base=650, pct=0.45),
                two_br=UnitSpec(sf_low=900, sf_high=1050, sf_base=950, pct=0.20),
            ),
            "wide": UnitMixTable(
                studio=UnitSpec(sf_low=420, sf_high=500, sf_base=450, pct=0.25),
                one_br=UnitSpec(sf_low=625, sf_high=750, sf_base=680, pct=0.40),
                two_br=UnitSpec(sf_low=900, sf_high=1100, sf_base=950, pct=0.35),
            ),
        }
    )
    parking_spaces_per_bonus_unit: int = 2
    # (max window stress ft, factor, label); above the last breakpoint -> layout_stressed
    layout_bands: tuple[tuple[float, float, str], ...] = (
        (-10.0, 1.08, "Favorable"),
        (0.0, 0.97, "Neutral"),
        (8.0, 0.91, "Tight"),
    )
    layout_stressed: tuple[float, str] = (0.83, "Stressed")

    # ---------------- Conversion cost ($/SF unless noted) ----------------
    base_hard_cost: dict[BuildingClass, RateBand] = Field(
        default_factory=lambda: {
            BuildingClass.OFFICE_LOW_RISE: _band(145, 220),
            BuildingClass.OFFICE_MID_RISE: _band(160, 240),
            BuildingClass.OFFICE_HIGH_RISE: _band(185, 275),
            BuildingClass.WAREHOUSE_INDUSTRIAL: _band(85, 145),
            BuildingClass.HOTEL_MOTEL: _band(65, 110),
            BuildingClass.RETAIL_COMMERCIAL: _band(120, 190),
            BuildingClass.PARKING_STRUCTURE: _band(95, 155),
        }
    )
    conversion_mult: dict[ConversionType, RateBand] = Field(
        default_factory=lambda: {
            ConversionType.STANDARD: _band(1.00, 1.00),
            ConversionType.HISTORIC: _band(1.15, 1.25),
            ConversionType.AFFORDABLE: _band(0.95, 0.95),
            ConversionType.MIXED: _band(0.98, 0.98),
            ConversionType.CREATIVE: _band(0.85, 0.85),
        }
    )
    quality_mult: dict[QualityLevel, RateBand] = Field(
        default_factory=lambda: {
            QualityLevel.STANDARD: _band(1.00, 1.00),
            QualityLevel.PREMIUM: _band(1.10, 1.15),
            QualityLevel.LUXURY: _band(1.20, 1.35),
        }
    )
    seismic_cost: RateBand = _band(25, 55)
    window_cost_per_facade_sf: RateBand = _band(18, 35)
    parking_conversion_cost: RateBand = _band(85, 120)
    parking_conversion_unit_sf: float = 550.0
    default_floor_to_floor: float = 10.0
    foundation_cost: dict[FoundationCondition, RateBand] = Field(
        default_factory=lambda: {
            FoundationCondition.GOOD: _band(0, 0),
            FoundationCondition.FAIR: _band(8, 15),
            FoundationCondition.POOR: _band(20, 45),
            FoundationCondition.UNKNOWN: _band(0, 0),
        }
    )
    ae_pct: RateBand = _band(0.08, 0.12)
    permits_pct: RateBand = _band(0.03, 0.05)
    contingency_pct: RateBand = _band(0.10, 0.15)
    financing_pct: RateBand = _band(0.06, 0.09)
    linkage_fee_per_sf: float = 21.58
    net_rsf_ratio: float = 0.72
    transfer_tax_threshold: float = 5_000_000.0
    transfer_tax_upper_threshold: float = 10_000_000.0
    transfer_tax_mid_rate: float = 0.04
    transfer_tax_upper_rate: RateBand = _band(0.04, 0.055)

    # ---------------- Pro forma ----------------
    other_income_pct: float = 0.03
    retained_office_rent_psf_month: float = 2.50
    retained_office_vacancy: float = 0.10
    retained_office_opex: float = 0.40
    construction_loan_rate_pct: float = 7.5
    loan_ltc: dict[LoanStructure, float] = Field(
        default_factory=lambda: {
            LoanStructure.LTC_65: 0.65,
            LoanStructure.LTC_70: 0.70,
            LoanStructure.HUD_221D4: 0.85,
            LoanStructure.BRIDGE: 0.75,
        }
    )
    htc_federal_rate: float = 0.20
    htc_state_rate: float = 0.20
    htc_bridge_advance: float = 0.90
    htc_bridge_rate_pct: float = 8.0
    htc_bridge_years: float = 2.0
    roc_strong: float = 6.5
    roc_marginal: float = 5.0
    target_roc_pct: float = 6.5
    sensitivity_cap_rates: tuple[float, ...] = (4.5, 5.0, 5.5, 6.0)
    sensitivity_acquisition: tuple[tuple[str, float], ...] = (
        ("Acq -20%", 0.80),
        ("Acq at Ask", 1.00),
        ("Acq +10%", 1.10),
    )
    capital_stacks: dict[str, CapitalStackPreset] = Field(
        default_factory=lambda: {
            "market_rate": CapitalStackPreset(label="Market Rate", ltc=0.67, hard_cost_mult=1.00, rent_mult=1.00),
            "historic_credit": CapitalStackPreset(
                label="Historic (HTC)", ltc=0.65, hard_cost_mult=1.20, rent_mult=1.00, htc_qre_share=0.80
            ),
            "affordable_100": CapitalStackPreset(label="100% Affordable", ltc=0.85, hard_cost_mult=0.95, rent_mult=0.55),
            "mixed_income": CapitalStackPreset(label="Mixed-Income", ltc=0.70, hard_cost_mult=0.98, rent_mult=None),
        }
    )
    mixed_income_market_share: float = 0.75
    mixed_income_affordable_rent_mult: float = 0.55

    # ---------------- Stress test ----------------
    stress_downside: StressVariant = StressVariant(rent_mult=0.90, cost_mult=1.10, cap_rate_delta=0.375)
    stress_upside: StressVariant = StressVariant(rent_mult=1.05, cost_mult=1.00, cap_rate_delta=-0.25)
    risk_high_below: float = 3.0
    risk_moderate_at_most: float = 5.0

    # ---------------- Risk summary ----------------
    construction_risk_high_points: int = 7
    construction_risk_medium_points: int = 4
    capital_stack_scale_units: int = 60
    historic_roc_floor: float = 4.0

    # ---------------- Deal score ----------------
    band_a_min: int = 80
    band_b_min: int = 60
    # (eligible, conditional)
    deal_eligibility_points: tuple[int, int] = (20, 10)
    # minimum scaled points for (positive, neutral)
    deal_physical_tiers: tuple[int, int] = (16, 10)
    # (minimum units, points), evaluated top-down
    deal_unit_tiers: tuple[tuple[int, int], ...] = ((100, 15), (60, 10), (30, 5))
    # (max cost per unit, points); above the last breakpoint -> deal_cost_floor_points
    deal_cost_tiers: tuple[tuple[float, int], ...] = ((200_000, 20), (275_000, 15), (350_000, 8))
    deal_cost_floor_points: int = 2
    # (offset from roc_strong, points), evaluated top-down
    deal_roc_tiers: tuple[tuple[float, int], ...] = ((0.5, 25), (0.0, 20), (-1.0, 12), (-2.0, 5))
    # (gap per unit strictly above, deduction)
    deal_gap_tiers: tuple[tuple[float, int], ...] = ((75_000, -20), (25_000, -12), (0, -5))

    def core_penalty(self, depth: float) -> float:
        for max_depth, penalty in self.core_penalty_breaks:
            if depth <= max_depth:
                return penalty
        return self.core_penalty_deep

    def unit_mix_for(self, width: float) -> tuple[str, UnitMixTable]:
        if width <= self.unit_mix_narrow_max_width:
            key = "narrow"
        elif width <= self.unit_mix_medium_max_width:
            key = "medium"
        else:
            key = "wide"
        return key, self.unit_mix[key]


DEFAULT_ASSUMPTIONS = Assumptions()


def build_assumptions(cfg=None) -> Assumptions:
    """
    Overlay runtime settings (env vars via AppConfig) on the default tables.
    """
    if cfg is None:
        from reloft.adapters.config import config as cfg

    return DEFAULT_ASSUMPTIONS.model_copy(
        update={
            "version": cfg.ASSUMPTIONS_VERSION,
            "current_year": cfg.CURRENT_YEAR,
            "construction_loan_rate_pct": cfg.CONSTRUCTION_LOAN_RATE,
            "htc_bridge_rate_pct": cfg.HTC_BRIDGE_RATE,
            "target_roc_pct": cfg.TARGET_ROC,
        }
    )
