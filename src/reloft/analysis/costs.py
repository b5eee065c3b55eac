# src/reloft/analysis/costs.py
from __future__ import annotations

import math
from dataclasses import replace
from typing import Optional

from reloft.domain.assumptions import Assumptions, RateBand
from reloft.domain.enums import BuildingClass, FoundationCondition, WindowType
from reloft.domain.money import whole
from reloft.domain.property import PropertyProfile, UnderwritingInputs
from reloft.domain.results import CostEstimate, CostLine, Range, TransferTax, UnitYieldResult


def _line(sf: float, band: RateBand, included: bool = True, **extra) -> CostLine:
    if not included or sf <= 0:
        return CostLine(0, 0, included=included, **extra)
    return CostLine(whole(sf * band.low), whole(sf * band.high), included=included, **extra)


def facade_sf(building_sf: float, stories: int, floorplate_width: float, floor_to_floor: float) -> float:
    """
    Rough facade area: rectangular perimeter of a typical floor times the
    building height.
    """
    stories = stories or 1
    typical = building_sf / stories
    width = floorplate_width or math.sqrt(typical)
    depth = typical / (width or 1)
    perimeter = 2 * (width + depth)
    return perimeter * stories * floor_to_floor


def foundation_line(condition: FoundationCondition, sf: float, assumptions: Assumptions) -> CostLine:
    band = assumptions.foundation_cost[condition]
    if condition is FoundationCondition.POOR:
        return _line(
            sf, band,
            label="Foundation Remediation (estimated)",
            warning=(
                "Foundation remediation at this severity may render conversion uneconomic. "
                "Structural assessment strongly recommended."
            ),
            warning_color="red",
        )
    if condition is FoundationCondition.UNKNOWN:
        return _line(
            sf, band,
            label="Foundation Remediation (unknown)",
            warning="Foundation cost unknown — budget $10-30/SF contingency",
            warning_color="amber",
        )
    if condition is FoundationCondition.FAIR:
        return _line(sf, band, label="Foundation Remediation (estimated)")
    return _line(sf, band, included=False, label="Foundation Remediation (estimated)")


def transfer_tax(price: float, assumptions: Assumptions) -> TransferTax:
    if price < assumptions.transfer_tax_threshold:
        return TransferTax(0, 0, applicable=False)
    if price < assumptions.transfer_tax_upper_threshold:
        tax = whole(price * assumptions.transfer_tax_mid_rate)
        return TransferTax(tax, tax, applicable=True)
    band = assumptions.transfer_tax_upper_rate
    return TransferTax(whole(price * band.low), whole(price * band.high), applicable=True)


def _per(total: int, divisor: float) -> int:
    return whole(total / divisor) if divisor > 0 else 0


def estimate_costs(
    profile: PropertyProfile,
    inputs: UnderwritingInputs,
    unit_yield: UnitYieldResult,
    assumptions: Assumptions,
    building_class: Optional[BuildingClass] = None,
) -> CostEstimate:
    """
    Low/high conversion budget.

    Every line is rounded to whole dollars before it is summed, and the soft
    cost percentages are applied to the low and high subtotals separately.
    Seismic and window scope default on when the profile calls for them
    (pre-1995 construction, sealed curtain wall) unless the inputs say otherwise.
    """
    sf = profile.conversion_sf
    stories = profile.conversion_stories or 1
    bclass = building_class or BuildingClass(unit_yield.building_class)
    total_units = unit_yield.total_units

    base = assumptions.base_hard_cost.get(bclass, assumptions.base_hard_cost[BuildingClass.OFFICE_MID_RISE])
    conv = assumptions.conversion_mult[inputs.conversion_type]
    qual = assumptions.quality_mult[inputs.quality_level]
    hard = CostLine(
        whole(sf * base.low * conv.low * qual.low),
        whole(sf * base.high * conv.high * qual.high),
        label="Base Hard Cost",
    )

    include_seismic = inputs.include_seismic
    if include_seismic is None:
        include_seismic = profile.seismic_era.needs_retrofit
    seismic = _line(sf, assumptions.seismic_cost, included=include_seismic, label="Seismic Retrofit")

    include_windows = inputs.include_windows
    if include_windows is None:
        include_windows = profile.window_type is WindowType.SEALED
    facade = facade_sf(
        sf,
        stories,
        profile.floorplate_width or assumptions.default_floorplate_width,
        profile.floor_to_floor or assumptions.default_floor_to_floor,
    )
    windows = _line(facade, assumptions.window_cost_per_facade_sf, included=include_windows, label="Window Replacement")

    parking_units = 0
    if inputs.include_parking_conversion:
        parking_units = inputs.parking_conversion_units or unit_yield.parking_bonus_units
    parking = _line(
        parking_units * assumptions.parking_conversion_unit_sf,
        assumptions.parking_conversion_cost,
        included=inputs.include_parking_conversion,
        label="Parking Conversion",
    )

    foundation = foundation_line(profile.foundation_condition, sf, assumptions)

    hard_low = hard.low + seismic.low + windows.low + parking.low + foundation.low
    hard_high = hard.high + seismic.high + windows.high + parking.high + foundation.high

    ae = CostLine(whole(hard_low * assumptions.ae_pct.low), whole(hard_high * assumptions.ae_pct.high), label="A&E")

    linkage_fee = whole(sf * assumptions.linkage_fee_per_sf)
    permits = CostLine(
        whole(hard_low * assumptions.permits_pct.low) + linkage_fee,
        whole(hard_high * assumptions.permits_pct.high) + linkage_fee,
        label="Permits + Linkage Fee",
    )

    sub_low = hard_low + ae.low + permits.low
    sub_high = hard_high + ae.high + permits.high
    contingency = CostLine(
        whole(sub_low * assumptions.contingency_pct.low),
        whole(sub_high * assumptions.contingency_pct.high),
        label="Contingency",
    )

    pre_low = sub_low + contingency.low
    pre_high = sub_high + contingency.high
    financing = CostLine(
        whole(pre_low * assumptions.financing_pct.low),
        whole(pre_high * assumptions.financing_pct.high),
        label="Financing Costs",
    )

    total_low = pre_low + financing.low
    total_high = pre_high + financing.high
    net_rsf = sf * assumptions.net_rsf_ratio

    warnings = tuple(w for w in (foundation.warning,) if w)

    return CostEstimate(
        building_class=bclass.value,
        conversion_type=inputs.conversion_type.value,
        quality_level=inputs.quality_level.value,
        building_sf=sf,
        total_units=total_units,
        hard_cost=hard,
        seismic=seismic,
        windows=windows,
        parking_conversion=parking,
        foundation=foundation,
        ae=ae,
        permits=permits,
        contingency=contingency,
        financing=financing,
        total_hard_cost=Range(hard_low, hard_high),
        total_project_cost=Range(total_low, total_high),
        cost_per_unit=Range(_per(total_low, total_units), _per(total_high, total_units)),
        cost_per_rsf=Range(_per(total_low, net_rsf), _per(total_high, net_rsf)),
        transfer_tax=transfer_tax(profile.acquisition_price, assumptions),
        linkage_fee=linkage_fee,
        midpoint=whole((total_low + total_high) / 2),
        warnings=warnings,
    )


def scale_costs(cost: CostEstimate, multiplier: float) -> CostEstimate:
    """
    Stress-test variant: scale the project totals without re-deriving the
    line items. Line items (and so historic QRE) keep their base values; the
    scaled midpoint is not re-rounded.
    """
    if multiplier == 1.0:
        return cost
    return replace(
        cost,
        total_project_cost=Range(cost.total_project_cost.low * multiplier, cost.total_project_cost.high * multiplier),
        cost_per_unit=Range(cost.cost_per_unit.low * multiplier, cost.cost_per_unit.high * multiplier),
        midpoint=cost.midpoint * multiplier,
    )
