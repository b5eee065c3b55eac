# src/reloft/analysis/unit_yield.py
"""
Residential unit yield under conservative / base / optimistic scenarios.

Net SF = gross SF x (building-class efficiency - core penalty), floored
per scenario. Units are allocated by the width-keyed unit mix, then every
scenario is rescaled by one layout stress factor.
"""
from __future__ import annotations

import math

from reloft.domain.assumptions import Assumptions, UnitMixTable
from reloft.domain.enums import BuildingClass
from reloft.domain.money import whole
from reloft.domain.property import PropertyProfile
from reloft.domain.results import LayoutStress, ScenarioYield, UnitLine, UnitYieldResult


def stress_test_layout(
    depth: float,
    corridor_width: float,
    min_window_distance: float,
    assumptions: Assumptions,
) -> LayoutStress:
    """
    Daylight stress test: how far interior unit depth on each side of the
    corridor exceeds the minimum window reach.
    """
    depth = depth or assumptions.default_floorplate_depth
    corridor_width = corridor_width or 6.0
    min_window_distance = min_window_distance or 25.0

    usable = (depth - corridor_width) / 2
    stress = usable - min_window_distance

    factor, label = assumptions.layout_stressed
    for max_stress, band_factor, band_label in assumptions.layout_bands:
        if stress <= max_stress:
            factor, label = band_factor, band_label
            break

    return LayoutStress(
        factor=factor,
        label=label,
        usable_depth_per_side=round(usable, 1),
        window_stress=round(stress, 1),
    )


def _scenario_units(
    name: str,
    net_sf: float,
    efficiency: float,
    mix: UnitMixTable,
    size_mult: float,
) -> ScenarioYield:
    studio_sf = mix.studio.sf_base * size_mult
    one_sf = mix.one_br.sf_base * size_mult
    two_sf = mix.two_br.sf_base * size_mult

    weighted_avg = studio_sf * mix.studio.pct + one_sf * mix.one_br.pct + two_sf * mix.two_br.pct
    total = math.floor(net_sf / weighted_avg) if weighted_avg > 0 else 0

    studio = whole(total * mix.studio.pct)
    one_br = whole(total * mix.one_br.pct)
    two_br = max(0, total - studio - one_br)

    return ScenarioYield(
        name=name,
        studio=UnitLine(studio, whole(studio_sf)),
        one_br=UnitLine(one_br, whole(one_sf)),
        two_br=UnitLine(two_br, whole(two_sf)),
        total=total,
        net_sf=whole(net_sf),
        efficiency=efficiency,
    )


def apply_layout_factor(scenario: ScenarioYield, factor: float) -> ScenarioYield:
    """
    Rescale each unit line independently; the total is re-summed, so it can
    drift by a unit or two from ``scenario.total x factor``.
    """
    if factor == 1.0:
        return scenario
    studio = whole(scenario.studio.units * factor)
    one_br = whole(scenario.one_br.units * factor)
    two_br = max(0, whole(scenario.two_br.units * factor))
    return ScenarioYield(
        name=scenario.name,
        studio=UnitLine(studio, scenario.studio.sf),
        one_br=UnitLine(one_br, scenario.one_br.sf),
        two_br=UnitLine(two_br, scenario.two_br.sf),
        total=studio + one_br + two_br,
        net_sf=scenario.net_sf,
        efficiency=scenario.efficiency,
    )


def estimate_unit_yield(profile: PropertyProfile, assumptions: Assumptions) -> UnitYieldResult:
    """
    Partial conversions size the yield off the converted floors only
    (``profile.conversion_sf`` / ``conversion_stories``).
    """
    total_sf = profile.conversion_sf
    stories = profile.conversion_stories or 1
    width = profile.floorplate_width or assumptions.default_floorplate_width
    depth = profile.floorplate_depth or assumptions.default_floorplate_depth

    building_class = BuildingClass.classify(profile.use_type, stories)
    eff = assumptions.efficiency.get(building_class, assumptions.efficiency[BuildingClass.OFFICE_MID_RISE])
    penalty = assumptions.core_penalty(depth)
    mix_key, mix = assumptions.unit_mix_for(width)

    eff_low = max(eff.low - penalty, assumptions.efficiency_floor_conservative)
    eff_base = max(eff.mid - penalty, assumptions.efficiency_floor_base)
    eff_high = max(eff.high - penalty, assumptions.efficiency_floor_optimistic)

    layout = stress_test_layout(depth, profile.corridor_width, profile.min_window_distance, assumptions)

    conservative = _scenario_units(
        "conservative", total_sf * eff_low, eff_low, mix, assumptions.unit_size_mult_conservative
    )
    base = _scenario_units("base", total_sf * eff_base, eff_base, mix, 1.0)
    optimistic = _scenario_units(
        "optimistic", total_sf * eff_high, eff_high, mix, assumptions.unit_size_mult_optimistic
    )

    return UnitYieldResult(
        building_class=building_class.value,
        conservative=apply_layout_factor(conservative, layout.factor),
        base=apply_layout_factor(base, layout.factor),
        optimistic=apply_layout_factor(optimistic, layout.factor),
        parking_bonus_units=profile.surface_parking // assumptions.parking_spaces_per_bonus_unit,
        layout=layout,
        core_penalty_pct=whole(penalty * 100),
        mix_bucket=mix_key,
        unit_mix={
            "studio": mix.studio.model_dump(),
            "one_br": mix.one_br.model_dump(),
            "two_br": mix.two_br.model_dump(),
        },
        floorplate_width=width,
        floorplate_depth=depth,
        total_sf=total_sf,
        surface_parking=profile.surface_parking,
        structured_parking=profile.structured_parking,
    )
