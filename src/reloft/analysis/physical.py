# src/reloft/analysis/physical.py
from __future__ import annotations

from typing import Optional

from reloft.domain.enums import FoundationCondition, SeismicEra, Submarket, WindowType
from reloft.domain.property import PropertyProfile
from reloft.domain.results import (
    CategoryScore,
    Color,
    DataReliability,
    LifeSafetyFlag,
    PhysicalAssessment,
)

CATEGORY_MAX = 20


# =====================================================================
# Five-category rubric
# =====================================================================

_SITE_CONTEXT = {
    Submarket.PRIME_URBAN: (19, "Strong urban location with walkable amenities and transit access"),
    Submarket.ESTABLISHED: (16, "Established submarket with strong residential demand"),
    Submarket.GROWING_URBAN: (14, "Growing urban market with conversion precedent"),
    Submarket.SUBURBAN: (12, "Suburban location — residential demand needs verification"),
    Submarket.IDENTIFIED: (12, "Submarket identified — verify transit and amenity access"),
    Submarket.UNSPECIFIED: (8, "Location not specified — verify residential demand"),
}

_ENVELOPE = {
    WindowType.OPERABLE: (19, "Original operable windows — residential-ready, character asset"),
    WindowType.RIBBON: (19, "Ribbon windows — excellent for residential, character asset"),
    WindowType.FIXED: (15, "Replaceable windows — cost adder but solvable"),
    WindowType.SEALED: (7, "Sealed curtain wall — full window replacement required, significant cost"),
    WindowType.UNKNOWN: (8, "Window type unknown — field assessment needed"),
}

# (minimum total, label, color), evaluated top-down
_LABELS: tuple[tuple[int, str, Color], ...] = (
    (85, "Exceptional Physical Candidate", "green"),
    (70, "Strong Physical Candidate", "green"),
    (50, "Good Candidate — Some Design Intervention Required", "amber"),
    (30, "Conditional — Significant Challenges to Solve", "amber"),
    (0, "Difficult — Detailed Study Required Before Proceeding", "red"),
)


def _clamp(score: int) -> int:
    return max(0, min(CATEGORY_MAX, score))


def score_site_context(profile: PropertyProfile) -> CategoryScore:
    score, text = _SITE_CONTEXT[profile.submarket]
    return CategoryScore("Site Context", _clamp(score), text)


def score_building_shape(profile: PropertyProfile) -> CategoryScore:
    stories = profile.stories
    if 2 <= stories <= 8:
        score, text = 19, "Low-rise profile ideal for cost-effective conversion"
    elif 9 <= stories <= 14:
        score, text = 16, "Mid-rise — manageable conversion complexity"
    elif stories >= 15:
        score, text = 11, "High-rise adds structural and MEP complexity"
    elif stories == 1:
        score, text = 11, "Single story — may lack unit count for efficient economics"
    else:
        score, text = 12, "Building profile assessment pending"

    if len(profile.character_features) >= 5:
        score = min(CATEGORY_MAX, score + 2)
        text += ". Strong character features add premium positioning."
    return CategoryScore("Building Shape", _clamp(score), text)


def score_floorplate(profile: PropertyProfile) -> CategoryScore:
    # Ranges are contiguous so fractional depths (e.g. 45.5 ft) land in a band.
    depth = profile.floorplate_depth
    if depth <= 0:
        score, text = 8, "Depth unknown — field verify before proceeding"
    elif depth <= 35:
        score, text = 20, "Exceptional — ideal residential depth"
    elif depth <= 45:
        score, text = 18, "Excellent — efficient unit layouts achievable"
    elif depth <= 55:
        score, text = 13, "Workable — light well or atrium may help"
    elif depth <= 70:
        score, text = 7, "Challenging — significant core intervention needed"
    else:
        score, text = 3, "Very difficult — may require courtyard cut"
    return CategoryScore("Floorplate Efficiency", _clamp(score), text)


def score_envelope(profile: PropertyProfile) -> CategoryScore:
    score, text = _ENVELOPE[profile.window_type]
    return CategoryScore("Envelope", _clamp(score), text)


def score_servicing(profile: PropertyProfile, site_context: int) -> CategoryScore:
    surface = profile.surface_parking
    if surface >= 10:
        score, text = 19, "Surplus surface parking = bonus unit yield opportunity"
    elif surface >= 1:
        score, text = 16, "Adequate parking with some excess capacity"
    elif profile.structured_parking > 0:
        score, text = 12, "Parking at or near residential requirement"
    elif site_context >= 16:
        score, text = 8, "No parking — offset by strong transit/urban location"
    else:
        score, text = 5, "Parking deficit — may need to acquire or lease parking"
    return CategoryScore("Servicing", _clamp(score), text)


def label_for_total(total: int) -> tuple[str, Color]:
    for floor, label, color in _LABELS:
        if total >= floor:
            return label, color
    return _LABELS[-1][1], _LABELS[-1][2]


# =====================================================================
# Life-safety flags (independent of the numeric score)
# =====================================================================


def assess_life_safety(profile: PropertyProfile) -> tuple[LifeSafetyFlag, ...]:
    flags: list[LifeSafetyFlag] = []
    stories = profile.stories
    elevators = profile.elevators

    # Egress
    if stories >= 8 and elevators < 2:
        flags.append(LifeSafetyFlag(
            "Egress", "high",
            "High-rise with fewer than 2 elevators — code requires minimum 2 means of egress. "
            "Elevator addition likely required ($150K-400K per shaft).",
        ))
    elif stories >= 4 and elevators < 1:
        flags.append(LifeSafetyFlag(
            "Egress", "high",
            "Mid-rise with no elevator — ADA and fire code require elevator access. "
            "New shaft installation required.",
        ))
    elif stories >= 4 and elevators >= 2:
        flags.append(LifeSafetyFlag(
            "Egress", "low",
            "Adequate elevator count for egress compliance. Verify stair width meets residential "
            'code (44" minimum).',
        ))

    # Fire / life safety
    era = profile.seismic_era
    if era is SeismicEra.PRE_1980:
        flags.append(LifeSafetyFlag(
            "Fire/Life Safety", "high",
            "Pre-1980 construction — likely requires seismic retrofit + fire sprinkler upgrade to "
            "meet current residential code (LAMC 91.8903). Budget $25-55/SF for seismic + $4-8/SF "
            "for sprinklers.",
        ))
    elif era is SeismicEra.ERA_1980_1994:
        flags.append(LifeSafetyFlag(
            "Fire/Life Safety", "medium",
            "Pre-Northridge construction — seismic assessment recommended. Sprinkler system likely "
            "needs residential upgrade.",
        ))
    elif era is SeismicEra.POST_1994:
        flags.append(LifeSafetyFlag(
            "Fire/Life Safety", "low",
            "Post-1994 construction meets current seismic code. Verify sprinkler coverage meets "
            "R-2 occupancy requirements.",
        ))
    else:
        flags.append(LifeSafetyFlag(
            "Fire/Life Safety", "medium",
            "Seismic compliance unknown — verify construction era and retrofit status before "
            "budgeting. Assume residential sprinkler upgrade until confirmed.",
        ))

    if profile.window_type is WindowType.SEALED:
        flags.append(LifeSafetyFlag(
            "Fire/Life Safety", "medium",
            "Sealed curtain wall — California Building Code requires operable windows or mechanical "
            "ventilation in every habitable room. Full window replacement or HVAC redesign required.",
        ))

    if stories >= 13:
        flags.append(LifeSafetyFlag(
            "Fire/Life Safety", "medium",
            "High-rise (75ft+) — requires fire command center, standpipe system, emergency "
            "generator, and enhanced fire alarm per LAFD High-Rise Ordinance.",
        ))

    # Accessibility / logistics
    if elevators > 0:
        flags.append(LifeSafetyFlag(
            "Accessibility", "low",
            "Existing elevators provide ADA vertical access. Verify cab dimensions meet residential "
            'standards (minimum 68" x 51" clear). Ground floor and common areas require ADA path '
            "of travel.",
        ))
    elif stories >= 2:
        flags.append(LifeSafetyFlag(
            "Accessibility", "high",
            "No elevator in multi-story building — ADA requires elevator access for buildings with "
            "4+ units on upper floors. New elevator shaft required.",
        ))

    if profile.loading_dock is False and stories >= 4:
        flags.append(LifeSafetyFlag(
            "Accessibility", "medium",
            "No loading dock — construction staging and move-in logistics will be constrained. "
            "Consider temporary loading zone permit.",
        ))

    return tuple(flags)


def foundation_flag(profile: PropertyProfile) -> Optional[LifeSafetyFlag]:
    condition = profile.foundation_condition
    if condition is FoundationCondition.POOR:
        return LifeSafetyFlag(
            "Foundation", "high",
            "High Risk — foundation remediation may exceed project economics. Structural engineer "
            "review required before proceeding.",
        )
    if condition is FoundationCondition.UNKNOWN:
        return LifeSafetyFlag(
            "Foundation", "medium",
            "Foundation condition unverified — order Phase I/structural assessment before "
            "committing capital.",
        )
    if condition is FoundationCondition.FAIR:
        return LifeSafetyFlag("Foundation", "medium", "Moderate foundation remediation expected (5-15% of budget).")
    return None


# =====================================================================
# Data reliability
# =====================================================================


def data_reliability(profile: PropertyProfile) -> DataReliability:
    """
    How much of the core physical intake was actually provided.

    Numbers count when positive, classifications when not Unknown.
    """
    core = (
        ("Floorplate Depth", profile.floorplate_depth > 0),
        ("Floorplate Width", profile.floorplate_width > 0),
        ("Floor-to-Floor Height", profile.floor_to_floor > 0),
        ("Stories", profile.stories > 0),
        ("Total Building SF", profile.building_sf > 0),
        ("Typical Floor SF", profile.typical_floor_sf > 0),
        ("Window Type", profile.window_type is not WindowType.UNKNOWN),
        ("Structural System", _known(profile.structural_system)),
        ("Seismic Compliance", profile.seismic_era is not SeismicEra.UNKNOWN),
        ("MEP Condition", _known(profile.mep_condition)),
        ("Foundation Condition", profile.foundation_condition is not FoundationCondition.UNKNOWN),
    )
    missing = tuple(label for label, present in core if not present)
    filled = len(core) - len(missing)

    if filled >= 9:
        return DataReliability(
            "High", "green", "Strong data basis — estimates are well-supported by input data.",
            filled, len(core), missing,
        )
    if filled >= 5:
        return DataReliability(
            "Medium", "amber",
            f"Moderate data basis — {len(missing)} fields unverified. Estimates carry higher uncertainty.",
            filled, len(core), missing,
        )
    return DataReliability(
        "Low", "red",
        f"Limited data — {len(missing)} of {len(core)} core fields missing. "
        "Results should be treated as preliminary only.",
        filled, len(core), missing,
    )


def _known(text: str) -> bool:
    return bool(text and text.strip() and text.strip().lower() != "unknown")


def assess_physical(profile: PropertyProfile) -> PhysicalAssessment:
    """
    Score building geometry and condition across five 0–20 categories.

    Missing fields fall into each rubric's lowest-confidence branch; the
    function never raises on sparse intake.
    """
    site = score_site_context(profile)
    shape = score_building_shape(profile)
    plate = score_floorplate(profile)
    envelope = score_envelope(profile)
    servicing = score_servicing(profile, site.score)

    total = site.score + shape.score + plate.score + envelope.score + servicing.score
    label, color = label_for_total(total)

    return PhysicalAssessment(
        site_context=site,
        building_shape=shape,
        floorplate=plate,
        envelope=envelope,
        servicing=servicing,
        total=total,
        label=label,
        color=color,
        life_safety_flags=assess_life_safety(profile),
        foundation_flag=foundation_flag(profile),
        reliability=data_reliability(profile),
    )
