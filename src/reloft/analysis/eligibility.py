# src/reloft/analysis/eligibility.py
from __future__ import annotations

from reloft.domain.assumptions import Assumptions
from reloft.domain.enums import AffordableStrategy, FloorplateShape, UseType, VacancyBand, Zoning
from reloft.domain.property import PropertyProfile
from reloft.domain.results import Eligibility, FinancingNote, OpportunityFactor, OpportunityScore

OPPORTUNITY_TIERS = (
    (80, "Exceptional", "Prioritize for outreach and deal packaging"),
    (60, "Strong", "Merits deeper due diligence and lender conversations"),
    (40, "Moderate", "Viable with right ownership motivation and structure"),
    (20, "Limited", "Monitor as market conditions evolve"),
    (0, "Low", "Confirm eligibility details before pursuing"),
)


def building_age(profile: PropertyProfile, assumptions: Assumptions) -> int:
    """
    Age at the assumptions' baseline year. A missing year_built means age 0
    (lowest-confidence branch of every age rule).
    """
    year = profile.year_built or assumptions.current_year
    return assumptions.current_year - year


def assess_eligibility(profile: PropertyProfile, assumptions: Assumptions) -> Eligibility:
    age = building_age(profile, assumptions)
    is_parking = profile.use_type is UseType.PARKING

    if profile.in_downtown_program:
        return Eligibility(
            status="conditional",
            verdict="Downtown: Separate Program",
            explanation=(
                "Downtown Los Angeles operates under the Downtown Community Plan Adaptive Reuse "
                "Program, which has its own regulations and incentives separate from the Citywide "
                "ARO. Evaluate under that program's criteria."
            ),
            building_age=age,
        )

    if age >= assumptions.aro_by_right_age or (is_parking and age >= assumptions.aro_parking_by_right_age):
        minimum = (
            f"{assumptions.aro_parking_by_right_age}-year minimum for parking structures"
            if is_parking
            else f"{assumptions.aro_by_right_age}-year minimum"
        )
        return Eligibility(
            status="eligible",
            verdict="✓ By-Right Eligible",
            explanation=(
                f"At {age} years old the property meets the minimum age threshold ({minimum}). "
                "Conversion requires only city staff approval with no discretionary review."
            ),
            building_age=age,
        )

    if age >= assumptions.aro_conditional_age:
        return Eligibility(
            status="conditional",
            verdict="◐ Conditional — ZA Approval Required",
            explanation=(
                f"At {age} years old the property falls in the conditional window "
                f"({assumptions.aro_conditional_age}–{assumptions.aro_by_right_age - 1} years). "
                "Conversion needs Zoning Administrator approval and discretionary review."
            ),
            building_age=age,
        )

    plural = "" if age == 1 else "s"
    return Eligibility(
        status="ineligible",
        verdict="✗ Below Minimum Age Threshold",
        explanation=(
            f"At {age} year{plural} old the property does not meet the minimum building age "
            f"({assumptions.aro_conditional_age} years conditional, "
            f"{assumptions.aro_by_right_age} years by-right)."
        ),
        building_age=age,
    )


# ---------------------------------------------------------------------
# Opportunity score: seven intake factors, capped at 100
# ---------------------------------------------------------------------

_VACANCY_POINTS = {
    VacancyBand.SEVERE: (22, "Severely distressed — strong conversion catalyst", "positive"),
    VacancyBand.SIGNIFICANT: (16, "Significant vacancy supports conversion thesis", "positive"),
    VacancyBand.MATERIAL: (10, "Material vacancy — conversion may pencil", "neutral"),
    VacancyBand.MODERATE: (4, "Moderate vacancy", "neutral"),
}

_FLOORPLATE_POINTS = {
    FloorplateShape.NARROW: (14, "Ideal for residential unit layout — minimizes dark interior space", "positive"),
    FloorplateShape.MEDIUM: (8, "Workable for residential with some interior units needing light wells", "neutral"),
    FloorplateShape.DEEP: (2, "Deep floorplate increases conversion cost — may need light wells or courts", "negative"),
}

_AFFORDABLE_POINTS = {
    AffordableStrategy.FULL: (10, "Maximum density bonus + height increase + HUD financing eligible"),
    AffordableStrategy.PARTIAL_25: (8, "Strong density bonus tier + tax-exempt bond financing potential"),
    AffordableStrategy.PARTIAL_11: (5, "Base density bonus tier qualifying"),
}


def _age_factor(age: int) -> OpportunityFactor:
    value = f"{age} years"
    if age >= 40:
        return OpportunityFactor("Building Age", value, "Well-seasoned asset — higher conversion likelihood", 20, "positive")
    if age >= 15:
        return OpportunityFactor("Building Age", value, "Meets by-right age threshold", 14, "positive")
    if age >= 5:
        return OpportunityFactor("Building Age", value, "Conditional path — ZA approval needed", 6, "neutral")
    return OpportunityFactor("Building Age", value, "Below minimum age threshold", 0, "negative")


def _vacancy_factor(band: VacancyBand) -> OpportunityFactor:
    if band in _VACANCY_POINTS:
        pts, note, sentiment = _VACANCY_POINTS[band]
        return OpportunityFactor("Vacancy Rate", band.value, note, pts, sentiment)
    if band is VacancyBand.UNKNOWN:
        return OpportunityFactor("Vacancy Rate", band.value, "Vacancy data not provided", 0, "neutral")
    return OpportunityFactor("Vacancy Rate", band.value, "Low vacancy — owner less motivated to convert", 0, "negative")


def _use_factor(use: UseType) -> OpportunityFactor:
    if use in (UseType.OFFICE, UseType.HOTEL):
        return OpportunityFactor(
            "Current Use", use.value,
            "Prime conversion candidate — office/hotel to residential is core ARO use case", 16, "positive",
        )
    if use in (UseType.INDUSTRIAL, UseType.RETAIL, UseType.PARKING):
        return OpportunityFactor("Current Use", use.value, "Eligible use type with conversion potential", 12, "positive")
    value = "Not specified" if use is UseType.UNKNOWN else use.value
    return OpportunityFactor("Current Use", value, "Use type not in primary ARO conversion categories", 0, "neutral")


def _floorplate_factor(shape: FloorplateShape) -> OpportunityFactor:
    if shape in _FLOORPLATE_POINTS:
        pts, note, sentiment = _FLOORPLATE_POINTS[shape]
        return OpportunityFactor("Floorplate", shape.value, note, pts, sentiment)
    return OpportunityFactor("Floorplate", "Unknown", "Floorplate data not available", 0, "neutral")


def _historic_factor(profile: PropertyProfile) -> OpportunityFactor:
    designation = profile.historic_designation
    if designation.is_designated:
        return OpportunityFactor(
            "Historic Status", designation.value,
            "20% Federal HTC + CA HTC stackable — significant equity source", 12, "positive",
        )
    if designation.value == "Unknown":
        note = "Research historic status for potential tax credit equity"
    else:
        note = "No historic designation — standard conversion path"
    return OpportunityFactor("Historic Status", designation.value, note, 0, "neutral")


def _affordable_factor(strategy: AffordableStrategy) -> OpportunityFactor:
    if strategy in _AFFORDABLE_POINTS:
        pts, note = _AFFORDABLE_POINTS[strategy]
        return OpportunityFactor("Affordable Strategy", strategy.value, note, pts, "positive")
    return OpportunityFactor("Affordable Strategy", "Market rate", "No density bonus — standard unit count", 0, "neutral")


def _zoning_factor(zoning: Zoning) -> OpportunityFactor:
    if zoning.is_commercial:
        return OpportunityFactor("Zoning", zoning.value, "Commercial zone — standard ARO pathway", 6, "positive")
    if zoning is Zoning.PARKING:
        return OpportunityFactor("Zoning", zoning.value, "Parking zone with unique conversion opportunity", 8, "positive")
    if zoning.is_industrial:
        return OpportunityFactor("Zoning", zoning.value, "Industrial zone — conversion eligible under ARO", 4, "neutral")
    note = "Verify zoning via ZIMAS" if zoning is Zoning.UNKNOWN else "Check ARO eligibility for this zone"
    return OpportunityFactor("Zoning", zoning.value, note, 0, "neutral")


def score_opportunity(profile: PropertyProfile, assumptions: Assumptions) -> OpportunityScore:
    """
    Intake-level opportunity score used for prospecting and the map layer.

    Unlike the DealScore this needs no underwriting: it is a pure function
    of the profile's classification fields.
    """
    factors = (
        _age_factor(building_age(profile, assumptions)),
        _vacancy_factor(profile.vacancy_rate),
        _use_factor(profile.use_type),
        _floorplate_factor(profile.floorplate_shape),
        _historic_factor(profile),
        _affordable_factor(profile.affordable_strategy),
        _zoning_factor(profile.zoning),
    )
    score = min(sum(f.points for f in factors), 100)
    _, tier, desc = next(t for t in OPPORTUNITY_TIERS if score >= t[0])
    return OpportunityScore(score=score, tier=tier, tier_description=desc, factors=factors)


def financing_notes(profile: PropertyProfile, assumptions: Assumptions) -> tuple[FinancingNote, ...]:
    notes: list[FinancingNote] = []
    value = profile.acquisition_price

    if value >= assumptions.transfer_tax_threshold:
        notes.append(
            FinancingNote(
                kind="warning",
                title="Measure ULA Transfer Tax",
                text=(
                    f"At an estimated value of ${value / 1_000_000:.1f}M this transaction is subject to "
                    f"Measure ULA. Transactions $5M–$10M incur a "
                    f"{assumptions.transfer_tax_mid_rate * 100:g}% transfer tax; over $10M incur "
                    f"{assumptions.transfer_tax_upper_rate.high * 100:g}%. Factor this into acquisition basis."
                ),
            )
        )

    if profile.affordable_strategy.has_affordable:
        notes.append(
            FinancingNote(
                kind="info",
                title="Affordable Financing Resources",
                text=(
                    "CDLAC/TCAC tax-exempt bond allocation may be available for projects with ≥50% "
                    "affordable units. HCIDLA provides gap financing through NOFA rounds."
                ),
            )
        )

    return tuple(notes)
