# tests/test_physical.py
import pytest
from hypothesis import given, strategies as st

from reloft.analysis.physical import (
    assess_life_safety,
    assess_physical,
    data_reliability,
    foundation_flag,
    label_for_total,
    score_floorplate,
)
from reloft.domain.property import PropertyProfile

from fixtures.properties import deep_sealed_tower, empty_profile, midrise_office


@pytest.mark.parametrize(
    "depth, expected",
    [
        (0, 8),
        (30, 20),
        (35, 20),
        (40, 18),
        (45, 18),
        (45.5, 13),
        (55, 13),
        (60, 7),
        (70, 7),
        (71, 3),
    ],
)
def test_floorplate_depth_bands(depth, expected):
    assert score_floorplate(PropertyProfile(floorplate_depth=depth)).score == expected


def test_strong_candidate_totals_and_label():
    result = assess_physical(midrise_office())

    # Hollywood 16, 8 stories 19, depth 40 18, operable 19, 20 surface spaces 19
    assert [c.score for c in result.categories] == [16, 19, 18, 19, 19]
    assert result.total == 91
    assert result.label == "Exceptional Physical Candidate"
    assert result.color == "green"
    assert result.foundation_flag is None


def test_character_features_bonus_is_capped():
    features = "terrazzo,skylights,high ceilings,brick,steel windows"
    low_rise = PropertyProfile(stories=6, character_features=features)
    assert assess_physical(low_rise).building_shape.score == 20


def test_sparse_profile_degrades_without_raising():
    result = assess_physical(empty_profile())

    assert result.total == sum(c.score for c in result.categories)
    assert result.reliability.level == "Low"
    assert result.reliability.filled == 0
    assert result.foundation_flag.severity == "medium"
    # unknown seismic era still produces a verify flag
    assert any(f.category == "Fire/Life Safety" and f.severity == "medium" for f in result.life_safety_flags)


def test_life_safety_flags_for_problem_tower():
    flags = assess_life_safety(deep_sealed_tower())
    by_message = [(f.category, f.severity) for f in flags]

    assert ("Egress", "high") in by_message
    assert ("Fire/Life Safety", "high") in by_message
    # sealed glass plus high-rise ordinance
    assert sum(1 for c, s in by_message if c == "Fire/Life Safety" and s == "medium") == 2
    assert foundation_flag(deep_sealed_tower()).severity == "high"


def test_life_safety_does_not_move_the_score():
    base = midrise_office()
    risky = base.model_copy(update={"elevators": 0, "loading_dock": False})
    assert assess_physical(base).total == assess_physical(risky).total


def test_data_reliability_counts_core_fields():
    result = data_reliability(midrise_office())
    assert result.filled == result.total == 11
    assert result.missing == ()
    assert result.level == "High"


@pytest.mark.parametrize(
    "total, label",
    [(100, "Exceptional"), (85, "Exceptional"), (84, "Strong"), (70, "Strong"), (50, "Good"), (30, "Conditional"), (29, "Difficult")],
)
def test_label_breakpoints(total, label):
    assert label_for_total(total)[0].startswith(label)


@given(
    stories=st.integers(min_value=0, max_value=80),
    depth=st.floats(min_value=0, max_value=400, allow_nan=False),
    surface=st.integers(min_value=0, max_value=500),
    structured=st.integers(min_value=0, max_value=500),
    window=st.sampled_from(["Operable", "Ribbon", "Fixed", "Sealed", "Unknown", "glass block"]),
    neighborhood=st.sampled_from(["", "Downtown LA", "Koreatown", "Burbank", "Long Beach", "Van Nuys", "Other LA"]),
    features=st.lists(st.sampled_from(["a", "b", "c", "d", "e", "f"]), max_size=8),
)
def test_category_scores_stay_in_bounds(stories, depth, surface, structured, window, neighborhood, features):
    profile = PropertyProfile(
        stories=stories,
        floorplate_depth=depth,
        surface_parking=surface,
        structured_parking=structured,
        window_type=window,
        neighborhood=neighborhood,
        character_features=features,
    )
    result = assess_physical(profile)

    assert all(0 <= c.score <= 20 for c in result.categories)
    assert result.total == sum(c.score for c in result.categories)
    assert 0 <= result.total <= 100
