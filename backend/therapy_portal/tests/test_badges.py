"""Tests for the badge catalog and qualification rules."""

import pathlib
import sys

sys.path.append(str(pathlib.Path(__file__).resolve().parents[2]))

from therapy_portal.badges import (
    BADGE_DEFINITIONS,
    GOALS_COMPLETED,
    STARS_TOTAL,
    STREAK_DAYS,
    evaluate_new_badges,
    get_badge_by_name,
    get_badges_by_type,
    get_next_badge,
)


def test_catalog_thresholds_ascend_within_type():
    for kind in (STARS_TOTAL, GOALS_COMPLETED, STREAK_DAYS):
        values = [b.requirement_value for b in get_badges_by_type(kind)]
        assert values == sorted(values)
    assert len(BADGE_DEFINITIONS) == 16
    assert len({b.name for b in BADGE_DEFINITIONS}) == 16


def test_no_stats_no_badges():
    assert evaluate_new_badges(0, 0, 0, []) == []


def test_multiple_thresholds_crossed_in_ascending_order():
    names = [b.name for b in evaluate_new_badges(30, 0, 0, [])]
    assert names == ["First Star", "Star Collector", "Star Explorer"]


def test_threshold_is_inclusive():
    names = [b.name for b in evaluate_new_badges(10, 1, 3, [])]
    assert names == ["First Star", "Star Collector", "Goal Getter", "Getting Started"]


def test_already_earned_badges_are_never_returned():
    earned = {"First Star", "Goal Getter"}
    new = evaluate_new_badges(500, 25, 60, earned)
    assert not earned & {b.name for b in new}
    assert len(new) == len(BADGE_DEFINITIONS) - 2


def test_each_type_uses_its_own_statistic():
    names = [b.name for b in evaluate_new_badges(0, 0, 7, [])]
    assert names == ["Getting Started", "On Fire"]
    names = [b.name for b in evaluate_new_badges(0, 5, 0, [])]
    assert names == ["Goal Getter", "Goal Crusher"]


def test_lookup_helpers():
    assert get_badge_by_name("On Fire").requirement_value == 7
    assert get_badge_by_name("Nope") is None
    assert get_next_badge(STARS_TOTAL, 0).name == "First Star"
    assert get_next_badge(STARS_TOTAL, 10).name == "Star Explorer"
    assert get_next_badge(STREAK_DAYS, 60) is None
