"""Star milestones, logging streaks and the stars-per-log rule."""

from datetime import date, timedelta
from typing import Iterable, Optional

STAR_MILESTONES = [
    {"stars": 10, "title": "First Steps", "icon": "🌟"},
    {"stars": 50, "title": "Rising Star", "icon": "⭐"},
    {"stars": 100, "title": "Star Explorer", "icon": "🌟"},
    {"stars": 250, "title": "Star Champion", "icon": "🏆"},
    {"stars": 500, "title": "Super Star", "icon": "💫"},
    {"stars": 1000, "title": "Star Master", "icon": "👑"},
]

MOOD_STARS = {
    "great": 3,
    "good": 2,
    "okay": 1,
    "difficult": 1,
    "challenging": 1,
}


def get_next_milestone(current_stars: int) -> Optional[dict]:
    """Return the next star milestone with remaining count and percent progress.

    ``None`` means every milestone has been reached.
    """
    for milestone in STAR_MILESTONES:
        if current_stars < milestone["stars"]:
            return {
                **milestone,
                "remaining": milestone["stars"] - current_stars,
                "progress": current_stars / milestone["stars"] * 100,
            }
    return None


def calculate_streak(log_dates: Iterable[date], today: date | None = None) -> int:
    """Count consecutive days ending ``today`` that have at least one log."""
    today = today or date.today()
    logged = set(log_dates)
    streak = 0
    day = today
    while day in logged:
        streak += 1
        day -= timedelta(days=1)
    return streak


def stars_for_log(
    completed: bool,
    achieved_value: float | None = None,
    target_value: float | None = None,
    mood: str | None = None,
) -> int:
    """Stars awarded for one daily progress entry."""
    if not completed:
        return 0
    if target_value and achieved_value is not None:
        percentage = achieved_value / target_value * 100
        if percentage >= 100:
            return 3
        if percentage >= 75:
            return 2
        return 1
    return MOOD_STARS.get(mood, 1)
