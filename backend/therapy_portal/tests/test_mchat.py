"""Tests for M-CHAT-R scoring and risk classification."""

import pathlib
import sys

import pytest
from pydantic import ValidationError

sys.path.append(str(pathlib.Path(__file__).resolve().parents[2]))

from therapy_portal.mchat import (
    CRITICAL_ITEM_NUMBERS,
    MCHAT_QUESTIONS,
    RISK_HIGH,
    RISK_LOW,
    RISK_MEDIUM,
    YES_AT_RISK,
    classify_risk,
    get_critical_questions,
    get_question,
    get_risk_color,
    get_risk_display_text,
    is_complete,
    is_concerning_answer,
    score_mchat_r,
)


def _safe_answers() -> dict:
    """Every question answered with the not-at-risk response."""
    return {str(q["number"]): not q["yes_is_at_risk"] for q in MCHAT_QUESTIONS}


def _with_risky(numbers) -> dict:
    answers = _safe_answers()
    for n in numbers:
        answers[str(n)] = n in YES_AT_RISK
    return answers


def test_question_bank_shape():
    assert [q["number"] for q in MCHAT_QUESTIONS] == list(range(1, 21))
    assert sorted(YES_AT_RISK) == [2, 5, 12]
    assert [q["number"] for q in get_critical_questions()] == CRITICAL_ITEM_NUMBERS
    assert get_question(13)["question"] == "Does your child walk?"
    assert get_question(21) is None


def test_answer_polarity():
    assert is_concerning_answer(2, True) is True
    assert is_concerning_answer(2, False) is False
    assert is_concerning_answer(1, False) is True
    assert is_concerning_answer(1, True) is False


def test_all_safe_answers_score_zero():
    result = score_mchat_r(_safe_answers())
    assert result.total_score == 0
    assert result.critical_items_count == 0
    assert result.risk_level == RISK_LOW
    assert result.follow_up_needed is False


def test_all_risky_answers_score_twenty():
    result = score_mchat_r(_with_risky(range(1, 21)))
    assert result.total_score == 20
    assert result.critical_items_count == 7
    assert result.risk_level == RISK_HIGH


def test_score_never_decreases_as_risky_answers_are_added():
    previous = 0
    risky = []
    for number in range(1, 21):
        risky.append(number)
        score = score_mchat_r(_with_risky(risky)).total_score
        assert score >= previous
        previous = score
    assert previous == 20


def test_tier_boundaries():
    low = score_mchat_r(_with_risky([1, 3]))
    assert (low.total_score, low.risk_level, low.follow_up_needed) == (2, RISK_LOW, False)

    medium = score_mchat_r(_with_risky([1, 3, 4]))
    assert (medium.total_score, medium.risk_level, medium.follow_up_needed) == (
        3,
        RISK_MEDIUM,
        True,
    )

    upper_medium = score_mchat_r(_with_risky(range(1, 8)))
    assert upper_medium.total_score == 7
    assert upper_medium.risk_level == RISK_MEDIUM

    high = score_mchat_r(_with_risky(range(1, 9)))
    assert (high.total_score, high.risk_level, high.follow_up_needed) == (8, RISK_HIGH, True)
    assert high.message.startswith("High risk.")


def test_classify_risk_messages():
    assert classify_risk(0)[2].startswith("Low risk.")
    assert "M-CHAT-R/F" in classify_risk(5)[2]
    assert classify_risk(20)[0] == RISK_HIGH


def test_critical_items_counted_separately():
    result = score_mchat_r(_with_risky([2, 5, 12, 1]))
    assert result.total_score == 4
    assert result.critical_items_count == 3


def test_missing_answers_are_skipped():
    answers = _with_risky([1, 2, 3])
    for n in range(10, 21):
        del answers[str(n)]
    assert is_complete(answers) is False
    result = score_mchat_r(answers)
    assert result.total_score == 3
    assert score_mchat_r({}).total_score == 0


def test_integer_keys_are_accepted():
    answers = {int(k): v for k, v in _with_risky([4, 14]).items()}
    assert is_complete(answers)
    result = score_mchat_r(answers)
    assert result.total_score == 2
    assert result.critical_items_count == 1


def test_result_is_immutable():
    result = score_mchat_r(_safe_answers())
    with pytest.raises(ValidationError):
        result.total_score = 5


def test_display_helpers():
    assert get_risk_display_text(RISK_MEDIUM) == "Medium Risk"
    assert get_risk_color(RISK_LOW) == "#4CAF50"
    assert get_risk_color(RISK_HIGH) == "#F44336"
