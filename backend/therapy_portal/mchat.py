"""M-CHAT-R (Modified Checklist for Autism in Toddlers, Revised).

The question bank and the scoring rules live together here so the scorer
always agrees with the polarity flags shown to parents.  Scoring is a pure
function of the answers; persisting a result is handled in ``crud``.
"""

from typing import Mapping, Optional
from pydantic import BaseModel, ConfigDict

RISK_LOW = "low"
RISK_MEDIUM = "medium"
RISK_HIGH = "high"

QUESTION_COUNT = 20

# Items used in medium-risk interpretation guidance
CRITICAL_ITEM_NUMBERS = [2, 5, 12, 14, 17, 18, 20]

MCHAT_QUESTIONS = [
    {
        "number": 1,
        "question": "If you point at something across the room, does your child look at it?",
        "examples": [
            "If you point at a toy or an animal, does your child look at the toy or animal?"
        ],
        "yes_is_at_risk": False,
    },
    {
        "number": 2,
        "question": "Have you ever wondered if your child might be deaf?",
        "examples": [],
        "yes_is_at_risk": True,
    },
    {
        "number": 3,
        "question": "Does your child play pretend or make-believe?",
        "examples": [
            "Pretend to drink from an empty cup",
            "Pretend to talk on a phone",
            "Pretend to feed a doll or stuffed animal",
        ],
        "yes_is_at_risk": False,
    },
    {
        "number": 4,
        "question": "Does your child like climbing on things?",
        "examples": ["Furniture", "Playground equipment", "Stairs"],
        "yes_is_at_risk": False,
    },
    {
        "number": 5,
        "question": "Does your child make unusual finger movements near his or her eyes?",
        "examples": ["Wiggling fingers close to eyes"],
        "yes_is_at_risk": True,
    },
    {
        "number": 6,
        "question": "Does your child point with one finger to ask for something or to get help?",
        "examples": ["Pointing to a snack or toy out of reach"],
        "yes_is_at_risk": False,
    },
    {
        "number": 7,
        "question": "Does your child point with one finger to show you something interesting?",
        "examples": ["Pointing at an airplane in the sky or a big truck in the road"],
        "yes_is_at_risk": False,
    },
    {
        "number": 8,
        "question": "Is your child interested in other children?",
        "examples": [
            "Does your child watch other children?",
            "Smile at them?",
            "Go to them?",
        ],
        "yes_is_at_risk": False,
    },
    {
        "number": 9,
        "question": "Does your child show you things by bringing them to you or holding them up for you to see?",
        "examples": ["Not to get help, but just to share"],
        "yes_is_at_risk": False,
    },
    {
        "number": 10,
        "question": "Does your child respond when you call his or her name?",
        "examples": [
            "Does he or she look up, talk or babble, or stop what he or she is doing?"
        ],
        "yes_is_at_risk": False,
    },
    {
        "number": 11,
        "question": "When you smile at your child, does he or she smile back at you?",
        "examples": [],
        "yes_is_at_risk": False,
    },
    {
        "number": 12,
        "question": "Does your child get upset by everyday noises?",
        "examples": ["Vacuum cleaner", "Blender", "Loud music"],
        "yes_is_at_risk": True,
    },
    {
        "number": 13,
        "question": "Does your child walk?",
        "examples": [],
        "yes_is_at_risk": False,
    },
    {
        "number": 14,
        "question": "Does your child look you in the eye when you are talking to him or her, playing with him or her, or dressing him or her?",
        "examples": [],
        "yes_is_at_risk": False,
    },
    {
        "number": 15,
        "question": "Does your child try to copy what you do?",
        "examples": ["Wave bye-bye", "Clap", "Make a funny noise when you make one"],
        "yes_is_at_risk": False,
    },
    {
        "number": 16,
        "question": "If you turn your head to look at something, does your child look around to see what you are looking at?",
        "examples": [],
        "yes_is_at_risk": False,
    },
    {
        "number": 17,
        "question": "Does your child try to get you to watch him or her?",
        "examples": [
            "Does your child look at you for praise, or say 'look' or 'watch me'?"
        ],
        "yes_is_at_risk": False,
    },
    {
        "number": 18,
        "question": "Does your child understand when you tell him or her to do something?",
        "examples": [
            "If you don't point, can your child understand 'put the book on the chair' or 'bring me the blanket'?"
        ],
        "yes_is_at_risk": False,
    },
    {
        "number": 19,
        "question": "If something new happens, does your child look at your face to see how you feel about it?",
        "examples": ["If he or she hears a strange or funny noise", "Sees a new toy"],
        "yes_is_at_risk": False,
    },
    {
        "number": 20,
        "question": "Does your child like movement activities?",
        "examples": ["Being swung", "Being bounced on your knee"],
        "yes_is_at_risk": False,
    },
]

YES_AT_RISK = {q["number"] for q in MCHAT_QUESTIONS if q["yes_is_at_risk"]}

RISK_MESSAGES = {
    RISK_LOW: "Low risk. If child is younger than 24 months, screen again after second birthday.",
    RISK_MEDIUM: "Medium risk. Administer the Follow-Up (M-CHAT-R/F) to get additional information about at-risk responses.",
    RISK_HIGH: "High risk. Immediate referral for diagnostic evaluation and eligibility evaluation for early intervention is recommended.",
}

RISK_COLORS = {
    RISK_LOW: "#4CAF50",
    RISK_MEDIUM: "#FF9800",
    RISK_HIGH: "#F44336",
}

RISK_DISPLAY_TEXT = {
    RISK_LOW: "Low Risk",
    RISK_MEDIUM: "Medium Risk",
    RISK_HIGH: "High Risk",
}


class MChatResult(BaseModel):
    """Outcome of scoring one M-CHAT-R questionnaire."""

    model_config = ConfigDict(frozen=True)

    total_score: int
    risk_level: str
    critical_items_count: int
    follow_up_needed: bool
    message: str


def get_question(number: int) -> Optional[dict]:
    """Return the question with the given number or ``None``."""
    for q in MCHAT_QUESTIONS:
        if q["number"] == number:
            return q
    return None


def get_critical_questions() -> list[dict]:
    return [q for q in MCHAT_QUESTIONS if q["number"] in CRITICAL_ITEM_NUMBERS]


def is_concerning_answer(question_number: int, answer: bool) -> bool:
    """Return ``True`` when ``answer`` is the at-risk response for the question."""
    if question_number in YES_AT_RISK:
        return answer is True
    return answer is False


def _lookup(answers: Mapping, number: int) -> Optional[bool]:
    # Stored answers use string keys ("1".."20"); callers may also pass ints.
    answer = answers.get(str(number))
    if answer is None:
        answer = answers.get(number)
    return answer


def is_complete(answers: Mapping) -> bool:
    """Return ``True`` if every question has an answer."""
    return all(
        _lookup(answers, n) is not None for n in range(1, QUESTION_COUNT + 1)
    )


def classify_risk(total_score: int) -> tuple[str, bool, str]:
    """Map a total score to ``(risk_level, follow_up_needed, message)``."""
    if total_score <= 2:
        level, follow_up = RISK_LOW, False
    elif total_score <= 7:
        level, follow_up = RISK_MEDIUM, True
    else:
        level, follow_up = RISK_HIGH, True
    return level, follow_up, RISK_MESSAGES[level]


def score_mchat_r(answers: Mapping) -> MChatResult:
    """Score a set of answers and classify the risk tier.

    Unanswered questions are skipped rather than treated as errors, so a
    partial answer set yields a partial score.
    """
    total_score = 0
    critical_items_count = 0
    for number in range(1, QUESTION_COUNT + 1):
        answer = _lookup(answers, number)
        if answer is None or not is_concerning_answer(number, answer):
            continue
        total_score += 1
        if number in CRITICAL_ITEM_NUMBERS:
            critical_items_count += 1

    risk_level, follow_up_needed, message = classify_risk(total_score)
    return MChatResult(
        total_score=total_score,
        risk_level=risk_level,
        critical_items_count=critical_items_count,
        follow_up_needed=follow_up_needed,
        message=message,
    )


def get_risk_color(risk_level: str) -> str:
    return RISK_COLORS[risk_level]


def get_risk_display_text(risk_level: str) -> str:
    return RISK_DISPLAY_TEXT[risk_level]
