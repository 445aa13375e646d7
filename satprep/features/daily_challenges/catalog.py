from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple

from satprep.models.daily_challenge import ChallengeType


@dataclass(frozen=True)
class ChallengeVariation:
    target: int
    description: str
    reward: int


@dataclass(frozen=True)
class ChallengeTemplate:
    type: ChallengeType
    variations: Tuple[ChallengeVariation, ...]


# Static catalog: 6 types, each with 1-4 variations (target, description, reward points)
CHALLENGE_TEMPLATES: Tuple[ChallengeTemplate, ...] = (
    ChallengeTemplate(
        type="streak",
        variations=(
            ChallengeVariation(5, "Get a 5-question streak", 50),
            ChallengeVariation(7, "Get a 7-question streak", 70),
            ChallengeVariation(10, "Get a 10-question streak", 100),
        ),
    ),
    ChallengeTemplate(
        type="questions",
        variations=(
            ChallengeVariation(10, "Answer 10 questions", 30),
            ChallengeVariation(15, "Answer 15 questions", 50),
            ChallengeVariation(20, "Answer 20 questions", 70),
            ChallengeVariation(25, "Answer 25 questions", 90),
        ),
    ),
    ChallengeTemplate(
        type="accuracy",
        variations=(
            ChallengeVariation(80, "Achieve 80% accuracy (10+ questions)", 60),
            ChallengeVariation(85, "Achieve 85% accuracy (10+ questions)", 80),
        ),
    ),
    ChallengeTemplate(
        type="domain_variety",
        variations=(
            ChallengeVariation(2, "Practice 2 different domains", 40),
            ChallengeVariation(3, "Practice 3 different domains", 60),
        ),
    ),
    ChallengeTemplate(
        type="hard_questions",
        variations=(
            ChallengeVariation(3, "Answer 3 hard questions correctly", 75),
            ChallengeVariation(5, "Answer 5 hard questions correctly", 100),
        ),
    ),
    ChallengeTemplate(
        type="speed",
        variations=(
            ChallengeVariation(5, "Answer 5 questions in under 2 minutes each", 50),
        ),
    ),
)

TEMPLATES_BY_TYPE: Dict[str, ChallengeTemplate] = {t.type: t for t in CHALLENGE_TEMPLATES}
