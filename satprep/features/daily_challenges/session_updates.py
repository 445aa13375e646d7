from __future__ import annotations

from typing import Iterable, List

from satprep.models.daily_challenge import ProgressUpdate

HARD_DIFFICULTY_THRESHOLD = 3
SPEED_LIMIT_MS = 120_000
ACCURACY_MIN_QUESTIONS = 10


def updates_for_answer(
    *,
    is_correct: bool,
    current_streak: int,
    difficulty: int,
    time_spent_ms: int,
    session_domains: Iterable[str],
    session_answered: int,
    session_correct: int,
) -> List[ProgressUpdate]:
    """
    Translate one submitted practice answer into challenge progress updates.

    session_* values already include this answer. Rules:
    - questions: +1 per answer
    - streak: current correct-answer streak (the engine keeps the day's max)
    - domain_variety: distinct domains practiced this session (absolute,
      the engine keeps the day's best); skipped when no domains are known
    - hard_questions: +1 for a correct answer at difficulty >= 3
    - speed: +1 for an answer under two minutes
    - accuracy: session percentage (absolute), only once 10+ questions answered
    """
    updates = [
        ProgressUpdate(type="questions", value=1),
        ProgressUpdate(type="streak", value=max(0, current_streak)),
    ]

    distinct_domains = len(set(session_domains))
    if distinct_domains:
        updates.append(ProgressUpdate(type="domain_variety", value=distinct_domains, is_absolute=True))

    if is_correct and difficulty >= HARD_DIFFICULTY_THRESHOLD:
        updates.append(ProgressUpdate(type="hard_questions", value=1))

    if 0 <= time_spent_ms < SPEED_LIMIT_MS:
        updates.append(ProgressUpdate(type="speed", value=1))

    if session_answered >= ACCURACY_MIN_QUESTIONS:
        accuracy = (100 * max(0, session_correct)) // session_answered
        updates.append(ProgressUpdate(type="accuracy", value=min(accuracy, 100), is_absolute=True))

    return updates
