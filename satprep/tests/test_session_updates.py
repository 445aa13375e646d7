from satprep.features.daily_challenges.session_updates import updates_for_answer


def _by_type(updates):
    return {u.type: u for u in updates}


def _answer(**overrides):
    params = dict(
        is_correct=True,
        current_streak=1,
        difficulty=1,
        time_spent_ms=30_000,
        session_domains=["algebra"],
        session_answered=1,
        session_correct=1,
    )
    params.update(overrides)
    return _by_type(updates_for_answer(**params))


def test_every_answer_counts_questions_streak_and_domains():
    updates = _answer(current_streak=4, session_domains=["algebra", "geometry", "algebra"])

    assert updates["questions"].value == 1
    assert updates["questions"].is_absolute is False
    assert updates["streak"].value == 4
    assert updates["domain_variety"].value == 2
    assert updates["domain_variety"].is_absolute is True


def test_hard_question_requires_correct_and_difficulty():
    assert "hard_questions" in _answer(is_correct=True, difficulty=3)
    assert "hard_questions" not in _answer(is_correct=True, difficulty=2)
    assert "hard_questions" not in _answer(is_correct=False, difficulty=5, session_correct=0)


def test_speed_under_two_minutes():
    assert "speed" in _answer(time_spent_ms=119_999)
    assert "speed" not in _answer(time_spent_ms=120_000)


def test_accuracy_only_after_ten_answers():
    assert "accuracy" not in _answer(session_answered=9, session_correct=9)

    updates = _answer(session_answered=12, session_correct=10)
    assert updates["accuracy"].value == 83
    assert updates["accuracy"].is_absolute is True


def test_wrong_answer_reports_zero_streak():
    updates = _answer(is_correct=False, current_streak=0, session_correct=0)

    assert updates["streak"].value == 0


def test_no_domain_update_without_known_domains():
    assert "domain_variety" not in _answer(session_domains=[])
