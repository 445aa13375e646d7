from __future__ import annotations

import random
from datetime import date, datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional

from satprep.core.errors import DuplicateChallengeSetError, ValidationError
from satprep.core.logging import log_event
from satprep.features.daily_challenges.generator import generate_challenges
from satprep.features.daily_challenges.store import ChallengeStore, get_store
from satprep.models.daily_challenge import (
    BonusResult,
    Challenge,
    DailyChallengeSet,
    ProgressResult,
    ProgressUpdate,
)

BONUS_MULTIPLIER_PERCENT = 50
DEFAULT_HISTORY_LIMIT = 7
STREAK_LOOKBACK_DAYS = 60


class DailyChallengeService:
    """Per-visitor, per-day challenge sets: creation, progress, bonus and streaks."""

    def __init__(self, store: Optional[ChallengeStore] = None, rng: Optional[random.Random] = None):
        self._store = store if store is not None else get_store()
        self._rng = rng or random.Random()

    @property
    def store(self) -> ChallengeStore:
        return self._store

    def get_daily_challenges(self, *, visitor_id: str, today: Optional[date] = None) -> Optional[DailyChallengeSet]:
        """Read today's set without creating one."""
        return self._store.get(visitor_id, today or self._utc_today())

    def generate_daily_challenges(
        self,
        *,
        visitor_id: str,
        today: Optional[date] = None,
        now: Optional[datetime] = None,
    ) -> DailyChallengeSet:
        """Get or create today's set (idempotent).

        If a concurrent caller inserts first, the store's uniqueness guard
        rejects our insert and the winner's record is returned instead.
        """
        current_date = today or self._utc_today()
        existing = self._store.get(visitor_id, current_date)
        if existing:
            return existing

        record = DailyChallengeSet(
            visitor_id=visitor_id,
            date=current_date,
            challenges=generate_challenges(rng=self._rng, now=now),
            all_completed=False,
            bonus_claimed=False,
        )
        try:
            self._store.insert(record)
        except DuplicateChallengeSetError:
            winner = self._store.get(visitor_id, current_date)
            if winner is None:
                raise
            log_event(
                "info",
                "daily_challenges.generate_race",
                request_id=None,
                visitor_id=visitor_id,
                extra={"date": current_date.isoformat()},
            )
            return winner

        log_event(
            "info",
            "daily_challenges.generated",
            request_id=None,
            visitor_id=visitor_id,
            extra={
                "date": current_date.isoformat(),
                "types": ",".join(c.type for c in record.challenges),
            },
        )
        return record

    def update_challenge_progress(
        self,
        *,
        visitor_id: str,
        updates: Iterable[ProgressUpdate],
        today: Optional[date] = None,
    ) -> ProgressResult:
        """Apply progress updates to today's set.

        A missing set is a no-op: nothing is created and an empty result is
        returned.
        """
        current_date = today or self._utc_today()
        pending = list(updates)

        def apply(record: DailyChallengeSet) -> ProgressResult:
            newly_completed: List[str] = []
            for challenge in record.challenges:
                matching = [u for u in pending if u.type == challenge.type]
                if not matching:
                    continue
                was_completed = challenge.completed
                for update in matching:
                    self._apply_update(challenge, update)
                if challenge.completed and not was_completed:
                    newly_completed.append(challenge.id)

            record.all_completed = all(c.completed for c in record.challenges)
            return ProgressResult(newly_completed=newly_completed, all_completed=record.all_completed)

        result = self._store.mutate(visitor_id, current_date, apply)
        if result is None:
            return ProgressResult(newly_completed=[], all_completed=False)

        if result.newly_completed:
            log_event(
                "info",
                "daily_challenges.progress",
                request_id=None,
                visitor_id=visitor_id,
                event_type="challenge.completed",
                extra={"newly_completed": ",".join(result.newly_completed)},
            )
            if result.all_completed:
                log_event(
                    "info",
                    "daily_challenges.all_completed",
                    request_id=None,
                    visitor_id=visitor_id,
                    event_type="challenges.all_completed",
                    extra={"date": current_date.isoformat()},
                )
        return result

    def claim_daily_bonus(self, *, visitor_id: str, today: Optional[date] = None) -> BonusResult:
        """Pay the completion bonus once: floor(50% of the set's reward points)."""
        current_date = today or self._utc_today()

        def claim(record: DailyChallengeSet) -> BonusResult:
            if not record.all_completed or record.bonus_claimed:
                return BonusResult(success=False, bonus=0)
            record.bonus_claimed = True
            return BonusResult(success=True, bonus=self._bonus_for(record))

        result = self._store.mutate(visitor_id, current_date, claim)
        if result is None:
            result = BonusResult(success=False, bonus=0)

        log_event(
            "info",
            "daily_challenges.bonus_claimed" if result.success else "daily_challenges.bonus_rejected",
            request_id=None,
            visitor_id=visitor_id,
            extra={"date": current_date.isoformat(), "bonus": result.bonus},
        )
        return result

    def get_challenge_history(self, *, visitor_id: str, limit: int = DEFAULT_HISTORY_LIMIT) -> List[DailyChallengeSet]:
        """Most recent sets first."""
        if limit < 1:
            raise ValidationError("limit must be at least 1")
        return self._store.list_for_visitor(visitor_id, limit)

    def get_daily_streak(self, *, visitor_id: str, today: Optional[date] = None) -> int:
        """Count consecutive fully completed days ending today.

        Today may still be in progress, so a missing or incomplete record for
        today is skipped; any earlier gap ends the walk.
        """
        current_date = today or self._utc_today()
        history = self._store.list_for_visitor(visitor_id, STREAK_LOOKBACK_DAYS)
        by_date: Dict[date, DailyChallengeSet] = {record.date: record for record in history}

        streak = 0
        for offset in range(STREAK_LOOKBACK_DAYS):
            record = by_date.get(current_date - timedelta(days=offset))
            if record is not None and record.all_completed:
                streak += 1
            elif offset > 0:
                break
        return streak

    # Internal helpers -------------------------------------------------
    @staticmethod
    def _apply_update(challenge: Challenge, update: ProgressUpdate) -> None:
        if update.is_absolute and challenge.type == "domain_variety":
            # Session snapshot; a later session with fewer domains keeps the day's best
            new_current = max(challenge.current, update.value)
        elif update.is_absolute:
            new_current = update.value
        elif challenge.type == "streak":
            # Best run reached today, not a running sum
            new_current = max(challenge.current, update.value)
        else:
            new_current = challenge.current + update.value

        challenge.current = min(new_current, challenge.target)
        # Completion is sticky: an absolute snapshot may drop current below target later
        challenge.completed = challenge.completed or challenge.current >= challenge.target

    @staticmethod
    def _bonus_for(record: DailyChallengeSet) -> int:
        return (record.total_reward_points * BONUS_MULTIPLIER_PERCENT) // 100

    @staticmethod
    def _utc_today() -> date:
        return datetime.now(timezone.utc).date()


_service_instance: Optional[DailyChallengeService] = None


def get_daily_challenge_service() -> DailyChallengeService:
    """Singleton service used by routes."""
    global _service_instance
    if _service_instance is None:
        _service_instance = DailyChallengeService()
    return _service_instance


def reset_daily_challenge_service(service: Optional[DailyChallengeService] = None) -> None:
    """FOR TESTING ONLY - swap in a service, or drop the singleton."""
    global _service_instance
    _service_instance = service
