"""
satprep/features/daily_challenges/store_sql.py

SQL-backed daily challenge store (PostgreSQL in production, sqlite in tests).

Maintains identical interface to InMemoryChallengeStore:
- (visitor_id, date) uniqueness enforced by the table's unique constraint
- mutate() is a read-modify-write under SELECT ... FOR UPDATE in one transaction
"""

from datetime import date
from typing import List, Optional

from sqlalchemy import select, insert, update, and_
from sqlalchemy.exc import IntegrityError

from satprep.core.database import get_db_session, daily_challenge_sets
from satprep.core.errors import DuplicateChallengeSetError
from satprep.features.daily_challenges.store import Mutator, T
from satprep.models.daily_challenge import Challenge, DailyChallengeSet


def _row_to_record(row) -> DailyChallengeSet:
    return DailyChallengeSet(
        visitor_id=row.visitor_id,
        date=date.fromisoformat(row.date),
        challenges=[Challenge.from_dict(c) for c in (row.challenges or [])],
        all_completed=bool(row.all_completed),
        bonus_claimed=bool(row.bonus_claimed),
    )


def _challenges_json(record: DailyChallengeSet) -> list:
    return [c.to_dict() for c in record.challenges]


def _key_filter(visitor_id: str, day: date):
    return and_(
        daily_challenge_sets.c.visitor_id == visitor_id,
        daily_challenge_sets.c.date == day.isoformat(),
    )


class SqlChallengeStore:
    """
    Database-backed challenge store.
    
    Each method opens its own session; a call is one transaction.
    """

    def get(self, visitor_id: str, day: date) -> Optional[DailyChallengeSet]:
        with get_db_session() as session:
            row = session.execute(
                select(daily_challenge_sets).where(_key_filter(visitor_id, day))
            ).first()
            return _row_to_record(row) if row else None

    def insert(self, record: DailyChallengeSet) -> DailyChallengeSet:
        """
        Persist a new set.
        
        Raises:
            DuplicateChallengeSetError if (visitor_id, date) already exists
        """
        try:
            with get_db_session() as session:
                session.execute(
                    insert(daily_challenge_sets).values(
                        visitor_id=record.visitor_id,
                        date=record.date.isoformat(),
                        challenges=_challenges_json(record),
                        all_completed=record.all_completed,
                        bonus_claimed=record.bonus_claimed,
                    )
                )
        except IntegrityError as e:
            raise DuplicateChallengeSetError(
                f"Challenge set already exists for {record.visitor_id} on {record.date.isoformat()}"
            ) from e
        return record

    def mutate(self, visitor_id: str, day: date, mutator: Mutator) -> Optional[T]:
        with get_db_session() as session:
            row = session.execute(
                select(daily_challenge_sets)
                .where(_key_filter(visitor_id, day))
                .with_for_update()
            ).first()
            if row is None:
                return None

            record = _row_to_record(row)
            result = mutator(record)

            session.execute(
                update(daily_challenge_sets)
                .where(daily_challenge_sets.c.id == row.id)
                .values(
                    challenges=_challenges_json(record),
                    all_completed=record.all_completed,
                    bonus_claimed=record.bonus_claimed,
                )
            )
            return result

    def list_for_visitor(self, visitor_id: str, limit: int) -> List[DailyChallengeSet]:
        with get_db_session() as session:
            rows = session.execute(
                select(daily_challenge_sets)
                .where(daily_challenge_sets.c.visitor_id == visitor_id)
                .order_by(daily_challenge_sets.c.date.desc())
                .limit(limit)
            ).all()
            return [_row_to_record(row) for row in rows]

    def clear(self) -> None:
        """FOR TESTING ONLY."""
        with get_db_session() as session:
            session.execute(daily_challenge_sets.delete())
