"""
satprep/features/daily_challenges/store.py

Storage for daily challenge sets.

The engine talks to a store through get / insert / mutate / list_for_visitor.
In-memory implementation here; SqlChallengeStore lives in store_sql.py.
"""

import copy
import logging
import os
import threading
from datetime import date
from typing import Callable, Dict, List, Optional, Protocol, Tuple, TypeVar

from satprep.core.errors import DuplicateChallengeSetError
from satprep.models.daily_challenge import DailyChallengeSet

logger = logging.getLogger("satprep")

T = TypeVar("T")

Mutator = Callable[[DailyChallengeSet], T]


class ChallengeStore(Protocol):
    def get(self, visitor_id: str, day: date) -> Optional[DailyChallengeSet]: ...

    def insert(self, record: DailyChallengeSet) -> DailyChallengeSet: ...

    def mutate(self, visitor_id: str, day: date, mutator: Mutator) -> Optional[T]: ...

    def list_for_visitor(self, visitor_id: str, limit: int) -> List[DailyChallengeSet]: ...

    def clear(self) -> None: ...


class InMemoryChallengeStore:
    """
    Dict-backed store keyed by (visitor_id, date).

    A single lock serializes inserts and read-modify-write cycles, which gives
    the same per-record atomicity and uniqueness guarantees as the SQL store.
    Records handed out are copies; callers never alias stored state.
    """

    def __init__(self):
        self._records: Dict[Tuple[str, date], DailyChallengeSet] = {}
        self._lock = threading.Lock()

    def get(self, visitor_id: str, day: date) -> Optional[DailyChallengeSet]:
        with self._lock:
            record = self._records.get((visitor_id, day))
            return copy.deepcopy(record) if record else None

    def insert(self, record: DailyChallengeSet) -> DailyChallengeSet:
        key = (record.visitor_id, record.date)
        with self._lock:
            if key in self._records:
                raise DuplicateChallengeSetError(
                    f"Challenge set already exists for {record.visitor_id} on {record.date.isoformat()}"
                )
            self._records[key] = copy.deepcopy(record)
        return record

    def mutate(self, visitor_id: str, day: date, mutator: Mutator) -> Optional[T]:
        """Apply mutator to a working copy and commit it; None if no record."""
        key = (visitor_id, day)
        with self._lock:
            stored = self._records.get(key)
            if stored is None:
                return None
            working = copy.deepcopy(stored)
            result = mutator(working)
            self._records[key] = working
            return result

    def list_for_visitor(self, visitor_id: str, limit: int) -> List[DailyChallengeSet]:
        with self._lock:
            records = [r for (vid, _), r in self._records.items() if vid == visitor_id]
        records.sort(key=lambda r: r.date, reverse=True)
        return [copy.deepcopy(r) for r in records[:limit]]

    def clear(self) -> None:
        """FOR TESTING ONLY."""
        with self._lock:
            self._records.clear()


def get_challenge_store() -> ChallengeStore:
    """
    Pick the store implementation.

    - SQL store when DATABASE_URL is configured and reachable
    - In-memory otherwise (local dev, tests)
    """
    database_url = os.getenv("DATABASE_URL")

    if database_url:
        try:
            from satprep.core.database import check_connection, create_all_tables
            from satprep.features.daily_challenges.store_sql import SqlChallengeStore

            if check_connection():
                create_all_tables()
                return SqlChallengeStore()
            logger.warning(
                "daily_challenges.store_fallback",
                extra={"reason": "database unavailable"},
            )
        except Exception as e:
            logger.warning(
                "daily_challenges.store_fallback",
                extra={"reason": str(e)},
            )

    return InMemoryChallengeStore()


# Global store instance (lazy initialization)
_store_instance: Optional[ChallengeStore] = None


def get_store() -> ChallengeStore:
    """Singleton store instance shared by the service and routes."""
    global _store_instance
    if _store_instance is None:
        _store_instance = get_challenge_store()
    return _store_instance


def reset_store() -> None:
    """
    FOR TESTING ONLY - forces re-initialization on next get_store() call.
    """
    global _store_instance
    _store_instance = None
