from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import List, Literal, get_args

from satprep.core.errors import ValidationError

ChallengeType = Literal["streak", "questions", "hard_questions", "domain_variety", "accuracy", "speed"]
RewardType = Literal["points"]

CHALLENGE_TYPES: tuple = get_args(ChallengeType)

# Storage width of visitor ids; longer ids are rejected at the HTTP boundary
VISITOR_ID_MAX_LENGTH = 100


@dataclass(frozen=True)
class ChallengeReward:
    value: int
    type: RewardType = "points"

    def to_dict(self) -> dict:
        return {"type": self.type, "value": self.value}


@dataclass
class Challenge:
    """One gamified task inside a daily set.

    type/description/target/reward are fixed at creation; only current and
    completed move afterwards.
    """

    id: str
    type: ChallengeType
    description: str
    target: int
    reward: ChallengeReward
    current: int = 0
    completed: bool = False

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type,
            "description": self.description,
            "target": self.target,
            "current": self.current,
            "completed": self.completed,
            "reward": self.reward.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> Challenge:
        reward = data.get("reward") or {}
        return cls(
            id=data["id"],
            type=data["type"],
            description=data["description"],
            target=int(data["target"]),
            reward=ChallengeReward(value=int(reward.get("value", 0)), type=reward.get("type", "points")),
            current=int(data.get("current", 0)),
            completed=bool(data.get("completed", False)),
        )


@dataclass
class DailyChallengeSet:
    """Domain model for one visitor's challenges on one UTC calendar day."""

    visitor_id: str
    date: date
    challenges: List[Challenge] = field(default_factory=list)
    all_completed: bool = False
    bonus_claimed: bool = False

    @property
    def completed_count(self) -> int:
        return sum(1 for c in self.challenges if c.completed)

    @property
    def total_count(self) -> int:
        return len(self.challenges)

    @property
    def bonus_available(self) -> bool:
        return self.all_completed and not self.bonus_claimed

    @property
    def total_reward_points(self) -> int:
        return sum(c.reward.value for c in self.challenges if c.reward.type == "points")

    def to_dict(self) -> dict:
        return {
            "visitor_id": self.visitor_id,
            "date": self.date.isoformat(),
            "challenges": [c.to_dict() for c in self.challenges],
            "all_completed": self.all_completed,
            "bonus_claimed": self.bonus_claimed,
            "completed_count": self.completed_count,
            "total_count": self.total_count,
            "bonus_available": self.bonus_available,
        }


@dataclass(frozen=True)
class ProgressUpdate:
    """A progress event from a practice session.

    value is an increment unless is_absolute, in which case it replaces the
    challenge's current value (percentages, distinct counts).
    """

    type: ChallengeType
    value: int
    is_absolute: bool = False

    def __post_init__(self):
        if self.type not in CHALLENGE_TYPES:
            raise ValidationError(f"Unknown challenge type: {self.type}")
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise ValidationError("Progress value must be an integer")
        if self.value < 0:
            raise ValidationError("Progress value must be non-negative")


@dataclass
class ProgressResult:
    newly_completed: List[str] = field(default_factory=list)
    all_completed: bool = False

    def to_dict(self) -> dict:
        return {"newly_completed": list(self.newly_completed), "all_completed": self.all_completed}


@dataclass(frozen=True)
class BonusResult:
    success: bool
    bonus: int = 0

    def to_dict(self) -> dict:
        return {"success": self.success, "bonus": self.bonus}
