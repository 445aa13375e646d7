from __future__ import annotations

import random
import string
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from satprep.features.daily_challenges.catalog import CHALLENGE_TEMPLATES, ChallengeTemplate
from satprep.models.daily_challenge import Challenge, ChallengeReward

CHALLENGES_PER_DAY = 3

_ID_ALPHABET = string.digits + string.ascii_lowercase
_ID_SUFFIX_LENGTH = 5


def generate_challenges(
    *,
    rng: Optional[random.Random] = None,
    now: Optional[datetime] = None,
    templates: Sequence[ChallengeTemplate] = CHALLENGE_TEMPLATES,
    count: int = CHALLENGES_PER_DAY,
) -> List[Challenge]:
    """Pick `count` distinct challenge types and one random variation of each.

    The types are permuted with rng.shuffle (Fisher-Yates) and the first
    `count` are kept, so no type repeats within a set.
    """
    source = rng or random.Random()
    moment = now or datetime.now(timezone.utc)

    pool = list(templates)
    source.shuffle(pool)

    challenges: List[Challenge] = []
    for template in pool[:count]:
        variation = source.choice(template.variations)
        challenges.append(
            Challenge(
                id=_challenge_id(template.type, variation.target, moment, source),
                type=template.type,
                description=variation.description,
                target=variation.target,
                reward=ChallengeReward(value=variation.reward),
                current=0,
                completed=False,
            )
        )
    return challenges


def _challenge_id(challenge_type: str, target: int, moment: datetime, rng: random.Random) -> str:
    """type + target + creation epoch millis + random base36 suffix."""
    epoch_ms = int(moment.timestamp() * 1000)
    suffix = "".join(rng.choice(_ID_ALPHABET) for _ in range(_ID_SUFFIX_LENGTH))
    return f"{challenge_type}_{target}_{epoch_ms}_{suffix}"
