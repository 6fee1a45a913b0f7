"""
Place selection for the next round.

Exactly one difficulty policy is active per application:

* ``weighted`` (default): every eligible place stays in play, biased by weight.
* ``score_gated``: the player's score decides which difficulty tiers are eligible.
"""

from __future__ import annotations

import bisect
import itertools
import logging
import random
from typing import Collection, Protocol, Sequence

from geoguess.services.places import Place

log = logging.getLogger(__name__)

DIFFICULTY_WEIGHTS: dict[str | None, int] = {
    "easy": 5,
    "medium": 3,
    "hard": 1,
    None: 2,
}


class DifficultyPolicy(Protocol):
    name: str

    def weigh(self, places: Sequence[Place], score: int) -> list[tuple[Place, int]]:
        """Return the places allowed at this score, each with a positive integer weight."""
        ...


class WeightedDifficultyPolicy:
    """Soft bias: easy places come up more often, nothing is ever blocked."""

    name = "weighted"

    def __init__(self, difficulty_weights: dict[str | None, int] | None = None):
        self.difficulty_weights = dict(difficulty_weights or DIFFICULTY_WEIGHTS)

    def weight_of(self, place: Place) -> int:
        if place.weight is not None:
            return place.weight
        return self.difficulty_weights.get(place.difficulty, self.difficulty_weights[None])

    def weigh(self, places: Sequence[Place], score: int) -> list[tuple[Place, int]]:
        return [(place, self.weight_of(place)) for place in places]


class ScoreGatedDifficultyPolicy:
    """
    Hard filter on score: below ``low`` only easy places, below ``mid`` easy and
    medium, otherwise everything. Untagged places count as medium. Allowed places
    are drawn uniformly.
    """

    name = "score_gated"

    def __init__(self, low: int = 3, mid: int = 6):
        if mid < low:
            raise ValueError(f"mid threshold ({mid}) must not be below low threshold ({low})")
        self.low = low
        self.mid = mid

    def allowed_difficulties(self, score: int) -> frozenset[str]:
        if score < self.low:
            return frozenset({"easy"})
        if score < self.mid:
            return frozenset({"easy", "medium"})
        return frozenset({"easy", "medium", "hard"})

    def weigh(self, places: Sequence[Place], score: int) -> list[tuple[Place, int]]:
        allowed = self.allowed_difficulties(score)
        return [(place, 1) for place in places if (place.difficulty or "medium") in allowed]


def build_policy(name: str, *, low: int = 3, mid: int = 6) -> DifficultyPolicy:
    if name == ScoreGatedDifficultyPolicy.name:
        return ScoreGatedDifficultyPolicy(low=low, mid=mid)
    if name == WeightedDifficultyPolicy.name:
        return WeightedDifficultyPolicy()
    raise ValueError(f"Unknown difficulty policy: {name!r}")


def weighted_choice(weighted: Sequence[tuple[Place, int]], rng: random.Random | None = None) -> Place:
    """
    Draw one place with probability ``weight / total``.

    Binary search of a uniform draw over the cumulative weights, so large
    weights never expand into a large pool.
    """
    rng = rng or random
    cumulative = list(itertools.accumulate(weight for _, weight in weighted))
    draw = rng.random() * cumulative[-1]
    index = bisect.bisect_right(cumulative, draw)
    # Guard against draw == total from float rounding.
    return weighted[min(index, len(weighted) - 1)][0]


def select_next(
    catalog: Sequence[Place],
    used_ids: Collection[str],
    policy: DifficultyPolicy,
    *,
    score: int = 0,
    rng: random.Random | None = None,
) -> Place | None:
    """
    Choose the next place among those not yet used.

    Returns None when nothing is eligible; the caller decides whether to reset
    ``used_ids``. ``used_ids`` is never modified here.
    """
    eligible = [place for place in catalog if place.id not in used_ids]
    weighted = [(place, weight) for place, weight in policy.weigh(eligible, score) if weight > 0]
    if not weighted:
        log.debug(
            "No eligible place (catalog=%s, used=%s, policy=%s, score=%s)",
            len(catalog), len(used_ids), policy.name, score,
        )
        return None
    return weighted_choice(weighted, rng)
