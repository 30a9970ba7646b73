"""Candidate ranking and the rating-confidence gate."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, FrozenSet

from app.agents.classifier import ATTRACTION, FOOD, PARK, Category, pick_category
from app.tools.places import Place

RATING_WEIGHT = 12.0
REVIEW_WEIGHT = 8.0

CATEGORY_BOOST: Dict[Category, float] = {ATTRACTION: 1.12, PARK: 1.08, FOOD: 1.0}

RIDER_SCENIC_BOOST = 1.18
RIDER_FOOD_BOOST = 1.08
RIDER_SCENIC_TYPES: FrozenSet[str] = frozenset(
    {
        "tourist_attraction",
        "park",
        "natural_feature",
        "viewpoint",
        "scenic_lookout",
        "hiking_area",
        "campground",
    }
)
RIDER_FOOD_TYPES: FrozenSet[str] = frozenset({"cafe", "restaurant", "bakery"})


def score_candidate(place: Place, rider_mode: bool = False) -> float:
    """Rank a place by rating and review volume, boosted by category.

    Rider mode adds a second multiplier: scenic tags first, then easy food
    stops. Missing rating or review count count as zero.
    """
    rating = place.rating or 0.0
    count = place.user_rating_count or 0
    score = rating * RATING_WEIGHT + math.log10(max(1, count)) * REVIEW_WEIGHT
    score *= CATEGORY_BOOST[pick_category(place.types)]

    if rider_mode:
        tags = set(place.types)
        if tags & RIDER_SCENIC_TYPES:
            return score * RIDER_SCENIC_BOOST
        if tags & RIDER_FOOD_TYPES:
            return score * RIDER_FOOD_BOOST
    return score


@dataclass
class CandidatePolicy:
    """Tunable filters applied to the pooled search results."""

    max_results_per_query: int = 20
    radius_km: float = 10.0
    # Well-reviewed places need a high average to survive.
    strict_min_reviews: int = 20
    strict_min_rating: float = 4.1
    # Sparsely reviewed places get a slightly lower bar.
    loose_min_reviews: int = 5
    loose_min_rating: float = 3.9

    def passes_rating_gate(self, place: Place) -> bool:
        rating = place.rating or 0.0
        count = place.user_rating_count or 0
        if rating <= 0:
            return True
        if count >= self.strict_min_reviews and rating < self.strict_min_rating:
            return False
        if count >= self.loose_min_reviews and rating < self.loose_min_rating:
            return False
        return True
