"""Place classification from provider type tags."""
from __future__ import annotations

from typing import FrozenSet, Iterable, Literal, Tuple

Category = Literal["food", "park", "attraction"]

FOOD: Category = "food"
PARK: Category = "park"
ATTRACTION: Category = "attraction"
DEFAULT_CATEGORY: Category = ATTRACTION

# Checked in order; the first rule whose tags intersect the place's tags wins.
CATEGORY_RULES: Tuple[Tuple[Category, FrozenSet[str]], ...] = (
    (FOOD, frozenset({"restaurant", "cafe", "bakery", "bar", "meal_takeaway", "meal_delivery"})),
    (PARK, frozenset({"park", "natural_feature", "campground", "rv_park", "hiking_area"})),
)

NOISY_TYPES: FrozenSet[str] = frozenset(
    {
        "accounting",
        "atm",
        "bank",
        "car_dealer",
        "car_rental",
        "car_repair",
        "car_wash",
        "courthouse",
        "dentist",
        "doctor",
        "electrician",
        "finance",
        "gas_station",
        "hospital",
        "insurance_agency",
        "lawyer",
        "local_government_office",
        "moving_company",
        "painter",
        "pharmacy",
        "plumber",
        "police",
        "post_office",
        "real_estate_agency",
        "school",
        "storage",
        "transit_station",
        "vehicle_inspection",
    }
)


def pick_category(types: Iterable[str] | None) -> Category:
    tags = set(types or ())
    for category, rule_tags in CATEGORY_RULES:
        if tags & rule_tags:
            return category
    return DEFAULT_CATEGORY


def is_noisy(types: Iterable[str] | None) -> bool:
    """True when the place has tags and every one of them is non-touristic."""
    tags = set(types or ())
    return bool(tags) and tags <= NOISY_TYPES
