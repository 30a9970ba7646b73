"""Regression tests for place classification."""

import pytest

from app.agents.classifier import NOISY_TYPES, is_noisy, pick_category


@pytest.mark.parametrize(
    "types, expected",
    [
        (["restaurant", "park"], "food"),
        (["cafe"], "food"),
        (["meal_takeaway", "tourist_attraction"], "food"),
        (["park", "tourist_attraction"], "park"),
        (["hiking_area"], "park"),
        (["museum", "tourist_attraction"], "attraction"),
        ([], "attraction"),
        (None, "attraction"),
    ],
)
def test_pick_category_priority(types, expected):
    assert pick_category(types) == expected


def test_pick_category_is_stable_across_calls_and_ordering():
    tags = ["natural_feature", "point_of_interest"]
    assert pick_category(tags) == pick_category(list(reversed(tags))) == "park"


def test_noisy_only_when_every_tag_is_denylisted():
    assert is_noisy(["bank", "atm"])
    assert is_noisy(sorted(NOISY_TYPES))
    assert not is_noisy(["bank", "tourist_attraction"])
    assert not is_noisy([])
    assert not is_noisy(None)
