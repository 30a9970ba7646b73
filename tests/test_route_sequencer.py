from app.agents.route_sequencer import order_by_nearest_neighbor, sequence_stops
from fakes import ART_GALLERY, CAFE_MEDINA, SCIENCE_WORLD, make_place

HEAD = make_place("h", "Head", ["museum"], 0.0, 0.0, 5.0, 10000)
MID = make_place("m", "Mid", ["museum"], 0.0, 0.05, 4.0, 100)
END = make_place("e", "End", ["museum"], 0.0, 0.06, 4.0, 100)
FAR_ANCHOR = make_place("x", "Anchor", ["museum"], 0.0, 0.07)


def _ids(places):
    return [p.id for p in places]


def test_two_or_fewer_stops_keep_their_order():
    assert order_by_nearest_neighbor([CAFE_MEDINA, ART_GALLERY]) == [CAFE_MEDINA, ART_GALLERY]
    assert order_by_nearest_neighbor([]) == []


def test_nearest_neighbor_starts_at_best_scored_place():
    ordered = order_by_nearest_neighbor([SCIENCE_WORLD, CAFE_MEDINA, ART_GALLERY])
    assert _ids(ordered) == ["a1", "f1", "a2"]


def test_park_once_keeps_first_pick_in_place():
    ordered = sequence_stops([CAFE_MEDINA, SCIENCE_WORLD, ART_GALLERY], park_once=True)
    assert ordered[0] is CAFE_MEDINA
    assert _ids(ordered) == ["f1", "a2", "a1"]


def test_rider_mode_sorts_tail_by_distance_from_anchor():
    plain = sequence_stops([END, MID, HEAD], anchor=FAR_ANCHOR)
    rider = sequence_stops([END, MID, HEAD], anchor=FAR_ANCHOR, rider_mode=True)

    assert _ids(plain) == ["h", "m", "e"]
    assert _ids(rider) == ["h", "e", "m"]


def test_rider_mode_leaves_two_stop_plans_alone():
    ordered = sequence_stops([MID, END], anchor=FAR_ANCHOR, rider_mode=True)
    assert _ids(ordered) == ["m", "e"]


def test_sequence_of_nothing():
    assert sequence_stops([]) == []
