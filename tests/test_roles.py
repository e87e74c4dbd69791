import itertools
import random

import pytest

from handtheremin.modes import ThereminMode, get_mode
from handtheremin.roles import assign_roles, label_match, resolve_collision
from handtheremin.types import AssignmentSource, MatchKind

from conftest import make_detection

RIGHT = get_mode(ThereminMode.RIGHT_PITCH)
LEFT = get_mode(ThereminMode.LEFT_PITCH)


@pytest.mark.parametrize(
    "label, wanted, expected",
    [
        ("right", "right", MatchKind.EXACT),
        ("RIGHT", "right", MatchKind.EXACT),
        ("right hand", "right", MatchKind.PARTIAL),
        ("left", "right", MatchKind.NONE),
        ("", "right", MatchKind.NONE),
    ],
)
def test_label_match(label, wanted, expected):
    assert label_match(label, wanted) is expected


def test_no_detections_no_roles():
    a = assign_roles([], RIGHT)
    assert a.pitch_hand is None
    assert a.volume_hand is None


def test_exact_pitch_label_wins_regardless_of_position(detection):
    # Sitting right on the volume antenna, far from pitch.
    d = detection("right", pitch_distance=0.9, volume_distance=0.001)
    a = assign_roles([d], RIGHT)
    assert a.pitch_hand is d
    assert a.volume_hand is None
    assert a.pitch_source is AssignmentSource.LABEL_EXACT


def test_single_unlabeled_hand_goes_to_closer_antenna(detection):
    near_volume = detection("", pitch_distance=0.4, volume_distance=0.1)
    a = assign_roles([near_volume], RIGHT)
    assert a.volume_hand is near_volume
    assert a.pitch_hand is None
    assert a.volume_source is AssignmentSource.SINGLE_HAND

    near_pitch = detection("", pitch_distance=0.1, volume_distance=0.4)
    a = assign_roles([near_pitch], RIGHT)
    assert a.pitch_hand is near_pitch
    assert a.volume_hand is None


def test_labels_beat_geometry(detection):
    # Hands crossed over: labels still decide.
    right = detection("right", pitch_distance=0.6, volume_distance=0.05)
    left = detection("left", pitch_distance=0.05, volume_distance=0.6)
    a = assign_roles([left, right], RIGHT)
    assert a.pitch_hand is right
    assert a.volume_hand is left

    a = assign_roles([left, right], LEFT)
    assert a.pitch_hand is left
    assert a.volume_hand is right


def test_exact_label_beats_partial(detection):
    partial = detection("right hand", pitch_distance=0.01)
    exact = detection("right", pitch_distance=0.5)
    a = assign_roles([partial, exact], RIGHT)
    assert a.pitch_hand is exact
    assert a.pitch_source is AssignmentSource.LABEL_EXACT
    assert a.volume_hand is partial
    assert a.volume_source is AssignmentSource.NEAREST


def test_duplicate_labels_split_by_distance(detection):
    far = detection("right", pitch_distance=0.4, volume_distance=0.05)
    close = detection("right", pitch_distance=0.1, volume_distance=0.3)
    a = assign_roles([far, close], RIGHT)
    assert a.pitch_hand is close
    assert a.volume_hand is far


def test_unlabeled_pair_goes_to_nearest_antennas(detection):
    first = detection("", point=(0.05, 0.5), pitch_distance=0.01, volume_distance=0.6)
    second = detection("", point=(0.8, 0.82), pitch_distance=0.7, volume_distance=0.01)
    a = assign_roles([second, first], RIGHT)
    assert a.pitch_hand is first
    assert a.volume_hand is second


def test_joint_cost_splits_a_contested_hand(detection):
    # Both roles would pick `a` on their own; pairing a->pitch, b->volume costs 0.21 vs 0.32.
    a_hand = detection("", pitch_distance=0.01, volume_distance=0.02)
    b_hand = detection("", pitch_distance=0.3, volume_distance=0.2)
    a = assign_roles([b_hand, a_hand], RIGHT)
    assert a.pitch_hand is a_hand
    assert a.volume_hand is b_hand
    assert a.pitch_source is a.volume_source is AssignmentSource.JOINT_COST


def test_malformed_detections_are_ignored(detection):
    broken = detection("right", point=None)
    ok = detection("", pitch_distance=0.5, volume_distance=0.1)
    a = assign_roles([broken, ok], RIGHT)
    assert a.pitch_hand is None
    assert a.volume_hand is ok

    a = assign_roles([broken], RIGHT)
    assert a.pitch_hand is None and a.volume_hand is None


def test_extra_hands_do_not_crash(detection):
    hands = [detection("", pitch_distance=0.1 * i, volume_distance=0.5 - 0.1 * i) for i in range(5)]
    a = assign_roles(hands, RIGHT)
    assert a.pitch_hand is hands[0]
    assert a.volume_hand is hands[4]


def _random_detections(rng, n):
    labels = ["", "left", "right", "Right", "left hand", "unknown"]
    return [
        make_detection(rng.choice(labels), round(rng.random(), 2), round(rng.random(), 2))
        for _ in range(n)
    ]


@pytest.mark.parametrize("seed", range(40))
def test_never_one_hand_for_both_roles_and_deterministic(seed):
    rng = random.Random(seed)
    for n, cfg in itertools.product([2, 3, 4], [RIGHT, LEFT]):
        dets = _random_detections(rng, n)
        a = assign_roles(dets, cfg)
        assert a.pitch_hand is not None and a.volume_hand is not None
        assert a.pitch_hand is not a.volume_hand

        b = assign_roles(dets, cfg)
        assert b.pitch_hand is a.pitch_hand
        assert b.volume_hand is a.volume_hand
        assert (b.pitch_source, b.volume_source) == (a.pitch_source, a.volume_source)


def test_collision_moves_the_role_with_the_cheaper_second_choice(detection):
    shared = detection("", pitch_distance=0.05, volume_distance=0.06)
    other = detection("", pitch_distance=0.5, volume_distance=0.1)
    a = resolve_collision(shared, [shared, other])
    assert a.pitch_hand is shared
    assert a.volume_hand is other
    assert a.volume_source is AssignmentSource.COLLISION


def test_collision_without_alternatives_follows_label_strength(detection):
    shared = detection("left", pitch_distance=0.05, volume_distance=0.3)
    a = resolve_collision(shared, [shared], pitch_strength=MatchKind.PARTIAL, volume_strength=MatchKind.EXACT)
    assert a.volume_hand is shared
    assert a.pitch_hand is None


def test_collision_tie_goes_to_closer_role(detection):
    shared = detection("", pitch_distance=0.3, volume_distance=0.05)
    a = resolve_collision(shared, [shared])
    assert a.volume_hand is shared
    assert a.pitch_hand is None
