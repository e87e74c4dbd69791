import pytest

from handtheremin.modes import MODES, ThereminMode, get_mode, mode_names, next_mode


def test_right_mode_binds_labels_and_mirrors_layout():
    right = get_mode("right")
    left = get_mode("left")
    assert (right.pitch_label, right.volume_label) == ("right", "left")
    assert (left.pitch_label, left.volume_label) == ("left", "right")

    assert left.pitch_antenna.x == pytest.approx(0.14)
    assert right.pitch_antenna.x == pytest.approx(0.86)
    assert (right.pitch_antenna.y1, right.pitch_antenna.y2) == (left.pitch_antenna.y1, left.pitch_antenna.y2)
    assert right.volume_antenna.x1 == pytest.approx(0.06)
    assert right.volume_antenna.x2 == pytest.approx(0.42)
    assert right.volume_antenna.y == left.volume_antenna.y


@pytest.mark.parametrize("name", ["right", "RIGHT", " right_pitch ", ThereminMode.RIGHT_PITCH])
def test_get_mode_accepts_names_and_enum(name):
    assert get_mode(name) is MODES[ThereminMode.RIGHT_PITCH]


def test_unknown_mode_lists_choices():
    with pytest.raises(ValueError, match="Available"):
        get_mode("both")


def test_next_mode_cycles():
    assert set(mode_names()) == {"right", "left"}
    m = ThereminMode.RIGHT_PITCH
    assert next_mode(next_mode(m)) is m
    assert next_mode(m) is ThereminMode.LEFT_PITCH
