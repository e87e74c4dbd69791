import threading

import pytest

from handtheremin.config import ThereminConfig
from handtheremin.curves import ResponseCurve, map_control_to_frequency, map_proximity_to_volume
from handtheremin.engine import ThereminEngine, status_message
from handtheremin.modes import ThereminMode, get_mode


def test_zero_hands_is_silent():
    engine = ThereminEngine()
    result = engine.step([])
    assert not result.controls.has_pitch_hand
    assert not result.controls.has_volume_hand
    assert result.targets.gain == 0.0
    assert result.targets.frequency_display is None
    assert result.targets.volume_display is None
    assert not result.targets.retarget_frequency
    assert result.status == "Show both hands in frame to play."


def test_lone_pitch_hand_is_gated_silent(hand):
    engine = ThereminEngine(mode="right")
    engine.state.smoothed_volume_proximity = 0.1  # would be loud if the gate let it through

    result = engine.step([hand(0.1, 0.5, label="right")])
    assignment = result.controls.assignment
    assert assignment.pitch_hand is result.detections[0]
    assert assignment.volume_hand is None
    assert result.targets.gain == 0.0
    assert result.targets.gain_time_constant == engine.config.silence_time_constant
    assert result.targets.frequency_display is not None
    assert engine.state.smoothed_volume_proximity == 0.1


def test_two_unlabeled_hands_play(detection):
    engine = ThereminEngine(mode="right")
    first = detection("", point=(0.05, 0.5), pitch_distance=0.01, volume_distance=0.6)
    second = detection("", point=(0.8, 0.82), pitch_distance=0.7, volume_distance=0.01)

    controls = engine.process([first, second])
    assert controls.assignment.pitch_hand is first
    assert controls.assignment.volume_hand is second

    targets = engine.advance(
        controls.pitch_control, controls.volume_proximity, controls.has_pitch_hand, controls.has_volume_hand
    )
    assert targets.gain > 0.0
    assert targets.gain_time_constant == engine.config.gain_time_constant
    assert targets.retarget_frequency


def test_pitch_at_near_boundary_is_full_scale(detection):
    for curve in ResponseCurve:
        engine = ThereminEngine(ThereminConfig(pitch_curve=curve))
        d = detection("right", pitch_distance=engine.config.pitch_near)
        assert engine.process([d]).pitch_control == 1.0


def test_absent_pitch_holds_accumulator_and_frequency():
    engine = ThereminEngine()
    first = engine.advance(0.9, 0.0, True, True)
    held = engine.state.smoothed_pitch_control

    t = engine.advance(None, 0.0, False, True)
    assert engine.state.smoothed_pitch_control == held
    assert not t.retarget_frequency
    assert t.frequency == pytest.approx(first.frequency)
    assert t.frequency_display is None
    assert t.gain == 0.0


def test_advance_values_follow_the_mappings():
    cfg = ThereminConfig()
    engine = ThereminEngine(cfg)
    t = engine.advance(1.0, 0.0, True, True)

    pitch = 0.5 + (1.0 - 0.5) * cfg.smoothing
    proximity = 0.5 + (0.0 - 0.5) * cfg.smoothing
    assert t.frequency == pytest.approx(map_control_to_frequency(pitch, cfg.min_freq, cfg.max_freq))
    assert t.volume_display == pytest.approx(map_proximity_to_volume(proximity))
    assert t.gain == pytest.approx(map_proximity_to_volume(proximity) * cfg.max_gain)
    assert 0.0 <= t.gain <= cfg.max_gain


def test_constant_input_converges():
    engine = ThereminEngine()
    for _ in range(21):
        engine.advance(0.9, 0.2, True, True)
    assert engine.state.smoothed_pitch_control == pytest.approx(0.9, abs=0.01)
    assert engine.state.smoothed_volume_proximity == pytest.approx(0.2, abs=0.01)


def test_geometry_drives_assignment(hand):
    # Right-hand-pitch layout: pitch antenna at x=0.86, volume bar under the left side.
    engine = ThereminEngine(mode="right")
    pitch_hand = hand(0.80, 0.4)
    volume_hand = hand(0.25, 0.75)
    result = engine.step([volume_hand, pitch_hand])
    assignment = result.controls.assignment
    assert assignment.pitch_hand is result.detections[1]
    assert assignment.volume_hand is result.detections[0]
    assert result.status.startswith("Both hands tracked.")


def test_malformed_hand_counts_as_absent(hand):
    engine = ThereminEngine()
    result = engine.step([hand(0.8, 0.4, label="right", n=4)])
    assert not result.controls.has_pitch_hand
    assert result.targets.gain == 0.0


def test_mode_switch_keeps_smoothing_and_reannounces_status():
    engine = ThereminEngine(mode="right")
    engine.advance(1.0, 1.0, True, True)
    before = (engine.state.smoothed_pitch_control, engine.state.smoothed_volume_proximity)

    assert engine.tracking_status(True, False) == "Left hand missing. Left hand controls volume."
    assert engine.tracking_status(True, False) is None

    engine.set_mode(ThereminMode.LEFT_PITCH)
    assert engine.mode is ThereminMode.LEFT_PITCH
    assert engine.tracking_status(True, False) == "Right hand missing. Right hand controls volume."
    assert (engine.state.smoothed_pitch_control, engine.state.smoothed_volume_proximity) == before


def test_status_messages():
    cfg = get_mode("right")
    assert status_message(cfg, True, True) == (
        "Both hands tracked. Right hand controls pitch, left hand controls volume."
    )
    assert status_message(cfg, False, True) == "Right hand missing. Right hand controls pitch."


def test_pitch_far_override(detection):
    engine = ThereminEngine(ThereminConfig(pitch_curve=ResponseCurve.INVERSE_SQUARE))
    d = detection("right", pitch_distance=0.3)
    default = engine.process([d]).pitch_control

    assert engine.set_pitch_far(0.31) == pytest.approx(0.31)
    narrowed = engine.process([d]).pitch_control
    assert narrowed < default

    assert engine.set_pitch_far(0.0) == pytest.approx(engine.config.pitch_near + 0.01)
    assert engine.set_pitch_far(4.0) == 1.0
    assert engine.set_pitch_far(None) == engine.config.pitch_far


def test_try_step_drops_frames_while_busy(hand):
    engine = ThereminEngine()
    entered = threading.Event()
    release = threading.Event()
    original = engine.process

    def slow_process(detections, mode_config=None):
        entered.set()
        release.wait(5)
        return original(detections, mode_config)

    engine.process = slow_process
    results = []
    worker = threading.Thread(target=lambda: results.append(engine.try_step([hand(0.8, 0.4)])))
    worker.start()
    assert entered.wait(5)

    assert engine.try_step([hand(0.8, 0.4)]) is None

    release.set()
    worker.join(5)
    assert results and results[0] is not None
    assert engine.try_step([]) is not None


@pytest.mark.parametrize(
    "kwargs",
    [
        {"min_freq": 0.0},
        {"max_freq": 100.0},
        {"smoothing": 1.0},
        {"smoothing": 0.0},
        {"max_gain": 1.5},
        {"pitch_near": 0.0},
        {"volume_far": 0.01},
        {"log_curve_k": 0.0},
        {"gain_time_constant": 0.0},
        {"initial_pitch_control": 1.2},
    ],
)
def test_bad_config_is_rejected(kwargs):
    with pytest.raises(ValueError):
        ThereminEngine(ThereminConfig(**kwargs))


@pytest.mark.parametrize("raw_pitch, raw_volume", [(5.0, -3.0), (-2.0, 40.0), (1e9, -1e9)])
def test_out_of_range_raw_values_keep_state_in_unit_range(raw_pitch, raw_volume):
    engine = ThereminEngine()
    for _ in range(10):
        engine.advance(raw_pitch, raw_volume, True, True)
        assert 0.0 <= engine.state.smoothed_pitch_control <= 1.0
        assert 0.0 <= engine.state.smoothed_volume_proximity <= 1.0

    # Back in range, the pitch starts moving down on the very next frame.
    before = engine.state.smoothed_pitch_control
    engine.advance(0.0, 0.5, True, True)
    assert engine.state.smoothed_pitch_control < before
