from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Union

from .types import PitchAntenna, VolumeAntenna


class ThereminMode(str, Enum):
    """Which hand plays pitch. The value is that hand's tracker label."""

    RIGHT_PITCH = "right"
    LEFT_PITCH = "left"


@dataclass(frozen=True)
class ModeConfig:
    mode: ThereminMode
    pitch_label: str
    volume_label: str
    pitch_antenna: PitchAntenna
    volume_antenna: VolumeAntenna

    @property
    def name(self) -> str:
        return self.mode.value


# Layout for a mirrored (selfie) camera view: pitch antenna on the pitch hand's side.
_LEFT_PITCH_ANTENNA = PitchAntenna(x=0.14, y1=0.12, y2=0.88)
_LEFT_VOLUME_ANTENNA = VolumeAntenna(x1=0.58, x2=0.94, y=0.82)


def mirrored(config: ModeConfig, mode: ThereminMode) -> ModeConfig:
    """Horizontal mirror of `config` with the hand labels swapped."""
    p = config.pitch_antenna
    v = config.volume_antenna
    return ModeConfig(
        mode=mode,
        pitch_label=config.volume_label,
        volume_label=config.pitch_label,
        pitch_antenna=PitchAntenna(x=round(1.0 - p.x, 6), y1=p.y1, y2=p.y2),
        volume_antenna=VolumeAntenna(x1=round(1.0 - v.x2, 6), x2=round(1.0 - v.x1, 6), y=v.y),
    )


_LEFT = ModeConfig(
    mode=ThereminMode.LEFT_PITCH,
    pitch_label="left",
    volume_label="right",
    pitch_antenna=_LEFT_PITCH_ANTENNA,
    volume_antenna=_LEFT_VOLUME_ANTENNA,
)

MODES: Dict[ThereminMode, ModeConfig] = {
    ThereminMode.RIGHT_PITCH: mirrored(_LEFT, ThereminMode.RIGHT_PITCH),
    ThereminMode.LEFT_PITCH: _LEFT,
}

DEFAULT_MODE = ThereminMode.RIGHT_PITCH


def mode_names() -> List[str]:
    return [m.value for m in MODES]


def get_mode(mode: Union[str, ThereminMode]) -> ModeConfig:
    if isinstance(mode, ThereminMode):
        return MODES[mode]
    key = str(mode).strip().lower()
    for m, cfg in MODES.items():
        if key in (m.value, m.name.lower()):
            return cfg
    raise ValueError(f"Unknown mode '{mode}'. Available: {mode_names()}")


def next_mode(mode: ThereminMode) -> ThereminMode:
    order = list(MODES)
    return order[(order.index(mode) + 1) % len(order)]
