from .config import ThereminConfig
from .curves import ResponseCurve
from .engine import FrameResult, ThereminEngine
from .modes import MODES, ModeConfig, ThereminMode, get_mode
from .roles import assign_roles
from .types import HandDetection, RoleAssignment, SynthTargets, TrackedHand

__all__ = [
    "ThereminConfig",
    "ResponseCurve",
    "FrameResult",
    "ThereminEngine",
    "MODES",
    "ModeConfig",
    "ThereminMode",
    "get_mode",
    "assign_roles",
    "HandDetection",
    "RoleAssignment",
    "SynthTargets",
    "TrackedHand",
]
