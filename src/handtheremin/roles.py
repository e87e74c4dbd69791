"""
Per-frame assignment of detected hands to the pitch and volume roles.

`assign_roles` is a pure function of the detections and the mode: it keeps no
memory between frames, so the same input always gives the same assignment.
Candidates are considered in priority order:

1. handedness label (exact beats partial, closer antenna breaks ties)
2. a lone unlabeled hand goes to whichever antenna it is closer to
3. nearest hand for each role still open
4. when both open roles want the same hand, the cheapest ordered pair wins
5. anything still colliding goes through `resolve_collision`
"""

from __future__ import annotations

import math
from typing import Callable, List, Optional, Sequence, Set, Tuple

from .modes import ModeConfig
from .types import AssignmentSource, HandDetection, MatchKind, RoleAssignment


# Regret difference needed before one role gives up a shared hand to its second choice.
COLLISION_MARGIN = 0.02

_Key = Callable[[HandDetection], float]


def _pitch_key(d: HandDetection) -> float:
    return d.pitch_distance


def _volume_key(d: HandDetection) -> float:
    return d.volume_distance


def label_match(label: str, wanted: str) -> MatchKind:
    label = (label or "").strip().lower()
    wanted = (wanted or "").strip().lower()
    if not label or not wanted:
        return MatchKind.NONE
    if label == wanted:
        return MatchKind.EXACT
    if wanted in label:
        return MatchKind.PARTIAL
    return MatchKind.NONE


def _best_label_match(
    candidates: Sequence[HandDetection], used: Set[int], wanted: str, key: _Key
) -> Tuple[Optional[int], MatchKind]:
    best: Optional[Tuple[int, float, int]] = None
    for i, d in enumerate(candidates):
        if i in used:
            continue
        kind = label_match(d.label, wanted)
        if kind is MatchKind.NONE:
            continue
        rank = (-int(kind), key(d), i)
        if best is None or rank < best:
            best = rank
    if best is None:
        return None, MatchKind.NONE
    return best[2], MatchKind(-best[0])


def _nearest(candidates: Sequence[HandDetection], pool: Sequence[int], key: _Key) -> Optional[int]:
    if not pool:
        return None
    return min(pool, key=lambda i: (key(candidates[i]), i))


def _joint_cost(candidates: Sequence[HandDetection], pool: Sequence[int]) -> Tuple[int, int]:
    best: Optional[Tuple[float, int, int]] = None
    for i in pool:
        for j in pool:
            if i == j:
                continue
            cost = candidates[i].pitch_distance + candidates[j].volume_distance
            if best is None or (cost, i, j) < best:
                best = (cost, i, j)
    assert best is not None
    return best[1], best[2]


def _source_for(kind: MatchKind) -> AssignmentSource:
    return AssignmentSource.LABEL_EXACT if kind is MatchKind.EXACT else AssignmentSource.LABEL_PARTIAL


def resolve_collision(
    hand: HandDetection,
    candidates: Sequence[HandDetection],
    pitch_strength: MatchKind = MatchKind.NONE,
    volume_strength: MatchKind = MatchKind.NONE,
) -> RoleAssignment:
    """
    Split a hand that both roles claimed.

    The role whose second choice costs clearly less extra distance moves to
    it. Without a clear winner the hand stays with the role that matched its
    label more strongly (the closer antenna on a tie) and the other role
    takes its second choice, if there is one.
    """
    others = [d for d in candidates if d is not hand and d.is_valid]
    pitch_alt = min(others, key=_pitch_key) if others else None
    volume_alt = min(others, key=_volume_key) if others else None

    pitch_regret = pitch_alt.pitch_distance - hand.pitch_distance if pitch_alt is not None else math.inf
    volume_regret = volume_alt.volume_distance - hand.volume_distance if volume_alt is not None else math.inf

    if pitch_regret + COLLISION_MARGIN < volume_regret:
        return RoleAssignment(pitch_alt, hand, AssignmentSource.COLLISION, AssignmentSource.COLLISION)
    if volume_regret + COLLISION_MARGIN < pitch_regret:
        return RoleAssignment(hand, volume_alt, AssignmentSource.COLLISION, AssignmentSource.COLLISION)

    if pitch_strength != volume_strength:
        keep_pitch = pitch_strength > volume_strength
    else:
        keep_pitch = hand.pitch_distance <= hand.volume_distance

    if keep_pitch:
        return RoleAssignment(
            hand,
            volume_alt,
            AssignmentSource.COLLISION,
            AssignmentSource.COLLISION if volume_alt is not None else None,
        )
    return RoleAssignment(
        pitch_alt,
        hand,
        AssignmentSource.COLLISION if pitch_alt is not None else None,
        AssignmentSource.COLLISION,
    )


def assign_roles(detections: Sequence[HandDetection], mode_config: ModeConfig) -> RoleAssignment:
    candidates: List[HandDetection] = [d for d in detections if d.is_valid]
    if not candidates:
        return RoleAssignment()

    used: Set[int] = set()
    pitch_i: Optional[int] = None
    volume_i: Optional[int] = None
    pitch_src: Optional[AssignmentSource] = None
    volume_src: Optional[AssignmentSource] = None

    pitch_i, pitch_kind = _best_label_match(candidates, used, mode_config.pitch_label, _pitch_key)
    if pitch_i is not None:
        used.add(pitch_i)
        pitch_src = _source_for(pitch_kind)

    volume_i, volume_kind = _best_label_match(candidates, used, mode_config.volume_label, _volume_key)
    if volume_i is not None:
        used.add(volume_i)
        volume_src = _source_for(volume_kind)

    if len(candidates) == 1 and pitch_i is None and volume_i is None:
        only = candidates[0]
        if only.pitch_distance <= only.volume_distance:
            return RoleAssignment(only, None, AssignmentSource.SINGLE_HAND, None)
        return RoleAssignment(None, only, None, AssignmentSource.SINGLE_HAND)

    pool = [i for i in range(len(candidates)) if i not in used]
    if pitch_i is None:
        pitch_i = _nearest(candidates, pool, _pitch_key)
        pitch_src = AssignmentSource.NEAREST if pitch_i is not None else None
    if volume_i is None:
        volume_i = _nearest(candidates, pool, _volume_key)
        volume_src = AssignmentSource.NEAREST if volume_i is not None else None

    if pitch_i is not None and pitch_i == volume_i:
        if len(pool) >= 2:
            pitch_i, volume_i = _joint_cost(candidates, pool)
            pitch_src = volume_src = AssignmentSource.JOINT_COST
        else:
            return resolve_collision(candidates[pitch_i], candidates, pitch_kind, volume_kind)

    return RoleAssignment(
        candidates[pitch_i] if pitch_i is not None else None,
        candidates[volume_i] if volume_i is not None else None,
        pitch_src,
        volume_src,
    )
