"""
Динамические жесты по короткой истории поз.

Слова (OI / SIM / NÃO) — по запястью в трёх опорных кадрах последних 12
поз (начало / середина / конец). Буква "Z" — по кончику указательного
в пяти равномерно разнесённых кадрах последних 18 поз.
"""
from typing import List, Optional, Sequence

from .features import is_open
from .types import (
    GestureToken, Landmark, Pose, letter, word,
    WRIST, THUMB_MCP, THUMB_TIP, INDEX_PIP, INDEX_TIP,
)

WORD_WINDOW = 12
ZIGZAG_WINDOW = 18
ZIGZAG_OFFSETS = (0, 4, 8, 13, 17)

WORD_WAVE = "OI"
WORD_NOD = "SIM"
WORD_SHAKE = "NÃO"
MOTION_LETTER = "Z"

WAVE_AMPLITUDE_THR = 0.18
NOD_DRIFT_THR = 0.12
SHAKE_DRIFT_THR = 0.20
STILL_AXIS_THR = 0.08     # "почти без сноса" по второй оси
ZIGZAG_STEP_THR = 0.08
ZIGZAG_DROP_THR = 0.12
ZIGZAG_CONF = 0.85


def clamp_confidence(value: float, lo: float = 0.6, hi: float = 1.0) -> float:
    return max(lo, min(hi, value))


def _sample(window: Sequence[Pose], size: int, offsets) -> Optional[List[Sequence[Landmark]]]:
    if window is None or len(window) < size:
        return None
    start = len(window) - size
    poses = [window[start + k] for k in offsets]
    if not all(p.is_complete for p in poses):
        return None
    return [p.landmarks for p in poses]


def _index_extended(lms: Sequence[Landmark]) -> bool:
    return is_open(lms[INDEX_TIP], lms[INDEX_PIP])


def detect_wave(early, mid, last) -> Optional[GestureToken]:
    dx1 = mid[WRIST].x - early[WRIST].x
    dx2 = last[WRIST].x - mid[WRIST].x
    drift_y = last[WRIST].y - early[WRIST].y

    amplitude = abs(dx1) + abs(dx2)
    reversed_dir = dx1 * dx2 < 0
    if reversed_dir and amplitude > WAVE_AMPLITUDE_THR and abs(drift_y) < STILL_AXIS_THR:
        return word(WORD_WAVE, clamp_confidence(amplitude))
    return None


def detect_nod(early, mid, last) -> Optional[GestureToken]:
    drift_x = last[WRIST].x - early[WRIST].x
    drift_y = last[WRIST].y - early[WRIST].y

    thumb_up = last[THUMB_TIP].y < last[THUMB_MCP].y
    if thumb_up and abs(drift_y) > NOD_DRIFT_THR and abs(drift_x) < STILL_AXIS_THR:
        return word(WORD_NOD, clamp_confidence(abs(drift_y)))
    return None


def detect_shake(early, mid, last) -> Optional[GestureToken]:
    drift_x = last[WRIST].x - early[WRIST].x
    drift_y = last[WRIST].y - early[WRIST].y

    if _index_extended(last) and abs(drift_x) > SHAKE_DRIFT_THR and abs(drift_y) < STILL_AXIS_THR:
        return word(WORD_SHAKE, clamp_confidence(abs(drift_x)))
    return None


def detect_zigzag(window: Sequence[Pose]) -> Optional[GestureToken]:
    """
    "Z" указательным: вправо, потом влево, всё время вниз.
    Указательный должен быть вытянут во всех пяти опорных кадрах.
    """
    frames = _sample(window, ZIGZAG_WINDOW, ZIGZAG_OFFSETS)
    if frames is None:
        return None
    if not all(_index_extended(lms) for lms in frames):
        return None

    pts = [lms[INDEX_TIP] for lms in frames]
    dx1 = pts[1].x - pts[0].x
    dx2 = pts[2].x - pts[1].x
    dy1 = pts[1].y - pts[0].y
    dy2 = pts[2].y - pts[1].y
    total_dy = pts[-1].y - pts[0].y

    if (
        dx1 > ZIGZAG_STEP_THR and
        dx2 < -ZIGZAG_STEP_THR and
        dy1 > 0 and dy2 > 0 and
        abs(total_dy) > ZIGZAG_DROP_THR
    ):
        return letter(MOTION_LETTER, ZIGZAG_CONF)
    return None


WORD_RULES = (detect_wave, detect_nod, detect_shake)


def classify_motion(window: Sequence[Pose]) -> Optional[GestureToken]:
    frames = _sample(window, WORD_WINDOW, (0, WORD_WINDOW // 2, WORD_WINDOW - 1))
    if frames is None:
        return None

    early, mid, last = frames
    for rule in WORD_RULES:
        token = rule(early, mid, last)
        if token is not None:
            return token

    return detect_zigzag(window)
