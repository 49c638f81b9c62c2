"""
Статические знаки LIBRAS по одному кадру.

Список правил упорядочен: первое совпадение выигрывает. Многие формы
пересекаются по признакам (F/T, U/V, I/Y, O/P), и порядок правил как раз
задаёт, какую из похожих форм мы предпочитаем. Менять порядок нельзя без
пересмотра всех соседних правил.

Уверенности — фиксированные константы (насколько различающий набор
признаков), а не вычисляемые значения.
"""
from __future__ import annotations

from typing import Callable, Optional, Sequence, Tuple

from .features import FingerStates, distance_2d, finger_states
from .numbers import classify_number
from .types import (
    GestureToken, Landmark, Pose, letter, require_handedness,
    WRIST, THUMB_TIP,
    INDEX_MCP, INDEX_PIP, INDEX_TIP,
    MIDDLE_MCP, MIDDLE_TIP, RING_MCP, RING_TIP,
    PINKY_MCP, PINKY_TIP,
)

MODE_MIXED = "mixed"
MODE_LETTERS = "letters"
MODE_NUMBERS = "numbers"
MODES = (MODE_MIXED, MODE_LETTERS, MODE_NUMBERS)

# цифра выше этого порога перебивает буквы
DIGIT_PREEMPT_THR = 0.85

# --- Пороги (нормированные координаты кадра) ---
A_THUMB_SIDE_THR = 0.05       # |thumb_tip.x - index_mcp.x| для "A"
PINCH_THR = 0.05              # кончик большого на кончике указательного -> не кулак, а кольцо
CIRCLE_MIDDLE_THR = 0.08      # средний тоже замыкает кольцо
P_BELOW_WRIST_THR = 0.15      # кончик указательного заметно ниже запястья -> "P"
IY_SPREAD_THR = 0.15          # разнос большой/мизинец по X
UV_CLOSE_THR = 0.03
UV_SPREAD_THR = 0.05
Y_SPREAD_DIST_THR = 0.20
F_TIP_TOUCH_THR = 0.06
T_PIP_TOUCH_THR = 0.08


def _mean_y(lms: Sequence[Landmark], ids) -> float:
    return sum(lms[i].y for i in ids) / len(ids)


def fist_family(lms: Sequence[Landmark], f: FingerStates) -> Optional[GestureToken]:
    """A / E / S: четыре пальца согнуты."""
    if not f.four_closed:
        return None
    thumb = lms[THUMB_TIP]

    # A: большой стоит вертикально вдоль указательного
    if thumb.y < lms[INDEX_MCP].y and abs(thumb.x - lms[INDEX_MCP].x) < A_THUMB_SIDE_THR:
        return letter("A", 0.90)

    # большой замкнут на кончик указательного -> кольцо (O/P), а не E/S
    if distance_2d(thumb, lms[INDEX_TIP]) < PINCH_THR:
        return None

    # E: плотный "коготь" — кончики выше костяшек, большой поджат под ними
    tips_y = _mean_y(lms, (INDEX_TIP, MIDDLE_TIP, RING_TIP, PINKY_TIP))
    mcps_y = _mean_y(lms, (INDEX_MCP, MIDDLE_MCP, RING_MCP, PINKY_MCP))
    if thumb.y > tips_y and tips_y < mcps_y:
        return letter("E", 0.75)

    # S: большой поперёк пальцев, ниже костяшки указательного
    lo = min(lms[INDEX_MCP].x, lms[PINKY_MCP].x)
    hi = max(lms[INDEX_MCP].x, lms[PINKY_MCP].x)
    if lo <= thumb.x <= hi and thumb.y > lms[INDEX_MCP].y:
        return letter("S", 0.80)

    return None


def flat_hand(lms: Sequence[Landmark], f: FingerStates) -> Optional[GestureToken]:
    if f.four_open and not f.thumb:
        return letter("B", 0.90)
    return None


def circle_family(lms: Sequence[Landmark], f: FingerStates) -> Optional[GestureToken]:
    """O / P: кончики большого, указательного и среднего сведены в кольцо."""
    thumb = lms[THUMB_TIP]
    if distance_2d(thumb, lms[INDEX_TIP]) >= PINCH_THR:
        return None
    if distance_2d(thumb, lms[MIDDLE_TIP]) >= CIRCLE_MIDDLE_THR:
        return None

    # P — то же кольцо, но кисть опущена вниз
    if lms[INDEX_TIP].y - lms[WRIST].y > P_BELOW_WRIST_THR:
        return letter("P", 0.80)
    return letter("O", 0.85)


def curved_hand(lms: Sequence[Landmark], f: FingerStates) -> Optional[GestureToken]:
    if f.thumb and f.index and f.middle and f.ring and not f.pinky:
        return letter("C", 0.70)
    return None


def index_only(lms: Sequence[Landmark], f: FingerStates) -> Optional[GestureToken]:
    if not f.index or f.middle or f.ring or f.pinky:
        return None
    if f.thumb:
        return letter("L", 0.95)
    return letter("D", 0.90)


def pinky_only(lms: Sequence[Landmark], f: FingerStates) -> Optional[GestureToken]:
    # большой не важен: I/Y различаем по разносу большой/мизинец
    if not f.pinky or f.index or f.middle or f.ring:
        return None
    if abs(lms[THUMB_TIP].x - lms[PINKY_TIP].x) > IY_SPREAD_THR:
        return letter("Y", 0.90)
    return letter("I", 0.90)


def two_fingers(lms: Sequence[Landmark], f: FingerStates) -> Optional[GestureToken]:
    if f != FingerStates(False, True, True, False, False):
        return None
    d = distance_2d(lms[INDEX_TIP], lms[MIDDLE_TIP])
    if d < UV_CLOSE_THR:
        return letter("U", 0.88)
    if d > UV_SPREAD_THR:
        return letter("V", 0.90)
    # серая зона между U и V
    return letter("V", 0.75)


def three_fingers(lms: Sequence[Landmark], f: FingerStates) -> Optional[GestureToken]:
    if f == FingerStates(False, True, True, True, False):
        return letter("W", 0.90)
    return None


def thumb_pinky_spread(lms: Sequence[Landmark], f: FingerStates) -> Optional[GestureToken]:
    if f != FingerStates(True, False, False, False, True):
        return None
    if distance_2d(lms[THUMB_TIP], lms[PINKY_TIP]) > Y_SPREAD_DIST_THR:
        return letter("Y", 0.85)
    return None


def closed_index(lms: Sequence[Landmark], f: FingerStates) -> Optional[GestureToken]:
    """F / T: указательный согнут, средний/безымянный/мизинец открыты."""
    if f.index or not (f.middle and f.ring and f.pinky):
        return None
    thumb = lms[THUMB_TIP]
    tip_dist = distance_2d(thumb, lms[INDEX_TIP])
    if tip_dist < F_TIP_TOUCH_THR:
        return letter("F", 0.85)
    if distance_2d(thumb, lms[INDEX_PIP]) < T_PIP_TOUCH_THR:
        return letter("T", 0.80)
    return letter("F", 0.70)


LetterRule = Callable[[Sequence[Landmark], FingerStates], Optional[GestureToken]]

LETTER_RULES: Tuple[LetterRule, ...] = (
    fist_family,
    flat_hand,
    circle_family,
    curved_hand,
    index_only,
    pinky_only,
    two_fingers,
    three_fingers,
    thumb_pinky_spread,
    closed_index,
)


def classify_letter(lms: Sequence[Landmark], f: FingerStates) -> Optional[GestureToken]:
    for rule in LETTER_RULES:
        token = rule(lms, f)
        if token is not None:
            return token
    return None


def classify_static(pose: Optional[Pose], mode: str = MODE_MIXED) -> Optional[GestureToken]:
    """
    Один кадр -> буква / цифра / None.

    mixed:   уверенная цифра (> 0.85) -> буквы -> слабая цифра
    letters: только буквы
    numbers: только цифры (любая уверенность)
    """
    if mode not in MODES:
        raise ValueError(f"Неизвестный режим классификатора: {mode!r}")
    if pose is None or not pose.is_complete:
        return None

    hand = require_handedness(pose.handedness)
    lms = pose.landmarks
    f = finger_states(lms, hand)

    if mode == MODE_LETTERS:
        return classify_letter(lms, f)

    digit = classify_number(lms, f)
    if mode == MODE_NUMBERS:
        return digit

    if digit is not None and digit.confidence > DIGIT_PREEMPT_THR:
        return digit

    token = classify_letter(lms, f)
    if token is not None:
        return token
    return digit
