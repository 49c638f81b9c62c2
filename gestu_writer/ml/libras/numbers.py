"""
Цифры LIBRAS 0-9 одной рукой.

Сначала проверяем формы с касанием (9, 8, 0, 6) и "большой вверх" (7),
потом простой подсчёт пальцев. 10 требует двух рук — не поддерживается.

Цифры, у которых набор пальцев совпадает с буквой (1~D, 2~U/V, 3~W, 4~B),
имеют уверенность 0.80: в смешанном режиме они не перебивают букву
и остаются только запасным вариантом.
"""
from typing import Callable, Optional, Sequence, Tuple

from .features import FingerStates, distance_2d
from .types import (
    GestureToken, Landmark, number,
    THUMB_MCP, THUMB_TIP, INDEX_MCP, INDEX_TIP, MIDDLE_TIP, PINKY_TIP,
)

# Пороги касаний (нормированные координаты кадра)
NINE_TOUCH_THR = 0.08
EIGHT_TOUCH_THR = 0.08
ZERO_TOUCH_THR = 0.10
SIX_TOUCH_THR = 0.10
SEVEN_CLEAR_THR = 0.05  # большой должен стоять в стороне от кулака (иначе это "A")

# уверенность "только подсчёт пальцев" для форм, совпадающих с буквами
SHARED_SHAPE_CONF = 0.80


def _thumb_only(f: FingerStates) -> bool:
    return f.thumb and f.four_closed


def is_digit_9(lms: Sequence[Landmark], f: FingerStates) -> bool:
    # "OK": большой и указательный замкнуты в кольцо, остальные согнуты
    return (
        f.thumb and f.index and not (f.middle or f.ring or f.pinky) and
        distance_2d(lms[THUMB_TIP], lms[INDEX_TIP]) < NINE_TOUCH_THR
    )


def is_digit_8(lms: Sequence[Landmark], f: FingerStates) -> bool:
    return f.four_open and distance_2d(lms[THUMB_TIP], lms[MIDDLE_TIP]) < EIGHT_TOUCH_THR


def is_digit_0(lms: Sequence[Landmark], f: FingerStates) -> bool:
    return f.thumb and f.four_open and distance_2d(lms[THUMB_TIP], lms[INDEX_TIP]) < ZERO_TOUCH_THR


def is_digit_6(lms: Sequence[Landmark], f: FingerStates) -> bool:
    return _thumb_only(f) and distance_2d(lms[THUMB_TIP], lms[PINKY_TIP]) < SIX_TOUCH_THR


def is_digit_7(lms: Sequence[Landmark], f: FingerStates) -> bool:
    thumb_up = lms[THUMB_TIP].y < lms[THUMB_MCP].y
    clear_of_fist = abs(lms[THUMB_TIP].x - lms[INDEX_MCP].x) >= SEVEN_CLEAR_THR
    return _thumb_only(f) and thumb_up and clear_of_fist


def is_digit_5(lms: Sequence[Landmark], f: FingerStates) -> bool:
    return f.thumb and f.four_open


def is_digit_3_thumb(lms: Sequence[Landmark], f: FingerStates) -> bool:
    # альтернативная "3": большой + указательный + средний
    return f.thumb and f.index and f.middle and not (f.ring or f.pinky)


def is_digit_4(lms: Sequence[Landmark], f: FingerStates) -> bool:
    return f == FingerStates(False, True, True, True, True)


def is_digit_3(lms: Sequence[Landmark], f: FingerStates) -> bool:
    return f == FingerStates(False, True, True, True, False)


def is_digit_2(lms: Sequence[Landmark], f: FingerStates) -> bool:
    return f == FingerStates(False, True, True, False, False)


def is_digit_1(lms: Sequence[Landmark], f: FingerStates) -> bool:
    return f == FingerStates(False, True, False, False, False)


DigitRule = Tuple[int, float, Callable[[Sequence[Landmark], FingerStates], bool]]

# порядок важен: первое совпадение выигрывает
DIGIT_RULES: Tuple[DigitRule, ...] = (
    (9, 0.87, is_digit_9),
    (8, 0.86, is_digit_8),
    (0, 0.85, is_digit_0),
    (6, 0.86, is_digit_6),
    (7, 0.88, is_digit_7),
    (5, 0.95, is_digit_5),
    (3, 0.88, is_digit_3_thumb),
    (4, SHARED_SHAPE_CONF, is_digit_4),
    (3, SHARED_SHAPE_CONF, is_digit_3),
    (2, SHARED_SHAPE_CONF, is_digit_2),
    (1, SHARED_SHAPE_CONF, is_digit_1),
)


def classify_number(lms: Sequence[Landmark], f: FingerStates) -> Optional[GestureToken]:
    for value, confidence, rule in DIGIT_RULES:
        if rule(lms, f):
            return number(value, confidence)
    return None
