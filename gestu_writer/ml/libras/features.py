import math
from typing import NamedTuple, Sequence

from .types import (
    Handedness, Landmark,
    THUMB_IP, THUMB_TIP,
    INDEX_PIP, INDEX_TIP, MIDDLE_PIP, MIDDLE_TIP,
    RING_PIP, RING_TIP, PINKY_PIP, PINKY_TIP,
)


def is_open(tip: Landmark, pip: Landmark) -> bool:
    """Палец открыт, если кончик выше PIP (Y растёт вниз)."""
    return tip.y < pip.y


def thumb_open(tip: Landmark, ip: Landmark, handedness: Handedness) -> bool:
    # правая рука: большой "уходит" влево; левая — зеркально
    if handedness.is_right:
        return tip.x < ip.x
    return tip.x > ip.x


def distance_2d(a: Landmark, b: Landmark) -> float:
    """Евклидово расстояние по (x, y), глубина игнорируется."""
    return math.sqrt((a.x - b.x) ** 2 + (a.y - b.y) ** 2)


class FingerStates(NamedTuple):
    thumb: bool
    index: bool
    middle: bool
    ring: bool
    pinky: bool

    @property
    def open_count(self) -> int:
        return sum(self)

    @property
    def four_closed(self) -> bool:
        return not (self.index or self.middle or self.ring or self.pinky)

    @property
    def four_open(self) -> bool:
        return self.index and self.middle and self.ring and self.pinky


def finger_states(lms: Sequence[Landmark], handedness: Handedness) -> FingerStates:
    return FingerStates(
        thumb=thumb_open(lms[THUMB_TIP], lms[THUMB_IP], handedness),
        index=is_open(lms[INDEX_TIP], lms[INDEX_PIP]),
        middle=is_open(lms[MIDDLE_TIP], lms[MIDDLE_PIP]),
        ring=is_open(lms[RING_TIP], lms[RING_PIP]),
        pinky=is_open(lms[PINKY_TIP], lms[PINKY_PIP]),
    )
