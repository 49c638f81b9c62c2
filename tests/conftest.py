from typing import Dict, List, Optional, Tuple

import pytest

from gestu_writer.ml.libras.types import Handedness, Landmark, Pose

# Правая рука ладонью к камере, кисть вверх. Y растёт вниз.
BASE = {
    0: (0.50, 0.80),                                                # wrist
    1: (0.44, 0.75), 2: (0.40, 0.70), 3: (0.38, 0.65),              # thumb CMC/MCP/IP
    5: (0.45, 0.60), 6: (0.45, 0.50),                               # index MCP/PIP
    9: (0.50, 0.58), 10: (0.50, 0.48),                              # middle
    13: (0.55, 0.60), 14: (0.55, 0.50),                             # ring
    17: (0.60, 0.63), 18: (0.60, 0.55),                             # pinky
}

THUMB_OPEN_TIP = (0.35, 0.62)
THUMB_CLOSED_TIP = (0.41, 0.72)

# (DIP, TIP) для открытого / согнутого пальца
FINGERS = {
    "index": (7, 8, ((0.45, 0.45), (0.45, 0.40)), ((0.46, 0.57), (0.45, 0.63))),
    "middle": (11, 12, ((0.50, 0.43), (0.50, 0.38)), ((0.51, 0.55), (0.50, 0.61))),
    "ring": (15, 16, ((0.55, 0.45), (0.55, 0.40)), ((0.56, 0.57), (0.55, 0.63))),
    "pinky": (19, 20, ((0.60, 0.51), (0.60, 0.47)), ((0.61, 0.60), (0.60, 0.66))),
}


def make_points(
    thumb: bool = False,
    index: bool = False,
    middle: bool = False,
    ring: bool = False,
    pinky: bool = False,
    overrides: Optional[Dict[int, Tuple[float, float]]] = None,
) -> List[Landmark]:
    pts = dict(BASE)
    pts[4] = THUMB_OPEN_TIP if thumb else THUMB_CLOSED_TIP
    flags = {"index": index, "middle": middle, "ring": ring, "pinky": pinky}
    for name, (dip, tip, open_pts, closed_pts) in FINGERS.items():
        pts[dip], pts[tip] = open_pts if flags[name] else closed_pts
    pts.update(overrides or {})
    return [Landmark(pts[i][0], pts[i][1], 0.0) for i in range(21)]


def make_pose(label: Optional[str] = "Right", ts: float = 0.0, **kwargs) -> Pose:
    hand = Handedness(label, 0.98) if label else None
    return Pose(tuple(make_points(**kwargs)), hand, ts)


def shifted(pose: Pose, dx: float, dy: float, ts: float = None) -> Pose:
    lms = tuple(Landmark(p.x + dx, p.y + dy, p.z) for p in pose.landmarks)
    return Pose(lms, pose.handedness, pose.timestamp_ms if ts is None else ts)


def path(pose: Pose, keyframes: Dict[int, Tuple[float, float]], n: int) -> List[Pose]:
    """n кадров: поза сдвигается по кусочно-линейной траектории через keyframes."""
    keys = sorted(keyframes)
    out = []
    for i in range(n):
        for a, b in zip(keys, keys[1:]):
            if a <= i <= b:
                t = (i - a) / (b - a)
                dx = keyframes[a][0] + t * (keyframes[b][0] - keyframes[a][0])
                dy = keyframes[a][1] + t * (keyframes[b][1] - keyframes[a][1])
                break
        out.append(shifted(pose, dx, dy, ts=i * 33.0))
    return out


@pytest.fixture
def right_fist_a() -> Pose:
    # кулак, большой вертикально у костяшки указательного
    return make_pose(overrides={4: (0.47, 0.52)})
