from pydantic import BaseModel, conlist
from typing import List, Optional, Union

from gestu_writer.ml.libras.types import Handedness, Pose, to_landmarks


class LandmarkIn(BaseModel):
    x: float
    y: float
    z: float = 0.0


# [x, y] или [x, y, z]
PointIn = conlist(float, min_length=2, max_length=3)


class HandednessIn(BaseModel):
    label: str
    score: float = 1.0


class PoseIn(BaseModel):
    # точки: [{"x", "y", "z"}] или [[x, y]] / [[x, y, z]]
    landmarks: List[Union[LandmarkIn, PointIn]] = []
    handedness: Optional[HandednessIn] = None
    timestamp_ms: Optional[float] = None

    def to_pose(self, default_ts_ms: float = 0.0) -> Pose:
        hand = Handedness(self.handedness.label, self.handedness.score) if self.handedness else None
        ts = self.timestamp_ms if self.timestamp_ms is not None else default_ts_ms
        return Pose(to_landmarks(self.landmarks), hand, float(ts))
