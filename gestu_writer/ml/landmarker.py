from __future__ import annotations

import time
from typing import List, Optional

import numpy as np
import mediapipe as mp

from gestu_writer.config import LandmarkerConfig, resolve_model_path
from gestu_writer.ml.hands import poses_from_result
from gestu_writer.ml.libras.types import Pose


class HandLandmarkerSession:
    """
    Обёртка над MediaPipe Tasks HandLandmarker (VIDEO):
    BGR-кадр -> список Pose. Классификация здесь не делается.
    """

    def __init__(self, model_path: Optional[str] = None, config: Optional[LandmarkerConfig] = None):
        cfg = config or LandmarkerConfig()
        self.model_path = resolve_model_path(model_path)
        self.num_hands = cfg.num_hands

        BaseOptions = mp.tasks.BaseOptions
        HandLandmarker = mp.tasks.vision.HandLandmarker
        HandLandmarkerOptions = mp.tasks.vision.HandLandmarkerOptions
        RunningMode = mp.tasks.vision.RunningMode

        options = HandLandmarkerOptions(
            base_options=BaseOptions(model_asset_path=str(self.model_path)),
            running_mode=RunningMode.VIDEO,
            num_hands=cfg.num_hands,
            min_hand_detection_confidence=cfg.min_hand_detection_confidence,
            min_hand_presence_confidence=cfg.min_hand_presence_confidence,
            min_tracking_confidence=cfg.min_tracking_confidence,
        )

        self._landmarker = HandLandmarker.create_from_options(options)
        self._last_ts_ms = 0

    def close(self) -> None:
        self._landmarker.close()

    def _ensure_ts(self, ts_ms: int) -> int:
        # VIDEO-режим падает на повторном или убывающем времени кадра
        if ts_ms <= self._last_ts_ms:
            ts_ms = self._last_ts_ms + 1
        self._last_ts_ms = ts_ms
        return ts_ms

    def detect_bgr(self, frame_bgr: np.ndarray, ts_ms: Optional[int] = None) -> List[Pose]:
        """
        frame_bgr: np.ndarray (H,W,3), uint8
        ts_ms: timestamp в миллисекундах. Если None — берём time.monotonic().
        """
        if ts_ms is None:
            ts_ms = int(time.monotonic() * 1000)
        ts_ms = self._ensure_ts(int(ts_ms))

        if frame_bgr is None or frame_bgr.ndim != 3 or frame_bgr.shape[2] != 3:
            return []

        # BGR -> RGB
        frame_rgb = np.ascontiguousarray(frame_bgr[:, :, ::-1])

        mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=frame_rgb)
        result = self._landmarker.detect_for_video(mp_image, ts_ms)
        return poses_from_result(result, ts_ms)
