from __future__ import annotations

import logging
from typing import Optional

from gestu_writer.ml.buffer import HistoryWindow

from .motion import classify_motion
from .resolver import resolve
from .static_signs import MODE_MIXED, classify_static
from .transcription import TimingConfig, TranscriptionMachine
from .types import GestureToken, Pose, TranscriptionState

logger = logging.getLogger(__name__)


class TranscriptionSession:
    """
    Сессия распознавания одной руки (stateful):
    - окно истории поз для динамических жестов
    - автомат удержания / подтверждения

    Несколько рук = несколько сессий, общего состояния нет.
    """

    def __init__(
        self,
        timing: Optional[TimingConfig] = None,
        mode: str = MODE_MIXED,
        history_size: int = 24,
    ):
        self.mode = mode
        self.history = HistoryWindow(history_size)
        self.machine = TranscriptionMachine(timing)
        self.last_token: Optional[GestureToken] = None
        self.frames = 0

    def classify(self, pose: Optional[Pose]) -> Optional[GestureToken]:
        """Кадр в окно истории -> движение / статика -> итоговый токен."""
        if pose is None or not pose.is_complete:
            # рука пропала: старая траектория больше не продолжается
            self.history.reset()
            return None

        static = classify_static(pose, self.mode)
        self.history.add(pose)
        motion = classify_motion(self.history)
        return resolve(motion, static)

    def process(self, pose: Optional[Pose], now_ms: float) -> TranscriptionState:
        self.frames += 1
        token = self.classify(pose)
        self.last_token = token
        state = self.machine.update(token, now_ms)

        if state.confirmed_symbol or state.confirmed_word:
            logger.info(
                f"confirmed={state.confirmed_symbol or state.confirmed_word} "
                f"conf={token.confidence:.2f} frame={self.frames}"
            )
        return state

    def reset(self) -> None:
        self.history.reset()
        self.machine.reset()
        self.last_token = None
        self.frames = 0

    def close(self) -> None:
        # поток кадров закончился: следующая сессия начинает с чистого листа
        self.reset()
