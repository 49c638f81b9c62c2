"""
Подтверждение символов "удержанием".

Автомат вызывается раз в кадр: update(token, now_ms) -> TranscriptionState.
Своих таймеров нет, всё время считается от переданного now_ms.

Фазы таймера удержания:

    IDLE       — ничего не отслеживаем
    TRACKING   — держим одно и то же значение с hold_start
    DEBOUNCED  — только что подтвердили; hold_start сдвинут в будущее,
                 elapsed < 0, прогресс 0, повторное подтверждение невозможно

Правило перевзвода: как только now доходит до hold_start, фаза снова
TRACKING, и если пользователь продолжает держать тот же знак, он
подтвердится ещё раз (как зажатая клавиша на клавиатуре). Это поведение
намеренное — не "чинить".
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .types import GestureToken, TokenKind, TranscriptionState, EMPTY_STATE

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TimingConfig:
    hold_duration: float = 400.0
    early_lock: float = 250.0
    high_confidence_threshold: float = 0.90
    word_cooldown: float = 700.0
    debounce_early: float = 300.0
    debounce_normal: float = 400.0


class HoldPhase(str, Enum):
    IDLE = "IDLE"
    TRACKING = "TRACKING"
    DEBOUNCED = "DEBOUNCED"


class HoldTimer:
    def __init__(self):
        self.last_value: Optional[str] = None
        self.hold_start: float = 0.0
        self.last_word_value: Optional[str] = None
        self.last_word_time: float = 0.0

    def phase(self, now: float) -> HoldPhase:
        if self.last_value is None:
            return HoldPhase.IDLE
        if self.hold_start > now:
            return HoldPhase.DEBOUNCED
        return HoldPhase.TRACKING

    def start(self, value: str, now: float):
        self.last_value = value
        self.hold_start = now

    def release(self):
        self.last_value = None

    def debounce(self, now: float, shift: float):
        # сдвиг старта в будущее = окно "дребезга" после подтверждения
        self.hold_start = now + shift

    def reset(self):
        self.last_value = None
        self.hold_start = 0.0
        self.last_word_value = None
        self.last_word_time = 0.0


class TranscriptionMachine:
    """Один экземпляр на отслеживаемую руку / сессию."""

    def __init__(self, timing: Optional[TimingConfig] = None):
        self.timing = timing or TimingConfig()
        self.timer = HoldTimer()

    def reset(self):
        self.timer.reset()

    def phase(self, now: float) -> HoldPhase:
        return self.timer.phase(now)

    def update(self, token: Optional[GestureToken], now: float) -> TranscriptionState:
        if token is None:
            self.timer.release()
            return EMPTY_STATE

        if token.kind == TokenKind.WORD:
            return self._update_word(token, now)
        return self._update_symbol(token, now)

    def _update_word(self, token: GestureToken, now: float) -> TranscriptionState:
        t = self.timer
        value = token.display
        if value == t.last_word_value and (now - t.last_word_time) < self.timing.word_cooldown:
            return TranscriptionState(active_symbol=value, hold_progress=0)

        t.last_word_value = value
        t.last_word_time = now
        logger.debug("word confirmed: %s (conf=%.2f)", value, token.confidence)
        return TranscriptionState(active_symbol=value, hold_progress=100, confirmed_word=value)

    def _update_symbol(self, token: GestureToken, now: float) -> TranscriptionState:
        t = self.timer
        cfg = self.timing
        value = token.display

        if value != t.last_value:
            t.start(value, now)
            return TranscriptionState(active_symbol=value, hold_progress=0)

        elapsed = now - t.hold_start
        progress = max(0, min(100, int(100 * elapsed / cfg.hold_duration)))

        if token.confidence >= cfg.high_confidence_threshold and elapsed >= cfg.early_lock:
            t.debounce(now, cfg.debounce_early)
            logger.debug("symbol confirmed (early): %s (conf=%.2f)", value, token.confidence)
            return TranscriptionState(active_symbol=value, hold_progress=100, confirmed_symbol=value)

        if elapsed >= cfg.hold_duration:
            t.debounce(now, cfg.debounce_normal)
            logger.debug("symbol confirmed: %s (conf=%.2f)", value, token.confidence)
            return TranscriptionState(active_symbol=value, hold_progress=100, confirmed_symbol=value)

        return TranscriptionState(active_symbol=value, hold_progress=progress)
