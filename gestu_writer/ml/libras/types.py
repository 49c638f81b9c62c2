from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, NamedTuple, Optional, Tuple, Union

# Индексы точек MediaPipe Hands (21 точка)
WRIST = 0
THUMB_CMC, THUMB_MCP, THUMB_IP, THUMB_TIP = 1, 2, 3, 4
INDEX_MCP, INDEX_PIP, INDEX_DIP, INDEX_TIP = 5, 6, 7, 8
MIDDLE_MCP, MIDDLE_PIP, MIDDLE_DIP, MIDDLE_TIP = 9, 10, 11, 12
RING_MCP, RING_PIP, RING_DIP, RING_TIP = 13, 14, 15, 16
PINKY_MCP, PINKY_PIP, PINKY_DIP, PINKY_TIP = 17, 18, 19, 20

NUM_LANDMARKS = 21

HAND_LABELS = ("Left", "Right")


class ConfigurationError(Exception):
    """Неверная конфигурация или входные данные, с которыми нельзя продолжать."""


class MissingHandednessError(ConfigurationError):
    """
    Оракул не отдал handedness (или отдал мусор).
    Угадывать нельзя: от стороны руки зависят все правила большого пальца.
    """


class Landmark(NamedTuple):
    x: float
    y: float
    z: float = 0.0


@dataclass(frozen=True)
class Handedness:
    label: str
    score: float = 1.0

    @property
    def is_right(self) -> bool:
        return self.label == "Right"


def require_handedness(handedness: Optional[Handedness]) -> Handedness:
    if handedness is None:
        raise MissingHandednessError("handedness отсутствует для руки в кадре")
    if handedness.label not in HAND_LABELS:
        raise MissingHandednessError(
            f"handedness.label должен быть Left/Right, получено: {handedness.label!r}"
        )
    return handedness


def to_landmark(point: Any) -> Landmark:
    """Точка MediaPipe (.x/.y/.z), dict или (x, y[, z]) -> Landmark."""
    if isinstance(point, Landmark):
        return point
    if isinstance(point, dict):
        return Landmark(float(point["x"]), float(point["y"]), float(point.get("z", 0.0)))
    if hasattr(point, "x") and hasattr(point, "y"):
        return Landmark(float(point.x), float(point.y), float(getattr(point, "z", 0.0) or 0.0))
    if len(point) not in (2, 3):
        raise ValueError(f"точка должна быть (x, y) или (x, y, z), получено {len(point)} значений")
    if len(point) == 2:
        return Landmark(float(point[0]), float(point[1]))
    return Landmark(float(point[0]), float(point[1]), float(point[2]))


def to_landmarks(points: Optional[Iterable[Any]]) -> Tuple[Landmark, ...]:
    if not points:
        return ()
    return tuple(to_landmark(p) for p in points)


@dataclass(frozen=True)
class Pose:
    """Один кадр: 21 точка + handedness + время захвата (мс)."""
    landmarks: Tuple[Landmark, ...]
    handedness: Optional[Handedness]
    timestamp_ms: float = 0.0

    @property
    def is_complete(self) -> bool:
        return len(self.landmarks) >= NUM_LANDMARKS


class TokenKind(str, Enum):
    LETTER = "LETTER"
    WORD = "WORD"
    NUMBER = "NUMBER"


@dataclass(frozen=True)
class GestureToken:
    kind: TokenKind
    value: Union[str, int]
    confidence: float

    def __post_init__(self):
        if not (0.0 <= self.confidence <= 1.0):
            raise ValueError(f"confidence вне [0, 1]: {self.confidence}")

    @property
    def display(self) -> str:
        """Строка, которую добавляет транскрипт (цифры -> str)."""
        return str(self.value)

    def to_dict(self) -> dict:
        return {"kind": self.kind.value, "value": self.value, "confidence": float(self.confidence)}


def letter(value: str, confidence: float) -> GestureToken:
    return GestureToken(TokenKind.LETTER, value, confidence)


def word(value: str, confidence: float) -> GestureToken:
    return GestureToken(TokenKind.WORD, value, confidence)


def number(value: int, confidence: float) -> GestureToken:
    return GestureToken(TokenKind.NUMBER, value, confidence)


@dataclass(frozen=True)
class TranscriptionState:
    active_symbol: Optional[str] = None
    hold_progress: int = 0
    confirmed_symbol: Optional[str] = None
    confirmed_word: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "active_symbol": self.active_symbol,
            "hold_progress": int(self.hold_progress),
            "confirmed_symbol": self.confirmed_symbol,
            "confirmed_word": self.confirmed_word,
        }


EMPTY_STATE = TranscriptionState()
