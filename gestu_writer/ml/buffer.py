from collections import deque
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from gestu_writer.ml.libras.types import Pose

# самое длинное окно, которое смотрит классификатор движений (зигзаг "Z")
MIN_HISTORY = 18


class HistoryWindow:
    """Последние позы одной руки, от старой к новой. Переполнение вытесняет самую старую."""

    def __init__(self, capacity: int = 24):
        if capacity < MIN_HISTORY:
            raise ValueError(f"HistoryWindow capacity должен быть >= {MIN_HISTORY}, получено {capacity}")
        self.capacity = capacity
        self._poses = deque(maxlen=capacity)

    def reset(self):
        self._poses.clear()

    def add(self, pose: "Pose"):
        self._poses.append(pose)

    def __len__(self) -> int:
        return len(self._poses)

    def __getitem__(self, idx: int) -> "Pose":
        return self._poses[idx]

