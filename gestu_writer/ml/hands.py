from typing import Any, List, Optional

from gestu_writer.ml.libras.types import Handedness, Pose, to_landmarks


def handedness_from_categories(categories: Any) -> Optional[Handedness]:
    """
    Список Category от MediaPipe Tasks -> Handedness (берём top-1).
    Пусто или без имени — None: решать, что с этим делать, будет классификатор.
    """
    if not categories:
        return None
    top = categories[0]
    label = getattr(top, "category_name", None) or getattr(top, "display_name", None)
    if not label:
        return None
    return Handedness(str(label), float(getattr(top, "score", 0.0) or 0.0))


def poses_from_result(result: Any, ts_ms: float) -> List[Pose]:
    """HandLandmarkerResult -> позы в порядке рук из результата."""
    hands = list(getattr(result, "hand_landmarks", None) or [])
    handedness = list(getattr(result, "handedness", None) or [])

    poses = []
    for i, hand_lms in enumerate(hands):
        cats = handedness[i] if i < len(handedness) else None
        poses.append(Pose(to_landmarks(hand_lms), handedness_from_categories(cats), float(ts_ms)))
    return poses
