from typing import Optional

from .types import GestureToken


def resolve(motion: Optional[GestureToken], static: Optional[GestureToken]) -> Optional[GestureToken]:
    # рука в середине движения может случайно совпасть со статической формой,
    # поэтому динамический жест главнее
    if motion is not None:
        return motion
    return static
