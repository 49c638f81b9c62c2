from .types import (
    ConfigurationError, MissingHandednessError,
    Landmark, Handedness, Pose, TokenKind, GestureToken, TranscriptionState,
)
from .static_signs import classify_static
from .motion import classify_motion
from .resolver import resolve
from .transcription import TimingConfig, TranscriptionMachine, HoldPhase
from .session import TranscriptionSession
