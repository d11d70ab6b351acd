"""
Event types published by the puzzle layer.
"""

from enum import Enum, auto


class LevelEvent(Enum):
    """Level lifecycle events."""
    LEVEL_ENTERED = auto()
    LEVEL_STATE_SAVED = auto()
    LEVEL_STATE_RESTORED = auto()
    CARRIED_BOXES_RESTORED = auto()
    PLAYER_SPAWN_REQUESTED = auto()
    PLAYER_POSITION_RESTORE_REQUESTED = auto()
    FADE_IN_REQUESTED = auto()
    FADE_OUT_REQUESTED = auto()


class MechanismEvent(Enum):
    """Mechanism state changes."""
    GENERATOR_ACTIVATED = auto()
    MIRROR_CHANGED = auto()
    WATER_RECOVERED = auto()


class CheckpointEvent(Enum):
    """Checkpoint store events."""
    LEVEL_STATE_STORED = auto()
    CHECKPOINT_CREATED = auto()
    CHECKPOINT_RESTORED = auto()
    CHECKPOINT_FAILED = auto()
