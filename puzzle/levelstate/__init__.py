"""
Level state module - capture and restore of a level's mutable state.

Provides:
- LevelSnapshot model (position-indexed, immutable)
- Stack detection for boxes carried by the player
- Capture routine (world -> snapshot + carried boxes)
- Restore routine (snapshot -> world, carried boxes -> world)
"""

from puzzle.levelstate.snapshot import (
    LevelSnapshot,
    SavedBox,
    SavedMirror,
    CarriedBox,
    PositionKey,
    position_key,
)
from puzzle.levelstate.stacking import detect_carried_stack
from puzzle.levelstate.capture import capture_level_state
from puzzle.levelstate.restore import restore_level_state, restore_carried_boxes

__all__ = [
    "LevelSnapshot",
    "SavedBox",
    "SavedMirror",
    "CarriedBox",
    "PositionKey",
    "position_key",
    "detect_carried_stack",
    "capture_level_state",
    "restore_level_state",
    "restore_carried_boxes",
]
