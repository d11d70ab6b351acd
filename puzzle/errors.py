"""
Errors raised while capturing, restoring or persisting level state.
"""

from __future__ import annotations

from typing import Any


class LevelStateError(Exception):
    """Base class for level state capture/restore failures."""


class ConsistencyMismatch(LevelStateError):
    """A scene entity has no matching position key in the snapshot."""

    def __init__(self, kind: str, position: Any, level_id: int | None = None):
        self.kind = kind
        self.position = position
        self.level_id = level_id
        super().__init__(
            f"No saved {kind} state at {position} in snapshot of level {level_id}; "
            f"level geometry and snapshot disagree"
        )


class DuplicatePositionKey(LevelStateError):
    """Two entities of the same kind share a position key."""

    def __init__(self, kind: str, position: Any):
        self.kind = kind
        self.position = position
        super().__init__(f"Two {kind}s share position {position}")


class DegenerateStackQuery(LevelStateError):
    """The spatial query stopped making progress while walking a stack."""


class StaleCarriedBuffer(LevelStateError):
    """The carried boxes buffer still holds entries nobody consumed."""


class MultipleWaterMechanisms(LevelStateError):
    """A level holds more than one water mechanism."""


class WaterLayerMismatch(LevelStateError):
    """Serialized water layers do not fit the mechanism's capacity."""

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Water mechanism holds {expected} layers but saved state has {actual}"
        )


class CheckpointError(Exception):
    """Base class for checkpoint store failures."""


class CheckpointCorrupted(CheckpointError):
    """A stored checkpoint failed checksum or schema validation."""
