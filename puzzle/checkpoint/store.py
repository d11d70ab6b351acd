"""
Checkpoint store - keeps level snapshots and commits checkpoints.

The store keeps two tiers:
- working level states, replaced each time a level is captured
- the last checkpoint, a frozen copy of the working states plus the
  level and position the player resumes at

Subclasses decide where a checkpoint lives.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from stage.core import EventBus
from puzzle.checkpoint.buffer import CarriedBoxesBuffer
from puzzle.components import Vector3
from puzzle.events import CheckpointEvent
from puzzle.levelstate.snapshot import LevelSnapshot


logger = logging.getLogger(__name__)


@dataclass
class Checkpoint:
    """A committed set of level states."""
    level_states: dict[int, LevelSnapshot] = field(default_factory=dict)
    level_id: Optional[int] = None
    player_position: Optional[Vector3] = None
    timestamp: str = ""


class CheckpointStore(ABC):
    """
    Level state persistence shared by every level of a session.

    Attributes:
        carried_boxes: Boxes handed from the level being left to the next
        loaded_by_checkpoint: Next level entry comes from a checkpoint load
        entered_from_left: Next level entry comes through its entry side
        initial_checkpoint_saved: A first checkpoint exists this session
    """

    def __init__(self, event_bus: Optional[EventBus] = None):
        self.event_bus = event_bus
        self.carried_boxes = CarriedBoxesBuffer()

        # Transition flags
        self.loaded_by_checkpoint: bool = False
        self.entered_from_left: bool = True
        self.initial_checkpoint_saved: bool = False

        self._level_states: dict[int, LevelSnapshot] = {}
        self._checkpoint: Optional[Checkpoint] = None

    def save_level_state(self, level_id: int, snapshot: LevelSnapshot) -> None:
        """
        Replace the working state of a level.

        Raises:
            ValueError: If the snapshot belongs to another level
        """
        if snapshot.level_id != level_id:
            raise ValueError(
                f"Snapshot of level {snapshot.level_id} cannot be stored as level {level_id}"
            )

        self._level_states[level_id] = snapshot
        logger.debug("Stored state of level %s", level_id)

        if self.event_bus:
            self.event_bus.publish(CheckpointEvent.LEVEL_STATE_STORED, level_id=level_id)

    def load_level_state(self, level_id: int) -> Optional[LevelSnapshot]:
        """Get the working state of a level, if it was ever captured."""
        return self._level_states.get(level_id)

    def create_checkpoint(
        self,
        level_id: Optional[int] = None,
        player_position: Optional[Vector3] = None,
    ) -> Checkpoint:
        """Commit the working level states as the current checkpoint."""
        checkpoint = Checkpoint(
            level_states=dict(self._level_states),
            level_id=level_id,
            player_position=player_position,
            timestamp=datetime.now().isoformat(),
        )
        self._write_checkpoint(checkpoint)
        self._checkpoint = checkpoint

        logger.info(
            "Checkpoint created at level %s (%d level state(s))",
            level_id, len(checkpoint.level_states),
        )
        if self.event_bus:
            self.event_bus.publish(CheckpointEvent.CHECKPOINT_CREATED, level_id=level_id)
        return checkpoint

    def restore_checkpoint(self) -> Optional[Checkpoint]:
        """
        Roll the working states back to the last checkpoint.

        Boxes in transit between levels are dropped, and the next level
        entry is flagged as a checkpoint load.

        Returns:
            The checkpoint, or None if there is none
        """
        checkpoint = self._read_checkpoint()
        if checkpoint is None:
            return None

        self._checkpoint = checkpoint
        self._level_states = dict(checkpoint.level_states)
        self.carried_boxes.drain()
        self.loaded_by_checkpoint = True
        self.initial_checkpoint_saved = True

        logger.info("Checkpoint restored at level %s", checkpoint.level_id)
        if self.event_bus:
            self.event_bus.publish(
                CheckpointEvent.CHECKPOINT_RESTORED,
                level_id=checkpoint.level_id,
            )
        return checkpoint

    @property
    def checkpoint(self) -> Optional[Checkpoint]:
        """The last checkpoint created or restored."""
        return self._checkpoint

    @property
    def checkpoint_player_position(self) -> Optional[Vector3]:
        """Where the player resumes after a checkpoint load."""
        return self._checkpoint.player_position if self._checkpoint else None

    @abstractmethod
    def _write_checkpoint(self, checkpoint: Checkpoint) -> None:
        """Persist a checkpoint."""

    @abstractmethod
    def _read_checkpoint(self) -> Optional[Checkpoint]:
        """Load the persisted checkpoint, or None if there is none."""


class InMemoryCheckpointStore(CheckpointStore):
    """Checkpoint store that keeps the checkpoint in process memory."""

    def __init__(self, event_bus: Optional[EventBus] = None):
        super().__init__(event_bus)
        self._saved: Optional[Checkpoint] = None

    def _write_checkpoint(self, checkpoint: Checkpoint) -> None:
        self._saved = checkpoint

    def _read_checkpoint(self) -> Optional[Checkpoint]:
        return self._saved
