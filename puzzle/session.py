"""
Game session - owns the checkpoint store and the single current level.

Usage:
    session = GameSession(store=InMemoryCheckpointStore())
    session.register_level(LevelDefinition(1, build=build_level_1))
    session.register_level(LevelDefinition(2, build=build_level_2))

    session.enter_level(1)
    session.update(dt)

    # Player walks off the right edge
    session.exit_to(2, entered_from_left=True)
    session.update(dt)
"""

from __future__ import annotations

import logging
from typing import Optional

from stage.core import EventBus, SceneManager
from puzzle.checkpoint import CheckpointStore, JsonCheckpointStore
from puzzle.config import SessionConfig
from puzzle.level import GameLevel, LevelDefinition


logger = logging.getLogger(__name__)


class GameSession:
    """
    Top-level context of a play session.

    Level transitions are queued on the scene manager and take effect
    on the next update(), so they may be requested from inside a
    level's own update.
    """

    def __init__(
        self,
        config: Optional[SessionConfig] = None,
        store: Optional[CheckpointStore] = None,
        event_bus: Optional[EventBus] = None,
    ):
        self.config = config or SessionConfig()
        self.event_bus = event_bus or EventBus()
        self.store = store or JsonCheckpointStore(self.config.save_path, event_bus=self.event_bus)
        self.scene_manager = SceneManager(self.event_bus)
        self._levels: dict[int, LevelDefinition] = {}

    def register_level(self, definition: LevelDefinition) -> None:
        """Make a level available for transitions."""
        self._levels[definition.level_id] = definition

    def create_level(self, level_id: int) -> GameLevel:
        """
        Build a fresh level scene from its definition.

        Raises:
            KeyError: If the level was never registered
        """
        if level_id not in self._levels:
            raise KeyError(f"Level {level_id} is not registered")
        return GameLevel(self, self._levels[level_id])

    @property
    def current_level(self) -> Optional[GameLevel]:
        """The active level, if any."""
        scene = self.scene_manager.current
        return scene if isinstance(scene, GameLevel) else None

    def enter_level(self, level_id: int) -> GameLevel:
        """Replace whatever is active with a fresh instance of a level."""
        level = self.create_level(level_id)
        self.scene_manager.switch(level)
        return level

    def exit_to(self, level_id: int, entered_from_left: bool = True) -> GameLevel:
        """
        Leave the current level for another one.

        The current level is captured right away, with carried boxes
        leaving alongside the player.

        Raises:
            RuntimeError: If no level is active
            KeyError: If the target level was never registered; the
                current level is left untouched
        """
        current = self.current_level
        if current is None:
            raise RuntimeError("No level is active")

        level = self.create_level(level_id)
        current.save_level_state(ending_of_level=True)
        self.store.entered_from_left = entered_from_left
        logger.info("Leaving level %s for level %s", current.level_id, level_id)
        self.scene_manager.switch(level)
        return level

    def load_checkpoint(self) -> Optional[GameLevel]:
        """
        Resume from the last checkpoint.

        Returns:
            The level being loaded, or None if there is no checkpoint
        """
        checkpoint = self.store.restore_checkpoint()
        if checkpoint is None:
            return None
        if checkpoint.level_id is None:
            raise RuntimeError("Checkpoint does not record a level")
        return self.enter_level(checkpoint.level_id)

    def update(self, dt: float) -> None:
        """Apply pending transitions and update the active level."""
        self.scene_manager.update(dt)
