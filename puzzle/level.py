"""
Game level - the scene that owns one level's world and its saved state.

On entry the level restores whatever the checkpoint store remembers
about it, places the player, unloads boxes the player brought along
and makes sure a first checkpoint exists. On exit or on a checkpoint
it captures its state back into the store.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Optional

from stage.core import Entity, Scene, World
from puzzle.components import Transform, Vector3, WaterRise
from puzzle.events import LevelEvent
from puzzle.levelstate import (
    LevelSnapshot,
    capture_level_state,
    restore_carried_boxes,
    restore_level_state,
)
from puzzle.systems.mechanisms import advance_water
from puzzle.systems.raycast import SpatialQuery, WorldRaycaster
from puzzle.world.entities import create_player

if TYPE_CHECKING:
    from puzzle.session import GameSession


@dataclass
class LevelDefinition:
    """
    Design-time description of a level.

    Attributes:
        level_id: Level identifier used as the checkpoint key
        build: Populates a fresh world with the level's placement
        player_spawn: Where the player appears when entering from the left
        player_exit_spawn: Where the player appears when coming back from the right
    """
    level_id: int
    build: Optional[Callable[[World], None]] = None
    player_spawn: Vector3 = Vector3()
    player_exit_spawn: Vector3 = Vector3()


class GameLevel(Scene):
    """
    Level controller.

    Sequences capture/restore at three moments: level entry, explicit
    checkpoint, and leaving for another level.
    """

    def __init__(
        self,
        session: GameSession,
        definition: LevelDefinition,
        spatial_query: Optional[SpatialQuery] = None,
    ):
        super().__init__(session)
        self.definition = definition
        self.logger = logging.getLogger(__name__)

        self.world = World(session.event_bus)
        if definition.build:
            definition.build(self.world)

        self._player = self.world.find_with_tag("player")
        if self._player is None:
            self._player = create_player(self.world, definition.player_spawn)

        self.spatial_query = spatial_query or WorldRaycaster(self.world)
        self._entered = False

    @property
    def session(self) -> GameSession:
        return self.owner

    @property
    def level_id(self) -> int:
        return self.definition.level_id

    @property
    def player(self) -> Entity:
        return self._player

    # Lifecycle

    def on_enter(self) -> None:
        """Restore saved state, place the player and unload carried boxes."""
        super().on_enter()
        if self._entered:
            return
        self._entered = True

        store = self.session.store
        events = self.session.event_bus

        snapshot = store.load_level_state(self.level_id)
        if snapshot is not None:
            restore_level_state(self.world, snapshot, events)
            events.publish(LevelEvent.LEVEL_STATE_RESTORED, level_id=self.level_id)

        self._place_player()

        carried = restore_carried_boxes(self.world, self._player, store.carried_boxes)
        if carried:
            events.publish(
                LevelEvent.CARRIED_BOXES_RESTORED,
                level_id=self.level_id,
                boxes=carried,
            )

        # Every level must be resumable, even before the first explicit save
        if not store.initial_checkpoint_saved:
            store.initial_checkpoint_saved = True
            self.save_checkpoint()

        events.publish(LevelEvent.FADE_IN_REQUESTED, level_id=self.level_id)
        events.publish(LevelEvent.LEVEL_ENTERED, level_id=self.level_id)
        self.logger.info("Entered level %s", self.level_id)

    def _place_player(self) -> None:
        store = self.session.store
        events = self.session.event_bus
        transform = self._player.get(Transform)

        if store.loaded_by_checkpoint:
            store.loaded_by_checkpoint = False
            position = store.checkpoint_player_position
            if position is not None:
                transform.move_to(position)
            events.publish(
                LevelEvent.PLAYER_POSITION_RESTORE_REQUESTED,
                level_id=self.level_id,
                position=position,
            )
            return

        if store.entered_from_left:
            spawn = self.definition.player_spawn
        else:
            spawn = self.definition.player_exit_spawn
        transform.move_to(spawn)
        events.publish(
            LevelEvent.PLAYER_SPAWN_REQUESTED,
            level_id=self.level_id,
            position=spawn,
            entered_from_left=store.entered_from_left,
        )

    # Saving

    def save_level_state(self, ending_of_level: bool) -> LevelSnapshot:
        """
        Capture this level into the checkpoint store.

        Args:
            ending_of_level: True when the player is leaving the level;
                carried boxes then go with the player instead of staying
        """
        events = self.session.event_bus
        if ending_of_level:
            events.publish(LevelEvent.FADE_OUT_REQUESTED, level_id=self.level_id)

        snapshot = capture_level_state(
            self.world,
            self.level_id,
            self._player,
            self.spatial_query,
            self.session.store.carried_boxes,
            is_level_exit=ending_of_level,
            config=self.session.config.level_state,
        )
        self.session.store.save_level_state(self.level_id, snapshot)

        events.publish(
            LevelEvent.LEVEL_STATE_SAVED,
            level_id=self.level_id,
            ending_of_level=ending_of_level,
        )
        return snapshot

    def save_checkpoint(self) -> LevelSnapshot:
        """Capture this level and commit a checkpoint at the player's position."""
        snapshot = self.save_level_state(ending_of_level=False)
        self.session.store.create_checkpoint(
            level_id=self.level_id,
            player_position=self._player.get(Transform).position,
        )
        return snapshot

    # Frame

    def update(self, dt: float) -> None:
        for water in self.world.get_entities_with(WaterRise):
            advance_water(water, dt)
