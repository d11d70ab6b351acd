"""
Scene management system.

Scenes represent distinct game states (one per level).
The SceneManager holds the single active scene and replaces it on
switch(); the replaced scene is exited and destroyed.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from stage.core.events import EngineEvent

if TYPE_CHECKING:
    from stage.core.events import EventBus
    from stage.core.world import World


class Scene(ABC):
    """
    Abstract base class for game scenes.

    Lifecycle:
        1. __init__: Called when scene is created
        2. on_enter: Called when scene becomes active
        3. update: Called each frame while active
        4. on_exit: Called when scene is replaced
        5. on_destroy: Called right after on_exit; clears the scene's World
    """

    def __init__(self, owner: Any):
        self.owner = owner
        self.world: World | None = None
        self._is_active = False

    @property
    def is_active(self) -> bool:
        """Whether this scene is the current scene."""
        return self._is_active

    def on_enter(self) -> None:
        """Called when scene becomes active."""
        self._is_active = True

    def on_exit(self) -> None:
        """Called when scene is deactivated."""
        self._is_active = False

    def on_destroy(self) -> None:
        """Called when scene is permanently removed."""
        if self.world:
            self.world.clear()

    @abstractmethod
    def update(self, dt: float) -> None:
        """
        Update scene logic.

        Args:
            dt: Delta time in seconds
        """
        pass


class SceneManager:
    """
    Holds the current scene.

    Switches are queued and applied at the start of the next update (or
    flush), so a scene can request a transition from inside its own
    update.
    """

    def __init__(self, event_bus: EventBus | None = None):
        self.event_bus = event_bus
        self._current: Scene | None = None
        self._pending: list[Scene] = []

    @property
    def current(self) -> Scene | None:
        """Get the current scene."""
        return self._current

    @property
    def is_empty(self) -> bool:
        """Check if no scene is active."""
        return self._current is None

    @property
    def has_pending(self) -> bool:
        """Whether switches are waiting to be applied."""
        return bool(self._pending)

    def switch(self, scene: Scene) -> None:
        """Replace the current scene with a new one."""
        self._pending.append(scene)

    def flush(self) -> None:
        """Apply queued switches now."""
        while self._pending:
            self._do_switch(self._pending.pop(0))

    def update(self, dt: float) -> None:
        """Apply pending switches, then update the current scene."""
        self.flush()

        scene = self._current
        if scene is None:
            return
        scene.update(dt)
        if scene.world:
            scene.world.update(dt)

    def _do_switch(self, scene: Scene) -> None:
        old_scene = self._current
        if old_scene is not None:
            old_scene.on_exit()
            old_scene.on_destroy()

        self._current = scene
        scene.on_enter()

        if self.event_bus:
            self.event_bus.publish(EngineEvent.SCENE_SWITCHED, scene=scene)
