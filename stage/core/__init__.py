"""
Core engine module.

Exports:
- Scene, SceneManager: Scene management
- Entity: Entity container
- Component: Component base
- World: Entity container with component and tag indices
- EventBus, Event, EngineEvent: Event system
"""

from stage.core.scene import Scene, SceneManager
from stage.core.entity import Entity
from stage.core.component import Component
from stage.core.world import World
from stage.core.events import EventBus, Event, EngineEvent

__all__ = [
    # Scene
    "Scene",
    "SceneManager",
    # ECS
    "Entity",
    "Component",
    "World",
    # Events
    "EventBus",
    "Event",
    "EngineEvent",
]
