"""
Stage engine

A small entity/component substrate for puzzle levels: entities,
pydantic components, a tag-indexed World, a typed event bus and a
scene manager.

Quick Start:
    from stage.core import Scene, SceneManager, World

    class MyScene(Scene):
        def update(self, dt: float) -> None:
            pass

    manager = SceneManager()
    manager.switch(MyScene(owner=None))
    manager.update(1 / 60)
"""

__version__ = "0.1.0"

from stage.core import (
    Scene,
    SceneManager,
    Entity,
    Component,
    World,
    EventBus,
    Event,
    EngineEvent,
)

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
