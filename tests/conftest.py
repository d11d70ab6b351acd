import os
import sys
import pytest

# Ensure stage and puzzle packages can be imported
sys.path.append(os.getcwd())

@pytest.fixture
def event_bus():
    """Fresh EventBus for each test."""
    from stage.core.events import EventBus
    return EventBus()

@pytest.fixture
def world():
    """Fresh World for each test."""
    from stage.core.world import World
    return World()

@pytest.fixture
def player(world):
    """Player at the origin, facing the default direction."""
    from puzzle.world import create_player
    return create_player(world)

@pytest.fixture
def raycaster(world):
    from puzzle.systems.raycast import WorldRaycaster
    return WorldRaycaster(world)

@pytest.fixture
def store():
    from puzzle.checkpoint import InMemoryCheckpointStore
    return InMemoryCheckpointStore()

@pytest.fixture
def tower(world):
    """
    Factory: stack of unit boxes on top of each other at x/z.

    The bottom box rests on the floor (centre at y=0.5).
    """
    from puzzle.components import Vector3
    from puzzle.world import create_box

    def build(height, x=0.0, z=0.0, metal_levels=()):
        return [
            create_box(world, Vector3(x, 0.5 + level, z), is_metal=level in metal_levels)
            for level in range(height)
        ]

    return build
