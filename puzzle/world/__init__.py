"""
World module - entity factories for level placement.
"""

from puzzle.world.entities import (
    create_box,
    create_generator,
    create_mirror,
    create_water,
    create_player,
)

__all__ = [
    "create_box",
    "create_generator",
    "create_mirror",
    "create_water",
    "create_player",
]
