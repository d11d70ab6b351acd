"""
Puzzle systems - logic for components.

Components are data-only; the functions and classes here mutate
them and answer spatial queries.
"""

from puzzle.systems.raycast import RaycastHit, SpatialQuery, WorldRaycaster
from puzzle.systems.mechanisms import (
    carry_box,
    rest_box,
    is_resting_box,
    is_activated,
    activate_generator,
    read_mirror_state,
    apply_mirror_state,
    serialize_water_layers,
    parse_water_layers,
    recover_water_layers_fast,
    recover_water_layers,
    advance_water,
    find_water,
)

__all__ = [
    "RaycastHit",
    "SpatialQuery",
    "WorldRaycaster",
    "carry_box",
    "rest_box",
    "is_resting_box",
    "is_activated",
    "activate_generator",
    "read_mirror_state",
    "apply_mirror_state",
    "serialize_water_layers",
    "parse_water_layers",
    "recover_water_layers_fast",
    "recover_water_layers",
    "advance_water",
    "find_water",
]
