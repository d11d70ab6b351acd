"""
Configuration for level state capture/restore and the game session.
"""

from __future__ import annotations

from puzzle.components import CollisionLayer, Vector3, UP


class LevelStateConfig:
    """Tuning for capture/restore."""

    def __init__(
        self,
        position_quantum: float = 1e-4,
        stack_probe_distance: float = 1.0,
        box_layer_mask: int = CollisionLayer.BOXES,
        up: Vector3 = UP,
        max_stack_iterations: int | None = None,
    ):
        if position_quantum <= 0:
            raise ValueError("position_quantum must be positive")
        if stack_probe_distance <= 0:
            raise ValueError("stack_probe_distance must be positive")

        # Positions that round to the same multiple of the quantum share a snapshot key
        self.position_quantum = position_quantum
        # Longest ray hop between two stacked boxes (one box height)
        self.stack_probe_distance = stack_probe_distance
        self.box_layer_mask = int(box_layer_mask)
        self.up = up
        # None bounds the walk by the number of boxes in the level
        self.max_stack_iterations = max_stack_iterations


class SessionConfig:
    """Configuration for a game session."""

    def __init__(
        self,
        save_path: str = "game/saves",
        level_state: LevelStateConfig | None = None,
    ):
        self.save_path = save_path
        self.level_state = level_state or LevelStateConfig()
