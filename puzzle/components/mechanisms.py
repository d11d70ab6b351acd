"""
Mechanism components - boxes, generators, mirrors, rising water, player.
"""

from __future__ import annotations

from enum import Enum, auto

from pydantic import Field

from stage.core.component import Component


class BoxRole(Enum):
    """Whether a box rests in the level or travels with the player."""
    RESTING = auto()
    CARRIED = auto()


class IndicatorColor(Enum):
    """Generator indicator lamp colour."""
    RED = auto()
    GREEN = auto()


class MirrorMode(Enum):
    """How a mirror treats an incoming beam."""
    REFLECT = auto()
    PASS = auto()
    BLOCK = auto()


class MirrorDirection(Enum):
    """Side a mirror sends a reflected beam to."""
    LEFT = auto()
    RIGHT = auto()
    UP = auto()
    DOWN = auto()


class Box(Component):
    """
    A movable, stackable box.

    Attributes:
        is_metal: Metal boxes are a separate prefab from wooden ones
        role: Transient classification, see puzzle.systems.mechanisms
    """
    is_metal: bool = False
    role: BoxRole = BoxRole.RESTING

    @property
    def is_resting(self) -> bool:
        return self.role == BoxRole.RESTING

    @property
    def is_carried(self) -> bool:
        return self.role == BoxRole.CARRIED


class Generator(Component):
    """
    Activatable generator.

    The indicator lamp is the source of truth: a green lamp means the
    generator is working.
    """
    indicator: IndicatorColor = IndicatorColor.RED

    @property
    def activated(self) -> bool:
        return self.indicator == IndicatorColor.GREEN


class Mirror(Component):
    """
    Rotatable mirror. Its rotation lives on the entity Transform.

    Attributes:
        mode: Beam handling mode
        direction: Outgoing beam side
    """
    mode: MirrorMode = MirrorMode.REFLECT
    direction: MirrorDirection = MirrorDirection.RIGHT


class WaterRise(Component):
    """
    Rising water made of stacked layers.

    Attributes:
        capacity: Number of layers the basin holds
        layers: Fill level of each layer, 0.0 (empty) to 1.0 (full)
        rise_speed: Fill rate per second while animating
        animating: Whether layers are currently rising towards targets
        targets: Per-layer fill targets while animating
    """
    capacity: int = Field(default=1, ge=1)
    layers: list[float] = Field(default_factory=list)
    rise_speed: float = 0.5
    animating: bool = False
    targets: list[float] = Field(default_factory=list)

    def model_post_init(self, __context) -> None:
        if not self.layers:
            self.layers = [0.0] * self.capacity


class Player(Component):
    """
    Player state touched by level saves.

    Attributes:
        active: Whether the player accepts input
        moving_box: Whether the player is mid-way through pushing a box
    """
    active: bool = True
    moving_box: bool = False
