"""
Level snapshot model.

A LevelSnapshot is the position-indexed record of one level's mutable
state: where resting boxes are, which generators run, how mirrors are
turned and how high the water stands.

Generators and mirrors are looked up by position. Positions are
quantized to integer keys (PositionKey) so that a value read back from
a save file, or recomputed by the same placement code, lands on the
same key as the value it was captured from.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

from puzzle.components import MirrorDirection, MirrorMode, Quaternion, Vector3


PositionKey = tuple[int, int, int]

DEFAULT_POSITION_QUANTUM = 1e-4


def position_key(position: Vector3, quantum: float = DEFAULT_POSITION_QUANTUM) -> PositionKey:
    """Quantize a world position to a snapshot key."""
    return (
        int(round(position.x / quantum)),
        int(round(position.y / quantum)),
        int(round(position.z / quantum)),
    )


@dataclass(frozen=True)
class SavedBox:
    """A resting box: material and world position."""
    is_metal: bool
    position: Vector3


@dataclass(frozen=True)
class SavedMirror:
    """Mirror orientation and beam settings."""
    rotation: Quaternion
    mode: MirrorMode
    direction: MirrorDirection


@dataclass(frozen=True)
class CarriedBox:
    """A box travelling with the player, offset in the player's frame."""
    is_metal: bool
    local_offset: Vector3


@dataclass(frozen=True)
class LevelSnapshot:
    """
    Immutable state of one level at capture time.

    Attributes:
        level_id: Level this snapshot belongs to
        resting_boxes: Boxes left in the level, in capture order
        generators: Activation state keyed by position
        mirrors: Mirror state keyed by position
        water_layers: Opaque water blob, or None if the level has no water
        position_quantum: Quantum the keys were built with
    """
    level_id: int
    resting_boxes: tuple[SavedBox, ...] = ()
    generators: Mapping[PositionKey, bool] = field(default_factory=dict)
    mirrors: Mapping[PositionKey, SavedMirror] = field(default_factory=dict)
    water_layers: str | None = None
    position_quantum: float = DEFAULT_POSITION_QUANTUM

    def __post_init__(self) -> None:
        object.__setattr__(self, "resting_boxes", tuple(self.resting_boxes))
        object.__setattr__(self, "generators", MappingProxyType(dict(self.generators)))
        object.__setattr__(self, "mirrors", MappingProxyType(dict(self.mirrors)))

    def key_for(self, position: Vector3) -> PositionKey:
        """Key a scene position the same way this snapshot was keyed."""
        return position_key(position, self.position_quantum)

    def generator_state(self, position: Vector3) -> bool | None:
        """Saved activation at a position, or None if nothing was saved there."""
        return self.generators.get(self.key_for(position))

    def mirror_state(self, position: Vector3) -> SavedMirror | None:
        """Saved mirror at a position, or None if nothing was saved there."""
        return self.mirrors.get(self.key_for(position))

    # Serialization

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dictionary."""
        return {
            "level_id": self.level_id,
            "position_quantum": self.position_quantum,
            "resting_boxes": [
                {"is_metal": box.is_metal, "position": list(box.position)}
                for box in self.resting_boxes
            ],
            "generators": [
                {"position": list(key), "activated": activated}
                for key, activated in sorted(self.generators.items())
            ],
            "mirrors": [
                {
                    "position": list(key),
                    "rotation": list(mirror.rotation),
                    "mode": mirror.mode.name,
                    "direction": mirror.direction.name,
                }
                for key, mirror in sorted(self.mirrors.items())
            ],
            "water_layers": self.water_layers,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LevelSnapshot:
        """
        Deserialize from a dictionary produced by to_dict().

        Raises:
            KeyError: If a required field or enum name is missing
        """
        return cls(
            level_id=int(data["level_id"]),
            position_quantum=float(data.get("position_quantum", DEFAULT_POSITION_QUANTUM)),
            resting_boxes=tuple(
                SavedBox(is_metal=bool(b["is_metal"]), position=Vector3(*map(float, b["position"])))
                for b in data.get("resting_boxes", [])
            ),
            generators={
                _key(g["position"]): bool(g["activated"])
                for g in data.get("generators", [])
            },
            mirrors={
                _key(m["position"]): SavedMirror(
                    rotation=Quaternion(*map(float, m["rotation"])),
                    mode=MirrorMode[m["mode"]],
                    direction=MirrorDirection[m["direction"]],
                )
                for m in data.get("mirrors", [])
            },
            water_layers=data.get("water_layers"),
        )


def _key(values: list[int]) -> PositionKey:
    x, y, z = values
    return (int(x), int(y), int(z))
