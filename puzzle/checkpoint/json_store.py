"""
JSON checkpoint store - checkpoints persisted as JSON files.

Provides:
- One checkpoint file per slot
- Checksum validation (SHA-256) for save integrity
- JSON schema validation of every stored level snapshot
"""

from __future__ import annotations

import base64
import hashlib
import json
import logging
from pathlib import Path
from typing import Any, Optional

import jsonschema

from stage.core import EventBus
from puzzle.checkpoint.store import Checkpoint, CheckpointStore
from puzzle.components import MirrorDirection, MirrorMode, Vector3
from puzzle.errors import CheckpointCorrupted
from puzzle.events import CheckpointEvent
from puzzle.levelstate.snapshot import LevelSnapshot


logger = logging.getLogger(__name__)


_VECTOR3 = {"type": "array", "items": {"type": "number"}, "minItems": 3, "maxItems": 3}
_KEY = {"type": "array", "items": {"type": "integer"}, "minItems": 3, "maxItems": 3}

SNAPSHOT_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["level_id", "resting_boxes", "generators", "mirrors"],
    "properties": {
        "level_id": {"type": "integer"},
        "position_quantum": {"type": "number", "exclusiveMinimum": 0},
        "resting_boxes": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["is_metal", "position"],
                "properties": {
                    "is_metal": {"type": "boolean"},
                    "position": _VECTOR3,
                },
            },
        },
        "generators": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["position", "activated"],
                "properties": {
                    "position": _KEY,
                    "activated": {"type": "boolean"},
                },
            },
        },
        "mirrors": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["position", "rotation", "mode", "direction"],
                "properties": {
                    "position": _KEY,
                    "rotation": {
                        "type": "array", "items": {"type": "number"},
                        "minItems": 4, "maxItems": 4,
                    },
                    "mode": {"enum": [m.name for m in MirrorMode]},
                    "direction": {"enum": [d.name for d in MirrorDirection]},
                },
            },
        },
        "water_layers": {"type": ["string", "null"]},
    },
}

CHECKPOINT_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["version", "level_states"],
    "properties": {
        "version": {"type": "string"},
        "timestamp": {"type": "string"},
        "level_id": {"type": ["integer", "null"]},
        "player_position": {"oneOf": [_VECTOR3, {"type": "null"}]},
        "level_states": {"type": "array", "items": SNAPSHOT_SCHEMA},
        "checksum": {"type": "string"},
    },
}


class JsonCheckpointStore(CheckpointStore):
    """
    Checkpoint store writing one JSON file per slot.

    Usage:
        store = JsonCheckpointStore("game/saves", event_bus=event_bus)
        store.save_level_state(3, snapshot)
        store.create_checkpoint(level_id=3, player_position=position)

        # Next launch
        store.restore_checkpoint()
    """

    VERSION = "1.0"

    def __init__(
        self,
        save_path: str | Path = "game/saves",
        slot: int = 0,
        event_bus: Optional[EventBus] = None,
    ):
        super().__init__(event_bus)
        self.save_path = Path(save_path)
        self.save_path.mkdir(parents=True, exist_ok=True)
        self.slot = slot

    @property
    def checkpoint_path(self) -> Path:
        """File holding this slot's checkpoint."""
        return self.save_path / f"checkpoint_{self.slot:02d}.json"

    @property
    def has_checkpoint(self) -> bool:
        return self.checkpoint_path.exists()

    def delete_checkpoint(self) -> None:
        """Remove this slot's checkpoint file if present."""
        if self.checkpoint_path.exists():
            self.checkpoint_path.unlink()

    def _write_checkpoint(self, checkpoint: Checkpoint) -> None:
        data = {
            "version": self.VERSION,
            "timestamp": checkpoint.timestamp,
            "level_id": checkpoint.level_id,
            "player_position": (
                list(checkpoint.player_position)
                if checkpoint.player_position is not None else None
            ),
            "level_states": [
                snapshot.to_dict()
                for _, snapshot in sorted(checkpoint.level_states.items())
            ],
        }
        data["checksum"] = self._calculate_checksum(data)

        with open(self.checkpoint_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2)

    def _read_checkpoint(self) -> Optional[Checkpoint]:
        if not self.checkpoint_path.exists():
            return None

        try:
            with open(self.checkpoint_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            self._fail(f"Checkpoint {self.checkpoint_path} is not valid JSON: {e}")
            raise CheckpointCorrupted(str(e)) from e

        checksum = data.get("checksum")
        if checksum and not self._verify_checksum(data, checksum):
            self._fail(f"Checkpoint {self.checkpoint_path} failed checksum validation")
            raise CheckpointCorrupted("Checksum validation failed")

        try:
            jsonschema.validate(data, CHECKPOINT_SCHEMA)
        except jsonschema.ValidationError as e:
            self._fail(f"Checkpoint {self.checkpoint_path} does not match schema: {e.message}")
            raise CheckpointCorrupted(e.message) from e

        snapshots = [LevelSnapshot.from_dict(item) for item in data["level_states"]]
        position = data.get("player_position")

        return Checkpoint(
            level_states={snapshot.level_id: snapshot for snapshot in snapshots},
            level_id=data.get("level_id"),
            player_position=Vector3(*map(float, position)) if position is not None else None,
            timestamp=data.get("timestamp", ""),
        )

    def _fail(self, message: str) -> None:
        logger.error(message)
        if self.event_bus:
            self.event_bus.publish(CheckpointEvent.CHECKPOINT_FAILED, slot=self.slot, error=message)

    # Checksum validation

    def _calculate_checksum(self, data: dict) -> str:
        """Calculate checksum for checkpoint data."""
        json_str = json.dumps(data, sort_keys=True, separators=(',', ':'))
        hash_bytes = hashlib.sha256(json_str.encode('utf-8')).digest()
        return base64.b64encode(hash_bytes).decode('ascii')

    def _verify_checksum(self, data: dict, expected_checksum: str) -> bool:
        """Verify checkpoint data checksum."""
        data_copy = data.copy()
        data_copy.pop('checksum', None)
        return self._calculate_checksum(data_copy) == expected_checksum
