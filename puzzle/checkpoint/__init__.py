"""
Checkpoint module - level state persistence across levels and launches.

Provides:
- Working level states per level
- Checkpoints (in memory or JSON file, checksum + schema validated)
- Carried boxes hand-off between levels
- Level transition flags
"""

from puzzle.checkpoint.buffer import CarriedBoxesBuffer
from puzzle.checkpoint.store import Checkpoint, CheckpointStore, InMemoryCheckpointStore
from puzzle.checkpoint.json_store import JsonCheckpointStore

__all__ = [
    "CarriedBoxesBuffer",
    "Checkpoint",
    "CheckpointStore",
    "InMemoryCheckpointStore",
    "JsonCheckpointStore",
]
