"""
Puzzle framework module.

Provides game-specific layers built on top of the stage engine:
- Components (boxes, generators, mirrors, water, player)
- Systems (ray casts, mechanism logic)
- World (entity factories)
- Level state (snapshot, stack detection, capture, restore)
- Checkpoint (stores, carried boxes hand-off)
- Level and session orchestration
"""
