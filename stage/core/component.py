"""
Component base class for data-only components.

Components are pure data containers. Logic that mutates them
lives in system modules, which keeps capture/restore code in one
place and makes component state trivial to snapshot.

Usage:
    class Box(Component):
        is_metal: bool = False
        role: BoxRole = BoxRole.RESTING
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class Component(BaseModel):
    """
    Base class for all components.

    Components are data-only containers using Pydantic for:
    - Automatic validation (also on assignment)
    - Serialization via model_dump()
    - Default values
    """

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        validate_assignment=True,
        extra='forbid',
    )

    # Owning entity id (set by the entity when attached)
    _entity_id: int | None = None

