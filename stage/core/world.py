"""
World container for entities.

The World holds:
- All entities of one level
- Component and tag indices for fast queries

Each level scene owns one World.

Usage:
    world = World()

    box = world.create_entity("Box")
    box.add(Transform(position=(0, 0.5, 0)))
    box.add(Box(is_metal=False))

    for entity in world.get_entities_with(Box):
        ...

    world.destroy_entity(box)
    world.flush()
"""

from __future__ import annotations

from typing import Iterator

from stage.core.entity import Entity
from stage.core.component import Component
from stage.core.events import EventBus, EngineEvent


class World:
    """
    Container for entities.

    Provides:
    - Entity management (create, destroy, query)
    - Component and tag indices for fast entity queries
    - Event bus integration

    Queries yield entities in creation order so that anything built
    from a query (snapshots, carried stacks) is reproducible.
    """

    def __init__(self, event_bus: EventBus | None = None):
        self.event_bus = event_bus or EventBus()

        # Entity storage
        self._entities: dict[int, Entity] = {}
        self._entities_to_destroy: list[int] = []

        # Component index: component_type -> set of entity IDs
        self._component_index: dict[type[Component], set[int]] = {}

        # Tag index: tag -> set of entity IDs
        self._tag_index: dict[str, set[int]] = {}

    # Entity Management

    def create_entity(self, name: str = "") -> Entity:
        """Create a new entity in this world."""
        entity = Entity(name)
        self._add_entity(entity)
        return entity

    def add_entity(self, entity: Entity) -> Entity:
        """
        Add an existing entity to this world.

        Raises:
            ValueError: If the entity is already in this world
        """
        if entity.id in self._entities:
            raise ValueError(f"Entity {entity.id} already in world")

        self._add_entity(entity)
        return entity

    def _add_entity(self, entity: Entity) -> None:
        """Internal: add entity to world."""
        entity._world = self
        self._entities[entity.id] = entity

        for component in entity.components:
            self._index_component(entity, type(component))

        for tag in entity.tags:
            self._index_tag(entity, tag)

        self.event_bus.publish(EngineEvent.ENTITY_CREATED, entity=entity)

    def destroy_entity(self, entity: Entity | int) -> None:
        """
        Mark an entity for destruction.

        The entity is removed on the next flush() (or update()).
        """
        entity_id = entity.id if isinstance(entity, Entity) else entity

        if entity_id not in self._entities:
            return

        if entity_id not in self._entities_to_destroy:
            self._entities_to_destroy.append(entity_id)

    def flush(self) -> None:
        """Remove every entity marked for destruction."""
        for entity_id in self._entities_to_destroy:
            if entity_id not in self._entities:
                continue

            entity = self._entities[entity_id]

            for component in entity.components:
                self._unindex_component(entity, type(component))

            for tag in entity.tags:
                self._unindex_tag(entity, tag)

            del self._entities[entity_id]

            entity._world = None

            self.event_bus.publish(EngineEvent.ENTITY_DESTROYED, entity=entity)

        self._entities_to_destroy.clear()

    def is_pending_destroy(self, entity: Entity) -> bool:
        """Check whether an entity is marked for destruction."""
        return entity.id in self._entities_to_destroy

    @property
    def entity_count(self) -> int:
        """Get number of entities."""
        return len(self._entities)

    # Component indexing

    def _index_component(self, entity: Entity, component_type: type[Component]) -> None:
        """Add entity to component index."""
        self._component_index.setdefault(component_type, set()).add(entity.id)

    def _unindex_component(self, entity: Entity, component_type: type[Component]) -> None:
        """Remove entity from component index."""
        if component_type in self._component_index:
            self._component_index[component_type].discard(entity.id)

    def _on_component_added(self, entity: Entity, component: Component) -> None:
        """Called when a component is added to an entity."""
        self._index_component(entity, type(component))
        self.event_bus.publish(
            EngineEvent.COMPONENT_ADDED,
            entity=entity,
            component=component
        )

    def _on_component_removed(self, entity: Entity, component: Component) -> None:
        """Called when a component is removed from an entity."""
        self._unindex_component(entity, type(component))
        self.event_bus.publish(
            EngineEvent.COMPONENT_REMOVED,
            entity=entity,
            component=component
        )

    # Tag indexing

    def _index_tag(self, entity: Entity, tag: str) -> None:
        """Add entity to tag index."""
        self._tag_index.setdefault(tag, set()).add(entity.id)

    def _unindex_tag(self, entity: Entity, tag: str) -> None:
        """Remove entity from tag index."""
        if tag in self._tag_index:
            self._tag_index[tag].discard(entity.id)

    # Queries

    def _resolve(self, entity_ids: set[int]) -> Iterator[Entity]:
        """Yield live entities for ids, in creation order."""
        for entity_id in sorted(entity_ids):
            entity = self._entities.get(entity_id)
            if entity:
                yield entity

    def get_entities_with(self, *component_types: type[Component]) -> Iterator[Entity]:
        """Get all entities that have ALL specified components."""
        if not component_types:
            return iter([])

        first_type = component_types[0]
        if first_type not in self._component_index:
            return iter([])

        candidate_ids = self._component_index[first_type].copy()

        for comp_type in component_types[1:]:
            if comp_type not in self._component_index:
                return iter([])
            candidate_ids &= self._component_index[comp_type]

        return self._resolve(candidate_ids)

    def get_entities_with_tag(self, tag: str) -> Iterator[Entity]:
        """Get all entities with a specific tag."""
        if tag not in self._tag_index:
            return iter([])
        return self._resolve(set(self._tag_index[tag]))

    def find_with_tag(self, tag: str) -> Entity | None:
        """Get the first (oldest) entity with a tag."""
        return next(self.get_entities_with_tag(tag), None)

    def count_with(self, component_type: type[Component]) -> int:
        """Count entities carrying a component type."""
        return len(self._component_index.get(component_type, ()))

    # Update

    def update(self, dt: float) -> None:
        """Per-frame housekeeping: apply pending destruction."""
        self.flush()

    def clear(self) -> None:
        """Remove all entities."""
        for entity_id in list(self._entities.keys()):
            self.destroy_entity(entity_id)
        self.flush()

        self._component_index.clear()
        self._tag_index.clear()
