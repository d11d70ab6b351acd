import pytest
from pydantic import ValidationError
from stage.core.entity import Entity
from stage.core.component import Component
from stage.core.events import EngineEvent

class Position(Component):
    x: float = 0.0
    y: float = 0.0

class Velocity(Component):
    vx: float = 0.0
    vy: float = 0.0

def test_entity_creation():
    e = Entity()
    assert e.id > 0
    assert e.active is True

def test_entity_ids_increase():
    a = Entity()
    b = Entity()
    assert b.id > a.id

def test_add_get_component():
    e = Entity()
    p = Position(x=10, y=20)
    e.add(p)

    retrieved = e.get(Position)
    assert retrieved is p
    assert retrieved.x == 10
    assert retrieved.y == 20

def test_duplicate_component_rejected():
    e = Entity()
    e.add(Position())
    with pytest.raises(ValueError):
        e.add(Position())

def test_remove_component():
    e = Entity()
    e.add(Position())
    assert e.has(Position)

    e.remove(Position)
    assert not e.has(Position)
    assert e.try_get(Position) is None

def test_component_validation():
    with pytest.raises(ValidationError):
        Position(x={"invalid": "type"})

def test_component_validates_assignment():
    p = Position()
    with pytest.raises(ValidationError):
        p.x = {"invalid": "type"}

def test_world_entity_management(world):
    e = Entity()
    e.add(Position())
    world.add_entity(e)

    assert world.entity_count == 1

    results = list(world.get_entities_with(Position))
    assert len(results) == 1
    assert results[0] is e

    results_empty = list(world.get_entities_with(Velocity))
    assert len(results_empty) == 0

def test_world_rejects_entity_twice(world):
    e = Entity()
    world.add_entity(e)
    with pytest.raises(ValueError):
        world.add_entity(e)

def test_queries_follow_creation_order(world):
    created = [world.create_entity() for _ in range(5)]
    for e in reversed(created):
        e.add(Position())

    assert list(world.get_entities_with(Position)) == created

def test_tags_added_after_attach_are_indexed(world):
    e = world.create_entity("Crate")
    e.add_tag("box")
    assert world.find_with_tag("box") is e

    e.remove_tag("box")
    assert world.find_with_tag("box") is None

def test_destroy_is_deferred_until_flush(world):
    e = world.create_entity()
    e.add(Position())
    world.destroy_entity(e)

    assert world.is_pending_destroy(e)
    assert world.entity_count == 1

    world.flush()

    assert world.entity_count == 0
    assert list(world.get_entities_with(Position)) == []
    assert e.world is None

def test_world_cleanup(world):
    e = Entity()
    world.add_entity(e)
    world.destroy_entity(e)

    world.update(0.1)  # Should cleanup destroyed entities

    assert world.entity_count == 0

def test_world_publishes_entity_events(world):
    seen = []
    world.event_bus.subscribe(EngineEvent.ENTITY_CREATED, lambda ev: seen.append("created"), weak=False)
    world.event_bus.subscribe(EngineEvent.ENTITY_DESTROYED, lambda ev: seen.append("destroyed"), weak=False)

    e = world.create_entity()
    world.destroy_entity(e)
    world.flush()

    assert seen == ["created", "destroyed"]

def test_count_with(world):
    for _ in range(3):
        world.create_entity().add(Position())
    assert world.count_with(Position) == 3
    assert world.count_with(Velocity) == 0
