import numpy as np
import pytest

from arenaquint.core import GameMode, GameObject, TickGroup, World
from arenaquint.transform import ZERO_VECTOR, vector


class Recorder(GameObject):
    def __init__(self, world, name, log, group=None):
        super().__init__(world)
        self.name = name
        self.log = log
        if group is not None:
            self.set_tick_group(group)

    def tick(self, delta_seconds):
        self.log.append((self.name, delta_seconds))


class FakeResolver:
    def __init__(self, log):
        self.log = log

    def update_aabb(self):
        self.log.append("aabb")

    def tick(self, delta_seconds):
        self.log.append("collision")


class RecordingMode(GameMode):
    def __init__(self, world):
        super().__init__(world)
        self.events = []

    def spawn_player(self):
        self.events.append("spawn")

    def on_start_level(self):
        self.events.append("start")

    def on_end_level(self):
        self.events.append("end")

    def tick(self, delta_seconds):
        self.events.append("tick")


class FakeActor(GameObject):
    position = None


class FakeController:
    def __init__(self, marionette=None):
        self.marionette = marionette
        self.ticks = 0

    def tick(self, delta_seconds):
        self.ticks += 1


class FakeComponent:
    def __init__(self, depth, log):
        self.depth = depth
        self.log = log

    def force_destroy(self):
        self.log.append(self.depth)


def test_default_tick_group_and_registration():
    world = World()
    obj = GameObject(world)
    assert obj.tick_group is TickGroup.POSTPHYSIC
    assert world.is_registered(obj)


def test_tick_order_follows_groups():
    log = []
    world = World(FakeResolver(log))
    Recorder(world, "post", log)
    Recorder(world, "pre", log, TickGroup.PREPHYSIC)
    Recorder(world, "phys", log, TickGroup.PHYSIC)
    world.tick(0.5)
    assert log == [("pre", 0.5), "aabb", ("phys", 0.5), "collision", ("post", 0.5)]


def test_deactivate_and_activate():
    log = []
    world = World()
    obj = Recorder(world, "a", log)
    obj.deactivate()
    assert not world.is_registered(obj)
    world.tick(0.1)
    assert log == []
    obj.activate()
    assert world.is_registered(obj)
    world.tick(0.2)
    assert log == [("a", 0.2)]


def test_set_tick_group_moves_object():
    world = World()
    obj = GameObject(world)
    obj.set_tick_group(TickGroup.PHYSIC)
    assert obj.tick_group is TickGroup.PHYSIC
    assert world.is_registered(obj)


def test_set_tick_group_without_world():
    obj = GameObject()
    obj.set_tick_group(TickGroup.PREPHYSIC)
    assert obj.tick_group is TickGroup.PREPHYSIC
    assert obj.world is None


def test_init_world_only_once():
    first, second = World(), World()
    obj = GameObject()
    obj.init_world(first)
    obj.init_world(second)
    assert obj.world is first
    assert not second.is_registered(obj)


def test_destroy_calls_hook():
    calls = []

    class Obj(GameObject):
        def on_destroyed(self):
            calls.append(self)

    world = World()
    obj = Obj(world)
    obj.destroy()
    assert calls == [obj]
    assert world.is_registered(obj)


def test_paused_world_does_not_tick():
    log = []
    world = World()
    Recorder(world, "a", log)
    actor = world.spawn_actor(FakeActor)
    world.destroy_actor(actor)
    world.paused = True
    world.tick(1.0)
    assert log == []
    assert world.actors == (actor,)


def test_start_and_finish_call_mode_hooks():
    world = World()
    mode = world.set_game_mode(RecordingMode)
    assert world.game_mode is mode and mode.world is world
    world.start()
    assert not world.is_finished
    world.finish()
    assert world.is_finished
    assert mode.events == ["spawn", "start", "end"]


def test_start_without_mode_raises():
    with pytest.raises(RuntimeError):
        World().start()


def test_mode_ticks_after_objects():
    world = World()
    mode = world.set_game_mode(RecordingMode)
    world.tick(0.1)
    assert mode.events == ["tick"]


def test_spawn_actor_sets_position():
    world = World()
    actor = world.spawn_actor(FakeActor, vector(1, 2, 3))
    np.testing.assert_allclose(actor.position, [1, 2, 3])
    assert world.actors == (actor,)
    assert actor.world is world


def test_spawn_actor_default_position_is_copy():
    world = World()
    actor = world.spawn_actor(FakeActor)
    np.testing.assert_array_equal(actor.position, ZERO_VECTOR)
    actor.position[0] = 9.0
    assert ZERO_VECTOR[0] == 0.0


def test_spawn_map_sets_map():
    world = World()
    game_map = world.spawn_map(FakeActor)
    assert world.map is game_map
    assert game_map in world.actors


def test_controllers_tick_and_dangling_removed():
    world = World()
    owned = world.spawn_controller(lambda: FakeController(marionette=object()))
    dangling = world.spawn_controller(FakeController)
    world.tick(0.1)
    assert owned.ticks == 1 and dangling.ticks == 1
    world.remove_dangling_controllers()
    assert world.controllers == (owned,)


def test_destroyed_actor_is_removed_after_tick():
    log = []
    world = World()

    class Ticking(FakeActor):
        def tick(self, delta_seconds):
            log.append(self)

    actor = world.spawn_actor(Ticking)
    world.destroy_actor(actor)
    world.tick(0.1)
    assert actor not in world.actors
    world.tick(0.1)
    assert log == [actor]


def test_components_destroyed_by_depth():
    log = []
    world = World()
    world.destroy_component(FakeComponent(2, log))
    world.destroy_component(FakeComponent(1, log))
    world.tick(0.1)
    world.tick(0.1)
    assert log == [1, 2]


def test_gravity():
    assert World().gravity == -500.0