"""Game objects, game rules and the world that ticks them."""
from __future__ import annotations

import enum
from typing import Any, Callable, Optional, TypeVar

import numpy as np

from .transform import ZERO_VECTOR

T = TypeVar("T")


class TickGroup(enum.IntEnum):
    """Phases of a world tick an object can belong to."""

    PREPHYSIC = 0
    PHYSIC = 1
    POSTPHYSIC = 2


class GameObject:
    """Base for everything that lives in a world and ticks every frame."""

    def __init__(self, world: Optional["World"] = None) -> None:
        self._tick_group = TickGroup.POSTPHYSIC
        self._world: Optional[World] = None
        if world is not None:
            self.init_world(world)

    @property
    def world(self) -> Optional["World"]:
        return self._world

    @property
    def tick_group(self) -> TickGroup:
        return self._tick_group

    def tick(self, delta_seconds: float) -> None:
        """Called every frame with the seconds since the last one."""

    def deactivate(self) -> None:
        """Stop receiving ticks."""
        if self._world is not None:
            self._world.unregistry(self)

    def activate(self) -> None:
        """Start receiving ticks again."""
        if self._world is not None:
            self._world.registry(self)

    def init_world(self, world: "World") -> None:
        """Attach to ``world`` unless already attached to one."""
        if self._world is None:
            self._world = world
            world.registry(self)

    def set_tick_group(self, tick_group: TickGroup) -> None:
        if self._world is not None:
            self._world.unregistry(self)
            self._tick_group = TickGroup(tick_group)
            self._world.registry(self)
        else:
            self._tick_group = TickGroup(tick_group)

    def destroy(self) -> None:
        """Ask for this object to be removed."""
        self.on_destroyed()

    def on_destroyed(self) -> None:
        """Hook called on destroy."""


class GameMode:
    """Game rules; the hooks do nothing unless overridden."""

    def __init__(self, world: "World") -> None:
        self._world = world

    @property
    def world(self) -> "World":
        return self._world

    def spawn_player(self) -> None:
        pass

    def on_start_level(self) -> None:
        pass

    def on_end_level(self) -> None:
        pass

    def tick(self, delta_seconds: float) -> None:
        pass


class World:
    """Container for actors, controllers and tick groups of one session.

    ``collision_resolver`` is any object with ``update_aabb()`` and
    ``tick(delta_seconds)``; it is run between the tick phases.
    """

    def __init__(self, collision_resolver: Any = None) -> None:
        self._groups: dict[TickGroup, dict[GameObject, None]] = {
            group: {} for group in TickGroup
        }
        self._mode: Optional[GameMode] = None
        self._collision = collision_resolver
        self._controllers: list[Any] = []
        self._finished = False
        self._gravity = -500.0
        self._actors_to_destroy: dict[Any, None] = {}
        self._components_to_destroy: dict[Any, None] = {}
        self._map: Any = None
        self._actors: list[Any] = []
        self.paused = False

    @property
    def collision_resolver(self) -> Any:
        return self._collision

    @property
    def is_finished(self) -> bool:
        return self._finished

    @property
    def game_mode(self) -> Optional[GameMode]:
        return self._mode

    @property
    def map(self) -> Any:
        return self._map

    @property
    def actors(self) -> tuple:
        return tuple(self._actors)

    @property
    def controllers(self) -> tuple:
        return tuple(self._controllers)

    @property
    def gravity(self) -> float:
        """Gravitational acceleration of the world."""
        return self._gravity

    def start(self) -> None:
        if self._mode is None:
            raise RuntimeError("world has no game mode")
        self._mode.spawn_player()
        self._mode.on_start_level()

    def finish(self) -> None:
        self._finished = True
        if self._mode is not None:
            self._mode.on_end_level()

    def registry(self, obj: GameObject) -> None:
        """Add ``obj`` to its tick group."""
        self._groups[obj.tick_group][obj] = None

    def unregistry(self, obj: GameObject) -> None:
        """Remove ``obj`` from its tick group; no effect if absent."""
        self._groups[obj.tick_group].pop(obj, None)

    def is_registered(self, obj: GameObject) -> bool:
        return obj in self._groups[obj.tick_group]

    def destroy_actor(self, actor: Any) -> None:
        self._actors_to_destroy[actor] = None

    def destroy_component(self, component: Any) -> None:
        self._components_to_destroy[component] = None

    def set_game_mode(self, factory: Callable[["World"], T]) -> T:
        mode = factory(self)
        self._mode = mode
        return mode

    def spawn_actor(self, factory: Callable[["World"], T], position=ZERO_VECTOR) -> T:
        actor = factory(self)
        self._actors.append(actor)
        actor.position = np.array(position, dtype=float)
        return actor

    def spawn_map(self, factory: Callable[["World"], T]) -> T:
        game_map = self.spawn_actor(factory)
        self._map = game_map
        return game_map

    def spawn_controller(self, factory: Callable[[], T]) -> T:
        controller = factory()
        self._controllers.append(controller)
        return controller

    def remove_dangling_controllers(self) -> None:
        """Drop controllers that possess nothing."""
        self._controllers = [c for c in self._controllers if c.marionette]

    def tick(self, delta_seconds: float) -> None:
        if self.paused:
            return
        for controller in list(self._controllers):
            controller.tick(delta_seconds)
        self._tick_group(TickGroup.PREPHYSIC, delta_seconds)
        if self._collision is not None:
            self._collision.update_aabb()
        self._tick_group(TickGroup.PHYSIC, delta_seconds)
        if self._collision is not None:
            self._collision.tick(delta_seconds)
        self._tick_group(TickGroup.POSTPHYSIC, delta_seconds)
        if self._mode is not None:
            self._mode.tick(delta_seconds)
        self._exec_destroy()

    def _tick_group(self, group: TickGroup, delta_seconds: float) -> None:
        for obj in list(self._groups[group]):
            obj.tick(delta_seconds)

    def _exec_destroy(self) -> None:
        components = sorted(self._components_to_destroy, key=lambda c: c.depth)
        self._components_to_destroy.clear()
        for component in components:
            component.force_destroy()
        doomed = list(self._actors_to_destroy)
        self._actors_to_destroy.clear()
        if not doomed:
            return
        doomed_ids = {id(actor) for actor in doomed}
        self._actors = [a for a in self._actors if id(a) not in doomed_ids]
        for actor in doomed:
            if isinstance(actor, GameObject):
                self.unregistry(actor)