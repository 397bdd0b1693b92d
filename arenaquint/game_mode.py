"""Arena rules: waves of monsters, zones, scoring and match statistics.

Controllers are supplied by factories. A player controller needs
``bind_key_action(key, action)``, ``bind_key_axis(key, scale, action)`` and
``possess(character)``; an AI controller needs writable ``attack_range`` and
``target``, ``bind_attack_action(action)`` and ``possess(character)``. Both
need ``unpossess()``, ``marionette`` and ``tick(delta_seconds)``, and
``possess`` is expected to set the character's ``controller``.
"""
from __future__ import annotations

import dataclasses
import math
import random
from pathlib import Path
from typing import Any, Callable, NamedTuple, Optional, Sequence, Union

import numpy as np

from .camera import FollowCamera
from .character import FSISCharacter
from .core import GameMode, World
from .model import Action, Entity, MatchStats
from .monster import Monster
from .projectile import Projectile
from .sorcerer import Sorcerer

LAVA_TAG = 1
ZONE_TAGS = {
    2: Entity.INFERNAL,
    3: Entity.DISEASED,
    4: Entity.PURIFIED,
    5: Entity.UNHOLY,
    6: Entity.DIVINE,
}

KEY_ACTIONS = {
    "J": Action.NEXT_TARGET,
    "L": Action.SP_ABILITY,
    "E": Action.SP_ATTACK,
    "K": Action.SP_MODE,
    "I": Action.ATTACK,
    "LShift": Action.TOGGLE_RUN,
    "Space": Action.CHANGE_ENTITY,
}
KEY_AXES = (
    ("W", 1.0, Action.MOVE_FORWARD),
    ("S", -1.0, Action.MOVE_FORWARD),
    ("D", 1.0, Action.MOVE_RIGHT),
    ("A", -1.0, Action.MOVE_RIGHT),
)

PLAYER_CREATURE = "player.json"
CAMERA_SCALE = 5000.0
WAVE_PAUSE = 8.0
DEATH_PAUSE = 3.0
TOWER_RANGE_FACTOR = 5

_DAMAGE_NORM = 1.0 / math.sqrt((1.8 + math.cos(1.8)) * 4.4 + 10)
_HP_NORM = 1.0 / math.sqrt((1.8 + math.cos(1.8)) * 40 + 10)


class SpawnKind(NamedTuple):
    """Creature description spawned at a point, and whether it is a tower."""

    creature: str
    tower: bool


_SPAWN_RANGES = (
    (25, 36, SpawnKind("fair.json", False)),
    (1, 64, SpawnKind("sterm.json", False)),
    (65, 84, SpawnKind("sculk.json", False)),
    (85, 104, SpawnKind("obsidian.json", False)),
    (105, 124, SpawnKind("glowstone.json", False)),
    (125, 126, SpawnKind("glowstone.json", True)),
    (127, 128, SpawnKind("obsidian.json", True)),
)


def mob_number(wave: int) -> int:
    """How many monsters a wave (counted from 0) tries to spawn."""
    return math.floor(math.sqrt((wave + math.sin(wave)) * 27 + 10))


def mob_damage_factor(wave: int) -> float:
    """Damage multiplier of a wave's monsters; 1 on the first wave."""
    return math.sqrt((wave + 1.8 + math.cos(wave + 1.8)) * 4.4 + 10) * _DAMAGE_NORM


def mob_hp_factor(wave: int) -> float:
    """Health multiplier of a wave's monsters; 1 on the first wave."""
    return math.sqrt((wave + 1.8 + math.cos(wave + 1.8)) * 40 + 10) * _HP_NORM


def creature_for_spawn_point(n: int) -> Optional[SpawnKind]:
    """What spawns at point ``n``; None where the map assigns nothing."""
    for low, high, kind in _SPAWN_RANGES:
        if low <= n <= high:
            return kind
    return None


def _default_player(world: World) -> Sorcerer:
    return Sorcerer(world, projectile_factory=Projectile)


def _default_monster(world: World) -> Monster:
    return Monster(world, projectile_factory=Projectile)


class FSISGameMode(GameMode):
    """Waves of monsters against one sorcerer."""

    def __init__(
        self,
        world: World,
        spawn_points: Sequence[Any],
        *,
        creature_dir: Union[str, Path] = "resources/creatures",
        player_factory: Callable[[World], Sorcerer] = _default_player,
        monster_factory: Callable[[World], Monster] = _default_monster,
        player_controller_factory: Optional[Callable[[], Any]] = None,
        ai_controller_factory: Optional[Callable[[], Any]] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        super().__init__(world)
        self._spawn_points = [np.array(p, dtype=float) for p in spawn_points]
        self._creature_dir = Path(creature_dir)
        self._player_factory = player_factory
        self._monster_factory = monster_factory
        self._player_controller_factory = player_controller_factory
        self._ai_controller_factory = ai_controller_factory
        self._rng = rng if rng is not None else random.Random()
        self._candidates: list[int] = []
        self._wave = 0
        self._mobs: list[Monster] = []
        self._player: Optional[Sorcerer] = None
        self._live_mobs = 0
        self._since_player_death = 0.0
        self._since_wave_end = 0.0
        self._stats = MatchStats()
        self.camera: Optional[FollowCamera] = None

    # --- state -----------------------------------------------------------

    @property
    def player(self) -> Optional[Sorcerer]:
        return self._player

    @property
    def mobs(self) -> tuple:
        return tuple(self._mobs)

    @property
    def live_mobs(self) -> int:
        return self._live_mobs

    @property
    def current_wave(self) -> int:
        """Wave number as shown to the player, starting at 1."""
        return self._wave + 1

    @property
    def score(self) -> int:
        return self._stats.score

    @property
    def match_stats(self) -> MatchStats:
        return dataclasses.replace(self._stats)

    # --- notifications ---------------------------------------------------

    def notify_mob_killed_by_player(self, entity: Entity = Entity.NONE) -> None:
        self._stats.score += 100 * self._wave + 10
        self._stats.kills += 1
        if entity is Entity.PURIFIED:
            self._stats.sculcks += 1

    def notify_special_attack_kill(self) -> None:
        self._stats.special_attack_kills += 1

    def notify_mob_killed_by_mob(self) -> None:
        """Kills among monsters do not count for anything."""

    def notify_player_death(self) -> None:
        """Free every monster from its controller."""
        for mob in self._mobs:
            self._release(mob)

    def add_steps(self, distance: float) -> None:
        """Count walked distance; steps are whole numbers, so fractions are lost."""
        self._stats.steps = int(self._stats.steps + distance * 0.02)

    # --- level -----------------------------------------------------------

    def spawn_player(self) -> None:
        if not self._spawn_points:
            raise ValueError("the map has no spawn points")
        self._install_zone_handlers()
        self._candidates = list(range(1, len(self._spawn_points)))
        player = self.world.spawn_actor(self._player_factory, self._spawn_points[0])
        player.load(self._creature_dir / PLAYER_CREATURE)
        self._player = player
        self.camera = FollowCamera(target=player, scale=CAMERA_SCALE)
        if self._player_controller_factory is not None:
            controller = self.world.spawn_controller(self._player_controller_factory)
            for key, action in KEY_ACTIONS.items():
                controller.bind_key_action(key, action)
            for key, scale, action in KEY_AXES:
                controller.bind_key_axis(key, scale, action)
            controller.possess(player)

    def on_start_level(self) -> None:
        self.spawn_mobs()

    def on_end_level(self) -> None:
        self.camera = None

    def spawn_mobs(self) -> None:
        """Spawn this wave's monsters on distinct random spawn points."""
        count = min(mob_number(self._wave), len(self._candidates))
        chosen = sorted(self._rng.sample(self._candidates, count))
        for n in chosen:
            self._spawn_mob(n)
        self._live_mobs = len(chosen)

    def next_wave(self) -> None:
        self._clear_level()
        self._wave += 1
        self._stats.waves += 1
        self.spawn_mobs()

    def tick(self, delta_seconds: float) -> None:
        player = self._player
        if player is None:
            return
        if player.is_alive:
            self._stats.duration += delta_seconds
        self._live_mobs = sum(1 for mob in self._mobs if mob.is_alive)
        if self._live_mobs == 0 and player.is_alive:
            self._since_wave_end += delta_seconds
            if self._since_wave_end > WAVE_PAUSE:
                player.restore_hp()
                self.next_wave()
                self._since_wave_end = 0.0
        elif not player.is_alive:
            self._since_player_death += delta_seconds
            if self._since_player_death > DEATH_PAUSE:
                self.world.finish()
                self._since_player_death = 0.0

    # --- helpers ---------------------------------------------------------

    def _install_zone_handlers(self) -> None:
        resolver = self.world.collision_resolver
        if resolver is None:
            return

        def lava(component: Any) -> None:
            owner = getattr(component, "owner", None)
            if isinstance(owner, FSISCharacter):
                owner.kill(owner)

        resolver.set_handler_by_tag(LAVA_TAG, lava)
        for tag, zone in ZONE_TAGS.items():
            resolver.set_handler_by_tag(tag, self._zone_handler(zone))

    @staticmethod
    def _zone_handler(zone: Entity) -> Callable[[Any], None]:
        def handler(component: Any) -> None:
            owner = getattr(component, "owner", None)
            if isinstance(owner, Sorcerer):
                owner.set_entity_zone(zone)

        return handler

    def _spawn_mob(self, n: int) -> Monster:
        mob = self.world.spawn_actor(self._monster_factory, self._spawn_points[n])
        kind = creature_for_spawn_point(n)
        if kind is not None:
            mob.load(self._creature_dir / kind.creature)
            if kind.tower:
                mob.movement_active = False
                mob.attack_range *= TOWER_RANGE_FACTOR
        mob.damage *= mob_damage_factor(self._wave)
        mob.max_hp = mob.max_hp * mob_hp_factor(self._wave)
        mob.set_target(self._player)
        if self._ai_controller_factory is not None:
            ai = self.world.spawn_controller(self._ai_controller_factory)
            ai.attack_range = mob.attack_range
            ai.target = self._player
            ai.bind_attack_action(Action.ATTACK)
            ai.possess(mob)
        self._mobs.append(mob)
        return mob

    @staticmethod
    def _release(mob: FSISCharacter) -> None:
        if mob.controller is not None:
            controller, mob.controller = mob.controller, None
            controller.unpossess()

    def _clear_level(self) -> None:
        if self._player is not None:
            self._player.reset_target()
        for mob in self._mobs:
            self._release(mob)
            mob.deactivate()
            self.world.destroy_actor(mob)
        self._mobs.clear()
        self.world.remove_dangling_controllers()
        self._live_mobs = 0