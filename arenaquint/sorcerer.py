"""The player character with its special attack, special mode and beacon."""
from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional

import numpy as np

from .character import FSISCharacter
from .core import World
from .model import Entity

_BASIC_RADIUS = 25.0


@dataclass
class _BeaconState:
    actor: Any = None
    timer: float = 0.0
    duration: float = 20.0
    cooldown: float = 40.0
    since_last_use: float = 0.0


@dataclass
class _SpecialAttack:
    radius: float = 0.0
    cooldown: float = 0.0
    speed: float = 0.0
    since_last_use: float = 0.0


@dataclass
class _SpecialMode:
    cooldown: float = 0.0
    proc: float = 0.0
    duration: float = 0.0
    active: bool = False
    since_last_use: float = 0.0


class _Beacon:
    """Marker left in the world that the sorcerer can teleport back to."""

    def __init__(self, world: World) -> None:
        self.world = world
        self.position = np.zeros(3)


def _fraction(elapsed: float, cooldown: float) -> float:
    if cooldown <= 0:
        return 1.0
    return min(max(elapsed / cooldown, 0.0), 1.0)


class Sorcerer(FSISCharacter):
    """Player character."""

    def __init__(
        self,
        world: Optional[World] = None,
        projectile_factory: Optional[Callable[[World], Any]] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._beacon = _BeaconState()
        self._special_attack = _SpecialAttack()
        self._special_mode = _SpecialMode()
        self._zone = Entity.INFERNAL
        self._rng = rng if rng is not None else random.Random()
        super().__init__(world, projectile_factory)

    # --- state -----------------------------------------------------------

    @property
    def beacon(self) -> Any:
        return self._beacon.actor

    @property
    def zone(self) -> Entity:
        return self._zone

    @property
    def special_mode_active(self) -> bool:
        return self._special_mode.active

    @property
    def special_attack_cooldown(self) -> float:
        """Readiness of the special attack from 0 to 1."""
        return _fraction(self._special_attack.since_last_use, self._special_attack.cooldown)

    @property
    def special_mode_cooldown(self) -> float:
        """Readiness of the special mode from 0 to 1."""
        return _fraction(self._special_mode.since_last_use, self._special_mode.cooldown)

    @property
    def special_ability_cooldown(self) -> float:
        """Readiness of the beacon from 0 to 1."""
        return _fraction(self._beacon.since_last_use, self._beacon.cooldown)

    def _game_mode(self) -> Any:
        return self.world.game_mode if self.world is not None else None

    # --- abilities -------------------------------------------------------

    def set_entity_zone(self, zone: Entity) -> None:
        self._zone = zone

    def change_entity(self) -> None:
        """Take on the entity of the zone the sorcerer stands in."""
        self.entity = self._zone

    def attack(self) -> None:
        """Throw a ball that only hurts characters of its own entity."""
        if not self.can_attack:
            return
        ball = self._spawn_projectile(_BASIC_RADIUS)
        self._init_projectile_position(ball)
        ball.entity = self.entity

        def on_hit(target: FSISCharacter, entity: Entity) -> None:
            if target.entity == entity:
                target.take_damage(self.damage, self)

        ball.on_hit = on_hit
        ball.launch(self._launch_direction())
        self.time_since_last_attack = 0.0

    def special_attack(self) -> None:
        """Throw a quintessence ball that kills whatever it hits."""
        special = self._special_attack
        if not (self.can_attack and special.since_last_use >= special.cooldown):
            return
        ball = self._spawn_projectile(special.radius)
        ball.speed = special.speed
        self._init_projectile_position(ball)
        ball.entity = Entity.QUINTESSENCE

        def on_hit(target: FSISCharacter, entity: Entity) -> None:
            target.kill(self)
            mode = self._game_mode()
            if mode is not None and hasattr(mode, "notify_special_attack_kill"):
                mode.notify_special_attack_kill()

        ball.on_hit = on_hit
        ball.launch(self._launch_direction())
        self.time_since_last_attack = 0.0
        special.since_last_use = 0.0

    def special_mode(self) -> None:
        """Enter the mode in which incoming damage may be ignored."""
        mode = self._special_mode
        if mode.since_last_use >= mode.cooldown:
            mode.active = True
            mode.since_last_use = 0.0

    def special_ability(self) -> None:
        """Teleport to the beacon, or place one if it is ready."""
        beacon = self._beacon
        if beacon.actor is not None:
            self.position = np.array(beacon.actor.position, dtype=float)
        elif beacon.since_last_use >= beacon.cooldown:
            if self.world is None:
                raise RuntimeError("sorcerer is not in a world")
            beacon.actor = self.world.spawn_actor(_Beacon, self.position)

    # --- overrides -------------------------------------------------------

    def take_damage(self, damage: float, instigator: Optional[FSISCharacter]) -> None:
        mode = self._special_mode
        if not mode.active or self._rng.random() < 1.0 - mode.proc:
            super().take_damage(damage, instigator)

    def tick(self, delta_seconds: float) -> None:
        super().tick(delta_seconds)
        beacon = self._beacon
        if beacon.actor is not None:
            beacon.timer += delta_seconds
            if beacon.timer > beacon.duration:
                if self.world is not None:
                    self.world.destroy_actor(beacon.actor)
                beacon.actor = None
                beacon.timer = 0.0
        beacon.since_last_use += delta_seconds
        self._special_attack.since_last_use += delta_seconds
        self._special_mode.since_last_use += delta_seconds
        self._special_mode.active = (
            self._special_mode.since_last_use < self._special_mode.duration
        )
        mode = self._game_mode()
        if mode is not None and hasattr(mode, "add_steps"):
            mode.add_steps(float(np.linalg.norm(self.last_movement)))

    def load_info(self, info: Mapping[str, Any]) -> None:
        super().load_info(info)
        attack = info["specialAttack"]
        self._special_attack.cooldown = float(attack["cooldown"])
        self._special_attack.radius = float(attack["radius"])
        self._special_attack.speed = float(attack["speed"])
        self._special_attack.since_last_use = self._special_attack.cooldown

        mode = info["specialMode"]
        self._special_mode.cooldown = float(mode["cooldown"])
        self._special_mode.proc = float(mode["proc"])
        self._special_mode.duration = float(mode["duration"])

        ability = info["specialAbility"]
        self._beacon.duration = float(ability["duration"])
        self._beacon.cooldown = float(ability["cooldown"])
        self._beacon.since_last_use = self._beacon.cooldown

    def on_kill(self, victim: FSISCharacter) -> None:
        super().on_kill(victim)
        mode = self._game_mode()
        if mode is not None and hasattr(mode, "notify_mob_killed_by_player"):
            mode.notify_mob_killed_by_player(victim.entity)

    def on_death(self, killer: Optional[FSISCharacter]) -> None:
        super().on_death(killer)
        mode = self._game_mode()
        if mode is not None and hasattr(mode, "notify_player_death"):
            mode.notify_player_death()