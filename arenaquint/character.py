"""Characters of the arena: health, targeting, attacks and loading from JSON.

A projectile, as made by a character's ``projectile_factory(world)``, is any
object with writable ``position``, ``radius``, ``speed``, ``entity`` and
``on_hit`` (called as ``on_hit(target, entity)``) and a ``launch(direction)``
method.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Iterable, Mapping, Optional, Union

import numpy as np

from .core import GameObject, World
from .model import Entity, parse_entity
from .transform import INVSQRT_2, X_AXIS, normalize


class FSISCharacter(GameObject):
    """A character with health, damage, attack range and a current target."""

    def __init__(
        self,
        world: Optional[World] = None,
        projectile_factory: Optional[Callable[[World], Any]] = None,
    ) -> None:
        self.position = np.zeros(3)
        self.forward = np.array(X_AXIS)
        self.last_movement = np.zeros(3)
        self.controller: Any = None
        self.projectile_factory = projectile_factory
        self.walk_speed = 0.0
        self.run_speed = 0.0
        self.orient_rotation_to_movement = True
        self.movement_active = True
        self.sprite: Optional[str] = None
        self.proximity_size = np.zeros(3)
        self.height = 0.0
        self.time_since_last_attack = 0.0
        self.attack_speed = 0.5
        self._max_health = 100.0
        self._health = 100.0
        self.damage = 20.0
        self.attack_range = 100.0
        self.in_target = False
        self.auto_reset_target = True
        self.entity = Entity.NONE
        self._target: Optional[FSISCharacter] = None
        self._nearest: list[Any] = []
        self._nearest_count = 0
        self._cursor: Any = None
        super().__init__(world)

    # --- state -----------------------------------------------------------

    @property
    def target(self) -> Optional["FSISCharacter"]:
        return self._target

    @property
    def max_hp(self) -> float:
        return self._max_health

    @max_hp.setter
    def max_hp(self, value: float) -> None:
        self._max_health = self._health = float(value)

    @property
    def hp(self) -> float:
        return self._health

    @property
    def is_alive(self) -> bool:
        return self._health > 0

    @property
    def can_attack(self) -> bool:
        return self.time_since_last_attack >= self.attack_speed

    @property
    def is_possessed(self) -> bool:
        return self.controller is not None

    def restore_hp(self) -> float:
        """Heal to full health and return how much was restored."""
        delta = self._max_health - self._health
        self._health = self._max_health
        return delta

    # --- loading ---------------------------------------------------------

    def load(self, path: Union[str, Path]) -> None:
        """Load a creature description from a JSON file."""
        with open(path, encoding="utf-8") as fh:
            info = json.load(fh)
        if not isinstance(info, dict):
            raise ValueError(f"{path}: creature description must be an object")
        self.load_info(info)

    def load_info(self, info: Mapping[str, Any]) -> None:
        """Apply a decoded creature description; missing keys raise KeyError."""
        self.max_hp = float(info["hp"])
        self.attack_speed = float(info["attackSpeed"])
        self.sprite = str(info["sprite"])
        self._set_size(float(info["width"]), float(info["height"]))
        self.damage = float(info["damage"])
        self.attack_range = float(info["attackRange"])
        self.walk_speed = float(info["defaultSpeed"])
        self.run_speed = float(info["runSpeed"])
        if "entity" in info:
            try:
                self.entity = parse_entity(info["entity"])
            except ValueError:
                pass

    def _set_size(self, width: float, height: float) -> None:
        self.proximity_size = np.array([width * INVSQRT_2, width * INVSQRT_2, height])
        self.height = height

    # --- targeting -------------------------------------------------------

    def set_target(self, target: Optional["FSISCharacter"]) -> None:
        """Aim at ``target``, or drop the current target when it is None."""
        if target is not None:
            if self._target is not None:
                self._target.on_end_targeted(self)
            self._target = target
            self._cursor = target if any(c is target for c in self._nearest) else None
            self.orient_rotation_to_movement = False
            target.in_target = True
            target.on_begin_targeted(self)
        else:
            if self._target is not None:
                self._target.in_target = False
                self._target.on_end_targeted(self)
            self._target = None
            self._cursor = None
            self.orient_rotation_to_movement = True

    def reset_target(self) -> None:
        self.set_target(None)

    def next_target(self, candidates: Iterable[Any]) -> Optional["FSISCharacter"]:
        """Move to the next living character in range, nearest first.

        Cycles through the candidates on repeated calls; after the last one
        the target is dropped and None is returned.
        """
        candidates = list(candidates)
        if len(candidates) != self._nearest_count:
            self._nearest = candidates
            self._nearest_count = len(candidates)
            self._cursor = None
        self._nearest.sort(
            key=lambda c: float(np.sum((self.position - np.asarray(c.position)) ** 2))
        )
        start = 0
        if self._cursor is not None:
            index = next(
                (i for i, c in enumerate(self._nearest) if c is self._cursor), None
            )
            start = 0 if index is None else index + 1
        for candidate in self._nearest[start:]:
            if (
                isinstance(candidate, FSISCharacter)
                and candidate.is_alive
                and self._distance_to(candidate) <= self.attack_range
            ):
                self.set_target(candidate)
                return candidate
        self.set_target(None)
        return None

    def _distance_to(self, other: Any) -> float:
        return float(np.linalg.norm(np.asarray(other.position) - self.position))

    # --- combat ----------------------------------------------------------

    def take_damage(self, damage: float, instigator: Optional["FSISCharacter"]) -> None:
        if not self.is_alive:
            return
        self._health = min(max(self._health - damage, 0.0), self._max_health)
        if self._health == 0.0:
            self.on_death(instigator)

    def kill(self, killer: Optional["FSISCharacter"]) -> None:
        self.take_damage(self._health, killer)

    def attack(self) -> None:
        self.time_since_last_attack = 0.0

    def tick(self, delta_seconds: float) -> None:
        super().tick(delta_seconds)
        if (
            self.auto_reset_target
            and self._target is not None
            and self._distance_to(self._target) > self.attack_range
        ):
            self.set_target(None)
        if self._target is not None:
            direction = np.asarray(self._target.position) - self.position
            orientation = normalize([direction[0], direction[1], 0.0])
            if np.any(orientation):
                self.forward = orientation
        self.time_since_last_attack += delta_seconds

    # --- hooks -----------------------------------------------------------

    def on_kill(self, victim: "FSISCharacter") -> None:
        if self._target is victim and self.auto_reset_target:
            self.reset_target()

    def on_death(self, killer: Optional["FSISCharacter"]) -> None:
        if self._target is not None:
            self.reset_target()
        if self.controller is not None:
            controller, self.controller = self.controller, None
            controller.unpossess()
        if killer is not None:
            killer.on_kill(self)
        self.movement_active = False
        self.deactivate()

    def on_begin_targeted(self, hunter: "FSISCharacter") -> None:
        """Called when ``hunter`` starts aiming at this character."""

    def on_end_targeted(self, hunter: "FSISCharacter") -> None:
        """Called when ``hunter`` stops aiming at this character."""

    # --- projectiles -----------------------------------------------------

    def _spawn_projectile(self, radius: float) -> Any:
        if self.world is None:
            raise RuntimeError("character is not in a world")
        if self.projectile_factory is None:
            raise RuntimeError("character has no projectile factory")
        ball = self.world.spawn_actor(self.projectile_factory)
        ball.radius = radius
        return ball

    def _init_projectile_position(self, ball: Any) -> None:
        offset = ball.radius * 2 + self.proximity_size[0] * 0.5 + 10.0
        ball.position = self.position + self.forward * offset

    def _launch_direction(self) -> np.ndarray:
        if self._target is not None:
            return normalize(np.asarray(self._target.position) - self.position)
        return np.array(self.forward)