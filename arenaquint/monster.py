"""Monsters of the arena: they shoot at their target whatever its entity."""
from __future__ import annotations

from typing import Any, Callable, Optional

from .character import FSISCharacter
from .core import World
from .model import Entity

MARKER_TEXTURE = "target3.png"
HURT_SOUND = "tank_death_5.wav"
DEATH_SOUND = "tank_death_2.wav"
_BALL_RADIUS = 25.0


class Monster(FSISCharacter):
    """A monster that keeps its target and marks itself when aimed at."""

    def __init__(
        self,
        world: Optional[World] = None,
        projectile_factory: Optional[Callable[[World], Any]] = None,
    ) -> None:
        super().__init__(world, projectile_factory)
        self.auto_reset_target = False
        self.marker_texture = MARKER_TEXTURE
        self.marker_visible = False
        self.played_sounds: list[str] = []

    def attack(self) -> None:
        """Throw a ball that hurts only the monster's current target."""
        if not self.can_attack:
            return
        ball = self._spawn_projectile(_BALL_RADIUS)
        self._init_projectile_position(ball)
        ball.entity = self.entity

        def on_hit(target: FSISCharacter, entity: Entity) -> None:
            if target is self.target:
                target.take_damage(self.damage, self)

        ball.on_hit = on_hit
        ball.launch(self._launch_direction())
        self.time_since_last_attack = 0.0

    def take_damage(self, damage: float, instigator: Optional[FSISCharacter]) -> None:
        super().take_damage(damage, instigator)
        self.played_sounds.append(HURT_SOUND)

    def on_begin_targeted(self, hunter: FSISCharacter) -> None:
        self.marker_visible = True

    def on_end_targeted(self, hunter: FSISCharacter) -> None:
        self.marker_visible = False

    def on_death(self, killer: Optional[FSISCharacter]) -> None:
        super().on_death(killer)
        self.played_sounds.append(DEATH_SOUND)