"""Balls thrown by characters: flight, lifetime and hits."""
from __future__ import annotations

from typing import Any, Callable, Optional

import numpy as np

from .character import FSISCharacter
from .core import GameObject, World
from .model import Entity
from .transform import INVSQRT_3

TAG_BALL = 55

_TEXTURES = {
    Entity.INFERNAL: "Ball_Fair.png",
    Entity.DISEASED: "Ball_Warped_sterm.png",
    Entity.UNHOLY: "Ball_Crying_obsidian.png",
    Entity.PURIFIED: "Ball_Sculk.png",
    Entity.DIVINE: "Ball_Glowstone.png",
    Entity.QUINTESSENCE: "Ball_black_OA.png",
}

OnHit = Callable[[FSISCharacter, Entity], None]


def texture_for(entity: Entity) -> Optional[str]:
    """Sprite texture of a ball of ``entity``; None for a ball without one."""
    return _TEXTURES.get(entity)


class Projectile(GameObject):
    """A ball that flies in a straight line until it hits something or expires."""

    TAG = TAG_BALL

    def __init__(
        self,
        world: Optional[World] = None,
        radius: float = 40.0,
        speed: float = 600.0,
        lifetime: float = 10.0,
    ) -> None:
        self.position = np.zeros(3)
        self.velocity = np.zeros(3)
        self.speed = float(speed)
        self.lifetime = float(lifetime)
        self.age = 0.0
        self.on_hit: Optional[OnHit] = None
        self.exploded = False
        self.moving = True
        self.destroyed = False
        self._radius = float(radius)
        self.sprite_height = self._radius * INVSQRT_3
        self._entity = Entity.INFERNAL
        self.texture: Optional[str] = texture_for(Entity.INFERNAL)
        super().__init__(world)

    @property
    def radius(self) -> float:
        return self._radius

    @radius.setter
    def radius(self, value: float) -> None:
        self._radius = float(value)
        self.sprite_height = self._radius * INVSQRT_3

    @property
    def entity(self) -> Entity:
        return self._entity

    @entity.setter
    def entity(self, value: Entity) -> None:
        self._entity = value
        texture = texture_for(value)
        if texture is not None:
            self.texture = texture
        self.sprite_height = self._radius * 2

    def launch(self, direction) -> None:
        """Start flying along ``direction`` at the ball's speed."""
        self.velocity = np.asarray(direction, dtype=float) * self.speed
        self.moving = True

    def hit(self, target: Any) -> bool:
        """Explode on ``target``; returns False if the ball already exploded."""
        if self.exploded:
            return False
        self.exploded = True
        self.moving = False
        if isinstance(target, FSISCharacter) and self.on_hit is not None:
            self.on_hit(target, self._entity)
        self.destroy()
        return True

    def tick(self, delta_seconds: float) -> None:
        super().tick(delta_seconds)
        if self.moving:
            self.position = self.position + self.velocity * delta_seconds
        self.age += delta_seconds
        if self.age > self.lifetime:
            self.destroy()

    def destroy(self) -> None:
        if self.destroyed:
            return
        self.destroyed = True
        self.moving = False
        self.deactivate()
        if self.world is not None:
            self.world.destroy_actor(self)
        super().destroy()