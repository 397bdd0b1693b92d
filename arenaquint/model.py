"""Plain game data: entity kinds, input actions, match statistics, achievements."""
from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Mapping


class Entity(enum.Enum):
    """Kinds of monsters and balls."""

    INFERNAL = "infernal"
    DISEASED = "diseased"
    DIVINE = "divine"
    UNHOLY = "unholy"
    PURIFIED = "purified"
    QUINTESSENCE = "quintessence"
    NONE = "none"


_PARSEABLE = {
    entity.value: entity
    for entity in (
        Entity.INFERNAL,
        Entity.DISEASED,
        Entity.DIVINE,
        Entity.UNHOLY,
        Entity.PURIFIED,
        Entity.NONE,
    )
}


def parse_entity(name: str) -> Entity:
    """Entity named in a creature description; quintessence is not allowed there."""
    try:
        return _PARSEABLE[name]
    except KeyError:
        raise ValueError(f"unknown entity {name!r}") from None


class Action(enum.IntEnum):
    """Actions that controllers bind to input."""

    ATTACK = 0
    MOVE_FORWARD = 1
    MOVE_RIGHT = 2
    SP_ATTACK = 3
    SP_MODE = 4
    SP_ABILITY = 5
    TOGGLE_RUN = 6
    NEXT_TARGET = 7
    CHANGE_ENTITY = 8


@dataclass
class MatchStats:
    """Statistics collected over one match."""

    score: int = 0
    kills: int = 0
    steps: int = 0
    sculcks: int = 0
    waves: int = 0
    duration: float = 0.0
    special_attack_kills: int = 0

    def to_payload(self) -> dict[str, int]:
        """JSON body sent to the achievements service."""
        return {
            "score": self.score,
            "kills": self.kills,
            "steps": self.steps,
            "sculcks": self.sculcks,
            "waves": self.waves,
            "duration": int(self.duration),
            "specialAttackKills": self.special_attack_kills,
        }


@dataclass(frozen=True)
class Achievement:
    """An achievement awarded by the server."""

    title: str
    description: str
    reward: int

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "Achievement":
        """Build an achievement from a decoded JSON object."""
        try:
            title = data["title"]
            description = data["description"]
            reward = data["reward"]
        except KeyError as exc:
            raise ValueError(f"achievement is missing {exc.args[0]!r}") from None
        if not isinstance(title, str) or not isinstance(description, str):
            raise ValueError("achievement title and description must be strings")
        if isinstance(reward, bool) or not isinstance(reward, int):
            raise ValueError("achievement reward must be an integer")
        return cls(title, description, reward)