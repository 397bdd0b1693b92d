# arenaquint

The rules and simulation core of an isometric wave-survival arena game. A
sorcerer fights waves of elemental monsters. The modules are:

- `arenaquint.transform`: vector and 4×4 matrix helpers that use the
  row-vector convention (`vector`, `normalize`, `rotation_axis`,
  `orthographic`, `get_translation`, `get_scale`, `get_rotation`) and
  constants such as `X_AXIS`, `TO_PLAYER` and `INVSQRT_2`.
- `arenaquint.model`: the `Entity` elements, the `Action` input bindings, the
  `MatchStats` and `Achievement` records, and `parse_entity`.
- `arenaquint.core`: the `World`. It ticks `GameObject`s in three `TickGroup`
  phases, owns actors and controllers, runs an optional collision resolver
  between the phases and calls a `GameMode`.
- `arenaquint.collision`: `CollisionResolver`, which finds overlaps with GJK
  (`gjk`), computes penetration depth with EPA (`penetration_depth`) and
  separates components that both block. `OverlapRule` sets how a component
  reacts to a group.
- `arenaquint.camera`: `Camera` and `FollowCamera`. Both build their
  projection matrix from `isometric_transform()`.
- `arenaquint.character`: `FSISCharacter`. It covers health, damage,
  targeting (`set_target`, `next_target`) and loading a creature description
  from JSON (`load`, `load_info`).
- `arenaquint.sorcerer`: `Sorcerer`, the player character, with a special
  attack, a special mode that can ignore damage, and a teleport beacon.
- `arenaquint.monster`: `Monster`. It keeps its target and shoots at it.
- `arenaquint.projectile`: `Projectile`, a ball that flies until it hits
  something or expires, and `texture_for`.
- `arenaquint.game_mode`: `FSISGameMode`. It handles waves, zones, lava,
  scoring and match statistics, and provides the wave scaling curves
  (`mob_number`, `mob_damage_factor`, `mob_hp_factor`) and
  `creature_for_spawn_point`.
- `arenaquint.network`: `NetworkClient`, which logs in and posts `MatchStats`
  to an achievement service. Any failure raises `NetworkError`.

## Installation

```
pip install .
```

## Examples

Wave scaling and match data:

```python
from arenaquint.game_mode import mob_number, mob_hp_factor, creature_for_spawn_point
from arenaquint.model import MatchStats, parse_entity

print(mob_number(0))                  # mobs in the first wave
print(mob_hp_factor(0))               # 1.0 for the first wave
print(creature_for_spawn_point(30))   # SpawnKind(creature='fair.json', tower=False)
print(parse_entity("divine"))         # Entity.DIVINE

stats = MatchStats(score=310, kills=3, waves=1, duration=42.7)
print(stats.to_payload())             # duration is sent as a whole number
```

Ticking objects in a world:

```python
from arenaquint.core import GameObject, World

class Clock(GameObject):
    def __init__(self, world):
        super().__init__(world)
        self.total = 0.0

    def tick(self, delta_seconds):
        self.total += delta_seconds

world = World()
clock = Clock(world)
world.tick(0.5)
print(clock.total)   # 0.5
```

Talking to the achievement service:

```python
from arenaquint.network import NetworkClient, NetworkError

client = NetworkClient.from_config("services.json")  # JSON with "authorization" and "achievements" URLs
password = "password"
try:
    client.auth("player", password)
    for achievement in client.send_match_stats(stats):
        print(achievement.title, achievement.reward)
except NetworkError as error:
    print("server unavailable:", error)
```

## Creature descriptions

`FSISCharacter.load` reads a JSON object with the keys `hp`, `attackSpeed`,
`sprite`, `width`, `height`, `damage`, `attackRange`, `defaultSpeed`,
`runSpeed` and, optionally, `entity`. A `Sorcerer` also needs
`specialAttack` (`cooldown`, `radius`, `speed`), `specialMode` (`cooldown`,
`proc`, `duration`) and `specialAbility` (`duration`, `cooldown`).
`FSISGameMode` loads `player.json`, `fair.json`, `sterm.json`, `sculk.json`,
`obsidian.json` and `glowstone.json` from its `creature_dir`.

## What the package does not do

This is a simulation and rules library only. It has no window, renderer,
sound playback, keyboard input, menus or command to start a game. Sprites and
sounds are kept only as names on the objects. Maps are not read from files:
`FSISGameMode` takes its spawn points as a list. The caller supplies player
and AI controllers through factories. Without them, nothing drives the
characters.

## Running the tests

```
pip install ".[test]"
pytest
```