import json
import random

import numpy as np
import pytest

from arenaquint.collision import CollisionResolver
from arenaquint.core import World
from arenaquint.game_mode import (
    KEY_ACTIONS,
    FSISGameMode,
    SpawnKind,
    creature_for_spawn_point,
    mob_damage_factor,
    mob_hp_factor,
    mob_number,
)
from arenaquint.model import Action, Entity
from arenaquint.monster import Monster
from arenaquint.sorcerer import Sorcerer

POINTS = [(0, 0, 0), (100, 0, 0), (0, 100, 0), (-100, 0, 0), (0, -100, 0)]

BASE = {
    "attackSpeed": 0.5,
    "sprite": "creature.json",
    "width": 40,
    "height": 80,
    "defaultSpeed": 100,
    "runSpeed": 200,
}
PLAYER = dict(
    BASE,
    hp=200,
    damage=30,
    attackRange=500,
    specialAttack={"cooldown": 10, "radius": 50, "speed": 900},
    specialMode={"cooldown": 30, "proc": 0.5, "duration": 5},
    specialAbility={"duration": 20, "cooldown": 40},
)
STERM = dict(BASE, hp=50, damage=5, attackRange=300, entity="diseased")


class FakeComponent:
    def __init__(self, tag):
        self.tag = tag
        self.owner = None
        self.on_overlap = None


class FakeAI:
    def __init__(self):
        self.marionette = None
        self.target = None
        self.attack_range = None
        self.actions = []

    def bind_attack_action(self, action):
        self.actions.append(action)

    def possess(self, character):
        self.marionette = character
        character.controller = self

    def unpossess(self):
        self.marionette = None

    def tick(self, delta_seconds):
        pass


class FakePlayerController(FakeAI):
    def __init__(self):
        super().__init__()
        self.keys = {}
        self.axes = []

    def bind_key_action(self, key, action):
        self.keys[key] = action

    def bind_key_axis(self, key, scale, action):
        self.axes.append((key, scale, action))


def make_arena(tmp_path, points=POINTS, **kwargs):
    (tmp_path / "player.json").write_text(json.dumps(PLAYER))
    (tmp_path / "sterm.json").write_text(json.dumps(STERM))
    resolver = CollisionResolver()
    components = {tag: FakeComponent(tag) for tag in (1, 3)}
    for component in components.values():
        resolver.register(component)
    world = World(resolver)
    mode = world.set_game_mode(
        lambda w: FSISGameMode(
            w, points, creature_dir=tmp_path, rng=random.Random(0), **kwargs
        )
    )
    return world, mode, components


def test_first_wave_factors_are_one():
    assert mob_damage_factor(0) == pytest.approx(1.0)
    assert mob_hp_factor(0) == pytest.approx(1.0)


def test_first_wave_mob_number():
    assert mob_number(0) == 3


def test_mob_number_never_decreases():
    counts = [mob_number(w) for w in range(50)]
    assert counts == sorted(counts)


@pytest.mark.parametrize(
    "n, kind",
    [
        (1, SpawnKind("sterm.json", False)),
        (25, SpawnKind("fair.json", False)),
        (36, SpawnKind("fair.json", False)),
        (64, SpawnKind("sterm.json", False)),
        (65, SpawnKind("sculk.json", False)),
        (85, SpawnKind("obsidian.json", False)),
        (105, SpawnKind("glowstone.json", False)),
        (125, SpawnKind("glowstone.json", True)),
        (128, SpawnKind("obsidian.json", True)),
    ],
)
def test_creature_for_spawn_point(n, kind):
    assert creature_for_spawn_point(n) == kind


@pytest.mark.parametrize("n", [0, 129, -3])
def test_creature_for_unassigned_point(n):
    assert creature_for_spawn_point(n) is None


def test_kill_notifications(tmp_path):
    _, mode, _ = make_arena(tmp_path)
    mode.notify_mob_killed_by_player(Entity.PURIFIED)
    mode.notify_special_attack_kill()
    stats = mode.match_stats
    assert stats.score == 10
    assert stats.kills == 1
    assert stats.sculcks == 1
    assert stats.special_attack_kills == 1
    assert mode.score == stats.score


def test_steps_drop_fractions(tmp_path):
    _, mode, _ = make_arena(tmp_path)
    mode.add_steps(10)
    assert mode.match_stats.steps == 0


def test_spawn(tmp_path):
    world, mode, _ = make_arena(tmp_path)
    world.start()
    player = mode.player
    assert isinstance(player, Sorcerer)
    assert np.allclose(player.position, POINTS[0])
    assert player.max_hp == PLAYER["hp"]
    assert mode.camera.target is player
    assert mode.camera.scale == 5000
    assert len(mode.mobs) == min(mob_number(0), len(POINTS) - 1)
    assert mode.live_mobs == len(mode.mobs)
    positions = {tuple(m.position) for m in mode.mobs}
    assert len(positions) == len(mode.mobs)
    assert tuple(POINTS[0]) not in positions
    for mob in mode.mobs:
        assert isinstance(mob, Monster)
        assert mob.target is player
        assert mob.entity is Entity.DISEASED
        assert mob.damage == pytest.approx(STERM["damage"])
        assert mob.max_hp == pytest.approx(STERM["hp"])


def test_empty_spawn_points(tmp_path):
    world, _, _ = make_arena(tmp_path, points=[])
    with pytest.raises(ValueError):
        world.start()


def test_wave_advances_after_pause(tmp_path):
    world, mode, _ = make_arena(tmp_path)
    world.start()
    player = mode.player
    player.take_damage(50, None)
    old = mode.mobs
    for mob in old:
        mob.kill(player)
    assert mode.score == 10 * len(old)
    mode.tick(5)
    assert mode.current_wave == 1
    mode.tick(4)
    assert mode.current_wave == 2
    assert mode.match_stats.waves == 1
    assert player.hp == player.max_hp
    assert all(mob not in mode.mobs for mob in old)
    assert all(not world.is_registered(mob) for mob in old)
    assert len(mode.mobs) == min(mob_number(1), len(POINTS) - 1)


def test_player_death_finishes_world(tmp_path):
    world, mode, _ = make_arena(tmp_path)
    world.start()
    mode.tick(1.0)
    assert mode.match_stats.duration == pytest.approx(1.0)
    mode.player.kill(None)
    mode.tick(2)
    assert not world.is_finished
    assert mode.match_stats.duration == pytest.approx(1.0)
    mode.tick(2)
    assert world.is_finished
    assert mode.camera is None


def test_ai_controllers(tmp_path):
    world, mode, _ = make_arena(tmp_path, ai_controller_factory=FakeAI)
    world.start()
    controllers = [mob.controller for mob in mode.mobs]
    for mob, ai in zip(mode.mobs, controllers):
        assert isinstance(ai, FakeAI)
        assert ai.marionette is mob
        assert ai.target is mode.player
        assert ai.attack_range == mob.attack_range
        assert ai.actions == [Action.ATTACK]
    mode.player.kill(None)
    assert all(mob.controller is None for mob in mode.mobs)
    assert all(ai.marionette is None for ai in controllers)


def test_player_controller_bindings(tmp_path):
    world, mode, _ = make_arena(tmp_path, player_controller_factory=FakePlayerController)
    world.start()
    controller = mode.player.controller
    assert isinstance(controller, FakePlayerController)
    assert controller.keys == KEY_ACTIONS
    assert ("W", 1.0, Action.MOVE_FORWARD) in controller.axes
    assert ("A", -1.0, Action.MOVE_RIGHT) in controller.axes


def test_zone_and_lava_handlers(tmp_path):
    world, mode, components = make_arena(tmp_path)
    world.start()
    zone = components[3]
    zone.owner = mode.player
    zone.on_overlap(zone)
    assert mode.player.zone is Entity.DISEASED
    lava = components[1]
    mob = mode.mobs[0]
    lava.owner = mob
    lava.on_overlap(lava)
    assert not mob.is_alive
    assert mode.score == 0