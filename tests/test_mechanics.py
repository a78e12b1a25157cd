"""Tests for the GameMechanics class."""
import math
import random

import pytest

from battlegrid.constants import (
    ALL_ARCHETYPES, ARCHETYPE_DATA, Ability, Archetype, Team, TerrainType
)
from battlegrid.core import events as ev
from battlegrid.game import abilities
from battlegrid.game.mechanics import GameMechanics

COUNTER_PAIRS = [
    (a, b) for a in ALL_ARCHETYPES for b in ALL_ARCHETYPES
    if b in ARCHETYPE_DATA[a]['strong_vs'] and a not in ARCHETYPE_DATA[b]['strong_vs']
]


class TestDamage:
    """Test damage calculation."""

    def test_hill_attacker_forest_target(self, spawn, set_terrain, mechanics, battle):
        """Test counter, hill and forest multiply in and the result is floored."""
        attacker = spawn(Archetype.WARRIOR, Team.PLAYER, 4, 3)
        target = spawn(Archetype.TANK, Team.ENEMY, 3, 3)
        attacker.attack = 100
        set_terrain(4, 3, TerrainType.HILL)
        set_terrain(3, 3, TerrainType.FOREST)

        damage, is_strong, is_weak = mechanics.calculate_damage(attacker, target, battle)
        assert damage == math.floor(100 * 1.4 * 1.15 * 0.8)
        assert is_strong
        assert not is_weak

    def test_neutral_damage(self, spawn, mechanics, battle):
        attacker = spawn(Archetype.WARRIOR, Team.PLAYER, 4, 3)
        target = spawn(Archetype.ASSASSIN, Team.ENEMY, 3, 3)
        assert mechanics.calculate_damage(attacker, target, battle) == (28, False, False)

    def test_weak_damage(self, spawn, mechanics, battle):
        attacker = spawn(Archetype.WARRIOR, Team.PLAYER, 4, 3)
        target = spawn(Archetype.ARCHER, Team.ENEMY, 3, 3)
        assert mechanics.calculate_damage(attacker, target, battle) == (16, False, True)

    @pytest.mark.parametrize('strong,weak', COUNTER_PAIRS)
    def test_counter_beats_reverse_on_average(self, strong, weak, battle, spawn):
        """Test A strong vs B deals more on average than B to A at equal attack."""
        a = spawn(strong, Team.PLAYER, 7, 0)
        b = spawn(weak, Team.ENEMY, 0, 7)
        a.attack = b.attack = 30
        mechanics = GameMechanics(random.Random(99))
        forward = [mechanics.calculate_damage(a, b, battle)[0] for _ in range(200)]
        backward = [mechanics.calculate_damage(b, a, battle)[0] for _ in range(200)]
        assert sum(forward) / len(forward) > sum(backward) / len(backward)

    def test_variance_bounds(self, spawn, battle):
        attacker = spawn(Archetype.WARRIOR, Team.PLAYER, 4, 3)
        target = spawn(Archetype.ASSASSIN, Team.ENEMY, 3, 3)
        attacker.attack = 100
        mechanics = GameMechanics(random.Random(3))
        rolls = {mechanics.calculate_damage(attacker, target, battle)[0] for _ in range(300)}
        assert min(rolls) >= 95
        assert max(rolls) <= 105
        assert len(rolls) > 1

    def test_invalid_splash_basis(self):
        with pytest.raises(ValueError):
            GameMechanics(random.Random(0), splash_basis='half')


class TestShieldAura:
    """Test the tank shield aura."""

    def test_adjacent_tank_reduces_damage(self, spawn, mechanics, battle):
        defender = spawn(Archetype.WARRIOR, Team.PLAYER, 3, 3)
        spawn(Archetype.TANK, Team.PLAYER, 3, 4)
        attacker = spawn(Archetype.ASSASSIN, Team.ENEMY, 2, 2)
        assert mechanics.calculate_damage(attacker, defender, battle)[0] == 25

    def test_aura_does_not_stack(self, spawn, mechanics, battle):
        defender = spawn(Archetype.WARRIOR, Team.PLAYER, 3, 3)
        spawn(Archetype.TANK, Team.PLAYER, 3, 4)
        spawn(Archetype.TANK, Team.PLAYER, 4, 3)
        attacker = spawn(Archetype.ASSASSIN, Team.ENEMY, 2, 2)
        assert mechanics.calculate_damage(attacker, defender, battle)[0] == 25

    def test_enemy_tank_gives_no_aura(self, spawn, mechanics, battle):
        defender = spawn(Archetype.WARRIOR, Team.PLAYER, 3, 3)
        spawn(Archetype.TANK, Team.ENEMY, 3, 4)
        attacker = spawn(Archetype.ASSASSIN, Team.ENEMY, 2, 2)
        assert mechanics.calculate_damage(attacker, defender, battle)[0] == 32

    def test_dead_tank_gives_no_aura(self, spawn, mechanics, battle):
        defender = spawn(Archetype.WARRIOR, Team.PLAYER, 3, 3)
        tank = spawn(Archetype.TANK, Team.PLAYER, 3, 4)
        tank.kill()
        attacker = spawn(Archetype.ASSASSIN, Team.ENEMY, 2, 2)
        assert mechanics.calculate_damage(attacker, defender, battle)[0] == 32

    def test_tank_does_not_shield_itself(self, spawn, mechanics, battle):
        tank = spawn(Archetype.TANK, Team.PLAYER, 3, 3)
        assert not GameMechanics.has_shield_aura(tank, battle)


class TestTeamModifiers:
    """Test ability multipliers inside damage."""

    def test_morale_boost(self, spawn, mechanics, battle):
        attacker = spawn(Archetype.WARRIOR, Team.PLAYER, 4, 3)
        target = spawn(Archetype.ASSASSIN, Team.ENEMY, 3, 3)
        abilities.activate(battle, Team.PLAYER, Ability.MORALE_BOOST)
        assert mechanics.calculate_damage(attacker, target, battle)[0] == 35

    def test_shield_wall_deals_nothing(self, spawn, mechanics, battle):
        attacker = spawn(Archetype.WARRIOR, Team.PLAYER, 4, 3)
        target = spawn(Archetype.ASSASSIN, Team.ENEMY, 3, 3)
        abilities.activate(battle, Team.PLAYER, Ability.SHIELD_WALL)
        assert mechanics.calculate_damage(attacker, target, battle)[0] == 0

    def test_shield_wall_halves_damage_taken(self, spawn, mechanics, battle):
        attacker = spawn(Archetype.WARRIOR, Team.PLAYER, 4, 3)
        target = spawn(Archetype.ASSASSIN, Team.ENEMY, 3, 3)
        abilities.activate(battle, Team.ENEMY, Ability.SHIELD_WALL)
        assert mechanics.calculate_damage(attacker, target, battle)[0] == 14


class TestAttack:
    """Test executing attacks."""

    def test_attack_records_target_and_event(self, spawn, mechanics, battle):
        attacker = spawn(Archetype.WARRIOR, Team.PLAYER, 4, 3)
        target = spawn(Archetype.ASSASSIN, Team.ENEMY, 3, 3)
        result = mechanics.attack_unit(attacker, target, battle)
        assert result['damage'] == 28
        assert result['target_alive']
        assert target.health == 65 - 28
        assert attacker.last_target_id == target.id
        assert [e.type for e in battle.events] == [ev.HIT]
        event = battle.events[0]
        assert event.attacker_pos == (4, 3)
        assert event.target_pos == (3, 3)
        assert not event.is_ranged

    def test_kill_frees_cell(self, spawn, mechanics, battle):
        attacker = spawn(Archetype.WARRIOR, Team.PLAYER, 4, 3)
        target = spawn(Archetype.ASSASSIN, Team.ENEMY, 3, 3)
        target.health = 1
        result = mechanics.attack_unit(attacker, target, battle)
        assert not result['target_alive']
        assert target.health == 0
        assert target.deceased
        assert battle.grid.occupant_at(3, 3) is None
        assert battle.events[-1].type == ev.KILL

    def test_frost_freezes_survivor(self, spawn, battle, always):
        mechanics = GameMechanics(always, damage_variance=False)
        frost = spawn(Archetype.FROST, Team.PLAYER, 6, 3)
        target = spawn(Archetype.WARRIOR, Team.ENEMY, 5, 3)
        result = mechanics.attack_unit(frost, target, battle)
        assert result['damage'] == 25
        assert result['frozen']
        assert target.frozen_ticks == 1
        assert [e.type for e in battle.events] == [ev.HIT, ev.FREEZE]

    def test_frost_freeze_can_miss(self, spawn, battle, never):
        mechanics = GameMechanics(never, damage_variance=False)
        frost = spawn(Archetype.FROST, Team.PLAYER, 6, 3)
        target = spawn(Archetype.WARRIOR, Team.ENEMY, 5, 3)
        assert not mechanics.attack_unit(frost, target, battle)['frozen']
        assert target.frozen_ticks == 0

    def test_frost_does_not_freeze_the_dead(self, spawn, battle, always):
        mechanics = GameMechanics(always, damage_variance=False)
        frost = spawn(Archetype.FROST, Team.PLAYER, 6, 3)
        target = spawn(Archetype.WARRIOR, Team.ENEMY, 5, 3)
        target.health = 5
        assert not mechanics.attack_unit(frost, target, battle)['frozen']

    def test_dragon_splash(self, spawn, mechanics, battle):
        """Test splash hits other enemies around the dragon only."""
        dragon = spawn(Archetype.DRAGON, Team.PLAYER, 4, 4)
        target = spawn(Archetype.WARRIOR, Team.ENEMY, 3, 4)
        bystander = spawn(Archetype.WARRIOR, Team.ENEMY, 5, 5)
        far = spawn(Archetype.WARRIOR, Team.ENEMY, 1, 1)
        friend = spawn(Archetype.WARRIOR, Team.PLAYER, 4, 5)

        result = mechanics.attack_unit(dragon, target, battle)
        assert result['damage'] == 24
        assert result['splashed'] == [bystander.id]
        assert target.health == 120 - 24
        assert bystander.health == 120 - 7
        assert far.health == 120
        assert friend.health == 120
        primary = [e for e in battle.events if e.target_id == target.id]
        assert len(primary) == 1
        assert primary[0].is_aoe
        assert len(primary[0].aoe_cells) == 9

    @pytest.mark.parametrize('basis,expected', [('modified', 10), ('raw', 7)])
    def test_splash_basis(self, spawn, battle, basis, expected):
        mechanics = GameMechanics(random.Random(0), damage_variance=False, splash_basis=basis)
        dragon = spawn(Archetype.DRAGON, Team.PLAYER, 4, 4)
        target = spawn(Archetype.MAGE, Team.ENEMY, 3, 4)
        bystander = spawn(Archetype.TANK, Team.ENEMY, 5, 5)
        result = mechanics.attack_unit(dragon, target, battle)
        assert result['damage'] == 33
        assert bystander.health == 200 - expected


class TestHealing:
    """Test healer mechanics."""

    def test_heal_ally(self, spawn, mechanics, battle):
        healer = spawn(Archetype.HEALER, Team.PLAYER, 6, 3)
        ally = spawn(Archetype.WARRIOR, Team.PLAYER, 6, 4)
        ally.take_damage(30)
        assert mechanics.heal_unit(healer, ally, battle) == 22
        assert ally.health == 112
        assert battle.events[-1].type == ev.HEAL
        assert battle.events[-1].heal_amount == 22

    def test_heal_capped(self, spawn, mechanics, battle):
        healer = spawn(Archetype.HEALER, Team.PLAYER, 6, 3)
        ally = spawn(Archetype.WARRIOR, Team.PLAYER, 6, 4)
        ally.take_damage(5)
        assert mechanics.heal_unit(healer, ally, battle) == 5
        assert ally.health == ally.max_health

    def test_full_health_not_healed(self, spawn, mechanics, battle):
        healer = spawn(Archetype.HEALER, Team.PLAYER, 6, 3)
        ally = spawn(Archetype.WARRIOR, Team.PLAYER, 6, 4)
        assert mechanics.heal_unit(healer, ally, battle) == -1

    def test_enemy_not_healed(self, spawn, mechanics, battle):
        healer = spawn(Archetype.HEALER, Team.PLAYER, 6, 3)
        enemy = spawn(Archetype.WARRIOR, Team.ENEMY, 6, 4)
        enemy.take_damage(30)
        assert mechanics.heal_unit(healer, enemy, battle) == -1
        assert enemy.health == 90
