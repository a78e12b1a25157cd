"""Tests for tank bonding and formation moves."""
from battlegrid.constants import Archetype, Team
from battlegrid.game.bonding import formation_move, set_bonds
from battlegrid.game.movement import chebyshev, manhattan


class TestSetBonds:
    """Test bond creation at placement."""

    def test_adjacent_units_bond(self, spawn, battle):
        tank = spawn(Archetype.TANK, Team.PLAYER, 6, 3)
        diagonal = spawn(Archetype.ARCHER, Team.PLAYER, 7, 4)
        beside = spawn(Archetype.WARRIOR, Team.PLAYER, 6, 2)
        apart = spawn(Archetype.MAGE, Team.PLAYER, 6, 5)

        assert set_bonds(battle.units.values()) == 2
        assert diagonal.bonded_tank_id == tank.id
        assert beside.bonded_tank_id == tank.id
        assert apart.bonded_tank_id is None
        assert tank.bonded_tank_id is None

    def test_enemy_tank_does_not_bond(self, spawn, battle):
        spawn(Archetype.TANK, Team.ENEMY, 5, 3)
        warrior = spawn(Archetype.WARRIOR, Team.PLAYER, 6, 3)
        assert set_bonds(battle.units.values()) == 0
        assert warrior.bonded_tank_id is None

    def test_first_tank_wins(self, spawn, battle):
        first = spawn(Archetype.TANK, Team.PLAYER, 6, 2)
        spawn(Archetype.TANK, Team.PLAYER, 6, 4)
        archer = spawn(Archetype.ARCHER, Team.PLAYER, 7, 3)
        set_bonds(battle.units.values())
        assert archer.bonded_tank_id == first.id

    def test_tanks_do_not_bond_to_tanks(self, spawn, battle):
        a = spawn(Archetype.TANK, Team.PLAYER, 6, 2)
        b = spawn(Archetype.TANK, Team.PLAYER, 6, 3)
        set_bonds(battle.units.values())
        assert a.bonded_tank_id is None
        assert b.bonded_tank_id is None


class TestFormationMove:
    """Test formation pulls layered over movement."""

    def test_tank_and_healer_skip_formation(self, spawn, battle, always):
        tank = spawn(Archetype.TANK, Team.PLAYER, 6, 3)
        healer = spawn(Archetype.HEALER, Team.PLAYER, 2, 3)
        target = spawn(Archetype.WARRIOR, Team.ENEMY, 0, 0)
        healer.bonded_tank_id = tank.id
        assert formation_move(tank, target, battle, always) is None
        assert formation_move(healer, target, battle, always) is None

    def test_strayed_unit_pulled_back(self, spawn, battle, always):
        tank = spawn(Archetype.TANK, Team.PLAYER, 7, 0)
        warrior = spawn(Archetype.WARRIOR, Team.PLAYER, 3, 0)
        target = spawn(Archetype.WARRIOR, Team.ENEMY, 0, 7)
        warrior.bonded_tank_id = tank.id
        assert formation_move(warrior, target, battle, always) == (4, 0)

    def test_pull_is_probabilistic(self, spawn, battle, never):
        tank = spawn(Archetype.TANK, Team.PLAYER, 7, 0)
        warrior = spawn(Archetype.WARRIOR, Team.PLAYER, 3, 0)
        target = spawn(Archetype.WARRIOR, Team.ENEMY, 0, 7)
        warrior.bonded_tank_id = tank.id
        assert formation_move(warrior, target, battle, never) is None

    def test_pull_prefers_attack_cells(self, spawn, battle, always):
        tank = spawn(Archetype.TANK, Team.PLAYER, 7, 4)
        dragon = spawn(Archetype.DRAGON, Team.PLAYER, 3, 4)
        target = spawn(Archetype.WARRIOR, Team.ENEMY, 3, 2)
        dragon.bonded_tank_id = tank.id
        dest = formation_move(dragon, target, battle, always)
        assert chebyshev(dest, tank.position) < chebyshev(dragon.position, tank.position)
        assert dragon.can_attack_from(dest[0], dest[1], target.row, target.col)

    def test_adjacent_unit_holds_while_attacking(self, spawn, battle, always):
        tank = spawn(Archetype.TANK, Team.PLAYER, 5, 3)
        warrior = spawn(Archetype.WARRIOR, Team.PLAYER, 5, 4)
        target = spawn(Archetype.WARRIOR, Team.ENEMY, 4, 4)
        warrior.bonded_tank_id = tank.id
        assert formation_move(warrior, target, battle, always) == (5, 4)

    def test_adjacent_unit_attacks_from_beside_tank(self, spawn, battle, always):
        tank = spawn(Archetype.TANK, Team.PLAYER, 5, 3)
        warrior = spawn(Archetype.WARRIOR, Team.PLAYER, 6, 4)
        target = spawn(Archetype.WARRIOR, Team.ENEMY, 4, 4)
        warrior.bonded_tank_id = tank.id
        assert formation_move(warrior, target, battle, always) == (5, 4)

    def test_dead_tank_releases_bond(self, spawn, battle, never):
        tank = spawn(Archetype.TANK, Team.PLAYER, 7, 0)
        warrior = spawn(Archetype.WARRIOR, Team.PLAYER, 3, 0)
        target = spawn(Archetype.WARRIOR, Team.ENEMY, 0, 7)
        warrior.bonded_tank_id = tank.id
        tank.kill()
        battle.remove_unit_from_grid(tank)
        assert formation_move(warrior, target, battle, never) is None

    def test_soft_pull(self, spawn, battle, always):
        """Test unbonded units near a tank drift toward it without losing ground."""
        tank = spawn(Archetype.TANK, Team.PLAYER, 7, 3)
        warrior = spawn(Archetype.WARRIOR, Team.PLAYER, 5, 3)
        target = spawn(Archetype.WARRIOR, Team.ENEMY, 6, 7)
        dest = formation_move(warrior, target, battle, always)
        assert dest == (6, 3)
        assert manhattan(dest, target.position) <= manhattan(warrior.position, target.position)

    def test_no_soft_pull_when_able_to_attack(self, spawn, battle, always):
        spawn(Archetype.TANK, Team.PLAYER, 7, 3)
        warrior = spawn(Archetype.WARRIOR, Team.PLAYER, 5, 3)
        target = spawn(Archetype.WARRIOR, Team.ENEMY, 4, 3)
        assert formation_move(warrior, target, battle, always) is None
