"""
Core combat mechanics: damage, shield aura, freeze, splash and healing.
"""
from __future__ import annotations
import logging
import math
import random
from typing import TYPE_CHECKING, Any, Dict, List, Tuple

from battlegrid.constants import (
    ALL_ADJACENT, COUNTER_MULTIPLIER, DAMAGE_VARIANCE, FOREST_DEFENCE_MULTIPLIER,
    FREEZE_CHANCE, FREEZE_DURATION, FREEZING_ARCHETYPES, HEAL_AMOUNT,
    HILL_ATTACK_MULTIPLIER, SHIELD_AURA_MULTIPLIER, SPLASH_ARCHETYPES, SPLASH_RATIO,
    WEAKNESS_MULTIPLIER, Archetype, TerrainType
)
from battlegrid.core import events as ev
from battlegrid.game.movement import manhattan

if TYPE_CHECKING:
    from battlegrid.core.battle_state import BattleState
    from battlegrid.core.unit import Unit

logger = logging.getLogger(__name__)

SPLASH_BASES = ('modified', 'raw')


class GameMechanics:
    """Handles combat rules."""

    def __init__(self, rng: random.Random, damage_variance: bool = True,
                 splash_basis: str = 'modified') -> None:
        """Initialize game mechanics with configurable parameters.

        Args:
            rng: Seeded random generator used for variance and freeze rolls
            damage_variance: If False the +/-5% damage roll is fixed at 1.0
            splash_basis: 'modified' splashes a share of the final primary damage,
                          'raw' a share of the attacker's base attack
        """
        if splash_basis not in SPLASH_BASES:
            raise ValueError(f"Unknown splash basis: {splash_basis}")
        self.rng = rng
        self.damage_variance = damage_variance
        self.splash_basis = splash_basis

    @staticmethod
    def has_shield_aura(defender: 'Unit', battle: 'BattleState') -> bool:
        """Check if a living, distinct, same-team tank stands next to the defender."""
        for dr, dc in ALL_ADJACENT:
            ally = battle.unit_at(defender.row + dr, defender.col + dc)
            if (ally is not None and ally.id != defender.id and ally.team is defender.team
                    and ally.archetype is Archetype.TANK and ally.is_alive()):
                return True
        return False

    def roll_variance(self) -> float:
        if not self.damage_variance:
            return 1.0
        return self.rng.uniform(1.0 - DAMAGE_VARIANCE, 1.0 + DAMAGE_VARIANCE)

    def calculate_damage(self, attacker: 'Unit', defender: 'Unit',
                         battle: 'BattleState') -> Tuple[int, bool, bool]:
        """
        Calculate the damage of one attack.

        Args:
            attacker: The attacking unit
            defender: The target unit
            battle: Battle used for terrain, aura and ability lookups

        Returns:
            Tuple of (damage, is_strong, is_weak)
        """
        damage = attacker.attack * self.roll_variance()

        is_strong = attacker.is_strong_vs(defender)
        is_weak = not is_strong and attacker.is_weak_vs(defender)
        if is_strong:
            damage *= COUNTER_MULTIPLIER
        elif is_weak:
            damage *= WEAKNESS_MULTIPLIER

        if battle.grid.terrain_at(attacker.row, attacker.col) is TerrainType.HILL:
            damage *= HILL_ATTACK_MULTIPLIER
        if battle.grid.terrain_at(defender.row, defender.col) is TerrainType.FOREST:
            damage *= FOREST_DEFENCE_MULTIPLIER
        if self.has_shield_aura(defender, battle):
            damage *= SHIELD_AURA_MULTIPLIER

        dealt = battle.abilities[attacker.team].damage_dealt_multiplier()
        if dealt != 1.0:
            damage *= dealt
        taken = battle.abilities[defender.team].damage_taken_multiplier()
        if taken != 1.0:
            damage *= taken

        return math.floor(damage), is_strong, is_weak

    def attack_unit(self, attacker: 'Unit', target: 'Unit',
                    battle: 'BattleState') -> Dict[str, Any]:
        """
        Execute an attack from attacker to target, including on-hit effects.

        Args:
            attacker: The attacking unit
            target: The target unit
            battle: Battle the units belong to

        Returns:
            dict with 'damage', 'target_alive', 'frozen' and 'splashed' (list of unit ids)
        """
        damage, is_strong, is_weak = self.calculate_damage(attacker, target, battle)
        target_alive = target.take_damage(damage)
        attacker.last_target_id = target.id

        frozen = False
        if attacker.archetype in FREEZING_ARCHETYPES and target_alive:
            if self.rng.random() < FREEZE_CHANCE:
                target.frozen_ticks = FREEZE_DURATION
                frozen = True

        aoe_cells: List[Tuple[int, int]] = []
        splashed: List[str] = []
        if attacker.archetype in SPLASH_ARCHETYPES:
            aoe_cells, splashed = self._splash(attacker, target, damage, battle)

        battle.emit(ev.BattleEvent(
            type=ev.HIT if target_alive else ev.KILL,
            tick=battle.tick,
            attacker_id=attacker.id,
            attacker_pos=attacker.position,
            icon=attacker.data['icon'],
            target_id=target.id,
            target_pos=target.position,
            damage=damage,
            is_strong=is_strong,
            is_weak=is_weak,
            is_ranged=manhattan(attacker.position, target.position) > 1,
            is_aoe=bool(aoe_cells),
            aoe_cells=aoe_cells,
        ))
        if frozen:
            battle.emit(ev.BattleEvent(
                type=ev.FREEZE, tick=battle.tick, attacker_id=attacker.id,
                attacker_pos=attacker.position, icon='ice', target_id=target.id,
                target_pos=target.position,
                is_ranged=manhattan(attacker.position, target.position) > 1,
            ))

        if not target_alive:
            battle.remove_unit_from_grid(target)
            logger.debug(f"{attacker.id} killed {target.id} at tick {battle.tick}")

        return {
            'damage': damage,
            'target_alive': target_alive,
            'frozen': frozen,
            'splashed': splashed,
        }

    def _splash(self, attacker: 'Unit', target: 'Unit', damage: int,
                battle: 'BattleState') -> Tuple[List[Tuple[int, int]], List[str]]:
        """Hit every other enemy in the 3x3 block centred on the attacker."""
        basis = damage if self.splash_basis == 'modified' else attacker.attack
        splash_damage = round(basis * SPLASH_RATIO)

        cells = [attacker.position]
        cells += [(attacker.row + dr, attacker.col + dc) for dr, dc in ALL_ADJACENT]
        cells = sorted(c for c in cells if battle.grid.in_bounds(*c))

        splashed = []
        for row, col in cells:
            victim = battle.unit_at(row, col)
            if (victim is None or victim.id == target.id or victim.team is attacker.team
                    or not victim.is_alive()):
                continue
            alive = victim.take_damage(splash_damage)
            splashed.append(victim.id)
            battle.emit(ev.BattleEvent(
                type=ev.HIT if alive else ev.KILL, tick=battle.tick,
                attacker_id=attacker.id, attacker_pos=attacker.position, icon='fire',
                target_id=victim.id, target_pos=victim.position, damage=splash_damage,
                is_aoe=True,
            ))
            if not alive:
                battle.remove_unit_from_grid(victim)
        return cells, splashed

    def heal_unit(self, healer: 'Unit', target: 'Unit', battle: 'BattleState') -> int:
        """
        Healer restores a fixed amount of health to an ally.

        Returns:
            int: Actual amount healed, or -1 if heal failed
        """
        if target.team is not healer.team or not target.is_alive():
            return -1
        if target.health >= target.max_health:
            return -1

        amount = target.heal(HEAL_AMOUNT)
        battle.emit(ev.BattleEvent(
            type=ev.HEAL, tick=battle.tick, attacker_id=healer.id,
            attacker_pos=healer.position, icon=healer.data['icon'], target_id=target.id,
            target_pos=target.position,
            is_ranged=manhattan(healer.position, target.position) > 1,
            heal_amount=amount,
        ))
        return amount
