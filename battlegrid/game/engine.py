"""
Tick scheduler resolving one battle step at a time.

Each tick fully resolves before the next: units act one after another and
every move or kill is visible to the units acting after it. Given the same
battle state and the same seeded generator, a tick always produces the same
result, whatever drives the cadence.
"""
from __future__ import annotations
import logging
import random
from typing import Dict, List, Optional

from battlegrid.constants import Ability, Archetype, Team
from battlegrid.core.battle_state import BattleState
from battlegrid.core.unit import Unit
from battlegrid.game import abilities
from battlegrid.game.abilities import AbilityBot
from battlegrid.game.bonding import formation_move
from battlegrid.game.mechanics import GameMechanics
from battlegrid.game.movement import move_toward
from battlegrid.game.targeting import damaged_allies, find_heal_target, find_target
from battlegrid.utils.settings import MatchSettings

logger = logging.getLogger(__name__)

DRAW = 'draw'


class BattleEngine:
    """Advances a BattleState tick by tick."""

    def __init__(self, rng: random.Random, settings: Optional[MatchSettings] = None,
                 ability_bots: Optional[List[AbilityBot]] = None) -> None:
        """
        Initialize the engine.

        Args:
            rng: Seeded random generator shared by every rule
            settings: Match settings (defaults used if omitted)
            ability_bots: Computer-controlled ability triggers, consulted each tick
        """
        self.rng = rng
        self.settings = settings or MatchSettings()
        self.mechanics = GameMechanics(
            rng,
            damage_variance=self.settings.damage_variance,
            splash_basis=self.settings.splash_basis,
        )
        self.ability_bots = ability_bots or []

    def turn_order(self, battle: BattleState) -> List[Unit]:
        """Living units sorted by max cooldown; arena order breaks ties."""
        return sorted(battle.living_units(), key=lambda u: u.max_cooldown)

    def tick(self, battle: BattleState) -> Optional[str]:
        """
        Resolve one battle tick.

        Args:
            battle: Battle to advance in place

        Returns:
            Winning team value, 'draw' when both sides died, or None while fighting
        """
        battle.events = []

        for bot in self.ability_bots:
            bot.take_turn(battle)

        for team in Team:
            battle.abilities[team].advance()
            if battle.abilities[team].shield_wall_active():
                abilities.shield_wall_retreat(battle, team)

        focus: Dict[Team, Optional[Unit]] = {}
        for team in Team:
            if battle.abilities[team].focus_fire_active():
                focus[team] = abilities.focus_target(battle, team, self.settings.focus_fire_rule)

        for unit in self.turn_order(battle):
            if not unit.is_alive():
                continue
            if unit.is_frozen():
                unit.frozen_ticks -= 1
                continue
            if battle.tick < unit.activation_turn:
                continue
            self._act(unit, battle, focus.get(unit.team))

        battle.tick += 1
        return self.outcome(battle)

    def _act(self, unit: Unit, battle: BattleState, focus_target: Optional[Unit]) -> None:
        unit.cooldown = max(0, unit.cooldown - 1)
        ready = unit.cooldown <= 0
        team_abilities = battle.abilities[unit.team]

        if unit.archetype is Archetype.HEALER:
            wounded = damaged_allies(unit, battle)
            if wounded:
                ally = find_heal_target(unit, battle)
                if ally is None:
                    if not team_abilities.shield_wall_active():
                        neediest = min(wounded, key=lambda u: u.hp_ratio())
                        battle.move_unit(unit, *move_toward(unit, neediest, battle))
                elif ready:
                    self.mechanics.heal_unit(unit, ally, battle)
                    unit.cooldown = unit.max_cooldown
                return

        if team_abilities.shield_wall_active():
            return

        target = focus_target
        if target is None or not target.is_alive():
            target = find_target(unit, battle, self.rng)
        if target is None:
            return

        dest = None
        if self.settings.use_bonds:
            dest = formation_move(unit, target, battle, self.rng)
        if dest is None:
            dest = move_toward(unit, target, battle)
        battle.move_unit(unit, *dest)

        if ready and unit.can_attack(target):
            self.mechanics.attack_unit(unit, target, battle)
            unit.cooldown = unit.max_cooldown
            unit.stuck_ticks = 0
        elif ready:
            unit.stuck_ticks += 1

    @staticmethod
    def outcome(battle: BattleState) -> Optional[str]:
        """Decide the battle if a side has no living units left."""
        counts = battle.alive_counts()
        player_alive = counts[Team.PLAYER] > 0
        enemy_alive = counts[Team.ENEMY] > 0
        if player_alive and enemy_alive:
            return None
        if not player_alive and not enemy_alive:
            return DRAW
        return Team.PLAYER.value if player_alive else Team.ENEMY.value

    @staticmethod
    def timeout_outcome(battle: BattleState) -> str:
        """Decide an expired battle by remaining unit counts."""
        counts = battle.alive_counts()
        if counts[Team.PLAYER] > counts[Team.ENEMY]:
            return Team.PLAYER.value
        if counts[Team.ENEMY] > counts[Team.PLAYER]:
            return Team.ENEMY.value
        return DRAW

    def activate_ability(self, battle: BattleState, team: Team, ability: Ability) -> bool:
        """Activate a team ability between ticks."""
        return abilities.activate(battle, team, ability)
