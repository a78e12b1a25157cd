"""
Battle rules and match flow module.
"""
from battlegrid.game.mechanics import GameMechanics
from battlegrid.game.engine import BattleEngine
from battlegrid.game.bot import PlacementBot
from battlegrid.game.abilities import AbilityBot
from battlegrid.game.match import Match
from battlegrid.game.sync import AuthoritativeHost, SnapshotMirror

__all__ = ['GameMechanics', 'BattleEngine', 'PlacementBot', 'AbilityBot', 'Match',
           'AuthoritativeHost', 'SnapshotMirror']
