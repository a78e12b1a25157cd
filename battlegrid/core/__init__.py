"""
Core battle state module.
"""
from battlegrid.core.tile import Cell
from battlegrid.core.unit import Unit
from battlegrid.core.grid import TileGrid
from battlegrid.core.battle_state import BattleState
from battlegrid.core.match_state import MatchState

__all__ = ['Cell', 'Unit', 'TileGrid', 'BattleState', 'MatchState']
