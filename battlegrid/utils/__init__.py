"""
Utilities module.
"""
from battlegrid.utils.settings import MatchSettings

__all__ = ['MatchSettings']
