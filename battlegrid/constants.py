"""
Game constants for the grid combat simulator.
"""
from enum import Enum
from typing import Dict, List, Tuple


class TerrainType(Enum):
    """Enumeration of terrain types a cell can carry."""
    NONE = 'none'
    FOREST = 'forest'
    HILL = 'hill'
    WATER = 'water'

    @classmethod
    def from_code(cls, code: str) -> 'TerrainType':
        """Get TerrainType from its string code."""
        for terrain in cls:
            if terrain.value == code:
                return terrain
        raise ValueError(f"Unknown terrain code: {code}")

    def is_walkable(self) -> bool:
        """Check if ground units can stand on this terrain."""
        return self is not TerrainType.WATER

    def is_bonus(self) -> bool:
        """Check if this terrain grants a combat bonus."""
        return self in (TerrainType.FOREST, TerrainType.HILL)


class ColorGroup(Enum):
    """Counter groups. Each group beats exactly one other."""
    RED = 'red'
    GREEN = 'green'
    BLUE = 'blue'


class Archetype(Enum):
    """Enumeration of unit archetypes."""
    WARRIOR = 'warrior'
    ASSASSIN = 'assassin'
    DRAGON = 'dragon'
    TANK = 'tank'
    MAGE = 'mage'
    HEALER = 'healer'
    RIDER = 'rider'
    ARCHER = 'archer'
    FROST = 'frost'

    @classmethod
    def from_code(cls, code: str) -> 'Archetype':
        """Get Archetype from its string code."""
        for archetype in cls:
            if archetype.value == code:
                return archetype
        raise ValueError(f"Unknown archetype code: {code}")


class Team(Enum):
    """The two sides of a battle."""
    PLAYER = 'player'
    ENEMY = 'enemy'

    @property
    def opponent(self) -> 'Team':
        return Team.ENEMY if self is Team.PLAYER else Team.PLAYER


class Phase(Enum):
    """Match phases."""
    PLACE_PLAYER = 'place_player'
    PLACE_ENEMY = 'place_enemy'
    BATTLE = 'battle'
    ROUND_WON = 'round_won'
    ROUND_LOST = 'round_lost'
    ROUND_DRAW = 'round_draw'
    GAME_DRAW = 'game_draw'


class Ability(Enum):
    """Once-per-battle team abilities."""
    MORALE_BOOST = 'morale_boost'
    FOCUS_FIRE = 'focus_fire'
    SACRIFICE = 'sacrifice'
    SHIELD_WALL = 'shield_wall'


class AbilityPhase(Enum):
    """Lifecycle of a team ability within one battle."""
    UNUSED = 'unused'
    ACTIVE = 'active'
    SECONDARY = 'secondary'
    EXPIRED = 'expired'


# Board geometry
GRID_SIZE = 8
HOME_ROWS: Dict[Team, List[int]] = {
    Team.PLAYER: [5, 6, 7],
    Team.ENEMY: [0, 1, 2],
}
MIDDLE_ROWS = [3, 4]
# Row delta a team advances by
ADVANCE_DIRECTION: Dict[Team, int] = {
    Team.PLAYER: -1,
    Team.ENEMY: 1,
}

# Terrain generation
MIDDLE_TERRAIN_MIN = 4
MIDDLE_TERRAIN_MAX = 7
FLANK_TERRAIN_MAX = 3

# Relative (row, col) offsets
ORTHOGONAL: List[Tuple[int, int]] = [(-1, 0), (1, 0), (0, -1), (0, 1)]
DIAGONAL: List[Tuple[int, int]] = [(-1, -1), (-1, 1), (1, -1), (1, 1)]
ALL_ADJACENT: List[Tuple[int, int]] = ORTHOGONAL + DIAGONAL
ORTHOGONAL_2: List[Tuple[int, int]] = [(-2, 0), (2, 0), (0, -2), (0, 2)]
ORTHOGONAL_3: List[Tuple[int, int]] = [(-3, 0), (3, 0), (0, -3), (0, 3)]
DIAGONAL_2: List[Tuple[int, int]] = [(-2, -2), (-2, 2), (2, -2), (2, 2)]
DIAGONAL_3: List[Tuple[int, int]] = [(-3, -3), (-3, 3), (3, -3), (3, 3)]
KNIGHT: List[Tuple[int, int]] = [
    (-2, -1), (-2, 1), (2, -1), (2, 1),
    (-1, -2), (-1, 2), (1, -2), (1, 2),
]

# Color cycle: key beats value
COLOR_BEATS: Dict[ColorGroup, ColorGroup] = {
    ColorGroup.RED: ColorGroup.GREEN,
    ColorGroup.GREEN: ColorGroup.BLUE,
    ColorGroup.BLUE: ColorGroup.RED,
}

# Archetype catalog
ARCHETYPE_DATA = {
    Archetype.WARRIOR: {
        'name': 'Warrior',
        'icon': 'sword',
        'color': ColorGroup.RED,
        'health': 120,
        'attack': 28,
        'cooldown': 2,
        'move_pattern': ORTHOGONAL,
        'attack_pattern': ORTHOGONAL,
        'flying': False,
        'jumps': False,
    },
    Archetype.ASSASSIN: {
        'name': 'Assassin',
        'icon': 'dagger',
        'color': ColorGroup.RED,
        'health': 65,
        'attack': 32,
        'cooldown': 2,
        'move_pattern': DIAGONAL + DIAGONAL_2,
        'attack_pattern': DIAGONAL,
        'flying': False,
        'jumps': False,
    },
    Archetype.DRAGON: {
        'name': 'Dragon',
        'icon': 'fire',
        'color': ColorGroup.RED,
        'health': 110,
        'attack': 24,
        'cooldown': 3,
        'move_pattern': ALL_ADJACENT + ORTHOGONAL_2,
        'attack_pattern': ALL_ADJACENT,
        'flying': True,
        'jumps': False,
    },
    Archetype.TANK: {
        'name': 'Tank',
        'icon': 'shield',
        'color': ColorGroup.GREEN,
        'health': 200,
        'attack': 10,
        'cooldown': 3,
        'move_pattern': ORTHOGONAL,
        'attack_pattern': ORTHOGONAL,
        'flying': False,
        'jumps': False,
    },
    Archetype.MAGE: {
        'name': 'Mage',
        'icon': 'orb',
        'color': ColorGroup.GREEN,
        'health': 55,
        'attack': 35,
        'cooldown': 3,
        'move_pattern': ALL_ADJACENT,
        'attack_pattern': DIAGONAL_2 + DIAGONAL_3,
        'flying': False,
        'jumps': False,
    },
    Archetype.HEALER: {
        'name': 'Healer',
        'icon': 'herb',
        'color': ColorGroup.GREEN,
        'health': 70,
        'attack': 8,
        'cooldown': 3,
        'move_pattern': ALL_ADJACENT,
        'attack_pattern': ALL_ADJACENT + ORTHOGONAL_2,
        'flying': False,
        'jumps': False,
    },
    Archetype.RIDER: {
        'name': 'Rider',
        'icon': 'horse',
        'color': ColorGroup.BLUE,
        'health': 95,
        'attack': 24,
        'cooldown': 2,
        'move_pattern': KNIGHT + ORTHOGONAL,
        'attack_pattern': ORTHOGONAL + ORTHOGONAL_2,
        'flying': False,
        'jumps': True,
    },
    Archetype.ARCHER: {
        'name': 'Archer',
        'icon': 'bow',
        'color': ColorGroup.BLUE,
        'health': 70,
        'attack': 20,
        'cooldown': 2,
        'move_pattern': ALL_ADJACENT,
        'attack_pattern': ORTHOGONAL + ORTHOGONAL_2 + ORTHOGONAL_3,
        'flying': False,
        'jumps': False,
    },
    Archetype.FROST: {
        'name': 'Frost',
        'icon': 'snowflake',
        'color': ColorGroup.BLUE,
        'health': 60,
        'attack': 18,
        'cooldown': 3,
        'move_pattern': ALL_ADJACENT,
        'attack_pattern': ORTHOGONAL + ORTHOGONAL_2 + DIAGONAL,
        'flying': False,
        'jumps': False,
    },
}

ALL_ARCHETYPES: List[Archetype] = list(Archetype)


def archetypes_of_color(color: ColorGroup) -> List[Archetype]:
    """Get all archetypes belonging to a color group, in catalog order."""
    return [a for a in ALL_ARCHETYPES if ARCHETYPE_DATA[a]['color'] is color]


def hard_counter_color(color: ColorGroup) -> ColorGroup:
    """Get the color group that beats the given one."""
    for attacker, victim in COLOR_BEATS.items():
        if victim is color:
            return attacker
    raise ValueError(f"No counter for color: {color}")


# Counter lists derived from the color cycle so they can never disagree with it
for _archetype, _data in ARCHETYPE_DATA.items():
    _data['strong_vs'] = archetypes_of_color(COLOR_BEATS[_data['color']])
    _data['weak_vs'] = archetypes_of_color(hard_counter_color(_data['color']))

# Behavior tables replacing per-type conditionals
MELEE_ARCHETYPES = frozenset(
    a for a in ALL_ARCHETYPES
    if all(max(abs(dr), abs(dc)) <= 1 for dr, dc in ARCHETYPE_DATA[a]['attack_pattern'])
)
RANGED_ARCHETYPES = frozenset(a for a in ALL_ARCHETYPES if a not in MELEE_ARCHETYPES)
LOCK_ON_ARCHETYPES = frozenset({Archetype.WARRIOR})
OPPORTUNIST_ARCHETYPES = frozenset({Archetype.ASSASSIN, Archetype.MAGE})
SWITCH_AVOIDING_ARCHETYPES = frozenset({Archetype.RIDER})
FREEZING_ARCHETYPES = frozenset({Archetype.FROST})
SPLASH_ARCHETYPES = frozenset({Archetype.DRAGON})

# Combat
COUNTER_MULTIPLIER = 1.4
WEAKNESS_MULTIPLIER = 0.6
HILL_ATTACK_MULTIPLIER = 1.15
FOREST_DEFENCE_MULTIPLIER = 0.8
SHIELD_AURA_MULTIPLIER = 0.8
DAMAGE_VARIANCE = 0.05
SPLASH_RATIO = 0.3
FREEZE_CHANCE = 0.5
FREEZE_DURATION = 1
HEAL_AMOUNT = 22

# Targeting
TAUNT_RADIUS = 3
TAUNT_CHANCE = 0.6
COLUMN_BIAS_CHANCE = 0.7
OPPORTUNIST_HP_RATIO = 0.7

# Movement
STUCK_THRESHOLD = 3
BFS_NODE_LIMIT = 60

# Bonding
BOND_PULL_DISTANCE = 2
BOND_PULL_CHANCE = 0.6
SOFT_PULL_RADIUS = 3
SOFT_PULL_CHANCE = 0.3

# Staggered activation by home-row depth (front row first)
ACTIVATION_TURNS = [0, 2, 5]

# Abilities
MORALE_BUFF_TICKS = 3
MORALE_DEBUFF_TICKS = 3
MORALE_BUFF_MULTIPLIER = 1.25
MORALE_DEBUFF_MULTIPLIER = 0.85
FOCUS_FIRE_TICKS = 4
AI_FOCUS_FIRE_TICKS = 3
SACRIFICE_HEAL_RATIO = 0.15
SHIELD_WALL_TICKS = 3
SHIELD_WALL_DEFENCE_MULTIPLIER = 0.5
SHIELD_WALL_RETREAT_STEPS = 2

# Placement
BASE_UNITS = 5
PLACEMENT_RETRIES = 30
# Indexed by difficulty - 1
COUNTER_PICK_CHANCE = [0.0, 0.3, 0.55, 0.75, 0.95]
POSITIONAL_AWARENESS = [0.0, 0.25, 0.5, 0.75, 0.95]
BOND_RELOCATE_CHANCE = [0.0, 0.15, 0.35, 0.6, 0.85]
COLOR_FOCUS_CHANCE = 0.95
FORCE_TANK_CHANCE = 0.5
