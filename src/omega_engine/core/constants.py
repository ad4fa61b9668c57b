"""Engine-wide constants: time costs, tile flags, site aux codes, tuning.

Time costs are fixed here rather than in settings so that replaying a
seed and command list always produces the same clock.
"""

from __future__ import annotations

# =============================================================================
# Time Costs (minutes)
# =============================================================================

ACTION_MINUTES = 5
"""Cost of most world-affecting actions (move, attack, pickup, wait, cast)."""

PROMPT_MINUTES = 0
"""Cost of opening, navigating or canceling a prompt."""

TUNNEL_MINUTES = 30
"""Cost of digging through one wall tile."""

REST_MINUTES_PER_HP = 20
"""Resting restores one hit point per this many minutes."""

REST_MAX_MINUTES = 480
"""Longest single rest."""

TAVERN_ROOM_MINUTES = 480
"""A night at the tavern."""

COUNTRY_TERRAIN_MINUTES = {
    ".": 60,
    "=": 30,
    "\"": 90,
    "^": 240,
    "~": 180,
    "&": 120,
}
"""Overland travel cost per terrain glyph (plains, road, grass, mountain, swamp, forest)."""

COUNTRY_DEFAULT_MINUTES = 60
"""Overland cost for a glyph not in COUNTRY_TERRAIN_MINUTES."""

# =============================================================================
# Tile Flags
# =============================================================================

TILE_FLAG_BLOCK_MOVE = 1 << 0
"""Tile cannot be entered."""

TILE_FLAG_PORTCULLIS = 1 << 1
"""Tile is an arena gate that closes during a match."""

TILE_FLAG_NO_TUNNEL = 1 << 2
"""Tile resists tunneling."""

TILE_FLAG_BLOCK_SIGHT = 1 << 3
"""Tile blocks missiles and spell bolts."""

WALL_GLYPH = "#"
"""Solid rock; the only glyph a tunnel can dig through."""

CLOSED_DOOR_GLYPH = "+"
OPEN_DOOR_GLYPH = "'"

BLOCKING_GLYPHS = frozenset({WALL_GLYPH, CLOSED_DOOR_GLYPH})
"""Map glyphs that cannot be walked through."""

# =============================================================================
# Site Aux Codes
# =============================================================================

SITE_AUX_NONE = 0
SITE_AUX_SERVICE_SHOP = 1
SITE_AUX_SERVICE_ARMORER = 2
SITE_AUX_SERVICE_BANK = 3
SITE_AUX_SERVICE_TEMPLE = 4
SITE_AUX_SERVICE_MERC_GUILD = 5
SITE_AUX_SERVICE_THIEVES_GUILD = 6
SITE_AUX_SERVICE_COLLEGE = 7
SITE_AUX_SERVICE_SORCERORS = 8
SITE_AUX_SERVICE_CASTLE = 9
SITE_AUX_SERVICE_PALACE = 10
SITE_AUX_SERVICE_ORDER = 11
SITE_AUX_SERVICE_CHARITY = 12
SITE_AUX_SERVICE_MONASTERY = 13
SITE_AUX_SERVICE_ARENA = 14
SITE_AUX_SERVICE_HEALER = 15
SITE_AUX_SERVICE_TAVERN = 16
SITE_AUX_SERVICE_COMMANDANT = 17
SITE_AUX_SERVICE_GYM = 18
SITE_AUX_SERVICE_CASINO = 19

SITE_AUX_ALTAR_BASE = 40
"""Altar aux codes are SITE_AUX_ALTAR_BASE + deity id (1..5)."""

SITE_AUX_EXIT_ARENA = 90
"""Stepping here leaves the arena back to the city."""

SITE_AUX_EXIT_COUNTRYSIDE = 91
"""Stepping off the city here with ``<`` leads to the countryside."""

SITE_AUX_CITY_GATE = 92
"""Countryside tile where ``>`` re-enters the city."""

DEITY_NAMES = {
    1: "Odin",
    2: "Set",
    3: "Athena",
    4: "Hecate",
    5: "Destiny",
}

# =============================================================================
# Items
# =============================================================================

USEF_RAISE_PORTCULLIS = "I_RAISE_PORTCULLIS"
USEF_HEAL = "I_HEAL"
USEF_FOOD = "I_FOOD"
USEF_TELEPORT = "I_TELEPORT"
USEF_RESTORE_MANA = "I_RESTORE_MANA"
USEF_CURE = "I_CURE"

WISH_WEALTH_GOLD = 10_000
"""Gold granted by wishing for wealth."""

# =============================================================================
# Combat And Progression Tuning
# =============================================================================

TO_HIT_TARGET = 8
"""A d20 plus bonuses must reach this plus monster defense to hit."""

MONSTER_SIGHT_RANGE = 8
"""Monsters farther than this wander instead of approaching."""

SPELL_RANGE = 8
"""Maximum reach of bolts, thrown items and targeting cursors."""

ALIGNMENT_THRESHOLD = 5
"""law_chaos_score at or beyond +/- this value fixes Lawful/Chaotic."""

PRIEST_FAVOR_THRESHOLDS = (3, 8, 15, 25, 40, 60)
"""Deity favor needed to reach each successive priest rank."""

MAX_GUILD_RANK = 6
