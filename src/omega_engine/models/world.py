"""WorldState: the single mutable root the turn reducer operates on.

WorldState is created once by bootstrap code (or decoded from a save),
mutated in place by every ``step`` call, and replaced wholesale on
restart or load. It is a pydantic model so the whole session, including
the pending interaction, round-trips losslessly through JSON.

Example:
    >>> from omega_engine.models.world import WorldState
    >>> from omega_engine.models.entities import MapBounds, Position, Stats
    >>> state = WorldState.new(MapBounds(width=9, height=9))
    >>> state.player.position
    Position(x=4, y=4)
    >>> goblin = state.spawn_monster("goblin", Position(x=5, y=4), Stats(hp=6, max_hp=6))
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from omega_engine.core.constants import (
    ALIGNMENT_THRESHOLD,
    BLOCKING_GLYPHS,
    TILE_FLAG_BLOCK_MOVE,
)
from omega_engine.models.catalog import ContentCatalog, default_catalog
from omega_engine.models.entities import (
    GroundItem,
    Item,
    MapBounds,
    Monster,
    Player,
    Position,
    Stats,
    TileSiteCell,
    Trap,
)
from omega_engine.models.enums import (
    Alignment,
    CombatLine,
    CombatManeuver,
    EndingKind,
    GameMode,
    LegacyEnvironment,
    LegacyQuestState,
    LegacyStatusFlag,
    SessionStatus,
    SpellTargeting,
    VictoryTrigger,
    WorldMode,
)
from omega_engine.models.interactions import ActiveInteraction


class Record(BaseModel):
    """Base class for mutable sub-records of WorldState."""

    model_config = ConfigDict(frozen=False, extra="ignore")


# =============================================================================
# Clock, Options, Flags
# =============================================================================


class Clock(Record):
    turn: int = Field(default=0, ge=0)
    minutes: int = Field(default=0, ge=0)


class GameOptions(Record):
    """Player-facing toggles."""

    pickup: bool = False
    interactive_sites: bool = True
    confirm: bool = True


class WizardState(Record):
    enabled: bool = False
    scoring_allowed: bool = True


class StatusEffect(Record):
    """A timed effect on the player; ``magnitude`` meaning depends on name."""

    name: str
    turns_remaining: int = Field(default=1, ge=0)
    magnitude: int = 1


class CombatStep(Record):
    maneuver: CombatManeuver = CombatManeuver.ATTACK
    line: CombatLine = CombatLine.CENTER


def default_combat_sequence() -> list[CombatStep]:
    return [CombatStep(maneuver=CombatManeuver.ATTACK, line=CombatLine.CENTER)]


# =============================================================================
# Magic
# =============================================================================


class Spell(Record):
    """A spell in the player's book."""

    id: str
    name: str
    cost: int = Field(default=1, ge=0)
    targeting: SpellTargeting = SpellTargeting.SELF
    power_min: int = 1
    power_max: int = 4
    known: bool = False


def default_spells() -> list[Spell]:
    return [
        Spell(
            id="magic_missile",
            name="magic missile",
            cost=3,
            targeting=SpellTargeting.BOLT,
            power_min=2,
            power_max=7,
            known=True,
        ),
        Spell(id="healing", name="healing", cost=4, power_min=5, power_max=10),
        Spell(id="sleep", name="sleep", cost=5, targeting=SpellTargeting.BOLT, power_min=3, power_max=6),
        Spell(id="blink", name="blink", cost=6, power_min=2, power_max=4),
    ]


class Spellbook(Record):
    spells: list[Spell] = Field(default_factory=default_spells)
    mana: int = Field(default=10, ge=0)
    max_mana: int = Field(default=10, ge=0)

    def known_spells(self) -> list[Spell]:
        return [spell for spell in self.spells if spell.known]

    def find(self, text: str) -> Spell | None:
        """Find a known spell by id, exact name, or unique name prefix."""
        wanted = " ".join(text.lower().split())
        if not wanted:
            return None
        known = self.known_spells()
        for spell in known:
            if spell.id == wanted or spell.name == wanted:
                return spell
        matches = [spell for spell in known if spell.name.startswith(wanted)]
        return matches[0] if len(matches) == 1 else None

    def get(self, spell_id: str | None) -> Spell | None:
        for spell in self.spells:
            if spell.id == spell_id:
                return spell
        return None


# =============================================================================
# Progression
# =============================================================================


class MainQuest(Record):
    stage: LegacyQuestState = LegacyQuestState.NOT_STARTED
    objective: str = ""
    palace_access: bool = False


class GuildTrack(Record):
    rank: int = Field(default=0, ge=0)
    xp: int = Field(default=0, ge=0)


def default_guild_tracks() -> dict[str, GuildTrack]:
    return {name: GuildTrack() for name in ("merc", "thieves", "college", "sorcerors", "order")}


class Progression(Record):
    """Ranks, alignment, quests and the ending record."""

    guild_rank: int = Field(default=0, ge=0)
    priest_rank: int = Field(default=0, ge=0)
    alignment: Alignment = Alignment.NEUTRAL
    law_chaos_score: int = 0
    deity_favor: int = 0
    patron_deity: int | None = None
    quest_state: LegacyQuestState = LegacyQuestState.NOT_STARTED
    quest_steps_completed: int = Field(default=0, ge=0)
    main_quest: MainQuest = Field(default_factory=MainQuest)
    quests: dict[str, GuildTrack] = Field(default_factory=default_guild_tracks)
    arena_rank: int = Field(default=0, ge=0)
    arena_match_active: bool = False
    adept_rank: int = Field(default=0, ge=0)
    total_winner_unlocked: bool = False
    ending: EndingKind | None = None
    victory_trigger: VictoryTrigger | None = None
    score: int = 0
    high_score_eligible: bool = True

    def track(self, name: str) -> GuildTrack:
        """Get a guild track, creating it on first use."""
        if name not in self.quests:
            self.quests[name] = GuildTrack()
        return self.quests[name]

    def recompute_alignment(self) -> Alignment:
        if self.law_chaos_score >= ALIGNMENT_THRESHOLD:
            self.alignment = Alignment.LAWFUL
        elif self.law_chaos_score <= -ALIGNMENT_THRESHOLD:
            self.alignment = Alignment.CHAOTIC
        else:
            self.alignment = Alignment.NEUTRAL
        return self.alignment


# =============================================================================
# Maps
# =============================================================================


class SiteMapDefinition(Record):
    """A self-contained map the player can be moved into (e.g. the arena)."""

    map_id: int
    environment: LegacyEnvironment
    bounds: MapBounds
    rows: list[str] = Field(default_factory=list)
    site_grid: list[TileSiteCell] = Field(default_factory=list)
    spawn: Position = Field(default_factory=Position)


# =============================================================================
# World State
# =============================================================================


class WorldState(BaseModel):
    """The complete state of one play session.

    Attributes:
        bounds: Dimensions of the current map.
        player: The player character.
        monsters: Living monsters on the current map.
        ground_items: Items lying on the current map.
        traps: Floor traps on the current map.
        map_rows: Glyph rows of the current map; empty means open floor.
        site_grid: Row-major site cells of the current map.
        interaction: The single pending prompt, if any.
        log: Append-only message log.
        clock: Turn and minute counters.
        status: Session lifecycle status.
        mode: Rule set the session is played under.
    """

    model_config = ConfigDict(frozen=False, extra="ignore")

    bounds: MapBounds = Field(default_factory=MapBounds)
    player: Player = Field(default_factory=Player)
    monsters: list[Monster] = Field(default_factory=list)
    ground_items: list[GroundItem] = Field(default_factory=list)
    traps: list[Trap] = Field(default_factory=list)

    # Maps
    map_rows: list[str] = Field(default_factory=list)
    site_grid: list[TileSiteCell] = Field(default_factory=list)
    city_bounds: MapBounds | None = None
    city_map_rows: list[str] = Field(default_factory=list)
    city_site_grid: list[TileSiteCell] = Field(default_factory=list)
    city_monsters: list[Monster] = Field(default_factory=list)
    city_ground_items: list[GroundItem] = Field(default_factory=list)
    city_traps: list[Trap] = Field(default_factory=list)
    country_map_rows: list[str] = Field(default_factory=list)
    site_maps: list[SiteMapDefinition] = Field(default_factory=list)
    world_mode: WorldMode = WorldMode.DUNGEON_CITY
    environment: LegacyEnvironment = LegacyEnvironment.CITY
    return_position: Position | None = None
    known_sites: list[Position] = Field(default_factory=list)
    map_revealed: bool = False

    # Character and economy
    spellbook: Spellbook = Field(default_factory=Spellbook)
    progression: Progression = Field(default_factory=Progression)
    wizard: WizardState = Field(default_factory=WizardState)
    options: GameOptions = Field(default_factory=GameOptions)
    legacy_status_flags: int = Field(default=0, ge=0)
    gold: int = Field(default=250, ge=0)
    bank_gold: int = Field(default=0, ge=0)
    food: int = Field(default=0, ge=0)
    legal_heat: int = Field(default=0, ge=0)
    status_effects: list[StatusEffect] = Field(default_factory=list)
    combat_sequence: list[CombatStep] = Field(default_factory=default_combat_sequence)
    combat_cursor: int = Field(default=0, ge=0)
    catalog: ContentCatalog = Field(default_factory=default_catalog)

    # Session bookkeeping
    interaction: ActiveInteraction | None = None
    log: list[str] = Field(default_factory=list)
    clock: Clock = Field(default_factory=Clock)
    status: SessionStatus = SessionStatus.IN_PROGRESS
    mode: GameMode = GameMode.CLASSIC
    monsters_defeated: int = Field(default=0, ge=0)
    next_entity_id: int = Field(default=1, ge=1)
    next_item_id: int = Field(default=1, ge=1)

    @classmethod
    def new(cls, bounds: MapBounds | None = None) -> WorldState:
        """Create an empty open map with the player at its center."""
        bounds = bounds or MapBounds()
        state = cls(bounds=bounds)
        state.player.position = bounds.center()
        return state

    # -------------------------------------------------------------------------
    # Ids and spawning
    # -------------------------------------------------------------------------

    def allocate_entity_id(self) -> int:
        entity_id = self.next_entity_id
        self.next_entity_id += 1
        return entity_id

    def allocate_item_id(self) -> int:
        # Keep clear of ids already present in hand-built states
        used = {item.id for item in self.player.inventory}
        used.update(ground.item.id for ground in self.ground_items)
        while self.next_item_id in used:
            self.next_item_id += 1
        item_id = self.next_item_id
        self.next_item_id += 1
        return item_id

    def spawn_monster(
        self,
        name: str,
        position: Position,
        stats: Stats | None = None,
        **fields: object,
    ) -> Monster:
        """Add a monster to the current map and return it."""
        monster = Monster(
            id=self.allocate_entity_id(),
            name=name,
            position=position,
            stats=stats if stats is not None else Stats(),
            **fields,
        )
        self.monsters.append(monster)
        return monster

    def place_item(self, item: Item | str, position: Position) -> GroundItem:
        """Drop an item on a tile; a name is looked up in the catalog first."""
        if isinstance(item, str):
            template = self.catalog.find(item)
            if template is not None:
                item = template.instantiate(self.allocate_item_id())
            else:
                item = Item(id=self.allocate_item_id(), name=item)
        ground = GroundItem(position=position, item=item)
        self.ground_items.append(ground)
        return ground

    def add_item_to_pack(self, item: Item) -> bool:
        """Put an item in the pack; False when the pack is full."""
        if self.player.pack_full:
            return False
        self.player.inventory.append(item)
        return True

    # -------------------------------------------------------------------------
    # Spatial queries
    # -------------------------------------------------------------------------

    def monster_at(self, position: Position) -> Monster | None:
        for monster in self.monsters:
            if monster.position == position and monster.stats.is_alive:
                return monster
        return None

    def items_at(self, position: Position) -> list[GroundItem]:
        return [ground for ground in self.ground_items if ground.position == position]

    def _grid_index(self, position: Position) -> int | None:
        if not self.bounds.contains(position):
            return None
        if len(self.site_grid) != self.bounds.width * self.bounds.height:
            return None
        return position.y * self.bounds.width + position.x

    def site_cell_at(self, position: Position) -> TileSiteCell | None:
        index = self._grid_index(position)
        return None if index is None else self.site_grid[index]

    def glyph_at(self, position: Position) -> str:
        if 0 <= position.y < len(self.map_rows):
            row = self.map_rows[position.y]
            if 0 <= position.x < len(row):
                return row[position.x]
        return "."

    def set_glyph(self, position: Position, glyph: str) -> None:
        if 0 <= position.y < len(self.map_rows):
            row = self.map_rows[position.y]
            if 0 <= position.x < len(row):
                self.map_rows[position.y] = row[: position.x] + glyph + row[position.x + 1 :]

    def is_walkable(self, position: Position) -> bool:
        if not self.bounds.contains(position):
            return False
        if self.glyph_at(position) in BLOCKING_GLYPHS:
            return False
        cell = self.site_cell_at(position)
        return cell is None or not cell.flags & TILE_FLAG_BLOCK_MOVE

    def tile_has_flag(self, position: Position, flag: int) -> bool:
        cell = self.site_cell_at(position)
        return cell is not None and bool(cell.flags & flag)

    # -------------------------------------------------------------------------
    # Log and flags
    # -------------------------------------------------------------------------

    def log_line(self, line: str) -> None:
        self.log.append(line)

    def has_status_flag(self, flag: LegacyStatusFlag) -> bool:
        return bool(self.legacy_status_flags & flag)

    def set_status_flag(self, flag: LegacyStatusFlag, enabled: bool = True) -> None:
        if enabled:
            self.legacy_status_flags |= int(flag)
        else:
            self.legacy_status_flags &= ~int(flag)

    def status_effect(self, name: str) -> StatusEffect | None:
        for effect in self.status_effects:
            if effect.name == name:
                return effect
        return None

    def add_status_effect(self, name: str, turns: int, magnitude: int = 1) -> StatusEffect:
        """Add a status effect, refreshing duration if already present."""
        effect = self.status_effect(name)
        if effect is None:
            effect = StatusEffect(name=name, turns_remaining=turns, magnitude=magnitude)
            self.status_effects.append(effect)
        else:
            effect.turns_remaining = max(effect.turns_remaining, turns)
            effect.magnitude = max(effect.magnitude, magnitude)
        return effect

    def remove_status_effect(self, name: str) -> bool:
        before = len(self.status_effects)
        self.status_effects = [effect for effect in self.status_effects if effect.name != name]
        return len(self.status_effects) != before


__all__ = [
    "Record",
    "Clock",
    "GameOptions",
    "WizardState",
    "StatusEffect",
    "CombatStep",
    "Spell",
    "Spellbook",
    "MainQuest",
    "GuildTrack",
    "Progression",
    "SiteMapDefinition",
    "WorldState",
    "default_spells",
    "default_guild_tracks",
    "default_combat_sequence",
]
