"""Economy and site services.

Every service is a menu registered with ``@site_service`` under a
``ServiceKind`` and the tile aux code that opens it. A menu option has a
digit key, a letter alias, a label and an action; the action applies the
option's state delta and reports it through ``EconomyUpdated``,
``DialogueAdvanced``, ``QuestAdvanced`` or ``ProgressionUpdated`` events.

Selecting a valid option closes the menu; invalid input keeps it open.
``q``, ``x`` and ``<esc>`` always leave.

The arena is the one service with a map of its own: a match moves the
player onto the arena site map, closes the portcullis behind them and
only a portcullis key dropped by the defeated challenger raises it again.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from omega_engine.core.constants import (
    ACTION_MINUTES,
    DEITY_NAMES,
    PRIEST_FAVOR_THRESHOLDS,
    SITE_AUX_ALTAR_BASE,
    SITE_AUX_EXIT_ARENA,
    SITE_AUX_SERVICE_ARENA,
    SITE_AUX_SERVICE_ARMORER,
    SITE_AUX_SERVICE_BANK,
    SITE_AUX_SERVICE_CASINO,
    SITE_AUX_SERVICE_CASTLE,
    SITE_AUX_SERVICE_CHARITY,
    SITE_AUX_SERVICE_COLLEGE,
    SITE_AUX_SERVICE_COMMANDANT,
    SITE_AUX_SERVICE_GYM,
    SITE_AUX_SERVICE_HEALER,
    SITE_AUX_SERVICE_MERC_GUILD,
    SITE_AUX_SERVICE_MONASTERY,
    SITE_AUX_SERVICE_ORDER,
    SITE_AUX_SERVICE_PALACE,
    SITE_AUX_SERVICE_SHOP,
    SITE_AUX_SERVICE_SORCERORS,
    SITE_AUX_SERVICE_TAVERN,
    SITE_AUX_SERVICE_TEMPLE,
    SITE_AUX_SERVICE_THIEVES_GUILD,
    TAVERN_ROOM_MINUTES,
    TILE_FLAG_BLOCK_MOVE,
    TILE_FLAG_PORTCULLIS,
    USEF_RAISE_PORTCULLIS,
)
from omega_engine.core.logging import get_logger
from omega_engine.engine.context import TurnContext
from omega_engine.engine.maps import enter_site_map, find_site_map, restore_city
from omega_engine.engine.progression import (
    activate_quest,
    advance_main_quest,
    raise_legal_heat,
    set_guild_rank,
    shift_alignment,
)
from omega_engine.engine.prompts import MENU_CLOSE_TOKENS, RawInput, cancel_prompt, close_prompt, open_prompt
from omega_engine.engine.rng import choose
from omega_engine.models.entities import Item, Monster, Position, Stats, TileSiteCell
from omega_engine.models.enums import (
    Alignment,
    Faction,
    ItemFamily,
    LegacyEnvironment,
    LegacyQuestState,
    LegacyStatusFlag,
)
from omega_engine.models.events import DialogueAdvanced, InventoryFull, PickedUp
from omega_engine.models.interactions import ServiceKind, SiteInteraction
from omega_engine.models.world import WorldState


logger = get_logger(__name__)

SiteAction = Callable[[TurnContext], None]


# =============================================================================
# Service Registry
# =============================================================================


@dataclass(frozen=True)
class MenuOption:
    """One entry of a service menu.

    Attributes:
        key: Digit selecting the option.
        alias: Letter selecting the option.
        label: Text shown in the menu.
        action: Effect of the option; ``None`` leaves the site.
        minutes: Time the option takes when it resolves.
    """

    key: str
    alias: str
    label: str
    action: SiteAction | None = None
    minutes: int = ACTION_MINUTES


MenuBuilder = Callable[[WorldState, SiteInteraction], tuple[MenuOption, ...]]


@dataclass(frozen=True)
class ServiceDefinition:
    """A registered site service."""

    kind: ServiceKind
    title: str
    menu: MenuBuilder
    status: Callable[[WorldState], str] | None = None


_service_registry: dict[ServiceKind, ServiceDefinition] = {}
_aux_services: dict[int, ServiceKind] = {}


def site_service(
    kind: ServiceKind,
    *,
    aux: int | None,
    title: str,
    status: Callable[[WorldState], str] | None = None,
) -> Callable[[MenuBuilder], MenuBuilder]:
    """Register a menu builder as the menu of a service.

    Args:
        kind: Service being defined.
        aux: Tile aux code opening the service, if it has a fixed one.
        title: Menu title.
        status: Optional builder of the trailing status text.

    Returns:
        Decorator returning the builder unchanged.
    """

    def decorator(builder: MenuBuilder) -> MenuBuilder:
        _service_registry[kind] = ServiceDefinition(kind=kind, title=title, menu=builder, status=status)
        if aux is not None:
            _aux_services[aux] = kind
        return builder

    return decorator


def get_service(kind: ServiceKind) -> ServiceDefinition:
    return _service_registry[kind]


def service_for_aux(aux: int) -> tuple[ServiceKind, int | None] | None:
    """Resolve a tile aux code to (service, deity id)."""
    if aux in _aux_services:
        return _aux_services[aux], None
    deity_id = aux - SITE_AUX_ALTAR_BASE
    if deity_id in DEITY_NAMES:
        return ServiceKind.ALTAR, deity_id
    return None


def service_title_for(service: ServiceKind, deity_id: int | None = None) -> str:
    if service is ServiceKind.ALTAR and deity_id in DEITY_NAMES:
        return f"Altar of {DEITY_NAMES[deity_id]}"
    return get_service(service).title


def service_title(interaction: SiteInteraction) -> str:
    return service_title_for(interaction.service, interaction.deity_id)


def site_prompt_text(state: WorldState, interaction: SiteInteraction) -> str:
    """Render the menu of an open site, e.g. ``Bank: [1/d] deposit 100 ...``."""
    definition = get_service(interaction.service)
    options = definition.menu(state, interaction)
    text = f"{service_title(interaction)}: " + " ".join(
        f"[{option.key}/{option.alias}] {option.label}" for option in options
    )
    if definition.status is not None:
        text += f" | {definition.status(state)}"
    return text


def site_help_hint(state: WorldState, interaction: SiteInteraction) -> str:
    return "Press a digit or bracketed letter to choose; q, x or <esc> leaves."


# =============================================================================
# Opening And Input
# =============================================================================


def site_at(state: WorldState, position: Position) -> tuple[TileSiteCell, ServiceKind, int | None] | None:
    cell = state.site_cell_at(position)
    if cell is None:
        return None
    resolved = service_for_aux(cell.aux)
    if resolved is None:
        return None
    return cell, resolved[0], resolved[1]


def open_site(ctx: TurnContext, token: str) -> bool:
    """Open the service menu of the tile under the player, if any."""
    found = site_at(ctx.state, ctx.state.player.position)
    if found is None:
        return False
    cell, service, deity_id = found
    interaction = SiteInteraction(service=service, site_id=cell.site_id, deity_id=deity_id)
    open_prompt(
        ctx,
        interaction,
        token=token,
        label="Site",
        text=site_prompt_text(ctx.state, interaction),
    )
    return True


def discover_site(ctx: TurnContext) -> bool:
    """Record the site under the player as known; False if already known or none."""
    state = ctx.state
    position = state.player.position
    if site_at(state, position) is None or position in state.known_sites:
        return False
    state.known_sites.append(position)
    ctx.progressed("known_sites", len(state.known_sites))
    return True


def handle_site_input(ctx: TurnContext, interaction: SiteInteraction, raw: RawInput) -> None:
    title = service_title(interaction)
    if raw.token in MENU_CLOSE_TOKENS:
        cancel_prompt(ctx, raw.label, f"You leave the {title}.")
        return
    options = get_service(interaction.service).menu(ctx.state, interaction)
    option = next((o for o in options if raw.token in (o.key, o.alias)), None)
    if option is None:
        ctx.log("Invalid option. Choose a bracketed option.")
        ctx.handled(raw.label, f"{title}: invalid option")
        return
    if option.action is None:
        cancel_prompt(ctx, raw.label, f"You leave the {title}.")
        return
    close_prompt(ctx)
    ctx.set_minutes(option.minutes)
    discover_site(ctx)
    option.action(ctx)
    ctx.handled(raw.label, f"{title}: {option.label}")
    logger.debug("Site option resolved", service=interaction.service.value, option=option.label)


# =============================================================================
# Shared Helpers
# =============================================================================


def _say(ctx: TurnContext, speaker: str, line: str) -> None:
    ctx.log(line)
    ctx.emit(DialogueAdvanced(speaker=speaker, line=line))


def _pay(ctx: TurnContext, source: str, price: int) -> bool:
    """Take gold for a service; refuse without charging time when short."""
    if ctx.state.gold < price:
        ctx.log("You cannot afford that.")
        ctx.set_minutes(0)
        return False
    if price > 0:
        ctx.economy(source, gold=-price)
    return True


def _buy(ctx: TurnContext, source: str, name: str, price: int) -> None:
    state = ctx.state
    template = state.catalog.find(name)
    if template is None:
        ctx.log(f"The {source} is out of {name}.")
        ctx.set_minutes(0)
        return
    if state.player.pack_full:
        ctx.log("Your pack is full.")
        ctx.emit(InventoryFull(capacity=state.player.inventory_capacity))
        ctx.set_minutes(0)
        return
    if not _pay(ctx, source, price):
        return
    item = template.instantiate(state.allocate_item_id())
    state.player.inventory.append(item)
    ctx.log(f"You buy a {item.name}.")
    ctx.emit(PickedUp(item_id=item.id, name=item.name))


def _learn_next_spell(ctx: TurnContext) -> bool:
    for spell in ctx.state.spellbook.spells:
        if not spell.known:
            spell.known = True
            ctx.log(f"You learn the spell of {spell.name}.")
            ctx.progressed("spellbook.known", spell.name)
            return True
    ctx.log("There is nothing more to teach you.")
    return False


def check_priest_rank(ctx: TurnContext) -> None:
    """Promote the player as a priest while favor clears the next threshold."""
    progression = ctx.state.progression
    if progression.alignment is Alignment.CHAOTIC:
        return
    while (
        progression.priest_rank < len(PRIEST_FAVOR_THRESHOLDS)
        and progression.deity_favor >= PRIEST_FAVOR_THRESHOLDS[progression.priest_rank]
    ):
        progression.priest_rank += 1
        ctx.progressed("priest_rank", progression.priest_rank)
        ctx.log(f"You are ordained at rank {progression.priest_rank}.")


def _gain_favor(ctx: TurnContext, amount: int) -> None:
    progression = ctx.state.progression
    progression.deity_favor += amount
    ctx.progressed("deity_favor", progression.deity_favor)
    check_priest_rank(ctx)


def _restore_mana(ctx: TurnContext) -> None:
    spellbook = ctx.state.spellbook
    spellbook.mana = spellbook.max_mana
    ctx.progressed("spellbook.mana", spellbook.mana)


def _position_text(position: Position) -> str:
    return f"{position.x},{position.y}"


def _leave(key: str, alias: str = "x") -> MenuOption:
    return MenuOption(key=key, alias=alias, label="leave", action=None, minutes=0)


# =============================================================================
# Shop And Armorer
# =============================================================================


def _shop_sell(ctx: TurnContext) -> None:
    state = ctx.state
    for item in state.player.inventory:
        if item.value > 0 and state.player.equipment.slot_of(item.id) is None:
            state.player.remove_item(item.id)
            ctx.progressed("player.inventory", len(state.player.inventory))
            ctx.economy("shop", gold=max(1, item.value // 2))
            ctx.log(f"You sell the {item.name}.")
            return
    ctx.log("You have nothing the shopkeeper wants.")
    ctx.set_minutes(0)


@site_service(ServiceKind.SHOP, aux=SITE_AUX_SERVICE_SHOP, title="Shop", status=lambda s: f"gold={s.gold}")
def shop_menu(state: WorldState, interaction: SiteInteraction) -> tuple[MenuOption, ...]:
    return (
        MenuOption("1", "r", "ration (10g)", lambda ctx: _buy(ctx, "shop", "food ration", 10)),
        MenuOption("2", "p", "healing potion (40g)", lambda ctx: _buy(ctx, "shop", "healing potion", 40)),
        MenuOption("3", "s", "sell", _shop_sell),
        _leave("4"),
    )


@site_service(ServiceKind.ARMORER, aux=SITE_AUX_SERVICE_ARMORER, title="Armorer", status=lambda s: f"gold={s.gold}")
def armorer_menu(state: WorldState, interaction: SiteInteraction) -> tuple[MenuOption, ...]:
    return (
        MenuOption("1", "w", "short sword (120g)", lambda ctx: _buy(ctx, "armorer", "short sword", 120)),
        MenuOption("2", "a", "leather armor (90g)", lambda ctx: _buy(ctx, "armorer", "leather armor", 90)),
        MenuOption("3", "s", "small shield (60g)", lambda ctx: _buy(ctx, "armorer", "small shield", 60)),
        _leave("4"),
    )


# =============================================================================
# Bank
# =============================================================================


BANK_STEP = 100


def _deposit(ctx: TurnContext, amount: int) -> None:
    amount = min(amount, ctx.state.gold)
    if amount <= 0:
        ctx.log("You have no gold to deposit.")
        ctx.set_minutes(0)
        return
    ctx.economy("bank", gold=-amount, bank=amount)
    ctx.log(f"You deposit {amount} gold.")


def _withdraw(ctx: TurnContext) -> None:
    amount = min(BANK_STEP, ctx.state.bank_gold)
    if amount <= 0:
        ctx.log("Your account is empty.")
        ctx.set_minutes(0)
        return
    ctx.economy("bank", gold=amount, bank=-amount)
    ctx.log(f"You withdraw {amount} gold.")


@site_service(
    ServiceKind.BANK,
    aux=SITE_AUX_SERVICE_BANK,
    title="Bank",
    status=lambda s: f"balance={s.bank_gold} gold={s.gold}",
)
def bank_menu(state: WorldState, interaction: SiteInteraction) -> tuple[MenuOption, ...]:
    return (
        MenuOption("1", "d", f"deposit {BANK_STEP}", lambda ctx: _deposit(ctx, BANK_STEP)),
        MenuOption("2", "w", f"withdraw {BANK_STEP}", _withdraw),
        MenuOption("3", "a", "deposit all", lambda ctx: _deposit(ctx, ctx.state.gold)),
        _leave("4"),
    )


# =============================================================================
# Temple And Altars
# =============================================================================


def _tithe(ctx: TurnContext) -> None:
    if _pay(ctx, "temple", 15):
        ctx.log("You tithe to the temple.")
        _gain_favor(ctx, 2)


def _temple_pray(ctx: TurnContext) -> None:
    state = ctx.state
    if state.progression.deity_favor <= 0:
        _say(ctx, "priest", "Your prayers go unanswered.")
        return
    state.progression.deity_favor -= 1
    ctx.progressed("deity_favor", state.progression.deity_favor)
    state.player.stats.heal(state.player.stats.max_hp)
    ctx.progressed("player.hp", state.player.stats.hp)
    _say(ctx, "priest", "A warm light mends your wounds.")


def _blessing(ctx: TurnContext) -> None:
    if _pay(ctx, "temple", 35):
        ctx.state.add_status_effect("blessed", turns=20)
        ctx.state.set_status_flag(LegacyStatusFlag.BLESSED)
        ctx.progressed("status_effects", len(ctx.state.status_effects))
        ctx.progressed("legacy_status_flags", ctx.state.legacy_status_flags)
        ctx.log("You are blessed.")
        _gain_favor(ctx, 4)


def _sanctuary(ctx: TurnContext) -> None:
    if ctx.state.legal_heat <= 0:
        _say(ctx, "priest", "You are not pursued, child.")
        return
    ctx.state.legal_heat = 0
    ctx.progressed("legal_heat", 0)
    _say(ctx, "priest", "The temple grants you sanctuary.")


@site_service(
    ServiceKind.TEMPLE,
    aux=SITE_AUX_SERVICE_TEMPLE,
    title="Temple",
    status=lambda s: f"favor={s.progression.deity_favor} gold={s.gold}",
)
def temple_menu(state: WorldState, interaction: SiteInteraction) -> tuple[MenuOption, ...]:
    return (
        MenuOption("1", "t", "tithe (15g)", _tithe),
        MenuOption("2", "p", "pray", _temple_pray),
        MenuOption("3", "b", "blessing (35g)", _blessing),
        MenuOption("4", "s", "sanctuary", _sanctuary),
        _leave("5"),
    )


def _altar_pray(ctx: TurnContext, deity_id: int) -> None:
    progression = ctx.state.progression
    deity = DEITY_NAMES[deity_id]
    if progression.patron_deity is None:
        progression.patron_deity = deity_id
        ctx.progressed("patron_deity", deity_id)
        ctx.log(f"You pledge yourself to {deity}.")
    if progression.patron_deity != deity_id:
        progression.deity_favor = max(0, progression.deity_favor - 1)
        ctx.progressed("deity_favor", progression.deity_favor)
        _say(ctx, deity, "Your own god is displeased by your wandering.")
        return
    _say(ctx, deity, f"{deity} hears your prayer.")
    _gain_favor(ctx, 1)


def _altar_sacrifice(ctx: TurnContext, deity_id: int) -> None:
    if ctx.state.progression.patron_deity != deity_id:
        _say(ctx, DEITY_NAMES[deity_id], "The altar rejects your offering.")
        return
    if _pay(ctx, "altar", 50):
        _gain_favor(ctx, 3)


def field_prayer(ctx: TurnContext, token: str) -> None:
    """``p``: pray to the patron deity away from any altar.

    A prayer spends one point of favor to mend wounds and draw out poison,
    and is only answered when there is something to mend.
    """
    state = ctx.state
    progression = state.progression
    if progression.patron_deity not in DEITY_NAMES:
        ctx.log("You have no patron to pray to.")
        ctx.handled(token, "pray: no patron")
        return
    ctx.set_minutes(ACTION_MINUTES)
    deity = DEITY_NAMES[progression.patron_deity]
    stats = state.player.stats
    poisoned = state.status_effect("poisoned") is not None
    if progression.deity_favor <= 0 or (stats.hp >= stats.max_hp and not poisoned):
        _say(ctx, deity, "You feel a distant presence.")
        ctx.handled(token, "pray: unanswered")
        return
    progression.deity_favor -= 1
    ctx.progressed("deity_favor", progression.deity_favor)
    stats.heal(stats.max_hp)
    ctx.progressed("player.hp", stats.hp)
    if poisoned:
        state.remove_status_effect("poisoned")
        state.set_status_flag(LegacyStatusFlag.POISONED, False)
        ctx.progressed("status_effects", len(state.status_effects))
        ctx.progressed("legacy_status_flags", state.legacy_status_flags)
    _say(ctx, deity, f"{deity} answers your prayer.")
    ctx.handled(token, "pray: answered")


@site_service(ServiceKind.ALTAR, aux=None, title="Altar", status=lambda s: f"favor={s.progression.deity_favor}")
def altar_menu(state: WorldState, interaction: SiteInteraction) -> tuple[MenuOption, ...]:
    deity_id = interaction.deity_id or 1
    return (
        MenuOption("1", "p", "pray", lambda ctx: _altar_pray(ctx, deity_id)),
        MenuOption("2", "s", "sacrifice (50g)", lambda ctx: _altar_sacrifice(ctx, deity_id)),
        _leave("3"),
    )


# =============================================================================
# Guilds
# =============================================================================


def _merc_enlist(ctx: TurnContext) -> None:
    if ctx.state.progression.guild_rank > 0:
        _say(ctx, "guildmaster", "You are already one of us.")
        return
    set_guild_rank(ctx, "merc", 1)
    _say(ctx, "guildmaster", "Welcome to the Mercenary Guild, recruit.")
    activate_quest(ctx, "The guild sends you to recover the Orb of Mastery.")


def _merc_promotion(ctx: TurnContext) -> None:
    state = ctx.state
    rank = state.progression.guild_rank
    if rank == 0:
        _say(ctx, "guildmaster", "Enlist first.")
        return
    if state.monsters_defeated < 3 * rank:
        _say(ctx, "guildmaster", "You need more combat experience.")
        return
    set_guild_rank(ctx, "merc", rank + 1)
    state.player.stats.attack_min += 1
    state.player.stats.attack_max += 1
    ctx.progressed("player.attack_min", state.player.stats.attack_min)
    ctx.progressed("player.attack_max", state.player.stats.attack_max)
    _say(ctx, "guildmaster", f"You are promoted to rank {rank + 1}.")


def _merc_training(ctx: TurnContext) -> None:
    if _pay(ctx, "merc guild", 50):
        ctx.state.player.stats.attack_max += 1
        ctx.progressed("player.attack_max", ctx.state.player.stats.attack_max)
        ctx.log("Drill sharpens your blows.")


@site_service(
    ServiceKind.MERC_GUILD,
    aux=SITE_AUX_SERVICE_MERC_GUILD,
    title="Mercenary Guild",
    status=lambda s: f"rank={s.progression.guild_rank} gold={s.gold}",
)
def merc_guild_menu(state: WorldState, interaction: SiteInteraction) -> tuple[MenuOption, ...]:
    return (
        MenuOption("1", "j", "enlist", _merc_enlist),
        MenuOption("2", "p", "promotion", _merc_promotion),
        MenuOption("3", "t", "training (50g)", _merc_training),
        _leave("4"),
    )


def _thieves_gate(action: SiteAction) -> SiteAction:
    """Refuse lawful characters before running a thieves' guild action."""

    def guarded(ctx: TurnContext) -> None:
        if ctx.state.progression.alignment is Alignment.LAWFUL:
            _say(ctx, "thief", "We don't deal with your kind.")
            ctx.set_minutes(0)
            return
        action(ctx)

    return guarded


def _thieves_join(ctx: TurnContext) -> None:
    track = ctx.state.progression.track("thieves")
    if track.rank > 0:
        _say(ctx, "thief", "You already know the handshake.")
        return
    if _pay(ctx, "thieves guild", 100):
        set_guild_rank(ctx, "thieves", 1)
        shift_alignment(ctx, -2)
        _say(ctx, "thief", "Welcome to the family.")


def _thieves_heist(ctx: TurnContext) -> None:
    track = ctx.state.progression.track("thieves")
    if track.rank == 0:
        _say(ctx, "thief", "Members only.")
        return
    take = ctx.rng.range_inclusive(20, 40 + 20 * track.rank)
    track.xp += 1
    ctx.progressed("quests.thieves.xp", track.xp)
    ctx.economy("thieves guild", gold=take)
    raise_legal_heat(ctx, 2)
    shift_alignment(ctx, -1)
    ctx.log(f"The job nets you {take} gold.")


def _thieves_promotion(ctx: TurnContext) -> None:
    track = ctx.state.progression.track("thieves")
    if track.rank == 0 or track.xp < 2 * track.rank:
        _say(ctx, "thief", "Prove yourself on more jobs.")
        return
    set_guild_rank(ctx, "thieves", track.rank + 1)
    _say(ctx, "thief", f"You rise to rank {track.rank}.")


@site_service(
    ServiceKind.THIEVES_GUILD,
    aux=SITE_AUX_SERVICE_THIEVES_GUILD,
    title="Thieves' Guild",
    status=lambda s: f"heat={s.legal_heat} gold={s.gold}",
)
def thieves_guild_menu(state: WorldState, interaction: SiteInteraction) -> tuple[MenuOption, ...]:
    return (
        MenuOption("1", "j", "join (100g)", _thieves_gate(_thieves_join)),
        MenuOption("2", "h", "heist", _thieves_gate(_thieves_heist)),
        MenuOption("3", "p", "promotion", _thieves_gate(_thieves_promotion)),
        _leave("4"),
    )


def _college_enroll(ctx: TurnContext) -> None:
    track = ctx.state.progression.track("college")
    if track.rank > 0:
        _say(ctx, "dean", "You are already enrolled.")
        return
    if _pay(ctx, "college", 100):
        set_guild_rank(ctx, "college", 1)
        ctx.state.spellbook.max_mana += 2
        ctx.progressed("spellbook.max_mana", ctx.state.spellbook.max_mana)
        _say(ctx, "dean", "Welcome to the Collegium Magii.")


def _college_study(ctx: TurnContext) -> None:
    if ctx.state.progression.track("college").rank == 0:
        _say(ctx, "dean", "Tuition first.")
        return
    if _pay(ctx, "college", 50):
        _learn_next_spell(ctx)


def _college_lecture(ctx: TurnContext) -> None:
    _say(ctx, "lecturer", "Mana returns to those who rest.")


@site_service(ServiceKind.COLLEGE, aux=SITE_AUX_SERVICE_COLLEGE, title="College", status=lambda s: f"gold={s.gold}")
def college_menu(state: WorldState, interaction: SiteInteraction) -> tuple[MenuOption, ...]:
    return (
        MenuOption("1", "e", "enroll (100g)", _college_enroll),
        MenuOption("2", "s", "study (50g)", _college_study),
        MenuOption("3", "l", "lecture", _college_lecture),
        _leave("4"),
    )


def _sorcerors_initiation(ctx: TurnContext) -> None:
    track = ctx.state.progression.track("sorcerors")
    if track.rank > 0:
        _say(ctx, "archmage", "You are already initiated.")
        return
    if _pay(ctx, "sorcerors", 150):
        set_guild_rank(ctx, "sorcerors", 1)
        ctx.state.spellbook.max_mana += 5
        ctx.progressed("spellbook.max_mana", ctx.state.spellbook.max_mana)
        _restore_mana(ctx)
        _say(ctx, "archmage", "The circle accepts you.")


def _sorcerors_research(ctx: TurnContext) -> None:
    if ctx.state.progression.track("sorcerors").rank == 0:
        _say(ctx, "archmage", "Initiates only.")
        return
    if _pay(ctx, "sorcerors", 75):
        _learn_next_spell(ctx)


def _sorcerors_recharge(ctx: TurnContext) -> None:
    if _pay(ctx, "sorcerors", 30):
        _restore_mana(ctx)
        ctx.log("Power floods back into you.")


@site_service(
    ServiceKind.SORCERORS,
    aux=SITE_AUX_SERVICE_SORCERORS,
    title="Sorcerors' Circle",
    status=lambda s: f"mana={s.spellbook.mana}/{s.spellbook.max_mana} gold={s.gold}",
)
def sorcerors_menu(state: WorldState, interaction: SiteInteraction) -> tuple[MenuOption, ...]:
    return (
        MenuOption("1", "i", "initiation (150g)", _sorcerors_initiation),
        MenuOption("2", "r", "research (75g)", _sorcerors_research),
        MenuOption("3", "m", "recharge (30g)", _sorcerors_recharge),
        _leave("4"),
    )


# =============================================================================
# Castle, Palace, Order
# =============================================================================


def _castle_audience(ctx: TurnContext) -> None:
    progression = ctx.state.progression
    stage = progression.quest_state
    if stage is LegacyQuestState.NOT_STARTED:
        _say(ctx, "duke", "Recover the Orb of Mastery and you will be rewarded.")
        activate_quest(ctx, "The Duke charges you to recover the Orb of Mastery.")
    elif stage is LegacyQuestState.ARTIFACT_RECOVERED and not progression.main_quest.palace_access:
        progression.main_quest.palace_access = True
        progression.main_quest.objective = "Present the Orb at the palace."
        ctx.progressed("main_quest.palace_access", 1)
        _say(ctx, "duke", "Take the Orb to the palace. The doors are open to you.")
    elif stage is LegacyQuestState.COMPLETED:
        _say(ctx, "duke", "The realm is in your debt.")
    else:
        _say(ctx, "duke", progression.main_quest.objective or "Go with honor.")


def _castle_tribute(ctx: TurnContext) -> None:
    if _pay(ctx, "castle", 100):
        shift_alignment(ctx, 1)
        _say(ctx, "duke", "Your loyalty is noted.")


@site_service(ServiceKind.CASTLE, aux=SITE_AUX_SERVICE_CASTLE, title="Castle", status=lambda s: f"gold={s.gold}")
def castle_menu(state: WorldState, interaction: SiteInteraction) -> tuple[MenuOption, ...]:
    return (
        MenuOption("1", "a", "audience", _castle_audience),
        MenuOption("2", "t", "tribute (100g)", _castle_tribute),
        _leave("3"),
    )


def _palace_audience(ctx: TurnContext) -> None:
    _say(ctx, "chamberlain", "The court is in session.")


def _palace_petition(ctx: TurnContext) -> None:
    progression = ctx.state.progression
    if not progression.main_quest.palace_access or progression.quest_state is not LegacyQuestState.ARTIFACT_RECOVERED:
        _say(ctx, "chamberlain", "The guards turn you away.")
        return
    advance_main_quest(ctx, LegacyQuestState.COMPLETED, "The Orb is restored. You are named Adept.")
    progression.adept_rank += 1
    ctx.progressed("adept_rank", progression.adept_rank)
    _say(ctx, "chamberlain", "Rise, Adept of the realm.")


@site_service(ServiceKind.PALACE, aux=SITE_AUX_SERVICE_PALACE, title="Palace")
def palace_menu(state: WorldState, interaction: SiteInteraction) -> tuple[MenuOption, ...]:
    return (
        MenuOption("1", "a", "audience", _palace_audience),
        MenuOption("2", "p", "petition", _palace_petition),
        _leave("3"),
    )


def _order_audience(ctx: TurnContext) -> None:
    progression = ctx.state.progression
    if progression.alignment is Alignment.CHAOTIC:
        _say(ctx, "paladin", "Begone, servant of chaos.")
        return
    shift_alignment(ctx, 5)
    track = progression.track("order")
    if track.rank == 0:
        set_guild_rank(ctx, "order", 1)
    _say(ctx, "paladin", "Walk the path of law.")
    activate_quest(ctx, "The Order asks you to recover the Orb of Mastery.")


def _order_donation(ctx: TurnContext) -> None:
    if _pay(ctx, "order", 50):
        shift_alignment(ctx, 1)
        _say(ctx, "paladin", "Your gift serves the just.")


@site_service(
    ServiceKind.ORDER,
    aux=SITE_AUX_SERVICE_ORDER,
    title="Order of Paladins",
    status=lambda s: f"alignment={s.progression.alignment.value}",
)
def order_menu(state: WorldState, interaction: SiteInteraction) -> tuple[MenuOption, ...]:
    return (
        MenuOption("1", "a", "audience", _order_audience),
        MenuOption("2", "d", "donation (50g)", _order_donation),
        _leave("3"),
    )


# =============================================================================
# Charity, Monastery, Healer, Tavern, Commandant, Gym, Casino
# =============================================================================


def _charity_aid(ctx: TurnContext) -> None:
    ctx.economy("charity", food=4)
    _say(ctx, "almoner", "Take this bread, and go in peace.")


def _charity_donate(ctx: TurnContext) -> None:
    if _pay(ctx, "charity", 20):
        shift_alignment(ctx, 1)
        _gain_favor(ctx, 1)


@site_service(ServiceKind.CHARITY, aux=SITE_AUX_SERVICE_CHARITY, title="Charity", status=lambda s: f"food={s.food}")
def charity_menu(state: WorldState, interaction: SiteInteraction) -> tuple[MenuOption, ...]:
    return (
        MenuOption("1", "a", "ask for aid", _charity_aid),
        MenuOption("2", "d", "donate (20g)", _charity_donate),
        _leave("3"),
    )


def _monastery_donate(ctx: TurnContext) -> None:
    if _pay(ctx, "monastery", 25):
        _gain_favor(ctx, 1)


def _monastery_meditate(ctx: TurnContext) -> None:
    _restore_mana(ctx)
    ctx.log("Your mind clears.")


def _monastery_retreat(ctx: TurnContext) -> None:
    state = ctx.state
    for effect in list(state.status_effects):
        state.remove_status_effect(effect.name)
    state.set_status_flag(LegacyStatusFlag.POISONED, False)
    ctx.progressed("status_effects", 0)
    ctx.progressed("legacy_status_flags", state.legacy_status_flags)
    ctx.log("A long retreat leaves you at peace.")


@site_service(ServiceKind.MONASTERY, aux=SITE_AUX_SERVICE_MONASTERY, title="Monastery")
def monastery_menu(state: WorldState, interaction: SiteInteraction) -> tuple[MenuOption, ...]:
    return (
        MenuOption("1", "d", "donation (25g)", _monastery_donate),
        MenuOption("2", "m", "meditate", _monastery_meditate),
        MenuOption("3", "r", "retreat", _monastery_retreat, minutes=60),
        _leave("4"),
    )


def _healer_heal(ctx: TurnContext) -> None:
    stats = ctx.state.player.stats
    if stats.hp >= stats.max_hp:
        _say(ctx, "healer", "You are perfectly healthy.")
        ctx.set_minutes(0)
        return
    if _pay(ctx, "healer", 30):
        stats.heal(stats.max_hp)
        ctx.progressed("player.hp", stats.hp)
        ctx.log("You feel much better.")


def _healer_cure(ctx: TurnContext) -> None:
    if ctx.state.status_effect("poisoned") is None:
        _say(ctx, "healer", "There is no poison in you.")
        ctx.set_minutes(0)
        return
    if _pay(ctx, "healer", 20):
        ctx.state.remove_status_effect("poisoned")
        ctx.state.set_status_flag(LegacyStatusFlag.POISONED, False)
        ctx.progressed("status_effects", len(ctx.state.status_effects))
        ctx.progressed("legacy_status_flags", ctx.state.legacy_status_flags)
        ctx.log("The poison is drawn out.")


@site_service(ServiceKind.HEALER, aux=SITE_AUX_SERVICE_HEALER, title="Healer", status=lambda s: f"gold={s.gold}")
def healer_menu(state: WorldState, interaction: SiteInteraction) -> tuple[MenuOption, ...]:
    return (
        MenuOption("1", "h", "heal (30g)", _healer_heal),
        MenuOption("2", "c", "cure poison (20g)", _healer_cure),
        _leave("3"),
    )


TAVERN_RUMORS = (
    "They say the Orb of Mastery lies beyond the city walls.",
    "The arena master pays well for a good show.",
    "Never anger the Order of Paladins.",
    "The thieves meet where the lamps are dark.",
)


def _tavern_meal(ctx: TurnContext) -> None:
    if _pay(ctx, "tavern", 5):
        ctx.economy("tavern", food=1)


def _tavern_drink(ctx: TurnContext) -> None:
    if _pay(ctx, "tavern", 2):
        _say(ctx, "barkeep", choose(ctx.rng, TAVERN_RUMORS))


def _tavern_room(ctx: TurnContext) -> None:
    if _pay(ctx, "tavern", 15):
        ctx.state.player.stats.heal(ctx.state.player.stats.max_hp)
        ctx.progressed("player.hp", ctx.state.player.stats.hp)
        _restore_mana(ctx)
        ctx.log("You sleep soundly.")


@site_service(ServiceKind.TAVERN, aux=SITE_AUX_SERVICE_TAVERN, title="Tavern", status=lambda s: f"gold={s.gold}")
def tavern_menu(state: WorldState, interaction: SiteInteraction) -> tuple[MenuOption, ...]:
    return (
        MenuOption("1", "m", "meal (5g)", _tavern_meal),
        MenuOption("2", "d", "drink (2g)", _tavern_drink),
        MenuOption("3", "r", "room (15g)", _tavern_room, minutes=TAVERN_ROOM_MINUTES),
        _leave("4"),
    )


def _commandant_bucket(ctx: TurnContext, price: int, food: int) -> None:
    if _pay(ctx, "commandant", price):
        ctx.economy("commandant", food=food)
        ctx.log("Fresh from the fryer.")


@site_service(
    ServiceKind.COMMANDANT,
    aux=SITE_AUX_SERVICE_COMMANDANT,
    title="Commandant Sonder's",
    status=lambda s: f"food={s.food} gold={s.gold}",
)
def commandant_menu(state: WorldState, interaction: SiteInteraction) -> tuple[MenuOption, ...]:
    return (
        MenuOption("1", "b", "bucket (8g)", lambda ctx: _commandant_bucket(ctx, 8, 3)),
        MenuOption("2", "f", "family bucket (20g)", lambda ctx: _commandant_bucket(ctx, 20, 8)),
        _leave("3"),
    )


def _gym_train(ctx: TurnContext) -> None:
    if _pay(ctx, "gym", 50):
        stats = ctx.state.player.stats
        stats.set_max_hp(stats.max_hp + 2)
        stats.heal(2)
        ctx.progressed("player.max_hp", stats.max_hp)
        ctx.progressed("player.hp", stats.hp)
        ctx.log("You feel tougher.")


@site_service(ServiceKind.GYM, aux=SITE_AUX_SERVICE_GYM, title="Gym", status=lambda s: f"gold={s.gold}")
def gym_menu(state: WorldState, interaction: SiteInteraction) -> tuple[MenuOption, ...]:
    return (
        MenuOption("1", "t", "train (50g)", _gym_train),
        _leave("2"),
    )


def _casino_slots(ctx: TurnContext) -> None:
    if not _pay(ctx, "casino", 10):
        return
    roll = ctx.rng.range_inclusive(1, 100)
    if roll <= 5:
        ctx.economy("casino", gold=100)
        ctx.log("Jackpot!")
    elif roll <= 30:
        ctx.economy("casino", gold=20)
        ctx.log("You win a little.")
    else:
        ctx.log("The wheels stop on nothing.")


@site_service(ServiceKind.CASINO, aux=SITE_AUX_SERVICE_CASINO, title="Casino", status=lambda s: f"gold={s.gold}")
def casino_menu(state: WorldState, interaction: SiteInteraction) -> tuple[MenuOption, ...]:
    return (
        MenuOption("1", "s", "slots (10g)", _casino_slots),
        _leave("2"),
    )


# =============================================================================
# Arena
# =============================================================================


ARENA_CHALLENGERS = (
    "goblin gladiator",
    "orc pitfighter",
    "minotaur",
    "troll champion",
    "young dragon",
)


def _portcullis_cells(state: WorldState) -> list[TileSiteCell]:
    return [cell for cell in state.site_grid if cell.flags & TILE_FLAG_PORTCULLIS]


def close_portcullis(state: WorldState) -> int:
    cells = _portcullis_cells(state)
    for cell in cells:
        cell.flags |= TILE_FLAG_BLOCK_MOVE
    return len(cells)


def raise_portcullis(state: WorldState) -> int:
    cells = _portcullis_cells(state)
    for cell in cells:
        cell.flags &= ~TILE_FLAG_BLOCK_MOVE
    return len(cells)


def _portcullis_key(state: WorldState) -> Item:
    item_id = state.allocate_item_id()
    for template in state.catalog.items:
        if template.usef == USEF_RAISE_PORTCULLIS:
            return template.instantiate(item_id)
    return Item(id=item_id, name="portcullis key", family=ItemFamily.THING, usef=USEF_RAISE_PORTCULLIS)


def _challenger_position(state: WorldState, spawn: Position) -> Position:
    for x in range(spawn.x + 3, state.bounds.width):
        candidate = Position(x=x, y=spawn.y)
        if state.is_walkable(candidate):
            return candidate
    for x in range(spawn.x - 1, -1, -1):
        candidate = Position(x=x, y=spawn.y)
        if state.is_walkable(candidate):
            return candidate
    return spawn


def _arena_fight(ctx: TurnContext) -> None:
    state = ctx.state
    progression = state.progression
    if progression.arena_match_active:
        _say(ctx, "arena master", "A match is already under way.")
        ctx.set_minutes(0)
        return
    site_map = find_site_map(state, LegacyEnvironment.ARENA)
    if site_map is None:
        ctx.log("The arena is closed.")
        ctx.handled("1", "arena map unavailable", fully_modeled=False)
        ctx.set_minutes(0)
        return
    enter_site_map(state, site_map)
    rank = progression.arena_rank
    name = ARENA_CHALLENGERS[min(rank, len(ARENA_CHALLENGERS) - 1)]
    state.spawn_monster(
        name,
        _challenger_position(state, site_map.spawn),
        Stats(hp=8 + 4 * rank, max_hp=8 + 4 * rank, attack_min=1, attack_max=3 + rank, defense=rank // 2),
        faction=Faction.WILD,
        is_arena_challenger=True,
        drops=[_portcullis_key(state)],
    )
    closed = close_portcullis(state)
    progression.arena_match_active = True
    state.set_status_flag(LegacyStatusFlag.IN_ARENA)
    ctx.progressed("arena_match_active", 1)
    ctx.progressed("environment", state.environment.value)
    ctx.progressed("player.position", _position_text(state.player.position))
    ctx.progressed("arena.challenger", name)
    ctx.progressed("arena.portcullis", "closed")
    ctx.progressed("legacy_status_flags", state.legacy_status_flags)
    ctx.log(f"The portcullis slams shut. A {name} enters the arena!")
    logger.debug("Arena match started", challenger=name, rank=rank, gates=closed)


def _arena_register(ctx: TurnContext) -> None:
    progression = ctx.state.progression
    progression.arena_rank = max(progression.arena_rank, 1)
    ctx.progressed("arena_rank", progression.arena_rank)
    _say(ctx, "arena master", "Your name is on the roster.")


@site_service(
    ServiceKind.ARENA,
    aux=SITE_AUX_SERVICE_ARENA,
    title="Arena",
    status=lambda s: f"rank={s.progression.arena_rank}",
)
def arena_menu(state: WorldState, interaction: SiteInteraction) -> tuple[MenuOption, ...]:
    if state.progression.arena_rank > 0:
        return (
            MenuOption("1", "y", "fight", _arena_fight),
            _leave("2", "n"),
        )
    return (
        MenuOption("1", "e", "enter", _arena_fight),
        MenuOption("2", "r", "register", _arena_register),
        _leave("3"),
    )


def finish_arena_match(ctx: TurnContext, challenger: Monster) -> None:
    """Close out a won arena match; the gate stays down until the key is used."""
    progression = ctx.state.progression
    if not progression.arena_match_active:
        return
    progression.arena_match_active = False
    progression.arena_rank += 1
    ctx.progressed("arena_match_active", 0)
    ctx.progressed("arena_rank", progression.arena_rank)
    ctx.economy("arena", gold=50 * progression.arena_rank)
    _say(ctx, "arena master", f"The crowd roars for the victor over the {challenger.name}!")


def use_portcullis_key(ctx: TurnContext) -> bool:
    """Raise the arena portcullis; False when there is none to raise here."""
    state = ctx.state
    if state.environment is not LegacyEnvironment.ARENA or not _portcullis_cells(state):
        return False
    raise_portcullis(state)
    ctx.log("The portcullis rises.")
    ctx.progressed("arena.portcullis", "open")
    return True


def on_arena_exit(ctx: TurnContext) -> bool:
    """Leave the arena when stepping onto its exit tile."""
    state = ctx.state
    cell = state.site_cell_at(state.player.position)
    if state.environment is not LegacyEnvironment.ARENA or cell is None or cell.aux != SITE_AUX_EXIT_ARENA:
        return False
    if state.progression.arena_match_active:
        ctx.log("The match is not over.")
        return False
    restore_city(state)
    state.set_status_flag(LegacyStatusFlag.IN_ARENA, False)
    ctx.log("You leave the arena.")
    ctx.progressed("environment", state.environment.value)
    ctx.progressed("player.position", _position_text(state.player.position))
    ctx.progressed("legacy_status_flags", state.legacy_status_flags)
    return True


__all__ = [
    "MenuOption",
    "ServiceDefinition",
    "site_service",
    "get_service",
    "service_for_aux",
    "service_title_for",
    "service_title",
    "discover_site",
    "site_prompt_text",
    "site_help_hint",
    "site_at",
    "open_site",
    "handle_site_input",
    "field_prayer",
    "check_priest_rank",
    "close_portcullis",
    "raise_portcullis",
    "finish_arena_match",
    "use_portcullis_key",
    "on_arena_exit",
]
