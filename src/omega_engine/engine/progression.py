"""Progression bookkeeping and the ending resolver.

Alignment, quest stages, guild ranks and the final score live here. The
only path to a won session is ``resolve_victory``, reached from the quit
confirmation prompt while the player is alive; quest state on its own
never ends a session.
"""

from __future__ import annotations

from omega_engine.core.logging import get_logger
from omega_engine.engine.context import TurnContext
from omega_engine.engine.prompts import YES_TOKENS, RawInput, cancel_prompt, close_prompt, open_prompt
from omega_engine.models.enums import (
    EndingKind,
    LegacyQuestState,
    LegacyStatusFlag,
    SessionStatus,
    VictoryTrigger,
)
from omega_engine.models.events import (
    ConfirmationRequired,
    EndingResolved,
    PlayerDefeated,
    QuestAdvanced,
    VictoryAchieved,
)
from omega_engine.models.interactions import QuitInteraction
from omega_engine.models.world import WorldState


logger = get_logger(__name__)

QUIT_PROMPT = "Quit the game? [y/n]"


# =============================================================================
# Alignment, Ranks, Quests
# =============================================================================


def shift_alignment(ctx: TurnContext, delta: int) -> None:
    """Move law_chaos_score and report any alignment change."""
    if delta == 0:
        return
    progression = ctx.state.progression
    before = progression.alignment
    progression.law_chaos_score += delta
    ctx.progressed("law_chaos_score", progression.law_chaos_score)
    after = progression.recompute_alignment()
    if after is not before:
        ctx.progressed("alignment", after.value)
        ctx.log(f"You feel more {after.value}.")


def raise_legal_heat(ctx: TurnContext, amount: int) -> None:
    ctx.state.legal_heat = max(0, ctx.state.legal_heat + amount)
    ctx.progressed("legal_heat", ctx.state.legal_heat)


def set_guild_rank(ctx: TurnContext, guild: str, rank: int) -> None:
    """Set a guild track rank; the merc guild also drives guild_rank."""
    progression = ctx.state.progression
    progression.track(guild).rank = rank
    ctx.progressed(f"quests.{guild}.rank", rank)
    if guild == "merc":
        progression.guild_rank = rank
        ctx.progressed("guild_rank", rank)


def advance_main_quest(ctx: TurnContext, stage: LegacyQuestState, objective: str) -> None:
    """Move the main quest to a new stage and count the step."""
    progression = ctx.state.progression
    if progression.main_quest.stage is stage:
        return
    progression.main_quest.stage = stage
    progression.main_quest.objective = objective
    progression.quest_state = stage
    progression.quest_steps_completed += 1
    ctx.emit(
        QuestAdvanced(
            quest="main",
            state=stage.value,
            steps_completed=progression.quest_steps_completed,
        )
    )
    ctx.log(objective)
    logger.debug("Main quest advanced", stage=stage.value)


def activate_quest(ctx: TurnContext, objective: str) -> bool:
    """Start the main quest if it has not been started."""
    if ctx.state.progression.quest_state is not LegacyQuestState.NOT_STARTED:
        return False
    advance_main_quest(ctx, LegacyQuestState.ACTIVE, objective)
    return True


# =============================================================================
# Score
# =============================================================================


def compute_score(state: WorldState) -> int:
    """Final score of a session; cheated sessions keep half."""
    progression = state.progression
    guild_ranks = sum(track.rank for name, track in progression.quests.items() if name != "merc")
    ranks = progression.guild_rank + guild_ranks + progression.priest_rank + progression.arena_rank
    score = (
        state.gold
        + state.bank_gold
        + 10 * state.monsters_defeated
        + 100 * ranks
        + 50 * progression.quest_steps_completed
        + 1000 * progression.adept_rank
    )
    if state.has_status_flag(LegacyStatusFlag.CHEATED):
        score //= 2
    return score


# =============================================================================
# Quit And Endings
# =============================================================================


def open_quit_prompt(ctx: TurnContext, token: str) -> None:
    open_prompt(ctx, QuitInteraction(), token=token, label="Quit", text=QUIT_PROMPT)
    ctx.emit(ConfirmationRequired(token=token, prompt=QUIT_PROMPT))


def handle_quit_input(ctx: TurnContext, interaction: QuitInteraction, raw: RawInput) -> None:
    if raw.token in YES_TOKENS:
        close_prompt(ctx)
        resolve_victory(ctx, raw.token)
        return
    cancel_prompt(ctx, raw.label, "Quit canceled.")


def resolve_victory(ctx: TurnContext, token: str) -> None:
    """End the session as a win. Only reachable from a confirmed quit."""
    state = ctx.state
    if state.status is not SessionStatus.IN_PROGRESS or not state.player.stats.is_alive:
        ctx.handled(token, "nothing to resolve")
        return
    progression = state.progression
    total_winner = progression.adept_rank > 0
    ending = EndingKind.TOTAL_WINNER if total_winner else EndingKind.VICTORY
    progression.total_winner_unlocked = total_winner
    progression.ending = ending
    progression.victory_trigger = VictoryTrigger.QUIT_CONFIRMED
    progression.score = compute_score(state)
    cheated = state.has_status_flag(LegacyStatusFlag.CHEATED)
    progression.high_score_eligible = state.wizard.scoring_allowed and not cheated
    state.status = SessionStatus.WON

    ctx.log("You retire from adventuring.")
    ctx.handled(token, f"quit confirmed: {ending.value}")
    ctx.emit(VictoryAchieved(ending=ending))
    ctx.emit(
        EndingResolved(
            ending=ending,
            score=progression.score,
            high_score_eligible=progression.high_score_eligible,
        )
    )
    logger.info(
        "Session won",
        ending=ending.value,
        score=progression.score,
        high_score_eligible=progression.high_score_eligible,
    )


def resolve_player_defeat(ctx: TurnContext, cause: str) -> None:
    """Mark the session lost once the player's HP has reached zero."""
    state = ctx.state
    if state.status is not SessionStatus.IN_PROGRESS:
        return
    state.status = SessionStatus.LOST
    state.interaction = None
    state.progression.score = compute_score(state)
    ctx.log(f"You die. Killed by {cause}.")
    ctx.emit(PlayerDefeated(cause=cause))
    logger.info("Session lost", cause=cause, turn=state.clock.turn)


def quit_prompt_text(state: WorldState, interaction: QuitInteraction) -> str:
    return QUIT_PROMPT


__all__ = [
    "QUIT_PROMPT",
    "shift_alignment",
    "raise_legal_heat",
    "set_guild_rank",
    "advance_main_quest",
    "activate_quest",
    "compute_score",
    "open_quit_prompt",
    "handle_quit_input",
    "resolve_victory",
    "resolve_player_defeat",
    "quit_prompt_text",
]
