"""
Vote engine.
Resolves one group eviction in two steps:
- `select_for_elimination`: the table points at a seat; nothing is committed yet
  (the Elimination screen asks for confirmation).
- `confirm_elimination`: marks the seat eliminated, then either awards the
  civilians (imposter caught), awards the imposter (too few players left), or
  sends the table back to another vote on the same cards.

Both functions are pure: they return a new GameState and never touch the input.
"""
from __future__ import annotations

from agentx.config.settings import settings
from agentx.models.actions import InvalidActionError
from agentx.models.game import EliminationPhase, GameState, RoundEndPhase, VotingPhase


def select_for_elimination(state: GameState, seat: int) -> GameState:
    """Voting -> Elimination(seat, seat == imposter_index)."""
    if not isinstance(state.phase, VotingPhase):
        raise InvalidActionError(f"cannot evict during {state.phase.kind}")
    if seat not in state.active_indices():
        raise InvalidActionError(f"seat {seat} is not an active player")

    return state.model_copy(
        update={"phase": EliminationPhase(eliminated_index=seat, was_imposter=seat == state.imposter_index)}
    )


def confirm_elimination(
    state: GameState,
    civilian_reward: int | None = None,
    imposter_reward: int | None = None,
    win_threshold: int | None = None,
) -> GameState:
    """Commit the pending eviction and pick the next phase."""
    phase = state.phase
    if not isinstance(phase, EliminationPhase):
        raise InvalidActionError(f"nothing to confirm during {phase.kind}")
    civilian_reward = settings.CIVILIAN_REWARD if civilian_reward is None else civilian_reward
    imposter_reward = settings.IMPOSTER_REWARD if imposter_reward is None else imposter_reward
    win_threshold = settings.IMPOSTER_WIN_THRESHOLD if win_threshold is None else win_threshold

    new = state.model_copy(deep=True)
    new.players[phase.eliminated_index].is_eliminated = True

    if phase.was_imposter:
        # Tous les civils marquent, y compris ceux déjà évincés
        for seat, player in enumerate(new.players):
            if seat != new.imposter_index:
                player.score += civilian_reward
        new.phase = RoundEndPhase(imposter_found=True, game_over=True)
        return new

    if new.active_count() <= win_threshold:
        new.players[new.imposter_index].score += imposter_reward
        new.phase = RoundEndPhase(imposter_found=False, game_over=True)
        return new

    new.round_number += 1
    new.phase = VotingPhase()
    return new
