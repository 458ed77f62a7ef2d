"""
Game state machine.
`reduce(state, action)` is the only way a GameState changes: it validates the
action against the current phase, returns a new state and leaves the input
untouched. Side effects (persistence, dealing on entry into CardView) belong
to the caller, see `agentx.services.game_session`.

    Setup --start--> CardView(0) --advance--> ... CardView(n) --proceed--> Voting
    Voting --evict(k)--> Elimination --confirm--> Voting | RoundEnd
    RoundEnd --view_scores--> GameScore --next_round--> CardView(0)
    RoundEnd | GameScore --new_game--> Setup
"""
from __future__ import annotations

import logging
import os
from typing import Any, Callable, Dict, List

from agentx.config.settings import settings
from agentx.engine.card_generator import RandomBytes, generate_cards
from agentx.engine.vote_engine import confirm_elimination, select_for_elimination
from agentx.models.actions import (
    Action,
    Advance,
    Confirm,
    Deal,
    Evict,
    InvalidActionError,
    NewGame,
    NextRound,
    Proceed,
    SetPlayerCount,
    SetPlayerName,
    Start,
    ViewScores,
)
from agentx.models.game import (
    CardType,
    CardViewPhase,
    EliminationPhase,
    GameScorePhase,
    GameState,
    Player,
    RoundEndPhase,
    SetupPhase,
    VotingPhase,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Setup: saisie tolérante
# ---------------------------------------------------------------------------
def effective_player_count(raw: str) -> int:
    """Parse the count field; unparsable text falls back to the default, then clamp."""
    try:
        count = int(raw)
    except (TypeError, ValueError):
        count = settings.DEFAULT_PLAYER_COUNT
    return max(settings.MIN_PLAYERS, min(settings.MAX_PLAYERS, count))


def sync_player_names(names: List[str], count: int) -> List[str]:
    """Truncate or pad with empty strings so there is exactly one slot per player."""
    return list(names[:count]) + [""] * max(0, count - len(names))


def new_game_state(session_id: str) -> GameState:
    """Blank Setup with one empty name slot per player of the default count."""
    state = GameState(session_id=session_id)
    state.player_names = sync_player_names([], effective_player_count(state.player_count_input))
    return state


def can_start(names: List[str]) -> bool:
    return bool(names) and all(name.strip() for name in names)


def needs_cards(state: GameState) -> bool:
    """True on a CardView entry that has no dealt cards yet."""
    return isinstance(state.phase, CardViewPhase) and not state.cards and bool(state.players)


# ---------------------------------------------------------------------------
# Handlers (un par action)
# ---------------------------------------------------------------------------
def _expect(state: GameState, *phases: type) -> None:
    if not isinstance(state.phase, phases):
        raise InvalidActionError(f"action not allowed during {state.phase.kind}")


def _set_player_count(state: GameState, action: SetPlayerCount, **_: Any) -> GameState:
    _expect(state, SetupPhase)
    count = effective_player_count(action.value)
    return state.model_copy(
        update={
            "player_count_input": action.value,
            "player_names": sync_player_names(state.player_names, count),
        }
    )


def _set_player_name(state: GameState, action: SetPlayerName, **_: Any) -> GameState:
    _expect(state, SetupPhase)
    names = sync_player_names(state.player_names, effective_player_count(state.player_count_input))
    if action.index >= len(names):
        raise InvalidActionError(f"no name slot {action.index} for {len(names)} players")
    names[action.index] = action.name
    return state.model_copy(update={"player_names": names})


def _start(state: GameState, action: Start, **_: Any) -> GameState:
    _expect(state, SetupPhase)
    names = sync_player_names(state.player_names, effective_player_count(state.player_count_input))
    if not can_start(names):
        # bouton désactivé: rien ne change
        return state
    return state.model_copy(
        update={
            "players": [Player(name=name.strip()) for name in names],
            "player_names": names,
            "round_number": 1,
            "cards": [],
            "phase": CardViewPhase(current_player_index=0),
        }
    )


def _deal(state: GameState, action: Deal, random_bytes: RandomBytes = os.urandom, **_: Any) -> GameState:
    if not needs_cards(state):
        raise InvalidActionError("cards are dealt only on entry into an empty CardView")
    cards, imposter_index = generate_cards(len(state.players), random_bytes=random_bytes)
    return state.model_copy(update={"cards": cards, "imposter_index": imposter_index})


def _advance(state: GameState, action: Advance, **_: Any) -> GameState:
    _expect(state, CardViewPhase)
    index = state.phase.current_player_index
    if not state.cards or index >= len(state.players):
        raise InvalidActionError(f"no card to pass on at seat {index}")
    return state.model_copy(update={"phase": CardViewPhase(current_player_index=index + 1)})


def _proceed(state: GameState, action: Proceed, **_: Any) -> GameState:
    _expect(state, CardViewPhase)
    if state.phase.current_player_index < len(state.players):
        raise InvalidActionError("some players have not seen their card yet")
    return state.model_copy(update={"phase": VotingPhase()})


def _evict(state: GameState, action: Evict, **_: Any) -> GameState:
    return select_for_elimination(state, action.seat)


def _confirm(state: GameState, action: Confirm, **_: Any) -> GameState:
    return confirm_elimination(state)


def _view_scores(state: GameState, action: ViewScores, **_: Any) -> GameState:
    _expect(state, RoundEndPhase)
    return state.model_copy(update={"phase": GameScorePhase()})


def _next_round(state: GameState, action: NextRound, **_: Any) -> GameState:
    _expect(state, GameScorePhase)
    return state.model_copy(
        update={
            "players": [p.model_copy(update={"is_eliminated": False}) for p in state.players],
            "cards": [],
            "round_number": state.round_number + 1,
            "phase": CardViewPhase(current_player_index=0),
        }
    )


def _new_game(state: GameState, action: NewGame, **_: Any) -> GameState:
    _expect(state, RoundEndPhase, GameScorePhase)
    # noms et nombre conservés pour pré-remplir le Setup
    return state.model_copy(update={"players": [], "cards": [], "phase": SetupPhase()})


_HANDLERS: Dict[type, Callable[..., GameState]] = {
    SetPlayerCount: _set_player_count,
    SetPlayerName: _set_player_name,
    Start: _start,
    Deal: _deal,
    Advance: _advance,
    Proceed: _proceed,
    Evict: _evict,
    Confirm: _confirm,
    ViewScores: _view_scores,
    NextRound: _next_round,
    NewGame: _new_game,
}


def reduce(state: GameState, action: Action, random_bytes: RandomBytes = os.urandom) -> GameState:
    """
    Apply one action and return the resulting state.

    Raises:
        InvalidActionError: the action does not belong to the current phase,
            or targets a seat that is not in the current roster.
    """
    handler = _HANDLERS.get(type(action))
    if handler is None:
        raise InvalidActionError(f"unknown action {action!r}")

    new = handler(state, action, random_bytes=random_bytes)
    new.check_invariants()
    logger.debug(
        "Transition applied",
        extra={"session_id": state.session_id, "action": action.type, "from": state.phase.kind, "to": new.phase.kind},
    )
    return new


# ---------------------------------------------------------------------------
# Vues par phase (données minimales pour le rendu)
# ---------------------------------------------------------------------------
def render_view(state: GameState) -> Dict[str, Any]:
    """Return what the current screen needs to render, nothing more."""
    phase = state.phase
    view: Dict[str, Any] = {"sessionId": state.session_id, "phase": phase.model_dump(mode="json", by_alias=True)}

    if isinstance(phase, SetupPhase):
        count = effective_player_count(state.player_count_input)
        names = sync_player_names(state.player_names, count)
        view.update(playerCountInput=state.player_count_input, playerCount=count, playerNames=names, canStart=can_start(names))

    elif isinstance(phase, CardViewPhase):
        index = phase.current_player_index
        if index >= len(state.players):
            view.update(allSeen=True)
        elif state.cards:
            card = state.cards[index]
            view.update(
                allSeen=False,
                playerName=state.players[index].name,
                card=card.model_dump(mode="json", by_alias=True),
                isImposter=card.card_type == CardType.IMPOSTER,
                position=index + 1,
                total=len(state.players),
            )
        else:
            view.update(allSeen=False, dealing=True)

    elif isinstance(phase, VotingPhase):
        view.update(
            roundNumber=state.round_number,
            candidates=[{"seat": i, "name": state.players[i].name} for i in state.active_indices()],
        )

    elif isinstance(phase, EliminationPhase):
        view.update(
            eliminatedName=state.players[phase.eliminated_index].name,
            wasImposter=phase.was_imposter,
            remaining=state.active_count() - 1,
        )

    elif isinstance(phase, RoundEndPhase):
        imposter = state.players[state.imposter_index].name if state.imposter_index < len(state.players) else None
        view.update(
            imposterFound=phase.imposter_found,
            gameOver=phase.game_over,
            imposterName=imposter,
            awarded=settings.CIVILIAN_REWARD if phase.imposter_found else settings.IMPOSTER_REWARD,
        )

    elif isinstance(phase, GameScorePhase):
        ranked = sorted(state.players, key=lambda p: p.score, reverse=True)
        view.update(
            roundNumber=state.round_number,
            ranking=[{"rank": rank, "name": p.name, "score": p.score} for rank, p in enumerate(ranked, start=1)],
        )

    return view
