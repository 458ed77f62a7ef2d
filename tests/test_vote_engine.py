import pytest

from agentx.engine.vote_engine import confirm_elimination, select_for_elimination
from agentx.models.actions import Confirm, Evict, InvalidActionError
from agentx.models.game import EliminationPhase, RoundEndPhase, VotingPhase


def test_evicting_imposter_rewards_every_civilian(make_session):
    session = make_session(["A", "B", "C"], imposter=1)
    assert session.state.imposter_index == 1

    session.dispatch(Evict(seat=1))
    assert session.state.phase == EliminationPhase(eliminated_index=1, was_imposter=True)
    assert [p.score for p in session.state.players] == [0, 0, 0]  # rien n'est encore acté

    session.dispatch(Confirm())
    assert [p.score for p in session.state.players] == [10, 0, 10]
    assert session.state.players[1].is_eliminated is True
    assert session.state.phase == RoundEndPhase(imposter_found=True, game_over=True)


def test_imposter_wins_when_two_players_remain(make_session):
    session = make_session(["A", "B", "C"], imposter=0)

    session.dispatch(Evict(seat=1))
    assert session.state.phase == EliminationPhase(eliminated_index=1, was_imposter=False)
    session.dispatch(Confirm())

    assert session.state.active_count() == 2
    assert [p.score for p in session.state.players] == [20, 0, 0]
    assert session.state.phase == RoundEndPhase(imposter_found=False, game_over=True)


def test_wrong_guess_with_enough_players_votes_again(make_session):
    session = make_session(["A", "B", "C", "D", "E"], imposter=4)
    cards_before = list(session.state.cards)

    session.dispatch(Evict(seat=1))
    session.dispatch(Confirm())
    assert session.state.phase == VotingPhase()
    assert session.state.round_number == 2

    session.dispatch(Evict(seat=2))
    session.dispatch(Confirm())
    assert session.state.active_count() == 3
    assert session.state.phase == VotingPhase()
    assert session.state.round_number == 3
    assert session.state.cards == cards_before
    assert session.state.imposter_index == 4
    assert all(p.score == 0 for p in session.state.players)


def test_already_eliminated_civilians_still_score(make_session):
    session = make_session(["A", "B", "C", "D", "E"], imposter=4)
    session.dispatch(Evict(seat=0))
    session.dispatch(Confirm())
    session.dispatch(Evict(seat=4))
    session.dispatch(Confirm())

    assert [p.score for p in session.state.players] == [10, 10, 10, 10, 0]
    assert session.state.players[0].is_eliminated


def test_cannot_evict_eliminated_or_unknown_seat(make_session):
    session = make_session(["A", "B", "C", "D"], imposter=3)
    session.dispatch(Evict(seat=0))
    session.dispatch(Confirm())

    with pytest.raises(InvalidActionError):
        session.dispatch(Evict(seat=0))
    with pytest.raises(InvalidActionError):
        session.dispatch(Evict(seat=9))


def test_pure_functions_leave_input_untouched(make_session):
    state = make_session(["A", "B", "C"], imposter=2).state

    pending = select_for_elimination(state, 2)
    assert state.phase == VotingPhase()

    done = confirm_elimination(pending, civilian_reward=5)
    assert [p.score for p in done.players] == [5, 5, 0]
    assert [p.is_eliminated for p in pending.players] == [False, False, False]


def test_confirm_outside_elimination_is_rejected(make_session):
    session = make_session(["A", "B", "C"])
    with pytest.raises(InvalidActionError):
        session.dispatch(Confirm())
