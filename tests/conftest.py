from __future__ import annotations

from typing import Callable, List

import pytest

from agentx.models.actions import Advance, Proceed, SetPlayerCount, SetPlayerName, Start
from agentx.models.game import GameState
from agentx.services.game_session import GameSession
from agentx.services.persistence import PersistenceGateway
from agentx.services.session_store import set_gateway
from agentx.services.storage import MemoryStore


def scripted_bytes(*draws: int) -> Callable[[int], bytes]:
    """Source d'aléa rejouable: chaque appel renvoie le tirage suivant (u64 little-endian)."""
    queue: List[int] = list(draws)

    def _next(size: int) -> bytes:
        value = queue.pop(0) if queue else 0
        return value.to_bytes(size, "little")

    return _next


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture(autouse=True)
def gateway(store) -> PersistenceGateway:
    """Aucun test n'écrit dans DATA_DIR: la passerelle partagée pointe sur un store mémoire."""
    gw = PersistenceGateway(store=store)
    set_gateway(gw)
    yield gw
    set_gateway(PersistenceGateway(store=MemoryStore()))


def start_game(session: GameSession, names: List[str]) -> GameSession:
    session.dispatch(SetPlayerCount(value=str(len(names))))
    for index, name in enumerate(names):
        session.dispatch(SetPlayerName(index=index, name=name))
    session.dispatch(Start())
    return session


def to_voting(session: GameSession) -> GameSession:
    for _ in session.state.players:
        session.dispatch(Advance())
    session.dispatch(Proceed())
    return session


@pytest.fixture
def make_session(gateway) -> Callable[..., GameSession]:
    """Fabrique une session jouée jusqu'au vote, imposteur au siège `imposter`."""

    def _make(names: List[str], imposter: int = 0, word: int = 0, voting: bool = True) -> GameSession:
        session = GameSession(
            state=GameState(session_id="test-session"),
            gateway=gateway,
            random_bytes=scripted_bytes(word, imposter),
        )
        start_game(session, names)
        if voting:
            to_voting(session)
        return session

    return _make
