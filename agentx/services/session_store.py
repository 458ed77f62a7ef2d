"""
Session store registry
======================

Expose des helpers pour récupérer la `GameSession` d'un identifiant de session.
Les instances sont mises en cache en mémoire; au premier accès la partie est
rechargée depuis la passerelle de persistance (ou démarre sur un Setup vierge).
"""
from __future__ import annotations

import logging
from threading import RLock
from typing import Dict, Optional
from uuid import uuid4

from agentx.engine.state_machine import needs_cards, new_game_state
from agentx.models.actions import Deal
from .game_session import GameSession
from .persistence import PersistenceGateway

logger = logging.getLogger(__name__)

_SESSIONS: Dict[str, GameSession] = {}
_LOCK = RLock()
_GATEWAY: Optional[PersistenceGateway] = None


def get_gateway() -> PersistenceGateway:
    """Passerelle partagée (store configuré par `settings.STORAGE_BACKEND`)."""
    global _GATEWAY
    with _LOCK:
        if _GATEWAY is None:
            _GATEWAY = PersistenceGateway()
        return _GATEWAY


def set_gateway(gateway: PersistenceGateway) -> None:
    """Remplace la passerelle (tests) et vide le cache des sessions."""
    global _GATEWAY
    with _LOCK:
        _GATEWAY = gateway
        _SESSIONS.clear()


def get_session(session_id: str) -> GameSession:
    """
    Retourne la `GameSession` associée à `session_id`.
    Charge la partie sauvegardée si elle existe, sinon en crée une vierge (non sauvegardée
    tant qu'aucune action n'a eu lieu).
    """
    with _LOCK:
        session = _SESSIONS.get(session_id)
        if session is not None:
            return session

        gateway = get_gateway()
        state = gateway.load_state(session_id)
        if state is None:
            state = new_game_state(session_id)
            logger.info("Starting fresh game", extra={"session_id": session_id})
        else:
            logger.info(
                "Game restored",
                extra={"session_id": session_id, "phase": state.phase.kind, "round_number": state.round_number},
            )
        session = GameSession(state=state, gateway=gateway)
        if needs_cards(session.state):
            # sauvegarde interrompue entre la fin de manche et la donne
            session.dispatch(Deal())
        _SESSIONS[session_id] = session
        return session


def create_session(session_id: str | None = None) -> GameSession:
    """Crée une nouvelle session (Setup vierge) et la persiste."""
    sid = (session_id or "").strip() or str(uuid4())
    with _LOCK:
        gateway = get_gateway()
        session = GameSession(state=new_game_state(sid), gateway=gateway)
        session.save()
        _SESSIONS[sid] = session
        return session


def drop_session(session_id: str) -> None:
    """Retire une session du cache (sans supprimer l'enregistrement)."""
    with _LOCK:
        _SESSIONS.pop(session_id, None)


def list_session_ids() -> list[str]:
    """Sessions actuellement chargées en mémoire."""
    with _LOCK:
        return list(_SESSIONS.keys())


def list_all_session_ids() -> list[str]:
    """Sessions connues (cache + stockage)."""
    ids = set(list_session_ids())
    ids.update(get_gateway().list_saved_games())
    return sorted(ids)
