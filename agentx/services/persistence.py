"""
Service: persistence.py
Rôle:
- Passerelle de persistance: identifiant de session de l'appareil + enregistrement
  complet de la partie, au-dessus d'un `KeyValueStore` quelconque.

Clés:
- `agent_x_session_id`         → identifiant stable de l'appareil (uuid4)
- `agent_x_game_<session_id>`  → GameState sérialisé (JSON camelCase)

Contrat:
- resolve_session_id / load_state: une fois au démarrage, avant toute sauvegarde.
- save_state: après chaque mutation, état complet (pas de diff). Best-effort:
  un échec est journalisé puis ignoré, la partie continue.
- load_state: enregistrement absent, illisible ou incohérent → None ("repartir à neuf").
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional
from uuid import uuid4

from pydantic import ValidationError

from agentx.config.settings import settings
from agentx.models.game import GameState
from .io_utils import dumps, loads
from .storage import KeyValueStore, build_store

logger = logging.getLogger(__name__)


def game_key(session_id: str) -> str:
    return f"{settings.GAME_KEY_PREFIX}{session_id}"


@dataclass
class PersistenceGateway:
    store: KeyValueStore = field(default_factory=build_store)

    # -----------------------------
    # Identifiant de session
    # -----------------------------
    def resolve_session_id(self, id_store: Optional[KeyValueStore] = None) -> str:
        """
        Retourne l'identifiant déjà connu de l'appareil, sinon en crée un (uuid4)
        et l'enregistre avant de le renvoyer.
        `id_store` permet de le garder ailleurs que les parties (ex: cookie navigateur).
        """
        target = id_store or self.store
        try:
            existing = target.get(settings.SESSION_KEY)
        except Exception:
            logger.warning("Session id store unreadable, issuing a new id", exc_info=True)
            existing = None
        if existing and existing.strip():
            return existing.strip()

        sid = str(uuid4())
        try:
            target.set(settings.SESSION_KEY, sid)
        except Exception:
            logger.warning("Could not persist session id", exc_info=True, extra={"session_id": sid})
        logger.info("New session id issued", extra={"session_id": sid})
        return sid

    # -----------------------------
    # Chargement / Sauvegarde
    # -----------------------------
    def load_state(self, session_id: str) -> Optional[GameState]:
        """Recharge la partie de `session_id`, ou None si rien d'exploitable."""
        try:
            raw = self.store.get(game_key(session_id))
        except Exception:
            logger.warning("Game store unreadable", exc_info=True, extra={"session_id": session_id})
            return None
        if raw is None:
            return None
        try:
            state = GameState.model_validate(loads(raw))
        except (ValueError, ValidationError):
            logger.warning("Discarding corrupt game record", extra={"session_id": session_id})
            return None
        if state.session_id != session_id:
            logger.warning(
                "Game record belongs to another session",
                extra={"session_id": session_id, "record_session_id": state.session_id},
            )
            return None
        return state

    def save_state(self, state: GameState) -> None:
        """Sérialise et range l'état complet sous la clé de sa session (best-effort)."""
        try:
            self.store.set(game_key(state.session_id), dumps(state.to_record()))
        except Exception:
            logger.warning("Game save failed", exc_info=True, extra={"session_id": state.session_id})

    def delete_state(self, session_id: str) -> None:
        try:
            self.store.delete(game_key(session_id))
        except Exception:
            logger.warning("Game delete failed", exc_info=True, extra={"session_id": session_id})

    def list_saved_games(self) -> List[str]:
        """Identifiants de session pour lesquels une partie est enregistrée."""
        prefix = settings.GAME_KEY_PREFIX
        try:
            return [key[len(prefix):] for key in self.store.keys(prefix)]
        except Exception:
            logger.warning("Game store listing failed", exc_info=True)
            return []
