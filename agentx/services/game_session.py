"""
Service: game_session.py
Rôle:
- Adaptateur fin autour de la machine à états: garde l'état canonique d'une session,
  applique les actions via `reduce`, déclenche la distribution automatique des cartes
  et la sauvegarde après chaque mutation.

API:
- GameSession.dispatch(action, save=None) → GameState
- GameSession.view()                      → dict (données de rendu de la phase courante)
- GameSession.save_snapshot(state, version) → écriture ordonnée (jamais un état plus ancien)
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from threading import RLock
from typing import Callable, Optional

from agentx.engine.card_generator import RandomBytes
from agentx.engine.state_machine import needs_cards, reduce, render_view
from agentx.models.actions import Action, Deal
from agentx.models.game import GameState
from .persistence import PersistenceGateway

logger = logging.getLogger(__name__)

SaveHook = Callable[[GameState], None]


@dataclass
class GameSession:
    state: GameState
    gateway: PersistenceGateway
    random_bytes: RandomBytes = os.urandom
    version: int = field(default=0, init=False)  # +1 par état produit
    _saved_version: int = field(default=-1, init=False, repr=False)
    _lock: RLock = field(default_factory=RLock, init=False, repr=False)

    @property
    def session_id(self) -> str:
        return self.state.session_id

    def dispatch(self, action: Action, save: Optional[SaveHook] = None) -> GameState:
        """
        Applique `action`. Si l'état résultant est un CardView sans cartes, la donne
        est faite dans la foulée. Chaque état effectivement modifié est sauvegardé
        une fois, en entier. `save` remplace la sauvegarde directe (ex: tâche de fond);
        il est appelé après incrément de `version`, qui numérote donc l'état reçu.
        """
        persist = save or (lambda state: self.save_snapshot(state, self.version))
        with self._lock:
            current = reduce(self.state, action, random_bytes=self.random_bytes)
            if current != self.state:
                self._advance(current)
                persist(current)
            if needs_cards(self.state):
                self._advance(reduce(self.state, Deal(), random_bytes=self.random_bytes))
                logger.info(
                    "Cards dealt",
                    extra={"session_id": self.session_id, "round_number": self.state.round_number},
                )
                persist(self.state)
            return self.state

    def _advance(self, state: GameState) -> None:
        self.state = state
        self.version += 1

    def save_snapshot(self, state: GameState, version: int) -> None:
        """
        Écrit `state` sauf si un état plus récent a déjà été écrit.
        Les sauvegardes différées peuvent s'exécuter dans le désordre; l'enregistrement
        ne recule jamais.
        """
        with self._lock:
            if version <= self._saved_version:
                logger.debug(
                    "Stale snapshot skipped",
                    extra={"session_id": self.session_id, "version": version, "saved": self._saved_version},
                )
                return
            self.gateway.save_state(state)
            self._saved_version = version

    def view(self) -> dict:
        with self._lock:
            return render_view(self.state)

    def save(self) -> None:
        with self._lock:
            self.save_snapshot(self.state, self.version)
