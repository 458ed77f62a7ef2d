"""
Dépendances de session (appareil)
=================================

Objectif
--------
Fournir une *dependency* FastAPI `device_session` qui retrouve la partie de
l'appareil appelant:
1) l'identifiant est lu dans le cookie `agent_x_session_id` (équivalent du
   localStorage côté navigateur),
2) à défaut, un nouvel identifiant (uuid4) est émis et posé en cookie HttpOnly
   sur la réponse, avant toute sauvegarde de partie.

Notes
-----
- Le cookie est posé sur la `Response` injectée par FastAPI: les routes doivent
  renvoyer des dicts/modèles (pas d'objet Response maison) pour qu'il soit transmis.
"""
from __future__ import annotations

from fastapi import Request, Response

from agentx.services.game_session import GameSession
from agentx.services.session_store import get_gateway, get_session
from agentx.services.storage import CookieStore


def device_session_id(request: Request, response: Response) -> str:
    """Identifiant de session de l'appareil (cookie existant ou nouvellement émis)."""
    return get_gateway().resolve_session_id(id_store=CookieStore(request, response))


def device_session(request: Request, response: Response) -> GameSession:
    """Session de jeu de l'appareil, chargée depuis le stockage au premier accès."""
    return get_session(device_session_id(request, response))
