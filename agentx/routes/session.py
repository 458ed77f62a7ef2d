"""
Routes de gestion de session.

Objectifs :
- Résoudre (ou créer) l'identifiant de session de l'appareil.
- Exposer l'état et les actions d'une session désignée explicitement par son id,
  pour les clients qui ne transportent pas de cookie.
"""
from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from pydantic import BaseModel

from agentx.config.settings import settings
from agentx.deps.session import device_session_id
from agentx.models.actions import ActionPayload
from agentx.routes.game import apply_action
from agentx.services.session_store import create_session, get_session, list_all_session_ids

router = APIRouter(prefix="/session", tags=["session"])


# ---------------------------------------------------------------------------
# Modèles Pydantic
# ---------------------------------------------------------------------------
class SessionResponse(BaseModel):
    session_id: str
    phase: str
    round_number: int


class SessionListResponse(BaseModel):
    sessions: List[str]


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------
@router.post("", response_model=SessionResponse)
def session_resolve(request: Request, session_id: str = Depends(device_session_id)):
    """
    Identifiant de l'appareil (cookie existant, sinon nouvel uuid posé en cookie).
    Un appareil sans cookie reçoit une partie vierge enregistrée immédiatement.
    """
    if request.cookies.get(settings.SESSION_KEY):
        session = get_session(session_id)
    else:
        session = create_session(session_id)
    state = session.state
    return SessionResponse(session_id=session_id, phase=state.phase.kind, round_number=state.round_number)


@router.get("", response_model=SessionListResponse)
def session_list():
    return SessionListResponse(sessions=list_all_session_ids())


@router.get("/{session_id}/state")
def session_state(session_id: str) -> Dict[str, Any]:
    return get_session(session_id).state.to_record()


@router.get("/{session_id}/view")
def session_view(session_id: str) -> Dict[str, Any]:
    return get_session(session_id).view()


@router.post("/{session_id}/action")
def session_action(session_id: str, payload: ActionPayload, background_tasks: BackgroundTasks):
    return apply_action(get_session(session_id), payload, background_tasks)
