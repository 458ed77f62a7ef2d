"""
Module routes/game.py
Rôle:
- Endpoints de jeu pour l'appareil appelant (session identifiée par cookie).

Intégrations:
- device_session: résout/émet l'identifiant de session puis charge la partie.
- GameSession.dispatch: applique l'action; la sauvegarde part en tâche de fond
  (la réponse n'attend pas l'écriture; une sauvegarde en retard n'écrase jamais un état plus récent).

Endpoints:
- GET    /game/view   → données de rendu de la phase courante
- GET    /game/state  → enregistrement complet (tel que persisté)
- POST   /game/action → applique une action, renvoie la nouvelle vue
- GET    /game/saves  → sessions ayant une partie enregistrée
- DELETE /game        → oublie la partie de l'appareil (retour à un Setup vierge)
"""
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException

from agentx.deps.session import device_session
from agentx.models.actions import ActionPayload, InvalidActionError
from agentx.services.game_session import GameSession
from agentx.services.session_store import drop_session, get_gateway

router = APIRouter(prefix="/game", tags=["game"])


def apply_action(session: GameSession, payload: ActionPayload, background_tasks: BackgroundTasks) -> dict:
    """Applique l'action et planifie une sauvegarde par état produit (409 si action invalide)."""
    try:
        session.dispatch(
            payload.root,
            save=lambda state: background_tasks.add_task(session.save_snapshot, state, session.version),
        )
    except InvalidActionError as exc:
        raise HTTPException(status_code=409, detail={"error": "invalid_action", "reason": str(exc)})
    return session.view()


@router.get("/view")
def game_view(session: GameSession = Depends(device_session)):
    """Ce dont l'écran courant a besoin (nom + carte en CardView, classement en GameScore...)."""
    return session.view()


@router.get("/state")
def game_state(session: GameSession = Depends(device_session)):
    """Snapshot brut (clés camelCase, phase `{kind, ...}`)."""
    return session.state.to_record()


@router.post("/action")
def game_action(
    payload: ActionPayload,
    background_tasks: BackgroundTasks,
    session: GameSession = Depends(device_session),
):
    return apply_action(session, payload, background_tasks)


@router.get("/saves")
def game_saves():
    return {"sessions": get_gateway().list_saved_games()}


@router.delete("")
def forget_game(session: GameSession = Depends(device_session)):
    """Supprime l'enregistrement de la partie; l'identifiant de l'appareil est conservé."""
    sid = session.session_id
    get_gateway().delete_state(sid)
    drop_session(sid)
    return {"ok": True, "session_id": sid}
