"""
Application FastAPI : point d'entrée
====================================

Rôle
----
- Instancie l'app FastAPI, configure le CORS pour le front,
- Monte les routeurs (santé, session, jeu),
- Configure le logging et affiche la liste des routes au démarrage.

Notes
-----
- Le rendu (écrans, widgets) vit côté front: l'API n'expose que des vues par phase
  et accepte une action par geste joueur.
- ⚠️ Le middleware CORS doit être ajouté AVANT les include_router.
"""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from agentx.config.settings import settings
from agentx.routes.game import router as game_router
from agentx.routes.health import router as health_router
from agentx.routes.session import router as session_router

logger = logging.getLogger(__name__)

# --- App FastAPI principale  ---
app = FastAPI(title=settings.APP_NAME)

# ===========================
# CORS
# ===========================
# allow_credentials obligatoire: l'identifiant de session voyage en cookie
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ===========================
# Montage des routers
# ===========================
app.include_router(health_router)
app.include_router(session_router)
app.include_router(game_router)


# --- Racine utile pour "ping" simple (sans /health) ---
@app.get("/")
async def root():
    """Ping basique : permet de vérifier que l'app tourne."""
    return {"ok": True, "service": "agentx-backend"}


# --- Hook de démarrage ---
@app.on_event("startup")
async def configure_logging():
    """
    Au démarrage:
    - applique `settings.LOG_LEVEL` au logger racine,
    - liste les routes (path + méthodes) en debug (diagnostic).
    """
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Storage backend: %s (%s)", settings.STORAGE_BACKEND, settings.DATA_DIR)
    for r in app.routes:
        logger.debug("Route %s %s", getattr(r, "path", "?"), sorted(getattr(r, "methods", None) or []))
