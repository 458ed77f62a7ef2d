"""
Module routes/health.py
Rôle:
- Endpoint de santé (service OK + état du stockage et du catalogue de mots).
"""
from fastapi import APIRouter

from agentx.config.settings import settings
from agentx.services.word_catalog import CATALOG

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health():
    """Renvoie un OK minimal avec le nom de service et le backend de stockage."""
    return {
        "ok": len(CATALOG) > 0,
        "service": settings.APP_NAME,
        "storage": settings.STORAGE_BACKEND,
        "word_pairs": len(CATALOG),
    }
