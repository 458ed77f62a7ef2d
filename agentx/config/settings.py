"""
Configuration de l'application (Settings)
=========================================

Rôle
----
- Centraliser les paramètres du jeu (bornes de joueurs, barème, stockage, logs).
- Les valeurs par défaut conviennent pour une partie locale sur un seul appareil.
- Les variables peuvent être surchargées via un fichier `.env` ou l'environnement.

Intégrations
------------
- `pydantic-settings` charge automatiquement les variables d'env et `.env`.
- Les services/routers importent `from agentx.config.settings import settings`.

Stockage
--------
- `STORAGE_BACKEND="file"` : un fichier JSON par clé dans `DATA_DIR` (disque serveur).
- `STORAGE_BACKEND="memory"` : dictionnaire en mémoire (tests, démo sans disque).

Exemples de `.env`
------------------
APP_NAME="Agent-X (Staging)"
DATA_DIR="/var/opt/agentx/data"
STORAGE_BACKEND="file"
LOG_LEVEL="DEBUG"
MAX_PLAYERS=8
"""
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict
import os

_PACKAGE_DIR = os.path.dirname(os.path.dirname(__file__))


class Settings(BaseSettings):
    # Nom du service (apparaît dans /health)
    APP_NAME: str = "Agent-X"
    LOG_LEVEL: str = "INFO"

    # Répertoire des parties persistées (un JSON par session)
    # Par défaut: <repo>/agentx/data/saves
    DATA_DIR: str = os.path.join(_PACKAGE_DIR, "data", "saves")
    STORAGE_BACKEND: str = "file"

    # Catalogue des paires de mots (civil, imposteur)
    WORD_PAIRS_PATH: str = os.path.join(_PACKAGE_DIR, "data", "word_pairs.json")

    # Bornes de la table (saisie clampée dans [MIN_PLAYERS, MAX_PLAYERS])
    MIN_PLAYERS: int = 3
    MAX_PLAYERS: int = 10
    DEFAULT_PLAYER_COUNT: int = 3

    # Barème
    CIVILIAN_REWARD: int = 10
    IMPOSTER_REWARD: int = 20
    # L'imposteur gagne dès qu'il reste au plus ce nombre de joueurs actifs
    IMPOSTER_WIN_THRESHOLD: int = 2

    # Clés de stockage (identiques en cookie, côté navigateur et côté disque)
    SESSION_KEY: str = "agent_x_session_id"
    GAME_KEY_PREFIX: str = "agent_x_game_"

    # Frontends autorisés (CORS)
    ALLOWED_ORIGINS: List[str] = [
        "http://localhost:8080",
        "http://127.0.0.1:8080",
    ]

    # Paramétrage pydantic-settings :
    # - lit le fichier .env (UTF-8) si présent
    # - ignore les clés supplémentaires pour éviter les erreurs
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


# Instance unique importable partout : `settings`
settings = Settings()
