"""
Service: storage.py
Rôle:
- Port de stockage clé/valeur (chaînes) derrière lequel se cache le support réel.
- Le moteur et la passerelle de persistance ne savent jamais où vivent les données.

Implémentations:
- FileStore   : un fichier JSON par clé dans `settings.DATA_DIR` (disque serveur).
- MemoryStore : dictionnaire en mémoire (tests, démo sans disque).
- CookieStore : cookies de la requête/réponse HTTP, équivalent du localStorage
                du navigateur pour l'identifiant de session de l'appareil.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from threading import RLock
from typing import Dict, List, Optional, Protocol
from urllib.parse import quote

from fastapi import Request, Response

from agentx.config.settings import settings
from .io_utils import read_json, write_json


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...

    def keys(self, prefix: str = "") -> List[str]: ...


@dataclass
class MemoryStore:
    _lock: RLock = field(default_factory=RLock, init=False, repr=False)
    data: Dict[str, str] = field(default_factory=dict)

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self.data[key] = value

    def delete(self, key: str) -> None:
        with self._lock:
            self.data.pop(key, None)

    def keys(self, prefix: str = "") -> List[str]:
        with self._lock:
            return sorted(k for k in self.data if k.startswith(prefix))


@dataclass
class FileStore:
    """
    Stockage disque: `<root>/<clé>.json` contient `{"key": ..., "value": ...}`.
    La clé d'origine est conservée dans le fichier; le nom de fichier est la clé
    percent-encodée (injectif: deux clés distinctes ne partagent jamais un fichier).
    """
    root: Path = field(default_factory=lambda: Path(settings.DATA_DIR))
    _lock: RLock = field(default_factory=RLock, init=False, repr=False)

    def _path(self, key: str) -> Path:
        return self.root / f"{quote(key, safe='')}.json"

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            entry = read_json(self._path(key))
        if not isinstance(entry, dict):
            return None
        value = entry.get("value")
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        with self._lock:
            write_json(self._path(key), {"key": key, "value": value})

    def delete(self, key: str) -> None:
        with self._lock:
            self._path(key).unlink(missing_ok=True)

    def keys(self, prefix: str = "") -> List[str]:
        if not self.root.exists():
            return []
        found: List[str] = []
        with self._lock:
            for path in self.root.glob("*.json"):
                try:
                    entry = read_json(path)
                except ValueError:
                    continue
                key = entry.get("key") if isinstance(entry, dict) else None
                if isinstance(key, str) and key.startswith(prefix):
                    found.append(key)
        return sorted(found)


class CookieStore:
    """
    Adaptateur cookies: lecture dans la requête, écriture dans la réponse.
    Valable le temps d'une requête; les écritures sont aussi visibles en relecture.
    """

    MAX_AGE = 365 * 24 * 3600  # 1 an

    def __init__(self, request: Request, response: Response):
        self.request = request
        self.response = response
        self._pending: Dict[str, Optional[str]] = {}

    def get(self, key: str) -> Optional[str]:
        if key in self._pending:
            return self._pending[key]
        return self.request.cookies.get(key) or None

    def set(self, key: str, value: str) -> None:
        self._pending[key] = value
        self.response.set_cookie(key, value, max_age=self.MAX_AGE, httponly=True, samesite="lax")

    def delete(self, key: str) -> None:
        self._pending[key] = None
        self.response.delete_cookie(key)

    def keys(self, prefix: str = "") -> List[str]:
        names = set(self.request.cookies) | set(self._pending)
        return sorted(k for k in names if k.startswith(prefix) and self.get(k) is not None)


def build_store(backend: Optional[str] = None) -> KeyValueStore:
    """Instancie le store configuré (`settings.STORAGE_BACKEND`)."""
    kind = (backend or settings.STORAGE_BACKEND).strip().lower()
    if kind == "memory":
        return MemoryStore()
    if kind == "file":
        return FileStore()
    raise ValueError(f"Unknown storage backend: {kind}")
