"""
Utilitaires IO JSON (rapides) basés sur orjson.
- read_json(Path)  → Any | None (None si fichier manquant)
- write_json(Path, data) → écriture atomique (fichier temporaire puis `replace`)
- dumps/loads      → conversion str <-> objet pour les stores clé/valeur

Attention:
- orjson renvoie/attend des bytes; on lit/écrit en mode binaire.
- read_json laisse remonter `orjson.JSONDecodeError` : à l'appelant de décider.
"""
import orjson as json
from pathlib import Path
from typing import Any


def read_json(path: Path) -> Any:
    """Lit un fichier JSON (ou None s'il n'existe pas)."""
    if not path.exists():
        return None
    with path.open("rb") as f:
        return json.loads(f.read())


def write_json(path: Path, data: Any) -> None:
    """Écrit un fichier JSON sans jamais laisser un fichier à moitié écrit."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    with tmp.open("wb") as f:
        f.write(json.dumps(data))
    tmp.replace(path)


def dumps(data: Any) -> str:
    return json.dumps(data).decode("utf-8")


def loads(raw: str | bytes) -> Any:
    return json.loads(raw)
