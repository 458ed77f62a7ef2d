"""
Service: word_catalog.py
Rôle:
- Charger en mémoire le référentiel des paires de mots (catalogue statique).
- Exposer `CATALOG.get(index)` et `CATALOG.all()` pour le générateur de cartes.

Fichier source:
- agentx/data/word_pairs.json → {"pairs": [["Coffee", "Tea"], ...]}
  (premier mot = mot des civils, second = mot de l'imposteur)

Remarque:
- L'ordre du fichier compte: la paire est tirée par index (modulo la taille).
"""
from pathlib import Path
from typing import List, Tuple

from agentx.config.settings import settings
from .io_utils import read_json

CATALOG_PATH = Path(settings.WORD_PAIRS_PATH)

WordPair = Tuple[str, str]


class WordCatalogError(RuntimeError):
    """Catalogue absent ou vide: erreur de packaging, pas d'état de jeu."""


class WordCatalog:
    """Catalogue statique des paires (civil, imposteur)."""

    def __init__(self, path: Path = CATALOG_PATH):
        self.path = path
        self.pairs: List[WordPair] = []
        self.load()

    def load(self) -> None:
        """Charge le JSON; les entrées mal formées sont ignorées."""
        raw = read_json(self.path) or {"pairs": []}
        self.pairs = [
            (str(entry[0]), str(entry[1]))
            for entry in raw.get("pairs", [])
            if isinstance(entry, list) and len(entry) == 2
        ]

    def get(self, index: int) -> WordPair:
        if not self.pairs:
            raise WordCatalogError(f"word catalog is empty ({self.path})")
        return self.pairs[index % len(self.pairs)]

    def all(self) -> List[WordPair]:
        return list(self.pairs)

    def __len__(self) -> int:
        return len(self.pairs)


CATALOG = WordCatalog()
