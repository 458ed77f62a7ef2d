"""
Card generator.
Deals one round: picks a word pair from the catalog and the imposter's seat
from two separate draws of the OS randomness source, so the pair and the seat
are never derived from the same bytes.

Selection is `u64 % size` on both draws; the small modulo bias is accepted.
If the randomness source is unavailable the draw degrades to zero bytes
(first pair, seat 0) and a warning is logged instead of aborting the game.
"""
from __future__ import annotations

import logging
import os
from typing import Callable, List, Optional, Tuple

from agentx.models.game import Card, CardType
from agentx.services.word_catalog import CATALOG, WordCatalog

logger = logging.getLogger(__name__)

DRAW_SIZE = 8  # bytes per draw (little-endian u64)

RandomBytes = Callable[[int], bytes]


def _draw(random_bytes: RandomBytes, purpose: str) -> int:
    """Read one u64 from the source, or 0 if the source fails."""
    try:
        buf = random_bytes(DRAW_SIZE)
    except (OSError, NotImplementedError):
        logger.warning("Randomness source unavailable, using zero bytes", extra={"draw": purpose})
        buf = b""
    buf = bytes(buf[:DRAW_SIZE]).ljust(DRAW_SIZE, b"\x00")
    return int.from_bytes(buf, "little")


def generate_cards(
    player_count: int,
    random_bytes: RandomBytes = os.urandom,
    catalog: Optional[WordCatalog] = None,
) -> Tuple[List[Card], int]:
    """
    Return `(cards, imposter_index)` for `player_count` seats.
    Every seat gets the civilian word except `imposter_index`, which gets the paired word.
    """
    if player_count < 1:
        raise ValueError(f"player_count must be >= 1, got {player_count}")
    source = catalog if catalog is not None else CATALOG

    word_draw = _draw(random_bytes, "word_pair")
    seat_draw = _draw(random_bytes, "imposter_seat")

    civilian_word, imposter_word = source.get(word_draw)
    imposter_index = seat_draw % player_count

    cards = [
        Card(type=CardType.IMPOSTER, word=imposter_word)
        if seat == imposter_index
        else Card(type=CardType.NORMAL, word=civilian_word)
        for seat in range(player_count)
    ]
    return cards, imposter_index
