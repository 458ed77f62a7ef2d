"""
Models / actions.py
Rôle:
- Décrire les gestes joueurs acceptés par la machine à états (un geste = une action).
- Union taguée sur `type`, directement utilisable comme corps de requête HTTP.

Exemples:
- {"type": "set_player_count", "value": "5"}
- {"type": "set_player_name", "index": 0, "name": "Alice"}
- {"type": "evict", "seat": 2}
"""
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, RootModel


class SetPlayerCount(BaseModel):
    type: Literal["set_player_count"] = "set_player_count"
    value: str = ""  # texte brut du champ (parsé/clampé par le moteur)


class SetPlayerName(BaseModel):
    type: Literal["set_player_name"] = "set_player_name"
    index: int = Field(ge=0)
    name: str = ""


class Start(BaseModel):
    type: Literal["start"] = "start"


class Deal(BaseModel):
    """Étape automatique: distribue les cartes à l'entrée en CardView."""
    type: Literal["deal"] = "deal"


class Advance(BaseModel):
    type: Literal["advance"] = "advance"


class Proceed(BaseModel):
    type: Literal["proceed"] = "proceed"


class Evict(BaseModel):
    type: Literal["evict"] = "evict"
    seat: int = Field(ge=0)


class Confirm(BaseModel):
    type: Literal["confirm"] = "confirm"


class ViewScores(BaseModel):
    type: Literal["view_scores"] = "view_scores"


class NextRound(BaseModel):
    type: Literal["next_round"] = "next_round"


class NewGame(BaseModel):
    type: Literal["new_game"] = "new_game"


Action = Annotated[
    Union[
        SetPlayerCount,
        SetPlayerName,
        Start,
        Deal,
        Advance,
        Proceed,
        Evict,
        Confirm,
        ViewScores,
        NextRound,
        NewGame,
    ],
    Field(discriminator="type"),
]


class InvalidActionError(ValueError):
    """Action hors de la phase courante, ou index qui ne désigne pas un siège valide."""


class ActionPayload(RootModel[Action]):
    """Corps de requête HTTP: une action brute, discriminée par `type`."""
