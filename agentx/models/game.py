"""
Models / game.py
Rôle:
- Définir l'état complet d'une partie (côté modèles Pydantic), tel qu'il est persisté.
- Les noms de champs sérialisés sont en camelCase (`sessionId`, `roundNumber`...),
  identiques à l'enregistrement côté navigateur.

Phases (union taguée sur `kind`):
- Setup                                   → saisie du nombre de joueurs et des noms
- CardView(currentPlayerIndex)            → chaque joueur regarde sa carte à tour de rôle
- Voting                                  → la table désigne un suspect
- Elimination(eliminatedIndex, wasImposter) → écran de confirmation de l'éviction
- RoundEnd(imposterFound, gameOver)       → résultat de la manche
- GameScore                               → classement

Invariants (vérifiés par `check_invariants`):
- si `cards` est non vide: une carte par joueur, une seule carte Imposter, à `imposterIndex`.
- les index portés par la phase désignent un siège du roster courant.
- hors Setup: roster entre MIN_PLAYERS et MAX_PLAYERS; après la donne: cartes présentes.
"""
from enum import Enum
from typing import Annotated, List, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from agentx.config.settings import settings


class _CamelModel(BaseModel):
    """Base commune: alias camelCase en sortie, noms Python acceptés en entrée."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CardType(str, Enum):
    NORMAL = "Normal"
    IMPOSTER = "Imposter"


class Card(_CamelModel):
    card_type: CardType = Field(alias="type")
    word: str


class Player(_CamelModel):
    name: str  # nom affiché (déjà trimé au lancement)
    score: int = Field(default=0, ge=0)
    is_eliminated: bool = False


# ---------------------------------------------------------------------------
# Phases
# ---------------------------------------------------------------------------
class SetupPhase(_CamelModel):
    kind: Literal["Setup"] = "Setup"


class CardViewPhase(_CamelModel):
    kind: Literal["CardView"] = "CardView"
    current_player_index: int = Field(default=0, ge=0)


class VotingPhase(_CamelModel):
    kind: Literal["Voting"] = "Voting"


class EliminationPhase(_CamelModel):
    kind: Literal["Elimination"] = "Elimination"
    eliminated_index: int = Field(ge=0)
    was_imposter: bool


class RoundEndPhase(_CamelModel):
    kind: Literal["RoundEnd"] = "RoundEnd"
    imposter_found: bool
    game_over: bool


class GameScorePhase(_CamelModel):
    kind: Literal["GameScore"] = "GameScore"


_DEALT_PHASES = (VotingPhase, EliminationPhase, RoundEndPhase, GameScorePhase)  # phases postérieures à la donne

GamePhase = Annotated[
    Union[SetupPhase, CardViewPhase, VotingPhase, EliminationPhase, RoundEndPhase, GameScorePhase],
    Field(discriminator="kind"),
]


# ---------------------------------------------------------------------------
# État de partie
# ---------------------------------------------------------------------------
class GameState(_CamelModel):
    """Snapshot complet d'une session, sérialisé tel quel à chaque mutation."""
    session_id: str
    phase: GamePhase = Field(default_factory=SetupPhase)
    players: List[Player] = Field(default_factory=list)
    player_count_input: str = "3"  # saisie brute, validée à la lecture
    player_names: List[str] = Field(default_factory=list)  # alignés sur les futurs joueurs
    round_number: int = Field(default=1, ge=1)
    cards: List[Card] = Field(default_factory=list)  # alignées sur `players`
    imposter_index: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def _validate_invariants(self) -> "GameState":
        self.check_invariants()
        return self

    def check_invariants(self) -> None:
        """Lève ValueError si l'état viole l'alignement cartes/joueurs ou un index de phase."""
        if self.cards:
            if len(self.cards) != len(self.players):
                raise ValueError(
                    f"cards/players misaligned: {len(self.cards)} cards for {len(self.players)} players"
                )
            if self.imposter_index >= len(self.cards):
                raise ValueError(f"imposter_index {self.imposter_index} out of range")
            imposters = [i for i, c in enumerate(self.cards) if c.card_type == CardType.IMPOSTER]
            if imposters != [self.imposter_index]:
                raise ValueError(f"expected a single imposter card at {self.imposter_index}, got {imposters}")

        phase = self.phase
        if not isinstance(phase, SetupPhase):
            if not settings.MIN_PLAYERS <= len(self.players) <= settings.MAX_PLAYERS:
                raise ValueError(
                    f"{len(self.players)} players in {phase.kind}, "
                    f"expected {settings.MIN_PLAYERS}-{settings.MAX_PLAYERS}"
                )
        if isinstance(phase, _DEALT_PHASES) and not self.cards:
            raise ValueError(f"{phase.kind} without dealt cards")
        if isinstance(phase, CardViewPhase) and phase.current_player_index > len(self.players):
            raise ValueError(f"card view index {phase.current_player_index} beyond roster")
        if isinstance(phase, EliminationPhase) and phase.eliminated_index >= len(self.players):
            raise ValueError(f"eliminated index {phase.eliminated_index} beyond roster")

    # -----------------------------
    # Lecture
    # -----------------------------
    def active_indices(self) -> List[int]:
        """Sièges des joueurs encore en jeu (non évincés)."""
        return [i for i, p in enumerate(self.players) if not p.is_eliminated]

    def active_count(self) -> int:
        return len(self.active_indices())

    def to_record(self) -> dict:
        """Enregistrement JSON-compatible (clés camelCase, phase `{kind, ...}`)."""
        return self.model_dump(mode="json", by_alias=True)
