"""
Descrittori per tipo di entità.
Un solo flusso create/edit/delete parametrizzato: collezione, campo immagine,
modelli, campi obbligatori e modificabili.
"""

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel

from catalog.schemas.entities import (
    Club,
    ClubEdit,
    ClubForm,
    Player,
    PlayerEdit,
    PlayerForm,
    Trophy,
    TrophyEdit,
    TrophyForm,
)


@dataclass(frozen=True)
class EntitySpec:
    kind: str  # anche nome della collezione e prefisso dei path immagine
    label: str
    model: type[BaseModel]
    create_form: type[BaseModel]
    edit_form: type[BaseModel]
    image_field: str
    required: tuple[str, ...]
    editable: tuple[str, ...]
    image_noun: str = "an image"

    @property
    def collection(self) -> str:
        return self.kind

    @property
    def title(self) -> str:
        return self.label.capitalize()

    @property
    def missing_fields_message(self) -> str:
        return f"Please fill all required fields and select {self.image_noun}."

    def alias(self, field: str) -> str:
        return self.model.model_fields[field].alias or field

    def to_document(self, entity: BaseModel) -> dict[str, Any]:
        """Documento da inserire: tutti i campi tranne id, senza valori None."""
        return entity.model_dump(by_alias=True, exclude={"id"}, exclude_none=True)

    def to_update(self, entity: BaseModel) -> dict[str, Any]:
        """Campi sovrascritti da una modifica: modificabili + immagine (None -> null)."""
        fields = self.editable + (self.image_field,)
        return {self.alias(field): getattr(entity, field) for field in fields}


PLAYERS = EntitySpec(
    kind="players",
    label="player",
    model=Player,
    create_form=PlayerForm,
    edit_form=PlayerEdit,
    image_field="pfp",
    required=("full_name", "club"),
    editable=("full_name", "goals", "assists"),
)

CLUBS = EntitySpec(
    kind="clubs",
    label="club",
    model=Club,
    create_form=ClubForm,
    edit_form=ClubEdit,
    image_field="logo",
    required=("name", "president", "coach"),
    editable=("name", "president", "coach"),
    image_noun="a logo",
)

TROPHIES = EntitySpec(
    kind="trophies",
    label="trophy",
    model=Trophy,
    create_form=TrophyForm,
    edit_form=TrophyEdit,
    image_field="image",
    required=("name",),
    editable=("name", "winner_id", "awards", "award_winners"),
)

ENTITY_SPECS: dict[str, EntitySpec] = {spec.kind: spec for spec in (PLAYERS, CLUBS, TROPHIES)}


def get_spec(kind: str) -> EntitySpec:
    """Raises KeyError per tipo sconosciuto."""
    return ENTITY_SPECS[kind]
