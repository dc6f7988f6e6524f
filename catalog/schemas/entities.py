"""Pydantic schemas per le entità del catalogo e i relativi form."""

from pydantic import BaseModel, Field

AWARD_OPTIONS = [
    "Golden Boot",
    "MVP",
    "Best Defender",
    "Best Midfielder",
    "Best Goalkeeper",
]


# --- Entità (documenti Firestore, nomi salvati come alias camelCase) ---


class Player(BaseModel):
    id: str
    full_name: str = Field("", alias="fullName")
    age: int = 0
    nationality: str = ""
    club: str = ""  # nome del club, non l'id (riferimento debole)
    goals: int = 0
    assists: int = 0
    pfp: str = ""

    class Config:
        populate_by_name = True


class Club(BaseModel):
    id: str
    name: str = ""
    logo: str = ""
    president: str = ""
    coach: str = ""

    class Config:
        populate_by_name = True


class Trophy(BaseModel):
    id: str
    name: str = ""
    image: str = ""
    winner_id: str | None = Field(None, alias="winnerId")
    awards: list[str] = Field(default_factory=list)
    award_winners: dict[str, str] = Field(default_factory=dict, alias="awardWinners")  # award -> player id

    class Config:
        populate_by_name = True


# --- Form di creazione (tutti i campi, con default) ---


class PlayerForm(BaseModel):
    full_name: str = Field("", alias="fullName")
    age: int = 0
    nationality: str = ""
    club: str = ""
    goals: int = 0
    assists: int = 0

    class Config:
        populate_by_name = True


class ClubForm(BaseModel):
    name: str = ""
    president: str = ""
    coach: str = ""


class TrophyForm(BaseModel):
    name: str = ""
    winner_id: str | None = Field(None, alias="winnerId")
    awards: list[str] = Field(default_factory=list)
    award_winners: dict[str, str] = Field(default_factory=dict, alias="awardWinners")

    class Config:
        populate_by_name = True


# --- Form di modifica: solo i campi modificabili; quelli non inviati restano invariati ---


class PlayerEdit(BaseModel):
    full_name: str | None = Field(None, alias="fullName")
    goals: int | None = None
    assists: int | None = None

    class Config:
        populate_by_name = True


class ClubEdit(BaseModel):
    name: str | None = None
    president: str | None = None
    coach: str | None = None


class TrophyEdit(BaseModel):
    name: str | None = None
    winner_id: str | None = Field(None, alias="winnerId")
    awards: list[str] | None = None
    award_winners: dict[str, str] | None = Field(None, alias="awardWinners")

    class Config:
        populate_by_name = True


def normalize_awards(awards: list[str], award_winners: dict[str, str]) -> tuple[list[str], dict[str, str]]:
    """
    Tiene solo i premi dell'elenco fisso (senza duplicati, ordine di invio)
    e i vincitori dei premi selezionati con id giocatore non vuoto.
    """
    kept: list[str] = []
    for award in awards:
        if award in AWARD_OPTIONS and award not in kept:
            kept.append(award)
    winners = {
        award: player_id.strip()
        for award, player_id in award_winners.items()
        if award in kept and player_id and player_id.strip()
    }
    return kept, winners
