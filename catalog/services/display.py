"""
Righe di lista per il rendering. I riferimenti deboli (club del trofeo,
vincitori dei premi) sono risolti qui con lookup lineare sulle liste correnti.
"""

from catalog.schemas.catalog import EntityRow
from catalog.schemas.entities import Club, Player, Trophy


def winner_label(trophy: Trophy, clubs: list[Club]) -> str:
    if not trophy.winner_id:
        return "None"
    club = next((c for c in clubs if c.id == trophy.winner_id), None)
    return club.name if club else "Unknown"


def awards_label(trophy: Trophy, players: list[Player]) -> str:
    if not trophy.awards:
        return "None"
    parts = []
    for award in trophy.awards:
        player_id = trophy.award_winners.get(award)
        if player_id:
            player = next((p for p in players if p.id == player_id), None)
            parts.append(f"{award} ({player.full_name if player else 'Unknown'})")
        else:
            parts.append(award)
    return ", ".join(parts)


def player_row(player: Player) -> EntityRow:
    return EntityRow(
        id=player.id,
        title=player.full_name,
        image=player.pfp,
        lines=[
            f"{player.age} yrs | {player.nationality} | {player.club}",
            f"Goals: {player.goals} | Assists: {player.assists}",
        ],
    )


def club_row(club: Club) -> EntityRow:
    return EntityRow(
        id=club.id,
        title=club.name,
        image=club.logo,
        lines=[f"President: {club.president} | Coach: {club.coach}"],
    )


def trophy_row(trophy: Trophy, clubs: list[Club], players: list[Player]) -> EntityRow:
    return EntityRow(
        id=trophy.id,
        title=trophy.name,
        image=trophy.image,
        lines=[
            f"Winner: {winner_label(trophy, clubs)}",
            f"Awards: {awards_label(trophy, players)}",
        ],
    )


def build_rows(players: list[Player], clubs: list[Club], trophies: list[Trophy]) -> dict[str, list[EntityRow]]:
    """Righe per tab, nell'ordine delle liste in memoria."""
    return {
        "players": [player_row(p) for p in players],
        "clubs": [club_row(c) for c in clubs],
        "trophies": [trophy_row(t, clubs, players) for t in trophies],
    }
