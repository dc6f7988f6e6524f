from catalog.schemas.entities import Club, Player, Trophy
from catalog.services.display import awards_label, build_rows, player_row, winner_label

CLUBS = [Club(id="c1", name="Riverside FC", president="A. Smith", coach="J. Doe")]
PLAYERS = [Player(id="p1", fullName="Marco Rossi", age=24, nationality="Italy", club="Riverside FC", goals=10, assists=4)]


def test_player_row_lines():
    row = player_row(PLAYERS[0])
    assert row.title == "Marco Rossi"
    assert row.lines == ["24 yrs | Italy | Riverside FC", "Goals: 10 | Assists: 4"]


def test_winner_label():
    assert winner_label(Trophy(id="t", winnerId="c1"), CLUBS) == "Riverside FC"
    assert winner_label(Trophy(id="t", winnerId="gone"), CLUBS) == "Unknown"
    assert winner_label(Trophy(id="t"), CLUBS) == "None"


def test_awards_label():
    trophy = Trophy(
        id="t",
        awards=["Golden Boot", "MVP", "Best Defender"],
        awardWinners={"Golden Boot": "p1", "MVP": "missing"},
    )
    assert awards_label(trophy, PLAYERS) == "Golden Boot (Marco Rossi), MVP (Unknown), Best Defender"
    assert awards_label(Trophy(id="t"), PLAYERS) == "None"


def test_build_rows_trophy_lines():
    trophy = Trophy(id="t1", name="League Cup", image="img", winnerId="c1", awards=["MVP"], awardWinners={"MVP": "p1"})
    rows = build_rows(PLAYERS, CLUBS, [trophy])
    assert rows["trophies"][0].lines == ["Winner: Riverside FC", "Awards: MVP (Marco Rossi)"]
    assert rows["clubs"][0].lines == ["President: A. Smith | Coach: J. Doe"]
    assert len(rows["players"]) == 1
