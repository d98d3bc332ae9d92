import pytest

from football_sim.engine import MatchResult
from football_sim.errors import StorageError
from football_sim.models import Player, Team
from football_sim.notifications import Category, Inbox, Priority, contract_priority
from football_sim.schedule import FixtureSlot
from football_sim.storage import InMemoryStorage


def test_fixture_table_round_trip_and_delete() -> None:
    storage = InMemoryStorage()
    storage.fixtures.create("lg", FixtureSlot("match_0_0", "a", "b", round_number=1))
    storage.fixtures.create("lg", FixtureSlot("match_1_0", "b", "a", round_number=2))
    storage.fixtures.create("other", FixtureSlot("x_0_0", "c", "d", round_number=1))

    storage.fixtures.mark_played("match_0_0")
    assert storage.fixtures.get("match_0_0").played
    assert [f.fixture_id for f in storage.fixtures.get_by_round("lg", 2)] == ["match_1_0"]
    assert storage.fixtures.delete_by_league("lg") == 2
    assert storage.fixtures.get_by_league("lg") == []
    assert len(storage.fixtures.get_by_league("other")) == 1


def test_stored_fixtures_are_copies() -> None:
    storage = InMemoryStorage()
    fixture = FixtureSlot("match_0_0", "a", "b", round_number=1)
    storage.fixtures.create("lg", fixture)
    fixture.played = True
    assert not storage.fixtures.get("match_0_0").played


def test_unknown_ids_raise_storage_error() -> None:
    storage = InMemoryStorage()
    with pytest.raises(StorageError):
        storage.fixtures.get("missing")
    with pytest.raises(StorageError):
        storage.fixtures.mark_played("missing")
    with pytest.raises(StorageError):
        storage.standings.get_by_team("missing")
    with pytest.raises(StorageError):
        storage.matches.get("missing")
    with pytest.raises(StorageError):
        storage.players.get("missing")
    with pytest.raises(StorageError):
        storage.teams.get("missing")


def test_standings_update_and_league_filter() -> None:
    storage = InMemoryStorage()
    storage.standings.create_default("a", "lg")
    storage.standings.create_default("b", "lg")
    storage.standings.create_default("z", "elsewhere")

    record = storage.standings.get_by_team("a")
    record.register_result(2, 1)
    assert storage.standings.get_by_team("a").points == 0
    storage.standings.update(record)
    assert storage.standings.get_by_team("a").points == 3
    assert {r.team_id for r in storage.standings.get_league_standings("lg")} == {"a", "b"}


def test_match_and_squad_lookups() -> None:
    storage = InMemoryStorage()
    team = Team(team_id="a", name="Alpha")
    player = Player(name="Sam Reid", position="ST", team_id="a")
    storage.seed([team], [player])
    result = MatchResult(league_id="lg", home_team_id="a", away_team_id="b", round_number=3)
    storage.matches.save(result)

    assert storage.teams.get("a") is team
    assert storage.players.get_by_team("a") == [player]
    assert storage.matches.get_by_team("b") == [result]
    assert storage.matches.get_by_league_and_round("lg", 3) == [result]
    assert storage.matches.get_by_league_and_round("lg", 4) == []


def test_inbox_tracks_unread_and_priority() -> None:
    inbox = Inbox()
    inbox.append("Next Round", "Round 2", Category.NEWS, Priority.LOW)
    inbox.append("Contract Expiring", "Sam Reid", Category.CONTRACT, Priority.URGENT)
    assert len(inbox) == 2
    assert inbox.unread_count() == 2
    assert inbox.by_priority()[0].title == "Contract Expiring"

    first = inbox.all()[0]
    assert inbox.mark_read(first.notification_id)
    assert not inbox.mark_read("missing")
    assert inbox.unread_count() == 1
    assert [n.title for n in inbox.by_category(Category.CONTRACT)] == ["Contract Expiring"]
    inbox.mark_all_read()
    assert inbox.unread() == []


def test_contract_priority() -> None:
    assert contract_priority(0) is Priority.URGENT
    assert contract_priority(1) is Priority.HIGH
