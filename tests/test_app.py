from football_sim.app import SQUAD_TEMPLATE, build_default_teams, build_demo_session, format_fixtures, format_standings
from football_sim.config import DEMO_TEAMS
from football_sim.names import FIRST_NAMES, LAST_NAMES, NameGenerator


def test_team_and_squad_counts() -> None:
    teams, players = build_default_teams()
    assert len(teams) == len(DEMO_TEAMS) == 8
    assert len(players) == 8 * len(SQUAD_TEMPLATE)
    for team in teams:
        assert len(team.player_ids) == len(SQUAD_TEMPLATE)
        assert len(team.lineup) == 11
        squad = {p.player_id: p for p in players if p.team_id == team.team_id}
        assert team.lineup[0].position == "GK"
        assert squad[team.lineup[0].player_id].is_gk


def test_player_names_are_league_unique() -> None:
    _, players = build_default_teams()
    names = [player.name for player in players]
    assert len(names) == len(set(names))


def test_attributes_stay_in_range() -> None:
    _, players = build_default_teams()
    for player in players:
        assert all(1 <= value <= 200 for value in player.attributes.values())
        assert 1 <= player.contract_months <= 48


def test_default_teams_are_deterministic() -> None:
    first_teams, first_players = build_default_teams()
    second_teams, second_players = build_default_teams()
    assert [p.name for p in first_players] == [p.name for p in second_players]
    assert [p.attributes for p in first_players] == [p.attributes for p in second_players]
    assert [t.tactic for t in first_teams] == [t.tactic for t in second_teams]
    assert [p.player_id for p in first_players] == [p.player_id for p in second_players]
    assert first_players[0].player_id == "ashford-00"
    assert first_teams[0].lineup_player_ids() == second_teams[0].lineup_player_ids()


def test_demo_session_starts_in_august() -> None:
    session = build_demo_session(player_team_id="fenwick", seed=1)
    controller = session.controller
    assert controller.player_team_id == "fenwick"
    assert controller.clock.format() == "2026-08-01"
    assert controller.league.total_rounds == 14
    assert len(controller.league.fixtures()) == 56
    assert len(session.storage.standings.get_league_standings(controller.league.league_id)) == 8


def test_text_tables() -> None:
    session = build_demo_session(seed=2)
    names = {team_id: team.name for team_id, team in session.teams.items()}
    table = format_standings(session.controller, names)
    assert table.splitlines()[0].startswith("Pos Team")
    assert len(table.splitlines()) == 9
    assert "Ashford Rovers" in table

    fixtures = format_fixtures(session.controller.league, 1, names)
    assert fixtures.splitlines()[0] == "Round 1"
    assert len(fixtures.splitlines()) == 5
    assert "2026-08-08" in fixtures
    assert format_fixtures(session.controller.league, 99) == "Round 99: no fixtures"


def test_name_pool_repeats_carry_a_lap_number() -> None:
    pool_size = len({f"{first} {last}" for first in FIRST_NAMES for last in LAST_NAMES})
    gen = NameGenerator(seed=4)
    names = [gen.next_name() for _ in range(pool_size + 2)]
    assert len(set(names)) == len(names)
    assert names[pool_size] == f"{names[0]} 2"
    assert names[pool_size + 1] == f"{names[1]} 2"
    assert NameGenerator(seed=4).next_name() == names[0]
