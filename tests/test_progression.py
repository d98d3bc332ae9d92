import random

from football_sim.models import Player
from football_sim.progression import (
    AGED,
    FATIGUE_INCREASED,
    RETIRED,
    Progression,
    age_all,
    apply_post_match,
    maybe_injure,
    recover_during_break,
    should_retire,
)


class _FixedRandom(random.Random):
    """Random whose random() always returns the same value."""

    def __init__(self, value: float) -> None:
        super().__init__(0)
        self._value = value

    def random(self) -> float:
        return self._value


def _player(**overrides) -> Player:
    return Player(name=overrides.pop("name", "Sam Reid"), position=overrides.pop("position", "CM"), team_id="t", **overrides)


def test_full_match_adds_twenty_fatigue() -> None:
    starter = _player(fatigue=10)
    sub = _player(name="Joe Bell")
    updates = apply_post_match([starter, sub], {starter.player_id: 90}, random.Random(1))
    assert starter.fatigue == 30
    assert sub.fatigue == 0
    assert updates[0].kind == FATIGUE_INCREASED
    assert updates[0].value == 20
    assert all(u.player_id == starter.player_id for u in updates)


def test_fatigue_is_capped_at_hundred() -> None:
    player = _player(fatigue=95)
    apply_post_match([player], 90, random.Random(2))
    assert player.fatigue == 100


def test_break_recovers_fatigue_and_heals() -> None:
    player = _player(fatigue=50, injury_days=4)
    recover_during_break([player], 3)
    assert player.fatigue == 20
    assert player.injury_days == 1
    assert recover_during_break([player], 0) == []


def test_aging_increments_age() -> None:
    young = _player(age=22)
    updates = age_all([young], random.Random(3))
    assert young.age == 23
    assert updates[0].kind == AGED
    assert not young.retired


def test_old_players_can_retire() -> None:
    veteran = _player(age=41)
    assert should_retire(veteran, _FixedRandom(0.5))
    assert not should_retire(_player(age=25), _FixedRandom(0.0))
    updates = age_all([veteran], _FixedRandom(0.5))
    assert veteran.retired
    assert updates[-1].kind == RETIRED


def test_injury_generator_respects_chance() -> None:
    assert maybe_injure(_player(), _FixedRandom(0.99)) is None
    already_out = _player(injury_days=5)
    assert maybe_injure(already_out, _FixedRandom(0.0)) is None


def test_injury_generator_sets_days_from_weeks() -> None:
    player = _player()
    report = maybe_injure(player, _FixedRandom(0.0))
    assert report is not None
    assert report.player_id == player.player_id
    assert report.tier in {"career-ending", "severe", "moderate", "minor"}
    assert player.injury_days == report.weeks * 7


def test_progression_bundle_defaults() -> None:
    bundle = Progression()
    assert bundle.post_match is apply_post_match
    assert bundle.aging is age_all
    assert bundle.injury is maybe_injure
