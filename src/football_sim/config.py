"""Static simulation configuration constants."""

# Calendar: the season runs from 1 August to 31 May.
SEASON_START_MONTH = 8
SEASON_START_DAY = 1
SEASON_END_MONTH = 5
SEASON_END_DAY = 31
SUMMER_WINDOW_MONTHS: tuple[int, ...] = (6, 7, 8)
WINTER_WINDOW_MONTHS: tuple[int, ...] = (1,)
DAYS_BETWEEN_ROUNDS = 7

BYE_TEAM_ID = "BYE"
REVERSE_FIXTURE_SUFFIX = "_rev"

# Team strength and score model.
DEFAULT_TEAM_STRENGTH = 50
STRONGER_SIDE_BASE_XG = 2.0
STRONGER_SIDE_DIFF_DIVISOR = 50.0
WEAKER_SIDE_BASE_XG = 1.0
WEAKER_SIDE_DIFF_DIVISOR = 100.0
SCORE_NOISE = 0.5
MAX_GOALS = 5
# Expected goals shifted per unit of tactical modifier (modifier is +-0.25).
TACTICAL_GOAL_WEIGHT = 1.0

MATCH_MINUTES = 90
ATTACKING_POSITIONS = frozenset({"ST", "CF", "LW", "RW", "AM"})
MAX_YELLOW_CARDS = 3

# Approximate statistics ranges (inclusive).
SHOTS_BONUS_RANGE = (5, 14)
PASSES_BASE = 100
PASSES_BONUS_RANGE = (50, 149)
CORNERS_RANGE = (2, 7)
FOULS_RANGE = (10, 19)
OFFSIDES_RANGE = (1, 5)

# Player match ratings.
RATING_MIN = 6.0
RATING_MAX = 10.0
RATING_ABILITY_DIVISOR = 20.0
RATING_GK_PER_GOAL_CONCEDED = 0.5
RATING_OUTFIELD_PER_TEAM_GOAL = 0.3
RATING_FATIGUE_WEIGHT = 0.03
RATING_MORALE_WEIGHT = 0.02

# Standings.
POINTS_FOR_WIN = 3
POINTS_FOR_DRAW = 1

# Post-match progression and random events.
FATIGUE_PER_FULL_MATCH = 20
POST_MATCH_INJURY_CHANCE = 0.02
POST_MATCH_INJURY_DAYS = (1, 21)
MORALE_SWING_CHANCE = 0.10
MORALE_SWING = 5
STARTER_INJURY_CHANCE = 0.05
# (label, cumulative upper bound on a 0-99 roll, weeks out range)
STARTER_INJURY_TIERS: tuple[tuple[str, int, tuple[int, int]], ...] = (
    ("career-ending", 10, (52, 104)),
    ("severe", 30, (9, 26)),
    ("moderate", 60, (4, 8)),
    ("minor", 100, (1, 3)),
)
RETIREMENT_AGE = 33
# (max age inclusive, yearly retirement chance) from RETIREMENT_AGE upwards.
RETIREMENT_CHANCES: tuple[tuple[int, float], ...] = ((35, 0.1), (38, 0.3), (40, 0.6), (200, 0.9))
LOW_ABILITY_THRESHOLD = 100
LOW_ABILITY_RETIREMENT_BONUS = 0.2
BREAK_FATIGUE_RECOVERY_PER_DAY = 10
CONTRACT_WARNING_MONTHS = 1

# Demo league used by the app helpers and the HTTP service.
DEMO_LEAGUE_ID = "demo-league"
DEMO_LEAGUE_NAME = "Premier Demo League"
DEMO_START_YEAR = 2026
DEMO_TEAMS: tuple[tuple[str, str, float], ...] = (
    ("ashford", "Ashford Rovers", 0.78),
    ("brackley", "Brackley Town", 0.64),
    ("carlow", "Carlow Athletic", 0.71),
    ("dunmore", "Dunmore United", 0.55),
    ("eastleigh", "Eastleigh Harriers", 0.60),
    ("fenwick", "Fenwick City", 0.82),
    ("glenrock", "Glenrock Albion", 0.50),
    ("halston", "Halston Wanderers", 0.67),
)
