"""Disc golf league scoring core: stats, ranking, identity and points."""

from .configuration import ScoringConfiguration, load_configuration
from .entry import PlayerEntry
from .errors import ConfigurationError, ScoringError, ValidationError
from .identity import IdentityResolver, RegisteredPlayer, validate_players
from .loader import DataStore
from .pipeline import process_scorecard, score_round
from .points import Course, PointsConfig, calculate_points
from .ranking import RankedPlayer, rank_players
from .stats import Hole, calculate_stats, get_first_birdie_hole

__all__ = [
    "ConfigurationError",
    "Course",
    "DataStore",
    "Hole",
    "IdentityResolver",
    "PlayerEntry",
    "PointsConfig",
    "RankedPlayer",
    "RegisteredPlayer",
    "ScoringConfiguration",
    "ScoringError",
    "ValidationError",
    "calculate_points",
    "calculate_stats",
    "get_first_birdie_hole",
    "load_configuration",
    "process_scorecard",
    "rank_players",
    "score_round",
    "validate_players",
]
