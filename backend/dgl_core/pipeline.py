from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Tuple, Union

from .configuration import ScoringConfiguration
from .entry import PlayerEntry
from .identity import PlayerValidation, RegisteredPlayer, ResolvedIdentity, validate_players
from .points import ScoredPlayer, calculate_points
from .ranking import RankedPlayer, rank_players
from .scorecard import Scorecard, parse_scorecard

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProcessedScorecard:
    scorecard: Scorecard
    players: Tuple[RankedPlayer, ...]


@dataclass(frozen=True)
class RoundResult:
    scorecard: Scorecard
    players: Tuple[RankedPlayer, ...]
    validation: PlayerValidation
    scored: Tuple[ScoredPlayer, ...]


def build_entries(scorecard: Scorecard) -> List[PlayerEntry]:
    """Recompute every player's stats from their hole-by-hole scores."""

    return [
        PlayerEntry.from_hole_scores(
            name=player.name,
            hole_scores=player.hole_scores,
            holes=scorecard.holes,
            total_score=player.total_score,
            total_strokes=player.total_strokes,
        )
        for player in scorecard.players
    ]


def process_scorecard(data: Union[Mapping[str, Any], Scorecard]) -> ProcessedScorecard:
    """Validate a scorecard, compute stats and rank its players."""

    scorecard = data if isinstance(data, Scorecard) else parse_scorecard(data)
    ranked = rank_players(build_entries(scorecard))
    logger.info(
        "Processed scorecard for %s (%s): %d players, leader %s",
        scorecard.course_name,
        scorecard.date.isoformat(),
        len(ranked),
        ranked[0].name if ranked else "-",
    )
    return ProcessedScorecard(scorecard=scorecard, players=tuple(ranked))


def score_round(
    data: Union[Mapping[str, Any], Scorecard],
    registry: Iterable[RegisteredPlayer],
    configuration: ScoringConfiguration,
) -> RoundResult:
    """Run the whole pipeline: stats, ranking, identity resolution and points.

    Ranks are assigned across every player on the card. Only players matched
    to a registered identity receive points.
    """

    processed = process_scorecard(data)
    validation = validate_players(processed.players, registry)

    eligible: List[RankedPlayer] = []
    identities: List[ResolvedIdentity] = []
    for player, identity in zip(processed.players, validation.identities):
        if identity.is_matched:
            eligible.append(player)
            identities.append(identity)
    skipped = len(processed.players) - len(eligible)
    if skipped:
        logger.warning("Excluding %d unmatched player(s) from points", skipped)

    scored = calculate_points(
        eligible,
        configuration.points,
        configuration.course,
        identities=identities,
    )
    return RoundResult(
        scorecard=processed.scorecard,
        players=processed.players,
        validation=validation,
        scored=tuple(scored),
    )
