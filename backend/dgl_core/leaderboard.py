from __future__ import annotations

from typing import List, Optional

from .pipeline import RoundResult
from .points import ScoredPlayer


def _format_score(total_score: int) -> str:
    if total_score == 0:
        return "E"
    return f"{total_score:+d}"


def format_leaderboard(result: RoundResult) -> str:
    """Fixed-width text summary of a scored round.

    Every player on the card is listed in rank order; players that could not
    be matched to the registry show ``-`` for points.
    """

    header = f"{result.scorecard.course_name} - {result.scorecard.date.isoformat()}"
    lines: List[str] = [
        header,
        "Rank  Player              Registered          Score  Birdies  Points",
    ]
    # result.scored keeps the order of result.players with unmatched players removed.
    next_scored = 0
    for player in result.players:
        scored: Optional[ScoredPlayer] = None
        if next_scored < len(result.scored) and result.scored[next_scored].player is player:
            scored = result.scored[next_scored]
            next_scored += 1
        registered = scored.identity.registered_name if scored and scored.identity else ""
        points = f"{scored.points.final_total:.2f}" if scored else "-"
        lines.append(
            f"{str(player.rank).ljust(6)}{player.name[:19].ljust(20)}{(registered or '')[:19].ljust(20)}"
            f"{_format_score(player.total_score).ljust(7)}{str(player.performance.birdies).ljust(9)}{points}"
        )
    return "\n".join(lines)
