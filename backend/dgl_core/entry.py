from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple

from .stats import Hole, PlayerPerformance, calculate_stats

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlayerEntry:
    """One player's line on a scorecard.

    ``name`` is the free text written on the card and has not been matched to
    a registered player yet. ``total_score`` is strokes relative to par for
    the whole round (negative is under par).
    """

    name: str
    total_score: int
    total_strokes: int
    hole_scores: Tuple[int, ...] = ()
    performance: PlayerPerformance = field(default_factory=PlayerPerformance)

    @classmethod
    def from_hole_scores(
        cls,
        name: str,
        hole_scores: Sequence[int],
        holes: Sequence[Hole],
        total_score: Optional[int] = None,
        total_strokes: Optional[int] = None,
    ) -> "PlayerEntry":
        """Build an entry, deriving performance (and missing totals) from the holes."""

        performance = calculate_stats(hole_scores, holes)
        strokes = sum(hole_scores)
        relative = strokes - sum(hole.par for hole in holes)

        if total_strokes is None:
            total_strokes = strokes
        elif total_strokes != strokes:
            logger.warning(
                "Card total strokes for %s (%s) differ from hole-by-hole sum (%s)",
                name,
                total_strokes,
                strokes,
            )

        if total_score is None:
            total_score = relative
        elif total_score != relative:
            logger.warning(
                "Card total score for %s (%+d) differs from hole-by-hole score (%+d)",
                name,
                total_score,
                relative,
            )

        return cls(
            name=name,
            total_score=total_score,
            total_strokes=total_strokes,
            hole_scores=tuple(hole_scores),
            performance=performance,
        )
