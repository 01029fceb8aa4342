"""Per-hole performance classification for a single player's round."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from .errors import ValidationError

# Reported as the first birdie hole when a player made no birdies.
NO_BIRDIE_HOLE = 999


@dataclass(frozen=True)
class Hole:
    number: int
    par: int
    distance: Optional[int] = None


class HoleResult(str, Enum):
    ACE = "ace"
    EAGLE = "eagle"
    BIRDIE = "birdie"
    PAR = "par"
    BOGEY = "bogey"
    DOUBLE_BOGEY_OR_WORSE = "double_bogey_or_worse"


@dataclass(frozen=True)
class PlayerPerformance:
    aces: int = 0
    eagles: int = 0
    birdies: int = 0
    pars: int = 0
    bogeys: int = 0
    double_bogeys_or_worse: int = 0
    first_birdie_hole: int = NO_BIRDIE_HOLE

    @property
    def holes_played(self) -> int:
        return (
            self.aces
            + self.eagles
            + self.birdies
            + self.pars
            + self.bogeys
            + self.double_bogeys_or_worse
        )


def classify_hole(strokes: int, par: int) -> HoleResult:
    """Classify one hole. A hole-in-one is an ace whatever the par."""

    if strokes == 1:
        return HoleResult.ACE

    diff = strokes - par
    if diff <= -2:
        # Albatross and better are folded into eagle.
        return HoleResult.EAGLE
    if diff == -1:
        return HoleResult.BIRDIE
    if diff == 0:
        return HoleResult.PAR
    if diff == 1:
        return HoleResult.BOGEY
    return HoleResult.DOUBLE_BOGEY_OR_WORSE


def _check_lengths(hole_scores: Sequence[int], holes: Sequence[Hole]) -> None:
    if len(hole_scores) != len(holes):
        raise ValidationError(
            f"hole scores cover {len(hole_scores)} holes but the round has {len(holes)}",
            field="hole_scores",
        )


def get_first_birdie_hole(hole_scores: Sequence[int], holes: Sequence[Hole]) -> int:
    """Return the number of the first hole scored as a birdie, or NO_BIRDIE_HOLE."""

    _check_lengths(hole_scores, holes)
    for strokes, hole in zip(hole_scores, holes):
        if classify_hole(strokes, hole.par) is HoleResult.BIRDIE:
            return hole.number
    return NO_BIRDIE_HOLE


def calculate_stats(hole_scores: Sequence[int], holes: Sequence[Hole]) -> PlayerPerformance:
    _check_lengths(hole_scores, holes)

    counts = {result: 0 for result in HoleResult}
    for strokes, hole in zip(hole_scores, holes):
        counts[classify_hole(strokes, hole.par)] += 1

    return PlayerPerformance(
        aces=counts[HoleResult.ACE],
        eagles=counts[HoleResult.EAGLE],
        birdies=counts[HoleResult.BIRDIE],
        pars=counts[HoleResult.PAR],
        bogeys=counts[HoleResult.BOGEY],
        double_bogeys_or_worse=counts[HoleResult.DOUBLE_BOGEY_OR_WORSE],
        first_birdie_hole=get_first_birdie_hole(hole_scores, holes),
    )
