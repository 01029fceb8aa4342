from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple, Union

from .entry import PlayerEntry
from .stats import PlayerPerformance

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RankedPlayer:
    entry: PlayerEntry
    rank: int

    @property
    def name(self) -> str:
        return self.entry.name

    @property
    def total_score(self) -> int:
        return self.entry.total_score

    @property
    def total_strokes(self) -> int:
        return self.entry.total_strokes

    @property
    def hole_scores(self) -> Tuple[int, ...]:
        return self.entry.hole_scores

    @property
    def performance(self) -> PlayerPerformance:
        return self.entry.performance


def tie_break_key(entry: PlayerEntry) -> Tuple[int, int]:
    """Lower score first; on equal score more birdies first."""

    return (entry.total_score, -entry.performance.birdies)


def rank_players(players: Iterable[Union[PlayerEntry, RankedPlayer]]) -> List[RankedPlayer]:
    """Order players and assign competition ranks (1, 1, 3, 4).

    Players with the same score and birdie count share the rank of the first
    player in their group. Passing already-ranked players re-ranks them from
    their entries, so the operation is idempotent.
    """

    entries = [p.entry if isinstance(p, RankedPlayer) else p for p in players]
    if not entries:
        return []

    ordered: Sequence[PlayerEntry] = sorted(entries, key=tie_break_key)
    ranked: List[RankedPlayer] = []
    idx = 0
    while idx < len(ordered):
        current = ordered[idx]
        rank = idx + 1
        tie_group = [current]
        idx += 1
        while idx < len(ordered) and tie_break_key(ordered[idx]) == tie_break_key(current):
            tie_group.append(ordered[idx])
            idx += 1
        if len(tie_group) > 1:
            logger.debug(
                "%d players share rank %d: %s",
                len(tie_group),
                rank,
                ", ".join(entry.name for entry in tie_group),
            )
        ranked.extend(RankedPlayer(entry=entry, rank=rank) for entry in tie_group)

    return ranked
