"""League points for a ranked round.

The scheme is data, not code: a points system row from the database is
parsed into :class:`PointsConfig` and every rule below reads from it.

    rank points      config.rank_points[rank] (or its "default"), averaged
                     across the slots a tie group occupies
    performance      birdies * birdie + eagles * eagle + aces * ace
    raw total        rank points + performance
    final total      raw total * course multiplier (1.0 when disabled)

Totals are rounded half-up to two decimals.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from .errors import ConfigurationError
from .identity import ResolvedIdentity
from .ranking import RankedPlayer

logger = logging.getLogger(__name__)

DEFAULT_COURSE_TIER = 2
DEFAULT_COURSE_MULTIPLIER = 1.0
PERFORMANCE_KEYS = ("birdie", "eagle", "ace")

_TWO_PLACES = Decimal("0.01")


def round_points(value: float) -> float:
    return float(Decimal(str(value)).quantize(_TWO_PLACES, rounding=ROUND_HALF_UP))


def _number(value: Any, field_name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        try:
            return float(str(value).strip())
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"{field_name} must be a number, got {value!r}", field=field_name) from exc
    return value


def _section(config: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in config:
            return config[key]
    return None


@dataclass(frozen=True)
class PointsConfig:
    rank_points: Dict[int, float]
    default_rank_points: Optional[float]
    performance_points: Dict[str, float]
    course_multiplier_enabled: bool = True
    tie_averaging: bool = True

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> "PointsConfig":
        """Parse a points system ``config`` JSON object.

        Accepts the database's snake_case keys (``rank_points``,
        ``performance_points``, ``course_multiplier``, ``tie_breaking``) as
        well as camelCase equivalents.
        """

        if not isinstance(config, Mapping):
            raise ConfigurationError("Points system config must be an object", field="config")

        rank_section = _section(config, "rank_points", "rankPoints")
        if not isinstance(rank_section, Mapping):
            raise ConfigurationError("Points system is missing rank_points", field="rank_points")

        rank_points: Dict[int, float] = {}
        default_rank_points: Optional[float] = None
        for key, value in rank_section.items():
            if str(key).strip().lower() == "default":
                default_rank_points = _number(value, "rank_points.default")
                continue
            try:
                slot = int(str(key).strip())
            except ValueError as exc:
                raise ConfigurationError(f"Invalid rank key {key!r}", field="rank_points") from exc
            if slot < 1:
                raise ConfigurationError(f"Rank keys start at 1, got {slot}", field="rank_points")
            rank_points[slot] = _number(value, f"rank_points.{slot}")

        perf_section = _section(config, "performance_points", "performancePoints")
        if not isinstance(perf_section, Mapping):
            raise ConfigurationError(
                "Points system is missing performance_points", field="performance_points"
            )
        performance_points: Dict[str, float] = {}
        for key in PERFORMANCE_KEYS:
            if perf_section.get(key) is None:
                raise ConfigurationError(
                    f"performance_points is missing '{key}'", field=f"performance_points.{key}"
                )
            performance_points[key] = _number(perf_section[key], f"performance_points.{key}")

        multiplier_section = _section(config, "course_multiplier", "courseMultiplier") or {}
        if not isinstance(multiplier_section, Mapping):
            raise ConfigurationError("course_multiplier must be an object", field="course_multiplier")

        tie_section = _section(config, "tie_breaking", "tieBreaking") or {}
        if not isinstance(tie_section, Mapping):
            raise ConfigurationError("tie_breaking must be an object", field="tie_breaking")
        tie_averaging = bool(tie_section.get("enabled", True)) and (
            str(tie_section.get("method", "average")).lower() == "average"
        )

        return cls(
            rank_points=rank_points,
            default_rank_points=default_rank_points,
            performance_points=performance_points,
            course_multiplier_enabled=bool(multiplier_section.get("enabled", True)),
            tie_averaging=tie_averaging,
        )


@dataclass(frozen=True)
class Course:
    name: str
    tier: int = DEFAULT_COURSE_TIER
    multiplier: float = DEFAULT_COURSE_MULTIPLIER
    is_default: bool = False

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Course":
        name = str(row.get("course_name") or row.get("name") or "").strip()
        try:
            tier = int(row.get("tier") or DEFAULT_COURSE_TIER)
        except (TypeError, ValueError):
            tier = DEFAULT_COURSE_TIER
        multiplier = row.get("multiplier")
        return cls(
            name=name,
            tier=tier,
            multiplier=_number(multiplier, "course.multiplier") if multiplier is not None else DEFAULT_COURSE_MULTIPLIER,
        )


@dataclass(frozen=True)
class PointsBreakdown:
    rank_points: float
    birdie_points: float
    eagle_points: float
    ace_points: float
    performance_points: float
    raw_total: float
    course_multiplier: float
    final_total: float


@dataclass(frozen=True)
class ScoredPlayer:
    player: RankedPlayer
    points: PointsBreakdown
    identity: Optional[ResolvedIdentity] = field(default=None)

    @property
    def name(self) -> str:
        return self.player.name

    @property
    def rank(self) -> int:
        return self.player.rank

    @property
    def registered_player_id(self) -> Optional[str]:
        return self.identity.registered_player_id if self.identity else None


def rank_points_for_slot(slot: int, config: PointsConfig) -> float:
    if slot in config.rank_points:
        return config.rank_points[slot]
    if config.default_rank_points is None:
        raise ConfigurationError(
            f"No rank points configured for rank {slot} and no default set",
            field="rank_points.default",
        )
    return config.default_rank_points


def calculate_tied_rank_points(slots: Iterable[int], config: PointsConfig) -> float:
    """Mean of the rank points for every slot a tie group occupies."""

    values = [rank_points_for_slot(slot, config) for slot in slots]
    if not values:
        raise ValueError("at least one rank slot is required")
    return sum(values) / len(values)


def course_multiplier(config: PointsConfig, course: Optional[Course]) -> float:
    if not config.course_multiplier_enabled:
        return 1.0
    if course is None:
        logger.warning("Course multiplier enabled but no course supplied; using 1.0")
        return DEFAULT_COURSE_MULTIPLIER
    return float(course.multiplier)


def calculate_points(
    ranked_players: Sequence[RankedPlayer],
    config: PointsConfig,
    course: Optional[Course] = None,
    identities: Optional[Sequence[Optional[ResolvedIdentity]]] = None,
) -> List[ScoredPlayer]:
    """Attach a points breakdown to every ranked player.

    Tie groups are the players passed in that share a rank, so callers that
    drop players (unmatched names) before this step shrink the group too.
    ``identities``, when given, is aligned with ``ranked_players`` by position.
    """

    if identities is not None and len(identities) != len(ranked_players):
        raise ValueError(
            f"got {len(identities)} identities for {len(ranked_players)} ranked players"
        )

    multiplier = course_multiplier(config, course)
    group_sizes = Counter(player.rank for player in ranked_players)
    rank_points_cache: Dict[int, float] = {}
    scored: List[ScoredPlayer] = []

    for index, player in enumerate(ranked_players):
        rank = player.rank
        if rank not in rank_points_cache:
            size = group_sizes[rank]
            if size > 1 and config.tie_averaging:
                rank_points_cache[rank] = calculate_tied_rank_points(range(rank, rank + size), config)
            else:
                rank_points_cache[rank] = rank_points_for_slot(rank, config)
        rank_pts = rank_points_cache[rank]

        performance = player.performance
        birdie_points = performance.birdies * config.performance_points["birdie"]
        eagle_points = performance.eagles * config.performance_points["eagle"]
        ace_points = performance.aces * config.performance_points["ace"]
        performance_points = birdie_points + eagle_points + ace_points

        # Final total is rounded from the unrounded sum, not from raw_total.
        raw = rank_pts + performance_points
        breakdown = PointsBreakdown(
            rank_points=rank_pts,
            birdie_points=birdie_points,
            eagle_points=eagle_points,
            ace_points=ace_points,
            performance_points=performance_points,
            raw_total=round_points(raw),
            course_multiplier=multiplier,
            final_total=round_points(raw * multiplier),
        )
        logger.debug("%s: rank %d -> %.2f pts", player.name, rank, breakdown.final_total)

        identity = identities[index] if identities is not None else None
        scored.append(ScoredPlayer(player=player, points=breakdown, identity=identity))

    logger.info(
        "Calculated points for %d players (course multiplier %.2fx)", len(scored), multiplier
    )
    return scored
