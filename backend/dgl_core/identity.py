"""Match free-text scorecard names to registered league players.

Names are compared after normalisation (case, punctuation and spacing are
ignored). When no registered name is identical the best candidate is chosen
by string similarity:

* one name contained in the other (``"Dave"`` vs ``"Dave Smith"``) scores
  between 0.8 and 1.0 depending on how much of the longer name is covered;
* otherwise Jaro-Winkler similarity is used, computed on the names as
  written and with their words sorted, whichever is higher.

Matches at or above ``FUZZY_ACCEPT_THRESHOLD`` are accepted. Anything below
``EXACT_EQUIVALENT_THRESHOLD`` is flagged with a ``fuzzy_match`` warning so a
human can confirm it. Unmatched and ambiguous names are reported as warnings
rather than errors so the rest of the card can still be scored.
"""

from __future__ import annotations

import logging
import re
from collections import defaultdict
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

FUZZY_ACCEPT_THRESHOLD = 0.75
EXACT_EQUIVALENT_THRESHOLD = 0.95
CONTAINMENT_BASE_SCORE = 0.8

WARNING_FUZZY_MATCH = "fuzzy_match"
WARNING_UNMATCHED = "unmatched"
WARNING_AMBIGUOUS_MATCH = "ambiguous_match"
WARNING_DUPLICATE_MATCH = "duplicate_match"

_STRIP_RE = re.compile(r"[^\w\s]|_")
_SPACE_RE = re.compile(r"\s+")


class MatchType(str, Enum):
    EXACT = "exact"
    FUZZY = "fuzzy"
    NONE = "none"


@dataclass(frozen=True)
class RegisteredPlayer:
    id: str
    name: str


@dataclass(frozen=True)
class ResolvedIdentity:
    scorecard_name: str
    registered_player_id: Optional[str]
    registered_name: Optional[str]
    match_score: float
    match_type: MatchType

    @property
    def is_matched(self) -> bool:
        return self.match_type is not MatchType.NONE


@dataclass(frozen=True)
class MatchWarning:
    type: str
    scorecard_name: str
    message: str
    registered_name: Optional[str] = None
    match_score: Optional[float] = None


@dataclass(frozen=True)
class ValidationStats:
    total: int
    matched: int
    unmatched: int
    fuzzy_matches: int


@dataclass(frozen=True)
class PlayerValidation:
    matched: Tuple[ResolvedIdentity, ...]
    unmatched: Tuple[ResolvedIdentity, ...]
    warnings: Tuple[MatchWarning, ...]
    stats: ValidationStats
    # One entry per input player, in input order, matched or not.
    identities: Tuple[ResolvedIdentity, ...] = ()

    def identity_for(self, scorecard_name: str) -> Optional[ResolvedIdentity]:
        for identity in self.matched:
            if identity.scorecard_name == scorecard_name:
                return identity
        return None


def normalize_name(name: str) -> str:
    """Lowercase, drop punctuation and collapse whitespace."""

    cleaned = _STRIP_RE.sub("", (name or "").strip().lower())
    return _SPACE_RE.sub(" ", cleaned).strip()


def _jaro(a: str, b: str) -> float:
    if a == b:
        return 1.0
    len_a, len_b = len(a), len(b)
    if not len_a or not len_b:
        return 0.0

    window = max(max(len_a, len_b) // 2 - 1, 0)
    a_flags = [False] * len_a
    b_flags = [False] * len_b
    matches = 0
    for i, char in enumerate(a):
        lo = max(0, i - window)
        hi = min(i + window + 1, len_b)
        for j in range(lo, hi):
            if not b_flags[j] and b[j] == char:
                a_flags[i] = b_flags[j] = True
                matches += 1
                break

    if not matches:
        return 0.0

    a_matched = [char for char, flag in zip(a, a_flags) if flag]
    b_matched = [char for char, flag in zip(b, b_flags) if flag]
    transpositions = sum(x != y for x, y in zip(a_matched, b_matched)) / 2

    return (matches / len_a + matches / len_b + (matches - transpositions) / matches) / 3


def _jaro_winkler(a: str, b: str, prefix_scale: float = 0.1) -> float:
    jaro = _jaro(a, b)
    prefix = 0
    for x, y in zip(a[:4], b[:4]):
        if x != y:
            break
        prefix += 1
    return jaro + prefix * prefix_scale * (1 - jaro)


def _similarity_normalized(a: str, b: str) -> float:
    if not a or not b:
        return 0.0
    if a == b:
        return 1.0

    shorter, longer = (a, b) if len(a) <= len(b) else (b, a)
    if shorter in longer:
        return CONTAINMENT_BASE_SCORE + (1 - CONTAINMENT_BASE_SCORE) * len(shorter) / len(longer)

    sorted_a = " ".join(sorted(a.split()))
    sorted_b = " ".join(sorted(b.split()))
    return max(_jaro_winkler(a, b), _jaro_winkler(sorted_a, sorted_b))


def calculate_similarity(a: str, b: str) -> float:
    """Similarity of two names in [0, 1]; 1.0 when they normalise equal."""

    return _similarity_normalized(normalize_name(a), normalize_name(b))


def _player_name(player: Any) -> str:
    if isinstance(player, Mapping):
        return str(player.get("name") or "")
    return str(getattr(player, "name", "") or "")


class IdentityResolver:
    """Resolves scorecard names against a snapshot of the player registry."""

    def __init__(self, registry: Iterable[RegisteredPlayer]) -> None:
        self.registry: Tuple[RegisteredPlayer, ...] = tuple(registry)
        self._normalized: List[Tuple[str, RegisteredPlayer]] = [
            (normalize_name(player.name), player) for player in self.registry
        ]
        self._exact_index: Dict[str, List[RegisteredPlayer]] = defaultdict(list)
        for normalized, player in self._normalized:
            if normalized:
                self._exact_index[normalized].append(player)

    def resolve(self, scorecard_name: str) -> Tuple[ResolvedIdentity, List[MatchWarning]]:
        normalized = normalize_name(scorecard_name)
        warnings: List[MatchWarning] = []

        exact = self._exact_index.get(normalized) if normalized else None
        if exact:
            chosen = exact[0]
            if len({player.id for player in exact}) > 1:
                warnings.append(
                    MatchWarning(
                        type=WARNING_AMBIGUOUS_MATCH,
                        scorecard_name=scorecard_name,
                        message=(
                            f'"{scorecard_name}" matches {len(exact)} registered players exactly; '
                            f'using "{chosen.name}"'
                        ),
                        registered_name=chosen.name,
                        match_score=1.0,
                    )
                )
            return self._identity(scorecard_name, chosen, 1.0, MatchType.EXACT), warnings

        best_score = 0.0
        best: List[RegisteredPlayer] = []
        for candidate_name, player in self._normalized:
            score = _similarity_normalized(normalized, candidate_name)
            if score > best_score:
                best_score = score
                best = [player]
            elif score == best_score and score > 0 and player.id not in {p.id for p in best}:
                best.append(player)

        if best_score < FUZZY_ACCEPT_THRESHOLD or not best:
            suggestion = f' (closest: "{best[0].name}", {best_score:.0%})' if best else ""
            warnings.append(
                MatchWarning(
                    type=WARNING_UNMATCHED,
                    scorecard_name=scorecard_name,
                    message=f'No registered player found for "{scorecard_name}"{suggestion}',
                    match_score=best_score,
                )
            )
            return self._unmatched(scorecard_name, best_score), warnings

        if len(best) > 1:
            names = ", ".join(f'"{player.name}"' for player in best)
            warnings.append(
                MatchWarning(
                    type=WARNING_AMBIGUOUS_MATCH,
                    scorecard_name=scorecard_name,
                    message=f'"{scorecard_name}" matches {names} equally well ({best_score:.0%})',
                    match_score=best_score,
                )
            )
            return self._unmatched(scorecard_name, best_score), warnings

        chosen = best[0]
        if best_score >= EXACT_EQUIVALENT_THRESHOLD:
            return self._identity(scorecard_name, chosen, best_score, MatchType.EXACT), warnings

        warnings.append(
            MatchWarning(
                type=WARNING_FUZZY_MATCH,
                scorecard_name=scorecard_name,
                message=f'Fuzzy matched "{scorecard_name}" to "{chosen.name}" ({best_score:.0%})',
                registered_name=chosen.name,
                match_score=best_score,
            )
        )
        return self._identity(scorecard_name, chosen, best_score, MatchType.FUZZY), warnings

    def validate_players(self, players: Sequence[Any]) -> PlayerValidation:
        matched: List[ResolvedIdentity] = []
        unmatched: List[ResolvedIdentity] = []
        resolved: List[ResolvedIdentity] = []
        warnings: List[MatchWarning] = []

        for player in players:
            identity, player_warnings = self.resolve(_player_name(player))
            warnings.extend(player_warnings)
            resolved.append(identity)
            if identity.is_matched:
                matched.append(identity)
            else:
                logger.warning("Unmatched scorecard player: %s", identity.scorecard_name)
                unmatched.append(identity)

        by_player: Dict[str, List[ResolvedIdentity]] = defaultdict(list)
        for identity in matched:
            by_player[identity.registered_player_id or ""].append(identity)
        for identities in by_player.values():
            if len(identities) < 2:
                continue
            registered_name = identities[0].registered_name
            card_names = ", ".join(f'"{identity.scorecard_name}"' for identity in identities)
            for identity in identities:
                warnings.append(
                    MatchWarning(
                        type=WARNING_DUPLICATE_MATCH,
                        scorecard_name=identity.scorecard_name,
                        message=f'{card_names} all resolve to "{registered_name}"',
                        registered_name=registered_name,
                        match_score=identity.match_score,
                    )
                )

        stats = ValidationStats(
            total=len(players),
            matched=len(matched),
            unmatched=len(unmatched),
            fuzzy_matches=sum(1 for identity in matched if identity.match_type is MatchType.FUZZY),
        )
        logger.info(
            "Player validation: %d/%d matched (%d fuzzy, %d unmatched)",
            stats.matched,
            stats.total,
            stats.fuzzy_matches,
            stats.unmatched,
        )

        return PlayerValidation(
            matched=tuple(matched),
            unmatched=tuple(unmatched),
            warnings=tuple(warnings),
            stats=stats,
            identities=tuple(resolved),
        )

    @staticmethod
    def _identity(
        scorecard_name: str, player: RegisteredPlayer, score: float, match_type: MatchType
    ) -> ResolvedIdentity:
        return ResolvedIdentity(
            scorecard_name=scorecard_name,
            registered_player_id=player.id,
            registered_name=player.name,
            match_score=score,
            match_type=match_type,
        )

    @staticmethod
    def _unmatched(scorecard_name: str, score: float) -> ResolvedIdentity:
        return ResolvedIdentity(
            scorecard_name=scorecard_name,
            registered_player_id=None,
            registered_name=None,
            match_score=score,
            match_type=MatchType.NONE,
        )


def validate_players(players: Sequence[Any], registry: Iterable[RegisteredPlayer]) -> PlayerValidation:
    return IdentityResolver(registry).validate_players(players)
