from __future__ import annotations

import datetime as dt
import logging
import re
from dataclasses import dataclass
from typing import Annotated, Any, List, Mapping, Optional, Tuple

import pydantic
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from .errors import ValidationError
from .stats import Hole

logger = logging.getLogger(__name__)

MIN_PLAYERS = 4

_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

Strokes = Annotated[int, Field(ge=1)]


class HolePayload(BaseModel):
    number: int = Field(validation_alias=AliasChoices("hole", "number"), ge=1)
    par: int = Field(ge=1)
    distance: Optional[int] = None

    model_config = ConfigDict(populate_by_name=True)


class PlayerPayload(BaseModel):
    name: str = Field(min_length=1)
    total_score: Optional[int] = Field(default=None, alias="totalScore")
    total_strokes: Optional[int] = Field(default=None, alias="totalStrokes", ge=0)
    hole_by_hole: List[Strokes] = Field(alias="holeByHole")

    model_config = ConfigDict(populate_by_name=True)


class ScorecardPayload(BaseModel):
    course_name: str = Field(validation_alias=AliasChoices("courseName", "course_name", "course"), min_length=1)
    layout_name: Optional[str] = Field(default=None, validation_alias=AliasChoices("layoutName", "layout_name"))
    date: dt.date
    holes: List[HolePayload]
    players: List[PlayerPayload]

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("date", mode="before")
    @classmethod
    def _iso_date(cls, value: Any) -> Any:
        if isinstance(value, dt.date):
            return value
        if not isinstance(value, str) or not _ISO_DATE_RE.match(value.strip()):
            raise ValueError(f"expected YYYY-MM-DD, got {value!r}")
        return dt.date.fromisoformat(value.strip())


@dataclass(frozen=True)
class ScorecardPlayer:
    name: str
    hole_scores: Tuple[int, ...]
    total_score: Optional[int] = None
    total_strokes: Optional[int] = None


@dataclass(frozen=True)
class Scorecard:
    course_name: str
    date: dt.date
    holes: Tuple[Hole, ...]
    players: Tuple[ScorecardPlayer, ...]
    layout_name: Optional[str] = None

    @property
    def par(self) -> int:
        return sum(hole.par for hole in self.holes)


def _field_from_loc(loc: Tuple[Any, ...]) -> str:
    parts: List[str] = []
    for item in loc:
        if isinstance(item, int) and parts:
            parts[-1] = f"{parts[-1]}[{item}]"
        else:
            parts.append(str(item))
    return ".".join(parts) or "scorecard"


def parse_scorecard(data: Mapping[str, Any]) -> Scorecard:
    """Validate raw scorecard data and return an immutable :class:`Scorecard`.

    Raises :class:`ValidationError` naming the offending field for missing
    fields, bad dates, fewer than ``MIN_PLAYERS`` players, no holes, or a
    player whose hole-by-hole scores do not cover every hole.
    """

    if not isinstance(data, Mapping):
        raise ValidationError("Scorecard data is required and must be an object", field="scorecard")

    try:
        payload = ScorecardPayload.model_validate(data)
    except pydantic.ValidationError as exc:
        first = exc.errors()[0]
        field_name = _field_from_loc(tuple(first.get("loc", ())))
        raise ValidationError(f"Invalid scorecard {field_name}: {first.get('msg')}", field=field_name) from exc

    if not payload.holes:
        raise ValidationError("Scorecard must have hole data", field="holes")

    if len(payload.players) < MIN_PLAYERS:
        raise ValidationError(
            f"Scorecard must have at least {MIN_PLAYERS} players, found {len(payload.players)}",
            field="players",
        )

    for index, player in enumerate(payload.players):
        if len(player.hole_by_hole) != len(payload.holes):
            raise ValidationError(
                f"{player.name} has {len(player.hole_by_hole)} hole scores for {len(payload.holes)} holes",
                field=f"players[{index}].holeByHole",
            )

    scorecard = Scorecard(
        course_name=payload.course_name.strip(),
        date=payload.date,
        holes=tuple(Hole(number=h.number, par=h.par, distance=h.distance) for h in payload.holes),
        players=tuple(
            ScorecardPlayer(
                name=p.name.strip(),
                hole_scores=tuple(p.hole_by_hole),
                total_score=p.total_score,
                total_strokes=p.total_strokes,
            )
            for p in payload.players
        ),
        layout_name=payload.layout_name,
    )
    logger.debug(
        "Parsed scorecard for %s on %s: %d holes, %d players",
        scorecard.course_name,
        scorecard.date.isoformat(),
        len(scorecard.holes),
        len(scorecard.players),
    )
    return scorecard
