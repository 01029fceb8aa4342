"""Per-event scoring configuration: which event a round counts towards,
which points system that event uses, and which course multiplier applies."""

from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .errors import ConfigurationError
from .points import Course, PointsConfig

logger = logging.getLogger(__name__)

EVENT_TYPE_TOURNAMENT = "tournament"
EVENT_TYPE_SEASON = "season"


@dataclass(frozen=True)
class Event:
    id: str
    name: str
    type: str
    points_system_id: Optional[str]
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None
    year: Optional[int] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Event":
        points_system_id = row.get("points_system_id")
        year = row.get("year")
        return cls(
            id=str(row.get("id") or ""),
            name=str(row.get("name") or "").strip(),
            type=str(row.get("type") or EVENT_TYPE_SEASON).strip().lower(),
            points_system_id=str(points_system_id) if points_system_id not in (None, "") else None,
            start_date=_parse_date(row.get("start_date")),
            end_date=_parse_date(row.get("end_date")),
            year=int(year) if year not in (None, "") else None,
        )


@dataclass(frozen=True)
class ScoringConfiguration:
    event: Event
    points_system_name: str
    points: PointsConfig
    course: Course


def _parse_date(value: Any) -> Optional[dt.date]:
    if isinstance(value, dt.date):
        return value
    if not value:
        return None
    try:
        return dt.date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


def select_event(events: Sequence[Mapping[str, Any]], date: dt.date) -> Event:
    """Pick the event a round on ``date`` counts towards.

    Tournaments take priority over seasons; within the same type the event
    that started most recently wins.
    """

    if not events:
        raise ConfigurationError(
            f"No active season or tournament found for date {date.isoformat()}",
            field="event",
        )

    parsed = [Event.from_row(row) for row in events]
    parsed.sort(
        key=lambda event: (
            event.type != EVENT_TYPE_TOURNAMENT,
            -(event.start_date or dt.date.min).toordinal(),
        )
    )
    selected = parsed[0]

    if not selected.points_system_id:
        raise ConfigurationError(
            f'Event "{selected.name}" does not have a points system configured',
            field="event.points_system_id",
        )

    logger.info("Selected event %s (%s) for %s", selected.name, selected.type, date.isoformat())
    return selected


def find_course(courses: Sequence[Mapping[str, Any]], course_name: str) -> Course:
    """Match a scorecard course name against the configured courses.

    Exact (case-insensitive) names win, then either name containing the
    other. Unknown courses get a default tier and a 1.0 multiplier.
    """

    wanted = (course_name or "").strip().lower()
    if wanted:
        for row in courses:
            if str(row.get("course_name") or "").strip().lower() == wanted:
                logger.info("Exact course match found: %s", row.get("course_name"))
                return Course.from_row(row)

        for row in courses:
            candidate = str(row.get("course_name") or "").strip().lower()
            if candidate and (candidate in wanted or wanted in candidate):
                logger.info("Partial course match: %s -> %s", course_name, row.get("course_name"))
                return Course.from_row(row)

    logger.warning("No course match found for %r; using default multiplier", course_name)
    return Course(name=course_name, is_default=True)


def load_configuration(store: Any, date: dt.date, course_name: str) -> ScoringConfiguration:
    """Resolve event, points system and course for a round from ``store``.

    ``store`` is anything with ``find_events_for_date``, ``fetch_points_system``
    and ``fetch_courses`` (normally :class:`dgl_core.loader.DataStore`).
    """

    event = select_event(store.find_events_for_date(date), date)
    points_system: Dict[str, Any] = store.fetch_points_system(event.points_system_id)
    config = points_system.get("config")
    if config is None:
        raise ConfigurationError(
            f"Points system {event.points_system_id} has no config", field="points_system.config"
        )
    points = PointsConfig.from_mapping(config)
    courses: List[Dict[str, Any]] = store.fetch_courses()
    course = find_course(courses, course_name)

    name = str(points_system.get("name") or "Custom")
    logger.info(
        "Configuration loaded: points system %s, course %s (%.2fx)",
        name,
        course.name if not course.is_default else f"{course.name} (default)",
        course.multiplier,
    )
    return ScoringConfiguration(event=event, points_system_name=name, points=points, course=course)
