from __future__ import annotations

import datetime as dt
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Tuple

import httpx

from .identity import RegisteredPlayer

logger = logging.getLogger(__name__)


class DataStore:
    """Reads league reference data from Supabase or a local JSON fallback.

    Everything here is read-only: the scoring pipeline receives snapshots
    (registry, courses, points systems) and never writes back.
    """

    def __init__(self, data_dir: Path | None = None, local_path: Path | None = None) -> None:
        """Initialize the DataStore.

        Args:
            data_dir: Directory containing local data files
            local_path: JSON file used when Supabase is not configured
        """
        self.data_dir = data_dir or (Path(__file__).parent.parent / "data")
        self.local_path = local_path or (self.data_dir / "league_local.json")

        self.supabase_url = os.getenv("SUPABASE_URL", "")
        self.supabase_key = (
            os.getenv("SUPABASE_SERVICE_ROLE_KEY")
            or os.getenv("SUPABASE_SERVICE_KEY")
            or os.getenv("SUPABASE_ANON_KEY")
            or ""
        )
        self.supabase_schema = os.getenv("SUPABASE_SCHEMA", "public")
        self.supabase_players_table = os.getenv("SUPABASE_PLAYERS_TABLE", "registered_players")
        self.supabase_courses_table = os.getenv("SUPABASE_COURSES_TABLE", "courses")
        self.supabase_events_table = os.getenv("SUPABASE_EVENTS_TABLE", "events")
        self.supabase_points_systems_table = os.getenv("SUPABASE_POINTS_SYSTEMS_TABLE", "points_systems")

        self._players: Tuple[RegisteredPlayer, ...] | None = None
        self._courses: List[Dict[str, Any]] | None = None
        self._local: Dict[str, Any] | None = None

    @property
    def uses_supabase(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)

    def fetch_registered_players(self) -> Tuple[RegisteredPlayer, ...]:
        """Return the active player registry, cached for the lifetime of the store."""
        if self._players is not None:
            return self._players

        if self.uses_supabase:
            rows = self._supabase_select(
                self.supabase_players_table,
                {"select": "id,player_name,active", "active": "eq.true", "order": "player_name.asc"},
                "registered players",
            )
        else:
            rows = self._local_rows("players")

        players: List[RegisteredPlayer] = []
        for row in rows:
            if row.get("active") is False:
                continue
            name = str(row.get("player_name") or "").strip()
            player_id = str(row.get("id") or "").strip()
            if not name or not player_id:
                continue
            players.append(RegisteredPlayer(id=player_id, name=name))

        if not players:
            raise RuntimeError("Player registry returned zero active players")

        self._players = tuple(players)
        logger.info("Loaded %d registered players", len(self._players))
        return self._players

    def fetch_courses(self) -> List[Dict[str, Any]]:
        if self._courses is not None:
            return self._courses

        if self.uses_supabase:
            rows = self._supabase_select(
                self.supabase_courses_table,
                {"select": "id,course_name,tier,multiplier,active", "order": "course_name.asc"},
                "courses",
            )
        else:
            rows = self._local_rows("courses")

        self._courses = [
            row
            for row in rows
            if str(row.get("course_name") or "").strip() and row.get("active") is not False
        ]
        return self._courses

    def fetch_points_system(self, points_system_id: Any) -> Dict[str, Any]:
        if self.uses_supabase:
            rows = self._supabase_select(
                self.supabase_points_systems_table,
                {"select": "id,name,config", "id": f"eq.{points_system_id}"},
                "points system",
            )
        else:
            rows = [
                row
                for row in self._local_rows("points_systems")
                if str(row.get("id")) == str(points_system_id)
            ]

        if not rows:
            raise RuntimeError(f"Points system {points_system_id} not found")
        if len(rows) > 1:
            logger.warning("Multiple points systems found for id %s; using first", points_system_id)
        return rows[0]

    def find_events_for_date(self, date: dt.date) -> List[Dict[str, Any]]:
        """Events whose start/end range covers ``date``."""
        iso = date.isoformat()
        if self.uses_supabase:
            return self._supabase_select(
                self.supabase_events_table,
                {
                    "select": "id,name,type,year,start_date,end_date,points_system_id",
                    "start_date": f"lte.{iso}",
                    "end_date": f"gte.{iso}",
                },
                "events",
            )

        events: List[Dict[str, Any]] = []
        for row in self._local_rows("events"):
            start = str(row.get("start_date") or "")
            end = str(row.get("end_date") or "")
            if start and end and start <= iso <= end:
                events.append(row)
        return events

    def _supabase_endpoint(self, table: str) -> str:
        return self.supabase_url.rstrip("/") + "/rest/v1/" + table

    def _supabase_headers(self) -> Dict[str, str]:
        headers = {
            "apikey": self.supabase_key,
            "Authorization": f"Bearer {self.supabase_key}",
            "Accept": "application/json",
        }
        if self.supabase_schema and self.supabase_schema != "public":
            headers["Accept-Profile"] = self.supabase_schema
        return headers

    def _supabase_select(self, table: str, params: Dict[str, str], label: str) -> List[Dict[str, Any]]:
        endpoint = self._supabase_endpoint(table)
        try:
            with httpx.Client(timeout=10.0) as client:
                response = client.get(endpoint, params=params, headers=self._supabase_headers())
                response.raise_for_status()
                rows = response.json()
        except httpx.HTTPError as exc:
            raise RuntimeError(f"Failed to load {label} from Supabase: {exc}") from exc

        if not isinstance(rows, list):
            raise RuntimeError(f"Unexpected payload from Supabase {label} endpoint")

        return [row for row in rows if isinstance(row, dict)]

    def _local_rows(self, key: str) -> List[Dict[str, Any]]:
        if self._local is None:
            if not self.local_path.exists():
                raise FileNotFoundError(f"Local league data not found: {self.local_path}")
            self._local = self._read_json_file(self.local_path)
        rows = self._local.get(key) or []
        if not isinstance(rows, list):
            raise ValueError(f"{self.local_path} key '{key}' must be a list")
        return [row for row in rows if isinstance(row, dict)]

    @staticmethod
    def _read_json_file(path: Path) -> Dict[str, Any]:
        try:
            with path.open("r", encoding="utf-8") as handle:
                data = json.load(handle)
        except (OSError, json.JSONDecodeError) as exc:
            raise RuntimeError(f"Failed to read local data store {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise RuntimeError(f"Local data store {path} must contain a JSON object")
        return data
