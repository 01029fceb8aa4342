import datetime as dt
import json
from typing import Any, Dict, List

import httpx
import pytest

from dgl_core import DataStore
from dgl_core import loader as loader_module

PLAYER_ROWS = [
    {"id": 1, "player_name": "David Thompson", "active": True},
    {"id": 2, "player_name": "Ryan Mitchell", "active": True},
    {"id": 3, "player_name": "  ", "active": True},
    {"id": 4, "player_name": "Mike Brennan", "active": False},
]


class _DummyResponse:
    def __init__(self, payload: Any) -> None:
        self._payload = payload

    def raise_for_status(self) -> None:  # pragma: no cover - nothing to do
        return None

    def json(self) -> Any:
        return self._payload


class _DummyClient:
    calls: List[Dict[str, Any]] = []
    payload: Any = PLAYER_ROWS

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        pass

    def __enter__(self) -> "_DummyClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # pragma: no cover - nothing to clean up
        return None

    def get(self, endpoint: str, params: Dict[str, Any], headers: Dict[str, str]) -> _DummyResponse:
        _DummyClient.calls.append({"endpoint": endpoint, "params": params, "headers": headers})
        return _DummyResponse(_DummyClient.payload)


class _FailingClient(_DummyClient):
    def get(self, endpoint: str, params: Dict[str, Any], headers: Dict[str, str]) -> _DummyResponse:
        raise httpx.ConnectError("connection refused")


@pytest.fixture(autouse=True)
def reset_env(monkeypatch: pytest.MonkeyPatch):
    for name in (
        "SUPABASE_URL",
        "SUPABASE_SERVICE_ROLE_KEY",
        "SUPABASE_SERVICE_KEY",
        "SUPABASE_ANON_KEY",
        "SUPABASE_SCHEMA",
        "SUPABASE_PLAYERS_TABLE",
    ):
        monkeypatch.delenv(name, raising=False)
    _DummyClient.calls = []
    _DummyClient.payload = PLAYER_ROWS
    yield


def _use_supabase(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SUPABASE_URL", "https://example.supabase.co/")
    monkeypatch.setenv("SUPABASE_SERVICE_ROLE_KEY", "test-key")


def test_fetch_registered_players_from_supabase(monkeypatch: pytest.MonkeyPatch) -> None:
    _use_supabase(monkeypatch)
    monkeypatch.setenv("SUPABASE_PLAYERS_TABLE", "league_players")
    monkeypatch.setattr(loader_module.httpx, "Client", _DummyClient)

    store = DataStore()
    players = store.fetch_registered_players()

    assert [(p.id, p.name) for p in players] == [("1", "David Thompson"), ("2", "Ryan Mitchell")]

    call = _DummyClient.calls[0]
    assert call["endpoint"] == "https://example.supabase.co/rest/v1/league_players"
    assert call["params"]["active"] == "eq.true"
    assert call["headers"]["Authorization"] == "Bearer test-key"
    assert "Accept-Profile" not in call["headers"]

    # Cached for the lifetime of the store
    store.fetch_registered_players()
    assert len(_DummyClient.calls) == 1


def test_custom_schema_sets_profile_header(monkeypatch: pytest.MonkeyPatch) -> None:
    _use_supabase(monkeypatch)
    monkeypatch.setenv("SUPABASE_SCHEMA", "league")
    monkeypatch.setattr(loader_module.httpx, "Client", _DummyClient)

    DataStore().fetch_registered_players()

    assert _DummyClient.calls[0]["headers"]["Accept-Profile"] == "league"


def test_empty_registry_fails(monkeypatch: pytest.MonkeyPatch) -> None:
    _use_supabase(monkeypatch)
    _DummyClient.payload = []
    monkeypatch.setattr(loader_module.httpx, "Client", _DummyClient)

    with pytest.raises(RuntimeError, match="zero active players"):
        DataStore().fetch_registered_players()


def test_unexpected_payload_fails(monkeypatch: pytest.MonkeyPatch) -> None:
    _use_supabase(monkeypatch)
    _DummyClient.payload = {"message": "permission denied"}
    monkeypatch.setattr(loader_module.httpx, "Client", _DummyClient)

    with pytest.raises(RuntimeError, match="Unexpected payload"):
        DataStore().fetch_courses()


def test_http_errors_are_wrapped(monkeypatch: pytest.MonkeyPatch) -> None:
    _use_supabase(monkeypatch)
    monkeypatch.setattr(loader_module.httpx, "Client", _FailingClient)

    with pytest.raises(RuntimeError, match="Failed to load registered players from Supabase"):
        DataStore().fetch_registered_players()


def test_events_query_filters_by_date(monkeypatch: pytest.MonkeyPatch) -> None:
    _use_supabase(monkeypatch)
    _DummyClient.payload = []
    monkeypatch.setattr(loader_module.httpx, "Client", _DummyClient)

    DataStore().find_events_for_date(dt.date(2025, 7, 12))

    params = _DummyClient.calls[0]["params"]
    assert params["start_date"] == "lte.2025-07-12"
    assert params["end_date"] == "gte.2025-07-12"


def test_local_fallback_requires_file(tmp_path) -> None:
    store = DataStore(data_dir=tmp_path)

    assert not store.uses_supabase
    with pytest.raises(FileNotFoundError):
        store.fetch_registered_players()


def test_local_fallback_reads_players_and_courses(tmp_path) -> None:
    data = {
        "players": PLAYER_ROWS,
        "courses": [
            {"course_name": "Maple Hill", "multiplier": 1.5},
            {"course_name": "Closed Course", "active": False},
            {"course_name": ""},
        ],
    }
    (tmp_path / "league_local.json").write_text(json.dumps(data))
    store = DataStore(data_dir=tmp_path)

    assert [p.name for p in store.fetch_registered_players()] == ["David Thompson", "Ryan Mitchell"]
    assert [c["course_name"] for c in store.fetch_courses()] == ["Maple Hill"]


def test_missing_points_system_fails(tmp_path) -> None:
    (tmp_path / "league_local.json").write_text(json.dumps({"points_systems": [{"id": "ps-1"}]}))

    with pytest.raises(RuntimeError, match="ps-2 not found"):
        DataStore(data_dir=tmp_path).fetch_points_system("ps-2")
