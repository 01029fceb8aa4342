"""Score a scorecard JSON file against the league registry and points system.

Usage:
    python backend/scripts/score_round.py path/to/scorecard.json [--verbose]

Reference data comes from Supabase when SUPABASE_URL and a key are set,
otherwise from backend/data/league_local.json.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from dgl_core import ConfigurationError, DataStore, ValidationError, load_configuration, score_round
from dgl_core.leaderboard import format_leaderboard
from dgl_core.scorecard import parse_scorecard


def _load_scorecard(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        return json.load(handle)


def _format_warnings(messages: List[str]) -> str:
    lines = [f"Warnings ({len(messages)}):"]
    for message in messages:
        lines.append(f"  - {message}")
    return "\n".join(lines)


def main(argv: Optional[List[str]] = None, store: Optional[DataStore] = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("scorecard", type=Path, help="Scorecard JSON file")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        data = _load_scorecard(args.scorecard)
    except (OSError, json.JSONDecodeError) as exc:
        print(f"ERROR: could not read {args.scorecard}: {exc}", file=sys.stderr)
        return 1

    store = store or DataStore()
    try:
        scorecard = parse_scorecard(data)
        configuration = load_configuration(store, scorecard.date, scorecard.course_name)
        result = score_round(scorecard, store.fetch_registered_players(), configuration)
    except (ValidationError, ConfigurationError) as exc:
        field = f" [{exc.field}]" if exc.field else ""
        print(f"ERROR{field}: {exc}", file=sys.stderr)
        return 1
    except (RuntimeError, FileNotFoundError) as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    print(f"Event: {configuration.event.name} ({configuration.event.type})")
    print(f"Points system: {configuration.points_system_name}")
    print()
    print(format_leaderboard(result))

    warnings = [warning.message for warning in result.validation.warnings]
    if warnings:
        print()
        print(_format_warnings(warnings))

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
