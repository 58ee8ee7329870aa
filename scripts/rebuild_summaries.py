"""Rebuild the daily team summary cache for a company over a date range.

Run from the repository root:
    python -m scripts.rebuild_summaries --company 1 --start 2025-01-01 --end 2025-01-31
"""

from __future__ import annotations

import argparse
import importlib
import logging

from dotenv import load_dotenv

from config import get_settings_module

from src.readiness_tracker.readiness_tracker.common.datetime_utils import parse_iso_date
from src.readiness_tracker.readiness_tracker.container import EngineOptions, build_container

log = logging.getLogger("rebuild_summaries")


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--company", type=int, required=True)
    parser.add_argument("--start", required=True, help="YYYY-MM-DD")
    parser.add_argument("--end", required=True, help="YYYY-MM-DD")
    args = parser.parse_args()

    load_dotenv(override=False)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    settings = importlib.import_module(get_settings_module())
    options = EngineOptions.from_settings(settings)
    container = build_container(db_config=dict(settings.DB_CONFIG), options=options)

    start, end = parse_iso_date(args.start), parse_iso_date(args.end)
    rebuilt = 0
    try:
        for team in container.teams_repo.list_active_teams(args.company):
            rebuilt += len(container.summary_service.recalculate_range(team.team_id, start, end))
    finally:
        container.dispatcher.shutdown()
    log.info("Rebuilt %d summaries for company=%s %s..%s", rebuilt, args.company, start, end)


if __name__ == "__main__":
    main()
