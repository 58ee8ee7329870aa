"""Mark missed check-ins absent for teams whose shift has ended.

Safe to schedule hourly. Run from the repository root:
    python -m scripts.finalize_attendance --company 1 --company 2
"""

from __future__ import annotations

import argparse
import importlib
import logging

from dotenv import load_dotenv

from config import get_settings_module

from src.readiness_tracker.readiness_tracker.container import EngineOptions, build_container

log = logging.getLogger("finalize_attendance")


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--company", type=int, action="append", required=True)
    args = parser.parse_args()

    load_dotenv(override=False)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    settings = importlib.import_module(get_settings_module())
    options = EngineOptions.from_settings(settings)
    container = build_container(db_config=dict(settings.DB_CONFIG), options=options)

    marked = 0
    try:
        for company_id in args.company:
            result = container.absence_service.finalize_company(company_id)
            marked += result.marked_absent
    finally:
        container.dispatcher.shutdown()
    log.info("Marked %d absence(s) across %d company(ies)", marked, len(args.company))


if __name__ == "__main__":
    main()
