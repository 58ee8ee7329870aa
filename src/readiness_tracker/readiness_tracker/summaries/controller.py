from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import parse_iso_date
from ..common.http import current_viewer, login_required, ok, to_payload
from ..core.scope import resolve_scope
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/teams/<int:team_id>/summaries/<day>", methods=["GET"], endpoint="team_daily_summary")
    @login_required
    def team_daily_summary(team_id: int, day: str):
        scope = resolve_scope(current_viewer())
        summary = container.summary_service.get_daily_summary(team_id, parse_iso_date(day), scope=scope)
        return ok(to_payload(summary))

    @app.route("/api/teams/<int:team_id>/summaries", methods=["GET"], endpoint="team_summaries")
    @login_required
    def team_summaries(team_id: int):
        scope = resolve_scope(current_viewer())
        start = parse_iso_date(request.args.get("start", ""))
        end = parse_iso_date(request.args.get("end", ""))
        rows = container.summary_service.list_summaries(team_id, start, end, scope=scope)
        rollup = container.summary_service.summarize_range(team_id, start, end, scope=scope)
        return ok(to_payload(rows), rollup=to_payload(rollup))
