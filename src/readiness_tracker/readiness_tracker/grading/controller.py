from __future__ import annotations

from flask import Flask, request

from ..common.http import current_viewer, login_required, ok
from ..core.constants import DEFAULT_PERIOD_DAYS
from ..core.scope import resolve_scope
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/teams/<int:team_id>/grade", methods=["GET"], endpoint="team_grade")
    @login_required
    def team_grade(team_id: int):
        scope = resolve_scope(current_viewer())
        days = request.args.get("days", DEFAULT_PERIOD_DAYS)
        grade = container.grading_service.get_team_grade(team_id, days, scope=scope)
        return ok(grade.to_dict())

    @app.route("/api/grades/overview", methods=["GET"], endpoint="grades_overview")
    @login_required
    def grades_overview():
        viewer = current_viewer()
        days = request.args.get("days", DEFAULT_PERIOD_DAYS)
        overview = container.grading_service.get_teams_overview(
            viewer.company_id, days, scope=resolve_scope(viewer)
        )
        return ok(overview.to_dict())
