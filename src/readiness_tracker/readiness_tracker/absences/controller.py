from __future__ import annotations

from flask import Flask, request

from ..common.http import body_json, current_viewer, login_required, ok, to_payload
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.exceptions import ValidationError
from ..core.scope import resolve_scope
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/absences/pending", methods=["GET"], endpoint="pending_justifications")
    @login_required
    def pending_justifications():
        viewer = current_viewer()
        rows = container.absence_service.get_pending_justifications(viewer.user_id)
        return ok(to_payload(rows), blocking=len(rows) > 0)

    @app.route("/api/absences/justify", methods=["POST"], endpoint="justify_absences")
    @login_required
    def justify_absences():
        viewer = current_viewer()
        items = body_json().get("items")
        if not isinstance(items, list):
            raise ValidationError("items must be a list")
        updated = container.absence_service.submit_justification(viewer.user_id, items)
        return ok(to_payload(updated))

    @app.route("/api/absences/reviews", methods=["GET"], endpoint="pending_reviews")
    @login_required
    def pending_reviews():
        rows = container.absence_service.list_pending_reviews(resolve_scope(current_viewer()))
        return ok(to_payload(rows))

    @app.route("/api/absences/<int:absence_id>/review", methods=["POST"], endpoint="review_absence")
    @login_required
    def review_absence(absence_id: int):
        data = body_json()
        updated = container.absence_service.review_absence(
            absence_id,
            current_viewer(),
            data.get("verdict"),
            data.get("notes"),
        )
        return ok(to_payload(updated))

    @app.route("/api/absences/history", methods=["GET"], endpoint="absence_history")
    @login_required
    def absence_history():
        viewer = current_viewer()
        limit = request.args.get("limit", DEFAULT_HISTORY_LIMIT, type=int)
        rows = container.absence_service.absence_history(viewer.user_id, limit=limit)
        return ok(to_payload(rows))

    @app.route("/api/absences/counts", methods=["GET"], endpoint="absence_counts")
    @login_required
    def absence_counts():
        counts = container.absence_service.status_counts(resolve_scope(current_viewer()))
        return ok(dict(to_payload(counts), total=counts.total))
