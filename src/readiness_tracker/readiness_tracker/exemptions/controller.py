from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import parse_iso_date
from ..common.http import body_json, current_viewer, login_required, ok, to_payload
from ..core.scope import resolve_scope
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/exemptions", methods=["POST"], endpoint="request_exemption")
    @login_required
    def request_exemption():
        data = body_json()
        exemption = container.exemption_service.request_exemption(
            current_viewer().user_id,
            start_date=parse_iso_date(data.get("start_date", "")),
            end_date=parse_iso_date(data.get("end_date", "")),
            exemption_type=data.get("exemption_type", ""),
            reason=data.get("reason"),
        )
        return ok(to_payload(exemption), status=201)

    @app.route("/api/exemptions/pending", methods=["GET"], endpoint="pending_exemptions")
    @login_required
    def pending_exemptions():
        rows = container.exemption_service.list_pending(resolve_scope(current_viewer()))
        return ok(to_payload(rows))

    @app.route("/api/exemptions/<int:exemption_id>/approve", methods=["POST"], endpoint="approve_exemption")
    @login_required
    def approve_exemption(exemption_id: int):
        data = request.get_json(silent=True) or {}
        exemption = container.exemption_service.approve(exemption_id, current_viewer(), data.get("notes"))
        return ok(to_payload(exemption))

    @app.route("/api/exemptions/<int:exemption_id>/reject", methods=["POST"], endpoint="reject_exemption")
    @login_required
    def reject_exemption(exemption_id: int):
        data = request.get_json(silent=True) or {}
        exemption = container.exemption_service.reject(exemption_id, current_viewer(), data.get("notes"))
        return ok(to_payload(exemption))
