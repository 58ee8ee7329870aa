from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import parse_iso_date
from ..common.http import body_json, current_viewer, login_required, ok, to_payload
from ..core.exceptions import AuthorizationError
from ..core.scope import CompanyScope, resolve_scope
from ..container import Container


def register(app: Flask, container: Container) -> None:
    def _require_company_scope():
        viewer = current_viewer()
        if not isinstance(resolve_scope(viewer), CompanyScope):
            raise AuthorizationError("Only supervisors and above can manage holidays")
        return viewer

    @app.route("/api/holidays", methods=["GET"], endpoint="list_holidays")
    @login_required
    def list_holidays():
        viewer = current_viewer()
        start = parse_iso_date(request.args.get("start", ""))
        end = parse_iso_date(request.args.get("end", ""))
        return ok(to_payload(container.holiday_service.list_holidays(viewer.company_id, start, end)))

    @app.route("/api/holidays", methods=["POST"], endpoint="add_holiday")
    @login_required
    def add_holiday():
        viewer = _require_company_scope()
        data = body_json()
        holiday = container.holiday_service.add_holiday(
            viewer.company_id,
            parse_iso_date(data.get("date", "")),
            data.get("name", ""),
            actor_id=viewer.user_id,
        )
        return ok(to_payload(holiday), status=201)

    @app.route("/api/holidays/<int:holiday_id>", methods=["DELETE"], endpoint="remove_holiday")
    @login_required
    def remove_holiday(holiday_id: int):
        viewer = _require_company_scope()
        holiday = container.holiday_service.remove_holiday(holiday_id, viewer.company_id, actor_id=viewer.user_id)
        return ok(to_payload(holiday))
