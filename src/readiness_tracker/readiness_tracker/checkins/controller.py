from __future__ import annotations

from flask import Flask

from ..common.http import body_json, current_viewer, login_required, ok, to_payload
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/checkins", methods=["POST"], endpoint="submit_checkin")
    @login_required
    def submit_checkin():
        data = body_json()
        checkin = container.checkin_service.submit_checkin(
            current_viewer().user_id,
            mood=data.get("mood"),
            stress=data.get("stress"),
            sleep=data.get("sleep"),
            physical_health=data.get("physical_health"),
            notes=data.get("notes"),
        )
        return ok(to_payload(checkin), status=201)
