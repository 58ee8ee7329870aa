import logging
from decimal import Decimal

import pytest

from config import get_settings_module

from src.readiness_tracker.readiness_tracker.common.dispatch import RecomputeDispatcher
from src.readiness_tracker.readiness_tracker.common.validators import require_enum, require_int_between, round_half_up
from src.readiness_tracker.readiness_tracker.core.enums import AbsenceReason
from src.readiness_tracker.readiness_tracker.core.exceptions import ValidationError
from src.readiness_tracker.readiness_tracker.database.connection import DBConfig
from src.readiness_tracker.readiness_tracker.notifications.sinks import audit_quietly, notify_quietly
from tests.fakes import FailingSink, RecordingNotifier


def _boom():
    raise RuntimeError("database went away")


def test_synchronous_dispatcher_runs_inline_and_swallows_failures(caplog):
    seen = []
    dispatcher = RecomputeDispatcher(synchronous=True)

    with caplog.at_level(logging.ERROR):
        assert dispatcher.submit("ok", seen.append, 1) is None
        dispatcher.submit("failing recompute", _boom)

    assert seen == [1]
    assert "failing recompute" in caplog.text


def test_threaded_dispatcher_completes_tasks_and_logs_failures():
    seen = []
    dispatcher = RecomputeDispatcher(max_workers=1)

    first = dispatcher.submit("ok", seen.append, "a")
    second = dispatcher.submit("failing", _boom)
    first.result(timeout=5)
    second.result(timeout=5)
    dispatcher.shutdown()

    assert seen == ["a"]
    assert second.exception() is None
    assert dispatcher.submit("after shutdown", seen.append, "b") is None


def test_quiet_sinks_report_failures_without_raising(caplog):
    notifier = RecordingNotifier()

    assert notify_quietly(notifier, user_id=1, title="t", message="m", type_tag="X")
    assert notifier.calls[0]["type_tag"] == "X"
    assert not notify_quietly(None, user_id=1, title="t", message="m", type_tag="X")
    with caplog.at_level(logging.WARNING):
        assert not notify_quietly(FailingSink(), user_id=1, title="t", message="m", type_tag="X")
        assert not audit_quietly(
            FailingSink(),
            company_id=1,
            user_id=None,
            action_tag="HOLIDAY_CREATED",
            entity_type="holiday",
            entity_id=1,
            description="d",
        )
    assert "HOLIDAY_CREATED" in caplog.text


def test_validators():
    assert round_half_up(2.5) == 3
    assert round_half_up(66.666) == 67
    assert require_enum(" sick ", AbsenceReason, "reason") == AbsenceReason.SICK


def test_int_validation_accepts_whole_numbers_only():
    assert require_int_between(5, "mood", 1, 10) == 5
    assert require_int_between("7", "mood", 1, 10) == 7
    assert require_int_between(5.0, "mood", 1, 10) == 5
    assert require_int_between(Decimal("5.0"), "mood", 1, 10) == 5
    for bad in (5.5, Decimal("5.5"), True, "5.0", None, float("inf"), 11):
        with pytest.raises(ValidationError):
            require_int_between(bad, "mood", 1, 10)


def test_settings_module_selection(monkeypatch):
    monkeypatch.setenv("APP_ENV", "prod")
    assert get_settings_module() == "config.production"
    assert get_settings_module("Testing") == "config.testing"
    monkeypatch.delenv("APP_ENV")
    assert get_settings_module() == "config.development"


def test_db_config_from_settings_mapping():
    config = DBConfig.from_mapping({"host": "db", "user": "app", "password": "pw", "database": "readiness_db"})

    assert config.port == 3306
    assert config.pool_size == 5
