"""Notification and audit sinks.

Both are side effects of the primary operation: callers go through
`notify_quietly` / `audit_quietly`, which log a failure and carry on.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Protocol

from ..core.exceptions import DependencyFailure
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, to_json

log = logging.getLogger(__name__)


class NotificationSink(Protocol):
    def enqueue(
        self,
        *,
        user_id: int,
        title: str,
        message: str,
        type_tag: str,
        payload: Optional[Mapping[str, Any]] = None,
    ) -> None:
        raise NotImplementedError


class AuditSink(Protocol):
    def append(
        self,
        *,
        company_id: int,
        user_id: Optional[int],
        action_tag: str,
        entity_type: str,
        entity_id: Optional[int],
        description: str,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> None:
        raise NotImplementedError


class MySQLNotificationSink(NotificationSink):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def enqueue(self, *, user_id, title, message, type_tag, payload=None) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO notifications(user_id, title, message, type_tag, payload) VALUES(%s,%s,%s,%s,%s)",
                (int(user_id), title, message, type_tag, to_json(dict(payload) if payload else None)),
            )


class MySQLAuditSink(AuditSink):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def append(self, *, company_id, user_id, action_tag, entity_type, entity_id, description, metadata=None) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO system_logs(company_id, user_id, action_tag, entity_type, entity_id, description, metadata)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(company_id),
                    user_id,
                    action_tag,
                    entity_type,
                    entity_id,
                    description,
                    to_json(dict(metadata) if metadata else None),
                ),
            )


def notify_quietly(sink: Optional[NotificationSink], **kwargs: Any) -> bool:
    if sink is None:
        return False
    try:
        sink.enqueue(**kwargs)
    except Exception as exc:
        failure = DependencyFailure(f"notification {kwargs.get('type_tag')} failed: {exc}")
        log.warning("%s", failure, exc_info=exc)
        return False
    return True


def audit_quietly(sink: Optional[AuditSink], **kwargs: Any) -> bool:
    if sink is None:
        return False
    try:
        sink.append(**kwargs)
    except Exception as exc:
        failure = DependencyFailure(f"audit {kwargs.get('action_tag')} failed: {exc}")
        log.warning("%s", failure, exc_info=exc)
        return False
    return True
