from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from mysql.connector import pooling

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str
    pool_size: int = 5

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "DBConfig":
        """Build from a settings DB_CONFIG dict."""
        return cls(
            host=str(values["host"]),
            port=int(values.get("port", 3306)),
            user=str(values["user"]),
            password=str(values["password"]),
            database=str(values["database"]),
            pool_size=int(values.get("pool_size", 5)),
        )


class DatabaseConnection:
    """Process-wide pool of MySQL connections.

    Request handlers and recompute workers share the pool; `connect()` hands out a
    pooled connection whose `close()` returns it. Sessions run in UTC and local
    calendar days are resolved in Python from the company timezone.
    """

    _instance: Optional["DatabaseConnection"] = None
    _lock = threading.Lock()

    def __init__(self, config: DBConfig):
        self._config = config
        self._pool: Optional[pooling.MySQLConnectionPool] = None

    @property
    def config(self) -> DBConfig:
        return self._config

    @classmethod
    def get_instance(cls, config: DBConfig) -> "DatabaseConnection":
        with cls._lock:
            if cls._instance is None or cls._instance.config != config:
                cls._instance = DatabaseConnection(config)
            return cls._instance

    def _get_pool(self) -> pooling.MySQLConnectionPool:
        with self._lock:
            if self._pool is None:
                self._pool = pooling.MySQLConnectionPool(
                    pool_name=f"readiness_{self._config.database}",
                    pool_size=max(1, self._config.pool_size),
                    pool_reset_session=True,
                    host=self._config.host,
                    port=self._config.port,
                    user=self._config.user,
                    password=self._config.password,
                    database=self._config.database,
                    time_zone="+00:00",
                )
                log.info(
                    "MySQL pool ready %s@%s:%s/%s size=%d",
                    self._config.user,
                    self._config.host,
                    self._config.port,
                    self._config.database,
                    self._config.pool_size,
                )
            return self._pool

    def connect(self):
        return self._get_pool().get_connection()
