from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import mysql.connector


@dataclass(frozen=True)
class DBConfig:
    host: str = "localhost"
    port: int = 3306
    user: str = "root"
    password: str = ""
    database: str = "staff_reporting"

    @classmethod
    def from_dict(cls, values: dict) -> "DBConfig":
        defaults = cls()
        return cls(
            host=str(values.get("host") or defaults.host),
            port=int(values.get("port") or defaults.port),
            user=str(values.get("user") or defaults.user),
            password=str(values.get("password") or ""),
            database=str(values.get("database") or defaults.database),
        )

    def connect_kwargs(self, *, with_database: bool = True) -> dict[str, Any]:
        # Sessions run in UTC so DATETIME columns stay naive UTC.
        kwargs: dict[str, Any] = dict(
            host=self.host,
            port=self.port,
            user=self.user,
            password=self.password,
            charset="utf8mb4",
            time_zone="+00:00",
        )
        if with_database:
            kwargs["database"] = self.database
        return kwargs


class DatabaseConnection:
    """Connection factory shared by every MySQL repository.

    Each unit of work opens its own short-lived connection; there is no pool.
    """

    _instances: dict[DBConfig, "DatabaseConnection"] = {}

    def __init__(self, config: DBConfig):
        self._config = config

    @classmethod
    def get_instance(cls, config: DBConfig) -> "DatabaseConnection":
        return cls._instances.setdefault(config, cls(config))

    @property
    def config(self) -> DBConfig:
        return self._config

    def connect(self, *, with_database: bool = True):
        return mysql.connector.connect(**self._config.connect_kwargs(with_database=with_database))


def open_connection(config: DBConfig, *, with_database: bool = True) -> Any:
    return DatabaseConnection.get_instance(config).connect(with_database=with_database)
