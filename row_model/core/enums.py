"""Database backend enumeration."""

from __future__ import annotations

from enum import Enum

_DRIVER_ALIASES = {
    "sqlite3": "sqlite",
    "aiosqlite": "sqlite",
    "postgres": "postgresql",
    "psycopg": "postgresql",
    "mariadb": "mysql",
    "aiomysql": "mysql",
}


class DatabaseBackend(Enum):
    """Backends RowModel can drive, valued by their canonical driver name."""

    SQLITE = "sqlite"
    POSTGRESQL = "postgresql"
    MYSQL = "mysql"

    @classmethod
    def from_driver(cls, driver: str) -> DatabaseBackend:
        """Resolve a driver name or a common alias such as ``postgres``.

        Raises:
            ValueError: If the driver is unknown.
        """
        name = driver.strip().lower()
        return cls(_DRIVER_ALIASES.get(name, name))

    @property
    def supports_returning(self) -> bool:
        """Whether INSERT statements should request generated keys via RETURNING."""
        return self is DatabaseBackend.POSTGRESQL
