"""Database connection settings."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class SqliteConfig:
    """Settings for a SQLite database file."""

    db_path: str

    def get_db_url(self) -> str:
        return f"sqlite://{self.db_path}"


@dataclass(frozen=True)
class PostgresConfig:
    """Settings for a PostgreSQL server."""

    user: str
    password: str = field(repr=False)
    host: str
    port: int
    dbname: str

    def __post_init__(self) -> None:
        if not 0 <= self.port <= 0xFFFF:
            raise ValueError(f"port out of range: {self.port}")

    def get_db_url(self) -> str:
        return (
            f"postgresql://{self.user}:{self.password}@{self.host}:{self.port}/{self.dbname}"
        )


DatabaseConfig = SqliteConfig | PostgresConfig