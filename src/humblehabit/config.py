"""Application configuration objects and helpers."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    """Interpret environment variable values as booleans."""

    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class BaseConfig:
    """Base configuration shared across environments."""

    APP_NAME = "HumbleHabit"
    DB_FILENAME = "humblehabit.db"
    SQLITE_PRAGMAS = {"foreign_keys": "on"}

    def __init__(self) -> None:
        self.DATA_DIR = self._resolve_data_dir()
        self.DEV_MODE = _env_bool("HUMBLEHABIT_DEV_MODE", default=True)
        self.TIMEZONE = os.getenv("HUMBLEHABIT_TIMEZONE", "UTC")
        self.DATABASE_URL = os.getenv("HUMBLEHABIT_DATABASE_URL", self._build_sqlite_url())

    def _resolve_data_dir(self) -> Path:
        """Return the directory where the SQLite file and logs live."""

        data_root = os.getenv("HUMBLEHABIT_DATA_DIR", "instance")
        path = Path(data_root).expanduser().resolve()
        path.mkdir(parents=True, exist_ok=True)
        return path

    def _build_sqlite_url(self) -> str:
        """Construct the default SQLite URL inside the data directory."""

        return f"sqlite:///{self.DATA_DIR / self.DB_FILENAME}"

    @property
    def zone(self) -> ZoneInfo:
        """Timezone that decides which calendar day is "today"."""

        return ZoneInfo(self.TIMEZONE)

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

    def sqlalchemy_engine_options(self) -> dict[str, Any]:
        """Expose engine kwargs for SQLModel to consume."""

        engine_options: dict[str, Any] = {}
        if self.is_sqlite:
            engine_options["connect_args"] = {"check_same_thread": False}
        return engine_options


class DevConfig(BaseConfig):
    """Development configuration using local SQLite with verbose console logs."""

    def __init__(self) -> None:
        super().__init__()
        self.DEV_MODE = True


class TestingConfig(BaseConfig):
    """Configuration for tests, pinned to a throwaway SQLite file."""

    def __init__(self, data_dir: str | Path | None = None) -> None:
        self._data_dir_override = Path(data_dir) if data_dir is not None else None
        super().__init__()
        self.DEV_MODE = True
        self.DATABASE_URL = self._build_sqlite_url()

    def _resolve_data_dir(self) -> Path:
        if self._data_dir_override is None:
            return super()._resolve_data_dir()
        path = self._data_dir_override.expanduser().resolve()
        path.mkdir(parents=True, exist_ok=True)
        return path
