"""Application configuration objects and helpers."""

from __future__ import annotations

import os
import tempfile
from enum import Enum
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    """Interpret environment variable values as booleans."""

    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_float(name: str, default: float) -> float:
    """Read a float from the environment, rejecting garbage early."""

    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return float(value)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {value!r}") from exc


class MissingIdPolicy(str, Enum):
    """How store updates/deletes react to ids that are not present."""

    IGNORE = "ignore"
    RAISE = "raise"

    @classmethod
    def parse(cls, raw: str | None, default: "MissingIdPolicy") -> "MissingIdPolicy":
        if raw is None or not raw.strip():
            return default
        try:
            return cls(raw.strip().lower())
        except ValueError as exc:
            choices = ", ".join(p.value for p in cls)
            raise ValueError(f"Unknown missing-id policy {raw!r}; expected one of {choices}") from exc


class BaseConfig:
    """Base configuration shared across environments."""

    APP_NAME = "finboard"
    DB_FILENAME = "finboard.db"
    DEFAULT_STORAGE_KEY = "finance-storage"
    SQLITE_PRAGMAS = {"journal_mode": "wal", "foreign_keys": "on"}

    def __init__(self) -> None:
        self.DATA_DIR = self._resolve_data_dir()
        self.DEV_MODE = _env_bool("FINBOARD_DEV_MODE", default=True)
        self.DATABASE_URL = os.getenv("FINBOARD_DATABASE_URL", self._build_sqlite_url())
        self.STORAGE_KEY = os.getenv("FINBOARD_STORAGE_KEY", self.DEFAULT_STORAGE_KEY)
        self.MISSING_ID_POLICY = MissingIdPolicy.parse(
            os.getenv("FINBOARD_MISSING_ID_POLICY"), default=MissingIdPolicy.RAISE
        )
        self.CHAT_RESPONSE_DELAY = _env_float("FINBOARD_CHAT_DELAY", 1.0)
        self.SEED_DEMO = _env_bool("FINBOARD_SEED_DEMO", default=False)
        if self.CHAT_RESPONSE_DELAY < 0:
            raise ValueError("FINBOARD_CHAT_DELAY must not be negative.")
        if not self.STORAGE_KEY.strip():
            raise ValueError("FINBOARD_STORAGE_KEY must not be empty.")

    def _resolve_data_dir(self) -> Path:
        """Return the directory where the SQLite file and logs live."""

        data_root = os.getenv("FINBOARD_DATA_DIR", "instance")
        path = Path(data_root).expanduser().resolve()
        path.mkdir(parents=True, exist_ok=True)
        return path

    def _build_sqlite_url(self) -> str:
        return f"sqlite:///{self.DATA_DIR / self.DB_FILENAME}"

    def sqlalchemy_engine_options(self) -> dict[str, Any]:
        """Expose engine kwargs for SQLModel to consume."""

        connect_args: dict[str, Any] = {}
        if self.DATABASE_URL.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        return {"connect_args": connect_args}


class TestConfig(BaseConfig):
    """Isolated configuration for tests: throwaway data dir, no chat delay."""

    __test__ = False  # keep pytest from collecting this class

    def __init__(self, data_dir: Path | str | None = None) -> None:
        self._data_dir_override = Path(data_dir) if data_dir else Path(tempfile.mkdtemp(prefix="finboard-"))
        super().__init__()
        self.DATABASE_URL = self._build_sqlite_url()
        self.CHAT_RESPONSE_DELAY = 0.0
        self.SEED_DEMO = False

    def _resolve_data_dir(self) -> Path:
        path = self._data_dir_override.expanduser().resolve()
        path.mkdir(parents=True, exist_ok=True)
        return path
