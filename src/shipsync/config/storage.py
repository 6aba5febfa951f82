"""Where shipsync keeps its SQLite database and HTTP cache."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

DATABASE_FILENAME: Final = "shipsync.db"
HTTP_CACHE_FILENAME: Final = "http_cache.db"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    data_dir: Path

    def _file(self, filename: str) -> Path:
        data_dir = self.data_dir.expanduser().resolve()
        data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir / filename

    def database_path(self) -> Path:
        return self._file(DATABASE_FILENAME)

    def http_cache_path(self) -> Path:
        return self._file(HTTP_CACHE_FILENAME)


def get_storage_config() -> StorageConfig:
    """``SHIPSYNC_DATA_DIR``, else ``shipsync`` under the XDG data home."""

    env_dir = os.getenv("SHIPSYNC_DATA_DIR")
    if env_dir:
        return StorageConfig(data_dir=Path(env_dir))
    xdg_home = os.getenv("XDG_DATA_HOME")
    base = Path(xdg_home) if xdg_home else Path.home() / ".local" / "share"
    return StorageConfig(data_dir=base / "shipsync")


def get_database_uri(*, storage: StorageConfig | None = None) -> str:
    env_uri = os.getenv("DATABASE_URI")
    if env_uri:
        return env_uri
    database_path = (storage or get_storage_config()).database_path()
    return f"sqlite+pysqlite:///{database_path}"
