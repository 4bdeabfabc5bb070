"""fsv 기본 설정"""
from __future__ import annotations
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .path import DEFAULT_DATABASE_ID, PathUtil

CONVERT_CONFIG = {
    "database_id": DEFAULT_DATABASE_ID,     # 프로젝트 기본 DB
    "timestamp_timespec": "microseconds",   # isoformat() timespec
}

_TRUE = {"1", "true", "yes", "on"}


@dataclass
class FirestoreConfig:
    project_id: str
    database_id: str = DEFAULT_DATABASE_ID
    debug: bool = False
    use_emulator: bool = False
    emulator_host: str = "localhost"
    emulator_port: int = 8080

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "FirestoreConfig":
        """Build a config from ``FIRESTORE_*`` / ``FSV_*`` environment variables."""
        env = os.environ if environ is None else environ
        cfg = cls(
            project_id=env.get("FIRESTORE_PROJECT_ID", ""),
            database_id=env.get("FIRESTORE_DATABASE_ID") or CONVERT_CONFIG["database_id"],
            debug=env.get("FSV_DEBUG", "false").lower() in _TRUE,
        )
        emulator = env.get("FIRESTORE_EMULATOR_HOST")
        if emulator:
            host, _, port = emulator.rpartition(":")
            cfg.use_emulator = True
            cfg.emulator_host = host or cfg.emulator_host
            if port.isdigit():
                cfg.emulator_port = int(port)
        return cfg

    @property
    def emulator_url(self) -> Optional[str]:
        if not self.use_emulator:
            return None
        return f"http://{self.emulator_host}:{self.emulator_port}"

    def path_util(self) -> PathUtil:
        return PathUtil(self.project_id, self.database_id)
