"""Configuration utilities for the Actual importer.

Settings come from, in increasing priority: built-in defaults, an optional
JSON file, and environment variables (a ``.env`` file is honoured). The CLI
applies its own flags on top via :meth:`AppConfig.override`.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Dict, Optional

from dotenv import find_dotenv, load_dotenv


DEFAULT_DATA_DIR = "data"
DEFAULT_SERVER_URL = "http://localhost:5656"

# Environment variable for each setting.
ENV_VARS: Dict[str, str] = {
    "data_dir": "ACTUAL_DATA_DIR",
    "server_url": "ACTUAL_SERVER_URL",
    "password": "ACTUAL_PASSWORD",
    "sync_id": "ACTUAL_SYNC_ID",
    "encryption_password": "ACTUAL_ENCRYPTION_PASSWORD",
    "account": "ACTUAL_ACCOUNT",
    "bank_username": "RAIFFEISEN_USERNAME",
    "bank_password": "RAIFFEISEN_PASSWORD",
}


@dataclass
class AppConfig:
    data_dir: str = DEFAULT_DATA_DIR
    server_url: str = DEFAULT_SERVER_URL
    password: Optional[str] = None
    sync_id: Optional[str] = None
    encryption_password: Optional[str] = None
    account: Optional[str] = None
    bank_username: Optional[str] = None
    bank_password: Optional[str] = None

    @staticmethod
    def load(config_path: Optional[str | Path] = None, use_env: bool = True) -> "AppConfig":
        """Load config from JSON if provided, then apply the environment.

        JSON format (every key optional):
        {
          "data_dir": "data",
          "server_url": "http://localhost:5656",
          "password": "...",
          "sync_id": "...",
          "account": "Checking"
        }
        """

        cfg = AppConfig()
        known = {f.name for f in fields(AppConfig)}

        if config_path:
            p = Path(config_path)
            if p.exists():
                with p.open("r", encoding="utf-8") as f:
                    raw = json.load(f)
                if not isinstance(raw, dict):
                    raise ValueError(f"{p.name}: config must be a JSON object")
                for key, value in raw.items():
                    if key in known and value is not None:
                        setattr(cfg, key, str(value))

        if use_env:
            load_dotenv(find_dotenv(usecwd=True))
            for key, var in ENV_VARS.items():
                value = os.getenv(var)
                if value:
                    setattr(cfg, key, value)
        return cfg

    def override(self, **values: Optional[str]) -> "AppConfig":
        for key, value in values.items():
            if value is not None:
                setattr(self, key, value)
        return self

    def require(self, *names: str) -> None:
        missing = [n for n in names if not getattr(self, n)]
        if missing:
            hint = ", ".join(f"{n} ({ENV_VARS[n]})" for n in missing)
            raise ValueError(f"Missing required settings: {hint}")
