"""Configuration loading from settings.yaml and .env."""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from dotenv import load_dotenv


class ConfigError(Exception):
    """Raised when a required balance setting is missing or malformed."""

    def __init__(self, message: str, path: str = ""):
        self.path = path
        super().__init__(message)


def load_config(
    config_dir: str | Path | None = None,
) -> dict:
    """Load settings.yaml and .env, return merged config dict."""
    if config_dir is None:
        config_dir = Path(__file__).resolve().parent.parent / "config"
    config_dir = Path(config_dir)

    # Load .env (silently skip if missing)
    env_path = config_dir / ".env"
    load_dotenv(env_path)

    settings_path = config_dir / "settings.yaml"
    if not settings_path.exists():
        raise FileNotFoundError(f"Config not found: {settings_path}")

    with open(settings_path, encoding="utf-8") as f:
        cfg = yaml.safe_load(f) or {}

    if not isinstance(cfg, dict):
        raise ConfigError(f"Expected a mapping at the top of {settings_path}")

    # Environment overrides for deployment-specific values
    cfg["_env"] = {
        "game_db": os.getenv("LABEL_GAME_DB", ""),
        "seed_salt": os.getenv("LABEL_SEED_SALT", ""),
        "log_file": os.getenv("LABEL_LOG_FILE", ""),
    }

    return cfg
