"""TOML configuration loader with env overrides."""

import logging
import os
import tomllib
from pathlib import Path

from phaseguide.domain.ports.config import (
    AppConfig,
    PersistenceConfig,
    SecurityConfig,
    ServerConfig,
    WorkflowsConfig,
)

logger = logging.getLogger(__name__)


def _load_toml(path: Path) -> dict:
    """Load TOML file."""
    with open(path, "rb") as f:
        return tomllib.load(f)


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _apply_env_overrides(config: dict) -> dict:
    """Apply environment variable overrides."""
    if port := os.getenv("PORT"):
        try:
            config.setdefault("server", {})["port"] = int(port)
        except ValueError:
            logger.warning("Invalid PORT env value: %r, ignoring", port)
    if level := os.getenv("LOG_LEVEL"):
        config.setdefault("logging", {})["level"] = level.upper()
    if path := os.getenv("LOG_FILE"):
        config.setdefault("logging", {})["file"] = path.strip()
    if origins := os.getenv("CORS_ORIGINS"):
        config.setdefault("security", {})["cors_origins"] = _split_csv(origins)
    if rate := os.getenv("RATE_LIMIT_PER_MINUTE"):
        try:
            config.setdefault("security", {})["rate_limit_requests_per_minute"] = int(rate)
        except ValueError:
            logger.warning("Invalid RATE_LIMIT_PER_MINUTE env value: %r, ignoring", rate)
    # Set-but-empty clears the allow-list from the config file.
    if (domains := os.getenv("VIBE_WORKFLOW_DOMAINS")) is not None:
        config.setdefault("workflows", {})["domains"] = _split_csv(domains)
    if default := os.getenv("VIBE_DEFAULT_WORKFLOW"):
        config.setdefault("workflows", {})["default"] = default.strip()
    if workflows_dir := os.getenv("VIBE_WORKFLOWS_DIR"):
        config.setdefault("workflows", {})["bundled_dir"] = workflows_dir.strip()
    return config


def load_config(config_dir: Path | None = None) -> AppConfig:
    """Load configuration from TOML files with env overrides.

    Loads default.toml, then development.toml if exists.
    """
    if config_dir is None:
        config_dir = Path(__file__).resolve().parent.parent.parent.parent / "config"

    config: dict = {}

    default_path = config_dir / "default.toml"
    if default_path.exists():
        config = _load_toml(default_path)

    dev_path = config_dir / "development.toml"
    if dev_path.exists():
        dev_config = _load_toml(dev_path)
        for key, value in dev_config.items():
            if isinstance(value, dict) and key in config and isinstance(config[key], dict):
                config[key] = {**config[key], **value}
            else:
                config[key] = value

    config = _apply_env_overrides(config)

    logging_raw = config.get("logging") or {}
    return AppConfig(
        server=ServerConfig(**(config.get("server") or {})),
        security=SecurityConfig(**(config.get("security") or {})),
        workflows=WorkflowsConfig(**(config.get("workflows") or {})),
        persistence=PersistenceConfig(**(config.get("persistence") or {})),
        log_level=logging_raw.get("level", "INFO"),
        log_file=(logging_raw.get("file") or "").strip(),
        log_rotation_max_mb=int(logging_raw.get("log_rotation_max_mb", 5)),
        log_rotation_backups=int(logging_raw.get("log_rotation_backups", 3)),
    )
