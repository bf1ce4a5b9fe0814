"""
Configuration for paperharvest, read from the environment and an optional YAML file
"""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_USER_AGENT = "paperharvest/0.1.0 (+https://github.com/hpc-site/paperharvest)"


class HarvestSettings(BaseSettings):
    """Crawler settings; every field can be overridden with PAPERHARVEST_<NAME>"""

    model_config = SettingsConfigDict(env_prefix="PAPERHARVEST_", extra="ignore")

    database_path: Path = Path(".paperharvest/papers.db")
    search_url: str = "https://arxiv.org/search/"
    abs_url: str = "https://arxiv.org/abs/"
    user_agent: str = DEFAULT_USER_AGENT

    request_timeout: float = Field(default=30.0, gt=0)
    max_attempts: int = Field(default=3, ge=1)
    retry_delay: float = Field(default=2.0, ge=0)
    request_interval: float = Field(default=1.0, ge=0)

    page_size: int = Field(default=50, ge=1, le=200)
    max_workers: int = Field(default=4, ge=1)
    verify_mentions: bool = False


def load_settings(config_path: Optional[str] = None, **overrides: Any) -> HarvestSettings:
    """
    Build settings from an optional YAML file, the environment and explicit overrides

    Environment variables win over the YAML file; keyword overrides win over both.

    Raises:
        FileNotFoundError: If config_path does not exist
        ValueError: If the YAML document is not a mapping
    """
    file_values: Dict[str, Any] = {}
    if config_path:
        path = Path(config_path).expanduser()
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        loaded = yaml.safe_load(path.read_text(encoding="utf-8"))
        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise ValueError(f"Config file must contain a mapping: {path}")
        file_values = loaded

    env_values = HarvestSettings().model_dump(exclude_unset=True)
    merged = {**file_values, **env_values}
    merged.update({key: value for key, value in overrides.items() if value is not None})
    return HarvestSettings(**merged)
