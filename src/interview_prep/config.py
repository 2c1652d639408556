"""Configuration loading from .env and YAML files."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from interview_prep.companies import ArchetypeRule, KeywordClassifier, rules_from_config

# Comma-separated list of keys, checked in addition to api_key_envs.
API_KEYS_ENV = "OPENROUTER_API_KEYS"


@dataclass
class OpenRouterConfig:
    model: str = "google/gemini-2.0-flash-001"
    api_key_envs: list[str] = field(default_factory=lambda: ["OPENROUTER_API_KEY"])
    timeout: float = 120.0
    max_retries: int = 3
    referer: str = "http://localhost"
    title: str = "Interview Prep AI"

    @property
    def api_keys(self) -> list[str]:
        keys = [os.environ.get(name, "") for name in self.api_key_envs]
        keys.extend(os.environ.get(API_KEYS_ENV, "").split(","))
        seen: list[str] = []
        for key in keys:
            key = key.strip()
            if key and key not in seen:
                seen.append(key)
        return seen


@dataclass
class Config:
    openrouter: OpenRouterConfig = field(default_factory=OpenRouterConfig)
    data_dir: Path = field(default_factory=lambda: Path.home() / ".interview-prep")
    company_rules: list[ArchetypeRule] = field(default_factory=list)

    @property
    def db_path(self) -> Path:
        return self.data_dir / "sessions.db"

    @property
    def classifier(self) -> KeywordClassifier:
        return KeywordClassifier().with_rules(self.company_rules)


def load_config(config_path: Path | None = None, env_path: Path | None = None) -> Config:
    """Load configuration from .env and optional YAML config file."""
    env_file = env_path or Path(".env")
    if env_file.exists():
        load_dotenv(env_file)

    config = Config()

    yaml_file = config_path or Path("config.yaml")
    if yaml_file.exists():
        with yaml_file.open() as f:
            raw: dict[str, Any] = yaml.safe_load(f) or {}

        if "openrouter" in raw:
            or_raw = raw["openrouter"] or {}
            defaults = config.openrouter
            key_envs = or_raw.get("api_key_envs", defaults.api_key_envs)
            if isinstance(key_envs, str):
                key_envs = [key_envs]
            config.openrouter = OpenRouterConfig(
                model=or_raw.get("model", defaults.model),
                api_key_envs=list(key_envs),
                timeout=float(or_raw.get("timeout", defaults.timeout)),
                max_retries=int(or_raw.get("max_retries", defaults.max_retries)),
                referer=or_raw.get("referer", defaults.referer),
                title=or_raw.get("title", defaults.title),
            )

        if "data_dir" in raw:
            config.data_dir = Path(raw["data_dir"]).expanduser()

        if "companies" in raw:
            config.company_rules = rules_from_config(raw["companies"])

    return config
