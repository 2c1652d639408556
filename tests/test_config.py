import os
from pathlib import Path

import yaml

from interview_prep.config import Config, load_config


def test_config_defaults():
    config = Config()
    assert config.openrouter.model == "google/gemini-2.0-flash-001"
    assert config.openrouter.max_retries == 3
    assert config.data_dir == Path.home() / ".interview-prep"
    assert config.db_path == Path.home() / ".interview-prep" / "sessions.db"


def test_load_config_yaml(tmp_path):
    yaml_file = tmp_path / "config.yaml"
    raw = {
        "data_dir": "~/custom-dir",
        "openrouter": {
            "model": "openai/gpt-4o-mini",
            "api_key_envs": ["KEY_ONE", "KEY_TWO"],
            "timeout": 30,
            "max_retries": 5,
        },
        "companies": [
            {"archetype": "Startup", "companies": ["acme"], "keywords": ["garage"]},
        ],
    }
    with yaml_file.open("w") as f:
        yaml.dump(raw, f)

    config = load_config(config_path=yaml_file, env_path=tmp_path / "missing.env")
    assert config.data_dir == Path.home() / "custom-dir"
    assert config.openrouter.model == "openai/gpt-4o-mini"
    assert config.openrouter.api_key_envs == ["KEY_ONE", "KEY_TWO"]
    assert config.openrouter.timeout == 30.0
    assert config.openrouter.max_retries == 5
    assert config.classifier.classify("Acme Corp", "") == "Startup"


def test_api_keys_from_env(tmp_path, monkeypatch):
    env_file = tmp_path / ".env"
    with env_file.open("w") as f:
        f.write("OPENROUTER_API_KEY=test-key\n")
    monkeypatch.delenv("OPENROUTER_API_KEY", raising=False)
    monkeypatch.setenv("OPENROUTER_API_KEYS", "extra-1, extra-2,test-key")

    config = load_config(config_path=tmp_path / "missing.yaml", env_path=env_file)
    assert config.openrouter.api_keys == ["test-key", "extra-1", "extra-2"]
    os.environ.pop("OPENROUTER_API_KEY", None)
