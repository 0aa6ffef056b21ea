"""
Configuration management for the survey app.

Settings come from, in order of priority:
1. Environment variables (a .env file is loaded at app start)
2. config.json next to the executable/project root
3. Built-in defaults

Keys: storage_backend, data_dir, supabase_url, supabase_key, code_attempts.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from imagesurvey.codes import DEFAULT_CODE_ATTEMPTS
from imagesurvey.paths import get_config_path, get_db_dir

logger = logging.getLogger(__name__)

DEFAULT_BACKEND = "file"

# config key -> environment variable
ENV_KEYS = {
    "storage_backend": "IMAGESURVEY_BACKEND",
    "data_dir": "IMAGESURVEY_DATA_DIR",
    "supabase_url": "SUPABASE_URL",
    "supabase_key": "SUPABASE_KEY",
    "code_attempts": "IMAGESURVEY_CODE_ATTEMPTS",
}


def load_config(config_path: Optional[Path] = None) -> dict:
    """Load configuration from config.json."""
    config_path = config_path or get_config_path()
    if config_path.exists():
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            logger.warning(f"Failed to load config from {config_path}: {e}")
            return {}
    return {}


def get_setting(key: str, config: Optional[dict] = None, default: Any = None) -> Any:
    """Get one setting, environment first, then the config file."""
    env_name = ENV_KEYS.get(key)
    if env_name:
        env_value = os.environ.get(env_name)
        if env_value:
            return env_value
    if config is None:
        config = load_config()
    return config.get(key, default)


def get_settings(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """Resolve every setting with defaults applied."""
    config = load_config(config_path)
    attempts = get_setting("code_attempts", config, DEFAULT_CODE_ATTEMPTS)
    try:
        attempts = int(attempts)
    except (TypeError, ValueError):
        logger.warning(f"Invalid code_attempts {attempts!r}, using {DEFAULT_CODE_ATTEMPTS}")
        attempts = DEFAULT_CODE_ATTEMPTS

    return {
        "storage_backend": get_setting("storage_backend", config, DEFAULT_BACKEND),
        "data_dir": get_setting("data_dir", config, str(get_db_dir())),
        "supabase_url": get_setting("supabase_url", config),
        "supabase_key": get_setting("supabase_key", config),
        "code_attempts": max(1, attempts),
    }
