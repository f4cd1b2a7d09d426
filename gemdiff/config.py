"""
Configuration — loads settings from .gemdiff.yaml, environment variables,
and built-in defaults (in that priority order: CLI args > env > YAML > defaults).
"""

import os

import yaml


_DEFAULTS = {
    "model": "gemini-2.5-pro",
    "gemini_api_key": "",
    "gemini_base_url": "https://generativelanguage.googleapis.com/v1beta",
    "include_thoughts": True,
    "stream": True,
    "llm_max_retries": 3,
    "llm_retry_delay": 2.0,
    "log_dir": ".gemdiff/logs",
    "metrics_enabled": True,
}

# Config file search locations
_CONFIG_FILENAMES = [".gemdiff.yaml", ".gemdiff.yml"]


def _find_config_file(explicit_path: str | None = None) -> str | None:
    """Find the config file. Checks explicit path, CWD, then user home."""
    if explicit_path:
        if os.path.isfile(explicit_path):
            return explicit_path
        return None

    search_dirs = [os.getcwd(), os.path.expanduser("~")]
    for d in search_dirs:
        for name in _CONFIG_FILENAMES:
            path = os.path.join(d, name)
            if os.path.isfile(path):
                return path
    return None


def _load_yaml(path: str) -> dict:
    """Load YAML file, returns empty dict on failure."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        return data if isinstance(data, dict) else {}
    except (OSError, yaml.YAMLError):
        return {}


class Config:
    """Application configuration.

    Settings are resolved in priority order:
    1. CLI arguments (handled by caller)
    2. Environment variables
    3. .gemdiff.yaml config file
    4. Built-in defaults
    """

    def __init__(self, yaml_data: dict | None = None):
        yd = yaml_data or {}

        # Helper: env var > yaml > default
        def _get(env_key: str, yaml_key: str, default, cast=str):
            env_val = os.getenv(env_key)
            if env_val is not None:
                return cast(env_val)
            yaml_val = yd.get(yaml_key)
            if yaml_val is not None:
                return cast(yaml_val)
            return default

        def _get_bool(env_key: str, yaml_key: str, default: bool) -> bool:
            env_val = os.getenv(env_key)
            if env_val is not None:
                return env_val.lower() == "true"
            yaml_val = yd.get(yaml_key)
            if yaml_val is not None:
                return bool(yaml_val)
            return default

        self.MODEL = _get("GEMDIFF_MODEL", "model", _DEFAULTS["model"])

        # Gemini section may be nested or flat
        gemini_section = yd.get("gemini", {}) if isinstance(yd.get("gemini"), dict) else {}
        self.GEMINI_API_KEY = (
            os.getenv("GEMINI_API_KEY")
            or gemini_section.get("api_key")
            or yd.get("gemini_api_key")
            or _DEFAULTS["gemini_api_key"]
        )
        self.GEMINI_BASE_URL = (
            os.getenv("GEMINI_BASE_URL")
            or gemini_section.get("base_url")
            or yd.get("gemini_base_url")
            or _DEFAULTS["gemini_base_url"]
        )
        self.INCLUDE_THOUGHTS = _get_bool("GEMDIFF_INCLUDE_THOUGHTS",
                                          "include_thoughts",
                                          _DEFAULTS["include_thoughts"])
        self.STREAM_RESPONSES = _get_bool("GEMDIFF_STREAM", "stream",
                                          _DEFAULTS["stream"])

        self.LLM_MAX_RETRIES = _get("LLM_MAX_RETRIES", "llm_max_retries",
                                    _DEFAULTS["llm_max_retries"], cast=int)
        self.LLM_RETRY_DELAY = _get("LLM_RETRY_DELAY", "llm_retry_delay",
                                    _DEFAULTS["llm_retry_delay"], cast=float)

        self.LOG_DIR = _get("GEMDIFF_LOG_DIR", "log_dir", _DEFAULTS["log_dir"])
        self.METRICS_ENABLED = _get_bool("GEMDIFF_METRICS", "metrics_enabled",
                                         _DEFAULTS["metrics_enabled"])

    @classmethod
    def load(cls, config_path: str | None = None) -> "Config":
        """Load config from YAML file (if found) + env vars + defaults."""
        path = _find_config_file(config_path)
        yaml_data = _load_yaml(path) if path else {}
        return cls(yaml_data)
