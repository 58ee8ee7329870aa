import os
from typing import Optional

_SETTINGS_MODULES = {
    "dev": "config.development",
    "development": "config.development",
    "prod": "config.production",
    "production": "config.production",
    "test": "config.testing",
    "testing": "config.testing",
}


def get_settings_module(env: Optional[str] = None) -> str:
    """Settings module for `env`, or for APP_ENV (default development)."""
    name = (env or os.getenv("APP_ENV") or "development").strip().lower()
    try:
        return _SETTINGS_MODULES[name]
    except KeyError:
        raise ValueError(f"Unknown APP_ENV {name!r}; expected one of {sorted(set(_SETTINGS_MODULES))}")
