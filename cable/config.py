"""
Client settings.

Values come from CABLE_* environment variables and can be overridden by the
command line (see cable.cli).
"""

import os
import logging
from typing import Mapping, Optional

DEFAULT_ADDRESS = "127.0.0.1:21"
DEFAULT_UI_PORT = 8501

_TRUE_VALUES = ('1', 'true', 'yes', 'on')


def _env_flag(env: Mapping[str, str], name: str, default: bool = False) -> bool:
    value = env.get(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUE_VALUES


def _env_float(env: Mapping[str, str], name: str) -> Optional[float]:
    value = env.get(name, "").strip()
    if not value:
        return None
    try:
        timeout = float(value)
    except ValueError:
        raise ValueError(f"{name} must be a number of seconds, got {value!r}")
    if timeout <= 0:
        raise ValueError(f"{name} must be positive, got {value!r}")
    return timeout


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    value = env.get(name, "").strip()
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}")


def _env_level(env: Mapping[str, str], name: str, default: str = "INFO") -> str:
    level = env.get(name, default).strip().upper() or default
    if not isinstance(logging.getLevelName(level), int):
        raise ValueError(f"{name} is not a logging level: {level!r}")
    return level


class Settings:
    def __init__(self, address: str = DEFAULT_ADDRESS, user: str = "", password: str = "",
                 timeout: Optional[float] = None, debug: bool = False,
                 log_level: str = "INFO", ui_port: int = DEFAULT_UI_PORT):
        self.address = address
        self.user = user
        self.password = password
        self.timeout = timeout
        self.debug = debug
        self.log_level = log_level
        self.ui_port = ui_port

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        if env is None:
            env = os.environ
        return cls(
            address=env.get("CABLE_ADDRESS", "").strip() or DEFAULT_ADDRESS,
            user=env.get("CABLE_USER", ""),
            password=env.get("CABLE_PASSWORD", ""),
            timeout=_env_float(env, "CABLE_TIMEOUT"),
            debug=_env_flag(env, "CABLE_DEBUG"),
            log_level=_env_level(env, "CABLE_LOG_LEVEL"),
            ui_port=_env_int(env, "CABLE_UI_PORT", DEFAULT_UI_PORT),
        )

    def override(self, **values) -> "Settings":
        """Returns a copy where every non-None keyword replaces the current value."""
        merged = dict(vars(self))
        merged.update({k: v for k, v in values.items() if v is not None})
        return Settings(**merged)

    def __repr__(self):
        return (f"Settings(address={self.address!r}, user={self.user!r}, "
                f"timeout={self.timeout}, debug={self.debug}, log_level={self.log_level!r})")


def configure_logging(level: str = "INFO"):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
