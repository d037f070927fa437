"""Configuration helpers for loading environment variables.

Variables defined in a project-level ``.env`` file are loaded once before the
first lookup. Engine code reads settings through :func:`get_env` and
:func:`get_bool_env` rather than :func:`os.getenv` so configuration is loaded
in a single place.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

INCLUDE_TRACEBACK = "STEPGRAPH_INCLUDE_TRACEBACK"

_TRUTHY = {"1", "true", "yes", "on"}


@lru_cache(maxsize=1)
def _load_environment() -> None:
    """Load environment variables from the project's ``.env`` file.

    Falls back to the default :func:`load_dotenv` discovery when the project
    root has no ``.env``. Existing process variables are never overridden.
    """

    project_root = Path(__file__).resolve().parents[1]
    env_path = project_root / ".env"

    if env_path.exists():
        load_dotenv(env_path, override=False)
    else:
        load_dotenv(override=False)


def get_env(key: str, default: Optional[str] = None) -> Optional[str]:
    """Return the value for ``key`` from the environment."""

    _load_environment()
    return os.environ.get(key, default)


def get_bool_env(key: str, default: bool = False) -> bool:
    """Return ``key`` interpreted as a boolean flag."""

    value = get_env(key)
    if value is None:
        return default
    return value.strip().lower() in _TRUTHY


__all__ = ["INCLUDE_TRACEBACK", "get_bool_env", "get_env"]
