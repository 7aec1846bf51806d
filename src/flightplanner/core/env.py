"""
Environment + project-root helpers.

Route and graph files are configured as repo-relative paths (`data/...`), but the
API, scripts and tests are launched from different working directories. This
module provides:
- `load_dotenv_if_present()`: best-effort `.env` loading (never overrides existing env vars)
- `get_project_root()`: find the repo root (explicit override, then marker files/dirs)
- `resolve_project_path()`: resolve relative paths against the project root
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path


def _looks_like_project_root(path: Path) -> bool:
    if (path / ".env").is_file() or (path / ".git").exists():
        return True
    if (path / "pyproject.toml").is_file() and (path / "src" / "flightplanner").is_dir():
        return True
    return (path / "src").is_dir() and (path / "data").is_dir()


@lru_cache
def get_project_root() -> Path:
    """Return the best-guess project root directory (cached)."""
    override = os.getenv("FLIGHTPLANNER_PROJECT_ROOT")
    if override:
        return Path(override).expanduser().resolve()

    cwd = Path.cwd().resolve()
    for candidate in [cwd, *cwd.parents]:
        if _looks_like_project_root(candidate):
            return candidate

    # Running from outside the repo: search upwards from this module instead.
    here = Path(__file__).resolve().parent
    for candidate in [here, *here.parents]:
        if _looks_like_project_root(candidate):
            return candidate

    return cwd


@lru_cache
def load_dotenv_if_present() -> Path | None:
    """Load `.env` once if present; returns the loaded env path (or None)."""
    from dotenv import load_dotenv

    explicit = os.getenv("FLIGHTPLANNER_ENV_FILE")
    env_path = Path(explicit).expanduser().resolve() if explicit else get_project_root() / ".env"
    if not env_path.is_file():
        return None
    load_dotenv(dotenv_path=env_path, override=False)
    return env_path


def resolve_project_path(path: str | Path) -> Path:
    """Resolve a possibly-relative path against the project root."""
    p = Path(path).expanduser()
    if p.is_absolute():
        return p
    return (get_project_root() / p).resolve()
