"""Real Settings factory pointed at temporary directories."""

from __future__ import annotations

from pathlib import Path

from display_core.config.settings import Settings


def make_settings(tmp_path: Path, **overrides: object) -> Settings:
    """Create a Settings instance whose on-disk state lives under tmp_path.

    Retry delays are kept at their defaults; tests inject a fake sleep
    rather than shrinking the backoff.
    """
    defaults: dict[str, object] = {
        "api_url": "https://api.test",
        "cache_dir": tmp_path / "cache",
        "store_dir": tmp_path / "store",
        "credentials_file": tmp_path / "credentials.json",
        "health_check_timeout_seconds": 0.5,
        "log_level": "INFO",
        "log_format": "console",
    }
    defaults.update(overrides)
    return Settings(**defaults)  # type: ignore[arg-type]
