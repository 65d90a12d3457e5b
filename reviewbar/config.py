import os
from pathlib import Path

# Settings read from the environment. Instantiate Settings() again to pick up changes.


def _as_bool(val: str | None, default: bool = False) -> bool:
    if val is None:
        return default
    return val.lower() in ("1", "true", "yes", "on")


def _as_float(val: str | None, default: float) -> float:
    if val is None or not val.strip():
        return default
    try:
        return float(val)
    except ValueError:
        return default


_DEFAULT_PREFS_PATH = Path.home() / ".config" / "reviewbar" / "prefs.json"


class Settings:
    def __init__(self) -> None:
        self.API_URL: str = os.getenv("REVIEWBAR_API_URL", "http://localhost:4000").rstrip("/")
        self.API_TIMEOUT: float = _as_float(os.getenv("REVIEWBAR_API_TIMEOUT"), 10.0)
        self.LOCATE_ENABLED: bool = _as_bool(os.getenv("REVIEWBAR_LOCATE"), True)
        self.LOCATION: str | None = os.getenv("REVIEWBAR_LOCATION") or None
        self.LOCATE_URL: str = os.getenv("REVIEWBAR_LOCATE_URL", "https://ipapi.co/json/")
        self.LOCATE_TIMEOUT: float = _as_float(os.getenv("REVIEWBAR_LOCATE_TIMEOUT"), 10.0)
        self.LOCATE_MAX_AGE: float = _as_float(os.getenv("REVIEWBAR_LOCATE_MAX_AGE"), 300.0)
        self.PREFS_PATH: Path = Path(os.getenv("REVIEWBAR_PREFS_PATH") or _DEFAULT_PREFS_PATH).expanduser()
        self.LOG_LEVEL: str = os.getenv("REVIEWBAR_LOG_LEVEL", "WARNING").upper()


settings = Settings()
