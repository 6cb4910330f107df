import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv


DEFAULT_SETTINGS_PATH = Path("data") / "settings.json"

DEFAULT_SETTINGS: Dict[str, Any] = {
    "environment": "development",
    "server": {
        "host": "127.0.0.1",
        "port": 5000,
        "cors_origin": "http://localhost:5173",
    },
    "client": {
        "api_url": "http://localhost:5000",
        "timeout": 10,
        "delete_delay": 0.3,
    },
}

# (environment variable, settings section or None for top level, key, cast)
ENV_OVERRIDES = (
    ("TASKTRACKER_ENV", None, "environment", str),
    ("HOST", "server", "host", str),
    ("PORT", "server", "port", int),
    ("TASKTRACKER_CORS_ORIGIN", "server", "cors_origin", str),
    ("TASKTRACKER_API_URL", "client", "api_url", str),
)


class SettingsManager:
    """
    Loads the JSON configuration file and layers environment overrides on top.

    The file is stored as pretty-printed JSON so contributors can edit it by hand.
    Environment variables (including those from a local ``.env``) win over the file.
    """

    def __init__(self, path: Path, environ: Optional[Dict[str, str]] = None) -> None:
        self.path = path
        self._environ = environ
        self._settings: Dict[str, Any] | None = None
        self.path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def settings(self) -> Dict[str, Any]:
        if self._settings is None:
            self._settings = self._load()
        return self._settings

    def reload(self) -> Dict[str, Any]:
        self._settings = self._load()
        return self._settings

    def _load(self) -> Dict[str, Any]:
        merged = self._load_from_disk()
        _apply_env(merged, self._environ if self._environ is not None else os.environ)
        return merged

    def _load_from_disk(self) -> Dict[str, Any]:
        if not self.path.exists():
            self._write(DEFAULT_SETTINGS)
            return json.loads(json.dumps(DEFAULT_SETTINGS))
        with self.path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
        # Merge with defaults to backfill new keys without overwriting manual edits.
        merged = json.loads(json.dumps(DEFAULT_SETTINGS))
        _deep_update(merged, data)
        return merged

    def _write(self, data: Dict[str, Any]) -> None:
        with self.path.open("w", encoding="utf-8") as handle:
            json.dump(data, handle, indent=2, sort_keys=True)
            handle.write("\n")

    @property
    def log_file(self) -> Path:
        return self.path.parent / "server.log"


def load_settings(path: Optional[Path] = None) -> SettingsManager:
    """
    Build a manager for the configured settings file, reading ``.env`` first.
    """
    load_dotenv(override=False)
    if path is None:
        path = Path(os.environ.get("TASKTRACKER_SETTINGS") or DEFAULT_SETTINGS_PATH)
    return SettingsManager(path)


def _apply_env(target: Dict[str, Any], environ) -> None:
    for name, section, key, cast in ENV_OVERRIDES:
        raw = environ.get(name)
        if raw is None or raw == "":
            continue
        try:
            value = cast(raw)
        except ValueError as exc:
            raise ValueError(f"Invalid value for {name}: {raw!r}") from exc
        if section is None:
            target[key] = value
        else:
            target.setdefault(section, {})[key] = value


def _deep_update(target: Dict[str, Any], source: Dict[str, Any]) -> None:
    """
    Recursively update a mapping, preserving nested structures.
    """
    for key, value in source.items():
        if isinstance(value, dict) and isinstance(target.get(key), dict):
            _deep_update(target[key], value)
        else:
            target[key] = value
