import json
import logging
import os
from pathlib import Path
from typing import Any, Dict

logger = logging.getLogger(__name__)

DEFAULT_CONFIG: Dict[str, Any] = {
    "compiler": "rustc",
    "library_path": "",
    "jobs": 0,
    "log_level": "WARNING",
}

# Environment variable -> (config key, converter)
ENV_OVERRIDES = {
    "CFAIL_LIBRARY_PATH": ("library_path", str),
    "CFAIL_THREADS": ("jobs", int),
}


class ConfigManager:
    """
    Settings from ~/.cfail/config.json, merged over DEFAULT_CONFIG, with
    environment overrides applied on top.
    """

    def __init__(self, config_dir: Path = None):
        self.config_dir = Path(config_dir) if config_dir else Path.home() / ".cfail"
        self.config_file = self.config_dir / "config.json"
        self.config = self.load_config()

    def load_config(self) -> Dict[str, Any]:
        config = DEFAULT_CONFIG.copy()
        if self.config_file.exists():
            try:
                with open(self.config_file, "r") as f:
                    data = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                logger.warning("Ignoring unreadable config %s: %s", self.config_file, e)
            else:
                if isinstance(data, dict):
                    config.update(self._checked(data))
                else:
                    logger.warning("Ignoring config %s: expected a JSON object", self.config_file)

        for var, (key, convert) in ENV_OVERRIDES.items():
            value = os.environ.get(var)
            if value is None:
                continue
            try:
                config[key] = convert(value)
            except ValueError:
                logger.warning("Ignoring %s=%r: not a valid %s", var, value, convert.__name__)
        return config

    def _checked(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Drop known keys whose value has the wrong type; unknown keys pass through."""
        checked = {}
        for key, value in data.items():
            default = DEFAULT_CONFIG.get(key)
            if default is not None and (type(value) is not type(default)):
                logger.warning("Ignoring %s=%r in %s: expected %s",
                               key, value, self.config_file, type(default).__name__)
                continue
            checked[key] = value
        return checked

    def save_config(self):
        self.config_dir.mkdir(parents=True, exist_ok=True)
        with open(self.config_file, "w") as f:
            json.dump(self.config, f, indent=4)

    def get(self, key: str, default: Any = None) -> Any:
        return self.config.get(key, default)

    def set(self, key: str, value: Any):
        self.config[key] = value
        self.save_config()

    def worker_count(self) -> int:
        """Configured worker count, or one per CPU when unset."""
        try:
            jobs = int(self.get("jobs", 0) or 0)
        except (TypeError, ValueError):
            logger.warning("Ignoring jobs=%r: not a number", self.get("jobs"))
            jobs = 0
        if jobs > 0:
            return jobs
        return os.cpu_count() or 1
