"""Application settings stored as JSON under the XDG config directory."""

from __future__ import annotations

import logging
from dataclasses import dataclass, asdict, field
from pathlib import Path

from .utils import config_dir, mango_config_dir, read_json, write_json

log = logging.getLogger(__name__)


def _default_monitors_conf() -> str:
    return str(mango_config_dir() / "monitors.sh")


@dataclass
class AppSettings:
    # Destination of Save
    monitors_conf_path: str = field(default_factory=_default_monitors_conf)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: dict) -> AppSettings:
        return cls(**{k: v for k, v in d.items() if k in cls.__dataclass_fields__})

    @staticmethod
    def path() -> Path:
        """Return the path to the global app settings file."""
        return config_dir() / "settings.json"

    @classmethod
    def load(cls, path: Path | None = None) -> AppSettings:
        """Load settings, falling back to defaults if missing or unreadable."""
        path = path or cls.path()
        data = read_json(path)
        if not isinstance(data, dict):
            if path.exists():
                log.warning("Ignoring unreadable settings file %s", path)
            return cls()
        return cls.from_dict(data)

    def save(self, path: Path | None = None) -> None:
        write_json(path or self.path(), self.to_dict())
