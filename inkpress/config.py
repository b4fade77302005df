from __future__ import annotations

import json
import tomllib
from pathlib import Path

import yaml

from .errors import ConfigError
from .utils import parse_bool

DEFAULT_PERMALINK = "/:title"
DEFAULT_ARCHIVE_URL_FORMAT = "/archive/:year/:month"


def load_config(path: Path) -> dict:
    if not path.exists():
        return {}
    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8")
    if suffix == ".toml":
        try:
            data = tomllib.loads(text)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"Invalid TOML in config file {path}: {exc}") from exc
    elif suffix in {".yml", ".yaml"}:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in config file {path}: {exc}") from exc
        if data is None:
            return {}
    else:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Invalid JSON in config file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Config must be a mapping: {path}")
    return data


class Config:
    """Site settings read from ``_config.yml``.

    Only a handful of keys matter to generation; anything else in the file is
    kept in ``data`` for templates and is otherwise ignored.
    """

    def __init__(self, data: dict | None = None) -> None:
        self.data = dict(data or {})

    @classmethod
    def from_file(cls, path: Path) -> Config:
        return cls(load_config(path))

    @property
    def permalink(self) -> str:
        return str(self.data.get("permalink") or DEFAULT_PERMALINK)

    def _archive_section(self) -> dict:
        section = self.data.get("archive")
        if section is None:
            return {}
        if not isinstance(section, dict):
            raise ConfigError("The 'archive' setting must be a mapping.")
        return section

    @property
    def archive_enabled(self) -> bool:
        return parse_bool(self._archive_section().get("enabled"))

    @property
    def archive_url_format(self) -> str:
        return str(self._archive_section().get("url_format") or DEFAULT_ARCHIVE_URL_FORMAT)
