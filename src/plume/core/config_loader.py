"""Loading of the per-site ``.plume/config.yml`` file."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from plume.core.config import PlumeConfig

logger = logging.getLogger(__name__)

CONFIG_DIR = ".plume"
CONFIG_FILE = "config.yml"


class ConfigLoader:
    """Build a :class:`PlumeConfig` for one site directory.

    Values come from, highest first: ``PLUME_SECTION__KEY`` environment
    variables, the site's config file, then the field defaults.
    """

    def __init__(self, site_root: Path | None = None):
        self.site_root = site_root if site_root is not None else Path.cwd()

    @property
    def config_path(self) -> Path:
        return self.site_root / CONFIG_DIR / CONFIG_FILE

    def load(self) -> PlumeConfig:
        data = self.read_file()
        paths = data.setdefault("paths", {}) or {}
        if not isinstance(paths, dict):
            msg = f"'paths' in {self.config_path} must be a mapping, got {type(paths).__name__}"
            raise ValueError(msg)
        paths["site_root"] = self.site_root
        data["paths"] = paths
        return PlumeConfig(**data)

    def read_file(self) -> dict[str, Any]:
        """Return the parsed config file, or an empty mapping when there is none."""
        path = self.config_path
        if not path.is_file():
            logger.debug("No config file at %s, using defaults", path)
            return {}

        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {path}: {exc}") from exc

        if data is None:
            return {}
        if not isinstance(data, dict):
            msg = f"Configuration root in {path} must be a mapping, got {type(data).__name__}"
            raise ValueError(msg)
        return data
