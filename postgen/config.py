from __future__ import annotations

import json
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml

from .errors import ConfigError

DEFAULT_INDEX_NAME = "posts"
DEFAULT_METADATA_NAME = "metadata"


@dataclass(frozen=True)
class BuildConfig:
    """Everything a build needs, decided once by the caller.

    Attributes:
        input_dir: Root searched recursively for ``*.md`` sources.
        output_dir: Directory holding ``<name>.json`` outputs (not searched recursively).
        index_name: File name, without ``.json``, of the aggregate post list.
        force: Render every source even when its output is up to date.
        metadata_path: Optional global metadata file declaring series and categories.
        metadata_name: File name, without ``.json``, of the metadata sidecar.
        workers: Thread count for stat/render/write fan-out (0 = auto).
    """

    input_dir: Path
    output_dir: Path
    index_name: str = DEFAULT_INDEX_NAME
    force: bool = False
    metadata_path: Optional[Path] = None
    metadata_name: str = DEFAULT_METADATA_NAME
    workers: int = 0

    @property
    def index_path(self) -> Path:
        return self.output_dir / f"{self.index_name}.json"

    @property
    def metadata_output_path(self) -> Path:
        return self.output_dir / f"{self.metadata_name}.json"

    @property
    def reserved_names(self) -> tuple[str, ...]:
        return (self.index_name, self.metadata_name)


def load_config(path: Path, required: bool = False) -> dict:
    """Read a TOML, YAML or JSON mapping. A missing optional file is ``{}``."""
    if not path.exists():
        if required:
            raise ConfigError(f"File not found: {path}")
        return {}
    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8")
    if suffix == ".toml":
        try:
            data = tomllib.loads(text)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc
    elif suffix in {".yml", ".yaml"}:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
        if data is None:
            return {}
    else:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Config must be a mapping: {path}")
    return data
