"""YAML front matter and the global metadata file.

A post starts with a block like::

    ---
    title: Hello
    writtenDate: 2022-09-30 04:18
    category: [notes]
    ---

The block is parsed into a :class:`FrontMatter`, which only admits the keys
listed in ``KNOWN_FIELDS``.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from .config import load_config
from .errors import ConfigError, FrontMatterMissingError, FrontMatterValidationError
from .utils import iso_date, parse_datetime

FENCE = "---"

# Keys accepted in front matter. Control flags are not stored with the post.
REQUIRED_FIELDS = ("title", "writtenDate")
TEXT_FIELDS = ("title", "subtitle", "series", "description")
FLAG_FIELDS = ("draft", "noPublish", "unlisted")
KNOWN_FIELDS = frozenset(TEXT_FIELDS + FLAG_FIELDS + ("writtenDate", "category"))


def split_front_matter(text: str) -> tuple[Optional[str], str]:
    """Return the raw YAML block (or None) and the markdown after it."""
    clean_text = text.lstrip("\ufeff")
    lines = clean_text.splitlines()
    if not lines or lines[0].strip() != FENCE:
        return None, clean_text
    for i in range(1, len(lines)):
        if lines[i].strip() == FENCE:
            return "\n".join(lines[1:i]), "\n".join(lines[i + 1 :])
    return None, clean_text


@dataclass(frozen=True)
class GlobalMetadata:
    """Series and categories a post may refer to."""

    series: dict[str, dict] = field(default_factory=dict)
    categories: dict[str, dict] = field(default_factory=dict)

    @classmethod
    def load(cls, path: Path) -> GlobalMetadata:
        data = load_config(path, required=True)
        unknown = sorted(map(str, set(data) - {"series", "categories"}))
        if unknown:
            raise ConfigError(f"Unknown key(s) in {path}: {', '.join(unknown)}")
        return cls(
            series=_declarations(data.get("series"), "series", path),
            categories=_declarations(data.get("categories"), "categories", path),
        )

    def to_json(self) -> dict:
        return {"series": self.series, "categories": self.categories}


def _declarations(value: object, key: str, path: Path) -> dict[str, dict]:
    if value is None:
        return {}
    if isinstance(value, list):
        if not all(isinstance(item, str) for item in value):
            raise ConfigError(f"'{key}' in {path} must list strings")
        return {item: {} for item in value}
    if not isinstance(value, dict):
        raise ConfigError(f"'{key}' in {path} must be a list or a mapping")
    result = {}
    for name, info in value.items():
        if info is None:
            info = {}
        if not isinstance(info, dict) or not all(isinstance(v, str) for v in info.values()):
            raise ConfigError(f"'{key}.{name}' in {path} must map to text fields")
        result[str(name)] = dict(info)
    return result


@dataclass(frozen=True)
class FrontMatter:
    title: str
    written_date: dt.datetime
    subtitle: Optional[str] = None
    series: Optional[str] = None
    description: Optional[str] = None
    category: Optional[tuple[str, ...]] = None
    draft: bool = False
    no_publish: bool = False
    unlisted: bool = False

    @property
    def skip(self) -> bool:
        return self.draft or self.no_publish

    @classmethod
    def from_mapping(cls, data: object, metadata: Optional[GlobalMetadata] = None) -> FrontMatter:
        """Validate a parsed YAML value, reporting every problem at once."""
        if not isinstance(data, dict):
            raise FrontMatterValidationError([f"expected a mapping, got {type(data).__name__}"])

        problems = []
        for key in sorted(set(data) - KNOWN_FIELDS, key=str):
            problems.append(f"{key}: unknown property")
        for key in REQUIRED_FIELDS:
            if key not in data:
                problems.append(f"{key}: required property is missing")
        for key in TEXT_FIELDS:
            if key in data and not isinstance(data[key], str):
                problems.append(f"{key}: expected string")
        for key in FLAG_FIELDS:
            if key in data and not isinstance(data[key], bool):
                problems.append(f"{key}: expected boolean")

        written_date = None
        if "writtenDate" in data:
            try:
                written_date = parse_datetime(data["writtenDate"])
            except ValueError:
                problems.append("writtenDate: expected date-time string")

        category = data.get("category")
        if "category" in data:
            if not isinstance(category, list) or not all(isinstance(c, str) for c in category):
                problems.append("category: expected array of strings")
                category = None

        if metadata is not None:
            series = data.get("series")
            if isinstance(series, str) and series not in metadata.series:
                problems.append(f"series: '{series}' is not declared in global metadata")
            for name in category or []:
                if name not in metadata.categories:
                    problems.append(f"category: '{name}' is not declared in global metadata")

        if problems:
            raise FrontMatterValidationError(problems)

        return cls(
            title=data["title"],
            written_date=written_date,
            subtitle=data.get("subtitle"),
            series=data.get("series"),
            description=data.get("description"),
            category=tuple(category) if category is not None else None,
            draft=data.get("draft", False),
            no_publish=data.get("noPublish", False),
            unlisted=data.get("unlisted", False),
        )

    def to_metadata(self, description: str) -> dict:
        """Stored form of the front matter, without control flags."""
        meta = {"description": description, "title": self.title, "writtenDate": iso_date(self.written_date)}
        if self.subtitle is not None:
            meta["subtitle"] = self.subtitle
        if self.series is not None:
            meta["series"] = self.series
        if self.category is not None:
            meta["category"] = list(self.category)
        return meta


def parse_front_matter(text: str, metadata: Optional[GlobalMetadata] = None) -> tuple[FrontMatter, str]:
    block, body = split_front_matter(text)
    if block is None:
        raise FrontMatterMissingError()
    try:
        data = yaml.safe_load(block)
    except yaml.YAMLError as exc:
        raise FrontMatterValidationError([f"invalid YAML: {exc}"]) from exc
    if data is None:
        raise FrontMatterMissingError()
    return FrontMatter.from_mapping(data, metadata), body
