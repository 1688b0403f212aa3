"""Tests for postgen.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from postgen.config import BuildConfig, load_config
from postgen.errors import ConfigError


def test_defaults():
    config = BuildConfig(input_dir=Path("in"), output_dir=Path("out"))
    assert config.index_path == Path("out/posts.json")
    assert config.metadata_output_path == Path("out/metadata.json")
    assert config.reserved_names == ("posts", "metadata")
    assert config.force is False
    assert config.metadata_path is None


def test_config_is_frozen():
    config = BuildConfig(input_dir=Path("in"), output_dir=Path("out"))
    with pytest.raises(AttributeError):
        config.force = True


@pytest.mark.parametrize(
    ("name", "text"),
    [
        ("postgen.toml", 'posts = "all"\nworkers = 2\n'),
        ("postgen.yaml", "posts: all\nworkers: 2\n"),
        ("postgen.json", '{"posts": "all", "workers": 2}'),
    ],
)
def test_load_config_formats(tmp_path, name, text):
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    assert load_config(path) == {"posts": "all", "workers": 2}


def test_load_config_missing(tmp_path):
    assert load_config(tmp_path / "none.toml") == {}
    with pytest.raises(ConfigError):
        load_config(tmp_path / "none.toml", required=True)


def test_empty_yaml_is_empty_config(tmp_path):
    path = tmp_path / "c.yml"
    path.write_text("", encoding="utf-8")
    assert load_config(path) == {}


@pytest.mark.parametrize(
    ("name", "text"),
    [
        ("bad.toml", "posts = \n"),
        ("bad.yaml", "posts: [\n"),
        ("bad.json", "{"),
        ("list.json", "[1, 2]"),
    ],
)
def test_load_config_errors(tmp_path, name, text):
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(path)
