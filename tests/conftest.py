"""Shared test fixtures for postgen."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from postgen.config import BuildConfig

# Sources are dated well in the past so freshly written outputs are newer.
PAST_NS = 1_600_000_000 * 10**9


def front_matter(title: str = "Hello", written: str = "2022-09-30 04:18", **extra: object) -> str:
    lines = ["---", f"title: {title}", f"writtenDate: {written}"]
    for key, value in extra.items():
        if isinstance(value, bool):
            value = "true" if value else "false"
        lines.append(f"{key}: {value}")
    lines.append("---")
    return "\n".join(lines) + "\n"


def set_mtime(path: Path, ns: int) -> None:
    os.utime(path, ns=(ns, ns))


def snapshot(root: Path) -> dict[str, tuple[int, bytes]]:
    if not root.exists():
        return {}
    return {
        path.name: (path.stat().st_mtime_ns, path.read_bytes())
        for path in sorted(root.iterdir())
        if path.is_file()
    }


@pytest.fixture
def input_dir(tmp_path: Path) -> Path:
    path = tmp_path / "posts"
    path.mkdir()
    return path


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    return tmp_path / "out"


@pytest.fixture
def write_post(input_dir: Path):
    """Write a markdown source (optionally in a sub directory) with an old mtime."""

    def _write(name: str, text: str | None = None, body: str = "Some text.\n", **fm: object) -> Path:
        path = input_dir / name
        path.parent.mkdir(parents=True, exist_ok=True)
        if text is None:
            text = front_matter(**fm) + "\n" + body
        path.write_text(text, encoding="utf-8")
        set_mtime(path, PAST_NS)
        return path

    return _write


@pytest.fixture
def config(input_dir: Path, output_dir: Path) -> BuildConfig:
    return BuildConfig(input_dir=input_dir, output_dir=output_dir, workers=2)
