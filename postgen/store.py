from __future__ import annotations

import contextlib
import json
import os
from collections.abc import Iterable
from pathlib import Path

from .errors import DeletionError, OutputRecordError, WriteError
from .identity import resolve_identity
from .utils import parse_datetime


def list_sources(root: Path) -> list[str]:
    if not root.exists():
        return []
    return sorted(str(path) for path in root.rglob("*.md") if path.is_file())


def list_outputs(root: Path, excluded_names: Iterable[str] = ()) -> list[str]:
    """Post outputs directly under ``root``; the index and sidecar are left out."""
    if not root.exists():
        return []
    excluded = set(excluded_names)
    outputs = []
    for path in root.glob("*.json"):
        if not path.is_file() or path.stem in excluded:
            continue
        if resolve_identity(path) is None:
            continue
        outputs.append(str(path))
    return sorted(outputs)


def read_text(path: str | Path) -> str:
    return Path(path).read_text(encoding="utf-8")


def check_record(data: object) -> dict:
    """Return ``data`` if it has the shape of a written post, else raise OutputRecordError."""
    if not isinstance(data, dict):
        raise OutputRecordError(f"expected a JSON object, got {type(data).__name__}")
    missing = [key for key in ("name", "content", "metadata") if key not in data]
    if missing:
        raise OutputRecordError(f"missing {', '.join(missing)}")
    metadata = data["metadata"]
    if not isinstance(metadata, dict):
        raise OutputRecordError("metadata: expected a JSON object")
    if "writtenDate" not in metadata:
        raise OutputRecordError("metadata.writtenDate: missing")
    try:
        parse_datetime(metadata["writtenDate"])
    except ValueError as exc:
        raise OutputRecordError(f"metadata.writtenDate: {exc}") from exc
    return data


def read_record(path: str | Path) -> dict:
    return check_record(json.loads(read_text(path)))


def write_json(path: Path, data: object) -> None:
    """Write through a temporary file so readers never see half a document."""
    tmp = path.with_suffix(path.suffix + ".tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with tmp.open("w", encoding="utf-8") as handle:
            json.dump(data, handle, ensure_ascii=False)
        tmp.replace(path)
    except OSError as exc:
        with contextlib.suppress(OSError):
            tmp.unlink()
        raise WriteError(str(path), exc) from exc


def remove_file(path: str | Path) -> None:
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError as exc:
        raise DeletionError(str(path), exc) from exc
