from __future__ import annotations

import re
from pathlib import Path
from typing import Optional

from .errors import NameValidationError

IDENTITY_RE = re.compile(r"^[A-Za-z0-9_-]+$")
BRACKET_RE = re.compile(r"\[([A-Za-z0-9_-]+)\]")


def is_valid_identity(name: str) -> bool:
    return bool(IDENTITY_RE.match(name))


def resolve_identity(path: str | Path) -> Optional[str]:
    """Name of a post derived from its file name.

    ``hello-world.md`` is ``hello-world``. A stem that is not a valid name
    may carry it between brackets, so ``2024 Notes [notes].md`` is ``notes``.
    Returns ``None`` when there is no bracketed name or more than one.
    """
    stem = Path(path).stem
    if is_valid_identity(stem):
        return stem
    matches = BRACKET_RE.findall(stem)
    if len(matches) != 1:
        return None
    return matches[0]


def require_identity(path: str | Path) -> str:
    name = resolve_identity(path)
    if name is None:
        raise NameValidationError([str(path)])
    return name
