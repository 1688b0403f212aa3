from __future__ import annotations

from collections.abc import Iterable

from .errors import DuplicateIdentityError, NameValidationError
from .identity import is_valid_identity, resolve_identity, require_identity


def validate_names(paths: Iterable[str], banned_names: Iterable[str] = ()) -> list[str]:
    """Return the paths whose name is unresolvable, reserved or malformed."""
    banned = set(banned_names)
    fails = []
    for path in paths:
        name = resolve_identity(path)
        if name is None or name in banned or not is_valid_identity(name):
            fails.append(path)
    return fails


def detect_duplicates(paths: Iterable[str]) -> dict[str, list[str]]:
    groups: dict[str, list[str]] = {}
    for path in paths:
        groups.setdefault(require_identity(path), []).append(path)
    return {name: group for name, group in groups.items() if len(group) > 1}


def check_sources(paths: list[str], banned_names: Iterable[str] = ()) -> None:
    """Raise before anything is rendered if the source names are unusable."""
    invalid = validate_names(paths, banned_names)
    if invalid:
        raise NameValidationError(invalid)
    duplicates = detect_duplicates(paths)
    if duplicates:
        raise DuplicateIdentityError(duplicates)
