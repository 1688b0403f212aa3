"""Staleness classification of sources against previously written outputs.

Both sides are keyed by the name derived from the file name, so
``posts/hello.md`` and ``out/hello.json`` describe the same post.
"""

from __future__ import annotations

import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .identity import require_identity


@dataclass(frozen=True, slots=True)
class FileStat:
    identity: str
    path: str
    mtime_ns: int


@dataclass(frozen=True, slots=True)
class DiffEntry:
    identity: str
    source: Optional[str] = None
    output: Optional[str] = None


@dataclass(frozen=True, slots=True)
class DiffPartition:
    """Four disjoint groups covering every name seen on either side.

    Attributes:
        fresh: output is at least as new as its source; reuse it.
        stale: output is older than its source; render again.
        orphaned: output whose source is gone; delete it.
        new: source without output; render it.
        redundant: extra outputs sharing a name with another output; delete
            them. Not part of the four groups.
    """

    fresh: tuple[DiffEntry, ...] = ()
    stale: tuple[DiffEntry, ...] = ()
    orphaned: tuple[DiffEntry, ...] = ()
    new: tuple[DiffEntry, ...] = ()
    redundant: tuple[DiffEntry, ...] = ()

    def identities(self) -> set[str]:
        return {entry.identity for group in self.groups() for entry in group}

    def groups(self) -> tuple[tuple[DiffEntry, ...], ...]:
        return (self.fresh, self.stale, self.orphaned, self.new)


def stat_file(path: str) -> FileStat:
    return FileStat(identity=require_identity(path), path=path, mtime_ns=os.stat(path).st_mtime_ns)


def stat_map(paths: list[str], workers: int = 1) -> tuple[dict[str, FileStat], list[FileStat]]:
    """Key stats by name.

    When several files share a name, the one whose stem is the name wins and
    the others come back as extras.
    """
    if workers > 1 and len(paths) > 1:
        with ThreadPoolExecutor(max_workers=min(workers, len(paths))) as executor:
            stats = list(executor.map(stat_file, paths))
    else:
        stats = [stat_file(path) for path in paths]
    by_name: dict[str, FileStat] = {}
    extras: list[FileStat] = []
    for stat in sorted(stats, key=lambda s: (Path(s.path).stem != s.identity, s.path)):
        if stat.identity in by_name:
            extras.append(stat)
        else:
            by_name[stat.identity] = stat
    return by_name, extras


def compute_diff(output_paths: list[str], source_paths: list[str], workers: int = 1) -> DiffPartition:
    """Classify every name into fresh, stale, orphaned or new.

    Source names must be unique; duplicates are rejected earlier by
    :func:`postgen.validate.check_sources`. Clashing output names keep the
    file named exactly after the post and report the rest as ``redundant``.
    Equal modification times count as fresh.
    """
    outputs, extra_outputs = stat_map(output_paths, workers)
    sources, _ = stat_map(source_paths, workers)

    fresh: list[DiffEntry] = []
    stale: list[DiffEntry] = []
    orphaned: list[DiffEntry] = []

    for name in list(outputs):
        out = outputs[name]
        src = sources.get(name)
        if src is None:
            orphaned.append(DiffEntry(identity=name, output=out.path))
            continue
        entry = DiffEntry(identity=name, source=src.path, output=out.path)
        if out.mtime_ns >= src.mtime_ns:
            fresh.append(entry)
        else:
            stale.append(entry)
        del outputs[name]
        del sources[name]

    new = [DiffEntry(identity=src.identity, source=src.path) for src in sources.values()]

    def ordered(entries: list[DiffEntry]) -> tuple[DiffEntry, ...]:
        return tuple(sorted(entries, key=lambda e: e.identity))

    return DiffPartition(
        fresh=ordered(fresh),
        stale=ordered(stale),
        orphaned=ordered(orphaned),
        new=ordered(new),
        redundant=tuple(DiffEntry(identity=out.identity, output=out.path) for out in extra_outputs),
    )
