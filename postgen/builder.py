"""Incremental build: decide what to render, delete and reuse, then apply it.

Phases run one after another, each fanned out on a thread pool and joined
before the next starts::

    names -> duplicates -> diff -> render + load reused -> delete -> write -> index

Nothing under the output directory changes until every source in the
render set has been processed without error.
"""

from __future__ import annotations

import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional

from .config import BuildConfig
from .diff import DiffEntry, compute_diff
from .errors import BuildFailedError, DeletionError, PostgenError
from .frontmatter import GlobalMetadata
from .identity import require_identity
from .index import build_index
from .render import ContentRecord, Renderer
from .store import list_outputs, list_sources, read_record, read_text, remove_file, write_json
from .utils import resolve_workers
from .validate import check_sources


@dataclass(frozen=True)
class BuildReport:
    rendered: int
    reused: int
    skipped: int
    deleted: int
    indexed: int
    warnings: tuple[str, ...]
    elapsed: float

    @property
    def processed(self) -> int:
        return self.rendered + self.skipped


@dataclass(frozen=True)
class RenderOutcome:
    entry: DiffEntry
    record: Optional[ContentRecord] = None
    error: Optional[Exception] = None


def fan_out(func, items: list, workers: int) -> list:
    if workers > 1 and len(items) > 1:
        with ThreadPoolExecutor(max_workers=min(workers, len(items))) as executor:
            return list(executor.map(func, items))
    return [func(item) for item in items]


def render_entry(renderer: Renderer, entry: DiffEntry, known_identities: frozenset[str]) -> RenderOutcome:
    try:
        text = read_text(entry.source)
        record = renderer.render(entry.source, text, known_identities)
    except (PostgenError, OSError, ValueError) as exc:
        return RenderOutcome(entry=entry, error=exc)
    return RenderOutcome(entry=entry, record=record)


def load_reused(entry: DiffEntry) -> tuple[DiffEntry, Optional[dict], Optional[Exception]]:
    try:
        data = read_record(entry.output)
    except (PostgenError, OSError, ValueError) as exc:
        return entry, None, exc
    return entry, data, None


def delete_outputs(paths: list[str]) -> tuple[int, list[str]]:
    """Best effort: failures become warnings and the build carries on."""
    deleted = 0
    warnings = []
    for path in paths:
        try:
            remove_file(path)
        except DeletionError as exc:
            warnings.append(str(exc))
            continue
        deleted += 1
    return deleted, warnings


def build(config: BuildConfig, renderer: Optional[Renderer] = None) -> BuildReport:
    """Bring ``config.output_dir`` up to date with ``config.input_dir``.

    Raises NameValidationError or DuplicateIdentityError before touching
    anything, and BuildFailedError with every per-file error once the whole
    render set has been tried.
    """
    start = time.perf_counter()
    workers = resolve_workers(config.workers)

    sources = list_sources(config.input_dir)
    check_sources(sources, config.reserved_names)

    metadata = GlobalMetadata.load(config.metadata_path) if config.metadata_path else None
    if renderer is None:
        renderer = Renderer(metadata=metadata)

    outputs = list_outputs(config.output_dir, config.reserved_names)
    partition = compute_diff(outputs, sources, workers)

    to_render = [*partition.stale, *partition.new]
    to_reuse = list(partition.fresh)
    if config.force:
        to_render.extend(to_reuse)
        to_reuse = []

    known_identities = frozenset(require_identity(path) for path in sources)
    outcomes = fan_out(lambda entry: render_entry(renderer, entry, known_identities), to_render, workers)
    reused = fan_out(load_reused, to_reuse, workers)

    errors: list[tuple[str, Exception]] = [
        (outcome.entry.source, outcome.error) for outcome in outcomes if outcome.error is not None
    ]
    errors.extend((entry.output, exc) for entry, _, exc in reused if exc is not None)
    if errors:
        raise BuildFailedError(sorted(errors, key=lambda item: item[0]))

    records = [outcome.record for outcome in outcomes if outcome.record is not None]
    # Posts switched to draft keep an old output that must go as well.
    doomed = [entry.output for entry in (*partition.orphaned, *partition.redundant)]
    doomed.extend(
        outcome.entry.output for outcome in outcomes if outcome.record is None and outcome.entry.output
    )
    deleted, warnings = delete_outputs(doomed)

    fan_out(lambda record: write_json(config.output_dir / f"{record.name}.json", record.to_json()), records, workers)

    index = build_index([*records, *(data for _, data, _ in reused)])
    write_json(config.index_path, index)

    if metadata is not None:
        write_json(config.metadata_output_path, metadata.to_json())
    else:
        _, sidecar_warnings = delete_outputs([str(config.metadata_output_path)])
        warnings.extend(sidecar_warnings)

    return BuildReport(
        rendered=len(records),
        reused=len(reused),
        skipped=len(outcomes) - len(records),
        deleted=deleted,
        indexed=len(index),
        warnings=tuple(warnings),
        elapsed=time.perf_counter() - start,
    )
