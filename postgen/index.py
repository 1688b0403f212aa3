from __future__ import annotations

from collections.abc import Iterable, Mapping

from .render import ContentRecord
from .utils import parse_datetime


def build_index(records: Iterable[ContentRecord | Mapping]) -> list[dict]:
    """Listed posts without their HTML, newest ``writtenDate`` first.

    Accepts freshly rendered records and the JSON of reused outputs alike.
    """
    entries = []
    for record in records:
        data = record.to_json() if isinstance(record, ContentRecord) else dict(record)
        if data.get("unlisted"):
            continue
        data.pop("content", None)
        entries.append(data)
    entries.sort(key=lambda entry: parse_datetime(entry["metadata"]["writtenDate"]), reverse=True)
    return entries
