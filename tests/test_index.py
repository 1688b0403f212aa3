"""Tests for postgen.index: the aggregate post list."""

from __future__ import annotations

from postgen.index import build_index
from postgen.render import ContentRecord


def record(name: str, date: str, unlisted: bool = False) -> ContentRecord:
    return ContentRecord(
        name=name,
        content="<p>x</p>",
        metadata={"description": "d", "title": name, "writtenDate": date},
        unlisted=unlisted,
    )


def test_empty():
    assert build_index([]) == []


def test_sorted_newest_first_without_content():
    index = build_index(
        [
            record("old", "2020-01-01T00:00:00.000Z"),
            record("new", "2023-05-01T12:00:00.000Z"),
            record("mid", "2021-06-15T08:30:00.000Z"),
        ]
    )
    assert [entry["name"] for entry in index] == ["new", "mid", "old"]
    assert all("content" not in entry for entry in index)
    assert index[0]["metadata"]["title"] == "new"


def test_unlisted_is_dropped():
    index = build_index([record("a", "2020-01-01T00:00:00.000Z"), record("b", "2021-01-01T00:00:00.000Z", True)])
    assert [entry["name"] for entry in index] == ["a"]


def test_equal_dates_do_not_crash():
    index = build_index([record("a", "2020-01-01T00:00:00.000Z"), record("b", "2020-01-01T00:00:00.000Z")])
    assert sorted(entry["name"] for entry in index) == ["a", "b"]


def test_accepts_reused_json():
    reused = {
        "content": "<p>old</p>",
        "name": "reused",
        "metadata": {"description": "d", "title": "t", "writtenDate": "2024-01-01T00:00:00.000Z"},
    }
    hidden = dict(reused, name="hidden", unlisted=True)
    index = build_index([record("fresh", "2020-01-01T00:00:00.000Z"), reused, hidden])
    assert [entry["name"] for entry in index] == ["reused", "fresh"]
    assert "content" in reused
