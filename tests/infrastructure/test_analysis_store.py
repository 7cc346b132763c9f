import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

from wc_dashboard.domain.analysis.entities import CachedAnalysis
from wc_dashboard.domain.errors import InvalidQuarterFormat
from wc_dashboard.infrastructure.storage.analysis_store import (
    FileSystemAnalysisStore,
    InMemoryAnalysisStore,
)


def make_analysis(quarter: str = "25.3Q", entity: str = "연결", kind: str = "overview", content: str = "text") -> CachedAnalysis:
    return CachedAnalysis(
        quarter=quarter,
        entity=entity,
        kind=kind,
        content=content,
        generated_at=datetime(2025, 10, 1, 9, 30, tzinfo=timezone.utc),
    )


@pytest.fixture
def store(tmp_path: Path) -> FileSystemAnalysisStore:
    return FileSystemAnalysisStore(tmp_path / "ai-cache")


def test_put_and_get(store: FileSystemAnalysisStore, tmp_path: Path) -> None:
    store.put(make_analysis(content="WC fell 12%"))

    loaded = store.get("25.3Q", "연결", "overview")

    assert loaded == make_analysis(content="WC fell 12%")
    path = tmp_path / "ai-cache" / "25-3Q.json"
    assert path.is_file()
    document = json.loads(path.read_text(encoding="utf-8"))
    assert document["quarter"] == "25.3Q"
    assert document["entries"]["연결/overview"]["content"] == "WC fell 12%"


def test_missing_entry(store: FileSystemAnalysisStore) -> None:
    assert store.get("25.3Q", "연결", "overview") is None
    assert store.list_quarters() == []


def test_entries_share_quarter_document(store: FileSystemAnalysisStore) -> None:
    store.put(make_analysis(kind="overview"))
    store.put(make_analysis(entity="중국", kind="trend", content="china"))

    assert store.get("25.3Q", "중국", "trend").content == "china"
    assert store.get("25.3Q", "연결", "overview").content == "text"


def test_list_quarters_sorted(store: FileSystemAnalysisStore) -> None:
    store.put(make_analysis(quarter="25.3Q"))
    store.put(make_analysis(quarter="24.4Q"))

    assert store.list_quarters() == ["24.4Q", "25.3Q"]


def test_delete_by_entity_and_quarter(store: FileSystemAnalysisStore, tmp_path: Path) -> None:
    store.put(make_analysis(kind="overview"))
    store.put(make_analysis(entity="중국", kind="trend"))

    assert store.delete("25.3Q", entity="중국") == 1
    assert store.get("25.3Q", "중국", "trend") is None
    assert store.delete("25.3Q") == 1
    assert not (tmp_path / "ai-cache" / "25-3Q.json").exists()
    assert store.delete("25.3Q") == 0


def test_corrupt_document_is_ignored(store: FileSystemAnalysisStore, tmp_path: Path) -> None:
    root = tmp_path / "ai-cache"
    root.mkdir(parents=True)
    (root / "25-3Q.json").write_text("{not json", encoding="utf-8")

    assert store.get("25.3Q", "연결", "overview") is None


@pytest.mark.parametrize(
    "document",
    [
        [],
        {"quarter": "25.3Q", "entries": ["연결/overview"]},
        {"quarter": "25.3Q", "entries": {"연결/overview": {"entity": "연결", "kind": "overview", "content": "text"}}},
        {"quarter": "25.3Q", "entries": {"연결/overview": "text"}},
        {"quarter": "25.3Q", "entries": {"연결/overview": {"entity": "연결", "kind": "overview", "content": "x", "generated_at": "yesterday"}}},
    ],
)
def test_wrong_shape_is_a_miss(store: FileSystemAnalysisStore, tmp_path: Path, document: object) -> None:
    root = tmp_path / "ai-cache"
    root.mkdir(parents=True)
    (root / "25-3Q.json").write_text(json.dumps(document, ensure_ascii=False), encoding="utf-8")

    assert store.get("25.3Q", "연결", "overview") is None

    store.put(make_analysis(content="regenerated"))
    assert store.get("25.3Q", "연결", "overview").content == "regenerated"


def test_invalid_quarter_rejected(store: FileSystemAnalysisStore) -> None:
    with pytest.raises(InvalidQuarterFormat):
        store.get("../etc", "연결", "overview")


def test_in_memory_store() -> None:
    store = InMemoryAnalysisStore()
    store.put(make_analysis())
    store.put(make_analysis(quarter="24.3Q"))

    assert store.get("25.3Q", "연결", "overview").content == "text"
    assert store.list_quarters() == ["24.3Q", "25.3Q"]
    assert store.delete("25.3Q") == 1
    assert store.get("25.3Q", "연결", "overview") is None
