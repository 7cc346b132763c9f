import json

import pytest

from wc_dashboard.application.narrative import (
    GenerateNarrativeUseCase,
    build_analysis_store,
    build_narrative_payload,
)
from wc_dashboard.config import load_settings
from wc_dashboard.domain.dataset import Dataset
from wc_dashboard.domain.models import Entity, EntitySnapshot
from wc_dashboard.domain.services import DatasetAggregator
from wc_dashboard.infrastructure.storage.analysis_store import InMemoryAnalysisStore


class FakeGenerator:
    def __init__(self) -> None:
        self.calls: list[tuple[str, dict]] = []

    def generate(self, kind: str, payload: dict) -> str:
        self.calls.append((kind, payload))
        return f"{kind} narrative #{len(self.calls)}"


def make_dataset() -> Dataset:
    def snap(quarter, entity, receivables):
        return EntitySnapshot.create(
            quarter=quarter,
            entity=entity,
            quarterly_revenue=1000,
            receivables=receivables,
            inventory=0,
            payables=0,
        )

    return Dataset(
        [
            snap("24.3Q", Entity.DOMESTIC, 80),
            snap("24.3Q", Entity.CONSOLIDATED, 80),
            snap("25.3Q", Entity.DOMESTIC, 100),
            snap("25.3Q", Entity.CHINA, 300),
            snap("25.3Q", Entity.CONSOLIDATED, 400),
        ]
    )


def test_payload_is_plain_data():
    payload = build_narrative_payload(DatasetAggregator(), make_dataset(), "25.3Q")

    assert payload["quarter"] == "25.3Q"
    assert payload["entity"] == Entity.CONSOLIDATED.value
    assert payload["composition"] == [
        {"entity": Entity.DOMESTIC.value, "working_capital": 100.0, "share_percent": 25.0},
        {"entity": Entity.CHINA.value, "working_capital": 300.0, "share_percent": 75.0},
    ]
    assert payload["yoy"]["working_capital"]["percent_change"] == 400.0
    assert [point["quarter"] for point in payload["trend"]] == ["24.3Q", "25.3Q"]
    assert payload["issues"] == []
    json.dumps(payload, ensure_ascii=False)


def test_narrative_generated_once_then_cached():
    store = InMemoryAnalysisStore()
    generator = FakeGenerator()
    use_case = GenerateNarrativeUseCase(store, generator)

    first = use_case.execute("25.3Q", "overview", {"x": 1})
    second = use_case.execute("25.3Q", "overview", {"x": 1})

    assert not first.cached
    assert second.cached
    assert second.text == first.text == "overview narrative #1"
    assert len(generator.calls) == 1


def test_force_regenerates():
    store = InMemoryAnalysisStore()
    generator = FakeGenerator()
    use_case = GenerateNarrativeUseCase(store, generator)

    use_case.execute("25.3Q", "trend", {}, entity=Entity.CHINA.value)
    forced = use_case.execute("25.3Q", "trend", {}, entity=Entity.CHINA.value, force=True)

    assert not forced.cached
    assert forced.text == "trend narrative #2"
    assert store.get("25.3Q", Entity.CHINA.value, "trend").content == "trend narrative #2"


def test_unknown_kind_rejected():
    use_case = GenerateNarrativeUseCase(InMemoryAnalysisStore(), FakeGenerator())

    with pytest.raises(ValueError):
        use_case.execute("25.3Q", "poem", {})


def test_settings_store_writes_under_configured_dir(tmp_path):
    store = build_analysis_store(load_settings({"WC_ANALYSIS_CACHE_DIR": str(tmp_path / "ai-cache")}))
    use_case = GenerateNarrativeUseCase(store, FakeGenerator())

    use_case.execute("25.3Q", "overview", payload={})

    assert (tmp_path / "ai-cache" / "25-3Q.json").exists()


def test_entity_aliases_share_one_cache_entry():
    store = InMemoryAnalysisStore()
    generator = FakeGenerator()
    use_case = GenerateNarrativeUseCase(store, generator)

    first = use_case.execute("25.3Q", "overview", {}, entity="China")
    second = use_case.execute("25.3Q", "overview", {}, entity="중국")

    assert first.entity == "중국"
    assert second.cached
    assert len(generator.calls) == 1


def test_invalidate_by_alias():
    store = InMemoryAnalysisStore()
    use_case = GenerateNarrativeUseCase(store, FakeGenerator())
    use_case.execute("25.3Q", "overview", {}, entity=Entity.CHINA)
    use_case.execute("25.3Q", "trend", {}, entity=Entity.CHINA)
    use_case.execute("25.3Q", "overview", {})

    assert use_case.invalidate("25.3Q", "CHINA") == 2
    assert store.get("25.3Q", "중국", "overview") is None
    assert store.get("25.3Q", "연결", "overview") is not None
