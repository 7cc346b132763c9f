"""Storage backends for generated narrative analyses."""
from __future__ import annotations

import json
import logging
import threading
from datetime import datetime
from pathlib import Path
from typing import Any

from wc_dashboard.domain.analysis.entities import CachedAnalysis
from wc_dashboard.domain.quarters import is_valid, parse, sort_ascending
from wc_dashboard.domain.repositories import AnalysisStore

logger = logging.getLogger(__name__)


def quarter_filename(quarter: str) -> str:
    return str(parse(quarter)).replace(".", "-") + ".json"


def _slot(entity: str, kind: str) -> str:
    return f"{entity}/{kind}"


def _entry_to_analysis(quarter: str, entry: dict[str, Any]) -> CachedAnalysis:
    return CachedAnalysis(
        quarter=quarter,
        entity=entry["entity"],
        kind=entry["kind"],
        content=entry["content"],
        generated_at=datetime.fromisoformat(entry["generated_at"]),
    )


def _analysis_to_entry(analysis: CachedAnalysis) -> dict[str, str]:
    return {
        "entity": analysis.entity,
        "kind": analysis.kind,
        "content": analysis.content,
        "generated_at": analysis.generated_at.isoformat(),
    }


class FileSystemAnalysisStore(AnalysisStore):
    """One JSON document per quarter under ``root`` (``25-3Q.json``)."""

    def __init__(self, root: Path) -> None:
        self._root = Path(root)
        self._lock = threading.Lock()

    def get(self, quarter: str, entity: str, kind: str) -> CachedAnalysis | None:
        label = str(parse(quarter))
        document = self._read(label)
        entry = document["entries"].get(_slot(entity, kind))
        if entry is None:
            return None
        try:
            return _entry_to_analysis(label, entry)
        except (KeyError, TypeError, ValueError):
            logger.warning("Ignoring malformed analysis entry %s for %s", _slot(entity, kind), label)
            return None

    def put(self, analysis: CachedAnalysis) -> CachedAnalysis:
        label = str(parse(analysis.quarter))
        with self._lock:
            document = self._read(label)
            entries = document.setdefault("entries", {})
            entries[analysis.slot] = _analysis_to_entry(analysis)
            document["quarter"] = label
            document["generated_at"] = analysis.generated_at.isoformat()
            self._write(label, document)
        logger.info("Stored analysis %s for %s", analysis.slot, label)
        return analysis

    def delete(self, quarter: str, entity: str | None = None) -> int:
        label = str(parse(quarter))
        path = self._root / quarter_filename(label)
        with self._lock:
            if not path.exists():
                return 0
            if entity is None:
                removed = len(self._read(label)["entries"])
                path.unlink()
                logger.info("Deleted analysis cache for %s", label)
                return removed
            document = self._read(label)
            entries = document["entries"]
            doomed = [
                slot for slot, entry in entries.items() if isinstance(entry, dict) and entry.get("entity") == entity
            ]
            for slot in doomed:
                del entries[slot]
            self._write(label, document)
        return len(doomed)

    def list_quarters(self) -> list[str]:
        if not self._root.exists():
            return []
        labels = [path.stem.replace("-", ".", 1) for path in self._root.glob("*.json")]
        return sort_ascending(label for label in labels if is_valid(label))

    def _read(self, label: str) -> dict[str, Any]:
        path = self._root / quarter_filename(label)
        if not path.exists():
            return {"quarter": label, "entries": {}}
        try:
            document = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            logger.warning("Ignoring unreadable analysis cache %s", path)
            return {"quarter": label, "entries": {}}
        if not isinstance(document, dict) or not isinstance(document.get("entries", {}), dict):
            logger.warning("Ignoring analysis cache %s with unexpected layout", path)
            return {"quarter": label, "entries": {}}
        document.setdefault("entries", {})
        return document

    def _write(self, label: str, document: dict[str, Any]) -> None:
        self._root.mkdir(parents=True, exist_ok=True)
        path = self._root / quarter_filename(label)
        path.write_text(json.dumps(document, ensure_ascii=False, indent=2), encoding="utf-8")


class InMemoryAnalysisStore(AnalysisStore):
    def __init__(self) -> None:
        self._entries: dict[tuple[str, str, str], CachedAnalysis] = {}

    def get(self, quarter: str, entity: str, kind: str) -> CachedAnalysis | None:
        return self._entries.get((str(parse(quarter)), entity, kind))

    def put(self, analysis: CachedAnalysis) -> CachedAnalysis:
        self._entries[(str(parse(analysis.quarter)), analysis.entity, analysis.kind)] = analysis
        return analysis

    def delete(self, quarter: str, entity: str | None = None) -> int:
        label = str(parse(quarter))
        doomed = [key for key in self._entries if key[0] == label and (entity is None or key[1] == entity)]
        for key in doomed:
            del self._entries[key]
        return len(doomed)

    def list_quarters(self) -> list[str]:
        return sort_ascending({key[0] for key in self._entries})
