"""Keyed, ordered collection of entity snapshots."""
from __future__ import annotations

from typing import Iterable, Iterator, Mapping, Sequence

from .errors import DuplicateSnapshot
from .models import Entity, EntitySnapshot, SnapshotKey
from .quarters import FiscalQuarter, QuarterLike, parse, sort_ascending


class Dataset(Sequence[EntitySnapshot]):
    """Snapshots in insertion order, unique by ``(quarter, entity)``."""

    def __init__(self, snapshots: Iterable[EntitySnapshot] = ()) -> None:
        items = tuple(snapshots)
        index: dict[SnapshotKey, EntitySnapshot] = {}
        for snapshot in items:
            if snapshot.key in index:
                raise DuplicateSnapshot(snapshot.key)
            index[snapshot.key] = snapshot
        self._items = items
        self._index: Mapping[SnapshotKey, EntitySnapshot] = index

    def __getitem__(self, position):  # type: ignore[override]
        return self._items[position]

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[EntitySnapshot]:
        return iter(self._items)

    def __contains__(self, item: object) -> bool:
        if isinstance(item, SnapshotKey):
            return item in self._index
        return item in self._items

    def __repr__(self) -> str:
        return f"Dataset({len(self._items)} snapshots)"

    def get(self, quarter: QuarterLike, entity: "str | Entity") -> EntitySnapshot | None:
        key = SnapshotKey(quarter=parse(quarter), entity=Entity.parse(entity))
        return self._index.get(key)

    def quarters(self) -> list[str]:
        unique = {str(snapshot.quarter) for snapshot in self._items}
        return sort_ascending(unique)

    def entities(self) -> list[Entity]:
        present = {snapshot.entity for snapshot in self._items}
        return [entity for entity in Entity if entity in present]

    def latest_quarter(self) -> FiscalQuarter | None:
        if not self._items:
            return None
        return max(snapshot.quarter for snapshot in self._items)

    def earliest_quarter(self) -> FiscalQuarter | None:
        if not self._items:
            return None
        return min(snapshot.quarter for snapshot in self._items)

    def for_quarter(self, quarter: QuarterLike) -> list[EntitySnapshot]:
        target = parse(quarter)
        return [snapshot for snapshot in self._items if snapshot.quarter == target]

    def sorted(self) -> "Dataset":
        entity_order = {entity: position for position, entity in enumerate(Entity)}
        return Dataset(
            sorted(self._items, key=lambda s: (s.quarter, entity_order[s.entity]))
        )

    def merge(self, incoming: Iterable[EntitySnapshot]) -> "Dataset":
        """Overwrite by key with ``incoming`` and re-sort ascending by quarter."""
        merged: dict[SnapshotKey, EntitySnapshot] = dict(self._index)
        for snapshot in incoming:
            merged[snapshot.key] = snapshot
        return Dataset(merged.values()).sorted()
