"""
Split one flat join row into per-entity records.

A join such as Cohort x Instructor comes back as a single flat row. An
EntityExtractor knows which columns belong to one entity kind, either by name
(SQL aliases like ``c.Id AS cohort_id``) or by position (the "split on"
column ranges used by multi-mapping drivers). A RowShape is the ordered list
of extractors for one query.
"""
from __future__ import annotations

from typing import Any, Dict, Iterable, Iterator, Mapping, NamedTuple, Optional, Sequence, Tuple, Union

from .errors import MalformedRow
from .kinds import kind_name

ColumnKey = Union[str, int]


class EntityRecord(NamedTuple):
    kind: str
    id: Optional[int]
    fields: Mapping[str, Any]

    @property
    def is_null(self) -> bool:
        # outer join produced no row for this entity
        return self.id is None

    @property
    def identity(self) -> Tuple[str, Optional[int]]:
        return (self.kind, self.id)


# one record per table in the join, in join order
JoinedRow = Tuple[EntityRecord, ...]


def _column(row: Any, key: ColumnKey, kind: str, row_index: Optional[int]) -> Any:
    try:
        return row[key]
    except (IndexError, KeyError):
        raise MalformedRow(kind, key, row_index) from None


class EntityExtractor:
    """Pull one entity's identity and fields out of a flat row."""

    def __init__(self, kind: str, id_column: ColumnKey, columns: Mapping[str, ColumnKey] | None = None):
        self.kind = kind_name(kind)
        self.id_column = id_column
        self.columns: Dict[str, ColumnKey] = dict(columns or {})

    @classmethod
    def from_range(cls, kind: str, start: int, names: Sequence[str], id_field: str = "id") -> "EntityExtractor":
        """
        Positional extractor over ``row[start:start + len(names)]``.
        ``names`` lists the field name of every column in the range; the one
        equal to ``id_field`` is the identity column.
        """
        if id_field not in names:
            raise ValueError(f"id_field {id_field!r} not in column names for {kind}")
        id_column = start + list(names).index(id_field)
        columns = {n: start + i for i, n in enumerate(names) if n != id_field}
        return cls(kind, id_column, columns)

    @classmethod
    def from_prefix(cls, kind: str, prefix: str, names: Sequence[str]) -> "EntityExtractor":
        """Named extractor for aliased columns ``<prefix>_id``, ``<prefix>_<name>``."""
        return cls(kind, f"{prefix}_id", {n: f"{prefix}_{n}" for n in names})

    @property
    def width(self) -> int:
        return 1 + len(self.columns)

    def extract(self, row: Any, row_index: Optional[int] = None) -> EntityRecord:
        raw_id = _column(row, self.id_column, self.kind, row_index)
        if raw_id is None:
            return EntityRecord(self.kind, None, {})
        fields = {name: _column(row, key, self.kind, row_index) for name, key in self.columns.items()}
        return EntityRecord(self.kind, int(raw_id), fields)

    def __repr__(self) -> str:
        return f"EntityExtractor({self.kind!r}, id={self.id_column!r}, columns={list(self.columns)})"


class RowShape:
    """Ordered extractors describing one join; turns flat rows into JoinedRows."""

    def __init__(self, extractors: Iterable[EntityExtractor]):
        self.extractors = list(extractors)

    @property
    def kinds(self) -> list[str]:
        return [e.kind for e in self.extractors]

    def split(self, row: Any, row_index: Optional[int] = None) -> JoinedRow:
        return tuple(e.extract(row, row_index) for e in self.extractors)

    def split_all(self, rows: Iterable[Any]) -> Iterator[JoinedRow]:
        # lazy, so a cursor can be consumed as it is fetched
        for i, row in enumerate(rows):
            yield self.split(row, i)
