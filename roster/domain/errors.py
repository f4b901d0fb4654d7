from __future__ import annotations

from typing import Any, Optional, Tuple


class MaterializeError(ValueError):
    """Base class for failures while folding join rows into a graph."""


class InconsistentRecord(MaterializeError):
    """Same identity seen with a different value for a scalar field."""

    def __init__(self, identity: Tuple[str, int], field: str, existing: Any, incoming: Any,
                 row_index: Optional[int] = None):
        self.identity = identity
        self.field = field
        self.existing = existing
        self.incoming = incoming
        self.row_index = row_index
        kind, eid = identity
        super().__init__(
            f"inconsistent_record: {kind}:{eid}.{field} was {existing!r}, row {row_index} has {incoming!r}"
        )

    def as_dict(self) -> dict:
        kind, eid = self.identity
        return {
            "kind": kind,
            "id": eid,
            "field": self.field,
            "existing": self.existing,
            "incoming": self.incoming,
            "row_index": self.row_index,
        }


class UnknownKind(MaterializeError):
    """A row has no usable record for a kind the materializer was told to expect."""

    def __init__(self, kind: str, row_index: Optional[int] = None, reason: str = "missing"):
        self.kind = kind
        self.row_index = row_index
        self.reason = reason
        super().__init__(f"unknown_kind: {kind} {reason} in row {row_index}")


class MalformedRow(MaterializeError):
    """A row is shorter than the declared join shape or lacks a named column."""

    def __init__(self, kind: str, column: Any, row_index: Optional[int] = None):
        self.kind = kind
        self.column = column
        self.row_index = row_index
        super().__init__(f"malformed_row: no column {column!r} for {kind} in row {row_index}")
