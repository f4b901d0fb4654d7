"""
Graph materialization: fold flat join rows into a deduplicated object graph.

Every node is keyed by its identity ``(kind, id)`` and exists once per graph,
no matter how many rows or attachment contexts mention it. Child collections
keep first-encounter order and never hold the same identity twice.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Set, Tuple

from .errors import InconsistentRecord, UnknownKind
from .extract import EntityRecord, JoinedRow
from .kinds import kind_name as _kind

logger = logging.getLogger(__name__)

Identity = Tuple[str, int]


@dataclass(eq=False)
class Node:
    kind: str
    id: int
    fields: Dict[str, Any] = field(default_factory=dict)
    children: Dict[str, List["Node"]] = field(default_factory=dict)
    _members: Dict[str, Set[Identity]] = field(default_factory=dict, repr=False)

    @property
    def identity(self) -> Identity:
        return (self.kind, self.id)

    def __getitem__(self, name: str) -> Any:
        return self.fields[name]

    def get(self, name: str, default: Any = None) -> Any:
        return self.fields.get(name, default)

    def collection(self, name: str) -> List["Node"]:
        return self.children.get(name, [])

    def first(self, name: str) -> Optional["Node"]:
        items = self.children.get(name)
        return items[0] if items else None

    def ids(self, name: str) -> List[int]:
        return [c.id for c in self.collection(name)]

    def attach(self, name: str, child: "Node") -> bool:
        """Append child to the named collection unless already there."""
        members = self._members.setdefault(name, set())
        if child.identity in members:
            return False
        members.add(child.identity)
        self.children.setdefault(name, []).append(child)
        return True


class MaterializedGraph:
    """Owning store for the nodes built from one row sequence."""

    def __init__(self, primary_kind: str):
        self.primary_kind = primary_kind
        self._nodes: Dict[Identity, Node] = {}
        self._roots: List[Node] = []
        self._root_ids: Set[Identity] = set()
        self.conflicts: List[InconsistentRecord] = []
        self.row_count = 0

    def __getitem__(self, identity: Tuple[Any, int]) -> Node:
        kind, eid = identity
        return self._nodes[(_kind(kind), eid)]

    def __contains__(self, identity: object) -> bool:
        if not isinstance(identity, tuple) or len(identity) != 2:
            return False
        return (_kind(identity[0]), identity[1]) in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[Node]:
        return iter(self._roots)

    def get(self, kind: Any, eid: int) -> Optional[Node]:
        return self._nodes.get((_kind(kind), eid))

    def roots(self) -> List[Node]:
        """Primary-kind nodes in first-encounter order."""
        return list(self._roots)

    def nodes(self, kind: Any = None) -> List[Node]:
        if kind is None:
            return list(self._nodes.values())
        k = _kind(kind)
        return [n for n in self._nodes.values() if n.kind == k]

    def identities(self) -> List[Identity]:
        return list(self._nodes.keys())

    def _node_for(self, rec: EntityRecord) -> Tuple[Node, bool]:
        key = (rec.kind, rec.id)
        node = self._nodes.get(key)
        if node is None:
            node = Node(rec.kind, rec.id)
            self._nodes[key] = node
            return node, True
        return node, False


@dataclass(frozen=True)
class AttachmentRule:
    """
    Link the ``child_kind`` record of each row into collection ``under`` of
    the ``parent_kind`` node of the same row.

    ``parent_kind`` defaults to the primary kind and may name the child kind
    of an earlier rule, which nests attachments. ``under=None`` only
    registers the child node in the graph. With ``required=False`` a null
    record from an outer join is skipped instead of raising UnknownKind.
    """
    child_kind: str
    under: Optional[str] = None
    parent_kind: Optional[str] = None
    required: bool = True

    def __post_init__(self):
        object.__setattr__(self, "child_kind", _kind(self.child_kind))
        if self.parent_kind is not None:
            object.__setattr__(self, "parent_kind", _kind(self.parent_kind))


def _find(row: JoinedRow, kind: str) -> Optional[EntityRecord]:
    for rec in row:
        if rec.kind == kind:
            return rec
    return None


class GraphMaterializer:
    """Reusable fold for one join shape; every call builds a fresh graph."""

    def __init__(self, primary_kind: Any, attachments: Sequence[AttachmentRule] = (), strict: bool = False):
        self.primary_kind = _kind(primary_kind)
        self.attachments = list(attachments)
        self.strict = strict
        declared = {self.primary_kind}
        for rule in self.attachments:
            parent = rule.parent_kind or self.primary_kind
            if parent not in declared:
                raise ValueError(f"attachment parent {parent} must be the primary kind or an earlier child")
            declared.add(rule.child_kind)

    def materialize(self, rows: Iterable[JoinedRow]) -> MaterializedGraph:
        graph = MaterializedGraph(self.primary_kind)
        for i, row in enumerate(rows):
            self._fold_row(graph, row, i)
            graph.row_count += 1
        if graph.conflicts:
            logger.warning("%s: ignored %d conflicting field values", self.primary_kind, len(graph.conflicts))
        return graph

    def _fold_row(self, graph: MaterializedGraph, row: JoinedRow, i: int):
        primary = _find(row, self.primary_kind)
        if primary is None:
            raise UnknownKind(self.primary_kind, i)
        if primary.is_null:
            raise UnknownKind(self.primary_kind, i, reason="null")
        root, _ = graph._node_for(primary)
        if root.identity not in graph._root_ids:
            graph._root_ids.add(root.identity)
            graph._roots.append(root)
        self._merge(graph, root, primary, i)

        # nodes of this row by kind; None marks a skipped optional record
        present: Dict[str, Optional[Node]] = {self.primary_kind: root}
        for rule in self.attachments:
            rec = _find(row, rule.child_kind)
            if rec is None:
                raise UnknownKind(rule.child_kind, i)
            if rec.is_null:
                if rule.required:
                    raise UnknownKind(rule.child_kind, i, reason="null")
                present[rule.child_kind] = None
                continue
            child, _ = graph._node_for(rec)
            self._merge(graph, child, rec, i)
            present[rule.child_kind] = child
            parent = present.get(rule.parent_kind or self.primary_kind)
            if rule.under is not None and parent is not None:
                parent.attach(rule.under, child)

    def _merge(self, graph: MaterializedGraph, node: Node, rec: EntityRecord, i: int):
        for name, value in rec.fields.items():
            if name not in node.fields:
                node.fields[name] = value
                continue
            existing = node.fields[name]
            if existing == value:
                continue
            conflict = InconsistentRecord(node.identity, name, existing, value, i)
            if self.strict:
                raise conflict
            logger.debug("%s", conflict)
            graph.conflicts.append(conflict)


def materialize(
    rows: Iterable[JoinedRow],
    primary_kind: Any,
    attachments: Sequence[AttachmentRule] = (),
    strict: bool = False,
) -> MaterializedGraph:
    return GraphMaterializer(primary_kind, attachments, strict=strict).materialize(rows)
