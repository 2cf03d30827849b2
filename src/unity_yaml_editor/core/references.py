"""Breadth-first tracing of local fileID references."""

import logging
from collections import deque
from dataclasses import asdict, dataclass, field
from typing import Any, Deque, Dict, List, Set, Tuple

from unity_yaml_editor.core.class_ids import get_class_name
from unity_yaml_editor.core.document import UnityDocument
from unity_yaml_editor.core.errors import ValidationFailureError

logger = logging.getLogger(__name__)

OUT = "out"
IN = "in"
BOTH = "both"

_DIRECTION_ALIASES = {
    "out": OUT,
    "outgoing": OUT,
    "in": IN,
    "incoming": IN,
    "both": BOTH,
}

DEFAULT_MAX_DEPTH = 3


@dataclass
class Edge:
    source: int
    target: int
    depth: int
    source_class_id: int
    target_class_id: int

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["source_type"] = get_class_name(self.source_class_id)
        data["target_type"] = get_class_name(self.target_class_id)
        return data


@dataclass
class TraceResult:
    start_id: int
    direction: str
    max_depth: int
    edges: List[Edge] = field(default_factory=list)

    @property
    def node_ids(self) -> List[int]:
        seen: Dict[int, None] = {self.start_id: None}
        for edge in self.edges:
            seen.setdefault(edge.source, None)
            seen.setdefault(edge.target, None)
        return list(seen)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start_id": self.start_id,
            "direction": self.direction,
            "max_depth": self.max_depth,
            "edge_count": len(self.edges),
            "node_count": len(self.node_ids),
            "edges": [e.to_dict() for e in self.edges],
        }


def normalize_direction(direction: str) -> str:
    value = _DIRECTION_ALIASES.get(str(direction).strip().lower())
    if value is None:
        raise ValidationFailureError(
            f"Invalid direction '{direction}': expected in, out or both", field="direction"
        )
    return value


def reverse_index(doc: UnityDocument) -> Dict[int, List[int]]:
    """Referenced fileID -> fileIDs of the blocks referencing it."""
    index: Dict[int, List[int]] = {}
    for block in doc.blocks:
        for ref in block.file_id_refs():
            index.setdefault(ref, []).append(block.file_id)
    return index


def trace(
    doc: UnityDocument,
    start_id: int,
    direction: str = BOTH,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> TraceResult:
    """Walk references outward and/or inward from ``start_id``.

    Each (fileID, direction) pair is expanded at most once, so reference
    cycles terminate. An edge is reported once, at the depth it was first
    reached.
    """
    direction = normalize_direction(direction)
    if max_depth < 1:
        raise ValidationFailureError("max_depth must be at least 1", field="max_depth")
    start = doc.require_block(start_id)

    incoming = reverse_index(doc) if direction in (IN, BOTH) else {}
    queue: Deque[Tuple[int, int, str]] = deque()
    if direction in (OUT, BOTH):
        queue.append((start.file_id, 0, OUT))
    if direction in (IN, BOTH):
        queue.append((start.file_id, 0, IN))

    result = TraceResult(start.file_id, direction, max_depth)
    visited: Set[Tuple[int, str]] = set()
    seen_edges: Set[Tuple[int, int]] = set()

    while queue:
        current_id, depth, walk = queue.popleft()
        if depth >= max_depth or (current_id, walk) in visited:
            continue
        visited.add((current_id, walk))
        current = doc.find_by_id(current_id)
        if current is None:
            continue

        if walk == OUT:
            neighbours = current.file_id_refs()
        else:
            neighbours = incoming.get(current_id, [])

        for neighbour_id in neighbours:
            neighbour = doc.find_by_id(neighbour_id)
            if neighbour is None:
                continue
            if walk == OUT:
                source, target = current, neighbour
            else:
                source, target = neighbour, current
            key = (source.file_id, target.file_id)
            if key not in seen_edges:
                seen_edges.add(key)
                result.edges.append(
                    Edge(source.file_id, target.file_id, depth + 1, source.class_id, target.class_id)
                )
            queue.append((neighbour_id, depth + 1, walk))

    logger.debug(
        "Traced %s (%s, depth %d): %d edges", start.file_id, direction, max_depth, len(result.edges)
    )
    return result
