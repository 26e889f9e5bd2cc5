"""Sparse adjacency view over a session's thoughts.

Tracks depends_on/branch/revises/contradicts relationships between
numbered thoughts. Updated incrementally on every append and exported for
visualization.

Design Principles:
    - Sparse storage: only actual edges, keyed by thought number
    - Edges point from the earlier thought to the later one, except
      REVISES and CONTRADICTS which point from the new thought back
    - Back-references only: an edge never targets a thought that is not
      already in the graph
    - Export to multiple formats (dict, DOT, mermaid)
"""

from __future__ import annotations

from collections import defaultdict, deque
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from src.tools.thought_types import Thought


class EdgeType(str, Enum):
    """Types of relationships between thoughts."""

    DEPENDS_ON = "depends_on"  # source is a declared dependency of target
    BRANCH = "branch"  # target branched from source
    REVISES = "revises"  # source revises target
    CONTRADICTS = "contradicts"  # source conflicts with earlier target


@dataclass(frozen=True)
class Edge:
    """An edge in the thought graph."""

    source: int
    target: int
    edge_type: EdgeType


@dataclass
class GraphNode:
    """A node in the thought graph with display metadata."""

    number: int
    label: str
    phase: str
    branch_id: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


class ThoughtGraph:
    """Adjacency lists over thought numbers.

    Owned by the store; callers outside it only read.
    """

    def __init__(self) -> None:
        self._nodes: dict[int, GraphNode] = {}
        self._outgoing: dict[int, dict[int, list[Edge]]] = defaultdict(lambda: defaultdict(list))
        self._incoming: dict[int, dict[int, list[Edge]]] = defaultdict(lambda: defaultdict(list))
        self._branches: dict[str, list[int]] = {}

    def _add_edge(self, source: int, target: int, edge_type: EdgeType) -> None:
        if source not in self._nodes or target not in self._nodes:
            raise ValueError(f"Edge {source} -> {target} references an unknown thought")
        edge = Edge(source, target, edge_type)
        existing = self._outgoing[source][target]
        if edge not in existing:
            existing.append(edge)
            self._incoming[target][source].append(edge)

    def add_thought(self, thought: Thought) -> GraphNode:
        """Add a thought and its back-reference edges.

        Nodes are append-only: every thought, revisions included, brings a
        new number.

        Raises:
            ValueError: If the number is already in the graph or an edge
                would reference a thought not yet added.

        """
        number = thought.thought_number
        if number in self._nodes:
            raise ValueError(f"Thought {number} is already in the graph")
        missing = [
            ref
            for ref in (*thought.dependencies, thought.branch_from_thought, thought.revises_thought)
            if ref is not None and ref != number and ref not in self._nodes
        ]
        if missing:
            raise ValueError(f"Edge {missing[0]} -> {number} references an unknown thought")

        node = GraphNode(
            number=number,
            label=thought.summary(),
            phase=thought.phase.value,
            branch_id=thought.branch_id,
            metadata={
                "classification": thought.classification.value if thought.classification else None,
                "alignment": thought.alignment_score,
                "isRevision": thought.is_revision,
            },
        )
        self._nodes[number] = node

        for dependency in thought.dependencies:
            if dependency != number:
                self._add_edge(dependency, number, EdgeType.DEPENDS_ON)

        if thought.branch_from_thought is not None and thought.branch_from_thought != number:
            self._add_edge(thought.branch_from_thought, number, EdgeType.BRANCH)
        if thought.branch_id:
            members = self._branches.setdefault(thought.branch_id, [])
            if number not in members:
                members.append(number)

        if thought.revises_thought is not None and thought.revises_thought != number:
            self._add_edge(number, thought.revises_thought, EdgeType.REVISES)

        for contradiction in thought.contradictions:
            target = contradiction.thought_number
            if target in self._nodes and target != number:
                self._add_edge(number, target, EdgeType.CONTRADICTS)

        return node

    def get_node(self, number: int) -> GraphNode | None:
        return self._nodes.get(number)

    def get_edges(
        self,
        source: int | None = None,
        target: int | None = None,
        edge_type: EdgeType | None = None,
    ) -> list[Edge]:
        """Get edges matching the given criteria."""
        edges: list[Edge] = []
        if source is not None and target is not None:
            edges = list(self._outgoing.get(source, {}).get(target, []))
        elif source is not None:
            for target_edges in self._outgoing.get(source, {}).values():
                edges.extend(target_edges)
        elif target is not None:
            for source_edges in self._incoming.get(target, {}).values():
                edges.extend(source_edges)
        else:
            edges = list(self.edges())

        if edge_type is not None:
            edges = [e for e in edges if e.edge_type == edge_type]
        return edges

    def dependents(self, number: int) -> list[int]:
        """Thoughts that declared ``number`` as a dependency, ascending."""
        return sorted(
            e.target for e in self.get_edges(source=number, edge_type=EdgeType.DEPENDS_ON)
        )

    def dependencies(self, number: int) -> list[int]:
        """Declared dependencies of ``number``, ascending."""
        return sorted(
            e.source for e in self.get_edges(target=number, edge_type=EdgeType.DEPENDS_ON)
        )

    def transitive_dependencies(self, number: int) -> list[int]:
        """All thoughts ``number`` depends on, ordered by distance."""
        chain: list[int] = []
        visited: set[int] = {number}
        queue: deque[int] = deque([number])
        while queue:
            current = queue.popleft()
            for dependency in self.dependencies(current):
                if dependency not in visited:
                    visited.add(dependency)
                    chain.append(dependency)
                    queue.append(dependency)
        return chain

    def branch_members(self, branch_id: str) -> list[int]:
        return list(self._branches.get(branch_id, ()))

    def contradictions(self) -> list[tuple[int, int]]:
        return [(e.source, e.target) for e in self.edges() if e.edge_type == EdgeType.CONTRADICTS]

    @property
    def node_count(self) -> int:
        return len(self._nodes)

    @property
    def edge_count(self) -> int:
        return sum(len(edges) for targets in self._outgoing.values() for edges in targets.values())

    def nodes(self) -> Iterator[GraphNode]:
        return iter(sorted(self._nodes.values(), key=lambda node: node.number))

    def edges(self) -> Iterator[Edge]:
        for source in sorted(self._outgoing):
            for target in sorted(self._outgoing[source]):
                yield from self._outgoing[source][target]

    def to_dict(self) -> dict[str, Any]:
        """Export graph to dictionary format.

        Returns:
            Dictionary with nodes, edges, the dependents adjacency map and
            summary stats.

        """
        return {
            "nodes": [
                {
                    "id": node.number,
                    "label": node.label,
                    "phase": node.phase,
                    "branchId": node.branch_id,
                    "metadata": node.metadata,
                }
                for node in self.nodes()
            ],
            "edges": [
                {"source": edge.source, "target": edge.target, "type": edge.edge_type.value}
                for edge in self.edges()
            ],
            "dependents": {
                str(node.number): self.dependents(node.number) for node in self.nodes()
            },
            "stats": {
                "node_count": self.node_count,
                "edge_count": self.edge_count,
                "contradiction_count": len(self.contradictions()),
            },
        }

    def to_dot(self, title: str = "Thought Graph") -> str:
        """Export graph to DOT format for Graphviz visualization."""
        lines = [f'digraph "{title}" {{', "  rankdir=TB;", "  node [shape=box];"]

        for node in self.nodes():
            label = node.label.replace('"', '\\"')
            lines.append(f'  "{node.number}" [label="{node.number}: {label}"];')

        edge_styles = {
            EdgeType.DEPENDS_ON: 'color="blue"',
            EdgeType.CONTRADICTS: 'color="red" style="dashed"',
            EdgeType.BRANCH: 'color="purple" style="dashed"',
            EdgeType.REVISES: 'color="orange"',
        }
        for edge in self.edges():
            style = edge_styles[edge.edge_type]
            lines.append(
                f'  "{edge.source}" -> "{edge.target}" [{style} label="{edge.edge_type.value}"];'
            )

        lines.append("}")
        return "\n".join(lines)

    def to_mermaid(self, title: str = "Thought Graph") -> str:
        """Export graph to Mermaid format for documentation."""
        lines = ["```mermaid", "graph TD", f"    %% {title}"]

        for node in self.nodes():
            label = node.label.replace('"', "'")
            lines.append(f'    T{node.number}["{node.number}: {label}"]')

        arrow_styles = {
            EdgeType.DEPENDS_ON: "-->",
            EdgeType.CONTRADICTS: "-.->|contradicts|",
            EdgeType.BRANCH: "-.->|branch|",
            EdgeType.REVISES: "-->|revises|",
        }
        for edge in self.edges():
            lines.append(f"    T{edge.source} {arrow_styles[edge.edge_type]} T{edge.target}")

        lines.append("```")
        return "\n".join(lines)
