"""Tests for the ThoughtGraph sparse adjacency implementation."""

from __future__ import annotations

import pytest

from src.tools.thought_graph import Edge, EdgeType, ThoughtGraph
from src.tools.thought_types import Classification, ContradictionDetail, Phase
from tests.conftest import make_thought


@pytest.fixture
def graph() -> ThoughtGraph:
    """Graph where thought 3 depends on thoughts 1 and 2."""
    graph = ThoughtGraph()
    graph.add_thought(make_thought("Collect requirements", 1, phase=Phase.PLANNING))
    graph.add_thought(make_thought("Sketch the parser", 2, dependencies=(1,)))
    graph.add_thought(make_thought("Write the parser", 3, dependencies=(1, 2)))
    return graph


class TestEdge:
    """Tests for Edge dataclass."""

    def test_edges_compare_by_value(self) -> None:
        """Test identical edges are equal and hashable."""
        assert Edge(1, 2, EdgeType.DEPENDS_ON) == Edge(1, 2, EdgeType.DEPENDS_ON)
        assert len({Edge(1, 2, EdgeType.DEPENDS_ON), Edge(1, 2, EdgeType.DEPENDS_ON)}) == 1


class TestAddThought:
    """Tests for incremental graph updates."""

    def test_dependents_and_dependencies(self, graph: ThoughtGraph) -> None:
        """Test both declared dependencies list thought 3 as a dependent."""
        assert graph.dependents(1) == [2, 3]
        assert graph.dependents(2) == [3]
        assert graph.dependencies(3) == [1, 2]
        assert graph.dependents(3) == []

    def test_transitive_dependencies(self, graph: ThoughtGraph) -> None:
        """Test the dependency chain is ordered by distance."""
        graph.add_thought(make_thought("Test the parser", 4, dependencies=(3,)))
        assert graph.transitive_dependencies(4) == [3, 1, 2]

    def test_node_metadata(self) -> None:
        """Test nodes carry the summary, phase and display metadata."""
        graph = ThoughtGraph()
        node = graph.add_thought(
            make_thought("x" * 60, 1, classification=Classification.HYPOTHESIS, alignment_score=8)
        )
        assert node.label == "x" * 50 + "..."
        assert node.phase == "Execution"
        assert node.metadata == {
            "classification": "hypothesis",
            "alignment": 8,
            "isRevision": False,
        }

    def test_unknown_reference_raises(self) -> None:
        """Test an edge to a missing thought is rejected."""
        graph = ThoughtGraph()
        with pytest.raises(ValueError, match="unknown thought"):
            graph.add_thought(make_thought("Orphan", 2, dependencies=(1,)))

    def test_existing_number_rejected(self, graph: ThoughtGraph) -> None:
        """Test a repeated number never replaces the stored node or adds edges."""
        with pytest.raises(ValueError, match="already in the graph"):
            graph.add_thought(
                make_thought(
                    "Sketch again", 2, is_revision=True, revises_thought=3, dependencies=(3,)
                )
            )
        assert graph.get_node(2).label == "Sketch the parser"
        assert graph.dependencies(2) == [1]
        assert graph.dependents(3) == []

    def test_unknown_reference_adds_nothing(self) -> None:
        """Test a rejected thought leaves no node behind."""
        graph = ThoughtGraph()
        graph.add_thought(make_thought("One", 1))
        with pytest.raises(ValueError, match="unknown thought"):
            graph.add_thought(make_thought("Two", 2, dependencies=(1,), revises_thought=5))
        assert graph.get_node(2) is None
        assert graph.edge_count == 0

    def test_self_dependency_ignored(self) -> None:
        """Test a thought never links to itself."""
        graph = ThoughtGraph()
        graph.add_thought(make_thought("Alone", 1, dependencies=(1,)))
        assert graph.edge_count == 0

    def test_branch_edges(self, graph: ThoughtGraph) -> None:
        """Test branch edges and membership."""
        graph.add_thought(make_thought("Try regex", 4, branch_from_thought=2, branch_id="regex"))
        assert graph.get_edges(source=2, target=4) == [Edge(2, 4, EdgeType.BRANCH)]
        assert graph.branch_members("regex") == [4]
        assert graph.branch_members("missing") == []

    def test_revision_refreshes_node(self, graph: ThoughtGraph) -> None:
        """Test a revision edge points from the reviser back to the original."""
        graph.add_thought(
            make_thought("Write the parser again", 4, is_revision=True, revises_thought=3)
        )
        assert graph.get_edges(edge_type=EdgeType.REVISES) == [Edge(4, 3, EdgeType.REVISES)]
        assert graph.get_node(4).metadata["isRevision"] is True

    def test_contradiction_edges(self, graph: ThoughtGraph) -> None:
        """Test contradiction edges are recorded from the new thought."""
        graph.add_thought(
            make_thought(
                "The parser is unnecessary",
                4,
                contradictions=(ContradictionDetail(2, "Conflicting conclusions detected"),),
            )
        )
        assert graph.contradictions() == [(4, 2)]

    def test_duplicate_edges_collapse(self) -> None:
        """Test repeating a dependency adds one edge."""
        graph = ThoughtGraph()
        graph.add_thought(make_thought("One", 1))
        graph.add_thought(make_thought("Two", 2, dependencies=(1, 1)))
        assert graph.edge_count == 1


class TestQueries:
    """Tests for edge queries and counters."""

    def test_counts(self, graph: ThoughtGraph) -> None:
        """Test node and edge counters."""
        assert graph.node_count == 3
        assert graph.edge_count == 3

    def test_get_edges_filters(self, graph: ThoughtGraph) -> None:
        """Test filtering by source, target and type."""
        assert len(graph.get_edges(source=1)) == 2
        assert len(graph.get_edges(target=3)) == 2
        assert graph.get_edges(edge_type=EdgeType.CONTRADICTS) == []
        assert graph.get_node(99) is None

    def test_nodes_sorted(self, graph: ThoughtGraph) -> None:
        """Test nodes iterate in thought order."""
        assert [node.number for node in graph.nodes()] == [1, 2, 3]


class TestExport:
    """Tests for dict, DOT and mermaid export."""

    def test_to_dict(self, graph: ThoughtGraph) -> None:
        """Test the dict export carries nodes, edges and dependents."""
        data = graph.to_dict()
        assert [node["id"] for node in data["nodes"]] == [1, 2, 3]
        assert {"source": 1, "target": 3, "type": "depends_on"} in data["edges"]
        assert data["dependents"] == {"1": [2, 3], "2": [3], "3": []}
        assert data["stats"] == {"node_count": 3, "edge_count": 3, "contradiction_count": 0}

    def test_to_dot(self, graph: ThoughtGraph) -> None:
        """Test DOT output declares nodes and styled edges."""
        dot = graph.to_dot()
        assert dot.startswith('digraph "Thought Graph" {')
        assert '"1" [label="1: Collect requirements"];' in dot
        assert '"1" -> "3" [color="blue" label="depends_on"];' in dot
        assert dot.endswith("}")

    def test_to_dot_escapes_quotes(self) -> None:
        """Test double quotes in labels are escaped."""
        graph = ThoughtGraph()
        graph.add_thought(make_thought('Say "hi"', 1))
        assert 'label="1: Say \\"hi\\""' in graph.to_dot()

    def test_to_mermaid(self, graph: ThoughtGraph) -> None:
        """Test mermaid output is fenced and lists arrows."""
        mermaid = graph.to_mermaid()
        lines = mermaid.splitlines()
        assert lines[0] == "```mermaid"
        assert lines[-1] == "```"
        assert "    T1 --> T3" in lines
