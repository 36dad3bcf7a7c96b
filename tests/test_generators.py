"""Tests for diagram generators."""

import pytest

from astrolabe.generators.dot import generate_dot
from astrolabe.generators.mermaid import generate_mermaid, node_ids
from astrolabe.pipeline import Topology


@pytest.fixture
def collapsed(shop):
    return Topology(shop).render()


@pytest.fixture
def expanded(shop):
    topology = Topology(shop)
    return topology.render(expansion=topology.expand_all())


class TestMermaidGenerator:
    """Tests for Mermaid diagram generation."""

    def test_structure(self, collapsed):
        output = generate_mermaid(collapsed)
        assert output.startswith("# Resource Topology")
        assert "flowchart LR" in output
        assert 'subgraph ns0["shop"]' in output
        assert "## Legend" in output

    def test_nodes_and_edges(self, collapsed):
        output = generate_mermaid(collapsed)
        ids = node_ids(collapsed)
        assert f"{ids['ing1']} -->|backs| {ids['svc1']}" in output
        assert f"{ids['hpa1']} -.->|scales| {ids['d1']}" in output

    def test_attachment_count_in_label(self, collapsed):
        output = generate_mermaid(collapsed)
        assert '"Service: web (+1)"' in output
        assert '"Ingress: web"' in output

    def test_cluster_scoped_group(self, expanded):
        output = generate_mermaid(expanded)
        assert '["cluster-scoped"]' in output
        assert "StorageClass: standard" in output

    def test_duplicate_edges_rendered_once(self, expanded):
        output = generate_mermaid(expanded)
        ids = node_ids(expanded)
        assert output.count(f"{ids['pvc1']} -.->|ref| {ids['pv1']}") == 1


class TestDotGenerator:
    """Tests for DOT diagram generation."""

    def test_structure(self, collapsed):
        output = generate_dot(collapsed)
        assert output.startswith("digraph Topology {")
        assert "rankdir=LR;" in output
        assert "subgraph cluster_0 {" in output
        assert output.rstrip().endswith("}")

    def test_positions_from_layout(self, collapsed):
        output = generate_dot(collapsed)
        ing = collapsed.node("ing1")
        x = ing.x + ing.width / 2
        y = -(ing.y + ing.height / 2)
        assert f'pos="{x:g},{y:g}!"' in output

    def test_edge_styles(self, expanded):
        output = generate_dot(expanded)
        ids = node_ids(expanded)
        assert f'{ids["d1"]} -> {ids["rs1"]} [label="owns", color=black, penwidth=2];' in output
        assert f'{ids["ing1"]} -> {ids["svc1"]} [label="backs", color=blue];' in output

    def test_status_colors(self, expanded):
        output = generate_dot(expanded)
        assert "fillcolor=lightyellow" in output
        assert "fillcolor=lightgray" in output
