"""Tests for the command line interface."""

import json

import pytest
import yaml
from click.testing import CliRunner

from astrolabe.cli.main import cli


@pytest.fixture
def runner(monkeypatch):
    monkeypatch.delenv("ASTROLABE_LOG_LEVEL", raising=False)
    return CliRunner()


@pytest.fixture
def snapshot_file(tmp_path, shop_nodes):
    path = tmp_path / "snapshot.yaml"
    path.write_text(yaml.safe_dump({"scope": "namespace", "rv": 42, "nodes": shop_nodes}))
    return path


@pytest.fixture
def invoke(runner, snapshot_file, tmp_path):
    """Run the CLI against the shop snapshot with default config."""

    def _invoke(*args, snapshot=None):
        base = ["-s", str(snapshot or snapshot_file), "-c", str(tmp_path / "absent.yaml")]
        return runner.invoke(cli, base + list(args))

    return _invoke


class TestInfo:
    def test_summary(self, invoke):
        result = invoke("info")
        assert result.exit_code == 0
        assert "Resources: 14" in result.output
        assert "Total edges: 17" in result.output
        assert "Resource version: 42" in result.output

    def test_missing_snapshot(self, invoke, tmp_path):
        result = invoke("info", snapshot=tmp_path / "nope.yaml")
        assert result.exit_code == 1
        assert "Snapshot not found" in result.output

    def test_invalid_config(self, runner, snapshot_file, tmp_path):
        config = tmp_path / "astrolabe.yaml"
        config.write_text("log_level: chatty\n")
        result = runner.invoke(cli, ["-s", str(snapshot_file), "-c", str(config), "info"])
        assert result.exit_code == 1
        assert "Invalid config" in result.output


class TestEdges:
    def test_filter_by_type(self, invoke):
        result = invoke("edges", "--type", "scales")
        assert result.exit_code == 0
        assert "scales" in result.output
        assert "mounts" not in result.output


class TestAttachments:
    def test_single_resource(self, invoke):
        result = invoke("attachments", "rs1")
        assert result.exit_code == 0
        assert "Pod" in result.output
        assert "web-abc-1" in result.output

    def test_unknown_resource(self, invoke):
        result = invoke("attachments", "ghost")
        assert result.exit_code == 1
        assert "Resource not found" in result.output


class TestLayoutCommand:
    def test_json_collapsed(self, invoke):
        result = invoke("layout", "--json")
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert [n["id"] for n in data["nodes"]] == ["ing1", "svc1", "d1", "hpa1"]
        assert data["diagnostics"]["solver_failed"] is False

    def test_json_expand(self, invoke):
        result = invoke("layout", "--json", "--expand", "d1:ReplicaSet")
        data = json.loads(result.stdout)
        assert "rs1" in [n["id"] for n in data["nodes"]]

    def test_json_expand_all(self, invoke):
        data = json.loads(invoke("layout", "--json", "--expand-all").stdout)
        assert len(data["nodes"]) == 14

    def test_bad_expand(self, invoke):
        result = invoke("layout", "--expand", "d1:Gizmo")
        assert result.exit_code == 2
        assert "unknown kind" in result.output

    def test_table(self, invoke):
        result = invoke("layout")
        assert result.exit_code == 0
        assert "Layout" in result.output
        assert "Orphans: 1" in result.output


class TestDiagram:
    def test_stdout(self, invoke):
        result = invoke("diagram", "--stdout")
        assert result.exit_code == 0
        assert "flowchart LR" in result.output

    def test_all_formats_to_files(self, invoke, tmp_path):
        out = tmp_path / "diagrams"
        result = invoke("diagram", "--format", "all", "--output", str(out))
        assert result.exit_code == 0
        assert (out / "topology.md").read_text().startswith("# Resource Topology")
        assert (out / "topology.dot").read_text().startswith("digraph Topology")

    def test_no_match(self, invoke):
        result = invoke("diagram", "--stdout", "--search", "nothing-here")
        assert result.exit_code == 0
        assert "No resources match" in result.output


class TestValidate:
    def test_clean_snapshot(self, invoke):
        result = invoke("validate")
        assert result.exit_code == 0
        assert "Validation passed" in result.output

    def test_unresolved_strict(self, invoke, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text(
            yaml.safe_dump(
                {"nodes": [{"uid": "p", "kind": "Pod", "name": "p", "namespace": "a", "mountedPVCs": ["gone"]}]}
            )
        )
        assert invoke("validate", snapshot=path).exit_code == 0
        result = invoke("validate", "--strict", snapshot=path)
        assert result.exit_code == 1
        assert "strict mode" in result.output

    def test_unparseable_snapshot(self, invoke, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")
        result = invoke("validate", snapshot=path)
        assert result.exit_code == 1
        assert "Validation failed" in result.output
