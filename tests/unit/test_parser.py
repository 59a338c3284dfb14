from __future__ import annotations

from decimal import Decimal

import pytest

from kube_capacity_sim.calculators.vector import pod_requests
from kube_capacity_sim.core.exceptions import ParseError
from kube_capacity_sim.parsers.yaml_parser import parse_files


def test_parse_nodes_and_lists(fixtures_dir):
    out = parse_files([str(fixtures_dir / "cluster.yaml")])
    assert [n.name for n in out.nodes] == ["node-a", "node-b"]
    node_a, node_b = out.nodes
    assert node_a.status.allocatable["cpu"] == Decimal("3.8")
    assert node_a.status.capacity["nvidia.com/gpu"] == Decimal(2)
    assert node_a.metadata.labels == {"topology.kubernetes.io/zone": "eu-west-3a"}
    # node-b ships no allocatable
    assert node_b.status.allocatable == node_b.status.capacity
    assert any("node-b" in a for a in out.assumptions)


def test_parse_pods(fixtures_dir):
    out = parse_files([str(fixtures_dir / "pods.yaml")])
    assert [p.key for p in out.pods] == ["shop/web-1", "default/trainer", "jobs/batch-1", "shop/pending-1"]
    web, trainer, batch, pending = out.pods

    assert web.node_name == "node-a"
    assert pod_requests(web) == {"cpu": Decimal("0.6"), "memory": Decimal(2**30 + 128 * 2**20)}
    # limits only: requests default to limits
    assert pod_requests(trainer)["nvidia.com/gpu"] == Decimal(1)
    assert any("trainer" in a for a in out.assumptions)
    assert pod_requests(batch) == {"cpu": Decimal("1.5"), "memory": Decimal(2**30)}
    assert pending.node_name == ""
    assert any("Service" in w for w in out.warnings)


def test_missing_file_and_bad_yaml(tmp_path, fixtures_dir):
    with pytest.raises(ParseError, match="File not found"):
        parse_files([str(tmp_path / "nope.yaml")])

    bad = tmp_path / "bad.yaml"
    bad.write_text("kind: Pod\nmetadata: [unclosed\n", encoding="utf-8")
    with pytest.raises(ParseError, match="YAML parse error"):
        parse_files([str(bad)])

    with pytest.raises(ParseError, match="Invalid Node broken"):
        parse_files([str(fixtures_dir / "invalid.yaml")])
