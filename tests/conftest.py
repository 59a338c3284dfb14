from __future__ import annotations

from pathlib import Path

import pytest

from kube_capacity_sim.models.resources import (
    Container,
    Node,
    NodeStatus,
    ObjectMeta,
    Pod,
    PodSpec,
    ResourceRequirements,
)
from kube_capacity_sim.store.memory import InMemoryStore


FIXTURES = Path(__file__).resolve().parent / "fixtures"

GPU = "nvidia.com/gpu"
TEST_NODE = "node1"


def _node(name, capacity, allocatable=None):
    return Node(
        metadata=ObjectMeta(name=name),
        status=NodeStatus(
            capacity=capacity,
            allocatable=capacity if allocatable is None else allocatable,
        ),
    )


def _pod(name, requests, *, namespace="test", node_name=TEST_NODE, limits=None):
    return Pod(
        metadata=ObjectMeta(name=name, namespace=namespace, resource_version="10"),
        spec=PodSpec(
            node_name=node_name,
            restart_policy="Always",
            containers=[
                Container(
                    name="main",
                    resources=ResourceRequirements(
                        requests=requests,
                        limits=requests if limits is None else limits,
                    ),
                )
            ],
        ),
    )


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES


@pytest.fixture
def make_node():
    return _node


@pytest.fixture
def make_pod():
    return _pod


@pytest.fixture
def test_node() -> Node:
    # allocatable deliberately smaller than the pod below on cpu
    return _node(
        TEST_NODE,
        capacity={"cpu": "2000m", "memory": "10e9", "pods": "0", GPU: "0"},
        allocatable={"cpu": "300m", "memory": "20e6", "pods": "0", GPU: "0"},
    )


@pytest.fixture
def scheduled_pod() -> Pod:
    return _pod(
        "schedulerPod",
        {"cpu": "400m", "memory": "10e6", "pods": "0", GPU: "0"},
    )


@pytest.fixture
def roomy_node() -> Node:
    return _node(
        TEST_NODE,
        capacity={"cpu": "4", "memory": "8Gi", "pods": "110", GPU: "2"},
    )


@pytest.fixture
def small_pod() -> Pod:
    return _pod("web", {"cpu": "500m", "memory": "1Gi", GPU: "1"})


@pytest.fixture
def store(roomy_node) -> InMemoryStore:
    return InMemoryStore(nodes=[roomy_node])