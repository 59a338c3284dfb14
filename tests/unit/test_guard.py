from __future__ import annotations

import pytest

from kube_capacity_sim.core.exceptions import AlreadyBoundError, NotBoundError
from kube_capacity_sim.core.guard import (
    BOUND_PODS_ANNOTATION,
    BindingGuard,
    bound_pod_keys,
    set_bound_pod_keys,
)
from kube_capacity_sim.store.memory import InMemoryStore
from kube_capacity_sim.strategies.predictive import PredictiveStrategy


def test_bound_pod_keys_annotation(roomy_node):
    assert bound_pod_keys(roomy_node) == []
    set_bound_pod_keys(roomy_node, ["b/x", "a/y", "b/x"])
    assert bound_pod_keys(roomy_node) == ["a/y", "b/x"]
    assert roomy_node.metadata.annotations[BOUND_PODS_ANNOTATION] == '["a/y", "b/x"]'
    set_bound_pod_keys(roomy_node, [])
    assert BOUND_PODS_ANNOTATION not in roomy_node.metadata.annotations


def test_find_binding_reads_store(store, small_pod):
    guard = BindingGuard(store)
    assert guard.find_binding(small_pod) is None

    PredictiveStrategy(store).add(small_pod)
    assert guard.find_binding(small_pod) == "node1"

    moved = small_pod.model_copy(deep=True)
    moved.spec.node_name = "node2"
    assert guard.find_binding(moved) == "node1"


def test_checks_against_node(store, small_pod):
    node = store.get_node("node1")
    BindingGuard.ensure_unbound(small_pod, node)
    with pytest.raises(NotBoundError):
        BindingGuard.ensure_bound(small_pod, node)

    set_bound_pod_keys(node, [small_pod.key])
    BindingGuard.ensure_bound(small_pod, node)
    with pytest.raises(AlreadyBoundError):
        BindingGuard.ensure_unbound(small_pod, node)


def test_pod_bound_on_another_node_is_rejected(make_node, small_pod):
    store = InMemoryStore(
        nodes=[make_node("node1", {"cpu": "4", "memory": "8Gi", "nvidia.com/gpu": "2"}), make_node("node2", {"cpu": "4"})]
    )
    PredictiveStrategy(store).add(small_pod)

    moved = small_pod.model_copy(deep=True)
    moved.spec.node_name = "node2"
    with pytest.raises(AlreadyBoundError) as exc:
        BindingGuard(store).ensure_not_bound_elsewhere(moved)
    assert exc.value.node == "node1"
