from __future__ import annotations

from decimal import Decimal

import pytest

from kube_capacity_sim.core.exceptions import ConflictError, NotFoundError, StoreWriteError
from kube_capacity_sim.store.memory import InMemoryStore


def test_reads_are_copies(store):
    node = store.get_node("node1")
    node.status.allocatable["cpu"] = Decimal(0)
    assert store.get_node("node1").status.allocatable["cpu"] == Decimal(4)


def test_missing_objects_return_none(store):
    assert store.get_node("ghost") is None
    assert store.get_pod("test", "ghost") is None


def test_every_node_write_bumps_resource_version(store):
    first = store.update_node(store.get_node("node1"))
    second = store.update_node(store.get_node("node1"))
    assert first.metadata.resource_version != second.metadata.resource_version
    assert int(second.metadata.resource_version) > int(first.metadata.resource_version)


def test_pods_are_stored_as_given(store, small_pod):
    assert store.create_or_update_pod(small_pod) == small_pod
    assert store.get_pod("test", "web") == small_pod
    assert store.get_pod("test", "web").metadata.resource_version == "10"

    unbound = store.delete_pod_binding("test", "web")
    assert unbound.spec.node_name == ""
    assert unbound.metadata.resource_version == "10"


def test_stale_node_update_conflicts(store):
    mine = store.get_node("node1")
    theirs = store.get_node("node1")
    theirs.metadata.labels["zone"] = "a"
    store.update_node(theirs)

    mine.status.allocatable["cpu"] = Decimal(1)
    with pytest.raises(ConflictError):
        store.update_node(mine)
    assert store.get_node("node1").status.allocatable["cpu"] == Decimal(4)


def test_unversioned_update_is_unconditional(store):
    node = store.get_node("node1")
    node.metadata.resource_version = ""
    node.metadata.labels["zone"] = "b"
    assert store.update_node(node).metadata.labels == {"zone": "b"}


def test_update_and_create_node_errors(store, roomy_node, make_node):
    with pytest.raises(NotFoundError):
        store.update_node(make_node("ghost", {"cpu": "1"}))
    with pytest.raises(StoreWriteError):
        store.create_node(roomy_node)


def test_pod_binding_and_deletion(store, small_pod, make_pod):
    store.create_or_update_pod(small_pod)
    store.create_or_update_pod(make_pod("other", {"cpu": "1"}, namespace="prod"))

    unbound = store.delete_pod_binding("test", "web")
    assert unbound.spec.node_name == ""
    assert store.get_pod("test", "web").spec.node_name == ""
    assert [p.key for p in store.list_pods()] == ["prod/other", "test/web"]
    assert [p.key for p in store.list_pods("prod")] == ["prod/other"]

    store.delete_pod("test", "web")
    assert store.get_pod("test", "web") is None
    with pytest.raises(NotFoundError):
        store.delete_pod("test", "web")
    with pytest.raises(NotFoundError):
        store.delete_pod_binding("test", "web")


def test_seeded_store_lists_nodes_sorted(make_node):
    store = InMemoryStore(nodes=[make_node("b", {"cpu": "1"}), make_node("a", {"cpu": "1"})])
    assert [n.name for n in store.list_nodes()] == ["a", "b"]
