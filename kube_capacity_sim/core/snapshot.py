from __future__ import annotations

import logging
from decimal import Decimal
from typing import List, Mapping, Optional

from kube_capacity_sim.calculators.vector import (
    Vector,
    pod_requests,
    subtract,
    sum_vectors,
    vectors_equal,
    zero_vector,
)
from kube_capacity_sim.core.config import StrategyConfig
from kube_capacity_sim.core.exceptions import NotFoundError
from kube_capacity_sim.core.guard import bound_pod_keys
from kube_capacity_sim.models.resources import Node, Pod
from kube_capacity_sim.models.results import NodeCapacityReport
from kube_capacity_sim.store.base import ObjectStore


logger = logging.getLogger(__name__)


class CapacitySnapshot:
    """Read-only view of simulated capacity, straight from the store."""

    def __init__(self, store: ObjectStore, config: Optional[StrategyConfig] = None) -> None:
        self.store = store
        self.config = config or StrategyConfig()

    def _node(self, name: str) -> Node:
        node = self.store.get_node(name)
        if node is None:
            raise NotFoundError("node", name)
        return node

    def capacity(self, node_name: str) -> Vector:
        return dict(self._node(node_name).status.capacity)

    def allocatable(self, node_name: str) -> Vector:
        return dict(self._node(node_name).status.allocatable)

    def bound_pods(self, node_name: str) -> List[Pod]:
        return self._bound_pods(self._node(node_name))

    def requested(self, node_name: str) -> Vector:
        """Sum of the requests of the pods bound to the node.

        A node with nothing bound gets a zero for each of its capacity keys.
        """
        return self._requested(self._node(node_name))

    def reconstruct_allocatable(
        self, node_name: str, baseline: Optional[Mapping[str, Decimal]] = None
    ) -> Vector:
        """Recompute allocatable from ``baseline`` (capacity by default) and the bound pods."""
        node = self._node(node_name)
        start = node.status.capacity if baseline is None else baseline
        allocatable, _ = subtract(start, self._requested(node), floor=self.config.floor)
        return allocatable

    def is_consistent(self, node_name: str, baseline: Optional[Mapping[str, Decimal]] = None) -> bool:
        return vectors_equal(
            self.reconstruct_allocatable(node_name, baseline), self.allocatable(node_name)
        )

    def report(self, node_name: str) -> NodeCapacityReport:
        return self._report(self._node(node_name))

    def reports(self) -> List[NodeCapacityReport]:
        return [self._report(node) for node in self.store.list_nodes()]

    def _bound_pods(self, node: Node) -> List[Pod]:
        pods: List[Pod] = []
        for key in bound_pod_keys(node):
            namespace, _, name = key.partition("/")
            pod = self.store.get_pod(namespace, name)
            if pod is None:
                logger.warning("pod %s is bound to node %s but missing from the store", key, node.name)
                continue
            pods.append(pod)
        return pods

    def _requested(self, node: Node) -> Vector:
        requests = [
            pod_requests(p, count_pod_slot=self.config.count_pod_slots) for p in self._bound_pods(node)
        ]
        return sum_vectors([zero_vector(node.status.capacity), *requests])

    def _report(self, node: Node) -> NodeCapacityReport:
        return NodeCapacityReport(
            name=node.name,
            capacity=dict(node.status.capacity),
            allocatable=dict(node.status.allocatable),
            requested=self._requested(node),
            bound_pods=bound_pod_keys(node),
        )
