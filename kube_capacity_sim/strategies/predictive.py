from __future__ import annotations

from kube_capacity_sim.calculators.vector import Vector, add, subtract
from kube_capacity_sim.core.config import OvercommitPolicy
from kube_capacity_sim.core.exceptions import InsufficientCapacityError
from kube_capacity_sim.models.resources import Node, Pod
from kube_capacity_sim.strategies.base import Strategy


class PredictiveStrategy(Strategy):
    """Keeps each node's allocatable equal to what its bound pods leave free.

    ``add`` subtracts the pod's aggregate request from the node's allocatable
    and stores the pod; ``delete`` gives the request back, capped at the
    node's capacity. Node writes are version-conditioned and retried on
    conflict.
    """

    name = "predictive"

    def _debit(self, node: Node, pod: Pod, request: Vector) -> Vector:
        allocatable, shortfall = subtract(node.status.allocatable, request, floor=self.config.floor)
        if shortfall and self.config.overcommit is OvercommitPolicy.FAIL:
            raise InsufficientCapacityError(pod.key, node.name, shortfall)
        node.status.allocatable = allocatable
        return shortfall

    def _credit(self, node: Node, request: Vector) -> None:
        node.status.allocatable = add(node.status.allocatable, request, cap=node.status.capacity)
