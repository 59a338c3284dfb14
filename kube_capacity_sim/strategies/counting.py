from __future__ import annotations

from kube_capacity_sim.calculators.vector import Vector
from kube_capacity_sim.models.resources import Node, Pod
from kube_capacity_sim.strategies.base import Strategy


class CountingStrategy(Strategy):
    """Records bindings without touching allocatable.

    Useful for dry runs that only count how many pods land where; the
    snapshot's ``requested`` still reflects the bound pods.
    """

    name = "counting"

    def _debit(self, node: Node, pod: Pod, request: Vector) -> Vector:
        return {}

    def _credit(self, node: Node, request: Vector) -> None:
        return None
