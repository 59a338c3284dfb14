"""Strategy interface for accounting pods against simulated nodes.

The scheduling layer only talks to ``Strategy``; which policy is behind it
(predictive, counting, ...) is chosen by whoever builds it. The base class
owns the bind/unbind flow: guard checks, the bound-pod annotation, the
version-conditioned node write and the pod write. Subclasses decide what a
bind or unbind does to the node's allocatable.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Callable, Optional, Tuple, TypeVar

from kube_capacity_sim.calculators.vector import Vector, pod_requests
from kube_capacity_sim.core.config import DeletePolicy, StrategyConfig
from kube_capacity_sim.core.exceptions import (
    ConcurrentModificationError,
    ConflictError,
    InvalidPodError,
    NotBoundError,
    NotFoundError,
    UpdateError,
)
from kube_capacity_sim.core.guard import BindingGuard, bound_pod_keys, set_bound_pod_keys
from kube_capacity_sim.models.resources import Node, Pod
from kube_capacity_sim.models.results import AccountingResult
from kube_capacity_sim.store.base import ObjectStore


logger = logging.getLogger(__name__)

T = TypeVar("T")


class Strategy(ABC):
    """Abstract accounting policy applied when pods are bound or unbound."""

    name: str

    def __init__(self, store: ObjectStore, config: Optional[StrategyConfig] = None) -> None:
        self.store = store
        self.config = config or StrategyConfig()
        self.guard = BindingGuard(store)

    @abstractmethod
    def _debit(self, node: Node, pod: Pod, request: Vector) -> Vector:
        """Charge ``request`` against ``node`` in place; return the shortfall."""

    @abstractmethod
    def _credit(self, node: Node, request: Vector) -> None:
        """Give ``request`` back to ``node`` in place."""

    def add(self, pod: Pod) -> AccountingResult:
        """Charge a pod, whose ``spec.nodeName`` is set, against its node."""
        node_name = pod.node_name
        if not node_name:
            raise InvalidPodError(f"pod {pod.key} has no spec.nodeName; schedule it first")
        self.guard.ensure_not_bound_elsewhere(pod)
        request = self._request(pod)

        def charge(node: Node) -> Vector:
            self.guard.ensure_unbound(pod, node)
            shortfall = self._debit(node, pod, request)
            set_bound_pod_keys(node, [*bound_pod_keys(node), pod.key])
            return shortfall

        node, shortfall = self._update_node(node_name, charge)
        if shortfall:
            logger.warning(
                "node %s over-subscribed by pod %s; clamped %s",
                node_name,
                pod.key,
                ", ".join(f"{k} (short {v})" for k, v in sorted(shortfall.items())),
            )
        self.store.create_or_update_pod(pod)
        logger.debug("added pod %s to node %s, allocatable now %s", pod.key, node_name, node.status.allocatable)
        return self._result("add", pod, node, request, shortfall)

    def delete(self, pod: Pod) -> AccountingResult:
        """Release a previously added pod from its node.

        The credit is the request of the stored pod, which is what ``add``
        charged; the argument's own request is used only when the pod object
        is gone from the store.
        """
        node_name = self.guard.find_binding(pod)
        if node_name is None:
            raise NotBoundError(pod.key, pod.node_name)
        stored = self.store.get_pod(pod.metadata.namespace, pod.metadata.name)
        request = self._request(stored if stored is not None else pod)

        def release(node: Node) -> Vector:
            self.guard.ensure_bound(pod, node)
            self._credit(node, request)
            set_bound_pod_keys(node, [k for k in bound_pod_keys(node) if k != pod.key])
            return {}

        node, _ = self._update_node(node_name, release)
        if stored is None:
            logger.debug("pod %s not in store; only the node was updated", pod.key)
        elif self.config.delete_policy is DeletePolicy.REMOVE:
            self.store.delete_pod(pod.metadata.namespace, pod.metadata.name)
        else:
            self.store.delete_pod_binding(pod.metadata.namespace, pod.metadata.name)
        logger.debug("deleted pod %s from node %s, allocatable now %s", pod.key, node_name, node.status.allocatable)
        return self._result("delete", pod, node, request, {})

    def update(self, old: Pod, new: Pod) -> AccountingResult:
        """Replace ``old`` by ``new``: a delete followed by an add.

        Raises UpdateError with ``phase="delete"`` if nothing was changed, or
        ``phase="add"`` if ``old`` was released but ``new`` could not be
        charged, so the caller knows which state the store is in.
        """
        try:
            self.delete(old)
        except Exception as exc:
            raise UpdateError("delete", old.key, exc) from exc
        try:
            return self.add(new)
        except Exception as exc:
            logger.warning("pod %s released from %s but could not be re-added: %s", old.key, old.node_name, exc)
            raise UpdateError("add", new.key, exc) from exc

    def _request(self, pod: Pod) -> Vector:
        return pod_requests(pod, count_pod_slot=self.config.count_pod_slots)

    def _update_node(self, name: str, mutate: Callable[[Node], T]) -> Tuple[Node, T]:
        """Read the node, apply ``mutate`` and write it back, retrying on conflict."""
        attempts = self.config.max_conflict_retries + 1
        last_conflict: Optional[ConflictError] = None
        for attempt in range(1, attempts + 1):
            node = self.store.get_node(name)
            if node is None:
                raise NotFoundError("node", name)
            outcome = mutate(node)
            try:
                return self.store.update_node(node), outcome
            except ConflictError as exc:
                last_conflict = exc
                logger.debug("conflict on node %s (attempt %d/%d): %s", name, attempt, attempts, exc)
        raise ConcurrentModificationError(name, attempts) from last_conflict

    def _result(
        self, operation: str, pod: Pod, node: Node, request: Vector, shortfall: Vector
    ) -> AccountingResult:
        return AccountingResult(
            operation=operation,
            strategy=self.name,
            pod=pod.key,
            node=node.name,
            request=request,
            allocatable=dict(node.status.allocatable),
            node_resource_version=node.metadata.resource_version,
            shortfall=shortfall,
        )
