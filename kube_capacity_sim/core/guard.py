from __future__ import annotations

import json
from typing import Iterable, List, Optional

from kube_capacity_sim.core.exceptions import AlreadyBoundError, NotBoundError
from kube_capacity_sim.models.resources import Node, Pod
from kube_capacity_sim.store.base import ObjectStore


# Pods currently charged against a node, as a sorted JSON list of
# "<namespace>/<name>". Lives on the node so it is written in the same
# version-conditioned update as the allocatable change.
BOUND_PODS_ANNOTATION = "capacity-sim.io/bound-pods"


def bound_pod_keys(node: Node) -> List[str]:
    raw = node.metadata.annotations.get(BOUND_PODS_ANNOTATION)
    if not raw:
        return []
    return list(json.loads(raw))


def set_bound_pod_keys(node: Node, keys: Iterable[str]) -> None:
    keys = sorted(set(keys))
    if keys:
        node.metadata.annotations[BOUND_PODS_ANNOTATION] = json.dumps(keys)
    else:
        node.metadata.annotations.pop(BOUND_PODS_ANNOTATION, None)


class BindingGuard:
    """Stops a pod from being charged twice or released without a charge.

    The bound set is always read from the store, never cached.
    """

    def __init__(self, store: ObjectStore) -> None:
        self.store = store

    def find_binding(self, pod: Pod) -> Optional[str]:
        """Name of the node the pod is charged against, if any.

        Looks at the node named by the pod and at the node named by the stored
        copy of the pod, which differ when the pod is being moved.
        """
        candidates = [pod.node_name]
        stored = self.store.get_pod(pod.metadata.namespace, pod.metadata.name)
        if stored is not None and stored.node_name not in candidates:
            candidates.append(stored.node_name)
        for name in candidates:
            if not name:
                continue
            node = self.store.get_node(name)
            if node is not None and pod.key in bound_pod_keys(node):
                return name
        return None

    def ensure_not_bound_elsewhere(self, pod: Pod) -> None:
        """Fail if the stored pod is charged against a node other than its target."""
        stored = self.store.get_pod(pod.metadata.namespace, pod.metadata.name)
        if stored is None or not stored.node_name or stored.node_name == pod.node_name:
            return
        other = self.store.get_node(stored.node_name)
        if other is not None and pod.key in bound_pod_keys(other):
            raise AlreadyBoundError(pod.key, other.name)

    @staticmethod
    def ensure_unbound(pod: Pod, node: Node) -> None:
        if pod.key in bound_pod_keys(node):
            raise AlreadyBoundError(pod.key, node.name)

    @staticmethod
    def ensure_bound(pod: Pod, node: Node) -> None:
        if pod.key not in bound_pod_keys(node):
            raise NotBoundError(pod.key, node.name)
