from __future__ import annotations

import itertools
import logging
import threading
from typing import Dict, Iterable, List, Optional, Tuple

from kube_capacity_sim.core.exceptions import ConflictError, NotFoundError, StoreWriteError
from kube_capacity_sim.models.resources import Node, Pod, pod_key
from kube_capacity_sim.store.base import ObjectStore


logger = logging.getLogger(__name__)


class InMemoryStore(ObjectStore):
    """Thread-safe in-memory object store with optimistic node versioning.

    Only nodes carry store-assigned versions; pods keep whatever
    ``resource_version`` the caller gave them.
    """

    def __init__(self, nodes: Iterable[Node] = (), pods: Iterable[Pod] = ()) -> None:
        self._lock = threading.RLock()
        self._versions = itertools.count(1)
        self._nodes: Dict[str, Node] = {}
        self._pods: Dict[Tuple[str, str], Pod] = {}
        for node in nodes:
            self.create_node(node)
        for pod in pods:
            self.create_or_update_pod(pod)

    def _stamp(self, node: Node) -> Node:
        stored = node.model_copy(deep=True)
        stored.metadata.resource_version = str(next(self._versions))
        return stored

    # nodes

    def get_node(self, name: str) -> Optional[Node]:
        with self._lock:
            node = self._nodes.get(name)
            return node.model_copy(deep=True) if node is not None else None

    def list_nodes(self) -> List[Node]:
        with self._lock:
            return [self._nodes[n].model_copy(deep=True) for n in sorted(self._nodes)]

    def create_node(self, node: Node) -> Node:
        with self._lock:
            if node.name in self._nodes:
                raise StoreWriteError(f"node {node.name!r} already exists")
            stored = self._stamp(node)
            self._nodes[node.name] = stored
            logger.debug("created node %s at version %s", node.name, stored.metadata.resource_version)
            return stored.model_copy(deep=True)

    def update_node(self, node: Node) -> Node:
        with self._lock:
            current = self._nodes.get(node.name)
            if current is None:
                raise NotFoundError("node", node.name)
            expected = node.metadata.resource_version
            if expected and expected != current.metadata.resource_version:
                raise ConflictError(node.name, expected, current.metadata.resource_version)
            stored = self._stamp(node)
            self._nodes[node.name] = stored
            return stored.model_copy(deep=True)

    # pods

    def get_pod(self, namespace: str, name: str) -> Optional[Pod]:
        with self._lock:
            pod = self._pods.get((namespace, name))
            return pod.model_copy(deep=True) if pod is not None else None

    def list_pods(self, namespace: Optional[str] = None) -> List[Pod]:
        with self._lock:
            return [
                p.model_copy(deep=True)
                for (ns, _), p in sorted(self._pods.items())
                if namespace is None or ns == namespace
            ]

    def create_or_update_pod(self, pod: Pod) -> Pod:
        with self._lock:
            stored = pod.model_copy(deep=True)
            self._pods[(pod.metadata.namespace, pod.metadata.name)] = stored
            return stored.model_copy(deep=True)

    def delete_pod_binding(self, namespace: str, name: str) -> Pod:
        with self._lock:
            current = self._pods.get((namespace, name))
            if current is None:
                raise NotFoundError("pod", pod_key(namespace, name))
            current.spec.node_name = ""
            return current.model_copy(deep=True)

    def delete_pod(self, namespace: str, name: str) -> None:
        with self._lock:
            if self._pods.pop((namespace, name), None) is None:
                raise NotFoundError("pod", pod_key(namespace, name))
