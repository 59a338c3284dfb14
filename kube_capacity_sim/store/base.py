from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional

from kube_capacity_sim.models.resources import Node, Pod


class ObjectStore(ABC):
    """Store of Node and Pod objects consumed by the accounting strategies.

    Objects handed out are copies; callers modify them and write them back.
    Every node write assigns a new ``metadata.resource_version``; pods are
    stored exactly as given.
    """

    @abstractmethod
    def get_node(self, name: str) -> Optional[Node]:
        """Return the node, or None when it does not exist."""

    @abstractmethod
    def list_nodes(self) -> List[Node]:
        ...

    @abstractmethod
    def create_node(self, node: Node) -> Node:
        ...

    @abstractmethod
    def update_node(self, node: Node) -> Node:
        """Replace the whole node.

        When ``node.metadata.resource_version`` is set and no longer matches
        the stored one, raise ConflictError. Raise NotFoundError when the node
        does not exist.
        """

    @abstractmethod
    def get_pod(self, namespace: str, name: str) -> Optional[Pod]:
        """Return the pod, or None when it does not exist."""

    @abstractmethod
    def list_pods(self, namespace: Optional[str] = None) -> List[Pod]:
        ...

    @abstractmethod
    def create_or_update_pod(self, pod: Pod) -> Pod:
        """Store the pod as given, keeping its ``metadata.resource_version``."""

    @abstractmethod
    def delete_pod_binding(self, namespace: str, name: str) -> Pod:
        """Clear ``spec.nodeName`` on the stored pod and return it."""

    @abstractmethod
    def delete_pod(self, namespace: str, name: str) -> None:
        ...
