from __future__ import annotations

from decimal import Decimal
from typing import Annotated, Dict, List

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel

from kube_capacity_sim.utils.units import parse_quantity


Quantity = Annotated[Decimal, BeforeValidator(parse_quantity)]
ResourceList = Dict[str, Quantity]

RESOURCE_CPU = "cpu"
RESOURCE_MEMORY = "memory"
RESOURCE_PODS = "pods"


class KubeModel(BaseModel):
    """Base for objects that validate straight from camelCase manifests."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ObjectMeta(KubeModel):
    name: str
    namespace: str = ""
    resource_version: str = ""
    labels: Dict[str, str] = Field(default_factory=dict)
    annotations: Dict[str, str] = Field(default_factory=dict)


class ResourceRequirements(KubeModel):
    requests: ResourceList = Field(default_factory=dict)
    limits: ResourceList = Field(default_factory=dict)


class Container(KubeModel):
    name: str = ""
    image: str | None = None
    resources: ResourceRequirements = Field(default_factory=ResourceRequirements)


class PodSpec(KubeModel):
    node_name: str = ""
    containers: List[Container] = Field(default_factory=list)
    init_containers: List[Container] = Field(default_factory=list)
    overhead: ResourceList = Field(default_factory=dict)
    restart_policy: str | None = None
    scheduler_name: str | None = None


class Pod(KubeModel):
    metadata: ObjectMeta
    spec: PodSpec = Field(default_factory=PodSpec)

    @property
    def key(self) -> str:
        return pod_key(self.metadata.namespace, self.metadata.name)

    @property
    def node_name(self) -> str:
        return self.spec.node_name


class NodeStatus(KubeModel):
    capacity: ResourceList = Field(default_factory=dict)
    allocatable: ResourceList = Field(default_factory=dict)


class Node(KubeModel):
    metadata: ObjectMeta
    status: NodeStatus = Field(default_factory=NodeStatus)

    @property
    def name(self) -> str:
        return self.metadata.name


def pod_key(namespace: str, name: str) -> str:
    return f"{namespace}/{name}"
