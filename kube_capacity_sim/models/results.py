from __future__ import annotations

from decimal import Decimal
from typing import Dict, List

from pydantic import BaseModel


class AccountingResult(BaseModel):
    operation: str  # add | delete
    strategy: str
    pod: str
    node: str
    request: Dict[str, Decimal]
    allocatable: Dict[str, Decimal]
    node_resource_version: str
    # per resource, how far below the floor the node would have gone
    shortfall: Dict[str, Decimal] = {}

    @property
    def clamped(self) -> bool:
        return bool(self.shortfall)


class NodeCapacityReport(BaseModel):
    name: str
    capacity: Dict[str, Decimal]
    allocatable: Dict[str, Decimal]
    requested: Dict[str, Decimal]
    bound_pods: List[str]

    @property
    def resource_names(self) -> List[str]:
        return sorted({*self.capacity, *self.allocatable, *self.requested})


class SimulationReport(BaseModel):
    strategy: str
    nodes: List[NodeCapacityReport]
    operations: List[AccountingResult]
    pending_pods: List[str]
    assumptions: List[str]
    warnings: List[str]
