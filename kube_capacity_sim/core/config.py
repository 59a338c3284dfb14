from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum


class OvercommitPolicy(str, Enum):
    CLAMP = "clamp"  # clamp to the floor, warn and report the shortfall
    FAIL = "fail"  # refuse the pod, nothing is written


class DeletePolicy(str, Enum):
    UNBIND = "unbind"  # clear spec.nodeName, keep the pod object
    REMOVE = "remove"  # delete the pod object from the store


DEFAULT_STRATEGY = "predictive"
DEFAULT_MAX_CONFLICT_RETRIES = 3


@dataclass(slots=True)
class StrategyConfig:
    overcommit: OvercommitPolicy = OvercommitPolicy.CLAMP
    delete_policy: DeletePolicy = DeletePolicy.UNBIND
    # extra read-modify-write attempts after the first version conflict
    max_conflict_retries: int = DEFAULT_MAX_CONFLICT_RETRIES
    floor: Decimal = Decimal(0)
    count_pod_slots: bool = False

    def __post_init__(self) -> None:
        if self.max_conflict_retries < 0:
            raise ValueError("max_conflict_retries must be >= 0")
        self.overcommit = OvercommitPolicy(self.overcommit)
        self.delete_policy = DeletePolicy(self.delete_policy)
        self.floor = Decimal(self.floor)


@dataclass(slots=True)
class SimulationConfig:
    strategy: str = DEFAULT_STRATEGY
    overcommit: OvercommitPolicy = OvercommitPolicy.CLAMP
    delete_policy: DeletePolicy = DeletePolicy.UNBIND
    max_conflict_retries: int = DEFAULT_MAX_CONFLICT_RETRIES
    count_pod_slots: bool = False

    def strategy_config(self) -> StrategyConfig:
        return StrategyConfig(
            overcommit=self.overcommit,
            delete_policy=self.delete_policy,
            max_conflict_retries=self.max_conflict_retries,
            count_pod_slots=self.count_pod_slots,
        )
