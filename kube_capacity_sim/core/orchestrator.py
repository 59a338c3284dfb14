from __future__ import annotations

import logging
from typing import Dict, List, Optional, Type

from kube_capacity_sim.core.config import SimulationConfig, StrategyConfig
from kube_capacity_sim.core.exceptions import SimulatorError
from kube_capacity_sim.core.snapshot import CapacitySnapshot
from kube_capacity_sim.models.results import AccountingResult, SimulationReport
from kube_capacity_sim.parsers.yaml_parser import ParseOutput, parse_files
from kube_capacity_sim.store.base import ObjectStore
from kube_capacity_sim.store.memory import InMemoryStore
from kube_capacity_sim.strategies.base import Strategy
from kube_capacity_sim.strategies.counting import CountingStrategy
from kube_capacity_sim.strategies.predictive import PredictiveStrategy


logger = logging.getLogger(__name__)

STRATEGIES: Dict[str, Type[Strategy]] = {
    PredictiveStrategy.name: PredictiveStrategy,
    CountingStrategy.name: CountingStrategy,
}


def new_strategy(
    name: str, store: ObjectStore, config: Optional[StrategyConfig] = None
) -> Strategy:
    try:
        cls = STRATEGIES[name]
    except KeyError as e:
        raise ValueError(
            f"Unknown strategy '{name}'. Use one of: {', '.join(sorted(STRATEGIES))}"
        ) from e
    return cls(store, config)


def simulate(paths: List[str], cfg: SimulationConfig) -> SimulationReport:
    """Load nodes and pods from manifests and replay every scheduled pod."""
    parsed: ParseOutput = parse_files(paths)

    store = InMemoryStore(nodes=parsed.nodes)
    strategy_cfg = cfg.strategy_config()
    strategy = new_strategy(cfg.strategy, store, strategy_cfg)

    operations: List[AccountingResult] = []
    pending: List[str] = []
    warnings = list(parsed.warnings)

    for pod in parsed.pods:
        if not pod.node_name:
            store.create_or_update_pod(pod)
            pending.append(pod.key)
            continue
        try:
            result = strategy.add(pod)
        except SimulatorError as exc:
            logger.info("pod %s not accounted: %s", pod.key, exc)
            warnings.append(f"Pod {pod.key}: {exc}")
            continue
        operations.append(result)
        if result.clamped:
            warnings.append(
                f"Pod {pod.key}: node {result.node} over-subscribed, clamped "
                + ", ".join(sorted(result.shortfall))
            )

    snapshot = CapacitySnapshot(store, strategy_cfg)
    return SimulationReport(
        strategy=cfg.strategy,
        nodes=snapshot.reports(),
        operations=operations,
        pending_pods=pending,
        assumptions=sorted({*parsed.assumptions}),
        warnings=warnings,
    )
