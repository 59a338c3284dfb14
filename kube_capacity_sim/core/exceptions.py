from __future__ import annotations

from decimal import Decimal
from typing import Dict, Mapping


class SimulatorError(Exception):
    """Base exception for capacity simulator errors."""


class ParseError(SimulatorError):
    """Raised when parsing YAML manifests fails fatally."""


class NotFoundError(SimulatorError):
    """Raised when a referenced node or pod is absent from the store."""

    def __init__(self, kind: str, name: str) -> None:
        super().__init__(f"{kind} {name!r} not found")
        self.kind = kind
        self.name = name


class InvalidPodError(SimulatorError):
    """Raised when a pod cannot be accounted, e.g. it has no node assigned."""


class AlreadyBoundError(SimulatorError):
    """Raised when a pod already consumes capacity on some node."""

    def __init__(self, pod: str, node: str) -> None:
        super().__init__(f"pod {pod} is already bound to node {node}")
        self.pod = pod
        self.node = node


class NotBoundError(SimulatorError):
    """Raised when removing a pod that was never recorded as bound."""

    def __init__(self, pod: str, node: str = "") -> None:
        where = f" to node {node}" if node else ""
        super().__init__(f"pod {pod} is not bound{where}")
        self.pod = pod
        self.node = node


class InsufficientCapacityError(SimulatorError):
    """Raised when a request would drive allocatable below its floor."""

    def __init__(self, pod: str, node: str, shortfall: Mapping[str, Decimal]) -> None:
        missing = ", ".join(f"{k}={v}" for k, v in sorted(shortfall.items()))
        super().__init__(f"insufficient capacity on node {node} for pod {pod}: short by {missing}")
        self.pod = pod
        self.node = node
        self.shortfall: Dict[str, Decimal] = dict(shortfall)


class StoreWriteError(SimulatorError):
    """Raised by a store when a write fails."""


class ConflictError(StoreWriteError):
    """Raised by a store when a version-conditioned write loses a race."""

    def __init__(self, name: str, expected: str, actual: str) -> None:
        super().__init__(
            f"conflict writing {name!r}: resourceVersion {expected} is stale (current {actual})"
        )
        self.name = name
        self.expected = expected
        self.actual = actual


class ConcurrentModificationError(SimulatorError):
    """Raised when conflict retries on a node are exhausted."""

    def __init__(self, node: str, attempts: int) -> None:
        super().__init__(f"node {node} kept changing underneath us; gave up after {attempts} attempts")
        self.node = node
        self.attempts = attempts


class UpdateError(SimulatorError):
    """Raised when one half of an update fails.

    ``phase`` is ``"delete"`` when nothing changed, or ``"add"`` when the old
    pod has already been released and the new one could not be bound.
    """

    def __init__(self, phase: str, pod: str, cause: BaseException) -> None:
        super().__init__(f"update of pod {pod} failed during {phase}: {cause}")
        self.phase = phase
        self.pod = pod
