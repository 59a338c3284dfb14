from __future__ import annotations

from decimal import Decimal
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from kube_capacity_sim.models.resources import RESOURCE_PODS, Container, Pod


ZERO = Decimal(0)

Vector = Dict[str, Decimal]


def merge_keys(*vectors: Mapping[str, Decimal]) -> List[str]:
    keys: set[str] = set()
    for v in vectors:
        keys.update(v.keys())
    return sorted(keys)


def sum_vectors(vectors: Iterable[Mapping[str, Decimal]]) -> Vector:
    total: Vector = {}
    for v in vectors:
        for name, qty in v.items():
            total[name] = total.get(name, ZERO) + qty
    return total


def max_vectors(a: Mapping[str, Decimal], b: Mapping[str, Decimal]) -> Vector:
    return {k: max(a.get(k, ZERO), b.get(k, ZERO)) for k in merge_keys(a, b)}


def sum_requests(containers: Iterable[Container]) -> Vector:
    return sum_vectors(c.resources.requests for c in containers)


def pod_requests(pod: Pod, *, count_pod_slot: bool = False) -> Vector:
    """Aggregate resource request of a pod.

    Regular containers run together, so their requests add up. Init containers
    run one at a time before them, so each only has to fit on its own: the
    effective request per resource is the larger of the two. Pod overhead is
    charged on top.
    """
    total = sum_requests(pod.spec.containers)
    for init in pod.spec.init_containers:
        total = max_vectors(total, init.resources.requests)
    if pod.spec.overhead:
        total = sum_vectors([total, pod.spec.overhead])
    if count_pod_slot:
        total[RESOURCE_PODS] = total.get(RESOURCE_PODS, ZERO) + 1
    return total


def subtract(
    base: Mapping[str, Decimal],
    delta: Mapping[str, Decimal],
    *,
    floor: Decimal = ZERO,
) -> Tuple[Vector, Vector]:
    """Subtract per key over the union of keys, clamping at ``floor``.

    Returns the clamped result and the shortfall: for every key that would
    have gone below the floor, how far below it went. An empty shortfall means
    the delta fit.
    """
    result: Vector = {}
    shortfall: Vector = {}
    for name in merge_keys(base, delta):
        value = base.get(name, ZERO) - delta.get(name, ZERO)
        if value < floor:
            shortfall[name] = floor - value
            value = floor
        result[name] = value
    return result, shortfall


def add(
    base: Mapping[str, Decimal],
    delta: Mapping[str, Decimal],
    *,
    cap: Optional[Mapping[str, Decimal]] = None,
) -> Vector:
    """Add per key over the union of keys, limiting each key to ``cap``.

    Keys missing from ``cap`` are capped at zero, same as any other absent key.
    """
    result: Vector = {}
    for name in merge_keys(base, delta):
        value = base.get(name, ZERO) + delta.get(name, ZERO)
        if cap is not None:
            value = min(value, cap.get(name, ZERO))
        result[name] = value
    return result


def fits(request: Mapping[str, Decimal], available: Mapping[str, Decimal]) -> bool:
    return all(qty <= available.get(name, ZERO) for name, qty in request.items())


def vectors_equal(a: Mapping[str, Decimal], b: Mapping[str, Decimal]) -> bool:
    return all(a.get(k, ZERO) == b.get(k, ZERO) for k in merge_keys(a, b))


def zero_vector(keys: Iterable[str]) -> Vector:
    return {k: ZERO for k in keys}
