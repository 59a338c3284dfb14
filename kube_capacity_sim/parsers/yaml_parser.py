from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List

import yaml
from pydantic import ValidationError

from kube_capacity_sim.core.exceptions import ParseError
from kube_capacity_sim.models.resources import Node, Pod


DEFAULT_NAMESPACE = "default"


@dataclass(slots=True)
class ParseOutput:
    nodes: List[Node]
    pods: List[Pod]
    assumptions: List[str]
    warnings: List[str]


def _iter_objects(docs: Iterable) -> Iterable[Dict]:
    for doc in docs:
        if not doc or not isinstance(doc, dict):
            continue
        if doc.get("kind") == "List":
            yield from (item for item in doc.get("items") or [] if isinstance(item, dict))
            continue
        yield doc


def parse_files(paths: List[str]) -> ParseOutput:
    nodes: List[Node] = []
    pods: List[Pod] = []
    assumptions: List[str] = []
    warnings: List[str] = []

    for p in paths:
        path = Path(p)
        if not path.exists():
            raise ParseError(f"File not found: {path}")
        try:
            with path.open("r", encoding="utf-8") as f:
                docs = list(yaml.safe_load_all(f))
        except yaml.YAMLError as e:
            raise ParseError(f"YAML parse error in {path}: {e}") from e

        for doc in _iter_objects(docs):
            kind = doc.get("kind")
            name = (doc.get("metadata", {}) or {}).get("name", "unnamed")

            if kind == "Node":
                node = _validate(Node, doc, path)
                if not node.status.allocatable:
                    node.status.allocatable = dict(node.status.capacity)
                    assumptions.append(f"Node {name}: no allocatable given; assumed equal to capacity")
                nodes.append(node)
                continue

            if kind == "Pod":
                pod = _validate(Pod, doc, path)
                if not pod.metadata.namespace:
                    pod.metadata.namespace = DEFAULT_NAMESPACE
                for c in pod.spec.containers:
                    if not c.resources.requests and c.resources.limits:
                        # Kubernetes defaults requests to limits when only limits are set
                        c.resources.requests = dict(c.resources.limits)
                        assumptions.append(
                            f"Pod {name}: container '{c.name or 'unnamed'}' has limits only; requests defaulted to limits"
                        )
                pods.append(pod)
                continue

            warnings.append(f"{path}: skipping unsupported kind {kind!r} ({name})")

    return ParseOutput(nodes=nodes, pods=pods, assumptions=assumptions, warnings=warnings)


def _validate(model, doc: Dict, path: Path):
    try:
        return model.model_validate(doc)
    except ValidationError as e:
        name = (doc.get("metadata", {}) or {}).get("name", "unnamed")
        raise ParseError(f"Invalid {doc.get('kind')} {name} in {path}: {e}") from e
