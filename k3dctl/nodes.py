"""Building specifications for new k3s nodes from command line input."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass, field

from k3dctl.labels import validate_runtime_label_key

logger = logging.getLogger(__name__)

DEFAULT_OBJECT_NAME_PREFIX = "k3d"
LABEL_ROLE = "k3d.role"
NODE_ROLES = frozenset({"server", "agent", "noRole", "loadbalancer", "registry"})

_SIZE_RE = re.compile(r"^(\d+(\.\d+)*) ?([kKmMgGtTpP])?[iI]?[bB]?$", re.ASCII)
_BINARY_UNITS = {
    "k": 1024,
    "m": 1024**2,
    "g": 1024**3,
    "t": 1024**4,
    "p": 1024**5,
}


class NodeSpecError(ValueError):
    """Raised when node creation input is invalid."""


@dataclass
class NodeSpec:
    """Everything needed to create one node container."""

    name: str
    role: str
    image: str
    k3s_node_labels: dict[str, str] = field(default_factory=dict)
    runtime_labels: dict[str, str] = field(default_factory=dict)
    restart: bool = True
    memory: str = ""
    networks: list[str] = field(default_factory=list)


def parse_memory(memory: str) -> int:
    """Convert a human readable memory size such as ``512m`` or ``1g`` into bytes."""
    match = _SIZE_RE.match(memory)
    if match is None:
        raise NodeSpecError(f"invalid size: '{memory}'")
    try:
        size = float(match.group(1))
    except ValueError as err:
        raise NodeSpecError(f"invalid size: '{memory}'") from err
    unit = match.group(3)
    if unit:
        size *= _BINARY_UNITS[unit.lower()]
    return int(size)


def parse_label_pairs(labels: Iterable[str], kind: str = "label") -> dict[str, str]:
    """Turn ``foo=bar`` strings into a mapping; each needs exactly one ``=``."""
    result: dict[str, str] = {}
    for label in labels:
        parts = label.split("=")
        if len(parts) != 2:
            raise NodeSpecError(
                f'unknown {kind} format format: {label}, use format "foo=bar"'
            )
        key, value = parts
        result[key] = value
    return result


def build_node_specs(
    name: str,
    replicas: int,
    role: str,
    image: str,
    memory: str = "",
    runtime_labels: Iterable[str] = (),
    k3s_node_labels: Iterable[str] = (),
    networks: Iterable[str] = (),
) -> list[NodeSpec]:
    """Create ``replicas`` node specifications named ``k3d-<name>-<index>``."""
    if role not in NODE_ROLES:
        raise NodeSpecError(f"Unknown node role '{role}'")

    if memory:
        try:
            parse_memory(memory)
        except NodeSpecError:
            logger.error("Provided memory limit value is invalid")

    runtime = parse_label_pairs(runtime_labels, "runtime-label")
    for key in runtime:
        validate_runtime_label_key(key)
    # internal labels take precedence over user-defined ones
    runtime[LABEL_ROLE] = role

    k3s = parse_label_pairs(k3s_node_labels, "k3s-node-label")
    network_list = list(networks)

    return [
        NodeSpec(
            name=f"{DEFAULT_OBJECT_NAME_PREFIX}-{name}-{index}",
            role=role,
            image=image,
            k3s_node_labels=dict(k3s),
            runtime_labels=dict(runtime),
            restart=True,
            memory=memory,
            networks=list(network_list),
        )
        for index in range(max(replicas, 0))
    ]