"""Printing node listings as aligned tables, JSON or YAML."""

from __future__ import annotations

import json
import sys
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from itertools import groupby
from typing import TextIO

import yaml

CLUSTER_LABEL = "k3d.cluster"


@dataclass
class NodeInfo:
    """What a listing shows about one node."""

    name: str
    role: str = ""
    runtime_labels: dict[str, str] = field(default_factory=dict)
    status: str = ""

    @property
    def cluster(self) -> str:
        return self.runtime_labels.get(CLUSTER_LABEL, "")

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "role": self.role,
            "runtimeLabels": dict(self.runtime_labels),
            "status": self.status,
        }


def render_table(rows: Iterable[Sequence[str]], min_width: int = 6, padding: int = 3) -> str:
    """Align tab-separated cells into columns.

    Every cell but the last of a row belongs to a column; a column's width is
    set by consecutive rows that have a cell in it, as elastic tabstops do.
    """
    table = [[str(cell) for cell in row] for row in rows]
    widths = [[0] * max(len(row) - 1, 0) for row in table]
    columns = max((len(row) - 1 for row in table), default=0)

    for column in range(columns):
        runs = groupby(enumerate(table), key=lambda item: len(item[1]) - 1 > column)
        for has_cell, run in runs:
            if not has_cell:
                continue
            members = [index for index, _ in run]
            width = max(len(table[index][column]) for index in members) + padding
            width = max(width, min_width)
            for index in members:
                widths[index][column] = width

    lines = []
    for row, row_widths in zip(table, widths):
        if not row:
            lines.append("")
            continue
        aligned = "".join(cell.ljust(width) for cell, width in zip(row[:-1], row_widths))
        lines.append(aligned + row[-1])
    return "".join(line + "\n" for line in lines)


def _default_row(node: NodeInfo) -> list[str]:
    return [node.name.removeprefix("/"), node.role, node.cluster, node.status]


def print_nodes(
    nodes: Iterable[NodeInfo],
    output_format: str = "",
    headers: Sequence[str] | None = None,
    row: Callable[[NodeInfo], Sequence[str]] | None = None,
    stream: TextIO | None = None,
) -> None:
    """Print nodes sorted by name as a table, or as JSON or YAML."""
    out = stream if stream is not None else sys.stdout
    fmt = output_format.lower()
    ordered = sorted(nodes, key=lambda node: node.name)

    if fmt == "json":
        out.write(json.dumps([node.to_dict() for node in ordered], separators=(",", ":")) + "\n")
        return
    if fmt == "yaml":
        out.write(yaml.safe_dump([node.to_dict() for node in ordered], sort_keys=False) + "\n")
        return

    make_row = row if row is not None else _default_row
    rows: list[Sequence[str]] = []
    if headers:
        rows.append(list(headers))
    rows.extend(make_row(node) for node in ordered)
    out.write(render_table(rows))