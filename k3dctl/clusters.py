"""Printing cluster listings as aligned tables, JSON or YAML."""

from __future__ import annotations

import json
import sys
from collections.abc import Iterable
from dataclasses import dataclass
from typing import TextIO

import yaml

from k3dctl.listings import render_table


@dataclass
class ClusterSummary:
    """What a listing shows about one cluster."""

    name: str
    servers_count: int = 0
    servers_running: int = 0
    agents_count: int = 0
    agents_running: int = 0
    has_loadbalancer: bool = False
    token: str = ""

    def to_json(self, include_token: bool) -> dict:
        entry: dict = {
            "name": self.name,
            "token": self.token if include_token else "",
            "serversRunning": self.servers_running,
            "serversCount": self.servers_count,
            "agentsRunning": self.agents_running,
            "agentsCount": self.agents_count,
        }
        if self.has_loadbalancer:
            entry["hasLoadbalancer"] = True
        return entry

    def to_yaml(self, include_token: bool) -> dict:
        entry: dict = {
            "name": self.name,
            "token": self.token if include_token else "",
            "servers_running": self.servers_running,
            "servers_count": self.servers_count,
            "agents_running": self.agents_running,
            "agents_count": self.agents_count,
        }
        if self.has_loadbalancer:
            entry["has_lb"] = True
        return entry


def print_clusters(
    clusters: Iterable[ClusterSummary],
    output: str = "",
    no_header: bool = False,
    token: bool = False,
    stream: TextIO | None = None,
) -> None:
    """Print clusters sorted by name as a table, or as JSON or YAML."""
    out = stream if stream is not None else sys.stdout
    fmt = output.lower()
    ordered = sorted(clusters, key=lambda cluster: cluster.name)

    if fmt == "json":
        entries = [cluster.to_json(token) for cluster in ordered]
        out.write(json.dumps(entries, separators=(",", ":")) + "\n")
        return
    if fmt == "yaml":
        entries = [cluster.to_yaml(token) for cluster in ordered]
        out.write(yaml.safe_dump(entries, sort_keys=False) + "\n")
        return

    rows: list[list[str]] = []
    if not no_header:
        headers = ["NAME", "SERVERS", "AGENTS", "LOADBALANCER"]
        if token:
            headers.append("TOKEN")
        rows.append(headers)
    for cluster in ordered:
        row = [
            cluster.name,
            f"{cluster.servers_running}/{cluster.servers_count}",
            f"{cluster.agents_running}/{cluster.agents_count}",
            "true" if cluster.has_loadbalancer else "false",
        ]
        if token:
            row.append(cluster.token)
        rows.append(row)
    out.write(render_table(rows))