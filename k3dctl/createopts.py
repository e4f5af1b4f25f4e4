"""Defaults and command line options for creating a cluster, plus usage hints."""

from __future__ import annotations

import copy
import sys
from collections.abc import Mapping
from dataclasses import dataclass, fields
from typing import Any

DEFAULT_CONFIG_API_VERSION = "k3d.io/v1alpha3"
DEFAULT_CONFIG_KIND = "Simple"
DEFAULT_K3S_IMAGE_REPO = "docker.io/rancher/k3s"
DEFAULT_OBJECT_NAME_PREFIX = "k3d"

_OPTION_PATHS: dict[str, tuple[str, ...]] = {
    "servers": ("servers",),
    "agents": ("agents",),
    "image": ("image",),
    "network": ("network",),
    "subnet": ("subnet",),
    "token": ("token",),
    "wait": ("options", "k3d", "wait"),
    "timeout": ("options", "k3d", "timeout"),
    "kubeconfig_update_default": ("options", "kubeconfig", "updateDefaultKubeconfig"),
    "kubeconfig_switch_context": ("options", "kubeconfig", "switchCurrentContext"),
    "no_lb": ("options", "k3d", "disableLoadbalancer"),
    "no_rollback": ("options", "k3d", "disableRollback"),
    "gpus": ("options", "runtime", "gpuRequest"),
    "servers_memory": ("options", "runtime", "serversMemory"),
    "agents_memory": ("options", "runtime", "agentsMemory"),
    "no_image_volume": ("options", "k3d", "disableImageVolume"),
    "registry_use": ("registries", "use"),
    "registry_config": ("registries", "config"),
    "lb_config_overrides": ("options", "k3d", "loadbalancer", "configOverrides"),
}


def default_simple_config(k3s_version: str) -> dict:
    """Return the simple configuration used when nothing else is given."""
    return {
        "apiVersion": DEFAULT_CONFIG_API_VERSION,
        "kind": DEFAULT_CONFIG_KIND,
        "servers": 1,
        "agents": 0,
        "image": f"{DEFAULT_K3S_IMAGE_REPO}:{k3s_version}",
        "network": "",
        "subnet": "",
        "token": "",
        "options": {
            "k3d": {
                "wait": True,
                "timeout": "0s",
                "disableLoadbalancer": False,
                "disableImageVolume": False,
                "disableRollback": False,
                "loadbalancer": {"configOverrides": []},
            },
            "kubeconfig": {
                "updateDefaultKubeconfig": True,
                "switchCurrentContext": True,
            },
            "runtime": {
                "gpuRequest": "",
                "serversMemory": "",
                "agentsMemory": "",
            },
        },
        "registries": {"use": [], "config": ""},
    }


def _merge(base: dict, overlay: Mapping[str, Any]) -> dict:
    for key, value in overlay.items():
        if isinstance(value, Mapping) and isinstance(base.get(key), dict):
            _merge(base[key], value)
        else:
            base[key] = copy.deepcopy(value)
    return base


def _is_blank(value: Any) -> bool:
    return value is None or value == ""


@dataclass
class CreateOptions:
    """Plain flags of cluster creation; ``None`` means the flag was not given."""

    servers: int | None = None
    agents: int | None = None
    image: str | None = None
    network: str | None = None
    subnet: str | None = None
    token: str | None = None
    wait: bool | None = None
    timeout: str | None = None
    kubeconfig_update_default: bool | None = None
    kubeconfig_switch_context: bool | None = None
    no_lb: bool | None = None
    no_rollback: bool | None = None
    gpus: str | None = None
    servers_memory: str | None = None
    agents_memory: str | None = None
    no_image_volume: bool | None = None
    registry_use: list[str] | None = None
    registry_config: str | None = None
    lb_config_overrides: list[str] | None = None

    def apply(self, cfg: Mapping[str, Any] | None, k3s_version: str) -> dict:
        """Merge defaults, then ``cfg``, then the given flags into a new config."""
        result = default_simple_config(k3s_version)
        if cfg:
            _merge(result, cfg)
        if _is_blank(result.get("apiVersion")):
            result["apiVersion"] = DEFAULT_CONFIG_API_VERSION
        if _is_blank(result.get("kind")):
            result["kind"] = DEFAULT_CONFIG_KIND

        for item in fields(self):
            value = getattr(self, item.name)
            if value is None:
                continue
            *parents, leaf = _OPTION_PATHS[item.name]
            target = result
            for key in parents:
                nested = target.get(key)
                if not isinstance(nested, dict):
                    nested = {}
                    target[key] = nested
                target = nested
            target[leaf] = copy.deepcopy(value)
        return result


def kubeconfig_hint(
    cluster_name: str,
    update_default: bool = True,
    switch_context: bool = True,
    program: str | None = None,
    windows: bool | None = None,
) -> str:
    """Return the lines telling the user how to reach a new cluster with kubectl."""
    prog = sys.argv[0] if program is None else program
    on_windows = sys.platform == "win32" if windows is None else windows
    # switching the context requires updating the default kubeconfig
    switch = switch_context and update_default

    lines = []
    if update_default and not switch:
        lines.append(f"kubectl config use-context {DEFAULT_OBJECT_NAME_PREFIX}-{cluster_name}")
    elif not switch:
        if on_windows:
            lines.append(f"$env:KUBECONFIG=({prog} kubeconfig write {cluster_name})")
        else:
            lines.append(f"export KUBECONFIG=$({prog} kubeconfig write {cluster_name})")
    lines.append("kubectl cluster-info")
    return "".join(line + "\n" for line in lines)