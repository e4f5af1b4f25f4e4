"""Applying command line overrides on top of a simple cluster configuration."""

from __future__ import annotations

import copy
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from k3dctl.filters import split_filters_from_flag
from k3dctl.labels import validate_runtime_label_key
from k3dctl.ports import PortSpecError, get_free_port, parse_port_exposure_spec

logger = logging.getLogger(__name__)

DEFAULT_API_PORT = "6443"
DEFAULT_REGISTRIES_FILE_PATH = "/etc/rancher/k3s/registries.yaml"
_UNUSED_INTERNAL_PORT = "1234"


class OverrideError(ValueError):
    """Raised when command line overrides cannot be applied."""


@dataclass
class CLIOverrides:
    """Flags given on the command line that need pre-processing."""

    api_port: str | None = None
    env: list[str] = field(default_factory=list)
    volumes: list[str] = field(default_factory=list)
    ports: list[str] = field(default_factory=list)
    k3s_node_labels: list[str] = field(default_factory=list)
    runtime_labels: list[str] = field(default_factory=list)
    k3s_args: list[str] = field(default_factory=list)
    registry_create: str | None = None


def group_filters(flags: Iterable[str], unique: bool = False) -> dict[str, list[str]]:
    """Map each flag value to the node filters given for it, in first-seen order.

    With ``unique`` set, a value given more than once is an error; otherwise
    the filters of repeated values are concatenated.
    """
    grouped: dict[str, list[str]] = {}
    for flag in flags:
        value, filters = split_filters_from_flag(flag)
        if value in grouped:
            if unique:
                raise OverrideError("Same Portmapping can not be used for multiple nodes")
            grouped[value].extend(filters)
        else:
            grouped[value] = list(filters)
    return grouped


def _entries(grouped: dict[str, list[str]], key: str) -> list[dict]:
    return [{key: value, "nodeFilters": filters} for value, filters in grouped.items()]


def _uses_registries(cfg: dict) -> bool:
    registries = cfg.get("registries") or {}
    return bool(
        registries.get("create") is not None
        or registries.get("config")
        or registries.get("use")
    )


def apply_cli_overrides(
    cfg: dict,
    overrides: CLIOverrides,
    free_port: Callable[[], int] | None = None,
) -> dict:
    """Return a copy of ``cfg`` with the command line overrides merged in.

    ``free_port`` supplies a random host port for the API when none is set;
    when it fails or yields 0 the default API port is used instead.
    """
    result = copy.deepcopy(cfg)
    pick_port = free_port if free_port is not None else get_free_port

    api = result.get("kubeAPI") or {}
    host = api.get("host", "") or ""
    host_ip = api.get("hostIP", "") or ""
    host_port = str(api.get("hostPort", "") or "")

    if overrides.api_port is not None:
        if host_port:
            logger.debug(
                "Overriding pre-defined kubeAPI Exposure Spec %s with CLI argument %s",
                api,
                overrides.api_port,
            )
        try:
            exposure = parse_port_exposure_spec(overrides.api_port, DEFAULT_API_PORT)
        except PortSpecError as err:
            raise OverrideError(f"failed to parse API Port spec: {err}") from err
        host, host_ip, host_port = exposure.host, exposure.host_ip, exposure.host_port

    if not host_port:
        try:
            port = pick_port()
        except OSError as err:
            logger.warning("Failed to get random free port: %s", err)
            port = 0
        if port:
            host_port = str(port)
        else:
            logger.warning(
                "Falling back to internal port %s (may be blocked though)...", DEFAULT_API_PORT
            )
            host_port = DEFAULT_API_PORT

    result["kubeAPI"] = {"host": host, "hostIP": host_ip, "hostPort": host_port}

    volumes = group_filters(overrides.volumes)
    if _uses_registries(result):
        for volume in volumes:
            if DEFAULT_REGISTRIES_FILE_PATH in volume:
                logger.warning(
                    "Seems like you're mounting a file at '%s' while also using a referenced "
                    "registries config or k3d-managed registries: Your mounted file will "
                    "probably be overwritten!",
                    DEFAULT_REGISTRIES_FILE_PATH,
                )
    result["volumes"] = list(result.get("volumes") or []) + _entries(volumes, "volume")

    ports = group_filters(overrides.ports, unique=True)
    result["ports"] = list(result.get("ports") or []) + _entries(ports, "port")

    options = result.setdefault("options", {}) or {}
    result["options"] = options
    k3s = options.setdefault("k3s", {}) or {}
    options["k3s"] = k3s
    runtime = options.setdefault("runtime", {}) or {}
    options["runtime"] = runtime

    node_labels = group_filters(overrides.k3s_node_labels)
    k3s["nodeLabels"] = list(k3s.get("nodeLabels") or []) + _entries(node_labels, "label")

    runtime_labels = group_filters(overrides.runtime_labels)
    for label in runtime_labels:
        validate_runtime_label_key(label.split("=")[0])
    runtime["labels"] = list(runtime.get("labels") or []) + _entries(runtime_labels, "label")

    env = group_filters(overrides.env)
    result["env"] = list(result.get("env") or []) + _entries(env, "envVar")

    args = group_filters(overrides.k3s_args)
    k3s["extraArgs"] = list(k3s.get("extraArgs") or []) + _entries(args, "arg")

    if overrides.registry_create is not None:
        name, sep, spec = overrides.registry_create.partition(":")
        registries = result.setdefault("registries", {}) or {}
        result["registries"] = registries
        create = registries.get("create")
        if create is None:
            create = {}
            registries["create"] = create
        create["name"] = name
        if sep:
            try:
                exposure = parse_port_exposure_spec(spec, _UNUSED_INTERNAL_PORT)
            except PortSpecError as err:
                raise OverrideError(f"failed to registry port spec: {err}") from err
            create["host"] = exposure.host
            create["hostPort"] = exposure.host_port

    return result