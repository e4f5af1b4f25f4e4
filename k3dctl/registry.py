"""Preparing the creation of a k3d-managed container registry."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from k3dctl.ports import ExposureOpts, parse_port_exposure_spec

DEFAULT_OBJECT_NAME_PREFIX = "k3d"
DEFAULT_REGISTRY_PORT = "5000"
DEFAULT_REGISTRY_IMAGE_REPO = "docker.io/library/registry"
DEFAULT_REGISTRY_IMAGE_TAG = "2"
DEFAULT_REGISTRY_IMAGE = f"{DEFAULT_REGISTRY_IMAGE_REPO}:{DEFAULT_REGISTRY_IMAGE_TAG}"
DEFAULT_RUNTIME_NETWORK = "bridge"

_HELP_TEXT = """# You can now use the registry like this (example):
# 1. create a new cluster that uses this registry
k3d cluster create --registry-use {reg}

# 2. tag an existing local image to be pushed to the registry
docker tag nginx:latest {reg}/mynginx:v0.1

# 3. push that image to the registry
docker push {reg}/mynginx:v0.1

# 4. run a pod that uses this image
kubectl run mynginx --image {reg}/mynginx:v0.1
"""


@dataclass
class RegistrySpec:
    """A registry to be created and the clusters it should join."""

    host: str
    image: str
    exposure: ExposureOpts
    network: str
    clusters: list[str] = field(default_factory=list)

    @property
    def reg_string(self) -> str:
        """``host:hostport`` under which the registry is reachable."""
        return f"{self.host}:{self.exposure.host_port}"


def parse_registry_create(
    name: str = "",
    port: str = "random",
    image: str = DEFAULT_REGISTRY_IMAGE,
    network: str = DEFAULT_RUNTIME_NETWORK,
    clusters: Iterable[str] | None = None,
) -> RegistrySpec:
    """Build a registry specification from command line input."""
    exposure = parse_port_exposure_spec(port, DEFAULT_REGISTRY_PORT)
    host = f"{DEFAULT_OBJECT_NAME_PREFIX}-{name}" if name else ""
    return RegistrySpec(
        host=host,
        image=image,
        exposure=exposure,
        network=network,
        clusters=list(clusters or []),
    )


def registry_help_text(reg_string: str) -> str:
    """Explain how to use a freshly created registry."""
    return _HELP_TEXT.format(reg=reg_string)