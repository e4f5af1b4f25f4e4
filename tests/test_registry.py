import pytest

from k3dctl.ports import PortSpecError
from k3dctl.registry import (
    DEFAULT_REGISTRY_IMAGE,
    DEFAULT_REGISTRY_PORT,
    DEFAULT_RUNTIME_NETWORK,
    parse_registry_create,
    registry_help_text,
)


def test_parse_with_explicit_port():
    spec = parse_registry_create("myreg", "0.0.0.0:5111")
    assert spec.host == "k3d-myreg"
    assert spec.exposure.host_ip == "0.0.0.0"
    assert spec.exposure.host_port == "5111"
    assert spec.exposure.port == f"{DEFAULT_REGISTRY_PORT}/tcp"
    assert spec.reg_string == "k3d-myreg:5111"


def test_defaults():
    spec = parse_registry_create("r")
    assert spec.image == DEFAULT_REGISTRY_IMAGE
    assert spec.network == DEFAULT_RUNTIME_NETWORK
    assert spec.clusters == []
    assert spec.exposure.host_port.isdigit()
    assert 0 < int(spec.exposure.host_port) < 65536


def test_no_name_gives_empty_host():
    spec = parse_registry_create("", "5111")
    assert spec.host == ""
    assert spec.reg_string == ":5111"


def test_clusters_and_overrides():
    spec = parse_registry_create("r", "5111", image="img:1", network="net", clusters=("a", "b"))
    assert spec.clusters == ["a", "b"]
    assert spec.image == "img:1"
    assert spec.network == "net"


def test_invalid_port():
    with pytest.raises(PortSpecError):
        parse_registry_create("r", "not a port")


def test_help_text_mentions_registry_four_times():
    text = registry_help_text("k3d-reg:5000")
    assert text.count("k3d-reg:5000") == 4
    assert "k3d cluster create --registry-use k3d-reg:5000" in text
    assert "docker push k3d-reg:5000/mynginx:v0.1" in text
    assert text.endswith("\n")