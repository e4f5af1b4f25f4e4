"""Parsing of port mappings and port exposure specifications."""

from __future__ import annotations

import ipaddress
import logging
import re
import socket
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEFAULT_API_HOST = "0.0.0.0"

_VALID_PROTOCOLS = frozenset({"tcp", "udp", "sctp"})
_NUMBER_RE = re.compile(r"[0-9]+")
_API_PORT_RE = re.compile(
    r"^(?P<hostref>(?P<hostip>\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3})|(?P<hostname>\S+):)?"
    r"(?P<port>(\d{1,5}|random))$",
    re.ASCII,
)


class PortSpecError(ValueError):
    """Raised when a port specification cannot be parsed."""


@dataclass
class ExposureOpts:
    """A container port with its host binding and an optional host name."""

    port: str
    host_ip: str = ""
    host_port: str = ""
    host: str = ""


def _parse_port_number(text: str) -> int:
    if not _NUMBER_RE.fullmatch(text):
        raise PortSpecError(f"invalid port number '{text}'")
    value = int(text)
    if value > 0xFFFF:
        raise PortSpecError(f"port number '{text}' out of range")
    return value


def _parse_port_range(ports: str) -> tuple[int, int]:
    if not ports:
        raise PortSpecError("empty string specified for ports")
    if "-" not in ports:
        port = _parse_port_number(ports)
        return port, port
    start_text, _, end_text = ports.partition("-")
    start = _parse_port_number(start_text)
    end = _parse_port_number(end_text)
    if end < start:
        raise PortSpecError(f"invalid range specified for port: {ports}")
    return start, end


def _split_proto_port(raw: str) -> tuple[str, str]:
    parts = raw.split("/")
    if not raw or not parts[0]:
        return "", ""
    if len(parts) == 1:
        return "tcp", raw
    if not parts[1]:
        return "tcp", parts[0]
    return parts[1], parts[0]


def _split_parts(raw: str) -> tuple[str, str, str]:
    parts = raw.split(":")
    container = parts[-1]
    if len(parts) == 1:
        return "", "", container
    if len(parts) == 2:
        return "", parts[0], container
    return ":".join(parts[:-2]), parts[-2], container


def _normalize_ip(raw_ip: str) -> str:
    if raw_ip.startswith("[") and raw_ip.endswith("]"):
        ip = raw_ip[1:-1]
    elif ":" in raw_ip:
        raise PortSpecError(f"Invalid ip address {raw_ip}: too many colons")
    else:
        ip = raw_ip
    if ip:
        try:
            ipaddress.ip_address(ip)
        except ValueError as err:
            raise PortSpecError(f"Invalid ip address: {ip}") from err
    return ip


def parse_port_spec(spec: str) -> list[ExposureOpts]:
    """Parse ``[IP:][HOSTPORT:]CONTAINERPORT[/PROTO]`` into port mappings."""
    raw_ip, host_port, container = _split_parts(spec)
    proto, container = _split_proto_port(container)
    ip = _normalize_ip(raw_ip)

    if not container:
        raise PortSpecError(f"No port specified: {spec}<empty>")

    start, end = _parse_port_range(container)
    host_start = host_end = 0
    if host_port:
        host_start, host_end = _parse_port_range(host_port)
        if end - start != host_end - host_start and end != start:
            raise PortSpecError(
                f"Invalid ranges specified for container and host Ports: {container} and {host_port}"
            )

    proto = proto.lower()
    if proto not in _VALID_PROTOCOLS:
        raise PortSpecError(f"Invalid proto: {proto}")

    mappings = []
    for offset in range(end - start + 1):
        binding_port = str(host_start + offset) if host_port else ""
        if start == end and host_start != host_end:
            binding_port = f"{binding_port}-{host_end}"
        mappings.append(
            ExposureOpts(port=f"{start + offset}/{proto}", host_ip=ip, host_port=binding_port)
        )
    return mappings


def get_free_port() -> int:
    """Ask the operating system for a free TCP port."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("localhost", 0))
        return sock.getsockname()[1]


def parse_port_exposure_spec(exposed_port_spec: str, internal_port: str) -> ExposureOpts:
    """Parse ``[(HostIP|HostName):]HostPort`` into exposure options.

    A host port of ``random`` is replaced by a free port, falling back to
    ``internal_port`` when none can be found.
    """
    match = _API_PORT_RE.match(exposed_port_spec)
    if match is None:
        raise PortSpecError(
            f"Failed to parse Port Exposure specification '{exposed_port_spec}': "
            "Format must be [(HostIP|HostName):]HostPort"
        )

    host_ip = match.group("hostip") or ""
    hostname = match.group("hostname") or ""
    port = match.group("port") or ""
    if not port:
        raise PortSpecError(f"Failed to find port in Port Exposure spec '{exposed_port_spec}'")

    host = ""
    if hostname:
        logger.debug("Port Exposure: found hostname: %s", hostname)
        try:
            infos = socket.getaddrinfo(hostname, None)
        except OSError as err:
            raise PortSpecError(
                f"Failed to lookup host '{hostname}' specified for Port Exposure: {err}"
            ) from err
        host = hostname
        for address in (info[4][0] for info in infos):
            if ":" not in address:
                host_ip = address
        if not host_ip:
            raise PortSpecError(f"Failed to lookup IPv4 address for host '{hostname}'")

    if not host_ip:
        host_ip = DEFAULT_API_HOST

    if port == "random":
        logger.debug("Port Exposure Mapping didn't specify hostPort, choosing one randomly...")
        try:
            free_port = get_free_port()
        except OSError as err:
            logger.warning("Failed to get random free port: %s", err)
            free_port = 0
        if free_port:
            port = str(free_port)
            logger.debug("Got free port for Port Exposure: '%d'", free_port)
        else:
            logger.warning(
                "Falling back to internal port %s (may be blocked though)...", internal_port
            )
            port = internal_port

    real_spec = f"{host_ip}:{port}:{internal_port}/tcp"
    try:
        mapping = parse_port_spec(real_spec)[0]
    except PortSpecError as err:
        raise PortSpecError(
            f"failed to parse port spec for Port Exposure '{real_spec}': {err}"
        ) from err

    return ExposureOpts(
        port=mapping.port,
        host_ip=mapping.host_ip,
        host_port=mapping.host_port,
        host=host,
    )