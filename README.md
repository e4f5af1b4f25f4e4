# k3dctl

A library of helpers for preparing k3s clusters that run inside containers:
parsing node filters and port exposure specs, building node and registry
specifications, merging command-line style overrides into a simple cluster
configuration, reading YAML config files with environment variable expansion,
and printing node and cluster listings.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Node filters and key/value pairs

Node filters follow an `@` in a flag value; several filters are separated by
`;`, and a literal `@` is escaped with a backslash. Malformed values raise
`k3dctl.filters.FilterError`.

```python
from k3dctl.filters import split_filters_from_flag, split_kv

split_filters_from_flag("/tmp/test:/tmp/other@server:0;agent:1")
# ('/tmp/test:/tmp/other', ['server:0', 'agent:1'])

split_kv("HTTP_PROXY=my.proxy")
# ('HTTP_PROXY', 'my.proxy')
```

`k3dctl.labels.validate_runtime_label_key` raises `ReservedLabelError` for
keys starting with `k3s.` or `k3d.` and for the key `app`.

## Ports

`k3dctl.ports.parse_port_spec` parses `[IP:][HOSTPORT:]CONTAINERPORT[/PROTO]`
(port ranges included) into a list of `ExposureOpts`.
`parse_port_exposure_spec` parses `[(HostIP|HostName):]HostPort`, where the
host port may be `random`; a host name is resolved to its IPv4 address and a
missing host IP becomes `0.0.0.0`. Errors raise `PortSpecError`.

```python
from k3dctl.ports import parse_port_exposure_spec

opts = parse_port_exposure_spec("0.0.0.0:6550", "6443")
# ExposureOpts(port='6443/tcp', host_ip='0.0.0.0', host_port='6550', host='')
```

`get_free_port()` asks the operating system for a free TCP port.

## Nodes and registries

```python
from k3dctl.nodes import build_node_specs, parse_memory

specs = build_node_specs("worker", 2, "agent", "docker.io/rancher/k3s:v1.22.3-k3s1",
                         runtime_labels=["team=dev"])
[spec.name for spec in specs]
# ['k3d-worker-0', 'k3d-worker-1']

parse_memory("512m")
# 536870912
```

Every spec carries the runtime label `k3d.role` set to its role. Unknown
roles, reserved runtime label keys and labels without exactly one `=` raise
errors (`NodeSpecError`, `ReservedLabelError`).

`k3dctl.registry.parse_registry_create` builds a `RegistrySpec` (host
`k3d-<name>`, default image `docker.io/library/registry:2`, default network
`bridge`), and `registry_help_text` returns usage instructions for it.

## Cluster configuration

- `k3dctl.createopts.default_simple_config(k3s_version)` returns the default
  simple configuration; `CreateOptions(...).apply(cfg, k3s_version)` layers a
  loaded config and any given flags on top of it.
- `k3dctl.createopts.kubeconfig_hint` returns the kubectl lines to show after
  a cluster is created.
- `k3dctl.overrides.apply_cli_overrides(cfg, CLIOverrides(...))` returns a copy
  of a config with API port, volumes, ports, labels, environment variables,
  k3s arguments and a registry to create merged in; `group_filters` groups
  flag values by their node filters.
- `k3dctl.configfile.load_config_file(path, env)` reads a YAML file after
  expanding `$NAME` and `${NAME}` with `expand_env`; errors raise
  `ConfigFileError`.

## Listings

`k3dctl.listings.print_nodes` and `k3dctl.clusters.print_clusters` print
`NodeInfo` and `ClusterSummary` objects sorted by name, as an aligned table
(see `render_table`) or as JSON or YAML. `k3dctl.completion` offers name and
node-role completion helpers.

## What this package does not do

There is no command-line program: nothing here talks to a container runtime,
creates, starts or deletes clusters, writes kubeconfig files, looks up image
tags, or runs external plugin executables. The functions above prepare and
describe the data such operations need.