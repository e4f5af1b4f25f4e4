import io
import json

import yaml

from k3dctl.listings import CLUSTER_LABEL, NodeInfo, print_nodes, render_table


def _nodes():
    return [
        NodeInfo("/k3d-demo-server-0", "server", {CLUSTER_LABEL: "demo"}, "running"),
        NodeInfo("k3d-demo-agent-0", "agent", {CLUSTER_LABEL: "demo"}, "exited"),
    ]


def test_render_table_aligns_columns():
    text = render_table([["NAME", "ROLE"], ["a-long-node-name", "server"]])
    header, line = text.splitlines()
    assert header.index("ROLE") == line.index("server")
    assert text.endswith("\n")


def test_render_table_respects_min_width():
    text = render_table([["a", "b"]], min_width=6, padding=3)
    assert text.index("b") == 6


def test_render_table_width_is_longest_cell_plus_padding():
    text = render_table([["abcdefgh", "x"], ["a", "y"]], min_width=1, padding=2)
    lines = text.splitlines()
    assert lines[0].index("x") == len("abcdefgh") + 2
    assert lines[1].index("y") == lines[0].index("x")


def test_render_table_blocks_break_on_short_rows():
    text = render_table([["longcell", "x"], ["only"], ["a", "y"]], min_width=1, padding=1)
    lines = text.splitlines()
    assert lines[1] == "only"
    assert lines[2].index("y") == 2


def test_print_nodes_json_is_sorted():
    out = io.StringIO()
    print_nodes(_nodes(), "JSON", stream=out)
    data = json.loads(out.getvalue())
    names = [entry["name"] for entry in data]
    assert names == sorted(names)
    assert data[0]["runtimeLabels"][CLUSTER_LABEL] == "demo"


def test_print_nodes_yaml_round_trip():
    out = io.StringIO()
    print_nodes(_nodes(), "yaml", stream=out)
    data = yaml.safe_load(out.getvalue())
    assert {entry["role"] for entry in data} == {"server", "agent"}


def test_print_nodes_table_with_headers():
    out = io.StringIO()
    print_nodes(_nodes(), "", headers=["NAME", "ROLE", "CLUSTER", "STATUS"], stream=out)
    lines = out.getvalue().splitlines()
    assert lines[0].startswith("NAME")
    assert lines[1].startswith("/k3d-demo-server-0".lstrip("/")) is False
    assert lines[2].startswith("k3d-demo-server-0")
    assert all(line.index("demo") == lines[0].index("CLUSTER") for line in lines[1:])


def test_print_nodes_without_headers_and_custom_row():
    out = io.StringIO()
    print_nodes(_nodes(), "table", row=lambda node: [node.status], stream=out)
    assert out.getvalue().splitlines() == ["exited", "running"]


def test_node_cluster_property_defaults_to_empty():
    assert NodeInfo("k3d-registry").cluster == ""