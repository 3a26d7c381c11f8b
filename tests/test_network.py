"""网络拓扑与最短路径测试"""

import networkx as nx
import numpy as np
import pytest

from vnfplace.interfaces.base_network import INFINITY, Color
from vnfplace.network.network import Network
from vnfplace.network.routing import NoRouteError, create_path

def test_add_node_rejects_duplicate():
    network = Network()
    network.add_node("A", (1.0,))
    with pytest.raises(ValueError, match="已存在"):
        network.add_node("A", (2.0,))

def test_add_link_rejects_self_link_and_duplicates():
    network = Network()
    network.add_node("A", (1.0,))
    network.add_node("B", (1.0,))
    network.add_link("A", "B", 10, 1)
    with pytest.raises(ValueError, match="自身"):
        network.add_link("A", "A", 10, 1)
    with pytest.raises(ValueError, match="重复"):
        network.add_link("B", "A", 10, 1)
    with pytest.raises(ValueError, match="不存在"):
        network.add_link("A", "Z", 10, 1)

def test_directed_links_are_one_way():
    network = Network(directed=True)
    for name in "AB":
        network.add_node(name, (1.0,))
    network.add_link("A", "B", 10, 3)
    network.add_link("B", "A", 10, 5)
    assert network.distance("A", "B") == 3
    assert network.distance("B", "A") == 5
    with pytest.raises(ValueError):
        network.add_link("A", "B", 10, 1)

def test_unreachable_node_has_infinite_distance():
    network = Network(directed=True)
    for name in "ABC":
        network.add_node(name, (1.0,))
    network.add_link("A", "B", 10, 1)
    labels = network.shortest_paths("B")
    assert labels["A"].distance == INFINITY
    assert labels["A"].color == Color.UNVISITED
    with pytest.raises(NoRouteError):
        create_path(network, "B", "A")

def test_dijkstra_matches_networkx():
    rng = np.random.default_rng(7)
    network = Network()
    reference = nx.Graph()
    names = [f"n{i}" for i in range(30)]
    for name in names:
        network.add_node(name, (1.0,))
        reference.add_node(name)
    for i in range(30):
        for j in range(i + 1, 30):
            if rng.random() < 0.12:
                delay = float(rng.integers(0, 20))
                network.add_link(names[i], names[j], 100, delay)
                reference.add_edge(names[i], names[j], weight=delay)

    for source in names[:5]:
        expected = nx.single_source_dijkstra_path_length(reference, source, weight="weight")
        labels = network.shortest_paths(source)
        for name in names:
            assert labels[name].distance == pytest.approx(expected.get(name, INFINITY))
            if name in expected:
                path = create_path(network, source, name)
                assert path[0].node == source and path[-1].node == name
                assert sum(hop.prev.delay for hop in path[1:]) == pytest.approx(expected[name])

def test_hop_weight_counts_links(line_network):
    line_network.add_link("A", "C", 10000, 500)
    assert line_network.distance("A", "C", "hops") == 1
    assert line_network.distance("A", "C", "delay") == 118

def test_equal_distances_keep_first_inserted_predecessor():
    network = Network()
    for name in "ABCD":
        network.add_node(name, (1.0,))
    network.add_link("A", "B", 10, 1)
    network.add_link("A", "C", 10, 1)
    first = network.add_link("B", "D", 10, 1)
    network.add_link("C", "D", 10, 1)
    assert network.shortest_paths("A")["D"].prev == first

def test_negative_custom_cost_is_rejected(line_network):
    with pytest.raises(ValueError, match="为负"):
        line_network.shortest_paths("A", weight=lambda link: -1.0)

def test_cache_is_cleared_when_topology_changes(line_network):
    assert line_network.distance("A", "C") == 118
    line_network.add_link("A", "C", 10000, 5)
    assert line_network.distance("A", "C") == 5

def test_shortest_middle_station(line_network):
    assert line_network.shortest_middle_station("A", "C", ["B", "C"]) == "B"
    assert line_network.shortest_via_hosts("A", "C", "delay") == 118
    assert line_network.shortest_via_hosts("A", "C", "hops") == 2

def test_infinite_capacity_node():
    network = Network()
    node = network.add_node("dc", (float("inf"), 8.0))
    assert node.can_host((1e12, 8.0))
    assert node.resources[0] - 1e12 == INFINITY

def test_load_from_csv(tmp_path):
    nodes = tmp_path / "nodes.csv"
    nodes.write_text("name,cpu,ram\nA,4,8\nB,inf,16\n")
    links = tmp_path / "links.csv"
    links.write_text("source,target,bandwidth,delay\nA,B,1000,2.5\n")

    network = Network()
    network.load_nodes(str(nodes), ["cpu", "ram"])
    network.load_links(str(links))
    assert network.get_node("B").resources == (INFINITY, 16.0)
    assert network.get_link("B", "A").delay == 2.5

def test_load_errors(tmp_path):
    network = Network()
    with pytest.raises(FileNotFoundError):
        network.load_nodes(str(tmp_path / "missing.csv"), ["cpu"])
    bad = tmp_path / "nodes.csv"
    bad.write_text("name,ram\nA,4\n")
    with pytest.raises(ValueError, match="格式错误"):
        network.load_nodes(str(bad), ["cpu"])
