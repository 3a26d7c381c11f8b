"""测试共享夹具"""

import pytest

from vnfplace.catalog.catalog import VnfCatalog
from vnfplace.demand.problem import ProblemInstance
from vnfplace.demand.request import TrafficRequest
from vnfplace.interfaces.base_catalog import VNF
from vnfplace.network.network import Network

@pytest.fixture
def line_network():
    """A-B-C线形拓扑，CPU容量0/16/16，延迟1和117"""
    network = Network()
    network.add_node("A", (0.0,))
    network.add_node("B", (16.0,))
    network.add_node("C", (16.0,))
    network.add_link("A", "B", bandwidth=10000, delay=1)
    network.add_link("B", "C", bandwidth=10000, delay=117)
    return network

@pytest.fixture
def catalog():
    catalog = VnfCatalog(["cpu"])
    catalog.add_vnf(VNF("fw", (1.0,), processing_capacity=1000))
    catalog.add_vnf(VNF("nat", (1.0,), processing_capacity=1000))
    catalog.add_vnf(VNF("ids", (2.0,), processing_capacity=50))
    return catalog

@pytest.fixture
def make_request(catalog):
    def factory(request_id, ingress, egress, bandwidth, names, expected_delay=float('inf')):
        return TrafficRequest(
            id=request_id,
            ingress=ingress,
            egress=egress,
            bandwidth=bandwidth,
            vnf_sequence=catalog.resolve_sequence(names),
            expected_delay=expected_delay
        )
    return factory

@pytest.fixture
def line_problem(line_network, catalog, make_request):
    """单个请求A->C，需要经过fw"""
    return ProblemInstance(line_network, catalog, [make_request(1, "A", "C", 10, ["fw"])])

@pytest.fixture
def mesh_problem(catalog, make_request):
    """五节点网状拓扑上的四个请求，fw->ids之间有配对约束"""
    network = Network()
    for name, cpu in [("A", 0), ("B", 4), ("C", 4), ("D", 4), ("E", 0)]:
        network.add_node(name, (float(cpu),))
    for u, v, delay in [("A", "B", 1), ("B", "C", 2), ("C", "D", 2), ("D", "E", 1),
                        ("A", "C", 5), ("B", "D", 4), ("C", "E", 5)]:
        network.add_link(u, v, bandwidth=100, delay=delay)
    catalog.add_pair("fw", "ids", 10)
    requests = [
        make_request(1, "A", "E", 20, ["fw", "ids"]),
        make_request(2, "A", "E", 30, ["fw"]),
        make_request(3, "E", "A", 40, ["ids", "fw"]),
        make_request(4, "B", "D", 10, ["ids"]),
    ]
    return ProblemInstance(network, catalog, requests)
