"""节点与链路资源核算测试"""

import pytest

from vnfplace.network.network import Network
from vnfplace.network.routing import from_vnf_sequence
from vnfplace.solution.assignment import NodeAssignment
from vnfplace.solution.overview import LinkOverview, NodeOverview

def test_node_mismatch_is_rejected(line_problem):
    overview = NodeOverview(line_problem.network.get_node("B"))
    with pytest.raises(ValueError, match="不符"):
        overview.add_assignment(NodeAssignment("C"))

def test_forwarding_hops_are_ignored(line_problem):
    assignment = from_vnf_sequence(line_problem.requests[0], ["C"], line_problem.network)
    overview = NodeOverview(line_problem.network.get_node("B"))
    overview.add_assignment(assignment.path[1])
    assert overview.assignments() == []
    assert overview.remaining_resources() == (16.0,)

def test_disjoint_types_open_one_instance_each(line_network, catalog, make_request):
    fw_request = make_request(1, "A", "C", 300, ["fw"])
    nat_request = make_request(2, "A", "C", 400, ["nat"])
    overview = NodeOverview(line_network.get_node("B"))
    for request in (fw_request, nat_request):
        assignment = from_vnf_sequence(request, ["B"], line_network)
        overview.add_assignment(assignment.path[1])

    instances = overview.vnf_instances()
    assert {vnf.name: inst.count for vnf, inst in instances.items()} == {"fw": 1, "nat": 1}
    for vnf, inst in instances.items():
        assert sum(inst.loads) <= vnf.processing_capacity
    assert overview.instance_count() == 2
    assert overview.remaining_resources() == (14.0,)

def test_bin_packing_opens_instances_on_demand(line_network, catalog, make_request):
    overview = NodeOverview(line_network.get_node("B"))
    hops = []
    for i, bandwidth in enumerate([30, 30, 20, 10]):
        assignment = from_vnf_sequence(make_request(i, "A", "C", bandwidth, ["ids"]), ["B"], line_network)
        hops.append(assignment.path[1])
        overview.add_assignment(assignment.path[1])
    ids = catalog.get_vnf("ids")
    assert overview.instances_of(ids).loads == (50, 40)
    assert overview.remaining_resources() == (12.0,)

    overview.remove_assignment(hops[0])
    assert overview.instances_of(ids).loads == (50, 10)

    overview.remove_assignment(hops[1])
    assert overview.instances_of(ids).count == 1
    assert overview.instances_of(catalog.get_vnf("fw")).count == 0
    with pytest.raises(ValueError):
        overview.remove_assignment(hops[1])

def test_round_trip_restores_remaining_resources(line_network, make_request):
    overview = NodeOverview(line_network.get_node("C"))
    hops = [from_vnf_sequence(make_request(i, "A", "C", 20, ["ids"]), ["C"], line_network).path[-1]
            for i in range(5)]
    for hop in hops:
        overview.add_assignment(hop)
    before = overview.remaining_resources()
    overview.remove_assignment(hops[2])
    assert overview.remaining_resources() != before
    overview.add_assignment(hops[2])
    assert overview.remaining_resources() == before

def test_infinite_capacity_stays_infinite(catalog, make_request):
    network = Network()
    network.add_node("dc", (float("inf"),))
    request = make_request(1, "dc", "dc", 10, ["ids"])
    overview = NodeOverview(network.get_node("dc"))
    overview.add_assignment(from_vnf_sequence(request, ["dc"], network).path[0])
    assert overview.remaining_resources() == (float("inf"),)
    assert overview.used_resources() == (2.0,)

def test_link_overview_counts_multiplicity(line_network, make_request):
    link = line_network.get_link("A", "B")
    overview = LinkOverview(link)
    request = make_request(1, "A", "C", 100, ["fw"])
    overview.add_request(request)
    overview.add_request(request)
    assert overview.remaining_bandwidth() == 9800
    overview.remove_request(request)
    assert overview.requests == {request: 1}
    overview.remove_request(request)
    assert overview.requests == {}
    assert overview.remaining_bandwidth() == 10000
    with pytest.raises(ValueError):
        overview.remove_request(request)
