"""方案指标、可行性与写时复制测试"""

import numpy as np
import pytest

from vnfplace.catalog.catalog import VnfCatalog
from vnfplace.demand.problem import ProblemInstance
from vnfplace.demand.request import TrafficRequest
from vnfplace.interfaces.base_catalog import VNF
from vnfplace.network.network import Network
from vnfplace.network.routing import from_vnf_sequence, placement_of
from vnfplace.interfaces.base_optimizer import OptimizerConfig
from vnfplace.optimize.initial import least_cpu_solution, least_delay_solution
from vnfplace.optimize.neighbour import NeighbourNotFound, NeighbourSelection
from vnfplace.solution.assignment import NodeAssignment, TrafficAssignment
from vnfplace.solution.metrics import Metric
from vnfplace.solution.solution import Solution

def _solution(problem, orders):
    assignments = [from_vnf_sequence(request, order, problem.network)
                   for request, order in zip(problem.requests, orders)]
    return Solution(problem, assignments)

def test_least_delay_places_firewall_on_a_host(line_problem):
    for seed in range(10):
        solution = least_delay_solution(line_problem, np.random.default_rng(seed))
        assignment = solution[0]
        assert placement_of(assignment) in (["B"], ["C"])
        assert assignment.delay == 118
        assert assignment.delay_index == pytest.approx(1.0)
        assert solution.is_feasible
        assert solution.metric("TOTAL_DELAY") == 118
        assert solution.metric("NUMBER_OF_VNF_INSTANCES") == 1
        assert solution.metric("TOTAL_USED_CPU") == 1

def test_metrics_vector_is_read_only(line_problem):
    solution = _solution(line_problem, [["B"]])
    assert len(solution.metrics) == line_problem.table.size
    with pytest.raises(ValueError):
        solution.metrics[0] = 1.0

def test_pair_violation_makes_solution_infeasible(line_network, catalog, make_request):
    catalog.add_pair("fw", "nat", 50)
    problem = ProblemInstance(line_network, catalog, [make_request(1, "A", "C", 10, ["fw", "nat"])])

    spread = _solution(problem, [["B", "C"]])
    assert spread.metric("NUMBER_OF_PAIR_VIOLATIONS") == 1
    assert not spread.is_feasible

    together = _solution(problem, [["C", "C"]])
    assert together.metric("NUMBER_OF_PAIR_VIOLATIONS") == 0
    assert together.is_feasible

def test_delay_violation(line_network, catalog, make_request):
    problem = ProblemInstance(
        line_network, catalog, [make_request(1, "A", "C", 10, ["fw"], expected_delay=100)])
    solution = _solution(problem, [["B"]])
    assert solution[0].delay_violated
    assert solution.metric("NUMBER_OF_DELAY_VIOLATIONS") == 1
    assert solution.metrics[Metric.UNFEASIBLE] == 1.0

def test_resource_violation_counts_overloaded_capacity(line_network, catalog, make_request):
    requests = [make_request(i, "A", "C", 50, ["ids"]) for i in range(9)]
    problem = ProblemInstance(line_network, catalog, requests)
    solution = _solution(problem, [["B"]] * 9)
    assert solution.node_overviews()["B"].remaining_resources() == (-2.0,)
    assert solution.metric("NUMBER_OF_RESOURCE_VIOLATIONS") == 1
    assert solution.metric("TOTAL_OVERLOADED_VNF_CAPACITY") == 450
    assert solution.metric("NUMBER_OF_VNF_INSTANCES") == 9
    assert not solution.is_feasible

def test_excessive_instances(line_network, make_request):
    catalog = VnfCatalog(["cpu"])
    catalog.add_vnf(VNF("lb", (1.0,), processing_capacity=1000, max_instances=1))
    requests = [
        TrafficRequest(i, "A", "C", 600, catalog.resolve_sequence(["lb"])) for i in range(2)
    ]
    problem = ProblemInstance(line_network, catalog, requests)

    solution = _solution(problem, [["B"], ["C"]])
    overview = solution.vnf_overviews()[catalog.get_vnf("lb")]
    assert overview.total == 2
    assert overview.excessive == 1
    assert solution.metric("NUMBER_OF_EXCESSIVE_VNFS") == 1
    assert solution.metric("TOTAL_ROOTED_EXCESSIVE_VNF_CAPACITY") == pytest.approx(2 * np.sqrt(600))
    assert not solution.is_feasible

def test_congested_link(catalog, make_request):
    network = Network()
    network.add_node("A", (0.0,))
    network.add_node("B", (4.0,))
    network.add_link("A", "B", bandwidth=100, delay=1)
    requests = [make_request(i, "A", "B", 60, ["fw"]) for i in range(2)]
    problem = ProblemInstance(network, catalog, requests)
    solution = _solution(problem, [["B"], ["B"]])
    link = network.get_link("A", "B")
    assert solution.link_overviews()[link].remaining_bandwidth() == -20
    assert solution.metric("NUMBER_OF_CONGESTED_LINKS") == 1
    assert not solution.is_feasible

def test_zero_shortest_value_offsets_index(catalog):
    network = Network()
    network.add_node("A", (4.0,))
    request = TrafficRequest(1, "A", "A", 10, catalog.resolve_sequence(["fw"]))
    problem = ProblemInstance(network, catalog, [request])
    solution = _solution(problem, [["A"]])
    assert solution[0].delay_index == 1.0
    assert solution[0].hops_index == 1.0

def test_copy_on_write_keeps_original_intact(line_network, catalog, make_request):
    requests = [make_request(1, "A", "C", 10, ["fw"]), make_request(2, "A", "C", 10, ["nat"])]
    problem = ProblemInstance(line_network, catalog, requests)
    original = _solution(problem, [["B"], ["B"]])
    before = original.metrics.copy()
    assert original.node_overviews()["B"].instance_count() == 2
    original.link_overviews()

    neighbour = original.copy()
    neighbour.replace_assignment(1, from_vnf_sequence(requests[1], ["C"], line_network))

    assert original.node_overviews()["B"].instance_count() == 2
    assert original.node_overviews()["C"].instance_count() == 0
    assert neighbour.node_overviews()["B"].instance_count() == 1
    assert neighbour.node_overviews()["C"].instance_count() == 1
    np.testing.assert_array_equal(original.metrics, before)

    fresh = Solution(problem, neighbour.assignments)
    np.testing.assert_array_equal(neighbour.metrics, fresh.metrics)

def test_replace_assignment_rejects_other_request(line_network, catalog, make_request):
    requests = [make_request(1, "A", "C", 10, ["fw"]), make_request(2, "A", "C", 10, ["nat"])]
    problem = ProblemInstance(line_network, catalog, requests)
    solution = _solution(problem, [["B"], ["B"]])
    with pytest.raises(ValueError):
        solution.replace_assignment(0, from_vnf_sequence(requests[1], ["C"], line_network))

def test_solution_requires_matching_assignments(line_problem):
    with pytest.raises(ValueError):
        Solution(line_problem, [])

def test_traffic_assignment_validation(line_network, catalog, make_request):
    request = make_request(1, "A", "C", 10, ["fw"])
    fw = catalog.get_vnf("fw")
    ab = line_network.get_link("A", "B")
    bc = line_network.get_link("B", "C")

    with pytest.raises(ValueError, match="起点"):
        TrafficAssignment(request, [NodeAssignment("B", fw), NodeAssignment("C", None, bc)], line_network)
    with pytest.raises(ValueError, match="缺少链路"):
        TrafficAssignment(request, [NodeAssignment("A"), NodeAssignment("C", fw)], line_network)
    with pytest.raises(ValueError, match="不连接"):
        TrafficAssignment(request, [NodeAssignment("A"), NodeAssignment("B", fw, bc),
                                    NodeAssignment("C", None, bc)], line_network)
    with pytest.raises(ValueError, match="不一致"):
        TrafficAssignment(request, [NodeAssignment("A"), NodeAssignment("B", None, ab),
                                    NodeAssignment("C", None, bc)], line_network)

    assignment = TrafficAssignment(
        request, [NodeAssignment("A"), NodeAssignment("B", fw, ab), NodeAssignment("C", None, bc)],
        line_network)
    assert assignment.hops == 2
    assert assignment.path[1].request is request

def _instances_needed(loads, capacity):
    """逐个放入第一个放得下的实例，负载从大到小"""
    instances = []
    for load in sorted(loads, reverse=True):
        for i, used in enumerate(instances):
            if used + load <= capacity:
                instances[i] += load
                break
        else:
            instances.append(load)
    return len(instances)

def _assert_resources_conserved(solution):
    demands = {}
    for assignment in solution.assignments:
        for hop in assignment.path:
            if hop.vnf is not None:
                demands.setdefault((hop.node, hop.vnf), []).append(assignment.request.bandwidth)
    expected_cpu = sum(_instances_needed(loads, vnf.processing_capacity) * vnf.resources[0]
                       for (_, vnf), loads in demands.items())
    consumed_cpu = sum(overview.node.resources[0] - overview.remaining_resources()[0]
                       for overview in solution.node_overviews().values())
    assert consumed_cpu == pytest.approx(expected_cpu)
    assert solution.metric("TOTAL_USED_CPU") == pytest.approx(expected_cpu)

    expected_bandwidth = sum(a.request.bandwidth * len(a.links()) for a in solution.assignments)
    used_bandwidth = sum(overview.used_bandwidth() for overview in solution.link_overviews().values())
    assert used_bandwidth == pytest.approx(expected_bandwidth)

def test_resources_conserved_across_neighbour_moves(mesh_problem):
    rng = np.random.default_rng(3)
    solution = least_cpu_solution(mesh_problem, rng)
    _assert_resources_conserved(solution)
    selection = NeighbourSelection(mesh_problem, OptimizerConfig(), rng)
    moves = 0
    for step in range(40):
        operator = selection.reassign_vnf if step % 2 else selection.new_instance
        try:
            candidate = operator(solution)
        except NeighbourNotFound:
            continue
        _assert_resources_conserved(candidate)
        # 原方案的核算不受邻域改动影响
        _assert_resources_conserved(solution)
        solution = candidate
        moves += 1
    assert moves > 0
