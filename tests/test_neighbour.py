"""邻域算子测试"""

import numpy as np
import pytest

from vnfplace.demand.problem import ProblemInstance
from vnfplace.interfaces.base_optimizer import OptimizerConfig
from vnfplace.network.network import Network
from vnfplace.network.routing import from_vnf_sequence, placement_of
from vnfplace.optimize.neighbour import NeighbourNotFound, NeighbourSelection
from vnfplace.solution.solution import Solution

def _solution(problem, orders):
    return Solution(problem, [from_vnf_sequence(request, order, problem.network)
                              for request, order in zip(problem.requests, orders)])

def test_reassign_moves_vnf_to_other_host(line_problem):
    current = _solution(line_problem, [["B"]])
    for seed in range(5):
        selection = NeighbourSelection(line_problem, OptimizerConfig(), np.random.default_rng(seed))
        neighbour = selection.reassign_vnf(current)
        assert placement_of(neighbour[0]) == ["C"]
        assert placement_of(current[0]) == ["B"]

def test_new_instance_splits_shared_instance(line_network, catalog, make_request):
    requests = [make_request(1, "A", "C", 10, ["fw"]), make_request(2, "A", "C", 10, ["fw"])]
    problem = ProblemInstance(line_network, catalog, requests)
    current = _solution(problem, [["B"], ["B"]])
    selection = NeighbourSelection(problem, OptimizerConfig(), np.random.default_rng(0))

    neighbour = selection.new_instance(current)
    placements = sorted(placement_of(a)[0] for a in neighbour.assignments)
    assert placements == ["B", "C"]
    assert neighbour.node_overviews()["B"].instance_count() == 1
    assert neighbour.node_overviews()["C"].instance_count() == 1
    assert current.node_overviews()["B"].instance_count() == 1
    assert current.node_overviews()["C"].instance_count() == 0

def test_no_alternative_host_raises(catalog, make_request):
    network = Network()
    network.add_node("A", (0.0,))
    network.add_node("B", (16.0,))
    network.add_node("C", (0.0,))
    network.add_link("A", "B", bandwidth=1000, delay=1)
    network.add_link("B", "C", bandwidth=1000, delay=1)
    problem = ProblemInstance(network, catalog, [make_request(1, "A", "C", 10, ["fw"])])
    current = _solution(problem, [["B"]])
    selection = NeighbourSelection(problem, OptimizerConfig(), np.random.default_rng(0))
    with pytest.raises(NeighbourNotFound):
        selection.reassign_vnf(current)
    with pytest.raises(NeighbourNotFound):
        selection.new_instance(current)

def test_violating_request_is_modified_first(line_network, catalog, make_request):
    requests = [make_request(1, "A", "C", 10, ["fw"]),
                make_request(2, "A", "C", 10, ["nat"], expected_delay=100)]
    problem = ProblemInstance(line_network, catalog, requests)
    current = _solution(problem, [["B"], ["B"]])
    assert not current.is_feasible
    for seed in range(5):
        selection = NeighbourSelection(problem, OptimizerConfig(), np.random.default_rng(seed))
        neighbour = selection.reassign_vnf(current)
        assert neighbour[0] is current[0]
        assert placement_of(neighbour[1]) == ["C"]

def test_pair_constraint_filters_candidates(line_network, catalog, make_request):
    catalog.add_pair("fw", "nat", 50)
    problem = ProblemInstance(line_network, catalog, [make_request(1, "A", "C", 10, ["fw", "nat"])])
    current = _solution(problem, [["C", "C"]])
    selection = NeighbourSelection(problem, OptimizerConfig(), np.random.default_rng(0))
    # 任一VNF移到B都会与C上的另一个相距117，超过配对约束
    with pytest.raises(NeighbourNotFound):
        selection.reassign_vnf(current)
