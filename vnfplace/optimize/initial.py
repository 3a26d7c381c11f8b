"""初始解构造模块。

此模块实现了三种直接构造的初始解策略：
1. 随机构造：为每个VNF随机选择可承载且可达的节点，尽量得到可行解
2. 最小延迟：在经过可承载节点的最短延迟路径上随机选一个节点放置整条链
3. 最少资源（贪心中心度）：先按装箱结果确定每种VNF的实例数，把实例放在
   被最短路径经过次数最多的节点上，再用分层图最短路径为每个请求选择实例

缩短的预退火策略依赖退火搜索本身，由annealing模块处理。

Typical usage example:

    rng = np.random.default_rng(42)
    solution = build_initial(InitialStrategy.LEAST_DELAY, problem, rng)
"""

import logging
from typing import Callable, Dict, List, Optional

import networkx as nx
import numpy as np

from vnfplace.demand.problem import ProblemInstance
from vnfplace.demand.request import TrafficRequest
from vnfplace.interfaces.base_catalog import VNF
from vnfplace.interfaces.base_network import INFINITY
from vnfplace.interfaces.base_optimizer import InitialStrategy
from vnfplace.interfaces.base_policy import ObjectiveMapping
from vnfplace.network.routing import NoRouteError, create_path, from_vnf_sequence
from vnfplace.solution.assignment import TrafficAssignment
from vnfplace.solution.binpacking import first_fit_decreasing
from vnfplace.solution.solution import Solution

logger = logging.getLogger(__name__)

RANDOM_ATTEMPTS = 10

def _hosts_for(problem: ProblemInstance, vnf: VNF) -> List[str]:
    """可承载该VNF的节点；没有时退化为所有具备正资源的节点"""
    hosts = problem.candidate_hosts(vnf.resources) or problem.network.hosts()
    return [node.name for node in hosts]

def _viable_hosts(problem: ProblemInstance, request: TrafficRequest) -> List[List[str]]:
    """逆序计算每个VNF的可选节点：从该节点出发，后续VNF仍能依次找到可达节点并到达出口"""
    network = problem.network
    viable: List[List[str]] = [[] for _ in request.vnf_sequence]
    targets = [request.egress]
    for k in range(len(request.vnf_sequence) - 1, -1, -1):
        viable[k] = [name for name in _hosts_for(problem, request.vnf_sequence[k])
                     if any(network.distance(name, t, 'hops') < INFINITY for t in targets)]
        targets = viable[k]
    return viable

def random_assignment(problem: ProblemInstance, request: TrafficRequest,
                      rng: np.random.Generator) -> TrafficAssignment:
    """为单个请求随机选择放置节点并路由

    每一步只在仍能完成整条链的节点中选择，有向拓扑上不会走入死路。

    Raises:
        NoRouteError: 某个VNF找不到可达的节点
    """
    network = problem.network
    viable = _viable_hosts(problem, request)
    order = []
    current = request.ingress
    for vnf, hosts in zip(request.vnf_sequence, viable):
        choices = [name for name in hosts if network.distance(current, name, 'hops') < INFINITY]
        if not choices:
            raise NoRouteError(f"请求{request.id}的VNF {vnf.name} 没有可达的放置节点")
        current = choices[int(rng.integers(len(choices)))]
        order.append(current)
    weight = 'delay' if rng.random() < 0.5 else 'hops'
    return from_vnf_sequence(request, order, network, weight)

def random_solution(problem: ProblemInstance, rng: np.random.Generator,
                    objectives: Optional[ObjectiveMapping] = None) -> Solution:
    """随机构造方案，返回第一个可行方案，若均不可行则返回最后一个

    无法随机放置的请求改用最小延迟构造。
    """
    solution = None
    for attempt in range(RANDOM_ATTEMPTS):
        assignments = []
        for request in problem.requests:
            try:
                assignments.append(random_assignment(problem, request, rng))
            except NoRouteError as e:
                logger.debug(f"{str(e)}，改用最小延迟构造")
                assignments.append(least_delay_assignment(problem, request, rng))
        solution = Solution(problem, assignments, objectives)
        if solution.is_feasible:
            logger.debug(f"第{attempt + 1}次随机构造得到可行解")
            return solution
    logger.debug(f"{RANDOM_ATTEMPTS}次随机构造均不可行")
    return solution

def least_delay_assignment(problem: ProblemInstance, request: TrafficRequest,
                           rng: np.random.Generator) -> TrafficAssignment:
    """把整条链放在最短延迟路径上随机选择的一个可承载节点上"""
    network = problem.network
    if not request.vnf_sequence:
        return from_vnf_sequence(request, [], network, 'delay')
    hosts = set.intersection(*(set(_hosts_for(problem, vnf)) for vnf in request.vnf_sequence))
    station = None
    if hosts:
        ordered = [node.name for node in network.get_nodes() if node.name in hosts]
        station = network.shortest_middle_station(request.ingress, request.egress, ordered, 'delay')
    if station is None:
        # 退化为任意具备正资源的节点
        hosts = {node.name for node in network.hosts()}
        ordered = [node.name for node in network.get_nodes() if node.name in hosts]
        station = network.shortest_middle_station(request.ingress, request.egress, ordered, 'delay')
    if station is None:
        raise NoRouteError(f"请求{request.id}从{request.ingress}到{request.egress}不可达")
    path = (create_path(network, request.ingress, station, 'delay')
            + create_path(network, station, request.egress, 'delay')[1:])
    on_path = [hop.node for hop in path if hop.node in hosts]
    node = on_path[int(rng.integers(len(on_path)))]
    return from_vnf_sequence(request, [node] * len(request.vnf_sequence), network, 'delay')

def least_delay_solution(problem: ProblemInstance, rng: np.random.Generator,
                         objectives: Optional[ObjectiveMapping] = None) -> Solution:
    assignments = [least_delay_assignment(problem, request, rng) for request in problem.requests]
    return Solution(problem, assignments, objectives)

def _instance_counts(problem: ProblemInstance) -> Dict[VNF, int]:
    """在容量无限的虚拟节点上装箱，得到每种VNF所需的实例数"""
    demands: Dict[VNF, list] = {}
    for request in problem.requests:
        for vnf in request.vnf_sequence:
            demands.setdefault(vnf, []).append((request, request.bandwidth))
    return {vnf: len(first_fit_decreasing(items, vnf.processing_capacity))
            for vnf, items in demands.items()}

def _centrality(problem: ProblemInstance) -> Dict[str, float]:
    """每个可承载节点被请求最短延迟路径经过的次数"""
    network = problem.network
    hosts = [node.name for node in network.hosts()]
    weights = {name: 0.0 for name in hosts}
    for request in problem.requests:
        station = network.shortest_middle_station(request.ingress, request.egress, hosts, 'delay')
        if station is None:
            continue
        path = (create_path(network, request.ingress, station, 'delay')
                + create_path(network, station, request.egress, 'delay')[1:])
        for name in {hop.node for hop in path}:
            if name in weights:
                weights[name] += len(request.vnf_sequence)
    return weights

def _place_instances(problem: ProblemInstance) -> Dict[VNF, Dict[str, List[float]]]:
    """按中心度贪心放置实例，返回每种VNF在各节点上实例的剩余处理能力"""
    counts = _instance_counts(problem)
    centrality = _centrality(problem)
    remaining = {node.name: list(node.resources) for node in problem.network.get_nodes()}
    locations: Dict[VNF, Dict[str, List[float]]] = {}
    for vnf in sorted(counts, key=lambda v: -counts[v]):
        hosts = sorted(_hosts_for(problem, vnf), key=lambda name: -centrality.get(name, 0.0))
        for _ in range(counts[vnf]):
            fitting = [name for name in hosts
                       if all(r >= q for r, q in zip(remaining[name], vnf.resources))]
            name = fitting[0] if fitting else hosts[0]
            remaining[name] = [r - q for r, q in zip(remaining[name], vnf.resources)]
            locations.setdefault(vnf, {}).setdefault(name, []).append(vnf.processing_capacity)
    return locations

def _layered_route(problem: ProblemInstance, request: TrafficRequest,
                   locations: Dict[VNF, Dict[str, List[float]]],
                   respect_pairs: bool) -> Optional[List[str]]:
    """在分层图上为请求选择每个VNF的实例节点，使总延迟最小"""
    network = problem.network
    catalog = problem.catalog
    sequence = request.vnf_sequence
    layers = [[request.ingress]]
    for vnf in sequence:
        sites = locations.get(vnf, {})
        with_room = [name for name, caps in sites.items()
                     if any(c >= request.bandwidth for c in caps)]
        layers.append(with_room or list(sites) or _hosts_for(problem, vnf))
    layers.append([request.egress])

    graph = nx.DiGraph()
    for k in range(len(layers) - 1):
        pair = None
        if respect_pairs and 0 < k < len(sequence):
            pair = catalog.get_pair(sequence[k - 1], sequence[k])
        for u in layers[k]:
            for v in layers[k + 1]:
                distance = network.distance(u, v, 'delay')
                if distance == INFINITY:
                    continue
                if pair is not None and distance > pair.latency:
                    continue
                graph.add_edge((k, u), (k + 1, v), weight=distance)
    source, target = (0, request.ingress), (len(layers) - 1, request.egress)
    if source not in graph or target not in graph:
        return None
    try:
        route = nx.dijkstra_path(graph, source, target, weight='weight')
    except nx.NetworkXNoPath:
        return None
    return [name for _, name in route[1:-1]]

def least_cpu_solution(problem: ProblemInstance, rng: np.random.Generator,
                       objectives: Optional[ObjectiveMapping] = None) -> Solution:
    """贪心中心度构造：尽量少开实例并复用已放置的实例"""
    locations = _place_instances(problem)
    assignments = []
    for request in problem.requests:
        if not request.vnf_sequence:
            assignments.append(from_vnf_sequence(request, [], problem.network, 'delay'))
            continue
        order = (_layered_route(problem, request, locations, respect_pairs=True)
                 or _layered_route(problem, request, locations, respect_pairs=False))
        if order is None:
            logger.debug(f"请求{request.id}无法在已放置的实例间路由，改用最小延迟构造")
            assignments.append(least_delay_assignment(problem, request, rng))
            continue
        for vnf, name in zip(request.vnf_sequence, order):
            capacities = locations.get(vnf, {}).get(name, [])
            for i, capacity in enumerate(capacities):
                if capacity >= request.bandwidth:
                    capacities[i] = capacity - request.bandwidth
                    break
        assignments.append(from_vnf_sequence(request, order, problem.network, 'delay'))
    return Solution(problem, assignments, objectives)

BUILDERS: Dict[InitialStrategy, Callable[..., Solution]] = {
    InitialStrategy.RANDOM: random_solution,
    InitialStrategy.LEAST_DELAY: least_delay_solution,
    InitialStrategy.LEAST_CPU: least_cpu_solution,
}

def build_initial(strategy: InitialStrategy, problem: ProblemInstance, rng: np.random.Generator,
                  objectives: Optional[ObjectiveMapping] = None) -> Solution:
    """按策略构造初始解

    Raises:
        ValueError: 策略不能直接构造（例如缩短的预退火）
    """
    if strategy not in BUILDERS:
        raise ValueError(f"初始解策略{strategy.name}不能直接构造")
    logger.debug(f"使用{strategy.name}策略构造初始解")
    return BUILDERS[strategy](problem, rng, objectives)
