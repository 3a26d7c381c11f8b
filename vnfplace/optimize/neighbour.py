"""邻域生成模块。

此模块实现了模拟退火使用的两种邻域算子，包括：
1. 重新放置VNF：选择一个请求和其中一个VNF，把它移到另一个可承载的节点
2. 新建实例：从共享实例中取出一个请求，把对应的VNF移到可开新实例或有余量的节点

不可行解优先处理违反约束的请求；否则按延迟指数和跳数指数加权选择。
候选节点按引起的绕行延迟的倒数加权。找不到任何可行改动时抛出NeighbourNotFound，
由搜索循环当作空操作处理。

Typical usage example:

    selection = NeighbourSelection(problem, config, rng)
    candidate = selection.reassign_vnf(current)
"""

import logging
from typing import List, Sequence

import numpy as np

from vnfplace.demand.problem import ProblemInstance
from vnfplace.demand.request import TrafficRequest
from vnfplace.interfaces.base_network import INFINITY, Node
from vnfplace.interfaces.base_optimizer import OptimizerConfig
from vnfplace.network.routing import NoRouteError, from_vnf_sequence, placement_of
from vnfplace.solution.solution import Solution

logger = logging.getLogger(__name__)

class NeighbourNotFound(RuntimeError):
    """找不到可行的邻域改动"""

class NeighbourSelection:
    """邻域算子集合"""

    def __init__(self, problem: ProblemInstance, config: OptimizerConfig, rng: np.random.Generator):
        self.problem = problem
        self.config = config
        self.rng = rng

    def reassign_vnf(self, solution: Solution) -> Solution:
        """随机选择一个请求中的一个VNF，放置到另一个节点

        Raises:
            NeighbourNotFound: 没有其他节点可以承载该VNF
        """
        index = self._pick_assignment(solution)
        assignment = solution[index]
        sequence = assignment.request.vnf_sequence
        position = int(self.rng.integers(len(sequence)))
        order = placement_of(assignment)
        candidates = [node for node in self.problem.candidate_hosts(sequence[position].resources)
                      if node.name != order[position]]
        return self._relocate(solution, index, order, position, candidates)

    def new_instance(self, solution: Solution) -> Solution:
        """把共享实例中的一个请求移到其他节点上的新实例或有余量的实例

        Raises:
            NeighbourNotFound: 没有共享实例或没有可用的目标节点
        """
        overviews = solution.node_overviews()
        shared = []
        for name, overview in overviews.items():
            overloaded = any(r < 0 for r in overview.remaining_resources())
            for vnf, instances in overview.vnf_instances().items():
                for flows in instances.flows:
                    if len(flows) >= 2 or (overloaded and flows):
                        shared.append((name, vnf, flows))
        if not shared:
            raise NeighbourNotFound("没有可拆分的共享实例")

        name, vnf, flows = shared[int(self.rng.integers(len(shared)))]
        request: TrafficRequest = flows[int(self.rng.integers(len(flows)))]
        index = self.problem.index_of(request)
        order = placement_of(solution[index])
        position = next(k for k, (node, v) in enumerate(zip(order, request.vnf_sequence))
                        if node == name and v == vnf)

        candidates = []
        for node in self.problem.candidate_hosts(vnf.resources):
            if node.name == name:
                continue
            overview = overviews[node.name]
            spare = any(load + request.bandwidth <= vnf.processing_capacity
                        for load in overview.instances_of(vnf).loads)
            if spare or overview.can_open(vnf):
                candidates.append(node)
        return self._relocate(solution, index, order, position, candidates)

    def _pick_assignment(self, solution: Solution) -> int:
        """选择要修改的请求下标"""
        indices = [i for i, a in enumerate(solution.assignments) if a.request.vnf_sequence]
        if not indices:
            raise NeighbourNotFound("没有包含VNF的请求")

        if not solution.is_feasible:
            catalog = self.problem.catalog
            violating = [i for i in indices
                         if solution[i].delay_violated or solution[i].pair_violations(catalog)]
            if not violating:
                congested = {overview.link for overview in solution.link_overviews().values()
                             if overview.remaining_bandwidth() < 0}
                violating = [i for i in indices
                             if any(link in congested for link in solution[i].links())]
            if violating:
                return violating[int(self.rng.integers(len(violating)))]

        if self.config.use_weights:
            weights = np.zeros(len(indices))
            for k, i in enumerate(indices):
                if self.config.use_delay_in_weights:
                    weights[k] += solution[i].delay_index
                if self.config.use_hops_in_weights:
                    weights[k] += solution[i].hops_index
            total = weights.sum()
            if total > 0 and np.isfinite(total):
                return indices[int(self.rng.choice(len(indices), p=weights / total))]
        return indices[int(self.rng.integers(len(indices)))]

    def _pairs_respected(self, request: TrafficRequest, position: int,
                         before: str, node: str, after: str) -> bool:
        catalog = self.problem.catalog
        network = self.problem.network
        sequence = request.vnf_sequence
        vnf = sequence[position]
        if position > 0:
            pair = catalog.get_pair(sequence[position - 1], vnf)
            if pair is not None and network.distance(before, node, 'delay') > pair.latency:
                return False
        if position + 1 < len(sequence):
            pair = catalog.get_pair(vnf, sequence[position + 1])
            if pair is not None and network.distance(node, after, 'delay') > pair.latency:
                return False
        return True

    def _relocate(self, solution: Solution, index: int, order: Sequence[str],
                  position: int, candidates: List[Node]) -> Solution:
        """把第position个VNF移到候选节点之一，并返回新的方案"""
        request = solution[index].request
        network = self.problem.network
        before = order[position - 1] if position > 0 else request.ingress
        after = order[position + 1] if position + 1 < len(order) else request.egress

        names, detours = [], []
        for node in candidates:
            detour = (network.distance(before, node.name, 'delay')
                      + network.distance(node.name, after, 'delay'))
            if detour == INFINITY:
                continue
            if not self._pairs_respected(request, position, before, node.name, after):
                continue
            names.append(node.name)
            detours.append(detour)
        if not names:
            raise NeighbourNotFound(f"请求{request.id}的第{position}个VNF没有可选节点")

        detours = np.asarray(detours)
        scale = float(np.median(detours)) or 1.0
        weights = 1.0 / (1.0 + detours / scale)
        chosen = names[int(self.rng.choice(len(names), p=weights / weights.sum()))]

        new_order = list(order)
        new_order[position] = chosen
        weight = 'delay' if self.rng.random() < 0.5 else 'hops'
        try:
            assignment = from_vnf_sequence(request, new_order, network, weight)
        except NoRouteError as e:
            raise NeighbourNotFound(str(e)) from e

        neighbour = solution.copy()
        neighbour.replace_assignment(index, assignment)
        return neighbour
