"""解模块。

此模块实现了完整的放置方案，包括：
1. 每个请求一个流量分配，顺序与请求数组一致
2. 惰性计算并缓存节点核算、链路核算和原始指标向量
3. 通过replace_assignment原地替换分配并增量更新核算（写时复制）
4. 可行性判定以及可比较目标向量、不可行目标向量

Typical usage example:

    solution = Solution(problem, assignments)
    solution.is_feasible
    solution.objective_vector()
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, List, Optional, Sequence, Set

import numpy as np

from vnfplace.interfaces.base_catalog import VNF
from vnfplace.interfaces.base_network import Link
from vnfplace.interfaces.base_policy import ObjectiveMapping
from vnfplace.solution.assignment import TrafficAssignment
from vnfplace.solution.metrics import Metric, default_objectives
from vnfplace.solution.overview import LinkOverview, NodeOverview, VnfInstances

if TYPE_CHECKING:
    from vnfplace.demand.problem import ProblemInstance

@dataclass
class VnfTypeOverview:
    """某VNF类型在全网的实例分布"""
    vnf: VNF
    locations: Dict[str, VnfInstances] = field(default_factory=dict)
    total: int = 0

    def add_location(self, instances: VnfInstances) -> None:
        self.locations[instances.node] = instances
        self.total += instances.count

    @property
    def excessive(self) -> int:
        """超出实例上限的数量"""
        if self.vnf.max_instances < 0:
            return 0
        return max(0, self.total - self.vnf.max_instances)

def _median(values: List[float]) -> float:
    return float(np.median(values)) if values else 0.0

def _mean(values: List[float]) -> float:
    return float(np.mean(values)) if values else 0.0

class Solution:
    """VNF放置与路由方案"""

    def __init__(self, problem: 'ProblemInstance', assignments: Sequence[TrafficAssignment],
                 objectives: Optional[ObjectiveMapping] = None):
        """初始化方案

        Args:
            problem: 问题实例
            assignments: 每个请求的流量分配，顺序与problem.requests一致
            objectives: 目标映射，默认使用default_objectives

        Raises:
            ValueError: 分配数量或顺序与请求不一致
        """
        if len(assignments) != len(problem.requests):
            raise ValueError(
                f"方案包含{len(assignments)}个分配，问题实例有{len(problem.requests)}个请求"
            )
        for request, assignment in zip(problem.requests, assignments):
            if assignment.request != request:
                raise ValueError(f"请求{request.id}的位置上是请求{assignment.request.id}的分配")
        self.problem = problem
        self.objectives = objectives or default_objectives(problem.table)
        self._assignments: List[TrafficAssignment] = list(assignments)
        self._node_overviews: Optional[Dict[str, NodeOverview]] = None
        self._link_overviews: Optional[Dict[Link, LinkOverview]] = None
        self._owned_nodes: Set[str] = set()
        self._owned_links: Set[Link] = set()
        self._invalidate()

    def _invalidate(self) -> None:
        self._vnf_overviews: Optional[Dict[VNF, VnfTypeOverview]] = None
        self._metrics: Optional[np.ndarray] = None

    @property
    def assignments(self) -> Sequence[TrafficAssignment]:
        """流量分配的只读视图"""
        return tuple(self._assignments)

    def __len__(self) -> int:
        return len(self._assignments)

    def __getitem__(self, index: int) -> TrafficAssignment:
        return self._assignments[index]

    def node_overviews(self) -> Dict[str, NodeOverview]:
        """每个节点的资源核算"""
        if self._node_overviews is None:
            overviews = {node.name: NodeOverview(node) for node in self.problem.network.get_nodes()}
            for assignment in self._assignments:
                for hop in assignment.path:
                    overviews[hop.node].add_assignment(hop)
            self._node_overviews = overviews
            self._owned_nodes = set(overviews)
        return self._node_overviews

    def link_overviews(self) -> Dict[Link, LinkOverview]:
        """每条链路的带宽核算"""
        if self._link_overviews is None:
            overviews = {link: LinkOverview(link) for link in self.problem.network.get_links()}
            for assignment in self._assignments:
                for link in assignment.links():
                    overviews[link].add_request(assignment.request)
            self._link_overviews = overviews
            self._owned_links = set(overviews)
        return self._link_overviews

    def vnf_overviews(self) -> Dict[VNF, VnfTypeOverview]:
        """每个VNF类型在全网的实例分布"""
        if self._vnf_overviews is None:
            overviews: Dict[VNF, VnfTypeOverview] = {}
            for overview in self.node_overviews().values():
                for vnf, instances in overview.vnf_instances().items():
                    overviews.setdefault(vnf, VnfTypeOverview(vnf)).add_location(instances)
            self._vnf_overviews = overviews
        return self._vnf_overviews

    def _own_node(self, name: str) -> NodeOverview:
        if name not in self._owned_nodes:
            self._node_overviews[name] = self._node_overviews[name].copy()
            self._owned_nodes.add(name)
        return self._node_overviews[name]

    def _own_link(self, link: Link) -> LinkOverview:
        if link not in self._owned_links:
            self._link_overviews[link] = self._link_overviews[link].copy()
            self._owned_links.add(link)
        return self._link_overviews[link]

    def replace_assignment(self, index: int, assignment: TrafficAssignment) -> None:
        """替换第index个请求的流量分配，并增量更新已构建的核算

        Raises:
            ValueError: 新分配不属于该位置的请求
        """
        expected = self.problem.requests[index]
        if assignment.request != expected:
            raise ValueError(f"位置{index}属于请求{expected.id}，不能放入请求{assignment.request.id}的分配")
        old = self._assignments[index]
        if self._node_overviews is not None:
            for hop in old.path:
                if hop.vnf is not None:
                    self._own_node(hop.node).remove_assignment(hop)
            for hop in assignment.path:
                if hop.vnf is not None:
                    self._own_node(hop.node).add_assignment(hop)
        if self._link_overviews is not None:
            for link in old.links():
                self._own_link(link).remove_request(old.request)
            for link in assignment.links():
                self._own_link(link).add_request(assignment.request)
        self._assignments[index] = assignment
        self._invalidate()

    def copy(self) -> 'Solution':
        """复制方案，核算对象在首次修改时才复制"""
        other = Solution.__new__(Solution)
        other.problem = self.problem
        other.objectives = self.objectives
        other._assignments = list(self._assignments)
        other._node_overviews = dict(self._node_overviews) if self._node_overviews is not None else None
        other._link_overviews = dict(self._link_overviews) if self._link_overviews is not None else None
        # 两份方案此后都不再独占共享的核算对象
        other._owned_nodes = set()
        other._owned_links = set()
        self._owned_nodes = set()
        self._owned_links = set()
        other._vnf_overviews = self._vnf_overviews
        other._metrics = self._metrics
        return other

    @property
    def metrics(self) -> np.ndarray:
        """原始指标向量，下标见MetricTable"""
        if self._metrics is None:
            self._metrics = self._compute_metrics()
        return self._metrics

    def _compute_metrics(self) -> np.ndarray:
        table = self.problem.table
        vals = np.zeros(table.size)

        # 节点资源
        used = np.zeros(len(table.resources))
        inverse_loads: List[float] = []
        for overview in self.node_overviews().values():
            used += overview.used_resources()
            remaining = overview.remaining_resources()
            violations = sum(1 for r in remaining if r < 0)
            vals[Metric.NUMBER_OF_RESOURCE_VIOLATIONS] += violations
            for vnf, instances in overview.vnf_instances().items():
                loads = np.asarray(instances.loads, dtype=float)
                vals[Metric.TOTAL_ROOTED_VNF_LOADS] += np.sqrt(loads).sum()
                if violations:
                    vals[Metric.TOTAL_OVERLOADED_VNF_CAPACITY] += loads.sum()
                inverse_loads.extend(vnf.processing_capacity / load for load in loads if load > 0)
        for d in range(len(table.resources)):
            vals[table.used_resource_index(d)] = used[d]
        vals[Metric.MEAN_INVERSE_LOAD_INDEX] = _mean(inverse_loads)
        vals[Metric.MEDIAN_INVERSE_LOAD_INDEX] = _median(inverse_loads)

        # 实例数量
        for overview in self.vnf_overviews().values():
            vals[Metric.NUMBER_OF_VNF_INSTANCES] += overview.total
            if overview.excessive:
                vals[Metric.NUMBER_OF_EXCESSIVE_VNFS] += overview.excessive
                vals[Metric.TOTAL_ROOTED_EXCESSIVE_VNF_CAPACITY] += sum(
                    np.sqrt(np.asarray(inst.loads, dtype=float)).sum()
                    for inst in overview.locations.values()
                )

        # 链路带宽
        vals[Metric.NUMBER_OF_CONGESTED_LINKS] = sum(
            1 for overview in self.link_overviews().values() if overview.remaining_bandwidth() < 0
        )

        # 延迟与跳数
        delay_indices = [a.delay_index for a in self._assignments]
        hops_indices = [a.hops_index for a in self._assignments]
        vals[Metric.TOTAL_DELAY] = sum(a.delay for a in self._assignments)
        vals[Metric.NUMBER_OF_HOPS] = sum(a.hops for a in self._assignments)
        vals[Metric.MEAN_DELAY_INDEX] = _mean(delay_indices)
        vals[Metric.MEDIAN_DELAY_INDEX] = _median(delay_indices)
        vals[Metric.MAX_DELAY_INDEX] = max(delay_indices, default=0.0)
        vals[Metric.MEAN_HOPS_INDEX] = _mean(hops_indices)
        vals[Metric.MEDIAN_HOPS_INDEX] = _median(hops_indices)
        vals[Metric.MAX_HOPS_INDEX] = max(hops_indices, default=0.0)
        vals[Metric.NUMBER_OF_DELAY_VIOLATIONS] = sum(1 for a in self._assignments if a.delay_violated)
        vals[Metric.NUMBER_OF_PAIR_VIOLATIONS] = sum(
            a.pair_violations(self.problem.catalog) for a in self._assignments
        )

        violations = (
            vals[Metric.NUMBER_OF_RESOURCE_VIOLATIONS]
            + vals[Metric.NUMBER_OF_EXCESSIVE_VNFS]
            + vals[Metric.NUMBER_OF_CONGESTED_LINKS]
            + vals[Metric.NUMBER_OF_DELAY_VIOLATIONS]
            + vals[Metric.NUMBER_OF_PAIR_VIOLATIONS]
        )
        vals[Metric.UNFEASIBLE] = 1.0 if violations > 0 else 0.0
        vals.setflags(write=False)
        return vals

    @property
    def is_feasible(self) -> bool:
        return self.metrics[Metric.UNFEASIBLE] == 0.0

    def objective_vector(self) -> np.ndarray:
        """可比较目标向量"""
        return self.objectives.comparable_vector(self.metrics)

    def unfeasible_vector(self) -> np.ndarray:
        """不可行目标向量"""
        return self.objectives.unfeasible_vector(self.metrics)

    def comparison_vector(self) -> np.ndarray:
        """与可行性相符的目标向量"""
        return self.objective_vector() if self.is_feasible else self.unfeasible_vector()

    def metric(self, name: str) -> float:
        """按名称读取原始指标"""
        return float(self.metrics[self.problem.table.index(name)])

    def describe(self) -> str:
        """多行文本摘要，列出指标、剩余容量和每个请求的路径"""
        lines = [f"可行：{self.is_feasible}"]
        for name, value in zip(self.problem.table.names, self.metrics):
            lines.append(f"  {name} = {value:g}")
        for name, overview in self.node_overviews().items():
            instances = ', '.join(
                f"{vnf.name}x{inst.count}" for vnf, inst in overview.vnf_instances().items()
            )
            lines.append(f"节点{name} 剩余资源：{overview.remaining_resources()} 实例：{instances}")
        for overview in self.link_overviews().values():
            lines.append(f"链路{overview.link} 剩余带宽：{overview.remaining_bandwidth():g}")
        for assignment in self._assignments:
            mark = '*' if assignment.delay_violated else ' '
            lines.append(f"{mark} delay={assignment.delay:g} hops={assignment.hops} {assignment!r}")
        return '\n'.join(lines)
