"""资源核算模块。

此模块实现了节点和链路的资源核算，包括：
1. VnfInstances：某节点上某VNF类型的实例负载和分流情况
2. NodeOverview：节点上的VNF分配，按类型做首次适应递减装箱得到实例数和剩余资源
3. LinkOverview：链路上经过的请求及剩余带宽

装箱结果在节点上缓存，任何分配的添加或移除都会使缓存失效。

Typical usage example:

    overview = NodeOverview(network.get_node("B"))
    for hop in assignment.path:
        if hop.node == "B":
            overview.add_assignment(hop)
    overview.remaining_resources()
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import numpy as np

from vnfplace.demand.request import TrafficRequest
from vnfplace.interfaces.base_catalog import VNF
from vnfplace.interfaces.base_network import Link, Node
from vnfplace.solution.assignment import NodeAssignment
from vnfplace.solution.binpacking import first_fit_decreasing

@dataclass(frozen=True)
class VnfInstances:
    """某节点上某VNF类型的全部实例"""
    node: str                                              # 节点名称
    vnf: VNF                                               # VNF类型
    loads: Tuple[float, ...] = ()                          # 每个实例的负载
    flows: Tuple[Tuple[TrafficRequest, ...], ...] = ()     # 每个实例承载的请求

    @property
    def count(self) -> int:
        return len(self.loads)

    def load_percentage(self) -> np.ndarray:
        """每个实例的负载率"""
        if self.vnf.processing_capacity <= 0:
            return np.ones(self.count)
        return np.asarray(self.loads, dtype=float) / self.vnf.processing_capacity

    def instance_of(self, request: TrafficRequest) -> Optional[int]:
        """请求所在实例的下标，不在该节点时返回None"""
        for i, flows in enumerate(self.flows):
            if request in flows:
                return i
        return None

class NodeOverview:
    """节点资源核算"""

    def __init__(self, node: Node):
        self.node = node
        self._assignments: Dict[int, NodeAssignment] = {}
        self._instances: Optional[Dict[VNF, VnfInstances]] = None

    def _invalidate(self) -> None:
        self._instances = None

    def add_assignment(self, assignment: NodeAssignment) -> None:
        """添加一个分配，仅承载VNF的分配参与核算

        Raises:
            ValueError: 分配所在节点与本节点不符
        """
        if assignment.node != self.node.name:
            raise ValueError(f"分配所在节点{assignment.node}与核算节点{self.node.name}不符")
        if assignment.vnf is None:
            return
        self._assignments[id(assignment)] = assignment
        self._invalidate()

    def remove_assignment(self, assignment: NodeAssignment) -> None:
        """移除一个先前添加的分配

        Raises:
            ValueError: 分配不属于本节点
        """
        if assignment.vnf is None:
            return
        if self._assignments.pop(id(assignment), None) is None:
            raise ValueError(f"节点{self.node.name}上不存在该分配")
        self._invalidate()

    def assignments(self) -> List[NodeAssignment]:
        return list(self._assignments.values())

    def vnf_instances(self) -> Dict[VNF, VnfInstances]:
        """按VNF类型装箱得到的实例，结果缓存至下一次修改"""
        if self._instances is None:
            demands: Dict[VNF, List[Tuple[TrafficRequest, float]]] = {}
            for assignment in self._assignments.values():
                request = assignment.request
                demands.setdefault(assignment.vnf, []).append((request, request.bandwidth))
            instances = {}
            for vnf, items in demands.items():
                packing = first_fit_decreasing(items, vnf.processing_capacity)
                instances[vnf] = VnfInstances(
                    node=self.node.name,
                    vnf=vnf,
                    loads=tuple(packing.loads),
                    flows=tuple(tuple(flows) for flows in packing.items)
                )
            self._instances = instances
        return self._instances

    def instances_of(self, vnf: VNF) -> VnfInstances:
        """某类型在本节点的实例，不存在时返回空实例集"""
        return self.vnf_instances().get(vnf, VnfInstances(self.node.name, vnf))

    def instance_count(self) -> int:
        return sum(inst.count for inst in self.vnf_instances().values())

    def used_resources(self) -> Tuple[float, ...]:
        """已开启实例占用的资源"""
        used = [0.0] * len(self.node.resources)
        for vnf, inst in self.vnf_instances().items():
            for d, requirement in enumerate(vnf.resources):
                used[d] += inst.count * requirement
        return tuple(used)

    def remaining_resources(self) -> Tuple[float, ...]:
        """剩余资源，可能为负；无限容量维度始终为无穷大"""
        return tuple(c - u for c, u in zip(self.node.resources, self.used_resources()))

    def can_open(self, vnf: VNF) -> bool:
        """能否再开启一个该类型的实例"""
        return all(r >= req for r, req in zip(self.remaining_resources(), vnf.resources))

    def copy(self) -> 'NodeOverview':
        other = NodeOverview(self.node)
        other._assignments = dict(self._assignments)
        other._instances = self._instances
        return other

class LinkOverview:
    """链路带宽核算"""

    def __init__(self, link: Link):
        self.link = link
        self.requests: Dict[TrafficRequest, int] = {}

    def add_request(self, request: TrafficRequest) -> None:
        """记录一次请求经过本链路"""
        self.requests[request] = self.requests.get(request, 0) + 1

    def remove_request(self, request: TrafficRequest) -> None:
        """撤销一次经过记录，计数归零时删除该请求

        Raises:
            ValueError: 请求未经过本链路
        """
        count = self.requests.get(request)
        if count is None:
            raise ValueError(f"请求{request.id}未经过链路{self.link}")
        if count == 1:
            del self.requests[request]
        else:
            self.requests[request] = count - 1

    def used_bandwidth(self) -> float:
        return sum(request.bandwidth * count for request, count in self.requests.items())

    def remaining_bandwidth(self) -> float:
        """剩余带宽，可能为负"""
        return self.link.bandwidth - self.used_bandwidth()

    def copy(self) -> 'LinkOverview':
        other = LinkOverview(self.link)
        other.requests = dict(self.requests)
        return other
