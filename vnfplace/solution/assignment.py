"""路由分配模块。

此模块定义了单个请求的路由结果，包括：
1. NodeAssignment：路径上的一跳（节点、可选的VNF类型、入链路）
2. TrafficAssignment：一个请求从入口到出口的完整路径及其延迟、跳数指标

Typical usage example:

    path = [NodeAssignment("A"), NodeAssignment("B", fw, link_ab), NodeAssignment("C", None, link_bc)]
    assignment = TrafficAssignment(request, path, network)
    assignment.delay
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional, Sequence, Tuple

from vnfplace.demand.request import TrafficRequest
from vnfplace.interfaces.base_catalog import BaseCatalog, VNF
from vnfplace.interfaces.base_network import Link

if TYPE_CHECKING:
    from vnfplace.network.network import Network

@dataclass(eq=False)
class NodeAssignment:
    """路径上的一跳，按对象标识区分"""
    node: str                        # 经过的节点名称
    vnf: Optional[VNF] = None        # 在该节点处理的VNF类型，仅转发时为None
    prev: Optional[Link] = None      # 进入该节点的链路，首跳或原地处理时为None
    traffic_assignment: Optional['TrafficAssignment'] = field(default=None, repr=False)

    @property
    def request(self) -> TrafficRequest:
        return self.traffic_assignment.request

def relative_index(value: float, shortest: float) -> float:
    """相对最短值的指数，最短值为0时取1 + value"""
    if shortest > 0:
        return value / shortest
    return 1.0 + value

class TrafficAssignment:
    """一个流量请求的完整路由"""

    def __init__(self, request: TrafficRequest, path: Sequence[NodeAssignment], network: 'Network'):
        """初始化并校验路由

        Args:
            request: 流量请求
            path: 从入口到出口的逐跳分配
            network: 网络拓扑，用于校验链路和计算参考最短值

        Raises:
            ValueError: 路径为空、首尾节点不符、相邻跳不相连或VNF序列不符
        """
        if not path:
            raise ValueError(f"请求{request.id}的路径为空")
        if path[0].node != request.ingress:
            raise ValueError(f"请求{request.id}的路径起点{path[0].node}不是入口{request.ingress}")
        if path[-1].node != request.egress:
            raise ValueError(f"请求{request.id}的路径终点{path[-1].node}不是出口{request.egress}")
        if path[0].prev is not None:
            raise ValueError(f"请求{request.id}的首跳不能有入链路")
        for before, hop in zip(path, path[1:]):
            if hop.prev is None:
                if hop.node != before.node:
                    raise ValueError(f"请求{request.id}的路径中{before.node}与{hop.node}之间缺少链路")
            elif network.get_link(before.node, hop.node) != hop.prev:
                raise ValueError(f"请求{request.id}的路径中链路{hop.prev}不连接{before.node}和{hop.node}")
        vnfs = tuple(hop.vnf for hop in path if hop.vnf is not None)
        if vnfs != request.vnf_sequence:
            raise ValueError(
                f"请求{request.id}的路径VNF序列{[v.name for v in vnfs]}与需求"
                f"{[v.name for v in request.vnf_sequence]}不一致"
            )

        self.request = request
        self.path: Tuple[NodeAssignment, ...] = tuple(path)
        for hop in self.path:
            hop.traffic_assignment = self

        self.vnf_delay = sum(vnf.delay for vnf in vnfs)
        self.link_delay = sum(link.delay for link in self.links())
        self.delay = self.link_delay + self.vnf_delay
        self.hops = len(self.links())

        if request.vnf_sequence:
            shortest_delay = network.shortest_via_hosts(request.ingress, request.egress, 'delay')
            shortest_hops = network.shortest_via_hosts(request.ingress, request.egress, 'hops')
        else:
            shortest_delay = network.distance(request.ingress, request.egress, 'delay')
            shortest_hops = network.distance(request.ingress, request.egress, 'hops')
        self.delay_index = relative_index(self.link_delay, shortest_delay)
        self.hops_index = relative_index(self.hops, shortest_hops)

    def links(self) -> List[Link]:
        """路径经过的链路，按顺序，可能重复"""
        return [hop.prev for hop in self.path if hop.prev is not None]

    def vnf_hops(self) -> List[int]:
        """承载VNF的跳在路径中的位置"""
        return [i for i, hop in enumerate(self.path) if hop.vnf is not None]

    @property
    def delay_violated(self) -> bool:
        return self.delay > self.request.expected_delay

    def pair_violations(self, catalog: BaseCatalog) -> int:
        """违反配对约束的相邻VNF对数

        配对约束限制从前一个VNF所在节点到下一个VNF所在节点之间子路径的链路延迟。
        """
        violations = 0
        positions = self.vnf_hops()
        for start, end in zip(positions, positions[1:]):
            pair = catalog.get_pair(self.path[start].vnf, self.path[end].vnf)
            if pair is None:
                continue
            latency = sum(hop.prev.delay for hop in self.path[start + 1:end + 1]
                          if hop.prev is not None)
            if latency > pair.latency:
                violations += 1
        return violations

    def __repr__(self) -> str:
        hops = ' '.join(
            f"{hop.node}[{hop.vnf.name}]" if hop.vnf else hop.node for hop in self.path
        )
        return f"TrafficAssignment(request={self.request.id}, path={hops})"
