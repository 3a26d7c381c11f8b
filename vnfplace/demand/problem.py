"""问题实例模块。

ProblemInstance把网络拓扑、VNF目录和流量请求组合为一次运行的只读输入，
并在搜索开始前完成全部一致性校验。
"""

import logging
from typing import Dict, List, Sequence

from vnfplace.catalog.catalog import VnfCatalog
from vnfplace.demand.request import TrafficRequest
from vnfplace.interfaces.base_network import INFINITY, Node
from vnfplace.network.network import Network
from vnfplace.solution.metrics import MetricTable

logger = logging.getLogger(__name__)

class ProblemInstance:
    """一次运行的只读输入集合"""

    def __init__(self, network: Network, catalog: VnfCatalog,
                 requests: Sequence[TrafficRequest], validate: bool = True):
        """初始化问题实例

        Args:
            network: 网络拓扑
            catalog: VNF目录
            requests: 流量请求，顺序即解中流量分配的顺序
            validate: 是否立即执行一致性校验

        Raises:
            ValueError: 输入不一致
        """
        self.network = network
        self.catalog = catalog
        self.requests: List[TrafficRequest] = list(requests)
        self.table = MetricTable(catalog.resources)
        self._index: Dict[int, int] = {r.id: i for i, r in enumerate(self.requests)}
        if validate:
            self.validate()

    def validate(self) -> None:
        """执行加载期校验，任何不一致都会立即抛出异常

        Raises:
            ValueError: 维度不匹配、请求编号重复、节点或VNF类型不存在、
                入口到出口不可达
        """
        dimensions = len(self.catalog.resources)
        for node in self.network.get_nodes():
            if len(node.resources) != dimensions:
                raise ValueError(
                    f"节点{node.name}的资源维度为{len(node.resources)}，目录声明了{dimensions}个维度"
                )
        if len(self._index) != len(self.requests):
            raise ValueError("流量请求编号重复")

        for request in self.requests:
            for name in (request.ingress, request.egress):
                if not self.network.has_node(name):
                    raise ValueError(f"请求{request.id}引用的节点{name}不存在")
            for vnf in request.vnf_sequence:
                if self.catalog.get_vnf(vnf.name) != vnf:
                    raise ValueError(f"请求{request.id}引用的VNF类型{vnf.name}不在目录中")
            if request.vnf_sequence:
                reachable = self.network.shortest_via_hosts(request.ingress, request.egress, 'hops')
            else:
                reachable = self.network.distance(request.ingress, request.egress, 'hops')
            if reachable == INFINITY:
                raise ValueError(f"请求{request.id}从{request.ingress}到{request.egress}不可达")
        logger.info(
            f"问题实例校验通过：{len(self.network.get_nodes())}个节点，"
            f"{len(self.network.get_links())}条链路，{len(self.requests)}个请求"
        )

    def index_of(self, request: TrafficRequest) -> int:
        """请求在请求数组中的位置"""
        return self._index[request.id]

    def candidate_hosts(self, requirement) -> List[Node]:
        """容量足以容纳一个给定需求实例的节点"""
        return [node for node in self.network.get_nodes()
                if node.is_host and node.can_host(requirement)]
