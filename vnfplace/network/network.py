"""网络拓扑实现模块。

此模块实现了网络拓扑的具体功能，包括：
1. 使用NetworkX图结构保存节点与链路（以名称为键）
2. 基于优先队列的Dijkstra算法计算单源最短路径及回溯指针
3. 支持延迟加权和跳数加权两种代价，以及自定义代价函数
4. 从CSV文件加载节点和链路配置

最短路径结果按(权重, 源节点)缓存，任何节点或链路的添加都会清空缓存。

Typical usage example:

    from vnfplace.network import Network

    network = Network()
    network.add_node("A", (0.0,))
    network.add_node("B", (16.0,))
    network.add_link("A", "B", bandwidth=10000, delay=1)
    labels = network.shortest_paths("A", weight="hops")
"""

import csv
import heapq
import itertools
import logging
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple, Union

import networkx as nx

from vnfplace.interfaces.base_network import (
    BaseNetwork, Color, INFINITY, Link, Node, PathLabel
)

logger = logging.getLogger(__name__)

Weight = Union[str, Callable[[Link], float]]

def cost_function(weight: Weight) -> Callable[[Link], float]:
    """把权重名称转换为链路代价函数

    Args:
        weight: 'delay'、'hops'或自定义代价函数

    Returns:
        以链路为参数的代价函数

    Raises:
        ValueError: 未知的权重名称
    """
    if callable(weight):
        return weight
    if weight == 'delay':
        return lambda link: link.delay
    if weight == 'hops':
        return lambda link: 1.0
    raise ValueError(f"未知的路径权重：{weight}")

class Network(BaseNetwork):
    """网络拓扑实现类"""

    def __init__(self, directed: bool = False):
        """初始化网络拓扑

        Args:
            directed: 链路是否为有向链路
        """
        self._directed = directed
        self._graph = nx.DiGraph() if directed else nx.Graph()
        self._links: Dict[object, Link] = {}
        self._shortest_paths: Dict[Tuple[str, str], Dict[str, PathLabel]] = {}
        self._host_distances: Dict[Tuple[str, str, str], float] = {}

    @property
    def directed(self) -> bool:
        return self._directed

    def _clear_cache(self) -> None:
        self._shortest_paths.clear()
        self._host_distances.clear()

    def add_node(self, name: str, resources: Sequence[float]) -> Node:
        """添加节点

        Args:
            name: 节点名称
            resources: 资源容量向量，可使用float('inf')表示无限容量

        Returns:
            新建的节点对象

        Raises:
            ValueError: 名称为空、名称已存在或容量为负
        """
        if not name:
            raise ValueError("节点名称不能为空")
        if name in self._graph:
            raise ValueError(f"节点{name}已存在")
        capacities = tuple(float(r) for r in resources)
        if any(c < 0 for c in capacities):
            raise ValueError(f"节点{name}的资源容量不能为负：{capacities}")
        node = Node(name, capacities)
        self._graph.add_node(name, node=node)
        self._clear_cache()
        return node

    def add_link(self, node1: str, node2: str, bandwidth: float, delay: float) -> Link:
        """添加链路

        Args:
            node1: 起点名称
            node2: 终点名称
            bandwidth: 带宽容量
            delay: 传输延迟

        Returns:
            新建的链路对象

        Raises:
            ValueError: 节点不存在、自环、重复链路或参数为负
        """
        for name in (node1, node2):
            if name not in self._graph:
                raise ValueError(f"节点{name}不存在")
        if node1 == node2:
            raise ValueError(f"节点{node1}不能与自身相连")
        if bandwidth < 0 or delay < 0:
            raise ValueError(f"链路{node1}-{node2}的带宽和延迟不能为负")
        link = Link(node1, node2, float(bandwidth), float(delay), self._directed)
        if link.key in self._links:
            raise ValueError(f"链路{link}重复添加")
        self._links[link.key] = link
        self._graph.add_edge(node1, node2, link=link)
        self._clear_cache()
        return link

    def add_both_links(self, node1: str, node2: str, bandwidth: float, delay: float) -> List[Link]:
        """在有向网络中添加一对方向相反的链路

        Returns:
            新建的链路列表；无向网络中只有一条
        """
        links = [self.add_link(node1, node2, bandwidth, delay)]
        if self._directed:
            links.append(self.add_link(node2, node1, bandwidth, delay))
        return links

    def has_node(self, name: str) -> bool:
        return name in self._graph

    def get_node(self, name: str) -> Node:
        """获取节点对象

        Raises:
            ValueError: 节点不存在
        """
        if name not in self._graph:
            raise ValueError(f"节点{name}不存在")
        return self._graph.nodes[name]['node']

    def get_nodes(self) -> List[Node]:
        return [data['node'] for _, data in self._graph.nodes(data=True)]

    def get_links(self) -> List[Link]:
        return list(self._links.values())

    def get_link(self, node1: str, node2: str) -> Optional[Link]:
        """获取两个节点之间的链路，不存在时返回None"""
        data = self._graph.get_edge_data(node1, node2)
        return data['link'] if data else None

    def out_links(self, name: str) -> List[Link]:
        """获取从节点出发的链路，按添加顺序"""
        return [data['link'] for data in self._graph.adj[name].values()]

    def hosts(self) -> List[Node]:
        """获取具备正资源、可承载VNF的节点"""
        return [node for node in self.get_nodes() if node.is_host]

    def shortest_paths(self, source: str, weight: Weight = 'delay') -> Dict[str, PathLabel]:
        """计算单源最短路径

        使用带颜色标记的优先队列Dijkstra算法，距离相同时按入队顺序出队。
        只缓存按名称指定的权重。返回的映射为共享缓存，调用方不得修改。

        Args:
            source: 源节点名称
            weight: 'delay'、'hops'或自定义代价函数

        Returns:
            节点名称到最短路径标签的映射，不可达节点的距离为无穷大

        Raises:
            ValueError: 源节点不存在或存在负代价链路
        """
        if source not in self._graph:
            raise ValueError(f"节点{source}不存在")
        cache_key = (weight, source) if isinstance(weight, str) else None
        if cache_key is not None and cache_key in self._shortest_paths:
            return self._shortest_paths[cache_key]

        cost = cost_function(weight)
        labels = {name: PathLabel(name) for name in self._graph.nodes}
        labels[source].distance = 0.0
        labels[source].color = Color.FRONTIER
        counter = itertools.count()
        queue = [(0.0, next(counter), source)]

        while queue:
            distance, _, name = heapq.heappop(queue)
            label = labels[name]
            # 惰性删除：跳过过期的队列项
            if label.color == Color.SETTLED or distance > label.distance:
                continue
            label.color = Color.SETTLED
            for link in self.out_links(name):
                link_cost = cost(link)
                if link_cost < 0:
                    raise ValueError(f"链路{link}的代价为负：{link_cost}")
                neighbour = labels[link.other(name)]
                if neighbour.color == Color.SETTLED:
                    continue
                candidate = distance + link_cost
                if candidate < neighbour.distance:
                    neighbour.distance = candidate
                    neighbour.prev = link
                    neighbour.color = Color.FRONTIER
                    heapq.heappush(queue, (candidate, next(counter), neighbour.node))

        if cache_key is not None:
            self._shortest_paths[cache_key] = labels
        return labels

    def distance(self, source: str, target: str, weight: Weight = 'delay') -> float:
        """两个节点之间的最短距离，不可达时为无穷大"""
        return self.shortest_paths(source, weight)[target].distance

    def shortest_middle_station(self, start: str, end: str, choices: Iterable[str],
                                weight: Weight = 'delay') -> Optional[str]:
        """在候选节点中选择使 d(start, n) + d(n, end) 最小的中转节点

        Args:
            start: 起点名称
            end: 终点名称
            choices: 候选节点名称
            weight: 路径权重

        Returns:
            最优中转节点名称；若所有候选均不可达则返回None
        """
        from_start = self.shortest_paths(start, weight)
        best, best_distance = None, INFINITY
        for name in choices:
            total = from_start[name].distance + self.shortest_paths(name, weight)[end].distance
            if total < best_distance:
                best, best_distance = name, total
        return best

    def shortest_via_hosts(self, start: str, end: str, weight: str = 'delay') -> float:
        """经过至少一个可承载节点从start到end的最短距离（结果缓存）"""
        key = (weight, start, end)
        if key not in self._host_distances:
            station = self.shortest_middle_station(
                start, end, [node.name for node in self.hosts()], weight
            )
            if station is None:
                self._host_distances[key] = INFINITY
            else:
                self._host_distances[key] = (
                    self.distance(start, station, weight) + self.distance(station, end, weight)
                )
        return self._host_distances[key]

    def warm_up(self, weights: Sequence[str] = ('delay', 'hops')) -> None:
        """预先计算并缓存所有源节点的最短路径，供多个线程只读共享"""
        for weight in weights:
            for name in self._graph.nodes:
                self.shortest_paths(name, weight)

    def to_networkx(self) -> nx.Graph:
        """返回底层图结构的只读视图"""
        return self._graph.copy(as_view=True)

    def load_nodes(self, node_csv: str, resources: Sequence[str]) -> None:
        """从CSV文件加载节点配置

        Args:
            node_csv: 节点配置CSV文件路径，包含name列和每个资源维度一列
            resources: 资源维度名称，按目录中的顺序

        Raises:
            FileNotFoundError: 文件不存在
            ValueError: 文件格式错误或节点重复
        """
        try:
            with open(node_csv, 'r', newline='') as f:
                reader = csv.DictReader(f)
                for row in reader:
                    self.add_node(
                        row['name'].strip(),
                        [float(row[resource]) for resource in resources]
                    )
        except FileNotFoundError:
            raise FileNotFoundError(f"节点配置文件不存在：{node_csv}")
        except (KeyError, ValueError) as e:
            raise ValueError(f"节点配置文件格式错误：{str(e)}") from e
        logger.info(f"已加载{self._graph.number_of_nodes()}个节点")

    def load_links(self, link_csv: str) -> None:
        """从CSV文件加载链路配置

        Args:
            link_csv: 链路配置CSV文件路径，包含source、target、bandwidth和delay列

        Raises:
            FileNotFoundError: 文件不存在
            ValueError: 文件格式错误、节点不存在、自环或重复链路
        """
        try:
            with open(link_csv, 'r', newline='') as f:
                reader = csv.DictReader(f)
                for row in reader:
                    self.add_link(
                        row['source'].strip(),
                        row['target'].strip(),
                        bandwidth=float(row['bandwidth']),
                        delay=float(row['delay'])
                    )
        except FileNotFoundError:
            raise FileNotFoundError(f"链路配置文件不存在：{link_csv}")
        except (KeyError, ValueError) as e:
            raise ValueError(f"链路配置文件格式错误：{str(e)}") from e
        logger.info(f"已加载{len(self._links)}条链路")
