"""网络拓扑接口定义。

此模块定义了网络拓扑的核心抽象接口，包括：
1. 节点管理：添加和查询带资源容量的节点
2. 链路管理：添加和查询带宽与延迟确定的链路
3. 路径计算：单源最短路径及回溯指针

节点与链路以名称为键存放于拓扑内部的图结构中，所有引用均通过名称查找，
不持有对象所有权。

Typical usage example:

    from vnfplace.interfaces import BaseNetwork, Node, Link

    class CustomNetwork(BaseNetwork):
        def add_node(self, name, resources) -> Node:
            # 自定义节点添加逻辑
            pass
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, List, Optional, Tuple

INFINITY = float('inf')

@dataclass(frozen=True)
class Node:
    """物理节点数据类"""
    name: str                      # 节点名称，拓扑内唯一
    resources: Tuple[float, ...]   # 资源容量向量，可包含无穷大

    def can_host(self, requirement: Tuple[float, ...]) -> bool:
        """判断节点容量是否足以容纳一个给定需求的实例"""
        return all(c >= r for c, r in zip(self.resources, requirement))

    @property
    def is_host(self) -> bool:
        """节点是否具备任何正资源"""
        return any(c > 0 for c in self.resources)

@dataclass(frozen=True, eq=False)
class Link:
    """物理链路数据类

    无向链路的两个方向被视为同一条链路。
    """
    node1: str               # 起点名称
    node2: str               # 终点名称
    bandwidth: float         # 带宽容量
    delay: float             # 传输延迟
    directed: bool = False   # 是否为有向链路

    @property
    def key(self):
        if self.directed:
            return (self.node1, self.node2)
        return frozenset((self.node1, self.node2))

    def other(self, name: str) -> str:
        """返回链路另一端的节点名称"""
        if name == self.node1:
            return self.node2
        if name == self.node2:
            return self.node1
        raise ValueError(f"节点{name}不在链路{self}上")

    def __eq__(self, other) -> bool:
        if not isinstance(other, Link):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)

    def __str__(self) -> str:
        arrow = '->' if self.directed else '--'
        return f"{self.node1}{arrow}{self.node2}"

class Color(IntEnum):
    """最短路径标记颜色"""
    UNVISITED = 0  # 未访问
    FRONTIER = 1   # 位于优先队列中
    SETTLED = 2    # 距离已确定

@dataclass
class PathLabel:
    """最短路径标签，记录到达节点的距离和前驱链路"""
    node: str
    distance: float = INFINITY
    prev: Optional[Link] = None
    color: Color = Color.UNVISITED

    @property
    def reachable(self) -> bool:
        return self.distance != INFINITY

class BaseNetwork(ABC):
    """网络拓扑抽象基类"""

    @abstractmethod
    def add_node(self, name: str, resources: Tuple[float, ...]) -> Node:
        """添加节点

        Args:
            name: 节点名称
            resources: 资源容量向量

        Returns:
            新建的节点对象

        Raises:
            ValueError: 节点名称已存在
        """
        pass

    @abstractmethod
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
            ValueError: 自环、重复链路或节点不存在
        """
        pass

    @abstractmethod
    def get_node(self, name: str) -> Node:
        """根据名称获取节点

        Raises:
            ValueError: 节点不存在
        """
        pass

    @abstractmethod
    def get_nodes(self) -> List[Node]:
        """获取所有节点，按添加顺序"""
        pass

    @abstractmethod
    def get_links(self) -> List[Link]:
        """获取所有链路，按添加顺序"""
        pass

    @abstractmethod
    def shortest_paths(self, source: str, weight='delay') -> Dict[str, PathLabel]:
        """计算单源最短路径

        Args:
            source: 源节点名称
            weight: 'delay'、'hops'或以链路为参数的代价函数

        Returns:
            节点名称到最短路径标签的映射，不可达节点的距离为无穷大
        """
        pass
