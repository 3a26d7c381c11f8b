"""VNF目录接口定义。

此模块定义了VNF目录的核心抽象接口，包括：
1. 资源维度管理：声明资源向量各维度的名称
2. VNF类型与子链：注册和解析命名的VNF链
3. 配对约束：VNF类型之间的最大延迟约束

Typical usage example:

    from vnfplace.interfaces import BaseCatalog, VNF

    class CustomCatalog(BaseCatalog):
        def resolve(self, name):
            # 自定义链解析逻辑
            pass
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Tuple

@dataclass(frozen=True, eq=False)
class VNF:
    """VNF类型数据类，按名称判等"""
    name: str                        # 类型名称
    resources: Tuple[float, ...]     # 每个实例的资源需求向量
    processing_capacity: float       # 每个实例的处理能力（带宽）
    delay: float = 0.0               # 处理延迟
    max_instances: int = -1          # 全网实例数上限，-1表示不限

    def __post_init__(self):
        if not self.name or not self.name.strip():
            raise ValueError("VNF名称不能为空")
        if self.processing_capacity < 0 or self.delay < 0:
            raise ValueError(f"VNF {self.name} 的处理能力和延迟不能为负")
        if any(r < 0 for r in self.resources):
            raise ValueError(f"VNF {self.name} 的资源需求不能为负")
        if self.max_instances < -1:
            raise ValueError(f"VNF {self.name} 的实例上限无效：{self.max_instances}")

    def __eq__(self, other) -> bool:
        if not isinstance(other, VNF):
            return NotImplemented
        return self.name == other.name

    def __hash__(self) -> int:
        return hash(self.name)

    def __str__(self) -> str:
        return self.name

@dataclass(frozen=True)
class VnfPair:
    """VNF配对约束：first的实例到下一个second实例之间的最大延迟"""
    first: VNF
    second: VNF
    latency: float

    def __post_init__(self):
        if self.latency < 0:
            raise ValueError(f"配对{self.first}->{self.second}的最大延迟不能为负：{self.latency}")

class BaseCatalog(ABC):
    """VNF目录抽象基类"""

    @property
    @abstractmethod
    def resources(self) -> List[str]:
        """资源维度名称，按声明顺序"""
        pass

    @abstractmethod
    def add_chain(self, name: str, chain: List[VNF]) -> None:
        """注册命名子链

        Raises:
            ValueError: 名称为空、链为空或名称重复
        """
        pass

    @abstractmethod
    def resolve(self, name: str) -> Optional[Tuple[VNF, ...]]:
        """解析名称（忽略大小写和首尾空白）

        Returns:
            对应的VNF链，如果名称未注册则返回None
        """
        pass

    @abstractmethod
    def add_pair(self, first: str, second: str, latency: float) -> VnfPair:
        """注册有向配对约束

        Raises:
            ValueError: VNF类型不存在、延迟为负或该有向配对已注册
        """
        pass

    @abstractmethod
    def get_pair(self, first: VNF, second: VNF) -> Optional[VnfPair]:
        """查询配对约束

        Returns:
            配对约束，未定义时返回None（表示不受约束）
        """
        pass
