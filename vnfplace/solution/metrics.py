"""原始指标表模块。

原始指标向量的下标在一次运行中固定：先是Metric枚举中的固定指标，
然后是每个资源维度的总使用量TOTAL_USED_<资源名>，按目录声明顺序排列。
目标映射的输入长度始终等于MetricTable.size。

此模块同时提供按指标名称组合目标向量的默认目标映射。
"""

from enum import IntEnum
from typing import Callable, List, Sequence

import numpy as np

from vnfplace.interfaces.base_policy import ObjectiveMapping

class Metric(IntEnum):
    """固定指标及其下标"""
    UNFEASIBLE = 0                        # 是否不可行（0或1）
    MEAN_DELAY_INDEX = 1                  # 延迟指数均值
    MEDIAN_DELAY_INDEX = 2                # 延迟指数中位数
    MAX_DELAY_INDEX = 3                   # 延迟指数最大值
    TOTAL_DELAY = 4                       # 所有请求的总延迟
    MEAN_HOPS_INDEX = 5                   # 跳数指数均值
    MEDIAN_HOPS_INDEX = 6                 # 跳数指数中位数
    MAX_HOPS_INDEX = 7                    # 跳数指数最大值
    NUMBER_OF_HOPS = 8                    # 总跳数
    MEAN_INVERSE_LOAD_INDEX = 9           # 实例处理能力与负载之比的均值
    MEDIAN_INVERSE_LOAD_INDEX = 10        # 实例处理能力与负载之比的中位数
    NUMBER_OF_VNF_INSTANCES = 11          # 实例总数
    TOTAL_ROOTED_VNF_LOADS = 12           # 实例负载平方根之和
    NUMBER_OF_DELAY_VIOLATIONS = 13       # 超过期望延迟的请求数
    NUMBER_OF_PAIR_VIOLATIONS = 14        # 违反配对约束的次数
    NUMBER_OF_RESOURCE_VIOLATIONS = 15    # 资源超限的节点维度数
    NUMBER_OF_EXCESSIVE_VNFS = 16         # 超出实例上限的实例数
    NUMBER_OF_CONGESTED_LINKS = 17        # 带宽超限的链路数
    TOTAL_OVERLOADED_VNF_CAPACITY = 18    # 资源超限节点上的实例负载之和
    TOTAL_ROOTED_EXCESSIVE_VNF_CAPACITY = 19  # 超限类型的实例负载平方根之和

class MetricTable:
    """一次运行使用的指标下标表"""

    def __init__(self, resources: Sequence[str]):
        self.resources: List[str] = list(resources)
        self.names: List[str] = [m.name for m in Metric] + [
            self.used_resource_name(r) for r in self.resources
        ]
        self._index = {name: i for i, name in enumerate(self.names)}

    @staticmethod
    def used_resource_name(resource: str) -> str:
        return f"TOTAL_USED_{resource.upper()}"

    @property
    def size(self) -> int:
        return len(self.names)

    def index(self, name: str) -> int:
        """根据指标名称获取下标（忽略大小写）

        Raises:
            ValueError: 指标不存在
        """
        try:
            return self._index[name.strip().upper()]
        except KeyError:
            raise ValueError(f"未知指标：{name}，可用指标：{', '.join(self.names)}")

    def used_resource_index(self, dimension: int) -> int:
        """第dimension个资源维度总使用量的下标"""
        return len(Metric) + dimension

class MetricSelection(ObjectiveMapping):
    """按指标名称选择目标向量的映射

    每一项可以是单个指标名称，也可以是以“+”连接的多个名称（取和）。
    """

    def __init__(self, table: MetricTable, comparable: Sequence[str], unfeasible: Sequence[str]):
        if not comparable or not unfeasible:
            raise ValueError("目标向量不能为空")
        self.table = table
        self.comparable_names = list(comparable)
        self.unfeasible_names = list(unfeasible)
        self._comparable = [self._parse(entry) for entry in comparable]
        self._unfeasible = [self._parse(entry) for entry in unfeasible]

    def _parse(self, entry: str) -> List[int]:
        return [self.table.index(name) for name in entry.split('+')]

    def _select(self, raw: np.ndarray, entries: List[List[int]]) -> np.ndarray:
        if len(raw) != self.table.size:
            raise ValueError(f"原始指标向量长度为{len(raw)}，指标表长度为{self.table.size}")
        return np.array([raw[indices].sum() for indices in entries], dtype=float)

    def comparable_vector(self, raw: np.ndarray) -> np.ndarray:
        return self._select(raw, self._comparable)

    def unfeasible_vector(self, raw: np.ndarray) -> np.ndarray:
        return self._select(raw, self._unfeasible)

class FunctionObjectiveMapping(ObjectiveMapping):
    """包装外部提供的两个纯函数"""

    def __init__(self, comparable: Callable[[np.ndarray], Sequence[float]],
                 unfeasible: Callable[[np.ndarray], Sequence[float]]):
        self._comparable = comparable
        self._unfeasible = unfeasible

    def comparable_vector(self, raw: np.ndarray) -> np.ndarray:
        return np.asarray(self._comparable(raw), dtype=float)

    def unfeasible_vector(self, raw: np.ndarray) -> np.ndarray:
        return np.asarray(self._unfeasible(raw), dtype=float)

DEFAULT_UNFEASIBLE = [
    Metric.MEAN_DELAY_INDEX.name,
    Metric.MEAN_HOPS_INDEX.name,
    Metric.MEAN_INVERSE_LOAD_INDEX.name,
    '+'.join([
        Metric.NUMBER_OF_DELAY_VIOLATIONS.name,
        Metric.NUMBER_OF_PAIR_VIOLATIONS.name,
        Metric.NUMBER_OF_RESOURCE_VIOLATIONS.name,
        Metric.NUMBER_OF_CONGESTED_LINKS.name,
    ]),
    Metric.TOTAL_OVERLOADED_VNF_CAPACITY.name,
    Metric.TOTAL_ROOTED_EXCESSIVE_VNF_CAPACITY.name,
]

def default_objectives(table: MetricTable) -> MetricSelection:
    """默认目标：平均延迟指数、第一个资源维度的总使用量和实例总数"""
    used = (MetricTable.used_resource_name(table.resources[0]) if table.resources
            else Metric.TOTAL_DELAY.name)
    comparable = [Metric.MEAN_DELAY_INDEX.name, used, Metric.NUMBER_OF_VNF_INSTANCES.name]
    return MetricSelection(table, comparable, DEFAULT_UNFEASIBLE)
