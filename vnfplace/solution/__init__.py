"""方案与资源核算模块。

此模块提供了放置方案的数据模型，包括：
1. 原始指标表与默认目标映射
2. 首次适应递减装箱
3. 逐跳路由分配及其延迟、跳数指标
4. 节点和链路的资源核算
5. 完整方案及其可行性判定

Typical usage example:

    from vnfplace.solution import Solution

    solution = Solution(problem, assignments)
    print(solution.describe())
"""

from .metrics import (
    Metric,
    MetricTable,
    MetricSelection,
    FunctionObjectiveMapping,
    default_objectives
)
from .binpacking import Packing, first_fit_decreasing
from .assignment import NodeAssignment, TrafficAssignment
from .overview import VnfInstances, NodeOverview, LinkOverview
from .solution import Solution, VnfTypeOverview

__all__ = [
    "Metric",
    "MetricTable",
    "MetricSelection",
    "FunctionObjectiveMapping",
    "default_objectives",
    "Packing",
    "first_fit_decreasing",
    "NodeAssignment",
    "TrafficAssignment",
    "VnfInstances",
    "NodeOverview",
    "LinkOverview",
    "Solution",
    "VnfTypeOverview"
]
