"""优化器接口定义。

此模块定义了优化器的核心抽象接口，包括：
1. 配置管理：退火调度参数和初始解策略
2. 求解控制：执行和中断优化过程
3. 状态跟踪：监控优化进度
4. 结果管理：获取Pareto前沿

Typical usage example:

    from vnfplace.interfaces import BaseOptimizer, OptimizerConfig

    class CustomOptimizer(BaseOptimizer):
        def solve(self, initial=None):
            # 自定义优化逻辑
            pass
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING, Iterable, Optional

if TYPE_CHECKING:
    from vnfplace.demand.problem import ProblemInstance
    from vnfplace.optimize.pareto import ParetoFrontier
    from vnfplace.solution.solution import Solution

class OptimizationStatus(Enum):
    """优化状态枚举类"""
    NOT_STARTED = auto()  # 未开始
    RUNNING = auto()      # 运行中
    SOLVED = auto()       # 已找到可行解
    INFEASIBLE = auto()   # 前沿中只有不可行解
    ERROR = auto()        # 求解出错
    INTERRUPTED = auto()  # 已中断

class InitialStrategy(Enum):
    """初始解构造策略"""
    RANDOM = auto()        # 随机构造
    SHORT_ANNEAL = auto()  # 缩短的预退火
    LEAST_DELAY = auto()   # 最小延迟路径
    LEAST_CPU = auto()     # 最少资源（贪心中心度）

@dataclass
class OptimizerConfig:
    """优化器配置数据类"""
    iterations_per_level: int = 500    # 每个温度级别的迭代次数s
    temperature_levels: int = 50       # 温度级别数m
    tmax: float = 50.0                 # 初始温度
    tmin: float = 1.0                  # 终止温度
    rho: float = 0.75                  # 降温系数
    runtime: float = 10.0              # 运行时间预算（秒），<=0表示不限
    random_seed: int = 42              # 随机种子
    strategy: InitialStrategy = InitialStrategy.LEAST_DELAY  # 初始解策略
    verbose: bool = False              # 是否输出详细日志
    use_weights: bool = True           # 选择邻域目标时是否按指标加权
    use_delay_in_weights: bool = True  # 权重中是否包含延迟指数
    use_hops_in_weights: bool = True   # 权重中是否包含跳数指数

    def __post_init__(self):
        if self.iterations_per_level < 1:
            raise ValueError(f"每级迭代次数必须至少为1：{self.iterations_per_level}")
        if self.temperature_levels < 1:
            raise ValueError(f"温度级别数必须至少为1：{self.temperature_levels}")
        if self.tmax <= 0 or self.tmin <= 0:
            raise ValueError("温度必须为正数")
        if self.tmax <= self.tmin:
            raise ValueError(f"初始温度必须大于终止温度：tmax={self.tmax}, tmin={self.tmin}")
        if not 0 < self.rho < 1:
            raise ValueError(f"降温系数必须位于(0, 1)：{self.rho}")

class BaseOptimizer(ABC):
    """优化器抽象基类"""

    def __init__(self, problem: 'ProblemInstance', config: Optional[OptimizerConfig] = None):
        """初始化优化器

        Args:
            problem: 已校验的问题实例（拓扑、目录和流量需求）
            config: 优化器配置
        """
        self.problem = problem
        self.config = config or OptimizerConfig()
        self._status = OptimizationStatus.NOT_STARTED
        self._frontier: Optional['ParetoFrontier'] = None

    @property
    def status(self) -> OptimizationStatus:
        """获取优化状态"""
        return self._status

    @property
    def frontier(self) -> Optional['ParetoFrontier']:
        """获取最近一次求解得到的Pareto前沿"""
        return self._frontier

    @abstractmethod
    def solve(self, initial: Optional[Iterable['Solution']] = None) -> 'ParetoFrontier':
        """执行优化求解

        Args:
            initial: 可选的已有解（例如先前的前沿），用于恢复搜索

        Returns:
            搜索得到的Pareto前沿
        """
        pass

    @abstractmethod
    def interrupt(self) -> None:
        """中断优化过程"""
        pass
