"""启发式算法求解器基类模块。

此模块定义了启发式算法求解器的基类，包括：
1. 优化器状态管理
2. 中断与运行时间预算检查
3. 前沿结果管理

子类需要实现具体的solve()方法。

Typical usage example:

    class MyHeuristic(HeuristicOptimizer):
        def solve(self, initial=None) -> ParetoFrontier:
            # 实现具体的启发式算法
            pass

    optimizer = MyHeuristic(problem, config)
    frontier = optimizer.solve()
"""

import time
from typing import Iterable, Optional

from vnfplace.demand.problem import ProblemInstance
from vnfplace.interfaces.base_optimizer import BaseOptimizer, OptimizerConfig, OptimizationStatus
from vnfplace.optimize.pareto import ParetoFrontier
from vnfplace.solution.solution import Solution

class HeuristicOptimizer(BaseOptimizer):
    """启发式算法求解器基类，定义通用接口和状态管理"""

    def __init__(self, problem: ProblemInstance, config: Optional[OptimizerConfig] = None):
        """初始化启发式算法求解器

        Args:
            problem: 问题实例
            config: 优化器配置对象
        """
        super().__init__(problem, config)
        self._interrupted = False
        self._start_time: Optional[float] = None

    def solve(self, initial: Optional[Iterable[Solution]] = None) -> ParetoFrontier:
        """求解VNF放置问题

        Note:
            子类必须实现此方法，提供具体的启发式算法实现
        """
        raise NotImplementedError("子类必须实现solve方法")

    def interrupt(self) -> None:
        """中断求解过程，在下一次迭代开始前生效"""
        self._interrupted = True

    def _start_clock(self) -> None:
        self._interrupted = False
        self._start_time = time.time()
        self._status = OptimizationStatus.RUNNING

    def elapsed(self) -> float:
        """自求解开始经过的秒数"""
        if self._start_time is None:
            return 0.0
        return time.time() - self._start_time

    def _should_stop(self) -> bool:
        """是否已被中断或耗尽运行时间预算"""
        if self._interrupted:
            return True
        return self.config.runtime > 0 and self.elapsed() >= self.config.runtime

    def _finish(self, frontier: ParetoFrontier) -> ParetoFrontier:
        """记录前沿并根据结果设置最终状态"""
        self._frontier = frontier
        if self._interrupted:
            self._status = OptimizationStatus.INTERRUPTED
        elif frontier.feasible():
            self._status = OptimizationStatus.SOLVED
        else:
            self._status = OptimizationStatus.INFEASIBLE
        return frontier
