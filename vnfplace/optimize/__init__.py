"""放置优化算法模块。

此模块提供了多目标放置优化所需的全部组件：
1. Pareto支配比较与前沿维护
2. 默认及可替换的接受策略
3. 初始解构造策略
4. 邻域算子
5. Pareto模拟退火搜索及多次独立运行

Typical usage example:

    from vnfplace.optimize import ParetoSimulatedAnnealing, OptimizerConfig

    optimizer = ParetoSimulatedAnnealing(problem, OptimizerConfig(runtime=5))
    frontier = optimizer.solve()
"""

from .pareto import Dominance, ParetoFrontier, compare_solutions, compare_vectors, dominates
from .policies import DefaultAcceptancePolicy, FunctionAcceptancePolicy, effective_levels
from .initial import build_initial
from .neighbour import NeighbourNotFound, NeighbourSelection
from .heuristic import HeuristicOptimizer
from .annealing import AnnealingStatistics, ParetoSimulatedAnnealing, run_independent
from ..interfaces.base_optimizer import OptimizerConfig

__all__ = [
    "Dominance",
    "ParetoFrontier",
    "compare_solutions",
    "compare_vectors",
    "dominates",
    "DefaultAcceptancePolicy",
    "FunctionAcceptancePolicy",
    "effective_levels",
    "build_initial",
    "NeighbourNotFound",
    "NeighbourSelection",
    "HeuristicOptimizer",
    "AnnealingStatistics",
    "ParetoSimulatedAnnealing",
    "run_independent",
    "OptimizerConfig"
]
