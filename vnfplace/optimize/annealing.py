"""Pareto模拟退火模块。

此模块实现了多目标模拟退火搜索，包括：
1. 几何降温调度：第i级温度为 tmax * rho^i，低于tmin或耗尽预算时停止
2. 每级迭代：按概率选择邻域算子，相对前沿分类候选解并按策略接受
3. 每级重置的“更优”“不可比”计数，供接受概率函数使用
4. 从已有前沿恢复搜索，以及多次独立运行后的前沿合并

Typical usage example:

    from vnfplace.optimize import ParetoSimulatedAnnealing

    optimizer = ParetoSimulatedAnnealing(problem, OptimizerConfig(runtime=5))
    frontier = optimizer.solve()
    frontier = optimizer.solve(initial=frontier)  # 继续搜索
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field, replace
from typing import Iterable, List, Optional, Sequence

import numpy as np

from vnfplace.demand.problem import ProblemInstance
from vnfplace.interfaces.base_optimizer import InitialStrategy, OptimizerConfig, OptimizationStatus
from vnfplace.interfaces.base_policy import AcceptancePolicy, ObjectiveMapping
from vnfplace.network.routing import NoRouteError
from vnfplace.optimize.heuristic import HeuristicOptimizer
from vnfplace.optimize.initial import build_initial
from vnfplace.optimize.neighbour import NeighbourNotFound, NeighbourSelection
from vnfplace.optimize.pareto import Dominance, ParetoFrontier
from vnfplace.optimize.policies import DefaultAcceptancePolicy
from vnfplace.solution.metrics import default_objectives
from vnfplace.solution.solution import Solution

logger = logging.getLogger(__name__)

@dataclass
class AnnealingStatistics:
    """一次运行的统计信息"""
    levels: int = 0            # 完成的温度级别数
    iterations: int = 0        # 总迭代次数（含空操作）
    accepted: int = 0          # 被接受的候选解数
    better: int = 0            # 更优的候选解数
    incomparable: int = 0      # 不可比的候选解数
    worse: int = 0             # 较差的候选解数
    noop: int = 0              # 找不到邻域的空操作数
    frontier_sizes: List[int] = field(default_factory=list)      # 每级结束时的前沿大小
    reassign_moves: List[int] = field(default_factory=list)      # 每级选择重新放置VNF的次数
    new_instance_moves: List[int] = field(default_factory=list)  # 每级选择新建实例的次数

def reassign_probability(p_reassign: float, p_new: float) -> float:
    """每次迭代选择重新放置VNF算子的概率，否则选择新建实例算子

    两个概率之和超过1时按比例归一化。
    """
    total = p_reassign + p_new
    if total > 1:
        return p_reassign / total
    return p_reassign

class ParetoSimulatedAnnealing(HeuristicOptimizer):
    """Pareto模拟退火求解器"""

    def __init__(self, problem: ProblemInstance, config: Optional[OptimizerConfig] = None,
                 policy: Optional[AcceptancePolicy] = None,
                 objectives: Optional[ObjectiveMapping] = None):
        """初始化求解器

        Args:
            problem: 问题实例
            config: 调度参数和初始解策略
            policy: 接受策略，默认使用DefaultAcceptancePolicy
            objectives: 目标映射，默认使用default_objectives
        """
        super().__init__(problem, config)
        self.policy = policy or DefaultAcceptancePolicy.from_config(self.config)
        self.objectives = objectives or default_objectives(problem.table)
        self.statistics = AnnealingStatistics()

    def solve(self, initial: Optional[Iterable[Solution]] = None) -> ParetoFrontier:
        """执行模拟退火搜索

        Args:
            initial: 可选的已有方案（例如上一次运行的前沿），必须属于同一问题实例

        Returns:
            搜索得到的Pareto前沿

        Raises:
            RuntimeError: 求解过程出错
        """
        try:
            self._start_clock()
            self.statistics = AnnealingStatistics()
            rng = np.random.default_rng(self.config.random_seed)
            neighbours = NeighbourSelection(self.problem, self.config, rng)

            if initial is None:
                solutions = [self._initial_solution(rng)]
            else:
                solutions = self._adopt(initial)
            frontier = ParetoFrontier.brute_force(solutions)
            current = frontier[int(rng.integers(len(frontier)))]
            logger.info(
                f"开始模拟退火：初始前沿{len(frontier)}个方案，初始解可行={current.is_feasible}"
            )

            for level in range(self.config.temperature_levels):
                temperature = self.config.tmax * self.config.rho ** level
                if temperature < self.config.tmin or self._should_stop():
                    break
                current = self._run_level(level, temperature, current, frontier, neighbours, rng)
                self.statistics.levels += 1
                self.statistics.frontier_sizes.append(len(frontier))
                logger.debug(
                    f"温度级别{level}（T={temperature:.3f}）完成：前沿{len(frontier)}个方案，"
                    f"累计迭代{self.statistics.iterations}次"
                )

            self._finish(frontier)
            logger.info(
                f"模拟退火结束：{self.statistics.levels}个温度级别，{self.statistics.iterations}次迭代，"
                f"前沿{len(frontier)}个方案，用时{self.elapsed():.2f}s"
            )
            return frontier
        except Exception as e:
            self._status = OptimizationStatus.ERROR
            raise RuntimeError(f"求解过程出错：{str(e)}") from e

    def _run_level(self, level: int, temperature: float, current: Solution,
                   frontier: ParetoFrontier, neighbours: NeighbourSelection,
                   rng: np.random.Generator) -> Solution:
        """执行一个温度级别的迭代，返回新的当前解"""
        better = incomparable = evaluated = 0
        p_reassign = self.policy.p_reassign_vnf(temperature, level)
        p_new = self.policy.p_new_instance(temperature, level)
        reassign_share = reassign_probability(p_reassign, p_new)
        self.statistics.reassign_moves.append(0)
        self.statistics.new_instance_moves.append(0)

        for _ in range(self.config.iterations_per_level):
            if self._should_stop():
                break
            self.statistics.iterations += 1
            try:
                if rng.random() < reassign_share:
                    self.statistics.reassign_moves[-1] += 1
                    candidate = neighbours.reassign_vnf(current)
                else:
                    self.statistics.new_instance_moves[-1] += 1
                    candidate = neighbours.new_instance(current)
            except (NeighbourNotFound, NoRouteError) as e:
                self.statistics.noop += 1
                logger.debug(f"空操作：{str(e)}")
                continue
            evaluated += 1

            relation = frontier.classify(candidate)
            if relation == Dominance.BETTER:
                better += 1
                self.statistics.better += 1
                accept = True
            elif relation == Dominance.INCOMPARABLE:
                incomparable += 1
                self.statistics.incomparable += 1
                probability = self.policy.accept_incomparable(
                    temperature, level, better, incomparable, evaluated)
                accept = rng.random() < probability
            else:
                self.statistics.worse += 1
                probability = self.policy.accept_worse(
                    temperature, level, better, incomparable, evaluated)
                accept = rng.random() < probability

            if accept:
                current = candidate
                self.statistics.accepted += 1
                # 尚无可行解时也保留最好的不可行解
                if candidate.is_feasible or not frontier.feasible():
                    frontier.update(candidate)
        return current

    def _initial_solution(self, rng: np.random.Generator) -> Solution:
        strategy = self.config.strategy
        if strategy != InitialStrategy.SHORT_ANNEAL:
            return build_initial(strategy, self.problem, rng, self.objectives)
        config = self.config
        short = replace(
            config,
            iterations_per_level=max(1, config.iterations_per_level // 4),
            temperature_levels=max(1, config.temperature_levels // 4),
            rho=config.rho ** 2,
            runtime=config.runtime / 4,
            strategy=InitialStrategy.RANDOM,
            random_seed=int(rng.integers(2 ** 31))
        )
        logger.debug("执行缩短的预退火以构造初始解")
        pre_run = ParetoSimulatedAnnealing(self.problem, short, objectives=self.objectives)
        return pre_run.solve()[0]

    def _adopt(self, initial: Iterable[Solution]) -> List[Solution]:
        """校验并接管已有方案

        Raises:
            ValueError: 没有方案或方案属于其他问题实例
        """
        solutions = []
        for solution in initial:
            if solution.problem is not self.problem:
                raise ValueError("已有方案不属于当前问题实例")
            if solution.objectives is not self.objectives:
                solution = solution.copy()
                solution.objectives = self.objectives
            solutions.append(solution)
        if not solutions:
            raise ValueError("已有方案为空")
        return solutions

def run_independent(problem: ProblemInstance, config: OptimizerConfig, seeds: Sequence[int],
                    max_workers: Optional[int] = None,
                    policy: Optional[AcceptancePolicy] = None,
                    objectives: Optional[ObjectiveMapping] = None) -> ParetoFrontier:
    """以不同随机种子并发执行多次独立搜索，并合并得到的前沿

    Args:
        problem: 问题实例，各次运行只读共享
        config: 基础配置，random_seed会被替换
        seeds: 每次运行的随机种子
        max_workers: 线程数上限
        policy: 接受策略
        objectives: 目标映射

    Returns:
        合并后的Pareto前沿
    """
    objectives = objectives or default_objectives(problem.table)
    # 预先填充最短路径缓存，运行期间拓扑只读
    problem.network.warm_up()
    for request in problem.requests:
        for weight in ('delay', 'hops'):
            problem.network.shortest_via_hosts(request.ingress, request.egress, weight)

    def run(seed: int) -> ParetoFrontier:
        optimizer = ParetoSimulatedAnnealing(
            problem, replace(config, random_seed=seed), policy, objectives)
        return optimizer.solve()

    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        frontiers = list(pool.map(run, seeds))
    merged = ParetoFrontier.merge(frontiers)
    logger.info(f"{len(frontiers)}次独立运行合并后前沿{len(merged)}个方案")
    return merged
