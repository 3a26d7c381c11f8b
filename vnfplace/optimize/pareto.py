"""Pareto支配与前沿模块。

此模块实现了多目标比较和非支配前沿维护，包括：
1. 向量支配关系（最小化）
2. 方案比较：可行解支配所有不可行解，同为不可行时比较不可行目标向量
3. ParetoFrontier：插入时拒绝被支配或相等的候选，并移除被候选支配的成员
4. 多个前沿的批量合并以及导出为pandas.DataFrame

Typical usage example:

    from vnfplace.optimize.pareto import ParetoFrontier

    frontier = ParetoFrontier.brute_force(solutions)
    removed = frontier.update(candidate)
    frontier.save_to_csv("frontier.csv")
"""

import itertools
from enum import Enum, auto
from typing import Iterable, Iterator, List, Optional

import numpy as np
import pandas as pd

from vnfplace.solution.solution import Solution

class Dominance(Enum):
    """候选相对于参照的支配关系"""
    BETTER = auto()        # 候选支配参照
    WORSE = auto()         # 参照支配候选
    EQUAL = auto()         # 两者相等
    INCOMPARABLE = auto()  # 互不支配

def dominates(u, v) -> bool:
    """u是否支配v：每一维都不大于且至少一维严格小于

    Raises:
        ValueError: 向量长度不一致
    """
    u = np.asarray(u, dtype=float)
    v = np.asarray(v, dtype=float)
    if u.shape != v.shape:
        raise ValueError(f"向量长度不一致：{u.shape} 与 {v.shape}")
    return bool(np.all(u <= v) and np.any(u < v))

def compare_vectors(current, candidate) -> Dominance:
    """比较两个目标向量"""
    if dominates(candidate, current):
        return Dominance.BETTER
    if dominates(current, candidate):
        return Dominance.WORSE
    if np.array_equal(np.asarray(current, dtype=float), np.asarray(candidate, dtype=float)):
        return Dominance.EQUAL
    return Dominance.INCOMPARABLE

def compare_solutions(current: Solution, candidate: Solution) -> Dominance:
    """比较两个方案，可行性优先于目标向量"""
    if current.is_feasible != candidate.is_feasible:
        return Dominance.BETTER if candidate.is_feasible else Dominance.WORSE
    return compare_vectors(current.comparison_vector(), candidate.comparison_vector())

class ParetoFrontier:
    """互不支配的方案集合"""

    def __init__(self, solutions: Iterable[Solution] = ()):
        self._members: List[Solution] = []
        for solution in solutions:
            self.update(solution)

    @classmethod
    def brute_force(cls, solutions: Iterable[Solution]) -> 'ParetoFrontier':
        """从任意方案集合中筛选出非支配方案，相等的方案只保留第一个"""
        return cls(solutions)

    @classmethod
    def merge(cls, frontiers: Iterable['ParetoFrontier']) -> 'ParetoFrontier':
        """合并多个前沿，一次性完成跨前沿的支配过滤"""
        return cls.brute_force(itertools.chain.from_iterable(frontiers))

    def update(self, candidate: Solution) -> Optional[List[Solution]]:
        """尝试把候选方案插入前沿

        Args:
            candidate: 候选方案

        Returns:
            被候选方案支配而移除的成员列表；候选被拒绝时返回None
        """
        dominated = []
        for member in self._members:
            relation = compare_solutions(member, candidate)
            if relation in (Dominance.WORSE, Dominance.EQUAL):
                return None
            if relation == Dominance.BETTER:
                dominated.append(member)
        self._members = [m for m in self._members if not any(m is d for d in dominated)]
        self._members.append(candidate)
        return dominated

    def classify(self, candidate: Solution) -> Dominance:
        """判断候选方案相对前沿的关系

        Returns:
            BETTER：支配至少一个成员（前沿为空时亦然）；
            WORSE：被至少一个成员支配或与成员相等；
            INCOMPARABLE：与所有成员互不支配
        """
        if not self._members:
            return Dominance.BETTER
        result = Dominance.INCOMPARABLE
        for member in self._members:
            relation = compare_solutions(member, candidate)
            if relation in (Dominance.WORSE, Dominance.EQUAL):
                return Dominance.WORSE
            if relation == Dominance.BETTER:
                result = Dominance.BETTER
        return result

    def __len__(self) -> int:
        return len(self._members)

    def __iter__(self) -> Iterator[Solution]:
        return iter(self._members)

    def __getitem__(self, index: int) -> Solution:
        return self._members[index]

    @property
    def members(self) -> List[Solution]:
        return list(self._members)

    def feasible(self) -> List[Solution]:
        return [m for m in self._members if m.is_feasible]

    def copy(self) -> 'ParetoFrontier':
        other = ParetoFrontier()
        other._members = list(self._members)
        return other

    def _vectors(self) -> np.ndarray:
        if not self._members:
            raise ValueError("前沿为空")
        return np.vstack([m.comparison_vector() for m in self._members])

    def ideal_point(self) -> np.ndarray:
        """各维度的最小值"""
        return self._vectors().min(axis=0)

    def nadir_point(self) -> np.ndarray:
        """各维度的最大值"""
        return self._vectors().max(axis=0)

    def to_dataframe(self) -> pd.DataFrame:
        """每个成员一行，包含可行性和全部原始指标"""
        if not self._members:
            return pd.DataFrame(columns=['feasible'])
        table = self._members[0].problem.table
        frame = pd.DataFrame(np.vstack([m.metrics for m in self._members]), columns=table.names)
        frame.insert(0, 'feasible', [m.is_feasible for m in self._members])
        return frame

    def save_to_csv(self, csv_path: str) -> None:
        """保存前沿指标到CSV文件"""
        self.to_dataframe().to_csv(csv_path, index_label='solution')
