"""外部策略接口定义。

此模块定义了搜索核心从外部获取的两类能力：
1. 目标映射：把原始指标向量映射为可比较的目标向量
2. 接受策略：与温度相关的算子选择概率和接受概率

两类能力均为固定签名的纯函数，核心不关心其具体实现方式。

Typical usage example:

    from vnfplace.interfaces import ObjectiveMapping

    class CostOnly(ObjectiveMapping):
        def comparable_vector(self, raw):
            return raw[[1]]

        def unfeasible_vector(self, raw):
            return raw[[0, 1]]
"""

from abc import ABC, abstractmethod

import numpy as np

class ObjectiveMapping(ABC):
    """目标映射抽象基类，输入长度等于指标表长度"""

    @abstractmethod
    def comparable_vector(self, raw: np.ndarray) -> np.ndarray:
        """可行解的可比较目标向量（越小越好）"""
        pass

    @abstractmethod
    def unfeasible_vector(self, raw: np.ndarray) -> np.ndarray:
        """不可行解的目标向量（越小越好）"""
        pass

class AcceptancePolicy(ABC):
    """接受策略抽象基类，所有返回值位于[0, 1]"""

    @abstractmethod
    def p_reassign_vnf(self, temperature: float, level: int) -> float:
        """选择“重新放置VNF”算子的概率"""
        pass

    @abstractmethod
    def p_new_instance(self, temperature: float, level: int) -> float:
        """选择“新建实例”算子的概率"""
        pass

    @abstractmethod
    def accept_worse(self, temperature: float, level: int,
                     better: int, incomparable: int, iterations: int) -> float:
        """接受较差候选解的概率"""
        pass

    @abstractmethod
    def accept_incomparable(self, temperature: float, level: int,
                            better: int, incomparable: int, iterations: int) -> float:
        """接受不可比候选解的概率"""
        pass
