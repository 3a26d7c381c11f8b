"""接受策略模块。

此模块提供了默认的温度相关策略函数，包括：
1. 算子选择概率：重新放置VNF的概率在前20%的级别取上限，在后20%的级别取下限，中间线性下降
2. 接受较差解和不可比解的概率：随温度下降，并受本级统计计数调节
3. 包装任意外部函数的策略

所有系数均可通过构造参数或字典（例如从JSON文件读取）配置。

Typical usage example:

    policy = DefaultAcceptancePolicy.from_config(config, max_worse=0.1)
    policy.accept_worse(temperature, level, better, incomparable, iterations)
"""

import math
from typing import Callable, Mapping, Optional

from vnfplace.interfaces.base_optimizer import OptimizerConfig
from vnfplace.interfaces.base_policy import AcceptancePolicy

def effective_levels(config: OptimizerConfig) -> int:
    """温度不低于tmin的级别数，不超过temperature_levels"""
    levels = math.floor(math.log(config.tmin / config.tmax) / math.log(config.rho) + 1e-9) + 1
    return max(1, min(config.temperature_levels, levels))

def _ratio(numerator: float, denominator: float) -> float:
    if denominator > 0:
        return numerator / denominator
    return math.inf if numerator > 0 else 0.0

def _clip(value: float) -> float:
    return min(1.0, max(0.0, float(value)))

class DefaultAcceptancePolicy(AcceptancePolicy):
    """默认接受策略"""

    def __init__(self, tmax: float, levels: int,
                 pmin: float = 0.2, pmax: float = 0.8,
                 first: float = 0.2, last: float = 0.8,
                 worse_factor: float = 1.1, incomparable_factor: float = 1.2,
                 max_worse: float = 0.25, max_incomparable: float = 0.5):
        """初始化默认策略

        Args:
            tmax: 初始温度
            levels: 有效温度级别数
            pmin: 重新放置VNF概率的下限
            pmax: 重新放置VNF概率的上限
            first: 概率开始下降的级别比例
            last: 概率降到下限的级别比例
            worse_factor: 接受较差解的系数
            incomparable_factor: 接受不可比解的系数
            max_worse: 接受较差解概率的上限
            max_incomparable: 接受不可比解概率的上限

        Raises:
            ValueError: 参数取值无效
        """
        if not 0 <= pmin <= pmax <= 1:
            raise ValueError(f"概率上下限无效：pmin={pmin}, pmax={pmax}")
        if not 0 <= first < last:
            raise ValueError(f"级别比例无效：first={first}, last={last}")
        self.tmax = tmax
        self.levels = levels
        self.pmin = pmin
        self.pmax = pmax
        self.first = first
        self.last = last
        self.worse_factor = worse_factor
        self.incomparable_factor = incomparable_factor
        self.max_worse = max_worse
        self.max_incomparable = max_incomparable

    @classmethod
    def from_config(cls, config: OptimizerConfig, **coefficients) -> 'DefaultAcceptancePolicy':
        return cls(config.tmax, effective_levels(config), **coefficients)

    @classmethod
    def from_dict(cls, config: OptimizerConfig,
                  coefficients: Optional[Mapping[str, float]] = None) -> 'DefaultAcceptancePolicy':
        """从系数字典构造，未知的键会引发ValueError"""
        coefficients = dict(coefficients or {})
        try:
            return cls.from_config(config, **{k: float(v) for k, v in coefficients.items()})
        except TypeError as e:
            raise ValueError(f"接受策略系数无效：{str(e)}") from e

    def p_reassign_vnf(self, temperature: float, level: int) -> float:
        i1 = self.first * self.levels
        i2 = self.last * self.levels
        p = (i2 - level) / (i2 - i1) * (self.pmax - self.pmin) + self.pmin
        return min(self.pmax, max(self.pmin, p))

    def p_new_instance(self, temperature: float, level: int) -> float:
        return self.p_reassign_vnf(temperature, level) / 2

    def accept_worse(self, temperature: float, level: int,
                     better: int, incomparable: int, iterations: int) -> float:
        scale = temperature / self.tmax * self.worse_factor
        return _clip(min(scale * _ratio(better, iterations), self.max_worse))

    def accept_incomparable(self, temperature: float, level: int,
                            better: int, incomparable: int, iterations: int) -> float:
        scale = temperature / self.tmax * self.incomparable_factor
        return _clip(min(scale * _ratio(better, incomparable), self.max_incomparable))

class FunctionAcceptancePolicy(AcceptancePolicy):
    """包装外部提供的策略函数，结果截断到[0, 1]"""

    def __init__(self,
                 p_reassign_vnf: Callable[[float, int], float],
                 p_new_instance: Callable[[float, int], float],
                 accept_worse: Callable[[float, int, int, int, int], float],
                 accept_incomparable: Callable[[float, int, int, int, int], float]):
        self._p_reassign_vnf = p_reassign_vnf
        self._p_new_instance = p_new_instance
        self._accept_worse = accept_worse
        self._accept_incomparable = accept_incomparable

    def p_reassign_vnf(self, temperature, level):
        return _clip(self._p_reassign_vnf(temperature, level))

    def p_new_instance(self, temperature, level):
        return _clip(self._p_new_instance(temperature, level))

    def accept_worse(self, temperature, level, better, incomparable, iterations):
        return _clip(self._accept_worse(temperature, level, better, incomparable, iterations))

    def accept_incomparable(self, temperature, level, better, incomparable, iterations):
        return _clip(self._accept_incomparable(temperature, level, better, incomparable, iterations))
