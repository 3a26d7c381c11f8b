"""核心接口定义模块。

此模块定义了系统的核心抽象接口，包括：
1. BaseNetwork：网络拓扑的抽象基类
2. BaseCatalog：VNF目录的抽象基类
3. ObjectiveMapping / AcceptancePolicy：由外部提供的目标映射与接受策略
4. BaseOptimizer：优化器的抽象基类

Typical usage example:

    from vnfplace.interfaces import BaseNetwork, OptimizerConfig

    config = OptimizerConfig(iterations_per_level=100, runtime=5)
"""

from .base_network import BaseNetwork, Node, Link, PathLabel, Color, INFINITY
from .base_catalog import BaseCatalog, VNF, VnfPair
from .base_policy import ObjectiveMapping, AcceptancePolicy
from .base_optimizer import (
    BaseOptimizer,
    OptimizerConfig,
    OptimizationStatus,
    InitialStrategy
)

__all__ = [
    # 网络拓扑接口
    "BaseNetwork",
    "Node",
    "Link",
    "PathLabel",
    "Color",
    "INFINITY",

    # VNF目录接口
    "BaseCatalog",
    "VNF",
    "VnfPair",

    # 外部策略接口
    "ObjectiveMapping",
    "AcceptancePolicy",

    # 优化器接口
    "BaseOptimizer",
    "OptimizerConfig",
    "OptimizationStatus",
    "InitialStrategy"
]
