"""VNFPlace - 多目标VNF链放置优化框架。

此包把带有VNF链需求的流量请求放置到物理网络上，在满足节点资源、链路带宽
和延迟约束的前提下，搜索互不支配的放置方案集合（Pareto前沿）。主要功能包括：

1. 网络拓扑管理：节点资源、链路带宽与延迟、最短路径计算
2. VNF目录管理：VNF类型、命名子链和配对延迟约束
3. 资源核算：基于首次适应递减装箱的实例数计算和可行性判定
4. 多目标优化：基于Pareto支配的模拟退火搜索

Typical usage example:

    from vnfplace import Network, VnfCatalog, ProblemInstance, ParetoSimulatedAnnealing

    network = Network()
    network.load_nodes("nodes.csv", ["cpu"])
    network.load_links("links.csv")

    catalog = VnfCatalog(["cpu"])
    catalog.load_vnfs("vnfs.csv")

    problem = ProblemInstance(network, catalog, load_requests("requests.csv", catalog))
    frontier = ParetoSimulatedAnnealing(problem).solve()
"""

from .network.network import Network
from .catalog.catalog import VnfCatalog
from .demand.request import TrafficRequest, load_requests
from .demand.problem import ProblemInstance
from .solution.solution import Solution
from .optimize.pareto import ParetoFrontier
from .optimize.annealing import ParetoSimulatedAnnealing, run_independent
from .interfaces.base_optimizer import OptimizerConfig, InitialStrategy

__version__ = "0.1.0"

__all__ = [
    # 主要组件
    "Network",
    "VnfCatalog",
    "TrafficRequest",
    "load_requests",
    "ProblemInstance",
    "Solution",
    "ParetoFrontier",
    "ParetoSimulatedAnnealing",
    "run_independent",
    "OptimizerConfig",
    "InitialStrategy",

    # 版本信息
    "__version__"
]
