"""VNFPlace项目的主入口模块。

此模块提供命令行接口，用于：
1. 加载网络拓扑、VNF目录和流量请求
2. 配置退火调度、初始解策略、目标和接受策略
3. 执行一次或多次独立的Pareto模拟退火搜索
4. 保存前沿指标

Typical usage example:

    python -m vnfplace optimize \
        --nodes nodes.csv \
        --links links.csv \
        --vnfs vnfs.csv \
        --requests requests.csv \
        --resources cpu,ram,hdd \
        --strategy least_delay \
        --output frontier.csv
"""

import argparse
import json
import logging
from typing import List, Optional

from vnfplace.catalog.catalog import VnfCatalog
from vnfplace.demand.problem import ProblemInstance
from vnfplace.demand.request import load_requests
from vnfplace.interfaces.base_optimizer import InitialStrategy, OptimizerConfig
from vnfplace.network.network import Network
from vnfplace.optimize.annealing import ParetoSimulatedAnnealing, run_independent
from vnfplace.optimize.pareto import ParetoFrontier
from vnfplace.optimize.policies import DefaultAcceptancePolicy
from vnfplace.solution.metrics import DEFAULT_UNFEASIBLE, MetricSelection, default_objectives

# 配置日志
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

def _split(value: Optional[str]) -> List[str]:
    return [item.strip() for item in (value or '').split(',') if item.strip()]

def optimize(
    nodes: str,
    links: str,
    vnfs: str,
    requests: str,
    resources: List[str],
    chains: Optional[str] = None,
    pairs: Optional[str] = None,
    directed: bool = False,
    config: Optional[OptimizerConfig] = None,
    objectives: Optional[List[str]] = None,
    policy: Optional[str] = None,
    runs: int = 1,
    output: Optional[str] = None
) -> Optional[ParetoFrontier]:
    """执行放置优化

    Args:
        nodes: 节点配置文件路径
        links: 链路配置文件路径
        vnfs: VNF类型配置文件路径
        requests: 流量请求文件路径
        resources: 资源维度名称
        chains: 子链配置文件路径
        pairs: 配对约束文件路径
        directed: 链路是否为有向
        config: 优化器配置
        objectives: 目标指标名称，为空时使用默认目标
        policy: 接受策略系数JSON文件路径
        runs: 独立运行次数
        output: 前沿输出文件路径

    Returns:
        搜索得到的前沿；加载或求解失败时返回None
    """
    config = config or OptimizerConfig()
    try:
        # 加载网络拓扑
        logger.info("加载网络拓扑...")
        network = Network(directed=directed)
        network.load_nodes(nodes, resources)
        network.load_links(links)
        logger.info(
            f"网络拓扑加载完成：{len(network.get_nodes())}个节点，"
            f"{len(network.get_links())}条链路"
        )

        # 加载VNF目录
        logger.info("加载VNF目录...")
        catalog = VnfCatalog(resources)
        catalog.load_vnfs(vnfs)
        if chains:
            catalog.load_chains(chains)
        if pairs:
            catalog.load_pairs(pairs)

        problem = ProblemInstance(network, catalog, load_requests(requests, catalog))

        if objectives:
            mapping = MetricSelection(problem.table, objectives, DEFAULT_UNFEASIBLE)
        else:
            mapping = default_objectives(problem.table)
        coefficients = {}
        if policy:
            with open(policy, 'r') as f:
                coefficients = json.load(f)
        acceptance = DefaultAcceptancePolicy.from_dict(config, coefficients)

        logger.info(f"使用{config.strategy.name}初始解策略，执行{runs}次独立搜索...")
        if runs > 1:
            seeds = [config.random_seed + i for i in range(runs)]
            frontier = run_independent(problem, config, seeds, policy=acceptance, objectives=mapping)
        else:
            optimizer = ParetoSimulatedAnnealing(problem, config, acceptance, mapping)
            frontier = optimizer.solve()

        logger.info(f"找到{len(frontier)}个非支配方案，其中{len(frontier.feasible())}个可行")
        for i, solution in enumerate(frontier):
            logger.info(f"方案{i}：目标向量={solution.comparison_vector().tolist()}")
            if config.verbose:
                logger.debug(solution.describe())

        # 保存结果
        if output:
            frontier.save_to_csv(output)
            logger.info(f"前沿已保存到{output}")
        return frontier

    except Exception as e:
        logger.error(f"优化失败：{str(e)}")
        return None

def main(argv: Optional[List[str]] = None):
    """命令行入口函数"""
    parser = argparse.ArgumentParser(
        description="VNFPlace多目标VNF链放置优化工具"
    )

    # 添加子命令
    subparsers = parser.add_subparsers(
        dest='command',
        help='可用命令'
    )

    # optimize命令
    optimize_parser = subparsers.add_parser(
        'optimize',
        help='执行放置优化'
    )
    optimize_parser.add_argument('--nodes', required=True, help='节点配置文件路径')
    optimize_parser.add_argument('--links', required=True, help='链路配置文件路径')
    optimize_parser.add_argument('--vnfs', required=True, help='VNF类型配置文件路径')
    optimize_parser.add_argument('--requests', required=True, help='流量请求文件路径')
    optimize_parser.add_argument('--chains', help='子链配置文件路径')
    optimize_parser.add_argument('--pairs', help='配对约束文件路径')
    optimize_parser.add_argument('--resources', default='cpu', help='资源维度名称，以逗号分隔')
    optimize_parser.add_argument('--directed', action='store_true', help='链路为有向链路')
    optimize_parser.add_argument('--iterations', type=int, default=500, help='每个温度级别的迭代次数')
    optimize_parser.add_argument('--levels', type=int, default=50, help='温度级别数')
    optimize_parser.add_argument('--tmax', type=float, default=50.0, help='初始温度')
    optimize_parser.add_argument('--tmin', type=float, default=1.0, help='终止温度')
    optimize_parser.add_argument('--rho', type=float, default=0.75, help='降温系数')
    optimize_parser.add_argument('--runtime', type=float, default=10.0, help='运行时间预算（秒），0表示不限')
    optimize_parser.add_argument('--seed', type=int, default=42, help='随机种子')
    optimize_parser.add_argument(
        '--strategy',
        choices=[s.name.lower() for s in InitialStrategy],
        default='least_delay',
        help='初始解策略'
    )
    optimize_parser.add_argument('--runs', type=int, default=1, help='独立运行次数')
    optimize_parser.add_argument('--objectives', help='目标指标名称，以逗号分隔')
    optimize_parser.add_argument('--policy', help='接受策略系数JSON文件路径')
    optimize_parser.add_argument('--output', help='前沿输出文件路径')
    optimize_parser.add_argument('--verbose', action='store_true', help='输出详细日志')

    # 解析命令行参数
    args = parser.parse_args(argv)

    if args.command == 'optimize':
        if args.verbose:
            logging.getLogger().setLevel(logging.DEBUG)
        try:
            config = OptimizerConfig(
                iterations_per_level=args.iterations,
                temperature_levels=args.levels,
                tmax=args.tmax,
                tmin=args.tmin,
                rho=args.rho,
                runtime=args.runtime,
                random_seed=args.seed,
                strategy=InitialStrategy[args.strategy.upper()],
                verbose=args.verbose
            )
        except ValueError as e:
            parser.error(str(e))
        frontier = optimize(
            nodes=args.nodes,
            links=args.links,
            vnfs=args.vnfs,
            requests=args.requests,
            resources=_split(args.resources),
            chains=args.chains,
            pairs=args.pairs,
            directed=args.directed,
            config=config,
            objectives=_split(args.objectives),
            policy=args.policy,
            runs=args.runs,
            output=args.output
        )
        return 0 if frontier is not None else 1
    parser.print_help()
    return 0

if __name__ == "__main__":
    raise SystemExit(main())
