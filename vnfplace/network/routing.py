"""路由构造模块。

此模块基于最短路径回溯指针构造请求的逐跳路径，包括：
1. create_path：沿前驱链路回溯得到两点之间的路径
2. from_vnf_sequence：按给定的VNF放置节点依次拼接最短路径

Typical usage example:

    from vnfplace.network.routing import from_vnf_sequence

    assignment = from_vnf_sequence(request, ["B"], network, weight="delay")
"""

from typing import List, Sequence

from vnfplace.network.network import Network, Weight
from vnfplace.solution.assignment import NodeAssignment, TrafficAssignment
from vnfplace.demand.request import TrafficRequest

class NoRouteError(RuntimeError):
    """两个节点之间不存在路径"""

def create_path(network: Network, start: str, end: str, weight: Weight = 'delay') -> List[NodeAssignment]:
    """构造从start到end的最短路径

    Args:
        network: 网络拓扑
        start: 起点名称
        end: 终点名称
        weight: 路径权重

    Returns:
        逐跳分配列表，首跳为start且没有入链路

    Raises:
        NoRouteError: end从start不可达
    """
    labels = network.shortest_paths(start, weight)
    if not labels[end].reachable:
        raise NoRouteError(f"节点{end}从{start}不可达")
    path = [NodeAssignment(end, prev=labels[end].prev)]
    current = end
    while current != start:
        current = labels[current].prev.other(current)
        path.append(NodeAssignment(current, prev=labels[current].prev))
    path.reverse()
    return path

def from_vnf_sequence(request: TrafficRequest, order: Sequence[str], network: Network,
                      weight: Weight = 'delay') -> TrafficAssignment:
    """按VNF放置节点构造请求的完整路由

    第i个VNF放置在order[i]上，相邻放置节点之间以及入口、出口之间走最短路径。
    连续多个VNF放在同一节点时，后续VNF以无入链路的跳表示。

    Args:
        request: 流量请求
        order: 每个VNF的放置节点名称
        network: 网络拓扑
        weight: 路径权重

    Returns:
        流量分配

    Raises:
        ValueError: 放置节点数与VNF数不一致
        NoRouteError: 某段路径不可达
    """
    if len(order) != len(request.vnf_sequence):
        raise ValueError(
            f"请求{request.id}需要{len(request.vnf_sequence)}个放置节点，实际提供{len(order)}个"
        )
    path = [NodeAssignment(request.ingress)]
    for vnf, node in zip(request.vnf_sequence, order):
        path.extend(create_path(network, path[-1].node, node, weight)[1:])
        if path[-1].vnf is None:
            path[-1].vnf = vnf
        else:
            path.append(NodeAssignment(node, vnf))
    path.extend(create_path(network, path[-1].node, request.egress, weight)[1:])
    return TrafficAssignment(request, path, network)

def placement_of(assignment: TrafficAssignment) -> List[str]:
    """流量分配中每个VNF的放置节点，按链顺序"""
    return [hop.node for hop in assignment.path if hop.vnf is not None]
