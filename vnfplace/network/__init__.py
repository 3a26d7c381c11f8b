"""网络拓扑模块。

提供网络拓扑的存储、最短路径计算和基于回溯指针的路由构造。

Typical usage example:

    from vnfplace.network import Network, from_vnf_sequence

    network = Network()
    network.load_nodes("nodes.csv", ["cpu"])
    network.load_links("links.csv")
"""

from .network import Network, cost_function
from .routing import NoRouteError, create_path, from_vnf_sequence, placement_of

__all__ = [
    "Network",
    "cost_function",
    "NoRouteError",
    "create_path",
    "from_vnf_sequence",
    "placement_of"
]
