"""流量需求模块。

Typical usage example:

    from vnfplace.demand import ProblemInstance, load_requests

    requests = load_requests("requests.csv", catalog)
    problem = ProblemInstance(network, catalog, requests)
"""

from .request import TrafficRequest, load_requests
from .problem import ProblemInstance

__all__ = ["TrafficRequest", "load_requests", "ProblemInstance"]
