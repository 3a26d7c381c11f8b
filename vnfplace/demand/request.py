"""流量请求模块。

此模块定义了流量请求及其加载方式，包括：
1. TrafficRequest：入口、出口、带宽需求、VNF序列和期望延迟
2. 从CSV文件加载请求，VNF名称在加载时立即解析

Typical usage example:

    from vnfplace.demand import load_requests

    requests = load_requests("requests.csv", catalog)
"""

import csv
import logging
from dataclasses import dataclass
from typing import List, Tuple

from vnfplace.catalog.catalog import VnfCatalog
from vnfplace.interfaces.base_catalog import VNF
from vnfplace.interfaces.base_network import INFINITY

logger = logging.getLogger(__name__)

@dataclass(frozen=True, eq=False)
class TrafficRequest:
    """流量请求数据类，按id判等，加载后不可修改"""
    id: int                           # 请求编号
    ingress: str                      # 入口节点名称
    egress: str                       # 出口节点名称
    bandwidth: float                  # 带宽需求
    vnf_sequence: Tuple[VNF, ...]     # 需依次经过的VNF类型
    expected_delay: float = INFINITY  # 端到端延迟上限

    def __post_init__(self):
        if self.bandwidth < 0:
            raise ValueError(f"请求{self.id}的带宽需求不能为负：{self.bandwidth}")
        if self.expected_delay < 0:
            raise ValueError(f"请求{self.id}的期望延迟不能为负：{self.expected_delay}")
        for vnf in self.vnf_sequence:
            if self.bandwidth > vnf.processing_capacity:
                raise ValueError(
                    f"请求{self.id}的带宽{self.bandwidth}超过VNF {vnf.name} "
                    f"的单实例处理能力{vnf.processing_capacity}"
                )

    def __eq__(self, other) -> bool:
        if not isinstance(other, TrafficRequest):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def __str__(self) -> str:
        chain = ','.join(vnf.name for vnf in self.vnf_sequence)
        return f"Request{self.id}({self.ingress}->{self.egress}, {self.bandwidth}, [{chain}])"

def load_requests(request_csv: str, catalog: VnfCatalog) -> List[TrafficRequest]:
    """从CSV文件加载流量请求

    文件包含id、ingress、egress、bandwidth、expected_delay和vnfs列，
    vnfs以分号分隔，可以引用子链名称。expected_delay为空时表示不限。

    Args:
        request_csv: 请求CSV文件路径
        catalog: 用于解析VNF名称的目录

    Returns:
        请求列表，按文件顺序

    Raises:
        FileNotFoundError: 文件不存在
        ValueError: 文件格式错误或VNF名称无法解析
    """
    requests = []
    try:
        with open(request_csv, 'r', newline='') as f:
            reader = csv.DictReader(f)
            for row in reader:
                names = [n for n in row['vnfs'].split(';') if n.strip()]
                expected = (row.get('expected_delay') or '').strip()
                requests.append(TrafficRequest(
                    id=int(row['id']),
                    ingress=row['ingress'].strip(),
                    egress=row['egress'].strip(),
                    bandwidth=float(row['bandwidth']),
                    vnf_sequence=catalog.resolve_sequence(names),
                    expected_delay=float(expected) if expected else INFINITY
                ))
    except FileNotFoundError:
        raise FileNotFoundError(f"请求配置文件不存在：{request_csv}")
    except (KeyError, ValueError) as e:
        raise ValueError(f"请求配置文件格式错误：{str(e)}") from e
    logger.info(f"已加载{len(requests)}个流量请求")
    return requests
