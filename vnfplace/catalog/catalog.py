"""VNF目录实现模块。

此模块实现了VNF目录的具体功能，包括：
1. 资源维度声明（如cpu、ram、hdd）
2. VNF类型与命名子链的注册，名称忽略大小写和首尾空白
3. VNF类型之间的有向最大延迟配对约束
4. 从CSV文件加载VNF类型、子链和配对约束

Typical usage example:

    from vnfplace.catalog import VnfCatalog
    from vnfplace.interfaces import VNF

    catalog = VnfCatalog(["cpu"])
    catalog.add_vnf(VNF("fw", (1.0,), processing_capacity=1000))
    catalog.add_chain("web", [catalog.get_vnf("fw")])
    chain = catalog.resolve(" WEB ")
"""

import csv
import logging
from typing import Dict, List, Optional, Sequence, Tuple

from vnfplace.interfaces.base_catalog import BaseCatalog, VNF, VnfPair

logger = logging.getLogger(__name__)

def normalize(name: str) -> str:
    """名称规范化：去除首尾空白并转为小写"""
    return name.strip().lower()

class VnfCatalog(BaseCatalog):
    """VNF目录实现类"""

    def __init__(self, resources: Optional[Sequence[str]] = None):
        """初始化VNF目录

        Args:
            resources: 资源维度名称
        """
        self._resources: List[str] = []
        self._vnfs: Dict[str, VNF] = {}
        self._chains: Dict[str, Tuple[VNF, ...]] = {}
        self._pairs: Dict[Tuple[str, str], VnfPair] = {}
        for resource in resources or []:
            self.add_resource(resource)

    @property
    def resources(self) -> List[str]:
        return list(self._resources)

    def add_resource(self, name: str) -> None:
        """声明一个资源维度

        Raises:
            ValueError: 名称为空或已存在
        """
        if not name or not name.strip():
            raise ValueError("资源名称不能为空")
        if normalize(name) in (normalize(r) for r in self._resources):
            raise ValueError(f"资源{name}已存在")
        self._resources.append(name.strip())

    def add_vnf(self, vnf: VNF) -> VNF:
        """注册VNF类型，同时以其名称注册单元素子链

        Raises:
            ValueError: 资源维度不匹配或名称重复
        """
        if len(vnf.resources) != len(self._resources):
            raise ValueError(
                f"VNF {vnf.name} 的资源维度为{len(vnf.resources)}，目录声明了{len(self._resources)}个维度"
            )
        self.add_chain(vnf.name, [vnf])
        self._vnfs[normalize(vnf.name)] = vnf
        return vnf

    def get_vnf(self, name: str) -> VNF:
        """根据名称获取VNF类型

        Raises:
            ValueError: VNF类型不存在
        """
        try:
            return self._vnfs[normalize(name)]
        except KeyError:
            raise ValueError(f"VNF类型{name}不存在")

    def get_vnfs(self) -> List[VNF]:
        return list(self._vnfs.values())

    def add_chain(self, name: str, chain: Sequence[VNF]) -> None:
        if not name or not name.strip():
            raise ValueError("子链名称不能为空")
        if not chain:
            raise ValueError(f"子链{name}不能为空")
        key = normalize(name)
        if key in self._chains:
            raise ValueError(f"子链名称{name}重复")
        self._chains[key] = tuple(chain)

    def resolve(self, name: str) -> Optional[Tuple[VNF, ...]]:
        return self._chains.get(normalize(name))

    def resolve_sequence(self, names: Sequence[str]) -> Tuple[VNF, ...]:
        """把名称序列展开为完整的VNF序列

        Raises:
            ValueError: 存在无法解析的名称
        """
        sequence: List[VNF] = []
        for name in names:
            chain = self.resolve(name)
            if chain is None:
                raise ValueError(f"无法解析VNF或子链名称：{name}")
            sequence.extend(chain)
        return tuple(sequence)

    def add_pair(self, first: str, second: str, latency: float) -> VnfPair:
        pair = VnfPair(self.get_vnf(first), self.get_vnf(second), float(latency))
        key = (pair.first.name, pair.second.name)
        if key in self._pairs:
            raise ValueError(f"配对约束{first}->{second}重复")
        self._pairs[key] = pair
        return pair

    def get_pair(self, first: VNF, second: VNF) -> Optional[VnfPair]:
        return self._pairs.get((first.name, second.name))

    def get_pairs(self) -> List[VnfPair]:
        return list(self._pairs.values())

    def load_vnfs(self, vnf_csv: str) -> None:
        """从CSV文件加载VNF类型

        文件包含name、delay、processing_capacity、max_instances列以及每个资源维度一列。

        Raises:
            FileNotFoundError: 文件不存在
            ValueError: 文件格式错误
        """
        try:
            with open(vnf_csv, 'r', newline='') as f:
                reader = csv.DictReader(f)
                for row in reader:
                    self.add_vnf(VNF(
                        name=row['name'].strip(),
                        resources=tuple(float(row[r]) for r in self._resources),
                        processing_capacity=float(row['processing_capacity']),
                        delay=float(row.get('delay') or 0.0),
                        max_instances=int(row.get('max_instances') or -1)
                    ))
        except FileNotFoundError:
            raise FileNotFoundError(f"VNF配置文件不存在：{vnf_csv}")
        except (KeyError, ValueError) as e:
            raise ValueError(f"VNF配置文件格式错误：{str(e)}") from e
        logger.info(f"已加载{len(self._vnfs)}种VNF类型")

    def load_chains(self, chain_csv: str) -> None:
        """从CSV文件加载子链，vnfs列以分号分隔

        Raises:
            FileNotFoundError: 文件不存在
            ValueError: 文件格式错误或名称无法解析
        """
        try:
            with open(chain_csv, 'r', newline='') as f:
                reader = csv.DictReader(f)
                for row in reader:
                    names = [n for n in row['vnfs'].split(';') if n.strip()]
                    self.add_chain(row['name'], self.resolve_sequence(names))
        except FileNotFoundError:
            raise FileNotFoundError(f"子链配置文件不存在：{chain_csv}")
        except (KeyError, ValueError) as e:
            raise ValueError(f"子链配置文件格式错误：{str(e)}") from e

    def load_pairs(self, pair_csv: str) -> None:
        """从CSV文件加载配对约束，包含first、second和latency列

        Raises:
            FileNotFoundError: 文件不存在
            ValueError: 文件格式错误、VNF类型不存在或延迟为负
        """
        try:
            with open(pair_csv, 'r', newline='') as f:
                reader = csv.DictReader(f)
                for row in reader:
                    self.add_pair(row['first'], row['second'], float(row['latency']))
        except FileNotFoundError:
            raise FileNotFoundError(f"配对约束文件不存在：{pair_csv}")
        except (KeyError, ValueError) as e:
            raise ValueError(f"配对约束文件格式错误：{str(e)}") from e
        logger.info(f"已加载{len(self._pairs)}条配对约束")
