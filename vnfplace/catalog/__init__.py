"""VNF目录模块。

提供VNF类型、命名子链和配对约束的注册与查询。

Typical usage example:

    from vnfplace.catalog import VnfCatalog

    catalog = VnfCatalog(["cpu", "ram"])
    catalog.load_vnfs("vnfs.csv")
"""

from .catalog import VnfCatalog, normalize

__all__ = ["VnfCatalog", "normalize"]
