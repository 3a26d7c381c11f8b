"""VNF目录测试"""

import pytest

from vnfplace.catalog.catalog import VnfCatalog
from vnfplace.interfaces.base_catalog import VNF

def test_resolve_is_case_and_whitespace_insensitive(catalog):
    fw = catalog.get_vnf("fw")
    catalog.add_chain("Web Service", [fw, catalog.get_vnf("nat")])
    assert catalog.resolve("  web service ") == (fw, catalog.get_vnf("nat"))
    assert catalog.resolve("FW") == (fw,)
    assert catalog.resolve("unknown") is None

def test_add_chain_validation(catalog):
    fw = catalog.get_vnf("fw")
    with pytest.raises(ValueError, match="不能为空"):
        catalog.add_chain("empty", [])
    with pytest.raises(ValueError, match="不能为空"):
        catalog.add_chain("  ", [fw])
    catalog.add_chain("edge", [fw])
    with pytest.raises(ValueError, match="重复"):
        catalog.add_chain(" EDGE", [fw])

def test_resolve_sequence_expands_chains_and_fails_fast(catalog):
    catalog.add_chain("edge", [catalog.get_vnf("fw"), catalog.get_vnf("nat")])
    sequence = catalog.resolve_sequence(["edge", "ids"])
    assert [vnf.name for vnf in sequence] == ["fw", "nat", "ids"]
    with pytest.raises(ValueError, match="无法解析"):
        catalog.resolve_sequence(["fw", "proxy"])

def test_pairs(catalog):
    pair = catalog.add_pair("fw", "ids", 5)
    assert catalog.get_pair(catalog.get_vnf("fw"), catalog.get_vnf("ids")) == pair
    assert catalog.get_pair(catalog.get_vnf("ids"), catalog.get_vnf("fw")) is None
    with pytest.raises(ValueError, match="不能为负"):
        catalog.add_pair("fw", "nat", -1)
    with pytest.raises(ValueError, match="不存在"):
        catalog.add_pair("fw", "proxy", 1)
    with pytest.raises(ValueError, match="重复"):
        catalog.add_pair("fw", "ids", 7)
    assert catalog.get_pair(catalog.get_vnf("fw"), catalog.get_vnf("ids")).latency == 5
    # 反方向是另一条约束
    catalog.add_pair("ids", "fw", 7)
    assert len(catalog.get_pairs()) == 2

def test_vnf_validation():
    with pytest.raises(ValueError):
        VNF("", (1.0,), processing_capacity=10)
    with pytest.raises(ValueError):
        VNF("fw", (-1.0,), processing_capacity=10)
    with pytest.raises(ValueError):
        VNF("fw", (1.0,), processing_capacity=10, max_instances=-2)

def test_resource_dimensions_must_match():
    catalog = VnfCatalog(["cpu", "ram"])
    with pytest.raises(ValueError, match="维度"):
        catalog.add_vnf(VNF("fw", (1.0,), processing_capacity=10))
    with pytest.raises(ValueError, match="已存在"):
        catalog.add_resource(" CPU")

def test_load_from_csv(tmp_path):
    vnfs = tmp_path / "vnfs.csv"
    vnfs.write_text(
        "name,delay,processing_capacity,max_instances,cpu\n"
        "fw,0.5,1000,-1,1\n"
        "ids,1,500,3,2\n"
    )
    chains = tmp_path / "chains.csv"
    chains.write_text("name,vnfs\nsecure,fw;ids\n")
    pairs = tmp_path / "pairs.csv"
    pairs.write_text("first,second,latency\nfw,ids,20\n")

    catalog = VnfCatalog(["cpu"])
    catalog.load_vnfs(str(vnfs))
    catalog.load_chains(str(chains))
    catalog.load_pairs(str(pairs))

    ids = catalog.get_vnf("ids")
    assert ids.max_instances == 3 and ids.resources == (2.0,)
    assert [v.name for v in catalog.resolve("secure")] == ["fw", "ids"]
    assert catalog.get_pair(catalog.get_vnf("fw"), ids).latency == 20

    with pytest.raises(FileNotFoundError):
        catalog.load_pairs(str(tmp_path / "missing.csv"))
