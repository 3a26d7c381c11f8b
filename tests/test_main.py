"""命令行入口测试"""

import json

import pandas as pd

from vnfplace.__main__ import main

def _write(path, text):
    path.write_text(text)
    return str(path)

def _inputs(tmp_path):
    return [
        '--nodes', _write(tmp_path / "nodes.csv",
                          "name,cpu\nA,0\nB,4\nC,4\nD,4\nE,0\n"),
        '--links', _write(tmp_path / "links.csv",
                          "source,target,bandwidth,delay\n"
                          "A,B,100,1\nB,C,100,2\nC,D,100,2\nD,E,100,1\nA,C,100,5\n"),
        '--vnfs', _write(tmp_path / "vnfs.csv",
                         "name,cpu,processing_capacity,delay,max_instances\n"
                         "fw,1,1000,0,\nids,2,50,0.5,3\n"),
        '--requests', _write(tmp_path / "requests.csv",
                             "id,ingress,egress,bandwidth,vnfs,expected_delay\n"
                             "1,A,E,20,fw;ids,\n2,E,A,30,fw,20\n"),
        '--chains', _write(tmp_path / "chains.csv", "name,vnfs\nsecure,fw;ids\n"),
        '--pairs', _write(tmp_path / "pairs.csv", "first,second,latency\nfw,ids,10\n"),
    ]

def test_optimize_writes_frontier(tmp_path):
    output = tmp_path / "frontier.csv"
    code = main(['optimize'] + _inputs(tmp_path) + [
        '--iterations', '10', '--levels', '3', '--runtime', '0', '--output', str(output)
    ])
    assert code == 0
    frame = pd.read_csv(output)
    assert len(frame) > 0
    assert {'solution', 'feasible', 'TOTAL_USED_CPU'} <= set(frame.columns)

def test_optimize_with_policy_objectives_and_runs(tmp_path):
    policy = _write(tmp_path / "policy.json", json.dumps({"max_worse": 0.1}))
    output = tmp_path / "frontier.csv"
    code = main(['optimize'] + _inputs(tmp_path) + [
        '--iterations', '5', '--levels', '2', '--runtime', '0', '--runs', '2',
        '--strategy', 'least_cpu', '--objectives', 'TOTAL_DELAY,NUMBER_OF_VNF_INSTANCES',
        '--policy', policy, '--output', str(output)
    ])
    assert code == 0
    assert output.exists()

def test_missing_input_returns_failure(tmp_path):
    args = _inputs(tmp_path)
    args[args.index('--nodes') + 1] = str(tmp_path / "missing.csv")
    assert main(['optimize'] + args + ['--runtime', '0', '--levels', '1']) == 1

def test_unknown_objective_returns_failure(tmp_path):
    assert main(['optimize'] + _inputs(tmp_path) + [
        '--runtime', '0', '--levels', '1', '--objectives', 'THROUGHPUT'
    ]) == 1

def test_no_command_prints_help(capsys):
    assert main([]) == 0
    assert "optimize" in capsys.readouterr().out
