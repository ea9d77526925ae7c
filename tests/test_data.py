import json
import os
import warnings
import pytest
from topology.location import Node
from topology.network import Network
from service_class.service import Service
from service_class.vnf import VNF
from optimisation.instance import Instance
from optimisation.parameters import Parameters

def test_node_validation():
    with pytest.raises(ValueError):
        Node("n", availability = 1.0)
    with pytest.raises(ValueError):
        Node("n", availability = 0.0)
    with pytest.raises(ValueError):
        Node("n", capacity = -1)

def test_node_load_rejects_negative_capacity(small_instance):
    data = small_instance.network.to_json()
    data["nodes"][1]["capacity"] = -2
    with pytest.raises(ValueError):
        Network().load_from_dict(data)

def test_service_validation():
    with pytest.raises(ValueError):
        Service("s", ["f0"], availability = 1.2)

def test_network_rank(make_instance):
    instance = make_instance([(0.9, 1, 1), (0.99, 1, 1), (0.9, 1, 1), (0.5, 1, 1)], [])
    assert instance.rank == [1, 0, 2, 3]
    assert instance.rank_positions == [1, 0, 2, 3]
    assert instance.ranked_availabilities == [0.99, 0.9, 0.9, 0.5]

def test_instance_indexes(small_instance):
    assert small_instance.get_section_vnf(0, 1) == 1
    assert small_instance.get_required_capacity(1, 0) == 1
    assert small_instance.get_placement_cost(1, 0) == 2
    keys = small_instance.get_variable_keys()
    assert keys[0] == ("y", 0, 0)
    assert len(keys) == 3 * 2 + 3 * 3

def test_instance_rejects_unknown_vnf(make_instance):
    with pytest.raises(ValueError):
        make_instance([(0.9, 1, 1)], [(["unknown"], 1, 0.9)])

def test_instance_rejects_unknown_end_point(small_instance):
    small_instance.services[0].sink = "unknown"
    with pytest.raises(ValueError):
        small_instance.setup()

def test_instance_json_round_trip(small_instance, tmp_path):
    filename = str(tmp_path / "instance")
    small_instance.save_as_json(filename)
    loaded = Instance()
    loaded.load_from_json(filename)
    assert loaded.to_json() == small_instance.to_json()
    assert loaded.rank == small_instance.rank
    assert loaded.section_vnfs == small_instance.section_vnfs
    assert loaded.network.links[0].source is loaded.nodes[0]

def test_instance_json_keys(small_instance):
    data = small_instance.to_json()
    data["extra"] = []
    with pytest.raises(AssertionError):
        Instance().load_from_dict(data)

def test_network_load_rejects_dangling_link(small_instance):
    data = small_instance.network.to_json()
    data["links"][0]["sink"] = 42
    with pytest.raises(ValueError):
        Network().load_from_dict(data)

def test_vnf_json_round_trip(tmp_path):
    vnf = VNF("firewall", 1.5, 3, id = 7)
    vnf.save_as_json(str(tmp_path / "firewall"))
    loaded = VNF()
    loaded.load_from_json(str(tmp_path / "firewall.json"))
    assert loaded.to_json() == vnf.to_json()

def test_parameters_json_round_trip(tmp_path):
    parameters = Parameters(chain_cover = False, approximation = "relaxation", nb_breakpoints = 4, time_limit = 60, seed = 3)
    parameters.save_as_json(str(tmp_path / "parameters"))
    loaded = Parameters.load_from_json(str(tmp_path / "parameters"))
    assert loaded.to_json() == parameters.to_json()

def test_parameters_defaults_and_validation():
    parameters = Parameters.load_from_dict({"lazy": False})
    assert not parameters.lazy
    assert parameters.seed == 20102019
    assert parameters.approximation == "none"
    with pytest.raises(ValueError):
        Parameters.load_from_dict({"unknown": True})
    with pytest.raises(ValueError):
        Parameters(approximation = "piecewise")
    with pytest.raises(ValueError):
        Parameters(threads = 0)
    with pytest.raises(ValueError):
        Parameters(nb_breakpoints = 1)

def test_save_as_dot(small_instance, tmp_path):
    filename = str(tmp_path / "network")
    small_instance.network.save_as_dot(filename, placement = {"n0": ["f0", "f1"]})
    with open(filename + ".dot") as f:
        source = f.read()
    assert "digraph" in source
    assert "f0, f1" in source
    assert "filled" in source

@pytest.mark.parametrize("path", ["topology/network.py", "service_class/vnf.py", "service_class/service.py"])
def test_docstrings_compile_without_warnings(path):
    root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    with open(os.path.join(root, path)) as f:
        source = f.read()
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        compile(source, path, "exec")
