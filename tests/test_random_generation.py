import os
from optimisation.instance import Instance
from random_generation import generate_instances, random_instance

def test_generate_instances_creates_the_directory(tmp_path):
    instances_dir = str(tmp_path / "data_used" / "instances")
    paths = generate_instances(instances_dir, sizes = [5], requests = [2, 3], n_vnfs = 2, seed = 1)
    assert len(paths) == 2
    for path, n_requests in zip(paths, [2, 3]):
        assert os.path.exists(path)
        instance = Instance()
        instance.load_from_json(path)
        assert instance.nb_nodes == 5
        assert instance.nb_vnfs == 2
        assert instance.nb_demands == n_requests

def test_random_instance_is_seeded():
    first = random_instance("a", 6, 3, 4, seed = 11)
    second = random_instance("a", 6, 3, 4, seed = 11)
    assert first.to_json()["sfcs"] == second.to_json()["sfcs"]
    assert [node.to_json()["availability"] for node in first.nodes] == [node.to_json()["availability"] for node in second.nodes]
