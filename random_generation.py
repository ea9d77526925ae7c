import os
import numpy as np
import networkx as nx
from math import sqrt
from service_class.vnf import VNF
from service_class.service import Service
from topology.network import Network
from topology.link import Link
from topology.location import Node
from optimisation.instance import Instance

def random_network(name: str, n_nodes: int, radius: float = 0.5, availabilities = [0.9, 0.95, 0.99, 0.999], capacity = (10, 100),
                   max_latency: float = 2, seed: int = None):
    """
    Makes a random geometric network. Link delays scale with the distance between nodes and node costs with their
    betweenness centrality.

    Params
    -----------------------------
        name:           str
                            name of the network.
        n_nodes:        int
                            number of nodes.
        radius:         float
                            distance threshold under which two nodes are linked.
        availabilities: list[float]
                            node availabilities to sample from.
        capacity:       tuple[float]
                            range of the node capacities.
        max_latency:    float
                            delay of the longest link.
        seed:           int
                            seed of the generator.
    Returns
    -----------------------------
                        topology.network.Network
    """
    rng = np.random.default_rng(seed)
    G = nx.random_geometric_graph(n_nodes, radius, seed = seed)
    positions = nx.get_node_attributes(G, "pos")
    for u, v in G.edges():
        G[u][v]["weight"] = sqrt((positions[u][0] - positions[v][0])**2 + (positions[u][1] - positions[v][1])**2)
    bc = nx.betweenness_centrality(G, weight = "weight")

    nodes = {}
    for v in G.nodes():
        # Central nodes are more expensive to use.
        nodes[v] = Node("Node{}".format(v), capacity = float(rng.uniform(*capacity)), availability = float(rng.choice(availabilities)),
                        cost = round(1 + 10 * bc[v], 2), id = v)

    links = []
    max_distance = max([d for _, _, d in G.edges(data = "weight")], default = 1)
    for u, v, distance in G.edges(data = "weight"):
        links.append(Link(nodes[u], nodes[v], delay = max_latency * distance / max_distance))
    return Network(name, list(nodes.values()), links)

def random_vnfs(n_vnfs: int, consumption = (0.5, 2), cost = (1, 5), seed: int = None) -> list:
    """
    Returns a list of n_vnfs VNFs with random consumption and cost factors.
    """
    rng = np.random.default_rng(seed)
    return [VNF("VNF{}".format(f), round(float(rng.uniform(*consumption)), 2), round(float(rng.uniform(*cost)), 2), id = f) for f in range(n_vnfs)]

def random_sfcs(network: Network, vnfs: list, n_requests: int, max_sections: int = 3, bandwidth = (1, 5),
                availabilities = [0.99, 0.999, 0.9999], max_latency: float = 10, seed: int = None) -> list:
    """
    Returns n_requests SFCs with random VNF sequences between random source/sink pairs of the network.
    """
    rng = np.random.default_rng(seed)
    names = [f.description for f in vnfs]
    sfcs = []
    for k in range(n_requests):
        n_sections = int(rng.integers(1, max_sections + 1))
        source, sink = rng.choice(len(network.nodes), size = 2)
        sfcs.append(Service("SFC{}".format(k), [str(f) for f in rng.choice(names, size = n_sections)], float(rng.integers(*bandwidth)),
                            float(rng.choice(availabilities)), max_latency, network.nodes[source].description,
                            network.nodes[sink].description, id = k))
    return sfcs

def random_instance(name: str, n_nodes: int, n_vnfs: int, n_requests: int, seed: int = None) -> Instance:
    """
    Makes a random instance with a geometric network, n_vnfs VNFs and n_requests SFCs.
    """
    network = random_network(name, n_nodes, seed = seed)
    vnfs = random_vnfs(n_vnfs, seed = seed)
    sfcs = random_sfcs(network, vnfs, n_requests, seed = seed)
    return Instance(network, vnfs, sfcs)

def generate_instances(instances_dir: str, sizes = [10, 20, 30], requests = [5, 10, 20], n_vnfs: int = 4, seed: int = 20102019) -> list:
    """
    Saves one random instance per (number of nodes, number of requests) pair in instances_dir and returns their paths.
    """
    os.makedirs(instances_dir, exist_ok = True)
    paths = []
    for n_nodes in sizes:
        for n_requests in requests:
            name = "random_n{}_k{}".format(n_nodes, n_requests)
            instance = random_instance(name, n_nodes, n_vnfs, n_requests, seed = seed)
            instance.save_as_json(os.path.join(instances_dir, name))
            paths.append(os.path.join(instances_dir, name + ".json"))
    return paths

if __name__ == "__main__":
    """
    This script generates the instances used in the experiments and saves them in data_used/instances/
    """
    generate_instances("data_used/instances/")
