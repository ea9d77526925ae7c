import itertools
import numpy as np
import pytest
from topology.location import Node
from topology.link import Link
from topology.network import Network
from service_class.vnf import VNF
from service_class.service import Service
from optimisation.instance import Instance
from optimisation.snapshot import SolutionSnapshot
from optimisation.availability import parallel_availability, chain_availability, meets_requirement

class FakeContext(object):
    """
    In-memory callback context recording everything the callback submits.
    """
    def __init__(self, event, values = None, candidate = True, relaxation_objective = 0.0, incumbent = float("inf")):
        self.event = event
        self.values = values if values is not None else {}
        self.candidate = candidate
        self.relaxation_objective = relaxation_objective
        self.incumbent = incumbent
        self.cuts, self.rejected, self.solutions = [], [], []

    def is_candidate_point(self):
        return self.candidate

    def get_relaxation_values(self, keys):
        return [self.values.get(key, 0.0) for key in keys]

    def get_candidate_values(self, keys):
        return [self.values.get(key, 0.0) for key in keys]

    def get_relaxation_objective(self):
        return self.relaxation_objective

    def get_incumbent_objective(self):
        return self.incumbent

    def add_user_cut(self, cut):
        self.cuts.append(cut)

    def reject_candidate(self, cut):
        self.rejected.append(cut)

    def post_heuristic_solution(self, y, x, objective):
        self.solutions.append((y.copy(), [a.copy() for a in x], objective))

def build_instance(nodes, demands, vnfs = None):
    """
    nodes is a list of (availability, capacity, cost), demands a list of (vnf names, bandwidth, availability).
    """
    vnfs = vnfs if vnfs is not None else [VNF("f0", 1, 1, id = 0), VNF("f1", 1, 1, id = 1)]
    locations = [Node("n{}".format(v), capacity = capacity, availability = availability, cost = cost, id = v)
                 for v, (availability, capacity, cost) in enumerate(nodes)]
    links = [Link(locations[v], locations[v + 1], delay = 1) for v in range(len(locations) - 1)]
    services = [Service("s{}".format(k), list(names), bandwidth, availability, 10, locations[0].description, locations[-1].description, id = k)
                for k, (names, bandwidth, availability) in enumerate(demands)]
    return Instance(Network("test", locations, links), vnfs, services)

def snapshot_from(instance, x, y = None):
    """
    Builds a snapshot from x given as a list (per demand) of lists (per section) of node values.
    """
    snapshot = SolutionSnapshot(instance)
    for k, rows in enumerate(x):
        snapshot.x[k][:, :] = np.array(rows, dtype = float)
    if y is not None:
        snapshot.y[:, :] = np.array(y, dtype = float)
    return snapshot

def values_from(snapshot):
    """
    Returns the {key: value} dictionary of a snapshot, as read by a fake context.
    """
    return {key: snapshot.value(key) for key in snapshot.instance.get_variable_keys()}

def is_feasible(instance, snapshot):
    """
    True if the 0/1 assignment respects node capacities and every availability requirement.
    """
    for v, node in enumerate(instance.nodes):
        load = sum(instance.get_required_capacity(k, i) * snapshot.x[k][i, v] for k in range(instance.nb_demands) for i in range(instance.nb_sections(k)))
        if load > node.capacity + 1e-9:
            return False
    for k, service in enumerate(instance.services):
        sections = [parallel_availability([node.availability for v, node in enumerate(instance.nodes) if snapshot.x[k][i, v] == 1])
                    for i in range(instance.nb_sections(k))]
        if not meets_requirement(chain_availability(sections), service.availability):
            return False
    return True

def all_assignments(instance):
    """
    Yields a snapshot for every 0/1 assignment of the instance.
    """
    shapes = [(instance.nb_sections(k), instance.nb_nodes) for k in range(instance.nb_demands)]
    n_bits = sum(s * n for s, n in shapes)
    for bits in itertools.product([0, 1], repeat = n_bits):
        snapshot = SolutionSnapshot(instance)
        start = 0
        for k, (s, n) in enumerate(shapes):
            snapshot.x[k][:, :] = np.array(bits[start:start + s * n]).reshape(s, n)
            start += s * n
        yield snapshot

@pytest.fixture
def make_instance():
    return build_instance

@pytest.fixture
def scenario_a():
    # Nodes a, b and c: no single node reaches the requirement of 0.95.
    return build_instance([(0.90, 10, 1), (0.80, 10, 1), (0.93, 10, 3)], [(["f0"], 1, 0.95)])

@pytest.fixture
def small_instance():
    return build_instance([(0.95, 3, 1), (0.9, 2, 2), (0.8, 2, 1)], [(["f0", "f1"], 1, 0.9), (["f1"], 1, 0.97)])

@pytest.fixture
def feasible_assignments(small_instance):
    return [s for s in all_assignments(small_instance) if is_feasible(small_instance, s)]
