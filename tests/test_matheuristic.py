import numpy as np
import pytest
from conftest import FakeContext, build_instance, snapshot_from
from optimisation.availability import parallel_availability, chain_availability, meets_requirement
from optimisation.callback import CallbackStatistics, EventKind
from optimisation.matheuristic import Matheuristic
from optimisation.parameters import Parameters

def make_heuristic(instance, **kwargs):
    return Matheuristic(instance, Parameters(**kwargs), CallbackStatistics())

def random_snapshot(instance, rng):
    x = [rng.random((instance.nb_sections(k), instance.nb_nodes)) for k in range(instance.nb_demands)]
    return snapshot_from(instance, x, rng.random((instance.nb_nodes, instance.nb_vnfs)))

def node_loads(instance, solution):
    return [sum(instance.get_required_capacity(k, i) * solution.x[k][i, v] for k in range(instance.nb_demands) for i in range(instance.nb_sections(k)))
            for v in range(instance.nb_nodes)]

@pytest.fixture
def tight_instance():
    return build_instance([(0.95, 3, 1), (0.9, 2.5, 2), (0.8, 4, 1), (0.99, 1, 5)],
                          [(["f0", "f1"], 1, 0.9), (["f1"], 1.5, 0.97), (["f0", "f0", "f1"], 0.5, 0.85)])

def test_capacity_is_never_exceeded(tight_instance):
    heuristic = make_heuristic(tight_instance)
    rng = np.random.default_rng(1)
    for _ in range(100):
        solution = heuristic.construct(random_snapshot(tight_instance, rng), rng)
        heuristic.repair(solution)
        assert (solution.remaining_capacity >= 0).all()
        for node, load in zip(tight_instance.nodes, node_loads(tight_instance, solution)):
            assert load <= node.capacity + 1e-9

def test_repaired_solutions_are_available_and_consistent():
    instance = build_instance([(0.95, 10, 1), (0.9, 10, 2), (0.8, 10, 1), (0.99, 10, 5)],
                              [(["f0", "f1"], 1, 0.9), (["f1"], 1.5, 0.97), (["f0", "f0", "f1"], 0.5, 0.85)])
    heuristic = make_heuristic(instance)
    rng = np.random.default_rng(2)
    repaired = 0
    for _ in range(100):
        solution = heuristic.construct(random_snapshot(instance, rng), rng)
        if not heuristic.repair(solution):
            continue
        repaired += 1
        for k, service in enumerate(instance.services):
            sections = [parallel_availability([instance.nodes[v].availability for v in np.flatnonzero(row == 1)]) for row in solution.x[k]]
            assert meets_requirement(chain_availability(sections), service.availability)
            for i, row in enumerate(solution.x[k]):
                f = instance.get_section_vnf(k, i)
                assert all(solution.y[v, f] == 1 for v in np.flatnonzero(row == 1))
        cost = sum(instance.get_placement_cost(v, f) for v, f in zip(*np.nonzero(solution.y)))
        assert solution.objective == pytest.approx(cost)
    assert repaired > 0

def test_repair_fails_without_capacity():
    instance = build_instance([(0.9, 0, 1), (0.8, 0, 1)], [(["f0"], 1, 0.9)])
    heuristic = make_heuristic(instance)
    rng = np.random.default_rng(0)
    solution = heuristic.construct(snapshot_from(instance, [[[1, 1]]], [[1, 1], [1, 1]]), rng)
    assert not heuristic.repair(solution)
    context = FakeContext(EventKind.RELAXATION)
    assert not heuristic.run(context, snapshot_from(instance, [[[1, 1]]], [[1, 1], [1, 1]]), rng)
    assert context.solutions == []

def test_repair_prefers_placed_vnfs_then_capacity(scenario_a):
    heuristic = make_heuristic(scenario_a)
    solution = heuristic.construct(snapshot_from(scenario_a, [[[0, 0, 0]]], [[0, 0], [1, 0], [0, 0]]), np.random.default_rng(0))
    assert solution.y[1, 0] == 1
    assert heuristic.repair(solution)
    # Node 1 already hosts the vnf, then nodes 0 and 2 cost 1 and 3.
    assert solution.x[0].tolist() == [[1, 1, 0]]
    assert solution.objective == 2

def test_should_run_rule(scenario_a):
    rng = np.random.default_rng(0)
    context = FakeContext(EventKind.RELAXATION)
    assert make_heuristic(scenario_a).should_run(context, rng)
    assert not make_heuristic(scenario_a, heuristic = False).should_run(context, rng)
    assert not make_heuristic(scenario_a, approximation = "restriction").should_run(context, rng)
    # No gap left: the draw must be 0.
    closed = FakeContext(EventKind.RELAXATION, relaxation_objective = 5, incumbent = 5)
    assert sum(make_heuristic(scenario_a).should_run(closed, rng) for _ in range(100)) == 0

def test_run_posts_improving_solution(scenario_a):
    heuristic = make_heuristic(scenario_a)
    context = FakeContext(EventKind.RELAXATION, incumbent = 10)
    snapshot = snapshot_from(scenario_a, [[[1, 1, 1]]], [[1, 0], [1, 0], [1, 0]])
    assert heuristic.run(context, snapshot, np.random.default_rng(0))
    y, x, objective = context.solutions[0]
    assert objective == 5
    assert x[0].tolist() == [[1, 1, 1]]
    assert heuristic.statistics.heuristic_solutions == 1

def test_run_skips_non_improving_solution(scenario_a):
    heuristic = make_heuristic(scenario_a)
    context = FakeContext(EventKind.RELAXATION, relaxation_objective = 0, incumbent = 4)
    snapshot = snapshot_from(scenario_a, [[[1, 1, 1]]], [[1, 0], [1, 0], [1, 0]])
    assert not heuristic.run(context, snapshot, np.random.default_rng(0))
    assert context.solutions == []
