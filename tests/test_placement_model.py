import json
import pytest
from conftest import build_instance
from optimisation.parameters import Parameters

gp = pytest.importorskip("gurobipy")
try:
    from optimisation.placement_model import PlacementModel
except gp.GurobiError as e:
    pytest.skip("gurobi environment unavailable: {}".format(e), allow_module_level = True)

def test_scenario_a_uses_the_two_cheapest_nodes(scenario_a, tmp_path):
    model = PlacementModel(scenario_a, Parameters(time_limit = 60), verbose = 0)
    model.optimise()
    model.parse_solution()
    # Nodes a and b give 0.98 for a cost of 2, node c costs 3 on its own.
    assert model.model.objVal == pytest.approx(2)
    assert model.placement == {"n0": ["f0"], "n1": ["f0"]}
    assert model.n_violations == 0
    model.save_as_json(str(tmp_path / "result"))
    with open(str(tmp_path / "result.json")) as f:
        result = json.load(f)
    assert result["objective"] == pytest.approx(2)
    assert result["number of availability violations"] == 0
    assert set(result["callback"].keys()) == {"user cuts", "lazy constraints", "heuristic availability cuts", "heuristic solutions", "callback time"}

@pytest.mark.parametrize("disaggregated, strong", [(True, False), (False, False), (True, True)])
def test_lazy_constraints_enforce_availability(small_instance, disaggregated, strong):
    parameters = Parameters(disaggregated_placement = disaggregated, strong_capacity = strong, time_limit = 60)
    model = PlacementModel(small_instance, parameters, verbose = 0)
    model.optimise()
    model.parse_solution()
    assert model.n_violations == 0
    assert model.max_violation == 0
    for service, availability in zip(small_instance.services, model.service_availabilities):
        assert availability >= service.availability - 1e-9

def test_without_lazy_constraints_violations_are_reported():
    # One copy of each section is enough for the assignment bound but not for the chain.
    instance = build_instance([(0.95, 10, 1), (0.95, 10, 1)], [(["f0", "f1"], 1, 0.92)])
    parameters = Parameters(lazy = False, node_cover = False, vnf_lower_bound = False, section_failure = False, chain_cover = False,
                            availability_cuts = False, heuristic = False)
    model = PlacementModel(instance, parameters, verbose = 0)
    model.optimise()
    model.parse_solution()
    assert model.model.objVal == pytest.approx(2)
    assert model.n_violations == 1
    assert model.max_violation == pytest.approx(0.92 - 0.95 ** 2)

def test_linear_relaxation(scenario_a):
    model = PlacementModel(scenario_a, Parameters(linear_relaxation = True), verbose = 0)
    model.optimise()
    model.parse_solution()
    assert model.model.objVal <= 2 + 1e-6
    assert model.to_json()["gap"] == 0.0

def test_unreachable_requirement():
    instance = build_instance([(0.5, 10, 1)], [(["f0"], 1, 0.9)])
    with pytest.raises(ValueError):
        PlacementModel(instance, Parameters(), verbose = 0).optimise()

def solve(instance, parameters):
    model = PlacementModel(instance, parameters, verbose = 0)
    model.optimise()
    model.parse_solution()
    return model

def test_approximations_bound_the_exact_objective(small_instance):
    exact = solve(small_instance, Parameters(time_limit = 60))
    # Without lazy constraints the approximated formulation alone enforces the availabilities.
    relaxed = solve(small_instance, Parameters(approximation = "relaxation", lazy = False, time_limit = 60))
    restricted = solve(small_instance, Parameters(approximation = "restriction", lazy = False, time_limit = 60))
    nb_sections = sum(small_instance.nb_sections(k) for k in range(small_instance.nb_demands))
    assert relaxed.model.NumVars == exact.model.NumVars + 4 * nb_sections
    assert restricted.model.NumConstrs > exact.model.NumConstrs
    assert relaxed.model.objVal <= exact.model.objVal + 1e-6
    assert restricted.model.objVal >= exact.model.objVal - 1e-6
    assert restricted.n_violations == 0
    assert restricted.to_json()["parameters"]["approximation"] == "restriction"

def test_approximation_breakpoints_change_the_model(scenario_a):
    sizes = []
    for nb_breakpoints in [2, 5]:
        model = PlacementModel(scenario_a, Parameters(approximation = "restriction", nb_breakpoints = nb_breakpoints), verbose = 0)
        model.build_model()
        sizes.append(model.model.NumConstrs)
    assert sizes[0] < sizes[1]

def test_run_experiments_writes_results(scenario_a, tmp_path):
    from run_experiments import main
    scenario_a.save_as_json(str(tmp_path / "scenario"))
    output = str(tmp_path / "results")
    main([str(tmp_path / "scenario.json"), "-o", output, "-c", str(tmp_path / "results.csv"), "-d"])
    with open(str(tmp_path / "results" / "scenario.dot")) as f:
        assert "filled" in f.read()
    with open(str(tmp_path / "results.csv")) as f:
        rows = f.read().splitlines()
    assert rows[0].startswith("instance,approximation")
    assert rows[1].startswith("scenario,none")
