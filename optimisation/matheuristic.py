import numpy as np
from optimisation.availability import parallel_availability, chain_availability, meets_requirement
import logging

EPSILON = 1e-6

class HeuristicSolution(object):
    """
    Work buffers of one matheuristic run: 0/1 placement y, 0/1 assignment x, remaining node capacities and the cost of
    the placement.
    """
    def __init__(self, instance):
        self.y = np.zeros((instance.nb_nodes, instance.nb_vnfs))
        self.x = [np.zeros((instance.nb_sections(k), instance.nb_nodes)) for k in range(instance.nb_demands)]
        self.remaining_capacity = np.array([node.capacity for node in instance.nodes], dtype = float)
        self.objective = 0.0

class Matheuristic(object):
    """
    Randomised rounding of a fractional point followed by a greedy repair of the availability requirements.
    -------------------
    Params:
        instance:           optimisation.instance.Instance
                                instance to build solutions for.
        parameters:         optimisation.parameters.Parameters
                                heuristic switches the matheuristic on, approximation must be "none".
        statistics:         optimisation.callback.CallbackStatistics
                                counters incremented for each posted solution.
        verbose:            int
                                verbosity of the log.
    """
    def __init__(self, instance, parameters, statistics, verbose: int = 0):
        self.instance = instance
        self.parameters = parameters
        self.statistics = statistics
        self.verbose = verbose

    def should_run(self, context, rng) -> bool:
        """
        Runs with probability (incumbent - relaxation) / incumbent, i.e. more often when the gap is large.
        """
        if not self.parameters.heuristic or self.parameters.approximation != "none":
            return False
        incumbent = context.get_incumbent_objective()
        if not np.isfinite(incumbent):
            limit = 1.0
        elif incumbent <= 0:
            return False
        else:
            limit = (incumbent - context.get_relaxation_objective()) / incumbent
        return rng.random() <= limit

    def run(self, context, snapshot, rng) -> bool:
        """
        Builds a solution from the fractional snapshot and posts it if it is complete and improves the incumbent.
        """
        if not self.should_run(context, rng):
            return False
        solution = self.construct(snapshot, rng)
        if not self.repair(solution):
            logging.debug(" Heuristic failed: no node has enough capacity left.") if self.verbose > 0 else None
            return False
        if solution.objective >= context.get_incumbent_objective():
            logging.debug(" Heuristic solution of cost {} does not improve the incumbent.".format(solution.objective)) if self.verbose > 0 else None
            return False
        logging.info(" Posting heuristic solution of cost {}.".format(solution.objective)) if self.verbose > 0 else None
        context.post_heuristic_solution(solution.y, solution.x, solution.objective)
        self.statistics.increment_heuristic_solutions()
        return True

    def construct(self, snapshot, rng) -> HeuristicSolution:
        """
        Phase I. Places vnf f on node v with probability y[v][f], then assigns each section to a node hosting its vnf
        with probability x[k][i][v] while capacity remains.
        """
        instance = self.instance
        solution = HeuristicSolution(instance)
        for v in range(instance.nb_nodes):
            for f in range(instance.nb_vnfs):
                if rng.random() <= snapshot.y[v, f]:
                    solution.y[v, f] = 1
                    solution.objective += instance.get_placement_cost(v, f)

        for v in range(instance.nb_nodes):
            for k in range(instance.nb_demands):
                for i in range(instance.nb_sections(k)):
                    f = instance.get_section_vnf(k, i)
                    required = instance.get_required_capacity(k, i)
                    if solution.y[v, f] == 1 and required <= solution.remaining_capacity[v]:
                        if rng.random() <= snapshot.x[k][i, v]:
                            solution.x[k][i, v] = 1
                            solution.remaining_capacity[v] -= required
        return solution

    def repair(self, solution: HeuristicSolution) -> bool:
        """
        Phase II. While a demand misses its requirement, assigns its least available section to one more node. Returns
        False if no node can take the section.
        """
        instance = self.instance
        for k, service in enumerate(instance.services):
            while True:
                availabilities = [parallel_availability([instance.nodes[v].availability for v in np.flatnonzero(row == 1)])
                                  for row in solution.x[k]]
                if meets_requirement(chain_availability(availabilities), service.availability):
                    break
                i = int(np.argmin(availabilities))
                f = instance.get_section_vnf(k, i)
                v = self.get_node_to_install(solution, k, i)
                if v is None:
                    return False
                solution.x[k][i, v] = 1
                solution.remaining_capacity[v] -= instance.get_required_capacity(k, i)
                if solution.y[v, f] == 0:
                    solution.y[v, f] = 1
                    solution.objective += instance.get_placement_cost(v, f)
        return True

    def get_node_to_install(self, solution: HeuristicSolution, k: int, i: int) -> int:
        """
        Chooses the node to assign section i of demand k to: the cheapest additional placement, ties broken by the
        largest remaining capacity. Nodes already assigned to the section are skipped.
        """
        f = self.instance.get_section_vnf(k, i)
        required = self.instance.get_required_capacity(k, i)
        selected, min_cost, max_capacity = None, np.inf, 0.0
        for v in range(self.instance.nb_nodes):
            if solution.x[k][i, v] == 1 or required > solution.remaining_capacity[v]:
                continue
            cost = self.instance.get_placement_cost(v, f) * (1 - solution.y[v, f])
            if cost <= min_cost - EPSILON:
                selected, min_cost, max_capacity = v, cost, solution.remaining_capacity[v]
            elif cost <= min_cost + EPSILON and solution.remaining_capacity[v] >= max_capacity + EPSILON:
                selected, min_cost, max_capacity = v, cost, solution.remaining_capacity[v]
        return selected
