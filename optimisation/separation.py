import numpy as np
from optimisation.availability import vnf_lower_bound, parallel_availability, chain_availability, meets_requirement
from optimisation.cuts import Cut, EPS
import logging

class SeparationEngine(object):
    """
    Separates cover inequalities of exponential-size families against a fractional point. It is only called when no
    pool inequality is violated.
    -------------------
    Params:
        instance:           optimisation.instance.Instance
                                instance the inequalities are separated for.
        parameters:         optimisation.parameters.Parameters
                                chain_cover enables the chain and generalized covers, availability_cuts the heuristic
                                availability covers.
        statistics:         optimisation.callback.CallbackStatistics
                                counters incremented for each submitted cut.
        verbose:            int
                                verbosity of the log.
    """
    def __init__(self, instance, parameters, statistics, verbose: int = 0):
        self.instance = instance
        self.parameters = parameters
        self.statistics = statistics
        self.verbose = verbose
        self.chain_bounds, self.cover_bounds = [], []
        if parameters.chain_cover:
            self.compute_bounds()

    def compute_bounds(self):
        """
        chain_bounds[k][p] is the least number of assignments over p sections of demand k. cover_bounds[k][position][p]
        is the same bound when only the nodes ranked at position or below are used. None marks an unreachable bound.
        """
        ranked = self.instance.ranked_availabilities
        for k, service in enumerate(self.instance.services):
            nb_sections = self.instance.nb_sections(k)
            self.chain_bounds.append([None] + [vnf_lower_bound(service.availability, p, ranked) for p in range(1, nb_sections + 1)])
            self.cover_bounds.append([[None] + [vnf_lower_bound(service.availability, p, ranked[position:]) for p in range(1, nb_sections + 1)]
                                      for position in range(len(ranked))])

    def separate(self, context, snapshot) -> int:
        """
        Runs the generalized cover, chain cover and heuristic availability cover separations in this order and returns
        the number of cuts submitted.
        """
        added = 0
        if self.parameters.chain_cover:
            added += self.generalized_cover_separation(context, snapshot)
            added += self.chain_cover_separation(context, snapshot)
        if self.parameters.availability_cuts:
            added += self.availability_cover_separation(context, snapshot)
        return added

    def submit(self, context, cut: Cut):
        logging.info(" Adding {}.".format(cut.name)) if self.verbose > 0 else None
        logging.debug(" {}".format(cut)) if self.verbose == 2 else None
        context.add_user_cut(cut)
        self.statistics.increment_user_cuts()

    def chain_cover_separation(self, context, snapshot) -> int:
        """
        For each demand, sorts the sections by increasing assignment mass and submits the first prefix whose mass is
        below the bound for that many sections.
        """
        added = 0
        nb_nodes = self.instance.nb_nodes
        for k in range(self.instance.nb_demands):
            mass = snapshot.x[k].sum(axis = 1)
            order = np.argsort(mass, kind = "stable")
            for p in range(1, len(order) + 1):
                rhs = self.chain_bounds[k][p]
                if rhs is None:
                    continue
                if mass[order[:p]].sum() < rhs - EPS:
                    terms = tuple((("x", k, int(i), v), 1) for i in order[:p] for v in range(nb_nodes))
                    self.submit(context, Cut("ChainCover({},{})".format(k, p), terms, rhs))
                    added += 1
                    break
        return added

    def generalized_cover_separation(self, context, snapshot) -> int:
        """
        For a probe node, U holds the nodes ranked at or below it. Assignments to nodes of U count 1 and assignments to
        other nodes count the bound restricted to U. Returns as soon as one violated inequality is submitted.
        """
        instance = self.instance
        for k in range(instance.nb_demands):
            for probe in range(instance.nb_nodes):
                position = instance.rank_positions[probe]
                in_u = np.array([instance.rank_positions[v] >= position for v in range(instance.nb_nodes)])
                for p in range(1, instance.nb_sections(k) + 1):
                    rhs = self.cover_bounds[k][position][p]
                    if rhs is None:
                        continue
                    coeffs = np.where(in_u, 1.0, float(rhs))
                    mass = snapshot.x[k] @ coeffs
                    order = np.argsort(mass, kind = "stable")
                    if mass[order[:p]].sum() < rhs - EPS:
                        terms = tuple((("x", k, int(i), v), coeffs[v]) for i in order[:p] for v in range(instance.nb_nodes))
                        self.submit(context, Cut("GenCover({},{},{})".format(k, p, probe), terms, rhs))
                        return 1
        return 0

    def availability_cover_separation(self, context, snapshot) -> int:
        """
        Greedily grows, for each demand, a set of free positions whose chain availability stays below the requirement.
        At least one position outside the set must then be used.
        """
        added = 0
        for k, service in enumerate(self.instance.services):
            free, section_availability = self.initial_cover(k, snapshot)
            chain = chain_availability(section_availability)
            if meets_requirement(chain, service.availability):
                continue
            while True:
                selected, best_ratio = None, -1.0
                for i in range(len(free)):
                    for v, node in enumerate(self.instance.nodes):
                        if free[i][v]:
                            continue
                        new_section = 1 - (1 - section_availability[i]) * (1 - node.availability)
                        delta = chain / section_availability[i] * new_section - chain
                        if meets_requirement(chain + delta, service.availability):
                            continue
                        ratio = snapshot.x[k][i, v] / delta if delta > 0 else np.inf
                        if ratio > best_ratio:
                            selected, best_ratio = (i, v, new_section), ratio
                if selected is None:
                    break
                i, v, new_section = selected
                free[i][v] = True
                section_availability[i] = new_section
                chain = chain_availability(section_availability)

            terms = tuple((("x", k, i, v), 1) for i in range(len(free)) for v in range(self.instance.nb_nodes) if not free[i][v])
            cut = Cut("AvailabilityCover({})".format(k), terms, 1)
            if cut.is_violated(snapshot):
                self.submit(context, cut)
                self.statistics.increment_availability_cuts()
                added += 1
        return added

    def initial_cover(self, k: int, snapshot):
        """
        Marks as free the positions already at one. A section without any takes the node with the best
        value / availability ratio.
        """
        x = snapshot.x[k]
        free = x >= 1 - EPS
        section_availability = []
        for i in range(x.shape[0]):
            if not free[i].any():
                ratios = [x[i, v] / node.availability for v, node in enumerate(self.instance.nodes)]
                free[i, int(np.argmax(ratios))] = True
            section_availability.append(parallel_availability([node.availability for v, node in enumerate(self.instance.nodes) if free[i, v]]))
        return free, section_availability
