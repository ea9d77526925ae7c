from collections import namedtuple
from math import log
from optimisation.availability import min_nb_nodes, vnf_lower_bound
import logging

EPS = 1e-4

class Cut(namedtuple("Cut", ["name", "terms", "lb"])):
    """
    Immutable linear inequality sum(coeff * var) >= lb.
    -------------------
    Params:
        name:               str
                                name of the inequality.
        terms:              tuple[(key, float)]
                                variable keys, ("x", k, i, v) or ("y", v, f), with their coefficients.
        lb:                 float
                                right hand side of the inequality.
    """
    __slots__ = ()

    def evaluate(self, snapshot) -> float:
        """
        returns the left hand side value at the snapshot.
        """
        return sum(coeff * snapshot.value(key) for key, coeff in self.terms)

    def is_violated(self, snapshot, tolerance: float = EPS) -> bool:
        return self.evaluate(snapshot) < self.lb - tolerance

    def __str__(self):
        lhs = " + ".join("{} {}".format(coeff, key) for key, coeff in self.terms)
        return "{}: {} >= {}".format(self.name, lhs, self.lb)

class CutPool(object):
    """
    Fixed collection of valid inequalities built once and checked on every relaxation event.
    -------------------
    Params:
        instance:           optimisation.instance.Instance
                                instance the inequalities are built for.
        parameters:         optimisation.parameters.Parameters
                                selects the families of inequalities added to the pool.
        statistics:         optimisation.callback.CallbackStatistics
                                counters incremented for each submitted cut.
        verbose:            int
                                verbosity of the log.
    """
    def __init__(self, instance, parameters, statistics, verbose: int = 0):
        self.instance = instance
        self.statistics = statistics
        self.verbose = verbose
        self.cuts = []
        if parameters.node_cover:
            self.add_node_cover_cuts()
        if parameters.vnf_lower_bound:
            self.add_vnf_lower_bound_cuts()
        if parameters.section_failure:
            self.add_section_failure_cuts()
        self.cuts = tuple(self.cuts)
        logging.info(" Cut pool built with {} inequalities.".format(len(self.cuts))) if self.verbose > 0 else None

    def __len__(self):
        return len(self.cuts)

    def __iter__(self):
        return iter(self.cuts)

    def add_node_cover_cuts(self):
        """
        For each section and node v, at least c(v) nodes as available as v are needed, where c(v) is the number of copies
        of v that reach the requirement. A node j ranked above v counts for c(v) - c(j) + 1.
        """
        instance = self.instance
        for k, service in enumerate(instance.services):
            c = [min_nb_nodes(service.availability, node.availability) for node in instance.nodes]
            for i in range(instance.nb_sections(k)):
                for v in range(instance.nb_nodes):
                    position = instance.rank_positions[v]
                    # Only the non-dominated inequalities are kept.
                    if position == 0 or c[v] <= c[instance.rank[position - 1]]:
                        continue
                    terms = []
                    for j in range(instance.nb_nodes):
                        if instance.rank_positions[j] < position:
                            coeff = max(c[v] - c[j] + 1, 1)
                        else:
                            coeff = 1
                        terms.append((("x", k, i, j), coeff))
                    self.cuts.append(Cut("NodeCover({},{},{})".format(k, i, v), tuple(terms), c[v]))

    def add_vnf_lower_bound_cuts(self):
        """
        Bounds the total number of assignments of a demand when the chain needs more than its sections taken alone.
        """
        instance = self.instance
        for k, service in enumerate(instance.services):
            nb_sections = instance.nb_sections(k)
            bound = vnf_lower_bound(service.availability, nb_sections, instance.ranked_availabilities)
            single = vnf_lower_bound(service.availability, 1, instance.ranked_availabilities)
            if bound is None or single is None or bound <= nb_sections * single:
                continue
            terms = tuple((("x", k, i, v), 1) for i in range(nb_sections) for v in range(instance.nb_nodes))
            self.cuts.append(Cut("VNF_LowerBound({})".format(k), terms, bound))

    def add_section_failure_cuts(self):
        """
        The failure probability of each section must not exceed 1 - required availability, written in log form.
        """
        instance = self.instance
        for k, service in enumerate(instance.services):
            rhs = -log(1 - service.availability)
            for i in range(instance.nb_sections(k)):
                terms = tuple((("x", k, i, v), -log(1 - node.availability)) for v, node in enumerate(instance.nodes))
                self.cuts.append(Cut("Section_Fail({},{})".format(k, i), terms, rhs))

    def check(self, context, snapshot) -> int:
        """
        Submits every pool inequality violated by the snapshot and returns how many were submitted.
        """
        added = 0
        for cut in self.cuts:
            if cut.is_violated(snapshot):
                logging.info(" Adding {}.".format(cut.name)) if self.verbose > 0 else None
                logging.debug(" {}".format(cut)) if self.verbose == 2 else None
                context.add_user_cut(cut)
                self.statistics.increment_user_cuts()
                added += 1
        return added
