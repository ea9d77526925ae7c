from optimisation.availability import parallel_availability, chain_availability, meets_requirement
from optimisation.cuts import Cut, EPS
import logging

class LazyConstraintEngine(object):
    """
    Rejects integer candidates whose chain availability is below the requirement of a demand.
    -------------------
    Params:
        instance:           optimisation.instance.Instance
                                instance the candidates belong to.
        statistics:         optimisation.callback.CallbackStatistics
                                counters incremented for each submitted nogood.
        verbose:            int
                                verbosity of the log.
    """
    def __init__(self, instance, statistics, verbose: int = 0):
        self.instance = instance
        self.statistics = statistics
        self.verbose = verbose

    def get_section_availabilities(self, k: int, snapshot) -> list:
        """
        returns the list of (section, availability) records of demand k, sorted by increasing availability.
        """
        records = []
        for i, row in enumerate(snapshot.x[k]):
            placed = [node.availability for v, node in enumerate(self.instance.nodes) if row[v] >= 1 - EPS]
            records.append((i, parallel_availability(placed)))
        return sorted(records, key = lambda record: record[1])

    def find_nogood(self, k: int, snapshot) -> Cut:
        """
        Returns the (lifted) nogood cutting off the assignment of demand k, or None if its availability is met.
        """
        required = self.instance.services[k].availability
        records = self.get_section_availabilities(k, snapshot)
        chain, nb_selected = 1.0, 0
        while meets_requirement(chain, required) and nb_selected < len(records):
            chain *= records[nb_selected][1]
            nb_selected += 1
        if meets_requirement(chain, required):
            return None

        assignment = snapshot.x[k] >= 1 - EPS
        self.lift(assignment, required, records, nb_selected)
        terms = []
        for i, _ in records[:nb_selected]:
            for v in range(self.instance.nb_nodes):
                if not assignment[i, v]:
                    terms.append((("x", k, i, v), 1))
        return Cut("Nogood({},{})".format(k, nb_selected), tuple(terms), 1)

    def lift(self, assignment, required: float, records: list, nb_selected: int):
        """
        Adds to the assignment each position of the first nb_selected sections that keeps the chain of these sections
        below the requirement. Works on the given copy of the assignment only.
        """
        availabilities = [availability for _, availability in records[:nb_selected]]
        for s in range(nb_selected):
            i = records[s][0]
            for v, node in enumerate(self.instance.nodes):
                if assignment[i, v]:
                    continue
                future_section = 1 - (1 - availabilities[s]) * (1 - node.availability)
                future = chain_availability(availabilities[:s] + [future_section] + availabilities[s + 1:])
                if not meets_requirement(future, required):
                    assignment[i, v] = True
                    availabilities[s] = future_section

    def check(self, context, snapshot) -> int:
        """
        Rejects the candidate with one nogood per demand whose availability is violated. Returns the number of nogoods.
        """
        added = 0
        for k in range(self.instance.nb_demands):
            cut = self.find_nogood(k, snapshot)
            if cut is None:
                continue
            logging.info(" Rejecting candidate with {}.".format(cut.name)) if self.verbose > 0 else None
            logging.debug(" {}".format(cut)) if self.verbose == 2 else None
            context.reject_candidate(cut)
            self.statistics.increment_lazy_constraints()
            added += 1
        return added
