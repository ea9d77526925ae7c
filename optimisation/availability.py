import numpy as np

AVAILABILITY_TOLERANCE = 1e-9

def meets_requirement(availability: float, required: float) -> bool:
    """
    Returns True if the availability reaches the required availability. Every feasibility test on availabilities goes
    through this function so that bounds, lazy checks and reports agree.
    """
    return availability >= required - AVAILABILITY_TOLERANCE

def failure_probability(availabilities) -> float:
    """
    Probability that every node of the set fails. An empty set always fails.
    """
    return float(np.prod([1 - a for a in availabilities]))

def parallel_availability(availabilities) -> float:
    """
    Availability of a set of redundant nodes, i.e. the probability that at least one of them is up.
    """
    return 1 - failure_probability(availabilities)

def chain_availability(section_availabilities) -> float:
    """
    Availability of a chain of sections, i.e. the probability that every section is up.
    """
    return float(np.prod(section_availabilities))

def placement_cost(node, vnf) -> float:
    """
    Cost of installing vnf on node.
    """
    return node.cost * vnf.cost

def min_nb_nodes(required: float, node_availability: float) -> int:
    """
    Least number of nodes of availability node_availability needed in parallel to reach the required availability.
    """
    n = 1
    while not meets_requirement(1 - (1 - node_availability) ** n, required):
        n += 1
    return n

def min_nb_nodes_ranked(required: float, ranked: list) -> int:
    """
    Least number of the most available nodes needed in parallel to reach the required availability. Returns None if
    using every node is not enough.
    """
    failure = 1.0
    for n, availability in enumerate(sorted(ranked, reverse = True), start = 1):
        failure *= 1 - availability
        if meets_requirement(1 - failure, required):
            return n
    return None

def vnf_lower_bound(required: float, nb_sections: int, ranked: list) -> int:
    """
    Least total number of node assignments over nb_sections sections such that the chain availability reaches the
    required availability, each section using its most available nodes from ranked. Returns None if unreachable.

    best[t] holds the largest chain availability achievable with t assignments over the sections seen so far.
    """
    ranked = sorted(ranked, reverse = True)
    n = len(ranked)
    if nb_sections < 1 or n == 0:
        return None
    section = [parallel_availability(ranked[:m]) for m in range(n + 1)]
    total = nb_sections * n
    best = np.full(total + 1, -1.0)
    best[0] = 1.0
    for _ in range(nb_sections):
        current = np.full(total + 1, -1.0)
        for t in np.flatnonzero(best >= 0):
            for m in range(1, n + 1):
                if t + m <= total:
                    current[t + m] = max(current[t + m], best[t] * section[m])
        best = current
    for t in range(nb_sections, total + 1):
        if best[t] >= 0 and meets_requirement(best[t], required):
            return t
    return None

def geometric_touches(lb: float, ub: float, n: int) -> np.ndarray:
    """
    n points from lb to ub with a constant ratio between neighbours, so that they are denser near lb where log bends
    the most.
    """
    return np.array([ub * (lb / ub) ** ((n - t) / (n - 1)) for t in range(1, n + 1)])

def log_lines(approximation: str, touches) -> list:
    """
    Returns the (slope, intercept) lines whose minimum approximates log over the range of touches.
    "relaxation" gives the tangents at each touch, lying above log, and "restriction" the chords between consecutive
    touches, lying below log on the range.
    """
    touches = np.unique(touches)
    if approximation == "relaxation":
        return [(1 / u, float(np.log(u)) - 1) for u in touches]
    if approximation == "restriction":
        lines = []
        for u, w in zip(touches[:-1], touches[1:]):
            slope = (np.log(w) - np.log(u)) / (w - u)
            lines.append((float(slope), float(np.log(u) - slope * u)))
        return lines
    raise ValueError("No lines for approximation type {}.".format(approximation))

def availability_lines(approximation: str, required: float, nb_breakpoints: int) -> list:
    """
    Lines approximating the log of a section availability between the required availability and 1.
    """
    n = nb_breakpoints + 1 if approximation == "relaxation" else nb_breakpoints
    return log_lines(approximation, geometric_touches(required, 1.0, n))

def unavailability_lines(approximation: str, required: float, max_availability: float, nb_breakpoints: int) -> list:
    """
    Lines approximating the log of a section unavailability between 1 - max_availability and 1 - required.
    """
    precision = 1e-8
    n = nb_breakpoints + 1 if approximation == "relaxation" else nb_breakpoints
    ub = min(1 - required, 1 - precision)
    lb = min(max(1 - max_availability, precision), ub)
    return log_lines(approximation, np.append(geometric_touches(lb, ub, n), 1.0))
