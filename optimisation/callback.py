"""
Branch-and-cut callback. The host solver calls CallbackDispatcher.invoke with a context object exposing:

    event                                   EventKind of the invocation.
    is_candidate_point()                    True if a candidate event carries a bounded integer point.
    get_relaxation_values(keys)             values of the variables with the given keys at the fractional point.
    get_candidate_values(keys)              values of the variables with the given keys at the integer candidate.
    get_relaxation_objective()              objective value of the fractional point.
    get_incumbent_objective()               objective value of the best known solution, infinite if none.
    add_user_cut(cut)                       adds an optimisation.cuts.Cut to the relaxation.
    reject_candidate(cut)                   rejects the candidate, adding the cut as a lazy constraint.
    post_heuristic_solution(y, x, obj)      posts a full 0/1 solution with its objective value.

Variable keys are ("x", k, i, v) for the assignment of section i of demand k to node v and ("y", v, f) for the
placement of vnf f on node v.
"""
from enum import Enum
from threading import Lock
from time import time
import numpy as np
from optimisation.cuts import CutPool
from optimisation.separation import SeparationEngine
from optimisation.lazy_constraints import LazyConstraintEngine
from optimisation.matheuristic import Matheuristic
from optimisation.snapshot import SolutionSnapshot
import logging

class EventKind(Enum):
    RELAXATION = "relaxation"
    CANDIDATE = "candidate"

class CallbackError(Exception):
    """
    Raised when the callback reaches a state it cannot handle. Aborts the search.
    """
    pass

class CallbackStatistics(object):
    """
    Counters shared by all invocations of the callback. Every update is made under one lock.
    """
    def __init__(self):
        self.lock = Lock()
        self.user_cuts = 0
        self.lazy_constraints = 0
        self.availability_cuts = 0
        self.heuristic_solutions = 0
        self.time = 0.0

    def increment_user_cuts(self):
        with self.lock:
            self.user_cuts += 1

    def increment_lazy_constraints(self):
        with self.lock:
            self.lazy_constraints += 1

    def increment_availability_cuts(self):
        with self.lock:
            self.availability_cuts += 1

    def increment_heuristic_solutions(self):
        with self.lock:
            self.heuristic_solutions += 1

    def add_time(self, elapsed: float):
        with self.lock:
            self.time += elapsed

    def to_json(self) -> dict:
        with self.lock:
            return {"user cuts": self.user_cuts, "lazy constraints": self.lazy_constraints,
                    "heuristic availability cuts": self.availability_cuts, "heuristic solutions": self.heuristic_solutions,
                    "callback time": self.time}

class CallbackDispatcher(object):
    """
    Single entry point of the callback, routing each invocation by its event kind.
    -------------------
    Params:
        instance:           optimisation.instance.Instance
                                instance being solved.
        parameters:         optimisation.parameters.Parameters
                                run parameters.
        verbose:            int
                                verbosity of the log.

    The cut pool is built here once. Snapshots and heuristic buffers are allocated per invocation, so invoke can be
    called from several solver threads.
    """
    def __init__(self, instance, parameters, verbose: int = 0):
        if verbose not in [0, 1, 2]:
            raise ValueError("Invalid verbosity level. Use 0 for no log, 1 for info and 2 for info and debug.")
        self.instance = instance
        self.parameters = parameters
        self.verbose = verbose
        self.statistics = CallbackStatistics()
        self.pool = CutPool(instance, parameters, self.statistics, verbose)
        self.separation = SeparationEngine(instance, parameters, self.statistics, verbose)
        self.lazy = LazyConstraintEngine(instance, self.statistics, verbose)
        self.heuristic = Matheuristic(instance, parameters, self.statistics, verbose)
        self.seed_sequence = np.random.SeedSequence(parameters.seed)

    def invoke(self, context):
        """
        Handles one invocation of the host solver.
        """
        start = time()
        try:
            if context.event == EventKind.RELAXATION:
                self.on_relaxation(context)
            elif context.event == EventKind.CANDIDATE:
                self.on_candidate(context)
            else:
                raise CallbackError("Unexpected event kind {}.".format(context.event))
        finally:
            self.statistics.add_time(time() - start)

    def on_relaxation(self, context) -> int:
        """
        Checks the pool, then separates, then runs the heuristic if no cut was found. Returns the number of cuts added.
        """
        snapshot = SolutionSnapshot.from_relaxation(self.instance, context)
        added = self.pool.check(context, snapshot)
        if added == 0:
            added = self.separation.separate(context, snapshot)
        if added == 0:
            self.heuristic.run(context, snapshot, self.spawn_rng())
        return added

    def on_candidate(self, context) -> int:
        """
        Rejects the candidate if it violates an availability requirement. Returns the number of nogoods.
        """
        if not self.parameters.lazy:
            return 0
        if not context.is_candidate_point():
            logging.error(" Candidate event without a bounded candidate point.") if self.verbose > 0 else None
            raise CallbackError("Candidate event without a bounded candidate point.")
        snapshot = SolutionSnapshot.from_candidate(self.instance, context)
        return self.lazy.check(context, snapshot)

    def spawn_rng(self):
        """
        returns a random generator for one invocation, spawned in invocation order from the seed.
        """
        with self.statistics.lock:
            child = self.seed_sequence.spawn(1)[0]
        return np.random.default_rng(child)
