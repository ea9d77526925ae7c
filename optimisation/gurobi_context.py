import gurobipy as gp
from gurobipy import GRB
from optimisation.callback import EventKind, CallbackError

class GurobiContext(object):
    """
    Exposes a Gurobi callback invocation as a callback context.
    -------------------
    Params:
        placement:          optimisation.placement_model.PlacementModel
                                model being solved, used to map variable keys to gurobi variables.
        model:              gurobipy.Model
                                model passed to the gurobi callback.
        where:              int
                                gurobi callback code, GRB.Callback.MIPNODE or GRB.Callback.MIPSOL.
    """
    def __init__(self, placement, model, where: int):
        if where == GRB.Callback.MIPNODE:
            self.event = EventKind.RELAXATION
        elif where == GRB.Callback.MIPSOL:
            self.event = EventKind.CANDIDATE
        else:
            raise CallbackError("Unexpected gurobi callback code {}.".format(where))
        self.placement = placement
        self.model = model
        self.where = where

    def get_vars(self, keys) -> list:
        return [self.placement.get_var(key) for key in keys]

    def is_candidate_point(self) -> bool:
        return self.where == GRB.Callback.MIPSOL

    def get_relaxation_values(self, keys) -> list:
        return self.model.cbGetNodeRel(self.get_vars(keys))

    def get_candidate_values(self, keys) -> list:
        return self.model.cbGetSolution(self.get_vars(keys))

    def get_relaxation_objective(self) -> float:
        """
        objective evaluated at the node relaxation.
        """
        keys = list(self.placement.y.keys())
        values = self.model.cbGetNodeRel([self.placement.y[key] for key in keys])
        return sum(self.placement.instance.get_placement_cost(*key) * value for key, value in zip(keys, values))

    def get_incumbent_objective(self) -> float:
        """
        gurobi reports GRB.INFINITY while there is no incumbent.
        """
        if self.where == GRB.Callback.MIPNODE:
            value = self.model.cbGet(GRB.Callback.MIPNODE_OBJBST)
        else:
            value = self.model.cbGet(GRB.Callback.MIPSOL_OBJBST)
        return float("inf") if value >= GRB.INFINITY else value

    def to_expression(self, cut):
        return gp.quicksum(coeff * self.placement.get_var(key) for key, coeff in cut.terms)

    def add_user_cut(self, cut):
        self.model.cbCut(self.to_expression(cut) >= cut.lb)

    def reject_candidate(self, cut):
        self.model.cbLazy(self.to_expression(cut) >= cut.lb)

    def post_heuristic_solution(self, y, x, objective: float):
        """
        posts the 0/1 solution. The objective is recomputed by gurobi.
        """
        variables, values = [], []
        for (v, f), var in self.placement.y.items():
            variables.append(var)
            values.append(float(y[v, f]))
        for (k, i, v), var in self.placement.x.items():
            variables.append(var)
            values.append(float(x[k][i, v]))
        self.model.cbSetSolution(variables, values)
        self.model.cbUseSolution()
